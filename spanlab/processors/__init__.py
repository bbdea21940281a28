"""Span processors and sampling policies."""

from spanlab.processors.logging_processor import LoggingSpanProcessor
from spanlab.processors.sampler import (
    PredicateSampler,
    SamplerKind,
    SamplingDecision,
    SamplingPolicy,
    SamplingRequest,
    build_sampler,
    policy_from_name,
)

__all__ = [
    "LoggingSpanProcessor",
    "PredicateSampler",
    "SamplerKind",
    "SamplingDecision",
    "SamplingPolicy",
    "SamplingRequest",
    "build_sampler",
    "policy_from_name",
]
