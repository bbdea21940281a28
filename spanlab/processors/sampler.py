"""Sampling policies and their OpenTelemetry samplers.

A policy is a plain value (``SamplingPolicy``) that the application picks at
startup. ``build_sampler`` turns it into the OTel SDK sampler that runs once
per span start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from opentelemetry.context import Context
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    Decision,
    ParentBased,
    Sampler,
    SamplingResult,
    TraceIdRatioBased,
)
from opentelemetry.trace import Link, SpanKind, get_current_span
from opentelemetry.util.types import Attributes

from spanlab.errors import ValidationError

logger = logging.getLogger(__name__)


class SamplingDecision(Enum):
    DROP = "drop"
    RECORD_ONLY = "record_only"
    RECORD_AND_SAMPLE = "record_and_sample"

    def to_otel(self) -> Decision:
        return _OTEL_DECISIONS[self]


_OTEL_DECISIONS = {
    SamplingDecision.DROP: Decision.DROP,
    SamplingDecision.RECORD_ONLY: Decision.RECORD_ONLY,
    SamplingDecision.RECORD_AND_SAMPLE: Decision.RECORD_AND_SAMPLE,
}


class SamplerKind(Enum):
    ALWAYS_ON = "always_on"
    ALWAYS_OFF = "always_off"
    RATIO = "ratio"
    PARENT_BASED = "parent_based"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SamplingRequest:
    """What a custom predicate gets to look at for one span start."""

    trace_id: int
    name: str
    kind: Optional[SpanKind]
    attributes: Attributes
    parent_sampled: Optional[bool]  # None when there is no valid parent


Predicate = Callable[[SamplingRequest], Union[SamplingDecision, bool]]


@dataclass(frozen=True)
class SamplingPolicy:
    kind: SamplerKind
    ratio: float = 1.0
    root: Optional["SamplingPolicy"] = None
    predicate: Optional[Predicate] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == SamplerKind.RATIO and not 0.0 <= self.ratio <= 1.0:
            raise ValidationError("sample ratio must be between 0.0 and 1.0", {"ratio": self.ratio})
        if self.kind == SamplerKind.CUSTOM and self.predicate is None:
            raise ValidationError("custom sampling policy needs a predicate")
        if self.kind == SamplerKind.PARENT_BASED and self.root is not None:
            if self.root.kind == SamplerKind.PARENT_BASED:
                raise ValidationError("parent based policy cannot use another parent based root")

    @classmethod
    def always_on(cls) -> "SamplingPolicy":
        return cls(SamplerKind.ALWAYS_ON)

    @classmethod
    def always_off(cls) -> "SamplingPolicy":
        return cls(SamplerKind.ALWAYS_OFF)

    @classmethod
    def ratio_based(cls, ratio: float) -> "SamplingPolicy":
        return cls(SamplerKind.RATIO, ratio=ratio)

    @classmethod
    def parent_based(cls, root: Optional["SamplingPolicy"] = None) -> "SamplingPolicy":
        """Let the parent decide; without a parent, ``root`` (always on by default) decides."""
        return cls(SamplerKind.PARENT_BASED, root=root or cls.always_on())

    @classmethod
    def custom(cls, predicate: Predicate, description: Optional[str] = None) -> "SamplingPolicy":
        return cls(SamplerKind.CUSTOM, predicate=predicate, description=description)


class PredicateSampler(Sampler):
    """Sampler delegating the decision to a caller supplied function."""

    def __init__(self, predicate: Predicate, description: Optional[str] = None) -> None:
        self._predicate = predicate
        self._description = description or f"PredicateSampler{{{getattr(predicate, '__name__', 'predicate')}}}"

    def should_sample(
        self,
        parent_context: Optional[Context],
        trace_id: int,
        name: str,
        kind: Optional[SpanKind] = None,
        attributes: Attributes = None,
        links: Optional[Sequence[Link]] = None,
        trace_state=None,
    ) -> SamplingResult:
        parent = get_current_span(parent_context).get_span_context()
        request = SamplingRequest(
            trace_id=trace_id,
            name=name,
            kind=kind,
            attributes=attributes,
            parent_sampled=parent.trace_flags.sampled if parent.is_valid else None,
        )
        try:
            outcome = self._predicate(request)
        except Exception:
            logger.exception("Sampling predicate failed for span %r, dropping it", name)
            outcome = SamplingDecision.DROP

        if isinstance(outcome, SamplingDecision):
            decision = outcome.to_otel()
        else:
            decision = Decision.RECORD_AND_SAMPLE if outcome else Decision.DROP

        return SamplingResult(
            decision,
            attributes if decision.is_recording() else None,
            parent.trace_state if parent.is_valid else None,
        )

    def get_description(self) -> str:
        return self._description


def build_sampler(policy: SamplingPolicy) -> Sampler:
    """Create the OTel sampler implementing ``policy``."""
    if policy.kind == SamplerKind.ALWAYS_ON:
        return ALWAYS_ON
    if policy.kind == SamplerKind.ALWAYS_OFF:
        return ALWAYS_OFF
    if policy.kind == SamplerKind.RATIO:
        # Decision is derived from the trace id, so a sampled trace has no gaps
        return TraceIdRatioBased(policy.ratio)
    if policy.kind == SamplerKind.PARENT_BASED:
        return ParentBased(build_sampler(policy.root or SamplingPolicy.always_on()))
    if policy.kind == SamplerKind.CUSTOM:
        return PredicateSampler(policy.predicate, policy.description)
    raise ValidationError("unknown sampler kind", {"kind": policy.kind})


def policy_from_name(name: str, ratio: float = 1.0) -> SamplingPolicy:
    """
    Resolve a policy from its configuration name.

    ``parent_based`` uses a ratio root when ``ratio`` is below 1.0.
    """
    try:
        kind = SamplerKind(name)
    except ValueError:
        raise ValidationError("unknown sampler", {"sampler": name}) from None

    if kind == SamplerKind.ALWAYS_ON:
        return SamplingPolicy.always_on()
    if kind == SamplerKind.ALWAYS_OFF:
        return SamplingPolicy.always_off()
    if kind == SamplerKind.RATIO:
        return SamplingPolicy.ratio_based(ratio)
    if kind == SamplerKind.PARENT_BASED:
        root = SamplingPolicy.ratio_based(ratio) if ratio < 1.0 else SamplingPolicy.always_on()
        return SamplingPolicy.parent_based(root)
    raise ValidationError("custom samplers cannot be configured by name", {"sampler": name})
