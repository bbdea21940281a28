"""Helpers converting between OpenTelemetry integer ids and hex strings."""

from __future__ import annotations

from typing import Optional


def format_trace_id(trace_id: int) -> str:
    """
    Format an OTel trace_id (128-bit int) as a hex string.

    Args:
        trace_id: OTel trace_id

    Returns:
        32-character lowercase hex string
    """
    return format(trace_id, '032x')


def format_span_id(span_id: int) -> str:
    """
    Format an OTel span_id (64-bit int) as a hex string.

    Args:
        span_id: OTel span_id

    Returns:
        16-character lowercase hex string
    """
    return format(span_id, '016x')


def parse_trace_id(hex_string: str) -> int:
    """Parse a 32-character hex trace_id. Empty input yields the invalid id 0."""
    if not hex_string:
        return 0
    return int(hex_string, 16)


def parse_span_id(hex_string: str) -> int:
    """Parse a 16-character hex span_id. Empty input yields the invalid id 0."""
    if not hex_string:
        return 0
    return int(hex_string, 16)


def trace_id_from_bytes(raw: bytes) -> str:
    """
    Build a trace_id hex string from up to 16 raw bytes.

    Shorter input is right-padded with zero bytes, so ``b"\\x01"`` is
    ``01000000000000000000000000000000``.
    """
    if len(raw) > 16:
        raise ValueError("trace id is at most 16 bytes")
    return raw.ljust(16, b"\x00").hex()


def span_id_from_bytes(raw: bytes) -> str:
    """Build a span_id hex string from up to 8 raw bytes, right-padded with zeros."""
    if len(raw) > 8:
        raise ValueError("span id is at most 8 bytes")
    return raw.ljust(8, b"\x00").hex()


def duration_ns(start_time_ns: Optional[int], end_time_ns: Optional[int]) -> Optional[int]:
    """Duration between two timestamps, or None while the span is open."""
    if start_time_ns is None or end_time_ns is None:
        return None
    return end_time_ns - start_time_ns
