"""Spanlab error hierarchy and exceptions."""

from __future__ import annotations


class SpanlabError(Exception):
    """Base exception for all spanlab errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(SpanlabError):
    """Raised when configuration is invalid or conflicting."""
    pass


class ValidationError(SpanlabError):
    """Raised when validation fails."""
    pass


class ExportError(SpanlabError):
    """Raised when an exporter cannot be set up."""
    pass


class InitializationError(SpanlabError):
    """Raised when tracing initialization fails."""
    pass


class PropagationError(SpanlabError):
    """Raised when a carrier cannot be serialized or parsed."""
    pass
