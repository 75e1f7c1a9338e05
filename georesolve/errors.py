"""Failure taxonomy for the resolution chain."""
from __future__ import annotations


class ResolutionError(Exception):
    """Base class for failures confined to a single resolution stage."""


class ConfigurationError(ResolutionError):
    """Raised when a stage lacks the credential it needs."""


class TransportError(ResolutionError):
    """Raised when a provider request fails or answers with a non-2xx status."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(ResolutionError):
    """Raised when a provider body cannot be decoded or has an unknown shape."""
