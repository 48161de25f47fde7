"""Exception hierarchy for ffnets."""

from __future__ import annotations


class FFNetsError(Exception):
    """Base class for all errors raised by ffnets."""


class ConfigurationError(FFNetsError, ValueError):
    """Raised when a network or run is configured inconsistently."""


class UnsupportedFormatError(FFNetsError, ValueError):
    """Raised when a persisted network uses an unknown identifier or version."""


__all__ = ["FFNetsError", "ConfigurationError", "UnsupportedFormatError"]
