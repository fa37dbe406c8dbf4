"""Centralised exception hierarchy for covgate."""

from __future__ import annotations


class CovgateError(Exception):
    """Base class for all custom covgate exceptions."""


class ConfigError(CovgateError, ValueError):
    """Configuration is malformed (bad pattern, threshold out of range, ...)."""


class DiscoveryError(CovgateError):
    """Test discovery could not complete (missing root, IO failure, timeout)."""


class CoverageDataError(CovgateError):
    """Coverage input was found but does not contain valid counters."""


class CoverageDataNotFoundError(CoverageDataError):
    """Coverage input could not be located on disk."""


__all__ = [
    "ConfigError",
    "CoverageDataError",
    "CoverageDataNotFoundError",
    "CovgateError",
    "DiscoveryError",
]
