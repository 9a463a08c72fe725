"""
Exception hierarchy for the bagan optimization engine.

Validation problems are raised before any computation starts; computation
problems carry the platform/site pair they were evaluating so a failed
optimization call can be diagnosed from the message alone.
"""

from typing import Optional


class OptimizationError(Exception):
    """Base class for all engine errors."""


class ValidationError(OptimizationError):
    """Missing or malformed engine input (vessel position, bagans, sites)."""


class ConfigurationError(ValidationError):
    """Invalid optimizer configuration override."""


class UpstreamDataError(OptimizationError):
    """A single environmental provider fetch failed.

    Only raised inside the environmental-data client, which converts it into
    a ``Fallback`` reading. It never escapes to optimizer callers.
    """

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ComputationError(OptimizationError):
    """Unexpected numeric failure inside one optimization call."""

    def __init__(
        self,
        message: str,
        platform_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ):
        context = []
        if platform_id is not None:
            context.append(f"bagan={platform_id}")
        if site_id is not None:
            context.append(f"site={site_id}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
        self.platform_id = platform_id
        self.site_id = site_id


class RouteSearchCancelled(ComputationError):
    """Route permutation search was cancelled by the caller."""
