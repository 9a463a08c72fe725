"""Environmental data providers for site scoring."""

from .environmental_client import (
    EnvironmentalDataClient,
    EnvironmentalDataSource,
)
from .resilience import CircuitBreaker, CircuitOpenError

__all__ = [
    'EnvironmentalDataClient',
    'EnvironmentalDataSource',
    'CircuitBreaker',
    'CircuitOpenError',
]
