"""
Retry and circuit-breaker helpers for environmental data providers.

Each provider gets its own breaker so a dead endpoint (e.g. OpenWeather
without an API key) is short-circuited after a few failures instead of
costing a timeout for every grid point of a scan.
"""

import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, TypeVar

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised instead of calling a provider whose breaker is open."""


@dataclass
class CircuitBreaker:
    """Thread-safe breaker; provider calls run in worker threads."""
    name: str
    failure_threshold: int = 5
    recovery_timeout: float = 60.0  # seconds

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failures: int = field(default=0, init=False)
    _opened_at: Optional[datetime] = field(default=None, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @property
    def state(self) -> CircuitState:
        with self._lock:
            if (self._state == CircuitState.OPEN and self._opened_at is not None
                    and (datetime.utcnow() - self._opened_at).total_seconds() >= self.recovery_timeout):
                self._state = CircuitState.HALF_OPEN
                logger.info(f"Circuit breaker '{self.name}' half-open, probing provider")
            return self._state

    def record_success(self) -> None:
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"Circuit breaker '{self.name}' closed, provider recovered")
            self._state = CircuitState.CLOSED
            self._failures = 0

    def record_failure(self, error: Exception) -> None:
        with self._lock:
            self._failures += 1
            if self._state == CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        f"Circuit breaker '{self.name}' opened after {self._failures} "
                        f"failure(s): {error}"
                    )
                self._state = CircuitState.OPEN
                self._opened_at = datetime.utcnow()

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        if self.state == CircuitState.OPEN:
            raise CircuitOpenError(f"Circuit breaker '{self.name}' is open")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self.record_failure(e)
            raise
        self.record_success()
        return result

    def get_status(self) -> dict:
        with self._lock:
            return {
                "name": self.name,
                "state": self._state.value,
                "failure_count": self._failures,
                "opened_at": self._opened_at.isoformat() if self._opened_at else None,
                "failure_threshold": self.failure_threshold,
                "recovery_timeout_seconds": self.recovery_timeout,
            }


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    exceptions: tuple = (Exception,),
):
    """Retry a synchronous call with exponential backoff, re-raising the last error."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
            retry=retry_if_exception_type(exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return func(*args, **kwargs)

        return wrapper

    return decorator


_breakers: Dict[str, CircuitBreaker] = {}


def register_circuit_breaker(breaker: CircuitBreaker) -> CircuitBreaker:
    _breakers[breaker.name] = breaker
    return breaker


def get_all_circuit_breaker_status() -> dict:
    return {name: b.get_status() for name, b in _breakers.items()}
