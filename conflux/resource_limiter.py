"""Admission control for client requests: size, memory, rate and concurrency."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from conflux.node_config import ResourceLimits

logger = logging.getLogger(__name__)

_RATE_WINDOW_SECS = 1.0


class ResourceLimitExceeded(Exception):
    """Raised when a request is refused by one of the resource limits."""


@dataclass
class _RateWindow:
    window_start: float
    request_count: int = 0


@dataclass(frozen=True)
class ResourceStats:
    """A snapshot of the limiter's counters."""

    total_requests: int
    rejected_requests: int
    current_memory_usage: int
    available_permits: int
    max_concurrent_requests: int

    def success_rate(self) -> float:
        """Share of requests admitted, between 0.0 and 1.0; 1.0 when none were made."""
        if self.total_requests == 0:
            return 1.0
        successful = self.total_requests - self.rejected_requests
        return successful / self.total_requests

    def memory_usage_rate(self, max_memory: int) -> float:
        """Share of max_memory held by pending requests; 0.0 when max_memory is 0."""
        if max_memory == 0:
            return 0.0
        return self.current_memory_usage / max_memory

    def concurrency_usage_rate(self) -> float:
        """Share of concurrency permits in use; 0.0 when no permits exist."""
        if self.max_concurrent_requests == 0:
            return 0.0
        used = self.max_concurrent_requests - self.available_permits
        return used / self.max_concurrent_requests


class RequestPermit:
    """Holds memory and a concurrency slot for one admitted request.

    Call release() when the request is done, or use the permit as a
    context manager. Releasing twice has no further effect.
    """

    def __init__(self, limiter: ResourceLimiter, request_size: int) -> None:
        self._limiter = limiter
        self.request_size = request_size
        self.released = False

    def release(self) -> None:
        """Give back the reserved memory and the concurrency slot."""
        if self.released:
            return
        self.released = True
        self._limiter._free(self.request_size)

    def __enter__(self) -> RequestPermit:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    async def __aenter__(self) -> RequestPermit:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.release()


@dataclass
class ResourceLimiter:
    """Decides whether client requests may proceed under the configured limits.

    The number of concurrency slots is fixed when the limiter is built;
    later changes to the limits do not resize it.
    """

    limits: ResourceLimits
    clock: Callable[[], float] = time.monotonic
    _capacity: int = field(init=False)
    _in_flight: int = field(init=False, default=0)
    _memory_usage: int = field(init=False, default=0)
    _windows: dict[str, _RateWindow] = field(init=False, default_factory=dict)
    _total_requests: int = field(init=False, default=0)
    _rejected_requests: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._capacity = self.limits.max_concurrent_requests

    def _reject(self, message: str) -> ResourceLimitExceeded:
        self._rejected_requests += 1
        return ResourceLimitExceeded(message)

    async def check_request_allowed(
        self, request_size: int, client_id: str | None = None
    ) -> RequestPermit:
        """Admit a request of request_size bytes or raise ResourceLimitExceeded.

        Checks, in order: the request size, the memory held by pending
        requests, the per-client rate (when a client id is given) and the
        number of concurrent requests.
        """
        self._total_requests += 1
        limits = self.limits

        if request_size > limits.max_request_size:
            raise self._reject(
                f"Request size {request_size} exceeds limit {limits.max_request_size}"
            )

        current = self._memory_usage
        if current + request_size > limits.max_memory_usage:
            raise self._reject(
                f"Memory usage limit exceeded: current={current}, "
                f"request={request_size}, limit={limits.max_memory_usage}"
            )

        if client_id is not None:
            now = self.clock()
            window = self._windows.setdefault(client_id, _RateWindow(window_start=now))
            if now - window.window_start >= _RATE_WINDOW_SECS:
                window.request_count = 0
                window.window_start = now
            if window.request_count >= limits.max_requests_per_second:
                raise self._reject(
                    f"Rate limit exceeded for client {client_id}: "
                    f"{window.request_count} requests/second"
                )
            window.request_count += 1

        if self._in_flight >= self._capacity:
            raise self._reject(
                f"Too many concurrent requests: limit={limits.max_concurrent_requests}"
            )

        self._in_flight += 1
        self._memory_usage += request_size
        return RequestPermit(self, request_size)

    def _free(self, request_size: int) -> None:
        self._in_flight -= 1
        self._memory_usage -= request_size

    def get_resource_stats(self) -> ResourceStats:
        """Return the current counters."""
        return ResourceStats(
            total_requests=self._total_requests,
            rejected_requests=self._rejected_requests,
            current_memory_usage=self._memory_usage,
            available_permits=self._capacity - self._in_flight,
            max_concurrent_requests=self.limits.max_concurrent_requests,
        )

    def update_limits(self, new_limits: ResourceLimits) -> None:
        """Replace the limits; the number of concurrency slots stays as it was."""
        self.limits = new_limits
        logger.warning("Resource limits updated - some changes may require restart")