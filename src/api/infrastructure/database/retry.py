"""Retry with exponential backoff for relational store operations.

Only transient failures are retried. Constraint violations, syntax errors
and every ``ServiceError`` raised by application code propagate on the
first occurrence without touching the retry budget.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import exc as sa_exc

from infrastructure.database.exceptions import CredentialsRejectedError
from shared_kernel.errors import CredentialsUnavailableError, StoreUnavailableError

if TYPE_CHECKING:
    from infrastructure.observability.probes import ConnectionPoolProbe
    from infrastructure.settings import DatabaseSettings

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff parameters; delays are in seconds."""

    max_retries: int = 3
    initial_delay: float = 0.1
    multiplier: float = 2.0
    max_delay: float = 5.0
    jitter: bool = True

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> RetryPolicy:
        return cls(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay_ms / 1000,
            multiplier=settings.retry_backoff_multiplier,
            max_delay=settings.retry_max_delay_ms / 1000,
            jitter=settings.retry_jitter,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based).

        ``initial * multiplier ** attempt`` capped at ``max_delay``. With
        jitter the delay is drawn uniformly from the upper half of that
        value, so concurrent callers spread out without collapsing to zero.
        """
        delay = min(self.initial_delay * self.multiplier**attempt, self.max_delay)
        if self.jitter:
            return random.uniform(delay / 2, delay)
        return delay


def is_transient(error: BaseException) -> bool:
    """Whether retrying the failed operation may succeed."""
    if isinstance(error, (CredentialsUnavailableError, CredentialsRejectedError)):
        return True
    # Pool checkout timed out
    if isinstance(error, sa_exc.TimeoutError):
        return True
    if isinstance(error, sa_exc.DBAPIError):
        if error.connection_invalidated:
            return True
        if isinstance(
            error, (sa_exc.IntegrityError, sa_exc.ProgrammingError, sa_exc.DataError)
        ):
            return False
        return isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError))
    # Connection refused / reset and connect or command timeouts
    return isinstance(error, (OSError, TimeoutError))


async def retry_async(
    operation: str,
    attempt_fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    probe: ConnectionPoolProbe,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``attempt_fn`` until it succeeds or the retry budget runs out.

    Raises:
        StoreUnavailableError: A transient failure persisted through
            ``policy.max_retries`` retries.
        Exception: Any non-transient failure, unchanged.
    """
    attempt = 0
    while True:
        try:
            return await attempt_fn()
        except Exception as e:
            if not is_transient(e):
                raise
            if attempt >= policy.max_retries:
                probe.retries_exhausted(operation=operation, attempts=attempt + 1, error=e)
                raise StoreUnavailableError(
                    "The data store is temporarily unavailable",
                    details={"operation": operation, "attempts": attempt + 1},
                ) from e
            delay = policy.delay_for(attempt)
            probe.transient_failure(
                operation=operation, attempt=attempt + 1, delay_seconds=delay, error=e
            )
            await sleep(delay)
            attempt += 1
