"""Retry of whole workflow transactions after a write conflict."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import WriteConflictError

logger = get_logger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts."""
    logger.warning(
        "write_conflict_retry",
        operation=getattr(retry_state.fn, "__qualname__", None),
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def conflict_retry(retries: int | None = None) -> Any:
    """
    Tenacity decorator re-running a coroutine on WriteConflictError.

    ``retries`` extra attempts follow the first one (default from
    ``LEDGER_CONFLICT_RETRIES``). The last conflict is re-raised as is.
    """
    if retries is None:
        retries = get_settings().ledger.conflict_retries
    return retry(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1.0),
        retry=retry_if_exception_type(WriteConflictError),
        before_sleep=_log_retry,
        reraise=True,
    )


async def run_with_conflict_retry(
    operation: Callable[..., Awaitable[T]],
    *args: Any,
    retries: int | None = None,
    **kwargs: Any,
) -> T:
    """Run ``operation`` in a fresh transaction per attempt."""
    return await conflict_retry(retries)(operation)(*args, **kwargs)
