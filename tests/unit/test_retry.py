"""Tests for write-conflict retry."""

from unittest.mock import AsyncMock

import pytest

from stockledger.application.retry import run_with_conflict_retry
from stockledger.config import reset_settings
from stockledger.core.exceptions import ValidationError, WriteConflictError


def _conflict() -> WriteConflictError:
    return WriteConflictError("transaction", "database is locked")


def _operation(mock: AsyncMock):
    async def operation(*args, **kwargs):
        return await mock(*args, **kwargs)

    return operation


async def test_returns_first_success():
    mock = AsyncMock(return_value="ok")
    assert await run_with_conflict_retry(_operation(mock), 1, key="v", retries=2) == "ok"
    mock.assert_awaited_once_with(1, key="v")


async def test_retries_conflicts_until_success():
    mock = AsyncMock(side_effect=[_conflict(), _conflict(), "ok"])
    assert await run_with_conflict_retry(_operation(mock), retries=2) == "ok"
    assert mock.await_count == 3


async def test_reraises_last_conflict():
    mock = AsyncMock(side_effect=_conflict())
    with pytest.raises(WriteConflictError):
        await run_with_conflict_retry(_operation(mock), retries=1)
    assert mock.await_count == 2


async def test_other_errors_are_not_retried():
    mock = AsyncMock(side_effect=ValidationError("quantity", "bad"))
    with pytest.raises(ValidationError):
        await run_with_conflict_retry(_operation(mock), retries=3)
    assert mock.await_count == 1


async def test_default_retries_from_settings(monkeypatch):
    monkeypatch.setenv("LEDGER_CONFLICT_RETRIES", "0")
    reset_settings()
    mock = AsyncMock(side_effect=_conflict())

    with pytest.raises(WriteConflictError):
        await run_with_conflict_retry(_operation(mock))
    assert mock.await_count == 1
