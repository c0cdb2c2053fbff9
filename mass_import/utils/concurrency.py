"""Timeout wrapper for catalog and audit calls.

Every storage call made during an import session goes through
:func:`call_with_timeout` so a hung database connection turns into a
:class:`~mass_import.utils.errors.StorageError` for the one record being
processed instead of stalling the whole session.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import structlog

from mass_import.utils.errors import MassImportError, StorageError
from mass_import.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def call_with_timeout(
    awaitable: Awaitable[_T],
    timeout_seconds: float | None,
    operation: str,
    provider_name: str | None = None,
) -> _T:
    """Await ``awaitable`` with a caller-enforced timeout.

    Parameters
    ----------
    awaitable:
        The storage coroutine to run.
    timeout_seconds:
        Maximum seconds to wait.  ``None`` or a non-positive value disables
        the timeout.
    operation:
        Short name of the operation (``"find_artist_by_name"``) used in the
        error message and log event.
    provider_name:
        Name of the collaborator, copied onto the raised ``StorageError``.

    Raises
    ------
    StorageError
        When the call times out or raises anything other than a
        :class:`MassImportError`.  Domain errors propagate unchanged.
    """
    try:
        if timeout_seconds is None or timeout_seconds <= 0:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        _logger.warning(
            "storage_call_timed_out",
            operation=operation,
            timeout_seconds=timeout_seconds,
        )
        raise StorageError(
            message=f"{operation} timed out after {timeout_seconds}s",
            provider_name=provider_name,
        ) from exc
    except MassImportError:
        raise
    except Exception as exc:
        raise StorageError(
            message=f"{operation} failed: {exc}",
            provider_name=provider_name,
        ) from exc
