"""
Request cancellation.

A CancelToken is handed to any API call through RequestOptions; calling
cancel() aborts the in-flight request and the call raises
CancellationError.
"""

import asyncio
from typing import Any, Optional

from .errors import CancellationError, is_cancel


class CancelToken:
    """Cancellation handle for one or more requests."""

    def __init__(self) -> None:
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False
        self.reason: Optional[str] = None

    def _get_event(self) -> asyncio.Event:
        # Created lazily so the event binds to the loop that awaits it
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel every request using this token. Later calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason
        if self._event is not None:
            self._event.set()

    def is_cancelled(self) -> bool:
        return self._cancelled

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._get_event().wait()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancellationError(self.reason or "Request cancelled")


class AbortManager:
    """Factory and helpers for request cancellation."""

    @staticmethod
    def create_cancel_token() -> CancelToken:
        """Create a new cancel token."""
        return CancelToken()

    @staticmethod
    def is_cancel(error: Any) -> bool:
        """Check if an error is a cancellation error."""
        return is_cancel(error) or isinstance(error, asyncio.CancelledError)
