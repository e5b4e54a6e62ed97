"""Device-code polling session.

A :class:`PollSession` repeatedly asks the token endpoint whether the user has
approved a device code. It owns a single :class:`asyncio.Task`:

* every ``interval`` seconds the window is checked first, and a session
  past ``expires_in`` fails with :class:`~traktclient.exceptions.PollExpiredError`;
* otherwise one attempt is made; a 400 answer means *authorization pending*
  and the loop continues, any other failure ends the session;
* the first successful attempt resolves the session with its payload.

The session is awaitable and can be aborted at any time with
:meth:`PollSession.cancel`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generator, Optional

from traktclient.exceptions import PollExpiredError, TransportError
from traktclient.models import PollDescriptor

logger = logging.getLogger(__name__)

PENDING_STATUS = 400


class PollSession:
    """A running (or pending) device-code poll.

    The task starts immediately when created inside a running event loop,
    otherwise on first ``await``.

    Args:
        attempt: Zero-argument coroutine function that performs one token
            request and returns the payload on success.
        poll: Validated polling parameters.
    """

    def __init__(self, attempt: Callable[[], Awaitable[dict[str, Any]]], poll: PollDescriptor) -> None:
        self._attempt = attempt
        self._poll = poll
        self._task: Optional[asyncio.Task[dict[str, Any]]] = None
        self._cancelled = False
        self.attempts = 0
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._start()

    @property
    def poll(self) -> PollDescriptor:
        return self._poll

    def _start(self) -> asyncio.Task[dict[str, Any]]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return self._task

    def __await__(self) -> Generator[Any, None, dict[str, Any]]:
        if self._task is None and self._cancelled:
            raise asyncio.CancelledError()
        return self._start().__await__()

    def cancel(self) -> bool:
        """Stop polling. Awaiting a cancelled session raises :class:`asyncio.CancelledError`.

        Returns:
            ``False`` if the session had already finished, ``True`` otherwise.
        """
        if self.done():
            return False
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()
        return True

    def done(self) -> bool:
        if self._task is None:
            return self._cancelled
        return self._task.done()

    async def _run(self) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._poll.expires_in
        logger.debug(
            "Polling device token every %ss for %ss", self._poll.interval, self._poll.expires_in
        )
        try:
            while True:
                await asyncio.sleep(self._poll.interval)
                if deadline <= loop.time():
                    raise PollExpiredError("Expired")
                self.attempts += 1
                try:
                    return await self._attempt()
                except TransportError as exc:
                    if exc.status != PENDING_STATUS:
                        raise
                    logger.debug("Authorization pending (attempt %d)", self.attempts)
        finally:
            logger.debug("Device token polling stopped after %d attempt(s)", self.attempts)
