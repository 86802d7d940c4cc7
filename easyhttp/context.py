"""Cancellation and deadline token passed to every client call."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from easyhttp.errors import Cancelled, ContextError, DeadlineExceeded

logger = logging.getLogger(__name__)


class Context:
    """Signals when a call should be abandoned.

    A context is done once ``cancel()`` is called (from any thread), once its
    deadline passes, or once its parent is done. Children are derived with
    ``with_cancel()``, ``with_timeout()`` and ``with_deadline()``; they inherit
    the earlier of their own and the parent's deadline.

    Leaving a ``with`` block cancels the context and detaches it from its
    parent, so long-lived parents do not accumulate finished children.

    Usage::

        with Context.background().with_timeout(5) as ctx:
            await client.get(ctx, "https://example.com")
    """

    def __init__(self, parent: Context | None = None, deadline: float | None = None) -> None:
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline
        self._lock = threading.Lock()
        self._err: ContextError | None = None
        self._callbacks: list[Callable[[], None]] = []
        self._release_parent: Callable[[], None] = lambda: None
        if parent is not None:
            self._release_parent = parent._on_done(lambda: self._finish(parent._err or Cancelled()))

    @classmethod
    def background(cls) -> Context:
        """A context that is never cancelled and has no deadline."""
        return cls()

    def with_cancel(self) -> Context:
        return Context(self)

    def with_timeout(self, seconds: float) -> Context:
        return Context(self, time.monotonic() + seconds)

    def with_deadline(self, deadline: float) -> Context:
        """Child context expiring at ``deadline`` (a ``time.monotonic()`` value)."""
        return Context(self, deadline)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        self._finish(Cancelled())

    def err(self) -> ContextError | None:
        """Why the context is done, or None while it is still live."""
        if self._err is None and self._deadline is not None and time.monotonic() >= self._deadline:
            self._finish(DeadlineExceeded())
        return self._err

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()

    @property
    def done(self) -> bool:
        return self.err() is not None

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            callbacks, self._callbacks = self._callbacks, []
        self._release_parent()
        logger.debug("context done: %s", err)
        for cb in callbacks:
            try:
                cb()
            except Exception:
                logger.exception("context callback failed")

    def _on_done(self, cb: Callable[[], None]) -> Callable[[], None]:
        """Run ``cb`` once when the context finishes; returns an unregister function."""
        with self._lock:
            if self._err is None:
                self._callbacks.append(cb)

                def remove() -> None:
                    with self._lock:
                        if cb in self._callbacks:
                            self._callbacks.remove(cb)

                return remove
        cb()
        return lambda: None

    @asynccontextmanager
    async def bind(self) -> AsyncIterator[None]:
        """Interrupt the current task when this context finishes.

        Raises the context's error instead of ``asyncio.CancelledError`` when
        the interruption came from the context.
        """
        err = self.err()
        if err is not None:
            raise type(err)()
        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        assert task is not None
        fired: list[ContextError] = []
        active = True

        def interrupt(reason: ContextError) -> None:
            if active and not fired and not task.done():
                fired.append(reason)
                task.cancel()

        def on_done() -> None:
            try:
                loop.call_soon_threadsafe(lambda: interrupt(self._err or Cancelled()))
            except RuntimeError:
                # loop already closed; nothing left to interrupt
                pass

        remove = self._on_done(on_done)
        timer = None
        remaining = self.remaining()
        if remaining is not None:
            timer = loop.call_later(remaining, lambda: interrupt(self.err() or DeadlineExceeded()))
        try:
            yield
        except asyncio.CancelledError:
            if not fired:
                raise
            task.uncancel()
            raise type(fired[0])() from None
        finally:
            active = False
            remove()
            if timer is not None:
                timer.cancel()
