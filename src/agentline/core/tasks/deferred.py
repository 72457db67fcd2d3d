from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("agentline.tasks.deferred")


class DeferredScheduler:
    """Fire-and-forget continuations on the running event loop.

    Continuations run on the loop thread, so they share the single
    cooperative thread with request handlers and never interleave with a
    store update half-way through.
    """

    def __init__(self) -> None:
        self._handles: set[asyncio.TimerHandle] = set()

    @property
    def pending(self) -> int:
        return len(self._handles)

    def schedule(self, delay_s: float, fn: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle

        def _run() -> None:
            self._handles.discard(handle)
            try:
                fn(*args)
            except Exception:
                logger.exception("deferred_continuation_failed", extra={"extra_fields": {"fn": getattr(fn, "__name__", repr(fn))}})

        handle = loop.call_later(max(0.0, delay_s), _run)
        self._handles.add(handle)
        return handle

    def shutdown(self) -> int:
        dropped = len(self._handles)
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        if dropped:
            logger.info("deferred_continuations_dropped", extra={"extra_fields": {"count": dropped}})
        return dropped
