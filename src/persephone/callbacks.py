"""
Callback-style surface over the async API

For callers that prefer ``callback(error, result)`` over awaiting. Nothing
here duplicates database logic: every method schedules the corresponding
coroutine and reports its outcome.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

Callback = Callable[[Optional[BaseException], Any], None]


def with_callback(awaitable: Awaitable, callback: Optional[Callback] = None) -> asyncio.Future:
    """
    Schedule ``awaitable`` and report its outcome to ``callback``.

    Must be called with a running event loop. The callback receives
    ``(None, result)`` on success and ``(error, None)`` on failure.

    Returns:
        The scheduled future, which can still be awaited
    """
    future = asyncio.ensure_future(awaitable)
    if callback is None:
        return future

    def _done(fut: asyncio.Future) -> None:
        if fut.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = fut.exception()
        if error is not None:
            callback(error, None)
        else:
            callback(None, fut.result())

    future.add_done_callback(_done)
    return future


class CallbackAdapter:
    """
    Callback API for a Persephone database.

    Example:
        cb = CallbackAdapter(db)
        cb.get("todos", lambda err, todos: print(err or todos))
    """

    def __init__(self, database):
        self.database = database

    def open(self, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.open(), callback)

    def get(self, key: str, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.get(key), callback)

    def set(self, key: str, value: Any, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.set(key, value), callback)

    def remove(self, key: str, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.remove(key), callback)

    def clear(self, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.clear(), callback)

    def keys(self, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.keys(), callback)

    def length(self, callback: Optional[Callback] = None) -> asyncio.Future:
        return with_callback(self.database.length(), callback)
