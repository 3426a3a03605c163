"""
Callback adapter
Lets callers pass a node-style callback(err, result) alongside awaiting the task
"""
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Tuple

Callback = Callable[..., Any]

# Coroutine callbacks still running; held so they are not garbage-collected
_pending_callbacks = set()


def split_callback(opts: Any = None, callback: Optional[Callback] = None) -> Tuple[Any, Optional[Callback]]:
    """Allow a callback in the options slot: fn(ids, callback) == fn(ids, None, callback)"""
    if callable(opts) and callback is None:
        return None, opts
    return opts, callback


def register_callback(awaitable: Awaitable, opts: Any = None, callback: Optional[Callback] = None) -> asyncio.Task:
    """
    Schedule `awaitable` and optionally report its outcome to `callback`.

    The callback receives (None, result) on success and (error,) on failure.
    The task is returned either way so it can still be awaited.
    """
    _, callback = split_callback(opts, callback)
    task = asyncio.ensure_future(awaitable)
    if callback is None:
        return task

    def _deliver(done: asyncio.Future) -> None:
        if done.cancelled():
            outcome = callback(asyncio.CancelledError())
        elif done.exception() is not None:
            outcome = callback(done.exception())
        else:
            outcome = callback(None, done.result())
        if inspect.isawaitable(outcome):
            pending = asyncio.ensure_future(outcome)
            _pending_callbacks.add(pending)
            pending.add_done_callback(_pending_callbacks.discard)

    task.add_done_callback(_deliver)
    return task
