"""
Per-turn request coalescing on the asyncio event loop.

Every ``load`` issued before control returns to the event loop joins the same
batch. The first load of a batch schedules the dispatch with ``call_soon``,
which runs only after all callbacks already queued for the current loop
iteration (other tasks started in the same turn included). One call to
``batch_fn`` then serves every distinct key, and each caller's future is
resolved with the value at that key's position.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional, Sequence, Set

BatchFn = Callable[[List[Any]], Awaitable[Sequence[Any]]]


@dataclass
class _Batch:
    keys: List[Any] = field(default_factory=list)
    futures: Dict[Hashable, "asyncio.Future[Any]"] = field(default_factory=dict)
    dispatched: bool = False


class BatchLoader:
    """Coalesces concurrent loads into one ``batch_fn`` call per turn.

    ``key_fn`` maps a requested key to the hashable identity used for
    deduplication; loads with equal identities in one turn share a future,
    so they resolve to the same object. With ``memoize`` a resolved future
    is kept per identity until ``clear``/``clear_all``; failed loads are
    always forgotten.
    """

    def __init__(
        self,
        batch_fn: BatchFn,
        *,
        key_fn: Optional[Callable[[Any], Hashable]] = None,
        memoize: bool = False,
    ):
        self._batch_fn = batch_fn
        self._key_fn = key_fn or (lambda key: key)
        self.memoize = memoize
        self._memo: Dict[Hashable, "asyncio.Future[Any]"] = {}
        self._batch: Optional[_Batch] = None
        self._tasks: Set["asyncio.Task[None]"] = set()

    def load(self, key: Any) -> "asyncio.Future[Any]":
        """Queue ``key`` into the current turn's batch."""
        loop = asyncio.get_running_loop()
        identity = self._key_fn(key)

        if self.memoize:
            memoized = self._memo.get(identity)
            if memoized is not None:
                return memoized

        batch = self._batch
        if batch is None or batch.dispatched:
            batch = self._batch = _Batch()
            loop.call_soon(self._dispatch, batch)

        future = batch.futures.get(identity)
        if future is None:
            future = loop.create_future()
            batch.keys.append(key)
            batch.futures[identity] = future
            if self.memoize:
                self._memo[identity] = future
        return future

    def clear(self, key: Any) -> None:
        """Forget the memoized result for ``key``."""
        self._memo.pop(self._key_fn(key), None)

    def clear_all(self) -> None:
        self._memo.clear()

    @property
    def pending(self) -> int:
        """Keys queued for the next dispatch."""
        if self._batch is None or self._batch.dispatched:
            return 0
        return len(self._batch.keys)

    def _dispatch(self, batch: _Batch) -> None:
        batch.dispatched = True
        if self._batch is batch:
            self._batch = None
        task = asyncio.get_running_loop().create_task(self._run(batch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, batch: _Batch) -> None:
        try:
            values = await self._batch_fn(list(batch.keys))
            if len(values) != len(batch.keys):
                raise ValueError(
                    f"batch function returned {len(values)} values for {len(batch.keys)} keys"
                )
        except asyncio.CancelledError:
            self._fail(batch, None)
            raise
        except Exception as exc:
            self._fail(batch, exc)
            return

        for future, value in zip(batch.futures.values(), values):
            if not future.done():
                future.set_result(value)

    def _fail(self, batch: _Batch, exc: Optional[BaseException]) -> None:
        for identity, future in batch.futures.items():
            if self._memo.get(identity) is future:
                del self._memo[identity]
            if future.done():
                continue
            if exc is None:
                future.cancel()
            else:
                future.set_exception(exc)
