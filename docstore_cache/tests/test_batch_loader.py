"""
Unit tests for the per-turn BatchLoader.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from docstore_cache.loaders.batch import BatchLoader


def echo_batch():
    """Batch function returning a fresh dict per key, recording each call."""
    async def batch_fn(keys):
        await asyncio.sleep(0)
        return [{"key": key} for key in keys]
    return AsyncMock(side_effect=batch_fn)


class TestBatchLoader:
    """Test cases for BatchLoader."""

    @pytest.mark.asyncio
    async def test_same_turn_loads_share_one_call(self):
        """Test loads issued before yielding become one batch."""
        batch_fn = echo_batch()
        loader = BatchLoader(batch_fn)

        results = await asyncio.gather(loader.load("a"), loader.load("b"), loader.load("c"))

        assert [r["key"] for r in results] == ["a", "b", "c"]
        batch_fn.assert_awaited_once_with(["a", "b", "c"])

    @pytest.mark.asyncio
    async def test_duplicates_share_result_object(self):
        """Test duplicate keys resolve to the identical object."""
        batch_fn = echo_batch()
        loader = BatchLoader(batch_fn)

        first, second = await asyncio.gather(loader.load("a"), loader.load("a"))

        assert first is second
        batch_fn.assert_awaited_once_with(["a"])

    @pytest.mark.asyncio
    async def test_key_fn_controls_deduplication(self):
        """Test keys are deduplicated by their identity, first key wins."""
        batch_fn = echo_batch()
        loader = BatchLoader(batch_fn, key_fn=str.lower)

        first, second = await asyncio.gather(loader.load("ABC"), loader.load("abc"))

        assert first is second
        batch_fn.assert_awaited_once_with(["ABC"])

    @pytest.mark.asyncio
    async def test_loads_after_await_use_new_batch(self):
        """Test a load after a suspension point opens a new window."""
        batch_fn = echo_batch()
        loader = BatchLoader(batch_fn)

        await loader.load("a")
        await loader.load("a")

        assert batch_fn.await_count == 2

    @pytest.mark.asyncio
    async def test_no_loads_no_calls(self):
        """Test an idle loader never calls the batch function."""
        batch_fn = echo_batch()
        BatchLoader(batch_fn)

        await asyncio.sleep(0)

        batch_fn.assert_not_called()

    @pytest.mark.asyncio
    async def test_pending_counts_queued_keys(self):
        """Test pending reflects the undispatched window."""
        loader = BatchLoader(echo_batch())

        futures = [loader.load("a"), loader.load("b"), loader.load("a")]
        assert loader.pending == 2

        await asyncio.gather(*futures)
        assert loader.pending == 0

    @pytest.mark.asyncio
    async def test_failure_propagates_to_every_caller(self):
        """Test one failing batch fails all of its callers."""
        loader = BatchLoader(AsyncMock(side_effect=RuntimeError("boom")))

        results = await asyncio.gather(loader.load("a"), loader.load("b"), return_exceptions=True)

        assert all(isinstance(result, RuntimeError) for result in results)

    @pytest.mark.asyncio
    async def test_wrong_result_length_is_an_error(self):
        """Test a batch function must return one value per key."""
        loader = BatchLoader(AsyncMock(return_value=[1]))

        results = await asyncio.gather(loader.load("a"), loader.load("b"), return_exceptions=True)

        assert all(isinstance(result, ValueError) for result in results)

    @pytest.mark.asyncio
    async def test_memoize_reuses_results(self):
        """Test memoized keys skip the batch function until cleared."""
        batch_fn = echo_batch()
        loader = BatchLoader(batch_fn, memoize=True)

        first = await loader.load("a")
        second = await loader.load("a")
        assert first is second
        assert batch_fn.await_count == 1

        loader.clear("a")
        third = await loader.load("a")
        assert third is not first
        assert batch_fn.await_count == 2

        loader.clear_all()
        await loader.load("a")
        assert batch_fn.await_count == 3

    @pytest.mark.asyncio
    async def test_memoize_forgets_failures(self):
        """Test failed loads are not memoized."""
        batch_fn = AsyncMock(side_effect=[RuntimeError("boom"), ["ok"]])
        loader = BatchLoader(batch_fn, memoize=True)

        with pytest.raises(RuntimeError):
            await loader.load("a")

        assert await loader.load("a") == "ok"
        assert batch_fn.await_count == 2
