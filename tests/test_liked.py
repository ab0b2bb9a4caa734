import asyncio

from matching.liked import resolve_liked_ids


def test_batches_are_bounded_and_deduplicated():
    calls = []
    active = 0
    peak = 0

    async def check(batch):
        nonlocal active, peak
        calls.append(list(batch))
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return [track_id.endswith("0") for track_id in batch]

    ids = [f"t{i}" for i in range(23)] + ["t1", "t2", ""]
    liked = asyncio.run(resolve_liked_ids(ids, check, batch_size=5, max_concurrent=2))

    assert liked == {"t0", "t10", "t20"}
    assert len(calls) == 5
    assert all(len(batch) <= 5 for batch in calls)
    assert sum(len(batch) for batch in calls) == 23
    assert peak <= 2


def test_failed_batch_counts_as_not_liked():
    async def check(batch):
        if "bad" in batch:
            raise RuntimeError("provider unavailable")
        return [True] * len(batch)

    liked = asyncio.run(resolve_liked_ids(["a", "bad", "c", "d"], check, batch_size=2))
    assert liked == {"c", "d"}


def test_malformed_response_counts_as_not_liked():
    async def check(batch):
        if batch == ["a", "b"]:
            return [True]
        return ["yes"] * len(batch)

    assert asyncio.run(resolve_liked_ids(["a", "b", "c"], check, batch_size=2)) == set()


def test_slow_batch_times_out():
    async def check(batch):
        if "slow" in batch:
            await asyncio.sleep(1)
        return [True] * len(batch)

    liked = asyncio.run(resolve_liked_ids(["slow", "fast"], check, batch_size=1, timeout=0.05))
    assert liked == {"fast"}


def test_no_ids_skips_provider():
    async def check(batch):
        raise AssertionError("should not be called")

    assert asyncio.run(resolve_liked_ids([None, ""], check)) == set()
