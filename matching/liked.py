import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Set

from config import settings

logger = logging.getLogger(__name__)

CheckBatch = Callable[[List[str]], Awaitable[List[bool]]]


async def resolve_liked_ids(
    track_ids: Iterable[str],
    check_batch: CheckBatch,
    batch_size: Optional[int] = None,
    max_concurrent: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Set[str]:
    """
    Ask the provider which catalog tracks the listener has saved.

    Ids are de-duplicated and split into provider-sized batches that run
    with bounded concurrency. A failed or malformed batch counts as
    "not liked" for its ids; the rest of the run is unaffected.
    """
    batch_size = batch_size or settings.LIKED_CHECK_BATCH_SIZE
    max_concurrent = max_concurrent or settings.LIKED_CHECK_MAX_CONCURRENT
    timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS

    unique_ids = list(dict.fromkeys(i for i in track_ids if i and isinstance(i, str)))
    if not unique_ids:
        return set()
    batches = [unique_ids[i:i + batch_size] for i in range(0, len(unique_ids), batch_size)]
    semaphore = asyncio.Semaphore(max_concurrent)

    async def check_with_semaphore(batch):
        async with semaphore:
            try:
                flags = await asyncio.wait_for(check_batch(batch), timeout)
            except Exception as exc:
                logger.warning("Liked-track check failed for %d ids, treating as not liked: %s", len(batch), exc)
                return []
            if not isinstance(flags, (list, tuple)) or len(flags) != len(batch):
                logger.warning("Unexpected liked-track response for %d ids, treating as not liked", len(batch))
                return []
            return [track_id for track_id, liked in zip(batch, flags) if liked is True]

    results = await asyncio.gather(*(check_with_semaphore(b) for b in batches))
    liked = {track_id for found in results for track_id in found}
    logger.info("Liked-track check: %d of %d catalog tracks are saved", len(liked), len(unique_ids))
    return liked
