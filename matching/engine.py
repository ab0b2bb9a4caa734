import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError

from config import settings
from matching.allocator import SlotAllocator
from matching.diversity import DiversityController
from matching.errors import InputShapeError
from matching.liked import resolve_liked_ids
from matching.models import AllocationResult, CatalogMember, ListenerProfile
from matching.normalizer import build_profile, with_liked_ids
from matching.ranker import CandidateRanker

logger = logging.getLogger(__name__)


def coerce_members(records) -> List[CatalogMember]:
    """Validate catalog records one by one; a bad record is skipped, a non-list is fatal."""
    if not isinstance(records, (list, tuple)):
        raise InputShapeError(f"Catalog must be a list of members, got {type(records).__name__}")
    members = []
    for record in records:
        if isinstance(record, CatalogMember):
            members.append(record)
            continue
        try:
            members.append(CatalogMember.model_validate(record))
        except ValidationError as exc:
            logger.warning("Skipping malformed catalog record: %s", exc.errors()[:1])
    return members


class LineupMatcher:
    """
    Match one listener against the catalog and fill the requested slots.

    `catalog_source` provides `fetch_catalog()` and
    `fetch_team_games_played(team_key)`; `liked_checker` is an async
    callable taking a batch of track ids and returning one bool per id.
    Both are optional. Nothing mutable is shared between runs.
    """

    def __init__(self, catalog_source=None, liked_checker=None, ranker=None, team_key=None):
        self.catalog_source = catalog_source
        self.liked_checker = liked_checker
        self.ranker = ranker or CandidateRanker()
        self.team_key = team_key or settings.DEFAULT_TEAM_KEY

    async def _load_members(self, members) -> List[CatalogMember]:
        if members is not None:
            return coerce_members(members)
        if self.catalog_source is None:
            raise InputShapeError("No catalog supplied and no catalog source configured")
        try:
            records = await asyncio.to_thread(self.catalog_source.fetch_catalog)
        except Exception as exc:
            raise InputShapeError(f"Catalog could not be loaded: {exc}") from exc
        return coerce_members(records)

    async def _team_games_played(self) -> Optional[int]:
        if self.catalog_source is None:
            return None
        try:
            games = await asyncio.wait_for(
                asyncio.to_thread(self.catalog_source.fetch_team_games_played, self.team_key),
                settings.EXTERNAL_TIMEOUT_SECONDS,
            )
        except Exception as exc:
            logger.warning(
                "Games-played lookup for %s failed, using default %d: %s",
                self.team_key, settings.DEFAULT_GAMES_PLAYED, exc,
            )
            return settings.DEFAULT_GAMES_PLAYED
        if games is None:
            logger.info("No games-played data for %s, skipping playing-time check", self.team_key)
        return games

    async def _liked_catalog_ids(self, members: List[CatalogMember]) -> set:
        if self.liked_checker is None:
            return set()
        ids = [song.spotify_id for m in members for song in m.theme_songs if song.spotify_id]
        return await resolve_liked_ids(ids, self.liked_checker)

    async def match(self, profile: ListenerProfile, slots: Optional[List[str]] = None, members=None) -> AllocationResult:
        if not isinstance(profile, ListenerProfile):
            raise InputShapeError(f"Expected a ListenerProfile, got {type(profile).__name__}")
        slots = list(slots or settings.DEFAULT_SLOTS)

        catalog = await self._load_members(members)
        logger.info("Starting lineup match: %d catalog members, %d slots", len(catalog), len(slots))

        games_played = await self._team_games_played()
        eligible = self.ranker.eligible_members(catalog, games_played)
        if not eligible:
            logger.warning("No catalog members survived eligibility filtering")
            return AllocationResult(status="no_candidates", unfilled_slots=slots)

        profile = with_liked_ids(profile, await self._liked_catalog_ids(eligible))
        if profile.is_empty:
            logger.warning("Listener profile carries no taste signal")
            return AllocationResult(status="no_taste_data", unfilled_slots=slots)

        return self.allocate(profile, eligible, slots)

    def allocate(self, profile: ListenerProfile, eligible: List[CatalogMember], slots: List[str]) -> AllocationResult:
        """Synchronous rank-and-fill over members that already passed eligibility."""
        pool = self.ranker.rank(eligible, profile)
        if not pool:
            logger.warning("No candidates met the minimum match score")
            return AllocationResult(status="no_matches", unfilled_slots=list(slots))

        diversity = DiversityController(profile.top_genre_names(settings.NUM_USER_TOP_GENRES))
        allocator = SlotAllocator(diversity)
        assignments, unfilled = allocator.allocate(pool, slots)
        if not assignments:
            return AllocationResult(status="no_matches", unfilled_slots=unfilled)

        logger.info("Lineup complete: %d of %d slots filled", len(assignments), len(slots))
        logger.info("Final genre distribution: %s", dict(diversity.genre_counts))
        return AllocationResult(
            status="complete" if not unfilled else "partial",
            assignments=assignments,
            unfilled_slots=unfilled,
            genre_counts=dict(diversity.genre_counts),
            artist_counts=dict(diversity.artist_counts),
        )

    async def match_raw(self, raw_profile: dict, slots: Optional[List[str]] = None, members=None) -> AllocationResult:
        return await self.match(build_profile(raw_profile), slots=slots, members=members)

    async def match_with_provider(self, taste_client, slots: Optional[List[str]] = None, members=None) -> AllocationResult:
        """Pull the listener payload from a taste provider, then match."""
        try:
            raw_profile = await asyncio.to_thread(taste_client.fetch_raw_profile)
        except Exception as exc:
            raise InputShapeError(f"Listener profile could not be fetched: {exc}") from exc
        return await self.match_raw(raw_profile, slots=slots, members=members)
