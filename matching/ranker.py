import logging
from typing import List, Optional

from config import settings
from matching.eligibility import filter_eligible, usable_songs
from matching.evaluator import SongEvaluator, stats_bonus
from matching.models import Candidate, CatalogMember, ListenerProfile
from matching.normalizer import liked_artists

logger = logging.getLogger(__name__)


class CandidateRanker:
    def __init__(self, evaluator: Optional[SongEvaluator] = None):
        self.evaluator = evaluator or SongEvaluator()

    def score_member(self, member: CatalogMember, profile: ListenerProfile, liked: set) -> Optional[Candidate]:
        songs = usable_songs(member)
        if not songs:
            return None
        scored = [self.evaluator.evaluate(song, profile, liked) for song in songs]
        scored.sort(key=lambda s: s.score, reverse=True)
        best = scored[0]
        bonus = stats_bonus(member)
        return Candidate(
            member=member,
            best_song=best,
            score=best.score + bonus,
            stats_bonus=bonus,
            scored_songs=[s for s in scored if s.score > 0],
        )

    def eligible_members(self, members: List[CatalogMember], team_games_played: Optional[int]) -> List[CatalogMember]:
        return filter_eligible(members, team_games_played)

    def rank(self, members: List[CatalogMember], profile: ListenerProfile) -> List[Candidate]:
        """Score already-eligible members and keep those clearing the minimum match score, best first."""
        liked = liked_artists(profile)
        pool = []
        for member in members:
            candidate = self.score_member(member, profile, liked)
            if candidate is None:
                continue
            logger.debug(
                "Scored %s: %.3f (%s %s)",
                member.name, candidate.score, candidate.reason, candidate.best_song.details,
            )
            if candidate.score >= settings.MIN_MATCH_SCORE:
                pool.append(candidate)
        pool.sort(key=lambda c: c.score, reverse=True)
        logger.info("Candidate pool: %d of %d members cleared %.2f", len(pool), len(members), settings.MIN_MATCH_SCORE)
        return pool
