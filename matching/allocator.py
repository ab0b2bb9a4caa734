import logging
from typing import List, Tuple

from config import settings
from matching.diversity import DiversityController
from matching.models import Candidate, SlotAssignment
from matching.positions import position_fit

logger = logging.getLogger(__name__)


class SlotAllocator:
    """
    Greedy slot filling in caller order.

    Each slot takes the best boosted candidate that fits the role, is not
    already placed, does not reuse a song key, and whose score after the
    artist-repeat penalty still clears the minimum. Slots never reopen.
    """

    def __init__(self, diversity: DiversityController):
        self.diversity = diversity
        self.used_members = set()
        self.used_song_keys = set()

    def _eligible(self, pool: List[Candidate], slot: str) -> List[Tuple[Candidate, str]]:
        eligible = []
        for candidate in pool:
            if candidate.member.member_id in self.used_members:
                continue
            fit = position_fit(candidate.member.position, slot)
            if fit is not None:
                eligible.append((candidate, fit))
        return eligible

    def fill_slot(self, pool: List[Candidate], slot: str):
        eligible = self._eligible(pool, slot)
        logger.info("Processing slot %s: %d eligible candidates", slot, len(eligible))
        if not eligible:
            return None

        for candidate, _ in eligible:
            self.diversity.boost(candidate)
        eligible.sort(key=lambda pair: pair[0].sort_score, reverse=True)

        for candidate, fit in eligible:
            if candidate.song_key in self.used_song_keys:
                logger.debug("Skipping %s for %s: song already used", candidate.member.name, slot)
                continue
            penalty = self.diversity.penalty(candidate)
            adjusted = candidate.score * (1 - penalty)
            if adjusted < settings.MIN_MATCH_SCORE:
                continue

            logger.info(
                "Selected %s for %s (score %.3f, adjusted %.3f, sort %.3f, penalty %.2f)",
                candidate.member.name, slot, candidate.score, adjusted, candidate.sort_score, penalty,
            )
            self.used_members.add(candidate.member.member_id)
            self.used_song_keys.add(candidate.song_key)
            self.diversity.commit(candidate)
            return SlotAssignment(
                slot=slot,
                candidate=candidate,
                fit=fit,
                penalty=penalty,
                adjusted_score=adjusted,
            )
        return None

    def allocate(self, pool: List[Candidate], slots: List[str]):
        """Return (assignments in slot order, unfilled slot labels)."""
        assignments = []
        unfilled = []
        for slot in slots:
            assignment = self.fill_slot(pool, slot)
            if assignment is None:
                logger.info("No suitable candidate for slot %s", slot)
                unfilled.append(slot)
            else:
                assignments.append(assignment)
        return assignments, unfilled
