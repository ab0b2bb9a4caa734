import logging
from collections import Counter
from typing import Iterable, Optional

from config import settings
from matching.models import Candidate

logger = logging.getLogger(__name__)


class DiversityController:
    """
    Run-scoped artist and genre counters.

    One instance per allocation run; counts only ever grow while slots fill.
    """

    def __init__(self, top_genres: Iterable[str]):
        self.top_genres = [g.lower() for g in top_genres][: settings.NUM_USER_TOP_GENRES]
        self._top_genre_set = set(self.top_genres)
        self.artist_counts = Counter()
        self.genre_counts = Counter()

    def boost(self, candidate: Candidate) -> Candidate:
        """Set the sort-only score: reported score plus a boost for an under-represented favorite genre."""
        boost = 0.0
        boosting_genre = None
        for genre in candidate.best_song.song.normalized_genres:
            if genre in self._top_genre_set and self.genre_counts[genre] < settings.DIVERSITY_THRESHOLD:
                boost = settings.DIVERSITY_BOOST_AMOUNT
                boosting_genre = genre
                break
        candidate.sort_score = candidate.score + boost
        candidate.boosting_genre = boosting_genre
        return candidate

    def occurrences(self, candidate: Candidate) -> int:
        return self.artist_counts[candidate.primary_artist_key]

    def penalty(self, candidate: Candidate) -> float:
        schedule = settings.SCORE_WEIGHTS["ARTIST_DIVERSITY_PENALTY"]
        index = min(self.occurrences(candidate), len(schedule) - 1)
        return schedule[index]

    def counted_genre(self, candidate: Candidate) -> Optional[str]:
        genres = candidate.best_song.song.normalized_genres
        for genre in genres:
            if genre in self._top_genre_set:
                return genre
        return genres[0] if genres else None

    def commit(self, candidate: Candidate) -> None:
        self.artist_counts[candidate.primary_artist_key] += 1
        genre = self.counted_genre(candidate)
        if genre:
            self.genre_counts[genre] += 1
            logger.debug("Genre count updated: %s = %d", genre, self.genre_counts[genre])
