from typing import List, Optional, Set

import numpy as np

from config import settings
from matching.aspects import ArtistAspect, GenreAspect, SongAspect
from matching.models import AspectMatch, CatalogMember, ListenerProfile, ScoredSong, ThemeSong


def _truncate(text: str, limit: int) -> str:
    return f"{text[:limit]}..." if len(text) > limit else text


def combine_aspects(matches: List[Optional[AspectMatch]]):
    """
    Fold aspect results into one score.

    The strongest aspect counts in full; each weaker aspect adds only a
    small fraction so corroboration nudges ranking without diluting it.
    Returns (score, reason, details, kept_aspects).
    """
    kept = [m for m in matches if m is not None and m.score > settings.ASPECT_SCORE_FLOOR]
    kept.sort(key=lambda m: m.score, reverse=True)
    if not kept:
        return 0.0, "No Match", "", []

    primary = kept[0]
    others = kept[1:]
    others_total = sum(m.score for m in others)
    score = primary.score + settings.SECONDARY_ASPECT_WEIGHT * others_total

    reason = primary.reason or primary.aspect.title()
    if others and others_total > settings.ASPECT_SCORE_FLOOR:
        other_reasons = ", ".join(m.reason or m.aspect.title() for m in others)
        bonus = f"+ bonus ({_truncate(other_reasons, settings.BONUS_REASON_MAX_CHARS)})"
        reason = f"{_truncate(reason, settings.REASON_MAX_CHARS)} {bonus}"
    return score, reason, primary.details, kept


def stats_bonus(member: CatalogMember) -> float:
    """Tie-break nudge from OPS (hitters) or ERA (pitchers), scaled from league average to elite."""
    cfg = settings.STATS_BONUS
    stats = member.stats
    if stats is None:
        return 0.0
    if member.is_pitcher:
        era = stats.pitching.earned_run_avg if stats.pitching else None
        if era is None or era < 0:
            return 0.0
        # Lower ERA is better, so interpolate on the negated scale.
        return float(np.interp(-era, [-cfg["ERA_AVERAGE"], -cfg["ERA_ELITE"]], [0.0, cfg["MAX"]]))
    ops = stats.batting.ops if stats.batting else None
    if ops is None:
        return 0.0
    return float(np.interp(ops, [cfg["OPS_AVERAGE"], cfg["OPS_ELITE"]], [0.0, cfg["MAX"]]))


class SongEvaluator:
    def __init__(self, song_aspect=None, artist_aspect=None, genre_aspect=None):
        self.song_aspect = song_aspect or SongAspect()
        self.artist_aspect = artist_aspect or ArtistAspect()
        self.genre_aspect = genre_aspect or GenreAspect()

    def evaluate(self, song: ThemeSong, profile: ListenerProfile, liked_artists: Set[str]) -> ScoredSong:
        song_matches = self.song_aspect.score(song, profile)
        artist_matches = self.artist_aspect.score(song, profile)
        genre_match = self.genre_aspect.score(song, profile, liked_artists)

        score, reason, details, kept = combine_aspects(
            [
                song_matches[0] if song_matches else None,
                artist_matches[0] if artist_matches else None,
                genre_match,
            ]
        )
        return ScoredSong(song=song, score=score, reason=reason, details=details, aspects=kept)
