import re
from typing import Dict, List, Optional, Set

from config import settings
from matching.genres import genres_similar
from matching.models import AspectMatch, ListenerProfile, NormalizedArtist, ThemeSong

FEATURE_PATTERNS = [
    re.compile(r"\((?:feat\.?|ft\.?|featuring|with)\s+([^)]+)\)", re.IGNORECASE),
    re.compile(r"\[(?:feat\.?|ft\.?|featuring|with)\s+([^\]]+)\]", re.IGNORECASE),
    re.compile(r"(?:^|\s)(?:feat\.|ft\.|featuring)\s+(.+)$", re.IGNORECASE),
]
FEATURE_NAME_SPLIT = re.compile(r"\s*(?:,|&|\band\b)\s*", re.IGNORECASE)


def time_frame_label(time_frame: str) -> str:
    return settings.TIME_FRAME_LABELS.get(time_frame, "")


def describe_rank(rank: int, time_frame: str) -> str:
    if time_frame == "long_term":
        return f"#{rank} all time"
    return f"#{rank} in {time_frame_label(time_frame)}"


def recency_weight(time_frame: str) -> float:
    return settings.SCORE_WEIGHTS["TIME_FRAME"].get(time_frame, 0.0)


def song_rank_bonus(rank: int) -> float:
    for threshold, bonus in settings.SCORE_WEIGHTS["RANK"]:
        if rank <= threshold:
            return bonus
    return 0.0


def artist_rank_bonus(rank: int, time_frame: str) -> float:
    for threshold, bonus in settings.SCORE_WEIGHTS["ARTIST_RANK_BONUS"].get(time_frame, []):
        if rank <= threshold:
            return bonus
    return 0.0


def extract_featured_names(title: str) -> List[str]:
    """Pull credited names out of "feat./ft./with" markers in a title, de-duplicated in order."""
    names = []
    for pattern in FEATURE_PATTERNS:
        for match in pattern.finditer(title or ""):
            for part in FEATURE_NAME_SPLIT.split(match.group(1)):
                name = part.strip(" .-").lower()
                if name:
                    names.append(name)
    return list(dict.fromkeys(names))


class SongAspect:
    """Direct matches of the theme song against favorite and liked tracks."""

    def score(self, song: ThemeSong, profile: ListenerProfile) -> List[AspectMatch]:
        title, primary = song.song_key
        matches = []
        if title:
            for time_frame in settings.TIME_FRAMES:
                for track in profile.top_tracks.get(time_frame, []):
                    if track.name != title or track.artist != primary:
                        continue
                    score = (
                        settings.SCORE_WEIGHTS["MATCH_TYPE"]["TOP_SONG"]
                        + recency_weight(time_frame)
                        + song_rank_bonus(track.rank)
                    )
                    matches.append(
                        AspectMatch(
                            aspect="song",
                            score=score,
                            reason="Top song",
                            details=describe_rank(track.rank, time_frame),
                            rank=track.rank,
                            time_frame=time_frame,
                        )
                    )
                    break

        liked = (song.spotify_id and song.spotify_id in profile.liked_track_ids) or (
            title and song.song_key in profile.liked_track_keys
        )
        if liked:
            matches.append(
                AspectMatch(
                    aspect="song",
                    score=settings.SCORE_WEIGHTS["MATCH_TYPE"]["LIKED_SONG"],
                    reason="Liked song",
                    details="In your liked songs",
                )
            )
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches


class ArtistAspect:
    """Credited and title-featured artists found among the listener's favorite artists."""

    def _best_favorite(self, name: str, profile: ListenerProfile) -> Optional[NormalizedArtist]:
        best = None
        best_value = -1.0
        for time_frame in settings.TIME_FRAMES:
            for artist in profile.top_artists.get(time_frame, []):
                if artist.name != name:
                    continue
                value = recency_weight(time_frame) + artist_rank_bonus(artist.rank, time_frame)
                if value > best_value:
                    best, best_value = artist, value
                break
        return best

    def _credit_matches(self, song: ThemeSong, profile: ListenerProfile) -> Dict[str, AspectMatch]:
        found = {}
        for credit in song.artists:
            name = credit.name.strip().lower()
            if not name:
                continue
            favorite = self._best_favorite(name, profile)
            if favorite is None:
                continue
            base = (
                settings.SCORE_WEIGHTS["MATCH_TYPE"]["TOP_ARTIST"]
                + recency_weight(favorite.time_frame)
                + artist_rank_bonus(favorite.rank, favorite.time_frame)
            )
            multiplier = 1.0 if credit.role == "primary" else settings.FEATURED_ARTIST_MULTIPLIER
            match = AspectMatch(
                aspect="artist",
                score=base * multiplier,
                reason="Top artist" if credit.role == "primary" else "Featured artist",
                details=describe_rank(favorite.rank, favorite.time_frame),
                rank=favorite.rank,
                time_frame=favorite.time_frame,
                matched=[name],
            )
            if name not in found or match.score > found[name].score:
                found[name] = match
        return found

    def _feature_matches(self, song: ThemeSong, profile: ListenerProfile) -> Dict[str, AspectMatch]:
        found = {}
        for name in extract_featured_names(song.title):
            favorite = self._best_favorite(name, profile)
            if favorite is None:
                continue
            found[name] = AspectMatch(
                aspect="artist",
                score=settings.SCORE_WEIGHTS["MATCH_TYPE"]["FEATURE"] + recency_weight(favorite.time_frame),
                reason="Features your top artist",
                details=f"{name} {describe_rank(favorite.rank, favorite.time_frame)}",
                rank=favorite.rank,
                time_frame=favorite.time_frame,
                matched=[name],
            )
        return found

    def score(self, song: ThemeSong, profile: ListenerProfile) -> List[AspectMatch]:
        per_artist = self._credit_matches(song, profile)
        for name, match in self._feature_matches(song, profile).items():
            if name not in per_artist or match.score > per_artist[name].score:
                per_artist[name] = match

        matches = sorted(per_artist.values(), key=lambda m: m.score, reverse=True)
        if len(matches) > 1:
            # Each additional favorite artist confirms the match with diminishing weight.
            extra = sum(
                settings.SCORE_WEIGHTS["MULTIPLE_MATCHES_BONUS"] / index
                for index in range(1, len(matches))
            )
            best = matches[0]
            matches[0] = best.model_copy(
                update={
                    "score": best.score + extra,
                    "details": f"{best.details} (+{len(matches) - 1} more favorite artists)",
                    "matched": [n for m in matches for n in m.matched],
                }
            )
        return matches


class GenreAspect:
    """Weighted overlap between the song's genre tags and the listener's genre distribution."""

    @staticmethod
    def _reason(ratio: float, matched: List[str]) -> str:
        if ratio >= 0.8:
            return f"Strong match with your top genres: {', '.join(matched[:2])}"
        if ratio >= 0.5:
            return f"Matches your genre preferences: {matched[0]}"
        if ratio >= 0.3:
            return f"Partial match with your music taste: {matched[0]}"
        if matched:
            return f"Light match with your music taste: {matched[0]}"
        return "Based on your music taste"

    def score(self, song: ThemeSong, profile: ListenerProfile, liked_artists: Set[str]) -> AspectMatch:
        song_genres = song.normalized_genres
        if not song_genres or not profile.genres:
            return AspectMatch(aspect="genre", score=0.0, reason="No genre data")

        weights = settings.SCORE_WEIGHTS
        total_weight = sum(g.weight for g in profile.genres)
        exact_weight = 0.0
        similar_weight = 0.0
        matched = []
        for genre in profile.genres:
            if genre.name in song_genres:
                exact_weight += genre.weight
                matched.append(genre.name)
            elif any(genres_similar(genre.name, tag) for tag in song_genres):
                similar_weight += genre.weight
                matched.append(genre.name)

        ratio = 0.0
        if total_weight > 0:
            ratio = (exact_weight * (1 + weights["EXACT_GENRE_MATCH_BONUS"]) + similar_weight) / total_weight
        score = ratio * weights["MATCH_TYPE"]["GENRE"]

        top_genres = set(profile.top_genre_names(settings.TOP_GENRE_COUNT))
        if any(name in top_genres for name in matched):
            score += weights["TOP_GENRE_BONUS"]
        if any(credit.name.strip().lower() in liked_artists for credit in song.artists):
            score += weights["GENRE_ARTIST_LIKED_BONUS"]

        cap = weights["MATCH_TYPE"]["GENRE"] + weights["GENRE_SCORE_HEADROOM"]
        return AspectMatch(
            aspect="genre",
            score=min(score, cap),
            reason=self._reason(ratio, matched),
            details=f"Genres: {', '.join(matched)}" if matched else "",
            matched=matched,
        )
