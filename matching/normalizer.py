import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from config import settings
from matching.models import GenreWeight, ListenerProfile, NormalizedArtist, NormalizedTrack

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return str(value or "").strip().lower()


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_windows(value) -> Dict[str, list]:
    if not isinstance(value, dict):
        return {tf: [] for tf in settings.TIME_FRAMES}
    return {tf: _as_list(value.get(tf)) for tf in settings.TIME_FRAMES}


def _first_artist_name(item: dict) -> str:
    artists = _as_list(item.get("artists"))
    if artists:
        first = artists[0]
        if isinstance(first, dict):
            return _clean(first.get("name"))
        return _clean(first)
    return _clean(item.get("artist"))


def normalize_tracks(raw_tracks) -> Dict[str, List[NormalizedTrack]]:
    """Lower-case favorite tracks per window, keeping the provider's 1-based rank order."""
    normalized = {tf: [] for tf in settings.TIME_FRAMES}
    for time_frame, items in _as_windows(raw_tracks).items():
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            name = _clean(item.get("name"))
            if not name:
                continue
            album = item.get("album") if isinstance(item.get("album"), dict) else {}
            normalized[time_frame].append(
                NormalizedTrack(
                    name=name,
                    artist=_first_artist_name(item),
                    spotify_id=str(item.get("id") or ""),
                    album_id=str(album.get("id") or ""),
                    album_name=str(album.get("name") or ""),
                    rank=index + 1,
                    time_frame=time_frame,
                )
            )
    return normalized


def normalize_artists(raw_artists) -> Dict[str, List[NormalizedArtist]]:
    normalized = {tf: [] for tf in settings.TIME_FRAMES}
    for time_frame, items in _as_windows(raw_artists).items():
        for index, item in enumerate(items):
            if isinstance(item, str):
                item = {"name": item}
            if not isinstance(item, dict):
                continue
            name = _clean(item.get("name"))
            if not name:
                continue
            normalized[time_frame].append(
                NormalizedArtist(
                    name=name,
                    id=str(item.get("id") or ""),
                    rank=index + 1,
                    time_frame=time_frame,
                )
            )
    return normalized


def build_genre_summary(raw_artists: Iterable) -> List[dict]:
    """
    Tally genres across favorite artists.

    Weight is occurrences divided by the number of artists that carry any
    genre data. Ties keep first-seen order.
    """
    counts = Counter()
    order = {}
    artists_with_genres = 0
    for artist in raw_artists or []:
        if not isinstance(artist, dict):
            continue
        genres = [_clean(g) for g in _as_list(artist.get("genres")) if _clean(g)]
        if not genres:
            continue
        artists_with_genres += 1
        for genre in dict.fromkeys(genres):
            counts[genre] += 1
            order.setdefault(genre, len(order))
    if not artists_with_genres:
        return []
    summary = [
        {"name": name, "count": count, "weight": count / artists_with_genres}
        for name, count in counts.items()
    ]
    summary.sort(key=lambda g: (-g["count"], order[g["name"]]))
    return summary


def normalize_genres(raw_genres) -> List[GenreWeight]:
    genres = []
    seen = set()
    for item in _as_list(raw_genres):
        if not isinstance(item, dict):
            continue
        name = _clean(item.get("name"))
        try:
            weight = float(item.get("weight", 0.0))
            count = int(item.get("count", 0) or 0)
        except (TypeError, ValueError):
            logger.debug("Skipping malformed genre entry: %r", item)
            continue
        if not name or name in seen or weight <= 0:
            continue
        seen.add(name)
        genres.append(GenreWeight(name=name, weight=weight, count=count))
    genres.sort(key=lambda g: g.weight, reverse=True)
    return genres[: settings.MAX_USER_GENRES]


def normalize_liked(raw_liked) -> tuple:
    """Split saved tracks into a set of ids and a set of (title, primary artist) keys."""
    ids = set()
    keys = set()
    for item in _as_list(raw_liked):
        if isinstance(item, str):
            if item:
                ids.add(item)
            continue
        if not isinstance(item, dict):
            continue
        if item.get("id"):
            ids.add(str(item["id"]))
        name = _clean(item.get("name"))
        if name:
            keys.add((name, _first_artist_name(item)))
    return ids, keys


def build_profile(raw: Optional[dict]) -> ListenerProfile:
    """
    Build a ListenerProfile from the provider payload.

    Expected keys are `top_tracks` and `top_artists` (window -> ranked list),
    `liked_tracks` (list of track dicts or ids) and an optional `genres`
    summary. Missing or malformed parts produce empty collections.
    """
    if not isinstance(raw, dict):
        logger.warning("Listener payload is not a mapping, using an empty profile")
        raw = {}

    top_artists_raw = _as_windows(raw.get("top_artists"))
    raw_genres = raw.get("genres")
    if not _as_list(raw_genres):
        # The provider derives genres from medium-term artists when it has no summary.
        source = top_artists_raw["medium_term"] or [
            a for tf in settings.TIME_FRAMES for a in top_artists_raw[tf]
        ]
        raw_genres = build_genre_summary(source)

    liked_ids, liked_keys = normalize_liked(raw.get("liked_tracks"))
    profile = ListenerProfile(
        genres=normalize_genres(raw_genres),
        top_tracks=normalize_tracks(raw.get("top_tracks")),
        top_artists=normalize_artists(top_artists_raw),
        liked_track_ids=frozenset(liked_ids),
        liked_track_keys=frozenset(liked_keys),
    )
    logger.info(
        "Profile normalized: %d genres, %d top tracks, %d top artists, %d liked",
        len(profile.genres),
        sum(len(v) for v in profile.top_tracks.values()),
        sum(len(v) for v in profile.top_artists.values()),
        len(profile.liked_track_ids) + len(profile.liked_track_keys),
    )
    return profile


def with_liked_ids(profile: ListenerProfile, extra_ids: Iterable[str]) -> ListenerProfile:
    """Return a copy of the profile whose liked-id set includes confirmed catalog tracks."""
    extra = frozenset(i for i in extra_ids if i)
    if not extra:
        return profile
    return profile.model_copy(update={"liked_track_ids": profile.liked_track_ids | extra})


def liked_artists(profile: ListenerProfile) -> set:
    """Artists the listener demonstrably likes: owners of liked favorite tracks plus every favorite artist."""
    artists = set()
    for tf in settings.TIME_FRAMES:
        for track in profile.top_tracks.get(tf, []):
            if track.artist and (
                track.spotify_id in profile.liked_track_ids
                or (track.name, track.artist) in profile.liked_track_keys
            ):
                artists.add(track.artist)
    for tf in settings.TIME_FRAMES:
        for artist in profile.top_artists.get(tf, []):
            artists.add(artist.name)
    return artists
