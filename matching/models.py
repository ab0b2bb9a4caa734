from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config import settings

TimeFrame = Literal["short_term", "medium_term", "long_term"]
ArtistRole = Literal["primary", "featured"]

PITCHER_POSITIONS = {"P", "SP", "RP"}


class ArtistCredit(BaseModel):
    name: str
    role: ArtistRole = "primary"


class ThemeSong(BaseModel):
    id: str = ""
    title: str
    artists: List[ArtistCredit] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    spotify_id: Optional[str] = None
    youtube_id: Optional[str] = None
    album_name: str = ""
    album_art: str = ""
    preview_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_artists(cls, data):
        # A bare artist string is one primary credit, never split: names
        # like "Tyler, The Creator" contain commas. In a list of plain
        # names the first is primary and the rest are featured.
        if not isinstance(data, dict):
            return data
        artists = data.get("artists")
        if isinstance(artists, str):
            artist_text = artists
        elif artists:
            data = dict(data)
            data["artists"] = [
                {"name": a, "role": "primary" if i == 0 else "featured"} if isinstance(a, str) else a
                for i, a in enumerate(artists)
            ]
            return data
        else:
            artist_text = data.get("artist") or data.get("artist_name") or ""
        data = dict(data)
        if isinstance(artist_text, str) and artist_text.strip():
            data["artists"] = [{"name": artist_text.strip(), "role": "primary"}]
        elif isinstance(artists, str):
            data["artists"] = []
        return data

    @property
    def primary_artist(self) -> str:
        for credit in self.artists:
            if credit.role == "primary" and credit.name.strip():
                return credit.name
        for credit in self.artists:
            if credit.name.strip():
                return credit.name
        return ""

    @property
    def song_key(self) -> Tuple[str, str]:
        """(title, primary artist) pair used for one-song-per-roster uniqueness."""
        return (self.title.strip().lower(), self.primary_artist.strip().lower())

    @property
    def normalized_genres(self) -> List[str]:
        return [g.strip().lower() for g in self.genres if g and g.strip()]


class BattingStats(BaseModel):
    batting_avg: Optional[float] = None
    on_base_percentage: Optional[float] = None
    slugging_percentage: Optional[float] = None
    plate_appearances: Optional[int] = None

    @property
    def ops(self) -> Optional[float]:
        if self.on_base_percentage is None or self.slugging_percentage is None:
            return None
        return self.on_base_percentage + self.slugging_percentage


class PitchingStats(BaseModel):
    earned_run_avg: Optional[float] = None
    innings_pitched: Optional[float] = None


class MemberStats(BaseModel):
    batting: Optional[BattingStats] = None
    pitching: Optional[PitchingStats] = None


class CatalogMember(BaseModel):
    member_id: str
    name: str
    position: str
    team: str = ""
    team_id: str = ""
    theme_songs: List[ThemeSong] = Field(default_factory=list)
    stats: Optional[MemberStats] = None

    @property
    def is_pitcher(self) -> bool:
        return self.position.upper() in PITCHER_POSITIONS


class NormalizedTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    artist: str
    spotify_id: str = ""
    album_id: str = ""
    album_name: str = ""
    rank: int
    time_frame: TimeFrame


class NormalizedArtist(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    id: str = ""
    rank: int
    time_frame: TimeFrame


class GenreWeight(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    weight: float
    count: int = 0


def _empty_windows():
    return {"short_term": [], "medium_term": [], "long_term": []}


class ListenerProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    genres: List[GenreWeight] = Field(default_factory=list)
    top_tracks: Dict[str, List[NormalizedTrack]] = Field(default_factory=_empty_windows)
    top_artists: Dict[str, List[NormalizedArtist]] = Field(default_factory=_empty_windows)
    liked_track_ids: frozenset = Field(default_factory=frozenset)
    liked_track_keys: frozenset = Field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        has_tracks = any(self.top_tracks.get(tf) for tf in self.top_tracks)
        has_artists = any(self.top_artists.get(tf) for tf in self.top_artists)
        return not (
            self.genres or has_tracks or has_artists
            or self.liked_track_ids or self.liked_track_keys
        )

    def top_genre_names(self, n: int) -> List[str]:
        return [g.name for g in self.genres[:n]]


class AspectMatch(BaseModel):
    aspect: Literal["song", "artist", "genre"]
    score: float = 0.0
    reason: str = ""
    details: str = ""
    rank: Optional[int] = None
    time_frame: Optional[TimeFrame] = None
    matched: List[str] = Field(default_factory=list)


class ScoredSong(BaseModel):
    song: ThemeSong
    score: float
    reason: str
    details: str = ""
    aspects: List[AspectMatch] = Field(default_factory=list)


class Candidate(BaseModel):
    member: CatalogMember
    best_song: ScoredSong
    score: float
    stats_bonus: float = 0.0
    scored_songs: List[ScoredSong] = Field(default_factory=list)

    # Allocation-only fields, never part of the reported score.
    sort_score: Optional[float] = None
    boosting_genre: Optional[str] = None

    @property
    def reason(self) -> str:
        return self.best_song.reason

    @property
    def song_key(self) -> Tuple[str, str]:
        return self.best_song.song.song_key

    @property
    def primary_artist_key(self) -> str:
        return self.best_song.song.primary_artist.strip().lower() or "unknown_artist"


class SlotAssignment(BaseModel):
    slot: str
    candidate: Candidate
    fit: str
    penalty: float = 0.0
    adjusted_score: float

    @property
    def member(self) -> CatalogMember:
        return self.candidate.member

    @property
    def final_score(self) -> float:
        return self.candidate.score

    @property
    def reason(self) -> str:
        return self.candidate.reason

    @property
    def details(self) -> str:
        return self.candidate.best_song.details

    @property
    def scored_songs(self) -> List[ScoredSong]:
        return self.candidate.scored_songs

    def to_dict(self) -> dict:
        song = self.candidate.best_song.song
        return {
            "slot": self.slot,
            "member_id": self.member.member_id,
            "name": self.member.name,
            "position": self.member.position,
            "team": self.member.team,
            "fit": self.fit,
            "final_score": round(self.final_score, 6),
            "adjusted_score": round(self.adjusted_score, 6),
            "penalty": self.penalty,
            "reason": self.reason,
            "details": self.details,
            "song": {
                "title": song.title,
                "artists": [a.name for a in song.artists],
                "album_art": song.album_art or settings.DEFAULT_ALBUM_ART,
                "preview_url": song.preview_url,
            },
            "matching_songs": [
                {
                    "title": s.song.title,
                    "score": round(s.score, 6),
                    "reason": s.reason,
                    "details": s.details,
                }
                for s in self.scored_songs
            ],
        }


AllocationStatus = Literal["complete", "partial", "no_taste_data", "no_candidates", "no_matches"]


class AllocationResult(BaseModel):
    status: AllocationStatus
    assignments: List[SlotAssignment] = Field(default_factory=list)
    unfilled_slots: List[str] = Field(default_factory=list)
    genre_counts: Dict[str, int] = Field(default_factory=dict)
    artist_counts: Dict[str, int] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.assignments

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "assignments": [a.to_dict() for a in self.assignments],
            "unfilled_slots": list(self.unfilled_slots),
            "genre_counts": dict(self.genre_counts),
            "artist_counts": dict(self.artist_counts),
        }
