import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from config import settings
from matching.models import CatalogMember, ThemeSong

logger = logging.getLogger(__name__)


def song_dedupe_key(song: ThemeSong) -> str:
    if song.id and song.id != "no-song":
        return song.id
    artists = ", ".join(a.name for a in song.artists).lower()
    return f"{song.title.lower()}|{artists}"


def dedupe_songs(songs: List[ThemeSong]) -> List[ThemeSong]:
    unique = {}
    for song in songs:
        unique.setdefault(song_dedupe_key(song), song)
    return list(unique.values())


def load_catalog_file(path) -> list:
    """Read a catalog JSON file: either a list of members or {"members": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("members", [])
    return data


class CatalogStore:
    def __init__(self, db_path=None):
        self.db_path = str(db_path or settings.CATALOG_DB_PATH)
        self._init_db()

    def _init_db(self):
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = self._conn()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                member_id TEXT PRIMARY KEY,
                name TEXT,
                position TEXT,
                team TEXT,
                team_id TEXT,
                songs_json TEXT,
                stats_json TEXT,
                updated_at REAL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS team_stats (
                team_id TEXT PRIMARY KEY,
                team TEXT,
                games_played INTEGER,
                wins INTEGER,
                losses INTEGER,
                updated_at REAL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_members_team ON members(team_id)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_members_position ON members(position)")
        conn.commit()
        conn.close()

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def upsert_member(self, member: CatalogMember):
        songs = [s.model_dump() for s in dedupe_songs(member.theme_songs)]
        stats = member.stats.model_dump() if member.stats else None
        conn = self._conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO members "
                "(member_id, name, position, team, team_id, songs_json, stats_json, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    member.member_id,
                    member.name,
                    member.position,
                    member.team,
                    member.team_id,
                    json.dumps(songs),
                    json.dumps(stats) if stats is not None else None,
                    time.time(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def upsert_team_stats(self, team_id: str, games_played: int, wins: int = 0, losses: int = 0, team: str = ""):
        conn = self._conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO team_stats (team_id, team, games_played, wins, losses, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (team_id.lower(), team, int(games_played), int(wins), int(losses), time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def fetch_catalog(self) -> List[CatalogMember]:
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT member_id, name, position, team, team_id, songs_json, stats_json "
                "FROM members ORDER BY member_id"
            ).fetchall()
        finally:
            conn.close()

        members = []
        for member_id, name, position, team, team_id, songs_json, stats_json in rows:
            try:
                members.append(
                    CatalogMember(
                        member_id=member_id,
                        name=name or "",
                        position=position or "",
                        team=team or "",
                        team_id=team_id or "",
                        theme_songs=json.loads(songs_json or "[]"),
                        stats=json.loads(stats_json) if stats_json else None,
                    )
                )
            except (ValueError, ValidationError) as exc:
                # json.JSONDecodeError is a ValueError subclass.
                logger.warning("Skipping catalog row %s: %s", member_id, exc)
        return members

    def fetch_team_games_played(self, team_key: str) -> Optional[int]:
        conn = self._conn()
        try:
            row = conn.execute(
                "SELECT games_played FROM team_stats WHERE team_id=?",
                (str(team_key or "").lower(),),
            ).fetchone()
        finally:
            conn.close()
        if row is None or row[0] is None:
            return None
        return int(row[0])

    def import_json(self, path) -> int:
        """Load members (and optional team_stats) from a JSON file; returns members stored."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        records = data.get("members", []) if isinstance(data, dict) else data
        stored = 0
        for record in records or []:
            try:
                member = CatalogMember.model_validate(record)
            except ValidationError as exc:
                logger.warning("Skipping member record during import: %s", exc.errors()[:1])
                continue
            self.upsert_member(member)
            stored += 1
        if isinstance(data, dict):
            for team in data.get("team_stats", []) or []:
                if isinstance(team, dict) and team.get("team_id") and team.get("games_played") is not None:
                    self.upsert_team_stats(
                        team["team_id"],
                        team["games_played"],
                        wins=team.get("wins", 0),
                        losses=team.get("losses", 0),
                        team=team.get("team", ""),
                    )
        logger.info("Imported %d catalog members from %s", stored, path)
        return stored
