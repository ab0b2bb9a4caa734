import logging
from typing import Dict, List, Optional

import httpx
import requests

from config import settings
from matching.normalizer import build_genre_summary

logger = logging.getLogger(__name__)


class SpotifyTasteClient:
    """Reads a listener's favorites and saved tracks from the Spotify Web API."""

    def __init__(self, access_token: Optional[str] = None, base_url: Optional[str] = None, session=None):
        self.access_token = access_token or settings.SPOTIFY_ACCESS_TOKEN
        self.base_url = (base_url or settings.SPOTIFY_API_BASE).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = settings.EXTERNAL_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        response = self.session.get(
            f"{self.base_url}{path}",
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def get_top_items(self, kind: str, time_frame: str, limit: Optional[int] = None) -> List[dict]:
        """Ranked favorite tracks or artists for one recency window."""
        if kind not in ("tracks", "artists"):
            raise ValueError(f"kind must be 'tracks' or 'artists', got {kind!r}")
        limit = limit or settings.TOP_ITEMS_LIMIT
        data = self._get(f"/me/top/{kind}", {"limit": limit, "time_range": time_frame})
        return data.get("items", []) or []

    def get_all_top_items(self, kind: str) -> Dict[str, List[dict]]:
        return {tf: self.get_top_items(kind, tf) for tf in settings.TIME_FRAMES}

    def get_saved_tracks(self, limit: Optional[int] = None) -> List[dict]:
        limit = limit or settings.SAVED_TRACKS_LIMIT
        data = self._get("/me/tracks", {"limit": limit})
        return [item["track"] for item in data.get("items", []) if isinstance(item, dict) and item.get("track")]

    def get_genre_summary(self, top_artists: Optional[List[dict]] = None) -> List[dict]:
        if top_artists is None:
            top_artists = self.get_top_items("artists", "medium_term")
        return build_genre_summary(top_artists)

    def fetch_raw_profile(self) -> dict:
        """Bundle everything the normalizer needs into one payload."""
        top_tracks = self.get_all_top_items("tracks")
        top_artists = self.get_all_top_items("artists")
        try:
            saved = self.get_saved_tracks()
        except requests.RequestException as e:
            logger.warning("Saved tracks unavailable, continuing without them: %s", e)
            saved = []
        return {
            "top_tracks": top_tracks,
            "top_artists": top_artists,
            "liked_tracks": saved,
            "genres": self.get_genre_summary(top_artists["medium_term"]),
        }

    async def check_tracks_liked(self, track_ids: List[str], client: Optional[httpx.AsyncClient] = None) -> List[bool]:
        """
        One call to /me/tracks/contains. Callers batch ids to the provider limit.

        Raises on HTTP errors and on a response that does not line up with
        the request; the batching layer owns the fallback.
        """
        if not track_ids:
            return []
        url = f"{self.base_url}/me/tracks/contains"
        params = {"ids": ",".join(track_ids)}
        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                response = await own_client.get(url, params=params, headers=self._headers())
        else:
            response = await client.get(url, params=params, headers=self._headers())
        response.raise_for_status()
        flags = response.json()
        if not isinstance(flags, list) or len(flags) != len(track_ids):
            raise ValueError(f"Unexpected /me/tracks/contains payload for {len(track_ids)} ids")
        return [bool(flag) for flag in flags]
