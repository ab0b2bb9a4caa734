import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from matching.models import CatalogMember
from matching.normalizer import build_profile


def make_song(title, artist, genres=None, featured=None, spotify_id=None, song_id=None):
    artists = [{"name": artist, "role": "primary"}]
    for name in featured or []:
        artists.append({"name": name, "role": "featured"})
    return {
        "id": song_id or f"{title}-{artist}".lower().replace(" ", "-"),
        "title": title,
        "artists": artists,
        "genres": genres or [],
        "spotify_id": spotify_id,
    }


def make_member(member_id, position, songs, name=None, stats=None):
    return CatalogMember.model_validate(
        {
            "member_id": member_id,
            "name": name or f"Player {member_id}",
            "position": position,
            "team": "Detroit Tigers",
            "team_id": "det",
            "theme_songs": songs,
            "stats": stats,
        }
    )


def track(name, artist, track_id=None):
    return {"id": track_id or f"trk-{name}".lower().replace(" ", "-"), "name": name, "artists": [{"name": artist}]}


def artist(name, genres=None):
    return {"id": f"art-{name}".lower().replace(" ", "-"), "name": name, "genres": genres or []}


@pytest.fixture
def make_profile():
    def _make(top_tracks=None, top_artists=None, liked_tracks=None, genres=None):
        return build_profile(
            {
                "top_tracks": top_tracks or {},
                "top_artists": top_artists or {},
                "liked_tracks": liked_tracks or [],
                "genres": genres or [],
            }
        )
    return _make


@pytest.fixture
def hip_hop_profile(make_profile):
    return make_profile(
        top_tracks={
            "long_term": [track("Lose Yourself", "Eminem"), track("HUMBLE.", "Kendrick Lamar")],
            "medium_term": [track("Mr. Brightside", "The Killers")],
        },
        top_artists={
            "long_term": [artist("Eminem", ["hip hop", "rap"]), artist("Drake", ["hip hop", "pop rap"])],
            "medium_term": [artist("Kendrick Lamar", ["hip hop", "west coast rap"])],
        },
        genres=[
            {"name": "hip hop", "weight": 0.6, "count": 3},
            {"name": "rap", "weight": 0.3, "count": 1},
            {"name": "rock", "weight": 0.1, "count": 1},
        ],
    )
