from conftest import artist, track

from matching.normalizer import (
    build_genre_summary,
    build_profile,
    liked_artists,
    normalize_genres,
    normalize_tracks,
    with_liked_ids,
)


def test_tracks_are_lowercased_and_ranked_in_order():
    result = normalize_tracks({"short_term": [track("Song A", "Artist A"), track("Song B", "Artist B")]})
    assert [t.name for t in result["short_term"]] == ["song a", "song b"]
    assert [t.rank for t in result["short_term"]] == [1, 2]
    assert result["short_term"][0].artist == "artist a"
    assert result["medium_term"] == []
    assert result["long_term"] == []


def test_malformed_input_yields_empty_profile():
    profile = build_profile({"top_tracks": "nope", "top_artists": None, "liked_tracks": 42, "genres": {"x": 1}})
    assert profile.is_empty
    assert build_profile(None).is_empty


def test_skips_entries_without_a_name():
    result = normalize_tracks({"long_term": [{"name": ""}, "junk", track("Real", "Someone")]})
    assert [t.name for t in result["long_term"]] == ["real"]
    # Rank keeps the provider position, not the filtered position.
    assert result["long_term"][0].rank == 3


def test_genre_summary_weights_by_artists_with_genre_data():
    summary = build_genre_summary(
        [
            artist("A", ["Hip Hop", "rap"]),
            artist("B", ["hip hop"]),
            artist("C", []),
            artist("D", ["rock"]),
        ]
    )
    by_name = {g["name"]: g for g in summary}
    assert summary[0]["name"] == "hip hop"
    assert by_name["hip hop"]["weight"] == 2 / 3
    assert by_name["rock"]["weight"] == 1 / 3


def test_genres_capped_to_top_ten():
    raw = [{"name": f"genre {i}", "weight": 0.01 * (i + 1)} for i in range(15)]
    genres = normalize_genres(raw)
    assert len(genres) == 10
    assert genres[0].name == "genre 14"


def test_profile_derives_genres_when_missing():
    profile = build_profile(
        {"top_artists": {"medium_term": [artist("A", ["indie"]), artist("B", ["indie", "folk"])]}}
    )
    assert [g.name for g in profile.genres] == ["indie", "folk"]
    assert profile.genres[0].weight == 1.0


def test_liked_tracks_produce_ids_and_keys():
    profile = build_profile({"liked_tracks": [track("Song", "Band", track_id="abc"), "def"]})
    assert profile.liked_track_ids == frozenset({"abc", "def"})
    assert ("song", "band") in profile.liked_track_keys


def test_with_liked_ids_returns_new_profile():
    profile = build_profile({"liked_tracks": ["one"]})
    updated = with_liked_ids(profile, ["two", ""])
    assert updated.liked_track_ids == frozenset({"one", "two"})
    assert profile.liked_track_ids == frozenset({"one"})
    assert with_liked_ids(profile, []) is profile


def test_liked_artists_include_favorites_and_liked_track_owners():
    profile = build_profile(
        {
            "top_tracks": {"short_term": [track("Hit", "Owner", track_id="t1"), track("Miss", "Other", track_id="t2")]},
            "top_artists": {"long_term": [artist("Fave")]},
            "liked_tracks": ["t1"],
        }
    )
    assert liked_artists(profile) == {"owner", "fave"}
