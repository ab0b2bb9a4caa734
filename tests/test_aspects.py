import pytest
from conftest import make_song, track

from matching.aspects import (
    ArtistAspect,
    GenreAspect,
    SongAspect,
    describe_rank,
    extract_featured_names,
    song_rank_bonus,
)
from matching.genres import genres_similar
from matching.models import ThemeSong


def song(title, artist_name, **kwargs):
    return ThemeSong.model_validate(make_song(title, artist_name, **kwargs))


def test_rank_tiers():
    assert song_rank_bonus(1) == 0.2
    assert song_rank_bonus(10) == 0.2
    assert song_rank_bonus(11) == 0.1
    assert song_rank_bonus(26) == 0.0
    assert song_rank_bonus(80) == 0.0


def test_describe_rank():
    assert describe_rank(3, "long_term") == "#3 all time"
    assert describe_rank(7, "medium_term") == "#7 in past 6 months"
    assert describe_rank(1, "short_term") == "#1 in past 4 weeks"


def test_top_song_requires_title_and_primary_artist(hip_hop_profile):
    aspect = SongAspect()
    matches = aspect.score(song("Lose Yourself", "Eminem"), hip_hop_profile)
    assert len(matches) == 1
    assert matches[0].reason == "Top song"
    assert matches[0].details == "#1 all time"
    assert matches[0].score == pytest.approx(1.5 + 0.03 + 0.2)

    assert aspect.score(song("Lose Yourself", "Someone Else"), hip_hop_profile) == []


def test_liked_song_collected_alongside_top_song(make_profile):
    profile = make_profile(
        top_tracks={"medium_term": [track("Anthem", "Band", track_id="sp1")]},
        liked_tracks=["sp1"],
    )
    matches = SongAspect().score(song("Anthem", "Band", spotify_id="sp1"), profile)
    assert [m.reason for m in matches] == ["Top song", "Liked song"]
    assert matches[0].score == pytest.approx(1.5 + 0.05 + 0.2)
    assert matches[1].score == pytest.approx(1.4)


def test_liked_song_by_title_key(make_profile):
    profile = make_profile(liked_tracks=[track("Anthem", "Band")])
    matches = SongAspect().score(song("ANTHEM", "band"), profile)
    assert [m.reason for m in matches] == ["Liked song"]


def test_extract_featured_names():
    assert extract_featured_names("Work (feat. Drake)") == ["drake"]
    assert extract_featured_names("Song [ft. A, B and C]") == ["a", "b", "c"]
    assert extract_featured_names("Tune (with X & Y)") == ["x", "y"]
    assert extract_featured_names("Track featuring Z") == ["z"]
    assert extract_featured_names("Without Me") == []
    assert extract_featured_names("Dup (feat. A) (ft. A)") == ["a"]


def test_primary_artist_match(hip_hop_profile):
    matches = ArtistAspect().score(song("Other Song", "Eminem"), hip_hop_profile)
    assert matches[0].reason == "Top artist"
    assert matches[0].details == "#1 all time"
    assert matches[0].score == pytest.approx(0.8 + 0.03 + 0.2)


def test_featured_credit_is_discounted(hip_hop_profile):
    primary = ArtistAspect().score(song("X", "Drake"), hip_hop_profile)[0]
    featured = ArtistAspect().score(song("X", "Nobody", featured=["Drake"]), hip_hop_profile)[0]
    assert featured.reason == "Featured artist"
    assert featured.score == pytest.approx(primary.score * 0.8)


def test_title_feature_bonus(hip_hop_profile):
    matches = ArtistAspect().score(song("Big Tune (feat. Kendrick Lamar)", "Nobody"), hip_hop_profile)
    assert len(matches) == 1
    assert matches[0].reason == "Features your top artist"
    assert matches[0].score == pytest.approx(0.6 + 0.05)


def test_multiple_artists_add_diminishing_bonus(hip_hop_profile):
    matches = ArtistAspect().score(song("Collab", "Eminem", featured=["Drake", "Kendrick Lamar"]), hip_hop_profile)
    single = ArtistAspect().score(song("Solo", "Eminem"), hip_hop_profile)[0]
    assert len(matches) == 3
    assert matches[0].score == pytest.approx(single.score + 0.03 / 1 + 0.03 / 2)
    assert "+2 more favorite artists" in matches[0].details


def test_genre_similarity():
    assert genres_similar("hip hop", "rap")
    assert genres_similar("rap", "hip hop")
    assert genres_similar("pop", "dance pop")
    assert genres_similar("rap", "trap")
    assert not genres_similar("country", "metal")
    assert not genres_similar("", "rock")


def test_genre_aspect_exact_match_with_top_genre_bonus(make_profile):
    profile = make_profile(genres=[{"name": "rock", "weight": 0.5}, {"name": "jazz", "weight": 0.5}])
    match = GenreAspect().score(song("Tune", "Band", genres=["Rock"]), profile, set())
    # (0.5 * 1.05) / 1.0 * 0.4 + top-3 bonus
    assert match.score == pytest.approx(0.525 * 0.4 + 0.05)
    assert match.matched == ["rock"]
    assert match.reason == "Matches your genre preferences: rock"


def test_genre_aspect_liked_artist_bonus(make_profile):
    profile = make_profile(genres=[{"name": "hip hop", "weight": 1.0}])
    liked = GenreAspect().score(song("Tune", "Eminem", genres=["hip hop"]), profile, {"eminem"})
    plain = GenreAspect().score(song("Tune", "Eminem", genres=["hip hop"]), profile, set())
    assert liked.score == pytest.approx(1.05 * 0.4 + 0.05 + 0.05)
    assert liked.score - plain.score == pytest.approx(0.05)
    assert liked.score <= 0.6
    assert liked.reason.startswith("Strong match with your top genres")


def test_genre_aspect_similar_genres(hip_hop_profile):
    match = GenreAspect().score(song("Tune", "Band", genres=["trap"]), hip_hop_profile, set())
    # "trap" is similar to both "hip hop" and "rap"
    assert match.matched == ["hip hop", "rap"]
    assert match.score == pytest.approx(0.9 * 0.4 + 0.05)


def test_genre_aspect_without_tags(hip_hop_profile):
    match = GenreAspect().score(song("Tune", "Band"), hip_hop_profile, set())
    assert match.score == 0.0
    assert match.reason == "No genre data"


def test_artist_string_is_one_primary_credit():
    song_ = ThemeSong.model_validate({"title": "EARFQUAKE", "artist": "Tyler, The Creator "})
    assert [(a.name, a.role) for a in song_.artists] == [("Tyler, The Creator", "primary")]
    assert song_.song_key == ("earfquake", "tyler, the creator")


def test_bare_string_in_artists_is_one_primary_credit():
    song_ = ThemeSong.model_validate({"title": "Lose Yourself", "artists": "Eminem"})
    assert [(a.name, a.role) for a in song_.artists] == [("Eminem", "primary")]
    assert song_.primary_artist == "Eminem"
    assert ThemeSong.model_validate({"title": "Blank", "artists": "  "}).artists == []


def test_list_of_names_keeps_first_as_primary():
    song_ = ThemeSong.model_validate({"title": "Collab", "artists": ["Band", "Guest"]})
    assert [(a.name, a.role) for a in song_.artists] == [("Band", "primary"), ("Guest", "featured")]
