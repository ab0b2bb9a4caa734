import logging
from typing import List, Optional

from config import settings
from matching.models import CatalogMember, ThemeSong

logger = logging.getLogger(__name__)


def is_usable_song(song: ThemeSong) -> bool:
    title = song.title.strip().lower()
    if title in settings.PLACEHOLDER_SONG_TITLES:
        return False
    return bool(song.primary_artist.strip())


def usable_songs(member: CatalogMember) -> List[ThemeSong]:
    return [song for song in member.theme_songs if is_usable_song(song)]


def meets_playing_time(member: CatalogMember, team_games_played: Optional[int]) -> bool:
    """
    Require playing time proportional to the team's games played.

    The check is skipped when the team sample is unknown or too small, and
    members without the relevant stat line are given the benefit of the doubt.
    """
    if team_games_played is None or team_games_played < settings.MIN_GAMES_PLAYED_THRESHOLD:
        return True
    stats = member.stats
    if stats is None:
        return True
    if member.is_pitcher:
        innings = stats.pitching.innings_pitched if stats.pitching else None
        if innings is None:
            return True
        return innings >= team_games_played * settings.PITCHER_IP_PER_GAME_THRESHOLD
    appearances = stats.batting.plate_appearances if stats.batting else None
    if appearances is None:
        return True
    return appearances >= team_games_played * settings.HITTER_PA_PER_GAME_THRESHOLD


def filter_eligible(members: List[CatalogMember], team_games_played: Optional[int]) -> List[CatalogMember]:
    eligible = []
    for member in members:
        if not usable_songs(member):
            logger.debug("Excluding %s: no usable theme song", member.name)
            continue
        if not meets_playing_time(member, team_games_played):
            logger.debug("Excluding %s: below playing-time threshold", member.name)
            continue
        eligible.append(member)
    logger.info("Eligibility: %d of %d members kept", len(eligible), len(members))
    return eligible
