from typing import Optional

from matching.models import PITCHER_POSITIONS

OUTFIELD_POSITIONS = {"LF", "CF", "RF", "OF"}

COMPATIBLE_POSITIONS = {
    "2B": {"SS"},
    "SS": {"2B"},
}
SIMILAR_POSITIONS = {
    "2B": {"3B"},
    "3B": {"SS", "2B"},
    "SS": {"3B"},
}
# Slots that take any non-pitcher once nothing closer is available.
FALLBACK_SLOTS = {"DH"}


def _family(position: str) -> str:
    if position in OUTFIELD_POSITIONS:
        return "OF"
    if position in PITCHER_POSITIONS:
        return "P"
    return position


def position_fit(member_position: str, slot: str) -> Optional[str]:
    """
    Return how a member's role fits a slot: "exact", "similar",
    "compatible", "fallback", or None when the slot cannot take it.
    """
    role = (member_position or "").strip().upper()
    target = (slot or "").strip().upper()
    if not role or not target:
        return None
    if role == target:
        return "exact"

    role_is_pitcher = role in PITCHER_POSITIONS
    if target in PITCHER_POSITIONS or role_is_pitcher:
        # Pitching slots take pitchers only, and pitchers fill nothing else.
        return "similar" if role_is_pitcher and target in PITCHER_POSITIONS else None

    if _family(role) == _family(target):
        return "similar"
    if role in SIMILAR_POSITIONS.get(target, ()):
        return "similar"
    if role in COMPATIBLE_POSITIONS.get(target, ()):
        return "compatible"
    if target in FALLBACK_SLOTS:
        return "fallback"
    return None
