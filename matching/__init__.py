from matching.engine import LineupMatcher, coerce_members
from matching.errors import InputShapeError, MatchingError
from matching.models import AllocationResult, CatalogMember, ListenerProfile, SlotAssignment
from matching.normalizer import build_profile

__all__ = [
    "LineupMatcher", "coerce_members",
    "InputShapeError", "MatchingError",
    "AllocationResult", "CatalogMember", "ListenerProfile", "SlotAssignment",
    "build_profile",
]
