class MatchingError(Exception):
    pass


class InputShapeError(MatchingError, ValueError):
    """The profile or catalog could not be obtained, or is not the expected container."""
