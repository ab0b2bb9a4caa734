from functools import lru_cache

GENRE_FAMILIES = {
    "hip hop": {"rap", "trap", "drill", "hiphop", "hip-hop"},
    "rock": {"metal", "punk", "grunge", "hard rock", "classic rock", "alternative rock"},
    "pop": {"dance", "electronic", "edm", "house", "dance pop"},
    "r&b": {"soul", "funk", "rnb", "urban contemporary"},
    "country": {"folk", "bluegrass", "americana"},
    "jazz": {"swing", "blues", "smooth jazz"},
    "classical": {"orchestral", "symphony", "chamber music"},
    "reggae": {"reggaeton", "dancehall"},
    "latin": {"salsa", "merengue", "bachata", "cumbia"},
    "indie": {"indie pop", "indie rock", "alternative"},
}


def _in_family(a: str, b: str) -> bool:
    for head, members in GENRE_FAMILIES.items():
        if (a == head and b in members) or (b == head and a in members):
            return True
        if a in members and b in members:
            return True
    return False


@lru_cache(maxsize=4096)
def _similar(a: str, b: str) -> bool:
    if a == b:
        return True
    if a in b or b in a:
        return True
    return _in_family(a, b)


def genres_similar(genre1: str, genre2: str) -> bool:
    """Exact, substring or same-family match. Symmetric; results are memoized."""
    a = (genre1 or "").strip().lower()
    b = (genre2 or "").strip().lower()
    if not a or not b:
        return False
    # Order the pair so (a, b) and (b, a) share a cache slot.
    if b < a:
        a, b = b, a
    return _similar(a, b)
