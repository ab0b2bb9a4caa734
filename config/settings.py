import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"

CATALOG_DB_PATH = Path(os.getenv("CATALOG_DB_PATH", DATA_DIR / "catalog.db"))

SPOTIFY_API_BASE = os.getenv("SPOTIFY_API_BASE", "https://api.spotify.com/v1")
SPOTIFY_ACCESS_TOKEN = os.getenv("SPOTIFY_ACCESS_TOKEN", "")
EXTERNAL_TIMEOUT_SECONDS = float(os.getenv("EXTERNAL_TIMEOUT_SECONDS", 10))

DEFAULT_TEAM_KEY = os.getenv("DEFAULT_TEAM_KEY", "det")
DEFAULT_SLOTS = ["SP", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF", "DH", "RP"]

TIME_FRAMES = ["short_term", "medium_term", "long_term"]
TIME_FRAME_LABELS = {
    "short_term": "past 4 weeks",
    "medium_term": "past 6 months",
    "long_term": "all time",
}
TOP_ITEMS_LIMIT = 50
SAVED_TRACKS_LIMIT = 50

MIN_MATCH_SCORE = float(os.getenv("MIN_MATCH_SCORE", 0.1))

SCORE_WEIGHTS = {
    "TIME_FRAME": {
        "short_term": 0.01,
        "medium_term": 0.05,
        "long_term": 0.03,
    },
    "RANK": [
        (10, 0.2),
        (25, 0.1),
        (50, 0.0),
    ],
    "ARTIST_RANK_BONUS": {
        "short_term": [(5, 0.2), (15, 0.1), (30, 0.0)],
        "medium_term": [(10, 0.2), (25, 0.1), (50, 0.0)],
        "long_term": [(10, 0.2), (25, 0.1), (50, 0.0)],
    },
    "MATCH_TYPE": {
        "LIKED_SONG": 1.4,
        "TOP_SONG": 1.5,
        "TOP_ARTIST": 0.8,
        "FEATURE": 0.6,
        "GENRE": 0.4,
    },
    # Index is the number of earlier picks of the same primary artist.
    "ARTIST_DIVERSITY_PENALTY": [0.0, 0.4, 0.6, 0.7, 0.8],
    "MULTIPLE_MATCHES_BONUS": 0.03,
    "GENRE_ARTIST_LIKED_BONUS": 0.05,
    "EXACT_GENRE_MATCH_BONUS": 0.05,
    "TOP_GENRE_BONUS": 0.05,
    "GENRE_SCORE_HEADROOM": 0.2,
}

FEATURED_ARTIST_MULTIPLIER = 0.8
SECONDARY_ASPECT_WEIGHT = 0.05
ASPECT_SCORE_FLOOR = 0.001
REASON_MAX_CHARS = 40
BONUS_REASON_MAX_CHARS = 30

DIVERSITY_THRESHOLD = int(os.getenv("DIVERSITY_THRESHOLD", 2))
DIVERSITY_BOOST_AMOUNT = float(os.getenv("DIVERSITY_BOOST_AMOUNT", 0.075))
NUM_USER_TOP_GENRES = int(os.getenv("NUM_USER_TOP_GENRES", 5))
MAX_USER_GENRES = 10
TOP_GENRE_COUNT = 3

STATS_BONUS = {
    "MAX": 0.02,
    "OPS_AVERAGE": 0.711,
    "OPS_ELITE": 0.900,
    "ERA_AVERAGE": 3.90,
    "ERA_ELITE": 2.50,
}

MIN_GAMES_PLAYED_THRESHOLD = int(os.getenv("MIN_GAMES_PLAYED_THRESHOLD", 10))
HITTER_PA_PER_GAME_THRESHOLD = float(os.getenv("HITTER_PA_PER_GAME_THRESHOLD", 1.0))
PITCHER_IP_PER_GAME_THRESHOLD = float(os.getenv("PITCHER_IP_PER_GAME_THRESHOLD", 0.4))
DEFAULT_GAMES_PLAYED = int(os.getenv("DEFAULT_GAMES_PLAYED", MIN_GAMES_PLAYED_THRESHOLD))

LIKED_CHECK_BATCH_SIZE = 50
LIKED_CHECK_MAX_CONCURRENT = int(os.getenv("LIKED_CHECK_MAX_CONCURRENT", 5))

PLACEHOLDER_SONG_TITLES = {"", "no walkup song", "unknown song"}
DEFAULT_ALBUM_ART = "https://i.scdn.co/image/ab67616d00001e02ff9ca10b55ce82ae553c8228"
