import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from config import settings
from matching.engine import LineupMatcher
from matching.errors import InputShapeError
from providers.catalog_store import CatalogStore, load_catalog_file
from providers.spotify import SpotifyTasteClient

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "no_taste_data": "No usable music data for this listener.",
    "no_candidates": "No catalog members are eligible right now.",
    "no_matches": "Nobody on the roster is a strong enough match.",
}


def _build_parser():
    parser = argparse.ArgumentParser(
        description="Build a lineup of catalog members ranked by how well their theme songs fit a listener's taste."
    )
    parser.add_argument("--profile", type=str, default="", help="Listener payload JSON (top_tracks, top_artists, liked_tracks, genres).")
    parser.add_argument("--live", action="store_true", help="Fetch the listener payload from Spotify using SPOTIFY_ACCESS_TOKEN.")
    parser.add_argument("--catalog", type=str, default="", help="Catalog JSON file (list of members).")
    parser.add_argument("--catalog-db", type=str, default="", help=f"Catalog SQLite database (default: {settings.CATALOG_DB_PATH}).")
    parser.add_argument("--import-catalog", type=str, default="", help="Import a catalog JSON file into the database and exit.")
    parser.add_argument("--slots", type=str, default=",".join(settings.DEFAULT_SLOTS), help="Comma-separated slot labels in priority order.")
    parser.add_argument("--team-key", type=str, default=settings.DEFAULT_TEAM_KEY, help="Team whose games played scale the playing-time check.")
    parser.add_argument("--check-liked", action="store_true", help="Confirm liked status of catalog songs with Spotify.")
    parser.add_argument("--json", action="store_true", help="Print raw JSON payload instead of formatted rows.")
    return parser


def _print_rows(result):
    if result.is_empty:
        print(STATUS_MESSAGES.get(result.status, "No lineup could be built."))
        return
    print(f"Lineup ({result.status}):")
    for assignment in result.assignments:
        song = assignment.candidate.best_song.song
        artists = ", ".join(a.name for a in song.artists)
        print(
            f"  {assignment.slot:<3} {assignment.member.name:<24} "
            f"{song.title} - {artists}  [{assignment.final_score:.3f}] {assignment.reason} {assignment.details}".rstrip()
        )
    if result.unfilled_slots:
        print(f"Unfilled: {', '.join(result.unfilled_slots)}")


def main(argv=None):
    args = _build_parser().parse_args(argv)
    store = CatalogStore(args.catalog_db or None) if (args.catalog_db or not args.catalog) else None

    if args.import_catalog:
        store = store or CatalogStore()
        count = store.import_json(args.import_catalog)
        print(f"Imported {count} members.")
        return 0

    taste_client = SpotifyTasteClient() if (args.live or args.check_liked) else None
    matcher = LineupMatcher(
        catalog_source=store,
        liked_checker=taste_client.check_tracks_liked if (taste_client and args.check_liked) else None,
        team_key=args.team_key,
    )
    members = load_catalog_file(args.catalog) if args.catalog else None
    slots = [s.strip() for s in args.slots.split(",") if s.strip()]

    try:
        if args.live:
            result = asyncio.run(matcher.match_with_provider(taste_client, slots=slots, members=members))
        else:
            if not args.profile:
                print("Either --profile or --live is required.")
                return 2
            with open(args.profile, "r", encoding="utf-8") as f:
                raw_profile = json.load(f)
            result = asyncio.run(matcher.match_raw(raw_profile, slots=slots, members=members))
    except InputShapeError as e:
        logger.exception("Lineup match failed")
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_rows(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
