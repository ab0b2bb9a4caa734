from providers.catalog_store import CatalogStore, dedupe_songs, load_catalog_file
from providers.spotify import SpotifyTasteClient

__all__ = ["CatalogStore", "dedupe_songs", "load_catalog_file", "SpotifyTasteClient"]
