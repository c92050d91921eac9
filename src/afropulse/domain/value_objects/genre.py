"""Artist allow-lists and genre categorisation for the African catalog."""

# Artists that get the full prominence bonus in the catalog buzz score.
TOP_ARTISTS: tuple[str, ...] = (
    "burna boy",
    "davido",
    "wizkid",
    "rema",
    "tems",
    "ayra starr",
    "asake",
    "tyla",
)

AMAPIANO_ARTISTS: tuple[str, ...] = (
    "tyla",
    "uncle waffles",
    "kabza de small",
    "dj maphorisa",
    "focalistic",
)

ALTE_ARTISTS: tuple[str, ...] = ("odunsi", "santi", "lady donli", "tems", "ayra starr")

HIGHLIFE_ARTISTS: tuple[str, ...] = ("flavour", "phyno", "kcee", "timaya")

GENRES: tuple[str, ...] = ("Afrobeats", "Amapiano", "Alté", "Highlife")


def _mentions_any(text: str, names: tuple[str, ...]) -> bool:
    return any(name in text for name in names)


def is_top_artist(artist: str | None, top_artists: tuple[str, ...] = TOP_ARTISTS) -> bool:
    """Substring check, so "Burna Boy & Ed Sheeran" still counts."""
    if not artist:
        return False
    lowered = artist.lower()
    return _mentions_any(lowered, tuple(name.lower() for name in top_artists))


def categorize_genre(artist: str | None, title: str | None) -> str:
    """Pick a display genre from artist and title.

    Hey future me - order matters! Tyla is both top-artist and Amapiano,
    Tems/Ayra Starr are Alté. Amapiano wins first, then Alté, then Highlife.
    """
    artist_name = (artist or "").lower()
    track_name = (title or "").lower()

    if (
        _mentions_any(artist_name, AMAPIANO_ARTISTS)
        or "amapiano" in track_name
        or "piano" in track_name
    ):
        return "Amapiano"
    if _mentions_any(artist_name, ALTE_ARTISTS):
        return "Alté"
    if _mentions_any(artist_name, HIGHLIFE_ARTISTS):
        return "Highlife"
    return "Afrobeats"


__all__ = [
    "TOP_ARTISTS",
    "AMAPIANO_ARTISTS",
    "ALTE_ARTISTS",
    "HIGHLIFE_ARTISTS",
    "GENRES",
    "is_top_artist",
    "categorize_genre",
]
