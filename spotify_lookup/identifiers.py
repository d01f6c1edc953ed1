import enum
import re
from typing import Any, Optional, Pattern

from .errors import InvalidReference


PLAYLIST_URL_PATTERN = re.compile(r"^https://open\.spotify\.com/playlist/.+$")
ALBUM_URL_PATTERN = re.compile(r"^https://open\.spotify\.com/album/.+$")
TRACK_URL_PATTERN = re.compile(r"^https://open\.spotify\.com/track/.+$")
ARTIST_URL_PATTERN = re.compile(r"^https://open\.spotify\.com/artist/.+$")

# Spotify ids are base62; \w is restricted to ASCII like the web player's check.
ID_PATTERN = re.compile(r"^[\w\d]+$", re.ASCII)


class EntityKind(enum.Enum):
    PLAYLIST = "playlist"
    ALBUM = "album"
    TRACK = "track"
    ARTIST = "artist"


_URL_PATTERNS = {
    EntityKind.PLAYLIST: PLAYLIST_URL_PATTERN,
    EntityKind.ALBUM: ALBUM_URL_PATTERN,
    EntityKind.TRACK: TRACK_URL_PATTERN,
    EntityKind.ARTIST: ARTIST_URL_PATTERN,
}


def url_pattern_for(kind: EntityKind) -> Pattern[str]:
    return _URL_PATTERNS[EntityKind(kind)]


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None


def _id_from_url(url: str) -> str:
    if url.endswith("/"):
        url = url[:-1]

    start = url.rfind("/") + 1
    query_at = url.find("?")
    return url[start:] if query_at == -1 else url[start:query_at]


def resolve_id(url_or_id: Any, pattern: Pattern[str]) -> str:
    """Return the Spotify id contained in ``url_or_id``.

    ``url_or_id`` may be an open.spotify.com url matching ``pattern`` or a bare
    id. The extracted id is validated again, so a url for another entity kind
    (or with junk in its last path segment) is rejected instead of yielding a
    bogus id.

    Raises:
        InvalidReference: input is empty, unrecognized, or yields an invalid id.
    """

    if not url_or_id or not isinstance(url_or_id, str):
        raise InvalidReference()

    if pattern.match(url_or_id):
        candidate = _id_from_url(url_or_id)
    elif is_valid_id(url_or_id):
        candidate = url_or_id
    else:
        raise InvalidReference()

    if not is_valid_id(candidate):
        raise InvalidReference()

    return candidate


def resolve(url_or_id: Any, kind: EntityKind) -> str:
    return resolve_id(url_or_id, url_pattern_for(kind))


def is_spotify_url(value: Any, kind: Optional[EntityKind] = None) -> bool:
    """True when ``value`` looks like an open.spotify.com url (of ``kind``, if given)."""

    if not isinstance(value, str):
        return False
    kinds = [EntityKind(kind)] if kind is not None else list(EntityKind)
    return any(_URL_PATTERNS[k].match(value) for k in kinds)
