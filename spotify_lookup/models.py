"""Typed records for the JSON objects returned by the Spotify Web API.

Only the fields this package relies on are required. Everything else is read
loosely and the full payload is kept on ``raw`` for callers who need more.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, List, Optional, TypeVar

from .errors import SchemaError

if TYPE_CHECKING:
    from .data_loader import AlbumTracksLoader, ArtistAlbumsLoader


T = TypeVar("T")


def _require_object(payload: Any, kind: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise SchemaError(f"Expected a {kind} object, got {type(payload).__name__}")
    return payload


def _require_keys(payload: Dict[str, Any], kind: str, *keys: str) -> None:
    missing = [k for k in keys if k not in payload]
    if missing:
        raise SchemaError(f"{kind} object is missing: {', '.join(missing)}")


def _external_url(payload: Dict[str, Any]) -> Optional[str]:
    urls = payload.get("external_urls")
    return urls.get("spotify") if isinstance(urls, dict) else None


def _list_of(values: Any, parse: Callable[[Any], T]) -> List[T]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise SchemaError(f"Expected a list, got {type(values).__name__}")
    return [parse(v) for v in values]


@dataclass
class Image:
    url: str
    height: Optional[int] = None
    width: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Any) -> "Image":
        data = _require_object(payload, "image")
        _require_keys(data, "image", "url")
        return cls(url=data["url"], height=data.get("height"), width=data.get("width"))


@dataclass
class Artist:
    id: Optional[str]
    name: str
    uri: Optional[str] = None
    href: Optional[str] = None
    external_url: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    popularity: Optional[int] = None
    followers: Optional[int] = None
    images: List[Image] = field(default_factory=list)
    albums: Optional["ArtistAlbumsLoader"] = field(default=None, repr=False, compare=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: Any) -> "Artist":
        data = _require_object(payload, "artist")
        _require_keys(data, "artist", "id", "name")
        followers = data.get("followers")
        return cls(
            id=data["id"],
            name=data["name"],
            uri=data.get("uri"),
            href=data.get("href"),
            external_url=_external_url(data),
            genres=list(data.get("genres") or []),
            popularity=data.get("popularity"),
            followers=followers.get("total") if isinstance(followers, dict) else None,
            images=_list_of(data.get("images"), Image.from_api),
            raw=data,
        )


@dataclass
class Album:
    id: Optional[str]
    name: str
    album_type: Optional[str] = None
    album_group: Optional[str] = None
    uri: Optional[str] = None
    href: Optional[str] = None
    external_url: Optional[str] = None
    release_date: Optional[str] = None
    release_date_precision: Optional[str] = None
    total_tracks: Optional[int] = None
    available_markets: List[str] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    tracks: Optional["AlbumTracksLoader"] = field(default=None, repr=False, compare=False)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: Any) -> "Album":
        data = _require_object(payload, "album")
        _require_keys(data, "album", "id", "name")
        return cls(
            id=data["id"],
            name=data["name"],
            album_type=data.get("album_type"),
            album_group=data.get("album_group"),
            uri=data.get("uri"),
            href=data.get("href"),
            external_url=_external_url(data),
            release_date=data.get("release_date"),
            release_date_precision=data.get("release_date_precision"),
            total_tracks=data.get("total_tracks"),
            available_markets=list(data.get("available_markets") or []),
            artists=_list_of(data.get("artists"), Artist.from_api),
            images=_list_of(data.get("images"), Image.from_api),
            raw=data,
        )


@dataclass
class Track:
    # Local files have no Spotify id.
    id: Optional[str]
    name: str
    uri: Optional[str] = None
    href: Optional[str] = None
    external_url: Optional[str] = None
    duration_ms: Optional[int] = None
    explicit: bool = False
    is_local: bool = False
    disc_number: Optional[int] = None
    track_number: Optional[int] = None
    popularity: Optional[int] = None
    preview_url: Optional[str] = None
    isrc: Optional[str] = None
    artists: List[Artist] = field(default_factory=list)
    album: Optional[Album] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: Any) -> "Track":
        data = _require_object(payload, "track")
        _require_keys(data, "track", "id", "name")
        external_ids = data.get("external_ids")
        album = data.get("album")
        return cls(
            id=data["id"],
            name=data["name"],
            uri=data.get("uri"),
            href=data.get("href"),
            external_url=_external_url(data),
            duration_ms=data.get("duration_ms"),
            explicit=bool(data.get("explicit", False)),
            is_local=bool(data.get("is_local", False)),
            disc_number=data.get("disc_number"),
            track_number=data.get("track_number"),
            popularity=data.get("popularity"),
            preview_url=data.get("preview_url"),
            isrc=external_ids.get("isrc") if isinstance(external_ids, dict) else None,
            artists=_list_of(data.get("artists"), Artist.from_api),
            album=Album.from_api(album) if album is not None else None,
            raw=data,
        )

    @property
    def artist_names(self) -> str:
        return ", ".join(a.name for a in self.artists if a.name)


@dataclass
class PlaylistItem:
    # Removed tracks come back as null.
    track: Optional[Track]
    added_at: Optional[str] = None
    added_by: Optional[str] = None
    is_local: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: Any) -> "PlaylistItem":
        data = _require_object(payload, "playlist item")
        track = data.get("track")
        added_by = data.get("added_by")
        return cls(
            track=Track.from_api(track) if track is not None else None,
            added_at=data.get("added_at"),
            added_by=added_by.get("id") if isinstance(added_by, dict) else None,
            is_local=bool(data.get("is_local", False)),
            raw=data,
        )


@dataclass
class Page(Generic[T]):
    """One page of a Spotify paging object, or several merged pages."""

    items: List[T]
    next: Optional[str] = None
    previous: Optional[str] = None
    href: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    total: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Any, parse_item: Callable[[Any], T]) -> "Page[T]":
        data = _require_object(payload, "paging")
        _require_keys(data, "paging", "items")
        return cls(
            items=_list_of(data["items"], parse_item),
            next=data.get("next"),
            previous=data.get("previous"),
            href=data.get("href"),
            limit=data.get("limit"),
            offset=data.get("offset"),
            total=data.get("total"),
        )


@dataclass
class Playlist:
    id: str
    name: str
    tracks: Page[PlaylistItem]
    description: Optional[str] = None
    collaborative: bool = False
    public: Optional[bool] = None
    snapshot_id: Optional[str] = None
    uri: Optional[str] = None
    href: Optional[str] = None
    external_url: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    followers: Optional[int] = None
    images: List[Image] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: Any) -> "Playlist":
        data = _require_object(payload, "playlist")
        _require_keys(data, "playlist", "id", "name", "tracks")
        owner = data.get("owner") if isinstance(data.get("owner"), dict) else {}
        followers = data.get("followers")
        return cls(
            id=data["id"],
            name=data["name"],
            tracks=Page.from_api(data["tracks"], PlaylistItem.from_api),
            description=data.get("description"),
            collaborative=bool(data.get("collaborative", False)),
            public=data.get("public"),
            snapshot_id=data.get("snapshot_id"),
            uri=data.get("uri"),
            href=data.get("href"),
            external_url=_external_url(data),
            owner_id=owner.get("id"),
            owner_name=owner.get("display_name"),
            followers=followers.get("total") if isinstance(followers, dict) else None,
            images=_list_of(data.get("images"), Image.from_api),
            raw=data,
        )
