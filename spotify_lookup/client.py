import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx

from .config import auto_fetch_enabled, build_options
from .data_loader import AlbumTracksLoader, ArtistAlbumsLoader
from .errors import ProtocolError, RemoteError, SchemaError
from .identifiers import EntityKind, resolve
from .models import Album, Artist, Playlist, Track
from .token_manager import NewTokenCallback, TokenManager

logger = logging.getLogger(__name__)


def _paging_of(page: Any) -> Dict[str, Any]:
    if not isinstance(page, dict):
        raise SchemaError(f"Expected a paging object, got {type(page).__name__}")
    # Playlist pages may come back wrapped in a playlist object.
    if isinstance(page.get("tracks"), dict):
        page = page["tracks"]
    if not isinstance(page.get("items"), list):
        raise SchemaError("Paging object has no items list")
    return page


def page_items(page: Any) -> List[Any]:
    return list(_paging_of(page)["items"])


def page_next(page: Any) -> Optional[str]:
    next_url = _paging_of(page).get("next")
    if next_url is not None and not isinstance(next_url, str):
        raise SchemaError(f"Paging cursor must be a url, got {type(next_url).__name__}")
    return next_url or None


class SpotifyClient:
    """Async Spotify catalog client (playlists, albums, tracks, artists).

    Accepts open.spotify.com urls or bare ids, keeps an anonymous web player
    token fresh and follows ``next`` cursors on multi-page endpoints.

    Design goals:
    - One authorized GET path shared by every endpoint
    - Pagination in one place, strictly sequential
    - No retries, no caching; every failure reaches the caller
    """

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.options = build_options(options)
        self.headers: Dict[str, str] = dict(self.options["headers"])
        self.page_limit = int(self.options["page_limit"])

        # An injected http_client stays owned by the caller; a transport is
        # used for the client this instance creates (and closes) itself.
        self._http = http_client
        self._owns_http = http_client is None
        self._transport = transport

        self.token_manager = TokenManager(
            self.fetch,
            token_url=self.options["token_url"],
            auto_refresh=auto_fetch_enabled(self.options),
            clock=clock,
        )

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def on_new_token(self, callback: Optional[NewTokenCallback]) -> None:
        """Register a callback receiving the raw token after every refresh."""
        self.token_manager.on_new_token(callback)

    async def ensure_token(self) -> None:
        await self.token_manager.ensure_valid()

    # -----------------
    # HTTP helpers
    # -----------------

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=float(self.options["timeout"]), transport=self._transport)
            self._owns_http = True
        return self._http

    def _request_headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        authorization = self.token_manager.authorization()
        if authorization:
            headers["Authorization"] = authorization
        return {k: v for k, v in headers.items() if v}

    async def fetch(self, url: str) -> Any:
        """GET ``url`` with the current credential and return the parsed JSON.

        Raises:
            ProtocolError: the response is not JSON.
            RemoteError: the response is JSON but the status is not 2xx.
        """

        logger.debug("GET %s", url)
        resp = await self._get_http().get(url, headers=self._request_headers())

        content_type = resp.headers.get("content-type") or ""
        if "application/json" not in content_type:
            raise ProtocolError(
                f"Spotify did not return a JSON response (HTTP {resp.status_code}, content-type {content_type!r})"
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ProtocolError(f"Spotify did not return a JSON response (HTTP {resp.status_code})") from e

        if not resp.is_success:
            raise RemoteError(payload, status_code=resp.status_code)

        return payload

    async def iter_pages(
        self,
        first_url: str,
        *,
        extract_next: Callable[[Any], Optional[str]] = page_next,
        all: bool = True,
    ) -> AsyncIterator[Any]:
        """Yield each page, following the ``next`` cursor until it runs out.

        Raises:
            ProtocolError: a cursor points back at a page already fetched.
        """

        seen = set()
        url: Optional[str] = first_url
        while url:
            if url in seen:
                raise ProtocolError(f"Spotify paging cursor loops back to {url}")
            seen.add(url)

            page = await self.fetch(url)
            yield page
            if not all:
                break
            url = extract_next(page)

    async def fetch_all_pages(
        self,
        first_url: str,
        *,
        extract_items: Callable[[Any], List[Any]] = page_items,
        extract_next: Callable[[Any], Optional[str]] = page_next,
        all: bool = True,
    ) -> List[Any]:
        """Fetch a paged endpoint and return its items in cursor order."""

        out: List[Any] = []
        pages = 0
        async for page in self.iter_pages(first_url, extract_next=extract_next, all=all):
            out.extend(extract_items(page))
            pages += 1

        if pages > 1:
            logger.info("Merged %d pages (%d items) from %s", pages, len(out), first_url)
        return out

    # -----------------
    # Entity lookups
    # -----------------

    async def playlist(self, url_or_id: Any, all: bool = True) -> Playlist:
        """Get a playlist; with ``all`` every page of its tracks is merged in."""

        playlist_id = resolve(url_or_id, EntityKind.PLAYLIST)
        await self.ensure_token()

        payload = await self.fetch(self.options["playlist_url"] + playlist_id)
        tracks = payload.get("tracks") if isinstance(payload, dict) else None
        next_url = tracks.get("next") if isinstance(tracks, dict) else None
        if all and next_url:
            rest = await self.fetch_all_pages(next_url)
            tracks.setdefault("items", []).extend(rest)
            tracks["next"] = None

        return Playlist.from_api(payload)

    async def album(self, url_or_id: Any) -> Album:
        """Get an album; ``album.tracks`` loads its track list on demand."""

        album_id = resolve(url_or_id, EntityKind.ALBUM)
        await self.ensure_token()

        album = Album.from_api(await self.fetch(self.options["album_url"] + album_id))
        album.tracks = AlbumTracksLoader(self, album_id)
        return album

    async def track(self, url_or_id: Any) -> Track:
        track_id = resolve(url_or_id, EntityKind.TRACK)
        await self.ensure_token()
        return Track.from_api(await self.fetch(self.options["track_url"] + track_id))

    async def artist(self, url_or_id: Any) -> Artist:
        """Get an artist; ``artist.albums`` loads its albums on demand."""

        artist_id = resolve(url_or_id, EntityKind.ARTIST)
        await self.ensure_token()

        artist = Artist.from_api(await self.fetch(self.options["artist_url"] + artist_id))
        artist.albums = ArtistAlbumsLoader(self, artist_id)
        return artist

    # -----------------
    # Sub-collections (fully paged unless all=False)
    # -----------------

    async def album_tracks(self, album_id: str, all: bool = True) -> List[Track]:
        await self.ensure_token()
        url = f"{self.options['album_url']}{album_id}/tracks?limit={self.page_limit}"
        return [Track.from_api(t) for t in await self.fetch_all_pages(url, all=all)]

    async def artist_albums(self, artist_id: str, all: bool = True) -> List[Album]:
        await self.ensure_token()
        url = f"{self.options['artist_url']}{artist_id}/albums?limit={self.page_limit}"

        albums: List[Album] = []
        for item in await self.fetch_all_pages(url, all=all):
            album = Album.from_api(item)
            album.tracks = AlbumTracksLoader(self, album.id)
            albums.append(album)
        return albums
