from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .client import SpotifyClient
    from .models import Album, Track


class AlbumTracksLoader:
    """Deferred track list of one album.

    ``await album.tracks()`` and ``await album.tracks.load()`` are the same
    call. Pass ``all=False`` to stop after the first page. Nothing is cached:
    every call goes back to Spotify.
    """

    def __init__(self, client: "SpotifyClient", album_id: str):
        self.client = client
        self.album_id = album_id

    async def load(self, all: bool = True) -> List["Track"]:
        return await self.client.album_tracks(self.album_id, all=all)

    async def __call__(self, all: bool = True) -> List["Track"]:
        return await self.load(all=all)

    def __repr__(self) -> str:
        return f"AlbumTracksLoader(album_id={self.album_id!r})"


class ArtistAlbumsLoader:
    """Deferred album list of one artist; each album gets its own AlbumTracksLoader."""

    def __init__(self, client: "SpotifyClient", artist_id: str):
        self.client = client
        self.artist_id = artist_id

    async def load(self, all: bool = True) -> List["Album"]:
        return await self.client.artist_albums(self.artist_id, all=all)

    async def __call__(self, all: bool = True) -> List["Album"]:
        return await self.load(all=all)

    def __repr__(self) -> str:
        return f"ArtistAlbumsLoader(artist_id={self.artist_id!r})"
