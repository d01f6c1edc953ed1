"""Spotify catalog lookups (playlists, albums, tracks, artists).

Accepts open.spotify.com urls or bare ids, keeps an anonymous web player
token fresh and merges multi-page results.
"""

from .client import SpotifyClient
from .data_loader import AlbumTracksLoader, ArtistAlbumsLoader
from .errors import ConfigError, InvalidReference, ProtocolError, RemoteError, SchemaError, SpotifyLookupError
from .identifiers import EntityKind, resolve, resolve_id
from .models import Album, Artist, Image, Page, Playlist, PlaylistItem, Track
from .token_manager import TokenInfo, TokenManager

__all__ = [
    "SpotifyClient",
    "AlbumTracksLoader",
    "ArtistAlbumsLoader",
    "SpotifyLookupError",
    "InvalidReference",
    "ProtocolError",
    "SchemaError",
    "RemoteError",
    "ConfigError",
    "EntityKind",
    "resolve",
    "resolve_id",
    "Album",
    "Artist",
    "Image",
    "Page",
    "Playlist",
    "PlaylistItem",
    "Track",
    "TokenInfo",
    "TokenManager",
]
