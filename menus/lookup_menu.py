import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import questionary

from spotify_lookup import SpotifyClient, SpotifyLookupError
from spotify_lookup.identifiers import EntityKind, is_spotify_url
from spotify_lookup.models import Album, Artist, Playlist, Track
from utils.logger import log_error, log_info, log_success, log_warning

KIND_CHOICES = {
    "Playlist": EntityKind.PLAYLIST,
    "Album": EntityKind.ALBUM,
    "Track": EntityKind.TRACK,
    "Artist": EntityKind.ARTIST,
}

# How many entries of a collection get printed
PREVIEW_SIZE = 10


def _format_duration(duration_ms: Any) -> str:
    if not isinstance(duration_ms, int) or duration_ms < 0:
        return "?:??"
    seconds = duration_ms // 1000
    return f"{seconds // 60}:{seconds % 60:02d}"


def _preview(lines: List[str], total: int) -> List[str]:
    out = lines[:PREVIEW_SIZE]
    if total > PREVIEW_SIZE:
        out.append(f"  ... and {total - PREVIEW_SIZE} more")
    return out


def summarize_track(track: Track) -> List[str]:
    album = f" [{track.album.name}]" if track.album else ""
    return [f"🎵 {track.artist_names} - {track.name}{album} ({_format_duration(track.duration_ms)})"]


def summarize_playlist(playlist: Playlist) -> List[str]:
    items = playlist.tracks.items
    lines = [
        f"📃 {playlist.name} by {playlist.owner_name or playlist.owner_id or 'unknown'}",
        f"  {len(items)} of {playlist.tracks.total if playlist.tracks.total is not None else '?'} tracks loaded",
    ]
    if playlist.tracks.next:
        lines.append("  (more pages available)")

    entries = []
    for i, item in enumerate(items, start=1):
        if item.track is None:
            entries.append(f"  {i:>3}. <unavailable>")
        else:
            entries.append(f"  {i:>3}. {item.track.artist_names} - {item.track.name}")
    return lines + _preview(entries, len(entries))


def summarize_album(album: Album, tracks: List[Track]) -> List[str]:
    artists = ", ".join(a.name for a in album.artists)
    lines = [
        f"💿 {artists} - {album.name} ({album.release_date or 'unknown date'})",
        f"  {len(tracks)} of {album.total_tracks if album.total_tracks is not None else '?'} tracks loaded",
    ]
    entries = [f"  {t.track_number or i:>3}. {t.name} ({_format_duration(t.duration_ms)})" for i, t in enumerate(tracks, start=1)]
    return lines + _preview(entries, len(entries))


def summarize_artist(artist: Artist, albums: List[Album]) -> List[str]:
    genres = ", ".join(artist.genres) if artist.genres else "no genres listed"
    lines = [
        f"🎤 {artist.name} ({genres})",
        f"  {len(albums)} releases loaded",
    ]
    entries = [f"  - {a.name} [{a.album_type or 'release'}, {a.release_date or '?'}]" for a in albums]
    return lines + _preview(entries, len(entries))


async def run_lookup(
    options: Dict[str, Any],
    kind: EntityKind,
    url_or_id: str,
    *,
    load_all: bool = True,
    client_factory: Optional[Callable[[Dict[str, Any]], SpotifyClient]] = None,
) -> List[str]:
    """Look up one entity and return printable summary lines."""

    factory = client_factory or SpotifyClient
    async with factory(options) as client:
        if kind is EntityKind.PLAYLIST:
            return summarize_playlist(await client.playlist(url_or_id, all=load_all))

        if kind is EntityKind.ALBUM:
            album = await client.album(url_or_id)
            return summarize_album(album, await album.tracks(all=load_all))

        if kind is EntityKind.ARTIST:
            artist = await client.artist(url_or_id)
            return summarize_artist(artist, await artist.albums(all=load_all))

        return summarize_track(await client.track(url_or_id))


def lookup_menu(options: Dict[str, Any]) -> None:
    """Prompt for lookups until the user goes back."""

    while True:
        choice = questionary.select(
            "🔎 Lookup Menu — What would you like to look up?",
            choices=list(KIND_CHOICES) + ["Back"],
        ).ask()

        if choice is None or choice == "Back":
            break

        kind = KIND_CHOICES[choice]
        value = questionary.text(f"Paste a Spotify {kind.value} URL or id:").ask()
        value = (value or "").strip()
        if not value:
            log_warning("Nothing entered.")
            continue

        if is_spotify_url(value) and not is_spotify_url(value, kind):
            log_warning(f"That looks like a Spotify URL for something other than a {kind.value}.")

        load_all = True
        if kind is not EntityKind.TRACK:
            load_all = bool(questionary.confirm("Load every page?", default=True).ask())

        try:
            lines = asyncio.run(run_lookup(options, kind, value, load_all=load_all))
        except SpotifyLookupError as e:
            log_error(f"Lookup failed: {e}")
            continue
        except httpx.HTTPError as e:
            log_error(f"Network error while talking to Spotify: {e}")
            continue

        log_success(f"Loaded {kind.value} {value}")
        for line in lines:
            log_info(line)
