#!/usr/bin/env python3
"""Lookup menu tests.

Runs the interactive lookup flow with:
- questionary replaced by a queue of canned answers
- Spotify replaced by an httpx.MockTransport (no network calls)

Usage:
  python3 -m unittest tests.test_lookup_menu

"""

from __future__ import annotations

import asyncio
import sys
import types
import unittest
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

# Ensure imports like `menus.*` and `spotify_lookup.*` work even when executed from repo root.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import menus.lookup_menu as lm
from spotify_lookup import SpotifyClient
from spotify_lookup.config import build_options
from spotify_lookup.identifiers import EntityKind

API = "https://api.spotify.com/v1"


# -------------------------
# Simple questionary mocks
# -------------------------

@dataclass
class _Askable:
    """Mimic questionary prompt objects that return a value from .ask()."""

    value: Any

    def ask(self):
        return self.value


class _QuestionaryMock:
    """A minimal questionary stub that returns queued answers and captures args."""

    def __init__(self):
        self._queue: list[Any] = []
        self.select_messages: list[str] = []
        self.text_messages: list[str] = []
        self.confirm_messages: list[str] = []
        self.last_select_choices = None

    def queue(self, *answers: Any) -> None:
        self._queue.extend(list(answers))

    def _pop(self) -> Any:
        if not self._queue:
            raise AssertionError("QuestionaryMock queue exhausted")
        return self._queue.pop(0)

    def select(self, message: str, choices: list[Any]):
        self.select_messages.append(message)
        self.last_select_choices = choices
        return _Askable(self._pop())

    def text(self, message: str):
        self.text_messages.append(message)
        return _Askable(self._pop())

    def confirm(self, message: str, default: bool = True):
        self.confirm_messages.append(message)
        return _Askable(self._pop())


class _PatchModuleAttr:
    """Context manager to temporarily patch module attributes."""

    def __init__(self, module: types.ModuleType, attr: str, value: Any):
        self.module = module
        self.attr = attr
        self.value = value
        self._old = None

    def __enter__(self):
        self._old = getattr(self.module, self.attr)
        setattr(self.module, self.attr, self.value)

    def __exit__(self, exc_type, exc, tb):
        setattr(self.module, self.attr, self._old)


# -------------------------
# Helpers
# -------------------------


def _track(idx: int) -> dict:
    return {
        "id": f"track{idx}",
        "name": f"Song {idx}",
        "artists": [{"id": "artist1", "name": "Artist"}],
        "duration_ms": 61000 * idx,
        "track_number": idx,
    }


class _FakeSpotify:
    def __init__(self):
        self.requests: list[str] = []
        self.routes = {
            "https://open.spotify.com/get_access_token?reason=transport&productType=web_player": {
                "accessToken": "tok",
                "accessTokenExpirationTimestampMs": 99999999999999,
            },
            f"{API}/albums/album1": {
                "id": "album1",
                "name": "Album 1",
                "release_date": "2021-05-01",
                "total_tracks": 3,
                "artists": [{"id": "artist1", "name": "Artist"}],
            },
            f"{API}/albums/album1/tracks?limit=50": {"items": [_track(1), _track(2)], "next": f"{API}/albums/album1/tracks?limit=50&offset=2"},
            f"{API}/albums/album1/tracks?limit=50&offset=2": {"items": [_track(3)], "next": None},
            f"{API}/playlists/pl1": {
                "id": "pl1",
                "name": "Road Trip",
                "owner": {"id": "owner", "display_name": "Owner"},
                "tracks": {"items": [{"track": _track(1)}, {"track": None}], "next": None, "total": 2},
            },
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        body = self.routes.get(str(request.url))
        if body is None:
            return httpx.Response(404, json={"error": {"status": 404, "message": "Non existing id"}})
        return httpx.Response(200, json=body)

    def client_factory(self, options: dict) -> SpotifyClient:
        return SpotifyClient(options, transport=httpx.MockTransport(self.handler))


class _LogRecorder:
    def __init__(self):
        self.info: list[str] = []
        self.success: list[str] = []
        self.warning: list[str] = []
        self.error: list[str] = []

    def patches(self):
        return (
            _PatchModuleAttr(lm, "log_info", self.info.append),
            _PatchModuleAttr(lm, "log_success", self.success.append),
            _PatchModuleAttr(lm, "log_warning", self.warning.append),
            _PatchModuleAttr(lm, "log_error", self.error.append),
        )


# -------------------------
# Tests
# -------------------------


class TestLookupMenu(unittest.TestCase):
    def _run_menu(self, q: _QuestionaryMock, fake: _FakeSpotify, logs: _LogRecorder) -> None:
        p_info, p_success, p_warning, p_error = logs.patches()
        with (
            _PatchModuleAttr(lm, "questionary", q),
            _PatchModuleAttr(lm, "SpotifyClient", fake.client_factory),
            p_info,
            p_success,
            p_warning,
            p_error,
        ):
            lm.lookup_menu(build_options())

    def test_album_lookup_prints_all_tracks(self):
        q = _QuestionaryMock()
        q.queue("Album", "https://open.spotify.com/album/album1?si=abc", True, "Back")
        fake = _FakeSpotify()
        logs = _LogRecorder()

        self._run_menu(q, fake, logs)

        self.assertEqual(logs.error, [])
        self.assertEqual(logs.success, ["Loaded album https://open.spotify.com/album/album1?si=abc"])
        self.assertIn("💿 Artist - Album 1 (2021-05-01)", logs.info)
        self.assertIn("  3 of 3 tracks loaded", logs.info)
        self.assertIn("    3. Song 3 (3:03)", logs.info)
        self.assertEqual(q.last_select_choices, ["Playlist", "Album", "Track", "Artist", "Back"])
        self.assertEqual(len(q.confirm_messages), 1)

    def test_wrong_kind_url_reports_error_and_keeps_looping(self):
        q = _QuestionaryMock()
        q.queue("Playlist", "https://open.spotify.com/album/album1", True, "Back")
        fake = _FakeSpotify()
        logs = _LogRecorder()

        self._run_menu(q, fake, logs)

        self.assertEqual(logs.error, ["Lookup failed: Not a Spotify url or id"])
        self.assertEqual(len(logs.warning), 1)
        self.assertEqual(fake.requests, [])
        self.assertEqual(len(q.select_messages), 2)

    def test_remote_error_reported(self):
        q = _QuestionaryMock()
        q.queue("Track", "missing", None)
        fake = _FakeSpotify()
        logs = _LogRecorder()

        self._run_menu(q, fake, logs)

        self.assertEqual(len(logs.error), 1)
        self.assertIn("Non existing id", logs.error[0])
        self.assertEqual(q.confirm_messages, [])

    def test_empty_input_skipped(self):
        q = _QuestionaryMock()
        q.queue("Artist", "   ", "Back")
        fake = _FakeSpotify()
        logs = _LogRecorder()

        self._run_menu(q, fake, logs)

        self.assertEqual(logs.warning, ["Nothing entered."])
        self.assertEqual(fake.requests, [])


class TestRunLookup(unittest.TestCase):
    def test_playlist_summary_marks_unavailable_items(self):
        fake = _FakeSpotify()

        lines = asyncio.run(
            lm.run_lookup(build_options(), EntityKind.PLAYLIST, "pl1", client_factory=fake.client_factory)
        )

        self.assertEqual(lines[0], "📃 Road Trip by Owner")
        self.assertEqual(lines[1], "  2 of 2 tracks loaded")
        self.assertIn("    1. Artist - Song 1", lines)
        self.assertIn("    2. <unavailable>", lines)

    def test_album_first_page_only(self):
        fake = _FakeSpotify()

        lines = asyncio.run(
            lm.run_lookup(build_options(), EntityKind.ALBUM, "album1", load_all=False, client_factory=fake.client_factory)
        )

        self.assertIn("  2 of 3 tracks loaded", lines)
        self.assertNotIn(f"{API}/albums/album1/tracks?limit=50&offset=2", fake.requests)


if __name__ == "__main__":
    unittest.main(verbosity=2)
