import json
import os
from typing import Any, Dict, Optional

from .errors import ConfigError
from .token_manager import DEFAULT_TOKEN_URL

CONFIG_PATH = "config.json"

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"

# Default client options
DEFAULT_OPTIONS = {
    # None means "not set": token auto-fetch stays on unless explicitly False.
    "auto_fetch_token": None,
    "headers": {
        "Authorization": "",
        "Accept": "application/json",
    },

    # Spotify endpoints (ids are appended to the entity urls)
    "token_url": DEFAULT_TOKEN_URL,
    "track_url": f"{SPOTIFY_API_BASE_URL}/tracks/",
    "playlist_url": f"{SPOTIFY_API_BASE_URL}/playlists/",
    "album_url": f"{SPOTIFY_API_BASE_URL}/albums/",
    "artist_url": f"{SPOTIFY_API_BASE_URL}/artists/",

    # Paging + transport
    "page_limit": 50,
    "timeout": 30.0,
}

# Validation rules for option fields
OPTIONS_SCHEMA = {
    "auto_fetch_token": {"type": (bool, type(None)), "required": False},
    "headers": {"type": dict, "required": False, "element_type": str},
    "token_url": {"type": str, "required": True},
    "track_url": {"type": str, "required": True},
    "playlist_url": {"type": str, "required": True},
    "album_url": {"type": str, "required": True},
    "artist_url": {"type": str, "required": True},
    "page_limit": {"type": int, "required": False, "min": 1, "max": 50},
    "timeout": {"type": (int, float), "required": False, "min": 1, "max": 300},
}

# camelCase spellings accepted as aliases
CAMEL_CASE_ALIASES = {
    "autoFetchToken": "auto_fetch_token",
    "tokenUrl": "token_url",
    "trackUrl": "track_url",
    "playlistUrl": "playlist_url",
    "albumUrl": "album_url",
    "artistUrl": "artist_url",
    "pageLimit": "page_limit",
}


def normalize_keys(options: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``options`` with camelCase keys renamed to snake_case."""
    return {CAMEL_CASE_ALIASES.get(k, k): v for k, v in (options or {}).items()}


def validate_options(options: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate options against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key in options:
        if key not in OPTIONS_SCHEMA:
            errors.append(f"Unknown option: {key}")

    for key, rules in OPTIONS_SCHEMA.items():
        # Check required fields
        if rules.get("required", False) and key not in options:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in options:
            continue

        value = options[key]

        # Type check (bool is an int subclass, never accept it for numbers)
        expected_type = rules.get("type")
        bool_for_number = isinstance(value, bool) and bool not in (
            expected_type if isinstance(expected_type, tuple) else (expected_type,)
        )
        if expected_type and (not isinstance(value, expected_type) or bool_for_number):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
            continue

        # Mapping value type check (headers must map str -> str)
        if isinstance(value, dict) and "element_type" in rules:
            elem_type = rules["element_type"]
            bad = [k for k, v in value.items() if not isinstance(k, str) or not isinstance(v, elem_type)]
            if bad:
                errors.append(f"Field '{key}' must map str to {elem_type.__name__}, got invalid entries: {bad}")
                continue

        if isinstance(value, str) and rules.get("required", False) and not value.strip():
            errors.append(f"Field '{key}' must not be empty")

        # Range check for numeric values
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    return len(errors) == 0, errors


def build_options(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Apply ``overrides`` on top of the defaults and validate the result.

    Raises:
        ConfigError: unknown keys or values that break the schema.
    """
    options = {k: (dict(v) if isinstance(v, dict) else v) for k, v in DEFAULT_OPTIONS.items()}
    for key, value in normalize_keys(overrides or {}).items():
        options[key] = dict(value) if isinstance(value, dict) else value

    is_valid, errors = validate_options(options)
    if not is_valid:
        raise ConfigError(f"Invalid client options: {', '.join(errors)}")

    return options


def load_options(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load client options from a JSON file, applying defaults for missing fields."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file {path} not found.")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    return build_options(data)


def auto_fetch_enabled(options: Dict[str, Any]) -> bool:
    """Only an explicit False turns token auto-fetch off."""
    return options.get("auto_fetch_token") is not False
