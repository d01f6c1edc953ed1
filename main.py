import json
import logging
import os
import sys

from menus.lookup_menu import lookup_menu
from spotify_lookup.config import CONFIG_PATH, build_options, load_options
from spotify_lookup.errors import ConfigError
from utils.logger import log_error, log_info, setup_logging


def main() -> int:
    setup_logging(logging.DEBUG if os.environ.get("SPOTIFY_LOOKUP_DEBUG") else logging.INFO)

    try:
        if os.path.exists(CONFIG_PATH):
            options = load_options(CONFIG_PATH)
        else:
            log_info(f"No {CONFIG_PATH} found, using default options.")
            options = build_options()
    except json.JSONDecodeError as e:
        log_error(f"Config file contains invalid JSON: {e}")
        return 1
    except ConfigError as e:
        log_error(str(e))
        return 1

    lookup_menu(options)
    log_info("Exiting program...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
