import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from .errors import SchemaError

logger = logging.getLogger(__name__)


DEFAULT_TOKEN_URL = "https://open.spotify.com/get_access_token?reason=transport&productType=web_player"

FetchJson = Callable[[str], Awaitable[Any]]
NewTokenCallback = Callable[[str], None]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TokenInfo:
    """Bearer credential handed out by the web player token endpoint."""

    access_token: str
    expires_at_ms: int

    @staticmethod
    def from_web_player_response(payload: Dict[str, Any]) -> "TokenInfo":
        """Convert the token endpoint JSON into TokenInfo.

        The endpoint returns:
        - accessToken
        - accessTokenExpirationTimestampMs (epoch millis, sometimes as a string)
        """

        if not isinstance(payload, dict):
            raise SchemaError(f"Token response was not an object: {payload!r}")

        token = payload.get("accessToken")
        if not isinstance(token, str) or not token:
            raise SchemaError("Token response is missing accessToken")

        try:
            expires_at = int(payload["accessTokenExpirationTimestampMs"])
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaError("Token response has no usable accessTokenExpirationTimestampMs") from e

        return TokenInfo(access_token=token, expires_at_ms=expires_at)

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at_ms


EMPTY_TOKEN = TokenInfo(access_token="", expires_at_ms=0)


class TokenManager:
    """Holds the shared credential and refreshes it when it goes stale.

    Not thread-safe. Coroutines sharing a client may both refresh an expired
    token; the last refresh wins.
    """

    def __init__(
        self,
        fetch_json: FetchJson,
        *,
        token_url: str = DEFAULT_TOKEN_URL,
        auto_refresh: bool = True,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._fetch_json = fetch_json
        self.token_url = token_url
        self.auto_refresh = auto_refresh
        self._clock = clock or now_ms
        self._token = EMPTY_TOKEN
        self._on_new_token: Optional[NewTokenCallback] = None

    @property
    def token(self) -> TokenInfo:
        return self._token

    def set_token(self, token: TokenInfo) -> None:
        self._token = token

    def on_new_token(self, callback: Optional[NewTokenCallback]) -> None:
        self._on_new_token = callback

    def authorization(self) -> Optional[str]:
        if not self._token.access_token:
            return None
        return f"Bearer {self._token.access_token}"

    async def ensure_valid(self) -> None:
        """Refresh the credential if auto-refresh is on and it has expired."""

        if not self.auto_refresh:
            return
        if not self._token.is_expired(self._clock()):
            return

        payload = await self._fetch_json(self.token_url)
        token = TokenInfo.from_web_player_response(payload)
        self._token = token
        logger.info("Fetched new Spotify access token (expires at %d ms)", token.expires_at_ms)

        if self._on_new_token is not None:
            self._on_new_token(token.access_token)
