"""
Herald - Twitch Helix Client
============================

Thin aiohttp client for the three Helix endpoints Herald needs:
users (resolve a login), streams (live status) and games (category name).

DESIGN:
    One persistent ClientSession, created lazily and closed on shutdown.
    Every failure (non-2xx, network error, timeout, malformed body) is
    raised as ExternalServiceError so callers handle a single type.
    "Not found" and "offline" are not errors: they return None.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from src.core.constants import TWITCH_API_BASE, TWITCH_CONNECTION_LIMIT
from src.core.errors import ExternalServiceError
from src.core.logger import logger
from src.services.twitch.models import TwitchGame, TwitchStreamStatus, TwitchUser


class TwitchClient:
    """
    Helix API client.

    Attributes:
        client_id: Value of the Client-ID header.
        oauth_token: Optional app access token (Authorization: Bearer).
        timeout: Default total timeout per request (seconds).
    """

    def __init__(
        self,
        client_id: str,
        oauth_token: Optional[str] = None,
        timeout: float = 10.0,
        base_url: str = TWITCH_API_BASE,
    ) -> None:
        self.client_id = client_id
        self.oauth_token = oauth_token
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    # =========================================================================
    # Session
    # =========================================================================

    def _headers(self) -> Dict[str, str]:
        headers = {"Client-ID": self.client_id}
        if self.oauth_token:
            headers["Authorization"] = f"Bearer {self.oauth_token}"
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create persistent HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=TWITCH_CONNECTION_LIMIT,
                ttl_dns_cache=300,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close HTTP session on shutdown."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            logger.info("Twitch Session Closed")

    # =========================================================================
    # Request Helper
    # =========================================================================

    async def _get_data(self, path: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        GET a Helix endpoint and return its "data" array.

        Raises:
            ExternalServiceError: On any transport or protocol failure.
        """
        session = await self._get_session()
        url = f"{self.base_url}/{path}"

        try:
            async with session.get(url, params=params) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise ExternalServiceError(
                        f"Twitch {path} returned HTTP {resp.status}: {body[:100]}",
                        status=resp.status,
                    )
                payload = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            raise ExternalServiceError(f"Twitch {path} timed out")
        except aiohttp.ClientError as e:
            raise ExternalServiceError(f"Twitch {path} request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"Twitch {path} returned invalid JSON") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise ExternalServiceError(f"Twitch {path} response has no data array")
        return data

    @staticmethod
    def _first(path: str, data: List[Any]) -> Dict[str, Any]:
        item = data[0]
        if not isinstance(item, dict):
            raise ExternalServiceError(f"Twitch {path} returned a non-object entry")
        return item

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def get_user(self, login: str) -> Optional[TwitchUser]:
        """Resolve a login. Returns None if the account doesn't exist."""
        data = await self._get_data("users", {"login": login})
        if not data:
            return None
        item = self._first("users", data)
        return TwitchUser(
            id=str(item.get("id", "")),
            login=item.get("login", login),
            display_name=item.get("display_name") or item.get("login", login),
            profile_image_url=item.get("profile_image_url", ""),
        )

    async def get_stream(self, login: str) -> Optional[TwitchStreamStatus]:
        """Get live status. Returns None if the channel is offline."""
        data = await self._get_data("streams", {"user_login": login})
        if not data:
            return None
        item = self._first("streams", data)
        if item.get("type", "live") != "live":
            return None
        try:
            viewers = int(item.get("viewer_count") or 0)
        except (TypeError, ValueError) as e:
            raise ExternalServiceError(
                f"Twitch streams returned a bad viewer_count: {item.get('viewer_count')!r}"
            ) from e
        return TwitchStreamStatus(
            user_login=item.get("user_login", login),
            user_name=item.get("user_name") or login,
            title=item.get("title", ""),
            game_id=str(item.get("game_id", "")),
            viewer_count=viewers,
            thumbnail_url=item.get("thumbnail_url", ""),
        )

    async def get_game(self, game_id: str) -> Optional[TwitchGame]:
        """Look up a category by ID. Returns None if unknown."""
        if not game_id:
            return None
        data = await self._get_data("games", {"id": game_id})
        if not data:
            return None
        item = self._first("games", data)
        return TwitchGame(
            id=str(item.get("id", game_id)),
            name=item.get("name", ""),
            box_art_url=item.get("box_art_url", ""),
        )


__all__ = ["TwitchClient"]
