"""Discord REST API client with rate limit handling.

This module provides an async HTTP client for Discord's REST API with:
- Automatic rate limit handling (429 responses)
- Exponential backoff for server errors (5xx)
- Audit log reasons for write endpoints
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from event_roles.sync.logger import logger


BASE_URL = "https://discord.com/api/v10"

# Retry configuration
MAX_RETRIES = 5
MAX_RATE_LIMIT_RETRIES = 30  # Cap on consecutive 429 retries
INITIAL_BACKOFF = 1.0  # seconds
MAX_BACKOFF = 64.0  # seconds

# Page size for scheduled event subscribers
SUBSCRIBERS_PAGE_LIMIT = 100


class DiscordAPIError(Exception):
    """Raised when Discord API returns an error."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Discord API error {status_code}: {message}")


@dataclass
class DiscordClient:
    """Async Discord REST API client.

    Handles rate limits and retries automatically.
    """

    token: str
    user_agent: str

    def __post_init__(self) -> None:
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        token = self.token
        if token and not token.startswith(("Bot ", "Bearer ")):
            token = f"Bot {token}"
        return {
            "Authorization": token,
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
        }

    async def __aenter__(self) -> "DiscordClient":
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            headers=self.headers,
            timeout=30.0,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> Any:
        """Make a request with rate limit and retry handling."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")

        headers: dict[str, str] = {}
        if reason:
            headers["X-Audit-Log-Reason"] = quote(reason, safe=" ")

        backoff = INITIAL_BACKOFF
        rate_limit_retries = 0
        attempt = 0

        while attempt <= MAX_RETRIES:
            try:
                response = await self._client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=headers or None,
                )

                if response.status_code in (200, 201):
                    return response.json()

                if response.status_code == 204:
                    return None

                # Rate limited - wait and retry (doesn't count as attempt)
                if response.status_code == 429:
                    rate_limit_retries += 1
                    if rate_limit_retries > MAX_RATE_LIMIT_RETRIES:
                        raise DiscordAPIError(429, "Max rate limit retries exceeded")
                    retry_after = float(response.headers.get("Retry-After", 1.0))
                    logger.rate_limit(retry_after)
                    await asyncio.sleep(retry_after)
                    continue

                # Client errors - fail immediately
                if 400 <= response.status_code < 500:
                    error_msg = response.text
                    try:
                        error_msg = response.json().get("message", response.text)
                    except Exception:
                        pass
                    raise DiscordAPIError(response.status_code, error_msg)

                # Server errors - retry with backoff
                if response.status_code >= 500:
                    if attempt < MAX_RETRIES:
                        logger.retry(
                            attempt + 1,
                            MAX_RETRIES,
                            backoff,
                            f"HTTP {response.status_code}",
                        )
                        await asyncio.sleep(backoff)
                        backoff = min(backoff * 2, MAX_BACKOFF)
                        attempt += 1
                        continue
                    raise DiscordAPIError(response.status_code, response.text)

                raise DiscordAPIError(response.status_code, response.text)

            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < MAX_RETRIES:
                    reason_text = (
                        "timeout" if isinstance(e, httpx.TimeoutException) else str(e)
                    )
                    logger.retry(attempt + 1, MAX_RETRIES, backoff, reason_text)
                    await asyncio.sleep(backoff)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                    attempt += 1
                    continue
                raise

        raise DiscordAPIError(500, "Max retries exceeded")

    # -------------------------------------------------------------------------
    # Guild endpoints
    # -------------------------------------------------------------------------

    async def get_guild(self, guild_id: int) -> dict[str, Any]:
        """Fetch guild information."""
        return await self._request("GET", f"/guilds/{guild_id}")

    async def get_guild_member(self, guild_id: int, user_id: int) -> dict[str, Any]:
        """Fetch a single guild member (always hits the API, never a cache)."""
        return await self._request("GET", f"/guilds/{guild_id}/members/{user_id}")

    # -------------------------------------------------------------------------
    # Role endpoints
    # -------------------------------------------------------------------------

    async def get_guild_roles(self, guild_id: int) -> list[dict[str, Any]]:
        """Fetch all roles in a guild."""
        return await self._request("GET", f"/guilds/{guild_id}/roles")

    async def create_guild_role(
        self,
        guild_id: int,
        name: str,
        *,
        mentionable: bool = True,
        permissions: str = "0",
        reason: str | None = None,
    ) -> dict[str, Any] | None:
        """Create a role in a guild."""
        payload = {
            "name": name,
            "mentionable": mentionable,
            "permissions": permissions,
        }
        return await self._request(
            "POST", f"/guilds/{guild_id}/roles", json=payload, reason=reason
        )

    async def delete_guild_role(
        self, guild_id: int, role_id: int, reason: str | None = None
    ) -> None:
        """Delete a role from a guild."""
        await self._request(
            "DELETE", f"/guilds/{guild_id}/roles/{role_id}", reason=reason
        )

    async def add_guild_member_role(
        self,
        guild_id: int,
        user_id: int,
        role_id: int,
        reason: str | None = None,
    ) -> None:
        """Grant a role to a guild member."""
        await self._request(
            "PUT",
            f"/guilds/{guild_id}/members/{user_id}/roles/{role_id}",
            reason=reason,
        )

    # -------------------------------------------------------------------------
    # Scheduled Event endpoints
    # -------------------------------------------------------------------------

    async def get_guild_scheduled_events(
        self, guild_id: int, with_user_count: bool = True
    ) -> list[dict[str, Any]]:
        """Fetch all scheduled events in a guild."""
        params: dict[str, Any] = {"with_user_count": with_user_count}
        return await self._request(
            "GET", f"/guilds/{guild_id}/scheduled-events", params=params
        )

    async def get_guild_scheduled_event_users(
        self,
        guild_id: int,
        event_id: int,
        *,
        with_member: bool = True,
        limit: int = SUBSCRIBERS_PAGE_LIMIT,
        after: int | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch one page of users subscribed to a scheduled event.

        Returns:
            List of ``{"guild_scheduled_event_id", "user", "member"?}``
            objects, ordered by user ID ascending.
        """
        params: dict[str, Any] = {
            "limit": min(limit, SUBSCRIBERS_PAGE_LIMIT),
            "with_member": with_member,
        }
        if after:
            params["after"] = after
        return await self._request(
            "GET",
            f"/guilds/{guild_id}/scheduled-events/{event_id}/users",
            params=params,
        )
