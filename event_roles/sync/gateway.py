"""Discord data source for the event role pipeline.

Wraps DiscordClient and turns raw payloads into the models in
``event_roles.sync.models``. This is the only module that talks to the
REST client on behalf of the service, the reconciliation pass and the
assignment queue.
"""

from __future__ import annotations

from event_roles.sync.client import SUBSCRIBERS_PAGE_LIMIT, DiscordClient
from event_roles.sync.errors import MissingGuildError
from event_roles.sync.mappers import (
    map_guild,
    map_member,
    map_role,
    map_scheduled_event,
    map_subscriber,
)
from event_roles.sync.models import Guild, Member, Role, ScheduledEvent, Subscriber


class DiscordGateway:
    """Model-level access to guilds, scheduled events, members and roles."""

    def __init__(self, client: DiscordClient) -> None:
        self.client = client

    async def fetch_guild(self, guild_id: int) -> Guild:
        return map_guild(await self.client.get_guild(guild_id))

    async def fetch_scheduled_events(self, guild: Guild) -> dict[int, ScheduledEvent]:
        """Fetch all scheduled events of ``guild``, keyed by event ID.

        Iteration order follows the API response.
        """
        events_data = await self.client.get_guild_scheduled_events(guild.id)
        events: dict[int, ScheduledEvent] = {}
        for event_data in events_data or []:
            event = map_scheduled_event(event_data, guild)
            events[event.id] = event
        return events

    async def fetch_subscribers(self, event: ScheduledEvent) -> list[Subscriber]:
        """Fetch every subscriber of ``event`` with member data.

        Follows the ``after`` cursor until a short page comes back.
        """
        if event.guild is None:
            raise MissingGuildError(event)

        subscribers: list[Subscriber] = []
        after: int | None = None
        while True:
            page = await self.client.get_guild_scheduled_event_users(
                event.guild.id,
                event.id,
                with_member=True,
                after=after,
            )
            if not page:
                break
            subscribers.extend(map_subscriber(item) for item in page)
            if len(page) < SUBSCRIBERS_PAGE_LIMIT:
                break
            after = subscribers[-1].user.id
        return subscribers

    async def fetch_member(self, guild_id: int, user_id: int) -> Member:
        return map_member(await self.client.get_guild_member(guild_id, user_id))

    async def fetch_role(self, guild_id: int, role_id: int) -> Role | None:
        """Fetch a role by ID, or None if it no longer exists."""
        for role_data in await self.client.get_guild_roles(guild_id) or []:
            if int(role_data["id"]) == role_id:
                return map_role(role_data, guild_id)
        return None

    async def create_role(
        self,
        guild: Guild,
        name: str,
        *,
        mentionable: bool = True,
        reason: str | None = None,
        permissions: str = "0",
    ) -> Role | None:
        """Create a role; None if Discord returned no role object."""
        role_data = await self.client.create_guild_role(
            guild.id,
            name,
            mentionable=mentionable,
            permissions=permissions,
            reason=reason,
        )
        if not role_data:
            return None
        return map_role(role_data, guild.id)

    async def delete_role(
        self, guild_id: int, role_id: int, reason: str | None = None
    ) -> None:
        await self.client.delete_guild_role(guild_id, role_id, reason=reason)

    async def add_member_role(
        self,
        guild_id: int,
        user_id: int,
        role_id: int,
        reason: str | None = None,
    ) -> None:
        await self.client.add_guild_member_role(
            guild_id, user_id, role_id, reason=reason
        )
