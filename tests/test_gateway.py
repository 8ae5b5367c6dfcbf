"""Unit tests for event_roles.sync.gateway."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import GUILD_ID, make_event
from event_roles.sync.client import DiscordClient
from event_roles.sync.errors import MissingGuildError
from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.models import Guild


def _subscriber_page(start: int, count: int) -> list[dict]:
    return [
        {
            "guild_scheduled_event_id": "1001",
            "user": {"id": str(user_id), "username": f"user{user_id}"},
            "member": {"roles": [], "nick": None},
        }
        for user_id in range(start, start + count)
    ]


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock(spec=DiscordClient)


@pytest.fixture
def gw(client) -> DiscordGateway:
    return DiscordGateway(client)


# ---------------------------------------------------------------------------
# TestFetchScheduledEvents
# ---------------------------------------------------------------------------


class TestFetchScheduledEvents:
    """Tests for DiscordGateway.fetch_scheduled_events."""

    @pytest.mark.asyncio
    async def test_keys_by_id_in_response_order(self, gw, client, guild):
        client.get_guild_scheduled_events.return_value = [
            {"id": "30", "name": "C", "guild_id": str(GUILD_ID)},
            {"id": "10", "name": "A", "guild_id": str(GUILD_ID)},
        ]

        events = await gw.fetch_scheduled_events(guild)

        assert list(events) == [30, 10]
        assert events[30].guild is guild

    @pytest.mark.asyncio
    async def test_event_from_other_guild_has_no_guild(self, gw, client, guild):
        client.get_guild_scheduled_events.return_value = [
            {"id": "1", "name": "Elsewhere", "guild_id": "42"},
        ]

        events = await gw.fetch_scheduled_events(guild)

        assert events[1].guild is None

    @pytest.mark.asyncio
    async def test_empty_response(self, gw, client, guild):
        client.get_guild_scheduled_events.return_value = []

        assert await gw.fetch_scheduled_events(guild) == {}


# ---------------------------------------------------------------------------
# TestFetchSubscribers
# ---------------------------------------------------------------------------


class TestFetchSubscribers:
    """Tests for DiscordGateway.fetch_subscribers."""

    @pytest.mark.asyncio
    async def test_follows_after_cursor(self, gw, client, guild):
        client.get_guild_scheduled_event_users.side_effect = [
            _subscriber_page(1, 100),
            _subscriber_page(101, 3),
        ]

        subscribers = await gw.fetch_subscribers(make_event(guild=guild))

        assert len(subscribers) == 103
        second_call = client.get_guild_scheduled_event_users.call_args_list[1]
        assert second_call.kwargs["after"] == 100

    @pytest.mark.asyncio
    async def test_single_short_page(self, gw, client, guild):
        client.get_guild_scheduled_event_users.return_value = _subscriber_page(1, 2)

        subscribers = await gw.fetch_subscribers(make_event(guild=guild))

        assert [s.user.id for s in subscribers] == [1, 2]
        assert subscribers[0].member is not None
        client.get_guild_scheduled_event_users.assert_awaited_once_with(
            GUILD_ID, 1001, with_member=True, after=None
        )

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, gw, client, guild):
        client.get_guild_scheduled_event_users.side_effect = [
            _subscriber_page(1, 100),
            [],
        ]

        subscribers = await gw.fetch_subscribers(make_event(guild=guild))

        assert len(subscribers) == 100
        assert client.get_guild_scheduled_event_users.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_guild_raises(self, gw, client):
        with pytest.raises(MissingGuildError):
            await gw.fetch_subscribers(make_event(guild=None))

        client.get_guild_scheduled_event_users.assert_not_awaited()


# ---------------------------------------------------------------------------
# TestRoles
# ---------------------------------------------------------------------------


class TestRoles:
    """Tests for role fetch, create, delete and grant."""

    @pytest.mark.asyncio
    async def test_fetch_role_found(self, gw, client):
        client.get_guild_roles.return_value = [
            {"id": "1", "name": "@everyone"},
            {"id": "5", "name": "Standup [Weekly]", "mentionable": True},
        ]

        role = await gw.fetch_role(GUILD_ID, 5)

        assert role is not None
        assert role.name == "Standup [Weekly]"
        assert role.guild_id == GUILD_ID

    @pytest.mark.asyncio
    async def test_fetch_role_missing(self, gw, client):
        client.get_guild_roles.return_value = [{"id": "1", "name": "@everyone"}]

        assert await gw.fetch_role(GUILD_ID, 5) is None

    @pytest.mark.asyncio
    async def test_create_role_maps_response(self, gw, client):
        client.create_guild_role.return_value = {
            "id": "77",
            "name": "Standup [Weekly]",
            "mentionable": True,
            "permissions": "0",
        }
        guild = Guild(id=GUILD_ID, name="ACM")

        role = await gw.create_role(guild, "Standup [Weekly]", reason="why")

        assert role is not None
        assert role.id == 77
        assert role.mentionable is True
        client.create_guild_role.assert_awaited_once_with(
            GUILD_ID,
            "Standup [Weekly]",
            mentionable=True,
            permissions="0",
            reason="why",
        )

    @pytest.mark.asyncio
    async def test_create_role_empty_response(self, gw, client, guild):
        client.create_guild_role.return_value = None

        assert await gw.create_role(guild, "x") is None

    @pytest.mark.asyncio
    async def test_add_member_role_passes_reason(self, gw, client):
        await gw.add_member_role(GUILD_ID, 7, 5, reason="subscribed")

        client.add_guild_member_role.assert_awaited_once_with(
            GUILD_ID, 7, 5, reason="subscribed"
        )

    @pytest.mark.asyncio
    async def test_fetch_member_maps_roles(self, gw, client):
        client.get_guild_member.return_value = {
            "user": {"id": "7", "username": "seven"},
            "roles": ["5", "6"],
        }

        member = await gw.fetch_member(GUILD_ID, 7)

        assert member.user.id == 7
        assert member.has_role(5)
        assert not member.has_role(8)
