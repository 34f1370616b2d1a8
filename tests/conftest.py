"""Shared pytest fixtures: fake Discord objects for the ticket branches."""
import os
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

# config.py exits without a token
os.environ.setdefault("DISCORD_TOKEN", "test-token")

SUPPORT_ROLE_ID = 4242
TICKET_CATEGORY_ID = 3131
PANEL_CHANNEL_ID = 2121


def http_error(cls=discord.HTTPException, status=500, message="error"):
    """Build a discord.py HTTP exception without a real response."""
    response = MagicMock(status=status, reason="Test")
    return cls(response, message)


class FakeResponse:
    """InteractionResponse stand-in that refuses a second initial reply."""

    def __init__(self, fail=False, done=False):
        self.sent = []
        self.fail = fail
        self._done = done

    def is_done(self):
        return self._done

    async def send_message(self, content=None, *, ephemeral=False, **kwargs):
        if self._done:
            raise AssertionError("interaction was already answered")
        if self.fail:
            raise http_error()
        self._done = True
        self.sent.append((content, ephemeral))


def _member(user_id, username, role_ids):
    member = MagicMock()
    member.id = user_id
    member.name = username
    member.mention = f"<@{user_id}>"
    member.roles = [MagicMock(id=role_id) for role_id in role_ids]
    return member


@pytest.fixture
def support_role():
    role = MagicMock()
    role.id = SUPPORT_ROLE_ID
    role.mention = f"<@&{SUPPORT_ROLE_ID}>"
    return role


@pytest.fixture
def ticket_channel():
    channel = MagicMock()
    channel.id = 777
    channel.name = "ticket-fulano-dúvidas"
    channel.mention = "<#777>"
    channel.topic = None
    channel.send = AsyncMock()
    channel.edit = AsyncMock()
    channel.delete = AsyncMock()
    return channel


@pytest.fixture
def guild(support_role, ticket_channel):
    """Guild where every lookup succeeds."""
    guild = MagicMock()
    guild.id = 900
    guild.default_role = MagicMock()
    guild.fetch_member = AsyncMock(side_effect=lambda user_id: _member(user_id, "Fulano", ()))
    guild.get_role = MagicMock(return_value=support_role)
    guild.fetch_roles = AsyncMock(return_value=[])
    guild.get_channel = MagicMock(return_value=MagicMock(spec=discord.CategoryChannel))
    guild.create_text_channel = AsyncMock(return_value=ticket_channel)
    return guild


@pytest.fixture
def make_interaction(guild, ticket_channel):
    """Factory for component interactions from a given user."""
    def factory(user_id=1001, username="Fulano", role_ids=(), fail_reply=False, done=False):
        interaction = MagicMock()
        interaction.id = 555
        interaction.user = _member(user_id, username, role_ids)
        interaction.response = FakeResponse(fail=fail_reply, done=done)
        interaction.guild = guild
        interaction.channel = ticket_channel
        return interaction
    return factory


@pytest.fixture
def rules_path(tmp_path):
    return tmp_path / "ticketRules.json"


@pytest.fixture
def tickets_config(rules_path):
    return {
        "enabled": True,
        "settings": {
            "ticket_panel_channel_id": PANEL_CHANNEL_ID,
            "ticket_category_id": TICKET_CATEGORY_ID,
            "support_role_id": SUPPORT_ROLE_ID,
            "rules_file": str(rules_path),
            "publish_panel_on_startup": True,
            "panel": {
                "title": "Painel",
                "description": "Bem-vindo(a) ao suporte!",
                "footer": "Suporte",
                "color": 0x5865F2
            }
        }
    }
