"""Tests for the control API HTTP endpoints."""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord.ext import commands
from aiohttp.test_utils import TestClient, TestServer

import config
from branches.control_api.branch import ControlAPI, create_app
from branches.tickets.rules import RuleDocument, RuleStore

RULES = {"panelRules": ["A", "B"], "ticketRules": ["C"]}


@pytest.fixture
def tickets(rules_path):
    tickets = MagicMock()
    tickets.rule_store = RuleStore(rules_path)
    tickets.publish_panel = AsyncMock()
    return tickets


@pytest.fixture
def bot(tickets):
    bot = MagicMock()
    bot.get_cog = MagicMock(return_value=tickets)
    bot.is_ready = MagicMock(return_value=True)
    bot.is_closed = MagicMock(return_value=False)
    bot.ws = MagicMock(open=True)
    return bot


class TestUpdateRules:
    @pytest.mark.asyncio
    async def test_saves_and_republishes(self, bot, tickets, rules_path):
        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.post("/api/update-rules", json=RULES)

            assert resp.status == 200
            assert await resp.json() == {"message": "Regras atualizadas com sucesso"}

        bot.get_cog.assert_called_with("Tickets")
        assert json.loads(rules_path.read_text(encoding="utf-8")) == RULES
        assert tickets.rule_store.load() == RuleDocument(panel_rules=("A", "B"), ticket_rules=("C",))
        tickets.publish_panel.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_persistence_failure_returns_500(self, bot, tickets):
        tickets.rule_store = MagicMock(save=MagicMock(return_value=False))

        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.post("/api/update-rules", json=RULES)

            assert resp.status == 500
            assert await resp.json() == {"error": "Erro ao salvar regras"}

        tickets.publish_panel.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        "not json",
        "[]",
        json.dumps({"panelRules": ["A"]}),
        json.dumps({"panelRules": ["A"], "ticketRules": [1]}),
    ])
    async def test_malformed_body_returns_400(self, bot, tickets, rules_path, body):
        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.post(
                "/api/update-rules",
                data=body,
                headers={"Content-Type": "application/json"}
            )

            assert resp.status == 400
            assert "error" in await resp.json()

        assert not rules_path.exists()
        tickets.publish_panel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_tickets_branch_not_loaded(self, bot):
        bot.get_cog.return_value = None

        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.post("/api/update-rules", json=RULES)

            assert resp.status == 503


class TestBotStatus:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("ready, closed, ws_open, online", [
        (True, False, True, True),
        (False, False, True, False),
        (True, True, True, False),
        (True, False, False, False),
    ])
    async def test_reports_connection(self, bot, ready, closed, ws_open, online):
        bot.is_ready.return_value = ready
        bot.is_closed.return_value = closed
        bot.ws.open = ws_open

        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.get("/api/bot-status")

            assert resp.status == 200
            assert await resp.json() == {"online": online}

    @pytest.mark.asyncio
    async def test_offline_while_reconnecting(self):
        bot = commands.Bot(command_prefix=commands.when_mentioned, intents=discord.Intents.none())
        bot._ready = asyncio.Event()
        bot._ready.set()
        bot.ws = None

        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.get("/api/bot-status")

            assert await resp.json() == {"online": False}

    @pytest.mark.asyncio
    async def test_online_with_open_gateway(self):
        bot = commands.Bot(command_prefix=commands.when_mentioned, intents=discord.Intents.none())
        bot._ready = asyncio.Event()
        bot._ready.set()
        bot.ws = MagicMock(open=True)

        async with TestClient(TestServer(create_app(bot))) as client:
            resp = await client.get("/api/bot-status")

            assert await resp.json() == {"online": True}


class TestStaticFiles:
    @pytest.mark.asyncio
    async def test_serves_web_directory(self, bot, tmp_path):
        web_dir = tmp_path / "web"
        web_dir.mkdir()
        (web_dir / "index.html").write_text("<h1>Painel</h1>", encoding="utf-8")
        (web_dir / "app.js").write_text("console.log('ok')", encoding="utf-8")

        async with TestClient(TestServer(create_app(bot, web_dir))) as client:
            index = await client.get("/")
            script = await client.get("/app.js")
            status = await client.get("/api/bot-status")

            assert index.status == 200
            assert "<h1>Painel</h1>" in await index.text()
            assert script.status == 200
            assert status.status == 200

    @pytest.mark.asyncio
    async def test_missing_web_directory_is_skipped(self, bot, tmp_path):
        async with TestClient(TestServer(create_app(bot, tmp_path / "missing"))) as client:
            resp = await client.get("/")
            assert resp.status == 404


class TestControlAPICog:
    def test_port_from_config(self, bot, monkeypatch):
        monkeypatch.setattr(config, "API_PORT", None)
        cog = ControlAPI(bot, config={"settings": {"host": "127.0.0.1", "port": 6001}})
        assert cog.host == "127.0.0.1"
        assert cog.port == 6001

    def test_env_port_overrides_config(self, bot, monkeypatch):
        monkeypatch.setattr(config, "API_PORT", 7000)
        cog = ControlAPI(bot, config={"settings": {"port": 6001}})
        assert cog.port == 7000

    @pytest.mark.asyncio
    async def test_server_starts_and_stops(self, bot, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "API_PORT", None)
        cog = ControlAPI(bot, config={"settings": {"host": "127.0.0.1", "port": 0, "web_dir": str(tmp_path)}})

        await cog.cog_load()
        assert cog.runner is not None
        assert len(cog.runner.sites) == 1

        await cog.cog_unload()
        assert cog.runner is None
