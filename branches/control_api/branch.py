"""
Control API Branch - Main Module
HTTP API used by the web control panel to edit rules and check the bot.
"""

from aiohttp import web
from discord.ext import commands
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from branches.tickets.rules import RuleDocument
from constants import (
    HTTP_BAD_REQUEST,
    HTTP_INTERNAL_ERROR,
    HTTP_SERVICE_UNAVAILABLE
)

logger = logging.getLogger(__name__)

# Default configuration for this branch
DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        "host": "0.0.0.0",
        "port": 5000,
        "web_dir": "web"
    }
}

BOT_KEY = web.AppKey("bot", commands.Bot)


def is_bot_online(bot: commands.Bot) -> bool:
    """Check whether the gateway connection is up.

    The ready flag stays set while discord.py reconnects, so the websocket
    itself must also be open.
    """
    if not bot.is_ready() or bot.is_closed():
        return False
    return bot.ws is not None and bool(bot.ws.open)


async def handle_update_rules(request: web.Request) -> web.Response:
    """Replace the rules and republish the ticket panel."""
    try:
        data = await request.json()
        rules = RuleDocument.from_dict(data)
    except ValueError as e:
        logger.warning(f"Rejected rules update: {e}")
        return web.json_response({"error": f"Regras inválidas: {e}"}, status=HTTP_BAD_REQUEST)

    tickets = request.app[BOT_KEY].get_cog("Tickets")
    if tickets is None:
        logger.error("Rules update received but the Tickets branch is not loaded")
        return web.json_response({"error": "Sistema de tickets indisponível"}, status=HTTP_SERVICE_UNAVAILABLE)

    if not tickets.rule_store.save(rules):
        return web.json_response({"error": "Erro ao salvar regras"}, status=HTTP_INTERNAL_ERROR)

    await tickets.publish_panel()
    logger.info("Rules updated through the control API")
    return web.json_response({"message": "Regras atualizadas com sucesso"})


async def handle_bot_status(request: web.Request) -> web.Response:
    """Report whether the bot is connected to Discord."""
    return web.json_response({"online": is_bot_online(request.app[BOT_KEY])})


def create_app(bot: commands.Bot, web_dir: Optional[Path] = None) -> web.Application:
    """
    Build the control API application.

    Args:
        bot: The running bot
        web_dir: Directory with the control panel's static files (optional)

    Returns:
        aiohttp application
    """
    app = web.Application()
    app[BOT_KEY] = bot
    app.router.add_post("/api/update-rules", handle_update_rules)
    app.router.add_get("/api/bot-status", handle_bot_status)

    if web_dir is not None and web_dir.is_dir():
        index = web_dir / "index.html"
        if index.exists():
            async def handle_index(request):
                return web.FileResponse(index)
            app.router.add_get("/", handle_index)
        app.router.add_static("/", web_dir)
        logger.info(f"Serving control panel files from {web_dir}")

    return app


class ControlAPI(commands.Cog):
    """Runs the control API HTTP server alongside the bot."""

    def __init__(self, bot: commands.Bot, config: Optional[Dict[str, Any]] = None):
        self.bot = bot
        self.config = config if config is not None else self.load_config()

        settings = self.config.get("settings", {})
        self.host: str = settings.get("host", "0.0.0.0")
        self.port: int = self.resolve_port(settings.get("port", 5000))
        self.web_dir = Path(settings.get("web_dir", "web"))
        self.runner: Optional[web.AppRunner] = None

    def load_config(self) -> Dict[str, Any]:
        """Load config from config.yml in this branch's folder."""
        from utils import load_branch_config
        config_path = Path(__file__).parent / "config.yml"
        return load_branch_config(config_path, DEFAULT_CONFIG, "ControlAPI")

    @staticmethod
    def resolve_port(configured_port: int) -> int:
        """PORT from .env wins over config.yml."""
        from config import API_PORT
        return API_PORT if API_PORT is not None else configured_port

    async def cog_load(self):
        """Start the HTTP server."""
        app = create_app(self.bot, self.web_dir)
        self.runner = web.AppRunner(app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Control API listening on {self.host}:{self.port}")

    async def cog_unload(self):
        """Stop the HTTP server."""
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
        logger.info("Control API stopped")
