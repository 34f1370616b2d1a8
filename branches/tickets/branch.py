"""
Tickets Branch - Main Module
Channel-based support tickets opened from a category panel.
"""

import discord
from discord.ext import commands
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from constants import DEFAULT_EMBED_COLOR
from .controller import TicketController
from .helpers import build_panel_embed, validate_config
from .rules import RuleStore
from .views import TicketPanelView, TicketControlView

logger = logging.getLogger(__name__)

# Default configuration for this branch
DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        "ticket_panel_channel_id": 0,
        "ticket_category_id": 0,
        "support_role_id": 0,
        "rules_file": "ticketRules.json",
        "publish_panel_on_startup": True,
        "panel": {
            "title": "Sorimes Community - Sistema de Tickets",
            "description": (
                "Bem-vindo(a) à categoria de suporte da Sorimes Community! "
                "Este canal é destinado a suportes gerais, parcerias, entre outros.\n"
                "**O mal uso da ferramenta de suporte terá punição a critério da equipe de moderação.**"
            ),
            "footer": "Sorimes Community - Suporte e Parcerias",
            "color": DEFAULT_EMBED_COLOR
        }
    }
}


class Tickets(commands.Cog):
    """Category panel and ticket channel lifecycle."""

    def __init__(self, bot: commands.Bot, config: Optional[Dict[str, Any]] = None):
        self.bot = bot
        self.config = config if config is not None else self.load_config()

        is_valid, errors = validate_config(self.config)
        if not is_valid:
            logger.error("Tickets config validation failed:")
            for error in errors:
                logger.error(f"  - {error}")

        settings = self.config.get("settings", {})
        self.ticket_panel_channel_id: int = settings.get("ticket_panel_channel_id", 0)
        self.publish_on_startup: bool = settings.get("publish_panel_on_startup", True)
        self.panel_config: Dict[str, Any] = settings.get("panel", {})

        self.rule_store = RuleStore(settings.get("rules_file", "ticketRules.json"))
        self.controller = TicketController(
            rule_store=self.rule_store,
            support_role_id=settings.get("support_role_id", 0),
            ticket_category_id=settings.get("ticket_category_id", 0)
        )
        self._startup_panel_sent = False

        logger.info(f"Tickets branch initialized (rules: {self.rule_store.path})")

    def load_config(self) -> Dict[str, Any]:
        """Load config from config.yml in this branch's folder."""
        from utils import load_branch_config
        config_path = Path(__file__).parent / "config.yml"
        return load_branch_config(config_path, DEFAULT_CONFIG, "Tickets")

    async def cog_load(self):
        """Register persistent views so panel and close controls survive restarts."""
        logger.info("Registering persistent views for Tickets")
        self.bot.add_view(TicketPanelView(self.controller))
        self.bot.add_view(TicketControlView(self.controller))

    async def cog_unload(self):
        logger.info("Tickets branch unloaded")

    @commands.Cog.listener()
    async def on_ready(self):
        """Send a fresh panel the first time the bot becomes ready."""
        if self._startup_panel_sent or not self.publish_on_startup:
            return
        self._startup_panel_sent = True
        await self.publish_panel()

    async def publish_panel(self):
        """
        Send a new ticket panel to the panel channel.

        Earlier panels are left in place. A missing channel is a configuration
        error and is only logged.
        """
        channel = self.bot.get_channel(self.ticket_panel_channel_id)
        if not channel:
            logger.error(f"Ticket panel channel {self.ticket_panel_channel_id} not found")
            return

        rules = self.rule_store.load()
        embed = build_panel_embed(rules, self.panel_config)

        try:
            message = await channel.send(embed=embed, view=TicketPanelView(self.controller))
        except discord.HTTPException as e:
            logger.error(f"Failed to send ticket panel to channel {channel.id}: {e}")
            return

        logger.info(f"Published ticket panel {message.id} in channel {channel.id}")
