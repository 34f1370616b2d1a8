"""
Ticket System Views
Discord UI components for ticket interactions.
"""

import discord
import logging
from .helpers import (
    PANEL_SELECT_ID,
    CLOSE_BUTTON_ID,
    Category,
    category_options,
    send_ephemeral
)

logger = logging.getLogger(__name__)


class TicketPanelView(discord.ui.View):
    """View for the ticket panel with the category select menu."""

    def __init__(self, controller):
        super().__init__(timeout=None)
        self.controller = controller

    @discord.ui.select(
        custom_id=PANEL_SELECT_ID,
        placeholder="Selecione uma categoria",
        min_values=1,
        max_values=1,
        options=category_options()
    )
    async def category_select(self, interaction: discord.Interaction, select: discord.ui.Select):
        """Open a ticket in the selected category."""
        category = Category.from_key(select.values[0])
        if category is None:
            logger.warning(f"Unknown ticket category selected: {select.values[0]}")
            await send_ephemeral(interaction, "❌ Categoria inválida.")
            return

        await self.controller.open_ticket(interaction, category)


class TicketControlView(discord.ui.View):
    """View with the close button posted inside ticket channels."""

    def __init__(self, controller):
        super().__init__(timeout=None)
        self.controller = controller

    @discord.ui.button(
        label="Fechar Ticket",
        style=discord.ButtonStyle.danger,
        custom_id=CLOSE_BUTTON_ID
    )
    async def close_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """Close the ticket (support role only)."""
        await self.controller.close_ticket(interaction)
