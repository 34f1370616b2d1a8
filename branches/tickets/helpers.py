"""
Ticket System Helper Functions
Categories, embed builders and permission helpers shared by the ticket system.
"""

import discord
import logging
from enum import Enum
from typing import Iterable, List, Optional

from constants import (
    CHANNEL_NAME_MAX,
    DEFAULT_EMBED_COLOR,
    EMBED_FOOTER_MAX,
    EMBED_TITLE_MAX,
    truncate_for_embed_description
)
from utils import is_valid_discord_id, truncate_text

logger = logging.getLogger(__name__)

# Custom IDs for persistent components
PANEL_SELECT_ID = "ticket_category"
CLOSE_BUTTON_ID = "close_ticket"

# Replies for failed channel creation
NO_PERMISSION_MESSAGE = "❌ Não tenho permissão para criar um canal nesta categoria."
CATEGORY_NOT_FOUND_MESSAGE = "❌ A categoria especificada não foi encontrada. Verifique o ID da categoria."
GENERIC_ERROR_MESSAGE = "❌ Houve um erro ao criar o ticket, tente novamente."


class Category(Enum):
    """Support topics offered on the panel: (value, label, emoji)."""
    DUVIDAS = ("duvidas", "Dúvidas", "🤔")
    DENUNCIAS = ("denuncias", "Denúncias", "⚠️")
    REEMBOLSO = ("reembolso", "Reembolso", "💱")
    PARCERIA = ("parceria", "Parceria", "🤝")

    def __init__(self, key: str, label: str, emoji: str):
        self.key = key
        self.label = label
        self.emoji = emoji

    @classmethod
    def from_key(cls, key: str) -> Optional["Category"]:
        """Look up a category by its menu value."""
        for category in cls:
            if category.key == key:
                return category
        return None


def category_options() -> List[discord.SelectOption]:
    """Build the panel menu options, one per category."""
    return [
        discord.SelectOption(label=category.label, value=category.key, emoji=category.emoji)
        for category in Category
    ]


def join_rules(rules: Iterable[str]) -> str:
    """Join rules into display text, one per line, keeping their order."""
    return "\n".join(rules)


def ticket_channel_name(username: str, category: Category) -> str:
    """
    Build the ticket channel name for a user and category.

    Args:
        username: The requester's Discord username
        category: Selected category

    Returns:
        Name like "ticket-someone-dúvidas"
    """
    name = f"ticket-{username}-{category.label}".lower().replace(" ", "-")
    return truncate_text(name, CHANNEL_NAME_MAX, suffix="")


def build_ticket_overwrites(guild: discord.Guild, member: discord.Member, support_role: discord.Role) -> dict:
    """
    Permission overwrites for a new ticket channel.

    Hidden from @everyone, visible to the requester and the support role.
    """
    allowed = dict(view_channel=True, send_messages=True, read_message_history=True)
    return {
        guild.default_role: discord.PermissionOverwrite(view_channel=False),
        member: discord.PermissionOverwrite(**allowed),
        support_role: discord.PermissionOverwrite(**allowed)
    }


def describe_create_error(error: discord.HTTPException) -> str:
    """Map a channel creation failure to the message shown to the user."""
    if isinstance(error, discord.Forbidden):
        return NO_PERMISSION_MESSAGE
    if isinstance(error, discord.NotFound):
        return CATEGORY_NOT_FOUND_MESSAGE
    return GENERIC_ERROR_MESSAGE


def has_support_role(member, support_role_id: int) -> bool:
    """Check if a member holds the support role."""
    return any(role.id == support_role_id for role in getattr(member, "roles", []))


def build_panel_embed(rules, panel_config: dict) -> discord.Embed:
    """
    Create the category selection panel embed.

    Args:
        rules: RuleDocument to render panel rules from
        panel_config: The "panel" section of the tickets config

    Returns:
        Discord embed for the panel
    """
    description = (
        f"{panel_config.get('description', '')}\n\n"
        "**Regras:**\n"
        f"{join_rules(rules.panel_rules)}\n\n"
        "Escolha uma categoria para abrir um ticket:"
    )

    embed = discord.Embed(
        title=truncate_text(panel_config.get("title", "Sistema de Tickets"), EMBED_TITLE_MAX),
        description=truncate_for_embed_description(description),
        color=panel_config.get("color", DEFAULT_EMBED_COLOR)
    )

    footer = panel_config.get("footer")
    if footer:
        embed.set_footer(text=truncate_text(footer, EMBED_FOOTER_MAX))

    return embed


def build_ticket_embed(user, category: Category, rules, color: int = DEFAULT_EMBED_COLOR) -> discord.Embed:
    """Create the welcome embed posted inside a new ticket channel."""
    description = (
        f"Olá {user.mention}, bem-vindo ao seu ticket para **{category.label}**. "
        "Por favor, explique sua solicitação. Nossa equipe responderá em breve!\n\n"
        "**Regras do Ticket:**\n"
        f"{join_rules(rules.ticket_rules)}"
    )

    return discord.Embed(
        title=f"Ticket - {category.label}",
        description=truncate_for_embed_description(description),
        color=color
    )


def validate_config(config: dict) -> tuple:
    """
    Validate ticket configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid: bool, errors: list)
    """
    errors = []

    settings = config.get("settings", {})

    if not is_valid_discord_id(settings.get("ticket_panel_channel_id", 0)):
        errors.append("ticket_panel_channel_id not configured")

    if not is_valid_discord_id(settings.get("ticket_category_id", 0)):
        errors.append("ticket_category_id not configured")

    if not is_valid_discord_id(settings.get("support_role_id", 0)):
        errors.append("support_role_id not configured")

    if not settings.get("rules_file"):
        errors.append("rules_file not configured")

    return (len(errors) == 0, errors)


async def send_ephemeral(interaction: discord.Interaction, content: str) -> bool:
    """
    Send the initial reply to an interaction, unless one was already sent.

    Returns:
        True if the reply was sent, False otherwise
    """
    if interaction.response.is_done():
        logger.debug(f"Skipping reply to interaction {interaction.id}, already answered: {content}")
        return False

    try:
        await interaction.response.send_message(content, ephemeral=True)
        return True
    except discord.HTTPException as e:
        logger.error(f"Failed to reply to interaction {interaction.id}: {e}")
        return False
