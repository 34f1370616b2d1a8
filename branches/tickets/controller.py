"""
Ticket Lifecycle Controller
Creates ticket channels from panel selections and deletes them on close.
"""

import discord
import logging
from contextlib import contextmanager

from .helpers import (
    Category,
    CATEGORY_NOT_FOUND_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    build_ticket_embed,
    build_ticket_overwrites,
    describe_create_error,
    has_support_role,
    send_ephemeral,
    ticket_channel_name
)
from .rules import RuleStore
from .views import TicketControlView

logger = logging.getLogger(__name__)


class CreationLocks:
    """Ticket creations currently in flight, keyed by (user_id, category)."""

    def __init__(self):
        self._in_flight = set()

    def __contains__(self, key) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    @contextmanager
    def claim(self, key):
        """
        Hold a key for the duration of a with-block.

        Yields True when the key was free and is now held, False when another
        creation already holds it (nothing is changed in that case). A held
        key is released however the block exits.
        """
        if key in self._in_flight:
            yield False
            return

        self._in_flight.add(key)
        try:
            yield True
        finally:
            self._in_flight.discard(key)


class TicketController:
    """Creation and closing of ticket channels."""

    def __init__(self, rule_store: RuleStore, support_role_id: int, ticket_category_id: int):
        self.rule_store = rule_store
        self.support_role_id = support_role_id
        self.ticket_category_id = ticket_category_id
        self.locks = CreationLocks()

    async def open_ticket(self, interaction: discord.Interaction, category: Category):
        """Handle a category selection from the panel."""
        if interaction.response.is_done():
            return

        user = interaction.user
        key = (user.id, category)

        with self.locks.claim(key) as acquired:
            if not acquired:
                logger.info(f"User {user.id} already has a {category.key} ticket being created")
                await send_ephemeral(
                    interaction,
                    "⏳ Você já tem um ticket em criação. Aguarde um momento."
                )
                return

            try:
                await self._create_ticket(interaction, category)
            except Exception as e:
                logger.error(f"Error creating {category.key} ticket for user {user.id}: {e}", exc_info=True)
                await send_ephemeral(interaction, GENERIC_ERROR_MESSAGE)

    async def _create_ticket(self, interaction: discord.Interaction, category: Category):
        guild = interaction.guild
        user = interaction.user

        try:
            member = await guild.fetch_member(user.id)
        except discord.HTTPException as e:
            logger.warning(f"Could not fetch member {user.id}: {e}")
            await send_ephemeral(
                interaction,
                "❌ Não foi possível carregar suas informações. Tente novamente."
            )
            return

        support_role = await self._resolve_support_role(guild)
        if support_role is None:
            await send_ephemeral(
                interaction,
                "❌ Erro: Cargo de suporte não configurado corretamente. "
                "Verifique o support_role_id no config.yml."
            )
            return

        parent = guild.get_channel(self.ticket_category_id)
        if not isinstance(parent, discord.CategoryChannel):
            logger.error(f"Ticket category {self.ticket_category_id} not found")
            await send_ephemeral(interaction, CATEGORY_NOT_FOUND_MESSAGE)
            return

        try:
            channel = await guild.create_text_channel(
                name=ticket_channel_name(user.name, category),
                category=parent,
                overwrites=build_ticket_overwrites(guild, member, support_role),
                reason=f"Ticket {category.label} opened by {user}"
            )
        except discord.HTTPException as e:
            logger.error(f"Failed to create ticket channel for user {user.id}: {e}")
            await send_ephemeral(interaction, describe_create_error(e))
            return

        try:
            await interaction.response.send_message(
                f"✅ Ticket criado com sucesso! Veja em {channel.mention}",
                ephemeral=True
            )
        except discord.HTTPException as e:
            logger.critical(
                f"Ticket channel {channel.id} was created for user {user.id} "
                f"but the confirmation could not be delivered: {e}"
            )
            return

        # Rendered once; later rule edits don't touch open tickets
        rules = self.rule_store.load()
        embed = build_ticket_embed(user, category, rules)

        await channel.send(
            content=f"{user.mention} {support_role.mention}",
            embed=embed,
            view=TicketControlView(self),
            allowed_mentions=discord.AllowedMentions(users=True, roles=True, everyone=False)
        )

        # The topic is the only link between the channel and its owner
        await channel.edit(topic=str(user.id))

        logger.info(f"Created {category.key} ticket {channel.id} ({channel.name}) for user {user.id}")

    async def _resolve_support_role(self, guild: discord.Guild):
        """Get the support role from cache, falling back to the API."""
        role = guild.get_role(self.support_role_id)
        if role is not None:
            return role

        try:
            roles = await guild.fetch_roles()
        except discord.HTTPException as e:
            logger.error(f"Failed to fetch roles for guild {guild.id}: {e}")
            return None

        role = discord.utils.get(roles, id=self.support_role_id)
        if role is None:
            logger.error(f"Support role {self.support_role_id} not found in guild {guild.id}")
        return role

    async def close_ticket(self, interaction: discord.Interaction):
        """
        Handle the close button inside a ticket channel.

        Only the support role may close. The acknowledgement is sent before
        the channel is deleted; a failed deletion is logged only.
        """
        if interaction.response.is_done():
            return

        if not has_support_role(interaction.user, self.support_role_id):
            await send_ephemeral(interaction, "❌ Você não tem permissão para fechar este ticket.")
            return

        channel = interaction.channel

        if not await send_ephemeral(interaction, "🔒 Fechando o ticket..."):
            logger.error(f"Not closing ticket {channel.id}: acknowledgement was not delivered")
            return

        logger.info(f"User {interaction.user.id} closing ticket {channel.id} (owner: {channel.topic})")

        try:
            await channel.delete(reason=f"Ticket closed by {interaction.user}")
        except discord.HTTPException as e:
            logger.error(f"Failed to delete ticket channel {channel.id}: {e}")
