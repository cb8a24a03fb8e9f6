"""
Handlers d'interaction du menu de choix des classes.

Deux états, sans stockage de session :
- clic sur le bouton `class_menu_button` -> rendu du menu (éphémère)
- soumission d'un Select `class_menu_select_<n>` -> application du delta de rôles

Tout ce qui est nécessaire est porté par l'évènement : le membre et ses rôles, les
options affichées dans le Select (rôles que ce Select peut modifier) et les valeurs
choisies. En cas d'erreur : log, pas d'accusé de succès, pas de retry.
"""
from __future__ import annotations

import logging
from typing import Optional

import discord

from core import errors
from core.classes import menu
from views.class_menu import ClassMenuSelects, MAX_SELECTS

logger = logging.getLogger(__name__)


def _find_select(message: Optional[discord.Message], custom_id: str):
    """Retrouve dans le message le Select soumis (pour lire ses options affichées)."""
    if message is None:
        return None
    for row in message.components:
        for child in getattr(row, "children", []):
            if getattr(child, "custom_id", None) == custom_id and hasattr(child, "options"):
                return child
    return None


async def handle_menu_button(interaction: discord.Interaction, registry) -> None:
    member = interaction.user
    if interaction.guild_id is None or not isinstance(member, discord.Member):
        logger.error("Erreur %s: %s", menu.BUTTON_CUSTOM_ID, errors.NoServer())
        return
    try:
        classes = await registry.list_classes(interaction.guild_id)
    except errors.ClassError:
        logger.exception("Erreur %s: lecture des classes", menu.BUTTON_CUSTOM_ID)
        return
    pages = menu.build_menu_pages(classes, [r.id for r in member.roles])
    try:
        if not pages:
            await interaction.response.send_message("Aucune classe sur ce serveur.", ephemeral=True)
            return
        if len(pages) > MAX_SELECTS:
            logger.warning("Menu des classes tronqué: %d pages, %d affichées", len(pages), MAX_SELECTS)
        await interaction.response.send_message(view=ClassMenuSelects(pages), ephemeral=True)
    except discord.HTTPException as e:
        logger.error("Erreur %s: %s", menu.BUTTON_CUSTOM_ID, errors.ApiError(e))


async def handle_menu_select(interaction: discord.Interaction) -> None:
    data = interaction.data or {}
    custom_id = str(data.get("custom_id", ""))
    if menu.parse_select_index(custom_id) is None:
        return
    # Un échec du defer n'empêche pas d'appliquer les rôles
    try:
        await interaction.response.defer()
    except discord.HTTPException:
        logger.debug("Defer impossible pour %s", custom_id)

    member = interaction.user
    if interaction.guild is None or not isinstance(member, discord.Member):
        logger.error("Erreur %s: %s", custom_id, errors.NoServer())
        return
    select = _find_select(interaction.message, custom_id)
    if select is None:
        logger.error("Erreur %s: Select introuvable dans le message", custom_id)
        return

    shown = menu.parse_role_ids(o.value for o in select.options)
    selected = menu.parse_role_ids(data.get("values", []))
    current = {r.id for r in member.roles if not r.is_default()}
    new_roles = menu.compute_member_roles(current, shown, selected)
    try:
        await member.edit(roles=[discord.Object(id=rid) for rid in sorted(new_roles)], reason="Menu des classes")
    except discord.HTTPException as e:
        logger.error("Erreur %s: %s", custom_id, errors.ApiError(e))
        return
    logger.info(
        "Classes de %s mises à jour: +%d -%d",
        member.id, len(new_roles - current), len(current - new_roles),
    )


def setup(bot: discord.Client):
    @bot.event
    async def on_interaction(interaction: discord.Interaction):
        if interaction.type != discord.InteractionType.component:
            return
        data = interaction.data or {}
        component_type = data.get("component_type")
        if component_type == discord.ComponentType.button.value and data.get("custom_id") == menu.BUTTON_CUSTOM_ID:
            registry = getattr(bot, "classes", None)
            if registry is None:
                logger.error("Registre des classes non initialisé")
                return
            await handle_menu_button(interaction, registry)
        elif component_type == discord.ComponentType.select.value:
            await handle_menu_select(interaction)


__all__ = ["setup", "handle_menu_button", "handle_menu_select"]
