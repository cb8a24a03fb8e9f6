"""
Commandes slash `/config refrole set|show` : rôle de référence du serveur.

Les rôles de classe créés par `/class create` sont insérés à la position de ce rôle
dans la hiérarchie.
"""
from __future__ import annotations

import logging

import discord
from discord import app_commands

from core.classes import servers
from core.permissions import require_perms, MANAGE_GUILD
from views import classes as texts
from .classes import class_command, get_registry

logger = logging.getLogger(__name__)

config_group = app_commands.Group(name="config", description="Configuration du serveur")
refrole_group = app_commands.Group(name="refrole", description="Rôle de référence des classes", parent=config_group)


@refrole_group.command(name="set", description="Définir le rôle de référence")
@app_commands.describe(role="Rôle sous lequel les rôles de classe sont créés")
@require_perms(MANAGE_GUILD, bot=True, message="Permission « Gérer le serveur » requise.")
@class_command
async def refrole_set(inter: discord.Interaction, role: discord.Role):
    await servers.set_refrole(get_registry(inter).pool, inter.guild, role.id)  # type: ignore[arg-type]
    await inter.followup.send(texts.msg_refrole_set(role.id), ephemeral=True)


@refrole_group.command(name="show", description="Afficher le rôle de référence")
@require_perms(MANAGE_GUILD, message="Permission « Gérer le serveur » requise.")
@class_command
async def refrole_show(inter: discord.Interaction):
    server = await servers.get_or_create(get_registry(inter).pool, inter.guild.id)  # type: ignore[union-attr]
    if server.refrole is None:
        await inter.followup.send(texts.msg_refrole_none(), ephemeral=True)
        return
    await inter.followup.send(texts.msg_refrole_show(server.refrole), ephemeral=True)


def register(bot: discord.Client):
    bot.tree.add_command(config_group)

__all__ = ["register"]
