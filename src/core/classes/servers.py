"""
Configuration par serveur : création paresseuse et rôle de référence (refrole).
"""
from __future__ import annotations

import logging

import discord

from core import errors
from db import servers as db
from .models import Server

logger = logging.getLogger(__name__)


async def get_or_create(pool, guild_id: int) -> Server:
    """Retourne la configuration du serveur, en la créant (valeurs par défaut) si absente.

    L'insertion est conditionnelle : si un autre appel a créé la ligne entre-temps,
    on relit celle-ci plutôt que d'en créer une seconde.
    """
    server = await db.find_server(pool, guild_id)
    if server is not None:
        return server
    server = Server(server_id=guild_id)
    if await db.insert_server(pool, server):
        logger.info("Configuration créée pour le serveur %s", guild_id)
        return server
    existing = await db.find_server(pool, guild_id)
    return existing if existing is not None else server


async def set_refrole(pool, guild: discord.Guild, role_id: int) -> Server:
    """Définit le rôle de référence du serveur.

    Raises:
        InvalidRole : le rôle n'existe pas (ou plus) sur le serveur
        NoServer    : aucune configuration à remplacer pour ce serveur
    """
    if guild.get_role(role_id) is None:
        raise errors.InvalidRole()
    server = await get_or_create(pool, guild.id)
    new = Server(server_id=server.server_id, admin_roles=set(server.admin_roles), refrole=role_id)
    if await db.replace_server(pool, new) is None:
        raise errors.NoServer()
    logger.info("Refrole du serveur %s: %s", guild.id, role_id)
    return new
