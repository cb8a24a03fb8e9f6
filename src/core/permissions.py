"""
Utilitaires pour la vérification des permissions Discord via bitmask.

Rappel :
- `discord.Permissions` expose un attribut `.value` (int) contenant les bits cumulés
- On teste un sous-ensemble via : (current & required) == required
- Un administrateur reçoit toutes les permissions dans `guild_permissions`

Exemple : Manage Guild = 0x00000020

Ce module fournit le décorateur `require_perms` pour les commandes slash.
"""
from __future__ import annotations

from typing import Callable, TypeVar, Awaitable, Any
import functools
import discord

T = TypeVar("T", bound=Callable[..., Awaitable[Any]])

# Extraits de `discord.Permissions` (compléter si besoin futur)
MANAGE_GUILD = 0x00000020


def _has_bits(perms: discord.Permissions, bits: int) -> bool:
    return (perms.value & bits) == bits


async def _deny(interaction: discord.Interaction, text: str, ephemeral: bool):
    if interaction.response.is_done():
        await interaction.followup.send(text, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(text, ephemeral=ephemeral)


def require_perms(bits: int, *, bot: bool = False, ephemeral: bool = True, message: str | None = None):
    """
    Décorateur pour vérifier qu'un utilisateur possède toutes les permissions spécifiées (bitmask).

    Args :
        bits : Masque de bits des permissions requises (ex : MANAGE_GUILD = 0x20)
        bot : Si True, le bot lui-même (`guild.me`) doit aussi posséder ces permissions
        ephemeral : Si True, les messages d'erreur sont envoyés en éphémère
        message : Message d'erreur personnalisé (optionnel)

    Note :
    - Si utilisée en DM, l'accès est refusé
    """
    def decorator(func: T) -> T:
        @functools.wraps(func)
        async def wrapper(interaction: discord.Interaction, *args, **kwargs):  # type: ignore[misc]
            if interaction.guild is None:
                await _deny(interaction, "Cette commande ne peut être utilisée que dans un serveur.", ephemeral)
                return  # type: ignore[return-value]
            if not _has_bits(interaction.user.guild_permissions, bits):  # type: ignore[union-attr]
                await _deny(interaction, message or f"Permissions insuffisantes (requis bitmask: {bits:#x}).", ephemeral)
                return  # type: ignore[return-value]
            if bot and not _has_bits(interaction.guild.me.guild_permissions, bits):
                await _deny(interaction, f"Le bot n'a pas les permissions requises (bitmask: {bits:#x}).", ephemeral)
                return  # type: ignore[return-value]
            return await func(interaction, *args, **kwargs)
        return wrapper  # type: ignore[return-value]
    return decorator

__all__ = ["require_perms", "MANAGE_GUILD"]
