"""
Groupe de commandes slash `/class` : list, info, create, track, untrack, delete, menu.

La logique métier est déléguée au registre (`core/classes/registry.py`), les textes à
`views/classes.py` et les composants du menu à `views/class_menu.py`.
"""
from __future__ import annotations

import functools
import logging

import discord
from discord import app_commands

from core import errors
from core.classes.registry import ClassRegistry
from core.permissions import require_perms, MANAGE_GUILD
from views import classes as texts
from views.class_menu import ClassMenuButton

logger = logging.getLogger(__name__)

class_group = app_commands.Group(name="class", description="Gestion des classes")


def get_registry(interaction: discord.Interaction) -> ClassRegistry:
    reg = getattr(interaction.client, "classes", None)
    if reg is None:
        raise RuntimeError("Registre des classes non initialisé")
    return reg  # type: ignore


def class_command(func):
    """Diffère la réponse (éphémère) puis convertit les erreurs en message utilisateur.

    - ClassError : message renvoyé tel quel (cause exploitable par l'utilisateur)
    - ApiError / DatabaseError : loggées avec la cause, message générique
    - autre exception : loggée, message générique
    """
    @functools.wraps(func)
    async def wrapper(interaction: discord.Interaction, *args, **kwargs):
        if not interaction.response.is_done():
            await interaction.response.defer(ephemeral=True)
        try:
            await func(interaction, *args, **kwargs)
        except (errors.ApiError, errors.DatabaseError) as e:
            logger.error("/%s: %s", getattr(interaction.command, "qualified_name", "?"), e, exc_info=e.cause)
            await interaction.followup.send(texts.msg_internal_error(), ephemeral=True)
        except errors.ClassError as e:
            await interaction.followup.send(str(e), ephemeral=True)
        except Exception:  # noqa: BLE001
            logger.exception("Echec commande /%s", getattr(interaction.command, "qualified_name", "?"))
            await interaction.followup.send(texts.msg_internal_error(), ephemeral=True)
    return wrapper


@class_group.command(name="list", description="Lister les classes du serveur")
@app_commands.describe(mention="Afficher les rôles en mention plutôt que les noms")
@class_command
async def class_list(inter: discord.Interaction, mention: bool = False):
    if inter.guild is None:
        raise errors.NoServer()
    classes = await get_registry(inter).list_classes(inter.guild.id)
    if not classes:
        await inter.followup.send(texts.msg_no_class(), ephemeral=True)
        return
    await inter.followup.send(texts.fmt_class_list(classes, mention), ephemeral=True)


@class_group.command(name="info", description="Afficher les informations d'une classe")
@app_commands.describe(classe="Rôle de la classe", mention="Mentionner le rôle")
@class_command
async def class_info(inter: discord.Interaction, classe: discord.Role, mention: bool = False):
    if inter.guild is None:
        raise errors.NoServer()
    cls = await get_registry(inter).find_by_role(classe.id)
    if cls is None:
        raise errors.InvalidClass()
    category = inter.guild.get_channel(cls.category)
    if category is None:
        raise errors.InvalidChannel(texts.channel_mention(cls.category))
    if not isinstance(category, discord.CategoryChannel):
        raise errors.InvalidChannelType(category.mention)
    role_label = texts.role_mention(cls.role) if mention else f"`{classe.name}`"
    await inter.followup.send(texts.fmt_class_info(cls, role_label, category.name), ephemeral=True)


@class_group.command(name="create", description="Créer une classe (rôle, catégorie, salons)")
@app_commands.describe(nom="Nom de la classe")
@require_perms(MANAGE_GUILD, bot=True, message="Permission « Gérer le serveur » requise.")
@class_command
async def class_create(inter: discord.Interaction, nom: str):
    cls = await get_registry(inter).create(inter.guild, nom)  # type: ignore[arg-type]
    await inter.followup.send(texts.msg_class_created(cls.name), ephemeral=True)


@class_group.command(name="track", description="Suivre une classe à partir d'un rôle et d'une catégorie existants")
@app_commands.describe(
    role="Rôle de la classe",
    categorie="Catégorie de la classe (ses salons sont inclus automatiquement)",
    nom="Nom de la classe (par défaut : nom du rôle)",
    salon1="Salon supplémentaire (texte ou vocal)",
)
@require_perms(MANAGE_GUILD, message="Permission « Gérer le serveur » requise.")
@class_command
async def class_track(
    inter: discord.Interaction,
    role: discord.Role,
    categorie: discord.CategoryChannel,
    nom: str | None = None,
    salon1: discord.TextChannel | discord.VoiceChannel | None = None,
    salon2: discord.TextChannel | discord.VoiceChannel | None = None,
    salon3: discord.TextChannel | discord.VoiceChannel | None = None,
    salon4: discord.TextChannel | discord.VoiceChannel | None = None,
    salon5: discord.TextChannel | discord.VoiceChannel | None = None,
    salon6: discord.TextChannel | discord.VoiceChannel | None = None,
    salon7: discord.TextChannel | discord.VoiceChannel | None = None,
    salon8: discord.TextChannel | discord.VoiceChannel | None = None,
    salon9: discord.TextChannel | discord.VoiceChannel | None = None,
    salon10: discord.TextChannel | discord.VoiceChannel | None = None,
):
    channels = [c for c in (salon1, salon2, salon3, salon4, salon5, salon6, salon7, salon8, salon9, salon10) if c is not None]
    cls = await get_registry(inter).track(inter.guild, nom, role, categorie, channels)  # type: ignore[arg-type]
    await inter.followup.send(texts.msg_class_tracked(cls.name), ephemeral=True)


@class_group.command(name="untrack", description="Ne plus suivre une classe (rien n'est supprimé sur Discord)")
@app_commands.describe(classe="Rôle de la classe")
@require_perms(MANAGE_GUILD, message="Permission « Gérer le serveur » requise.")
@class_command
async def class_untrack(inter: discord.Interaction, classe: discord.Role):
    registry = get_registry(inter)
    cls = await registry.find_by_role(classe.id)
    if cls is None:
        raise errors.InvalidClass()
    name = await registry.untrack(cls)
    if name is None:
        raise errors.InvalidClass()
    await inter.followup.send(texts.msg_class_untracked(name), ephemeral=True)


@class_group.command(name="delete", description="Supprimer une classe et ses rôle, catégorie et salons")
@app_commands.describe(classe="Rôle de la classe")
@require_perms(MANAGE_GUILD, bot=True, message="Permission « Gérer le serveur » requise.")
@class_command
async def class_delete(inter: discord.Interaction, classe: discord.Role):
    registry = get_registry(inter)
    cls = await registry.find_by_role(classe.id)
    if cls is None:
        raise errors.InvalidClass()
    name, failed = await registry.delete(cls, inter.guild)  # type: ignore[arg-type]
    if name is not None:
        await inter.followup.send(texts.msg_class_deleted(name), ephemeral=True)
    else:
        await inter.followup.send(texts.msg_delete_failed(), ephemeral=True)
    if failed:
        await inter.followup.send(texts.fmt_errors(failed), ephemeral=True)


@class_group.command(name="menu", description="Publier le bouton de choix des classes")
@app_commands.describe(salon="Salon texte cible (par défaut : salon courant)")
@require_perms(MANAGE_GUILD, message="Permission « Gérer le serveur » requise.")
@class_command
async def class_menu(inter: discord.Interaction, salon: discord.TextChannel | None = None):
    channel = salon or inter.channel
    if channel is None:
        raise errors.InvalidChannel(texts.channel_mention(inter.channel_id or 0))
    if not isinstance(channel, discord.TextChannel):
        raise errors.InvalidChannelType(getattr(channel, "mention", texts.channel_mention(channel.id)))
    try:
        await channel.send(view=ClassMenuButton())
    except discord.HTTPException as e:
        raise errors.ApiError(e) from e
    await inter.followup.send(texts.msg_menu_posted(), ephemeral=True)


def register(bot: discord.Client):
    bot.tree.add_command(class_group)

__all__ = ["register", "class_group", "class_command", "get_registry"]
