from __future__ import annotations

import asyncio
import functools
import logging
import weakref
from typing import Awaitable, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

import discord

from core import errors
from db import classes as db
from . import servers
from .models import Class, normalize_short_name

logger = logging.getLogger(__name__)

REASON = "Gestion des classes"

# Salons créés pour chaque nouvelle classe
TEXT_CHANNEL_PATTERNS = ("general—〈{}〉", "homework-help—〈{}〉", "resources—〈{}〉")
VOICE_CHANNEL_PATTERN = "General ({})"

UndoAction = Tuple[str, Callable[[], Awaitable[object]]]


class ClassRegistry:
    """Coordonne le cycle de vie des classes entre Discord et la base.

    Responsabilités:
        - Création (objets Discord neufs) et suivi (objets existants) de classes.
        - Retrait du suivi et suppression complète (best effort).
        - Sérialisation locale des vérifications d'unicité (verrous par nom / rôle).

    Les deux stockages ne sont jamais modifiés dans une même transaction : la base
    fait foi pour « classe suivie », Discord pour l'état réel des rôles et salons.
    """

    def __init__(self, pool):
        self.pool = pool
        # Références faibles : un verrou disparaît dès que plus aucun appel ne le tient
        self.locks: weakref.WeakValueDictionary[Hashable, asyncio.Lock] = weakref.WeakValueDictionary()

    # ---------- utilitaires ----------
    def get_lock(self, key: Hashable) -> asyncio.Lock:
        lock = self.locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self.locks[key] = lock
        return lock

    @staticmethod
    def _name_key(server_id: int, name: str) -> Hashable:
        return ("name", server_id, name.lower())

    @staticmethod
    def _role_key(role_id: int) -> Hashable:
        return ("role", role_id)

    async def _ensure_name_free(self, server_id: int, name: str):
        if await db.find_class(self.pool, server_id, name) is not None:
            raise errors.ClassExists()

    async def _rollback(self, undo: List[UndoAction]):
        # Ordre inverse de création : salons, catégorie, puis rôle
        for label, action in reversed(undo):
            try:
                await action()
                logger.info("Rollback: %s supprimé", label)
            except Exception:  # noqa: BLE001
                logger.exception("Rollback: échec suppression %s (à nettoyer manuellement)", label)

    # ---------- lecture ----------
    async def list_classes(self, server_id: int) -> Sequence[Class]:
        return await db.list_classes(self.pool, server_id)

    async def find_by_role(self, role_id: int) -> Optional[Class]:
        return await db.find_class_by_role(self.pool, role_id)

    # ---------- création ----------
    async def create(self, guild: discord.Guild, name: str) -> Class:
        """Crée une classe : rôle, catégorie privée et 4 salons, puis l'enregistre.

        Si une étape échoue après la création d'objets Discord, ceux-ci sont supprimés
        (best effort) avant de propager l'erreur.
        """
        name = name.strip()
        if not name:
            raise errors.EmptyName()
        async with self.get_lock(self._name_key(guild.id, name)):
            server = await servers.get_or_create(self.pool, guild.id)
            if server.refrole is None:
                raise errors.NoRefrole()
            await self._ensure_name_free(guild.id, name)

            lowered = name.lower()
            if any(r.name.lower() == lowered for r in guild.roles):
                raise errors.RoleExists()
            if any(c.name.lower() == lowered for c in guild.categories):
                raise errors.CategoryExists()

            refrole = guild.get_role(server.refrole)
            if refrole is None:
                raise errors.InvalidRefrole()
            position = refrole.position

            short_name = normalize_short_name(name)
            undo: List[UndoAction] = []
            try:
                role = await guild.create_role(name=name, mentionable=True, reason=REASON)
                undo.append((f"rôle {role.id}", functools.partial(role.delete, reason=REASON)))
                if position > 0:
                    await role.edit(position=position, reason=REASON)

                overwrites = {
                    guild.default_role: discord.PermissionOverwrite(view_channel=False),
                    role: discord.PermissionOverwrite(view_channel=True),
                }
                category = await guild.create_category(name, overwrites=overwrites, reason=REASON)
                undo.append((f"catégorie {category.id}", functools.partial(category.delete, reason=REASON)))

                results = await asyncio.gather(
                    *(guild.create_text_channel(p.format(short_name), category=category, reason=REASON)
                      for p in TEXT_CHANNEL_PATTERNS),
                    guild.create_voice_channel(VOICE_CHANNEL_PATTERN.format(short_name), category=category, reason=REASON),
                    return_exceptions=True,
                )
                for ch in results:
                    if not isinstance(ch, BaseException):
                        undo.append((f"salon {ch.id}", functools.partial(ch.delete, reason=REASON)))
                failures = [r for r in results if isinstance(r, BaseException)]
                if failures:
                    raise failures[0]
                text_channels, voice_channel = results[:-1], results[-1]

                cls = Class(
                    server_id=server.server_id,
                    name=name,
                    short_name=short_name,
                    role=role.id,
                    category=category.id,
                    text_channels={c.id for c in text_channels},
                    voice_channels={voice_channel.id},
                )
                await db.insert_class(self.pool, cls)
            except Exception as e:
                logger.warning("Création de la classe %r échouée, rollback de %d objet(s)", name, len(undo))
                await self._rollback(undo)
                if isinstance(e, discord.HTTPException):
                    raise errors.ApiError(e) from e
                raise
        logger.info("Classe créée: %s (rôle %s, serveur %s)", cls.name, cls.role, cls.server_id)
        return cls

    async def track(
        self,
        guild: discord.Guild,
        name: Optional[str],
        role: discord.Role,
        category: discord.CategoryChannel,
        channels: Sequence[discord.abc.GuildChannel] = (),
    ) -> Class:
        """Suit une classe à partir d'objets Discord existants (aucune création).

        Les salons retenus sont l'union des salons donnés et de ceux rangés dans la
        catégorie. Seuls les salons texte et vocaux sont acceptés.
        """
        name = (name or "").strip() or role.name
        async with self.get_lock(self._name_key(guild.id, name)), self.get_lock(self._role_key(role.id)):
            server = await servers.get_or_create(self.pool, guild.id)
            await self._ensure_name_free(guild.id, name)
            existing = await db.find_class_by_role(self.pool, role.id)
            if existing is not None:
                raise errors.RoleInUse(existing.name)

            # Union dédupliquée par id (un salon peut être donné et déjà dans la catégorie)
            candidates: Dict[int, discord.abc.GuildChannel] = {c.id: c for c in channels}
            for c in guild.channels:
                if c.category_id == category.id:
                    candidates.setdefault(c.id, c)

            text_channels: set[int] = set()
            voice_channels: set[int] = set()
            for c in candidates.values():
                if c.type == discord.ChannelType.text:
                    text_channels.add(c.id)
                elif c.type == discord.ChannelType.voice:
                    voice_channels.add(c.id)
                else:
                    raise errors.InvalidChannelType(c.mention)

            cls = Class(
                server_id=server.server_id,
                name=name,
                short_name=normalize_short_name(name),
                role=role.id,
                category=category.id,
                text_channels=text_channels,
                voice_channels=voice_channels,
            )
            await db.insert_class(self.pool, cls)
        logger.info("Classe suivie: %s (rôle %s, %d texte / %d vocal)", name, role.id, len(text_channels), len(voice_channels))
        return cls

    # ---------- suppression ----------
    async def untrack(self, cls: Class) -> Optional[str]:
        """Retire la classe de la base sans toucher à Discord.

        Retourne le nom si une ligne a été supprimée, None si elle n'existait déjà plus.
        """
        deleted = await db.delete_classes_by_role(self.pool, cls.role)
        if deleted > 0:
            logger.info("Classe retirée du suivi: %s", cls.name)
            return cls.name
        return None

    async def delete(self, cls: Class, guild: discord.Guild) -> Tuple[Optional[str], List[errors.ClassError]]:
        """Retire la classe du suivi puis supprime salons, catégorie et rôle.

        Chaque suppression est indépendante : un échec est ajouté à la liste retournée
        sans interrompre les suivantes.
        """
        removed = await self.untrack(cls)
        failed: List[errors.ClassError] = []

        for cid in [*sorted(cls.text_channels), *sorted(cls.voice_channels), cls.category]:
            channel = guild.get_channel(cid)
            if channel is None:
                failed.append(errors.InvalidChannel(f"<#{cid}>"))
                continue
            try:
                await channel.delete(reason=REASON)
            except discord.HTTPException as e:
                failed.append(errors.ApiError(e))

        role = guild.get_role(cls.role)
        if role is None:
            failed.append(errors.InvalidRole())
        else:
            try:
                await role.delete(reason=REASON)
            except discord.HTTPException as e:
                failed.append(errors.ApiError(e))

        if failed:
            logger.warning("Suppression de %s: %d échec(s)", cls.name, len(failed))
        return removed, failed


__all__ = ["ClassRegistry", "TEXT_CHANNEL_PATTERNS", "VOICE_CHANNEL_PATTERN"]
