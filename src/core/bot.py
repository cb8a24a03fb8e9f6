"""
Classe principale du bot Discord.

Responsabilités :
- Crée le client Discord et l'arbre de commandes slash.
- Initialise la base de données (pool + schéma) et le registre des classes.
- Charge dynamiquement les commandes et les handlers d'interaction du menu.

Note : L'initialisation asynchrone est centralisée dans `setup_hook`, appelé avant `on_ready`.
Le pool et le registre sont portés par l'instance (pas d'état global) et injectés
dans les composants qui en ont besoin.
"""
from __future__ import annotations

import logging
import discord
from discord import app_commands

from core import config, db
from core.classes.registry import ClassRegistry

logger = logging.getLogger(__name__)

class Bot(discord.Client):
    """
    Client Discord étendu, encapsulant l'état applicatif.

    Attributs principaux :
        tree : Arbre des commandes slash (CommandTree)
        db_pool : Pool asyncpg (None si aucune DB configurée)
        classes : Registre des classes (None sans DB)
    """

    def __init__(self):
        super().__init__(intents=config.INTENTS)
        self.tree = app_commands.CommandTree(self)
        self.db_pool = None
        self.classes: ClassRegistry | None = None

    async def setup_hook(self):
        """
        Initialise les sous-systèmes avant la mise en ligne.

        Séquence :
        1. Connexion et migration DB
        2. Registre des classes
        3. Enregistrement des commandes et des handlers d'interaction
        4. Synchronisation des commandes (serveur GUILD_ID ou global)
        """
        if config.DATABASE_URL:
            try:
                self.db_pool = await db.create_pool(config.DATABASE_URL)
                await db.ensure_schema(self.db_pool)
                self.classes = ClassRegistry(self.db_pool)
                logger.info("DB prête")
            except Exception:  # noqa: BLE001
                logger.exception("Erreur init DB : gestion des classes indisponible")
        else:
            logger.error("DATABASE_URL absent : gestion des classes indisponible")

        try:
            from commands import load_all_commands  # type: ignore
            await load_all_commands(self)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur chargement commandes")
        try:
            from events.class_menu import setup as setup_class_menu  # type: ignore
            setup_class_menu(self)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur setup events")

        try:
            if config.GUILD_ID:
                guild = discord.Object(id=config.GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info("Slash commands synchronisées sur %s", config.GUILD_ID)
            else:
                await self.tree.sync()
                logger.info("Slash commands synchronisées (global)")
        except Exception:  # noqa: BLE001
            logger.exception("Erreur sync slash commands")

    async def on_ready(self):
        logger.info("Connecté: %s (%s)", self.user, getattr(self.user, 'id', '?'))

    async def close(self):  # type: ignore[override]
        """
        Fermeture propre du bot : ferme le pool asyncpg si présent.
        """
        try:
            await db.close_pool(self.db_pool)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur fermeture pool")
        self.db_pool = None
        await super().close()
