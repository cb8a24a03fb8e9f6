"""
Configuration centrale du bot Discord.

Ce module charge les variables d'environnement (.env) et prépare :
- Les intents Discord (membres optionnel via ENABLE_MEMBERS_INTENT)
- Le token du bot (BOT_TOKEN, obligatoire)
- L'URL de la base de données (DATABASE_URL, obligatoire pour les classes)
- Le serveur de développement (GUILD_ID, optionnel) : les commandes y sont synchronisées
  immédiatement au lieu d'une synchronisation globale

Un warning est émis si BOT_TOKEN ou DATABASE_URL est absent pour détecter le problème avant le lancement du bot.
"""
from __future__ import annotations

import os
import logging
from dotenv import load_dotenv
import discord

load_dotenv()

logger = logging.getLogger(__name__)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name, "") or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _get_int(name: str) -> int | None:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s invalide (entier attendu): %r", name, raw)
        return None


INTENTS = discord.Intents.default()
# L'intent "members" est privilégié ; seulement utile pour le cache des membres
INTENTS.members = _get_bool("ENABLE_MEMBERS_INTENT")

BOT_TOKEN = os.getenv("BOT_TOKEN")
DATABASE_URL = os.getenv("DATABASE_URL")
GUILD_ID = _get_int("GUILD_ID")


# Avertit si le token du bot ou la base sont absents
if not BOT_TOKEN:
    logger.warning("BOT_TOKEN manquant dans l'environnement")
if not DATABASE_URL:
    logger.warning("DATABASE_URL manquant : la gestion des classes sera indisponible")
