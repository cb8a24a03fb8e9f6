"""
Abstraction pour PostgreSQL via asyncpg.

Principes :
- Le pool est créé une seule fois au démarrage (`Bot.setup_hook`) puis injecté
  dans les composants qui en ont besoin ; aucun état global dans ce module.
- Fonctions utilitaires atomiques (pas d'ORM) dans le package `db`
- Schéma : tables `servers` et `classes`
"""
from __future__ import annotations

import asyncpg
import logging

from db import classes as classes_db
from db import servers as servers_db

logger = logging.getLogger(__name__)


async def create_pool(dsn: str) -> asyncpg.Pool:
    """
    Crée le pool asyncpg.
    Args :
        dsn : URL de connexion Postgres
    """
    pool = await asyncpg.create_pool(dsn, min_size=1, max_size=5)
    logger.info("Pool asyncpg initialisé")
    return pool


async def ensure_schema(pool: asyncpg.Pool):
    """
    Vérifie et crée le schéma requis si absent (tables + index), dans une transaction.
    """
    async with pool.acquire() as conn:
        async with conn.transaction():
            await servers_db.ensure_schema(conn)
            await classes_db.ensure_schema(conn)
    logger.info("Schéma vérifié (servers, classes)")


async def close_pool(pool: asyncpg.Pool | None):
    if pool is None:
        return
    await pool.close()
    logger.info("Pool asyncpg fermé")
