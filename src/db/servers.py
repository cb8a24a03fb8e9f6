"""
Helpers base de données pour la configuration par serveur.

Schéma :
- servers : server_id BIGINT PRIMARY KEY, admin_roles BIGINT[], refrole BIGINT NULL

Toutes les recherches se font par égalité sur la clé primaire `server_id`.
"""
from __future__ import annotations

import asyncpg
from typing import Optional

from core.classes.models import Server
from core.errors import translate_db_errors

SCHEMA = """
CREATE TABLE IF NOT EXISTS servers (
    server_id BIGINT PRIMARY KEY,
    admin_roles BIGINT[] NOT NULL DEFAULT '{}',
    refrole BIGINT NULL
);
"""


def _to_server(row: asyncpg.Record) -> Server:
    return Server(
        server_id=int(row["server_id"]),
        admin_roles={int(r) for r in (row["admin_roles"] or [])},
        refrole=int(row["refrole"]) if row["refrole"] is not None else None,
    )


async def ensure_schema(conn: asyncpg.Connection):
    await conn.execute(SCHEMA)


@translate_db_errors
async def find_server(pool: asyncpg.Pool, server_id: int) -> Optional[Server]:
    q = "SELECT server_id, admin_roles, refrole FROM servers WHERE server_id=$1"
    async with pool.acquire() as conn:
        row = await conn.fetchrow(q, server_id)
    return _to_server(row) if row else None


@translate_db_errors
async def insert_server(pool: asyncpg.Pool, server: Server) -> bool:
    """Insère la ligne si absente. Retourne False si un autre appel l'a déjà créée."""
    q = """
    INSERT INTO servers(server_id, admin_roles, refrole)
    VALUES($1,$2,$3)
    ON CONFLICT (server_id) DO NOTHING
    RETURNING server_id
    """
    async with pool.acquire() as conn:
        inserted = await conn.fetchval(q, server.server_id, sorted(server.admin_roles), server.refrole)
    return inserted is not None


@translate_db_errors
async def replace_server(pool: asyncpg.Pool, server: Server) -> Optional[Server]:
    """Remplace la ligne `server_id` en une seule requête.

    Retourne la valeur précédente, ou None si aucune ligne ne correspondait.
    """
    q = """
    WITH prior AS (
        SELECT server_id, admin_roles, refrole FROM servers WHERE server_id=$1 FOR UPDATE
    )
    UPDATE servers s SET admin_roles=$2, refrole=$3
    FROM prior
    WHERE s.server_id = prior.server_id
    RETURNING prior.server_id, prior.admin_roles, prior.refrole
    """
    async with pool.acquire() as conn:
        row = await conn.fetchrow(q, server.server_id, sorted(server.admin_roles), server.refrole)
    return _to_server(row) if row else None
