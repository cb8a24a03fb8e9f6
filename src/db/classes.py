"""
Couche base de données des classes.

Schéma :
- classes : id SERIAL, server_id BIGINT, name TEXT, short_name TEXT, role BIGINT,
  category BIGINT, text_channels BIGINT[], voice_channels BIGINT[]

Index (toutes les recherches sont des égalités exactes sur ces clés) :
- classes_server_id_idx        (server_id)
- classes_server_id_name_key   (server_id, lower(name))  UNIQUE, nom insensible à la casse
- classes_role_key             (role)                    UNIQUE, un rôle = une classe
"""
from __future__ import annotations

import asyncpg
from typing import Optional, Sequence

from core.classes.models import Class
from core import errors
from core.errors import translate_db_errors

SCHEMA = """
CREATE TABLE IF NOT EXISTS classes (
    id SERIAL PRIMARY KEY,
    server_id BIGINT NOT NULL,
    name TEXT NOT NULL,
    short_name TEXT NOT NULL,
    role BIGINT NOT NULL,
    category BIGINT NOT NULL,
    text_channels BIGINT[] NOT NULL DEFAULT '{}',
    voice_channels BIGINT[] NOT NULL DEFAULT '{}'
);

CREATE INDEX IF NOT EXISTS classes_server_id_idx ON classes(server_id);
CREATE UNIQUE INDEX IF NOT EXISTS classes_server_id_name_key ON classes(server_id, lower(name));
CREATE UNIQUE INDEX IF NOT EXISTS classes_role_key ON classes(role);
"""

NAME_KEY = "classes_server_id_name_key"
ROLE_KEY = "classes_role_key"

_COLUMNS = "server_id, name, short_name, role, category, text_channels, voice_channels"


def _to_class(row: asyncpg.Record) -> Class:
    return Class(
        server_id=int(row["server_id"]),
        name=row["name"],
        short_name=row["short_name"],
        role=int(row["role"]),
        category=int(row["category"]),
        text_channels={int(c) for c in (row["text_channels"] or [])},
        voice_channels={int(c) for c in (row["voice_channels"] or [])},
    )


async def ensure_schema(conn: asyncpg.Connection):
    await conn.execute(SCHEMA)


@translate_db_errors
async def list_classes(pool: asyncpg.Pool, server_id: int) -> Sequence[Class]:
    q = f"SELECT {_COLUMNS} FROM classes WHERE server_id=$1"
    async with pool.acquire() as conn:
        rows = await conn.fetch(q, server_id)
    return [_to_class(r) for r in rows]


@translate_db_errors
async def find_class(pool: asyncpg.Pool, server_id: int, name: str) -> Optional[Class]:
    q = f"SELECT {_COLUMNS} FROM classes WHERE server_id=$1 AND lower(name)=lower($2)"
    async with pool.acquire() as conn:
        row = await conn.fetchrow(q, server_id, name)
    return _to_class(row) if row else None


@translate_db_errors
async def find_class_by_role(pool: asyncpg.Pool, role_id: int) -> Optional[Class]:
    q = f"SELECT {_COLUMNS} FROM classes WHERE role=$1"
    async with pool.acquire() as conn:
        row = await conn.fetchrow(q, role_id)
    return _to_class(row) if row else None


@translate_db_errors
async def insert_class(pool: asyncpg.Pool, cls: Class) -> Class:
    """Insère une classe.

    Les index uniques tranchent les courses entre deux créations concurrentes :
    un conflit est converti en `ClassExists` ou `RoleInUse`.
    """
    q = f"INSERT INTO classes({_COLUMNS}) VALUES($1,$2,$3,$4,$5,$6,$7)"
    try:
        async with pool.acquire() as conn:
            await conn.execute(
                q, cls.server_id, cls.name, cls.short_name, cls.role, cls.category,
                sorted(cls.text_channels), sorted(cls.voice_channels),
            )
    except asyncpg.UniqueViolationError as e:
        if e.constraint_name == ROLE_KEY:
            existing = await find_class_by_role(pool, cls.role)
            raise errors.RoleInUse(existing.name if existing else cls.name) from e
        raise errors.ClassExists() from e
    return cls


@translate_db_errors
async def delete_classes_by_role(pool: asyncpg.Pool, role_id: int) -> int:
    """Supprime les classes liées au rôle. Retourne le nombre de lignes supprimées."""
    q = "DELETE FROM classes WHERE role=$1"
    async with pool.acquire() as conn:
        status = await conn.execute(q, role_id)
    # status de la forme "DELETE <n>"
    return int(status.split()[-1])
