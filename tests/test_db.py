"""Accesseurs SQL (`db.classes`, `db.servers`) sur un pool asyncpg factice."""
import contextlib
from unittest.mock import AsyncMock

import asyncpg
import pytest

from core import errors
from core.classes.models import Class, Server
from db import classes as classes_db
from db import servers as servers_db


class FakePool:
    """Pool minimal : `acquire()` rend toujours la même connexion (AsyncMock)."""

    def __init__(self):
        self.conn = AsyncMock()

    @contextlib.asynccontextmanager
    async def acquire(self):
        yield self.conn


def unique_violation(constraint: str) -> asyncpg.UniqueViolationError:
    err = asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
    err.constraint_name = constraint
    return err


def class_row(name: str, role: int) -> dict:
    return {
        "server_id": 1, "name": name, "short_name": name.lower(), "role": role, "category": 9,
        "text_channels": [3, 2], "voice_channels": [4],
    }


def make_class(name: str = "Algebra", role: int = 10) -> Class:
    return Class(server_id=1, name=name, short_name=name.lower(), role=role, category=9,
                 text_channels={2, 3}, voice_channels={4})


@pytest.fixture
def pool():
    return FakePool()


@pytest.mark.asyncio
async def test_insert_class_role_conflict_names_the_bound_class(pool):
    pool.conn.execute.side_effect = unique_violation(classes_db.ROLE_KEY)
    pool.conn.fetchrow.return_value = class_row("Other", 10)

    with pytest.raises(errors.RoleInUse) as exc:
        await classes_db.insert_class(pool, make_class())

    assert exc.value.class_name == "Other"


@pytest.mark.asyncio
async def test_insert_class_name_conflict(pool):
    pool.conn.execute.side_effect = unique_violation(classes_db.NAME_KEY)

    with pytest.raises(errors.ClassExists):
        await classes_db.insert_class(pool, make_class())


@pytest.mark.asyncio
async def test_insert_class_stores_sorted_channel_arrays(pool):
    cls = make_class()
    assert await classes_db.insert_class(pool, cls) is cls

    args = pool.conn.execute.await_args.args
    assert args[1:] == (1, "Algebra", "algebra", 10, 9, [2, 3], [4])


@pytest.mark.asyncio
@pytest.mark.parametrize("cause", [
    OSError("connexion réinitialisée"),
    asyncpg.InterfaceError("pool fermé"),
    asyncpg.PostgresError("erreur serveur"),
])
async def test_transport_errors_become_database_error(pool, cause):
    pool.conn.fetch.side_effect = cause

    with pytest.raises(errors.DatabaseError) as exc:
        await classes_db.list_classes(pool, 1)

    assert exc.value.cause is cause


@pytest.mark.asyncio
@pytest.mark.parametrize("status,count", [("DELETE 0", 0), ("DELETE 1", 1), ("DELETE 3", 3)])
async def test_delete_classes_by_role_reads_status(pool, status, count):
    pool.conn.execute.return_value = status
    assert await classes_db.delete_classes_by_role(pool, 10) == count


@pytest.mark.asyncio
async def test_find_class_maps_row(pool):
    pool.conn.fetchrow.return_value = class_row("Algebra", 10)

    assert await classes_db.find_class(pool, 1, "ALGEBRA") == make_class()
    query, *params = pool.conn.fetchrow.await_args.args
    assert "lower(name)=lower($2)" in query
    assert params == [1, "ALGEBRA"]


@pytest.mark.asyncio
async def test_replace_server_without_row(pool):
    pool.conn.fetchrow.return_value = None
    assert await servers_db.replace_server(pool, Server(server_id=5, refrole=7)) is None


@pytest.mark.asyncio
async def test_replace_server_returns_prior_value(pool):
    pool.conn.fetchrow.return_value = {"server_id": 5, "admin_roles": [2, 1], "refrole": None}

    prior = await servers_db.replace_server(pool, Server(server_id=5, admin_roles={1, 2}, refrole=7))

    assert prior == Server(server_id=5, admin_roles={1, 2}, refrole=None)
    assert pool.conn.fetchrow.await_args.args[1:] == (5, [1, 2], 7)


@pytest.mark.asyncio
@pytest.mark.parametrize("returned,expected", [(5, True), (None, False)])
async def test_insert_server_reports_lost_race(pool, returned, expected):
    pool.conn.fetchval.return_value = returned
    assert await servers_db.insert_server(pool, Server(server_id=5)) is expected
