"""Fixtures communes : base en mémoire branchée sur `db.*`, guild factice, registre."""
import pytest

from core.classes.registry import ClassRegistry
from db import classes as classes_db
from db import servers as servers_db

from fakes import FakeGuild, FakeStore


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    for name in ("find_server", "insert_server", "replace_server"):
        monkeypatch.setattr(servers_db, name, getattr(fake, name))
    for name in ("list_classes", "find_class", "find_class_by_role", "insert_class", "delete_classes_by_role"):
        monkeypatch.setattr(classes_db, name, getattr(fake, name))
    return fake


@pytest.fixture
def guild():
    return FakeGuild()


@pytest.fixture
def registry(store):
    return ClassRegistry(pool=object())


@pytest.fixture
def refrole(guild, store):
    """Rôle de référence configuré pour la guild."""
    from core.classes.models import Server

    role = guild.add_role("Classes", position=5)
    store.servers[guild.id] = Server(server_id=guild.id, refrole=role.id)
    return role
