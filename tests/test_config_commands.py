"""Commandes `/config refrole set|show`."""
from types import SimpleNamespace

import discord
import pytest

from commands import config as config_commands
from core import errors
from views import classes as texts

from test_commands import make_interaction, sent_texts


@pytest.fixture
def admin_guild(guild):
    guild.me = SimpleNamespace(guild_permissions=discord.Permissions(manage_guild=True))
    return guild


@pytest.mark.asyncio
async def test_refrole_show_then_set(registry, admin_guild, store):
    role = admin_guild.add_role("Anchor", position=4)
    interaction = make_interaction(admin_guild, registry)

    await config_commands.refrole_show.callback(interaction)
    await config_commands.refrole_set.callback(interaction, role)
    await config_commands.refrole_show.callback(interaction)

    assert sent_texts(interaction) == [
        texts.msg_refrole_none(),
        texts.msg_refrole_set(role.id),
        texts.msg_refrole_show(role.id),
    ]
    assert store.servers[admin_guild.id].refrole == role.id


@pytest.mark.asyncio
async def test_refrole_set_with_foreign_role(registry, admin_guild, store):
    foreign = SimpleNamespace(id=987654321)
    interaction = make_interaction(admin_guild, registry)

    await config_commands.refrole_set.callback(interaction, foreign)

    assert sent_texts(interaction) == [errors.InvalidRole.message]
