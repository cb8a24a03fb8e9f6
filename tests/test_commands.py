"""Commandes `/class` appelées directement via leur callback."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from commands import classes as class_commands
from core import errors
from views import classes as texts


def make_interaction(guild, registry, *, allowed=True):
    interaction = MagicMock()
    interaction.guild = guild
    interaction.user.guild_permissions = discord.Permissions(manage_guild=allowed)
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    interaction.client.classes = registry
    return interaction


def sent_texts(interaction):
    return [c.args[0] for c in interaction.followup.send.await_args_list]


@pytest.mark.asyncio
async def test_class_command_sends_business_errors_verbatim():
    @class_commands.class_command
    async def failing(inter):
        raise errors.RoleInUse("Algebra")

    interaction = make_interaction(None, None)
    await failing(interaction)

    interaction.response.defer.assert_awaited_once_with(ephemeral=True)
    assert sent_texts(interaction) == ["Ce rôle est déjà utilisé par la classe Algebra."]


@pytest.mark.asyncio
async def test_class_command_hides_unexpected_errors():
    @class_commands.class_command
    async def failing(inter):
        raise KeyError("boom")

    interaction = make_interaction(None, None)
    await failing(interaction)

    assert sent_texts(interaction) == [texts.msg_internal_error()]


@pytest.mark.asyncio
async def test_untrack_command(registry, guild):
    role = guild.add_role("Biology")
    category = guild.add_channel("Biology", discord.ChannelType.category)
    await registry.track(guild, None, role, category, [])
    interaction = make_interaction(guild, registry)

    await class_commands.class_untrack.callback(interaction, role)
    await class_commands.class_untrack.callback(interaction, role)

    assert sent_texts(interaction) == [texts.msg_class_untracked("Biology"), errors.InvalidClass.message]


@pytest.mark.asyncio
async def test_untrack_requires_manage_guild(registry, guild, store):
    role = guild.add_role("Biology")
    category = guild.add_channel("Biology", discord.ChannelType.category)
    await registry.track(guild, None, role, category, [])
    interaction = make_interaction(guild, registry, allowed=False)

    await class_commands.class_untrack.callback(interaction, role)

    interaction.response.send_message.assert_awaited_once()
    interaction.followup.send.assert_not_awaited()
    assert len(store.classes) == 1


@pytest.mark.asyncio
async def test_delete_command_reports_partial_failures(registry, guild, refrole):
    guild.me = SimpleNamespace(guild_permissions=discord.Permissions(manage_guild=True))
    cls = await registry.create(guild, "Algebra")
    await guild.get_channel(cls.category).delete()
    interaction = make_interaction(guild, registry)

    await class_commands.class_delete.callback(interaction, guild.get_role(cls.role))

    deleted, report = sent_texts(interaction)
    assert deleted == texts.msg_class_deleted("Algebra")
    assert report.startswith("Erreurs :")
    assert f"<#{cls.category}>" in report


@pytest.mark.asyncio
async def test_list_command_sorts_naturally(registry, guild, refrole):
    for name in ("Class 10", "Class 2", "Class 1"):
        await registry.create(guild, name)
    interaction = make_interaction(guild, registry)

    await class_commands.class_list.callback(interaction, False)

    assert sent_texts(interaction) == ["3 classe(s) : Class 1, Class 2, Class 10"]


@pytest.mark.asyncio
async def test_list_command_without_classes(registry, guild, store):
    interaction = make_interaction(guild, registry)

    await class_commands.class_list.callback(interaction)

    assert sent_texts(interaction) == [texts.msg_no_class()]


def test_class_list_text_with_mentions():
    from core.classes.models import Class

    classes = [
        Class(server_id=1, name=n, short_name=n.lower(), role=r, category=0, text_channels=set(), voice_channels=set())
        for n, r in (("B", 2), ("A", 1))
    ]
    assert texts.fmt_class_list(classes, mention=True) == "2 classe(s) : <@&1>, <@&2>"


@pytest.mark.asyncio
async def test_class_command_hides_transport_errors(caplog):
    @class_commands.class_command
    async def failing(inter):
        raise errors.DatabaseError(OSError("connexion refusée"))

    interaction = make_interaction(None, None)
    await failing(interaction)

    assert sent_texts(interaction) == [texts.msg_internal_error()]
    assert any("connexion refusée" in r.getMessage() for r in caplog.records)
