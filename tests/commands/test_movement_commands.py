"""
Tests for movement commands: go, the direction aliases, respawn and recall.
"""

import pytest

from realms.engine.systems.events import drain
from realms.engine.systems.router import DEAD_MESSAGE, IN_COMBAT_MESSAGE
from realms.engine.world import PlayerState


@pytest.mark.commands
@pytest.mark.asyncio
async def test_go_through_exit(engine):
    text = await engine.process_command("go north")

    assert engine.player.current_room == "town:temple"
    assert text.startswith("You go north.\n\nTemple")


@pytest.mark.commands
@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["e", "east", "walk east", "go e"])
async def test_direction_shortcuts(engine, raw):
    await engine.process_command(raw)
    assert engine.player.current_room == "town:market"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_go_without_direction_or_exit(engine):
    assert await engine.process_command("go") == "Where do you want to go?"
    assert await engine.process_command("up") == "You can't go that way."
    assert engine.player.current_room == "town:square"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_cross_zone_exit_loads_area(engine):
    queue = engine.channel.subscribe("test")
    assert "forest" not in engine.world.loaded_area_ids

    text = await engine.process_command("s")

    assert engine.world.loaded_area_ids == {"town", "forest"}
    assert engine.player.current_room == "forest:edge"
    assert "Forest Edge" in text
    messages = [e["text"] for e in drain(queue) if e["type"] == "message"]
    assert messages == ["Loading new area: forest..."]

    # Coming back does not load anything again
    await engine.process_command("n")
    assert engine.player.current_room == "town:square"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_unloadable_area_keeps_player_in_place(engine):
    text = await engine.process_command("down")

    assert text == "A strange force blocks your way. That area cannot be reached."
    assert engine.player.current_room == "town:square"
    assert engine.world.loaded_area_ids == {"town"}


@pytest.mark.commands
@pytest.mark.asyncio
async def test_cross_zone_exit_label(engine):
    text = await engine.process_command("look")
    assert "south (to forest)" in text


# ============================================================================
# Death and respawn
# ============================================================================


def die_in_alley(engine):
    engine.player.current_room = "town:alley"
    engine.player.take_damage(1000)
    assert engine.player.state == PlayerState.DEAD


@pytest.mark.commands
@pytest.mark.asyncio
async def test_dead_player_is_gated(engine):
    die_in_alley(engine)
    assert await engine.process_command("look") == DEAD_MESSAGE
    assert await engine.process_command("n") == DEAD_MESSAGE


@pytest.mark.commands
@pytest.mark.asyncio
async def test_respawn_at_respawn_room(engine):
    die_in_alley(engine)

    text = await engine.process_command("respawn")

    player = engine.player
    assert text.startswith("Life flows back into your body. You are alive again!")
    assert "Temple" in text
    assert player.current_room == "town:temple"
    assert player.hit_points == player.max_hit_points
    assert player.state == PlayerState.IDLE


@pytest.mark.commands
@pytest.mark.asyncio
async def test_respawn_here(engine):
    die_in_alley(engine)
    await engine.process_command("respawn here")
    assert engine.player.current_room == "town:alley"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_respawn_while_alive(engine):
    assert await engine.process_command("respawn") == "You are already alive."


# ============================================================================
# Recall
# ============================================================================


@pytest.mark.commands
@pytest.mark.asyncio
async def test_recall_requires_skill(engine):
    assert await engine.process_command("recall") == 'You don\'t know the skill "Recall".'


@pytest.mark.commands
@pytest.mark.asyncio
async def test_recall_spends_stamina_and_starts_cooldown(engine):
    player = engine.player
    player.learn_skill("recall")
    player.current_room = "town:alley"

    text = await engine.process_command("recall")

    assert text.startswith('You use "Recall". The world dissolves around you...')
    assert player.current_room == "town:temple"
    assert player.stamina == 80
    assert player.skill_cooldowns["recall"] == 5

    assert await engine.process_command("recall") == 'Skill "Recall" is not ready yet (5 ticks left).'

    for _ in range(5):
        engine.tick()
    player.current_room = "town:alley"
    await engine.process_command("recall")
    assert player.current_room == "town:temple"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_recall_needs_stamina(engine):
    engine.player.learn_skill("recall")
    engine.player.stamina = 19

    assert await engine.process_command("recall") == 'You are too tired to use "Recall".'
    assert engine.player.current_room == "town:square"


@pytest.mark.commands
@pytest.mark.asyncio
async def test_recall_blocked_in_combat(engine):
    engine.player.learn_skill("recall")
    engine.player.current_room = "town:alley"
    engine.start_combat(engine.world.get_npc("rat", "town"))

    assert await engine.process_command("recall") == IN_COMBAT_MESSAGE
    assert engine.player.current_room == "town:alley"
