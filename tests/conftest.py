"""
Global pytest configuration and shared fixtures.

Provides common test infrastructure for all test suites including:
- In-memory area documents and skills
- A seeded RNG and a hand-driven clock
- A World loaded from the test areas
- A GameEngine with a started game
"""

import copy
import random

import pytest

from realms.engine.dice import Dice
from realms.engine.engine import EngineConfig, GameEngine
from realms.engine.loader import AreaLoader, MappingAreaSource, parse_skills
from realms.engine.systems import CombatConfig, TickConfig
from realms.engine.world import World, WorldItem, WorldPlayer

# ============================================================================
# Test content
# ============================================================================

TOWN_AREA = {
    "id": "town",
    "name": "Test Town",
    "description": "A town that exists only for tests.",
    "rooms": {
        "square": {
            "name": "Town Square",
            "description": "The middle of town.",
            "exits": {
                "north": "temple",
                "east": "market",
                "west": "alley",
                "south": {"room": "edge", "area": "forest"},
                "down": {"room": "pit", "area": "missing"},
            },
            "items": ["torch", "sign"],
        },
        "temple": {
            "name": "Temple",
            "description": "Quiet and cool.",
            "exits": {"south": "square"},
            "npcs": ["priest"],
        },
        "market": {
            "name": "Market",
            "description": "Stalls everywhere.",
            "exits": {"west": "square"},
            "npcs": ["trader"],
        },
        "alley": {
            "name": "Alley",
            "description": "Dark and smelly.",
            "exits": {"east": "square", "north": "den"},
            "npcs": ["rat"],
            "items": ["anvil"],
        },
        "den": {
            "name": "Den",
            "description": "Bones litter the floor.",
            "exits": {"south": "alley"},
            "npcs": ["wolf", "dog"],
        },
    },
    "items": {
        "torch": {"name": "torch", "description": "A wooden torch.", "type": "misc", "weight": 1, "value": 4},
        "sign": {
            "name": "wooden sign",
            "description": "A sign nailed to a post.",
            "canTake": False,
            "readText": "Welcome to town!",
        },
        "anvil": {"name": "anvil", "description": "Very heavy.", "weight": 500},
        "sword": {
            "name": "steel sword",
            "description": "Sharp.",
            "type": "weapon",
            "damage": "1d8+2",
            "weight": 5,
            "value": 40,
        },
        "potion": {
            "name": "healing potion",
            "description": "Red and fizzy.",
            "type": "potion",
            "healAmount": 5,
            "weight": 1,
            "value": 10,
        },
        "leather": {"name": "leather armor", "type": "armor", "armor": 2, "weight": 10, "value": 30},
        "tail": {"name": "rat tail", "description": "Gross.", "value": 1},
    },
    "npcs": {
        "priest": {
            "name": "priest",
            "description": "A kind old priest.",
            "type": "friendly",
            "hitPoints": 30,
            "maxHitPoints": 30,
            "damage": "1d4",
            "canHeal": True,
            "dialogue": ["Bless you.", "Be careful out there."],
        },
        "trader": {
            "name": "trader",
            "description": "A merchant.",
            "type": "friendly",
            "hitPoints": 30,
            "maxHitPoints": 30,
            "damage": "1d4",
            "shop": ["sword", "potion", "leather"],
            "dialogue": ["Fine wares!"],
        },
        "rat": {
            "name": "rat",
            "description": "A fat rat.",
            "type": "hostile",
            "hitPoints": 8,
            "maxHitPoints": 8,
            "damage": 1,
            "experience": 20,
            "drops": ["tail"],
        },
        "wolf": {
            "name": "grey wolf",
            "description": "Lean and hungry.",
            "type": "hostile",
            "hitPoints": 20,
            "maxHitPoints": 20,
            "damage": 2,
            "experience": 50,
            "fleesAtPercent": 0.5,
        },
        "dog": {
            "name": "wild dog",
            "description": "Mangy.",
            "type": "hostile",
            "hitPoints": 30,
            "maxHitPoints": 30,
            "damage": 1,
            "experience": 10,
            "specialAbilities": [{"name": "bark", "chance": 1.0, "message": "The dog barks at you!"}],
        },
    },
}

FOREST_AREA = {
    "id": "forest",
    "name": "Deep Forest",
    "rooms": {
        "edge": {
            "name": "Forest Edge",
            "description": "Trees begin here.",
            "exits": {"north": {"room": "square", "area": "town"}, "south": "glade"},
        },
        "glade": {
            "name": "Glade",
            "description": "A sunny glade.",
            "exits": {"north": "edge"},
            "npcs": ["deer"],
        },
    },
    "npcs": {
        "deer": {
            "name": "deer",
            "type": "neutral",
            "hitPoints": 10,
            "maxHitPoints": 10,
            "damage": 1,
            "canWander": True,
        },
    },
}

SKILLS = {
    "kick": {"name": "Kick", "level": 2, "cost": 0, "cooldown": 0, "damageMultiplier": 1.5},
    "recall": {"name": "Recall", "level": 3, "cost": 20, "cooldown": 5},
}


class FakeClock:
    """Monotonic clock the test moves forward by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Content fixtures
# ============================================================================


@pytest.fixture
def area_documents() -> dict:
    return {"town": copy.deepcopy(TOWN_AREA), "forest": copy.deepcopy(FOREST_AREA)}


@pytest.fixture
def area_source(area_documents) -> MappingAreaSource:
    return MappingAreaSource(area_documents)


@pytest.fixture
def skill_book():
    return parse_skills(SKILLS)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# World fixtures
# ============================================================================


@pytest.fixture
async def world(area_source) -> World:
    """World with the town area loaded."""
    world = World(AreaLoader(area_source))
    assert await world.load_area("town")
    return world


@pytest.fixture
def player() -> WorldPlayer:
    return WorldPlayer(name="Tester", current_room="town:square")


@pytest.fixture
def big_sword() -> WorldItem:
    """A weapon that always hits for exactly 10."""
    return WorldItem(id="big_sword", area="town", name="big sword", type="weapon", damage=Dice.fixed(10), weight=5)


# ============================================================================
# Engine fixtures
# ============================================================================


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(
        starting_area="town",
        starting_room="town:square",
        respawn_room="town:temple",
        recall_room="town:temple",
        autosave_interval=0,
        combat=CombatConfig(round_interval=0.01),
        ticks=TickConfig(interval=0.01, respawn_delay=30.0, wander_chance=0.0),
    )


@pytest.fixture
async def engine(area_source, skill_book, rng, clock, engine_config) -> GameEngine:
    """A GameEngine with a freshly started game in the town square."""
    engine = GameEngine(
        area_source,
        skills=skill_book,
        rng=rng,
        clock=clock,
        config=engine_config,
    )
    await engine.start_new_game("Tester")
    return engine
