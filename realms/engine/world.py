# realms/engine/world.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple, Union

from . import formatting
from .dice import Dice
from .errors import AreaLoadError
from .formatting import Colorizer, plain_colorizer

if TYPE_CHECKING:
    from .loader import AreaLoader, LoadedArea

logger = logging.getLogger(__name__)


# Simple type aliases for clarity
AreaId = str
LocalId = str  # Unique only inside its area document
RoomId = str  # Global id "area:local"
NpcId = str  # Global id
ItemId = str  # Global id
Direction = str

GLOBAL_ID_SEPARATOR = ":"

ATTRIBUTES = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

ITEM_WEAPON = "weapon"
ITEM_ARMOR = "armor"
ITEM_POTION = "potion"
ITEM_MISC = "misc"

UNARMED_DAMAGE = Dice(1, 4)


def get_global_id(local_id: LocalId, area_id: AreaId) -> str:
    """Compose a global id, e.g. ("center", "midgard") -> "midgard:center"."""
    return f"{area_id}{GLOBAL_ID_SEPARATOR}{local_id}"


def parse_global_id(global_id: str) -> Tuple[AreaId, LocalId]:
    """
    Split a global id into (area_id, local_id).

    Only the first separator counts; the local id keeps any further colons.
    """
    area_id, _, local_id = global_id.partition(GLOBAL_ID_SEPARATOR)
    return area_id, local_id


def attribute_modifier(score: int) -> int:
    """Classic ability modifier: floor((score - 10) / 2)."""
    return (score - 10) // 2


class PlayerState(str, Enum):
    IDLE = "idle"
    FIGHTING = "fighting"
    DEAD = "dead"


class NpcType(str, Enum):
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    HOSTILE = "hostile"


# =============================================================================
# Areas and items
# =============================================================================


@dataclass
class WorldArea:
    """Metadata for a loaded zone."""
    id: AreaId
    name: str
    description: str = ""


@dataclass
class WorldItem:
    """
    An item definition.

    Rooms reference items by global id. Anything the player carries is a
    snapshot copy of the definition, so mutating it never touches the world.
    """
    id: LocalId
    area: AreaId
    name: str
    description: str = ""
    type: str = ITEM_MISC
    damage: Optional[Dice] = None
    armor: int = 0
    heal_amount: int = 0
    weight: int = 0
    value: int = 0
    can_take: bool = True
    read_text: Optional[str] = None

    @property
    def global_id(self) -> ItemId:
        return get_global_id(self.id, self.area)

    def snapshot(self) -> "WorldItem":
        return replace(self)

    def matches(self, query: str) -> bool:
        query = query.lower()
        return query in self.name.lower() or query in self.id.lower()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "area": self.area,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "armor": self.armor,
            "healAmount": self.heal_amount,
            "weight": self.weight,
            "value": self.value,
            "canTake": self.can_take,
        }
        if self.damage is not None:
            data["damage"] = str(self.damage)
        if self.read_text:
            data["readText"] = self.read_text
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldItem":
        damage = data.get("damage")
        return cls(
            id=data["id"],
            area=data["area"],
            name=data.get("name", data["id"]),
            description=data.get("description", ""),
            type=data.get("type", ITEM_MISC),
            damage=Dice.parse(damage) if damage is not None else None,
            armor=data.get("armor", 0),
            heal_amount=data.get("healAmount", 0),
            weight=data.get("weight", 0),
            value=data.get("value", 0),
            can_take=data.get("canTake", True),
            read_text=data.get("readText"),
        )


# =============================================================================
# Rooms
# =============================================================================


@dataclass(frozen=True)
class CrossZoneExit:
    """An exit leading into another area. Traversing it loads that area."""
    room: LocalId
    area: AreaId


Exit = Union[LocalId, CrossZoneExit]


@dataclass
class WorldRoom:
    """
    A location in the world.

    `items` holds global item ids. `npcs` holds NPC local ids and is derived
    from the World's NPC-location index; only the World mutates it.
    """
    id: LocalId
    area: AreaId
    name: str
    description: str = ""
    exits: Dict[Direction, Exit] = field(default_factory=dict)
    items: List[ItemId] = field(default_factory=list)
    npcs: List[LocalId] = field(default_factory=list)

    @property
    def global_id(self) -> RoomId:
        return get_global_id(self.id, self.area)

    # ---------- Exits ----------

    def get_exits(self) -> List[Direction]:
        return list(self.exits.keys())

    def get_exit(self, direction: Direction) -> Exit | None:
        return self.exits.get(direction.lower())

    def exit_target(self, direction: Direction) -> RoomId | None:
        """Global id of the room an exit leads to."""
        exit_ = self.get_exit(direction)
        if exit_ is None:
            return None
        if isinstance(exit_, CrossZoneExit):
            return get_global_id(exit_.room, exit_.area)
        return get_global_id(exit_, self.area)

    def same_zone_exits(self) -> List[Tuple[Direction, RoomId]]:
        return [
            (direction, get_global_id(exit_, self.area))
            for direction, exit_ in self.exits.items()
            if not isinstance(exit_, CrossZoneExit)
        ]

    # ---------- Contents ----------

    def add_item(self, item_id: ItemId) -> None:
        # Copies share a global id, so the list may hold it more than once
        self.items.append(item_id)

    def remove_item(self, item_id: ItemId) -> bool:
        if item_id in self.items:
            self.items.remove(item_id)
            return True
        return False

    def has_item(self, item_id: ItemId) -> bool:
        return item_id in self.items

    def add_npc(self, npc_id: LocalId) -> None:
        if npc_id not in self.npcs:
            self.npcs.append(npc_id)

    def remove_npc(self, npc_id: LocalId) -> bool:
        if npc_id in self.npcs:
            self.npcs.remove(npc_id)
            return True
        return False

    def has_npc(self, npc_id: LocalId) -> bool:
        return npc_id in self.npcs

    # ---------- Lookup ----------

    def find_item(self, query: str, world: "World") -> ItemId | None:
        """First item (in list order) whose name or id contains `query`."""
        for item_id in self.items:
            item = world.items.get(item_id)
            if item and item.matches(query):
                return item_id
        return None

    def find_npc(self, query: str, world: "World") -> LocalId | None:
        """First living NPC (in list order) whose name or id contains `query`."""
        for npc_id in self.npcs:
            npc = world.get_npc(npc_id, self.area)
            if npc and npc.is_alive() and npc.matches(query):
                return npc_id
        return None

    def get_full_description(self, world: "World", colorize: Colorizer = plain_colorizer) -> str:
        lines = [colorize(self.name, formatting.ROOM_NAME)]
        if self.description:
            lines.append(formatting.wrap(self.description))

        if self.exits:
            exit_names = []
            for direction, exit_ in self.exits.items():
                label = direction
                if isinstance(exit_, CrossZoneExit):
                    label = f"{direction} (to {world.area_name(exit_.area)})"
                exit_names.append(colorize(label, formatting.EXIT_NAME))
            lines.append("")
            lines.append(f"Exits: {', '.join(exit_names)}")

        items = [world.items[item_id] for item_id in self.items if item_id in world.items]
        if items:
            lines.append("")
            lines.append("You see:")
            for item in items:
                lines.append(f"  {colorize(item.name, formatting.ITEM_NAME)}")

        npcs = [npc for npc in (world.get_npc(n, self.area) for n in self.npcs) if npc]
        if npcs:
            lines.append("")
            lines.append("Also here:")
            for npc in npcs:
                dead = "" if npc.is_alive() else colorize(" (dead)", formatting.NPC_DEAD)
                lines.append(f"  {colorize(npc.name, formatting.npc_style(npc.type.value))}{dead}")

        return "\n".join(lines)


# =============================================================================
# NPCs
# =============================================================================


@dataclass
class SpecialAbility:
    """A scripted combat ability that triggers with a fixed chance each round."""
    name: str
    chance: float
    message: str = ""


@dataclass
class WorldNpc:
    """A non-player character. Hit points always stay within [0, max]."""
    id: LocalId
    area: AreaId
    name: str
    description: str = ""
    type: NpcType = NpcType.NEUTRAL
    hit_points: int = 10
    max_hit_points: int = 10
    damage: Dice = field(default_factory=lambda: Dice(1, 4))
    experience: int = 0
    drops: List[LocalId] = field(default_factory=list)
    dialogue: List[str] = field(default_factory=list)
    can_heal: bool = False
    shop: List[LocalId] = field(default_factory=list)
    can_wander: bool = False
    flees_at_percent: float = 0.0  # Health fraction in [0, 1]; 0 disables fleeing
    special_abilities: List[SpecialAbility] = field(default_factory=list)
    current_dialogue: int = 0

    def __post_init__(self) -> None:
        self.hit_points = max(0, min(self.hit_points, self.max_hit_points))

    @property
    def global_id(self) -> NpcId:
        return get_global_id(self.id, self.area)

    def is_alive(self) -> bool:
        return self.hit_points > 0

    def is_hostile(self) -> bool:
        return self.type == NpcType.HOSTILE

    def can_trade(self) -> bool:
        return bool(self.shop)

    def health_fraction(self) -> float:
        if self.max_hit_points <= 0:
            return 0.0
        return self.hit_points / self.max_hit_points

    def matches(self, query: str) -> bool:
        query = query.lower()
        return query in self.name.lower() or query in self.id.lower()

    def speak(self) -> str:
        """Next dialogue line, cycling back to the first one."""
        if not self.dialogue:
            return f"{self.name} stays silent."
        if self.current_dialogue >= len(self.dialogue):
            self.current_dialogue = 0
        line = self.dialogue[self.current_dialogue]
        self.current_dialogue = (self.current_dialogue + 1) % len(self.dialogue)
        return f'{self.name} says: "{line}"'

    def take_damage(self, amount: int) -> bool:
        """Apply damage and return whether the NPC is still alive."""
        self.hit_points = max(0, self.hit_points - max(0, amount))
        return self.is_alive()

    def heal(self, amount: int) -> int:
        before = self.hit_points
        self.hit_points = min(self.max_hit_points, self.hit_points + max(0, amount))
        return self.hit_points - before

    def roll_damage(self, rng: random.Random | None = None) -> int:
        return self.damage.roll(rng)

    def get_death_drops(self) -> List[LocalId]:
        # Every configured drop is granted
        return list(self.drops)

    def respawn(self) -> None:
        self.hit_points = self.max_hit_points
        self.current_dialogue = 0


# =============================================================================
# Player
# =============================================================================


@dataclass
class LevelUpResult:
    level: int
    attribute: str
    message: str


@dataclass
class EquipResult:
    success: bool
    message: str
    previous: Optional[WorldItem] = None


@dataclass
class WorldPlayer:
    """
    The single player character.

    Equipped items live only in their slot, never in the inventory at the
    same time.
    """
    name: str = "Adventurer"
    level: int = 1
    experience: int = 0
    experience_to_next: int = 100
    hit_points: int = 20
    max_hit_points: int = 20
    stamina: int = 100
    max_stamina: int = 100
    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10
    inventory: List[WorldItem] = field(default_factory=list)
    equipped_weapon: Optional[WorldItem] = None
    equipped_armor: Optional[WorldItem] = None
    skills: Set[str] = field(default_factory=set)
    skill_cooldowns: Dict[str, int] = field(default_factory=dict)
    gold: int = 100
    current_room: RoomId = "midgard:center"
    state: PlayerState = PlayerState.IDLE
    death_room: Optional[RoomId] = None

    # Per-encounter combat flags, never persisted
    next_attack_skill: Optional[str] = None
    skill_used_this_round: bool = False

    def is_alive(self) -> bool:
        return self.hit_points > 0

    # ---------- Progression ----------

    def add_experience(self, amount: int, rng: random.Random | None = None) -> LevelUpResult | None:
        """
        Add experience, levelling up as many times as it covers.

        Returns the last level-up, or None if the level did not change.
        """
        self.experience += amount
        result = None
        while self.experience >= self.experience_to_next:
            result = self.level_up(rng)
        return result

    def level_up(self, rng: random.Random | None = None) -> LevelUpResult:
        rng = rng or random
        self.level += 1
        self.experience = max(0, self.experience - self.experience_to_next)
        self.experience_to_next = self.level * 100

        self.max_hit_points += 5
        self.max_stamina += 10
        self.hit_points = self.max_hit_points
        self.stamina = self.max_stamina

        attribute = rng.choice(ATTRIBUTES)
        setattr(self, attribute, getattr(self, attribute) + 1)

        return LevelUpResult(
            level=self.level,
            attribute=attribute,
            message=f"You have reached level {self.level}! Your {attribute} increases by 1.",
        )

    # ---------- Health ----------

    def take_damage(self, amount: int) -> bool:
        """Apply damage and return whether the player is still alive."""
        self.hit_points = max(0, self.hit_points - max(0, amount))
        if self.hit_points == 0:
            self.state = PlayerState.DEAD
            self.death_room = self.current_room
        return self.is_alive()

    def heal(self, amount: int) -> int:
        """Heal up to max and return the amount actually restored."""
        before = self.hit_points
        self.hit_points = min(self.max_hit_points, self.hit_points + max(0, amount))
        return self.hit_points - before

    # ---------- Inventory ----------

    def add_item(self, item: WorldItem) -> None:
        self.inventory.append(item)

    def remove_item(self, global_id: ItemId) -> WorldItem | None:
        for i, item in enumerate(self.inventory):
            if item.global_id == global_id:
                return self.inventory.pop(i)
        return None

    def find_item(self, query: str) -> WorldItem | None:
        query = query.lower()
        for item in self.inventory:
            if item.matches(query) or query in item.global_id.lower():
                return item
        return None

    def total_weight(self) -> int:
        """Weight of the pack. Equipped items are worn, not carried."""
        return sum(item.weight for item in self.inventory)

    def carry_capacity(self) -> int:
        return self.strength * 10

    def can_carry(self, item: WorldItem) -> bool:
        return self.total_weight() + item.weight <= self.carry_capacity()

    # ---------- Equipment ----------

    def equip_weapon(self, item: WorldItem) -> EquipResult:
        if item.type != ITEM_WEAPON:
            return EquipResult(False, f"{item.name} is not a weapon.")
        return self._equip("equipped_weapon", item)

    def equip_armor(self, item: WorldItem) -> EquipResult:
        if item.type != ITEM_ARMOR:
            return EquipResult(False, f"{item.name} is not armor.")
        return self._equip("equipped_armor", item)

    def _equip(self, slot: str, item: WorldItem) -> EquipResult:
        previous: WorldItem | None = getattr(self, slot)
        if item not in self.inventory:
            return EquipResult(False, f"You are not carrying {item.name}.")

        if previous and not self.can_carry(previous):
            return EquipResult(
                False,
                f"You can't equip {item.name}: there is no room in your pack for {previous.name}.",
            )

        self.inventory.remove(item)
        if previous:
            self.inventory.append(previous)
        setattr(self, slot, item)

        verb = "wield" if slot == "equipped_weapon" else "wear"
        message = f"You {verb} {item.name}."
        if previous:
            message = f"You put away {previous.name} and {verb} {item.name}."
        return EquipResult(True, message, previous)

    def unequip_weapon(self) -> EquipResult:
        return self._unequip("equipped_weapon", "You have no weapon equipped.")

    def unequip_armor(self) -> EquipResult:
        return self._unequip("equipped_armor", "You are not wearing any armor.")

    def _unequip(self, slot: str, empty_message: str) -> EquipResult:
        item: WorldItem | None = getattr(self, slot)
        if item is None:
            return EquipResult(False, empty_message)
        if not self.can_carry(item):
            return EquipResult(False, f"You can't remove {item.name}: there is no room in your pack.")
        setattr(self, slot, None)
        self.inventory.append(item)
        return EquipResult(True, f"You unequip {item.name}.", item)

    # ---------- Combat helpers ----------

    def roll_weapon_damage(self, rng: random.Random | None = None) -> int:
        if self.equipped_weapon and self.equipped_weapon.damage:
            return self.equipped_weapon.damage.roll(rng)
        return UNARMED_DAMAGE.roll(rng)

    def armor_bonus(self) -> int:
        return self.equipped_armor.armor if self.equipped_armor else 0

    def total_defense(self) -> int:
        return 10 + attribute_modifier(self.dexterity) + self.armor_bonus()

    # ---------- Skills ----------

    def has_skill(self, skill_id: str) -> bool:
        return skill_id in self.skills

    def learn_skill(self, skill_id: str) -> bool:
        if skill_id in self.skills:
            return False
        self.skills.add(skill_id)
        return True

    # ---------- Serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "level": self.level,
            "experience": self.experience,
            "experienceToNext": self.experience_to_next,
            "hitPoints": self.hit_points,
            "maxHitPoints": self.max_hit_points,
            "stamina": self.stamina,
            "maxStamina": self.max_stamina,
            "inventory": [item.to_dict() for item in self.inventory],
            "equippedWeapon": self.equipped_weapon.to_dict() if self.equipped_weapon else None,
            "equippedArmor": self.equipped_armor.to_dict() if self.equipped_armor else None,
            "skills": sorted(self.skills),
            "skillCooldowns": dict(self.skill_cooldowns),
            "gold": self.gold,
            "currentRoom": self.current_room,
            "state": self.state.value,
            "deathRoom": self.death_room,
        }
        for attribute in ATTRIBUTES:
            data[attribute] = getattr(self, attribute)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldPlayer":
        """Rebuild a player from a save snapshot, defaulting missing fields."""
        defaults = cls()
        weapon = data.get("equippedWeapon")
        armor = data.get("equippedArmor")
        player = cls(
            name=data.get("name", defaults.name),
            level=data.get("level", defaults.level),
            experience=data.get("experience", defaults.experience),
            experience_to_next=data.get("experienceToNext", defaults.experience_to_next),
            hit_points=data.get("hitPoints", defaults.hit_points),
            max_hit_points=data.get("maxHitPoints", defaults.max_hit_points),
            stamina=data.get("stamina", defaults.stamina),
            max_stamina=data.get("maxStamina", defaults.max_stamina),
            inventory=[WorldItem.from_dict(item) for item in data.get("inventory", [])],
            equipped_weapon=WorldItem.from_dict(weapon) if weapon else None,
            equipped_armor=WorldItem.from_dict(armor) if armor else None,
            skills=set(data.get("skills", [])),
            skill_cooldowns=dict(data.get("skillCooldowns", {})),
            gold=data.get("gold", defaults.gold),
            current_room=data.get("currentRoom", defaults.current_room),
            state=PlayerState(data.get("state", defaults.state.value)),
            death_room=data.get("deathRoom"),
        )
        for attribute in ATTRIBUTES:
            setattr(player, attribute, data.get(attribute, getattr(defaults, attribute)))
        return player


# =============================================================================
# World store
# =============================================================================


class World:
    """
    Canonical store for everything loaded from area documents.

    Rooms, items and NPCs are keyed by global id. The NPC-location index
    (`npc_locations`) is the single source of truth for where NPCs are;
    room `npcs` lists are derived from it through the relocation helpers
    below or rebuilt wholesale by `sync_rooms_from_npc_map()`.
    """

    def __init__(self, loader: "AreaLoader | None" = None) -> None:
        self.loader = loader
        self.reset()

    def reset(self) -> None:
        self.rooms: Dict[RoomId, WorldRoom] = {}
        self.items: Dict[ItemId, WorldItem] = {}
        self.npcs: Dict[NpcId, WorldNpc] = {}
        self.areas: Dict[AreaId, WorldArea] = {}
        self.loaded_area_ids: Set[AreaId] = set()
        self.npc_locations: Dict[NpcId, RoomId] = {}

    # ---------- Area loading ----------

    async def load_area(self, area_id: AreaId) -> bool:
        """
        Load an area on demand.

        Returns True when the area is (or already was) loaded. A failed load
        is logged and leaves the world exactly as it was.
        """
        if area_id in self.loaded_area_ids:
            logger.debug("Area %s already loaded", area_id)
            return True
        if self.loader is None:
            logger.warning("Cannot load area %s: no area loader configured", area_id)
            return False

        try:
            contents = await self.loader.load(area_id)
        except AreaLoadError as exc:
            logger.warning("%s", exc)
            return False

        self._register(contents)
        logger.info(
            "Loaded area %s: %d rooms, %d items, %d npcs",
            area_id, len(contents.rooms), len(contents.items), len(contents.npcs),
        )
        return True

    def _register(self, contents: "LoadedArea") -> None:
        area_id = contents.area.id
        self.areas[area_id] = contents.area
        for item in contents.items:
            self.items[item.global_id] = item
        for npc in contents.npcs:
            self.npcs[npc.global_id] = npc
        for room in contents.rooms:
            self.rooms[room.global_id] = room
            for local_npc_id in room.npcs:
                self.npc_locations[get_global_id(local_npc_id, area_id)] = room.global_id
        self.loaded_area_ids.add(area_id)

    # ---------- Lookup ----------

    @staticmethod
    def get_global_id(local_id: LocalId, area_id: AreaId) -> str:
        return get_global_id(local_id, area_id)

    @staticmethod
    def parse_global_id(global_id: str) -> Tuple[AreaId, LocalId]:
        return parse_global_id(global_id)

    def get_item(self, local_id: LocalId, area_id: AreaId) -> WorldItem | None:
        return self.items.get(get_global_id(local_id, area_id))

    def get_npc(self, local_id: LocalId, area_id: AreaId) -> WorldNpc | None:
        return self.npcs.get(get_global_id(local_id, area_id))

    def get_room(self, room_id: RoomId) -> WorldRoom | None:
        return self.rooms.get(room_id)

    def area_name(self, area_id: AreaId) -> str:
        area = self.areas.get(area_id)
        return area.name if area else area_id

    def resolve_exit(self, room: WorldRoom, direction: Direction) -> RoomId | None:
        return room.exit_target(direction)

    def npcs_in_room(self, room: WorldRoom, alive_only: bool = True) -> List[WorldNpc]:
        npcs = [npc for npc in (self.get_npc(n, room.area) for n in room.npcs) if npc]
        if alive_only:
            return [npc for npc in npcs if npc.is_alive()]
        return npcs

    def items_in_room(self, room: WorldRoom) -> List[WorldItem]:
        return [self.items[item_id] for item_id in room.items if item_id in self.items]

    # ---------- NPC location index ----------

    def npc_room(self, npc_id: NpcId) -> RoomId | None:
        return self.npc_locations.get(npc_id)

    def place_npc(self, npc_id: NpcId, room_id: RoomId) -> bool:
        """Put an NPC in a room, taking it out of wherever it was."""
        room = self.rooms.get(room_id)
        if room is None or npc_id not in self.npcs:
            return False
        self.remove_npc(npc_id)
        self.npc_locations[npc_id] = room_id
        room.add_npc(parse_global_id(npc_id)[1])
        return True

    def move_npc(self, npc_id: NpcId, room_id: RoomId) -> bool:
        """Relocate an NPC that is currently placed somewhere."""
        if npc_id not in self.npc_locations:
            return False
        return self.place_npc(npc_id, room_id)

    def remove_npc(self, npc_id: NpcId) -> RoomId | None:
        """Drop an NPC from the index and its room. Returns the room it left."""
        room_id = self.npc_locations.pop(npc_id, None)
        if room_id is not None:
            room = self.rooms.get(room_id)
            if room:
                room.remove_npc(parse_global_id(npc_id)[1])
        return room_id

    def sync_rooms_from_npc_map(self) -> None:
        """Rebuild every room's NPC list purely from the location index."""
        for room in self.rooms.values():
            room.npcs = []
        for npc_id, room_id in self.npc_locations.items():
            room = self.rooms.get(room_id)
            if room:
                room.add_npc(parse_global_id(npc_id)[1])
