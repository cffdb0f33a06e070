# realms/engine/loader.py
"""
Area and skill loading.

Area documents are fetched from an AreaSource (a directory of YAML/JSON files
or an in-memory mapping), validated with pydantic, and turned into world
entities. Every failure surfaces as AreaLoadError so the World can refuse the
area without registering anything from it.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .dice import Dice
from .errors import AreaLoadError
from .systems.skills import SkillBook, SkillData
from .world import (
    GLOBAL_ID_SEPARATOR,
    CrossZoneExit,
    NpcType,
    SpecialAbility,
    WorldArea,
    WorldItem,
    WorldNpc,
    WorldRoom,
    get_global_id,
)

logger = logging.getLogger(__name__)

AREA_FILE_SUFFIXES = (".yaml", ".yml", ".json")
AREA_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")


# =============================================================================
# Document schemas
# =============================================================================


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ExitDocument(_Document):
    room: str
    area: str


class RoomDocument(_Document):
    name: str
    description: str = ""
    exits: Dict[str, Union[str, ExitDocument]] = Field(default_factory=dict)
    items: List[str] = Field(default_factory=list)
    npcs: List[str] = Field(default_factory=list)


class ItemDocument(_Document):
    name: str
    description: str = ""
    type: str = "misc"
    damage: Optional[Union[str, int]] = None
    armor: int = 0
    heal_amount: int = Field(0, alias="healAmount", ge=0)
    weight: int = Field(0, ge=0)
    value: int = Field(0, ge=0)
    can_take: bool = Field(True, alias="canTake")
    read_text: Optional[str] = Field(None, alias="readText")


class AbilityDocument(_Document):
    name: str
    chance: float = Field(ge=0.0, le=1.0)
    message: str = ""


class NpcDocument(_Document):
    name: str
    description: str = ""
    type: NpcType = NpcType.NEUTRAL
    hit_points: int = Field(alias="hitPoints", ge=0)
    max_hit_points: Optional[int] = Field(None, alias="maxHitPoints", ge=1)
    damage: Union[str, int] = "1d4"
    experience: int = Field(0, ge=0)
    drops: List[str] = Field(default_factory=list)
    dialogue: List[str] = Field(default_factory=list)
    can_heal: bool = Field(False, alias="canHeal")
    shop: List[str] = Field(default_factory=list)
    can_wander: bool = Field(False, alias="canWander")
    flees_at_percent: float = Field(0.0, alias="fleesAtPercent", ge=0.0, le=1.0)
    special_abilities: List[AbilityDocument] = Field(default_factory=list, alias="specialAbilities")


class AreaDocument(_Document):
    id: str
    name: str
    description: str = ""
    rooms: Dict[str, RoomDocument]
    items: Dict[str, ItemDocument] = Field(default_factory=dict)
    npcs: Dict[str, NpcDocument] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def _id_has_no_separator(cls, value: str) -> str:
        if GLOBAL_ID_SEPARATOR in value:
            raise ValueError(f"area id may not contain '{GLOBAL_ID_SEPARATOR}'")
        return value


class SkillDocument(_Document):
    name: str
    description: str = ""
    level: int = Field(1, ge=1)
    cost: int = Field(0, ge=0)
    cooldown: int = Field(0, ge=0)
    damage_multiplier: Optional[float] = Field(None, alias="damageMultiplier", gt=0)


# =============================================================================
# Sources
# =============================================================================


class AreaSource(Protocol):
    """Anything that can hand back the raw document for an area id."""

    async def fetch(self, area_id: str) -> Any:
        ...


class DirectoryAreaSource:
    """Reads `<root>/<area_id>.yaml` (or .yml / .json)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def find(self, area_id: str) -> Path | None:
        if not AREA_ID_PATTERN.match(area_id):
            return None
        for suffix in AREA_FILE_SUFFIXES:
            path = self.root / f"{area_id}{suffix}"
            if path.is_file():
                return path
        return None

    def list_area_ids(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.root.iterdir()
            if path.suffix in AREA_FILE_SUFFIXES and not path.name.startswith("_")
        )

    async def fetch(self, area_id: str) -> Any:
        path = self.find(area_id)
        if path is None:
            raise AreaLoadError(area_id, f"no area file in {self.root}")
        return await asyncio.to_thread(_read_document, path)


class MappingAreaSource:
    """Serves area documents held in memory (tests, embedded content)."""

    def __init__(self, documents: Mapping[str, Any]) -> None:
        self.documents = dict(documents)

    async def fetch(self, area_id: str) -> Any:
        if area_id not in self.documents:
            raise AreaLoadError(area_id, "unknown area")
        return copy.deepcopy(self.documents[area_id])


def _read_document(path: Path) -> Any:
    # YAML is a superset of JSON, so one parser covers both formats
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Area loader
# =============================================================================


@dataclass
class LoadedArea:
    """Fully built entities for one area, ready for the World to register."""
    area: WorldArea
    rooms: List[WorldRoom]
    items: List[WorldItem]
    npcs: List[WorldNpc]


class AreaLoader:
    """Fetches, validates and instantiates areas."""

    def __init__(self, source: AreaSource) -> None:
        self.source = source

    async def load(self, area_id: str) -> LoadedArea:
        try:
            raw = await self.source.fetch(area_id)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise AreaLoadError(area_id, str(exc)) from exc

        if not isinstance(raw, dict):
            raise AreaLoadError(area_id, "document is not a mapping")

        try:
            doc = AreaDocument.model_validate(raw)
        except ValidationError as exc:
            raise AreaLoadError(area_id, f"invalid document: {exc}") from exc

        if doc.id != area_id:
            raise AreaLoadError(area_id, f"document id '{doc.id}' does not match")

        return build_area(doc)


def build_area(doc: AreaDocument) -> LoadedArea:
    """Instantiate entities for a validated document, checking cross-references."""
    area_id = doc.id
    problems: List[str] = []

    items = [
        WorldItem(
            id=local_id,
            area=area_id,
            name=item.name,
            description=item.description,
            type=item.type,
            damage=Dice.parse(item.damage) if item.damage is not None else None,
            armor=item.armor,
            heal_amount=item.heal_amount,
            weight=item.weight,
            value=item.value,
            can_take=item.can_take,
            read_text=item.read_text,
        )
        for local_id, item in doc.items.items()
    ]

    npcs = []
    for local_id, npc in doc.npcs.items():
        for ref in [*npc.drops, *npc.shop]:
            if ref not in doc.items:
                problems.append(f"npc '{local_id}' references unknown item '{ref}'")
        max_hp = npc.max_hit_points if npc.max_hit_points is not None else max(1, npc.hit_points)
        npcs.append(WorldNpc(
            id=local_id,
            area=area_id,
            name=npc.name,
            description=npc.description,
            type=npc.type,
            hit_points=npc.hit_points,
            max_hit_points=max_hp,
            damage=Dice.parse(npc.damage),
            experience=npc.experience,
            drops=list(npc.drops),
            dialogue=list(npc.dialogue),
            can_heal=npc.can_heal,
            shop=list(npc.shop),
            can_wander=npc.can_wander,
            flees_at_percent=npc.flees_at_percent,
            special_abilities=[
                SpecialAbility(name=a.name, chance=a.chance, message=a.message)
                for a in npc.special_abilities
            ],
        ))

    rooms = []
    placed: Dict[str, str] = {}
    for local_id, room in doc.rooms.items():
        exits: Dict[str, Union[str, CrossZoneExit]] = {}
        for direction, target in room.exits.items():
            if isinstance(target, ExitDocument):
                exits[direction.lower()] = CrossZoneExit(room=target.room, area=target.area)
            else:
                if target not in doc.rooms:
                    problems.append(f"room '{local_id}' exit '{direction}' leads to unknown room '{target}'")
                exits[direction.lower()] = target

        for ref in room.items:
            if ref not in doc.items:
                problems.append(f"room '{local_id}' references unknown item '{ref}'")
        for ref in room.npcs:
            if ref not in doc.npcs:
                problems.append(f"room '{local_id}' references unknown npc '{ref}'")
            elif ref in placed:
                problems.append(f"npc '{ref}' is placed in both '{placed[ref]}' and '{local_id}'")
            else:
                placed[ref] = local_id

        rooms.append(WorldRoom(
            id=local_id,
            area=area_id,
            name=room.name,
            description=room.description,
            exits=exits,
            items=[get_global_id(ref, area_id) for ref in room.items],
            npcs=list(dict.fromkeys(room.npcs)),
        ))

    if problems:
        raise AreaLoadError(area_id, "; ".join(problems))

    return LoadedArea(
        area=WorldArea(id=area_id, name=doc.name, description=doc.description),
        rooms=rooms,
        items=items,
        npcs=npcs,
    )


# =============================================================================
# Skills
# =============================================================================


def parse_skills(raw: Mapping[str, Any]) -> SkillBook:
    """Build a SkillBook from a skillId -> document mapping."""
    skills = []
    for skill_id, data in raw.items():
        doc = SkillDocument.model_validate(data)
        skills.append(SkillData(
            id=skill_id,
            name=doc.name,
            description=doc.description,
            level=doc.level,
            cost=doc.cost,
            cooldown=doc.cooldown,
            damage_multiplier=doc.damage_multiplier,
        ))
    return SkillBook(skills)


def load_skills(path: str | Path) -> SkillBook:
    path = Path(path)
    if not path.is_file():
        logger.warning("Skill file %s not found; no skills available", path)
        return SkillBook()
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return parse_skills(raw)
