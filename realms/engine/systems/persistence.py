# realms/engine/systems/persistence.py
"""
Save games.

Provides:
- KeyValueStore: the injected blob store (in-memory or SQL backed)
- SaveManager: builds the save snapshot and restores the world from one

Restoring reloads every area the save lists, then overlays the saved NPC hit
points and room item lists. NPC placement comes from the saved location
index only; room NPC lists are rebuilt from it, never read from the save.
"""

from __future__ import annotations

import copy
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...models import SaveSlot
from ..errors import SaveError
from ..world import WorldPlayer

if TYPE_CHECKING:
    from .context import GameContext

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]


# =============================================================================
# Stores
# =============================================================================


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Snapshot]:
        ...

    async def set(self, key: str, value: Snapshot) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Keeps deep copies of saved blobs in a dict."""

    def __init__(self) -> None:
        self._data: Dict[str, Snapshot] = {}

    async def get(self, key: str) -> Optional[Snapshot]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Snapshot) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore:
    """Stores each blob as a row of the save_slots table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[Snapshot]:
        try:
            async with self._session_factory() as session:
                slot = await session.get(SaveSlot, key)
                return dict(slot.data) if slot else None
        except SQLAlchemyError as exc:
            raise SaveError(f"Could not read save slot {key!r}: {exc}") from exc

    async def set(self, key: str, value: Snapshot) -> None:
        try:
            async with self._session_factory() as session:
                slot = await session.get(SaveSlot, key)
                if slot is None:
                    session.add(SaveSlot(key=key, data=value))
                else:
                    slot.data = value
                await session.commit()
        except SQLAlchemyError as exc:
            raise SaveError(f"Could not write save slot {key!r}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(SaveSlot).where(SaveSlot.key == key))
                await session.commit()
        except SQLAlchemyError as exc:
            raise SaveError(f"Could not delete save slot {key!r}: {exc}") from exc


# =============================================================================
# Save document
# =============================================================================


class _SaveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NpcState(_SaveModel):
    hit_points: Optional[int] = Field(default=None, alias="hitPoints")


class RoomState(_SaveModel):
    items: Optional[List[str]] = None


class WorldState(_SaveModel):
    npcs: Optional[Dict[str, NpcState]] = None
    rooms: Optional[Dict[str, RoomState]] = None
    npc_locations: Optional[List[Tuple[str, str]]] = Field(default=None, alias="npcLocations")


class SaveDocument(_SaveModel):
    """Shape of a stored snapshot. Validated in full before anything is reset."""
    player: Dict[str, Any]
    loaded_area_ids: List[str] = Field(default_factory=list, alias="loadedAreaIds")
    world_state: Optional[WorldState] = Field(default=None, alias="worldState")


# =============================================================================
# Save manager
# =============================================================================


class SaveManager:
    """
    Writes and restores save snapshots.

    Usage:
        saves = SaveManager(ctx, MemoryKeyValueStore(), key="savegame")
        await saves.save_game()
        data = await saves.fetch()
        if data:
            await saves.restore(data)
    """

    def __init__(self, ctx: "GameContext", store: KeyValueStore, key: str) -> None:
        self.ctx = ctx
        self.store = store
        self.key = key

    def build_snapshot(self) -> Snapshot:
        world = self.ctx.world
        return {
            "player": self.ctx.player.to_dict(),
            "loadedAreaIds": sorted(world.loaded_area_ids),
            "worldState": {
                "npcs": {
                    npc_id: {"hitPoints": npc.hit_points}
                    for npc_id, npc in world.npcs.items()
                },
                "rooms": {
                    room_id: {"items": list(room.items)}
                    for room_id, room in world.rooms.items()
                },
                "npcLocations": [
                    [npc_id, room_id] for npc_id, room_id in world.npc_locations.items()
                ],
            },
            "timestamp": int(time.time() * 1000),
        }

    async def save_game(self) -> Snapshot:
        snapshot = self.build_snapshot()
        await self.store.set(self.key, snapshot)
        logger.info("Game saved under %r", self.key)
        return snapshot

    async def fetch(self) -> Optional[Snapshot]:
        return await self.store.get(self.key)

    async def has_save(self) -> bool:
        return await self.fetch() is not None

    def parse(self, data: Snapshot) -> Tuple[SaveDocument, WorldPlayer]:
        """Validate a snapshot and build its player. Raises SaveError."""
        try:
            document = SaveDocument.model_validate(data)
            player = WorldPlayer.from_dict(document.player)
        except (ValidationError, AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SaveError(f"Malformed save data: {exc}") from exc
        return document, player

    async def restore(self, data: Union[Snapshot, Tuple[SaveDocument, WorldPlayer]]) -> WorldPlayer:
        """
        Rebuild the world and player from a snapshot.

        The whole snapshot is validated before anything is reset, so a
        malformed save raises SaveError and leaves the current game untouched.
        """
        document, player = data if isinstance(data, tuple) else self.parse(data)
        world_state = document.world_state or WorldState()

        world = self.ctx.world
        world.reset()
        for area_id in document.loaded_area_ids:
            if not await world.load_area(area_id):
                logger.warning("Area %s from the save could not be reloaded", area_id)

        self.ctx.player = player

        for npc_id, npc_state in (world_state.npcs or {}).items():
            npc = world.npcs.get(npc_id)
            if npc and npc_state.hit_points is not None:
                npc.hit_points = max(0, min(npc_state.hit_points, npc.max_hit_points))

        for room_id, room_state in (world_state.rooms or {}).items():
            room = world.rooms.get(room_id)
            if room and room_state.items is not None:
                room.items = list(room_state.items)

        if world_state.npc_locations is not None:
            world.npc_locations = {
                npc_id: room_id
                for npc_id, room_id in world_state.npc_locations
                if npc_id in world.npcs and room_id in world.rooms
            }
        world.sync_rooms_from_npc_map()

        logger.info("Game restored from %r", self.key)
        return player
