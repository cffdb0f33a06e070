# realms/engine/systems/events.py
"""
MessageChannel - asynchronous delivery of events not tied to a command.

Combat rounds, respawns, wandering NPCs and cooldowns happen on timers, so
their text cannot be the return value of a command. They are published here
instead and delivered to every subscriber's queue.

Provides:
- Event construction helpers (message_event, stat_update_event)
- Listener queues with subscribe/unsubscribe
- In-order delivery: events reach each queue in the order they were emitted
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List

# Type alias for events (message dicts sent to listeners)
Event = Dict[str, Any]

# Event types
MESSAGE = "message"
STAT_UPDATE = "stat_update"

# Message kinds
KIND_COMBAT = "combat"
KIND_WORLD = "world"
KIND_SYSTEM = "system"


def message_event(text: str, *, kind: str = KIND_SYSTEM, payload: dict | None = None) -> Event:
    """Create a text message event."""
    ev: Event = {
        "type": MESSAGE,
        "kind": kind,
        "text": text,
    }
    if payload:
        ev["payload"] = payload
    return ev


def stat_update_event(stats: dict) -> Event:
    """Create a stat_update event so a UI can refresh its status panel."""
    return {
        "type": STAT_UPDATE,
        "payload": stats,
    }


class MessageChannel:
    """
    Fan-out of events to subscriber queues.

    Usage:
        channel = MessageChannel()
        queue = channel.subscribe("terminal")
        channel.publish("A rat emerges from the shadows!", kind=KIND_WORLD)
        event = await queue.get()
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, asyncio.Queue[Event]] = {}

    # ---------- Listener management ----------

    def subscribe(self, listener_id: str) -> asyncio.Queue[Event]:
        """Register a listener queue. Re-subscribing replaces the old queue."""
        q: asyncio.Queue[Event] = asyncio.Queue()
        self._listeners[listener_id] = q
        return q

    def unsubscribe(self, listener_id: str) -> None:
        self._listeners.pop(listener_id, None)

    def has_listener(self, listener_id: str) -> bool:
        return listener_id in self._listeners

    def get_listener(self, listener_id: str) -> asyncio.Queue[Event] | None:
        return self._listeners.get(listener_id)

    # ---------- Emission ----------

    def emit(self, event: Event) -> None:
        for q in list(self._listeners.values()):
            q.put_nowait(event)

    def emit_many(self, events: Iterable[Event]) -> None:
        for event in events:
            self.emit(event)

    def publish(self, text: str, *, kind: str = KIND_SYSTEM) -> Event:
        """Emit a text message and return the event that was sent."""
        event = message_event(text, kind=kind)
        self.emit(event)
        return event

    def publish_all(self, texts: Iterable[str], *, kind: str = KIND_SYSTEM) -> List[Event]:
        return [self.publish(text, kind=kind) for text in texts if text]


def drain(queue: asyncio.Queue[Event]) -> List[Event]:
    """Take every event currently waiting in a queue without blocking."""
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events
