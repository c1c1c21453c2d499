from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from sweetmatch.events.bus import EventBus, PUBLIC_EVENTS


@dataclass(frozen=True)
class Event:
    """One observable state transition, as handed to the presentation layer."""

    type: str
    payload: Dict[str, Any] = field(default_factory=dict)


class EventRecorder:
    """Collects public bus events into ``Event`` records.

    Captures nest: every open capture receives every event emitted while it is
    open, so a caller re-entering the engine from inside a handler still gets
    its own buffer.
    """

    def __init__(self, event_bus: EventBus):
        self._buffers: List[List[Event]] = []
        for name in PUBLIC_EVENTS:
            event_bus.subscribe(name, self._make_handler(name))

    def _make_handler(self, name: str):
        def handler(sender, **payload):
            if not self._buffers:
                return
            event = Event(type=name, payload=dict(payload))
            for buffer in self._buffers:
                buffer.append(event)
        return handler

    @contextmanager
    def capture(self) -> Iterator[List[Event]]:
        buffer: List[Event] = []
        self._buffers.append(buffer)
        try:
            yield buffer
        finally:
            # Buffers compare by value, so drop this one by identity.
            self._buffers = [b for b in self._buffers if b is not buffer]
