"""In-process event bus.

The zone manager publishes domain events here (``zone.instance.created``,
``zone.cleared`` ...). Subscribers are plain callables; an exception raised by
one handler is logged and the remaining handlers still run.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List

from .logging_utils import get_logger

logger = get_logger("zoneforge.events")

Handler = Callable[[Any], None]
AnyHandler = Callable[[str, Any], None]

MAX_HISTORY = 100


@dataclass
class GameEvent:
    type: str
    data: Any
    timestamp: int

    def to_dict(self):
        return {"type": self.type, "data": self.data, "timestamp": self.timestamp}


class EventBus:
    def __init__(self, max_history: int = MAX_HISTORY):
        self._handlers: Dict[str, List[Handler]] = {}
        self._any_handlers: List[AnyHandler] = []
        self._history: Deque[GameEvent] = deque(maxlen=max_history)
        self._lock = threading.Lock()

    def on(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Subscribe ``handler`` to ``event_type``; returns an unsubscribe callable."""
        with self._lock:
            handlers = self._handlers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
        return lambda: self.off(event_type, handler)

    def off(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type)
            if not handlers:
                return
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                del self._handlers[event_type]

    def on_any(self, handler: AnyHandler) -> Callable[[], None]:
        """Subscribe to every event; the handler receives ``(event_type, data)``."""
        with self._lock:
            if handler not in self._any_handlers:
                self._any_handlers.append(handler)

        def _unsubscribe():
            with self._lock:
                if handler in self._any_handlers:
                    self._any_handlers.remove(handler)

        return _unsubscribe

    def emit(self, event_type: str, data: Any = None) -> GameEvent:
        event = GameEvent(type=event_type, data=data, timestamp=int(time.time() * 1000))
        with self._lock:
            self._history.append(event)
            handlers = list(self._handlers.get(event_type, ()))
            any_handlers = list(self._any_handlers)
        for handler in handlers:
            try:
                handler(data)
            except Exception as e:  # noqa: BLE001
                logger.error(event="event_handler_failed", event_type=event_type, error=str(e))
        for handler in any_handlers:
            try:
                handler(event_type, data)
            except Exception as e:  # noqa: BLE001
                logger.error(event="event_handler_failed", event_type=event_type, error=str(e))
        return event

    def history(self, event_type: str = None) -> List[GameEvent]:
        with self._lock:
            events = list(self._history)
        if event_type is None:
            return events
        return [e for e in events if e.type == event_type]

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))


__all__ = ["EventBus", "GameEvent", "MAX_HISTORY"]
