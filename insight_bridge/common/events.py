"""
Event Emitter

Per-instance publish/subscribe surface for bridge state transitions.
Listeners are called synchronously in registration order.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Union

logger = logging.getLogger("insight_bridge.common.events")

Listener = Callable[[Dict[str, Any]], Any]


class BridgeEvent(str, Enum):
    """Events emitted by the learning bridge"""
    LEARNING_STARTED = "insight:learning-started"
    ACCESSED = "insight:accessed"
    CONSOLIDATED = "consolidation:completed"


def _event_name(event: Union[BridgeEvent, str]) -> str:
    return event.value if isinstance(event, BridgeEvent) else str(event)


class EventEmitter:
    """
    Minimal synchronous event emitter.

    Not shared between instances: every bridge owns one, and tears it
    down with remove_all_listeners() on destroy.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._once: Dict[str, List[Listener]] = {}

    def on(self, event: Union[BridgeEvent, str], listener: Listener) -> "EventEmitter":
        """Register a listener for an event"""
        self._listeners.setdefault(_event_name(event), []).append(listener)
        return self

    def once(self, event: Union[BridgeEvent, str], listener: Listener) -> "EventEmitter":
        """Register a listener that is removed after its first call"""
        name = _event_name(event)
        self._listeners.setdefault(name, []).append(listener)
        self._once.setdefault(name, []).append(listener)
        return self

    def off(self, event: Union[BridgeEvent, str], listener: Listener) -> "EventEmitter":
        """Remove one registration of a listener (no-op if absent)"""
        name = _event_name(event)
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)
        once = self._once.get(name, [])
        if listener in once:
            once.remove(listener)
        return self

    def emit(self, event: Union[BridgeEvent, str], payload: Dict[str, Any]) -> bool:
        """
        Call every listener for an event with the payload.

        A listener that raises is logged and skipped; the remaining
        listeners still run.

        Returns:
            True if at least one listener was registered
        """
        name = _event_name(event)
        listeners = list(self._listeners.get(name, []))
        if not listeners:
            return False

        for listener in listeners:
            if listener in self._once.get(name, []):
                self.off(name, listener)
            try:
                listener(payload)
            except Exception as e:
                logger.warning("Listener for %s failed: %s", name, e)
        return True

    def listener_count(self, event: Union[BridgeEvent, str]) -> int:
        """Number of listeners registered for an event"""
        return len(self._listeners.get(_event_name(event), []))

    def remove_all_listeners(self) -> None:
        """Drop every listener for every event"""
        self._listeners.clear()
        self._once.clear()
