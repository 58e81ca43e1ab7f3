import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Tuple

logger = logging.getLogger(__name__)


class EventBus:
    """A lightweight publish/subscribe event bus.

    - Subscribers register handlers for event names (strings).
    - Emit broadcasts payloads to all handlers of that event.
    - The most recent emits are kept in ``history`` for inspection.

    Audio and render collaborators hang off this; the turn engine never calls them directly.
    """

    def __init__(self, history_size: int = 64) -> None:
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}
        self.history: Deque[Tuple[str, Any]] = deque(maxlen=history_size)

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Subscribe a handler to an event name."""
        self._handlers.setdefault(event, []).append(handler)
        logger.debug("Subscribed handler %s to event '%s'", getattr(handler, "__name__", str(handler)), event)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler from an event name. Silently ignores if not present."""
        if event in self._handlers and handler in self._handlers[event]:
            self._handlers[event].remove(handler)
            logger.debug("Unsubscribed handler %s from event '%s'", getattr(handler, "__name__", str(handler)), event)

    def emit(self, event: str, payload: Any = None) -> None:
        """Emit an event with an optional payload to all subscribed handlers.

        Handler exceptions are caught and logged, allowing other handlers to still run.
        """
        self.history.append((event, payload))
        handlers = list(self._handlers.get(event, []))
        logger.debug("Emitting event '%s' to %d handlers with payload: %r", event, len(handlers), payload)
        for handler in handlers:
            try:
                handler(payload)
            except Exception as exc:  # noqa: BLE001 - we want to log any exception from handlers
                logger.exception("Error in event handler for '%s': %s", event, exc)

    def names(self) -> List[str]:
        """Event names in history order, oldest first."""
        return [name for name, _ in self.history]

    def clear_history(self) -> None:
        self.history.clear()
