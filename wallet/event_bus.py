# wallet/event_bus.py
from typing import Any, Callable, Dict

from utils.logger import logger

class EventBus:
    """
    Lightweight synchronous pub/sub for identity and sync-state updates.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, list[Callable[[Any], None]]] = {}

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register a synchronous callback; returns an unsubscribe function."""
        self._subs.setdefault(topic, []).append(handler)

        def _unsubscribe() -> None:
            handlers = self._subs.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)
        return _unsubscribe

    def publish(self, topic: str, payload: Any) -> None:
        """Deliver to subscribers in registration order; a failing handler does not stop the rest."""
        for h in list(self._subs.get(topic, [])):
            try:
                h(payload)
            except Exception:
                logger.exception(f"EventBus handler failed topic={topic}")

# Common topics
TOPIC_IDENTITY = "identity.changed"
TOPIC_SYNC_STATE = "sync.state"
