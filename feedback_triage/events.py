"""Change notifications for stored feedback, alerts and messages."""
import logging
from collections import defaultdict
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ChangeEvent(BaseModel):
    """A change to one table; records are the affected rows as dicts."""

    table: str
    action: str  # insert or update
    records: List[Dict[str, Any]] = Field(default_factory=list)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


Listener = Callable[[ChangeEvent], Awaitable[None]]


class ChangeFeed:
    """Registry of listeners notified after storage changes.

    Listeners are awaited in registration order. A failing listener is logged
    and does not stop the others.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, table: str, listener: Listener) -> Callable[[], None]:
        """Register a listener for a table.

        Returns:
            A callable that removes the listener again
        """
        self._listeners[table].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[table]:
                self._listeners[table].remove(listener)

        return unsubscribe

    async def publish(self, event: ChangeEvent) -> None:
        """Notify every listener registered for the event's table."""
        for listener in list(self._listeners.get(event.table, [])):
            try:
                await listener(event)
            except Exception as e:
                logger.error(f"Listener failed for {event.table}/{event.action}: {e}", exc_info=True)
