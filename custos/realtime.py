"""Change notifications for the expense table.

Consumers treat every event the same way: something changed, re-fetch
the full list. ``poll_changes`` stands in for a push channel by
re-reading the remote table and publishing when its content changed.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from custos.domain.models import Expense
from custos.errors import StoreError
from custos.store.base import ExpenseStore

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Kinds of change events."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    REFRESH = "REFRESH"


@dataclass(frozen=True)
class ChangeEvent:
    """A change on the expense table."""

    type: ChangeType
    expense_id: str | None = None


Listener = Callable[[ChangeEvent], None]


class ChangeFeed:
    """In-process registry of change listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every current listener."""
        logger.debug("Change event %s (%s)", event.type.value, event.expense_id)
        for listener in list(self._listeners):
            listener(event)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


def poll_changes(
    store: ExpenseStore,
    feed: ChangeFeed,
    interval: float = 5.0,
    should_stop: Callable[[], bool] = lambda: False,
    sleep: Callable[[float], None] = time.sleep,
    initial: list[Expense] | None = None,
) -> None:
    """Re-read the store periodically and publish REFRESH when it changed.

    Store failures are logged and polling continues with the next round.

    Args:
        store: Store to poll.
        feed: Feed to publish on.
        interval: Seconds between fetches.
        should_stop: Checked before each round; polling ends when it returns True.
        sleep: Sleep function (replaced in tests).
        initial: List already shown to the user. Without it the first
            fetch only sets the baseline.

    Raises:
        AuthError: If the session ends while polling.
    """
    previous = initial

    while not should_stop():
        try:
            current = store.load()
        except StoreError as e:
            logger.warning("Polling failed: %s", e)
        else:
            if previous is not None and current != previous:
                feed.publish(ChangeEvent(ChangeType.REFRESH))
            previous = current
        sleep(interval)
