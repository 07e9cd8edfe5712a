"""Snapshot channel between the engine and its host(s)."""

import copy
from typing import Any, Callable, List

Subscriber = Callable[[Any], None]


class SnapshotChannel:
    """Fire-and-forget fan-out of state snapshots.

    The engine is the only publisher. Every subscriber receives its own deep
    copy of the published object, so a host can never mutate engine state
    through a snapshot. Publishing never waits for an acknowledgement; a
    subscriber that raises is reported and skipped.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self.published = 0

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a subscriber.

        Args:
            callback: Called with a snapshot after every state mutation

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, state: Any) -> None:
        """Push a snapshot of ``state`` to every subscriber."""
        self.published += 1
        for callback in list(self._subscribers):
            try:
                callback(copy.deepcopy(state))
            except Exception as e:
                print(f"Warning: snapshot subscriber failed: {e}")

    def __len__(self) -> int:
        return len(self._subscribers)
