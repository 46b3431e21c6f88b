"""
Change Feed Service
In-process publish/subscribe for document collection changes

Model writes publish a change after MongoDB acknowledges them; views
(leaderboard sockets, tests) subscribe per collection and get called
back with (collection, change). Subscribing returns the matching
unsubscribe function so teardown is one call on every exit path.

The attempt manager reuses the same mechanism with one channel per
live attempt for countdown ticks.
"""
import asyncio
import traceback
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

ChangeCallback = Callable[[str, dict], Union[None, Awaitable[None]]]


class ChangeFeed:
    def __init__(self):
        # {collection: [callback, ...]}
        self.subscribers: Dict[str, List[ChangeCallback]] = {}

    def subscribe(self, collection: str, callback: ChangeCallback) -> Callable[[], None]:
        self.subscribers.setdefault(collection, []).append(callback)

        def unsubscribe():
            callbacks = self.subscribers.get(collection, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self.subscribers.pop(collection, None)

        return unsubscribe

    def subscriber_count(self, collection: Optional[str] = None) -> int:
        if collection is not None:
            return len(self.subscribers.get(collection, []))
        return sum(len(callbacks) for callbacks in self.subscribers.values())

    async def publish(self, collection: str, change_type: str, document_id: Any = None, **details) -> int:
        """Deliver a change to every subscriber; returns how many were notified."""
        change = {"type": change_type, "id": document_id, **details}
        delivered = 0

        # Copy: callbacks may unsubscribe while we iterate
        for callback in list(self.subscribers.get(collection, [])):
            try:
                result = callback(collection, change)
                if asyncio.iscoroutine(result):
                    await result
                delivered += 1
            except Exception as e:
                print(f"⚠️ Change subscriber failed for {collection}: {e}")
                traceback.print_exc()

        return delivered


# Global instance
change_feed = ChangeFeed()
