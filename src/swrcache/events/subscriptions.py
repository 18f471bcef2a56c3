"""Subscription registry and notifier.

Observers register a payload-free callback per key. A notification only says
"this key changed": callbacks re-query the cache for the current state.

Delivery is synchronous, in registration order, inside the call that mutated
the cache. Callbacks must not synchronously mutate the key they were notified
for; doing so nests another notification round for that key. A failing
callback is logged and does not stop delivery to the others.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from swrcache.observability.logging import LogContext
from swrcache.observability.metrics import record_notification

logger = logging.getLogger(__name__)

Subscriber = Callable[[], None]
Unsubscribe = Callable[[], None]


class SubscriptionRegistry:
    """Maps a key to the ordered set of callbacks interested in it."""

    def __init__(self, record_metrics: bool = True) -> None:
        # dict keys double as an insertion-ordered set; values are the
        # registration tokens checked by unsubscribe
        self._subscribers: dict[str, dict[Subscriber, object]] = {}
        self._record_metrics = record_metrics

    def subscribe(self, key: str, callback: Subscriber) -> Unsubscribe:
        """Register callback for key and return a function that removes it.

        Subscribing a callback that is already registered for key keeps its
        place in the delivery order; both handles remove that registration.
        """
        token = self._subscribers.setdefault(key, {}).setdefault(callback, object())

        def unsubscribe() -> None:
            subs = self._subscribers.get(key)
            if subs is None or subs.get(callback) is not token:
                return
            del subs[callback]
            if not subs:
                del self._subscribers[key]

        return unsubscribe

    def notify(self, key: str) -> int:
        """Invoke every callback registered for key.

        Returns the number of callbacks invoked.
        """
        subs = self._subscribers.get(key)
        if not subs:
            return 0

        delivered = 0
        with LogContext(cache_key=key):
            for callback in list(subs):
                try:
                    callback()
                except Exception:
                    logger.exception("Cache subscriber failed")
                delivered += 1

        if self._record_metrics:
            record_notification(delivered)
        return delivered

    def keys(self) -> list[str]:
        """Keys with at least one subscriber."""
        return list(self._subscribers)

    def has_subscribers(self, key: str) -> bool:
        return key in self._subscribers

    def subscriber_count(self, key: str) -> int:
        return len(self._subscribers.get(key, ()))
