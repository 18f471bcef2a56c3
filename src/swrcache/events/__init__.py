"""Notification fabric for the SWR cache.

Provides:
- SubscriptionRegistry: per-key payload-free callbacks, synchronous delivery
- TriggerSource: focus / connectivity signals that prompt revalidation
"""

from swrcache.events.subscriptions import Subscriber, SubscriptionRegistry, Unsubscribe
from swrcache.events.triggers import (
    ManualTriggerSource,
    NullTriggerSource,
    TriggerHandler,
    TriggerSource,
)

__all__ = [
    # Subscriptions
    "Subscriber",
    "SubscriptionRegistry",
    "Unsubscribe",
    # Triggers
    "TriggerHandler",
    "TriggerSource",
    "NullTriggerSource",
    "ManualTriggerSource",
]
