"""In-process publish/subscribe registry with per-subscription invocation budgets."""

from tinypubsub.config import Settings, get_settings
from tinypubsub.errors import InvalidArgument
from tinypubsub.observability import Metrics, get_logger
from tinypubsub.registry import Registry
from tinypubsub.subscription import UNBOUNDED, Subscription, SubscriptionHandle

__all__ = [
    "Registry",
    "Subscription",
    "SubscriptionHandle",
    "UNBOUNDED",
    "InvalidArgument",
    "Metrics",
    "get_logger",
    "Settings",
    "get_settings",
]
