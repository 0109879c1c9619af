"""In-process topic registry: subscribe handlers, publish to them, unsubscribe them."""

import threading
import weakref
from typing import Any, Callable, Dict, List, Optional

from tinypubsub.config import get_settings
from tinypubsub.errors import InvalidArgument
from tinypubsub.observability import Metrics, get_logger
from tinypubsub.subscription import (
    UNBOUNDED,
    InvocationBudget,
    Subscription,
    SubscriptionHandle,
)
from tinypubsub.validation import (
    assert_handle,
    assert_valid_topic,
    assert_valid_topic_and_handler,
)


class _RegistryState:
    """Topic table for one registry. Not reachable through the registry object."""

    __slots__ = ("topics", "published", "lock")

    def __init__(self) -> None:
        self.topics: Dict[str, List[Subscription]] = {}
        self.published: Dict[str, int] = {}
        self.lock = threading.Lock()


_states: "weakref.WeakKeyDictionary[Registry, _RegistryState]" = weakref.WeakKeyDictionary()


class Registry:
    """Maps topic names to subscriptions kept in registration order.

    Handlers run synchronously inside ``publish``, outside the registry lock,
    so a handler may call back into the same registry. Subscriptions added
    during a publish are not invoked by that publish; subscriptions removed
    during it are skipped for the rest of the pass.
    """

    def __init__(self, metrics: Optional[Metrics] = None) -> None:
        _states[self] = _RegistryState()
        self._logger = get_logger("tinypubsub.registry")
        self.metrics = metrics if metrics is not None else Metrics(get_settings().metrics_enabled)

    # ---- Subscribe ----

    def subscribe(
        self,
        topic: str,
        handler: Callable[..., Any],
        invocations_left: InvocationBudget = UNBOUNDED,
    ) -> SubscriptionHandle:
        """
        Register handler on topic and return the handle that cancels it.
        invocations_left caps how many publishes the handler receives.
        """
        assert_valid_topic_and_handler(topic, handler)

        subscription = Subscription(
            handle=SubscriptionHandle(topic),
            topic=topic,
            handler=handler,
            invocations_left=invocations_left,
        )
        state = _states[self]
        with state.lock:
            state.topics.setdefault(topic, []).append(subscription)
            total = self._count(state)
        self.metrics.increment("subscribed")
        self.metrics.set_gauge("subscriptions", total)
        self._logger.debug(
            "subscribed",
            extra={"topic": topic, "invocations_left": invocations_left},
        )
        return subscription.handle

    # ---- Publish ----

    def publish(self, topic: str, *args: Any, **kwargs: Any) -> bool:
        """
        Call every live handler on topic with the given arguments, in registration order.
        Returns False only when nobody was subscribed to topic.
        """
        assert_valid_topic(topic)
        state = _states[self]
        with state.lock:
            subscriptions = state.topics.get(topic)
            if not subscriptions:
                snapshot = None
            else:
                snapshot = list(subscriptions)
                state.published[topic] = state.published.get(topic, 0) + 1
        if snapshot is None:
            self.metrics.increment("published_unheard")
            self._logger.debug("published_unheard", extra={"topic": topic})
            return False

        self.metrics.increment("published")
        self._logger.debug(
            "published",
            extra={"topic": topic, "subscriber_count": len(snapshot)},
        )
        for subscription in snapshot:
            with state.lock:
                if not subscription.active:
                    continue
                if subscription.prunable:
                    self._remove(state, subscription)
                    pruned = True
                elif subscription.exhausted:
                    # last slot held by a call still running
                    continue
                else:
                    subscription.reserve()
                    pruned = False
            if pruned:
                self.metrics.increment("pruned")
                self._logger.debug("pruned", extra={"topic": topic})
                continue

            try:
                subscription.handler(*args, **kwargs)
            except Exception as e:
                with state.lock:
                    subscription.refund()
                self.metrics.increment("handler_errors")
                self._logger.warning(
                    "handler_failed",
                    extra={"topic": topic, "handler": repr(subscription.handler), "error": str(e)},
                )
                raise
            with state.lock:
                subscription.settle()
            self.metrics.increment("delivered")

        with state.lock:
            total = self._count(state)
        self.metrics.set_gauge("subscriptions", total)
        return True

    # ---- Unsubscribe ----

    def unsubscribe(self, *args: Any) -> bool:
        """
        Cancel a subscription, either by handle or by (topic, handler).

            registry.unsubscribe(handle)
            registry.unsubscribe("message", on_message)
        """
        if len(args) == 1:
            return self.unsubscribe_handle(args[0])
        if len(args) == 2:
            return self.unsubscribe_handler(args[0], args[1])
        raise InvalidArgument(f"unsubscribe takes 1 or 2 arguments, got {len(args)}")

    def unsubscribe_handle(self, handle: SubscriptionHandle) -> bool:
        """Remove the subscription minted with handle. False if it is not (or no longer) here."""
        assert_handle(handle)
        state = _states[self]
        with state.lock:
            match = None
            for subscriptions in state.topics.values():
                for subscription in subscriptions:
                    if subscription.handle is handle:
                        match = subscription
                        break
                if match is not None:
                    break
            if match is not None:
                self._remove(state, match)
        return self._after_unsubscribe(match)

    def unsubscribe_handler(self, topic: str, handler: Callable[..., Any]) -> bool:
        """Remove the first subscription on topic whose handler is this exact object."""
        assert_valid_topic_and_handler(topic, handler)
        state = _states[self]
        with state.lock:
            match = None
            for subscription in state.topics.get(topic, ()):
                if subscription.handler is handler:
                    match = subscription
                    break
            if match is not None:
                self._remove(state, match)
        return self._after_unsubscribe(match)

    def clear(self, topic: Optional[str] = None) -> int:
        """Remove every subscription on topic, or on all topics. Returns how many were removed."""
        if topic is not None:
            assert_valid_topic(topic)
        state = _states[self]
        with state.lock:
            names = [topic] if topic is not None else list(state.topics)
            removed = 0
            for name in names:
                for subscription in state.topics.get(name, ()):
                    subscription.active = False
                    removed += 1
                if name in state.topics:
                    state.topics[name] = []
        if removed:
            self.metrics.increment("unsubscribed", removed)
            self.metrics.set_gauge("subscriptions", self.subscriber_count())
            self._logger.debug("cleared", extra={"topic": topic, "removed": removed})
        return removed

    # ---- Inspection ----

    def has_subscribers(self, topic: str) -> bool:
        """True when publish(topic) would find at least one subscriber."""
        assert_valid_topic(topic)
        state = _states[self]
        with state.lock:
            return bool(state.topics.get(topic))

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        """Subscriptions on topic, or on every topic. Exhausted ones count until pruned."""
        state = _states[self]
        if topic is not None:
            assert_valid_topic(topic)
            with state.lock:
                return len(state.topics.get(topic, ()))
        with state.lock:
            return self._count(state)

    def topic_count(self) -> int:
        """Number of topics with at least one subscription."""
        state = _states[self]
        with state.lock:
            return sum(1 for subscriptions in state.topics.values() if subscriptions)

    def list_topics(self) -> List[Dict[str, Any]]:
        """Return [{name, subscribers}] for each non-empty topic, oldest first."""
        state = _states[self]
        with state.lock:
            return [
                {"name": name, "subscribers": len(subscriptions)}
                for name, subscriptions in state.topics.items()
                if subscriptions
            ]

    def topic_stats(self) -> Dict[str, Dict[str, int]]:
        """Return { topic_name: { published, subscribers } } for every topic seen."""
        state = _states[self]
        with state.lock:
            return {
                name: {
                    "published": state.published.get(name, 0),
                    "subscribers": len(subscriptions),
                }
                for name, subscriptions in state.topics.items()
            }

    # ---- Internals (caller holds the lock) ----

    @staticmethod
    def _remove(state: _RegistryState, subscription: Subscription) -> None:
        subscriptions = state.topics.get(subscription.topic, [])
        for idx, candidate in enumerate(subscriptions):
            if candidate is subscription:
                del subscriptions[idx]
                break
        subscription.active = False

    @staticmethod
    def _count(state: _RegistryState) -> int:
        return sum(len(subscriptions) for subscriptions in state.topics.values())

    def _after_unsubscribe(self, subscription: Optional[Subscription]) -> bool:
        if subscription is None:
            return False
        self.metrics.increment("unsubscribed")
        self.metrics.set_gauge("subscriptions", self.subscriber_count())
        self._logger.debug("unsubscribed", extra={"topic": subscription.topic})
        return True

    def __copy__(self):
        raise TypeError("Registry cannot be copied; create a new Registry instead")

    def __deepcopy__(self, memo):
        raise TypeError("Registry cannot be copied; create a new Registry instead")

    def __reduce__(self):
        raise TypeError("Registry cannot be serialized")

    def __repr__(self) -> str:
        return f"Registry(topics={self.topic_count()}, subscriptions={self.subscriber_count()})"
