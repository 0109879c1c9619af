"""Subscription record, its opaque handle, and the unbounded budget sentinel."""

import enum
from typing import Any, Callable, Union

from tinypubsub.errors import InvalidArgument


class Budget(enum.Enum):
    """Sentinel for subscriptions without an invocation limit."""

    UNBOUNDED = "unbounded"

    def __repr__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = Budget.UNBOUNDED

InvocationBudget = Union[int, Budget]


class SubscriptionHandle:
    """Opaque token identifying one subscription. Compared by identity only."""

    __slots__ = ("_label",)

    def __init__(self, label: str) -> None:
        self._label = label

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __lt__(self, other: object) -> bool:
        raise TypeError("SubscriptionHandle does not support ordering")

    __le__ = __gt__ = __ge__ = __lt__

    def __reduce__(self):
        raise TypeError("SubscriptionHandle cannot be serialized")

    def __repr__(self) -> str:
        return f"SubscriptionHandle({self._label!r}, at 0x{id(self):x})"


def validate_budget(invocations_left: Any) -> InvocationBudget:
    """Return the budget unchanged if it is UNBOUNDED or an int >= 1."""
    if invocations_left is UNBOUNDED:
        return invocations_left
    if (
        isinstance(invocations_left, bool)
        or not isinstance(invocations_left, int)
        or invocations_left < 1
    ):
        raise InvalidArgument(
            f"invocations_left must be an int >= 1 or UNBOUNDED, got {invocations_left!r}"
        )
    return invocations_left


class Subscription:
    """One handler registered on one topic, with its remaining invocation budget.

    An invocation is reserved before the handler runs and then either settled
    or refunded, so a budget is never spent twice by overlapping publishes.
    """

    __slots__ = ("_handle", "_topic", "_handler", "invocations_left", "in_flight", "active")

    def __init__(
        self,
        handle: SubscriptionHandle,
        topic: str,
        handler: Callable[..., Any],
        invocations_left: InvocationBudget = UNBOUNDED,
    ) -> None:
        self._handle = handle
        self._topic = topic
        self._handler = handler
        self.invocations_left = validate_budget(invocations_left)
        self.in_flight = 0
        self.active = True

    @property
    def handle(self) -> SubscriptionHandle:
        return self._handle

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def handler(self) -> Callable[..., Any]:
        return self._handler

    @property
    def exhausted(self) -> bool:
        return self.invocations_left is not UNBOUNDED and self.invocations_left <= 0

    @property
    def prunable(self) -> bool:
        """Spent, with no invocation still running that could hand its slot back."""
        return self.exhausted and self.in_flight == 0

    def reserve(self) -> None:
        """Take one invocation from the budget before calling the handler."""
        if self.invocations_left is not UNBOUNDED:
            self.invocations_left -= 1
        self.in_flight += 1

    def settle(self) -> None:
        """The reserved invocation completed."""
        self.in_flight -= 1

    def refund(self) -> None:
        """The reserved invocation failed; give it back."""
        if self.invocations_left is not UNBOUNDED:
            self.invocations_left += 1
        self.in_flight -= 1

    def __repr__(self) -> str:
        return (
            f"Subscription(topic={self._topic!r}, handler={self._handler!r}, "
            f"invocations_left={self.invocations_left!r}, active={self.active})"
        )
