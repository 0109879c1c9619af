"""Argument checks shared by the registry operations."""

from typing import Any

from tinypubsub.errors import InvalidArgument
from tinypubsub.subscription import SubscriptionHandle


def assert_valid_topic(topic: Any) -> None:
    if not isinstance(topic, str) or not topic:
        raise InvalidArgument(f"topic must be a non-empty string, got {topic!r}")


def assert_valid_topic_and_handler(topic: Any, handler: Any) -> None:
    assert_valid_topic(topic)
    if not callable(handler):
        raise InvalidArgument(f"handler must be callable, got {type(handler).__name__}")


def assert_handle(handle: Any) -> None:
    if not isinstance(handle, SubscriptionHandle):
        raise InvalidArgument(
            f"expected a SubscriptionHandle, got {type(handle).__name__}"
        )
