"""Example: in-process pub-sub with budgets and both unsubscribe styles."""

import logging

from tinypubsub import Registry, get_logger

logger = get_logger("example", logging.INFO)


def on_signup(event: dict) -> None:
    logger.info("signup user_id=%s", event["user_id"])


def on_first_order(event: dict) -> None:
    logger.info("first order order_id=%s", event["order_id"])


def main() -> None:
    registry = Registry()

    handle = registry.subscribe("user.signup", on_signup)
    registry.subscribe("order.placed", on_first_order, 1)

    registry.publish("user.signup", {"user_id": 101})
    registry.publish("order.placed", {"order_id": 201})
    # budget spent: delivered to nobody, subscription pruned
    registry.publish("order.placed", {"order_id": 202})

    registry.unsubscribe(handle)
    logger.info("delivered=%s", registry.publish("user.signup", {"user_id": 102}))
    logger.info("stats=%s metrics=%s", registry.topic_stats(), registry.metrics.snapshot())


if __name__ == "__main__":
    main()
