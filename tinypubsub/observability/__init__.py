"""Observability for the registry: logging and in-memory metrics."""

from tinypubsub.observability.logger import get_logger
from tinypubsub.observability.metrics import Metrics

__all__ = ["get_logger", "Metrics"]
