import pytest

from tinypubsub import Registry
from tinypubsub.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("PUBSUB_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PUBSUB_METRICS_ENABLED", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry() -> Registry:
    return Registry()


class Recorder:
    """Callable that remembers every call it receives."""

    def __init__(self, name: str = "h", log=None) -> None:
        self.name = name
        self.calls = []
        self._log = log

    def __call__(self, *args, **kwargs) -> None:
        self.calls.append((args, kwargs))
        if self._log is not None:
            self._log.append(self.name)


@pytest.fixture
def recorder():
    return Recorder
