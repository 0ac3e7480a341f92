import pytest
from fastapi.testclient import TestClient

from app.db.storage import MemoryStorage, get_storage
from app.main import app
from app.utils.analyzer import ExpenseAnalyzer


class FrozenAnalyzer(ExpenseAnalyzer):
    def __init__(self, now, tz="UTC"):
        super().__init__(tz)
        self._now = now

    def now(self):
        return self._now


@pytest.fixture
def store():
    return MemoryStorage()


@pytest.fixture
def freeze(store):
    """Pin the store's clock (and optionally its zone) for analytics routes."""

    def _freeze(now, tz="UTC"):
        store.analyzer = FrozenAnalyzer(now, tz)
        return store.analyzer

    return _freeze


@pytest.fixture
def client(store):
    app.dependency_overrides[get_storage] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
