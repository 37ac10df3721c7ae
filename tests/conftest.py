from contextlib import asynccontextmanager

import pytest


class FakeResult:
    def __init__(self, records: list[dict]):
        self._records = records

    async def data(self) -> list[dict]:
        return self._records

    async def consume(self) -> None:
        return None


class FakeSession:
    """
    Stand-in for a Neo4j async session.

    `responder(query, params)` returns the records for a query, or raises to
    simulate a store failure.
    """

    def __init__(self, store: "FakeStore"):
        self.store = store

    async def run(self, query: str, params: dict | None = None) -> FakeResult:
        self.store.calls.append((query, params or {}))
        return FakeResult(self.store.responder(query, params or {}))


class FakeStore:
    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.responder = lambda query, params: []

    @asynccontextmanager
    async def session(self):
        self.sessions_opened += 1
        try:
            yield FakeSession(self)
        finally:
            self.sessions_closed += 1


@pytest.fixture
def fake_store(monkeypatch):
    """Route every execute_read_query through an in-memory fake session."""
    store = FakeStore()
    monkeypatch.setattr("app.db.neo4j.get_neo4j_session", store.session)
    return store


@pytest.fixture
def store_online(monkeypatch):
    async def _connected():
        return True

    monkeypatch.setattr("app.features.communications.api.dependencies.check_connection", _connected)


@pytest.fixture
def store_offline(monkeypatch):
    async def _disconnected():
        return False

    monkeypatch.setattr(
        "app.features.communications.api.dependencies.check_connection", _disconnected
    )


@pytest.fixture
def etags_enabled(monkeypatch):
    import importlib

    cache_module = importlib.import_module("app.middleware.conditional_cache")
    monkeypatch.setattr(cache_module.settings, "ETAGS_ENABLED", True)
