import json

import pytest

fastapi = pytest.importorskip("fastapi")
pytest.importorskip("httpx")
from fastapi.testclient import TestClient

from penguindaycare.backend.api import create_app
from penguindaycare.backend.config import load_settings
from penguindaycare.backend.errors import RosterLoadError
from penguindaycare.backend.models import Penguin, PenguinRecord, WriteResult
from penguindaycare.backend.roster import RosterCache
from penguindaycare.backend.store import InMemoryPenguinStore


class _CountingStore(InMemoryPenguinStore):
    def __init__(self) -> None:
        super().__init__()
        self.get_calls = 0

    def get(self, penguin_id: str) -> PenguinRecord:
        self.get_calls += 1
        return super().get(penguin_id)


class _BrokenReadStore(InMemoryPenguinStore):
    def get(self, penguin_id: str) -> PenguinRecord:
        raise ConnectionError("store unreachable")


class _BrokenWriteStore(InMemoryPenguinStore):
    def put(self, record: PenguinRecord) -> WriteResult:
        return WriteResult.failure("quota exceeded")


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _client(store: InMemoryPenguinStore, clock: _Clock | None = None) -> tuple[TestClient, RosterCache]:
    cache = RosterCache(
        [Penguin(id="p1", name="Pingu", bio="Noot"), Penguin(id="p2", name="Robby", bio="Seal")],
        store=store,
        ttl_seconds=600,
        clock=clock if clock is not None else _Clock(),
    )
    return TestClient(create_app(cache=cache, store=store)), cache


def test_root_reports_roster_size() -> None:
    client, _ = _client(InMemoryPenguinStore())

    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Hello! This is Penguin Daycare Simulator backend! Number of penguins loaded: 2"


def test_penguins_returns_roster_with_counters() -> None:
    store = InMemoryPenguinStore()
    store.put(PenguinRecord(id="p2", visit_count=1, fish_count=2, bellyrub_count=3))
    client, _ = _client(store)

    response = client.get("/penguins")

    assert response.status_code == 200
    assert response.json() == [
        {"id": "p1", "name": "Pingu", "bio": "Noot", "visit_count": 0, "fish_count": 0, "bellyrub_count": 0},
        {"id": "p2", "name": "Robby", "bio": "Seal", "visit_count": 1, "fish_count": 2, "bellyrub_count": 3},
    ]


def test_penguins_is_served_from_cache_within_ttl() -> None:
    store = _CountingStore()
    clock = _Clock()
    client, _ = _client(store, clock)

    client.get("/penguins")
    clock.now = 300.0
    client.get("/penguins")
    assert store.get_calls == 2

    clock.now = 601.0
    client.get("/penguins")
    assert store.get_calls == 4


def test_stat_endpoints_write_to_store_but_not_to_cached_roster() -> None:
    store = InMemoryPenguinStore()
    clock = _Clock()
    client, _ = _client(store, clock)
    client.get("/penguins")

    for path in ("/stat/visit", "/stat/fish", "/stat/bellyrub", "/stat/visit"):
        response = client.get(path, params={"id": "p1"})
        assert response.status_code == 200
        assert response.content == b""

    assert store.get("p1") == PenguinRecord(id="p1", visit_count=2, fish_count=1, bellyrub_count=1)
    assert client.get("/penguins").json()[0]["visit_count"] == 0


def test_update_forces_next_read_to_refresh() -> None:
    store = _CountingStore()
    client, _ = _client(store)
    client.get("/penguins")
    client.get("/stat/fish", params={"id": "p2"})

    response = client.get("/update")

    assert response.status_code == 200
    assert response.content == b""
    assert client.get("/penguins").json()[1]["fish_count"] == 1


def test_stat_endpoints_accept_post() -> None:
    store = InMemoryPenguinStore()
    client, _ = _client(store)

    response = client.post("/stat/bellyrub?id=p2")

    assert response.status_code == 200
    assert store.get("p2").bellyrub_count == 1


def test_stat_endpoints_read_id_from_post_form() -> None:
    store = InMemoryPenguinStore()
    client, _ = _client(store)

    response = client.post("/stat/visit", data={"id": "p1"})

    assert response.status_code == 200
    assert store.get("p1").visit_count == 1


def test_post_form_id_takes_precedence_over_query() -> None:
    store = InMemoryPenguinStore()
    client, _ = _client(store)

    client.post("/stat/fish?id=p2", data={"id": "p1"})

    assert store.get("p1").fish_count == 1
    assert store.get("p2").fish_count == 0


def test_roster_endpoints_accept_post() -> None:
    client, _ = _client(InMemoryPenguinStore())

    root = client.post("/")
    penguins = client.post("/penguins")

    assert root.status_code == 200
    assert root.text.endswith("Number of penguins loaded: 2")
    assert penguins.status_code == 200
    assert [entry["id"] for entry in penguins.json()] == ["p1", "p2"]


def test_unknown_or_missing_id_is_silently_ignored() -> None:
    store = InMemoryPenguinStore()
    client, _ = _client(store)

    unknown = client.get("/stat/visit", params={"id": "unknown"})
    missing = client.get("/stat/fish")

    assert unknown.status_code == 200
    assert missing.status_code == 200
    assert len(store) == 0


def test_stat_write_failure_still_answers_ok() -> None:
    # Counter events are fire-and-forget: a failed write is logged, not surfaced.
    store = _BrokenWriteStore()
    client, _ = _client(store)

    response = client.get("/stat/visit", params={"id": "p1"})

    assert response.status_code == 200
    assert len(store) == 0


def test_penguins_returns_503_when_store_unreachable() -> None:
    client, _ = _client(_BrokenReadStore())

    response = client.get("/penguins")

    assert response.status_code == 503
    assert response.json() == {"detail": "Persistence unavailable"}


def test_penguins_returns_500_when_serialization_fails() -> None:
    client, cache = _client(InMemoryPenguinStore())
    cache.snapshot = lambda: [{"id": "p1", "weight": float("nan")}]

    response = client.get("/penguins")

    assert response.status_code == 500
    assert response.json() == {"detail": "Unable to serialize roster"}


def test_create_app_loads_roster_from_settings(tmp_path, monkeypatch) -> None:
    roster_path = tmp_path / "penguins.json"
    roster_path.write_text(json.dumps([{"id": "x", "name": "Xavier", "bio": ""}]), encoding="utf-8")
    monkeypatch.setenv("PENGUINDAYCARE_ROSTER_PATH", str(roster_path))
    monkeypatch.delenv("PENGUINDAYCARE_DATABASE_URL", raising=False)

    client = TestClient(create_app(settings=load_settings()))

    assert client.get("/penguins").json()[0]["name"] == "Xavier"


def test_create_app_refuses_to_start_without_roster(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PENGUINDAYCARE_ROSTER_PATH", str(tmp_path / "missing.json"))

    with pytest.raises(RosterLoadError):
        create_app()
