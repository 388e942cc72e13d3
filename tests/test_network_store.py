from __future__ import annotations

import json

import pytest

from trainbuilder.errors import NotFoundError, StorageError
from trainbuilder.repository.network_store import NetworkStore
from trainbuilder.schemas.core import SCHEMA_VERSION, Coordinates, Facilities, Network, Station


def _network(network_id: str = "net-1") -> Network:
    return Network(
        id=network_id,
        name="Benelux",
        budget=970_000_000,
        region_id="benelux",
        stations=[
            Station(
                id="st-1",
                name="Utrecht",
                location=Coordinates(lat=52.09, lon=5.11),
                platforms=5,
                station_type="regional",
                cost=30_000_000,
                facilities=Facilities(bike_rental=True),
            )
        ],
    )


def test_put_then_get_round_trips(tmp_path) -> None:
    store = NetworkStore(tmp_path)
    store.put(_network())

    loaded = store.get("net-1")
    assert loaded == _network()
    assert store.exists("net-1")
    assert store.list_ids() == ["net-1"]


def test_documents_are_camel_case_json_with_schema_version(tmp_path) -> None:
    store = NetworkStore(tmp_path)
    store.put(_network())

    raw = json.loads((tmp_path / "net-1.json").read_text(encoding="utf-8"))
    assert raw["schemaVersion"] == SCHEMA_VERSION
    assert raw["gameYear"] == 2024
    assert raw["stations"][0]["stationType"] == "regional"
    assert raw["stations"][0]["facilities"]["bikeRental"] is True


def test_documents_without_schema_version_are_read_as_v1(tmp_path) -> None:
    payload = _network().to_dict()
    del payload["schemaVersion"]
    (tmp_path / "net-1.json").write_text(json.dumps(payload), encoding="utf-8")

    assert NetworkStore(tmp_path).get("net-1").schema_version == 1


def test_newer_schema_version_is_refused(tmp_path) -> None:
    payload = _network().to_dict()
    payload["schemaVersion"] = SCHEMA_VERSION + 1
    (tmp_path / "net-1.json").write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(StorageError):
        NetworkStore(tmp_path).get("net-1")


def test_corrupt_document_raises_storage_error(tmp_path) -> None:
    (tmp_path / "net-1.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        NetworkStore(tmp_path).get("net-1")


def test_missing_network_raises_not_found(tmp_path) -> None:
    with pytest.raises(NotFoundError):
        NetworkStore(tmp_path).get("nope")


@pytest.mark.parametrize("bad_id", ["../etc/passwd", "a/b", "", "x" * 65])
def test_ids_that_are_not_plain_tokens_are_not_found(tmp_path, bad_id: str) -> None:
    store = NetworkStore(tmp_path)
    with pytest.raises(NotFoundError):
        store.get(bad_id)
    assert not store.exists(bad_id)


def test_lock_is_shared_per_network_id(tmp_path) -> None:
    store = NetworkStore(tmp_path)
    store.put(_network("a"))
    store.put(_network("b"))
    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


@pytest.mark.parametrize("network_id", ["missing", "../etc/passwd"])
def test_lock_for_unknown_network_is_not_found_and_not_retained(tmp_path, network_id: str) -> None:
    store = NetworkStore(tmp_path)
    with pytest.raises(NotFoundError):
        store.lock(network_id)
    assert store._locks == {}


def test_put_leaves_no_temp_files_behind(tmp_path) -> None:
    store = NetworkStore(tmp_path)
    store.put(_network())
    store.put(_network())
    assert sorted(p.name for p in tmp_path.iterdir()) == ["net-1.json"]
