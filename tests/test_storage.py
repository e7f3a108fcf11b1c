from __future__ import annotations

from pathlib import Path

import pytest

from production_flow import Buffer, Location, Phase, ProductionFlowService
from production_flow.errors import DuplicateOrderNumber, ForwardStepTooLarge
from production_flow.repository import (
    DuplicateRecordError,
    InMemoryRepository,
    InMemoryStore,
    RecordNotFoundError,
)
from production_flow.storage import FlowDatabase

from conftest import build_plant


def test_in_memory_repository_copies_records() -> None:
    repository: InMemoryRepository[dict] = InMemoryRepository()
    record = {"name": "Pan 01"}
    repository.add("a", record)
    record["name"] = "changed"

    assert repository.get("a") == {"name": "Pan 01"}
    with pytest.raises(DuplicateRecordError):
        repository.add("a", record)
    with pytest.raises(RecordNotFoundError):
        repository.get("b")


def test_in_memory_transaction_rolls_back() -> None:
    store = InMemoryStore()
    store.pans.add("kept", {"name": "kept"})
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.pans.upsert("kept", {"name": "overwritten"})
            store.pans.add("new", {"name": "new"})
            raise RuntimeError("abort")

    assert store.pans.get("kept") == {"name": "kept"}
    assert "new" not in store.pans


def test_nested_transactions_commit_once() -> None:
    store = InMemoryStore()
    with store.transaction():
        with store.transaction():
            store.pans.add("a", {"name": "a"})
        store.pans.add("b", {"name": "b"})
    assert len(store.pans.list()) == 2


def test_sqlite_repository_round_trip(tmp_path: Path) -> None:
    with FlowDatabase(str(tmp_path / "flow.sqlite3")) as database:
        database.pans.add("a", {"name": "first"})
        database.pans.add("b", {"name": "second"})
        database.pans.upsert("a", {"name": "renamed"})

        assert database.pans.list() == [{"name": "renamed"}, {"name": "second"}]
        assert "a" in database.pans
        assert 42 not in database.pans
        with pytest.raises(DuplicateRecordError):
            database.pans.add("a", {})
        with pytest.raises(RecordNotFoundError):
            database.pans.get("missing")


def test_sqlite_transaction_rolls_back(tmp_path: Path) -> None:
    with FlowDatabase(str(tmp_path / "flow.sqlite3")) as database:
        with pytest.raises(RuntimeError):
            with database.transaction():
                database.pans.add("a", {"name": "first"})
                raise RuntimeError("abort")
        assert database.pans.list() == []


def test_flow_survives_reopening_database(tmp_path: Path) -> None:
    path = str(tmp_path / "flow.sqlite3")
    with FlowDatabase(path) as database:
        plant = build_plant(ProductionFlowService(database))
        order = plant.service.create_order("PO-1", 100)
        plant.service.move_to(
            order.id,
            Location.at_phase(Phase.CHARGING),
            workcenter_id=plant.charger.id,
            pan_id=plant.pan_one.id,
        )

    with FlowDatabase(path) as database:
        service = ProductionFlowService(database)
        reloaded = service.get_order(order.id)
        assert reloaded.location == Location.at_phase(Phase.CHARGING)
        assert reloaded.workcenter.name == "Charging Station 1"
        assert reloaded.pan.name == "Pan 01"
        assert [pan.name for pan in service.list_available_pans()] == ["Pan 02"]
        assert service.list_orders_by_buffer(Buffer.CHARGING_MIXING) == []
        with pytest.raises(DuplicateOrderNumber):
            service.create_order("PO-1", 1)


def test_sqlite_rejected_move_changes_nothing(tmp_path: Path) -> None:
    with FlowDatabase(str(tmp_path / "flow.sqlite3")) as database:
        plant = build_plant(ProductionFlowService(database))
        service = plant.service
        order = service.create_order("PO-1", 100)
        service.move_to(
            order.id,
            Location.at_phase(Phase.CHARGING),
            workcenter_id=plant.charger.id,
            pan_id=plant.pan_one.id,
        )

        with pytest.raises(ForwardStepTooLarge):
            service.move_to(
                order.id,
                Location.at_phase(Phase.EXTRUSION),
                workcenter_id=plant.extruder.id,
                pan_id=plant.pan_two.id,
            )

        current = service.get_order(order.id)
        assert current.location == Location.at_phase(Phase.CHARGING)
        assert current.pan.id == plant.pan_one.id
        assert [pan.id for pan in service.list_available_pans()] == [plant.pan_two.id]
