from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, List

import pytest

from production_flow import Buffer, Location, Phase, ProductionFlowService
from production_flow.errors import DuplicateOrderNumber, FlowError, PanNotFoundOrUnavailable
from production_flow.storage import FlowDatabase

from conftest import build_plant

WORKERS = 8


def _race(actions: List[Callable[[], object]]) -> List[object]:
    """Run every action at once and collect results or raised flow errors."""

    barrier = threading.Barrier(len(actions))
    outcomes: List[object] = [None] * len(actions)

    def run(index: int) -> None:
        barrier.wait()
        try:
            outcomes[index] = actions[index]()
        except FlowError as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=run, args=(index,)) for index in range(len(actions))]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return outcomes


@pytest.fixture(params=["memory", "sqlite"])
def flow(request, tmp_path: Path):
    if request.param == "memory":
        yield ProductionFlowService()
        return
    database = FlowDatabase(str(tmp_path / "flow.sqlite3"))
    try:
        yield ProductionFlowService(database)
    finally:
        database.close()


def test_only_one_order_claims_a_contended_pan(flow: ProductionFlowService) -> None:
    plant = build_plant(flow)
    orders = [flow.create_order(f"PO-{index}", 10) for index in range(WORKERS)]

    outcomes = _race(
        [
            lambda order_id=order.id: flow.move_to(
                order_id,
                Location.at_phase(Phase.CHARGING),
                workcenter_id=plant.charger.id,
                pan_id=plant.pan_one.id,
            )
            for order in orders
        ]
    )

    failures = [outcome for outcome in outcomes if isinstance(outcome, FlowError)]
    assert len(failures) == WORKERS - 1
    assert all(isinstance(failure, PanNotFoundOrUnavailable) for failure in failures)
    holders = [order for order in flow.list_orders() if order.pan is not None]
    assert len(holders) == 1
    assert holders[0].pan.id == plant.pan_one.id


def test_only_one_duplicate_order_number_survives(flow: ProductionFlowService) -> None:
    outcomes = _race([lambda: flow.create_order("PO-RACE", 10) for _ in range(WORKERS)])

    failures = [outcome for outcome in outcomes if isinstance(outcome, FlowError)]
    assert len(failures) == WORKERS - 1
    assert all(isinstance(failure, DuplicateOrderNumber) for failure in failures)
    assert [order.order_number for order in flow.list_orders()] == ["PO-RACE"]


def test_readers_run_safely_alongside_writers(flow: ProductionFlowService) -> None:
    writes_done = threading.Event()
    errors: List[BaseException] = []

    def write() -> None:
        try:
            for index in range(300):
                flow.create_order(f"PO-{index}", 10)
        finally:
            writes_done.set()

    def read() -> None:
        try:
            while not writes_done.is_set():
                flow.list_orders()
                flow.list_orders_by_buffer(Buffer.CHARGING_MIXING)
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=write)] + [threading.Thread(target=read) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert len(flow.list_orders()) == 300


def test_readers_never_see_a_claim_that_is_rolled_back(
    flow: ProductionFlowService, monkeypatch
) -> None:
    plant = build_plant(flow)
    order = flow.create_order("PO-1", 10)
    inside_commit = threading.Event()
    finish_commit = threading.Event()

    def stalled_commit(*args, **kwargs):
        inside_commit.set()
        finish_commit.wait(timeout=10)
        raise RuntimeError("storage down")

    monkeypatch.setattr(flow.orders, "commit", stalled_commit)

    failures: List[BaseException] = []

    def move() -> None:
        try:
            flow.move_to(
                order.id,
                Location.at_phase(Phase.CHARGING),
                workcenter_id=plant.charger.id,
                pan_id=plant.pan_one.id,
            )
        except RuntimeError as exc:
            failures.append(exc)

    seen: List[List[str]] = []

    def read() -> None:
        seen.append([pan.id for pan in flow.list_available_pans()])

    writer = threading.Thread(target=move)
    writer.start()
    assert inside_commit.wait(timeout=10)

    reader = threading.Thread(target=read)
    reader.start()
    reader.join(timeout=0.2)
    assert reader.is_alive()
    assert seen == []

    finish_commit.set()
    writer.join(timeout=10)
    reader.join(timeout=10)

    assert [str(exc) for exc in failures] == ["storage down"]
    assert seen == [[plant.pan_one.id, plant.pan_two.id]]
    assert flow.get_order(order.id).pan is None
