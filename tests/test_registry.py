from __future__ import annotations

import pytest

from production_flow import Phase, ProductionFlowService
from production_flow.errors import PanNotFoundOrUnavailable, WorkcenterNotFound


def test_create_pan_starts_available(service: ProductionFlowService) -> None:
    pan = service.create_pan("Pan 01")
    assert pan.is_available
    assert [item.id for item in service.list_pans()] == [pan.id]
    assert [item.id for item in service.list_available_pans()] == [pan.id]


def test_create_pan_requires_name(service: ProductionFlowService) -> None:
    with pytest.raises(ValueError):
        service.create_pan("   ")


@pytest.mark.parametrize("capacity", [0, -3, 1.5, True])
def test_create_workcenter_rejects_bad_capacity(
    service: ProductionFlowService, capacity
) -> None:
    with pytest.raises(ValueError):
        service.create_workcenter("Mixer A", Phase.MIXING, capacity)


def test_workcenters_by_phase(service: ProductionFlowService) -> None:
    mixer = service.create_workcenter("Mixer A", "mixing", 2)
    service.create_workcenter("Extruder 1", Phase.EXTRUSION, 1)
    assert mixer.phase is Phase.MIXING
    assert [item.id for item in service.list_workcenters_by_phase(Phase.MIXING)] == [mixer.id]
    assert service.list_workcenters_by_phase(Phase.CHARGING) == []
    assert len(service.list_workcenters()) == 2


def test_find_workcenter_unknown(service: ProductionFlowService) -> None:
    with pytest.raises(WorkcenterNotFound):
        service.registry.find_workcenter("missing")


def test_missing_and_claimed_pans_report_the_same_kind(service: ProductionFlowService) -> None:
    pan = service.create_pan("Pan 01")
    with service.store.transaction():
        service.registry.claim(pan.id)

    with pytest.raises(PanNotFoundOrUnavailable) as claimed:
        service.registry.find_available_pan(pan.id)
    with pytest.raises(PanNotFoundOrUnavailable) as missing:
        service.registry.find_available_pan("missing")
    assert claimed.value.kind == missing.value.kind == "PanNotFoundOrUnavailable"
    assert service.list_available_pans() == []


def test_release_is_idempotent(service: ProductionFlowService) -> None:
    pan = service.create_pan("Pan 01")
    with service.store.transaction():
        service.registry.claim(pan.id)
        service.registry.release(pan.id)
        service.registry.release(pan.id)
    assert service.registry.find_available_pan(pan.id).is_available


def test_claim_of_claimed_pan_fails(service: ProductionFlowService) -> None:
    pan = service.create_pan("Pan 01")
    with service.store.transaction():
        service.registry.claim(pan.id)
    with pytest.raises(PanNotFoundOrUnavailable):
        with service.store.transaction():
            service.registry.claim(pan.id)
