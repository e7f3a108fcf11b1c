from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from production_flow import Pan, Phase, ProductionFlowService, Workcenter


@dataclass
class Plant:
    """A service preloaded with one workcenter per phase and two pans."""

    service: ProductionFlowService
    charger: Workcenter
    mixer: Workcenter
    extruder: Workcenter
    pan_one: Pan
    pan_two: Pan


def build_plant(service: ProductionFlowService) -> Plant:
    return Plant(
        service=service,
        charger=service.create_workcenter("Charging Station 1", Phase.CHARGING, 4),
        mixer=service.create_workcenter("Mixer A", Phase.MIXING, 2),
        extruder=service.create_workcenter("Extruder 1", Phase.EXTRUSION, 1),
        pan_one=service.create_pan("Pan 01"),
        pan_two=service.create_pan("Pan 02"),
    )


@pytest.fixture
def service() -> ProductionFlowService:
    return ProductionFlowService()


@pytest.fixture
def plant(service: ProductionFlowService) -> Plant:
    return build_plant(service)
