"""Core data structures for the production flow tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Phase(str, Enum):
    """Processing stages an order passes through, in flow order."""

    CHARGING = "charging"
    MIXING = "mixing"
    EXTRUSION = "extrusion"

    @property
    def ordinal(self) -> int:
        return _PHASE_ORDER.index(self)

    @property
    def label(self) -> str:
        return self.value.capitalize()


_PHASE_ORDER: Tuple[Phase, ...] = (Phase.CHARGING, Phase.MIXING, Phase.EXTRUSION)


class Buffer(str, Enum):
    """Holding areas between two adjacent phases."""

    CHARGING_MIXING = "charging_mixing_buffer"
    MIXING_EXTRUSION = "mixing_extrusion_buffer"

    @property
    def adjacent_phases(self) -> Tuple[Phase, Phase]:
        return {
            Buffer.CHARGING_MIXING: (Phase.CHARGING, Phase.MIXING),
            Buffer.MIXING_EXTRUSION: (Phase.MIXING, Phase.EXTRUSION),
        }[self]

    @property
    def label(self) -> str:
        first, second = self.adjacent_phases
        return f"{first.label} / {second.label} Buffer"


class LocationType(str, Enum):
    """Tag naming which half of a location a move request targets."""

    PHASE = "phase"
    BUFFER = "buffer"


class OrderStatus(str, Enum):
    """Lifecycle status of a production order."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class Location:
    """Where an order currently sits: exactly one phase or one buffer."""

    phase: Optional[Phase] = None
    buffer: Optional[Buffer] = None

    def __post_init__(self) -> None:
        if (self.phase is None) == (self.buffer is None):
            raise ValueError("A location is either a phase or a buffer, never both or neither")

    @classmethod
    def at_phase(cls, phase: Phase) -> "Location":
        return cls(phase=Phase(phase))

    @classmethod
    def in_buffer(cls, buffer: Buffer) -> "Location":
        return cls(buffer=Buffer(buffer))

    @property
    def location_type(self) -> LocationType:
        return LocationType.PHASE if self.phase is not None else LocationType.BUFFER

    @property
    def is_phase(self) -> bool:
        return self.phase is not None

    @property
    def is_buffer(self) -> bool:
        return self.buffer is not None

    @property
    def position(self) -> int:
        """Index of this location within :data:`FLOW_SEQUENCE`."""

        return FLOW_SEQUENCE.index(self)

    @property
    def key(self) -> str:
        if self.phase is not None:
            return self.phase.value
        assert self.buffer is not None
        return self.buffer.value

    @property
    def label(self) -> str:
        if self.phase is not None:
            return self.phase.label
        assert self.buffer is not None
        return self.buffer.label

    def __str__(self) -> str:
        return self.key


FLOW_SEQUENCE: Tuple[Location, ...] = (
    Location.at_phase(Phase.CHARGING),
    Location.in_buffer(Buffer.CHARGING_MIXING),
    Location.at_phase(Phase.MIXING),
    Location.in_buffer(Buffer.MIXING_EXTRUSION),
    Location.at_phase(Phase.EXTRUSION),
)

INITIAL_LOCATION = Location.in_buffer(Buffer.CHARGING_MIXING)


def parse_location(value: str) -> Location:
    """Resolve a phase or buffer value such as ``"mixing"`` to a location."""

    for location in FLOW_SEQUENCE:
        if location.key == value:
            return location
    raise ValueError(f"Unknown location {value!r}")


@dataclass(slots=True)
class Pan:
    """A container that a single order may hold at a time."""

    id: str
    name: str
    is_available: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Workcenter:
    """A station bound to one phase with a nominal capacity."""

    id: str
    name: str
    phase: Phase
    capacity: int
    created_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class ProductionOrder:
    """Mutable state of an order moving through the pipeline."""

    id: str
    order_number: str
    quantity: float
    location: Location = INITIAL_LOCATION
    workcenter_id: Optional[str] = None
    pan_id: Optional[str] = None
    status: OrderStatus = OrderStatus.ACTIVE
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class ProductionOrderWithDetails:
    """Read projection of an order with its workcenter and pan resolved."""

    id: str
    order_number: str
    quantity: float
    location: Location
    status: OrderStatus
    workcenter: Optional[Workcenter]
    pan: Optional[Pan]
    created_at: datetime
    updated_at: datetime

    @property
    def location_type(self) -> LocationType:
        return self.location.location_type

    @property
    def phase(self) -> Optional[Phase]:
        return self.location.phase

    @property
    def buffer_name(self) -> Optional[Buffer]:
        return self.location.buffer


__all__ = [
    "Phase",
    "Buffer",
    "LocationType",
    "OrderStatus",
    "Location",
    "FLOW_SEQUENCE",
    "INITIAL_LOCATION",
    "parse_location",
    "Pan",
    "Workcenter",
    "ProductionOrder",
    "ProductionOrderWithDetails",
]
