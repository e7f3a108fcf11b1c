"""State machine that moves production orders between locations.

A move request names a target location the way transport layers send it:
a ``location_type`` tag plus nullable ``phase``/``buffer_name`` fields and
optional resource ids. :meth:`TransitionEngine.move` validates the request
against the current order and the resource registry, then applies the pan
release/claim and the order update inside a single store transaction. A
rejected request leaves every record untouched.

Sequencing is checked by two independent rules:

* phase adjacency: between two phases, forward moves may advance by one
  phase only; backward moves may go any distance;
* buffer adjacency: a buffer can only be entered from one of its two
  neighbouring phases (or from another buffer).

Together they do not form a strict single-hop machine: charging to mixing
is accepted without passing through the buffer in between.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .domain import (
    FLOW_SEQUENCE,
    Buffer,
    Location,
    LocationType,
    Phase,
    ProductionOrder,
    ProductionOrderWithDetails,
)
from .errors import (
    BufferMustBeNullForPhase,
    BufferRequired,
    FlowError,
    ForwardStepTooLarge,
    InvalidBufferForCurrentPhase,
    PanRequiredForCharging,
    PhaseMustBeNullForBuffer,
    PhaseRequired,
    ResourcesMustBeNullForBuffer,
    WorkcenterPhaseMismatch,
    WorkcenterRequired,
)
from .orders import ProductionOrderStore
from .registry import ResourceRegistry
from .repository import FlowStore
from .views import QueryViews

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MoveRequest:
    """A caller's request to relocate an order."""

    order_id: str
    location_type: LocationType
    phase: Optional[Phase] = None
    buffer_name: Optional[Buffer] = None
    workcenter_id: Optional[str] = None
    pan_id: Optional[str] = None

    @classmethod
    def to(
        cls,
        order_id: str,
        target: Location,
        *,
        workcenter_id: Optional[str] = None,
        pan_id: Optional[str] = None,
    ) -> "MoveRequest":
        return cls(
            order_id=order_id,
            location_type=target.location_type,
            phase=target.phase,
            buffer_name=target.buffer,
            workcenter_id=workcenter_id,
            pan_id=pan_id,
        )


@dataclass(frozen=True, slots=True)
class MoveAdvice:
    """Outcome of :func:`describe_move`."""

    allowed: bool
    reason: str = ""


def describe_move(current: Location, target: Location) -> MoveAdvice:
    """Judge a move on the five-position board, one slot at a time.

    This is the stricter rule the planning board applies before a request
    is even sent; the engine itself does not consult it.
    """

    current_index = current.position
    target_index = target.position
    if target_index == current_index:
        return MoveAdvice(False, "Order is already in this location")
    if target_index < current_index:
        return MoveAdvice(True)
    if target_index == current_index + 1:
        return MoveAdvice(True)
    skipped = ", ".join(
        location.label for location in FLOW_SEQUENCE[current_index + 1 : target_index]
    )
    return MoveAdvice(False, f"Cannot skip {skipped}")


def _validate_shape(request: MoveRequest) -> Location:
    """Check the request is self-consistent and return its target location."""

    if request.location_type == LocationType.PHASE:
        if not request.workcenter_id:
            raise WorkcenterRequired()
        if request.phase == Phase.CHARGING and not request.pan_id:
            raise PanRequiredForCharging()
        if request.buffer_name is not None:
            raise BufferMustBeNullForPhase()
        if not request.phase:
            raise PhaseRequired()
        return Location.at_phase(request.phase)

    if not request.buffer_name:
        raise BufferRequired()
    if request.phase is not None:
        raise PhaseMustBeNullForBuffer()
    if request.workcenter_id is not None or request.pan_id is not None:
        raise ResourcesMustBeNullForBuffer()
    return Location.in_buffer(request.buffer_name)


def _validate_sequence(current: Location, target: Location) -> None:
    if current.phase is not None and target.phase is not None:
        if target.phase.ordinal > current.phase.ordinal + 1:
            raise ForwardStepTooLarge(
                "Cannot move more than one step forward. "
                f"Current phase: {current.phase.value}, target phase: {target.phase.value}"
            )

    if target.buffer is not None and current.phase is not None:
        if current.phase not in target.buffer.adjacent_phases:
            allowed = " or ".join(phase.value for phase in target.buffer.adjacent_phases)
            raise InvalidBufferForCurrentPhase(
                f"{target.buffer.value} can only be used when transitioning from "
                f"{allowed} phases, not from {current.phase.value}"
            )


class TransitionEngine:
    """Validates and applies location changes and pan assignments."""

    def __init__(
        self,
        store: FlowStore,
        registry: ResourceRegistry,
        orders: ProductionOrderStore,
        views: QueryViews,
    ) -> None:
        self._store = store
        self._registry = registry
        self._orders = orders
        self._views = views

    def move(self, request: MoveRequest) -> ProductionOrderWithDetails:
        try:
            with self._store.transaction():
                order = self._orders.get(request.order_id)
                target = _validate_shape(request)
                self._validate_references(order, request, target)
                _validate_sequence(order.location, target)
                previous = order.location
                updated = self._apply(order, target, request.workcenter_id, request.pan_id)
        except FlowError as exc:
            logger.warning(
                "Rejected move of order %s: %s (%s)", request.order_id, exc.kind, exc.message
            )
            raise
        logger.info(
            "Moved order %s from %s to %s", updated.order_number, previous, updated.location
        )
        return self._views.enrich(updated)

    def assign_pan(self, order_id: str, pan_id: str) -> ProductionOrderWithDetails:
        """Bind a pan to an order without changing its location."""

        try:
            with self._store.transaction():
                order = self._orders.get(order_id)
                if order.pan_id == pan_id:
                    self._registry.find_pan(pan_id)
                    updated = order
                else:
                    self._registry.find_available_pan(pan_id)
                    updated = self._apply(order, order.location, order.workcenter_id, pan_id)
        except FlowError as exc:
            logger.warning(
                "Rejected pan assignment for order %s: %s (%s)", order_id, exc.kind, exc.message
            )
            raise
        logger.info("Assigned pan %s to order %s", pan_id, updated.order_number)
        return self._views.enrich(updated)

    def _validate_references(
        self, order: ProductionOrder, request: MoveRequest, target: Location
    ) -> None:
        if request.workcenter_id:
            workcenter = self._registry.find_workcenter(request.workcenter_id)
            if workcenter.phase != target.phase:
                raise WorkcenterPhaseMismatch(
                    f"Workcenter {workcenter.name} belongs to {workcenter.phase.value}, "
                    f"not {target}"
                )
        if request.pan_id:
            # The pan the order already carries stays usable for it.
            if request.pan_id == order.pan_id:
                self._registry.find_pan(request.pan_id)
            else:
                self._registry.find_available_pan(request.pan_id)

    def _apply(
        self,
        order: ProductionOrder,
        target: Location,
        workcenter_id: Optional[str],
        pan_id: Optional[str],
    ) -> ProductionOrder:
        if order.pan_id and order.pan_id != pan_id:
            self._registry.release(order.pan_id)
        if pan_id and pan_id != order.pan_id:
            self._registry.claim(pan_id)
        return self._orders.commit(order.id, target, workcenter_id, pan_id or None)


__all__ = ["MoveRequest", "MoveAdvice", "TransitionEngine", "describe_move"]
