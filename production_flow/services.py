"""Service layer exposing the production flow use-cases."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from .domain import (
    Buffer,
    Location,
    LocationType,
    OrderStatus,
    Pan,
    Phase,
    ProductionOrder,
    ProductionOrderWithDetails,
    Workcenter,
)
from .orders import ProductionOrderStore
from .registry import ResourceRegistry
from .repository import FlowStore, InMemoryStore
from .transitions import MoveRequest, TransitionEngine
from .views import QueryViews


def _optional_enum(enum_type, value):
    if value is None or value == "":
        return None
    return enum_type(value)


class ProductionFlowService:
    """Facade that exposes the tracker's operations to clients."""

    def __init__(self, store: Optional[FlowStore] = None) -> None:
        self.store = store or InMemoryStore()
        self.registry = ResourceRegistry(self.store)
        self.orders = ProductionOrderStore(self.store)
        self.views = QueryViews(self.store, self.orders)
        self.engine = TransitionEngine(self.store, self.registry, self.orders, self.views)

    # ------------------------------------------------------------------
    # Master data
    # ------------------------------------------------------------------
    def create_pan(self, name: str) -> Pan:
        return self.registry.create_pan(name)

    def create_workcenter(
        self, name: str, phase: Union[Phase, str], capacity: int
    ) -> Workcenter:
        return self.registry.create_workcenter(name, Phase(phase), capacity)

    # ------------------------------------------------------------------
    # Production orders
    # ------------------------------------------------------------------
    def create_order(self, order_number: str, quantity: float) -> ProductionOrder:
        return self.orders.create(order_number, quantity)

    def move(
        self,
        order_id: str,
        location_type: Union[LocationType, str],
        *,
        phase: Union[Phase, str, None] = None,
        buffer_name: Union[Buffer, str, None] = None,
        workcenter_id: Optional[str] = None,
        pan_id: Optional[str] = None,
    ) -> ProductionOrderWithDetails:
        request = MoveRequest(
            order_id=order_id,
            location_type=LocationType(location_type),
            phase=_optional_enum(Phase, phase),
            buffer_name=_optional_enum(Buffer, buffer_name),
            workcenter_id=workcenter_id,
            pan_id=pan_id,
        )
        return self.engine.move(request)

    def move_to(
        self,
        order_id: str,
        target: Location,
        *,
        workcenter_id: Optional[str] = None,
        pan_id: Optional[str] = None,
    ) -> ProductionOrderWithDetails:
        return self.engine.move(
            MoveRequest.to(order_id, target, workcenter_id=workcenter_id, pan_id=pan_id)
        )

    def assign_pan(self, order_id: str, pan_id: str) -> ProductionOrderWithDetails:
        return self.engine.assign_pan(order_id, pan_id)

    def update_order_status(
        self, order_id: str, status: Union[OrderStatus, str]
    ) -> ProductionOrderWithDetails:
        order = self.orders.set_status(order_id, OrderStatus(status))
        return self.views.enrich(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_order(self, order_id: str) -> ProductionOrderWithDetails:
        return self.views.get_order(order_id)

    def list_orders(self) -> List[ProductionOrderWithDetails]:
        return self.views.list_orders()

    def list_orders_by_phase(
        self, phase: Union[Phase, str]
    ) -> List[ProductionOrderWithDetails]:
        return self.views.list_orders_by_phase(Phase(phase))

    def list_orders_by_buffer(
        self, buffer: Union[Buffer, str]
    ) -> List[ProductionOrderWithDetails]:
        return self.views.list_orders_by_buffer(Buffer(buffer))

    def board(self) -> Dict[Location, List[ProductionOrderWithDetails]]:
        return self.views.board()

    def list_pans(self) -> List[Pan]:
        return self.registry.list_pans()

    def list_available_pans(self) -> List[Pan]:
        return self.registry.list_available_pans()

    def list_workcenters(self) -> List[Workcenter]:
        return self.registry.list_workcenters()

    def list_workcenters_by_phase(self, phase: Union[Phase, str]) -> List[Workcenter]:
        return self.registry.list_workcenters_by_phase(Phase(phase))


__all__ = ["ProductionFlowService"]
