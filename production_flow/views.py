"""Read-only projections over the order store."""

from __future__ import annotations

from typing import Dict, List, Optional

from .domain import (
    FLOW_SEQUENCE,
    Buffer,
    Location,
    Pan,
    Phase,
    ProductionOrder,
    ProductionOrderWithDetails,
    Workcenter,
)
from .orders import ProductionOrderStore
from .repository import FlowStore, RecordNotFoundError


class QueryViews:
    """Orders enriched with their resolved workcenter and pan."""

    def __init__(self, store: FlowStore, orders: ProductionOrderStore) -> None:
        self._store = store
        self._orders = orders

    def _workcenter(self, workcenter_id: Optional[str]) -> Optional[Workcenter]:
        if not workcenter_id:
            return None
        try:
            return self._store.workcenters.get(workcenter_id)
        except RecordNotFoundError:
            return None

    def _pan(self, pan_id: Optional[str]) -> Optional[Pan]:
        if not pan_id:
            return None
        try:
            return self._store.pans.get(pan_id)
        except RecordNotFoundError:
            return None

    def enrich(self, order: ProductionOrder) -> ProductionOrderWithDetails:
        return ProductionOrderWithDetails(
            id=order.id,
            order_number=order.order_number,
            quantity=order.quantity,
            location=order.location,
            status=order.status,
            workcenter=self._workcenter(order.workcenter_id),
            pan=self._pan(order.pan_id),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def get_order(self, order_id: str) -> ProductionOrderWithDetails:
        return self.enrich(self._orders.get(order_id))

    def list_orders(self) -> List[ProductionOrderWithDetails]:
        return [self.enrich(order) for order in self._orders.list_all()]

    def list_orders_by_phase(self, phase: Phase) -> List[ProductionOrderWithDetails]:
        location = Location.at_phase(phase)
        return [self.enrich(order) for order in self._orders.list_by_location(location)]

    def list_orders_by_buffer(self, buffer: Buffer) -> List[ProductionOrderWithDetails]:
        location = Location.in_buffer(buffer)
        return [self.enrich(order) for order in self._orders.list_by_location(location)]

    def board(self) -> Dict[Location, List[ProductionOrderWithDetails]]:
        """Every location in flow order mapped to the orders sitting there."""

        columns: Dict[Location, List[ProductionOrderWithDetails]] = {
            location: [] for location in FLOW_SEQUENCE
        }
        for order in self.list_orders():
            columns[order.location].append(order)
        return columns


__all__ = ["QueryViews"]
