"""Authoritative store of production orders."""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import List, Optional
from uuid import uuid4

from .domain import (
    INITIAL_LOCATION,
    Location,
    OrderStatus,
    ProductionOrder,
    utcnow,
)
from .errors import DuplicateOrderNumber, InvalidStatusTransition, OrderNotFound
from .repository import FlowStore, RecordNotFoundError

logger = logging.getLogger(__name__)


class ProductionOrderStore:
    """Point lookups, scans and the single mutator used by the engine."""

    def __init__(self, store: FlowStore) -> None:
        self._store = store

    def create(self, order_number: str, quantity: float) -> ProductionOrder:
        if not isinstance(order_number, str) or not order_number:
            raise ValueError("Order number must be a non-empty string")
        if (
            isinstance(quantity, bool)
            or not isinstance(quantity, Real)
            or not math.isfinite(quantity)
            or quantity <= 0
        ):
            raise ValueError("Quantity must be a positive number")
        with self._store.transaction():
            if self.find_by_order_number(order_number) is not None:
                raise DuplicateOrderNumber(
                    f"Production order {order_number!r} already exists"
                )
            now = utcnow()
            order = ProductionOrder(
                id=str(uuid4()),
                order_number=order_number,
                quantity=float(quantity),
                location=INITIAL_LOCATION,
                created_at=now,
                updated_at=now,
            )
            self._store.orders.add(order.id, order)
        logger.info("Created production order %s (%s)", order.order_number, order.id)
        return order

    def get(self, order_id: str) -> ProductionOrder:
        try:
            return self._store.orders.get(order_id)
        except RecordNotFoundError as exc:
            raise OrderNotFound(f"Production order with id {order_id} not found") from exc

    def find_by_order_number(self, order_number: str) -> Optional[ProductionOrder]:
        for order in self._store.orders.list():
            if order.order_number == order_number:
                return order
        return None

    def list_all(self) -> List[ProductionOrder]:
        return sorted(self._store.orders.list(), key=lambda order: order.created_at)

    def list_by_location(self, location: Location) -> List[ProductionOrder]:
        return [order for order in self.list_all() if order.location == location]

    def commit(
        self,
        order_id: str,
        location: Location,
        workcenter_id: Optional[str],
        pan_id: Optional[str],
    ) -> ProductionOrder:
        """Overwrite location and resource bindings of an order.

        Callers run this inside the same store transaction as the pan
        claim/release it belongs to.
        """

        order = self.get(order_id)
        order.location = location
        order.workcenter_id = workcenter_id
        order.pan_id = pan_id
        order.updated_at = utcnow()
        self._store.orders.upsert(order.id, order)
        return order

    def set_status(self, order_id: str, status: OrderStatus) -> ProductionOrder:
        with self._store.transaction():
            order = self.get(order_id)
            status = OrderStatus(status)
            if order.status is status:
                return order
            if order.status.is_terminal:
                raise InvalidStatusTransition(
                    f"Order {order.order_number} is {order.status.value} "
                    f"and cannot become {status.value}"
                )
            order.status = status
            order.updated_at = utcnow()
            self._store.orders.upsert(order.id, order)
        logger.info("Order %s is now %s", order.order_number, order.status.value)
        return order


__all__ = ["ProductionOrderStore"]
