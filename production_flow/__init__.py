"""Production flow tracker for a charging, mixing and extrusion line.

This package provides the data model, in-memory and SQLite persistence, and
the transition engine that moves production orders between phases and
buffers while keeping pan and workcenter assignments consistent.
"""

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
from .errors import FlowError
from .services import ProductionFlowService
from .transitions import MoveRequest

__all__ = [
    "Buffer",
    "Location",
    "LocationType",
    "OrderStatus",
    "Pan",
    "Phase",
    "ProductionOrder",
    "ProductionOrderWithDetails",
    "Workcenter",
    "FlowError",
    "ProductionFlowService",
    "MoveRequest",
]
