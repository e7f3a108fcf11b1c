"""Request and response models for the JSON API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import Buffer, LocationType, OrderStatus, Phase


class PanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    is_available: bool
    created_at: datetime


class WorkcenterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phase: Phase
    capacity: int
    created_at: datetime


class ProductionOrderOut(BaseModel):
    """Order with resolved resources, as listed on the board."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    location_type: LocationType
    phase: Optional[Phase]
    buffer_name: Optional[Buffer]
    workcenter: Optional[WorkcenterOut]
    pan: Optional[PanOut]
    quantity: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class CreatePanIn(BaseModel):
    name: str = Field(min_length=1)


class CreateWorkcenterIn(BaseModel):
    name: str = Field(min_length=1)
    phase: Phase
    capacity: int = Field(gt=0)


class CreateProductionOrderIn(BaseModel):
    order_number: str = Field(min_length=1)
    quantity: float = Field(gt=0)


class MoveProductionOrderIn(BaseModel):
    location_type: LocationType
    phase: Optional[Phase] = None
    buffer_name: Optional[Buffer] = None
    workcenter_id: Optional[str] = None
    pan_id: Optional[str] = None


class AssignPanIn(BaseModel):
    pan_id: str = Field(min_length=1)


class UpdateStatusIn(BaseModel):
    status: OrderStatus


__all__ = [
    "PanOut",
    "WorkcenterOut",
    "ProductionOrderOut",
    "CreatePanIn",
    "CreateWorkcenterIn",
    "CreateProductionOrderIn",
    "MoveProductionOrderIn",
    "AssignPanIn",
    "UpdateStatusIn",
]
