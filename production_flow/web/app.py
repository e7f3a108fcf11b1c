"""FastAPI-based web interface for the production flow tracker."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, FastAPI, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..config import FlowSettings
from ..domain import (
    FLOW_SEQUENCE,
    Buffer,
    Phase,
    ProductionOrderWithDetails,
    parse_location,
)
from ..errors import (
    DuplicateOrderNumber,
    FlowError,
    InvalidStatusTransition,
    OrderNotFound,
    PanNotFoundOrUnavailable,
    WorkcenterNotFound,
)
from ..logging_config import configure_logging
from ..services import ProductionFlowService
from ..storage import FlowDatabase
from ..transitions import describe_move
from .schemas import (
    AssignPanIn,
    CreatePanIn,
    CreateProductionOrderIn,
    CreateWorkcenterIn,
    MoveProductionOrderIn,
    PanOut,
    ProductionOrderOut,
    UpdateStatusIn,
    WorkcenterOut,
)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    OrderNotFound: 404,
    WorkcenterNotFound: 404,
    DuplicateOrderNumber: 409,
    PanNotFoundOrUnavailable: 409,
    InvalidStatusTransition: 409,
}


def status_for(error: FlowError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status_code
    return 422


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def create_app(
    database_path: Optional[str] = None,
    *,
    settings: Optional[FlowSettings] = None,
    service: Optional[ProductionFlowService] = None,
) -> FastAPI:
    settings = settings or FlowSettings.from_env()
    configure_logging(settings.log_level)
    database: Optional[FlowDatabase] = None
    if service is None:
        database = FlowDatabase(database_path or settings.database_path)
        service = ProductionFlowService(database)
    if settings.seed_demo_data:
        ensure_demo_data(service)

    app = FastAPI(title="Production Flow Tracker")
    app.state.flow_service = service
    app.state.database = database

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - framework hook
        if database is not None:
            database.close()

    @app.exception_handler(FlowError)
    async def flow_error_handler(request: Request, exc: FlowError):
        return JSONResponse(exc.as_dict(), status_code=status_for(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            {"error": "InvalidInput", "message": str(exc)}, status_code=422
        )

    @app.get("/healthz")
    async def healthcheck():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    # ------------------------------------------------------------------
    # Board (HTML)
    # ------------------------------------------------------------------
    @app.get("/")
    async def board(request: Request):
        service: ProductionFlowService = request.app.state.flow_service
        columns = service.board()
        return templates.TemplateResponse(
            request,
            "board.html",
            {
                "columns": [(location, columns[location]) for location in FLOW_SEQUENCE],
                "locations": FLOW_SEQUENCE,
                "workcenters": service.list_workcenters(),
                "available_pans": service.list_available_pans(),
                "error": request.query_params.get("error"),
            },
        )

    @app.post("/orders/create")
    async def create_order_form(
        request: Request,
        order_number: str = Form(...),
        quantity: float = Form(...),
    ):
        service: ProductionFlowService = request.app.state.flow_service
        try:
            service.create_order(order_number.strip(), quantity)
        except (FlowError, ValueError) as exc:
            return _redirect_with_error(str(exc))
        return RedirectResponse("/", status_code=303)

    @app.post("/orders/{order_id}/move")
    async def move_order_form(
        order_id: str,
        request: Request,
        target: str = Form(...),
        workcenter_id: Optional[str] = Form(None),
        pan_id: Optional[str] = Form(None),
    ):
        service: ProductionFlowService = request.app.state.flow_service
        try:
            location = parse_location(target)
            current = service.get_order(order_id)
            advice = describe_move(current.location, location)
            if not advice.allowed:
                return _redirect_with_error(advice.reason)
            pan = _blank_to_none(pan_id)
            if location.phase is Phase.CHARGING and pan is None and current.pan:
                pan = current.pan.id
            service.move_to(
                order_id,
                location,
                workcenter_id=_blank_to_none(workcenter_id),
                pan_id=pan,
            )
        except (FlowError, ValueError) as exc:
            return _redirect_with_error(str(exc))
        return RedirectResponse("/", status_code=303)

    @app.post("/orders/{order_id}/assign-pan")
    async def assign_pan_form(order_id: str, request: Request, pan_id: str = Form(...)):
        service: ProductionFlowService = request.app.state.flow_service
        try:
            service.assign_pan(order_id, pan_id)
        except FlowError as exc:
            return _redirect_with_error(str(exc))
        return RedirectResponse("/", status_code=303)

    app.include_router(build_api_router(), prefix="/api")
    return app


def _redirect_with_error(message: str) -> RedirectResponse:
    return RedirectResponse("/?" + urlencode({"error": message}), status_code=303)


def _order_out(order: ProductionOrderWithDetails) -> ProductionOrderOut:
    return ProductionOrderOut.model_validate(order)


def build_api_router() -> APIRouter:
    router = APIRouter()

    # ------------------------------------------------------------------
    # Production orders
    # ------------------------------------------------------------------
    @router.get("/orders", response_model=List[ProductionOrderOut])
    async def list_orders(request: Request):
        return [_order_out(order) for order in request.app.state.flow_service.list_orders()]

    @router.post("/orders", response_model=ProductionOrderOut, status_code=201)
    async def create_order(payload: CreateProductionOrderIn, request: Request):
        service: ProductionFlowService = request.app.state.flow_service
        order = service.create_order(payload.order_number, payload.quantity)
        return _order_out(service.get_order(order.id))

    @router.get("/orders/phase/{phase}", response_model=List[ProductionOrderOut])
    async def list_orders_by_phase(phase: Phase, request: Request):
        orders = request.app.state.flow_service.list_orders_by_phase(phase)
        return [_order_out(order) for order in orders]

    @router.get("/orders/buffer/{buffer}", response_model=List[ProductionOrderOut])
    async def list_orders_by_buffer(buffer: Buffer, request: Request):
        orders = request.app.state.flow_service.list_orders_by_buffer(buffer)
        return [_order_out(order) for order in orders]

    @router.get("/orders/{order_id}", response_model=ProductionOrderOut)
    async def get_order(order_id: str, request: Request):
        return _order_out(request.app.state.flow_service.get_order(order_id))

    @router.post("/orders/{order_id}/move", response_model=ProductionOrderOut)
    async def move_order(order_id: str, payload: MoveProductionOrderIn, request: Request):
        service: ProductionFlowService = request.app.state.flow_service
        order = service.move(
            order_id,
            payload.location_type,
            phase=payload.phase,
            buffer_name=payload.buffer_name,
            workcenter_id=payload.workcenter_id,
            pan_id=payload.pan_id,
        )
        return _order_out(order)

    @router.post("/orders/{order_id}/assign-pan", response_model=ProductionOrderOut)
    async def assign_pan(order_id: str, payload: AssignPanIn, request: Request):
        order = request.app.state.flow_service.assign_pan(order_id, payload.pan_id)
        return _order_out(order)

    @router.post("/orders/{order_id}/status", response_model=ProductionOrderOut)
    async def update_status(order_id: str, payload: UpdateStatusIn, request: Request):
        service: ProductionFlowService = request.app.state.flow_service
        return _order_out(service.update_order_status(order_id, payload.status))

    # ------------------------------------------------------------------
    # Pans
    # ------------------------------------------------------------------
    @router.get("/pans", response_model=List[PanOut])
    async def list_pans(request: Request):
        return [PanOut.model_validate(pan) for pan in request.app.state.flow_service.list_pans()]

    @router.get("/pans/available", response_model=List[PanOut])
    async def list_available_pans(request: Request):
        pans = request.app.state.flow_service.list_available_pans()
        return [PanOut.model_validate(pan) for pan in pans]

    @router.post("/pans", response_model=PanOut, status_code=201)
    async def create_pan(payload: CreatePanIn, request: Request):
        return PanOut.model_validate(request.app.state.flow_service.create_pan(payload.name))

    # ------------------------------------------------------------------
    # Workcenters
    # ------------------------------------------------------------------
    @router.get("/workcenters", response_model=List[WorkcenterOut])
    async def list_workcenters(request: Request):
        workcenters = request.app.state.flow_service.list_workcenters()
        return [WorkcenterOut.model_validate(workcenter) for workcenter in workcenters]

    @router.get("/workcenters/phase/{phase}", response_model=List[WorkcenterOut])
    async def list_workcenters_by_phase(phase: Phase, request: Request):
        workcenters = request.app.state.flow_service.list_workcenters_by_phase(phase)
        return [WorkcenterOut.model_validate(workcenter) for workcenter in workcenters]

    @router.post("/workcenters", response_model=WorkcenterOut, status_code=201)
    async def create_workcenter(payload: CreateWorkcenterIn, request: Request):
        workcenter = request.app.state.flow_service.create_workcenter(
            payload.name, payload.phase, payload.capacity
        )
        return WorkcenterOut.model_validate(workcenter)

    return router


def ensure_demo_data(service: ProductionFlowService) -> None:
    if service.list_workcenters():
        return

    service.create_workcenter("Charging Station 1", Phase.CHARGING, 4)
    service.create_workcenter("Charging Station 2", Phase.CHARGING, 4)
    service.create_workcenter("Mixer A", Phase.MIXING, 2)
    service.create_workcenter("Mixer B", Phase.MIXING, 2)
    service.create_workcenter("Extruder 1", Phase.EXTRUSION, 1)
    for number in range(1, 7):
        service.create_pan(f"Pan {number:02d}")
    for number, quantity in ((1, 250.0), (2, 120.0), (3, 480.0)):
        service.create_order(f"PO-{number:04d}", quantity)
    logger.info("Seeded demo workcenters, pans and orders")


__all__ = ["create_app", "build_api_router", "ensure_demo_data", "status_for"]
