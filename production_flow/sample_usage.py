"""Demonstration script for the production flow tracker."""

from __future__ import annotations

from pprint import pprint

from . import Buffer, Location, Phase, ProductionFlowService
from .errors import FlowError
from .logging_config import configure_logging


def _print_board(flow: ProductionFlowService) -> None:
    for location, orders in flow.board().items():
        names = ", ".join(
            order.order_number + (f" [{order.pan.name}]" if order.pan else "")
            for order in orders
        )
        print(f"   {location.label:<28} {names or '-'}")


def main() -> None:
    configure_logging("WARNING")
    flow = ProductionFlowService()

    # Master data
    charger = flow.create_workcenter("Charging Station 1", Phase.CHARGING, capacity=4)
    mixer = flow.create_workcenter("Mixer A", Phase.MIXING, capacity=2)
    extruder = flow.create_workcenter("Extruder 1", Phase.EXTRUSION, capacity=1)
    pan_one = flow.create_pan("Pan 01")
    pan_two = flow.create_pan("Pan 02")

    first = flow.create_order("PO-1001", 250)
    second = flow.create_order("PO-1002", 120)

    print("Initial board")
    _print_board(flow)

    flow.move_to(
        first.id,
        Location.at_phase(Phase.CHARGING),
        workcenter_id=charger.id,
        pan_id=pan_one.id,
    )
    flow.move_to(first.id, Location.at_phase(Phase.MIXING), workcenter_id=mixer.id)
    flow.move_to(first.id, Location.in_buffer(Buffer.MIXING_EXTRUSION))
    flow.move_to(first.id, Location.at_phase(Phase.EXTRUSION), workcenter_id=extruder.id)

    flow.assign_pan(second.id, pan_two.id)
    try:
        flow.move_to(first.id, Location.in_buffer(Buffer.CHARGING_MIXING))
    except FlowError as exc:
        print(f"\nRejected: {exc.kind} - {exc.message}")

    print("\nBoard after moves")
    _print_board(flow)

    print("\nAvailable pans")
    pprint([pan.name for pan in flow.list_available_pans()])


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
