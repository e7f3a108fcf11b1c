"""Typed failures raised by the production flow core.

Every failure carries a ``kind`` naming the rule that rejected the request and
a human readable message. All of them are caller-correctable; infrastructure
errors (``sqlite3.Error`` and friends) are never wrapped into this hierarchy.
"""

from __future__ import annotations

from typing import ClassVar


class FlowError(Exception):
    """Base class for all rejections produced by the core."""

    kind: ClassVar[str] = "FlowError"
    default_message: ClassVar[str] = "Operation rejected"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def as_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


# ----------------------------------------------------------------------
# Referential and uniqueness failures
# ----------------------------------------------------------------------
class ReferenceFlowError(FlowError):
    """A referenced record is missing, taken, or already exists."""


class OrderNotFound(ReferenceFlowError):
    kind = "OrderNotFound"
    default_message = "Production order not found"


class WorkcenterNotFound(ReferenceFlowError):
    kind = "WorkcenterNotFound"
    default_message = "Workcenter not found"


class PanNotFoundOrUnavailable(ReferenceFlowError):
    kind = "PanNotFoundOrUnavailable"
    default_message = "Pan not found or not available"


class DuplicateOrderNumber(ReferenceFlowError):
    kind = "DuplicateOrderNumber"
    default_message = "Order number already exists"


# ----------------------------------------------------------------------
# Request shape violations
# ----------------------------------------------------------------------
class InvalidMoveRequest(FlowError):
    """The move request itself is inconsistent."""


class WorkcenterRequired(InvalidMoveRequest):
    kind = "WorkcenterRequired"
    default_message = "Workcenter assignment is required when moving to a phase"


class PanRequiredForCharging(InvalidMoveRequest):
    kind = "PanRequiredForCharging"
    default_message = "Pan assignment is required when entering charging phase"


class BufferMustBeNullForPhase(InvalidMoveRequest):
    kind = "BufferMustBeNullForPhase"
    default_message = "Buffer name must be null when moving to a phase"


class PhaseRequired(InvalidMoveRequest):
    kind = "PhaseRequired"
    default_message = "Phase must be specified when moving to a phase"


class BufferRequired(InvalidMoveRequest):
    kind = "BufferRequired"
    default_message = "Buffer name is required when moving to a buffer"


class PhaseMustBeNullForBuffer(InvalidMoveRequest):
    kind = "PhaseMustBeNullForBuffer"
    default_message = "Phase must be null when moving to a buffer"


class ResourcesMustBeNullForBuffer(InvalidMoveRequest):
    kind = "ResourcesMustBeNullForBuffer"
    default_message = "Workcenter and pan must be null when moving to a buffer"


class WorkcenterPhaseMismatch(InvalidMoveRequest):
    kind = "WorkcenterPhaseMismatch"
    default_message = "Workcenter does not belong to the target phase"


# ----------------------------------------------------------------------
# Sequencing violations
# ----------------------------------------------------------------------
class SequencingError(FlowError):
    """The move skips ahead or enters a buffer out of order."""


class ForwardStepTooLarge(SequencingError):
    kind = "ForwardStepTooLarge"
    default_message = "Cannot move more than one step forward"


class InvalidBufferForCurrentPhase(SequencingError):
    kind = "InvalidBufferForCurrentPhase"
    default_message = "Buffer is not adjacent to the current phase"


# ----------------------------------------------------------------------
# Status changes
# ----------------------------------------------------------------------
class InvalidStatusTransition(FlowError):
    kind = "InvalidStatusTransition"
    default_message = "Completed or cancelled orders cannot change status"


__all__ = [
    "FlowError",
    "ReferenceFlowError",
    "OrderNotFound",
    "WorkcenterNotFound",
    "PanNotFoundOrUnavailable",
    "DuplicateOrderNumber",
    "InvalidMoveRequest",
    "WorkcenterRequired",
    "PanRequiredForCharging",
    "BufferMustBeNullForPhase",
    "PhaseRequired",
    "BufferRequired",
    "PhaseMustBeNullForBuffer",
    "ResourcesMustBeNullForBuffer",
    "WorkcenterPhaseMismatch",
    "SequencingError",
    "ForwardStepTooLarge",
    "InvalidBufferForCurrentPhase",
    "InvalidStatusTransition",
]
