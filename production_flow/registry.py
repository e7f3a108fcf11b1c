"""Catalog of pans and workcenters."""

from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from .domain import Pan, Phase, Workcenter
from .errors import PanNotFoundOrUnavailable, WorkcenterNotFound
from .repository import FlowStore, RecordNotFoundError

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """Source of truth for pan and workcenter existence and availability."""

    def __init__(self, store: FlowStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Master data
    # ------------------------------------------------------------------
    def create_pan(self, name: str) -> Pan:
        if not name or not name.strip():
            raise ValueError("A pan needs a name")
        pan = Pan(id=str(uuid4()), name=name.strip())
        with self._store.transaction():
            self._store.pans.add(pan.id, pan)
        logger.info("Registered pan %s (%s)", pan.name, pan.id)
        return pan

    def create_workcenter(self, name: str, phase: Phase, capacity: int) -> Workcenter:
        if not name or not name.strip():
            raise ValueError("A workcenter needs a name")
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("Workcenter capacity must be a positive integer")
        workcenter = Workcenter(
            id=str(uuid4()),
            name=name.strip(),
            phase=Phase(phase),
            capacity=capacity,
        )
        with self._store.transaction():
            self._store.workcenters.add(workcenter.id, workcenter)
        logger.info(
            "Registered workcenter %s for %s (%s)",
            workcenter.name,
            workcenter.phase.value,
            workcenter.id,
        )
        return workcenter

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_workcenter(self, workcenter_id: str) -> Workcenter:
        try:
            return self._store.workcenters.get(workcenter_id)
        except RecordNotFoundError as exc:
            raise WorkcenterNotFound(
                f"Workcenter with id {workcenter_id} not found"
            ) from exc

    def find_pan(self, pan_id: str) -> Pan:
        """Return the pan regardless of availability."""

        try:
            return self._store.pans.get(pan_id)
        except RecordNotFoundError as exc:
            raise PanNotFoundOrUnavailable(
                f"Pan with id {pan_id} not found or not available"
            ) from exc

    def find_available_pan(self, pan_id: str) -> Pan:
        # Missing and claimed pans are reported identically.
        pan = self.find_pan(pan_id)
        if not pan.is_available:
            raise PanNotFoundOrUnavailable(
                f"Pan with id {pan_id} not found or not available"
            )
        return pan

    # ------------------------------------------------------------------
    # Claim / release, only called inside a store transaction
    # ------------------------------------------------------------------
    def claim(self, pan_id: str) -> Pan:
        pan = self.find_available_pan(pan_id)
        pan.is_available = False
        self._store.pans.upsert(pan.id, pan)
        logger.debug("Claimed pan %s", pan_id)
        return pan

    def release(self, pan_id: str) -> None:
        try:
            pan = self._store.pans.get(pan_id)
        except RecordNotFoundError:
            logger.warning("Release requested for unknown pan %s", pan_id)
            return
        if pan.is_available:
            return
        pan.is_available = True
        self._store.pans.upsert(pan.id, pan)
        logger.debug("Released pan %s", pan_id)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    def list_pans(self) -> List[Pan]:
        return sorted(self._store.pans.list(), key=lambda pan: pan.created_at)

    def list_available_pans(self) -> List[Pan]:
        return [pan for pan in self.list_pans() if pan.is_available]

    def list_workcenters(self) -> List[Workcenter]:
        return sorted(
            self._store.workcenters.list(), key=lambda workcenter: workcenter.created_at
        )

    def list_workcenters_by_phase(self, phase: Phase) -> List[Workcenter]:
        phase = Phase(phase)
        return [
            workcenter
            for workcenter in self.list_workcenters()
            if workcenter.phase == phase
        ]


__all__ = ["ResourceRegistry"]
