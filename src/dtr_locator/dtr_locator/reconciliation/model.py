from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..core.enums import ReconciliationOutcome, ReconciliationState, SlotAction, SlotKind
from ..punches.model import AttendancePunch
from ..shifts.model import ShiftSlot


@dataclass(frozen=True)
class SlotOutcome:
    """What happened to one matched slot."""

    slot: ShiftSlot
    check_time: str
    action: SlotAction
    punch: Optional[AttendancePunch] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "slot": self.slot.kind.value,
            "check_time": self.check_time,
            "action": self.action.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    locator_uid: str
    locator_no: str
    outcome: ReconciliationOutcome
    resolved_slots: Tuple[ShiftSlot, ...] = ()
    matched: Tuple[ShiftSlot, ...] = ()
    slot_outcomes: Tuple[SlotOutcome, ...] = ()
    detail: str = ""

    @property
    def created(self) -> Tuple[AttendancePunch, ...]:
        return tuple(o.punch for o in self.slot_outcomes if o.action == SlotAction.CREATED and o.punch)

    @property
    def skipped(self) -> Tuple[ShiftSlot, ...]:
        return tuple(o.slot for o in self.slot_outcomes if o.action == SlotAction.SKIPPED_DUPLICATE)

    @property
    def failed(self) -> Tuple[SlotOutcome, ...]:
        return tuple(o for o in self.slot_outcomes if o.action == SlotAction.FAILED)

    @property
    def state(self) -> ReconciliationState:
        if self.failed:
            return ReconciliationState.PARTIALLY_RECONCILED
        return ReconciliationState.RECONCILED

    def slot_report(self) -> Dict[str, dict]:
        """Per-kind view over all four canonical slots."""

        matched = {s.kind for s in self.matched}
        actions = {o.slot.kind: o for o in self.slot_outcomes}
        report: Dict[str, dict] = {}
        for kind in SlotKind:
            o = actions.get(kind)
            report[kind.value] = {
                "matched": kind in matched,
                "action": o.action.value if o else None,
                "check_time": o.check_time if o else None,
            }
        return report

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "state": self.state.value,
            "detail": self.detail,
            "matched": [s.kind.value for s in self.matched],
            "created": [
                {"slot": o.slot.kind.value, "check_time": o.check_time, "punch_id": o.punch.punch_id}
                for o in self.slot_outcomes
                if o.action == SlotAction.CREATED and o.punch
            ],
            "skipped": [s.kind.value for s in self.skipped],
            "failed": [o.to_dict() for o in self.failed],
            "slots": self.slot_report(),
        }
