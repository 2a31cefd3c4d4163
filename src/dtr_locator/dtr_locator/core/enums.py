from __future__ import annotations

from enum import Enum


class LocatorStatus(str, Enum):
    """Lifecycle status of an authorization record as stored."""

    ACTIVE = "ACTIVE"
    VOID = "VOID"


class ReconciliationState(str, Enum):
    CREATED = "CREATED"
    RECONCILED = "RECONCILED"
    PARTIALLY_RECONCILED = "PARTIALLY_RECONCILED"
    VOIDED = "VOIDED"


class ReconciliationOutcome(str, Enum):
    """Why a run matched what it matched.

    NO_SHIFT_ASSIGNED and NO_OVERLAP both yield zero slots but mean different
    things to an operator: a configuration gap versus a window that simply
    does not cover any scheduled punch.
    """

    NO_TIME_RANGE = "NO_TIME_RANGE"
    NO_SHIFT_ASSIGNED = "NO_SHIFT_ASSIGNED"
    NO_OVERLAP = "NO_OVERLAP"
    MATCHED = "MATCHED"


class SlotKind(str, Enum):
    MORNING_IN = "MORNING_IN"
    MORNING_OUT = "MORNING_OUT"
    AFTERNOON_IN = "AFTERNOON_IN"
    AFTERNOON_OUT = "AFTERNOON_OUT"


class SlotAction(str, Enum):
    CREATED = "CREATED"
    SKIPPED_DUPLICATE = "SKIPPED_DUPLICATE"
    FAILED = "FAILED"


class ShiftMode(str, Enum):
    AM = "AM"
    PM = "PM"
    AMPM = "AMPM"
