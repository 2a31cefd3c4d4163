from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import ShiftMode, SlotKind

MORNING_SLOTS = (SlotKind.MORNING_IN, SlotKind.MORNING_OUT)
AFTERNOON_SLOTS = (SlotKind.AFTERNOON_IN, SlotKind.AFTERNOON_OUT)


@dataclass(frozen=True)
class ShiftSlot:
    """One canonical daily punch of a shift.

    Times are zero-padded `HH:MM:SS` strings. The acceptance window is
    informational here; matching only looks at the nominal time.
    """

    kind: SlotKind
    nominal: str
    window_start: Optional[str] = None
    window_end: Optional[str] = None


@dataclass(frozen=True)
class ShiftDefinition:
    """Domain entity: a shift from the shift catalog (read-only)."""

    shift_id: int
    shift_name: str
    mode: ShiftMode = ShiftMode.AMPM
    slots: Tuple[ShiftSlot, ...] = field(default_factory=tuple)

    def active_slots(self) -> Tuple[ShiftSlot, ...]:
        """Slots that take part in reconciliation, in canonical order.

        AM shifts only punch in the morning, PM shifts only in the afternoon.
        """

        allowed = {
            ShiftMode.AM: MORNING_SLOTS,
            ShiftMode.PM: AFTERNOON_SLOTS,
        }.get(self.mode, MORNING_SLOTS + AFTERNOON_SLOTS)
        order = {kind: i for i, kind in enumerate(SlotKind)}
        picked = [s for s in self.slots if s.kind in allowed and s.nominal]
        return tuple(sorted(picked, key=lambda s: order[s.kind]))
