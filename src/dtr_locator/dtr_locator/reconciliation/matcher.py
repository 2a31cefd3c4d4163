from __future__ import annotations

from typing import Iterable, List, Optional

from ..common.datetime_utils import hhmm, normalize_time_text
from ..shifts.model import ShiftSlot


class WindowMatcher:
    """Pick the shift slots covered by an authorized time window.

    The window is inclusive at both ends. Comparison is on zero-padded
    `HH:MM` text, so plain string ordering is chronological ordering.
    """

    def match(
        self,
        departure: Optional[str],
        arrival: Optional[str],
        slots: Iterable[ShiftSlot],
    ) -> List[ShiftSlot]:
        dep = normalize_time_text(departure)
        arr = normalize_time_text(arrival)
        if not dep or not arr:
            return []

        lo, hi = hhmm(dep), hhmm(arr)
        matched = []
        for slot in slots:
            nominal = normalize_time_text(slot.nominal)
            if nominal and lo <= hhmm(nominal) <= hi:
                matched.append(slot)
        return matched
