from datetime import timedelta

import pytest

from src.dtr_locator.dtr_locator.core.enums import ShiftMode, SlotKind
from src.dtr_locator.dtr_locator.shifts.mysql_shift_repository import MySQLShiftRepository


class RowCursor:
    def __init__(self, row):
        self.row = row
        self.executed = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.row


def shift_row(mode):
    return {
        "shift_id": 3,
        "shift_name": "Morning only",
        "shift_mode": mode,
        "am_checkin": timedelta(hours=8),
        "am_checkin_start": timedelta(hours=6),
        "am_checkin_end": timedelta(hours=9),
        "am_checkout": "12:00:00",
        "am_checkout_start": None,
        "am_checkout_end": None,
        "pm_checkin": None,
        "pm_checkin_start": None,
        "pm_checkin_end": None,
        "pm_checkout": None,
        "pm_checkout_start": None,
        "pm_checkout_end": None,
    }


@pytest.mark.parametrize("mode", ["XX", "", None, "whole day"])
def test_unknown_or_blank_mode_reads_as_am(mode):
    repo = MySQLShiftRepository(cursor=RowCursor(shift_row(mode)))

    shift = repo.get_by_id(3)

    assert shift.mode == ShiftMode.AM
    assert [s.kind for s in shift.active_slots()] == [SlotKind.MORNING_IN, SlotKind.MORNING_OUT]


@pytest.mark.parametrize("mode, expected", [("pm", ShiftMode.PM), ("AMPM", ShiftMode.AMPM)])
def test_known_modes_are_kept(mode, expected):
    assert MySQLShiftRepository(cursor=RowCursor(shift_row(mode))).get_by_id(3).mode == expected


def test_slot_times_are_read_as_text():
    cursor = RowCursor(shift_row("AM"))

    shift = MySQLShiftRepository(cursor=cursor).get_by_id(3)

    first = shift.slots[0]
    assert (first.nominal, first.window_start, first.window_end) == ("08:00:00", "06:00:00", "09:00:00")
    assert shift.slots[1].nominal == "12:00:00"
    assert cursor.executed[0][1] == (3,)


def test_missing_shift_is_none():
    assert MySQLShiftRepository(cursor=RowCursor(None)).get_by_id(99) is None
