from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

import pytest

from src.dtr_locator.dtr_locator.core.enums import LocatorStatus
from src.dtr_locator.dtr_locator.core.exceptions import ConflictError, StorageError
from src.dtr_locator.dtr_locator.employees.model import Employee
from src.dtr_locator.dtr_locator.locators.model import AuthorizationRecord, LocatorFilter
from src.dtr_locator.dtr_locator.locators.service import LocatorService
from src.dtr_locator.dtr_locator.punches.model import AttendancePunch
from src.dtr_locator.dtr_locator.reconciliation.service import ReconciliationOrchestrator
from src.dtr_locator.dtr_locator.schedules.model import Schedule, ShiftAssignment
from src.dtr_locator.dtr_locator.schedules.resolver import ShiftResolver
from src.dtr_locator.dtr_locator.shifts.model import ShiftDefinition

from tests.factories import FIXED_NOW, regular_shift


# ---------------------------------------------------------------- resolver fakes


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee] = field(default_factory=dict)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(int(employee_id))


@dataclass
class InMemoryShifts:
    shifts: dict[int, ShiftDefinition] = field(default_factory=dict)

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        return self.shifts.get(int(shift_id))


@dataclass
class InMemorySchedules:
    by_employee_date: dict[tuple[int, date], Schedule] = field(default_factory=dict)
    assignments: list[ShiftAssignment] = field(default_factory=list)

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        return self.by_employee_date.get((int(employee_id), work_date))

    def list_active_assignments(self, *, employee_id: int):
        return [a for a in self.assignments if a.employee_id == int(employee_id) and a.is_active]

    def assign(self, employee_id: int, shift_id: int) -> None:
        self.assignments.append(
            ShiftAssignment(
                assignment_id=f"a{len(self.assignments) + 1}",
                employee_id=employee_id,
                shift_id=shift_id,
            )
        )


# ---------------------------------------------------------------- transactional store


@dataclass
class StoreState:
    locators: dict[str, AuthorizationRecord] = field(default_factory=dict)
    seq_keys: set = field(default_factory=set)
    seq_nos: dict[str, int] = field(default_factory=dict)
    sequences: dict[date, int] = field(default_factory=dict)
    punches: list[AttendancePunch] = field(default_factory=list)
    next_punch_id: int = 1


class InMemoryStore:
    """Shared state behind the fake unit of work.

    One transaction at a time holds the lock, which stands in for the counter
    row lock taken by `SELECT ... FOR UPDATE`.
    """

    def __init__(self):
        self.state = StoreState()
        self.lock = threading.RLock()
        self.locator_insert_conflicts = 0
        self.failing_check_times: set[str] = set()
        self.racing_check_times: set[str] = set()
        self.commits = 0
        self.rollbacks = 0

    def snapshot(self) -> StoreState:
        return copy.deepcopy(self.state)

    def restore(self, snap: StoreState) -> None:
        self.state = snap


class InMemoryLocators:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def insert(self, record: AuthorizationRecord, *, seq_date: date, seq_no: int) -> None:
        s = self._store
        if s.locator_insert_conflicts > 0:
            s.locator_insert_conflicts -= 1
            raise ConflictError("insert locator: duplicate (seq_date, seq_no)")
        if record.locator_no in s.state.locators or (seq_date, seq_no) in s.state.seq_keys:
            raise ConflictError(f"insert locator: duplicate {record.locator_no}")
        s.state.locators[record.locator_no] = record
        s.state.seq_keys.add((seq_date, seq_no))
        s.state.seq_nos[record.locator_no] = seq_no

    def get_by_no(self, locator_no: str, *, for_update: bool = False) -> Optional[AuthorizationRecord]:
        return self._store.state.locators.get(locator_no)

    def list_page(self, *, filters: LocatorFilter, offset: int, limit: int):
        rows = list(self._store.state.locators.values())
        if filters.employee_search:
            rows = [r for r in rows if str(r.employee_id) == filters.employee_search]
        if filters.locator_no_search:
            rows = [r for r in rows if filters.locator_no_search in r.locator_no]
        if filters.date_from:
            rows = [r for r in rows if r.locator_date >= filters.date_from]
        if filters.date_to:
            rows = [r for r in rows if r.locator_date <= filters.date_to]
        if filters.destination_search:
            rows = [r for r in rows if filters.destination_search in (r.destination or "")]
        if filters.purpose_search:
            rows = [r for r in rows if filters.purpose_search in (r.purpose or "")]
        rows.sort(key=lambda r: (r.created_at, self._store.state.seq_nos[r.locator_no]), reverse=True)
        return rows[offset: offset + limit], len(rows)

    def count_all(self) -> int:
        return len(self._store.state.locators)

    def count_active_for_employee_date(self, *, employee_id: int, locator_date: str) -> int:
        return sum(
            1
            for r in self._store.state.locators.values()
            if r.employee_id == employee_id and r.locator_date == locator_date and r.status == LocatorStatus.ACTIVE
        )

    def monthly_counts(self, *, since: date):
        counts: dict[tuple[int, int], int] = {}
        for r in self._store.state.locators.values():
            d = date.fromisoformat(r.locator_date)
            if d >= since:
                counts[(d.year, d.month)] = counts.get((d.year, d.month), 0) + 1
        return [
            {"year": y, "month": m, "count": c}
            for (y, m), c in sorted(counts.items(), reverse=True)
        ]

    def update_details(self, locator_no: str, *, changes: dict, updated_by, updated_at) -> bool:
        record = self._store.state.locators.get(locator_no)
        if record is None:
            return False
        self._store.state.locators[locator_no] = replace(record, updated_by=updated_by, updated_at=updated_at, **changes)
        return True

    def set_status(self, locator_no: str, *, status, reconciliation_state, updated_by, updated_at) -> bool:
        record = self._store.state.locators.get(locator_no)
        if record is None:
            return False
        self._store.state.locators[locator_no] = replace(
            record,
            status=status,
            reconciliation_state=reconciliation_state,
            updated_by=updated_by,
            updated_at=updated_at,
        )
        return True

    def set_reconciliation(self, locator_uid: str, *, state, outcome) -> None:
        for no, record in self._store.state.locators.items():
            if record.locator_uid == locator_uid:
                self._store.state.locators[no] = replace(record, reconciliation_state=state, last_outcome=outcome)
                return


class InMemorySequences:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def allocate(self, seq_date: date) -> int:
        state = self._store.state
        if seq_date not in state.sequences:
            state.sequences[seq_date] = len({k for k in state.seq_keys if k[0] == seq_date})
        state.sequences[seq_date] += 1
        return state.sequences[seq_date]


class InMemoryPunches:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def find(self, *, employee_id: int, check_time: str) -> Optional[AttendancePunch]:
        hits = [
            p
            for p in self._store.state.punches
            if p.employee_id == employee_id and p.check_time == check_time
        ]
        hits.sort(key=lambda p: (not p.synthesized, p.punch_id))
        return hits[0] if hits else None

    def insert(self, punch: AttendancePunch) -> int:
        s = self._store
        if punch.check_time in s.failing_check_times:
            raise StorageError(f"insert punch: disk full at {punch.check_time}")
        if punch.check_time in s.racing_check_times:
            # another request commits the same punch just before ours
            s.racing_check_times.discard(punch.check_time)
            self._append(replace(punch, punch_id=None))
            raise ConflictError("insert punch: duplicate entry")
        if punch.synthesized and any(
            p.synthesized and p.employee_id == punch.employee_id and p.check_time == punch.check_time
            for p in s.state.punches
        ):
            raise ConflictError("insert punch: duplicate entry")
        return self._append(punch)

    def _append(self, punch: AttendancePunch) -> int:
        state = self._store.state
        punch_id = state.next_punch_id
        state.next_punch_id += 1
        state.punches.append(replace(punch, punch_id=punch_id))
        return punch_id


class FakeUnitOfWork:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._begin: Optional[StoreState] = None
        self._committed = False
        self.locators = InMemoryLocators(store)
        self.sequences = InMemorySequences(store)
        self.punches = InMemoryPunches(store)

    def __enter__(self) -> "FakeUnitOfWork":
        self._store.lock.acquire()
        self._begin = self._store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                self._store.restore(self._begin)
                self._store.rollbacks += 1
        finally:
            self._store.lock.release()

    @contextmanager
    def savepoint(self, name: str):
        snap = self._store.snapshot()
        try:
            yield
        except Exception:
            self._store.restore(snap)
            raise

    def commit(self) -> None:
        self._committed = True
        self._store.commits += 1


# ---------------------------------------------------------------- fixtures


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def employees():
    return InMemoryEmployees({7: Employee(employee_id=7, full_name="Ana Reyes", badge_number="0007")})


@pytest.fixture
def shifts():
    return InMemoryShifts({1: regular_shift()})


@pytest.fixture
def schedules():
    s = InMemorySchedules()
    s.assign(7, 1)
    return s


@pytest.fixture
def resolver(employees, schedules, shifts):
    return ShiftResolver(employees, schedules, shifts)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def orchestrator(store, resolver, fixed_now):
    return ReconciliationOrchestrator(lambda: FakeUnitOfWork(store), resolver, clock=lambda: fixed_now)


@pytest.fixture
def locator_service(store, orchestrator, fixed_now):
    return LocatorService(InMemoryLocators(store), orchestrator, clock=lambda: fixed_now)
