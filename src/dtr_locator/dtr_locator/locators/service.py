from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import normalize_date_text, normalize_time_text, now_local
from ..common.validators import optional_text, require_positive_int
from ..core import constants
from ..core.enums import LocatorStatus, ReconciliationState
from ..core.exceptions import NotFoundError, ValidationError
from ..reconciliation.model import ReconciliationResult
from ..reconciliation.service import ReconciliationOrchestrator
from .model import AuthorizationRecord, LocatorFilter, LocatorPage, NewLocator
from .repository import LocatorRepository

logger = logging.getLogger(__name__)

_TEXT_LIMITS = {
    "destination": 50,
    "purpose": 100,
    "remarks": 50,
}


def normalize_status(value: Any) -> LocatorStatus:
    """Blank and legacy approval states are stored as ACTIVE."""

    text = str(value or "").strip().upper()
    if text in {"", "ACTIVE", "PENDING", "FOR APPROVAL", "APPROVED"}:
        return LocatorStatus.ACTIVE
    if text in {"VOID", "VOIDED", "CANCELLED"}:
        return LocatorStatus.VOID
    raise ValidationError(f"Unknown locator status: {value!r}")


def _warn_inverted(departure: Optional[str], arrival: Optional[str], employee_id: int) -> None:
    # An inverted window is kept as entered; it simply covers no slot.
    if departure and arrival and departure > arrival:
        logger.warning("Employee %s: departure %s is after arrival %s", employee_id, departure, arrival)


class LocatorService:
    """Operator-facing locator operations.

    Creation and replay go through the reconciliation orchestrator; the rest
    are plain reads and edits on the locator table.
    """

    def __init__(
        self,
        locators: LocatorRepository,
        orchestrator: ReconciliationOrchestrator,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._locators = locators
        self._orchestrator = orchestrator
        self._clock = clock

    def create(
        self,
        *,
        employee_id: Any,
        locator_date: Any,
        destination: Any = None,
        purpose: Any = None,
        departure: Any = None,
        arrival: Any = None,
        remarks: Any = None,
        status: Any = None,
        created_by: Any = None,
    ) -> ReconciliationResult:
        if employee_id in (None, ""):
            raise ValidationError("employee_id is required")
        if locator_date in (None, ""):
            raise ValidationError("locator_date is required")

        new = NewLocator(
            employee_id=require_positive_int(employee_id, "employee_id"),
            locator_date=normalize_date_text(locator_date),
            destination=optional_text(destination, "destination", max_len=_TEXT_LIMITS["destination"]),
            purpose=optional_text(purpose, "purpose", max_len=_TEXT_LIMITS["purpose"]),
            departure=normalize_time_text(departure),
            arrival=normalize_time_text(arrival),
            remarks=optional_text(remarks, "remarks", max_len=_TEXT_LIMITS["remarks"]),
            created_by=optional_text(created_by, "created_by", max_len=50),
            status=normalize_status(status),
        )
        if new.status != LocatorStatus.ACTIVE:
            raise ValidationError("A locator can only be created as ACTIVE")
        _warn_inverted(new.departure, new.arrival, new.employee_id)

        return self._orchestrator.create(new)

    def replay(self, locator_no: str) -> ReconciliationResult:
        return self._orchestrator.replay(str(locator_no).strip())

    def get(self, locator_no: str) -> AuthorizationRecord:
        record = self._locators.get_by_no(str(locator_no).strip())
        if record is None:
            raise NotFoundError(f"Locator {locator_no} not found")
        return record

    def list_locators(
        self,
        *,
        filters: Optional[LocatorFilter] = None,
        page: Any = 1,
        page_size: Any = constants.DEFAULT_PAGE_SIZE,
    ) -> LocatorPage:
        filters = filters or LocatorFilter()
        for bound in (filters.date_from, filters.date_to):
            if bound:
                normalize_date_text(bound)

        try:
            page = max(1, int(page or 1))
            page_size = int(page_size or constants.DEFAULT_PAGE_SIZE)
        except (TypeError, ValueError):
            raise ValidationError("page and page_size must be integers")
        page_size = min(max(1, page_size), constants.MAX_PAGE_SIZE)

        rows, total = self._locators.list_page(filters=filters, offset=(page - 1) * page_size, limit=page_size)
        return LocatorPage(items=list(rows), page=page, page_size=page_size, total=total)

    def count(self) -> int:
        return self._locators.count_all()

    def check_duplicate(self, *, employee_id: Any, locator_date: Any) -> dict:
        count = self._locators.count_active_for_employee_date(
            employee_id=require_positive_int(employee_id, "employee_id"),
            locator_date=normalize_date_text(locator_date),
        )
        return {"has_duplicate": count > 0, "count": count}

    def monthly_stats(self, *, today: Optional[date] = None) -> list:
        today = today or self._clock().date()
        months_back = constants.MONTHLY_STATS_MONTHS - 1
        year, month = today.year, today.month - months_back
        while month <= 0:
            month += 12
            year -= 1
        return list(self._locators.monthly_counts(since=date(year, month, 1)))

    def update(self, locator_no: str, *, changes: Mapping[str, Any], updated_by: Any = None) -> AuthorizationRecord:
        """Edit descriptive fields or the time window.

        Punches already synthesized stay as they are; an explicit replay
        reconciles the edited window.
        """

        record = self.get(locator_no)
        if record.status != LocatorStatus.ACTIVE:
            raise ValidationError(f"Locator {record.locator_no} is {record.status.value} and cannot be edited")

        clean: dict = {}
        for key, value in changes.items():
            if key == "locator_date":
                clean[key] = normalize_date_text(value)
            elif key in ("departure", "arrival"):
                clean[key] = normalize_time_text(value)
            elif key in _TEXT_LIMITS:
                clean[key] = optional_text(value, key, max_len=_TEXT_LIMITS[key])
            else:
                raise ValidationError(f"Field {key!r} cannot be edited")

        _warn_inverted(clean.get("departure", record.departure), clean.get("arrival", record.arrival), record.employee_id)

        ok = self._locators.update_details(
            record.locator_no,
            changes=clean,
            updated_by=optional_text(updated_by, "updated_by", max_len=50),
            updated_at=self._clock(),
        )
        if not ok:
            raise NotFoundError(f"Locator {record.locator_no} not found")

        if {"locator_date", "departure", "arrival"} & clean.keys():
            logger.info("Locator %s window edited; reconciliation not re-run", record.locator_no)
        return self.get(record.locator_no)

    def void(self, locator_no: str, *, updated_by: Any = None) -> AuthorizationRecord:
        record = self.get(locator_no)
        if record.status == LocatorStatus.VOID:
            return record

        ok = self._locators.set_status(
            record.locator_no,
            status=LocatorStatus.VOID,
            reconciliation_state=ReconciliationState.VOIDED,
            updated_by=optional_text(updated_by, "updated_by", max_len=50),
            updated_at=self._clock(),
        )
        if not ok:
            raise NotFoundError(f"Locator {record.locator_no} not found")
        logger.info("Locator %s voided by %s", record.locator_no, updated_by)
        return self.get(record.locator_no)
