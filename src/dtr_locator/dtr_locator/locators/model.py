from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import LocatorStatus, ReconciliationOutcome, ReconciliationState


@dataclass(frozen=True)
class NewLocator:
    """Validated input for creating an authorization record."""

    employee_id: int
    locator_date: str
    destination: Optional[str] = None
    purpose: Optional[str] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    status: LocatorStatus = LocatorStatus.ACTIVE


@dataclass(frozen=True)
class AuthorizationRecord:
    """Domain entity: an out-of-office authorization ("locator").

    `locator_date` is `YYYY-MM-DD`; `departure`/`arrival` are `HH:MM:SS`
    wall-clock strings or None when the entry carries no time range.
    """

    locator_uid: str
    locator_no: str
    employee_id: int
    locator_date: str
    destination: Optional[str]
    purpose: Optional[str]
    departure: Optional[str]
    arrival: Optional[str]
    remarks: Optional[str]
    created_by: Optional[str]
    created_at: datetime
    status: LocatorStatus = LocatorStatus.ACTIVE
    reconciliation_state: ReconciliationState = ReconciliationState.CREATED
    last_outcome: Optional[ReconciliationOutcome] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    employee_name: Optional[str] = None

    @property
    def has_time_range(self) -> bool:
        return bool(self.departure) and bool(self.arrival)

    def to_dict(self) -> dict:
        return {
            "locator_uid": self.locator_uid,
            "locator_no": self.locator_no,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "locator_date": self.locator_date,
            "destination": self.destination,
            "purpose": self.purpose,
            "departure": self.departure[:5] if self.departure else None,
            "arrival": self.arrival[:5] if self.arrival else None,
            "remarks": self.remarks,
            "created_by": self.created_by,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "status": self.status.value,
            "reconciliation_state": self.reconciliation_state.value,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "updated_by": self.updated_by,
            "updated_at": self.updated_at.strftime("%Y-%m-%d %H:%M:%S") if self.updated_at else None,
        }


@dataclass(frozen=True)
class LocatorFilter:
    employee_search: Optional[str] = None
    locator_no_search: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    destination_search: Optional[str] = None
    purpose_search: Optional[str] = None


@dataclass(frozen=True)
class LocatorPage:
    items: list = field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size

    def to_dict(self) -> dict:
        return {
            "data": [r.to_dict() for r in self.items],
            "pagination": {
                "page": self.page,
                "page_size": self.page_size,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }
