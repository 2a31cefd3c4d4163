from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import LocatorStatus, ReconciliationOutcome, ReconciliationState
from .model import AuthorizationRecord, LocatorFilter


class LocatorRepository(Protocol):
    def insert(self, record: AuthorizationRecord, *, seq_date: date, seq_no: int) -> None:
        """Raises ConflictError when (seq_date, seq_no) is already taken."""

        raise NotImplementedError

    def get_by_no(self, locator_no: str, *, for_update: bool = False) -> Optional[AuthorizationRecord]:
        raise NotImplementedError

    def list_page(
        self, *, filters: LocatorFilter, offset: int, limit: int
    ) -> Tuple[Sequence[AuthorizationRecord], int]:
        """Return (rows, total matching rows)."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def count_active_for_employee_date(self, *, employee_id: int, locator_date: str) -> int:
        raise NotImplementedError

    def monthly_counts(self, *, since: date) -> Sequence[dict]:
        raise NotImplementedError

    def update_details(self, locator_no: str, *, changes: dict, updated_by: Optional[str], updated_at) -> bool:
        raise NotImplementedError

    def set_status(
        self,
        locator_no: str,
        *,
        status: LocatorStatus,
        reconciliation_state: ReconciliationState,
        updated_by: Optional[str],
        updated_at,
    ) -> bool:
        raise NotImplementedError

    def set_reconciliation(
        self,
        locator_uid: str,
        *,
        state: ReconciliationState,
        outcome: Optional[ReconciliationOutcome],
    ) -> None:
        raise NotImplementedError


class SequenceRepository(Protocol):
    def allocate(self, seq_date: date) -> int:
        """Reserve and return the next per-day sequence number.

        Must be called inside a transaction; the counter row stays locked
        until that transaction ends.
        """

        raise NotImplementedError
