from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, List

from ..common.datetime_utils import compose_wall_clock, now_local
from ..core import constants
from ..core.enums import LocatorStatus, ReconciliationOutcome, SlotAction
from ..core.exceptions import ConflictError, NotFoundError, StorageError, TransactionAbortedError, ValidationError
from ..locators.model import AuthorizationRecord, NewLocator
from ..locators.numbering import ReferenceNumberGenerator
from ..punches.model import PunchMetadata
from ..schedules.resolver import ShiftResolver
from ..shifts.model import ShiftSlot
from .matcher import WindowMatcher
from .model import ReconciliationResult, SlotOutcome
from .synthesizer import PunchSynthesizer
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

logger = logging.getLogger(__name__)


class ReconciliationOrchestrator:
    """Create a locator and turn its time window into raw punches.

    Number allocation, the locator insert and every punch insert share one
    unit of work. Each slot runs inside its own savepoint, so a failing slot
    is reported without undoing the locator or the other slots.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        resolver: ShiftResolver,
        *,
        numbers: ReferenceNumberGenerator | None = None,
        matcher: WindowMatcher | None = None,
        metadata: PunchMetadata | None = None,
        conflict_retries: int = constants.RECONCILE_CONFLICT_RETRIES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._uow_factory = uow_factory
        self._resolver = resolver
        self._numbers = numbers or ReferenceNumberGenerator()
        self._matcher = matcher or WindowMatcher()
        self._metadata = metadata or PunchMetadata.synthesized()
        self._conflict_retries = int(conflict_retries)
        self._clock = clock

    def create(self, new: NewLocator) -> ReconciliationResult:
        return self._retrying(lambda: self._create_once(new), f"creation for employee {new.employee_id}")

    def replay(self, locator_no: str) -> ReconciliationResult:
        """Run reconciliation again for an existing active locator.

        Idempotent: punches made by an earlier run come back as skipped.
        """

        return self._retrying(lambda: self._replay_once(locator_no), f"replay of {locator_no}")

    def _retrying(self, run: Callable[[], ReconciliationResult], what: str) -> ReconciliationResult:
        # A retry always starts a fresh unit of work; the failed one is rolled back.
        attempts = 0
        while True:
            try:
                return run()
            except (ConflictError, TransactionAbortedError) as e:
                attempts += 1
                if attempts > self._conflict_retries:
                    logger.error("Locator %s still failing: %s", what, e)
                    raise
                logger.warning("Locator %s hit %s, retrying: %s", what, type(e).__name__, e)

    def _replay_once(self, locator_no: str) -> ReconciliationResult:
        with self._uow_factory() as uow:
            record = uow.locators.get_by_no(locator_no, for_update=True)
            if record is None:
                raise NotFoundError(f"Locator {locator_no} not found")
            if record.status != LocatorStatus.ACTIVE:
                raise ValidationError(f"Locator {locator_no} is {record.status.value} and cannot be reconciled")

            result = self._reconcile(uow, record)
            uow.locators.set_reconciliation(record.locator_uid, state=result.state, outcome=result.outcome)
            uow.commit()

        self._log_summary("replay", result)
        return result

    def _create_once(self, new: NewLocator) -> ReconciliationResult:
        created_at = self._clock()
        with self._uow_factory() as uow:
            number = self._numbers.next_number(uow.sequences, created_at)
            record = AuthorizationRecord(
                locator_uid=str(uuid.uuid4()),
                locator_no=number.text,
                employee_id=new.employee_id,
                locator_date=new.locator_date,
                destination=new.destination,
                purpose=new.purpose,
                departure=new.departure,
                arrival=new.arrival,
                remarks=new.remarks,
                created_by=new.created_by,
                created_at=created_at,
                status=new.status,
            )
            uow.locators.insert(record, seq_date=number.seq_date, seq_no=number.seq_no)
            logger.info("Locator %s created for employee %s on %s", record.locator_no, record.employee_id, record.locator_date)

            result = self._reconcile(uow, record)
            uow.locators.set_reconciliation(record.locator_uid, state=result.state, outcome=result.outcome)
            uow.commit()

        self._log_summary("create", result)
        return result

    def _reconcile(self, uow: UnitOfWork, record: AuthorizationRecord) -> ReconciliationResult:
        def result(outcome, **kwargs) -> ReconciliationResult:
            return ReconciliationResult(
                locator_uid=record.locator_uid,
                locator_no=record.locator_no,
                outcome=outcome,
                **kwargs,
            )

        if not record.has_time_range:
            logger.info("Locator %s has no departure/arrival; reconciliation skipped", record.locator_no)
            return result(ReconciliationOutcome.NO_TIME_RANGE, detail="no departure/arrival time")

        resolution = self._resolver.resolve(employee_id=record.employee_id, work_date=record.locator_date)
        if not resolution.resolved:
            logger.warning(
                "Locator %s: no shift for employee %s on %s (%s)",
                record.locator_no, record.employee_id, record.locator_date, resolution.reason,
            )
            return result(ReconciliationOutcome.NO_SHIFT_ASSIGNED, detail=resolution.reason)

        slots = resolution.shift.active_slots()
        matched = self._matcher.match(record.departure, record.arrival, slots)
        for slot in slots:
            logger.debug(
                "Locator %s: slot %s at %s %s window %s-%s",
                record.locator_no, slot.kind.value, slot.nominal,
                "inside" if slot in matched else "outside", record.departure, record.arrival,
            )
        if not matched:
            return result(
                ReconciliationOutcome.NO_OVERLAP,
                resolved_slots=slots,
                detail=f"shift {resolution.shift.shift_name} has no slot in window",
            )

        synthesizer = PunchSynthesizer(uow.punches, metadata=self._metadata, conflict_retries=self._conflict_retries)
        outcomes: List[SlotOutcome] = []
        for i, slot in enumerate(matched):
            outcomes.append(self._run_slot(uow, synthesizer, record, slot, savepoint=f"slot_{i}"))

        return result(
            ReconciliationOutcome.MATCHED,
            resolved_slots=slots,
            matched=tuple(matched),
            slot_outcomes=tuple(outcomes),
            detail=f"shift {resolution.shift.shift_name}",
        )

    def _run_slot(
        self,
        uow: UnitOfWork,
        synthesizer: PunchSynthesizer,
        record: AuthorizationRecord,
        slot: ShiftSlot,
        *,
        savepoint: str,
    ) -> SlotOutcome:
        try:
            with uow.savepoint(savepoint):
                return synthesizer.synthesize(
                    employee_id=record.employee_id,
                    locator_date=record.locator_date,
                    slot=slot,
                )
        except TransactionAbortedError:
            raise
        except (ConflictError, StorageError) as e:
            logger.error("Locator %s: slot %s failed: %s", record.locator_no, slot.kind.value, e)
            return SlotOutcome(
                slot=slot,
                check_time=compose_wall_clock(record.locator_date, slot.nominal),
                action=SlotAction.FAILED,
                error=str(e),
            )

    @staticmethod
    def _log_summary(action: str, result: ReconciliationResult) -> None:
        logger.info(
            "Reconciliation %s %s: outcome=%s state=%s matched=%d created=%d skipped=%d failed=%d",
            action,
            result.locator_no,
            result.outcome.value,
            result.state.value,
            len(result.matched),
            len(result.created),
            len(result.skipped),
            len(result.failed),
        )

