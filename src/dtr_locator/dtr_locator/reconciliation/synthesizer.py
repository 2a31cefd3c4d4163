from __future__ import annotations

import logging
from dataclasses import replace

from ..common.datetime_utils import compose_wall_clock
from ..core import constants
from ..core.enums import SlotAction
from ..core.exceptions import ConflictError
from ..punches.model import AttendancePunch, PunchMetadata
from ..punches.repository import PunchRepository
from ..shifts.model import ShiftSlot
from .model import SlotOutcome

logger = logging.getLogger(__name__)


class PunchSynthesizer:
    """Create the raw punch for one matched slot, at most once.

    Every synthesized punch uses the single "in" check type whatever the
    slot kind, and carries the sentinel metadata that marks it as engine-made.
    """

    def __init__(
        self,
        punches: PunchRepository,
        *,
        metadata: PunchMetadata | None = None,
        conflict_retries: int = constants.RECONCILE_CONFLICT_RETRIES,
    ):
        self._punches = punches
        self._metadata = metadata or PunchMetadata.synthesized()
        self._conflict_retries = int(conflict_retries)

    def synthesize(self, *, employee_id: int, locator_date: str, slot: ShiftSlot) -> SlotOutcome:
        check_time = compose_wall_clock(locator_date, slot.nominal)
        attempts = 0
        while True:
            existing = self._punches.find(employee_id=employee_id, check_time=check_time)
            if existing is not None:
                logger.info(
                    "Slot %s: punch exists for employee %s at %s (synthesized=%s), skipping",
                    slot.kind.value, employee_id, check_time, existing.synthesized,
                )
                return SlotOutcome(slot=slot, check_time=check_time, action=SlotAction.SKIPPED_DUPLICATE, punch=existing)

            punch = AttendancePunch(
                employee_id=employee_id,
                check_time=check_time,
                check_type=constants.SYNTH_CHECK_TYPE,
                metadata=self._metadata,
                synthesized=True,
            )
            try:
                punch_id = self._punches.insert(punch)
            except ConflictError:
                # A concurrent run inserted the same key between our lookup
                # and insert; look again so it reports as a duplicate.
                attempts += 1
                if attempts > self._conflict_retries:
                    raise
                logger.warning("Slot %s: insert conflict at %s, retrying", slot.kind.value, check_time)
                continue

            logger.info("Slot %s: created punch %s for employee %s at %s", slot.kind.value, punch_id, employee_id, check_time)
            return SlotOutcome(
                slot=slot,
                check_time=check_time,
                action=SlotAction.CREATED,
                punch=replace(punch, punch_id=punch_id),
            )
