from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core import constants


@dataclass(frozen=True)
class PunchMetadata:
    """Device metadata carried by a raw attendance punch."""

    verify_code: int
    sensor_id: str
    memo: Optional[str]
    work_code: str
    device_sn: str
    user_ext_fmt: int

    @classmethod
    def synthesized(
        cls,
        *,
        sensor_id: str = constants.SYNTH_SENSOR_ID,
        device_sn: str = constants.SYNTH_DEVICE_SN,
    ) -> "PunchMetadata":
        """Sentinel metadata marking a punch as engine-made."""

        return cls(
            verify_code=constants.SYNTH_VERIFY_CODE,
            sensor_id=sensor_id,
            memo=None,
            work_code=constants.SYNTH_WORK_CODE,
            device_sn=device_sn,
            user_ext_fmt=constants.SYNTH_USER_EXT_FMT,
        )


@dataclass(frozen=True)
class AttendancePunch:
    """Domain entity: one row of the raw attendance log.

    `check_time` is a `YYYY-MM-DD HH:MM:SS` wall-clock literal. It is stored
    and compared as-is and never passed through a timezone.
    """

    employee_id: int
    check_time: str
    check_type: str
    metadata: PunchMetadata
    synthesized: bool = False
    punch_id: Optional[int] = None
