from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .locators.mysql_locator_repository import MySQLLocatorRepository
from .locators.numbering import ReferenceNumberGenerator
from .locators.service import LocatorService
from .punches.model import PunchMetadata
from .reconciliation.mysql_unit_of_work import mysql_unit_of_work_factory
from .reconciliation.service import ReconciliationOrchestrator
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.resolver import ShiftResolver
from .shifts.mysql_shift_repository import MySQLShiftRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    shifts_repo: MySQLShiftRepository
    schedules_repo: MySQLScheduleRepository
    locators_repo: MySQLLocatorRepository

    resolver: ShiftResolver
    orchestrator: ReconciliationOrchestrator
    locator_service: LocatorService


def build_container(*, db_config: dict, settings: Optional[Any] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    locators_repo = MySQLLocatorRepository(conn)

    resolver = ShiftResolver(employees_repo, schedules_repo, shifts_repo)
    orchestrator = ReconciliationOrchestrator(
        mysql_unit_of_work_factory(conn),
        resolver,
        numbers=ReferenceNumberGenerator(
            type_tag=getattr(settings, "LOCATOR_TYPE_TAG", constants.LOCATOR_TYPE_TAG),
        ),
        metadata=PunchMetadata.synthesized(
            sensor_id=str(getattr(settings, "SYNTH_SENSOR_ID", constants.SYNTH_SENSOR_ID)),
            device_sn=str(getattr(settings, "SYNTH_DEVICE_SN", constants.SYNTH_DEVICE_SN)),
        ),
        conflict_retries=int(getattr(settings, "RECONCILE_CONFLICT_RETRIES", constants.RECONCILE_CONFLICT_RETRIES)),
    )
    locator_service = LocatorService(locators_repo, orchestrator)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        schedules_repo=schedules_repo,
        locators_repo=locators_repo,
        resolver=resolver,
        orchestrator=orchestrator,
        locator_service=locator_service,
    )
