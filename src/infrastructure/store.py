"""
Attendance Store Module

Abstract access to the company directory, employee directory, punch events
and absence records, plus an in-memory implementation.

Timestamps are normalized to naive local wall-clock when they enter a store,
so every fetch compares like with like.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, List, Optional

from domain.entities import (
    AbsenceRecord, AbsenceStatus, Actor, Company, Employee, PunchEvent, PunchKind
)
from domain.errors import StoreError
from domain.period import to_local_wall_clock
from infrastructure.logger import get_logger

logger = get_logger("AttendanceStore")


class AttendanceStore(ABC):
    """Abstract base class for attendance data sources."""

    @abstractmethod
    def fetch_company(self, company_id: str) -> Company:
        """
        Get a company from the company directory.

        Raises:
            StoreError: If the company is unknown or the source is unreadable
        """
        pass

    @abstractmethod
    def fetch_employee(self, employee_id: str) -> Employee:
        """
        Get a single employee.

        Raises:
            StoreError: If the employee is unknown or the source is unreadable
        """
        pass

    @abstractmethod
    def fetch_employees(self, company_id: str) -> List[Employee]:
        """Get every employee of a company in directory order."""
        pass

    @abstractmethod
    def fetch_punch_events(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None
    ) -> List[PunchEvent]:
        """
        Get punches of a company (or one of its employees) within [start, end].

        Returns:
            Punches in ascending timestamp order
        """
        pass

    @abstractmethod
    def fetch_absences(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None
    ) -> List[AbsenceRecord]:
        """Get absences of a company (or one employee) dated within [start, end]."""
        pass

    @abstractmethod
    def record_punch(
        self,
        actor: Actor,
        kind: PunchKind,
        timestamp: Optional[datetime] = None
    ) -> PunchEvent:
        """Record a clock-in/out for the actor. Defaults to the current time."""
        pass

    @abstractmethod
    def add_absence(self, absence: AbsenceRecord) -> AbsenceRecord:
        """Persist a new absence justification."""
        pass

    @abstractmethod
    def list_absences(
        self,
        company_id: str,
        employee_id: Optional[str] = None
    ) -> List[AbsenceRecord]:
        """Get absences of a company (or one employee), newest first."""
        pass

    @abstractmethod
    def update_absence_status(
        self,
        company_id: str,
        absence_id: str,
        status: AbsenceStatus
    ) -> Optional[AbsenceRecord]:
        """
        Set the status of an absence within a company.

        Returns:
            The updated absence, or None if it does not exist in that company
        """
        pass


class InMemoryAttendanceStore(AttendanceStore):
    """
    Attendance store kept in process memory.

    Responsibilities:
    - Hold companies, employees, punches and absences
    - Normalize punch timestamps to local wall-clock on insertion
    - Serve period queries with inclusive bounds
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz
        self._companies: Dict[str, Company] = {}
        self._employees: Dict[str, Employee] = {}
        self._punches: List[PunchEvent] = []
        self._absences: Dict[str, AbsenceRecord] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def add_company(self, company: Company) -> None:
        self._companies[company.id] = company

    def add_employee(self, employee: Employee) -> None:
        self._employees[employee.id] = employee

    def add_punch(self, event: PunchEvent) -> PunchEvent:
        """Insert a punch, normalizing an aware timestamp to local time."""
        if event.timestamp.tzinfo is not None:
            event = PunchEvent(
                employee_id=event.employee_id,
                company_id=event.company_id,
                kind=event.kind,
                timestamp=to_local_wall_clock(event.timestamp, self.tz)
            )
        self._punches.append(event)
        return event

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------
    def fetch_company(self, company_id: str) -> Company:
        company = self._companies.get(company_id)
        if company is None:
            raise StoreError(f"Unknown company: {company_id}")
        return company

    def fetch_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get(employee_id)
        if employee is None:
            raise StoreError(f"Unknown employee: {employee_id}")
        return employee

    def fetch_employees(self, company_id: str) -> List[Employee]:
        return [e for e in self._employees.values() if e.company_id == company_id]

    # ------------------------------------------------------------------
    # Punches
    # ------------------------------------------------------------------
    def fetch_punch_events(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None
    ) -> List[PunchEvent]:
        matches = [
            p for p in self._punches
            if p.company_id == company_id
            and (employee_id is None or p.employee_id == employee_id)
            and start <= p.timestamp <= end
        ]
        return sorted(matches, key=lambda p: p.timestamp)

    def record_punch(
        self,
        actor: Actor,
        kind: PunchKind,
        timestamp: Optional[datetime] = None
    ) -> PunchEvent:
        event = self.add_punch(PunchEvent(
            employee_id=actor.employee_id,
            company_id=actor.company_id,
            kind=kind,
            timestamp=timestamp or datetime.now(self.tz)
        ))
        logger.info(f"Recorded {kind.value} punch for {actor.employee_id} at {event.timestamp}")
        return event

    # ------------------------------------------------------------------
    # Absences
    # ------------------------------------------------------------------
    def fetch_absences(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None
    ) -> List[AbsenceRecord]:
        first_day: date = start.date()
        last_day: date = end.date()
        return [
            a for a in self._absences.values()
            if a.company_id == company_id
            and (employee_id is None or a.employee_id == employee_id)
            and first_day <= a.date <= last_day
        ]

    def add_absence(self, absence: AbsenceRecord) -> AbsenceRecord:
        if not absence.id:
            absence.id = uuid.uuid4().hex
        self._absences[absence.id] = absence
        return absence

    def list_absences(
        self,
        company_id: str,
        employee_id: Optional[str] = None
    ) -> List[AbsenceRecord]:
        matches = [
            a for a in self._absences.values()
            if a.company_id == company_id
            and (employee_id is None or a.employee_id == employee_id)
        ]
        return sorted(matches, key=lambda a: a.date, reverse=True)

    def update_absence_status(
        self,
        company_id: str,
        absence_id: str,
        status: AbsenceStatus
    ) -> Optional[AbsenceRecord]:
        absence = self._absences.get(absence_id)
        if absence is None or absence.company_id != company_id:
            return None
        absence.status = status
        return absence
