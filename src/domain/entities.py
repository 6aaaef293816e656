"""
Domain Entities Module

Core domain entities using dataclasses for the time-and-attendance system.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class PunchKind(Enum):
    """Declared direction of a clock punch."""
    IN = "in"
    OUT = "out"


class Role(Enum):
    """Role of an employee inside its company."""
    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"

    @classmethod
    def from_str(cls, value: str) -> "Role":
        """Parse a role name, accepting the legacy 'rh' spelling for HR."""
        normalized = (value or "").strip().lower()
        if normalized == "rh":
            return cls.HR
        return cls(normalized)


class AbsenceStatus(Enum):
    """Review state of an absence justification."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class Company:
    """A company as listed in the company directory."""
    id: str
    name: str
    address: str = ""
    tax_id: str = ""


@dataclass
class Employee:
    """
    Represents an employee from the employee directory.

    Attributes:
        id: Employee identifier
        name: Display name
        department: Department name used for company rollups
        role: Role inside the company
        company_id: Owning company
        registration: Badge/registration number printed on reports
    """
    id: str
    name: str
    department: str
    role: Role
    company_id: str
    registration: str = ""


@dataclass(frozen=True)
class PunchEvent:
    """
    A single clock-in/clock-out fact. Never mutated once recorded.

    The timestamp is a naive local wall-clock datetime.
    """
    employee_id: str
    company_id: str
    kind: PunchKind
    timestamp: datetime


@dataclass
class AbsenceRecord:
    """An absence justification submitted by an employee."""
    id: str
    employee_id: str
    company_id: str
    date: date
    reason: str
    document: Optional[str] = None
    status: AbsenceStatus = AbsenceStatus.PENDING


@dataclass(frozen=True)
class Actor:
    """The identity on whose behalf a request is made."""
    employee_id: str
    company_id: str
    role: Role

    @property
    def is_manager(self) -> bool:
        """Admin and HR actors see company-wide data."""
        return self.role in (Role.ADMIN, Role.HR)


@dataclass(frozen=True)
class ReportPeriod:
    """
    A validated report month.

    Attributes:
        year: Report year
        month: Report month (1-12)
        start: First instant of the month (inclusive)
        end: Last second of the month (inclusive)
    """
    year: int
    month: int
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        return f"{self.month:02d}/{self.year}"

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass
class WorkDay:
    """
    One employee's punches on one calendar date.

    Attributes:
        employee_id: Owner of the punches
        date: Civil date of the punches
        events: Punches in ascending timestamp order
        total: Sum of paired durations in hours
        overtime: Hours beyond the standard day
    """
    employee_id: str
    date: date
    events: List[PunchEvent] = field(default_factory=list)
    total: float = 0.0
    overtime: float = 0.0

    @property
    def is_incomplete(self) -> bool:
        return len(self.events) % 2 == 1


@dataclass
class MonthlyBalance:
    """Hour-bank figures for a month, all in signed fractional hours."""
    initial_balance: float = 0.0
    overtime_balance: float = 0.0
    monthly_credits: float = 0.0
    monthly_debits: float = 0.0


@dataclass
class EmployeeMonthlyReport:
    """
    Monthly summary for one employee.

    Warnings are kept in two passes: entry warnings (incomplete days and
    unexpected punch kinds) are produced while pairing, hours warnings after
    every daily total is known.
    """
    employee: Employee
    year: int
    month: int
    work_days: List[WorkDay] = field(default_factory=list)
    total_hours: float = 0.0
    total_overtime: float = 0.0
    balance: MonthlyBalance = field(default_factory=MonthlyBalance)
    entry_warnings: List[str] = field(default_factory=list)
    hours_warnings: List[str] = field(default_factory=list)

    @property
    def employee_id(self) -> str:
        return self.employee.id

    @property
    def warnings(self) -> List[str]:
        return self.entry_warnings + self.hours_warnings


@dataclass
class DepartmentStats:
    """Rollup figures for a single department."""
    employee_count: int = 0
    total_hours: float = 0.0
    total_overtime: float = 0.0
    absences: int = 0


@dataclass
class CompanyMonthlyReport:
    """Company-wide rollup of all employee reports for a period."""
    company_id: str
    year: int
    month: int
    total_employees: int = 0
    total_hours: float = 0.0
    total_overtime: float = 0.0
    absence_count: int = 0
    department_stats: Dict[str, DepartmentStats] = field(default_factory=dict)


@dataclass
class ReportHeader:
    """Metadata printed at the top of every report page."""
    company: Company
    period: ReportPeriod
    generated_at: datetime
    employee: Optional[Employee] = None


@dataclass
class ReportModel:
    """
    Everything a formatter needs to render a monthly report.

    Attributes:
        header: Company, period and (single mode) employee metadata
        employee_reports: One entry in single mode, one per employee otherwise
        company_report: Company rollup, only in company-wide mode
        warnings: All entry warnings followed by all hours warnings
    """
    header: ReportHeader
    employee_reports: List[EmployeeMonthlyReport] = field(default_factory=list)
    company_report: Optional[CompanyMonthlyReport] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def is_company_wide(self) -> bool:
        return self.company_report is not None
