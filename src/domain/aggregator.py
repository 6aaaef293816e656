"""
Aggregator Module

Folds raw punch events into per-employee monthly reports and the
company-wide department rollup.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from .attendance_logic import (
    DEFAULT_DATE_FORMAT, PairingStrategyFactory, build_work_day, find_excessive_days
)
from .balance import BalanceCalculator
from .entities import (
    AbsenceRecord, CompanyMonthlyReport, DepartmentStats, Employee,
    EmployeeMonthlyReport, PunchEvent, ReportPeriod
)
from .period import civil_date, to_local_wall_clock
from config.config_manager import WorkRules
from infrastructure.logger import get_logger

logger = get_logger("Aggregator")


@dataclass
class AggregationResult:
    """Employee reports, optional company rollup and ordered warnings."""
    employee_reports: List[EmployeeMonthlyReport] = field(default_factory=list)
    company_report: Optional[CompanyMonthlyReport] = None
    warnings: List[str] = field(default_factory=list)


def group_by_day(events: Iterable[PunchEvent], tz: tzinfo) -> Dict[date, List[PunchEvent]]:
    """
    Bucket punches by civil date, ascending by date and timestamp.

    Args:
        events: Punches of a single employee
        tz: Timezone defining the civil date

    Returns:
        Ordered mapping of date to that day's punches
    """
    buckets: Dict[date, List[PunchEvent]] = defaultdict(list)
    for event in sorted(events, key=lambda e: e.timestamp):
        buckets[civil_date(event.timestamp, tz)].append(event)
    return {day: buckets[day] for day in sorted(buckets)}


def concatenate_warnings(reports: Sequence[EmployeeMonthlyReport]) -> List[str]:
    """All entry warnings of every employee, then all hours warnings."""
    entry_warnings = [w for report in reports for w in report.entry_warnings]
    hours_warnings = [w for report in reports for w in report.hours_warnings]
    return entry_warnings + hours_warnings


class MonthlyAggregator:
    """
    Builds monthly reports from a snapshot of punches.

    Holds only configuration; every call works on its own inputs, so one
    instance can serve concurrent report requests.
    """

    def __init__(
        self,
        rules: WorkRules = None,
        tz: tzinfo = timezone.utc,
        date_format: str = DEFAULT_DATE_FORMAT
    ):
        self.rules = rules or WorkRules()
        self.tz = tz
        self.date_format = date_format
        self.strategy = PairingStrategyFactory.get_strategy(self.rules.pairing_policy)
        self.balance_calculator = BalanceCalculator(self.rules)

    def build_employee_report(
        self,
        employee: Employee,
        events: Sequence[PunchEvent],
        period: ReportPeriod
    ) -> EmployeeMonthlyReport:
        """
        Calculate a complete monthly report for one employee.

        Args:
            employee: The employee
            events: The employee's punches within the period
            period: Report period

        Returns:
            EmployeeMonthlyReport with days, totals, balance and warnings
        """
        work_days = []
        entry_warnings: List[str] = []
        for day, day_events in group_by_day(events, self.tz).items():
            work_day, day_warnings = build_work_day(
                employee, day, day_events, self.rules,
                strategy=self.strategy,
                date_format=self.date_format
            )
            work_days.append(work_day)
            entry_warnings.extend(day_warnings)

        total_hours = sum(day.total for day in work_days)
        total_overtime = sum(day.overtime for day in work_days)
        hours_warnings = find_excessive_days(employee, work_days, self.rules, self.date_format)

        return EmployeeMonthlyReport(
            employee=employee,
            year=period.year,
            month=period.month,
            work_days=work_days,
            total_hours=total_hours,
            total_overtime=total_overtime,
            balance=self.balance_calculator.calculate(total_hours, total_overtime),
            entry_warnings=entry_warnings,
            hours_warnings=hours_warnings
        )

    def build_company_report(
        self,
        company_id: str,
        period: ReportPeriod,
        reports: Sequence[EmployeeMonthlyReport],
        absences: Sequence[AbsenceRecord]
    ) -> CompanyMonthlyReport:
        """
        Roll employee reports up by department.

        Absences are counted once per company for the period; each one is
        also attributed to the absent employee's department when known.
        """
        period_absences = [
            a for a in absences
            if a.company_id == company_id and period.start.date() <= a.date <= period.end.date()
        ]
        department_of = {r.employee_id: r.employee.department for r in reports}

        stats: Dict[str, DepartmentStats] = {}
        for report in reports:
            current = stats.get(report.employee.department, DepartmentStats())
            stats[report.employee.department] = DepartmentStats(
                employee_count=current.employee_count + 1,
                total_hours=current.total_hours + report.total_hours,
                total_overtime=current.total_overtime + report.total_overtime,
                absences=current.absences
            )
        for absence in period_absences:
            department = department_of.get(absence.employee_id)
            if department is not None:
                stats[department].absences += 1

        return CompanyMonthlyReport(
            company_id=company_id,
            year=period.year,
            month=period.month,
            total_employees=len(reports),
            total_hours=sum(r.total_hours for r in reports),
            total_overtime=sum(r.total_overtime for r in reports),
            absence_count=len(period_absences),
            department_stats=stats
        )

    def aggregate(
        self,
        company_id: str,
        period: ReportPeriod,
        employees: Sequence[Employee],
        events: Sequence[PunchEvent],
        absences: Optional[Sequence[AbsenceRecord]] = None
    ) -> AggregationResult:
        """
        Aggregate a period's punches for the given employees.

        A company rollup is produced whenever absences are supplied (company
        mode); pass None for a single-employee run.

        Args:
            company_id: Company the report is scoped to
            period: Report period
            employees: Employees to report on, in output order
            events: Punches fetched for the period
            absences: Company absences for the period, or None in single mode

        Returns:
            AggregationResult with reports, rollup and concatenated warnings
        """
        known_ids = {employee.id for employee in employees}
        events_by_employee: Dict[str, List[PunchEvent]] = defaultdict(list)
        for event in events:
            if event.company_id != company_id:
                logger.debug(f"Skipping punch of company {event.company_id} in report for {company_id}")
                continue
            if not period.contains(to_local_wall_clock(event.timestamp, self.tz)):
                continue
            if event.employee_id not in known_ids:
                logger.warning(f"Punch for unknown employee {event.employee_id} ignored")
                continue
            events_by_employee[event.employee_id].append(event)

        reports = [
            self.build_employee_report(employee, events_by_employee.get(employee.id, []), period)
            for employee in employees
        ]

        company_report = None
        if absences is not None:
            company_report = self.build_company_report(company_id, period, reports, absences)

        return AggregationResult(
            employee_reports=reports,
            company_report=company_report,
            warnings=concatenate_warnings(reports)
        )
