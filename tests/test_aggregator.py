"""
Unit tests for monthly aggregation and the company rollup.
"""

import pytest
from datetime import date, datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import WorkRules
from domain.aggregator import MonthlyAggregator, concatenate_warnings, group_by_day
from domain.entities import AbsenceRecord, Employee, PunchEvent, PunchKind, Role
from domain.period import parse_period
from domain.sorting import sort_employee_reports

PERIOD = parse_period(3, 2025)


def employee(emp_id, name, department="Sales"):
    return Employee(id=emp_id, name=name, department=department, role=Role.EMPLOYEE, company_id="c1")


def punches(emp_id, day, *times, company_id="c1"):
    result = []
    for index, value in enumerate(times):
        hour, minute = (int(part) for part in value.split(':'))
        kind = PunchKind.IN if index % 2 == 0 else PunchKind.OUT
        result.append(PunchEvent(emp_id, company_id, kind, datetime(2025, 3, day, hour, minute)))
    return result


class TestGroupByDay:
    """Tests for group_by_day."""

    def test_buckets_sorted_by_date_and_time(self):
        events = punches("e1", 5, "13:00", "09:00") + punches("e1", 3, "09:00", "17:00")
        grouped = group_by_day(events, timezone.utc)

        assert list(grouped) == [date(2025, 3, 3), date(2025, 3, 5)]
        assert [e.timestamp.hour for e in grouped[date(2025, 3, 5)]] == [9, 13]

    def test_aware_events_use_configured_zone(self):
        late_utc = PunchEvent("e1", "c1", PunchKind.IN, datetime(2025, 3, 4, 1, 0, tzinfo=timezone.utc))
        grouped = group_by_day([late_utc], ZoneInfo("America/Sao_Paulo"))

        assert list(grouped) == [date(2025, 3, 3)]


class TestEmployeeReport:
    """Tests for MonthlyAggregator.build_employee_report."""

    def test_single_day_eight_hours(self):
        report = MonthlyAggregator().build_employee_report(
            employee("e1", "Ana"), punches("e1", 3, "09:00", "17:00"), PERIOD
        )

        assert report.total_hours == 8.0
        assert report.total_overtime == 0.0
        assert report.warnings == []
        assert len(report.work_days) == 1

    def test_totals_across_days(self):
        events = (
            punches("e1", 3, "09:00", "13:00", "14:00", "19:00")
            + punches("e1", 4, "09:00", "17:00")
        )
        report = MonthlyAggregator().build_employee_report(employee("e1", "Ana"), events, PERIOD)

        assert report.total_hours == 17.0
        assert report.total_overtime == 1.0
        assert report.balance.monthly_debits == 159.0
        assert report.balance.monthly_credits == 0.0
        assert report.balance.overtime_balance == 1.0
        assert report.balance.initial_balance == 17.0 - 176.0 - 1.0

    def test_warning_passes_are_ordered(self):
        """Incomplete-entry warnings come before excessive-hours warnings."""
        events = (
            punches("e1", 3, "06:00", "19:00")          # 13h, excessive
            + punches("e1", 4, "09:00", "12:00", "13:00")  # incomplete
        )
        report = MonthlyAggregator().build_employee_report(employee("e1", "Ana"), events, PERIOD)

        assert report.warnings == [
            "incomplete entry on day 04/03/2025 for Ana",
            "excessive hours (13.00h) on day 03/03/2025 for Ana",
        ]

    def test_empty_period_yields_zero_report(self):
        report = MonthlyAggregator().build_employee_report(employee("e1", "Ana"), [], PERIOD)

        assert report.total_hours == 0.0
        assert report.work_days == []
        assert report.warnings == []

    def test_strict_policy_from_rules(self):
        events = [
            PunchEvent("e1", "c1", PunchKind.OUT, datetime(2025, 3, 3, 9, 0)),
            PunchEvent("e1", "c1", PunchKind.OUT, datetime(2025, 3, 3, 17, 0)),
        ]
        aggregator = MonthlyAggregator(WorkRules(pairing_policy="strict"))
        report = aggregator.build_employee_report(employee("e1", "Ana"), events, PERIOD)

        assert report.total_hours == 8.0
        assert report.entry_warnings == ["unexpected out punch at 09:00 on day 03/03/2025 for Ana"]


class TestAggregate:
    """Tests for MonthlyAggregator.aggregate."""

    def test_company_with_two_departments(self):
        employees = [
            employee("e1", "Ana", "Sales"),
            employee("e2", "Bruno", "Finance"),
            employee("e3", "Carla", "Sales"),
        ]
        events = (
            punches("e1", 3, "09:00", "17:00")
            + punches("e2", 3, "08:00", "18:00")
            + punches("e3", 4, "09:00", "13:00")
        )
        absences = [
            AbsenceRecord("a1", "e2", "c1", date(2025, 3, 10), "Doctor"),
            AbsenceRecord("a2", "e2", "c1", date(2025, 4, 1), "Out of period"),
        ]
        result = MonthlyAggregator().aggregate("c1", PERIOD, employees, events, absences)
        company = result.company_report

        assert company.total_employees == 3
        assert company.total_hours == 22.0
        assert company.total_overtime == 2.0
        assert company.absence_count == 1
        assert set(company.department_stats) == {"Sales", "Finance"}

        sales = company.department_stats["Sales"]
        assert sales.employee_count == 2
        assert sales.total_hours == 12.0
        assert sales.total_overtime == 0.0
        assert sales.absences == 0

        finance = company.department_stats["Finance"]
        assert finance.employee_count == 1
        assert finance.total_hours == 10.0
        assert finance.total_overtime == 2.0
        assert finance.absences == 1

    def test_single_mode_has_no_company_report(self):
        result = MonthlyAggregator().aggregate(
            "c1", PERIOD, [employee("e1", "Ana")], punches("e1", 3, "09:00", "17:00")
        )
        assert result.company_report is None
        assert len(result.employee_reports) == 1

    def test_events_of_other_companies_are_excluded(self):
        events = punches("e1", 3, "09:00", "17:00") + punches("e1", 4, "09:00", "17:00", company_id="c2")
        result = MonthlyAggregator().aggregate("c1", PERIOD, [employee("e1", "Ana")], events)

        assert result.employee_reports[0].total_hours == 8.0

    def test_events_outside_period_are_excluded(self):
        stray = PunchEvent("e1", "c1", PunchKind.IN, datetime(2025, 4, 1, 0, 0))
        result = MonthlyAggregator().aggregate(
            "c1", PERIOD, [employee("e1", "Ana")], punches("e1", 3, "09:00", "17:00") + [stray]
        )
        assert result.employee_reports[0].warnings == []

    def test_last_second_of_month_is_included(self):
        events = [
            PunchEvent("e1", "c1", PunchKind.IN, datetime(2025, 3, 31, 23, 0, 0)),
            PunchEvent("e1", "c1", PunchKind.OUT, datetime(2025, 3, 31, 23, 59, 59)),
        ]
        result = MonthlyAggregator().aggregate("c1", PERIOD, [employee("e1", "Ana")], events)
        assert result.employee_reports[0].total_hours == pytest.approx(3599 / 3600)

    def test_unknown_employee_events_are_ignored(self):
        events = punches("ghost", 3, "09:00", "17:00")
        result = MonthlyAggregator().aggregate("c1", PERIOD, [employee("e1", "Ana")], events, [])
        assert result.company_report.total_hours == 0.0

    def test_report_warnings_group_passes_across_employees(self):
        employees = [employee("e1", "Ana"), employee("e2", "Bruno")]
        events = (
            punches("e1", 3, "06:00", "20:00")
            + punches("e2", 3, "09:00")
        )
        result = MonthlyAggregator().aggregate("c1", PERIOD, employees, events, [])

        assert result.warnings == [
            "incomplete entry on day 03/03/2025 for Bruno",
            "excessive hours (14.00h) on day 03/03/2025 for Ana",
        ]


class TestSorting:
    """Tests for sort_employee_reports and warning concatenation."""

    def _reports(self):
        aggregator = MonthlyAggregator()
        return [
            aggregator.build_employee_report(employee("e1", "carla", "Sales"), punches("e1", 3, "09:00", "10:00"), PERIOD),
            aggregator.build_employee_report(employee("e2", "Ana", "Finance"), punches("e2", 3, "09:00", "17:00"), PERIOD),
            aggregator.build_employee_report(employee("e3", "Bruno", "Sales"), punches("e3", 3, "09:00", "12:00"), PERIOD),
        ]

    def test_sort_by_name_is_case_insensitive(self):
        names = [r.employee.name for r in sort_employee_reports(self._reports(), "name")]
        assert names == ["Ana", "Bruno", "carla"]

    def test_sort_by_total_hours_descending(self):
        names = [r.employee.name for r in sort_employee_reports(self._reports(), "total_hours")]
        assert names == ["Ana", "Bruno", "carla"]
        assert [r.total_hours for r in sort_employee_reports(self._reports(), "total_hours")] == [8.0, 3.0, 1.0]

    def test_sort_by_department(self):
        names = [r.employee.name for r in sort_employee_reports(self._reports(), "department")]
        assert names == ["Ana", "Bruno", "carla"]

    def test_concatenate_empty(self):
        assert concatenate_warnings([]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
