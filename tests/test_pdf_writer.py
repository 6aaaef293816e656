"""
Unit tests for PdfWriter and filename formatting.
"""

import pytest
from datetime import date, datetime
from pathlib import Path
import tempfile

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.aggregator import MonthlyAggregator
from domain.entities import (
    AbsenceRecord, Company, Employee, PunchEvent, PunchKind, ReportHeader, ReportModel, Role
)
from domain.period import parse_period
from infrastructure.pdf_writer import PdfWriter, format_filename, AttendancePdf

PERIOD = parse_period(3, 2025)
COMPANY = Company("c1", "Acme Ltda", "Rua A, 1", "00.000/0001-00")
ANA = Employee("e1", "Ana Souza", "Sales", Role.EMPLOYEE, "c1", registration="0042")
BRUNO = Employee("e2", "Bruno", "Finance", Role.HR, "c1")


def punch(emp_id, day, hour, minute, kind):
    return PunchEvent(emp_id, "c1", kind, datetime(2025, 3, day, hour, minute))


def build_model(company_wide: bool) -> ReportModel:
    events = [
        punch("e1", 3, 9, 0, PunchKind.IN), punch("e1", 3, 18, 30, PunchKind.OUT),
        punch("e1", 4, 9, 0, PunchKind.IN),
        punch("e2", 3, 6, 0, PunchKind.IN), punch("e2", 3, 20, 0, PunchKind.OUT),
    ]
    employees = [ANA, BRUNO] if company_wide else [ANA]
    absences = [AbsenceRecord("a1", "e1", "c1", date(2025, 3, 12), "Medical")] if company_wide else None
    result = MonthlyAggregator().aggregate("c1", PERIOD, employees, events, absences)
    return ReportModel(
        header=ReportHeader(
            company=COMPANY,
            period=PERIOD,
            generated_at=datetime(2025, 4, 1, 8, 0),
            employee=None if company_wide else ANA
        ),
        employee_reports=result.employee_reports,
        company_report=result.company_report,
        warnings=result.warnings
    )


class TestFormatFilename:
    """Tests for format_filename utility function."""

    def test_basic_formatting(self):
        result = format_filename("Report_{year}_{month}.pdf", 2025, 12)
        assert result == "Report_2025_12.pdf"

    def test_month_padding(self):
        result = format_filename("Report_{year}_{month}.pdf", 2025, 1)
        assert result == "Report_2025_01.pdf"

    def test_non_ascii_pattern(self):
        result = format_filename("Relatório_{year}_{month}.pdf", 2026, 6)
        assert result == "Relatório_2026_06.pdf"


class TestPdfWriter:
    """Tests for PdfWriter class."""

    def test_single_employee_report(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "nested" / "ana.pdf"
            PdfWriter().create_report(build_model(company_wide=False), output_path)

            assert output_path.exists()
            assert output_path.read_bytes().startswith(b"%PDF")

    def test_company_report(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "company.pdf"
            result = PdfWriter(date_format="%Y-%m-%d").create_report(build_model(company_wide=True), output_path)

            assert result == output_path
            assert output_path.stat().st_size > 0

    def test_empty_report_still_renders(self):
        model = ReportModel(
            header=ReportHeader(company=COMPANY, period=PERIOD, generated_at=datetime(2025, 4, 1)),
            employee_reports=[],
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "empty.pdf"
            PdfWriter().create_report(model, output_path)
            assert output_path.exists()

    def test_missing_custom_font_falls_back(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "fallback.pdf"
            PdfWriter(custom_font_path=str(Path(tmpdir) / "missing.ttf")).create_report(
                build_model(company_wide=False), output_path
            )
            assert output_path.exists()


class TestFooterLine:
    """Tests for the balance/totals footer line."""

    def test_single_footer_shows_balance(self):
        line = PdfWriter()._footer_line(build_model(company_wide=False))

        # 9.5h worked against 176h expected
        assert "Month debits: 166:30" in line
        assert "Month credits: 00:00" in line
        assert "Hours bank: 01:30" in line

    def test_company_footer_shows_totals(self):
        line = PdfWriter()._footer_line(build_model(company_wide=True))

        assert "Employees: 2" in line
        assert "Total hours: 23:30" in line
        assert "Absences: 1" in line


class TestAttendancePdf:
    """Tests for AttendancePdf helpers."""

    def test_safe_text_replaces_non_latin1(self):
        header = ReportHeader(company=COMPANY, period=PERIOD, generated_at=datetime(2025, 4, 1))
        pdf = AttendancePdf(header)

        assert pdf.font_family_name == "Helvetica"
        assert pdf.safe_text("João") == "João"
        assert pdf.safe_text("出勤") == "??"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
