"""
Excel Writer Module

Exports a ReportModel to a styled Excel workbook: one summary row per
employee, one row per worked day, the department rollup and the warnings.
"""

from pathlib import Path
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from domain.balance import format_hours
from domain.entities import ReportModel
from infrastructure.logger import get_logger

logger = get_logger("ExcelWriter")


class ExcelWriter:
    """
    Generates formatted Excel attendance reports.

    Sheets:
    - Summary: header block + per-employee totals and balance
    - Daily: employee, date, punches, total and overtime per worked day
    - Departments: department rollup (company-wide reports only)
    - Warnings: concatenated warnings in report order
    """

    COLORS = {
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
        'overtime': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'warning': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    SUMMARY_HEADERS = [
        "Employee", "Department", "Role", "Total Hours", "Overtime",
        "Initial Balance", "Hours Bank", "Credits", "Debits", "Warnings",
    ]
    DAILY_HEADERS = ["Employee", "Date", "Punches", "Total (h)", "Overtime (h)"]
    DEPARTMENT_HEADERS = ["Department", "Employees", "Total Hours", "Overtime", "Absences"]

    def __init__(self, date_format: str = "%d/%m/%Y"):
        self.date_format = date_format
        self.wb: Optional[Workbook] = None

    def create_report(self, model: ReportModel, output_path: Path) -> Path:
        """
        Create a complete attendance workbook.

        Args:
            model: Computed report model
            output_path: Path to save the Excel file

        Returns:
            Path to the created file
        """
        self.wb = Workbook()
        summary = self.wb.active
        summary.title = "Summary"

        self._write_summary(summary, model)
        self._write_daily(self.wb.create_sheet("Daily"), model)
        if model.is_company_wide:
            self._write_departments(self.wb.create_sheet("Departments"), model)
        self._write_warnings(self.wb.create_sheet("Warnings"), model.warnings)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Excel report saved: {output_path}")
        return output_path

    @staticmethod
    def _cell(ws: Worksheet, row: int, column: int, value=None):
        """Write a cell, storing text that starts with '=' as a literal string."""
        cell = ws.cell(row=row, column=column, value=value)
        if isinstance(value, str) and value.startswith("="):
            cell.data_type = "s"
        return cell

    def _write_header_row(self, ws: Worksheet, row: int, headers: List[str]) -> None:
        for col, title in enumerate(headers, start=1):
            cell = self._cell(ws, row=row, column=col, value=title)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.COLORS['header']
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER
            ws.column_dimensions[get_column_letter(col)].width = max(14, len(title) + 4)

    def _write_summary(self, ws: Worksheet, model: ReportModel) -> None:
        header = model.header
        self._cell(ws, row=1, column=1, value="Company").font = Font(bold=True)
        self._cell(ws, row=1, column=2, value=header.company.name)
        self._cell(ws, row=2, column=1, value="Address").font = Font(bold=True)
        self._cell(ws, row=2, column=2, value=header.company.address)
        self._cell(ws, row=3, column=1, value="Tax ID").font = Font(bold=True)
        self._cell(ws, row=3, column=2, value=header.company.tax_id)
        self._cell(ws, row=4, column=1, value="Period").font = Font(bold=True)
        self._cell(ws, row=4, column=2, value=header.period.label)

        start_row = 6
        self._write_header_row(ws, start_row, self.SUMMARY_HEADERS)
        for offset, report in enumerate(model.employee_reports, start=1):
            balance = report.balance
            values = [
                report.employee.name,
                report.employee.department,
                report.employee.role.value,
                round(report.total_hours, 2),
                round(report.total_overtime, 2),
                format_hours(balance.initial_balance),
                format_hours(balance.overtime_balance),
                format_hours(balance.monthly_credits),
                format_hours(balance.monthly_debits),
                len(report.warnings),
            ]
            for col, value in enumerate(values, start=1):
                cell = self._cell(ws, row=start_row + offset, column=col, value=value)
                cell.border = self.BORDER
            if report.warnings:
                self._cell(ws, row=start_row + offset, column=len(values)).fill = self.COLORS['warning']

    def _write_daily(self, ws: Worksheet, model: ReportModel) -> None:
        self._write_header_row(ws, 1, self.DAILY_HEADERS)
        ws.column_dimensions['C'].width = 48
        row = 2
        for report in model.employee_reports:
            for work_day in report.work_days:
                punches = " / ".join(e.timestamp.strftime('%H:%M') for e in work_day.events)
                values = [
                    report.employee.name,
                    work_day.date.strftime(self.date_format),
                    punches,
                    round(work_day.total, 2),
                    round(work_day.overtime, 2),
                ]
                for col, value in enumerate(values, start=1):
                    self._cell(ws, row=row, column=col, value=value).border = self.BORDER
                if work_day.overtime > 0:
                    self._cell(ws, row=row, column=5).fill = self.COLORS['overtime']
                row += 1

    def _write_departments(self, ws: Worksheet, model: ReportModel) -> None:
        company = model.company_report
        self._write_header_row(ws, 1, self.DEPARTMENT_HEADERS)
        row = 2
        for department, stats in company.department_stats.items():
            values = [
                department,
                stats.employee_count,
                round(stats.total_hours, 2),
                round(stats.total_overtime, 2),
                stats.absences,
            ]
            for col, value in enumerate(values, start=1):
                self._cell(ws, row=row, column=col, value=value).border = self.BORDER
            row += 1

        self._cell(ws, row=row + 1, column=1, value="Total employees").font = Font(bold=True)
        self._cell(ws, row=row + 1, column=2, value=company.total_employees)
        self._cell(ws, row=row + 2, column=1, value="Total hours").font = Font(bold=True)
        self._cell(ws, row=row + 2, column=2, value=round(company.total_hours, 2))
        self._cell(ws, row=row + 3, column=1, value="Total overtime").font = Font(bold=True)
        self._cell(ws, row=row + 3, column=2, value=round(company.total_overtime, 2))
        self._cell(ws, row=row + 4, column=1, value="Absences").font = Font(bold=True)
        self._cell(ws, row=row + 4, column=2, value=company.absence_count)

    def _write_warnings(self, ws: Worksheet, warnings: List[str]) -> None:
        self._write_header_row(ws, 1, ["Warning"])
        ws.column_dimensions['A'].width = 90
        for row, warning in enumerate(warnings, start=2):
            self._cell(ws, row=row, column=1, value=warning)
