"""
PDF Writer Module

Generates monthly attendance report PDFs using fpdf2.
Renders a ReportModel as-is: header and footer repeated on every page, daily
punch breakdown, company rollup, warnings and signature block.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF

from domain.balance import format_hours
from domain.entities import (
    CompanyMonthlyReport, EmployeeMonthlyReport, ReportHeader, ReportModel, WorkDay
)
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")

FALLBACK_FONT = "Helvetica"
RULE = "-" * 110


# ==============================================================================
# AttendancePdf Class (A4 Portrait)
# ==============================================================================
class AttendancePdf(FPDF):
    """
    Custom FPDF class drawing the report header and footer on every page.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(
        self,
        header_info: ReportHeader,
        footer_line: str = "",
        date_format: str = "%d/%m/%Y",
        custom_font_path: Optional[str] = None
    ):
        super().__init__(orientation='P', unit='mm', format='A4')
        self.header_info = header_info
        self.footer_line = footer_line
        self.date_format = date_format
        self._setup_font(custom_font_path)

    def _setup_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load a custom TTF font if configured, else use the core font."""
        if not custom_font_path:
            return

        font_path = Path(custom_font_path)
        if not font_path.exists():
            logger.warning(f"Custom font not found: {font_path}")
            return

        try:
            self.add_font("ReportFont", "", str(font_path))
            self._font_family = "ReportFont"
            self._font_loaded = True
            logger.info(f"Loaded custom font: {font_path.name}")
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning(f"Cannot load font {font_path}: {e}")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    def safe_text(self, text: str) -> str:
        """Core fonts are latin-1 only; replace anything else."""
        if self._font_loaded:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")

    def line_text(self, text: str, size: int = 9, align: str = 'L', height: float = 5) -> None:
        self.set_font(self._font_family, '', size)
        self.cell(0, height, self.safe_text(text), align=align, new_x='LMARGIN', new_y='NEXT')

    def header(self) -> None:
        """Draw the company, period and employee block."""
        info = self.header_info
        company = info.company

        self.line_text("TIME SHEET", size=12, align='C', height=7)
        self.line_text(RULE, size=7, height=3)
        self.line_text(f"Company: {company.name}    Period: {info.period.label}")
        self.line_text(f"Address: {company.address or '-'}    Tax ID: {company.tax_id or '-'}")
        if info.employee is not None:
            employee = info.employee
            registration = f"    Registration: {employee.registration}" if employee.registration else ""
            self.line_text(
                f"Employee: {employee.name}    Role: {employee.role.value}    "
                f"Department: {employee.department or '-'}{registration}"
            )
        else:
            self.line_text("Scope: all employees")
        self.line_text(RULE, size=7, height=3)
        self.ln(2)

    def footer(self) -> None:
        """Draw the balance line, emission time and page number."""
        self.set_y(-20)
        self.set_text_color(0, 0, 0)
        if self.footer_line:
            self.line_text(self.footer_line, size=8, height=4)
        self.line_text(RULE, size=7, height=3)
        issued = self.header_info.generated_at.strftime(f"{self.date_format} %H:%M:%S")
        self.line_text(f"Issued: {issued}    Page: {self.page_no():04d}", size=8, align='R', height=4)


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Renders a ReportModel to PDF.

    Features:
    - Header/footer repeated on every page via AttendancePdf
    - Per-day punch list labelled In/Out by position
    - Employee and department summary tables in company mode
    - Warnings in red, followed by the signature block

    Figures are printed exactly as computed; nothing is recalculated here.
    """

    COLORS: Dict[str, Tuple[int, int, int]] = {
        'header': (68, 114, 196),
        'warning': (200, 0, 0),
        'black': (0, 0, 0),
        'white': (255, 255, 255),
    }

    SUMMARY_COLUMNS: List[Tuple[str, float]] = [
        ("Employee", 48), ("Department", 36), ("Hours", 20),
        ("Overtime", 20), ("Credits", 22), ("Debits", 22),
    ]
    DEPARTMENT_COLUMNS: List[Tuple[str, float]] = [
        ("Department", 60), ("Employees", 25), ("Hours", 30),
        ("Overtime", 30), ("Absences", 25),
    ]
    ROW_HEIGHT = 6

    def __init__(
        self,
        date_format: str = "%d/%m/%Y",
        custom_font_path: Optional[str] = None
    ):
        self._date_format = date_format
        self._custom_font_path = custom_font_path

    def create_report(self, model: ReportModel, output_path: Path) -> Path:
        """
        Create the PDF report for a model.

        Args:
            model: Computed report model
            output_path: Destination file (parent directories are created)

        Returns:
            Path to the created file
        """
        pdf = AttendancePdf(
            header_info=model.header,
            footer_line=self._footer_line(model),
            date_format=self._date_format,
            custom_font_path=self._custom_font_path
        )
        pdf.set_auto_page_break(auto=True, margin=25)
        pdf.add_page()

        if model.is_company_wide:
            self._draw_company_summary(pdf, model.company_report, model.employee_reports)
            for report in model.employee_reports:
                self._draw_employee_section(pdf, report, with_title=True)
        else:
            for report in model.employee_reports:
                self._draw_employee_section(pdf, report, with_title=False)

        self._draw_warnings(pdf, model.warnings)
        self._draw_signatures(pdf)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF report saved: {output_path}")
        return output_path

    def _footer_line(self, model: ReportModel) -> str:
        """Balance line for single reports, totals line for company reports."""
        if model.is_company_wide:
            company = model.company_report
            return (
                f"Employees: {company.total_employees}    "
                f"Total hours: {format_hours(company.total_hours)}    "
                f"Total overtime: {format_hours(company.total_overtime)}    "
                f"Absences: {company.absence_count}"
            )
        if not model.employee_reports:
            return ""
        balance = model.employee_reports[0].balance
        return (
            f"Initial balance: {format_hours(balance.initial_balance)}    "
            f"Hours bank: {format_hours(balance.overtime_balance)}    "
            f"Month credits: {format_hours(balance.monthly_credits)}    "
            f"Month debits: {format_hours(balance.monthly_debits)}"
        )

    def _draw_employee_section(
        self,
        pdf: AttendancePdf,
        report: EmployeeMonthlyReport,
        with_title: bool
    ) -> None:
        """Draw one employee's days followed by the monthly totals."""
        if with_title:
            pdf.ln(3)
            pdf.line_text(
                f"{report.employee.name} ({report.employee.department or '-'})",
                size=11, height=7
            )

        for work_day in report.work_days:
            self._draw_work_day(pdf, work_day)

        pdf.line_text(
            f"Total hours: {report.total_hours:.2f}h ({format_hours(report.total_hours)})    "
            f"Total overtime: {report.total_overtime:.2f}h ({format_hours(report.total_overtime)})",
            size=10
        )
        if with_title:
            balance = report.balance
            pdf.line_text(
                f"Initial balance: {format_hours(balance.initial_balance)}    "
                f"Hours bank: {format_hours(balance.overtime_balance)}    "
                f"Credits: {format_hours(balance.monthly_credits)}    "
                f"Debits: {format_hours(balance.monthly_debits)}",
                size=8
            )

    def _draw_work_day(self, pdf: AttendancePdf, work_day: WorkDay) -> None:
        pdf.line_text(f"Day: {work_day.date.strftime(self._date_format)}", size=9)
        for index, event in enumerate(work_day.events):
            label = "In:" if index % 2 == 0 else "Out:"
            pdf.line_text(f"    {label} {event.timestamp.strftime('%H:%M:%S')}", size=9)
        pdf.line_text(f"    Day total: {work_day.total:.2f}h", size=9)
        if work_day.overtime > 0:
            pdf.line_text(f"    Overtime: {work_day.overtime:.2f}h", size=9)
        pdf.ln(1)

    def _draw_company_summary(
        self,
        pdf: AttendancePdf,
        company: CompanyMonthlyReport,
        reports: List[EmployeeMonthlyReport]
    ) -> None:
        """Draw the per-employee and per-department tables."""
        pdf.line_text("Employee summary", size=11, height=7)
        self._draw_table_header(pdf, self.SUMMARY_COLUMNS)
        for report in reports:
            self._draw_table_row(pdf, self.SUMMARY_COLUMNS, [
                report.employee.name,
                report.employee.department,
                format_hours(report.total_hours),
                format_hours(report.total_overtime),
                format_hours(report.balance.monthly_credits),
                format_hours(report.balance.monthly_debits),
            ])

        pdf.ln(4)
        pdf.line_text("Department summary", size=11, height=7)
        self._draw_table_header(pdf, self.DEPARTMENT_COLUMNS)
        for department, stats in company.department_stats.items():
            self._draw_table_row(pdf, self.DEPARTMENT_COLUMNS, [
                department or "-",
                str(stats.employee_count),
                format_hours(stats.total_hours),
                format_hours(stats.total_overtime),
                str(stats.absences),
            ])
        pdf.ln(2)
        pdf.line_text(
            f"Company absences in period: {company.absence_count}", size=9
        )

    def _draw_table_header(self, pdf: AttendancePdf, columns: List[Tuple[str, float]]) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(*self.COLORS['white'])
        for title, width in columns:
            pdf.cell(width, self.ROW_HEIGHT, title, border=1, align='C', fill=True)
        pdf.ln(self.ROW_HEIGHT)
        pdf.set_text_color(*self.COLORS['black'])

    def _draw_table_row(
        self,
        pdf: AttendancePdf,
        columns: List[Tuple[str, float]],
        values: List[str]
    ) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        for (_, width), value in zip(columns, values):
            pdf.cell(width, self.ROW_HEIGHT, pdf.safe_text(value), border=1, align='C')
        pdf.ln(self.ROW_HEIGHT)

    def _draw_warnings(self, pdf: AttendancePdf, warnings: List[str]) -> None:
        if not warnings:
            return
        pdf.ln(4)
        pdf.set_text_color(*self.COLORS['warning'])
        pdf.line_text("Warnings:", size=12, height=7)
        for warning in warnings:
            pdf.line_text(warning, size=9)
        pdf.set_text_color(*self.COLORS['black'])

    def _draw_signatures(self, pdf: AttendancePdf) -> None:
        pdf.ln(6)
        pdf.line_text("I CONFIRM THE ATTENDANCE ABOVE", size=9)
        pdf.ln(10)
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.cell(90, 5, "Manager", align='L')
        pdf.cell(0, 5, "Employee", align='R', new_x='LMARGIN', new_y='NEXT')


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, year: int, month: int) -> str:
    """Format filename pattern with placeholders."""
    return pattern.format(
        year=year,
        month=f"{month:02d}"
    )
