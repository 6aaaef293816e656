"""
Report Service Module

Application layer service that orchestrates monthly attendance report generation.
Separates the aggregation core from data access and document rendering.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from config.config_manager import AppConfig, WorkRules
from domain.aggregator import MonthlyAggregator, concatenate_warnings
from domain.entities import Actor, ReportHeader, ReportModel, ReportPeriod
from domain.errors import StoreError, UpstreamFetchFailure
from domain.period import parse_period, resolve_timezone
from domain.sorting import sort_employee_reports
from infrastructure.logger import get_logger
from infrastructure.store import AttendanceStore

logger = get_logger("ReportService")


@dataclass
class ReportRequest:
    """A request for one month's report on behalf of an actor."""
    month: object
    year: object
    actor: Actor


@dataclass
class ReportGenerationParams:
    """
    Parameters for report generation.

    This dataclass encapsulates all settings needed for report generation,
    decoupling the service from the persisted AppConfig layout.
    """
    work_rules: WorkRules = field(default_factory=WorkRules)
    timezone: str = "America/Sao_Paulo"
    date_format: str = "%d/%m/%Y"
    sort_by: str = "name"

    # Output settings
    output_dir: Optional[Path] = None
    generate_pdf: bool = True
    generate_excel: bool = False
    pdf_filename_pattern: str = "attendance_report_{year}_{month}.pdf"
    excel_filename_pattern: str = "attendance_report_{year}_{month}.xlsx"
    custom_font_path: Optional[str] = None


@dataclass
class ReportResult:
    """Result of report generation."""
    success: bool
    year: int
    month: int
    employee_count: int = 0
    warning_count: int = 0
    pdf_path: Optional[Path] = None
    excel_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)


class AttendanceReportService:
    """
    Application service for generating monthly attendance reports.

    This service:
    - Validates the period before touching the store
    - Chooses company-wide or single-employee scope from the actor's role
    - Turns store failures into UpstreamFetchFailure, never emitting partial reports
    - Hands the finished ReportModel to the PDF/Excel formatters
    """

    def __init__(
        self,
        store: AttendanceStore,
        params: Optional[ReportGenerationParams] = None,
        clock=datetime.now
    ):
        self.store = store
        self.params = params or ReportGenerationParams()
        self._clock = clock
        self.aggregator = MonthlyAggregator(
            rules=self.params.work_rules,
            tz=resolve_timezone(self.params.timezone),
            date_format=self.params.date_format
        )

    def build_report(self, request: ReportRequest) -> ReportModel:
        """
        Build the report model for a request.

        Args:
            request: Month, year and requesting actor

        Returns:
            ReportModel ready for rendering

        Raises:
            InvalidPeriod: If month/year are invalid (nothing is fetched)
            UpstreamFetchFailure: If the store cannot serve the data
        """
        period = parse_period(request.month, request.year)
        actor = request.actor
        scope = "company" if actor.is_manager else "employee"
        logger.info(
            f"Building {scope} report {period.label} for {actor.employee_id} "
            f"(company {actor.company_id})"
        )

        try:
            company = self.store.fetch_company(actor.company_id)
            if actor.is_manager:
                employees = self.store.fetch_employees(actor.company_id)
                events = self.store.fetch_punch_events(actor.company_id, period.start, period.end)
                absences = self.store.fetch_absences(actor.company_id, period.start, period.end)
                header_employee = None
            else:
                employee = self.store.fetch_employee(actor.employee_id)
                employees = [employee]
                events = self.store.fetch_punch_events(
                    actor.company_id, period.start, period.end,
                    employee_id=actor.employee_id
                )
                absences = None
                header_employee = employee
        except (StoreError, OSError) as e:
            logger.error(f"Report {period.label} aborted, store fetch failed: {e}")
            raise UpstreamFetchFailure(f"Failed to fetch attendance data: {e}") from e

        logger.debug(f"Fetched {len(events)} punches for {len(employees)} employees")

        result = self.aggregator.aggregate(
            company_id=actor.company_id,
            period=period,
            employees=employees,
            events=events,
            absences=absences
        )
        reports = sort_employee_reports(result.employee_reports, self.params.sort_by)

        model = ReportModel(
            header=ReportHeader(
                company=company,
                period=period,
                generated_at=self._clock(),
                employee=header_employee
            ),
            employee_reports=reports,
            company_report=result.company_report,
            warnings=concatenate_warnings(reports)
        )
        logger.info(
            f"Report {period.label} built: {len(reports)} employees, "
            f"{len(model.warnings)} warnings"
        )
        return model

    def generate_report(self, request: ReportRequest) -> ReportResult:
        """
        Build the report and render it to the configured document formats.

        Args:
            request: Month, year and requesting actor

        Returns:
            ReportResult with output paths and counts
        """
        model = self.build_report(request)
        period = model.header.period

        output_dir = self.params.output_dir or Path.cwd()
        output_dir.mkdir(parents=True, exist_ok=True)

        pdf_path = None
        if self.params.generate_pdf:
            pdf_path = self._generate_pdf_report(model, period, output_dir)

        excel_path = None
        if self.params.generate_excel:
            excel_path = self._generate_excel_report(model, period, output_dir)

        return ReportResult(
            success=True,
            year=period.year,
            month=period.month,
            employee_count=len(model.employee_reports),
            warning_count=len(model.warnings),
            pdf_path=pdf_path,
            excel_path=excel_path,
            warnings=list(model.warnings)
        )

    def _generate_pdf_report(self, model: ReportModel, period: ReportPeriod, output_dir: Path) -> Path:
        from infrastructure.pdf_writer import PdfWriter, format_filename

        filename = format_filename(self.params.pdf_filename_pattern, period.year, period.month)
        pdf_path = output_dir / filename
        logger.info(f"Writing PDF report: {pdf_path}")

        writer = PdfWriter(
            date_format=self.params.date_format,
            custom_font_path=self.params.custom_font_path
        )
        writer.create_report(model, pdf_path)
        return pdf_path

    def _generate_excel_report(self, model: ReportModel, period: ReportPeriod, output_dir: Path) -> Path:
        from infrastructure.excel_writer import ExcelWriter
        from infrastructure.pdf_writer import format_filename

        filename = format_filename(self.params.excel_filename_pattern, period.year, period.month)
        excel_path = output_dir / filename
        logger.info(f"Writing Excel report: {excel_path}")

        ExcelWriter(date_format=self.params.date_format).create_report(model, excel_path)
        return excel_path

    @staticmethod
    def build_params_from_config(
        config: AppConfig,
        output_dir: Optional[Path] = None
    ) -> ReportGenerationParams:
        """
        Build ReportGenerationParams from AppConfig.

        Args:
            config: Application configuration (AppConfig from config_manager)
            output_dir: Overrides the configured output directory

        Returns:
            ReportGenerationParams ready for AttendanceReportService
        """
        settings = config.output_settings
        if output_dir is None and settings.output_dir:
            output_dir = Path(settings.output_dir)

        return ReportGenerationParams(
            work_rules=config.work_rules,
            timezone=config.locale.timezone,
            date_format=config.locale.date_format,
            sort_by=settings.sort_by,
            output_dir=output_dir,
            generate_pdf=settings.generate_pdf,
            generate_excel=settings.generate_excel,
            pdf_filename_pattern=settings.pdf_filename_pattern,
            excel_filename_pattern=settings.excel_filename_pattern,
            custom_font_path=config.paths.custom_font_path or None,
        )
