"""
Monthly Attendance Report Generator

Builds monthly time-and-attendance reports (hours, overtime, hour bank and
warnings) from an attendance workbook and renders them as PDF/Excel.
"""

import argparse
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.report_service import AttendanceReportService, ReportRequest
from config.config_manager import ConfigManager
from domain.entities import Actor
from domain.errors import AttendanceError
from domain.period import parse_period, resolve_timezone
from infrastructure.logger import attach_log_file, get_logger
from infrastructure.workbook_store import WorkbookAttendanceStore

logger = get_logger("Main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a monthly attendance report.")
    parser.add_argument("--month", required=True, help="Report month (1-12)")
    parser.add_argument("--year", required=True, help="Report year")
    parser.add_argument("--actor", required=True, help="Employee id requesting the report")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("--workbook", type=Path, default=None, help="Attendance workbook (.xlsx)")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for generated files")
    return parser


def main(argv=None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    config = ConfigManager(args.config).load()
    if config.paths.log_file:
        attach_log_file(config.paths.log_file)
    workbook = args.workbook or Path(config.paths.store_workbook)

    try:
        parse_period(args.month, args.year)
        store = WorkbookAttendanceStore(workbook, tz=resolve_timezone(config.locale.timezone)).load()
        employee = store.fetch_employee(args.actor)
        actor = Actor(employee_id=employee.id, company_id=employee.company_id, role=employee.role)

        params = AttendanceReportService.build_params_from_config(config, args.output_dir)
        service = AttendanceReportService(store, params)
        result = service.generate_report(ReportRequest(month=args.month, year=args.year, actor=actor))
    except AttendanceError as e:
        logger.error(f"Report generation failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot write report files: {e}")
        return 1

    print(f"Report {result.month:02d}/{result.year}: {result.employee_count} employee(s), "
          f"{result.warning_count} warning(s)")
    if result.pdf_path:
        print(f"PDF:   {result.pdf_path}")
    if result.excel_path:
        print(f"Excel: {result.excel_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
