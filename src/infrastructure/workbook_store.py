"""
Workbook Store Module

Attendance store backed by an Excel workbook. This is the ingestion boundary:
rows are validated when the workbook is loaded and malformed punches are
rejected with the sheet and row that caused them.

Expected sheets (header in row 1, column order free):
- Companies: id, name, address, tax_id
- Employees: id, name, department, role, company_id, registration
- Punches:   employee_id, company_id, kind, timestamp
- Absences:  id, employee_id, company_id, date, reason, document, status (optional sheet)
"""

import zipfile
from datetime import date, datetime, timezone, tzinfo
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from domain.entities import (
    AbsenceRecord, AbsenceStatus, Actor, Company, Employee, PunchEvent, PunchKind, Role
)
from domain.errors import PunchFormatError, StoreError
from infrastructure.logger import get_logger
from infrastructure.store import InMemoryAttendanceStore

logger = get_logger("WorkbookStore")

COMPANY_COLUMNS = ["id", "name", "address", "tax_id"]
EMPLOYEE_COLUMNS = ["id", "name", "department", "role", "company_id", "registration"]
PUNCH_COLUMNS = ["employee_id", "company_id", "kind", "timestamp"]
ABSENCE_COLUMNS = ["id", "employee_id", "company_id", "date", "reason", "document", "status"]

TIMESTAMP_FORMATS = [
    '%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M',
    '%d/%m/%Y %H:%M:%S', '%d/%m/%Y %H:%M',
]
DATE_FORMATS = ['%Y-%m-%d', '%d/%m/%Y', '%Y/%m/%d']
OPTIONAL_COLUMNS = {"address", "tax_id", "registration", "document", "status"}


class WorkbookAttendanceStore(InMemoryAttendanceStore):
    """
    Loads attendance data from a workbook and writes changes back.

    Handles:
    - Header detection by column name (case and spacing insensitive)
    - Timestamp/date validation for every punch and absence row
    - Persisting recorded punches and absence reviews
    """

    HEADER_FILL = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')

    def __init__(self, workbook_path: Path, tz: tzinfo = timezone.utc):
        super().__init__(tz=tz)
        self.workbook_path = Path(workbook_path)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self) -> "WorkbookAttendanceStore":
        """
        Read every sheet of the workbook into memory.

        Raises:
            StoreError: If the file is missing, unreadable or lacks a sheet
            PunchFormatError: If a row holds a malformed value
        """
        if not self.workbook_path.is_file():
            raise StoreError(f"Workbook not found: {self.workbook_path}")

        logger.info(f"Loading attendance workbook: {self.workbook_path.name}")
        try:
            wb = load_workbook(self.workbook_path, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, OSError) as e:
            raise StoreError(f"Cannot read workbook {self.workbook_path}: {e}") from e

        try:
            for row_idx, row in self._iter_rows(self._require_sheet(wb, "Companies"), COMPANY_COLUMNS):
                self.add_company(Company(
                    id=self._require_text(row, "id", "Companies", row_idx),
                    name=self._require_text(row, "name", "Companies", row_idx),
                    address=self._text(row.get("address")),
                    tax_id=self._text(row.get("tax_id"))
                ))

            for row_idx, row in self._iter_rows(self._require_sheet(wb, "Employees"), EMPLOYEE_COLUMNS):
                self.add_employee(self._parse_employee(row, row_idx))

            for row_idx, row in self._iter_rows(self._require_sheet(wb, "Punches"), PUNCH_COLUMNS):
                self.add_punch(self._parse_punch(row, row_idx))

            if "Absences" in wb.sheetnames:
                for row_idx, row in self._iter_rows(wb["Absences"], ABSENCE_COLUMNS):
                    InMemoryAttendanceStore.add_absence(self, self._parse_absence(row, row_idx))
        finally:
            wb.close()

        logger.info(
            f"Workbook loaded: {len(self._companies)} companies, "
            f"{len(self._employees)} employees, {len(self._punches)} punches, "
            f"{len(self._absences)} absences"
        )
        return self

    def _require_sheet(self, wb: Workbook, name: str) -> Worksheet:
        if name not in wb.sheetnames:
            raise StoreError(f"Workbook {self.workbook_path.name} has no '{name}' sheet")
        return wb[name]

    def _iter_rows(self, ws: Worksheet, columns: List[str]):
        """Yield (row number, {column: value}) for every non-empty data row."""
        header = [self._normalize_header(cell.value) for cell in ws[1]]
        missing = [c for c in columns if c not in header and c not in OPTIONAL_COLUMNS]
        if missing:
            raise StoreError(f"Sheet '{ws.title}' is missing columns: {', '.join(missing)}")

        for row_idx, values in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
            if all(v is None or str(v).strip() == "" for v in values):
                continue
            yield row_idx, {
                name: value for name, value in zip(header, values) if name
            }

    @staticmethod
    def _normalize_header(value) -> str:
        return str(value or "").strip().lower().replace(" ", "_")

    @staticmethod
    def _text(value) -> str:
        return "" if value is None else str(value).strip()

    def _require_text(self, row: Dict, column: str, sheet: str, row_idx: int) -> str:
        text = self._text(row.get(column))
        if not text:
            raise PunchFormatError(sheet, row_idx, f"'{column}' is empty")
        return text

    def _parse_employee(self, row: Dict, row_idx: int) -> Employee:
        role_text = self._require_text(row, "role", "Employees", row_idx)
        try:
            role = Role.from_str(role_text)
        except ValueError:
            raise PunchFormatError("Employees", row_idx, f"unknown role '{role_text}'")
        return Employee(
            id=self._require_text(row, "id", "Employees", row_idx),
            name=self._require_text(row, "name", "Employees", row_idx),
            department=self._text(row.get("department")),
            role=role,
            company_id=self._require_text(row, "company_id", "Employees", row_idx),
            registration=self._text(row.get("registration"))
        )

    def _parse_punch(self, row: Dict, row_idx: int) -> PunchEvent:
        kind_text = self._require_text(row, "kind", "Punches", row_idx).lower()
        try:
            kind = PunchKind(kind_text)
        except ValueError:
            raise PunchFormatError("Punches", row_idx, f"kind must be 'in' or 'out', got '{kind_text}'")

        timestamp = self._extract_timestamp(row.get("timestamp"))
        if timestamp is None:
            raise PunchFormatError(
                "Punches", row_idx, f"malformed timestamp '{row.get('timestamp')}'"
            )

        return PunchEvent(
            employee_id=self._require_text(row, "employee_id", "Punches", row_idx),
            company_id=self._require_text(row, "company_id", "Punches", row_idx),
            kind=kind,
            timestamp=timestamp
        )

    def _parse_absence(self, row: Dict, row_idx: int) -> AbsenceRecord:
        absence_date = self._extract_date(row.get("date"))
        if absence_date is None:
            raise PunchFormatError("Absences", row_idx, f"malformed date '{row.get('date')}'")

        status_text = self._text(row.get("status")).lower() or AbsenceStatus.PENDING.value
        try:
            status = AbsenceStatus(status_text)
        except ValueError:
            raise PunchFormatError("Absences", row_idx, f"unknown status '{status_text}'")

        return AbsenceRecord(
            id=self._text(row.get("id")),
            employee_id=self._require_text(row, "employee_id", "Absences", row_idx),
            company_id=self._require_text(row, "company_id", "Absences", row_idx),
            date=absence_date,
            reason=self._text(row.get("reason")),
            document=self._text(row.get("document")) or None,
            status=status
        )

    def _extract_timestamp(self, value) -> Optional[datetime]:
        """Extract a datetime from a cell value.

        Handles native datetimes, ISO 8601 strings (with or without offset)
        and the day-first formats in TIMESTAMP_FORMATS.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return value

        str_val = str(value).strip()
        if not str_val:
            return None

        try:
            return datetime.fromisoformat(str_val)
        except ValueError:
            pass

        for fmt in TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(str_val, fmt)
            except ValueError:
                continue
        return None

    def _extract_date(self, value) -> Optional[date]:
        """Extract a date from a cell value."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        str_val = str(value).strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(str_val, fmt).date()
            except ValueError:
                continue
        return None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def save(self) -> Path:
        """Write the current contents back to the workbook file."""
        wb = Workbook()
        wb.remove(wb.active)

        self._write_sheet(wb, "Companies", COMPANY_COLUMNS, [
            [c.id, c.name, c.address, c.tax_id] for c in self._companies.values()
        ])
        self._write_sheet(wb, "Employees", EMPLOYEE_COLUMNS, [
            [e.id, e.name, e.department, e.role.value, e.company_id, e.registration]
            for e in self._employees.values()
        ])
        self._write_sheet(wb, "Punches", PUNCH_COLUMNS, [
            [p.employee_id, p.company_id, p.kind.value, p.timestamp]
            for p in sorted(self._punches, key=lambda p: p.timestamp)
        ])
        self._write_sheet(wb, "Absences", ABSENCE_COLUMNS, [
            [a.id, a.employee_id, a.company_id, a.date, a.reason, a.document or "", a.status.value]
            for a in self._absences.values()
        ])

        self.workbook_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            wb.save(self.workbook_path)
        except OSError as e:
            raise StoreError(f"Cannot write workbook {self.workbook_path}: {e}") from e
        logger.debug(f"Workbook saved: {self.workbook_path}")
        return self.workbook_path

    def _write_sheet(self, wb: Workbook, title: str, columns: List[str], rows: List[list]) -> None:
        ws = wb.create_sheet(title)
        ws.append(columns)
        for cell in ws[1]:
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.HEADER_FILL
        for row in rows:
            ws.append(row)
            for cell in ws[ws.max_row]:
                if isinstance(cell.value, str) and cell.value.startswith("="):
                    cell.data_type = "s"

    def record_punch(
        self,
        actor: Actor,
        kind: PunchKind,
        timestamp: Optional[datetime] = None
    ) -> PunchEvent:
        event = super().record_punch(actor, kind, timestamp)
        self.save()
        return event

    def add_absence(self, absence: AbsenceRecord) -> AbsenceRecord:
        absence = super().add_absence(absence)
        self.save()
        return absence

    def update_absence_status(
        self,
        company_id: str,
        absence_id: str,
        status: AbsenceStatus
    ) -> Optional[AbsenceRecord]:
        absence = super().update_absence_status(company_id, absence_id, status)
        if absence is not None:
            self.save()
        return absence
