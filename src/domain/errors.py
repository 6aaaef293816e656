"""
Errors Module

Exception hierarchy for the attendance system. Report warnings are data and
never appear here.
"""

from typing import Optional


class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


class InvalidPeriod(AttendanceError):
    """Raised when the requested month/year cannot form a report period."""

    def __init__(self, month, year, message: Optional[str] = None):
        self.month = month
        self.year = year
        self.message = message or f"Invalid report period: month={month!r}, year={year!r}"
        super().__init__(self.message)


class UpstreamFetchFailure(AttendanceError):
    """Raised when the attendance store cannot serve a report's data."""
    pass


class StoreError(AttendanceError):
    """Raised by store implementations when data cannot be read or written."""
    pass


class PunchFormatError(StoreError):
    """
    Raised at the ingestion boundary when a punch row is malformed.

    Carries the sheet name and row number so the source can be fixed.
    """

    def __init__(self, sheet: str, row: int, reason: str):
        self.sheet = sheet
        self.row = row
        self.reason = reason
        super().__init__(f"Sheet '{sheet}' row {row}: {reason}")


class AbsenceNotFound(AttendanceError):
    """Raised when an absence does not exist within the actor's company."""
    pass


class InvalidAbsenceStatus(AttendanceError):
    """Raised when a review sets a status other than approved/rejected."""
    pass


class PermissionDenied(AttendanceError):
    """Raised when the actor's role does not allow the operation."""
    pass
