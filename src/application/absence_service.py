"""
Absence Service Module

Submission, listing and review of absence justifications, scoped to the
actor's company.
"""

from datetime import date
from typing import List, Optional

from domain.entities import AbsenceRecord, AbsenceStatus, Actor
from domain.errors import AbsenceNotFound, InvalidAbsenceStatus, PermissionDenied
from infrastructure.logger import get_logger
from infrastructure.store import AttendanceStore

logger = get_logger("AbsenceService")

REVIEW_STATUSES = (AbsenceStatus.APPROVED, AbsenceStatus.REJECTED)


class AbsenceService:
    """Application service for absence justifications."""

    def __init__(self, store: AttendanceStore):
        self.store = store

    def submit(
        self,
        actor: Actor,
        absence_date: date,
        reason: str,
        document: Optional[str] = None
    ) -> AbsenceRecord:
        """Submit a pending justification for the actor's own absence."""
        absence = self.store.add_absence(AbsenceRecord(
            id="",
            employee_id=actor.employee_id,
            company_id=actor.company_id,
            date=absence_date,
            reason=reason,
            document=document
        ))
        logger.info(f"Absence {absence.id} submitted by {actor.employee_id} for {absence_date}")
        return absence

    def list_for(self, actor: Actor) -> List[AbsenceRecord]:
        """
        List absences visible to the actor, newest first.

        Admin/HR see the whole company; other roles only their own.
        """
        if actor.is_manager:
            return self.store.list_absences(actor.company_id)
        return self.store.list_absences(actor.company_id, employee_id=actor.employee_id)

    def review(self, actor: Actor, absence_id: str, status) -> AbsenceRecord:
        """
        Approve or reject an absence of the actor's company.

        Args:
            actor: Reviewer, must be admin or HR
            absence_id: Absence to review
            status: AbsenceStatus or its string value

        Raises:
            PermissionDenied: If the actor is not admin/HR
            InvalidAbsenceStatus: If status is not approved/rejected
            AbsenceNotFound: If the absence is not in the actor's company
        """
        if not actor.is_manager:
            raise PermissionDenied(f"{actor.employee_id} cannot review absences")

        try:
            new_status = status if isinstance(status, AbsenceStatus) else AbsenceStatus(str(status))
        except ValueError:
            raise InvalidAbsenceStatus(f"Invalid status: {status!r}")
        if new_status not in REVIEW_STATUSES:
            raise InvalidAbsenceStatus(f"Invalid status: {new_status.value}")

        absence = self.store.update_absence_status(actor.company_id, absence_id, new_status)
        if absence is None:
            raise AbsenceNotFound(f"Absence not found: {absence_id}")

        logger.info(f"Absence {absence_id} {new_status.value} by {actor.employee_id}")
        return absence
