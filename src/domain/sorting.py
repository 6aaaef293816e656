"""
Sorting Utilities Module

Provides sorting functions for employee report output.
"""

from typing import List

from domain.entities import EmployeeMonthlyReport


def get_name_key(name: str) -> tuple:
    """
    Get a case-insensitive sort key for a display name.
    Returns tuple of (folded_name, name) for stable sorting.
    """
    if not name:
        return ("", "")
    return (name.casefold(), name)


def sort_employee_reports(
    reports: List[EmployeeMonthlyReport],
    sort_by: str = "name"
) -> List[EmployeeMonthlyReport]:
    """
    Sort employee reports by specified criteria.

    Args:
        reports: List of EmployeeMonthlyReport objects
        sort_by: "name", "total_hours" or "department"

    Returns:
        Sorted list (new list, does not modify original)
    """
    if sort_by == "total_hours":
        # Most hours first, ties broken by name
        return sorted(
            reports,
            key=lambda r: (-r.total_hours, get_name_key(r.employee.name))
        )
    elif sort_by == "department":
        return sorted(
            reports,
            key=lambda r: (r.employee.department.casefold(), get_name_key(r.employee.name))
        )
    else:
        return sorted(reports, key=lambda r: get_name_key(r.employee.name))
