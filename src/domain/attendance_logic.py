"""
Attendance Logic Module

Implements Strategy pattern for pairing a day's punches into work intervals
and computing daily totals and warnings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from .entities import Employee, PunchEvent, PunchKind, WorkDay
from config.config_manager import WorkRules

DEFAULT_DATE_FORMAT = "%d/%m/%Y"

INCOMPLETE_ENTRY_WARNING = "incomplete entry on day {date} for {name}"
EXCESSIVE_HOURS_WARNING = "excessive hours ({total:.2f}h) on day {date} for {name}"
UNEXPECTED_KIND_WARNING = "unexpected {kind} punch at {time} on day {date} for {name}"


def hours_between(start: datetime, end: datetime) -> float:
    """Fractional hours from start to end. Negative when end precedes start."""
    return (end - start).total_seconds() / 3600


@dataclass
class PairingResult:
    """
    Outcome of pairing one day's punches.

    Attributes:
        pairs: (start, end) punch pairs in order
        unpaired: Trailing punch left without a partner, if any
        mismatched: Punches whose kind contradicts their position
    """
    pairs: List[Tuple[PunchEvent, PunchEvent]] = field(default_factory=list)
    unpaired: Optional[PunchEvent] = None
    mismatched: List[PunchEvent] = field(default_factory=list)


class PairingStrategy(ABC):
    """Abstract base class for punch pairing strategies."""

    def pair(self, events: Sequence[PunchEvent]) -> PairingResult:
        """
        Pair punches positionally: index 0 with 1, 2 with 3, and so on.

        Args:
            events: One day's punches in ascending timestamp order

        Returns:
            PairingResult with pairs, the odd trailing punch and kind mismatches
        """
        pairs = list(zip(events[0::2], events[1::2]))
        unpaired = events[-1] if len(events) % 2 == 1 else None
        return PairingResult(
            pairs=pairs,
            unpaired=unpaired,
            mismatched=self.find_mismatched(events)
        )

    @abstractmethod
    def find_mismatched(self, events: Sequence[PunchEvent]) -> List[PunchEvent]:
        """
        Get punches whose declared kind should be reported.

        Returns:
            List of offending punches, empty when kinds are not checked
        """
        pass


class PositionalPairingStrategy(PairingStrategy):
    """
    Pairs punches by sequence index only.

    Declared in/out kinds are ignored, so duplicated or swapped punches are
    tolerated silently.
    """

    def find_mismatched(self, events: Sequence[PunchEvent]) -> List[PunchEvent]:
        return []


class StrictPairingStrategy(PairingStrategy):
    """
    Pairs punches by sequence index and reports kind mismatches.

    Even positions are expected to be 'in' and odd positions 'out'. Totals are
    identical to the positional strategy; only warnings differ.
    """

    def find_mismatched(self, events: Sequence[PunchEvent]) -> List[PunchEvent]:
        mismatched = []
        for index, event in enumerate(events):
            expected = PunchKind.IN if index % 2 == 0 else PunchKind.OUT
            if event.kind != expected:
                mismatched.append(event)
        return mismatched


class PairingStrategyFactory:
    """Factory for creating the configured pairing strategy."""

    _strategies = {
        "positional": PositionalPairingStrategy(),
        "strict": StrictPairingStrategy(),
    }

    @classmethod
    def get_strategy(cls, policy: str) -> PairingStrategy:
        """Get the strategy for a policy name, positional when unknown."""
        return cls._strategies.get(policy, cls._strategies["positional"])


def build_work_day(
    employee: Employee,
    day: date,
    events: Sequence[PunchEvent],
    rules: WorkRules,
    strategy: Optional[PairingStrategy] = None,
    date_format: str = DEFAULT_DATE_FORMAT
) -> Tuple[WorkDay, List[str]]:
    """
    Compute a WorkDay from one employee's punches on one date.

    Negative pair durations (out-of-order clock data) are added as-is.

    Args:
        employee: Owner of the punches
        day: Civil date of the punches
        events: Punches sorted ascending by timestamp
        rules: Working-time rules (standard day length)
        strategy: Pairing strategy, positional when omitted
        date_format: strftime format for dates in warnings

    Returns:
        Tuple of (WorkDay, entry warnings for that day)
    """
    strategy = strategy or PositionalPairingStrategy()
    result = strategy.pair(events)

    total = sum(hours_between(start.timestamp, end.timestamp) for start, end in result.pairs)
    overtime = max(total - rules.standard_day_hours, 0.0)

    day_label = day.strftime(date_format)
    warnings: List[str] = []
    if result.unpaired is not None:
        warnings.append(INCOMPLETE_ENTRY_WARNING.format(date=day_label, name=employee.name))
    for event in result.mismatched:
        warnings.append(UNEXPECTED_KIND_WARNING.format(
            kind=event.kind.value,
            time=event.timestamp.strftime("%H:%M"),
            date=day_label,
            name=employee.name
        ))

    work_day = WorkDay(
        employee_id=employee.id,
        date=day,
        events=list(events),
        total=total,
        overtime=overtime
    )
    return work_day, warnings


def find_excessive_days(
    employee: Employee,
    work_days: Sequence[WorkDay],
    rules: WorkRules,
    date_format: str = DEFAULT_DATE_FORMAT
) -> List[str]:
    """
    Second warning pass: flag days whose total exceeds the excessive limit.

    Args:
        employee: Owner of the days
        work_days: Days with totals already computed
        rules: Working-time rules (excessive day limit)
        date_format: strftime format for dates in warnings

    Returns:
        One warning per day with total strictly above the limit
    """
    return [
        EXCESSIVE_HOURS_WARNING.format(
            total=work_day.total,
            date=work_day.date.strftime(date_format),
            name=employee.name
        )
        for work_day in work_days
        if work_day.total > rules.excessive_day_hours
    ]
