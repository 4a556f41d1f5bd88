"""
Work session value objects (``payroll_kernel.domain.sessions``).

Responsibility
--------------
Frozen dataclasses produced by the session reconstructor and the hours
aggregator: work sessions with their nested breaks, structured anomalies,
incomplete-shift review rows, and daily / weekly hour summaries.

Invariants enforced
-------------------
* For a session with no anomalies,
  ``total_minutes == worked_minutes + break_minutes`` and
  ``break_minutes == sum(b.duration_minutes for b in breaks)``.
* An incomplete break always has ``duration_minutes == 0``.
* A session excluded from totals has ``worked_minutes == 0``.
* All hour fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.punches import ProcessedPunch, PunchType


class AnomalyCode(str, Enum):
    """Data-quality irregularities attached to a session for review."""
    SUPERSEDED_CLOCK_IN = "missing clock out"  # new clock_in arrived while open
    MISSING_CLOCK_OUT = "missing_clock_out"  # long gap or end of stream
    SHIFT_TOO_LONG = "shift_too_long"
    INCOMPLETE_BREAK = "incomplete_break"
    ORPHAN_BREAK_END = "orphan_break_end"
    DUPLICATE_BREAK_START = "duplicate_break_start"
    SHORT_SESSION = "short_session"


class IncompleteShiftType(str, Enum):
    """Review-row categories surfaced on an employee's payroll row."""
    MISSING_CLOCK_OUT = "missing_clock_out"
    MISSING_CLOCK_IN = "missing_clock_in"
    SHIFT_TOO_LONG = "shift_too_long"
    INCOMPLETE_BREAK = "incomplete_break"
    IRREGULAR_PUNCH = "irregular_punch"


@dataclass(frozen=True)
class SessionAnomaly:
    """One irregularity found while reconstructing a session."""
    code: AnomalyCode
    message: str
    punch_time: datetime | None = None


@dataclass(frozen=True)
class BreakPeriod:
    """A break nested in a work session."""
    break_start: datetime
    break_end: datetime | None = None
    duration_minutes: int = 0
    is_complete: bool = False

    def __post_init__(self) -> None:
        if not self.is_complete and self.duration_minutes != 0:
            raise ValueError("An incomplete break must have duration_minutes == 0")
        if self.duration_minutes < 0:
            raise ValueError(f"Break duration cannot be negative: {self.duration_minutes}")


@dataclass(frozen=True)
class WorkSession:
    """A reconstructed clock-in to clock-out interval."""
    employee_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    breaks: tuple[BreakPeriod, ...] = ()
    total_minutes: int = 0
    break_minutes: int = 0
    worked_minutes: int = 0
    is_complete: bool = False
    anomalies: tuple[SessionAnomaly, ...] = ()
    excluded_from_totals: bool = False

    @property
    def session_id(self) -> str:
        return f"{self.employee_id}-{int(self.clock_in.timestamp() * 1000)}"

    @property
    def has_anomalies(self) -> bool:
        return bool(self.anomalies)

    @property
    def anomaly_codes(self) -> tuple[AnomalyCode, ...]:
        return tuple(a.code for a in self.anomalies)

    @property
    def work_date(self) -> date:
        """Calendar day the session is attributed to (its clock-in day)."""
        return self.clock_in.date()

    @property
    def worked_hours(self) -> Decimal:
        return Decimal(self.worked_minutes) / Decimal(60)


@dataclass(frozen=True)
class IncompleteShift:
    """A problem shift surfaced for manager review instead of blocking payroll."""
    employee_id: str
    shift_type: IncompleteShiftType
    punch_type: PunchType
    punch_time: datetime
    message: str


@dataclass(frozen=True)
class ReconstructionResult:
    """Sessions plus punches that could not be attached to any session."""
    sessions: tuple[WorkSession, ...] = ()
    orphan_punches: tuple[ProcessedPunch, ...] = ()


@dataclass(frozen=True)
class DailyHours:
    """One employee's sessions and hours for a single calendar day."""
    date: date
    employee_id: str
    sessions: tuple[WorkSession, ...]
    worked_hours: Decimal
    break_hours: Decimal
    total_hours: Decimal
    punch_count: int


@dataclass(frozen=True)
class WeeklyHours:
    """Regular / overtime split for one calendar week."""
    week_start: date
    worked_minutes: int
    regular_hours: Decimal
    overtime_hours: Decimal

    @property
    def worked_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours


@dataclass(frozen=True)
class HoursSummary:
    """Weekly buckets plus flattened totals for a queried range."""
    employee_id: str | None
    weeks: tuple[WeeklyHours, ...] = field(default_factory=tuple)
    regular_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours
