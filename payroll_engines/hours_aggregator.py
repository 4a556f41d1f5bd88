"""
Hours Aggregator (``payroll_engines.hours_aggregator``).

Responsibility
--------------
Buckets reconstructed sessions by calendar day and by overtime week, and
splits each week's worked hours into regular and overtime hours.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Third stage of the punch
pipeline: consumes ``WorkSession`` values from the reconstructor and feeds
the payroll assembler and the hourly labor allocations.

Invariants enforced
-------------------
* Overtime is weekly: each week is split on its own, then weeks are summed.
  A 45h week plus a 35h week is 5h overtime, not 0.
* For every week ``regular_hours + overtime_hours == worked hours``,
  ``regular_hours <= standard_work_week_hours`` and ``overtime_hours >= 0``.
* Sessions are attributed to the day (and week) of their clock-in.
* Sessions excluded from totals contribute nothing.
* Reported hours are ``Decimal``; no float arithmetic.
* Pay is priced from ``exact_regular_and_overtime_hours``: whole minutes
  in, ``Fraction`` hours out, never a truncated quotient such as 350 / 60.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import Decimal
from fractions import Fraction

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.sessions import DailyHours, HoursSummary, WeeklyHours, WorkSession
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.hours_aggregator")

_MINUTES_PER_HOUR = Decimal(60)


def minutes_to_hours(minutes: int) -> Decimal:
    return Decimal(minutes) / _MINUTES_PER_HOUR


def week_start_for(day: date, config: PayrollEngineConfig | None = None) -> date:
    """First day of the overtime week containing ``day``."""
    config = config or PayrollEngineConfig.with_defaults()
    offset = (day.weekday() - config.week_start_weekday) % 7
    return day - timedelta(days=offset)


def calculate_regular_and_overtime_hours(
    week_hours: Decimal,
    config: PayrollEngineConfig | None = None,
) -> tuple[Decimal, Decimal]:
    """Split one week's worked hours into (regular, overtime).

    Raises:
        ValueError: If week_hours is negative.
    """
    config = config or PayrollEngineConfig.with_defaults()
    week_hours = Decimal(week_hours)
    if week_hours < 0:
        raise ValueError(f"week_hours cannot be negative: {week_hours}")
    standard = config.standard_work_week_hours
    regular = min(week_hours, standard)
    overtime = max(Decimal("0"), week_hours - standard)
    return regular, overtime


def exact_regular_and_overtime_hours(
    weeks: Iterable[WeeklyHours],
    config: PayrollEngineConfig | None = None,
) -> tuple[Fraction, Fraction]:
    """Summed (regular, overtime) hours of ``weeks`` as exact fractions.

    Each week is split on its worked minutes, then the weeks are summed;
    the same split as ``calculate_regular_and_overtime_hours`` without any
    intermediate rounding.
    """
    config = config or PayrollEngineConfig.with_defaults()
    standard_minutes = Fraction(config.standard_work_week_hours) * 60
    regular = overtime = Fraction(0)
    for week in weeks:
        worked = Fraction(week.worked_minutes)
        week_regular = min(worked, standard_minutes)
        regular += week_regular
        overtime += worked - week_regular
    return regular / 60, overtime / 60


def _counted(sessions: Iterable[WorkSession], start: date | None, end: date | None):
    for session in sessions:
        if session.excluded_from_totals:
            continue
        if start is not None and session.work_date < start:
            continue
        if end is not None and session.work_date > end:
            continue
        yield session


def _single_employee(sessions: list[WorkSession]) -> str | None:
    ids = {s.employee_id for s in sessions}
    if len(ids) > 1:
        raise ValueError(
            f"Weekly hours are computed per employee; got sessions for {sorted(ids)}"
        )
    return next(iter(ids), None)


@traced_engine("hours_aggregator", "1.0", fingerprint_fields=("start", "end"))
def aggregate_weekly_hours(
    sessions: Iterable[WorkSession],
    config: PayrollEngineConfig | None = None,
    start: date | None = None,
    end: date | None = None,
) -> HoursSummary:
    """Regular / overtime hours per week for one employee.

    Args:
        sessions: One employee's sessions.
        config: Supplies ``week_start_day`` and ``standard_work_week_hours``.
        start: Optional inclusive first day; earlier sessions are ignored.
        end: Optional inclusive last day; later sessions are ignored.

    Returns:
        ``HoursSummary`` with one ``WeeklyHours`` per week that has
        counted sessions, in week order, and the summed totals.

    Raises:
        ValueError: If sessions for more than one employee are supplied.
    """
    config = config or PayrollEngineConfig.with_defaults()
    all_sessions = list(sessions)
    employee_id = _single_employee(all_sessions)

    minutes_by_week: dict[date, int] = defaultdict(int)
    for session in _counted(all_sessions, start, end):
        minutes_by_week[week_start_for(session.work_date, config)] += session.worked_minutes

    weeks: list[WeeklyHours] = []
    for week_start in sorted(minutes_by_week):
        minutes = minutes_by_week[week_start]
        regular, overtime = calculate_regular_and_overtime_hours(
            minutes_to_hours(minutes), config
        )
        weeks.append(WeeklyHours(week_start, minutes, regular, overtime))

    summary = HoursSummary(
        employee_id=employee_id,
        weeks=tuple(weeks),
        regular_hours=sum((w.regular_hours for w in weeks), Decimal("0")),
        overtime_hours=sum((w.overtime_hours for w in weeks), Decimal("0")),
    )

    logger.info(
        "weekly_hours_aggregated",
        extra={
            "employee_id": employee_id,
            "week_count": len(weeks),
            "regular_hours": str(summary.regular_hours),
            "overtime_hours": str(summary.overtime_hours),
        },
    )
    return summary


def daily_worked_hours(sessions: Iterable[WorkSession]) -> dict[date, Decimal]:
    """Worked hours per clock-in day; excluded sessions count for nothing."""
    minutes: dict[date, int] = defaultdict(int)
    for session in _counted(sessions, None, None):
        minutes[session.work_date] += session.worked_minutes
    return {day: minutes_to_hours(m) for day, m in sorted(minutes.items())}


def _punch_count(session: WorkSession) -> int:
    count = 1 if session.clock_out is None else 2
    for period in session.breaks:
        count += 2 if period.break_end is not None else 1
    return count


def calculate_daily_hours(
    sessions: Iterable[WorkSession],
    day: date,
) -> dict[str, DailyHours]:
    """Per-employee hours for sessions clocked in on ``day``.

    Sessions excluded from totals (long clock-in gaps) are listed but add
    nothing to worked, break or total hours: their span is the gap between
    two shifts, not time on site.
    """
    grouped: dict[str, list[WorkSession]] = defaultdict(list)
    for session in sessions:
        if session.work_date == day:
            grouped[session.employee_id].append(session)

    result: dict[str, DailyHours] = {}
    for employee_id in sorted(grouped):
        day_sessions = tuple(sorted(grouped[employee_id], key=lambda s: s.clock_in))
        counted = [s for s in day_sessions if not s.excluded_from_totals]
        result[employee_id] = DailyHours(
            date=day,
            employee_id=employee_id,
            sessions=day_sessions,
            worked_hours=minutes_to_hours(sum(s.worked_minutes for s in counted)),
            break_hours=minutes_to_hours(sum(s.break_minutes for s in counted)),
            total_hours=minutes_to_hours(sum(s.total_minutes for s in counted)),
            punch_count=sum(_punch_count(s) for s in day_sessions),
        )
    return result
