"""
Session Reconstructor (``payroll_engines.session_reconstructor``).

Responsibility
--------------
Pairs normalized punches into ``WorkSession`` values (clock-in, nested
breaks, clock-out) and records every irregularity as a structured
``SessionAnomaly`` instead of failing.  Also derives the
``IncompleteShift`` review rows surfaced on payroll.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Second stage of the punch
pipeline: consumes the output of ``punch_normalizer``, feeds
``hours_aggregator``.

State machine
-------------
One machine per employee, states ``idle``, ``open_session`` and
``on_break``.  ``_TRANSITIONS`` maps ``(state, punch_type)`` to a handler
that folds one punch into an immutable ``ScanState``:

=============  ===========  =================================================
state          punch        effect
=============  ===========  =================================================
idle           clock_in     open a session
idle           other        orphan punch (kept for review)
open_session   clock_in     close prior session incomplete, open a new one
open_session   clock_out    close the session
open_session   break_start  start a break
open_session   break_end    ``orphan_break_end`` anomaly
on_break       break_end    complete the break
on_break       clock_in     per ``clock_in_during_break`` policy
on_break       break_start  ``duplicate_break_start``; break restarts
on_break       clock_out    ``incomplete_break``, then close the session
=============  ===========  =================================================

Closing rules (``max_shift_gap_hours`` / ``max_shift_hours`` from config):

* total > gap threshold -- ``missing_clock_out``, excluded from totals.
* total > max shift -- ``shift_too_long``, still counted.
* complete but shorter than ``min_session_minutes`` -- ``short_session``.
* stream ends while open -- ``missing_clock_out``; never discarded.

Invariants enforced
-------------------
* Conservation: for a session without anomalies
  ``total_minutes == worked_minutes + break_minutes``.
* Minutes are whole minutes between timestamps, truncated.
* Excluded sessions have ``worked_minutes == 0``.

Failure modes
-------------
* ``PunchSequenceError`` -- punches fed to ``SessionReconstructor.run``
  out of chronological order.  ``reconstruct`` sorts first, so it never
  raises this for any input.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from payroll_config.schema import BreakClockInPolicy, PayrollEngineConfig
from payroll_engines.punch_normalizer import normalize_punches
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.punches import ProcessedPunch, Punch, PunchType
from payroll_kernel.domain.sessions import (
    AnomalyCode,
    BreakPeriod,
    IncompleteShift,
    IncompleteShiftType,
    ReconstructionResult,
    SessionAnomaly,
    WorkSession,
)
from payroll_kernel.exceptions import PunchSequenceError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.session_reconstructor")


class SessionState(str, Enum):
    IDLE = "idle"
    OPEN_SESSION = "open_session"
    ON_BREAK = "on_break"


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, truncated toward zero."""
    seconds = (end - start).total_seconds()
    return int(seconds / 60)


@dataclass(frozen=True)
class ScanState:
    """Machine state after folding a prefix of one employee's punches."""
    employee_id: str
    state: SessionState = SessionState.IDLE
    clock_in: datetime | None = None
    break_start: datetime | None = None
    breaks: tuple[BreakPeriod, ...] = ()
    anomalies: tuple[SessionAnomaly, ...] = ()
    last_time: datetime | None = None
    sessions: tuple[WorkSession, ...] = ()
    orphans: tuple[ProcessedPunch, ...] = ()


# ---------------------------------------------------------------------------
# Session closing
# ---------------------------------------------------------------------------


def _long_gap_message(minutes: int, config: PayrollEngineConfig) -> str:
    return (
        f"Gap of {minutes / 60:.1f}h exceeds {config.max_shift_gap_hours}h; "
        f"likely missing clock out"
    )


def _close_incomplete(scan: ScanState, anomaly: SessionAnomaly) -> ScanState:
    """Close the open session without a clock-out; it counts for nothing."""
    session = WorkSession(
        employee_id=scan.employee_id,
        clock_in=scan.clock_in,
        clock_out=None,
        breaks=scan.breaks,
        is_complete=False,
        anomalies=scan.anomalies + (anomaly,),
    )
    logger.info(
        "session_closed_incomplete",
        extra={
            "employee_id": scan.employee_id,
            "clock_in": scan.clock_in,
            "anomaly": anomaly.code.value,
        },
    )
    return replace(
        scan,
        state=SessionState.IDLE,
        clock_in=None,
        break_start=None,
        breaks=(),
        anomalies=(),
        sessions=scan.sessions + (session,),
    )


def _close_with_clock_out(
    scan: ScanState, clock_out: datetime, config: PayrollEngineConfig
) -> ScanState:
    total = minutes_between(scan.clock_in, clock_out)
    break_minutes = sum(b.duration_minutes for b in scan.breaks)
    anomalies = scan.anomalies
    is_complete = True
    excluded = False
    worked = total - break_minutes

    if total > config.max_shift_gap_minutes:
        anomalies += (
            SessionAnomaly(
                AnomalyCode.MISSING_CLOCK_OUT,
                _long_gap_message(total, config),
                scan.clock_in,
            ),
        )
        is_complete = False
        excluded = True
        worked = 0
    elif total > config.max_shift_minutes:
        anomalies += (
            SessionAnomaly(
                AnomalyCode.SHIFT_TOO_LONG,
                f"Shift of {total / 60:.1f}h exceeds {config.max_shift_hours}h",
                clock_out,
            ),
        )
    elif total < config.min_session_minutes:
        anomalies += (
            SessionAnomaly(
                AnomalyCode.SHORT_SESSION,
                f"Very short session (< {config.min_session_minutes} min) - possible error",
                clock_out,
            ),
        )

    session = WorkSession(
        employee_id=scan.employee_id,
        clock_in=scan.clock_in,
        clock_out=clock_out,
        breaks=scan.breaks,
        total_minutes=total,
        break_minutes=break_minutes,
        worked_minutes=worked,
        is_complete=is_complete,
        anomalies=anomalies,
        excluded_from_totals=excluded,
    )
    if excluded:
        logger.warning(
            "session_excluded_long_gap",
            extra={
                "employee_id": scan.employee_id,
                "clock_in": scan.clock_in,
                "clock_out": clock_out,
                "total_minutes": total,
            },
        )
    return replace(
        scan,
        state=SessionState.IDLE,
        clock_in=None,
        break_start=None,
        breaks=(),
        anomalies=(),
        sessions=scan.sessions + (session,),
    )


def _complete_break(scan: ScanState, end: datetime) -> ScanState:
    period = BreakPeriod(
        break_start=scan.break_start,
        break_end=end,
        duration_minutes=minutes_between(scan.break_start, end),
        is_complete=True,
    )
    return replace(
        scan,
        state=SessionState.OPEN_SESSION,
        break_start=None,
        breaks=scan.breaks + (period,),
    )


def _abandon_break(scan: ScanState) -> ScanState:
    """Keep an unterminated break with zero duration and flag it."""
    anomaly = SessionAnomaly(
        AnomalyCode.INCOMPLETE_BREAK,
        "Incomplete break (missing break end)",
        scan.break_start,
    )
    return replace(
        scan,
        state=SessionState.OPEN_SESSION,
        break_start=None,
        breaks=scan.breaks + (BreakPeriod(break_start=scan.break_start),),
        anomalies=scan.anomalies + (anomaly,),
    )


def _open(scan: ScanState, at: datetime) -> ScanState:
    return replace(
        scan,
        state=SessionState.OPEN_SESSION,
        clock_in=at,
        break_start=None,
        breaks=(),
        anomalies=(),
    )


def _supersede(scan: ScanState, punch: ProcessedPunch, config: PayrollEngineConfig) -> ScanState:
    gap = minutes_between(scan.clock_in, punch.timestamp)
    if gap > config.max_shift_gap_minutes:
        anomaly = SessionAnomaly(
            AnomalyCode.MISSING_CLOCK_OUT, _long_gap_message(gap, config), scan.clock_in
        )
    else:
        anomaly = SessionAnomaly(
            AnomalyCode.SUPERSEDED_CLOCK_IN,
            "Missing clock out before next clock in",
            scan.clock_in,
        )
    return _open(_close_incomplete(scan, anomaly), punch.timestamp)


# ---------------------------------------------------------------------------
# Transition handlers
# ---------------------------------------------------------------------------

Handler = Callable[[ScanState, ProcessedPunch, PayrollEngineConfig], ScanState]


def _idle_clock_in(scan, punch, config):
    return _open(scan, punch.timestamp)


def _idle_orphan(scan, punch, config):
    logger.debug(
        "orphan_punch",
        extra={
            "employee_id": scan.employee_id,
            "punch_id": punch.id,
            "punch_type": punch.punch_type.value,
        },
    )
    return replace(scan, orphans=scan.orphans + (punch,))


def _open_clock_in(scan, punch, config):
    return _supersede(scan, punch, config)


def _open_clock_out(scan, punch, config):
    return _close_with_clock_out(scan, punch.timestamp, config)


def _open_break_start(scan, punch, config):
    return replace(scan, state=SessionState.ON_BREAK, break_start=punch.timestamp)


def _open_break_end(scan, punch, config):
    anomaly = SessionAnomaly(
        AnomalyCode.ORPHAN_BREAK_END, "Break end without break start", punch.timestamp
    )
    return replace(scan, anomalies=scan.anomalies + (anomaly,))


def _break_end(scan, punch, config):
    return _complete_break(scan, punch.timestamp)


def _break_clock_in(scan, punch, config):
    if config.clock_in_during_break == BreakClockInPolicy.END_BREAK:
        return _complete_break(scan, punch.timestamp)
    return _supersede(_abandon_break(scan), punch, config)


def _break_restart(scan, punch, config):
    anomaly = SessionAnomaly(
        AnomalyCode.DUPLICATE_BREAK_START,
        "Break start while a break was already open",
        scan.break_start,
    )
    return replace(
        scan, break_start=punch.timestamp, anomalies=scan.anomalies + (anomaly,)
    )


def _break_clock_out(scan, punch, config):
    return _close_with_clock_out(_abandon_break(scan), punch.timestamp, config)


_TRANSITIONS: dict[tuple[SessionState, PunchType], Handler] = {
    (SessionState.IDLE, PunchType.CLOCK_IN): _idle_clock_in,
    (SessionState.IDLE, PunchType.CLOCK_OUT): _idle_orphan,
    (SessionState.IDLE, PunchType.BREAK_START): _idle_orphan,
    (SessionState.IDLE, PunchType.BREAK_END): _idle_orphan,
    (SessionState.OPEN_SESSION, PunchType.CLOCK_IN): _open_clock_in,
    (SessionState.OPEN_SESSION, PunchType.CLOCK_OUT): _open_clock_out,
    (SessionState.OPEN_SESSION, PunchType.BREAK_START): _open_break_start,
    (SessionState.OPEN_SESSION, PunchType.BREAK_END): _open_break_end,
    (SessionState.ON_BREAK, PunchType.CLOCK_IN): _break_clock_in,
    (SessionState.ON_BREAK, PunchType.CLOCK_OUT): _break_clock_out,
    (SessionState.ON_BREAK, PunchType.BREAK_START): _break_restart,
    (SessionState.ON_BREAK, PunchType.BREAK_END): _break_end,
}


class SessionReconstructor:
    """Runs the session state machine over one employee's valid punches.

    Example:
        reconstructor = SessionReconstructor("emp-1", config)
        result = reconstructor.run(sorted_punches)
    """

    def __init__(self, employee_id: str, config: PayrollEngineConfig | None = None):
        self.employee_id = employee_id
        self.config = config or PayrollEngineConfig.with_defaults()

    def step(self, scan: ScanState, punch: ProcessedPunch) -> ScanState:
        """Fold one punch into the machine state."""
        if scan.last_time is not None and punch.timestamp < scan.last_time:
            raise PunchSequenceError(self.employee_id, scan.last_time, punch.timestamp)
        handler = _TRANSITIONS[(scan.state, punch.punch_type)]
        return replace(handler(scan, punch, self.config), last_time=punch.timestamp)

    def finish(self, scan: ScanState) -> ScanState:
        """Close whatever is still open at the end of the stream."""
        if scan.state == SessionState.ON_BREAK:
            scan = _abandon_break(scan)
        if scan.state == SessionState.OPEN_SESSION:
            scan = _close_incomplete(
                scan,
                SessionAnomaly(
                    AnomalyCode.MISSING_CLOCK_OUT,
                    "Incomplete session (missing clock out)",
                    scan.clock_in,
                ),
            )
        return scan

    def run(self, punches: Sequence[ProcessedPunch]) -> ReconstructionResult:
        """Reconstruct sessions from chronologically ordered punches."""
        scan = ScanState(employee_id=self.employee_id)
        for punch in punches:
            if punch.employee_id != self.employee_id:
                raise ValueError(
                    f"Punch {punch.id!r} belongs to {punch.employee_id!r}, "
                    f"not {self.employee_id!r}"
                )
            scan = self.step(scan, punch)
        scan = self.finish(scan)
        return ReconstructionResult(sessions=scan.sessions, orphan_punches=scan.orphans)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@traced_engine("session_reconstructor", "1.0", fingerprint_fields=("processed",))
def reconstruct(
    processed: Iterable[ProcessedPunch],
    config: PayrollEngineConfig | None = None,
) -> ReconstructionResult:
    """Reconstruct sessions for every employee in a processed punch list.

    Noise punches are skipped.  Input order is not assumed.
    """
    config = config or PayrollEngineConfig.with_defaults()

    by_employee: dict[str, list[ProcessedPunch]] = defaultdict(list)
    for punch in processed:
        if not punch.is_noise:
            by_employee[punch.employee_id].append(punch)

    sessions: list[WorkSession] = []
    orphans: list[ProcessedPunch] = []
    for employee_id in sorted(by_employee):
        ordered = sorted(by_employee[employee_id], key=lambda p: (p.timestamp, p.id))
        result = SessionReconstructor(employee_id, config).run(ordered)
        sessions.extend(result.sessions)
        orphans.extend(result.orphan_punches)

    sessions.sort(key=lambda s: (s.clock_in, s.employee_id))
    orphans.sort(key=lambda p: (p.timestamp, p.employee_id, p.id))

    logger.info(
        "sessions_reconstructed",
        extra={
            "employee_count": len(by_employee),
            "session_count": len(sessions),
            "anomalous_sessions": sum(1 for s in sessions if s.has_anomalies),
            "orphan_punches": len(orphans),
        },
    )
    return ReconstructionResult(sessions=tuple(sessions), orphan_punches=tuple(orphans))


def identify_work_sessions(
    processed: Iterable[ProcessedPunch],
    config: PayrollEngineConfig | None = None,
) -> tuple[WorkSession, ...]:
    """Sessions only; orphan punches are discarded."""
    return reconstruct(processed=processed, config=config).sessions


_SHIFT_TYPES: dict[AnomalyCode, tuple[IncompleteShiftType, PunchType]] = {
    AnomalyCode.SUPERSEDED_CLOCK_IN: (IncompleteShiftType.MISSING_CLOCK_OUT, PunchType.CLOCK_IN),
    AnomalyCode.MISSING_CLOCK_OUT: (IncompleteShiftType.MISSING_CLOCK_OUT, PunchType.CLOCK_IN),
    AnomalyCode.SHIFT_TOO_LONG: (IncompleteShiftType.SHIFT_TOO_LONG, PunchType.CLOCK_OUT),
    AnomalyCode.INCOMPLETE_BREAK: (IncompleteShiftType.INCOMPLETE_BREAK, PunchType.BREAK_START),
    AnomalyCode.ORPHAN_BREAK_END: (IncompleteShiftType.IRREGULAR_PUNCH, PunchType.BREAK_END),
    AnomalyCode.DUPLICATE_BREAK_START: (IncompleteShiftType.IRREGULAR_PUNCH, PunchType.BREAK_START),
}


def incomplete_shifts_for(result: ReconstructionResult) -> tuple[IncompleteShift, ...]:
    """Review rows for every reviewable anomaly and orphan punch.

    Short sessions are informational and produce no row.
    """
    shifts: list[IncompleteShift] = []
    for session in result.sessions:
        for anomaly in session.anomalies:
            mapped = _SHIFT_TYPES.get(anomaly.code)
            if mapped is None:
                continue
            shift_type, punch_type = mapped
            shifts.append(
                IncompleteShift(
                    employee_id=session.employee_id,
                    shift_type=shift_type,
                    punch_type=punch_type,
                    punch_time=anomaly.punch_time or session.clock_in,
                    message=anomaly.message,
                )
            )

    for punch in result.orphan_punches:
        if punch.punch_type == PunchType.CLOCK_OUT:
            shift_type = IncompleteShiftType.MISSING_CLOCK_IN
            message = "Clock out without clock in"
        else:
            shift_type = IncompleteShiftType.IRREGULAR_PUNCH
            message = f"{punch.punch_type.value} outside a work session"
        shifts.append(
            IncompleteShift(
                employee_id=punch.employee_id,
                shift_type=shift_type,
                punch_type=punch.punch_type,
                punch_time=punch.timestamp,
                message=message,
            )
        )

    shifts.sort(key=lambda s: (s.punch_time, s.employee_id))
    return tuple(shifts)


@dataclass(frozen=True)
class PunchProcessingResult:
    """Normalizer and reconstructor output for one batch of punches."""
    processed_punches: tuple[ProcessedPunch, ...]
    sessions: tuple[WorkSession, ...]
    orphan_punches: tuple[ProcessedPunch, ...]
    incomplete_shifts: tuple[IncompleteShift, ...]
    total_noise_punches: int
    total_anomalies: int  # sessions carrying at least one anomaly


def process_punches(
    punches: Iterable[Punch],
    config: PayrollEngineConfig | None = None,
) -> PunchProcessingResult:
    """Normalize raw punches and reconstruct sessions in one call."""
    config = config or PayrollEngineConfig.with_defaults()
    processed = normalize_punches(punches=punches, config=config)
    result = reconstruct(processed=processed, config=config)
    return PunchProcessingResult(
        processed_punches=processed,
        sessions=result.sessions,
        orphan_punches=result.orphan_punches,
        incomplete_shifts=incomplete_shifts_for(result),
        total_noise_punches=sum(1 for p in processed if p.is_noise),
        total_anomalies=sum(1 for s in result.sessions if s.has_anomalies),
    )
