"""
Tests for the Session Reconstructor.

Covers:
- Complete sessions with breaks (conservation of minutes)
- Long-gap exclusion, overlong shifts, short sessions
- Superseded clock-ins and end-of-stream sessions
- Break edge cases and the clock-in-during-break policy
- Orphan punches and incomplete-shift review rows
- The transition table and sequence errors
"""

from datetime import datetime, timedelta
from itertools import count

import pytest

from payroll_config.schema import BreakClockInPolicy, PayrollEngineConfig
from payroll_engines.session_reconstructor import (
    _TRANSITIONS,
    SessionReconstructor,
    SessionState,
    identify_work_sessions,
    incomplete_shifts_for,
    minutes_between,
    process_punches,
    reconstruct,
)
from payroll_kernel.domain.punches import NoiseReason, ProcessedPunch, Punch, PunchType
from payroll_kernel.domain.sessions import AnomalyCode, IncompleteShiftType
from payroll_kernel.exceptions import PunchSequenceError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ids = count(1)
MONDAY = datetime(2024, 1, 15, 0, 0)


def _at(hours: float, day_offset: int = 0) -> datetime:
    return MONDAY + timedelta(days=day_offset, minutes=round(hours * 60))


def _raw(punch_type: str, at: datetime, employee_id: str = "emp-1") -> Punch:
    return Punch(f"p{next(_ids)}", employee_id, PunchType(punch_type), at)


def _valid(punch_type: str, at: datetime, employee_id: str = "emp-1") -> ProcessedPunch:
    return ProcessedPunch(_raw(punch_type, at, employee_id))


def _single(result):
    assert len(result.sessions) == 1
    return result.sessions[0]


# ===========================================================================
# Complete sessions
# ===========================================================================


class TestCompleteSessions:

    def test_shift_with_break(self):
        result = reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_start", _at(12)),
            _valid("break_end", _at(12.5)),
            _valid("clock_out", _at(17)),
        ])

        session = _single(result)
        assert session.is_complete
        assert not session.has_anomalies
        assert session.total_minutes == 480
        assert session.break_minutes == 30
        assert session.worked_minutes == 450
        assert len(session.breaks) == 1
        assert session.breaks[0].is_complete
        assert session.breaks[0].duration_minutes == 30

    def test_minutes_conserved(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(8)),
            _valid("break_start", _at(10)),
            _valid("break_end", _at(10.25)),
            _valid("break_start", _at(13)),
            _valid("break_end", _at(13.75)),
            _valid("clock_out", _at(16.5)),
        ]))
        assert session.total_minutes == session.worked_minutes + session.break_minutes
        assert session.break_minutes == sum(b.duration_minutes for b in session.breaks)
        assert session.break_minutes == 60

    def test_minutes_are_truncated(self):
        start = datetime(2024, 1, 15, 9, 0, 0)
        assert minutes_between(start, start + timedelta(minutes=10, seconds=59)) == 10

    def test_unordered_input_is_sorted(self):
        result = reconstruct([
            _valid("clock_out", _at(17)),
            _valid("clock_in", _at(9)),
        ])
        assert _single(result).worked_minutes == 480

    def test_noise_punches_are_ignored(self):
        noisy = ProcessedPunch(
            _raw("clock_out", _at(10)), is_noise=True, noise_reason=NoiseReason.DUPLICATE
        )
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            noisy,
            _valid("clock_out", _at(17)),
        ]))
        assert session.total_minutes == 480

    def test_employees_reconstructed_independently(self):
        result = reconstruct([
            _valid("clock_in", _at(9), "emp-a"),
            _valid("clock_in", _at(10), "emp-b"),
            _valid("clock_out", _at(17), "emp-a"),
            _valid("clock_out", _at(18), "emp-b"),
        ])
        by_employee = {s.employee_id: s for s in result.sessions}
        assert by_employee["emp-a"].worked_minutes == 480
        assert by_employee["emp-b"].worked_minutes == 480
        assert not any(s.has_anomalies for s in result.sessions)


# ===========================================================================
# Closing rules
# ===========================================================================


class TestClosingRules:

    def test_long_gap_excluded_from_totals(self):
        """Monday 09:00 to Wednesday 09:00 is a missed clock-out, not 48 hours."""
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_out", _at(9, day_offset=2)),
        ]))

        assert AnomalyCode.MISSING_CLOCK_OUT in session.anomaly_codes
        assert session.excluded_from_totals
        assert session.worked_minutes == 0
        assert not session.is_complete
        assert session.total_minutes == 48 * 60
        assert session.worked_hours == 0

    def test_shift_over_max_is_counted_but_flagged(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(6)),
            _valid("clock_out", _at(23)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.SHIFT_TOO_LONG,)
        assert session.worked_minutes == 17 * 60
        assert not session.excluded_from_totals

    def test_exactly_max_shift_is_clean(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(6)),
            _valid("clock_out", _at(22)),
        ]))
        assert not session.has_anomalies

    def test_exactly_gap_threshold_is_too_long_not_excluded(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(0)),
            _valid("clock_out", _at(18)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.SHIFT_TOO_LONG,)
        assert session.worked_minutes == 18 * 60

    def test_configured_thresholds(self):
        config = PayrollEngineConfig(max_shift_hours=8, max_shift_gap_hours=10)
        session = _single(reconstruct([
            _valid("clock_in", _at(8)),
            _valid("clock_out", _at(19)),
        ], config=config))
        assert session.excluded_from_totals

    def test_short_session_flagged_and_counted(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_out", _at(9) + timedelta(minutes=2)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.SHORT_SESSION,)
        assert session.worked_minutes == 2
        assert session.is_complete

    def test_short_session_flag_can_be_disabled(self):
        config = PayrollEngineConfig(min_session_minutes=0)
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_out", _at(9) + timedelta(minutes=1)),
        ], config=config))
        assert not session.has_anomalies

    def test_open_session_at_end_of_stream(self):
        session = _single(reconstruct([_valid("clock_in", _at(9))]))
        assert session.anomaly_codes == (AnomalyCode.MISSING_CLOCK_OUT,)
        assert session.clock_out is None
        assert session.total_minutes == 0
        assert session.worked_minutes == 0


# ===========================================================================
# Superseded clock-ins
# ===========================================================================


class TestSupersededClockIn:

    def test_new_clock_in_closes_prior_session(self):
        result = reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_in", _at(13)),
            _valid("clock_out", _at(17)),
        ])

        first, second = result.sessions
        assert first.anomaly_codes == (AnomalyCode.SUPERSEDED_CLOCK_IN,)
        assert first.anomalies[0].code.value == "missing clock out"
        assert first.worked_minutes == 0
        assert not first.is_complete
        assert second.is_complete
        assert second.worked_minutes == 240

    def test_new_clock_in_after_long_gap(self):
        result = reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_in", _at(9, day_offset=1)),
            _valid("clock_out", _at(17, day_offset=1)),
        ])
        first = result.sessions[0]
        assert first.anomaly_codes == (AnomalyCode.MISSING_CLOCK_OUT,)
        assert "exceeds" in first.anomalies[0].message


# ===========================================================================
# Breaks
# ===========================================================================


class TestBreaks:

    def test_clock_in_during_break_ends_break_by_default(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_start", _at(12)),
            _valid("clock_in", _at(12.5)),
            _valid("clock_out", _at(17)),
        ]))
        assert session.is_complete
        assert not session.has_anomalies
        assert session.break_minutes == 30
        assert session.worked_minutes == 450

    def test_clock_in_during_break_new_session_policy(self):
        config = PayrollEngineConfig(clock_in_during_break=BreakClockInPolicy.NEW_SESSION)
        result = reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_start", _at(12)),
            _valid("clock_in", _at(12.5)),
            _valid("clock_out", _at(17)),
        ], config=config)

        first, second = result.sessions
        assert AnomalyCode.INCOMPLETE_BREAK in first.anomaly_codes
        assert AnomalyCode.SUPERSEDED_CLOCK_IN in first.anomaly_codes
        assert first.breaks[0].duration_minutes == 0
        assert not first.breaks[0].is_complete
        assert second.worked_minutes == 270

    def test_clock_out_during_break_keeps_incomplete_break(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_start", _at(12)),
            _valid("clock_out", _at(17)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.INCOMPLETE_BREAK,)
        assert session.breaks[0].break_end is None
        assert session.breaks[0].duration_minutes == 0
        assert session.worked_minutes == 480

    def test_break_end_without_start(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_end", _at(12)),
            _valid("clock_out", _at(17)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.ORPHAN_BREAK_END,)
        assert session.worked_minutes == 480

    def test_repeated_break_start_restarts_break(self):
        session = _single(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("break_start", _at(12)),
            _valid("break_start", _at(12) + timedelta(minutes=10)),
            _valid("break_end", _at(12.5)),
            _valid("clock_out", _at(17)),
        ]))
        assert session.anomaly_codes == (AnomalyCode.DUPLICATE_BREAK_START,)
        assert session.break_minutes == 20


# ===========================================================================
# Orphans and review rows
# ===========================================================================


class TestOrphansAndIncompleteShifts:

    def test_clock_out_without_clock_in(self):
        result = reconstruct([_valid("clock_out", _at(17))])
        assert result.sessions == ()
        assert len(result.orphan_punches) == 1

        shifts = incomplete_shifts_for(result)
        assert len(shifts) == 1
        assert shifts[0].shift_type == IncompleteShiftType.MISSING_CLOCK_IN
        assert shifts[0].punch_type == PunchType.CLOCK_OUT

    def test_missing_clock_out_review_row(self):
        shifts = incomplete_shifts_for(reconstruct([_valid("clock_in", _at(18))]))
        assert len(shifts) == 1
        assert shifts[0].shift_type == IncompleteShiftType.MISSING_CLOCK_OUT
        assert shifts[0].punch_type == PunchType.CLOCK_IN
        assert shifts[0].punch_time == _at(18)

    def test_shift_too_long_review_row(self):
        shifts = incomplete_shifts_for(reconstruct([
            _valid("clock_in", _at(5)),
            _valid("clock_out", _at(22)),
        ]))
        assert [s.shift_type for s in shifts] == [IncompleteShiftType.SHIFT_TOO_LONG]
        assert shifts[0].punch_type == PunchType.CLOCK_OUT

    def test_short_session_has_no_review_row(self):
        shifts = incomplete_shifts_for(reconstruct([
            _valid("clock_in", _at(9)),
            _valid("clock_out", _at(9) + timedelta(minutes=1)),
        ]))
        assert shifts == ()

    def test_break_punch_outside_session_is_irregular(self):
        shifts = incomplete_shifts_for(reconstruct([_valid("break_start", _at(12))]))
        assert shifts[0].shift_type == IncompleteShiftType.IRREGULAR_PUNCH


# ===========================================================================
# State machine
# ===========================================================================


class TestStateMachine:

    def test_transition_table_is_exhaustive(self):
        for state in SessionState:
            for punch_type in PunchType:
                assert (state, punch_type) in _TRANSITIONS

    def test_out_of_order_punches_raise(self):
        reconstructor = SessionReconstructor("emp-1")
        with pytest.raises(PunchSequenceError) as exc_info:
            reconstructor.run([
                _valid("clock_out", _at(17)),
                _valid("clock_in", _at(9)),
            ])
        assert exc_info.value.code == "PUNCH_SEQUENCE_ERROR"
        assert exc_info.value.employee_id == "emp-1"

    def test_foreign_punch_rejected(self):
        reconstructor = SessionReconstructor("emp-1")
        with pytest.raises(ValueError, match="belongs to"):
            reconstructor.run([_valid("clock_in", _at(9), "emp-2")])

    def test_step_returns_new_state(self):
        reconstructor = SessionReconstructor("emp-1")
        from payroll_engines.session_reconstructor import ScanState

        idle = ScanState(employee_id="emp-1")
        opened = reconstructor.step(idle, _valid("clock_in", _at(9)))

        assert idle.state == SessionState.IDLE
        assert opened.state == SessionState.OPEN_SESSION
        assert opened.clock_in == _at(9)


# ===========================================================================
# Pipeline
# ===========================================================================


class TestProcessPunches:

    def test_normalize_then_reconstruct(self):
        result = process_punches([
            _raw("clock_in", _at(9)),
            _raw("clock_in", _at(9) + timedelta(seconds=30)),
            _raw("clock_out", _at(17)),
        ])

        assert len(result.processed_punches) == 3
        assert result.total_noise_punches == 1
        assert len(result.sessions) == 1
        assert result.sessions[0].clock_in == _at(9) + timedelta(seconds=30)
        assert result.total_anomalies == 0
        assert result.incomplete_shifts == ()

    def test_counts_anomalous_sessions(self):
        result = process_punches([
            _raw("clock_in", _at(9)),
            _raw("clock_in", _at(13)),
        ])
        assert result.total_anomalies == 2
        assert len(result.incomplete_shifts) == 2

    def test_identify_work_sessions_returns_sessions(self):
        sessions = identify_work_sessions([
            _valid("clock_in", _at(9)),
            _valid("clock_out", _at(17)),
        ])
        assert len(sessions) == 1

    def test_reconstruction_logged(self, captured_logs):
        reconstruct([_valid("clock_in", _at(9))])
        messages = [r["message"] for r in captured_logs()]
        assert "session_closed_incomplete" in messages
        assert "sessions_reconstructed" in messages
