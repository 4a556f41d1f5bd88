"""
Tests for the Payroll Period Assembler.

Covers:
- Hourly regular / overtime pay (weekly threshold, 1.5x)
- Tips and gross / total identities
- Prorated salary and contractor rows
- Manual payments (contractors only, within the period)
- Mid-period compensation changes
- Incomplete shifts surfaced for review
- Period totals and input validation
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from itertools import count

import pytest

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.payroll_assembler import (
    assemble_payroll_period,
    calculate_employee_payroll,
    summarize_period,
)
from payroll_kernel.domain.compensation import (
    CompensationHistoryEntry,
    CompensationType,
    ContractorInterval,
    ContractorTerms,
    Employee,
    HourlyTerms,
    PayPeriodType,
    SalaryTerms,
)
from payroll_kernel.domain.payroll import ManualPayment
from payroll_kernel.domain.punches import Punch
from payroll_kernel.domain.sessions import IncompleteShiftType


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_ids = count(1)
START = date(2024, 1, 14)  # Sunday
END = date(2024, 1, 20)


def _shift(employee_id: str, day: date, start_hour: int = 9, hours: int = 8) -> list[Punch]:
    clock_in = datetime(day.year, day.month, day.day, start_hour)
    return [
        Punch(f"p{next(_ids)}", employee_id, "clock_in", clock_in),
        Punch(f"p{next(_ids)}", employee_id, "clock_out", clock_in + timedelta(hours=hours)),
    ]


def _week_of_shifts(employee_id: str, hours: int, first: date = date(2024, 1, 15), days: int = 5):
    punches: list[Punch] = []
    for i in range(days):
        punches.extend(_shift(employee_id, first + timedelta(days=i), hours=hours))
    return punches


def _hourly(rate: int = 1500, employee_id: str = "emp-h", **kwargs) -> Employee:
    return Employee(employee_id, HourlyTerms(rate), name="Hana Lee", position="Line Cook", **kwargs)


def _salaried(amount: int = 100000, **kwargs) -> Employee:
    return Employee(
        "emp-s", SalaryTerms(amount, PayPeriodType.WEEKLY), name="Sam Ortiz", position="Manager", **kwargs
    )


def _per_job_contractor() -> Employee:
    return Employee(
        "emp-c",
        ContractorTerms(50000, ContractorInterval.PER_JOB),
        name="Cory Park",
        position="Photographer",
    )


# ===========================================================================
# Hourly pay
# ===========================================================================


class TestHourlyPay:

    def test_forty_five_hours_one_week(self):
        row = calculate_employee_payroll(_hourly(), _week_of_shifts("emp-h", 9), START, END)

        assert row.hourly_rate_cents == 1500
        assert row.regular_hours == Decimal("40")
        assert row.overtime_hours == Decimal("5")
        assert row.regular_pay_cents == 60000
        # 5h x $15.00 x 1.5
        assert row.overtime_pay_cents == 11250
        assert row.gross_pay_cents == 71250
        assert row.total_pay_cents == 71250
        assert row.total_hours == Decimal("45")
        assert not row.needs_review

    def test_no_overtime_under_threshold(self):
        row = calculate_employee_payroll(_hourly(), _week_of_shifts("emp-h", 8), START, END)
        assert row.overtime_hours == Decimal("0")
        assert row.overtime_pay_cents == 0
        assert row.regular_pay_cents == 60000

    def test_tips_added_after_gross(self):
        row = calculate_employee_payroll(
            _hourly(), _week_of_shifts("emp-h", 9), START, END, tips_cents=5000
        )
        assert row.tips_cents == 5000
        assert row.gross_pay_cents == 71250
        assert row.total_pay_cents == 76250

    def test_configured_overtime_multiplier(self):
        config = PayrollEngineConfig(overtime_multiplier=Decimal("2"))
        row = calculate_employee_payroll(
            _hourly(), _week_of_shifts("emp-h", 9), START, END, config=config
        )
        assert row.overtime_pay_cents == 15000

    def test_overtime_per_week_across_two_weeks(self):
        punches = _week_of_shifts("emp-h", 9) + _week_of_shifts("emp-h", 7, first=date(2024, 1, 22))
        row = calculate_employee_payroll(_hourly(), punches, START, date(2024, 1, 27))
        assert row.overtime_hours == Decimal("5")
        assert row.regular_hours == Decimal("75")
        assert len(row.weeks) == 2

    def test_sessions_outside_period_ignored(self):
        punches = _week_of_shifts("emp-h", 8) + _shift("emp-h", date(2024, 1, 21))
        row = calculate_employee_payroll(_hourly(), punches, START, END)
        assert row.regular_hours == Decimal("40")

    def test_no_punches(self):
        row = calculate_employee_payroll(_hourly(), [], START, END)
        assert row.gross_pay_cents == 0
        assert row.weeks == ()

    def test_rate_from_last_hourly_day(self):
        employee = _hourly(
            2000,
            compensation_history=(
                CompensationHistoryEntry(date(2024, 1, 1), "hourly", 1500),
                CompensationHistoryEntry(date(2024, 1, 18), "hourly", 2000),
            ),
        )
        row = calculate_employee_payroll(employee, _week_of_shifts("emp-h", 8), START, END)
        assert row.hourly_rate_cents == 2000
        assert row.regular_pay_cents == 80000

    def test_half_cent_regular_pay_rounds_up(self):
        # 5h50m x 15.03/h = 87.675
        clock_in = datetime(2024, 1, 15, 9)
        punches = [
            Punch("a1", "emp-h", "clock_in", clock_in),
            Punch("a2", "emp-h", "clock_out", clock_in + timedelta(hours=5, minutes=50)),
        ]
        row = calculate_employee_payroll(_hourly(1503), punches, START, END)
        assert row.regular_pay_cents == 8768
        assert row.gross_pay_cents == 8768

    def test_half_cent_overtime_pay_rounds_up(self):
        # 10 overtime minutes x 15.02/h x 1.5 = 3.755
        punches = _week_of_shifts("emp-h", 8, days=4)
        clock_in = datetime(2024, 1, 19, 9)
        punches += [
            Punch("b1", "emp-h", "clock_in", clock_in),
            Punch("b2", "emp-h", "clock_out", clock_in + timedelta(hours=8, minutes=10)),
        ]
        row = calculate_employee_payroll(_hourly(1502), punches, START, END)
        assert row.regular_pay_cents == 60080
        assert row.overtime_pay_cents == 376


# ===========================================================================
# Salary and contractor pay
# ===========================================================================


class TestSalaryAndContractorPay:

    def test_full_week_salary(self):
        row = calculate_employee_payroll(_salaried(), [], START, END)
        assert row.compensation_type == CompensationType.SALARY
        assert row.salary_pay_cents == 100000
        assert row.hourly_rate_cents == 0
        assert row.gross_pay_cents == 100000

    def test_three_day_period_prorated(self):
        row = calculate_employee_payroll(_salaried(), [], date(2024, 1, 15), date(2024, 1, 17))
        assert row.salary_pay_cents == 42857

    def test_salaried_punches_do_not_earn_hourly_pay(self):
        punches = _week_of_shifts("emp-s", 10)
        row = calculate_employee_payroll(_salaried(), punches, START, END)
        assert row.regular_hours == Decimal("0")
        assert row.regular_pay_cents == 0
        assert row.gross_pay_cents == 100000

    def test_interval_contractor_prorated(self):
        employee = Employee("emp-c", ContractorTerms(70000, ContractorInterval.WEEKLY))
        row = calculate_employee_payroll(employee, [], START, END)
        assert row.contractor_pay_cents == 70000
        assert row.gross_pay_cents == 70000

    def test_switch_from_hourly_to_salary_mid_period(self):
        employee = Employee(
            "emp-x",
            SalaryTerms(70000, PayPeriodType.WEEKLY),
            compensation_history=(
                CompensationHistoryEntry(date(2024, 1, 1), "hourly", 1500),
                CompensationHistoryEntry(date(2024, 1, 17), "salary", 70000, "weekly"),
            ),
        )
        punches = _week_of_shifts("emp-x", 8, days=4)  # Mon..Thu

        row = calculate_employee_payroll(employee, punches, START, END)

        # Mon and Tue hourly, Wed..Sat salaried
        assert row.regular_hours == Decimal("16")
        assert row.hourly_rate_cents == 1500
        assert row.regular_pay_cents == 24000
        assert row.salary_pay_cents == 40000
        assert row.gross_pay_cents == 64000


class TestManualPayments:

    def test_per_job_contractor_paid_within_period(self):
        payments = [
            ManualPayment("m2", date(2024, 1, 18), 15000, "Catering photos"),
            ManualPayment("m1", date(2024, 1, 15), 10000),
            ManualPayment("m3", date(2024, 1, 25), 99999),
        ]
        row = calculate_employee_payroll(
            _per_job_contractor(), [], START, END, manual_payments=payments
        )

        assert row.contractor_pay_cents == 0
        assert row.manual_payments_total_cents == 25000
        assert [m.id for m in row.manual_payments] == ["m1", "m2"]
        assert row.gross_pay_cents == 25000

    def test_non_contractor_payments_ignored(self, captured_logs):
        payments = [ManualPayment("m1", date(2024, 1, 15), 10000)]
        row = calculate_employee_payroll(_hourly(), [], START, END, manual_payments=payments)

        assert row.manual_payments_total_cents == 0
        assert row.manual_payments == ()
        record = next(r for r in captured_logs() if r["message"] == "manual_payments_ignored")
        assert record["level"] == "WARNING"


# ===========================================================================
# Review rows
# ===========================================================================


class TestIncompleteShifts:

    def test_missing_clock_out_flagged_not_paid(self):
        punches = _week_of_shifts("emp-h", 8, days=2) + [
            Punch("open", "emp-h", "clock_in", datetime(2024, 1, 17, 9)),
        ]

        row = calculate_employee_payroll(_hourly(), punches, START, END)

        assert row.regular_hours == Decimal("16")
        assert row.needs_review
        assert len(row.incomplete_shifts) == 1
        shift = row.incomplete_shifts[0]
        assert shift.shift_type == IncompleteShiftType.MISSING_CLOCK_OUT
        assert shift.punch_time == datetime(2024, 1, 17, 9)

    def test_review_rows_outside_period_dropped(self):
        punches = [Punch("open", "emp-h", "clock_in", datetime(2024, 1, 22, 9))]
        row = calculate_employee_payroll(_hourly(), punches, START, END)
        assert row.incomplete_shifts == ()

    def test_review_warning_logged(self, captured_logs):
        punches = [Punch("open", "emp-h", "clock_in", datetime(2024, 1, 17, 9))]
        calculate_employee_payroll(_hourly(), punches, START, END)
        record = next(
            r for r in captured_logs() if r["message"] == "employee_payroll_needs_review"
        )
        assert record["incomplete_shifts"] == 1
        assert record["pay_period"] == "2024-01-14/2024-01-20"


# ===========================================================================
# Validation
# ===========================================================================


class TestValidation:

    def test_start_after_end(self):
        with pytest.raises(ValueError, match="after end"):
            calculate_employee_payroll(_hourly(), [], END, START)

    def test_foreign_punches_rejected(self):
        with pytest.raises(ValueError, match="emp-other"):
            calculate_employee_payroll(_hourly(), _shift("emp-other", date(2024, 1, 15)), START, END)


# ===========================================================================
# Period assembly
# ===========================================================================


class TestAssemblePayrollPeriod:

    def test_rows_in_input_order_with_totals(self):
        employees = [_salaried(), _hourly(), _per_job_contractor()]
        punches = _week_of_shifts("emp-h", 9)

        period = assemble_payroll_period(
            employees,
            punches,
            START,
            END,
            tips_by_employee={"emp-h": 5000},
            manual_payments_by_employee={
                "emp-c": [ManualPayment("m1", date(2024, 1, 16), 20000)]
            },
        )

        assert [r.employee_id for r in period.employees] == ["emp-s", "emp-h", "emp-c"]
        assert period.start_date == START
        assert period.end_date == END
        assert period.total_regular_hours == Decimal("40")
        assert period.total_overtime_hours == Decimal("5")
        assert period.total_regular_pay_cents == 60000
        assert period.total_overtime_pay_cents == 11250
        assert period.total_gross_pay_cents == 100000 + 71250 + 20000
        assert period.total_tips_cents == 5000
        assert period.total_pay_cents == period.total_gross_pay_cents + 5000
        assert period.total_manual_payments_cents == 20000
        assert period.incomplete_shift_count == 0

    def test_unknown_employee_punches_skipped(self, captured_logs):
        punches = _week_of_shifts("emp-h", 8) + _shift("ghost", date(2024, 1, 15))

        period = assemble_payroll_period([_hourly()], punches, START, END)

        assert period.total_regular_hours == Decimal("40")
        record = next(
            r for r in captured_logs() if r["message"] == "punches_for_unknown_employees"
        )
        assert record["employee_ids"] == ["ghost"]
        assert record["punch_count"] == 2

    def test_employees_are_independent(self):
        alone = calculate_employee_payroll(_hourly(), _week_of_shifts("emp-h", 9), START, END)
        together = assemble_payroll_period(
            [_hourly(), _hourly(2000, employee_id="emp-h2")],
            _week_of_shifts("emp-h", 9) + _week_of_shifts("emp-h2", 6),
            START,
            END,
        )
        first = together.employees[0]
        assert first.gross_pay_cents == alone.gross_pay_cents
        assert first.regular_hours == alone.regular_hours

    def test_failing_employee_reported_others_paid(self, captured_logs):
        broken = Employee(
            "emp-b",
            HourlyTerms(1500),
            compensation_history=(CompensationHistoryEntry(date(2024, 1, 16), "salary", 100000),),
        )

        period = assemble_payroll_period(
            [_hourly(), broken], _week_of_shifts("emp-h", 8), START, END
        )

        assert [r.employee_id for r in period.employees] == ["emp-h"]
        assert period.total_gross_pay_cents == 60000
        assert len(period.failed_employees) == 1
        failure = period.failed_employees[0]
        assert failure.employee_id == "emp-b"
        assert failure.error_code == "MISSING_COMPENSATION_FIELD"
        assert "pay_period_type" in failure.message

        record = next(r for r in captured_logs() if r["message"] == "employee_payroll_failed")
        assert record["level"] == "ERROR"
        assert record["exc_type"] == "MissingCompensationFieldError"
        assert record["employee_id"] == "emp-b"
        assert record["pay_period"] == "2024-01-14/2024-01-20"

    def test_no_failures_by_default(self):
        period = assemble_payroll_period([_hourly()], _week_of_shifts("emp-h", 8), START, END)
        assert period.failed_employees == ()

    def test_empty_period(self):
        period = assemble_payroll_period([], [], START, END)
        assert period.employees == ()
        assert period.total_pay_cents == 0
        assert period.total_regular_hours == Decimal("0")

    def test_summarize_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            summarize_period(END, START, [])
