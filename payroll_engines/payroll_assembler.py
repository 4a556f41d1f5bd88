"""
Payroll Period Assembler (``payroll_engines.payroll_assembler``).

Responsibility
--------------
Combines each employee's weekly hours, resolved compensation, tips and
manual payments into an ``EmployeePayroll`` row, then totals the rows
into a ``PayrollPeriod``.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Last stage: runs the punch
pipeline (normalizer, reconstructor, aggregator) per employee and prices
the result with ``payroll_engines.compensation``.

Pay rules
---------
* Hourly: ``regular_pay = round(regular_hours x rate)`` and
  ``overtime_pay = round(overtime_hours x rate x overtime_multiplier)``,
  with hours taken exactly from worked minutes.
  Only sessions on days the employee was hourly count; the rate is the
  one in effect on the last hourly day of the period.
* Salary / interval contractor: prorated over the period.
* Manual payments: counted for contractors only, within the period.
* ``gross = regular + overtime + salary + contractor + manual`` and
  ``total = gross + tips``.

Invariants enforced
-------------------
* Employees are independent: a row depends only on that employee's
  punches, terms, tips and payments, so callers may fan rows out across
  workers.
* Session anomalies become ``incomplete_shifts`` on the row; they never
  block payroll.

Failure modes
-------------
* ``ValueError`` -- ``start`` after ``end``.
* ``PayrollKernelError`` subclasses (unusable compensation terms or
  history) raise from ``calculate_employee_payroll``.
  ``assemble_payroll_period`` logs the error, leaves that employee out of
  the rows and totals, and lists it in ``PayrollPeriod.failed_employees``;
  every other employee is still paid.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from decimal import Decimal

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.compensation import (
    calculate_contractor_pay_for_period,
    calculate_hourly_pay,
    calculate_salary_for_period,
    resolve_compensation_for_date,
)
from payroll_engines.hours_aggregator import (
    aggregate_weekly_hours,
    exact_regular_and_overtime_hours,
)
from payroll_engines.session_reconstructor import process_punches
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.compensation import CompensationType, Employee, HourlyTerms
from payroll_kernel.domain.payroll import (
    EmployeePayroll,
    FailedEmployee,
    ManualPayment,
    PayrollPeriod,
)
from payroll_kernel.domain.punches import Punch
from payroll_kernel.domain.sessions import WorkSession
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.payroll_assembler")


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValueError(f"Payroll period start {start} is after end {end}")


def _hourly_rate_for_period(employee: Employee, start: date, end: date) -> int:
    """Rate on the last day of the period the employee was hourly; 0 if never."""
    day = end
    while day >= start:
        terms = resolve_compensation_for_date(employee, day).terms
        if isinstance(terms, HourlyTerms):
            return terms.rate_cents
        day -= timedelta(days=1)
    return 0


def _hourly_sessions(
    employee: Employee, sessions: Iterable[WorkSession]
) -> list[WorkSession]:
    hourly_day: dict[date, bool] = {}
    kept = []
    for session in sessions:
        day = session.work_date
        if day not in hourly_day:
            terms = resolve_compensation_for_date(employee, day).terms
            hourly_day[day] = isinstance(terms, HourlyTerms)
        if hourly_day[day]:
            kept.append(session)
    return kept


@traced_engine("payroll_assembler", "1.0", fingerprint_fields=("start", "end", "tips_cents"))
def calculate_employee_payroll(
    employee: Employee,
    punches: Iterable[Punch],
    start: date,
    end: date,
    tips_cents: int = 0,
    manual_payments: Sequence[ManualPayment] = (),
    config: PayrollEngineConfig | None = None,
) -> EmployeePayroll:
    """One employee's payroll row for the inclusive range ``[start, end]``.

    Args:
        employee: Employee with compensation terms and history.
        punches: That employee's punches, any order.  Punches for other
            employees raise ``ValueError``.
        start: First day of the period.
        end: Last day of the period.
        tips_cents: Tips owed for the period.
        manual_payments: Per-job payments; only contractors are paid them.
        config: Engine tunables.
    """
    _check_range(start, end)
    config = config or PayrollEngineConfig.with_defaults()
    punches = list(punches)
    strangers = {p.employee_id for p in punches} - {employee.id}
    if strangers:
        raise ValueError(
            f"Punches for {sorted(strangers)} passed to payroll of employee {employee.id}"
        )

    with LogContext.bind_pay_period(employee.id, start, end):
        processed = process_punches(punches, config)
        in_period = [s for s in processed.sessions if start <= s.work_date <= end]
        incomplete = tuple(
            s for s in processed.incomplete_shifts if start <= s.punch_time.date() <= end
        )

        hours = aggregate_weekly_hours(
            _hourly_sessions(employee, in_period), config=config, start=start, end=end
        )
        rate = _hourly_rate_for_period(employee, start, end)
        regular_exact, overtime_exact = exact_regular_and_overtime_hours(hours.weeks, config)
        regular_pay = calculate_hourly_pay(rate, regular_exact)
        overtime_pay = calculate_hourly_pay(rate, overtime_exact, config.overtime_multiplier)

        salary_pay = calculate_salary_for_period(employee, start=start, end=end, config=config)
        contractor_pay = calculate_contractor_pay_for_period(
            employee, start=start, end=end, config=config
        )

        payments: tuple[ManualPayment, ...] = ()
        if employee.compensation_type == CompensationType.CONTRACTOR:
            payments = tuple(
                sorted(
                    (m for m in manual_payments if start <= m.date <= end),
                    key=lambda m: (m.date, m.id),
                )
            )
        elif manual_payments:
            logger.warning(
                "manual_payments_ignored",
                extra={
                    "employee_id": employee.id,
                    "compensation_type": employee.compensation_type.value,
                    "payment_count": len(manual_payments),
                },
            )
        manual_total = sum(m.amount_cents for m in payments)

        gross = regular_pay + overtime_pay + salary_pay + contractor_pay + manual_total
        row = EmployeePayroll(
            employee_id=employee.id,
            employee_name=employee.name,
            position=employee.position,
            compensation_type=employee.compensation_type,
            hourly_rate_cents=rate,
            regular_hours=hours.regular_hours,
            overtime_hours=hours.overtime_hours,
            regular_pay_cents=regular_pay,
            overtime_pay_cents=overtime_pay,
            salary_pay_cents=salary_pay,
            contractor_pay_cents=contractor_pay,
            manual_payments_total_cents=manual_total,
            gross_pay_cents=gross,
            tips_cents=tips_cents,
            total_pay_cents=gross + tips_cents,
            weeks=hours.weeks,
            manual_payments=payments,
            incomplete_shifts=incomplete,
        )

        logger.info(
            "employee_payroll_calculated",
            extra={
                "employee_id": employee.id,
                "regular_hours": str(row.regular_hours),
                "overtime_hours": str(row.overtime_hours),
                "gross_pay_cents": str(row.gross_pay_cents),
                "total_pay_cents": str(row.total_pay_cents),
                "incomplete_shifts": len(incomplete),
            },
        )
        if incomplete:
            logger.warning(
                "employee_payroll_needs_review",
                extra={"employee_id": employee.id, "incomplete_shifts": len(incomplete)},
            )
    return row


def summarize_period(
    start: date,
    end: date,
    rows: Sequence[EmployeePayroll],
    failed: Sequence[FailedEmployee] = (),
) -> PayrollPeriod:
    """Total a set of employee rows into a ``PayrollPeriod``."""
    _check_range(start, end)
    return PayrollPeriod(
        start_date=start,
        end_date=end,
        employees=tuple(rows),
        total_regular_hours=sum((r.regular_hours for r in rows), Decimal("0")),
        total_overtime_hours=sum((r.overtime_hours for r in rows), Decimal("0")),
        total_regular_pay_cents=sum(r.regular_pay_cents for r in rows),
        total_overtime_pay_cents=sum(r.overtime_pay_cents for r in rows),
        total_gross_pay_cents=sum(r.gross_pay_cents for r in rows),
        total_tips_cents=sum(r.tips_cents for r in rows),
        total_pay_cents=sum(r.total_pay_cents for r in rows),
        total_manual_payments_cents=sum(r.manual_payments_total_cents for r in rows),
        failed_employees=tuple(failed),
    )


@traced_engine("payroll_assembler", "1.0", fingerprint_fields=("start", "end"))
def assemble_payroll_period(
    employees: Sequence[Employee],
    punches: Iterable[Punch],
    start: date,
    end: date,
    tips_by_employee: Mapping[str, int] | None = None,
    manual_payments_by_employee: Mapping[str, Sequence[ManualPayment]] | None = None,
    config: PayrollEngineConfig | None = None,
) -> PayrollPeriod:
    """Payroll rows for every employee, in the order given, plus totals.

    Punches belonging to no listed employee are skipped with a warning.
    An employee whose row raises a ``PayrollKernelError`` is left out of
    the rows and totals and reported in ``failed_employees`` instead.
    """
    _check_range(start, end)
    config = config or PayrollEngineConfig.with_defaults()
    tips_by_employee = tips_by_employee or {}
    manual_payments_by_employee = manual_payments_by_employee or {}

    by_employee: dict[str, list[Punch]] = defaultdict(list)
    for punch in punches:
        by_employee[punch.employee_id].append(punch)

    unknown = set(by_employee) - {e.id for e in employees}
    if unknown:
        logger.warning(
            "punches_for_unknown_employees",
            extra={
                "employee_ids": sorted(unknown),
                "punch_count": sum(len(by_employee[i]) for i in unknown),
            },
        )

    rows: list[EmployeePayroll] = []
    failed: list[FailedEmployee] = []
    for employee in employees:
        try:
            rows.append(
                calculate_employee_payroll(
                    employee,
                    by_employee.get(employee.id, ()),
                    start=start,
                    end=end,
                    tips_cents=tips_by_employee.get(employee.id, 0),
                    manual_payments=manual_payments_by_employee.get(employee.id, ()),
                    config=config,
                )
            )
        except PayrollKernelError as exc:
            failed.append(FailedEmployee(employee.id, exc.code, str(exc)))
            with LogContext.bind_pay_period(employee.id, start, end):
                logger.error("employee_payroll_failed", exc_info=True)

    period = summarize_period(start, end, rows, failed)

    logger.info(
        "payroll_period_assembled",
        extra={
            "start": start,
            "end": end,
            "employee_count": len(rows),
            "failed_employee_count": len(failed),
            "total_gross_pay_cents": str(period.total_gross_pay_cents),
            "total_pay_cents": str(period.total_pay_cents),
            "incomplete_shifts": period.incomplete_shift_count,
        },
    )
    return period
