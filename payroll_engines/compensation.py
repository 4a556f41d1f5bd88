"""
Compensation Resolver (``payroll_engines.compensation``).

Responsibility
--------------
Turns an employee's compensation terms into cents:

* resolves the terms in effect on a date, honoring the append-only
  compensation history;
* computes daily labor cost per compensation type (hourly, salary,
  contractor) and the daily ``DailyLaborAllocation`` records;
* prorates salary and contractor pay over an arbitrary date range;
* validates manual per-job contractor payments;
* summarizes allocations for reporting.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
Consumes ``Employee`` values and hours from ``hours_aggregator``; feeds
``payroll_assembler``.

Invariants enforced
-------------------
* Every result is an ``int`` number of cents.  Intermediate amounts are
  exact ``Fraction`` values, rounded half up (away from zero) exactly once
  per result, so an exact half cent always rounds up.
* Period proration accumulates unrounded daily amounts and rounds the
  sum, so a period differs from the sum of rounded days by at most one
  cent per day.
* A compensation change takes effect exactly on its ``effective_date``.
* Days before ``hire_date`` or after ``termination_date`` cost nothing.

Failure modes
-------------
* ``HoursWorkedRequiredError`` -- hourly cost requested without hours.
* ``MissingCompensationFieldError`` -- terms cannot be built (e.g. a
  history entry switches to salary with no pay period known).
* ``InvalidCompensationError`` -- negative or non-integer amounts.
* ``InvalidManualPaymentError`` -- malformed manual per-job payment.

Audit relevance
---------------
Each ``DailyLaborAllocation`` carries human-readable calculation notes
("8.00 hrs x $15.00/hr") and, for salaries, the source pay period.
"""

from __future__ import annotations

import calendar
import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, getcontext
from fractions import Fraction
from typing import Any

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.allocations import (
    CompensationSummary,
    DailyLaborAllocation,
    LaborCostBreakdown,
)
from payroll_kernel.domain.compensation import (
    CompensationHistoryEntry,
    CompensationSnapshot,
    CompensationTerms,
    CompensationType,
    ContractorInterval,
    ContractorTerms,
    Employee,
    HourlyTerms,
    PayPeriodType,
    SalaryTerms,
)
from payroll_kernel.exceptions import (
    HoursWorkedRequiredError,
    InvalidCompensationError,
    InvalidManualPaymentError,
    MissingCompensationFieldError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.compensation")

_PERIODS_PER_YEAR: dict[PayPeriodType, int] = {
    PayPeriodType.WEEKLY: 52,
    PayPeriodType.BI_WEEKLY: 26,
    PayPeriodType.SEMI_MONTHLY: 24,
    PayPeriodType.MONTHLY: 12,
}

# 2024-01-01 was a Monday; bi-weekly periods are counted from it
BI_WEEKLY_ANCHOR = date(2024, 1, 1)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SECONDS_PER_HOUR = 3600


def round_cents(value: Decimal | Fraction | int) -> int:
    """Round an amount of cents to a whole cent, halves away from zero."""
    if isinstance(value, Fraction):
        whole = math.floor(abs(value) + Fraction(1, 2))
        return whole if value >= 0 else -whole
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    return Decimal(value)


def _exact(value: Any) -> Fraction:
    if isinstance(value, Fraction):
        return value
    return Fraction(_as_decimal(value))


def exact_hours(hours: Decimal | Fraction | int | float) -> Fraction:
    """Hours as an exact fraction.

    A ``Decimal`` that fills the whole context precision is a quotient of
    minutes or seconds cut off mid-expansion (350 / 60 is
    5.833...3); it is recovered to the nearest fraction of an hour with a
    denominator of at most 3600.
    """
    if isinstance(hours, Fraction):
        return hours
    value = _as_decimal(hours)
    if len(value.as_tuple().digits) >= getcontext().prec:
        return Fraction(value).limit_denominator(_SECONDS_PER_HOUR)
    return Fraction(value)


def calculate_hourly_pay(
    rate_cents: int,
    hours: Decimal | Fraction | int,
    multiplier: Decimal | int = 1,
) -> int:
    """``rate x hours x multiplier`` in cents, rounded once.

    Example: 1503 cents/hr for 5h50m is exactly 8767.5 -> 8768.
    """
    return round_cents(Fraction(rate_cents) * exact_hours(hours) * _exact(multiplier))


def _dollars(cents: int) -> str:
    return str((Decimal(cents) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _days(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Terms construction and validation
# ---------------------------------------------------------------------------


def terms_from_fields(
    compensation_type: CompensationType | str,
    *,
    hourly_rate: int | None = None,
    salary_amount: int | None = None,
    pay_period_type: PayPeriodType | str | None = None,
    contractor_payment_amount: int | None = None,
    contractor_payment_interval: ContractorInterval | str | None = None,
    employee_id: str | None = None,
) -> CompensationTerms:
    """Build the tagged terms variant from a flat employee record.

    Raises:
        MissingCompensationFieldError: If a field the type needs is None.
        InvalidCompensationError: If a present field is unusable.
    """
    try:
        compensation_type = CompensationType(compensation_type)
    except ValueError:
        raise InvalidCompensationError(
            "compensation_type", compensation_type, "must be hourly, salary or contractor"
        ) from None

    if compensation_type == CompensationType.HOURLY:
        if hourly_rate is None:
            raise MissingCompensationFieldError("hourly", ("hourly_rate",), employee_id)
        return HourlyTerms(rate_cents=hourly_rate)

    if compensation_type == CompensationType.SALARY:
        missing = tuple(
            name
            for name, value in (
                ("salary_amount", salary_amount),
                ("pay_period_type", pay_period_type),
            )
            if value is None
        )
        if missing:
            raise MissingCompensationFieldError("salary", missing, employee_id)
        return SalaryTerms(amount_cents=salary_amount, pay_period=pay_period_type)

    missing = tuple(
        name
        for name, value in (
            ("contractor_payment_amount", contractor_payment_amount),
            ("contractor_payment_interval", contractor_payment_interval),
        )
        if value is None
    )
    if missing:
        raise MissingCompensationFieldError("contractor", missing, employee_id)
    return ContractorTerms(
        amount_cents=contractor_payment_amount, interval=contractor_payment_interval
    )


def validate_compensation_fields(
    compensation_type: CompensationType | str | None = None,
    *,
    hourly_rate: int | None = None,
    salary_amount: int | None = None,
    pay_period_type: PayPeriodType | str | None = None,
    contractor_payment_amount: int | None = None,
    contractor_payment_interval: ContractorInterval | str | None = None,
) -> list[str]:
    """Human-readable problems with a compensation form; empty when valid.

    Never raises; meant for form feedback before terms are built.
    """
    if not compensation_type:
        return ["Compensation type is required"]

    errors: list[str] = []
    try:
        compensation_type = CompensationType(compensation_type)
    except ValueError:
        return [f"Unknown compensation type: {compensation_type}"]

    if compensation_type == CompensationType.HOURLY:
        if not hourly_rate or hourly_rate <= 0:
            errors.append("Hourly rate must be greater than 0")
    elif compensation_type == CompensationType.SALARY:
        if not salary_amount or salary_amount <= 0:
            errors.append("Salary amount must be greater than 0")
        if not pay_period_type:
            errors.append("Pay period type is required for salaried employees")
    else:
        if not contractor_payment_amount or contractor_payment_amount <= 0:
            errors.append("Payment amount must be greater than 0")
        if not contractor_payment_interval:
            errors.append("Payment interval is required for contractors")
    return errors


def requires_time_punches(employee: Employee) -> bool:
    """Explicit flag if set; otherwise only hourly employees punch."""
    if employee.requires_time_punch is not None:
        return employee.requires_time_punch
    return employee.compensation_type == CompensationType.HOURLY


# ---------------------------------------------------------------------------
# History resolution
# ---------------------------------------------------------------------------


def _active_entry(
    history: Iterable[CompensationHistoryEntry], day: date
) -> CompensationHistoryEntry | None:
    """Latest entry effective on or before ``day``; later-appended wins ties."""
    active = None
    for entry in history:
        if entry.effective_date <= day and (
            active is None or entry.effective_date >= active.effective_date
        ):
            active = entry
    return active


def _terms_for_entry(employee: Employee, entry: CompensationHistoryEntry) -> CompensationTerms:
    current = employee.compensation
    fields: dict[str, Any] = {}

    if entry.compensation_type == CompensationType.HOURLY:
        fallback = current.rate_cents if isinstance(current, HourlyTerms) else None
        fields["hourly_rate"] = entry.amount_cents if entry.amount_cents is not None else fallback
    elif entry.compensation_type == CompensationType.SALARY:
        salary = current if isinstance(current, SalaryTerms) else None
        fields["salary_amount"] = (
            entry.amount_cents if entry.amount_cents is not None
            else salary.amount_cents if salary else None
        )
        fields["pay_period_type"] = entry.pay_period_type or (salary.pay_period if salary else None)
    else:
        contractor = current if isinstance(current, ContractorTerms) else None
        fields["contractor_payment_amount"] = (
            entry.amount_cents if entry.amount_cents is not None
            else contractor.amount_cents if contractor else None
        )
        # Interval is not versioned in history
        fields["contractor_payment_interval"] = contractor.interval if contractor else None

    return terms_from_fields(entry.compensation_type, employee_id=employee.id, **fields)


def resolve_compensation_for_date(employee: Employee, day: date) -> CompensationSnapshot:
    """Compensation terms in effect for ``employee`` on ``day``.

    The latest history entry with ``effective_date <= day`` wins; fields it
    leaves unset fall back to the employee's current terms.  Without an
    applicable entry the current terms are returned.
    """
    entry = _active_entry(employee.compensation_history, day)
    if entry is None:
        return CompensationSnapshot(employee.id, day, employee.compensation)
    return CompensationSnapshot(
        employee.id, day, _terms_for_entry(employee, entry), entry.effective_date
    )


# ---------------------------------------------------------------------------
# Daily cost
# ---------------------------------------------------------------------------


def days_in_pay_period(
    pay_period: PayPeriodType, config: PayrollEngineConfig | None = None
) -> Decimal:
    config = config or PayrollEngineConfig.with_defaults()
    return config.days_per_pay_period[PayPeriodType(pay_period)]


def days_in_interval(
    interval: ContractorInterval, config: PayrollEngineConfig | None = None
) -> Decimal | None:
    """Average days per contractor interval; None for per-job."""
    config = config or PayrollEngineConfig.with_defaults()
    return config.days_per_contractor_interval.get(ContractorInterval(interval))


def _raw_daily_amount(terms: CompensationTerms, config: PayrollEngineConfig) -> Fraction:
    """Exact, unrounded daily cents for salary / contractor terms."""
    if isinstance(terms, SalaryTerms):
        days = days_in_pay_period(terms.pay_period, config)
        return Fraction(terms.amount_cents) / Fraction(days)
    if isinstance(terms, ContractorTerms):
        days = days_in_interval(terms.interval, config)
        if days is None:
            return Fraction(0)
        return Fraction(terms.amount_cents) / Fraction(days)
    raise TypeError(f"No daily proration for {type(terms).__name__}")


def calculate_daily_salary_allocation(
    amount_cents: int,
    pay_period: PayPeriodType,
    config: PayrollEngineConfig | None = None,
) -> int:
    """Salary per pay period spread over its average days, in cents.

    Example: 100000 weekly -> 14286.
    """
    config = config or PayrollEngineConfig.with_defaults()
    return round_cents(_raw_daily_amount(SalaryTerms(amount_cents, pay_period), config))


def calculate_daily_contractor_allocation(
    amount_cents: int,
    interval: ContractorInterval,
    config: PayrollEngineConfig | None = None,
) -> int:
    """Contractor payment spread over its interval; 0 for per-job."""
    config = config or PayrollEngineConfig.with_defaults()
    return round_cents(_raw_daily_amount(ContractorTerms(amount_cents, interval), config))


def calculate_daily_labor_cost(
    snapshot: CompensationSnapshot,
    hours_worked: Decimal | Fraction | int | None = None,
    allocate_daily: bool = True,
    config: PayrollEngineConfig | None = None,
) -> int:
    """Daily labor cost in cents for resolved terms.

    Args:
        snapshot: Terms in effect on the day.
        hours_worked: Required for hourly terms, ignored otherwise.
        allocate_daily: When False a salary posts on its paycheck date
            instead, so the daily amount is 0.
        config: Proration day counts.

    Raises:
        HoursWorkedRequiredError: Hourly terms without ``hours_worked``.
    """
    config = config or PayrollEngineConfig.with_defaults()
    terms = snapshot.terms

    if isinstance(terms, HourlyTerms):
        if hours_worked is None:
            raise HoursWorkedRequiredError(snapshot.employee_id)
        return calculate_hourly_pay(terms.rate_cents, hours_worked)

    if isinstance(terms, SalaryTerms) and not allocate_daily:
        return 0
    return round_cents(_raw_daily_amount(terms, config))


# ---------------------------------------------------------------------------
# Period proration
# ---------------------------------------------------------------------------


def _employed_days(employee: Employee, start: date, end: date):
    day = start
    while day <= end:
        if employee.is_employed_on(day):
            yield day
        day += timedelta(days=1)


def _prorate(
    employee: Employee,
    start: date,
    end: date,
    config: PayrollEngineConfig,
    wanted: type,
) -> int:
    total = Fraction(0)
    for day in _employed_days(employee, start, end):
        terms = resolve_compensation_for_date(employee, day).terms
        if isinstance(terms, wanted):
            total += _raw_daily_amount(terms, config)
    return round_cents(total)


@traced_engine("compensation", "1.0", fingerprint_fields=("start", "end"))
def calculate_salary_for_period(
    employee: Employee,
    start: date,
    end: date,
    config: PayrollEngineConfig | None = None,
) -> int:
    """Prorated salary cost for the inclusive range ``[start, end]``.

    Only days on which the employee is salaried count; a mid-period
    change applies from its effective date.  ``allocate_daily`` does not
    apply here: the salary is owed either way.
    """
    config = config or PayrollEngineConfig.with_defaults()
    cents = _prorate(employee, start, end, config, SalaryTerms)
    logger.info(
        "salary_prorated",
        extra={
            "employee_id": employee.id,
            "start": start,
            "end": end,
            "amount_cents": str(cents),
        },
    )
    return cents


@traced_engine("compensation", "1.0", fingerprint_fields=("start", "end"))
def calculate_contractor_pay_for_period(
    employee: Employee,
    start: date,
    end: date,
    config: PayrollEngineConfig | None = None,
) -> int:
    """Prorated interval contractor cost for ``[start, end]``.

    Per-job contractors accrue nothing here; they are paid through
    manual payments.
    """
    config = config or PayrollEngineConfig.with_defaults()
    cents = _prorate(employee, start, end, config, ContractorTerms)
    logger.info(
        "contractor_pay_prorated",
        extra={
            "employee_id": employee.id,
            "start": start,
            "end": end,
            "amount_cents": str(cents),
        },
    )
    return cents


def calculate_effective_hourly_rate(
    amount_cents: int,
    pay_period: PayPeriodType,
    hours_per_week: Decimal | int = 40,
) -> int:
    """Salary expressed as cents per hour, for reporting only.

    Example: 100000 weekly at 40 hrs/week -> 2500.
    """
    hours_per_week = _as_decimal(hours_per_week)
    if hours_per_week <= 0:
        raise ValueError(f"hours_per_week must be positive, got {hours_per_week}")
    annual = Fraction(amount_cents * _PERIODS_PER_YEAR[PayPeriodType(pay_period)])
    return round_cents(annual / (Fraction(hours_per_week) * 52))


def get_pay_period_dates(
    day: date,
    pay_period: PayPeriodType,
    start_weekday: int = 6,
) -> tuple[date, date]:
    """Inclusive pay period containing ``day``.

    Args:
        day: Any day inside the period.
        pay_period: Pay frequency.
        start_weekday: ``date.weekday()`` index weekly periods start on
            (default Sunday).
    """
    pay_period = PayPeriodType(pay_period)

    if pay_period == PayPeriodType.WEEKLY:
        start = day - timedelta(days=(day.weekday() - start_weekday) % 7)
        return start, start + timedelta(days=6)

    if pay_period == PayPeriodType.BI_WEEKLY:
        start = day - timedelta(days=(day - BI_WEEKLY_ANCHOR).days % 14)
        return start, start + timedelta(days=13)

    last = calendar.monthrange(day.year, day.month)[1]
    if pay_period == PayPeriodType.SEMI_MONTHLY:
        if day.day <= 15:
            return day.replace(day=1), day.replace(day=15)
        return day.replace(day=16), day.replace(day=last)

    return day.replace(day=1), day.replace(day=last)


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------


def _allocation_notes(
    terms: CompensationTerms,
    hours_worked: Decimal | None,
    allocate_daily: bool,
    config: PayrollEngineConfig,
) -> str:
    if isinstance(terms, HourlyTerms):
        hours = hours_worked.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"{hours} hrs × ${_dollars(terms.rate_cents)}/hr"
    if isinstance(terms, SalaryTerms):
        days = days_in_pay_period(terms.pay_period, config)
        notes = f"${_dollars(terms.amount_cents)}/{terms.pay_period.value} ÷ {_days(days)} days"
        if not allocate_daily:
            notes += " (posted on paycheck date)"
        return notes
    if terms.is_per_job:
        return "Per-job payment (not daily allocated)"
    days = days_in_interval(terms.interval, config)
    return f"${_dollars(terms.amount_cents)}/{terms.interval.value} ÷ {_days(days)} days"


def generate_daily_allocation(
    employee: Employee,
    day: date,
    hours_worked: Decimal | Fraction | int | None = None,
    config: PayrollEngineConfig | None = None,
) -> DailyLaborAllocation:
    """The labor allocation record for one employee-day.

    Uses the terms in effect on ``day``.  Salary allocations record the
    pay period the day belongs to.

    Raises:
        HoursWorkedRequiredError: Hourly terms without ``hours_worked``.
    """
    config = config or PayrollEngineConfig.with_defaults()
    snapshot = resolve_compensation_for_date(employee, day)
    hours = _as_decimal(hours_worked) if hours_worked is not None else None
    amount = calculate_daily_labor_cost(
        snapshot, hours_worked, employee.allocate_daily, config
    )

    period_start = period_end = None
    if isinstance(snapshot.terms, SalaryTerms):
        period_start, period_end = get_pay_period_dates(
            day, snapshot.terms.pay_period, config.week_start_weekday
        )

    return DailyLaborAllocation(
        restaurant_id=employee.restaurant_id,
        employee_id=employee.id,
        date=day,
        compensation_type=snapshot.compensation_type,
        allocated_amount_cents=amount,
        calculation_notes=_allocation_notes(
            snapshot.terms, hours, employee.allocate_daily, config
        ),
        source_pay_period_start=period_start,
        source_pay_period_end=period_end,
    )


@traced_engine("compensation", "1.0", fingerprint_fields=("start", "end"))
def generate_period_allocations(
    employee: Employee,
    start: date,
    end: date,
    hours_by_date: Mapping[date, Decimal | Fraction] | None = None,
    config: PayrollEngineConfig | None = None,
) -> tuple[DailyLaborAllocation, ...]:
    """Daily allocations for every employed day with a non-zero amount.

    Hourly days use ``hours_by_date`` (see
    ``hours_aggregator.daily_worked_hours``); days missing from it count
    as zero hours.
    """
    config = config or PayrollEngineConfig.with_defaults()
    hours_by_date = hours_by_date or {}
    allocations: list[DailyLaborAllocation] = []
    for day in _employed_days(employee, start, end):
        allocation = generate_daily_allocation(
            employee, day, hours_by_date.get(day, Decimal("0")), config
        )
        if allocation.allocated_amount_cents != 0:
            allocations.append(allocation)

    logger.info(
        "period_allocations_generated",
        extra={
            "employee_id": employee.id,
            "start": start,
            "end": end,
            "allocation_count": len(allocations),
            "total_cents": str(sum(a.allocated_amount_cents for a in allocations)),
        },
    )
    return tuple(allocations)


def create_manual_contractor_allocation(
    employee_id: str,
    restaurant_id: str,
    date_str: str,
    amount_cents: int,
    description: str | None = None,
) -> DailyLaborAllocation:
    """Validate and record a discrete per-job contractor payment.

    Raises:
        InvalidManualPaymentError: Blank ids, a date that is not
            ``YYYY-MM-DD`` or not a real day, or an amount that is not a
            positive integer number of cents.  Nothing is produced.
    """
    try:
        if not employee_id or not str(employee_id).strip():
            raise InvalidManualPaymentError("employee_id", employee_id, "is required")
        if not restaurant_id or not str(restaurant_id).strip():
            raise InvalidManualPaymentError("restaurant_id", restaurant_id, "is required")
        if not isinstance(date_str, str) or not _ISO_DATE.match(date_str):
            raise InvalidManualPaymentError("date", date_str, "must be formatted YYYY-MM-DD")
        try:
            day = date.fromisoformat(date_str)
        except ValueError:
            raise InvalidManualPaymentError("date", date_str, "is not a calendar date") from None
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise InvalidManualPaymentError(
                "amount_cents", amount_cents, "must be an integer number of cents"
            )
        if amount_cents <= 0:
            raise InvalidManualPaymentError("amount_cents", amount_cents, "must be greater than 0")
    except InvalidManualPaymentError as exc:
        logger.warning(
            "manual_payment_rejected",
            extra={"employee_id": employee_id, "field": exc.field, "reason": exc.reason},
        )
        raise

    logger.info(
        "manual_payment_recorded",
        extra={
            "employee_id": employee_id,
            "restaurant_id": restaurant_id,
            "date": day,
            "amount_cents": str(amount_cents),
        },
    )
    return DailyLaborAllocation(
        restaurant_id=restaurant_id,
        employee_id=employee_id,
        date=day,
        compensation_type=CompensationType.CONTRACTOR,
        allocated_amount_cents=amount_cents,
        calculation_notes=description or "Per-job payment",
    )


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def calculate_labor_breakdown(
    allocations: Iterable[DailyLaborAllocation],
) -> LaborCostBreakdown:
    hourly = salary = contractor = 0
    for allocation in allocations:
        if allocation.compensation_type == CompensationType.HOURLY:
            hourly += allocation.allocated_amount_cents
        elif allocation.compensation_type == CompensationType.SALARY:
            salary += allocation.allocated_amount_cents
        else:
            contractor += allocation.allocated_amount_cents
    return LaborCostBreakdown(hourly, salary, contractor)


def generate_compensation_summary(
    employee: Employee,
    allocations: Iterable[DailyLaborAllocation],
    hours_worked: Decimal | None = None,
    as_of: date | None = None,
) -> CompensationSummary:
    """Totals for one employee's allocations.

    The effective hourly rate reflects the terms on ``as_of`` (current
    terms when None): the rate itself for hourly, the annualized
    equivalent for salary, and nothing for contractors.
    """
    allocations = tuple(allocations)
    terms = (
        resolve_compensation_for_date(employee, as_of).terms
        if as_of is not None
        else employee.compensation
    )

    effective_rate = None
    if isinstance(terms, HourlyTerms):
        effective_rate = terms.rate_cents
    elif isinstance(terms, SalaryTerms):
        effective_rate = calculate_effective_hourly_rate(terms.amount_cents, terms.pay_period)

    return CompensationSummary(
        employee_id=employee.id,
        compensation_type=terms.compensation_type,
        total_amount_cents=sum(a.allocated_amount_cents for a in allocations),
        hours_worked=hours_worked,
        days_worked=len(allocations) or None,
        effective_hourly_rate_cents=effective_rate,
    )


_COMPENSATION_TYPE_LABELS = {
    CompensationType.HOURLY: "Hourly",
    CompensationType.SALARY: "Salaried",
    CompensationType.CONTRACTOR: "Contractor",
}

_PAY_PERIOD_LABELS = {
    PayPeriodType.WEEKLY: "Weekly",
    PayPeriodType.BI_WEEKLY: "Bi-Weekly",
    PayPeriodType.SEMI_MONTHLY: "Semi-Monthly",
    PayPeriodType.MONTHLY: "Monthly",
}

_CONTRACTOR_INTERVAL_LABELS = {
    ContractorInterval.WEEKLY: "Weekly",
    ContractorInterval.BI_WEEKLY: "Bi-Weekly",
    ContractorInterval.MONTHLY: "Monthly",
    ContractorInterval.PER_JOB: "Per Job",
}


def format_compensation_type(compensation_type: CompensationType | str) -> str:
    return _COMPENSATION_TYPE_LABELS[CompensationType(compensation_type)]


def format_pay_period_type(pay_period: PayPeriodType | str) -> str:
    return _PAY_PERIOD_LABELS[PayPeriodType(pay_period)]


def format_contractor_interval(interval: ContractorInterval | str) -> str:
    return _CONTRACTOR_INTERVAL_LABELS[ContractorInterval(interval)]
