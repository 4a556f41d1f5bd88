"""
Compensation value objects (``payroll_kernel.domain.compensation``).

Responsibility
--------------
Models how an employee is paid as a tagged variant::

    CompensationTerms = HourlyTerms | SalaryTerms | ContractorTerms

so the resolver never needs runtime presence checks on optional fields.
Also carries the append-only compensation history and the resolved,
as-of-date ``CompensationSnapshot``.

Invariants enforced
-------------------
* Every monetary field is an ``int`` number of cents.
* Salary and contractor amounts are strictly positive; hourly rates are
  non-negative.
* Enum fields are coerced from their string values at construction.

Failure modes
-------------
* ``InvalidCompensationError`` for negative / non-integer amounts or
  unknown enum values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from payroll_kernel.exceptions import InvalidCompensationError


class CompensationType(str, Enum):
    """How an employee is paid."""
    HOURLY = "hourly"
    SALARY = "salary"
    CONTRACTOR = "contractor"


class PayPeriodType(str, Enum):
    """Salary pay frequencies."""
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    SEMI_MONTHLY = "semi-monthly"
    MONTHLY = "monthly"


class ContractorInterval(str, Enum):
    """Contractor payment intervals."""
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    PER_JOB = "per-job"


def _coerce_enum(enum_cls: type[Enum], field_name: str, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidCompensationError(
            field_name, value, f"must be one of {[m.value for m in enum_cls]}"
        ) from None


def _check_cents(field_name: str, value: Any, *, allow_zero: bool) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCompensationError(field_name, value, "must be an integer number of cents")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidCompensationError(
            field_name, value, "must be non-negative" if allow_zero else "must be greater than 0"
        )


# ---------------------------------------------------------------------------
# Terms (tagged variant)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HourlyTerms:
    """Paid per hour worked."""
    rate_cents: int

    def __post_init__(self) -> None:
        _check_cents("hourly_rate", self.rate_cents, allow_zero=True)

    @property
    def compensation_type(self) -> CompensationType:
        return CompensationType.HOURLY


@dataclass(frozen=True)
class SalaryTerms:
    """Fixed amount per pay period."""
    amount_cents: int
    pay_period: PayPeriodType

    def __post_init__(self) -> None:
        _check_cents("salary_amount", self.amount_cents, allow_zero=False)
        object.__setattr__(
            self, "pay_period", _coerce_enum(PayPeriodType, "pay_period_type", self.pay_period)
        )

    @property
    def compensation_type(self) -> CompensationType:
        return CompensationType.SALARY


@dataclass(frozen=True)
class ContractorTerms:
    """Fixed amount per interval, or per job."""
    amount_cents: int
    interval: ContractorInterval

    def __post_init__(self) -> None:
        _check_cents("contractor_payment_amount", self.amount_cents, allow_zero=False)
        object.__setattr__(
            self,
            "interval",
            _coerce_enum(ContractorInterval, "contractor_payment_interval", self.interval),
        )

    @property
    def compensation_type(self) -> CompensationType:
        return CompensationType.CONTRACTOR

    @property
    def is_per_job(self) -> bool:
        return self.interval == ContractorInterval.PER_JOB


CompensationTerms = HourlyTerms | SalaryTerms | ContractorTerms


# ---------------------------------------------------------------------------
# History and snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompensationHistoryEntry:
    """A compensation change taking effect on ``effective_date``.

    Fields left as None fall back to the employee's current terms when the
    entry is resolved.
    """
    effective_date: date
    compensation_type: CompensationType
    amount_cents: int | None = None
    pay_period_type: PayPeriodType | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "compensation_type",
            _coerce_enum(CompensationType, "compensation_type", self.compensation_type),
        )
        if self.pay_period_type is not None:
            object.__setattr__(
                self,
                "pay_period_type",
                _coerce_enum(PayPeriodType, "pay_period_type", self.pay_period_type),
            )
        if self.amount_cents is not None:
            _check_cents("amount_cents", self.amount_cents, allow_zero=True)


@dataclass(frozen=True)
class Employee:
    """The compensation-relevant view of an employee record."""
    id: str
    compensation: CompensationTerms
    name: str = ""
    position: str = ""
    restaurant_id: str = ""
    allocate_daily: bool = True
    hire_date: date | None = None
    termination_date: date | None = None
    compensation_history: tuple[CompensationHistoryEntry, ...] = field(default_factory=tuple)
    requires_time_punch: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.compensation, (HourlyTerms, SalaryTerms, ContractorTerms)):
            raise InvalidCompensationError(
                "compensation", self.compensation, "must be HourlyTerms, SalaryTerms or ContractorTerms"
            )
        if (
            self.hire_date is not None
            and self.termination_date is not None
            and self.termination_date < self.hire_date
        ):
            raise InvalidCompensationError(
                "termination_date", self.termination_date, "cannot precede hire_date"
            )
        object.__setattr__(self, "compensation_history", tuple(self.compensation_history))

    @property
    def compensation_type(self) -> CompensationType:
        return self.compensation.compensation_type

    def is_employed_on(self, day: date) -> bool:
        if self.hire_date is not None and day < self.hire_date:
            return False
        if self.termination_date is not None and day > self.termination_date:
            return False
        return True


@dataclass(frozen=True)
class CompensationSnapshot:
    """Pay terms in effect for an employee on ``as_of``."""
    employee_id: str
    as_of: date
    terms: CompensationTerms
    source_effective_date: date | None = None  # None: employee's current record

    @property
    def compensation_type(self) -> CompensationType:
        return self.terms.compensation_type

    @property
    def from_history(self) -> bool:
        return self.source_effective_date is not None
