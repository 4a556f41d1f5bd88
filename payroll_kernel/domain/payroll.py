"""
Payroll result value objects (``payroll_kernel.domain.payroll``).

Responsibility
--------------
Read-only aggregates returned by the payroll period assembler: one
``EmployeePayroll`` row per employee and a ``PayrollPeriod`` with
period-wide totals.  Never mutated once returned.

Invariants enforced
-------------------
* ``gross_pay_cents == regular + overtime + salary + contractor + manual``.
* ``total_pay_cents == gross_pay_cents + tips_cents``.
* All monetary fields are ``int`` cents; all hour fields are ``Decimal``.
* A ``ManualPayment`` has a non-blank id, a calendar ``date`` and a
  positive whole number of cents.
* Employees listed in ``PayrollPeriod.failed_employees`` contribute no
  row and nothing to the totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from payroll_kernel.domain.compensation import CompensationType
from payroll_kernel.domain.sessions import IncompleteShift, WeeklyHours
from payroll_kernel.exceptions import InvalidManualPaymentError


@dataclass(frozen=True)
class ManualPayment:
    """A discrete payment to a per-job contractor."""
    id: str
    date: date
    amount_cents: int
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidManualPaymentError("id", self.id, "is required")
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            raise InvalidManualPaymentError("date", self.date, "must be a calendar date")
        if isinstance(self.amount_cents, bool) or not isinstance(self.amount_cents, int):
            raise InvalidManualPaymentError(
                "amount_cents", self.amount_cents, "must be an integer number of cents"
            )
        if self.amount_cents <= 0:
            raise InvalidManualPaymentError(
                "amount_cents", self.amount_cents, "must be greater than 0"
            )


@dataclass(frozen=True)
class EmployeePayroll:
    """One employee's pay for a payroll period."""
    employee_id: str
    employee_name: str
    position: str
    compensation_type: CompensationType
    hourly_rate_cents: int
    regular_hours: Decimal
    overtime_hours: Decimal
    regular_pay_cents: int
    overtime_pay_cents: int
    salary_pay_cents: int
    contractor_pay_cents: int
    manual_payments_total_cents: int
    gross_pay_cents: int
    tips_cents: int
    total_pay_cents: int
    weeks: tuple[WeeklyHours, ...] = field(default_factory=tuple)
    manual_payments: tuple[ManualPayment, ...] = field(default_factory=tuple)
    incomplete_shifts: tuple[IncompleteShift, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        expected_gross = (
            self.regular_pay_cents
            + self.overtime_pay_cents
            + self.salary_pay_cents
            + self.contractor_pay_cents
            + self.manual_payments_total_cents
        )
        if self.gross_pay_cents != expected_gross:
            raise ValueError(
                f"gross_pay_cents {self.gross_pay_cents} != components {expected_gross}"
            )
        if self.total_pay_cents != self.gross_pay_cents + self.tips_cents:
            raise ValueError(
                f"total_pay_cents {self.total_pay_cents} != gross + tips "
                f"{self.gross_pay_cents + self.tips_cents}"
            )

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours

    @property
    def needs_review(self) -> bool:
        return bool(self.incomplete_shifts)


@dataclass(frozen=True)
class FailedEmployee:
    """An employee whose row could not be computed for the period."""
    employee_id: str
    error_code: str
    message: str


@dataclass(frozen=True)
class PayrollPeriod:
    """All employee rows for an inclusive date range plus totals."""
    start_date: date
    end_date: date
    employees: tuple[EmployeePayroll, ...]
    total_regular_hours: Decimal
    total_overtime_hours: Decimal
    total_regular_pay_cents: int
    total_overtime_pay_cents: int
    total_gross_pay_cents: int
    total_tips_cents: int
    total_pay_cents: int
    total_manual_payments_cents: int = 0
    failed_employees: tuple[FailedEmployee, ...] = field(default_factory=tuple)

    @property
    def incomplete_shift_count(self) -> int:
        return sum(len(e.incomplete_shifts) for e in self.employees)
