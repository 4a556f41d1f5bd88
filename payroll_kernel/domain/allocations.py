"""
Labor allocation value objects (``payroll_kernel.domain.allocations``).

Responsibility
--------------
Daily labor-cost records attributing cents to an employee and calendar
day, plus the read-only summaries computed over them.

Invariants enforced
-------------------
* ``allocated_amount_cents`` is an ``int`` -- NEVER ``float``.
* ``LaborCostBreakdown.total`` equals the sum of its three components.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_kernel.domain.compensation import CompensationType


@dataclass(frozen=True)
class DailyLaborAllocation:
    """One employee's labor cost for one calendar day."""
    restaurant_id: str
    employee_id: str
    date: date
    compensation_type: CompensationType
    allocated_amount_cents: int
    calculation_notes: str = ""
    source_pay_period_start: date | None = None
    source_pay_period_end: date | None = None

    def __post_init__(self) -> None:
        if isinstance(self.allocated_amount_cents, bool) or not isinstance(
            self.allocated_amount_cents, int
        ):
            raise ValueError(
                f"allocated_amount_cents must be int cents, got {self.allocated_amount_cents!r}"
            )


@dataclass(frozen=True)
class LaborCostBreakdown:
    """Allocated cents grouped by compensation type."""
    hourly_wages: int = 0
    salary_allocations: int = 0
    contractor_payments: int = 0

    @property
    def total(self) -> int:
        return self.hourly_wages + self.salary_allocations + self.contractor_payments


@dataclass(frozen=True)
class CompensationSummary:
    """Per-employee totals over a range of allocations."""
    employee_id: str
    compensation_type: CompensationType
    total_amount_cents: int
    hours_worked: Decimal | None = None
    days_worked: int | None = None
    effective_hourly_rate_cents: int | None = None
