"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
TWO FAILURE CATEGORIES
===============================================================================

1. Data-quality anomalies (missing punches, long gaps, overlong shifts,
   incomplete breaks) are NEVER raised.  They are recorded as structured
   ``SessionAnomaly`` / ``IncompleteShift`` values attached to the affected
   session or payroll row.

2. Input-contract violations (missing hours for an hourly calculation,
   missing salary or contractor terms, malformed manual payments) raise the
   typed errors below.  They abort only the computation for the single
   employee or record being processed; callers catch them by type and log
   them as configuration problems.

Every exception has a class-level ``code`` (machine-readable, API-safe) and
stores its context as attributes so it survives logging and serialization:

    try:
        cents = calculate_daily_labor_cost(snapshot)
    except HoursWorkedRequiredError as e:
        log.warning("hourly_cost_skipped", extra={"employee_id": e.employee_id})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- CompensationError
    |   +-- HoursWorkedRequiredError
    |   +-- MissingCompensationFieldError
    |   +-- InvalidCompensationError
    |
    +-- ManualPaymentError
    |   +-- InvalidManualPaymentError
    |
    +-- PunchSequenceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Compensation    | HOURS_WORKED_REQUIRED       | Hourly cost requested without hours
                | MISSING_COMPENSATION_FIELD  | Salary/contractor terms incomplete
                | INVALID_COMPENSATION        | Negative amount, unknown type, ...
----------------|-----------------------------|-----------------------------------------
Manual payment  | INVALID_MANUAL_PAYMENT      | Bad date string, amount <= 0, blank id
----------------|-----------------------------|-----------------------------------------
Punches         | PUNCH_SEQUENCE_ERROR        | Non-chronological punches after sorting
"""

from __future__ import annotations

from typing import Any


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Compensation exceptions


class CompensationError(PayrollKernelError):
    """Base exception for compensation resolution and costing errors."""

    code: str = "COMPENSATION_ERROR"


class HoursWorkedRequiredError(CompensationError):
    """An hourly daily cost was requested without hours worked."""

    code: str = "HOURS_WORKED_REQUIRED"

    def __init__(self, employee_id: str | None = None):
        self.employee_id = employee_id
        who = f" for employee {employee_id}" if employee_id else ""
        super().__init__(f"Hours worked required for hourly employees{who}")


class MissingCompensationFieldError(CompensationError):
    """Compensation terms cannot be built because fields are absent."""

    code: str = "MISSING_COMPENSATION_FIELD"

    def __init__(
        self,
        compensation_type: str,
        missing_fields: tuple[str, ...],
        employee_id: str | None = None,
    ):
        self.compensation_type = compensation_type
        self.missing_fields = missing_fields
        self.employee_id = employee_id
        who = f" (employee {employee_id})" if employee_id else ""
        super().__init__(
            f"{compensation_type} compensation requires "
            f"{', '.join(missing_fields)}{who}"
        )


class InvalidCompensationError(CompensationError):
    """Compensation data is present but unusable."""

    code: str = "INVALID_COMPENSATION"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


# Manual payment exceptions


class ManualPaymentError(PayrollKernelError):
    """Base exception for manual (per-job) contractor payments."""

    code: str = "MANUAL_PAYMENT_ERROR"


class InvalidManualPaymentError(ManualPaymentError):
    """A manual payment failed validation; no allocation is produced."""

    code: str = "INVALID_MANUAL_PAYMENT"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid manual payment {field}={value!r}: {reason}")


# Punch exceptions


class PunchSequenceError(PayrollKernelError):
    """Punches reached the reconstructor out of chronological order."""

    code: str = "PUNCH_SEQUENCE_ERROR"

    def __init__(self, employee_id: str, previous: Any, current: Any):
        self.employee_id = employee_id
        self.previous = previous
        self.current = current
        super().__init__(
            f"Punch at {current} precedes {previous} for employee {employee_id}"
        )
