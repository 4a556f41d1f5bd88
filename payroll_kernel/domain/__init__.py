"""
Pure domain layer.

Immutable, deterministic value objects with NO dependencies on:
- Database
- Time/clock
- I/O
"""

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
from payroll_kernel.domain.payroll import (
    EmployeePayroll,
    FailedEmployee,
    ManualPayment,
    PayrollPeriod,
)
from payroll_kernel.domain.punches import NoiseReason, ProcessedPunch, Punch, PunchType
from payroll_kernel.domain.sessions import (
    AnomalyCode,
    BreakPeriod,
    DailyHours,
    HoursSummary,
    IncompleteShift,
    IncompleteShiftType,
    ReconstructionResult,
    SessionAnomaly,
    WeeklyHours,
    WorkSession,
)

__all__ = [
    "AnomalyCode",
    "BreakPeriod",
    "CompensationHistoryEntry",
    "CompensationSnapshot",
    "CompensationSummary",
    "CompensationTerms",
    "CompensationType",
    "ContractorInterval",
    "ContractorTerms",
    "DailyHours",
    "DailyLaborAllocation",
    "Employee",
    "EmployeePayroll",
    "FailedEmployee",
    "HourlyTerms",
    "HoursSummary",
    "IncompleteShift",
    "IncompleteShiftType",
    "LaborCostBreakdown",
    "ManualPayment",
    "NoiseReason",
    "PayPeriodType",
    "PayrollPeriod",
    "ProcessedPunch",
    "Punch",
    "PunchType",
    "ReconstructionResult",
    "SalaryTerms",
    "SessionAnomaly",
    "WeeklyHours",
    "WorkSession",
]
