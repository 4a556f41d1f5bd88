"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation stages.  This is the canonical import surface for callers
    that turn punches and employee records into payroll.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel, payroll_config and sibling engine modules.

    punch_normalizer -> session_reconstructor -> hours_aggregator
        -> compensation -> payroll_assembler -> csv_export

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Periods and as-of dates are passed in explicitly.
    - Integer cents for money, ``Decimal`` for hours; floats are never used
      in arithmetic.
    - Determinism: identical inputs always produce identical outputs, so
      per-employee pipelines may run in parallel.

Failure modes:
    - Data-quality problems in punches are returned as anomalies, never raised.
    - ``payroll_kernel.exceptions`` errors for input-contract violations.

Audit relevance:
    Public stages are traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE log records
    with engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines import process_punches, assemble_payroll_period
    from payroll_engines import export_payroll_to_csv
"""

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines")

from payroll_engines.compensation import (
    BI_WEEKLY_ANCHOR,
    calculate_contractor_pay_for_period,
    calculate_daily_contractor_allocation,
    calculate_daily_labor_cost,
    calculate_daily_salary_allocation,
    calculate_effective_hourly_rate,
    calculate_hourly_pay,
    calculate_labor_breakdown,
    calculate_salary_for_period,
    create_manual_contractor_allocation,
    days_in_interval,
    days_in_pay_period,
    exact_hours,
    format_compensation_type,
    format_contractor_interval,
    format_pay_period_type,
    generate_compensation_summary,
    generate_daily_allocation,
    generate_period_allocations,
    get_pay_period_dates,
    requires_time_punches,
    resolve_compensation_for_date,
    round_cents,
    terms_from_fields,
    validate_compensation_fields,
)
from payroll_engines.csv_export import (
    CSV_HEADERS,
    export_payroll_to_csv,
    format_currency,
    format_hours,
)
from payroll_engines.hours_aggregator import (
    aggregate_weekly_hours,
    calculate_daily_hours,
    calculate_regular_and_overtime_hours,
    daily_worked_hours,
    exact_regular_and_overtime_hours,
    week_start_for,
)
from payroll_engines.payroll_assembler import (
    assemble_payroll_period,
    calculate_employee_payroll,
    summarize_period,
)
from payroll_engines.punch_normalizer import normalize_punches, valid_punches
from payroll_engines.session_reconstructor import (
    PunchProcessingResult,
    ScanState,
    SessionReconstructor,
    SessionState,
    identify_work_sessions,
    incomplete_shifts_for,
    minutes_between,
    process_punches,
    reconstruct,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Punch pipeline
    "normalize_punches",
    "valid_punches",
    "PunchProcessingResult",
    "ScanState",
    "SessionReconstructor",
    "SessionState",
    "identify_work_sessions",
    "incomplete_shifts_for",
    "minutes_between",
    "process_punches",
    "reconstruct",
    # Hours
    "aggregate_weekly_hours",
    "calculate_daily_hours",
    "calculate_regular_and_overtime_hours",
    "daily_worked_hours",
    "exact_regular_and_overtime_hours",
    "week_start_for",
    # Compensation
    "BI_WEEKLY_ANCHOR",
    "calculate_contractor_pay_for_period",
    "calculate_daily_contractor_allocation",
    "calculate_daily_labor_cost",
    "calculate_daily_salary_allocation",
    "calculate_effective_hourly_rate",
    "calculate_hourly_pay",
    "calculate_labor_breakdown",
    "calculate_salary_for_period",
    "create_manual_contractor_allocation",
    "days_in_interval",
    "days_in_pay_period",
    "exact_hours",
    "format_compensation_type",
    "format_contractor_interval",
    "format_pay_period_type",
    "generate_compensation_summary",
    "generate_daily_allocation",
    "generate_period_allocations",
    "get_pay_period_dates",
    "requires_time_punches",
    "resolve_compensation_for_date",
    "round_cents",
    "terms_from_fields",
    "validate_compensation_fields",
    # Payroll
    "assemble_payroll_period",
    "calculate_employee_payroll",
    "summarize_period",
    "CSV_HEADERS",
    "export_payroll_to_csv",
    "format_currency",
    "format_hours",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
