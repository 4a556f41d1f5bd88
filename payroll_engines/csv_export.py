"""
Payroll CSV export (``payroll_engines.csv_export``).

Serializes a ``PayrollPeriod`` to CSV for downstream payroll tooling.
The column order is a fixed contract:

    Employee Name, Position, Hourly Rate, Regular Hours, Overtime Hours,
    Regular Pay, Overtime Pay, Gross Pay, Tips, Total Pay

One row per employee in period order, then a ``TOTAL`` row.  Currency is
US-dollar formatted (``$1,234.56``, ``-$15.00``), hours have two
decimals.  Rows are written with the standard ``csv`` writer (minimal
quoting, ``\\n`` line endings), so amounts containing a thousands
separator are quoted.
"""

from __future__ import annotations

import csv
import io
from decimal import ROUND_HALF_UP, Decimal

from payroll_kernel.domain.payroll import EmployeePayroll, PayrollPeriod
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.csv_export")

CSV_HEADERS = (
    "Employee Name",
    "Position",
    "Hourly Rate",
    "Regular Hours",
    "Overtime Hours",
    "Regular Pay",
    "Overtime Pay",
    "Gross Pay",
    "Tips",
    "Total Pay",
)


def format_currency(cents: int) -> str:
    """Cents as US dollars: 123456 -> ``$1,234.56``, -1500 -> ``-$15.00``."""
    sign = "-" if cents < 0 else ""
    dollars = Decimal(abs(cents)) / 100
    return f"{sign}${dollars:,.2f}"


def format_hours(hours: Decimal | int | float) -> str:
    """Hours to two decimals, half-up: 40.123456 -> ``40.12``."""
    value = Decimal(str(hours)) if isinstance(hours, float) else Decimal(hours)
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _employee_row(row: EmployeePayroll) -> list[str]:
    return [
        row.employee_name,
        row.position,
        format_currency(row.hourly_rate_cents),
        format_hours(row.regular_hours),
        format_hours(row.overtime_hours),
        format_currency(row.regular_pay_cents),
        format_currency(row.overtime_pay_cents),
        format_currency(row.gross_pay_cents),
        format_currency(row.tips_cents),
        format_currency(row.total_pay_cents),
    ]


def _total_row(period: PayrollPeriod) -> list[str]:
    return [
        "TOTAL",
        "",
        "",
        format_hours(period.total_regular_hours),
        format_hours(period.total_overtime_hours),
        format_currency(period.total_regular_pay_cents),
        format_currency(period.total_overtime_pay_cents),
        format_currency(period.total_gross_pay_cents),
        format_currency(period.total_tips_cents),
        format_currency(period.total_pay_cents),
    ]


def export_payroll_to_csv(period: PayrollPeriod) -> str:
    """Render the period as CSV text with a trailing ``TOTAL`` row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in period.employees:
        writer.writerow(_employee_row(row))
    writer.writerow(_total_row(period))

    logger.info(
        "payroll_csv_exported",
        extra={
            "start": period.start_date,
            "end": period.end_date,
            "row_count": len(period.employees),
        },
    )
    return buffer.getvalue()
