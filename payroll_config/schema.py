"""
Payroll Engine Configuration Schema.

Defines the tunables every engine stage receives explicitly, with the
defaults common in US restaurant payroll.  Different tenants or
jurisdictions supply their own values through YAML (see
``payroll_config.loader``) or ``PayrollEngineConfig.from_dict``:

    config = PayrollEngineConfig(
        week_start_day="monday",
        overtime_multiplier=Decimal("2"),
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Self

from payroll_kernel.domain.compensation import ContractorInterval, PayPeriodType
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")

WEEKDAY_INDEX = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


class BreakClockInPolicy(str, Enum):
    """What a clock_in means while a break is open."""
    END_BREAK = "end_break"  # punch source encodes break resumption as clock_in
    NEW_SESSION = "new_session"


def _default_days_per_pay_period() -> dict[PayPeriodType, Decimal]:
    return {
        PayPeriodType.WEEKLY: Decimal("7"),
        PayPeriodType.BI_WEEKLY: Decimal("14"),
        PayPeriodType.SEMI_MONTHLY: Decimal("15.22"),  # 365.25 / 24
        PayPeriodType.MONTHLY: Decimal("30.44"),  # 365.25 / 12
    }


def _default_days_per_contractor_interval() -> dict[ContractorInterval, Decimal]:
    return {
        ContractorInterval.WEEKLY: Decimal("7"),
        ContractorInterval.BI_WEEKLY: Decimal("14"),
        ContractorInterval.MONTHLY: Decimal("30.44"),
    }


def _to_decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be numeric, got {value!r}")
    try:
        # str() first so YAML floats like 15.22 keep their written value
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be numeric, got {value!r}") from None


def _to_day_map(name: str, raw: dict, enum_cls: type[Enum], required: set) -> dict:
    result = {}
    for key, value in raw.items():
        try:
            member = enum_cls(key.value if isinstance(key, Enum) else key)
        except ValueError:
            raise ValueError(f"{name} has unknown key {key!r}") from None
        days = _to_decimal(f"{name}[{member.value}]", value)
        if days <= 0:
            raise ValueError(f"{name}[{member.value}] must be positive, got {days}")
        result[member] = days
    missing = required - set(result)
    if missing:
        raise ValueError(
            f"{name} is missing {sorted(m.value for m in missing)}"
        )
    return result


@dataclass(frozen=True)
class PayrollEngineConfig:
    """
    Configuration for the punch and payroll engines.

    All numeric tunables are ``Decimal``.  Construct once per run and pass
    to every stage; no stage reads module-level thresholds.
    """

    # Session reconstruction
    max_shift_hours: Decimal = Decimal("16")
    max_shift_gap_hours: Decimal = Decimal("18")
    min_session_minutes: int = 3
    clock_in_during_break: BreakClockInPolicy = BreakClockInPolicy.END_BREAK

    # Punch normalization
    noise_window_seconds: int = 60
    burst_group_size: int = 3

    # Overtime
    week_start_day: str = "sunday"
    standard_work_week_hours: Decimal = Decimal("40")
    overtime_multiplier: Decimal = Decimal("1.5")

    # Proration
    days_per_pay_period: dict[PayPeriodType, Decimal] = field(
        default_factory=_default_days_per_pay_period
    )
    days_per_contractor_interval: dict[ContractorInterval, Decimal] = field(
        default_factory=_default_days_per_contractor_interval
    )

    def __post_init__(self) -> None:
        for name in (
            "max_shift_hours",
            "max_shift_gap_hours",
            "standard_work_week_hours",
            "overtime_multiplier",
        ):
            object.__setattr__(self, name, _to_decimal(name, getattr(self, name)))

        if self.max_shift_hours <= 0:
            raise ValueError("max_shift_hours must be positive")
        if self.max_shift_gap_hours < self.max_shift_hours:
            raise ValueError(
                f"max_shift_gap_hours ({self.max_shift_gap_hours}) cannot be less than "
                f"max_shift_hours ({self.max_shift_hours})"
            )
        if self.min_session_minutes < 0:
            raise ValueError("min_session_minutes cannot be negative")
        try:
            object.__setattr__(
                self, "clock_in_during_break", BreakClockInPolicy(self.clock_in_during_break)
            )
        except ValueError:
            raise ValueError(
                f"clock_in_during_break must be one of "
                f"{[p.value for p in BreakClockInPolicy]}, got '{self.clock_in_during_break}'"
            ) from None

        if self.noise_window_seconds <= 0:
            raise ValueError("noise_window_seconds must be positive")
        if self.burst_group_size < 3:
            raise ValueError("burst_group_size must be at least 3")

        normalized_day = str(self.week_start_day).strip().lower()
        if normalized_day not in WEEKDAY_INDEX:
            raise ValueError(
                f"week_start_day must be one of {sorted(WEEKDAY_INDEX)}, "
                f"got '{self.week_start_day}'"
            )
        object.__setattr__(self, "week_start_day", normalized_day)
        if self.standard_work_week_hours <= 0:
            raise ValueError("standard_work_week_hours must be positive")
        if self.overtime_multiplier < 1:
            raise ValueError("overtime_multiplier cannot be less than 1")

        object.__setattr__(
            self,
            "days_per_pay_period",
            _to_day_map(
                "days_per_pay_period", dict(self.days_per_pay_period),
                PayPeriodType, set(PayPeriodType),
            ),
        )
        object.__setattr__(
            self,
            "days_per_contractor_interval",
            _to_day_map(
                "days_per_contractor_interval", dict(self.days_per_contractor_interval),
                ContractorInterval, set(ContractorInterval) - {ContractorInterval.PER_JOB},
            ),
        )
        if ContractorInterval.PER_JOB in self.days_per_contractor_interval:
            raise ValueError("days_per_contractor_interval cannot define per-job")

        logger.debug(
            "payroll_engine_config_initialized",
            extra={
                "max_shift_hours": str(self.max_shift_hours),
                "max_shift_gap_hours": str(self.max_shift_gap_hours),
                "week_start_day": self.week_start_day,
                "standard_work_week_hours": str(self.standard_work_week_hours),
                "overtime_multiplier": str(self.overtime_multiplier),
                "clock_in_during_break": self.clock_in_during_break.value,
            },
        )

    @property
    def week_start_weekday(self) -> int:
        """``date.weekday()`` index of the first day of the overtime week."""
        return WEEKDAY_INDEX[self.week_start_day]

    @property
    def max_shift_minutes(self) -> Decimal:
        return self.max_shift_hours * 60

    @property
    def max_shift_gap_minutes(self) -> Decimal:
        return self.max_shift_gap_hours * 60

    def to_dict(self) -> dict[str, Any]:
        """Plain, YAML/JSON-friendly representation (Decimals as strings)."""
        return {
            "max_shift_hours": str(self.max_shift_hours),
            "max_shift_gap_hours": str(self.max_shift_gap_hours),
            "min_session_minutes": self.min_session_minutes,
            "clock_in_during_break": self.clock_in_during_break.value,
            "noise_window_seconds": self.noise_window_seconds,
            "burst_group_size": self.burst_group_size,
            "week_start_day": self.week_start_day,
            "standard_work_week_hours": str(self.standard_work_week_hours),
            "overtime_multiplier": str(self.overtime_multiplier),
            "days_per_pay_period": {
                k.value: str(v) for k, v in sorted(
                    self.days_per_pay_period.items(), key=lambda kv: kv[0].value
                )
            },
            "days_per_contractor_interval": {
                k.value: str(v) for k, v in sorted(
                    self.days_per_contractor_interval.items(), key=lambda kv: kv[0].value
                )
            },
        }

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard US defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g. parsed YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown payroll engine config keys: {sorted(unknown)}")
        logger.info(
            "payroll_engine_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        kwargs = dict(data)
        # Partial maps override individual defaults
        if "days_per_pay_period" in kwargs:
            merged = {k.value: v for k, v in _default_days_per_pay_period().items()}
            merged.update(kwargs["days_per_pay_period"] or {})
            kwargs["days_per_pay_period"] = merged
        if "days_per_contractor_interval" in kwargs:
            merged = {k.value: v for k, v in _default_days_per_contractor_interval().items()}
            merged.update(kwargs["days_per_contractor_interval"] or {})
            kwargs["days_per_contractor_interval"] = merged
        return cls(**kwargs)
