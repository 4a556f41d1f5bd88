"""
Punch value objects (``payroll_kernel.domain.punches``).

Responsibility
--------------
Frozen dataclasses for the raw clock events consumed by the engine and
their normalized, noise-annotated counterparts.

Invariants enforced
-------------------
* ``Punch`` is immutable; ``punch_type`` is always a ``PunchType``.
* ``ProcessedPunch`` wraps exactly one ``Punch``; a noise punch always
  carries a ``NoiseReason`` and a valid punch never does.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PunchType(str, Enum):
    """Kinds of clock events."""
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class NoiseReason(str, Enum):
    """Why the normalizer excluded a punch from session reconstruction."""
    BURST = "burst"
    BREAK_CANCELED = "break canceled"
    DUPLICATE = "duplicate punch within 60s"


@dataclass(frozen=True)
class Punch:
    """A single timestamped clock event, created by the punch source."""
    id: str
    employee_id: str
    punch_type: PunchType
    timestamp: datetime

    def __post_init__(self) -> None:
        # Accept raw strings from upstream records
        object.__setattr__(self, "punch_type", PunchType(self.punch_type))
        if not self.employee_id:
            raise ValueError(f"Punch {self.id!r} has no employee_id")


@dataclass(frozen=True)
class ProcessedPunch:
    """A punch tagged by the normalizer.  Never dropped, only flagged."""
    punch: Punch
    is_noise: bool = False
    noise_reason: NoiseReason | None = None

    def __post_init__(self) -> None:
        if self.is_noise and self.noise_reason is None:
            raise ValueError(f"Noise punch {self.punch.id!r} needs a noise_reason")
        if not self.is_noise and self.noise_reason is not None:
            raise ValueError(f"Valid punch {self.punch.id!r} cannot carry a noise_reason")

    @property
    def id(self) -> str:
        return self.punch.id

    @property
    def employee_id(self) -> str:
        return self.punch.employee_id

    @property
    def punch_type(self) -> PunchType:
        return self.punch.punch_type

    @property
    def timestamp(self) -> datetime:
        return self.punch.timestamp
