"""
Punch Normalizer (``payroll_engines.punch_normalizer``).

Responsibility
--------------
Flags spurious punches in a raw, unordered clock-event stream.  Physical
punch clocks double-fire, employees tap twice, and a break started by
mistake is often "undone" with an immediate clock-in.  The normalizer
tags those punches as noise so the session reconstructor ignores them,
while keeping every punch in its output for the audit trail.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.
First stage of the punch pipeline; feeds ``session_reconstructor``.

Algorithm
---------
Punches are partitioned by employee and sorted by timestamp.  A noise
group collects consecutive punches less than ``noise_window_seconds``
apart.  Each punch is compared with the previous member of the group, not
with the group's first punch, so a chain of taps 40s apart is one group
even when it spans more than one window.  Measuring from the first punch
would leave the tail of such a chain as a second group, and a later
normalization of the surviving punches could flag them again.

Groups are classified as follows:

* ``burst_group_size`` or more punches -- keep the first, flag the rest
  as ``burst``.
* two punches ``(break_start, clock_in)`` -- the break was canceled; flag
  the ``break_start``, keep the ``clock_in``.
* two punches of the same type -- a double tap; keep the later one and
  flag the earlier as ``duplicate punch within 60s``.
* two punches of different types -- keep the first, flag the second.
* three or more punches but fewer than ``burst_group_size`` (only with a
  configured size above 3) -- keep the first, flag the rest as duplicates.
* a single punch -- valid.

Invariants enforced
-------------------
* Cardinality: ``len(output) == len(input)``; nothing is dropped.
* Idempotence: normalizing the valid subset of an output flags nothing.
  Two surviving punches are always at least one window apart, because a
  group never survives with two members.
* Output is chronological (ties broken by punch id).

Failure modes
-------------
* None for data-quality problems.  Noise is a flag, never an exception.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import timedelta

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.punches import NoiseReason, ProcessedPunch, Punch, PunchType
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.punch_normalizer")


def _sort_key(punch: Punch):
    return (punch.timestamp, punch.id)


def _noise_groups(punches: Sequence[Punch], window: timedelta) -> list[list[Punch]]:
    """Split chronologically sorted punches into chained noise groups."""
    groups: list[list[Punch]] = []
    for punch in punches:
        if groups and punch.timestamp - groups[-1][-1].timestamp < window:
            groups[-1].append(punch)
        else:
            groups.append([punch])
    return groups


def _classify_group(group: list[Punch], burst_size: int) -> list[ProcessedPunch]:
    if len(group) == 1:
        return [ProcessedPunch(group[0])]

    if len(group) >= burst_size:
        first, *rest = group
        return [ProcessedPunch(first)] + [
            ProcessedPunch(p, is_noise=True, noise_reason=NoiseReason.BURST) for p in rest
        ]

    if len(group) == 2:
        earlier, later = group
        if (
            earlier.punch_type == PunchType.BREAK_START
            and later.punch_type == PunchType.CLOCK_IN
        ):
            return [
                ProcessedPunch(earlier, is_noise=True, noise_reason=NoiseReason.BREAK_CANCELED),
                ProcessedPunch(later),
            ]
        if earlier.punch_type == later.punch_type:
            return [
                ProcessedPunch(earlier, is_noise=True, noise_reason=NoiseReason.DUPLICATE),
                ProcessedPunch(later),
            ]
        return [
            ProcessedPunch(earlier),
            ProcessedPunch(later, is_noise=True, noise_reason=NoiseReason.DUPLICATE),
        ]

    # Groups of 3 .. burst_size - 1 when burst_size > 3: first wins
    first, *rest = group
    return [ProcessedPunch(first)] + [
        ProcessedPunch(p, is_noise=True, noise_reason=NoiseReason.DUPLICATE) for p in rest
    ]


def _normalize_employee(
    punches: list[Punch], config: PayrollEngineConfig
) -> list[ProcessedPunch]:
    window = timedelta(seconds=config.noise_window_seconds)
    ordered = sorted(punches, key=_sort_key)
    processed: list[ProcessedPunch] = []
    for group in _noise_groups(ordered, window):
        processed.extend(_classify_group(group, config.burst_group_size))
    return processed


@traced_engine("punch_normalizer", "1.0", fingerprint_fields=("punches",))
def normalize_punches(
    punches: Iterable[Punch],
    config: PayrollEngineConfig | None = None,
) -> tuple[ProcessedPunch, ...]:
    """Tag noise punches; return every input punch exactly once.

    Args:
        punches: Punches for one or more employees, in any order.
        config: Engine tunables (``noise_window_seconds``,
            ``burst_group_size``).  Defaults when None.

    Returns:
        Tuple of ``ProcessedPunch`` in chronological order.
    """
    config = config or PayrollEngineConfig.with_defaults()

    by_employee: dict[str, list[Punch]] = defaultdict(list)
    total = 0
    for punch in punches:
        by_employee[punch.employee_id].append(punch)
        total += 1

    processed: list[ProcessedPunch] = []
    for employee_id in sorted(by_employee):
        employee_punches = _normalize_employee(by_employee[employee_id], config)
        noise = sum(1 for p in employee_punches if p.is_noise)
        if noise:
            logger.debug(
                "employee_noise_flagged",
                extra={"employee_id": employee_id, "noise_punches": noise},
            )
        processed.extend(employee_punches)

    processed.sort(key=lambda p: (p.timestamp, p.employee_id, p.id))

    noise_count = sum(1 for p in processed if p.is_noise)
    logger.info(
        "punches_normalized",
        extra={
            "punch_count": total,
            "employee_count": len(by_employee),
            "noise_punches": noise_count,
        },
    )
    return tuple(processed)


def valid_punches(processed: Iterable[ProcessedPunch]) -> tuple[ProcessedPunch, ...]:
    """The non-noise subset, ready for session reconstruction."""
    return tuple(p for p in processed if not p.is_noise)
