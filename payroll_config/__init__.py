"""
payroll_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides ``get_engine_config()``, the one way callers obtain a
    validated ``PayrollEngineConfig``.  Without a path it loads the
    packaged ``defaults.yaml``; tenants pass their own YAML file to
    override overtime, gap, proration and noise rules.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_engine_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry with the source path and a
    checksum of the effective values, tying each payroll run to the exact
    rules that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.loader import compute_checksum, load_engine_config
from payroll_config.schema import BreakClockInPolicy, PayrollEngineConfig

_logger = logging.getLogger("payroll_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_engine_config(path: Path | str | None = None) -> PayrollEngineConfig:
    """Load, validate and trace the engine configuration.

    Args:
        path: YAML file to load.  Defaults to the packaged defaults.

    Returns:
        A frozen ``PayrollEngineConfig``.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_engine_config(source)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_path": str(source),
            "checksum": compute_checksum(config),
            "week_start_day": config.week_start_day,
            "standard_work_week_hours": str(config.standard_work_week_hours),
            "overtime_multiplier": str(config.overtime_multiplier),
        },
    )
    return config


__all__ = [
    "BreakClockInPolicy",
    "DEFAULT_CONFIG_PATH",
    "PayrollEngineConfig",
    "compute_checksum",
    "get_engine_config",
]
