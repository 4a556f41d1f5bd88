"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into the frozen
``PayrollEngineConfig`` dataclass.  Callers use
``payroll_config.get_engine_config()``; this module is the tooling under it.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollEngineConfig

# Top-level key under which a shared YAML file may nest the engine settings
CONFIG_SECTION = "payroll_engine"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a YAML mapping, got {type(data).__name__}")
    return data


def parse_engine_config(data: dict[str, Any]) -> PayrollEngineConfig:
    """
    Parse a ``PayrollEngineConfig`` from a dict.

    Accepts either the bare settings mapping or one nested under
    ``payroll_engine``.  Absent keys keep their defaults.
    """
    section = data.get(CONFIG_SECTION, data)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ValueError(f"'{CONFIG_SECTION}' must be a mapping")
    return PayrollEngineConfig.from_dict(section)


def load_engine_config(path: Path) -> PayrollEngineConfig:
    """Load and parse one YAML configuration file."""
    return parse_engine_config(load_yaml_file(path))


def compute_checksum(config: PayrollEngineConfig) -> str:
    """Deterministic SHA-256 of the effective configuration values."""
    canonical = json.dumps(config.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
