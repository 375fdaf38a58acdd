"""
Ledger configuration.

Defaults live on the frozen ``LedgerConfig`` dataclass. ``load_config`` reads a
YAML file and overrides them; validation is fail-closed (unknown keys, wrong
types and out-of-domain values are rejected rather than ignored).

Example::

    precision: 1000000000000
    min_revoke_timelock: 3600
    hook_policy: best_effort
    log_level: INFO
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.fixed_point import PRECISION, U64_MAX
from .core.vesting.guards import MIN_REVOKE_TIMELOCK


HOOK_POLICIES = ("abort", "best_effort")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised for malformed configuration input."""


@dataclass(frozen=True)
class LedgerConfig:
    # Reward-per-share scale; fixed for the lifetime of a pool once initialized.
    precision: int = PRECISION
    # Floor for the caller-supplied revoke timelock (seconds); may only be raised.
    min_revoke_timelock: int = MIN_REVOKE_TIMELOCK
    # Default policy for transfer hooks registered without an explicit one.
    hook_policy: str = "best_effort"
    log_level: str = "WARNING"

    # Store namespaces for the two engines.
    vesting_namespace: str = "vesting"
    staking_namespace: str = "staking"

    def __post_init__(self) -> None:
        if self.precision <= 0:
            raise ConfigError("precision must be positive")
        if not MIN_REVOKE_TIMELOCK <= self.min_revoke_timelock <= U64_MAX:
            raise ConfigError(f"min_revoke_timelock must be in [{MIN_REVOKE_TIMELOCK}, u64]")
        if self.hook_policy not in HOOK_POLICIES:
            raise ConfigError(f"hook_policy must be one of {HOOK_POLICIES}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}")
        if not self.vesting_namespace or not self.staking_namespace:
            raise ConfigError("namespaces must be non-empty")
        if self.vesting_namespace == self.staking_namespace:
            raise ConfigError("vesting and staking namespaces must differ")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


_FIELD_TYPES: dict[str, type] = {
    "precision": int,
    "min_revoke_timelock": int,
    "hook_policy": str,
    "log_level": str,
    "vesting_namespace": str,
    "staking_namespace": str,
}


def _require_mapping(obj: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an integer")
    return int(obj)


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def config_from_mapping(obj: Any) -> LedgerConfig:
    if obj is None:
        return LedgerConfig()
    root = _require_mapping(obj, name="config")

    unknown = sorted(set(root) - set(_FIELD_TYPES))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")

    kwargs: dict[str, Any] = {}
    for f in fields(LedgerConfig):
        if f.name not in root:
            continue
        if _FIELD_TYPES[f.name] is int:
            kwargs[f.name] = _require_int(root[f.name], name=f.name)
        else:
            kwargs[f.name] = _require_str(root[f.name], name=f.name)
    if "log_level" in kwargs:
        kwargs["log_level"] = kwargs["log_level"].upper()
    return LedgerConfig(**kwargs)


def load_config(path: str | Path) -> LedgerConfig:
    raw = Path(path).read_text(encoding="utf-8")
    try:
        obj = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return config_from_mapping(obj)
