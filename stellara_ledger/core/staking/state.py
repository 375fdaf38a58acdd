"""Pool / position serialization for the keyed store.

Round-trip property (tested): `pool_from_dict(pool_to_dict(p)) == p`, and the
same for positions.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping, TypeVar

from .types import PoolState, Position

POOL_FIELD_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)
POSITION_FIELD_NAMES: tuple[str, ...] = tuple(Position.__dataclass_fields__)

_T = TypeVar("_T", PoolState, Position)


def _to_dict(obj: PoolState | Position) -> dict[str, int]:
    return {f.name: getattr(obj, f.name) for f in fields(obj)}


def _from_dict(cls: type[_T], names: tuple[str, ...], d: Mapping[str, Any]) -> _T:
    kwargs: dict[str, int] = {}
    for name in names:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"{cls.__name__}.{name} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)
    return cls(**kwargs)


def pool_to_dict(pool: PoolState) -> dict[str, int]:
    return _to_dict(pool)


def pool_from_dict(d: Mapping[str, Any]) -> PoolState:
    return _from_dict(PoolState, POOL_FIELD_NAMES, d)


def position_to_dict(position: Position) -> dict[str, int]:
    return _to_dict(position)


def position_from_dict(d: Mapping[str, Any]) -> Position:
    return _from_dict(Position, POSITION_FIELD_NAMES, d)
