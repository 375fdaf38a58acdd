"""Grant serialization for the keyed store.

Round-trip property (tested): `grant_from_dict(grant_to_dict(g)) == g`.
"""

from __future__ import annotations

from typing import Any, Mapping

from .types import Grant

# Auto-derived from Grant field definitions (single source of truth).
GRANT_FIELD_NAMES: tuple[str, ...] = tuple(Grant.__dataclass_fields__)

_BOOL_FIELDS = frozenset({"claimed", "revoked"})
_STR_FIELDS = frozenset({"beneficiary"})


def grant_to_dict(grant: Grant) -> dict[str, bool | int | str]:
    return {name: getattr(grant, name) for name in GRANT_FIELD_NAMES}


def grant_from_dict(d: Mapping[str, Any]) -> Grant:
    """Deserialize a stored record. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in GRANT_FIELD_NAMES:
        val = d[name]
        if name in _BOOL_FIELDS:
            if not isinstance(val, bool):
                raise TypeError(f"grant field {name!r} must be bool, got {type(val).__name__}")
            kwargs[name] = val
        elif name in _STR_FIELDS:
            if not isinstance(val, str):
                raise TypeError(f"grant field {name!r} must be str, got {type(val).__name__}")
            kwargs[name] = val
        else:
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"grant field {name!r} must be int, got {type(val).__name__}")
            kwargs[name] = int(val)
    return Grant(**kwargs)
