from __future__ import annotations

from dataclasses import fields, is_dataclass, replace
from typing import Any, Dict, TypeVar

T = TypeVar("T")


def changed_fields(patch: Any) -> Dict[str, Any]:
    """Fields explicitly set on a patch (``None`` means "leave unchanged")."""
    return {f.name: getattr(patch, f.name) for f in fields(patch) if getattr(patch, f.name) is not None}


def merge_patch(base: T, patch: Any) -> T:
    """Apply a patch dataclass onto a frozen entity.

    Precedence is field by field: a field set on the patch wins, an unset field
    keeps the base value. Nested patch dataclasses are merged into the matching
    nested entity instead of replacing it.
    """

    updates: Dict[str, Any] = {}
    for name, value in changed_fields(patch).items():
        current = getattr(base, name)
        if is_dataclass(value) and is_dataclass(current):
            updates[name] = merge_patch(current, value)
        else:
            updates[name] = value
    return replace(base, **updates) if updates else base
