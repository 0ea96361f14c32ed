# biketrail/profile.py
"""Rider profile record."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Optional


@dataclass(frozen=True)
class RiderProfile:
    name: str = ""
    age: Optional[int] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    blood_type: str = ""
    emergency_contact: str = ""
    emergency_phone: str = ""

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def with_value(self, key: str, raw: str) -> "RiderProfile":
        """
        Return a copy with one field set from user text.

        Empty text clears numeric fields. Raises ValueError for an unknown
        key or a value that does not fit the field.
        """
        if key not in self.field_names():
            raise ValueError(f"Unknown profile field {key!r}; expected one of {', '.join(self.field_names())}")

        value: Any = raw.strip()
        if key == "age":
            value = int(value) if value else None
        elif key in ("weight_kg", "height_cm"):
            value = float(value) if value else None
        return replace(self, **{key: value})
