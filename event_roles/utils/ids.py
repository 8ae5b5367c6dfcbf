# event_roles/utils/ids.py
from __future__ import annotations

from typing import Any


def parse_snowflake(value: str | int | None) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def parse_snowflake_list(values: Any) -> frozenset[int]:
    if not values:
        return frozenset()
    return frozenset(int(v) for v in values)
