from __future__ import annotations

import re
from typing import Any


def as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def year_from_iso_date(value: object) -> int | None:
    """
    Extract YYYY from 'YYYY-MM-DD' or any string containing a 4-digit year.
    """
    s = as_str(value)
    if len(s) >= 4 and s[:4].isdigit():
        y = int(s[:4])
        if 1900 <= y <= 2100:
            return y
    m = re.search(r"\b(19\d{2}|20\d{2})\b", s)
    if not m:
        return None
    return int(m.group(1))


def get_list_of_dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def names_of(value: Any) -> list[str]:
    """
    Non-empty `name` fields of a list of provider objects, in the order given.
    """
    out: list[str] = []
    for obj in get_list_of_dicts(value):
        n = as_str(obj.get("name"))
        if n:
            out.append(n)
    return out
