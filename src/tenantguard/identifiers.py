"""Identifier format checks: the first barrier before any value reaches SQL text."""

from __future__ import annotations

import re
from collections.abc import Callable

_CUSTOMER_ID_RE = re.compile(r"[A-Za-z0-9]{5}")
_ORDER_ID_RE = re.compile(r"[0-9]{5}")


def validate_customer_id(value: object) -> bool:
    """True iff value is exactly five ASCII letters or digits."""
    return isinstance(value, str) and _CUSTOMER_ID_RE.fullmatch(value) is not None


def validate_order_id(value: object) -> bool:
    """True iff value is exactly five ASCII decimal digits."""
    return isinstance(value, str) and _ORDER_ID_RE.fullmatch(value) is not None


def escape_sql_literal(value: str) -> str:
    """Double single quotes so the value can sit inside a '...' literal."""
    return value.replace("'", "''")


def quote_identifier(name: str) -> str:
    """Wrap a table or column name in double quotes."""
    return '"' + name.replace('"', '""') + '"'


VALIDATORS: dict[str, Callable[[object], bool]] = {
    "customer_id": validate_customer_id,
    "order_id": validate_order_id,
}
