"""Helpers for building store filter formulas.

Formulas are opaque to the store client; these only cover the handful of
lookups the proxy makes on its own behalf.
"""


def quote(value: str) -> str:
    """Quote a string literal for a formula."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def field_equals(field_name: str, value: str) -> str:
    return f"{{{field_name}}} = {quote(value)}"


def field_equals_ignore_case(field_name: str, value: str) -> str:
    return f"LOWER({{{field_name}}}) = {quote(value.lower())}"


def opened_and_not_killed(opened_field: str = "Opened", killed_field: str = "Killed") -> str:
    return f"AND({{{opened_field}}}, NOT({{{killed_field}}}))"
