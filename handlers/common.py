"""
handlers/common.py
-------------------
Argument parsing and reply formatting shared by the command handlers.

Commands take positional arguments followed by `key:value` fields:
    /expense 12.50 cat:3 acc:1 desc:Lunch with the team
A value runs until the next key, so it may contain spaces.
"""

import re
from decimal import Decimal

_KEY = re.compile(r"(?:^|\s)([a-z_]+):", re.IGNORECASE)


def parse_fields(args: list[str] | None) -> tuple[list[str], dict[str, str]]:
    """
    Split command arguments into positional tokens and `key:value` fields.

    Returns:
        (positional, fields); keys are lower-cased.

    Example:
        >>> parse_fields(["5", "amount:75", "desc:taxi", "home"])
        (['5'], {'amount': '75', 'desc': 'taxi home'})
    """
    text = " ".join(args or []).strip()
    matches = list(_KEY.finditer(text))
    head_end = matches[0].start() if matches else len(text)
    positional = text[:head_end].split()

    fields = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        fields[match.group(1).lower()] = text[match.end():end].strip()
    return positional, fields


def to_int(value: str | None) -> int | None:
    """Parse an id or count; None when missing or not a number."""
    if value is None:
        return None
    try:
        return int(value.strip().lstrip("#"))
    except ValueError:
        return None


def to_number(value: str | None) -> str | None:
    """Normalize a decimal comma; the services validate the result."""
    if value is None:
        return None
    return value.strip().replace(",", ".")


def money(amount: Decimal, currency: str = "") -> str:
    text = f"{amount:,.2f}"
    return f"{text} {currency}".strip()


def error_text(result: dict) -> str:
    """Reply text for a failed service result."""
    return f"⚠️ {result.get('message', 'Request failed.')}"
