"""Email address list helpers shared by the mail-sending components."""

from __future__ import annotations

import re
from collections.abc import Iterable
from email.utils import formataddr, parseaddr

_SEPARATORS = re.compile(r"[,;\n\r]+")


def normalize_email_address(value: str) -> str:
    """
    Return the bare address of a single entry, or "" when it is not one.

    Accepts "user@example.com" as well as "Jane Doe <user@example.com>".
    """
    _, address = parseaddr(value.strip())
    address = address.strip()
    if not address or "@" not in address:
        return ""
    local, _, domain = address.rpartition("@")
    if not local or not domain or " " in address:
        return ""
    return address


def parse_email_list(value: str | Iterable[str] | None) -> list[str]:
    """
    Split a recipient field into normalized addresses.

    Strings may separate entries with commas, semicolons or newlines.
    Blank and invalid entries are dropped; order is kept and duplicates
    (case-insensitive) are removed.
    """
    if value is None:
        return []

    if isinstance(value, str):
        entries = _SEPARATORS.split(value)
    else:
        entries = []
        for item in value:
            if item is None:
                continue
            entries.extend(_SEPARATORS.split(str(item)))

    seen: set[str] = set()
    addresses: list[str] = []
    for entry in entries:
        if not entry.strip():
            continue
        address = normalize_email_address(entry)
        if address and address.lower() not in seen:
            seen.add(address.lower())
            addresses.append(address)
    return addresses


def format_sender(email: str, name: str = "") -> str:
    """Render a From header value."""
    return formataddr((name, email)) if name else email
