"""Comparison keys for picklist matching.

Two keys are used: ``exact_key`` (trim + lower-case) backs the first
matching tier, ``relax`` backs the fallback tier. Neither is ever shown to a
caller; resolved text always comes from the picklist entry itself.
"""
from __future__ import annotations

import re

# Unicode-aware: \W is [^\w], \w includes "_" which is not alphanumeric.
_NON_ALNUM_RE = re.compile(r"[\W_]+")


def is_blank(s: str | None) -> bool:
    """True for None, the empty string and all-whitespace strings."""
    return s is None or not s.strip()


def exact_key(s: str) -> str:
    """First-tier key: surrounding whitespace trimmed, lower-cased."""
    return s.strip().lower()


def relax(s: str) -> str:
    """Second-tier key, insensitive to case, punctuation and ``&``/``and``.

    >>> relax("Cyber, Ships & Advanced Technologies")
    'cybershipsandadvancedtechnologies'
    """
    text = s.strip().lower().replace("&", "and")
    return _NON_ALNUM_RE.sub("", text)
