"""Apply a Resolver to legacy record dicts.

Caller policy for unresolved labels: keep the raw text so presentation-layer
validation can flag it, and null the id. Input records are never mutated.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from lobmap.normalizer import is_blank
from lobmap.resolver import ResolvedLob, Resolver

DEFAULT_TEXT_FIELD = "line_of_business"
DEFAULT_ID_FIELD = "line_of_business_id"


def _raw_label(record: Mapping[str, Any], text_field: str) -> str | None:
    value = record.get(text_field)
    if value is None or isinstance(value, str):
        return value
    return str(value)


def remap_record(
    record: Mapping[str, Any],
    resolver: Resolver,
    *,
    text_field: str = DEFAULT_TEXT_FIELD,
    id_field: str = DEFAULT_ID_FIELD,
) -> dict[str, Any]:
    """Return a shallow copy of *record* with canonical LOB id and text."""
    out = dict(record)
    result = resolver.resolve(_raw_label(record, text_field))
    if isinstance(result, ResolvedLob):
        out[id_field] = result.id
        out[text_field] = result.text
    else:
        out[id_field] = None
    return out


def remap_records(
    records: Iterable[Mapping[str, Any]],
    resolver: Resolver,
    *,
    text_field: str = DEFAULT_TEXT_FIELD,
    id_field: str = DEFAULT_ID_FIELD,
) -> list[dict[str, Any]]:
    return [
        remap_record(r, resolver, text_field=text_field, id_field=id_field)
        for r in records
    ]


def summarize(
    records: Iterable[Mapping[str, Any]],
    resolver: Resolver,
    *,
    text_field: str = DEFAULT_TEXT_FIELD,
) -> dict[str, Any]:
    """Count resolved, unresolved and blank labels across *records*.

    ``unresolved_labels`` lists each distinct non-blank label that failed to
    resolve, most frequent first.
    """
    total = resolved = blank = 0
    tiers: Counter[str] = Counter()
    misses: Counter[str] = Counter()
    for record in records:
        total += 1
        raw = _raw_label(record, text_field)
        if raw is None or is_blank(raw):
            blank += 1
            continue
        match = resolver.match(raw)
        if match.resolved and match.tier is not None:
            resolved += 1
            tiers[match.tier] += 1
            if match.alias_target is not None:
                tiers["alias"] += 1
        else:
            misses[raw.strip()] += 1
    return {
        "total": total,
        "resolved": resolved,
        "unresolved": sum(misses.values()),
        "blank": blank,
        "by_tier": dict(sorted(tiers.items())),
        "unresolved_labels": [
            {"label": label, "count": count}
            for label, count in sorted(misses.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    }
