"""Case-insensitive alias table: legacy LOB codes -> canonical picklist text.

An ``AliasTable`` is built once from a fixed set of pairs and is read-only
afterwards. Keys are stored as ``exact_key(alias)`` so lookups ignore case
and surrounding whitespace but nothing else.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping

from lobmap.errors import AliasTableError
from lobmap.normalizer import exact_key, is_blank

# Known shorthand seen in legacy records. Targets are canonical picklist
# text; a target missing from a given snapshot is dropped by the Resolver.
DEFAULT_ALIASES: tuple[tuple[str, str], ...] = (
    ("SAC", "Sikorsky"),
    ("Sikorsky Aircraft", "Sikorsky"),
    ("Sikorsky Aircraft Corporation", "Sikorsky"),
    ("CSAT", "Cyber, Ships & Advanced Technologies"),
    ("CS&AT", "Cyber, Ships & Advanced Technologies"),
    ("MFC", "Missiles and Fire Control"),
    ("MST", "Mission Systems and Training"),
    ("RMS", "Rotary and Mission Systems"),
    ("Aero", "Aeronautics"),
)


class AliasTable:
    """Immutable alias -> canonical text mapping."""

    __slots__ = ("_map",)

    def __init__(self, pairs: Iterable[tuple[str, str]] | Mapping[str, str] = ()) -> None:
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        table: dict[str, str] = {}
        for alias, target in items:
            if is_blank(alias):
                raise AliasTableError(f"Blank alias for target {target!r}")
            if is_blank(target):
                raise AliasTableError(f"Alias {alias!r} has a blank target")
            key = exact_key(alias)
            target = target.strip()
            previous = table.get(key)
            if previous is not None and previous != target:
                raise AliasTableError(
                    f"Alias {alias!r} maps to both {previous!r} and {target!r}"
                )
            table[key] = target
        self._map = table

    @classmethod
    def empty(cls) -> AliasTable:
        return cls(())

    @classmethod
    def default(cls) -> AliasTable:
        """Table built from ``DEFAULT_ALIASES``."""
        return cls(DEFAULT_ALIASES)

    def lookup(self, key: str) -> str | None:
        """Return the canonical text for *key*, or None if it is not an alias."""
        return self._map.get(exact_key(key))

    def restrict(self, keep: Callable[[str, str], bool]) -> AliasTable:
        """Return a new table holding only the pairs for which ``keep`` is true."""
        return AliasTable((k, v) for k, v in self._map.items() if keep(k, v))

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._map.items())

    def targets(self) -> frozenset[str]:
        return frozenset(self._map.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and exact_key(key) in self._map

    def __len__(self) -> int:
        return len(self._map)

    def __repr__(self) -> str:
        return f"AliasTable({len(self._map)} aliases)"
