"""Two-tier Line-of-Business resolution against a picklist snapshot.

A ``Resolver`` is built once per snapshot and never changes afterwards:

    exact index    exact_key(entry.text) -> entry
    relaxed index  relax(exact key)       -> entry

``resolve`` trims and lower-cases the raw label, substitutes an alias if the
label is one, then tries the exact index and finally the relaxed index.
Anything else is ``UNRESOLVED``.

Collisions inside either index are a picklist data defect. By default they
are rejected at construction (``on_duplicate="reject"``); ``"last"`` keeps
the later entry in snapshot order and logs the overwrite.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from lobmap.aliases import AliasTable
from lobmap.errors import DanglingAliasError, DuplicateEntryError, SnapshotError
from lobmap.normalizer import exact_key, is_blank, relax

log = logging.getLogger(__name__)

DuplicatePolicy = Literal["reject", "last"]
DanglingPolicy = Literal["drop", "reject"]
MatchTier = Literal["exact", "relaxed"]

_DUPLICATE_POLICIES = ("reject", "last")
_DANGLING_POLICIES = ("drop", "reject")


@dataclass(frozen=True, slots=True)
class PicklistEntry:
    """One canonical picklist value."""

    id: int
    text: str

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise SnapshotError(f"Picklist id must be an int, got {self.id!r}")
        if not isinstance(self.text, str) or is_blank(self.text):
            raise SnapshotError(f"Picklist entry {self.id} has blank text")


@dataclass(frozen=True, slots=True)
class ResolvedLob:
    """A label resolved to an existing picklist entry."""

    id: int
    text: str

    @classmethod
    def from_entry(cls, entry: PicklistEntry) -> ResolvedLob:
        return cls(entry.id, entry.text)

    def __bool__(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True, slots=True)
class Unresolved:
    """No picklist entry could be determined. All instances are equal."""

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"id": None, "text": None}


UNRESOLVED = Unresolved()

Resolution = ResolvedLob | Unresolved


@dataclass(frozen=True, slots=True)
class Match:
    """A resolution together with how it was reached."""

    result: Resolution
    tier: MatchTier | None
    alias_target: str | None = None

    @property
    def resolved(self) -> bool:
        return isinstance(self.result, ResolvedLob)


class Resolver:
    """Immutable resolver over one picklist snapshot.

    Args:
        picklist: Snapshot entries. Ids must be unique.
        aliases: Alias table applied before matching. ``None`` means no
            aliases; pass ``AliasTable.default()`` for the built-in codes.
        on_duplicate: ``"reject"`` raises ``DuplicateEntryError`` when two
            entries share an exact or relaxed key; ``"last"`` keeps the
            later entry.
        on_dangling_alias: ``"drop"`` logs and discards aliases whose target
            is not in the picklist; ``"reject"`` raises
            ``DanglingAliasError``.
    """

    def __init__(
        self,
        picklist: Iterable[PicklistEntry],
        aliases: AliasTable | None = None,
        *,
        on_duplicate: DuplicatePolicy = "reject",
        on_dangling_alias: DanglingPolicy = "drop",
    ) -> None:
        if on_duplicate not in _DUPLICATE_POLICIES:
            raise ValueError(f"on_duplicate must be one of {_DUPLICATE_POLICIES}")
        if on_dangling_alias not in _DANGLING_POLICIES:
            raise ValueError(f"on_dangling_alias must be one of {_DANGLING_POLICIES}")

        self._entries: tuple[PicklistEntry, ...] = tuple(picklist)
        self._on_duplicate = on_duplicate

        by_id: dict[int, PicklistEntry] = {}
        for entry in self._entries:
            if not isinstance(entry, PicklistEntry):
                raise SnapshotError(f"Expected PicklistEntry, got {entry!r}")
            if entry.id in by_id:
                raise SnapshotError(
                    f"Duplicate picklist id {entry.id}: "
                    f"{by_id[entry.id].text!r} and {entry.text!r}"
                )
            by_id[entry.id] = entry
        self._by_id = by_id

        exact: dict[str, PicklistEntry] = {}
        for entry in self._entries:
            key = exact_key(entry.text)
            prior = exact.get(key)
            if prior is not None:
                self._collision(key, prior, entry, tier="exact")
            exact[key] = entry

        relaxed: dict[str, PicklistEntry] = {}
        for entry in self._entries:
            key = exact_key(entry.text)
            if exact[key] is not entry:
                continue
            rkey = relax(key)
            if not rkey:
                continue
            prior = relaxed.get(rkey)
            if prior is not None:
                self._collision(rkey, prior, entry, tier="relaxed")
            relaxed[rkey] = entry

        self._exact = exact
        self._relaxed = relaxed
        self._aliases = self._check_aliases(
            aliases if aliases is not None else AliasTable.empty(), on_dangling_alias,
        )

    def _collision(
        self, key: str, prior: PicklistEntry, entry: PicklistEntry, *, tier: str,
    ) -> None:
        if self._on_duplicate == "reject":
            raise DuplicateEntryError(key, prior, entry, tier=tier)
        log.warning(
            "Picklist %s key %r: entry %d %r overwrites %d %r",
            tier, key, entry.id, entry.text, prior.id, prior.text,
        )

    def _find(self, canonical: str) -> tuple[PicklistEntry, MatchTier] | None:
        entry = self._exact.get(exact_key(canonical))
        if entry is not None:
            return entry, "exact"
        rkey = relax(canonical)
        if rkey:
            entry = self._relaxed.get(rkey)
            if entry is not None:
                return entry, "relaxed"
        return None

    def _check_aliases(self, aliases: AliasTable, policy: DanglingPolicy) -> AliasTable:
        dangling = {k: v for k, v in aliases.items() if self._find(v) is None}
        if not dangling:
            return aliases
        if policy == "reject":
            raise DanglingAliasError(dangling)
        for alias, target in sorted(dangling.items()):
            log.warning("Dropping alias %r: target %r not in picklist", alias, target)
        return aliases.restrict(lambda k, _v: k not in dangling)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def match(self, raw: str | None) -> Match:
        """Resolve *raw* and report the tier and alias that produced the result."""
        if raw is None or is_blank(raw):
            return Match(UNRESOLVED, None)
        key = exact_key(raw)
        alias_target = self._aliases.lookup(key)
        found = self._find(alias_target if alias_target is not None else key)
        if found is None:
            return Match(UNRESOLVED, None, alias_target)
        entry, tier = found
        return Match(ResolvedLob.from_entry(entry), tier, alias_target)

    def resolve(self, raw: str | None) -> Resolution:
        """Map a free-text label to its picklist entry, or ``UNRESOLVED``."""
        return self.match(raw).result

    def resolve_many(self, raws: Iterable[str | None]) -> list[Resolution]:
        return [self.resolve(raw) for raw in raws]

    def get(self, entry_id: int) -> PicklistEntry | None:
        return self._by_id.get(entry_id)

    @property
    def entries(self) -> tuple[PicklistEntry, ...]:
        return self._entries

    @property
    def aliases(self) -> AliasTable:
        """The effective alias table (dangling aliases removed)."""
        return self._aliases

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"Resolver({len(self._entries)} entries, "
            f"{len(self._aliases)} aliases)"
        )
