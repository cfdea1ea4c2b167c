"""Exception hierarchy for picklist snapshot and alias table problems.

Lookups never raise: an unmatched or blank label is expressed as
``Unresolved``. Everything here is raised at construction or load time so
bad data surfaces when a resolver is built.
"""
from __future__ import annotations


class LobmapError(Exception):
    """Base class for all lobmap errors."""


class SnapshotError(LobmapError, ValueError):
    """Raised when a picklist snapshot is malformed."""


class DuplicateEntryError(SnapshotError):
    """Raised when two picklist entries collapse onto the same match key."""

    def __init__(self, key: str, first: object, second: object, *, tier: str) -> None:
        self.key = key
        self.first = first
        self.second = second
        self.tier = tier
        super().__init__(
            f"{tier} key {key!r} is shared by {first!r} and {second!r}"
        )


class AliasTableError(LobmapError, ValueError):
    """Raised when alias pairs are invalid or contradict each other."""


class DanglingAliasError(AliasTableError):
    """Raised when an alias target is not present in the picklist."""

    def __init__(self, dangling: dict[str, str]) -> None:
        self.dangling = dict(dangling)
        listed = ", ".join(f"{k!r} -> {v!r}" for k, v in sorted(self.dangling.items()))
        super().__init__(f"Alias targets missing from picklist: {listed}")
