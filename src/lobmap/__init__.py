"""Resolve free-text Line-of-Business labels to canonical picklist entries."""

from lobmap.aliases import DEFAULT_ALIASES, AliasTable
from lobmap.errors import (
    AliasTableError,
    DanglingAliasError,
    DuplicateEntryError,
    LobmapError,
    SnapshotError,
)
from lobmap.handle import ResolverHandle
from lobmap.normalizer import exact_key, is_blank, relax
from lobmap.records import remap_record, remap_records, summarize
from lobmap.resolver import (
    UNRESOLVED,
    Match,
    PicklistEntry,
    Resolution,
    ResolvedLob,
    Resolver,
    Unresolved,
)

__all__ = [
    "AliasTable",
    "AliasTableError",
    "DEFAULT_ALIASES",
    "DanglingAliasError",
    "DuplicateEntryError",
    "LobmapError",
    "Match",
    "PicklistEntry",
    "Resolution",
    "ResolvedLob",
    "Resolver",
    "ResolverHandle",
    "SnapshotError",
    "UNRESOLVED",
    "Unresolved",
    "exact_key",
    "is_blank",
    "relax",
    "remap_record",
    "remap_records",
    "summarize",
]
