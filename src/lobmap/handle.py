"""Copy-on-write holder for the active Resolver.

Readers call ``handle.resolve(...)`` or grab ``handle.current`` without
locking. ``refresh`` builds a complete new Resolver from the new snapshot and
only then rebinds the active reference, so a reader sees either the old
snapshot or the new one, never a mix. If the build raises, the previous
Resolver stays active.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from lobmap.aliases import AliasTable
from lobmap.resolver import PicklistEntry, Resolution, Resolver

log = logging.getLogger(__name__)


class ResolverHandle:
    """Holds one Resolver and swaps it atomically on refresh.

    Args:
        resolver: The initially active Resolver.
        aliases: Alias table used for later refreshes. Defaults to the
            effective table of *resolver*; pass the full table when some
            aliases may only become valid in a later snapshot.
        **resolver_options: Passed to every Resolver built by ``refresh``
            (``on_duplicate``, ``on_dangling_alias``).
    """

    def __init__(
        self,
        resolver: Resolver,
        aliases: AliasTable | None = None,
        **resolver_options: Any,
    ) -> None:
        self._active = resolver
        self._aliases = aliases if aliases is not None else resolver.aliases
        self._options = resolver_options
        self._write_lock = threading.Lock()
        self._generation = 0

    @classmethod
    def build(
        cls,
        picklist: Iterable[PicklistEntry],
        aliases: AliasTable | None = None,
        **resolver_options: Any,
    ) -> ResolverHandle:
        table = aliases if aliases is not None else AliasTable.empty()
        resolver = Resolver(picklist, table, **resolver_options)
        return cls(resolver, table, **resolver_options)

    @property
    def current(self) -> Resolver:
        return self._active

    @property
    def generation(self) -> int:
        """Number of successful swaps since construction."""
        return self._generation

    def resolve(self, raw: str | None) -> Resolution:
        return self._active.resolve(raw)

    def refresh(
        self,
        picklist: Iterable[PicklistEntry],
        aliases: AliasTable | None = None,
    ) -> Resolver:
        """Build a Resolver for the new snapshot and make it active.

        ``aliases=None`` keeps the alias table the handle was given.
        """
        with self._write_lock:
            table = aliases if aliases is not None else self._aliases
            fresh = Resolver(picklist, table, **self._options)
            self._active = fresh
            self._aliases = table
            self._generation += 1
            generation = self._generation
        log.info(
            "Resolver refreshed (generation %d): %d entries, %d aliases",
            generation, len(fresh), len(fresh.aliases),
        )
        return fresh

    def swap(self, resolver: Resolver) -> Resolver:
        """Install an already-built Resolver; returns the one it replaced."""
        with self._write_lock:
            previous = self._active
            self._active = resolver
            self._generation += 1
        return previous
