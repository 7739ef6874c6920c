"""ConfigMap reference models.

This module defines the value type identifying a ConfigMap by location
and the thread-safe set used to collect references from concurrent
scanners.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class ResourceRef:
    """Identifies a ConfigMap by namespace and name.

    This is an immutable, hashable value. Two references are equal only
    when both namespace and name match, so a same-named ConfigMap in a
    different namespace is a distinct entity. Ordering is by
    ``(namespace, name)``.

    Attributes:
        namespace: Namespace containing the ConfigMap.
        name: Name of the ConfigMap.
    """

    namespace: str
    name: str

    def __post_init__(self) -> None:
        """Validate reference data after initialization."""
        if not self.namespace:
            msg = "Namespace cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = "ConfigMap name cannot be empty"
            raise ValueError(msg)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"namespace": self.namespace, "name": self.name}


class ReferenceSet:
    """A deduplicating set of :class:`ResourceRef` values.

    Insertion is guarded by a lock so several producer threads may add
    to the same set. Comparison is order-independent; :meth:`sorted`
    returns references ordered by ``(namespace, name)`` for display.

    Example:
        >>> refs = ReferenceSet([ResourceRef("demo", "app-config")])
        >>> refs.add(ResourceRef("demo", "app-config"))
        >>> len(refs)
        1
    """

    __slots__ = ("_items", "_lock")

    def __init__(self, refs: Iterable[ResourceRef] = ()) -> None:
        self._lock = threading.Lock()
        self._items: set[ResourceRef] = set(refs)

    def add(self, ref: ResourceRef) -> None:
        """Add a single reference."""
        with self._lock:
            self._items.add(ref)

    def update(self, refs: Iterable[ResourceRef]) -> None:
        """Add every reference from ``refs`` in one locked step.

        Args:
            refs: References to merge. May be another ReferenceSet.
        """
        items = refs.snapshot() if isinstance(refs, ReferenceSet) else frozenset(refs)
        with self._lock:
            self._items.update(items)

    def snapshot(self) -> frozenset[ResourceRef]:
        """Return an immutable copy of the current members."""
        with self._lock:
            return frozenset(self._items)

    def difference(self, other: ReferenceSet) -> ReferenceSet:
        """Return a new set holding members not present in ``other``."""
        return ReferenceSet(self.snapshot() - other.snapshot())

    def sorted(self) -> list[ResourceRef]:
        """Return members ordered by ``(namespace, name)``."""
        return sorted(self.snapshot())

    def __contains__(self, ref: object) -> bool:
        with self._lock:
            return ref in self._items

    def __iter__(self) -> Iterator[ResourceRef]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReferenceSet):
            return self.snapshot() == other.snapshot()
        if isinstance(other, (set, frozenset)):
            return self.snapshot() == other
        return NotImplemented

    def __repr__(self) -> str:
        members = ", ".join(str(ref) for ref in self.sorted())
        return f"ReferenceSet({{{members}}})"
