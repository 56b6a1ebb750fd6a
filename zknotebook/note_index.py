"""Index of notes and statistics of the indexing process."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from zknotebook.collection import Collection, CollectionKind, CollectionSorter
from zknotebook.link import LinkType, ResolvedLink
from zknotebook.note import ContextualNote, MinimalNote, Note
from zknotebook.note_find import NoteFindOpts


class NoteIndex(ABC):
    """Persists and grants access to indexed information about the notes."""

    @abstractmethod
    def find(self, opts: NoteFindOpts) -> list[ContextualNote]:
        """Notes matching the given filtering and sorting criteria."""

    @abstractmethod
    def find_minimal(self, opts: NoteFindOpts) -> list[MinimalNote]:
        """Lightweight metadata of the notes matching the given criteria."""

    @abstractmethod
    def find_link_match(self, base_dir: str, href: str, link_type: LinkType) -> int:
        """ID of the best note match for a link href, relative to base_dir."""

    @abstractmethod
    def find_links_between_notes(self, ids: Iterable[int]) -> list[ResolvedLink]:
        """Links between the given notes."""

    @abstractmethod
    def find_collections(
        self, kind: CollectionKind, sorters: list[CollectionSorter]
    ) -> list[Collection]:
        """All the collections of the given kind."""

    @abstractmethod
    def indexed_paths(self) -> Iterable[Any]:
        """Metadata of the indexed note files."""

    @abstractmethod
    def add(self, note: Note) -> int:
        """Index a new note and return its ID."""

    @abstractmethod
    def update(self, note: Note) -> None:
        """Reset the metadata of an already indexed note."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete the note at path from the index."""

    @abstractmethod
    def commit(self, transaction: Callable[[NoteIndex], None]) -> None:
        """Perform a set of operations atomically."""

    @abstractmethod
    def needs_reindexing(self) -> bool:
        """Whether all notes should be reindexed."""

    @abstractmethod
    def set_needs_reindexing(self, needs_reindexing: bool) -> None:
        """Record whether all notes should be reindexed."""


@dataclass
class NoteIndexOpts:
    """Options of the indexing process."""

    # Reindex existing notes too.
    force: bool = False
    verbose: bool = False


_ROUNDING_US = 500_000


@dataclass
class NoteIndexingStats:
    """Statistics about a notebook indexing process."""

    source_count: int = 0
    added_count: int = 0
    modified_count: int = 0
    removed_count: int = 0
    duration: timedelta = timedelta(0)

    def __str__(self) -> str:
        noun = "note" if self.source_count == 1 else "notes"
        return (
            f"Indexed {self.source_count} {noun} in {_format_duration(self.duration)}\n"
            f"  + {self.added_count} added\n"
            f"  ~ {self.modified_count} modified\n"
            f"  - {self.removed_count} removed"
        )


def _round(microseconds: int) -> int:
    remainder = microseconds % _ROUNDING_US
    if remainder + remainder < _ROUNDING_US:
        return microseconds - remainder
    return microseconds + _ROUNDING_US - remainder


def _fraction(value: int, unit: int) -> str:
    whole, remainder = divmod(value, unit)
    if not remainder:
        return str(whole)
    digits = str(remainder).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(duration: timedelta) -> str:
    """Duration rounded to half seconds, written like `1m30.5s`."""
    microseconds = duration // timedelta(microseconds=1)
    sign = "-" if microseconds < 0 else ""
    microseconds = _round(abs(microseconds))
    if microseconds == 0:
        return "0s"
    if microseconds < 1000:
        return f"{sign}{microseconds}µs"
    if microseconds < 1_000_000:
        return f"{sign}{_fraction(microseconds, 1000)}ms"

    hours, rest = divmod(microseconds, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds = _fraction(rest, 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"