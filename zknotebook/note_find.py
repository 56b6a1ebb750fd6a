"""Filtering and sorting options used to find notes."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


@dataclass
class LinkFilter:
    """Note filter selecting notes linking to other ones."""

    hrefs: list[str] = field(default_factory=list)
    negate: bool = False
    recursive: bool = False
    max_distance: int = 0


class NoteSortField(IntEnum):
    """Note field used to sort a list of notes."""

    CREATED = 1
    MODIFIED = 2
    PATH = 3
    RANDOM = 4
    TITLE = 5
    WORD_COUNT = 6


@dataclass(frozen=True)
class NoteSorter:
    """Order term used to sort a list of notes."""

    field: NoteSortField
    ascending: bool


class MatchStrategy(IntEnum):
    """Text matching strategy used when filtering notes by content."""

    FTS = 1
    EXACT = 2
    RE = 3


@dataclass
class NoteFindOpts:
    """Filtering and sorting options used to find notes."""

    match: list[str] = field(default_factory=list)
    match_strategy: MatchStrategy | None = None
    include_hrefs: list[str] = field(default_factory=list)
    exclude_hrefs: list[str] = field(default_factory=list)
    # Whether hrefs may match any portion of a path, as with wiki links.
    allow_partial_hrefs: bool = False
    include_ids: list[int] = field(default_factory=list)
    exclude_ids: list[int] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    mention: list[str] = field(default_factory=list)
    mentioned_by: list[str] = field(default_factory=list)
    linked_by: LinkFilter | None = None
    link_to: LinkFilter | None = None
    related: list[str] = field(default_factory=list)
    orphan: bool = False
    created_start: datetime | None = None
    created_end: datetime | None = None
    modified_start: datetime | None = None
    modified_end: datetime | None = None
    limit: int = 0
    sorters: list[NoteSorter] = field(default_factory=list)

    def including_ids(self, ids: Iterable[int]) -> NoteFindOpts:
        """Copy of these options with ids added to the included note IDs."""
        return dataclasses.replace(self, include_ids=[*self.include_ids, *ids])

    def excluding_ids(self, ids: Iterable[int]) -> NoteFindOpts:
        """Copy of these options with ids added to the excluded note IDs."""
        return dataclasses.replace(self, exclude_ids=[*self.exclude_ids, *ids])


_SORTERS = {
    "created": NoteSorter(NoteSortField.CREATED, False),
    "c": NoteSorter(NoteSortField.CREATED, False),
    "modified": NoteSorter(NoteSortField.MODIFIED, False),
    "m": NoteSorter(NoteSortField.MODIFIED, False),
    "path": NoteSorter(NoteSortField.PATH, True),
    "p": NoteSorter(NoteSortField.PATH, True),
    "title": NoteSorter(NoteSortField.TITLE, True),
    "t": NoteSorter(NoteSortField.TITLE, True),
    "random": NoteSorter(NoteSortField.RANDOM, True),
    "r": NoteSorter(NoteSortField.RANDOM, True),
    "word-count": NoteSorter(NoteSortField.WORD_COUNT, True),
    "wc": NoteSorter(NoteSortField.WORD_COUNT, True),
}

_MATCH_STRATEGIES = {
    "fts": MatchStrategy.FTS,
    "f": MatchStrategy.FTS,
    "": MatchStrategy.FTS,
    "re": MatchStrategy.RE,
    "grep": MatchStrategy.RE,
    "r": MatchStrategy.RE,
    "exact": MatchStrategy.EXACT,
    "e": MatchStrategy.EXACT,
}


def note_sorters_from_strings(strs: Iterable[str]) -> list[NoteSorter]:
    """Parse sort terms, last one first so later terms override earlier ones."""
    return [note_sorter_from_string(text) for text in reversed(list(strs))]


def note_sorter_from_string(text: str) -> NoteSorter:
    """Parse a sort term; a `+` or `-` suffix forces the order."""
    order_symbol = text[-1:]
    term = text.rstrip("+-")
    try:
        sorter = _SORTERS[term]
    except KeyError:
        raise ValueError(
            f"{term}: unknown sorting term\n"
            "try created, modified, path, title, random or word-count"
        ) from None
    if order_symbol == "+":
        return NoteSorter(sorter.field, True)
    if order_symbol == "-":
        return NoteSorter(sorter.field, False)
    return sorter


def match_strategy_from_string(text: str) -> MatchStrategy:
    """Parse a match strategy name."""
    try:
        return _MATCH_STRATEGIES[text]
    except KeyError:
        raise ValueError(
            f"{text}: unknown match strategy\n"
            "try fts (full-text search), re (regular expression) or exact"
        ) from None