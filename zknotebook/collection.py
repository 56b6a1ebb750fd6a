"""Note collections such as tags, their sort order and their formatting."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any

from zknotebook.template import Template


class CollectionKind(StrEnum):
    """Kind of note collection."""

    TAG = "tag"


@dataclass
class Collection:
    """A collection of notes, such as a tag."""

    id: int
    kind: CollectionKind
    name: str
    note_count: int = 0


class CollectionSortField(IntEnum):
    """Collection field used to sort a list of collections."""

    NAME = 1
    NOTE_COUNT = 2


@dataclass(frozen=True)
class CollectionSorter:
    """Order term used to sort a list of collections."""

    field: CollectionSortField
    ascending: bool


CollectionFormatter = Callable[[Collection], str]

_SORTERS = {
    "name": CollectionSorter(CollectionSortField.NAME, True),
    "n": CollectionSorter(CollectionSortField.NAME, True),
    "note-count": CollectionSorter(CollectionSortField.NOTE_COUNT, False),
    "nc": CollectionSorter(CollectionSortField.NOTE_COUNT, False),
}


def collection_sorters_from_strings(strs: Iterable[str]) -> list[CollectionSorter]:
    """Parse sort terms, last one first so later terms override earlier ones."""
    return [collection_sorter_from_string(text) for text in reversed(list(strs))]


def collection_sorter_from_string(text: str) -> CollectionSorter:
    """Parse a sort term; a `+` or `-` suffix forces the order."""
    order_symbol = text[-1:]
    term = text.rstrip("+-")
    try:
        sorter = _SORTERS[term]
    except KeyError:
        raise ValueError(f"{term}: unknown sorting term\ntry name or note-count") from None
    if order_symbol == "+":
        return CollectionSorter(sorter.field, True)
    if order_symbol == "-":
        return CollectionSorter(sorter.field, False)
    return sorter


def new_collection_formatter(template: Template) -> CollectionFormatter:
    """Formatter rendering collections with the given template."""

    def format_collection(collection: Collection) -> str:
        context: dict[str, Any] = {
            "id": collection.id,
            "kind": collection.kind,
            "name": collection.name,
            "note-count": collection.note_count,
        }
        return template.render(context)

    return format_collection