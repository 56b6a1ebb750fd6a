from typing import Any

import pytest

from zknotebook.collection import (
    Collection,
    CollectionKind,
    CollectionSortField,
    CollectionSorter,
    collection_sorter_from_string,
    collection_sorters_from_strings,
    new_collection_formatter,
)
from zknotebook.style import NullStyler, Styler
from zknotebook.template import Template


class _TemplateSpy(Template):
    def __init__(self, result: str) -> None:
        self.result = result
        self.contexts: list[Any] = []

    def styler(self) -> Styler:
        return NullStyler()

    def render(self, context: Any) -> str:
        self.contexts.append(context)
        return self.result


@pytest.mark.parametrize(
    ("text", "field", "ascending"),
    [
        ("name", CollectionSortField.NAME, True),
        ("n", CollectionSortField.NAME, True),
        ("name-", CollectionSortField.NAME, False),
        ("n+", CollectionSortField.NAME, True),
        ("note-count", CollectionSortField.NOTE_COUNT, False),
        ("nc", CollectionSortField.NOTE_COUNT, False),
        ("nc+", CollectionSortField.NOTE_COUNT, True),
        ("note-count-", CollectionSortField.NOTE_COUNT, False),
    ],
)
def test_sorter_from_string(text, field, ascending):
    assert collection_sorter_from_string(text) == CollectionSorter(field, ascending)


def test_sorter_from_unknown_string():
    with pytest.raises(ValueError) as info:
        collection_sorter_from_string("foobar")
    assert str(info.value) == "foobar: unknown sorting term\ntry name or note-count"


def test_sorters_from_strings_reversed():
    assert collection_sorters_from_strings(["name", "nc+"]) == [
        CollectionSorter(CollectionSortField.NOTE_COUNT, True),
        CollectionSorter(CollectionSortField.NAME, True),
    ]


def test_sorters_from_empty_strings():
    assert collection_sorters_from_strings([]) == []


def test_sorters_from_strings_error():
    with pytest.raises(ValueError, match="foobar: unknown sorting term"):
        collection_sorters_from_strings(["name", "foobar"])


def test_collection_formatter_renders_context():
    spy = _TemplateSpy("rendered")
    formatter = new_collection_formatter(spy)
    collection = Collection(id=3, kind=CollectionKind.TAG, name="fiction", note_count=7)

    assert formatter(collection) == "rendered"
    assert spy.contexts == [
        {"id": 3, "kind": CollectionKind.TAG, "name": "fiction", "note-count": 7}
    ]


def test_collection_kind_tag_value():
    assert CollectionKind("tag") is CollectionKind.TAG