from typing import Any

import pytest

from zknotebook.config import MarkdownConfig
from zknotebook.link import (
    LinkFormatError,
    LinkFormatterContext,
    LinkRelation,
    ResolvedLink,
    link_rels,
    new_link_formatter,
    new_link_formatter_context,
    new_markdown_link_formatter,
    new_wiki_link_formatter,
)
from zknotebook.paths import NotebookPath
from zknotebook.style import NullStyler, Styler
from zknotebook.template import NullTemplateLoader, Template, TemplateLoader


class _TemplateSpy(Template):
    def __init__(self, result: str) -> None:
        self.result = result
        self.contexts: list[Any] = []

    def styler(self) -> Styler:
        return NullStyler()

    def render(self, context: Any) -> str:
        self.contexts.append(context)
        return self.result


class _LoaderMock(TemplateLoader):
    def __init__(self) -> None:
        self.templates: dict[str, _TemplateSpy] = {}

    def spy_string(self, content: str) -> _TemplateSpy:
        spy = _TemplateSpy(content)
        self.templates[content] = spy
        return spy

    def load_template(self, template: str) -> Template:
        return self.templates[template]

    def load_template_at(self, path: str) -> Template:
        raise KeyError(path)


def _config(link_format, encode, drop):
    return MarkdownConfig(
        link_format=link_format, link_encode_path=encode, link_drop_extension=drop
    )


@pytest.mark.parametrize(
    ("encode", "drop", "path", "title", "expected"),
    [
        (False, False, "path/to note.md", "", "[](path/to note.md)"),
        (False, False, "", "", "[]()"),
        (False, False, "path/to note.md", "An interesting subject",
         "[An interesting subject](path/to note.md)"),
        (False, False, r"path/(no\te).md", r"An [interesting] \subject",
         r"[An [interesting\] \\subject](path/(no\\te\).md)"),
        (True, False, "path/to note.md", "An interesting subject",
         "[An interesting subject](path/to%20note.md)"),
        (True, False, r"path/(no\te).md", r"An [interesting] \subject",
         r"[An [interesting\] \\subject](path/%28no%5Cte%29.md)"),
        (False, True, "path/to note.md", "An interesting subject",
         "[An interesting subject](path/to note)"),
        (True, True, "path/to note.md", "An interesting subject",
         "[An interesting subject](path/to%20note)"),
    ],
)
def test_markdown_link_formatter(encode, drop, path, title, expected):
    formatter = new_link_formatter(_config("markdown", encode, drop), NullTemplateLoader())
    actual = formatter(
        LinkFormatterContext(
            filename="filename", path="path", rel_path=path, abs_path="abs-path", title=title
        )
    )
    assert actual == expected


@pytest.mark.parametrize(
    ("encode", "drop", "path", "expected"),
    [
        (False, False, "path/to note.md", "(path/to note.md)"),
        (False, False, "", "()"),
        (False, False, r"path/(no\te).md", r"(path/(no\\te\).md)"),
        (True, False, "path/to note.md", "(path/to%20note.md)"),
        (True, False, r"path/(no\te).md", "(path/%28no%5Cte%29.md)"),
        (False, True, "path/to note.md", "(path/to note)"),
        (True, True, "path/to note.md", "(path/to%20note)"),
    ],
)
def test_markdown_link_formatter_only_href(encode, drop, path, expected):
    formatter = new_markdown_link_formatter(_config("markdown", encode, drop), True)
    actual = formatter(
        LinkFormatterContext(
            filename="filename", path="path", rel_path=path, abs_path="abs-path", title="title"
        )
    )
    assert actual == expected


@pytest.mark.parametrize(
    ("encode", "drop", "path", "expected"),
    [
        (False, False, "", "[[]]"),
        (False, False, "path/to note.md", "[[path/to note.md]]"),
        (False, False, r"path/[no\te].md", r"[[path/[no\\te].md]]"),
        (False, False, r"path/[[no\te]].md", r"[[path/[[no\\te\]].md]]"),
        (True, False, "path/to note.md", "[[path/to%20note.md]]"),
        (True, False, r"path/[no\te].md", "[[path/%5Bno%5Cte%5D.md]]"),
        (True, False, r"path/[[no\te]].md", "[[path/%5B%5Bno%5Cte%5D%5D.md]]"),
        (False, True, "path/to note.md", "[[path/to note]]"),
        (True, True, "path/to note.md", "[[path/to%20note]]"),
    ],
)
def test_wiki_link_formatter(encode, drop, path, expected):
    formatter = new_link_formatter(_config("wiki", encode, drop), NullTemplateLoader())
    actual = formatter(
        LinkFormatterContext(
            filename="filename", path=path, rel_path="rel-path", abs_path="abs-path", title="title"
        )
    )
    assert actual == expected


def test_wiki_link_formatter_direct():
    formatter = new_wiki_link_formatter(_config("wiki", False, True))
    assert formatter(LinkFormatterContext(path="path/to note.md")) == "[[path/to note]]"


@pytest.mark.parametrize(
    ("encode", "drop", "filename", "path", "title", "expected"),
    [
        (False, False, "to note.md", "path/to note.md", "",
         LinkFormatterContext(filename="to note.md", path="path/to note.md",
                              abs_path="/path/to note.md", rel_path="../path/to note.md")),
        (False, False, ".", "", "",
         LinkFormatterContext(filename=".", path="", abs_path="/", rel_path="../")),
        (False, False, "to note.md", "path/to note.md", "An interesting subject",
         LinkFormatterContext(filename="to note.md", path="path/to note.md",
                              abs_path="/path/to note.md", rel_path="../path/to note.md",
                              title="An interesting subject")),
        (False, False, r"(no\te).md", r"path/(no\te).md", r"An [interesting] \subject",
         LinkFormatterContext(filename=r"(no\te).md", path=r"path/(no\te).md",
                              abs_path=r"/path/(no\te).md", rel_path=r"../path/(no\te).md",
                              title=r"An [interesting] \subject")),
        (True, False, "to note.md", "path/to note.md", "An interesting subject",
         LinkFormatterContext(filename="to%20note.md", path="path/to%20note.md",
                              abs_path="/path/to%20note.md", rel_path="../path/to%20note.md",
                              title="An interesting subject")),
        (False, True, "to note.md", "path/to note.md", "An interesting subject",
         LinkFormatterContext(filename="to note", path="path/to note",
                              abs_path="/path/to note", rel_path="../path/to note",
                              title="An interesting subject")),
        (True, True, "to note.md", "path/to note.md", "An interesting subject",
         LinkFormatterContext(filename="to%20note", path="path/to%20note",
                              abs_path="/path/to%20note", rel_path="../path/to%20note",
                              title="An interesting subject")),
    ],
)
def test_custom_link_formatter(encode, drop, filename, path, title, expected):
    loader = _LoaderMock()
    spy = loader.spy_string("custom")
    formatter = new_link_formatter(_config("custom", encode, drop), loader)

    actual = formatter(
        LinkFormatterContext(
            filename=filename,
            path=path,
            abs_path="/" + path,
            rel_path="../" + path,
            title=title,
        )
    )
    assert actual == "custom"
    assert spy.contexts == [expected]


def test_custom_link_formatter_load_error():
    with pytest.raises(LinkFormatError, match="failed to render custom link with format: missing"):
        new_link_formatter(_config("missing", False, False), _LoaderMock())


def test_link_rels():
    assert link_rels("up", "down") == [LinkRelation.UP, LinkRelation.DOWN]
    assert link_rels() == []


def test_resolved_link_inherits_link_fields():
    link = ResolvedLink(title="t", href="h", source_path="a.md", target_path="b.md")
    assert (link.title, link.href, link.source_path, link.target_path) == ("t", "h", "a.md", "b.md")


def test_new_link_formatter_context():
    path = NotebookPath(path="dir/note.md", base_path="/notebook", working_dir="/notebook/dir")
    context = new_link_formatter_context(path, "Title", {"key": "value"})
    assert context == LinkFormatterContext(
        filename="note.md",
        path="dir/note.md",
        abs_path="/notebook/dir/note.md",
        rel_path="note.md",
        title="Title",
        metadata={"key": "value"},
    )