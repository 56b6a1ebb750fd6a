"""Links between notes and the formatters generating them."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar
from urllib.parse import quote

from zknotebook.config import MarkdownConfig
from zknotebook.paths import NotebookPath, drop_ext
from zknotebook.template import TemplateLoader


class LinkFormatError(Exception):
    """Raised when a link formatter cannot be created."""


class LinkType(StrEnum):
    """Kind of link."""

    IMPLICIT = "implicit"
    MARKDOWN = "markdown"
    WIKI_LINK = "wiki-link"


class LinkRelation(str):
    """Relationship between a link's source and target."""

    DOWN: ClassVar[LinkRelation]
    UP: ClassVar[LinkRelation]

    def __repr__(self) -> str:
        return f"LinkRelation({str(self)!r})"


LinkRelation.DOWN = LinkRelation("down")
LinkRelation.UP = LinkRelation("up")


def link_rels(*args: str) -> list[LinkRelation]:
    """Link relations from their names."""
    return [LinkRelation(rel) for rel in args]


@dataclass
class Link:
    """Link in a note to another note or an external resource."""

    title: str = ""
    href: str = ""
    type: LinkType | None = None
    is_external: bool = False
    rels: list[LinkRelation] = field(default_factory=list)
    snippet: str = ""
    snippet_start: int = 0
    snippet_end: int = 0


@dataclass
class ResolvedLink(Link):
    """Link between two indexed notes."""

    id: int = 0
    source_id: int = 0
    source_path: str = ""
    target_id: int = 0
    target_path: str = ""


@dataclass
class LinkFormatterContext:
    """Metadata used to generate a link to a note."""

    filename: str = ""
    path: str = ""
    abs_path: str = ""
    rel_path: str = ""
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


LinkFormatter = Callable[[LinkFormatterContext], str]


def new_link_formatter_context(
    path: NotebookPath, title: str, metadata: dict[str, Any] | None
) -> LinkFormatterContext:
    """Context describing the note at the given notebook path."""
    return LinkFormatterContext(
        filename=path.filename(),
        path=path.path,
        abs_path=path.abs_path(),
        rel_path=path.path_rel_to_working_dir(),
        title=title,
        metadata=metadata if metadata is not None else {},
    )


def new_link_formatter(config: MarkdownConfig, template_loader: TemplateLoader) -> LinkFormatter:
    """Link formatter chosen by the Markdown link format setting."""
    match config.link_format:
        case "markdown" | "":
            return new_markdown_link_formatter(config, False)
        case "wiki":
            return new_wiki_link_formatter(config)
        case _:
            return new_custom_link_formatter(config, template_loader)


def new_markdown_link_formatter(config: MarkdownConfig, only_href: bool) -> LinkFormatter:
    """Formatter producing `[title](path)` links, or `(path)` only."""

    def format_link(context: LinkFormatterContext) -> str:
        path = _format_path(context.rel_path, config)
        if not config.link_encode_path:
            path = path.replace("\\", "\\\\").replace(")", "\\)")
        if only_href:
            return f"({path})"
        title = context.title.replace("\\", "\\\\").replace("]", "\\]")
        return f"[{title}]({path})"

    return format_link


def new_wiki_link_formatter(config: MarkdownConfig) -> LinkFormatter:
    """Formatter producing `[[path]]` links."""

    def format_link(context: LinkFormatterContext) -> str:
        path = _format_path(context.path, config)
        if not config.link_encode_path:
            path = path.replace("\\", "\\\\").replace("]]", "\\]]")
        return f"[[{path}]]"

    return format_link


def new_custom_link_formatter(
    config: MarkdownConfig, template_loader: TemplateLoader
) -> LinkFormatter:
    """Formatter rendering links with the template given as link format."""
    try:
        template = template_loader.load_template(config.link_format)
    except Exception as err:
        raise LinkFormatError(
            f"failed to render custom link with format: {config.link_format}: {err}"
        ) from err

    def format_link(context: LinkFormatterContext) -> str:
        formatted = dataclasses.replace(
            context,
            filename=_format_path(context.filename, config),
            path=_format_path(context.path, config),
            rel_path=_format_path(context.rel_path, config),
            abs_path=_format_path(context.abs_path, config),
        )
        return template.render(formatted)

    return format_link


def _format_path(path: str, config: MarkdownConfig) -> str:
    if config.link_drop_extension:
        path = drop_ext(path)
    if config.link_encode_path:
        path = quote(path, safe="$&+:=@/")
    return path