"""Queries and commands performed on an opened notebook."""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import os
import posixpath
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from zknotebook.collection import (
    Collection,
    CollectionFormatter,
    CollectionKind,
    CollectionSorter,
    new_collection_formatter,
)
from zknotebook.config import Config, IDOptions
from zknotebook.link import LinkFormatter, LinkType, ResolvedLink, new_link_formatter
from zknotebook.note import ContextualNote, MinimalNote, Note
from zknotebook.note_find import NoteFindOpts
from zknotebook.note_format import NoteFormatter, new_note_formatter
from zknotebook.note_index import NoteIndex
from zknotebook.note_new import NewNoteTask
from zknotebook.note_parse import NoteContentParser, NoteParser, creation_date_from
from zknotebook.paths import FileStorage
from zknotebook.template import TemplateLoaderFactory

IDGeneratorFactory = Callable[[IDOptions], Callable[[], str]]

_URL_REGEX = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*://\S+|mailto:\S+)$")


class NotebookError(Exception):
    """Raised when a notebook operation fails."""


def _os_environ() -> dict[str, str]:
    return dict(os.environ)


def _is_url(text: str) -> bool:
    return _URL_REGEX.match(text) is not None


@dataclass(frozen=True)
class Dir:
    """Directory inside a notebook."""

    # Path relative to the notebook root.
    name: str
    # Absolute path.
    path: str
    # Name of the config group the directory belongs to, if any.
    group: str = ""


@dataclass
class NewNoteOpts:
    """Options used to create a new note; None falls back on the configuration."""

    title: str | None = None
    content: str = ""
    # Directory relative to the notebook root.
    directory: str | None = None
    group: str | None = None
    # Path to a custom body template.
    template: str | None = None
    extra: dict[str, str] = field(default_factory=dict)
    date: datetime | None = None
    dry_run: bool = False
    # Provided ID used instead of a generated one.
    id: str = ""


@dataclass
class NotebookPorts:
    """Services a notebook depends on."""

    note_index: NoteIndex | None = None
    note_content_parser: NoteContentParser | None = None
    template_loader_factory: TemplateLoaderFactory | None = None
    id_generator_factory: IDGeneratorFactory | None = None
    fs: FileStorage | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("zknotebook"))
    os_env: Callable[[], dict[str, str]] = _os_environ


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return posixpath.normpath(joined) if joined else ""


class Notebook(NoteParser):
    """An opened notebook."""

    def __init__(self, path: str, config: Config, ports: NotebookPorts) -> None:
        self.path = path
        self.config = config
        self.parser = ports.note_content_parser
        self._index = ports.note_index
        self._template_loader_factory = ports.template_loader_factory
        self._id_generator_factory = ports.id_generator_factory
        self._fs = ports.fs
        self._logger = ports.logger
        self._os_env = ports.os_env

    def __repr__(self) -> str:
        return f"Notebook({self.path!r})"

    # Parsing

    def parse_note_at(self, abs_path: str) -> Note:
        """Read and parse the note file at the given absolute path."""
        try:
            content = self._fs.read(abs_path)
        except Exception as err:
            err.add_note(abs_path)
            raise
        return self.parse_note_with_content(abs_path, content)

    def parse_note_with_content(self, abs_path: str, content: bytes) -> Note:
        """Parse a note located at abs_path with the given raw content."""
        try:
            rel_path = self.rel_path(abs_path)
            content_str = content.decode("utf-8")
            parts = self.parser.parse_note_content(content_str)
        except Exception as err:
            err.add_note(abs_path)
            raise

        note = Note(
            path=rel_path,
            title=parts.title or "",
            lead=parts.lead or "",
            body=parts.body or "",
            raw_content=content_str,
            word_count=len(content_str.split()),
            links=[],
            tags=list(parts.tags or []),
            metadata=parts.metadata if parts.metadata is not None else {},
            checksum=hashlib.sha256(content).hexdigest(),
        )

        for link in parts.links or []:
            if not _is_url(link.href) and link.type == LinkType.MARKDOWN:
                # Hrefs are stored relative to the notebook root.
                href = _join(posixpath.dirname(abs_path), link.href)
                try:
                    link = dataclasses.replace(link, href=self.rel_path(href))
                except NotebookError as err:
                    self._logger.error("%s", err)
                    continue
            note.links.append(link)

        try:
            stat = os.stat(abs_path)
        except OSError:
            return note
        note.modified = datetime.fromtimestamp(stat.st_mtime, UTC)
        birth = getattr(stat, "st_birthtime", None)
        birth_time = datetime.fromtimestamp(birth, UTC) if birth is not None else None
        note.created = creation_date_from(note.metadata, birth_time)
        return note

    # Creation

    def new_note(self, opts: NewNoteOpts) -> Note:
        """Generate a new note in the notebook, index it and return it."""
        try:
            return self._new_note(opts)
        except Exception as err:
            err.add_note("new note")
            raise

    def _new_note(self, opts: NewNoteOpts) -> Note:
        directory = self.require_dir_at(
            opts.directory if opts.directory is not None else self.path
        )
        config = self.config.group_config_named(
            opts.group if opts.group is not None else directory.group
        )
        extra = {**config.extra, **opts.extra}
        templates = self._template_loader_factory(config.note.lang)

        if opts.id:
            provided_id = opts.id
            id_generator: Callable[[], str] = lambda: provided_id
        else:
            id_generator = self._id_generator_factory(config.note.id_options)

        task = NewNoteTask(
            dir=directory,
            title=opts.title if opts.title is not None else config.note.default_title,
            content=opts.content,
            date=opts.date,
            extra=extra,
            env=self._os_env(),
            fs=self._fs,
            filename_template=f"{config.note.filename_template}.{config.note.extension}",
            body_template_path=(
                opts.template if opts.template is not None else config.note.body_template_path
            ),
            templates=templates,
            gen_id=id_generator,
            dry_run=opts.dry_run,
        )
        path, content = task.execute()

        note = self.parse_note_with_content(path, content.encode("utf-8"))
        if not opts.dry_run:
            note.id = self._index.add(note)
        return note

    # Queries

    def find_notes(self, opts: NoteFindOpts) -> list[ContextualNote]:
        """Notes matching the given filtering options."""
        return self._index.find(opts)

    def find_note(self, opts: NoteFindOpts) -> Note | None:
        """First note matching the given filtering options, if any."""
        notes = self.find_notes(dataclasses.replace(opts, limit=1))
        return notes[0] if notes else None

    def find_minimal_notes(self, opts: NoteFindOpts) -> list[MinimalNote]:
        """Lightweight metadata of the notes matching the given options."""
        return self._index.find_minimal(opts)

    def find_minimal_note(self, opts: NoteFindOpts) -> MinimalNote | None:
        """Lightweight metadata of the first matching note, if any."""
        notes = self.find_minimal_notes(dataclasses.replace(opts, limit=1))
        return notes[0] if notes else None

    def find_by_href(self, href: str, allow_partial_href: bool) -> MinimalNote | None:
        """First note matching a link href, possibly any unique part of its path."""
        return self.find_minimal_note(
            NoteFindOpts(include_hrefs=[href], allow_partial_hrefs=allow_partial_href)
        )

    def find_links_between_notes(self, ids: Iterable[int]) -> list[ResolvedLink]:
        """Links between the given notes."""
        return self._index.find_links_between_notes(ids)

    def find_collections(
        self, kind: CollectionKind, sorters: list[CollectionSorter]
    ) -> list[Collection]:
        """All the collections of the given kind."""
        return self._index.find_collections(kind, sorters)

    # Paths

    def rel_path(self, original_path: str) -> str:
        """Path relative to the notebook root; raises if outside the notebook."""
        try:
            path = posixpath.relpath(self._fs.abs(original_path), self.path)
        except (OSError, ValueError) as err:
            raise NotebookError(f"{original_path}: not a valid notebook path: {err}") from err
        if path.startswith(".."):
            raise NotebookError(
                f"{original_path}: path is outside the notebook at {self.path}"
            )
        return "" if path == "." else path

    def root_dir(self) -> Dir:
        """Root directory of the notebook."""
        return Dir(name="", path=self.path, group="")

    def dir_at(self, path: str) -> Dir:
        """Notebook directory at the given path."""
        abs_path = self._fs.abs(path)
        name = self.rel_path(abs_path)
        group = self.config.group_name_for_path(name)
        return Dir(name=name, path=abs_path, group=group)

    def require_dir_at(self, path: str) -> Dir:
        """Like dir_at, but raises if the directory does not exist."""
        directory = self.dir_at(path)
        if not self._fs.dir_exists(directory.path):
            raise NotebookError(f"{path}: directory not found")
        return directory

    # Formatters

    def new_note_formatter(self, template_string: str) -> NoteFormatter:
        """Formatter rendering notes with the given template."""
        templates = self._template_loader_factory(self.config.note.lang)
        template = templates.load_template(template_string)
        link_formatter = new_link_formatter(self.config.format.markdown, templates)
        return new_note_formatter(self.path, template, link_formatter, self._os_env(), self._fs)

    def new_collection_formatter(self, template_string: str) -> CollectionFormatter:
        """Formatter rendering collections with the given template."""
        templates = self._template_loader_factory(self.config.note.lang)
        return new_collection_formatter(templates.load_template(template_string))

    def new_link_formatter(self) -> LinkFormatter:
        """Formatter generating internal links between notes."""
        templates = self._template_loader_factory(self.config.note.lang)
        return new_link_formatter(self.config.format.markdown, templates)