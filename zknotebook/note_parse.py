"""Parsing of note files into notes, and creation date detection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from zknotebook.link import Link

if TYPE_CHECKING:
    from zknotebook.note import Note

# Formats commonly used in frontmatters, which omit the `T` separator.
_FALLBACK_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


@dataclass
class NoteContent:
    """Data parsed from the raw content of a note."""

    # Heading of the note.
    title: str | None = None
    # Opening paragraph or section of the note.
    lead: str | None = None
    # Content of the note, including the lead but without the title.
    body: str | None = None
    tags: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    # Additional metadata, for example from a YAML frontmatter.
    metadata: dict[str, Any] = field(default_factory=dict)


class NoteParser(ABC):
    """Parses a note on the file system into a Note."""

    @abstractmethod
    def parse_note_at(self, abs_path: str) -> Note:
        """Parse the note file at the given absolute path."""


class NoteContentParser(ABC):
    """Parses the raw content of a note into its components."""

    @abstractmethod
    def parse_note_content(self, content: str) -> NoteContent:
        """Split raw note content into title, lead, body, tags, links and metadata."""


def _with_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _parse_date(text: str) -> datetime | None:
    try:
        return _with_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    for date_format in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def creation_date_from(
    metadata: dict[str, Any] | None, birth_time: datetime | None
) -> datetime:
    """Creation date from the frontmatter `date` key, the file birth time, or now."""
    date = (metadata or {}).get("date")
    if isinstance(date, str):
        parsed = _parse_date(date)
        if parsed is not None:
            return parsed

    if birth_time is not None:
        return birth_time.astimezone(UTC) if birth_time.tzinfo else birth_time.replace(tzinfo=UTC)

    return datetime.now(UTC)