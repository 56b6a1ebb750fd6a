"""Notes and their lightweight and contextual variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from zknotebook.link import Link
from zknotebook.paths import filename_stem


@dataclass
class MinimalNote:
    """Title and path of a note, for display purposes."""

    id: int = 0
    path: str = ""
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Note:
    """Metadata and content of a single note."""

    id: int = 0
    path: str = ""
    title: str = ""
    lead: str = ""
    body: str = ""
    raw_content: str = ""
    word_count: int = 0
    links: list[Link] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created: datetime | None = None
    modified: datetime | None = None
    checksum: str = ""

    def as_minimal_note(self) -> MinimalNote:
        """Lightweight view of this note."""
        return MinimalNote(id=self.id, path=self.path, title=self.title, metadata=self.metadata)

    def filename(self) -> str:
        """Filename portion of the note path."""
        if not self.path:
            return "."
        stripped = self.path.rstrip("/")
        if not stripped:
            return "/"
        return stripped.rsplit("/", 1)[-1]

    def filename_stem(self) -> str:
        """Filename portion of the note path, without its extension."""
        return filename_stem(self.path)


@dataclass
class ContextualNote(Note):
    """Note with context-sensitive excerpts, such as highlighted search terms."""

    snippets: list[str] = field(default_factory=list)