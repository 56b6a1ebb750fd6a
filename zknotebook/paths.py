"""File storage interface and notebook-relative paths."""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import takewhile


class FileStorage(ABC):
    """Read and write access to a file storage."""

    @property
    @abstractmethod
    def working_dir(self) -> str:
        """Current working directory."""

    @abstractmethod
    def abs(self, path: str) -> str:
        """Make path absolute using the working directory if needed."""

    @abstractmethod
    def rel(self, path: str) -> str:
        """Make an absolute path relative to the working directory."""

    @abstractmethod
    def canonical(self, path: str) -> str:
        """Canonical version of path, with symbolic links resolved."""

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Whether a file exists at path."""

    @abstractmethod
    def dir_exists(self, path: str) -> bool:
        """Whether a directory exists at path."""

    @abstractmethod
    def is_descendant_of(self, dir: str, path: str) -> bool:
        """Whether path is dir or one of its descendants."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Content of the file at path."""

    @abstractmethod
    def write(self, path: str, content: bytes) -> None:
        """Create or overwrite the file at path, creating parent directories."""


def _clean(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*parts: str) -> str:
    kept = [part for part in parts if part]
    if not kept:
        return ""
    return _clean("/".join(kept))


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _ext(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _components(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def _rel(base_path: str, target_path: str) -> str:
    base = _clean(base_path)
    target = _clean(target_path)
    if base == target:
        return "."
    if base == ".":
        base = ""
    if base.startswith("/") != target.startswith("/"):
        raise ValueError(f"Rel: can't make {target_path} relative to {base_path}")

    base_parts = _components(base)
    target_parts = _components(target)
    common = sum(
        1 for _ in takewhile(lambda pair: pair[0] == pair[1], zip(base_parts, target_parts))
    )
    remaining = base_parts[common:]
    if ".." in remaining:
        raise ValueError(f"Rel: can't make {target_path} relative to {base_path}")
    return "/".join([".."] * len(remaining) + target_parts[common:])


def drop_ext(path: str) -> str:
    """Path without its file extension."""
    ext = _ext(path)
    return path[: len(path) - len(ext)] if ext else path


def filename_stem(path: str) -> str:
    """Filename portion of path, without its file extension."""
    return _base(drop_ext(path))


@dataclass(frozen=True)
class NotebookPath:
    """Path of a notebook file with the notebook root and working directory."""

    path: str
    base_path: str
    working_dir: str = ""

    def filename(self) -> str:
        """Filename of the notebook file."""
        return _base(self.path)

    def abs_path(self) -> str:
        """Absolute path to the notebook file."""
        return _join(self.base_path, self.path)

    def path_rel_to_working_dir(self) -> str:
        """Path relative to the working dir, or to the notebook when it is unset."""
        if not self.working_dir:
            return self.path
        return _rel(self.working_dir, self.abs_path())