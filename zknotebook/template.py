"""Templates, template loaders and lazily rendered strings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from zknotebook.style import NullStyler, Styler


class Template(ABC):
    """Produces a string from a given context."""

    @abstractmethod
    def styler(self) -> Styler:
        """Styler used to format the template content."""

    @abstractmethod
    def render(self, context: Any) -> str:
        """Render the template with the given variable context."""


@dataclass
class TemplateFunc(Template):
    """Uses a plain function as a template."""

    func: Callable[[Any], str]

    def styler(self) -> Styler:
        return NullStyler()

    def render(self, context: Any) -> str:
        return self.func(context)


class NullTemplate(Template):
    """Template always rendering an empty string."""

    def styler(self) -> Styler:
        return NullStyler()

    def render(self, context: Any) -> str:
        return ""


class TemplateLoader(ABC):
    """Parses template strings or files into templates."""

    @abstractmethod
    def load_template(self, template: str) -> Template:
        """Create a template from a template string."""

    @abstractmethod
    def load_template_at(self, path: str) -> Template:
        """Create a template from the file at path, possibly relative to template dirs."""


TemplateLoaderFactory = Callable[[str], TemplateLoader]


class NullTemplateLoader(TemplateLoader):
    """Loader always returning a NullTemplate."""

    def load_template(self, template: str) -> Template:
        return NullTemplate()

    def load_template_at(self, path: str) -> Template:
        return NullTemplate()


class LazyString:
    """String computed on first use, then cached."""

    __slots__ = ("_render", "_value")

    def __init__(self, render: Callable[[], str]) -> None:
        self._render = render
        self._value: str | None = None

    def __str__(self) -> str:
        if self._value is None:
            self._value = self._render()
        return self._value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (str, LazyString)):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f"LazyString({str(self)!r})"