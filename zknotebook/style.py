"""Styling rules and the stylers that apply them to text."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum


class Style(StrEnum):
    """Key of a single styling rule, either semantic or explicit."""

    TITLE = "title"
    PATH = "path"
    TERM = "term"
    EMPHASIS = "emphasis"
    UNDERSTATE = "understate"

    BOLD = "bold"
    ITALIC = "italic"
    FAINT = "faint"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    BLINK = "blink"
    REVERSE = "reverse"
    HIDDEN = "hidden"

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"

    BLACK_BG = "black-bg"
    RED_BG = "red-bg"
    GREEN_BG = "green-bg"
    YELLOW_BG = "yellow-bg"
    BLUE_BG = "blue-bg"
    MAGENTA_BG = "magenta-bg"
    CYAN_BG = "cyan-bg"
    WHITE_BG = "white-bg"

    BRIGHT_BLACK = "bright-black"
    BRIGHT_RED = "bright-red"
    BRIGHT_GREEN = "bright-green"
    BRIGHT_YELLOW = "bright-yellow"
    BRIGHT_BLUE = "bright-blue"
    BRIGHT_MAGENTA = "bright-magenta"
    BRIGHT_CYAN = "bright-cyan"
    BRIGHT_WHITE = "bright-white"

    BRIGHT_BLACK_BG = "bright-black-bg"
    BRIGHT_RED_BG = "bright-red-bg"
    BRIGHT_GREEN_BG = "bright-green-bg"
    BRIGHT_YELLOW_BG = "bright-yellow-bg"
    BRIGHT_BLUE_BG = "bright-blue-bg"
    BRIGHT_MAGENTA_BG = "bright-magenta-bg"
    BRIGHT_CYAN_BG = "bright-cyan-bg"
    BRIGHT_WHITE_BG = "bright-white-bg"


class Styler(ABC):
    """Stylizes text according to styling rules."""

    @abstractmethod
    def style(self, text: str, *args: str) -> str:
        """Format text with the given rules, raising on unknown rules."""

    def must_style(self, text: str, *args: str) -> str:
        """Format text with the given rules; unknown rules are a programming error."""
        return self.style(text, *args)


@dataclass
class ProxyStyler(Styler):
    """Delegates to an underlying styler which can be swapped at runtime."""

    styler: Styler

    def style(self, text: str, *args: str) -> str:
        return self.styler.style(text, *args)

    def must_style(self, text: str, *args: str) -> str:
        return self.styler.must_style(text, *args)


class NullStyler(Styler):
    """Styler leaving the text untouched."""

    def style(self, text: str, *args: str) -> str:
        return text

    def must_style(self, text: str, *args: str) -> str:
        return text


class TagStyler(Styler):
    """Styler wrapping the text in XML-like tags, one per rule."""

    def style(self, text: str, *args: str) -> str:
        return self.must_style(text, *args)

    def must_style(self, text: str, *args: str) -> str:
        for rule in args:
            text = f"<{rule}>{text}</{rule}>"
        return text