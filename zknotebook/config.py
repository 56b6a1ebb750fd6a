"""User configuration of a notebook, parsed from TOML."""

from __future__ import annotations

import copy
import posixpath
import re
import tomllib
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from zknotebook.paths import FileStorage

CHARSET_ALPHANUM = "0123456789abcdefghijklmnopqrstuvwxyz"
CHARSET_HEX = "0123456789abcdef"
CHARSET_LETTERS = "abcdefghijklmnopqrstuvwxyz"
CHARSET_NUMBERS = "0123456789"


class ConfigError(Exception):
    """Raised when a configuration cannot be read or queried."""


class Case(IntEnum):
    """Letter case used when generating an ID."""

    LOWER = 1
    UPPER = 2
    MIXED = 3


class LSPDiagnosticSeverity(IntEnum):
    """Severity reported for an LSP diagnostic."""

    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    HINT = 4


@dataclass
class IDOptions:
    """Options used to generate a random ID."""

    length: int = 4
    charset: str = CHARSET_ALPHANUM
    case: Case = Case.LOWER


@dataclass
class NotebookConfig:
    """Configuration about the default notebook."""

    dir: str | None = None


@dataclass
class NoteConfig:
    """Settings used when generating new notes."""

    filename_template: str = "{{id}}"
    extension: str = "md"
    body_template_path: str | None = None
    lang: str = "en"
    default_title: str = "Untitled"
    id_options: IDOptions = field(default_factory=IDOptions)
    exclude: list[str] = field(default_factory=list)


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return posixpath.normpath(joined) if joined else ""


@dataclass
class GroupConfig:
    """Settings for a group of notes."""

    paths: list[str] = field(default_factory=list)
    note: NoteConfig = field(default_factory=NoteConfig)
    extra: dict[str, str] = field(default_factory=dict)

    def exclude_globs(self) -> list[str]:
        """Exclude globs of the group, relative to the notebook root."""
        if not self.paths:
            return list(self.note.exclude)
        return [_join(path, glob) for path in self.paths for glob in self.note.exclude]

    def clone(self) -> GroupConfig:
        """Independent copy of this group configuration."""
        return GroupConfig(
            paths=list(self.paths),
            note=copy.deepcopy(self.note),
            extra=dict(self.extra),
        )

    def _merged(self, table: dict[str, Any], name: str) -> GroupConfig:
        where = f"group.{name}"
        result = self.clone()
        paths = _string_list(table, "paths", where)
        # Without explicit paths, the group name is used as its path.
        result.paths.extend(paths if paths is not None else [name])
        _NoteSettings.parse(_table(table, "note", where), f"{where}.note").apply_to(result.note)
        result.extra.update(_string_map(table, "extra", where) or {})
        return result


@dataclass
class MarkdownConfig:
    """Settings for Markdown documents."""

    hashtags: bool = True
    colon_tags: bool = False
    multiword_tags: bool = False
    link_format: str = "markdown"
    link_encode_path: bool = True
    link_drop_extension: bool = True


@dataclass
class FormatConfig:
    """Settings for document formats."""

    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)


@dataclass
class ToolConfig:
    """External tooling settings."""

    editor: str | None = None
    shell: str | None = None
    pager: str | None = None
    fzf_preview: str | None = None
    fzf_line: str | None = None
    fzf_options: str | None = None
    fzf_bind_new: str | None = None


@dataclass
class LSPCompletionTemplates:
    """Templates of a completion item."""

    label: str | None = None
    filter_text: str | None = None
    detail: str | None = None


@dataclass
class LSPCompletionConfig:
    """LSP auto-completion settings."""

    note: LSPCompletionTemplates = field(default_factory=LSPCompletionTemplates)
    use_additional_text_edits: bool | None = None


@dataclass
class LSPDiagnosticConfig:
    """LSP diagnostics settings."""

    wiki_title: LSPDiagnosticSeverity = LSPDiagnosticSeverity.NONE
    dead_link: LSPDiagnosticSeverity = LSPDiagnosticSeverity.ERROR


@dataclass
class LSPConfig:
    """Language Server Protocol settings."""

    completion: LSPCompletionConfig = field(default_factory=LSPCompletionConfig)
    diagnostics: LSPDiagnosticConfig = field(default_factory=LSPDiagnosticConfig)


@dataclass
class Config:
    """User configuration."""

    notebook: NotebookConfig = field(default_factory=NotebookConfig)
    note: NoteConfig = field(default_factory=NoteConfig)
    groups: dict[str, GroupConfig] = field(default_factory=dict)
    format: FormatConfig = field(default_factory=FormatConfig)
    tool: ToolConfig = field(default_factory=ToolConfig)
    lsp: LSPConfig = field(default_factory=LSPConfig)
    filters: dict[str, str] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    extra: dict[str, str] = field(default_factory=dict)

    def root_group_config(self) -> GroupConfig:
        """Group configuration of the notebook root and its descendants."""
        return GroupConfig(paths=[], note=copy.deepcopy(self.note), extra=dict(self.extra))

    def group_config_for_path(self, path: str) -> GroupConfig:
        """Group configuration matching a notebook-relative path, or the root one."""
        return self.group_config_named(self.group_name_for_path(path))

    def group_config_named(self, name: str) -> GroupConfig:
        """Group configuration with the given name; an empty name is the root group."""
        if not name:
            return self.root_group_config()
        try:
            return self.groups[name]
        except KeyError:
            raise ConfigError(f"no group named `{name}` found in the config") from None

    def group_name_for_path(self, path: str) -> str:
        """Name of the group matching a notebook-relative path, or an empty string."""
        for name, group in self.groups.items():
            for group_path in group.paths:
                try:
                    matches = _glob_match(group_path, path)
                except ValueError as err:
                    raise ConfigError(
                        f"failed to match group {name} to {path}: {err}"
                    ) from err
                if matches or path.startswith(group_path + "/"):
                    return name
        return ""


def new_default_config() -> Config:
    """Configuration with the default settings."""
    return Config()


def open_config(
    path: str, parent_config: Config, fs: FileStorage, is_global: bool
) -> Config:
    """Read the configuration stored at path, or return the parent one if missing."""
    try:
        exists = fs.file_exists(path)
    except OSError:
        exists = True
    if not exists:
        return parent_config
    try:
        content = fs.read(path)
    except OSError as err:
        raise ConfigError(f"failed to open config file at {path}: {err}") from err
    return parse_config(content, path, parent_config, is_global)


def parse_config(
    content: bytes | str, path: str, parent_config: Config, is_global: bool
) -> Config:
    """Parse a TOML configuration, inheriting settings from parent_config."""
    config = copy.deepcopy(parent_config)
    try:
        text = content.decode("utf-8") if isinstance(content, (bytes, bytearray)) else content
        data = tomllib.loads(text)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as err:
        raise _fail(str(err)) from err

    notebook_dir = _get(_table(data, "notebook", ""), "dir", str, "notebook")
    if notebook_dir:
        if not is_global:
            raise _fail("notebook.dir should not be set on local configuration")
        config.notebook.dir = notebook_dir

    _NoteSettings.parse(_table(data, "note", ""), "note").apply_to(config.note)
    config.extra.update(_string_map(data, "extra", "") or {})

    for name, group_table in _table(data, "group", "").items():
        if not isinstance(group_table, dict):
            raise _fail(f"group.{name}: expected a table")
        parent = config.groups.get(name)
        if parent is None:
            parent = config.root_group_config()
        config.groups[name] = parent._merged(group_table, name)

    _apply_markdown(config.format.markdown, data)
    _apply_tool(config.tool, _table(data, "tool", ""))
    _apply_lsp(config.lsp, _table(data, "lsp", ""))

    config.filters.update(_string_map(data, "filter", "") or {})
    config.aliases.update(_string_map(data, "alias", "") or {})
    return config


def _apply_markdown(markdown: MarkdownConfig, data: dict[str, Any]) -> None:
    where = "format.markdown"
    table = _table(_table(data, "format", ""), "markdown", "format")
    hashtags = _get(table, "hashtags", bool, where)
    colon_tags = _get(table, "colon-tags", bool, where)
    multiword_tags = _get(table, "multiword-tags", bool, where)
    link_format = _get(table, "link-format", str, where)
    link_encode_path = _get(table, "link-encode-path", bool, where)
    link_drop_extension = _get(table, "link-drop-extension", bool, where)

    if hashtags is not None:
        markdown.hashtags = hashtags
    if colon_tags is not None:
        markdown.colon_tags = colon_tags
    if multiword_tags is not None:
        markdown.multiword_tags = multiword_tags
    if link_format == "":
        link_format = "markdown"
    if link_format is not None:
        markdown.link_format = link_format
    if link_encode_path is not None:
        markdown.link_encode_path = link_encode_path
    elif link_format is not None:
        markdown.link_encode_path = link_format == "markdown"
    if link_drop_extension is not None:
        markdown.link_drop_extension = link_drop_extension


def _apply_tool(tool: ToolConfig, table: dict[str, Any]) -> None:
    # Properties that distinguish an empty string from an unset value.
    keep_empty = {"pager", "fzf-preview", "fzf-bind-new"}
    keys = {
        "editor": "editor",
        "shell": "shell",
        "pager": "pager",
        "fzf-preview": "fzf_preview",
        "fzf-line": "fzf_line",
        "fzf-options": "fzf_options",
        "fzf-bind-new": "fzf_bind_new",
    }
    for key, attribute in keys.items():
        value = _get(table, key, str, "tool")
        if value is not None:
            setattr(tool, attribute, value if key in keep_empty else value or None)


def _apply_lsp(lsp: LSPConfig, table: dict[str, Any]) -> None:
    where = "lsp.completion"
    completion = _table(table, "completion", "lsp")
    templates = lsp.completion.note
    for key, attribute in (
        ("note-label", "label"),
        ("note-filter-text", "filter_text"),
        ("note-detail", "detail"),
    ):
        value = _get(completion, key, str, where)
        if value is not None:
            setattr(templates, attribute, value or None)
    lsp.completion.use_additional_text_edits = _get(
        completion, "use-additional-text-edits", bool, where
    )

    where = "lsp.diagnostics"
    diagnostics = _table(table, "diagnostics", "lsp")
    wiki_title = _get(diagnostics, "wiki-title", str, where)
    if wiki_title is not None:
        lsp.diagnostics.wiki_title = _severity_from_string(wiki_title)
    dead_link = _get(diagnostics, "dead-link", str, where)
    if dead_link is not None:
        lsp.diagnostics.dead_link = _severity_from_string(dead_link)


@dataclass
class _NoteSettings:
    """Note settings read from a TOML table."""

    filename: str | None = None
    extension: str | None = None
    template: str | None = None
    lang: str | None = None
    default_title: str | None = None
    id_charset: str | None = None
    id_length: int | None = None
    id_case: str | None = None
    exclude: list[str] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, table: dict[str, Any], where: str) -> _NoteSettings:
        return cls(
            filename=_get(table, "filename", str, where),
            extension=_get(table, "extension", str, where),
            template=_get(table, "template", str, where),
            lang=_get(table, "language", str, where),
            default_title=_get(table, "default-title", str, where),
            id_charset=_get(table, "id-charset", str, where),
            id_length=_get(table, "id-length", int, where),
            id_case=_get(table, "id-case", str, where),
            exclude=_string_list(table, "exclude", where) or [],
            ignore=_string_list(table, "ignore", where) or [],
        )

    def apply_to(self, note: NoteConfig) -> None:
        if self.filename:
            note.filename_template = self.filename
        if self.extension:
            note.extension = self.extension
        if self.template:
            note.body_template_path = self.template
        if self.id_length:
            note.id_options.length = self.id_length
        if self.id_charset:
            note.id_options.charset = _charset_from_string(self.id_charset)
        if self.id_case:
            note.id_options.case = _case_from_string(self.id_case)
        if self.lang:
            note.lang = self.lang
        if self.default_title:
            note.default_title = self.default_title
        note.exclude = [*note.exclude, *self.exclude, *self.ignore]


def _charset_from_string(charset: str) -> str:
    return {
        "alphanum": CHARSET_ALPHANUM,
        "hex": CHARSET_HEX,
        "letters": CHARSET_LETTERS,
        "numbers": CHARSET_NUMBERS,
    }.get(charset, charset)


def _case_from_string(text: str) -> Case:
    return {"lower": Case.LOWER, "upper": Case.UPPER, "mixed": Case.MIXED}.get(
        text, Case.LOWER
    )


def _severity_from_string(text: str) -> LSPDiagnosticSeverity:
    severities = {
        "": LSPDiagnosticSeverity.NONE,
        "none": LSPDiagnosticSeverity.NONE,
        "error": LSPDiagnosticSeverity.ERROR,
        "warning": LSPDiagnosticSeverity.WARNING,
        "info": LSPDiagnosticSeverity.INFO,
        "hint": LSPDiagnosticSeverity.HINT,
    }
    try:
        return severities[text]
    except KeyError:
        raise _fail(
            f"{text}: unknown LSP diagnostic severity - may be none, hint, info, warning or error"
        ) from None


def _fail(message: str) -> ConfigError:
    return ConfigError(f"failed to read config: {message}")


_KIND_NAMES = {str: "a string", bool: "a boolean", int: "an integer", dict: "a table"}


def _key(where: str, key: str) -> str:
    return f"{where}.{key}" if where else key


def _get(table: dict[str, Any], key: str, kind: type, where: str) -> Any:
    value = table.get(key)
    if value is None:
        return None
    valid = isinstance(value, kind)
    if kind is int and isinstance(value, bool):
        valid = False
    if not valid:
        raise _fail(f"{_key(where, key)}: expected {_KIND_NAMES[kind]}")
    return value


def _table(table: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    return _get(table, key, dict, where) or {}


def _string_list(table: dict[str, Any], key: str, where: str) -> list[str] | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _fail(f"{_key(where, key)}: expected an array of strings")
    return list(value)


def _string_map(table: dict[str, Any], key: str, where: str) -> dict[str, str] | None:
    value = _get(table, key, dict, where)
    if value is None:
        return None
    if not all(isinstance(item, str) for item in value.values()):
        raise _fail(f"{_key(where, key)}: expected a table of strings")
    return dict(value)


def _glob_match(pattern: str, name: str) -> bool:
    """Shell pattern matching where wildcards never match a separator."""
    return re.fullmatch(_glob_to_regex(pattern), name, re.DOTALL) is not None


def _glob_to_regex(pattern: str) -> str:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            parts.append("[^/]*")
            i += 1
        elif char == "?":
            parts.append("[^/]")
            i += 1
        elif char == "\\":
            if i + 1 >= len(pattern):
                raise ValueError("syntax error in pattern")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        elif char == "[":
            regex, i = _glob_class(pattern, i + 1)
            parts.append(regex)
        else:
            parts.append(re.escape(char))
            i += 1
    return "".join(parts)


def _glob_class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise ValueError("syntax error in pattern")
    if pattern[i] == "\\":
        if i + 1 >= len(pattern):
            raise ValueError("syntax error in pattern")
        return pattern[i + 1], i + 2
    return pattern[i], i + 1


def _glob_class(pattern: str, i: int) -> tuple[str, int]:
    negate = i < len(pattern) and pattern[i] == "^"
    if negate:
        i += 1
    items: list[str] = []
    first = True
    while True:
        if not first and i < len(pattern) and pattern[i] == "]":
            i += 1
            break
        low, i = _glob_class_char(pattern, i)
        high = low
        if i < len(pattern) and pattern[i] == "-":
            high, i = _glob_class_char(pattern, i + 1)
        if low == high:
            items.append(re.escape(low))
        elif low < high:
            items.append(f"{re.escape(low)}-{re.escape(high)}")
        first = False
    body = "".join(items)
    if negate:
        return f"[^/{body}]", i
    return (f"(?!/)[{body}]" if body else "(?!)"), i