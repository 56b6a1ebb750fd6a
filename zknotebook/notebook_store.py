"""Locating, opening and creating notebooks."""

from __future__ import annotations

import posixpath
from collections.abc import Callable
from dataclasses import dataclass

from zknotebook.config import Config, open_config
from zknotebook.notebook import Notebook, NotebookError
from zknotebook.paths import FileStorage
from zknotebook.template import TemplateLoader

NotebookFactory = Callable[[str, Config], Notebook]

CONFIG_PATH = ".zk/config.toml"
DEFAULT_TEMPLATE_PATH = ".zk/templates/default.md"


class NotebookNotFoundError(NotebookError):
    """Raised when no notebook contains the given path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"no notebook found in {path} or a parent directory")
        self.path = path


@dataclass
class InitOpts:
    """User preferences used when creating a new notebook."""

    wiki_links: bool = True
    hashtags: bool = True
    colon_tags: bool = False
    multiword_tags: bool = False

    # Names used by the default configuration template.
    @property
    def WikiLinks(self) -> bool:  # noqa: N802
        return self.wiki_links

    @property
    def Hashtags(self) -> bool:  # noqa: N802
        return self.hashtags

    @property
    def ColonTags(self) -> bool:  # noqa: N802
        return self.colon_tags

    @property
    def MultiwordTags(self) -> bool:  # noqa: N802
        return self.multiword_tags


@dataclass
class NotebookStorePorts:
    """Services a notebook store depends on."""

    notebook_factory: NotebookFactory
    template_loader: TemplateLoader
    fs: FileStorage


class NotebookStore:
    """Retrieves existing notebooks or creates new ones, caching opened ones."""

    def __init__(self, config: Config, ports: NotebookStorePorts) -> None:
        self._config = config
        self._notebook_factory = ports.notebook_factory
        self._template_loader = ports.template_loader
        self._fs = ports.fs
        self._notebooks: dict[str, Notebook] = {}

    def open(self, path: str) -> Notebook:
        """Notebook containing the given path."""
        try:
            return self._open(path)
        except Exception as err:
            err.add_note("failed to open notebook")
            raise

    def _open(self, path: str) -> Notebook:
        path = self._fs.canonical(path)
        cached = self._cached_notebook_at(path)
        if cached is not None:
            return cached

        root = self._locate_notebook(self._fs.abs(path))
        config = open_config(
            posixpath.join(root, CONFIG_PATH), self._config, self._fs, False
        )
        notebook = self._notebook_factory(root, config)
        self._notebooks[root] = notebook
        return notebook

    def _cached_notebook_at(self, path: str) -> Notebook | None:
        try:
            path = self._fs.abs(path)
        except Exception:
            return None
        for root, notebook in self._notebooks.items():
            try:
                if self._fs.is_descendant_of(root, path):
                    return notebook
            except Exception:
                continue
        return None

    def init(self, path: str, options: InitOpts) -> Notebook:
        """Create a new notebook at the given path and open it."""
        try:
            path = self._fs.abs(path)
            try:
                existing = self._locate_notebook(path)
            except Exception:
                existing = None
            if existing is not None:
                raise NotebookError(f"a notebook already exists in {existing}")

            config = self._generate_config(options)
            self._fs.write(posixpath.join(path, CONFIG_PATH), config.encode("utf-8"))
            self._fs.write(
                posixpath.join(path, DEFAULT_TEMPLATE_PATH),
                DEFAULT_TEMPLATE.encode("utf-8"),
            )
        except Exception as err:
            err.add_note("init")
            raise
        return self.open(path)

    def _locate_notebook(self, path: str) -> str:
        """Root of the notebook containing the given absolute path."""
        if not posixpath.isabs(path):
            raise ValueError("absolute path expected")
        current = path
        while current not in ("/", "."):
            if self._fs.dir_exists(posixpath.join(current, ".zk")):
                return current
            current = posixpath.dirname(current)
        raise NotebookNotFoundError(path)

    def _generate_config(self, options: InitOpts) -> str:
        return self._template_loader.load_template(DEFAULT_CONFIG).render(options)


DEFAULT_CONFIG = r"""# Notebook configuration.
#
# Commented-out settings show their default value. Remove the leading "#"
# of a setting to change it.

[note]
# Language of the notes, used for slugs and date formats.
#language = "en"
# Title given to a new note when none is provided.
#default-title = "Untitled"
# Template of the filename of new notes, without the extension.
#filename = "\{{id}}"
# Extension of the note files.
#extension = "md"
# Template rendering the content of new notes. Relative paths are looked up
# in .zk/templates/
template = "default.md"
# Path globs skipped while indexing.
#exclude = ["drafts/*", "log.md"]

# Random IDs: the charset is one of letters, numbers, alphanum, hex or any
# custom string of characters; the case is one of lower, upper or mixed.
#id-charset = "alphanum"
#id-length = 4
#id-case = "lower"

[extra]
# Custom variables, available in templates as \{{extra.<key>}}
#key = "value"

# Groups override the [note] and [extra] settings for some directories.
# A group without `paths` applies to the directory named like the group.
#[group."<NAME>"]
#paths = ["<DIR1>", "<DIR2>"]
#[group."<NAME>".note]
#filename = "\{{format-date now}}"
#[group."<NAME>".extra]
#key = "value"

[format.markdown]
# Format of links between notes: "markdown", "wiki" or a custom template.
{{#if WikiLinks}}
link-format = "wiki"
{{else}}
#link-format = "wiki"
{{/if}}
# Percent-encode link paths. Defaults to true for "markdown" only.
#link-encode-path = true
# Remove the file extension from link paths.
#link-drop-extension = true

# Support #hashtags.
{{#if Hashtags}}
hashtags = true
{{else}}
hashtags = false
{{/if}}
# Support :colon:separated:tags:.
{{#if ColonTags}}
colon-tags = true
{{else}}
colon-tags = false
{{/if}}
# Support #multi-word tags#, which also need hashtags enabled.
{{#if MultiwordTags}}
multiword-tags = true
{{else}}
multiword-tags = false
{{/if}}

[tool]
# Editor opening the notes. Falls back on $EDITOR or $VISUAL.
#editor = "vim"
# Pager for long output. An empty string disables paging.
#pager = "less -FIRX"
# Preview command of the interactive mode. An empty string disables it.
#fzf-preview = "cat {-1}"

[lsp]

[lsp.diagnostics]
# Severity of each diagnostic: none, hint, info, warning or error.
#wiki-title = "hint"
dead-link = "error"

[lsp.completion]
# Templates of the completion items.
#note-label = "\{{title-or-path}}"
#note-filter-text = "\{{title}} \{{path}}"
#note-detail = "\{{filename-stem}}"

[filter]
# Named sets of filtering options, for example:
#recents = "--sort created- --created-after 'last two weeks'"

[alias]
# Custom commands run with `$SHELL -c`; $@ expands to the given arguments.
#ls = "zk list $@"
#editlast = "zk edit --limit 1 --sort modified- $@"
#lucky = "zk list --quiet --format full --sort random --limit 1"
"""

DEFAULT_TEMPLATE = "# {{title}}\n\n{{content}}\n"