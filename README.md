# zknotebook

The core model of a plain-text Zettelkasten notebook, as a Python library.
It has no runtime dependencies and needs Python 3.11 or later.

## What it contains

- `zknotebook.config`: the `.zk/config.toml` settings. `parse_config`
  reads TOML on top of a parent `Config`, `open_config` reads it from a
  `FileStorage` (returning the parent config when the file is missing), and
  `new_default_config` gives the defaults. `Config.group_name_for_path`,
  `Config.group_config_for_path` and `Config.group_config_named` resolve
  per-directory groups; `GroupConfig.exclude_globs` and `GroupConfig.clone`
  work on a group. Errors are raised as `ConfigError`.
- `zknotebook.link`: `Link`, `ResolvedLink`, and link formatters.
  `new_link_formatter` picks the Markdown (`[title](path)`), wiki
  (`[[path]]`) or custom-template formatter from a `MarkdownConfig`.
- `zknotebook.note_find`: `NoteFindOpts`, sort terms
  (`note_sorter_from_string`, `note_sorters_from_strings`) and match
  strategies (`match_strategy_from_string`). Unknown terms raise `ValueError`.
- `zknotebook.collection`: collections such as tags, their sort terms
  (`collection_sorter_from_string`, `collection_sorters_from_strings`) and
  `new_collection_formatter`.
- `zknotebook.note`, `zknotebook.note_format`: `Note`, `MinimalNote`,
  `ContextualNote` and `new_note_formatter`, which highlights
  `<zk:match>…</zk:match>` terms in snippets with the template's styler.
- `zknotebook.notebook`: `Notebook`, which creates notes from filename and
  body templates (`new_note`, trying up to 50 generated IDs for a free
  filename before raising `NoteExistsError`), parses note files
  (`parse_note_at`, `parse_note_with_content`), resolves directories
  (`dir_at`, `require_dir_at`, `rel_path`) and forwards queries to the index.
- `zknotebook.notebook_store`: `NotebookStore`, which finds the notebook
  containing a path by looking for a `.zk` directory (`open`, raising
  `NotebookNotFoundError`) and creates new ones (`init`) from `InitOpts`.
- `zknotebook.style`, `zknotebook.template`, `zknotebook.paths`: the
  `Styler`, `Template`, `TemplateLoader` and `FileStorage` interfaces, with
  `NullStyler`, `TagStyler`, `NullTemplate`, `NullTemplateLoader` and
  `NotebookPath`.

## Examples

Parsing a configuration:

```python
from zknotebook.config import new_default_config, parse_config

config = parse_config(
    b'''
    [note]
    language = "fr"
    default-title = "Sans titre"

    [group.journal.note]
    filename = "{{format-date now}}"

    [format.markdown]
    link-format = "wiki"
    ''',
    ".zk/config.toml",
    new_default_config(),
    False,
)

config.note.lang                                  # "fr"
config.group_name_for_path("journal/today.md")    # "journal"
config.format.markdown.link_encode_path           # False for wiki links
```

Reading sort terms:

```python
from zknotebook.note_find import note_sorters_from_strings

note_sorters_from_strings(["created+", "title"])
# Terms are read right to left, so a later `--sort` overrides an alias.
```

Formatting a link:

```python
from zknotebook.config import MarkdownConfig
from zknotebook.link import LinkFormatterContext, new_link_formatter
from zknotebook.template import NullTemplateLoader

formatter = new_link_formatter(
    MarkdownConfig(link_format="markdown", link_encode_path=True, link_drop_extension=True),
    NullTemplateLoader(),
)
formatter(LinkFormatterContext(rel_path="path/to note.md", title="An interesting subject"))
# "[An interesting subject](path/to%20note)"
```

## Ports

A `Notebook` is built from a path, a `Config` and a `NotebookPorts` holding
the services it uses: a `NoteIndex`, a `NoteContentParser`, a template
loader factory (taking a language), an ID generator factory (taking
`IDOptions`), a `FileStorage`, a logger and a function returning the
environment. `NotebookStore` takes a `NotebookStorePorts` with a notebook
factory, a `TemplateLoader` and a `FileStorage`.

When a parsed note's path exists on disk, its modification and creation
dates are read with `os.stat`; a frontmatter `date` value takes precedence
for the creation date.

## What it does not do

The library only defines the interfaces above; it ships no implementation of
them beyond the null ones. In particular it has:

- no command-line interface;
- no template engine: rendering `{{…}}` templates, including the default
  configuration written by `NotebookStore.init`, is up to the given
  `TemplateLoader`;
- no Markdown parser for note content, no random ID generator and no
  file-system `FileStorage`;
- no note index or database, and no indexing of a notebook's files:
  `zknotebook.note_index` defines only the `NoteIndex` interface,
  `NoteIndexOpts` and `NoteIndexingStats`.

## Running the tests

```
pip install -e ".[test]"
pytest
```