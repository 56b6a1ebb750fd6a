import posixpath

import pytest

from zknotebook.config import ConfigError, new_default_config
from zknotebook.notebook import Notebook, NotebookError, NotebookPorts
from zknotebook.notebook_store import (
    DEFAULT_CONFIG,
    DEFAULT_TEMPLATE,
    InitOpts,
    NotebookNotFoundError,
    NotebookStore,
    NotebookStorePorts,
)


class MemoryFS:
    def __init__(self, working_dir="/", dirs=(), files=None):
        self.working_dir = working_dir
        self.dirs = set(dirs)
        self.files = dict(files or {})

    def abs(self, path):
        if not path.startswith("/"):
            path = posixpath.join(self.working_dir, path)
        return posixpath.normpath(path)

    def canonical(self, path):
        return path

    def file_exists(self, path):
        return path in self.files

    def dir_exists(self, path):
        return path in self.dirs

    def is_descendant_of(self, dir, path):
        return path == dir or path.startswith(dir.rstrip("/") + "/")

    def read(self, path):
        return self.files[path]

    def write(self, path, content):
        self.files[path] = content
        parent = posixpath.dirname(path)
        while parent not in ("/", ""):
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)


class RecordingTemplate:
    def __init__(self, result):
        self.result = result
        self.contexts = []

    def styler(self):
        return None

    def render(self, context):
        self.contexts.append(context)
        return self.result


class RecordingLoader:
    def __init__(self, result=""):
        self.template = RecordingTemplate(result)
        self.loaded = []

    def load_template(self, template):
        self.loaded.append(template)
        return self.template

    def load_template_at(self, path):
        raise AssertionError("unexpected template file")


def make_store(fs, loader=None):
    created = []

    def factory(path, config):
        notebook = Notebook(path, config, NotebookPorts(fs=fs))
        created.append(notebook)
        return notebook

    store = NotebookStore(
        new_default_config(),
        NotebookStorePorts(
            notebook_factory=factory,
            template_loader=loader or RecordingLoader(),
            fs=fs,
        ),
    )
    return store, created


def test_open_finds_notebook_in_parent_directory():
    fs = MemoryFS(dirs={"/nb/.zk"})
    store, _ = make_store(fs)
    notebook = store.open("/nb/sub/dir")
    assert notebook.path == "/nb"


def test_open_resolves_relative_path_from_working_dir():
    fs = MemoryFS(working_dir="/nb", dirs={"/nb/.zk"})
    store, _ = make_store(fs)
    assert store.open("sub").path == "/nb"


def test_open_reads_local_config():
    fs = MemoryFS(
        dirs={"/nb/.zk"},
        files={"/nb/.zk/config.toml": b'[note]\nextension = "txt"\n'},
    )
    store, _ = make_store(fs)
    assert store.open("/nb").config.note.extension == "txt"


def test_open_without_local_config_uses_parent_config():
    fs = MemoryFS(dirs={"/nb/.zk"})
    store, _ = make_store(fs)
    notebook = store.open("/nb")
    assert notebook.config == new_default_config()


def test_open_caches_notebooks():
    fs = MemoryFS(dirs={"/nb/.zk"})
    store, created = make_store(fs)
    first = store.open("/nb")
    second = store.open("/nb/sub/note.md")
    assert second is first
    assert len(created) == 1


def test_open_raises_when_no_notebook_found():
    fs = MemoryFS()
    store, _ = make_store(fs)
    with pytest.raises(NotebookNotFoundError) as info:
        store.open("/x/y")
    assert str(info.value) == "no notebook found in /x/y or a parent directory"
    assert info.value.path == "/x/y"


def test_open_rejects_notebook_dir_in_local_config():
    fs = MemoryFS(
        dirs={"/nb/.zk"},
        files={"/nb/.zk/config.toml": b'[notebook]\ndir = "/elsewhere"\n'},
    )
    store, _ = make_store(fs)
    with pytest.raises(ConfigError, match="notebook.dir should not be set on local configuration"):
        store.open("/nb")


def test_init_writes_config_and_default_template():
    loader = RecordingLoader('[note]\nlanguage = "fr"\n')
    fs = MemoryFS()
    store, _ = make_store(fs, loader)

    notebook = store.init("/new", InitOpts())

    assert notebook.path == "/new"
    assert notebook.config.note.lang == "fr"
    assert fs.files["/new/.zk/config.toml"] == b'[note]\nlanguage = "fr"\n'
    assert fs.files["/new/.zk/templates/default.md"] == b"# {{title}}\n\n{{content}}\n"
    assert DEFAULT_TEMPLATE == "# {{title}}\n\n{{content}}\n"
    assert loader.loaded == [DEFAULT_CONFIG]


def test_init_renders_config_with_options():
    loader = RecordingLoader("")
    fs = MemoryFS()
    store, _ = make_store(fs, loader)
    options = InitOpts(wiki_links=False, hashtags=False, colon_tags=True, multiword_tags=True)

    store.init("/new", options)

    assert loader.template.contexts == [options]
    context = loader.template.contexts[0]
    assert (context.WikiLinks, context.Hashtags, context.ColonTags, context.MultiwordTags) == (
        False,
        False,
        True,
        True,
    )


def test_default_init_opts():
    options = InitOpts()
    assert (options.wiki_links, options.hashtags, options.colon_tags, options.multiword_tags) == (
        True,
        True,
        False,
        False,
    )


def test_init_fails_inside_existing_notebook():
    fs = MemoryFS(dirs={"/nb/.zk"})
    store, created = make_store(fs)
    with pytest.raises(NotebookError, match="a notebook already exists in /nb"):
        store.init("/nb/sub", InitOpts())
    assert created == []
    assert fs.files == {}


def test_missing_notebook_is_reported_as_notebook_error():
    fs = MemoryFS()
    store, _ = make_store(fs)
    with pytest.raises(NotebookError) as info:
        store.open("/a")
    assert str(info.value) == "no notebook found in /a or a parent directory"