"""Test specifier normalization strategies and their order."""

import modload
import loadtest


def test_builtin_names(loader):
    """Test bare names of built-in modules get builtin paths."""
    assert loader.normalize("util") == "builtin:util"
    assert loader.normalize("builtin:path") == "builtin:path"
    assert loader.normalize("builtin:nothing") is None
    assert loader.locate("encoding").kind == "bytecode"


def test_builtin_shadows_search_path(project):
    """Test built-ins are found before files of the same name."""
    loadtest.write(project, {"util.js": "export default 1;"})
    loader = loadtest.make_loader(project, search_path=["."])
    assert loader.normalize("util") == "builtin:util"
    assert loader.normalize("./util") == loadtest.path(project, "util.js")


def test_relative_to_working_dir(project, loader):
    """Test top level relative specifiers use the working directory."""
    loadtest.write(project, {"lib/a.js": ""})
    assert loader.normalize("./lib/a") == loadtest.path(project, "lib/a.js")
    assert loader.normalize("./lib/a.js") == loadtest.path(project, "lib/a.js")
    assert loader.normalize("./lib/missing") is None


def test_relative_to_referrer(project, loader):
    """Test relative specifiers resolve against the importing file."""
    loadtest.write(project, {"lib/a.js": "", "lib/b.js": "", "c.js": ""})
    referrer = loadtest.path(project, "lib/a.js")
    assert loader.normalize("./b", referrer) == loadtest.path(project, "lib/b.js")
    assert loader.normalize("../c", referrer) == loadtest.path(project, "c.js")
    assert loader.normalize("./c", referrer) is None


def test_non_file_referrer(project, loader):
    """Test referrers without a directory fall back to the working directory."""
    loadtest.write(project, {"c.js": ""})
    assert loader.normalize("./c", "builtin:util") == loadtest.path(project, "c.js")
    assert loader.normalize("./c", "<data-url:0123>") == loadtest.path(project, "c.js")


def test_absolute_and_file_scheme(project, loader):
    """Test absolute paths and file:// URLs."""
    loadtest.write(project, {"lib/a.js": ""})
    target = loadtest.path(project, "lib/a.js")
    assert loader.normalize(loadtest.path(project, "lib/a")) == target
    assert loader.normalize("file://" + target) == target


def test_search_path(project):
    """Test bare names resolve through the search path to absolute paths."""
    loadtest.write(project, {"mods/x.js": "", "lib/util.js": "", "lib/deep/index.js": ""})
    loader = loadtest.make_loader(project, search_path=["mods", "."])
    assert loader.normalize("x") == loadtest.path(project, "mods/x.js")
    assert loader.normalize("lib/util") == loadtest.path(project, "lib/util.js")
    assert loader.normalize("lib/deep") == loadtest.path(project, "lib/deep/index.js")
    assert loader.normalize("y") is None


def test_native_file(project, loader):
    """Test python files are located as native modules."""
    loadtest.write(project, {"nat.py": "def init(exports, require):\n    pass\n"})
    location = loader.locate("./nat")
    assert location.kind == "native"
    assert location.path == loadtest.path(project, "nat.py")


def test_data_uri_paths(loader):
    """Test data URIs get stable, distinct synthetic paths."""
    first = loader.normalize("data:text/javascript,export default 1")
    assert first.startswith("<data-url:")
    assert first == loader.normalize("data:text/javascript,export default 1")
    assert first != loader.normalize("data:text/javascript,export default 2")
    assert loader.locate("DATA:application/json,{}").kind == "data"


def test_normalize_hook_rewrites(project, loader):
    """Test normalizer hooks rewrite the specifier before the strategies."""
    loadtest.write(project, {"lib/a.js": ""})
    seen = []

    class Rewrite:
        def normalize(self, referrer, specifier):
            seen.append((referrer, specifier))
            if specifier == "virtual":
                return "./lib/a"
            return None

    loader.add_hook(Rewrite())
    assert loader.normalize("virtual") == loadtest.path(project, "lib/a.js")
    assert loader.normalize("util", "/p/x.js") == "builtin:util"
    assert seen == [(None, "virtual"), ("/p/x.js", "util")]


def test_explicit_detection():
    """Test which specifiers count as explicit paths."""
    assert modload.is_explicit("./a")
    assert modload.is_explicit("../a")
    assert modload.is_explicit("/a")
    assert not modload.is_explicit("a/b")
    assert not modload.is_explicit("a")
