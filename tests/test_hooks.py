"""Test host loader hooks."""

import pytest

import modload
import loadtest


def test_register_order_and_dedupe():
    """Test hooks keep registration order and re-registering moves to the end."""
    chain = modload.LoaderChain()

    def first(specifier):
        return None

    def second(specifier):
        return None

    assert chain.register(first, second) == [first, second]
    assert chain.register(first) == [second, first]
    assert len(chain) == 2
    assert first in chain
    assert chain.unregister(first)
    assert not chain.unregister(first)
    assert chain.hooks() == [second]


def test_register_rejects_non_hooks():
    """Test objects without load or normalize functions are refused."""
    chain = modload.LoaderChain()
    with pytest.raises(TypeError):
        chain.register(object())
    assert len(chain) == 0


def test_loader_threading():
    """Test each loader sees the value left by the previous one."""
    chain = modload.LoaderChain()
    chain.register(
        lambda spec: "./a" if spec == "start" else None,
        lambda spec: spec + "b" if spec == "./a" else None,
    )
    assert chain.run_loaders("start") == "./ab"
    assert chain.run_loaders("other") is None


def test_loader_rewrite(project, loader):
    """Test a loader hook redirects a specifier."""
    loadtest.write(project, {"lib/a.js": "export default 3;"})
    loader.add_hook(lambda spec: "./lib/a" if spec == "virtual" else None)
    record = loader.import_module("virtual")
    assert record.path == loadtest.path(project, "lib/a.js")
    assert record.specifier == "virtual"
    assert loader.import_module("./lib/a") is record


def test_loader_returns_module(loader):
    """Test a loader hook can supply a finished module."""
    supplied = modload.ModuleRecord("host:thing", modload.NativeSource(lambda exports, require: None))
    supplied.exports["value"] = 9

    def hook(spec):
        if spec == "thing":
            return supplied
        return None

    loader.add_hook(hook)
    assert loader.load("thing") is supplied
    assert loader.require("thing").value == 9
    assert "host:thing" not in loader.modules


def test_hook_object(project, loader):
    """Test objects providing both functions act as both kinds of hook."""
    loadtest.write(project, {"real.js": "export default 1;"})

    class Both:
        def load(self, specifier):
            return "./real" if specifier == "fake" else None

        def normalize(self, referrer, specifier):
            return None

    hooks = loader.add_hook(Both())
    assert len(hooks) == 1
    assert loader.require("fake")["default"] == 1


def test_hook_error_propagates(loader):
    """Test an exception in a hook aborts the load as a HookError."""
    def hook(spec):
        raise KeyError(spec)

    loader.add_hook(hook)
    with pytest.raises(modload.HookError) as info:
        loader.load("util")
    assert isinstance(info.value.__cause__, KeyError)
    assert info.value.hook is hook
    assert info.value.specifier == "util"
    assert len(loader.modules) == 0


def test_hook_error_in_nested_import(project, loader):
    """Test a hook failure unwinds every in-flight load."""
    loadtest.write(project, {
        "main.js": 'import "./mid";\nexport default 1;',
        "mid.js": 'import "./dep";\nexport default 2;',
        "dep.js": "export default 3;",
    })

    def hook(spec):
        if spec == "./dep":
            raise RuntimeError("host failure")
        return None

    loader.add_hook(hook)
    with pytest.raises(modload.HookError):
        loader.load("./main")
    assert len(loader.stack) == 0

    main = loader.modules[loadtest.path(project, "main.js")]
    mid = loader.modules[loadtest.path(project, "mid.js")]
    assert main.state is modload.ModuleState.EVALUATING
    assert mid.state is modload.ModuleState.EVALUATING
    assert main.exception is None
    assert loadtest.path(project, "dep.js") not in loader.modules


def test_hook_bad_return(loader):
    """Test a loader hook returning something unusable."""
    loader.add_hook(lambda spec: 42)
    with pytest.raises(modload.HookError):
        loader.load("util")


def test_normalizer_error(loader):
    """Test a normalizer hook failure is a HookError too."""
    class Broken:
        def normalize(self, referrer, specifier):
            raise ValueError("nope")

    loader.add_hook(Broken())
    with pytest.raises(modload.HookError):
        loader.normalize("util")
