"""Test built-in modules and their per-loader instantiation."""

import pytest

import modload
import loadtest


def test_stdlib_modules(loader):
    """Test the standard built-ins load and export their functions."""
    util = loader.require("util")
    assert util.atob("aGk=") == "hi"
    assert util.btoa("hi") == "aGk="
    assert util.escape("a b/c") == "a%20b%2Fc"
    assert util.unescape("a%20b") == "a b"

    path = loader.require("builtin:path")
    assert path.join("a", "b") == "a/b"
    assert path.extname("x/y.js") == ".js"
    assert path.relative("/a/b", "/a/c/d") == "../c/d"

    assert sorted(modload.stdlib.list_stdlib_modules()) == ["encoding", "path", "util"]


def test_bytecode_module(loader):
    """Test the frozen encoding module and its import of util."""
    record = loader.import_module("encoding")
    assert record.kind == "bytecode"
    assert record.name == "builtin:encoding"
    assert record.namespace["default"] == "base64"
    assert record.namespace.decode("aGk=") == "hi"
    assert "builtin:util" in loader.modules


def test_default_table_shared():
    """Test one static table is shared by every loader."""
    table = modload.default_table()
    assert modload.default_table() is table
    assert {"util", "path", "encoding"} <= set(table.names())


def test_initializer_once_per_loader(project):
    """Test each loader runs a native initializer once with its own exports."""
    calls = []

    def init(exports, require):
        calls.append(1)
        exports["n"] = len(calls)

    table = modload.BuiltinTable()
    table.register("counter", init)

    first = loadtest.make_loader(project, builtins=table)
    record = first.import_module("counter")
    assert first.import_module("counter") is record
    assert first.import_module("builtin:counter") is record
    assert calls == [1]
    assert first.builtins.find("counter").initialized

    second = loadtest.make_loader(project, builtins=table)
    other = second.import_module("counter")
    assert other is not record
    assert calls == [1, 1]
    assert record.namespace.n == 1
    assert other.namespace.n == 2


def test_failed_initializer_cached(project):
    """Test a raising initializer fails once and stays failed."""
    calls = []

    def init(exports, require):
        calls.append(1)
        raise OSError("no device")

    table = modload.BuiltinTable()
    table.register("dev", init)
    loader = loadtest.make_loader(project, builtins=table)

    with pytest.raises(modload.EvaluationError) as info:
        loader.import_module("dev")
    assert "OSError: no device" in info.value.message
    assert isinstance(info.value.__cause__, OSError)
    with pytest.raises(modload.EvaluationError):
        loader.import_module("dev")
    assert calls == [1]
    assert not loader.builtins.find("dev").initialized


def test_register_local_source(loader):
    """Test built-ins registered on one loader from text or bytecode."""
    loader.builtins.register("greet", 'export default "hi";')
    blob = modload.freeze(modload.compile_source("export const x = 1;", "builtin:x"))
    loader.builtins.register("x", blob)

    greet = loader.import_module("greet")
    assert greet.kind == "bytecode"
    assert greet.namespace["default"] == "hi"
    assert loader.require("x").x == 1
    assert "greet" in loader.builtins
    assert "greet" not in modload.default_table()


def test_register_after_load(loader):
    """Test a loaded built-in cannot be replaced."""
    loader.require("util")
    with pytest.raises(ValueError):
        loader.builtins.register("util", lambda exports, require: None)


def test_register_bad_source():
    """Test registration values must be usable as a module."""
    table = modload.BuiltinTable()
    with pytest.raises(TypeError):
        table.register("bad", 12)


def test_bad_bytecode(loader):
    """Test a corrupt bytecode blob fails to compile."""
    loader.builtins.register("junk", b"not bytecode")
    with pytest.raises(modload.CompileError):
        loader.import_module("junk")
