"""Test the command line interface."""

import modload
from modload import cli

import loadtest


def test_locate(project, capsys):
    """Test locating without loading."""
    assert cli.main(["--locate", "util"]) == 0
    assert capsys.readouterr().out == "builtin:util\tnative\n"

    loadtest.write(project, {"lib/a.js": ""})
    assert cli.main(["--locate", "./lib/a"]) == 0
    assert capsys.readouterr().out == f"{loadtest.path(project, 'lib/a.js')}\tsource\n"


def test_locate_missing(project, capsys):
    """Test locating an unknown module."""
    assert cli.main(["--locate", "./missing"]) == 1
    assert "NotFound: './missing': module not found" in capsys.readouterr().err


def test_run_file(project, capsys):
    """Test loading a main file and listing the records."""
    loadtest.write(project, {
        "main.js": 'import { x } from "./lib";\nimport "util";\nexport default x;',
        "lib.js": "export const x = 1;",
    })
    assert cli.main(["--list", "main.js"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        f"{loadtest.path(project, 'main.js')}\tsource\tevaluated",
        f"{loadtest.path(project, 'lib.js')}\tsource\tevaluated",
        "builtin:util\tnative\tevaluated",
    ]


def test_preload_modules(project, capsys):
    """Test -m accepts comma separated specifiers."""
    assert cli.main(["-m", "util,path", "-m", "encoding", "--list"]) == 0
    out = capsys.readouterr().out
    assert "builtin:util\tnative\tevaluated" in out
    assert "builtin:path\tnative\tevaluated" in out
    assert "builtin:encoding\tbytecode\tevaluated" in out


def test_include_and_search_path(project, capsys):
    """Test -I files and -p directories."""
    loadtest.write(project, {
        "first.js": "export default 1;",
        "vendor/dep.js": "export default 2;",
    })
    assert cli.main(["-I", "first.js", "-p", "vendor", "-m", "dep", "--list"]) == 0
    out = capsys.readouterr().out
    assert f"{loadtest.path(project, 'first.js')}\tsource\tevaluated" in out
    assert f"{loadtest.path(project, 'vendor/dep.js')}\tsource\tevaluated" in out


def test_eval_source(project, capsys):
    """Test -e runs source text as a data URI module."""
    assert cli.main(["-e", 'import { btoa } from "util";\nexport default btoa("hi");', "--list"]) == 0
    out = capsys.readouterr().out
    assert f"{modload.SENTINEL}\tdata\tevaluated" in out


def test_eval_failure(project, capsys):
    """Test failures print one line and exit with an error."""
    assert cli.main(["-e", 'throw "boom";']) == 1
    assert "EvaluationError: '<data-url>': ScriptError: boom" in capsys.readouterr().err


def test_missing_module(project, capsys):
    """Test a missing module logs a warning and fails."""
    assert cli.main(["-m", "nothere"]) == 1
    err = capsys.readouterr().err
    assert "warning: [module:load] nothere not found (from <top>)" in err
    assert "NotFound: 'nothere': module not found" in err


def test_process_module(project, capsys):
    """Test script arguments reach modules through the process built-in."""
    loadtest.write(project, {
        "main.js": 'import { argv } from "process";\nexport default argv;',
    })
    assert cli.main(["main.js", "one", "two"]) == 0
    assert capsys.readouterr().err == ""

    exports = {}
    cli.process_module(["main.js", "one"])(exports, None)
    assert exports["argv"] == ["main.js", "one"]
    assert exports["cwd"] == str(project)


def test_bad_environment(project, monkeypatch, capsys):
    """Test invalid settings in the environment."""
    monkeypatch.setenv("MODLOAD_DEBUG", "loud")
    assert cli.main(["-m", "util"]) == 2
    assert "MODLOAD_DEBUG" in capsys.readouterr().err
