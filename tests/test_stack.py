"""Test the stack of in-flight module loads."""

import pytest

import modload


def test_push_pop():
    """Test paths are tracked innermost last."""
    stack = modload.LoadStack()
    assert stack.top is None
    stack.push("/p/a.js")
    stack.push("/p/lib/b.js")
    assert list(stack) == ["/p/a.js", "/p/lib/b.js"]
    assert stack.top == "/p/lib/b.js"
    assert stack.directory == "/p/lib"
    assert "/p/a.js" in stack
    assert stack.pop() == "/p/lib/b.js"
    assert len(stack) == 1


def test_entered_pops_on_error():
    """Test the path leaves the stack when the block raises."""
    stack = modload.LoadStack()
    with pytest.raises(RuntimeError):
        with stack.entered("/p/a.js"):
            assert stack.top == "/p/a.js"
            raise RuntimeError("boom")
    assert len(stack) == 0


def test_format_innermost_first():
    """Test the report lists the innermost load first."""
    stack = modload.LoadStack()
    stack.push("/p/a.js")
    stack.push("/p/b.js")
    stack.push("builtin:util")
    assert stack.format() == "2: builtin:util\n1: /p/b.js\n0: /p/a.js"
    assert stack.directory is None
