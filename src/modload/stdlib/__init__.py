"""Standard library built-in modules.

Python-implemented (native) modules and precompiled (bytecode) modules
registered in the shared built-in table.

Available modules:
- util: base64 and percent encoding helpers
- path: path string manipulation
- encoding: base64 codec names, compiled from encoding.js
"""

__all__ = ["register_stdlib", "list_stdlib_modules"]

import pathlib

from . import path, util


# Native modules, name -> initializer
_NATIVE_MODULES = {
    "util": util.init,
    "path": path.init,
}

# Bytecode modules, name -> source file frozen when the table is built
_COMPILED_MODULES = {
    "encoding": "encoding.js",
}


def register_stdlib(table, compiler=None):
    """Register every standard library module in a built-in table.

    Args:
        table: (BuiltinTable) Table to populate
        compiler: Compile service used to freeze bytecode modules
    """
    for name, init in _NATIVE_MODULES.items():
        table.register(name, init)

    folder = pathlib.Path(__file__).parent
    for name, filename in _COMPILED_MODULES.items():
        text = (folder / filename).read_text(encoding="utf-8")
        table.register(name, text, compiler)


def list_stdlib_modules() -> list[str]:
    """Get list of available stdlib module names.

    Returns:
        List of module names
    """
    return sorted([*_NATIVE_MODULES, *_COMPILED_MODULES])
