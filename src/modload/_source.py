"""Where a module's definition comes from.

Each located module carries exactly one of these source variants. The
loader dispatches on the variant in a single place to decide how the
module is compiled and evaluated.
"""

__all__ = [
    "NativeSource",
    "BytecodeSource",
    "FileSource",
    "DataSource",
    "NativeFile",
    "source_for_file",
]

import importlib.util
import os
from dataclasses import dataclass
from typing import Callable

import modload


@dataclass(frozen=True)
class NativeSource:
    """Module implemented in Python.

    The initializer is called as ``initializer(exports, require)`` and fills
    the export table directly.
    """

    initializer: Callable
    kind = "native"


@dataclass(frozen=True)
class BytecodeSource:
    """Module precompiled to a serialized blob."""

    blob: bytes
    kind = "bytecode"


@dataclass(frozen=True)
class FileSource:
    """Module source text in a file on disk."""

    path: str
    kind = "source"


@dataclass(frozen=True)
class DataSource:
    """Module embedded in a ``data:`` specifier."""

    uri: str
    kind = "data"


class NativeFile:
    """Initializer for a native module stored as a ``.py`` file.

    The file is not imported until the module is initialized. It must
    define ``init(exports, require)``.

    Args:
        path: (str) Absolute path of the Python file
    """

    __slots__ = ("path",)

    def __init__(self, path):
        self.path = path

    def __repr__(self):
        return f"NativeFile<{self.path}>"

    def __eq__(self, other):
        return isinstance(other, NativeFile) and other.path == self.path

    def __hash__(self):
        return hash(self.path)

    def __call__(self, exports, require):
        name = "_modload_native_" + os.path.splitext(os.path.basename(self.path))[0]
        spec = importlib.util.spec_from_file_location(name, self.path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import native module file {self.path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        init = getattr(module, "init", None)
        if not callable(init):
            raise ImportError(f"Native module {self.path} does not define init(exports, require)")
        init(exports, require)


def source_for_file(path):
    """Pick the source variant for a located file.

    Args:
        path: (str) Absolute path of an existing file

    Returns:
        (NativeSource | FileSource) Variant matching the file suffix
    """
    if path.endswith(modload.NATIVE_SUFFIX):
        return NativeSource(NativeFile(path))
    return FileSource(path)
