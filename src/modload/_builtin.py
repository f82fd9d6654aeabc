"""Built-in modules compiled into the host program.

A built-in is either native (a Python initializer) or bytecode (a frozen
compiled module). The static name -> source table is shared by every
loader in the process. Each loader keeps its own entries on top of it, so
export tables and initialized flags are never shared between loaders.
"""

__all__ = [
    "BUILTIN_PREFIX",
    "BuiltinModuleEntry",
    "BuiltinTable",
    "BuiltinModuleRegistry",
    "default_table",
]

import threading

import modload

BUILTIN_PREFIX = "builtin:"

_default_table = None
_default_lock = threading.Lock()


def _as_source(source, name, compiler=None):
    """Wrap a registration value in its source variant."""
    if isinstance(source, (modload.NativeSource, modload.BytecodeSource)):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return modload.BytecodeSource(bytes(source))
    if isinstance(source, str):
        compiler = compiler or modload.Compiler()
        compiled = compiler.compile(source, BUILTIN_PREFIX + name, True)
        return modload.BytecodeSource(compiler.freeze(compiled))
    if callable(source):
        return modload.NativeSource(source)
    raise TypeError(f"Built-in module '{name}' needs an initializer, bytecode or source text")


class BuiltinTable:
    """Process wide table of built-in module sources.

    Registration is guarded by a lock. Lookups are plain dict reads and
    safe from any thread once the table is populated.
    """

    def __init__(self):
        self._sources = {}
        self._lock = threading.Lock()

    def __repr__(self):
        return f"BuiltinTable<{len(self._sources)}>"

    def __contains__(self, name):
        return name in self._sources

    def __len__(self):
        return len(self._sources)

    def register(self, name, source, compiler=None):
        """Add or replace a built-in module source.

        Args:
            name: (str) Bare module name
            source: Initializer callable, bytecode blob, source text or source variant
            compiler: Compile service used for source text

        Returns:
            (NativeSource | BytecodeSource) Stored source
        """
        source = _as_source(source, name, compiler)
        with self._lock:
            self._sources[name] = source
        return source

    def get(self, name):
        return self._sources.get(name)

    def names(self):
        """(list[str]) Registered names, sorted."""
        return sorted(self._sources)


def default_table():
    """Shared table seeded with the standard library modules.

    Built on first use. Bytecode modules are frozen at that point.
    """
    global _default_table
    with _default_lock:
        if _default_table is None:
            table = BuiltinTable()
            modload.stdlib.register_stdlib(table)
            _default_table = table
    return _default_table


class BuiltinModuleEntry:
    """One loader's view of a built-in module.

    Args:
        name: (str) Bare module name
        source: (NativeSource | BytecodeSource) Static definition

    Attributes:
        name: (str) Bare module name
        source: Static definition, shared with other loaders
        record: (ModuleRecord | None) Record, created on first instantiate
        initialized: (bool) Initializer or bytecode has run to completion
    """

    __slots__ = ("name", "source", "record", "initialized")

    def __init__(self, name, source):
        self.name = name
        self.source = source
        self.record = None
        self.initialized = False

    def __repr__(self):
        return f"BuiltinModuleEntry<{self.name}:{self.source.kind}>"

    @property
    def path(self):
        """(str) Canonical path, ``builtin:<name>``."""
        return BUILTIN_PREFIX + self.name


class BuiltinModuleRegistry:
    """Built-in modules visible to one loader.

    Args:
        table: (BuiltinTable | None) Shared static table, default_table() if None
    """

    def __init__(self, table=None):
        self.table = table if table is not None else default_table()
        self._entries = {}
        self._local = BuiltinTable()

    def __repr__(self):
        return f"BuiltinModuleRegistry<{', '.join(self.names())}>"

    def __contains__(self, name):
        return name in self._local or name in self.table

    def names(self):
        """(list[str]) Every built-in name visible to this loader."""
        return sorted(set(self.table.names()) | set(self._local.names()))

    def register(self, name, source, compiler=None):
        """Register a built-in for this loader only.

        Replaces any entry of the same name that has not been instantiated.

        Raises:
            ValueError: The module was already instantiated
        """
        entry = self._entries.get(name)
        if entry is not None and entry.record is not None:
            raise ValueError(f"Built-in module '{name}' is already loaded")
        stored = self._local.register(name, source, compiler)
        self._entries[name] = BuiltinModuleEntry(name, stored)
        return self._entries[name]

    def find(self, name):
        """Look up a built-in by bare name.

        Args:
            name: (str) Bare name, a ``builtin:`` prefix is accepted

        Returns:
            (BuiltinModuleEntry | None) Entry for the module
        """
        if name.startswith(BUILTIN_PREFIX):
            name = name[len(BUILTIN_PREFIX):]
        entry = self._entries.get(name)
        if entry is not None:
            return entry

        source = self._local.get(name)
        if source is None:
            source = self.table.get(name)
        if source is None:
            return None
        entry = BuiltinModuleEntry(name, source)
        self._entries[name] = entry
        return entry

    def instantiate(self, entry, loader, specifier=None):
        """Create and initialize the module for an entry, once.

        A second call returns the same record without running the
        initializer or the bytecode again.

        Args:
            entry: (BuiltinModuleEntry) Entry from find()
            loader: (Loader) Loader owning the module registry and load stack
            specifier: (str | None) Specifier that requested the module

        Returns:
            (ModuleRecord) Record for the module
        """
        if entry.record is not None:
            return entry.record

        record = modload.ModuleRecord(entry.path, entry.source, specifier)
        entry.record = record
        loader.modules.add(record)
        with loader.stack.entered(record.path):
            loader.initialize(record)
        entry.initialized = record.evaluated
        return record
