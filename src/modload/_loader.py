"""Module loader: resolution, caching and at-most-once initialization.

One Loader is the resolver context of one runtime instance. It owns the
module registry, load stack, hook chain, manifest cache and built-in
entries; nothing is kept in process-wide state besides the read-only
built-in table.

Loading a specifier:

1. loader hooks may rewrite it or hand back a finished module
2. the normalizer turns it into a canonical path (or NotFound)
3. a module already in the registry is returned as is, whatever its state
4. otherwise a record is registered, compiled and evaluated exactly once

Compile and evaluation failures are stored on the record and raised again
for every later importer. Hook failures are never stored; they unwind the
whole in-flight load.
"""

__all__ = ["Loader", "ModuleRegistry"]

import functools
import logging
import os

import modload


logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Canonical path -> ModuleRecord, at most one record per path."""

    def __init__(self):
        self._records = {}

    def __repr__(self):
        return f"ModuleRegistry<{len(self._records)}>"

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records.values()))

    def __contains__(self, path):
        return path in self._records

    def __getitem__(self, path):
        return self._records[path]

    def get(self, path):
        return self._records.get(path)

    def add(self, record):
        """Insert a new record.

        Raises:
            ValueError: A record for the same canonical path exists
        """
        if record.path in self._records:
            raise ValueError(f"Module '{record.path}' is already registered")
        self._records[record.path] = record
        return record

    def paths(self):
        """(list[str]) Canonical paths in load order."""
        return list(self._records)


class Loader:
    """Resolver context for one runtime instance.

    Args:
        config: (Config | None) Settings, Config.from_environ() by default
        compiler: Compile service, modload.Compiler() by default
        evaluator: Evaluation service, modload.Evaluator() by default
        builtins: (BuiltinTable | None) Shared built-in table, the standard one by default

    Attributes:
        config: (Config) Settings
        modules: (ModuleRegistry) Every module this loader has located
        stack: (LoadStack) Modules currently loading
        hooks: (LoaderChain) Host supplied loader and normalizer hooks
        builtins: (BuiltinModuleRegistry) Built-in modules for this loader
        manifest: (ManifestAliases) Project manifest aliases
    """

    def __init__(self, config=None, compiler=None, evaluator=None, builtins=None):
        self.config = config if config is not None else modload.Config.from_environ()
        self.compiler = compiler if compiler is not None else modload.Compiler()
        self.evaluator = evaluator if evaluator is not None else modload.Evaluator()
        self.modules = ModuleRegistry()
        self.stack = modload.LoadStack()
        self.hooks = modload.LoaderChain()
        self.builtins = modload.BuiltinModuleRegistry(builtins)
        self.manifest = modload.ManifestAliases(
            self.config.manifest_path,
            key=self.config.alias_key,
            working_dir=self.config.working_dir,
        )
        self.normalizer = modload.SpecifierNormalizer(self)

    def __repr__(self):
        return f"Loader<{len(self.modules)} modules>"

    def trace(self, level, step, message, *args):
        """Log a resolution step when verbosity is at least level."""
        if self.config.verbosity >= level:
            logger.debug(f"[module:{step}] {message}", *args)

    def add_hook(self, *hooks):
        """Register loader hooks, see LoaderChain.register."""
        return self.hooks.register(*hooks)

    def locate(self, specifier, referrer=None):
        """Normalize a specifier without loading anything.

        Returns:
            (Location | None) Location, or None when unresolved
        """
        return self.normalizer.normalize(specifier, referrer)

    def normalize(self, specifier, referrer=None):
        """(str | None) Canonical path for a specifier, None when unresolved."""
        location = self.locate(specifier, referrer)
        return location.path if location is not None else None

    def load(self, specifier, referrer=None):
        """Resolve a specifier and initialize its module at most once.

        Args:
            specifier: (str) Specifier as written by the importer
            referrer: (str | None) Canonical path of the importing module

        Returns:
            (ModuleRecord) Record for the module. A failed module is
            returned with its exception recorded, see import_module().

        Raises:
            modload.NotFoundError: No strategy resolved the specifier
            modload.HookError: A loader or normalizer hook raised
            modload.CircularDependencyError: Cycle found with on_cycle="error"
        """
        self.trace(1, "load", "%s from %s", specifier, referrer or "<top>")
        requested = specifier
        result = self.hooks.run_loaders(specifier)
        if isinstance(result, modload.ModuleRecord):
            self.trace(1, "load", "%s -> %s (hook)", requested, result.name)
            return result
        if result is not None:
            specifier = result

        location = self.normalizer.normalize(specifier, referrer)
        if location is None:
            logger.warning(
                "[module:load] %s not found (from %s)",
                requested,
                referrer or "<top>",
                extra={"specifier": requested, "path": None},
            )
            message = "module not found"
            if referrer is not None:
                message += f" (imported from {referrer})"
            raise modload.NotFoundError(message, specifier=requested)

        record = self.modules.get(location.path)
        if record is not None:
            if location.path in self.stack:
                self._on_cycle(requested, location.path)
            self.trace(2, "load", "%s -> %s (cached, %s)", requested, location.path, record.state.value)
            return record

        if location.builtin is not None:
            return self.builtins.instantiate(location.builtin, self, requested)

        name = modload.SENTINEL if location.kind == "data" else location.path
        record = modload.ModuleRecord(location.path, location.source, requested, name)
        self.modules.add(record)
        with self.stack.entered(record.path):
            self.initialize(record)
        return record

    def import_module(self, specifier, referrer=None):
        """Load a module and raise its recorded failure, if any.

        Returns:
            (ModuleRecord) Record for the module

        Raises:
            modload.LoadError: Any resolution, compile or evaluation failure
        """
        return self.load(specifier, referrer).check()

    def require(self, specifier, referrer=None):
        """Load a module and return its namespace.

        Returns:
            (Namespace) Read-only view of the module exports
        """
        return self.import_module(specifier, referrer).namespace

    def initialize(self, record):
        """Compile and evaluate a freshly registered record.

        The caller is responsible for the load stack. Every module kind is
        dispatched here.

        Returns:
            (ModuleRecord) The same record in a terminal state

        Raises:
            modload.HookError: A hook raised during a nested import
        """
        record.transition(modload.ModuleState.RESOLVING)
        try:
            run = self._prepare(record)
        except modload.HookError:
            raise
        except Exception as e:
            if isinstance(e, modload.CompileError):
                error = e
                if error.specifier is None and record.kind != "data":
                    error.specifier = record.specifier
            else:
                error = modload.CompileError(f"{type(e).__name__}: {e}", specifier=_subject(record))
                error.__cause__ = e
            error.path = record.path
            record.fail(error)
            self.trace(1, "compile", "%s failed: %s", record.name, error.message)
            return record

        record.transition(modload.ModuleState.RESOLVED)
        record.transition(modload.ModuleState.EVALUATING)
        require = functools.partial(self.import_module, referrer=record.path)
        try:
            run(record, require)
        except modload.HookError:
            raise
        except Exception as e:
            if isinstance(e, modload.LoadError):
                message = e.describe()
            else:
                message = f"{type(e).__name__}: {e}"
            error = modload.EvaluationError(message, specifier=_subject(record), path=record.path)
            error.__cause__ = e
            record.fail(error)
            self.trace(1, "evaluate", "%s failed: %s", record.name, message)
        else:
            record.transition(modload.ModuleState.EVALUATED)
            self.trace(1, "evaluate", "%s done", record.name)
        return record

    def _prepare(self, record):
        """Compile the record's source.

        Returns:
            (callable) run(record, require) evaluating the module
        """
        match record.source:
            case modload.NativeSource(initializer=initializer):
                return functools.partial(self.evaluator.run_native, initializer)
            case modload.BytecodeSource(blob=blob):
                record.compiled = self.compiler.thaw(blob, record.name)
            case modload.FileSource(path=path):
                record.compiled = self._compile_file(path)
            case modload.DataSource(uri=uri):
                record.compiled = modload.synthesize(uri, self.compiler)
            case _:
                raise TypeError(f"Unknown module source {record.source!r}")
        return functools.partial(self.evaluator.evaluate, record.compiled)

    def _compile_file(self, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise modload.CompileError(f"cannot read module file: {e}", path=path) from e
        if os.path.splitext(path)[1] == ".json":
            modload.validate_json(text, path)
            text = modload.json_module(text)
        return self.compiler.compile(text, path, True)

    def _on_cycle(self, specifier, path):
        policy = self.config.on_cycle
        if policy == "ignore":
            return
        if policy == "error":
            raise modload.CircularDependencyError(
                f"circular module dependency from:\n{self.stack.format()}",
                specifier=specifier,
                path=path,
            )
        logger.warning(
            "[module:cycle] circular module dependency '%s' (%s) from:\n%s",
            specifier,
            path,
            self.stack.format(),
            extra={"specifier": specifier, "path": path},
        )


def _subject(record):
    """Specifier to report for a record, bounded for data URI modules."""
    if record.kind == "data":
        return record.name
    return record.specifier
