"""Module records held by the module registry"""

__all__ = ["ModuleState", "ModuleRecord", "Namespace"]

import enum


class ModuleState(enum.Enum):
    """Lifecycle of a module record."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    EVALUATING = "evaluating"
    EVALUATED = "evaluated"
    EVALUATION_FAILED = "evaluation-failed"

    @property
    def terminal(self):
        """(bool) Whether the state is final and cached."""
        return self in (ModuleState.EVALUATED, ModuleState.EVALUATION_FAILED)


_TRANSITIONS = {
    ModuleState.UNRESOLVED: (ModuleState.RESOLVING,),
    ModuleState.RESOLVING: (ModuleState.RESOLVED, ModuleState.EVALUATION_FAILED),
    ModuleState.RESOLVED: (ModuleState.EVALUATING,),
    ModuleState.EVALUATING: (ModuleState.EVALUATED, ModuleState.EVALUATION_FAILED),
    ModuleState.EVALUATED: (),
    ModuleState.EVALUATION_FAILED: (),
}


class Namespace:
    """Read-only view of a module's export table.

    Exports are reachable as items or attributes. The view is live, so
    importers inside a dependency cycle see exports as they are added.

    Args:
        record: (ModuleRecord) Record owning the export table
    """

    __slots__ = ("_record",)

    def __init__(self, record):
        object.__setattr__(self, "_record", record)

    def __repr__(self):
        return f"Namespace<{self._record.name}>"

    def __getitem__(self, name):
        return self._record.exports[name]

    def __getattr__(self, name):
        try:
            return self._record.exports[name]
        except KeyError:
            raise AttributeError(f"Module '{self._record.name}' has no export '{name}'") from None

    def __setattr__(self, name, value):
        raise AttributeError("Module namespaces are read-only")

    def __contains__(self, name):
        return name in self._record.exports

    def __iter__(self):
        return iter(list(self._record.exports))

    def __len__(self):
        return len(self._record.exports)

    def __dir__(self):
        return list(self._record.exports)

    def to_dict(self):
        """(dict) Shallow copy of the current exports."""
        return dict(self._record.exports)


class ModuleRecord:
    """A located module and everything known about its initialization.

    Records are created once per canonical path and are never removed from
    the registry that owns them.

    Args:
        path: (str) Canonical path, the registry key
        source: (NativeSource | BytecodeSource | FileSource | DataSource) Origin
        specifier: (str | None) Specifier that first requested the module
        name: (str | None) Module identity, defaults to path

    Attributes:
        path: (str) Canonical path, the registry key
        name: (str) Identity used in diagnostics
        specifier: (str | None) Specifier that first requested the module
        source: Source variant the module was built from
        compiled: (CompiledModule | None) Compiled definition, once compiled
        state: (ModuleState) Current lifecycle state
        exports: (dict) Live export table
        namespace: (Namespace) Read-only view of exports
        exception: (LoadError | None) Recorded compile or evaluation failure
    """

    __slots__ = (
        "path", "name", "specifier", "source", "compiled",
        "state", "exports", "namespace", "exception",
    )

    def __init__(self, path, source, specifier=None, name=None):
        self.path = path
        self.name = name if name is not None else path
        self.specifier = specifier
        self.source = source
        self.compiled = None
        self.state = ModuleState.UNRESOLVED
        self.exports = {}
        self.namespace = Namespace(self)
        self.exception = None

    def __repr__(self):
        return f"ModuleRecord<{self.name}:{self.kind}:{self.state.value}>"

    @property
    def kind(self):
        """(str) One of "native", "bytecode", "source", "data"."""
        return self.source.kind

    @property
    def evaluated(self):
        """(bool) Module finished evaluating without error."""
        return self.state is ModuleState.EVALUATED

    @property
    def failed(self):
        """(bool) Module failed to compile or evaluate."""
        return self.state is ModuleState.EVALUATION_FAILED

    def transition(self, state):
        """Move to a new lifecycle state.

        Raises:
            ValueError: The transition is not allowed from the current state
        """
        if state not in _TRANSITIONS[self.state]:
            raise ValueError(
                f"Module '{self.name}' cannot move from {self.state.value} to {state.value}"
            )
        self.state = state

    def fail(self, error):
        """Record a compile or evaluation failure and make it terminal.

        Args:
            error: (LoadError) Failure to keep and re-raise for later importers
        """
        if error.path is None:
            error.path = self.path
        self.exception = error
        self.transition(ModuleState.EVALUATION_FAILED)

    def check(self):
        """Raise the recorded failure, if any.

        Returns:
            self (for chaining)
        """
        if self.exception is not None:
            raise self.exception
        return self
