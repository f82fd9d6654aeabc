"""Reference evaluator for compiled modules.

Evaluation writes straight into the record's export table, so an importer
that reaches a module through a dependency cycle sees whatever has been
exported so far.
"""

__all__ = ["Evaluator", "ScriptError", "GLOBALS"]

import json

import modload


class ScriptError(Exception):
    """Value thrown by a module body with ``throw``.

    Attributes:
        value: The thrown value
    """

    def __init__(self, value):
        self.value = value
        super().__init__(value if isinstance(value, str) else json.dumps(value, default=repr))


def _parse_json(text):
    """Parse JSON text, the ``parse`` global."""
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8")
    return json.loads(text)


GLOBALS = {
    "parse": _parse_json,
    "atob": modload.atob,
}


class Evaluator:
    """Evaluation service handed to the loader.

    Args:
        globals: (dict | None) Names visible to every module, GLOBALS by default
    """

    def __init__(self, globals=None):
        self.globals = dict(GLOBALS if globals is None else globals)

    def __repr__(self):
        return "Evaluator<>"

    def run_native(self, initializer, record, require):
        """Run a native initializer against the record's export table."""
        initializer(record.exports, require)
        return record.exports

    def evaluate(self, compiled, record, require):
        """Run a compiled module body.

        Args:
            compiled: (CompiledModule) Module to run
            record: (ModuleRecord) Record receiving the exports
            require: (callable) require(specifier) -> ModuleRecord for imports

        Returns:
            (dict) The record's export table

        Raises:
            ScriptError: The body executed a throw statement
            NameError: A reference could not be resolved
            Exception: Anything raised by an import or a called function
        """
        scope = {}
        for stmt in compiled.body:
            match stmt:
                case modload.Import():
                    self._import(stmt, scope, require)
                case modload.Bind(name=name, value=value):
                    scope[name] = self.value(value, scope)
                case modload.Export(name=name, value=value):
                    result = self.value(value, scope)
                    if name != "default":
                        scope[name] = result
                    record.exports[name] = result
                case modload.Throw(value=value):
                    raise ScriptError(self.value(value, scope))
                case _:
                    raise TypeError(f"Unknown statement {stmt!r}")
        return record.exports

    def _import(self, stmt, scope, require):
        target = require(stmt.specifier)
        namespace = target.namespace
        if stmt.namespace is not None:
            scope[stmt.namespace] = namespace
        if stmt.default is not None:
            scope[stmt.default] = _export(namespace, "default", stmt.specifier)
        for exported, local in stmt.names:
            scope[local] = _export(namespace, exported, stmt.specifier)

    def value(self, node, scope):
        """Compute the value of an expression node."""
        match node:
            case modload.Literal(value=value):
                return value
            case modload.Ref(parts=parts):
                return self._lookup(parts, scope)
            case modload.Call(func=func, args=args):
                target = self._lookup(func.parts, scope)
                if not callable(target):
                    raise TypeError(f"'{func.dotted}' is not callable")
                return target(*(self.value(arg, scope) for arg in args))
            case modload.ArrayExpr(items=items):
                return [self.value(item, scope) for item in items]
            case modload.ObjectExpr(pairs=pairs):
                return {key: self.value(item, scope) for key, item in pairs}
        raise TypeError(f"Unknown expression {node!r}")

    def _lookup(self, parts, scope):
        first = parts[0]
        if first in scope:
            value = scope[first]
        elif first in self.globals:
            value = self.globals[first]
        else:
            raise NameError(f"'{first}' is not defined")

        for index, part in enumerate(parts[1:], start=1):
            owner = ".".join(parts[:index])
            if isinstance(value, modload.Namespace):
                value = _export(value, part, owner)
            elif isinstance(value, dict):
                if part not in value:
                    raise NameError(f"'{owner}' has no member '{part}'")
                value = value[part]
            else:
                raise TypeError(f"'{owner}' has no members")
        return value


def _export(namespace, name, specifier):
    if name not in namespace:
        raise NameError(f"Module '{specifier}' has no export '{name}'")
    return namespace[name]
