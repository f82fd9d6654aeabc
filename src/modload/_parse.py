"""Reference compiler for module source text.

The loader treats compiling as an opaque service. This compiler gives it
a working default for a small ECMAScript-like module language, parsed with
the lark grammar in ``lark/module.lark``::

    import { atob } from "util";
    import * as cfg from "./config";
    const greeting = "hello";
    export const answer = 42;
    export default parse(atob("eyJhIjogMX0="));

A compiled module is a tuple of plain statement nodes. Its serialized form
(``freeze``/``thaw``) is what bytecode built-in modules embed.
"""

__all__ = [
    "Compiler",
    "CompiledModule",
    "Import",
    "Export",
    "Bind",
    "Throw",
    "Literal",
    "Ref",
    "Call",
    "ArrayExpr",
    "ObjectExpr",
    "compile_source",
    "freeze",
    "thaw",
]

import dataclasses
import json
import pickle
from dataclasses import dataclass

import lark

import modload


# Global parser instances (cached by grammar name)
_parsers: dict[str, lark.Lark] = {}

_MAGIC = b"MLBC\x01"


@dataclass(frozen=True)
class Import:
    """Import statement.

    Attributes:
        specifier: (str) Module specifier as written
        default: (str | None) Local name bound to the default export
        namespace: (str | None) Local name bound to the module namespace
        names: (tuple) Pairs of (exported name, local name)
    """

    specifier: str
    default: str | None = None
    namespace: str | None = None
    names: tuple = ()


@dataclass(frozen=True)
class Export:
    name: str
    value: object


@dataclass(frozen=True)
class Bind:
    name: str
    value: object


@dataclass(frozen=True)
class Throw:
    value: object


@dataclass(frozen=True)
class Literal:
    value: object


@dataclass(frozen=True)
class Ref:
    parts: tuple

    @property
    def dotted(self):
        return ".".join(self.parts)


@dataclass(frozen=True)
class Call:
    func: Ref
    args: tuple


@dataclass(frozen=True)
class ArrayExpr:
    items: tuple


@dataclass(frozen=True)
class ObjectExpr:
    pairs: tuple


@dataclass(frozen=True)
class CompiledModule:
    """Compiled module definition.

    Attributes:
        name: (str) Module identity used in diagnostics
        body: (tuple) Statement nodes in source order
        is_module: (bool) Compiled as a module rather than a script
    """

    name: str
    body: tuple
    is_module: bool = True

    @property
    def requests(self):
        """(list[str]) Specifiers imported by the module, in order."""
        return [stmt.specifier for stmt in self.body if isinstance(stmt, Import)]


class _ToNodes(lark.Transformer):
    """Convert the lark tree into statement and expression nodes."""

    def start(self, children):
        return tuple(children)

    def import_bare(self, children):
        (spec,) = children
        return Import(_string(spec))

    def import_default(self, children):
        name, spec = children
        return Import(_string(spec), default=str(name))

    def import_namespace(self, children):
        name, spec = children
        return Import(_string(spec), namespace=str(name))

    def import_named(self, children):
        names, spec = children
        return Import(_string(spec), names=tuple(names or ()))

    def import_names(self, children):
        return list(children)

    def import_name(self, children):
        name, local = children
        return (str(name), str(local) if local is not None else str(name))

    def export_default(self, children):
        (value,) = children
        return Export("default", value)

    def export_binding(self, children):
        name, value = children
        return Export(str(name), value)

    def binding(self, children):
        name, value = children
        return Bind(str(name), value)

    def throw_stmt(self, children):
        (value,) = children
        return Throw(value)

    def call(self, children):
        func, *args = children
        return Call(func, tuple(arg for arg in args if arg is not None))

    def string(self, children):
        return Literal(_string(children[0]))

    def number(self, children):
        text = str(children[0])
        if any(c in text for c in ".eE"):
            return Literal(float(text))
        return Literal(int(text))

    def true(self, children):
        return Literal(True)

    def false(self, children):
        return Literal(False)

    def null(self, children):
        return Literal(None)

    def ref(self, children):
        return Ref(tuple(str(c) for c in children))

    def array(self, children):
        items = tuple(item for item in children if item is not None)
        if all(isinstance(item, Literal) for item in items):
            return Literal([item.value for item in items])
        return ArrayExpr(items)

    def object(self, children):
        pairs = tuple(pair for pair in children if pair is not None)
        if all(isinstance(value, Literal) for _, value in pairs):
            return Literal({key: value.value for key, value in pairs})
        return ObjectExpr(pairs)

    def pair(self, children):
        key, value = children
        if key.type == "STRING":
            return (_string(key), value)
        return (str(key), value)


def _string(token):
    """Decode a double quoted string token."""
    return json.loads(str(token))


def compile_source(text, name, is_module=True):
    """Compile module source text.

    Args:
        text: (str) Source text
        name: (str) Module identity for diagnostics
        is_module: (bool) False compiles a script, which may not import or export

    Returns:
        (CompiledModule) Compiled definition

    Raises:
        modload.CompileError: If the text contains invalid syntax
    """
    parser = _lark_parser("module")
    try:
        tree = parser.parse(text)
        body = _ToNodes().transform(tree)
    except lark.exceptions.UnexpectedInput as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        message = f"invalid syntax at line {line}, column {column}"
        if isinstance(e, lark.exceptions.UnexpectedEOF) or getattr(e, "token", None) == "":
            message = "unexpected end of input"
        raise modload.CompileError(message, path=name, line=line, column=column) from e
    except lark.exceptions.VisitError as e:
        raise modload.CompileError(str(e.orig_exc), path=name) from e

    if not is_module:
        for stmt in body:
            if isinstance(stmt, (Import, Export)):
                raise modload.CompileError("import and export are only allowed in modules", path=name)

    return CompiledModule(name, body, is_module)


def freeze(compiled):
    """Serialize a compiled module to its bytecode form.

    Returns:
        (bytes) Blob accepted by thaw()
    """
    return _MAGIC + pickle.dumps(compiled, protocol=pickle.HIGHEST_PROTOCOL)


def thaw(blob, name=None):
    """Deserialize a bytecode blob.

    Args:
        blob: (bytes) Output of freeze()
        name: (str | None) Identity to give the module, keeps the frozen one if None

    Returns:
        (CompiledModule) Compiled definition

    Raises:
        modload.CompileError: The blob is not a valid bytecode module
    """
    if not bytes(blob[:len(_MAGIC)]) == _MAGIC:
        raise modload.CompileError("not a bytecode module", path=name)
    try:
        compiled = pickle.loads(blob[len(_MAGIC):])
    except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, KeyError, ValueError) as e:
        raise modload.CompileError(f"corrupt bytecode: {e}", path=name) from e
    if not isinstance(compiled, CompiledModule):
        raise modload.CompileError("corrupt bytecode: not a compiled module", path=name)
    if name is not None:
        compiled = dataclasses.replace(compiled, name=name)
    return compiled


class Compiler:
    """Compile service handed to the loader.

    Replace it with any object providing the same three methods to plug a
    different language into the loader.
    """

    def compile(self, text, name, is_module=True):
        return compile_source(text, name, is_module)

    def freeze(self, compiled):
        return freeze(compiled)

    def thaw(self, blob, name=None):
        return thaw(blob, name)


def _lark_parser(name):
    """Get globally shared lark parser.

    Args:
        name: (str) name of the grammar file (without .lark)

    Returns:
        (lark.Lark) Parser instance
    """
    parser = _parsers.get(name)
    if parser is not None:
        return parser

    path = f"lark/{name}.lark"
    parser = lark.Lark.open(path, rel_to=__file__, parser="lalr", maybe_placeholders=True)
    _parsers[name] = parser
    return parser
