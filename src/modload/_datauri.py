"""Modules embedded in ``data:`` specifiers.

Form: ``data:[mediatype][;base64],payload``

A JSON media type produces a wrapper module whose default export is the
parsed payload. Any other media type is compiled directly as module
source. A base64 JSON payload stays encoded inside the wrapper, which
decodes it with the ``atob`` global at evaluation time.
"""

__all__ = [
    "DataURI",
    "atob",
    "SENTINEL",
    "is_data_uri",
    "parse_data_uri",
    "data_path",
    "json_module",
    "validate_json",
    "synthesize",
]

import base64
import binascii
import hashlib
import json
import urllib.parse
from dataclasses import dataclass

import modload


SENTINEL = "<data-url>"

_SCHEME = "data:"


@dataclass(frozen=True)
class DataURI:
    """Parsed data URI.

    Attributes:
        media_type: (str) Media type with parameters, lower case, may be empty
        base64: (bool) Payload is base64 encoded
        payload: (str) Raw payload after the comma
    """

    media_type: str
    base64: bool
    payload: str

    @property
    def is_script(self):
        return "/javascript" in self.media_type or "/ecmascript" in self.media_type

    @property
    def is_json(self):
        return not self.is_script and "/json" in self.media_type

    def decode(self):
        """Decode the payload to text.

        Raises:
            modload.CompileError: Payload is not valid base64 or UTF-8
        """
        if not self.base64:
            return urllib.parse.unquote(self.payload)
        return decode_base64(self.payload)


def atob(text):
    """Decode standard or url-safe base64 text, padding optional.

    This is the one base64 decoder: data URI payloads, the ``atob`` global
    of evaluated modules and the ``util`` built-in all go through it.

    Raises:
        ValueError: Text is not valid base64 or UTF-8
    """
    text = text.strip().replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    return base64.b64decode(text, validate=True).decode("utf-8")


def decode_base64(payload):
    """Decode a percent-escaped base64 payload.

    Raises:
        modload.CompileError: Payload is not valid base64 or UTF-8
    """
    try:
        return atob(urllib.parse.unquote(payload))
    except (binascii.Error, ValueError) as e:
        raise modload.CompileError(f"invalid base64 payload: {e}", path=SENTINEL) from e


def is_data_uri(specifier):
    return specifier[:len(_SCHEME)].lower() == _SCHEME


def parse_data_uri(specifier):
    """Split a data URI into media type, encoding and payload.

    Raises:
        modload.CompileError: No comma separates the header from the payload
    """
    header, sep, payload = specifier[len(_SCHEME):].partition(",")
    if not sep:
        raise modload.CompileError("data URI has no payload separator", path=SENTINEL)
    params = header.split(";")
    is_base64 = len(params) > 1 and params[-1].strip().lower() == "base64"
    if is_base64:
        params = params[:-1]
    return DataURI(";".join(params).strip().lower(), is_base64, payload)


def data_path(specifier):
    """Canonical path of a data URI module.

    The full URI is hashed so cache keys stay short but distinct.
    """
    digest = hashlib.sha256(specifier.encode("utf-8")).hexdigest()[:16]
    return f"<data-url:{digest}>"


def json_module(payload, encoded=False):
    """Source text of a module whose default export is a JSON document.

    Args:
        payload: (str) JSON text, or its base64 form when encoded is True
        encoded: (bool) Decode the payload with atob before parsing

    Returns:
        (str) Module source
    """
    literal = json.dumps(payload)
    if encoded:
        return f"export default parse(atob({literal}));\n"
    return f"export default parse({literal});\n"


def validate_json(text, name=SENTINEL):
    """Check that text is a JSON document.

    Raises:
        modload.CompileError: The text does not parse
    """
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        raise modload.CompileError(
            f"invalid JSON: {e.msg}", path=name, line=e.lineno, column=e.colno
        ) from e


def synthesize(specifier, compiler):
    """Compile the module embedded in a data URI.

    Args:
        specifier: (str) The full ``data:`` specifier
        compiler: Compile service

    Returns:
        (CompiledModule) Compiled module named SENTINEL

    Raises:
        modload.CompileError: Malformed URI, payload or module source
    """
    uri = parse_data_uri(specifier)
    if uri.is_json:
        text = uri.decode()
        validate_json(text)
        if uri.base64:
            text = json_module(urllib.parse.unquote(uri.payload), encoded=True)
        else:
            text = json_module(text)
    else:
        text = uri.decode()
    return compiler.compile(text, SENTINEL, True)
