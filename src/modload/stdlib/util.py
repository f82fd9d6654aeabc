"""Encoding helpers"""

import base64
import urllib.parse

import modload


def btoa(text):
    """Encode text as standard base64."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def escape(text):
    """Percent-encode text for use in a URI."""
    return urllib.parse.quote(text, safe="")


def unescape(text):
    """Decode percent-encoded text."""
    return urllib.parse.unquote(text)


def init(exports, require):
    """Populate the util module."""
    exports["atob"] = modload.atob
    exports["btoa"] = btoa
    exports["escape"] = escape
    exports["unescape"] = unescape
