"""Path string manipulation using forward slashes"""

import posixpath


def extname(path):
    """Extension including the dot, or an empty string."""
    return posixpath.splitext(path)[1]


def relative(start, path):
    return posixpath.relpath(path, start)


def init(exports, require):
    """Populate the path module."""
    exports["join"] = posixpath.join
    exports["dirname"] = posixpath.dirname
    exports["basename"] = posixpath.basename
    exports["extname"] = extname
    exports["normalize"] = posixpath.normpath
    exports["relative"] = relative
    exports["isAbsolute"] = posixpath.isabs
    exports["sep"] = "/"
