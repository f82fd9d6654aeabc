"""Filesystem search for module files.

Files are probed by name, one recognized suffix at a time in priority
order, across an ordered list of directories. Nothing here raises when a
module is missing; callers decide whether "not found" is an error.
"""

__all__ = ["has_suffix", "candidates", "probe", "search"]

import os

import modload


def has_suffix(name, suffixes=None):
    """(bool) Whether name already ends in a recognized suffix."""
    if suffixes is None:
        suffixes = modload.SUFFIXES
    return any(name.endswith(suffix) for suffix in suffixes)


def candidates(name, suffixes=None):
    """Names to probe for a module, in priority order.

    A name that already carries a recognized suffix is probed as is. Any
    other name is tried with each suffix appended.

    Args:
        name: (str) Module name or path without suffix
        suffixes: (tuple[str] | None) Recognized suffixes, SUFFIXES by default

    Returns:
        (list[str]) Candidate file names
    """
    if suffixes is None:
        suffixes = modload.SUFFIXES
    if has_suffix(name, suffixes):
        return [name]
    return [name + suffix for suffix in suffixes]


def probe(path, suffixes=None):
    """Find the module file for an explicit path.

    Recognized suffixes are tried first. A path to an existing file with
    some other extension (like ``.json``) is accepted as a last resort.

    Args:
        path: (str) Path without or with a suffix
        suffixes: (tuple[str] | None) Recognized suffixes

    Returns:
        (str | None) Normalized path of the file found
    """
    for candidate in candidates(path, suffixes):
        if os.path.isfile(candidate):
            return os.path.normpath(candidate)

    if not has_suffix(path, suffixes) and os.path.isfile(path):
        return os.path.normpath(path)
    return None


def search(name, search_path, suffixes=None):
    """Search directories in order for a module file.

    Args:
        name: (str) Bare module name, may contain subdirectories
        search_path: (list[str]) Ordered directories to look in
        suffixes: (tuple[str] | None) Recognized suffixes

    Returns:
        (str | None) Path of the first file found, joined onto the search
        directory as given (relative directories give relative paths)
    """
    names = candidates(name, suffixes)
    for directory in search_path:
        for candidate in names:
            path = os.path.join(directory, candidate)
            if os.path.isfile(path):
                return os.path.normpath(path)
    return None
