"""Specifier normalization.

Turns the specifier written by an importer into a canonical path plus the
source the module will be built from. Strategies run in a fixed order:

1. ``data:`` URIs
2. built-in names (no path separator)
3. explicit paths (``./``, ``../``, absolute) relative to the referrer
4. manifest aliases, one substitution per attempt, also tried for explicit
   paths that matched no file
5. the filesystem search path

Normalizer hooks registered on the loader run before these strategies and
may rewrite the specifier they see.
"""

__all__ = ["Location", "SpecifierNormalizer", "is_explicit"]

import os
from typing import NamedTuple

import modload

_FILE_SCHEME = "file://"


class Location(NamedTuple):
    """Result of normalizing a specifier.

    Attributes:
        path: (str) Canonical path, the module registry key
        source: Source variant the module is built from
        builtin: (BuiltinModuleEntry | None) Entry for built-in modules
    """

    path: str
    source: object
    builtin: object = None

    @property
    def kind(self):
        return self.source.kind


def is_explicit(specifier):
    """(bool) Whether the specifier names a path rather than a module."""
    return (
        specifier.startswith(("./", "../"))
        or specifier in (".", "..")
        or os.path.isabs(specifier)
    )


def _has_separator(specifier):
    return "/" in specifier or os.sep in specifier


class SpecifierNormalizer:
    """Normalization strategies for one loader.

    Args:
        loader: (Loader) Owner of the configuration, hooks, manifest and built-ins
    """

    def __init__(self, loader):
        self.loader = loader

    def __repr__(self):
        return "SpecifierNormalizer<>"

    def normalize(self, specifier, referrer=None):
        """Resolve a specifier to a location.

        Args:
            specifier: (str) Specifier as written by the importer
            referrer: (str | None) Canonical path of the importing module

        Returns:
            (Location | None) Location, or None when unresolved

        Raises:
            modload.HookError: A normalizer hook raised
        """
        rewritten = self.loader.hooks.run_normalizers(referrer, specifier)
        if rewritten is not None:
            self.loader.trace(2, "normalize", "%s -> %s (hook)", specifier, rewritten)
            specifier = rewritten
        return self._resolve(specifier, referrer, aliased=False)

    def _resolve(self, specifier, referrer, aliased):
        loader = self.loader
        if specifier.startswith(_FILE_SCHEME):
            specifier = specifier[len(_FILE_SCHEME):]

        if modload.is_data_uri(specifier):
            return Location(modload.data_path(specifier), modload.DataSource(specifier))

        if specifier.startswith(modload.BUILTIN_PREFIX) or not _has_separator(specifier):
            entry = loader.builtins.find(specifier)
            if entry is not None:
                loader.trace(2, "normalize", "%s -> %s (builtin)", specifier, entry.path)
                return Location(entry.path, entry.source, entry)
            if specifier.startswith(modload.BUILTIN_PREFIX):
                return None

        if is_explicit(specifier):
            base = self.base_directory(referrer)
            found = modload.probe(os.path.normpath(os.path.join(base, specifier)), loader.config.suffixes)
            loader.trace(3, "normalize", "%s from %s -> %s", specifier, base, found)
            if found is not None:
                return self._file_location(found)

        if not aliased:
            substitute = loader.manifest.resolve(specifier)
            if substitute is not None:
                loader.trace(2, "normalize", "%s -> %s (manifest)", specifier, substitute)
                return self._resolve(substitute, referrer, aliased=True)

        if is_explicit(specifier):
            return None

        directories = [os.path.join(loader.config.working_dir, d) for d in loader.config.search_path]
        found = modload.search(specifier, directories, loader.config.suffixes)
        loader.trace(3, "normalize", "%s in search path -> %s", specifier, found)
        if found is None:
            return None
        return self._file_location(found)

    def _file_location(self, found):
        path = os.path.normpath(os.path.join(self.loader.config.working_dir, found))
        return Location(path, modload.source_for_file(path))

    def base_directory(self, referrer):
        """Directory relative specifiers are resolved against.

        Built-in and data URI modules have no directory, their relative
        imports resolve against the working directory.
        """
        if referrer is None or not os.path.isabs(referrer):
            return self.loader.config.working_dir
        return os.path.dirname(referrer)
