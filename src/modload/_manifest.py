"""Module name aliases declared in the project manifest.

The manifest is a JSON document (``package.json`` by default) holding an
alias table under a conventional key::

    {"_moduleAliases": {"foo": "./vendor/foo.js"}}

It is read at most once per loader. A missing or unreadable manifest is
remembered as "no manifest" and never retried.
"""

__all__ = ["ManifestAliases"]

import json
import logging
import os

import modload


logger = logging.getLogger(__name__)

_NO_MANIFEST = object()


class ManifestAliases:
    """Lazily loaded alias table of a project manifest.

    Args:
        path: (str) Location of the manifest file
        key: (str) Key of the alias table inside the manifest
        working_dir: (str | None) Directory absolute names are made relative to

    Attributes:
        path: (str) Location of the manifest file
        key: (str) Key of the alias table
        reads: (int) Number of times the manifest file was read
    """

    def __init__(self, path, key="_moduleAliases", working_dir=None):
        self.path = os.path.abspath(path)
        self.key = key
        self.working_dir = os.path.abspath(working_dir or os.path.dirname(self.path))
        self.reads = 0
        self._manifest = None

    def __repr__(self):
        return f"ManifestAliases<{self.path}>"

    @property
    def directory(self):
        """(str) Directory relative alias targets are anchored to."""
        return os.path.dirname(self.path)

    def load(self):
        """Parse the manifest on first use.

        Returns:
            (dict | None) Parsed manifest, None when there is none
        """
        if self._manifest is None:
            try:
                self._manifest = self._read()
            except modload.ManifestParseError as e:
                logger.debug("[module:manifest] %s ignored: %s", self.path, e.message)
                self._manifest = _NO_MANIFEST
        if self._manifest is _NO_MANIFEST:
            return None
        return self._manifest

    def _read(self):
        if not os.path.isfile(self.path):
            raise modload.ManifestParseError("manifest not found", path=self.path)
        self.reads += 1
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                manifest = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise modload.ManifestParseError(str(e), path=self.path) from e
        if not isinstance(manifest, dict):
            raise modload.ManifestParseError("manifest is not an object", path=self.path)
        return manifest

    def aliases(self):
        """(dict) The alias table, empty when absent or malformed."""
        manifest = self.load()
        if manifest is None:
            return {}
        table = manifest.get(self.key)
        if not isinstance(table, dict):
            return {}
        return table

    def resolve(self, name):
        """Look up the substitute for a module name.

        Relative targets are anchored to the manifest's directory so the
        result does not depend on who imported the name.

        Args:
            name: (str) Module name, absolute paths are made relative first

        Returns:
            (str | None) Substitute specifier, or None for no alias
        """
        table = self.aliases()
        if not table:
            return None

        key = os.path.relpath(name, self.working_dir) if os.path.isabs(name) else name
        if key.startswith("./"):
            key = key[2:]

        target = table.get(key)
        if target is None:
            return None
        target = str(target)
        if target.startswith(("./", "../")):
            target = os.path.normpath(os.path.join(self.directory, target))
        return target
