"""Per runtime configuration for module resolution.

Values come from explicit arguments first, then the environment, then the
compiled-in defaults below.

Environment:
    MODLOAD_PATH: search directories, separated by ';', newlines or the
        platform path separator
    MODLOAD_DEBUG: integer verbosity for resolution tracing
"""

__all__ = [
    "Config",
    "SUFFIXES",
    "NATIVE_SUFFIX",
    "SOURCE_SUFFIX",
    "CYCLE_POLICIES",
    "default_search_path",
    "split_search_path",
]

import os
import re
import sys
from dataclasses import dataclass, field


ENV_PATH = "MODLOAD_PATH"
ENV_DEBUG = "MODLOAD_DEBUG"

NATIVE_SUFFIX = ".py"
SOURCE_SUFFIX = ".js"
INDEX_SUFFIX = "/index.js"

# Probe order matters
SUFFIXES = (NATIVE_SUFFIX, SOURCE_SUFFIX, INDEX_SUFFIX)

CYCLE_POLICIES = ("warn", "error", "ignore")

_SPLIT_PATTERN = re.compile("[;\n" + re.escape(os.pathsep) + "]")


def default_search_path():
    """Compiled-in search path used when MODLOAD_PATH is not set.

    Returns:
        (list[str]) Directory list
    """
    return [os.path.join(sys.prefix, "lib", "modload")]


def split_search_path(value):
    """Split a delimiter separated directory list, dropping empty entries."""
    return [part.strip() for part in _SPLIT_PATTERN.split(value) if part.strip()]


@dataclass
class Config:
    """Settings owned by one loader instance.

    Attributes:
        search_path: (list[str]) Ordered directories for bare specifiers
        suffixes: (tuple[str]) Recognized suffixes in probe priority order
        manifest_name: (str) Manifest file name inside working_dir
        alias_key: (str) Key of the alias table inside the manifest
        on_cycle: (str) One of "warn", "error", "ignore"
        verbosity: (int) Tracing level, 0 disables tracing
        working_dir: (str) Anchor for top level relative specifiers
    """

    search_path: list = field(default_factory=default_search_path)
    suffixes: tuple = SUFFIXES
    manifest_name: str = "package.json"
    alias_key: str = "_moduleAliases"
    on_cycle: str = "warn"
    verbosity: int = 0
    working_dir: str = field(default_factory=os.getcwd)

    def __post_init__(self):
        if self.on_cycle not in CYCLE_POLICIES:
            raise ValueError(
                f"on_cycle must be one of {', '.join(CYCLE_POLICIES)}, got {self.on_cycle!r}"
            )
        self.search_path = list(self.search_path)
        self.working_dir = os.path.abspath(self.working_dir)

    @classmethod
    def from_environ(cls, environ=None, **overrides):
        """Build a Config from environment variables.

        Args:
            environ: (Mapping | None) Environment to read, os.environ by default
            **overrides: Field values that win over the environment

        Returns:
            (Config) New configuration

        Raises:
            ValueError: MODLOAD_DEBUG is not an integer
        """
        if environ is None:
            environ = os.environ

        values = {}
        path = environ.get(ENV_PATH)
        if path is not None:
            values["search_path"] = split_search_path(path)

        debug = environ.get(ENV_DEBUG)
        if debug:
            try:
                values["verbosity"] = int(debug)
            except ValueError:
                raise ValueError(f"{ENV_DEBUG} must be an integer, got {debug!r}") from None

        values.update(overrides)
        return cls(**values)

    @property
    def manifest_path(self):
        """(str) Absolute location of the project manifest."""
        return os.path.join(self.working_dir, self.manifest_name)
