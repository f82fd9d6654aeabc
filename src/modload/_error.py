"""Error classes and helpers"""

__all__ = [
    "LoadError",
    "NotFoundError",
    "CompileError",
    "EvaluationError",
    "CircularDependencyError",
    "HookError",
    "ManifestParseError",
]


class LoadError(Exception):
    """Failure while resolving or loading a module.

    Args:
        message: (str) Error description
        specifier: (str | None) Specifier as written by the importer
        path: (str | None) Canonical path, when resolution got that far

    Attributes:
        kind: (str) Short category name used in reports
        message: (str) Error description
        specifier: (str | None) Specifier as written by the importer
        path: (str | None) Canonical path the failure is attached to
    """

    kind = "LoadError"

    def __init__(self, message, specifier=None, path=None):
        self.message = message
        self.specifier = specifier
        self.path = path
        super().__init__(message)

    def describe(self):
        """(str) One line report with kind, specifier and message."""
        subject = self.specifier if self.specifier is not None else self.path
        if subject is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: '{subject}': {self.message}"


class NotFoundError(LoadError):
    """No strategy produced a canonical path for the specifier."""

    kind = "NotFound"


class CompileError(LoadError):
    """Module source or JSON payload failed to parse.

    Args:
        message: (str) Error description
        specifier: (str | None) Specifier of the module
        path: (str | None) Canonical path of the module
        line: (int | None) 1-based source line
        column: (int | None) 1-based source column
    """

    kind = "CompileError"

    def __init__(self, message, specifier=None, path=None, line=None, column=None):
        self.line = line
        self.column = column
        super().__init__(message, specifier, path)


class EvaluationError(LoadError):
    """Module body raised during its first evaluation."""

    kind = "EvaluationError"


class CircularDependencyError(LoadError):
    """Module was requested while it is still being loaded."""

    kind = "CircularDependency"


class HookError(LoadError):
    """A loader or normalizer hook raised.

    Attributes:
        hook: (object) The hook that failed
    """

    kind = "HookError"

    def __init__(self, message, specifier=None, path=None, hook=None):
        self.hook = hook
        super().__init__(message, specifier, path)


class ManifestParseError(LoadError):
    """Project manifest could not be read or parsed."""

    kind = "ManifestParseError"
