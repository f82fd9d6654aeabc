"""Stack of modules currently being loaded.

The stack only exists for diagnostics. A canonical path that is requested
while already on the stack signals a dependency cycle.
"""

__all__ = ["LoadStack"]

import contextlib
import os


class LoadStack:
    """Ordered canonical paths of in-flight loads, outermost first."""

    __slots__ = ("_paths",)

    def __init__(self):
        self._paths = []

    def __repr__(self):
        return f"LoadStack<{len(self._paths)}>"

    def __len__(self):
        return len(self._paths)

    def __iter__(self):
        return iter(list(self._paths))

    def __contains__(self, path):
        return path in self._paths

    def push(self, path):
        self._paths.append(path)

    def pop(self):
        """Remove and return the innermost path."""
        return self._paths.pop()

    @contextlib.contextmanager
    def entered(self, path):
        """Keep path on the stack for the duration of the block.

        The path is popped whether the block succeeds or raises.
        """
        self.push(path)
        try:
            yield path
        finally:
            self.pop()

    @property
    def top(self):
        """(str | None) Innermost path being loaded."""
        return self._paths[-1] if self._paths else None

    @property
    def directory(self):
        """(str | None) Directory of the innermost file being loaded."""
        top = self.top
        if top is None or not os.path.isabs(top):
            return None
        return os.path.dirname(top)

    def format(self):
        """Describe the stack, innermost entry first.

        Returns:
            (str) One "index: path" line per entry
        """
        lines = []
        for index in range(len(self._paths) - 1, -1, -1):
            lines.append(f"{index}: {self._paths[index]}")
        return "\n".join(lines)
