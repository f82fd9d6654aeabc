"""Host supplied hooks consulted before built-in resolution.

A hook is either a plain callable, used as a loader, or an object with
optional ``load(specifier)`` and ``normalize(referrer, specifier)``
methods. Hooks run in registration order and thread one value through
the chain:

- returning None passes the current value on unchanged
- returning a string replaces the current value
- returning a ModuleRecord (loaders only) ends resolution with that module

Any exception from a hook aborts the whole in-flight load as a HookError.
"""

__all__ = ["LoaderHookEntry", "LoaderChain"]

import logging
from dataclasses import dataclass
from typing import Callable

import modload


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoaderHookEntry:
    """Registered hook.

    Attributes:
        hook: (object) The object that was registered
        loader: (Callable | None) load(specifier) function
        normalizer: (Callable | None) normalize(referrer, specifier) function
        identity: (int) Identity of the hook, used for de-duplication
    """

    hook: object
    loader: Callable | None
    normalizer: Callable | None
    identity: int


class LoaderChain:
    """Ordered, identity de-duplicated sequence of hooks.

    Registering a hook that is already present moves it to the end.
    """

    def __init__(self):
        self._entries: dict[int, LoaderHookEntry] = {}

    def __repr__(self):
        return f"LoaderChain<{len(self._entries)}>"

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries.values()))

    def __contains__(self, hook):
        return id(hook) in self._entries

    def hooks(self):
        """(list) Registered hooks in order."""
        return [entry.hook for entry in self._entries.values()]

    def register(self, *hooks):
        """Append hooks to the chain.

        Args:
            *hooks: Callables or objects with load/normalize methods

        Returns:
            (list) Registered hooks in order after the change

        Raises:
            TypeError: A hook has neither a load nor a normalize function
        """
        for hook in hooks:
            loader = getattr(hook, "load", None)
            normalizer = getattr(hook, "normalize", None)
            if loader is None and normalizer is None and callable(hook):
                loader = hook
            if not callable(loader) and not callable(normalizer):
                raise TypeError(f"Loader hook {hook!r} has no load or normalize function")

            identity = id(hook)
            self._entries.pop(identity, None)
            self._entries[identity] = LoaderHookEntry(
                hook,
                loader if callable(loader) else None,
                normalizer if callable(normalizer) else None,
                identity,
            )
        return self.hooks()

    def unregister(self, hook):
        """Remove a hook.

        Returns:
            (bool) Whether the hook was registered
        """
        return self._entries.pop(id(hook), None) is not None

    def clear(self):
        self._entries.clear()

    def run_loaders(self, specifier):
        """Thread a specifier through every loader hook.

        Returns:
            (str | ModuleRecord | None) Rewritten specifier, a resolved
            module, or None when no hook changed anything

        Raises:
            modload.HookError: A hook raised or returned an unusable value
        """
        current = specifier
        for entry in list(self._entries.values()):
            if entry.loader is None:
                continue
            result = _call(entry, entry.loader, specifier, current)
            if result is None:
                continue
            if isinstance(result, modload.ModuleRecord):
                logger.debug("[module:hook] %s -> %s (module)", specifier, result.name)
                return result
            if not isinstance(result, str):
                raise modload.HookError(
                    f"loader hook returned {type(result).__name__}, expected str or module",
                    specifier=specifier,
                    hook=entry.hook,
                )
            current = result

        if current == specifier:
            return None
        logger.debug("[module:hook] %s -> %s", specifier, current)
        return current

    def run_normalizers(self, referrer, specifier):
        """Thread a specifier through every normalizer hook.

        Args:
            referrer: (str | None) Canonical path of the importing module
            specifier: (str) Specifier to normalize

        Returns:
            (str | None) Rewritten specifier, None when no hook changed it

        Raises:
            modload.HookError: A hook raised or returned a non-string
        """
        current = specifier
        for entry in list(self._entries.values()):
            if entry.normalizer is None:
                continue
            result = _call(entry, entry.normalizer, specifier, referrer, current)
            if result is None:
                continue
            if not isinstance(result, str):
                raise modload.HookError(
                    f"normalize hook returned {type(result).__name__}, expected str",
                    specifier=specifier,
                    hook=entry.hook,
                )
            current = result

        if current == specifier:
            return None
        return current


def _call(entry, func, specifier, *args):
    try:
        return func(*args)
    except modload.HookError:
        raise
    except Exception as e:
        raise modload.HookError(
            f"{type(e).__name__} in loader hook: {e}",
            specifier=specifier,
            hook=entry.hook,
        ) from e
