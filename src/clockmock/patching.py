"""
Call-site overrides.

Python code reaches a time surface either through its owner module
(``time.time()``) or through a name it imported earlier
(``from time import time``). Overriding a surface therefore means rebinding
the owner module attribute and, optionally, every module-level name that
still points at the genuine object. Each rebinding is a
``unittest.mock.patch.object`` handle that knows how to undo itself; value
types also register ``copyreg`` reducers the same way.
"""

import copyreg
import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any
from unittest import mock


logger = logging.getLogger(__name__)

# Modules of this package keep references to the genuine objects and must
# never be rebound.
OWN_PACKAGE = "clockmock"


class CallSiteOverride:
    """Handle for one rebound module or class attribute."""

    def __init__(self, target: ModuleType | type, attribute: str, replacement: Any):
        self.target = target
        self.attribute = attribute
        self._patcher = mock.patch.object(target, attribute, replacement)

    def install(self) -> None:
        self._patcher.start()

    def undo(self) -> None:
        self._patcher.stop()

    def __repr__(self) -> str:
        return f"CallSiteOverride({self.target.__name__}.{self.attribute})"


class ReducerOverride:
    """
    Handle for one ``copyreg`` pickling reducer.

    While ``datetime.datetime`` is replaced, pickle can no longer find the
    genuine class under its own name. Registering a reducer for the genuine
    type lets such values be pickled through the stand-in instead.
    """

    _MISSING = object()

    def __init__(self, cls: type, reducer: Any):
        self.cls = cls
        self.reducer = reducer
        self._previous = self._MISSING
        self._installed = False

    def install(self) -> None:
        self._previous = copyreg.dispatch_table.get(self.cls, self._MISSING)
        copyreg.pickle(self.cls, self.reducer)
        self._installed = True

    def undo(self) -> None:
        if not self._installed:
            return
        if self._previous is self._MISSING:
            copyreg.dispatch_table.pop(self.cls, None)
        else:
            copyreg.dispatch_table[self.cls] = self._previous
        self._installed = False

    def __repr__(self) -> str:
        return f"ReducerOverride({self.cls.__module__}.{self.cls.__qualname__})"


@dataclass
class SurfaceBinding:
    """
    The overrides that together install one surface adapter.

    Attributes:
        surface: Name of the surface (e.g. "time.time")
        adapter: The installed replacement
        overrides: Call-site handles, in installation order
    """

    surface: str
    adapter: Any
    overrides: list[CallSiteOverride | ReducerOverride] = field(default_factory=list)

    def install(self) -> None:
        for override in self.overrides:
            override.install()

    def uninstall(self) -> None:
        """Undo every override; an override that fails stays recorded for a retry."""
        while self.overrides:
            self.overrides[-1].undo()
            self.overrides.pop()


def is_ignored(module_name: str, ignore: Iterable[str]) -> bool:
    """Return True if ``module_name`` is, or lives under, one of the ``ignore`` prefixes."""
    for prefix in ignore:
        if module_name == prefix or module_name.startswith(prefix + "."):
            return True
    return False


def find_call_sites(
    originals: Sequence[Any],
    ignore: Iterable[str] = (),
) -> dict[int, list[tuple[ModuleType, str]]]:
    """
    Scan loaded modules for module-level names bound to any of ``originals``.

    Args:
        originals: Genuine objects to look for (compared by identity)
        ignore: Module-name prefixes to skip

    Returns:
        Mapping of ``id(original)`` to the (module, attribute) pairs referencing it
    """
    ignore = tuple(ignore) + (OWN_PACKAGE,)
    wanted = {id(original): original for original in originals}
    sites: dict[int, list[tuple[ModuleType, str]]] = {key: [] for key in wanted}

    for module_name, module in list(sys.modules.items()):
        if module is None or not isinstance(module, ModuleType):
            continue
        if is_ignored(module_name, ignore):
            continue
        try:
            namespace = vars(module)
        except TypeError:
            continue

        for attribute, value in list(namespace.items()):
            key = id(value)
            if key in wanted and wanted[key] is value:
                sites[key].append((module, attribute))

    found = sum(len(pairs) for pairs in sites.values())
    logger.debug(f"Found {found} call sites across {len(sys.modules)} loaded modules")
    return sites
