from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from beanwire.declarations import Declaration, declaration_of

logger = logging.getLogger(__name__)


class ComponentScanner:
    """Discover ``@component`` classes under a package tree.

    The base package and every submodule below it are imported. Import
    errors propagate to the caller.
    """

    def __init__(self, base_package: str) -> None:
        self._base_package = base_package

    @property
    def base_package(self) -> str:
        return self._base_package

    def scan(self) -> list[Declaration]:
        """Return declarations in module-name order, then definition order."""
        declarations: list[Declaration] = []
        for module in self._iter_modules():
            declarations.extend(self._scan_module(module))
        logger.debug(
            "Scanned %s: found %d component declaration(s)",
            self._base_package,
            len(declarations),
        )
        return declarations

    def _iter_modules(self) -> list[ModuleType]:
        package = importlib.import_module(self._base_package)
        modules = [package]
        search_path = getattr(package, "__path__", None)
        if search_path is None:
            return modules

        names = sorted(
            module_info.name
            for module_info in pkgutil.walk_packages(search_path, prefix=f"{package.__name__}.")
        )
        modules.extend(importlib.import_module(name) for name in names)
        return modules

    def _scan_module(self, module: ModuleType) -> list[Declaration]:
        declarations: list[Declaration] = []
        for candidate in vars(module).values():
            if not inspect.isclass(candidate) or candidate.__module__ != module.__name__:
                continue
            declaration = declaration_of(candidate)
            if declaration is not None:
                declarations.append(declaration)
        return declarations


__all__ = ["ComponentScanner"]
