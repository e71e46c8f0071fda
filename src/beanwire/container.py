from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any, TypeVar

from beanwire.declarations import DEFAULT_QUALIFIER, Declaration
from beanwire.factory import BeanFactory
from beanwire.introspection import ComponentIntrospector
from beanwire.registry import BeanRegistry
from beanwire.scanner import ComponentScanner
from beanwire.settings import ContainerSettings

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Container:
    """Build singleton components once and answer lookups from the registry.

    ``refresh`` constructs every singleton declaration exactly once, even when
    called concurrently. Lookups go straight to the registry, so transient
    components are never returned by ``get_bean``; they are only built as
    dependencies of other components.

    A failing ``refresh`` propagates the first construction error. Singletons
    built before the failure stay registered and the container is not
    refreshed again.

    Declarations are built in order. A cycle broken by field or setter
    injection only resolves when the singleton that owns the injected field is
    built first; if the class whose constructor needs it comes first, the
    build fails with ``CyclicDependencyError`` as the root cause.
    """

    def __init__(
        self,
        declarations: Iterable[Declaration] = (),
        *,
        registry: BeanRegistry | None = None,
        settings: ContainerSettings | None = None,
    ) -> None:
        """Initialize a container.

        Args:
            declarations: Components to manage, usually from ``ComponentScanner``.
            registry: Registry to populate; one is created from ``settings``
                when omitted.
            settings: Container configuration; read from the environment when
                omitted.

        Examples:
            .. code-block:: python

                container = Container.from_package("myapp.services")
                container.refresh()
                service = container.get_bean(OrderService)

        """
        self._settings = settings if settings is not None else ContainerSettings()
        self._registry = (
            registry
            if registry is not None
            else BeanRegistry(
                lock_mode=self._settings.lock_mode,
                lock_stripes=self._settings.lock_stripes,
            )
        )
        self._declarations = tuple(declarations)
        self._factory = BeanFactory(
            self._registry,
            declarations=self._declarations,
            introspector=ComponentIntrospector(strict_setters=self._settings.strict_setters),
        )
        self._refresh_lock = threading.Lock()
        self._refreshed = False

    @classmethod
    def from_package(cls, base_package: str, **kwargs: Any) -> Container:
        """Create a container for every ``@component`` class under ``base_package``.

        Args:
            base_package: Dotted name of the package to scan.
            **kwargs: Forwarded to the ``Container`` constructor.

        """
        return cls(ComponentScanner(base_package).scan(), **kwargs)

    @property
    def declarations(self) -> tuple[Declaration, ...]:
        return self._declarations

    @property
    def registry(self) -> BeanRegistry:
        return self._registry

    @property
    def factory(self) -> BeanFactory:
        return self._factory

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    @property
    def refreshed(self) -> bool:
        return self._refreshed

    def refresh(self) -> None:
        """Construct every singleton declaration, once.

        Later calls, including concurrent ones that lose the race, are no-ops.

        Raises:
            BeanInstantiationError: If a singleton cannot be built.

        """
        with self._refresh_lock:
            if self._refreshed:
                return
            # One-shot even on failure; partially built singletons are kept.
            self._refreshed = True
            singletons = [declaration for declaration in self._declarations if declaration.singleton]
            logger.info("Refreshing container: %d singleton declaration(s)", len(singletons))
            for declaration in singletons:
                self._factory.create_bean(declaration)
            logger.info("Container refreshed: %d bean type(s) registered", len(self._registry))

    def get_bean(self, bean_type: type[T], qualifier: str = DEFAULT_QUALIFIER) -> T:
        """Return the registered instance for ``(bean_type, qualifier)``.

        Raises:
            BeanNotFoundError: If nothing is registered under the key.

        """
        return self._registry.resolve(bean_type, qualifier)

    def contains_bean(self, bean_type: Any, qualifier: str = DEFAULT_QUALIFIER) -> bool:
        """Return whether an instance is registered under ``(bean_type, qualifier)``."""
        return self._registry.contains_bean(bean_type, qualifier)


__all__ = ["Container"]
