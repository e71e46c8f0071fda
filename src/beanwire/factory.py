from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from beanwire.declarations import DEFAULT_QUALIFIER, Declaration
from beanwire.exceptions import (
    BeanInstantiationError,
    CyclicDependencyError,
    InvalidTargetError,
)
from beanwire.introspection import ComponentIntrospector, ComponentMetadata, InjectionPoint
from beanwire.registry import BeanRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ConstructionContext:
    """Track the types under construction within one root ``create_bean`` call.

    A context belongs to a single call chain and is passed down explicitly,
    so unrelated chains (including concurrent ones) never see each other's
    in-flight types.
    """

    _in_flight: list[type[Any]] = field(default_factory=list)

    @property
    def chain(self) -> tuple[type[Any], ...]:
        """Types currently being built, outermost first."""
        return tuple(self._in_flight)

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    @contextmanager
    def constructing(self, component_type: type[Any]) -> Iterator[None]:
        """Mark ``component_type`` as in flight for the duration of the block.

        Raises:
            CyclicDependencyError: If the type is already being built in this chain.

        """
        if component_type in self:
            raise CyclicDependencyError(component_type, (*self._in_flight, component_type))
        self._in_flight.append(component_type)
        try:
            yield
        finally:
            self._in_flight.pop()


class BeanFactory:
    """Build fully wired component instances from declarations.

    Construction selects a constructor, resolves its parameters, registers
    singletons, and then runs field and setter injection. Dependencies are
    looked up in the registry first; a dependency that is missing there but
    has a known declaration is built recursively in the same construction
    context, which is what exposes constructor cycles.
    """

    def __init__(
        self,
        registry: BeanRegistry,
        *,
        declarations: Iterable[Declaration] = (),
        introspector: ComponentIntrospector | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            registry: Registry to read dependencies from and write singletons to.
            declarations: Declarations available for on-demand dependency builds.
            introspector: Metadata extractor; a permissive one is created when omitted.

        """
        self._registry = registry
        self._introspector = introspector if introspector is not None else ComponentIntrospector()
        self._declarations: dict[tuple[type[Any], str], Declaration] = {}
        for declaration in declarations:
            self.add_declaration(declaration)

    @property
    def registry(self) -> BeanRegistry:
        return self._registry

    def add_declaration(self, declaration: Declaration) -> None:
        """Make ``declaration`` available to dependency resolution.

        A later declaration for the same registry key replaces an earlier one.
        """
        key = (declaration.registry_type, declaration.registry_qualifier)
        self._declarations[key] = declaration

    def find_declaration(
        self,
        bean_type: type[Any],
        qualifier: str = DEFAULT_QUALIFIER,
    ) -> Declaration | None:
        """Return the declaration registered for ``(bean_type, qualifier)``, if any."""
        return self._declarations.get((bean_type, qualifier))

    def create_bean(
        self,
        declaration: Declaration,
        context: ConstructionContext | None = None,
    ) -> Any:
        """Return a fully wired instance for ``declaration``.

        Singletons already in the registry are returned without construction.

        Args:
            declaration: Component to build.
            context: In-flight set of the current call chain. A fresh one is
                created for root calls.

        Raises:
            BeanInstantiationError: For any failure, with the original error
                available as ``root_cause``.

        """
        if context is None:
            context = ConstructionContext()

        qualifier = declaration.registry_qualifier
        if declaration.singleton:
            existing = self._registry.find(declaration.registry_type, qualifier)
            if existing is not None:
                logger.debug(
                    "Reusing registered singleton %s (qualifier=%s)",
                    declaration.registry_type.__qualname__,
                    qualifier,
                )
                return existing

        component_type = declaration.component_type
        try:
            with context.constructing(component_type):
                try:
                    return self._build(declaration, context)
                except BeanInstantiationError:
                    raise
                except Exception as error:
                    raise BeanInstantiationError(component_type, error, context.chain) from error
        except CyclicDependencyError as error:
            raise BeanInstantiationError(component_type, error, error.chain) from error

    def _build(self, declaration: Declaration, context: ConstructionContext) -> Any:
        metadata = self._introspector.inspect(declaration.component_type)
        instance = self._instantiate(metadata, context)

        registry_type = declaration.registry_type
        qualifier = declaration.registry_qualifier
        if declaration.singleton:
            # Registered before injection so field/setter cycles can resolve it.
            self._registry.register(registry_type, instance, qualifier)
        try:
            self._inject_fields(instance, metadata, context)
            self._inject_setters(instance, metadata, context)
        except Exception:
            if declaration.singleton:
                self._registry.discard(registry_type, qualifier, instance)
            raise

        logger.debug(
            "Created bean %s (qualifier=%s, singleton=%s)",
            declaration.component_type.__qualname__,
            qualifier,
            declaration.singleton,
        )
        return instance

    def _instantiate(self, metadata: ComponentMetadata, context: ConstructionContext) -> Any:
        constructor = metadata.constructor
        component_type = metadata.component_type
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for point in constructor.parameters:
            value = self._resolve_dependency(point, context)
            if point.positional_only:
                args.append(value)
            else:
                kwargs[point.name] = value

        if constructor.is_init:
            return component_type(*args, **kwargs)

        instance = getattr(component_type, constructor.name)(*args, **kwargs)
        if not isinstance(instance, component_type):
            msg = (
                f"Constructor {component_type.__qualname__}.{constructor.name} returned "
                f"{type(instance).__qualname__}, expected {component_type.__qualname__}."
            )
            raise InvalidTargetError(component_type, constructor.name, msg)
        return instance

    def _inject_fields(
        self,
        instance: Any,
        metadata: ComponentMetadata,
        context: ConstructionContext,
    ) -> None:
        for point in metadata.fields:
            setattr(instance, point.name, self._resolve_dependency(point, context))

    def _inject_setters(
        self,
        instance: Any,
        metadata: ComponentMetadata,
        context: ConstructionContext,
    ) -> None:
        for point in metadata.setters:
            getattr(instance, point.member)(self._resolve_dependency(point, context))

    def _resolve_dependency(self, point: InjectionPoint, context: ConstructionContext) -> Any:
        qualifier = point.qualifier if point.qualifier is not None else DEFAULT_QUALIFIER
        instance = self._registry.find(point.dependency_type, qualifier)
        if instance is not None:
            return instance

        declaration = self.find_declaration(point.dependency_type, qualifier)
        if declaration is not None:
            return self.create_bean(declaration, context)

        # Raises BeanNotFoundError unless registered concurrently.
        return self._registry.resolve(point.dependency_type, qualifier)


__all__ = ["BeanFactory", "ConstructionContext"]
