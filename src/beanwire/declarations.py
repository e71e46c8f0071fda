from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, overload

from beanwire.exceptions import InvalidArgumentError

C = TypeVar("C", bound=type[Any])

DEFAULT_QUALIFIER = "__default__"
"""Qualifier used when a registration or injection point names none."""

DECLARATION_ATTR = "__beanwire_component__"


@dataclass(frozen=True, slots=True)
class Declaration:
    """Describe one managed component, as produced by scanning.

    Attributes:
        component_type: Class to instantiate.
        singleton: Register the built instance and reuse it for later
            resolutions. Transient components are built on every request.
        qualifier: Registration name, or ``None`` for the default qualifier.
        provides: Registry key type. Defaults to ``component_type``; set it to
            an interface or base class to register the implementation under it.

    """

    component_type: type[Any]
    singleton: bool = True
    qualifier: str | None = None
    provides: type[Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.component_type, type):
            msg = f"Declaration component_type must be a class, got {self.component_type!r}."
            raise InvalidArgumentError(msg)
        if self.provides is not None and not isinstance(self.provides, type):
            msg = f"Declaration provides must be a class, got {self.provides!r}."
            raise InvalidArgumentError(msg)

    @property
    def registry_type(self) -> type[Any]:
        """Type the instance is registered and looked up under."""
        return self.provides if self.provides is not None else self.component_type

    @property
    def registry_qualifier(self) -> str:
        """Qualifier normalized for registry access."""
        return self.qualifier if self.qualifier is not None else DEFAULT_QUALIFIER


@overload
def component(
    cls: C,
    *,
    singleton: bool = True,
    qualifier: str | None = None,
    provides: type[Any] | None = None,
) -> C: ...


@overload
def component(
    cls: None = None,
    *,
    singleton: bool = True,
    qualifier: str | None = None,
    provides: type[Any] | None = None,
) -> Callable[[C], C]: ...


def component(
    cls: C | None = None,
    *,
    singleton: bool = True,
    qualifier: str | None = None,
    provides: type[Any] | None = None,
) -> C | Callable[[C], C]:
    """Declare a class as a managed component for ``ComponentScanner``.

    The declaration is stored on the class itself; nothing is built until a
    container is refreshed.

    Args:
        cls: Class to declare, or ``None`` when used with arguments.
        singleton: Register one shared instance instead of building a new one
            per request.
        qualifier: Optional registration name.
        provides: Optional registry key type, such as an interface.

    Returns:
        The class in bare form, or a decorator when called with arguments.

    Examples:
        .. code-block:: python

            @component
            class Clock: ...


            @component(qualifier="circle", provides=Shape)
            class Circle(Shape): ...

    """

    def decorator(decorated: C) -> C:
        declaration = Declaration(
            component_type=decorated,
            singleton=singleton,
            qualifier=qualifier,
            provides=provides,
        )
        setattr(decorated, DECLARATION_ATTR, declaration)
        return decorated

    if cls is None:
        return decorator
    return decorator(cls)


def declaration_of(cls: type[Any]) -> Declaration | None:
    """Return the declaration stored on ``cls`` by ``@component``, if any.

    Only the class's own namespace is checked, so subclasses of a component
    are not components unless decorated themselves.
    """
    declaration = vars(cls).get(DECLARATION_ATTR)
    if isinstance(declaration, Declaration):
        return declaration
    return None


__all__ = [
    "DECLARATION_ATTR",
    "DEFAULT_QUALIFIER",
    "Declaration",
    "component",
    "declaration_of",
]
