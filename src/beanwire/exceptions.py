from __future__ import annotations

from typing import Any


class BeanwireError(Exception):
    """Represent a base class for all beanwire-specific failures.

    Catch this type when you want to handle any beanwire error path without
    matching each concrete exception class individually.
    """


class InvalidArgumentError(BeanwireError, ValueError):
    """Signal a missing required argument.

    Raised by ``BeanRegistry`` operations when a type, qualifier, or instance
    is ``None``, and by ``Declaration`` when ``component_type`` is not a class.
    This always points at a caller bug.
    """


class BeanNotFoundError(BeanwireError, LookupError):
    """Signal that a registry lookup found no matching entry.

    Raised by ``BeanRegistry.resolve`` and ``Container.get_bean`` when the type
    has no registrations, or when it has registrations but none under the
    requested qualifier.

    Typical fix is registering or declaring the missing dependency before the
    component that needs it is built.
    """

    def __init__(self, component_type: Any, qualifier: str) -> None:
        self.component_type = component_type
        self.qualifier = qualifier
        type_name = _type_name(component_type)
        super().__init__(f"No bean of type {type_name} registered with qualifier '{qualifier}'.")


class BeanDefinitionError(BeanwireError):
    """Signal a structural defect in a component class.

    Subclasses describe which part of the class cannot be used for injection.
    Structural defects are fatal for the component; fix the class definition.
    """

    def __init__(self, component_type: Any, message: str) -> None:
        self.component_type = component_type
        super().__init__(message)


class AmbiguousConstructorError(BeanDefinitionError):
    """Signal more than one constructor marked with ``@inject``.

    Typical fix is keeping ``@inject`` on exactly one of ``__init__`` and the
    alternative classmethod constructors.
    """


class NoViableConstructorError(BeanDefinitionError):
    """Signal that no constructor can be selected.

    Raised when no constructor is marked with ``@inject`` and ``__init__``
    requires arguments.

    Typical fixes are marking ``__init__`` with ``@inject`` or giving every
    ``__init__`` parameter a default value.
    """


class InvalidTargetError(BeanDefinitionError):
    """Signal an injection point that violates structural rules.

    Raised for ``Injected`` fields declared ``Final`` or ``ClassVar``, for
    constructor or setter parameters without a usable type annotation, and for
    malformed ``@inject`` setters when strict setter mode is enabled.
    """

    def __init__(self, component_type: Any, target: str, message: str) -> None:
        self.target = target
        super().__init__(component_type, message)


class CyclicDependencyError(BeanDefinitionError):
    """Signal a construction chain that revisits a type already being built.

    ``chain`` lists the types under construction, outermost first, ending
    with the revisited type.

    Typical fixes are breaking the cycle with field or setter injection on a
    singleton, or restructuring the dependency graph.
    """

    def __init__(self, component_type: Any, chain: tuple[type[Any], ...]) -> None:
        self.chain = chain
        path = " -> ".join(_type_name(item) for item in chain)
        super().__init__(
            component_type,
            f"Cyclic dependency detected for bean {_type_name(component_type)}: {path}.",
        )


class BeanInstantiationError(BeanwireError):
    """Wrap any failure that escapes ``BeanFactory.create_bean``.

    ``component_type`` is the type whose construction failed first,
    ``chain`` is the in-flight construction chain at that point, and
    ``root_cause`` is the underlying exception (also chained as
    ``__cause__``). Match on ``type(error.root_cause)`` to tell a missing
    dependency (``BeanNotFoundError``) apart from a structural defect
    (``BeanDefinitionError`` subclasses) or a failure raised by user code.
    """

    def __init__(
        self,
        component_type: Any,
        root_cause: BaseException,
        chain: tuple[type[Any], ...] = (),
    ) -> None:
        self.component_type = component_type
        self.root_cause = root_cause
        self.chain = chain
        super().__init__(
            f"Unable to instantiate bean of type {_type_name(component_type)}: {root_cause}",
        )


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", repr(value))


__all__ = [
    "AmbiguousConstructorError",
    "BeanDefinitionError",
    "BeanInstantiationError",
    "BeanNotFoundError",
    "BeanwireError",
    "CyclicDependencyError",
    "InvalidArgumentError",
    "InvalidTargetError",
    "NoViableConstructorError",
]
