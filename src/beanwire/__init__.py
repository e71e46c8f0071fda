from beanwire.container import Container
from beanwire.declarations import DEFAULT_QUALIFIER, Declaration, component, declaration_of
from beanwire.exceptions import (
    AmbiguousConstructorError,
    BeanDefinitionError,
    BeanInstantiationError,
    BeanNotFoundError,
    BeanwireError,
    CyclicDependencyError,
    InvalidArgumentError,
    InvalidTargetError,
    NoViableConstructorError,
)
from beanwire.factory import BeanFactory, ConstructionContext
from beanwire.introspection import ComponentIntrospector, InjectionPointKind
from beanwire.lock_mode import LockMode
from beanwire.markers import Injected, Named, inject
from beanwire.registry import BeanRegistry
from beanwire.scanner import ComponentScanner
from beanwire.settings import ContainerSettings

__all__ = [
    "DEFAULT_QUALIFIER",
    "AmbiguousConstructorError",
    "BeanDefinitionError",
    "BeanFactory",
    "BeanInstantiationError",
    "BeanNotFoundError",
    "BeanRegistry",
    "BeanwireError",
    "ComponentIntrospector",
    "ComponentScanner",
    "ConstructionContext",
    "Container",
    "ContainerSettings",
    "CyclicDependencyError",
    "Declaration",
    "InjectionPointKind",
    "Injected",
    "InvalidArgumentError",
    "InvalidTargetError",
    "LockMode",
    "Named",
    "NoViableConstructorError",
    "component",
    "declaration_of",
    "inject",
]
