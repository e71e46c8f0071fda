"""Shared pytest fixtures for beanwire tests."""

import pytest

from beanwire.factory import BeanFactory
from beanwire.introspection import ComponentIntrospector
from beanwire.lock_mode import LockMode
from beanwire.registry import BeanRegistry
from beanwire.settings import ContainerSettings


@pytest.fixture()
def registry() -> BeanRegistry:
    """Empty thread-safe registry."""
    return BeanRegistry()


@pytest.fixture()
def introspector() -> ComponentIntrospector:
    """Permissive introspector (malformed setters are skipped)."""
    return ComponentIntrospector()


@pytest.fixture()
def factory(registry: BeanRegistry, introspector: ComponentIntrospector) -> BeanFactory:
    """Factory over ``registry`` with no declarations."""
    return BeanFactory(registry, introspector=introspector)


@pytest.fixture()
def settings() -> ContainerSettings:
    """Default settings that ignore the process environment."""
    return ContainerSettings(lock_mode=LockMode.THREAD, lock_stripes=16, strict_setters=False)
