from __future__ import annotations

import pytest

from beanwire.container import Container
from beanwire.declarations import Declaration
from beanwire.lock_mode import LockMode
from beanwire.registry import DEFAULT_LOCK_STRIPES, BeanRegistry
from beanwire.settings import ContainerSettings


@pytest.fixture()
def beanwire_registry() -> BeanRegistry:
    """Provide an empty, thread-safe registry for each test."""
    return BeanRegistry(lock_mode=LockMode.THREAD)


@pytest.fixture()
def beanwire_declarations() -> list[Declaration]:
    """Declarations used by ``beanwire_container``.

    Override this fixture in a test module or ``conftest.py`` to choose the
    components under test.

    """
    return []


@pytest.fixture()
def beanwire_settings() -> ContainerSettings:
    """Container settings isolated from ``BEANWIRE_*`` environment variables."""
    return ContainerSettings(
        lock_mode=LockMode.THREAD,
        lock_stripes=DEFAULT_LOCK_STRIPES,
        strict_setters=False,
    )


@pytest.fixture()
def beanwire_container(
    beanwire_declarations: list[Declaration],
    beanwire_registry: BeanRegistry,
    beanwire_settings: ContainerSettings,
) -> Container:
    """Return a refreshed container built from ``beanwire_declarations``."""
    container = Container(
        beanwire_declarations,
        registry=beanwire_registry,
        settings=beanwire_settings,
    )
    container.refresh()
    return container
