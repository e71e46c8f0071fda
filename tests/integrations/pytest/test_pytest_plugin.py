from __future__ import annotations

import pytest

from beanwire.container import Container
from beanwire.declarations import Declaration
from beanwire.markers import inject
from beanwire.registry import BeanRegistry
from beanwire.settings import ContainerSettings

pytest_plugins = ["beanwire.integrations.pytest_plugin"]


class Clock:
    pass


class Scheduler:
    @inject
    def __init__(self, clock: Clock) -> None:
        self.clock = clock


@pytest.fixture()
def beanwire_declarations() -> list[Declaration]:
    return [Declaration(Clock), Declaration(Scheduler)]


def test_container_fixture_is_refreshed(beanwire_container: Container) -> None:
    """beanwire_container is refreshed from beanwire_declarations."""
    scheduler = beanwire_container.get_bean(Scheduler)

    assert beanwire_container.refreshed
    assert scheduler.clock is beanwire_container.get_bean(Clock)


def test_container_uses_registry_fixture(
    beanwire_container: Container,
    beanwire_registry: BeanRegistry,
) -> None:
    """beanwire_container writes to beanwire_registry."""
    assert beanwire_container.registry is beanwire_registry
    assert beanwire_registry.contains_bean(Scheduler)


def test_settings_fixture_ignores_environment(
    monkeypatch: pytest.MonkeyPatch,
    beanwire_settings: ContainerSettings,
) -> None:
    """beanwire_settings does not read BEANWIRE_ variables."""
    monkeypatch.setenv("BEANWIRE_STRICT_SETTERS", "true")

    assert beanwire_settings.strict_setters is False
