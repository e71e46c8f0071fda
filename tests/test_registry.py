"""Tests for BeanRegistry."""

import pytest

from beanwire.declarations import DEFAULT_QUALIFIER
from beanwire.exceptions import BeanNotFoundError, InvalidArgumentError
from beanwire.lock_mode import LockMode
from beanwire.registry import BeanRegistry


class Shape:
    pass


class Circle(Shape):
    pass


class Rectangle(Shape):
    pass


class TestRegisterAndResolve:
    def test_register_with_qualifier_then_resolve_returns_same_instance(
        self,
        registry: BeanRegistry,
    ) -> None:
        """Resolve returns the identical instance registered under a qualifier."""
        instance = Rectangle()

        registry.register(Shape, instance, "foobar")

        assert registry.contains_bean(Shape, "foobar")
        assert registry.resolve(Shape, "foobar") is instance

    def test_register_without_qualifier_uses_default(self, registry: BeanRegistry) -> None:
        """Registering without a qualifier uses the default one."""
        instance = Circle()

        registry.register(Shape, instance)

        assert registry.resolve(Shape) is instance
        assert registry.resolve(Shape, DEFAULT_QUALIFIER) is instance
        assert registry.get_qualifiers(Shape) == {DEFAULT_QUALIFIER}

    def test_second_default_registration_replaces_first(self, registry: BeanRegistry) -> None:
        """Re-registering a key replaces the previous instance."""
        first = Circle()
        second = Rectangle()

        registry.register(Shape, first)
        registry.register(Shape, second)

        assert registry.resolve(Shape) is second
        assert len(registry) == 1

    def test_types_are_compared_by_identity_not_subtype(self, registry: BeanRegistry) -> None:
        """A subclass registration does not satisfy its base type."""
        registry.register(Circle, Circle())

        assert not registry.contains_bean(Shape)
        with pytest.raises(BeanNotFoundError):
            registry.resolve(Shape)

    def test_find_returns_none_for_missing_entry(self, registry: BeanRegistry) -> None:
        """find returns None instead of raising."""
        instance = Circle()
        registry.register(Shape, instance, "circle")

        assert registry.find(Shape, "circle") is instance
        assert registry.find(Shape, "square") is None
        assert registry.find(Rectangle) is None


class TestInvalidArguments:
    @pytest.mark.parametrize(
        ("bean_type", "instance", "qualifier"),
        [
            (None, Rectangle(), "foobar"),
            (Shape, None, "foobar"),
            (Shape, Rectangle(), None),
        ],
    )
    def test_register_rejects_none(
        self,
        registry: BeanRegistry,
        bean_type: type[Shape] | None,
        instance: Shape | None,
        qualifier: str | None,
    ) -> None:
        """None arguments to register are rejected."""
        with pytest.raises(InvalidArgumentError):
            registry.register(bean_type, instance, qualifier)  # type: ignore[arg-type]

    def test_lookups_reject_none_type(self, registry: BeanRegistry) -> None:
        """Lookups reject a None type."""
        with pytest.raises(InvalidArgumentError):
            registry.resolve(None)  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            registry.contains_bean(None)
        with pytest.raises(InvalidArgumentError):
            registry.deregister(None)
        with pytest.raises(InvalidArgumentError):
            registry.get_qualifiers(None)

    def test_lookups_reject_none_qualifier(self, registry: BeanRegistry) -> None:
        """Lookups reject a None qualifier."""
        with pytest.raises(InvalidArgumentError):
            registry.resolve(Shape, None)  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            registry.contains_bean(Shape, None)  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            registry.deregister(Shape, None)  # type: ignore[arg-type]

    def test_invalid_argument_is_a_value_error(self, registry: BeanRegistry) -> None:
        """InvalidArgumentError is a ValueError."""
        with pytest.raises(ValueError, match="must not be None"):
            registry.register(Shape, None)

    def test_lock_stripes_must_be_positive(self) -> None:
        """At least one lock stripe is required."""
        with pytest.raises(InvalidArgumentError):
            BeanRegistry(lock_stripes=0)


class TestNotFound:
    def test_resolve_unregistered_type_raises(self, registry: BeanRegistry) -> None:
        """Resolving an unknown type raises BeanNotFoundError."""
        with pytest.raises(BeanNotFoundError) as exc_info:
            registry.resolve(Shape)

        assert exc_info.value.component_type is Shape
        assert exc_info.value.qualifier == DEFAULT_QUALIFIER
        assert "Shape" in str(exc_info.value)

    def test_resolve_unregistered_qualifier_raises(self, registry: BeanRegistry) -> None:
        """Resolving an unknown qualifier raises BeanNotFoundError."""
        registry.register(Shape, Circle(), "circle")

        with pytest.raises(BeanNotFoundError) as exc_info:
            registry.resolve(Shape, "square")

        assert exc_info.value.qualifier == "square"

    def test_contains_bean_returns_false_instead_of_raising(self, registry: BeanRegistry) -> None:
        """contains_bean answers False for missing entries."""
        registry.register(Shape, Circle(), "circle")

        assert registry.contains_bean(Shape, "square") is False
        assert registry.contains_bean(Shape) is False
        assert registry.contains_bean(Rectangle) is False

    def test_not_found_is_a_lookup_error(self, registry: BeanRegistry) -> None:
        """BeanNotFoundError is a LookupError."""
        with pytest.raises(LookupError):
            registry.resolve(Shape)


class TestQualifiersAndDeregister:
    def test_get_qualifiers_of_unknown_type_is_empty(self, registry: BeanRegistry) -> None:
        """An unknown type has no qualifiers."""
        assert registry.get_qualifiers(Shape) == frozenset()

    def test_get_qualifiers_returns_immutable_snapshot(self, registry: BeanRegistry) -> None:
        """get_qualifiers returns a frozen snapshot."""
        registry.register(Shape, Circle(), "circle")
        snapshot = registry.get_qualifiers(Shape)

        registry.register(Shape, Rectangle(), "rectangle")

        assert snapshot == {"circle"}
        assert isinstance(snapshot, frozenset)
        assert registry.get_qualifiers(Shape) == {"circle", "rectangle"}

    def test_deregister_keeps_sibling_qualifier(self, registry: BeanRegistry) -> None:
        """Deregistering one qualifier keeps its siblings."""
        rectangle = Rectangle()
        registry.register(Shape, Circle(), "circle")
        registry.register(Shape, rectangle, "rectangle")

        registry.deregister(Shape, "circle")

        assert not registry.contains_bean(Shape, "circle")
        assert registry.resolve(Shape, "rectangle") is rectangle

    def test_deregister_last_qualifier_collapses_type(self, registry: BeanRegistry) -> None:
        """Removing the last qualifier removes the type."""
        registry.register(Shape, Circle(), "circle")
        registry.register(Shape, Rectangle())

        registry.deregister(Shape, "circle")
        registry.deregister(Shape)

        assert registry.get_qualifiers(Shape) == frozenset()
        assert Shape not in registry.registered_types()
        assert len(registry) == 0

    def test_deregister_missing_entry_is_noop(self, registry: BeanRegistry) -> None:
        """Deregistering a missing entry does nothing."""
        registry.register(Shape, Circle(), "circle")

        registry.deregister(Shape, "square")
        registry.deregister(Rectangle)

        assert registry.get_qualifiers(Shape) == {"circle"}

    def test_discard_only_removes_matching_instance(self, registry: BeanRegistry) -> None:
        """discard leaves a newer registration in place."""
        original = Circle()
        replacement = Circle()
        registry.register(Shape, original)
        registry.register(Shape, replacement)

        assert registry.discard(Shape, DEFAULT_QUALIFIER, original) is False
        assert registry.resolve(Shape) is replacement
        assert registry.discard(Shape, DEFAULT_QUALIFIER, replacement) is True
        assert registry.get_qualifiers(Shape) == frozenset()


def test_lock_mode_none_behaves_like_thread_mode() -> None:
    """LockMode.NONE keeps the same registry semantics."""
    registry = BeanRegistry(lock_mode=LockMode.NONE)
    instance = Circle()

    registry.register(Shape, instance, "circle")

    assert registry.lock_mode is LockMode.NONE
    assert registry.resolve(Shape, "circle") is instance
    registry.deregister(Shape, "circle")
    assert registry.get_qualifiers(Shape) == frozenset()
