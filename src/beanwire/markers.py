from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

INJECT_MARKER_ATTR = "__beanwire_inject__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class Named(NamedTuple):
    """Qualify an injection point with a registration name.

    Attach ``Named`` metadata to ``typing.Annotated`` so the dependency is
    resolved from the registry entry with that qualifier instead of the
    default one.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Shape: ...


            CircleShape: TypeAlias = Annotated[Shape, Named("circle")]


            class ShapeService:
                @inject
                def __init__(self, circle: CircleShape) -> None:
                    self.circle = circle

    """

    value: str


class InjectedMarker:
    """A marker used to indicate a class attribute should be field-injected.

    Only annotations carrying this marker are touched by field injection.
    """


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a class attribute for field injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.

    Examples:
        .. code-block:: python

            class Report:
                renderer: Injected[Renderer]
                primary: Injected[Annotated[Database, Named("primary")]]
    """

else:

    class Injected:
        """Mark a class attribute for field injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.
        Qualifier metadata from a nested ``Annotated`` is preserved.

        Examples:
            .. code-block:: python

                class Report:
                    renderer: Injected[Renderer]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated((inner, *metadata, InjectedMarker()))
            return build_annotated((item, InjectedMarker()))


def inject(func: F) -> F:
    """Mark a constructor or setter for injection.

    Apply to ``__init__`` or to a classmethod alternative constructor to
    select it during construction, or to a ``set_*`` instance method to have
    it called with its resolved dependency after the instance is built.
    Works above or below ``@classmethod``.

    Args:
        func: Function, classmethod, or staticmethod to mark.

    Returns:
        The same object, marked.

    Examples:
        .. code-block:: python

            class Service:
                @inject
                def __init__(self, repo: Repository) -> None:
                    self.repo = repo

                @inject
                def set_clock(self, clock: Clock) -> None:
                    self.clock = clock

    """
    target = func.__func__ if isinstance(func, (classmethod, staticmethod)) else func
    setattr(target, INJECT_MARKER_ATTR, True)
    return func


def is_inject_marked(member: object) -> bool:
    """Return True when ``member`` (or the function it wraps) carries ``@inject``."""
    if isinstance(member, (classmethod, staticmethod)):
        member = member.__func__
    return getattr(member, INJECT_MARKER_ATTR, False) is True


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    return any(isinstance(item, InjectedMarker) for item in _annotated_metadata(annotation))


def split_qualified_annotation(annotation: Any) -> tuple[Any, str | None]:
    """Split an annotation into its base type and optional ``Named`` qualifier.

    ``Injected`` markers are dropped. When several ``Named`` markers are
    present, the first one wins.
    """
    metadata = _annotated_metadata(annotation)
    if not metadata:
        return annotation, None
    base_type = get_args(annotation)[0]
    qualifier = next((item.value for item in metadata if isinstance(item, Named)), None)
    return base_type, qualifier


def _annotated_metadata(annotation: Any) -> tuple[Any, ...]:
    if get_origin(annotation) is not Annotated:
        return ()
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return ()
    return annotation_args[1:]


def build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


__all__ = [
    "INJECT_MARKER_ATTR",
    "Injected",
    "InjectedMarker",
    "Named",
    "build_annotated",
    "inject",
    "is_inject_marked",
    "is_injected_annotation",
    "split_qualified_annotation",
]
