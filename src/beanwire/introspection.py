from __future__ import annotations

import dataclasses
import inspect
import logging
import re
import sys
import threading
from dataclasses import dataclass
from enum import Enum, auto
from inspect import Parameter
from typing import (
    Annotated,
    Any,
    ClassVar,
    Final,
    ForwardRef,
    get_args,
    get_origin,
    get_type_hints,
)

from beanwire.exceptions import (
    AmbiguousConstructorError,
    InvalidTargetError,
    NoViableConstructorError,
)
from beanwire.markers import (
    build_annotated,
    is_inject_marked,
    is_injected_annotation,
    split_qualified_annotation,
)

if sys.version_info >= (3, 14):
    import annotationlib

logger = logging.getLogger(__name__)

INIT_METHOD_NAME = "__init__"
SETTER_PREFIX = "set_"
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_MISSING_ANNOTATION: Any = object()
_INJECTED_NAME = re.compile(r"\bInjected\b")


class InjectionPointKind(Enum):
    """Kind of place a dependency is delivered to."""

    CONSTRUCTOR = auto()
    """A parameter of the selected constructor."""

    FIELD = auto()
    """A class attribute annotated with ``Injected[...]``."""

    SETTER = auto()
    """The single parameter of an ``@inject`` ``set_*`` method."""


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """Describe one dependency of a component.

    Attributes:
        kind: Where the dependency is delivered.
        member: Name of the constructor, field, or setter owning the point.
        name: Parameter name, or the field name for field points.
        dependency_type: Registry key type to resolve.
        qualifier: ``Named`` qualifier, or ``None`` for the default one.
        positional_only: Pass the value positionally when calling the member.

    """

    kind: InjectionPointKind
    member: str
    name: str
    dependency_type: Any
    qualifier: str | None = None
    positional_only: bool = False


@dataclass(frozen=True, slots=True)
class SelectedConstructor:
    """The constructor chosen for a component and its parameter injection points."""

    name: str
    parameters: tuple[InjectionPoint, ...]

    @property
    def is_init(self) -> bool:
        return self.name == INIT_METHOD_NAME


@dataclass(frozen=True, slots=True)
class ComponentMetadata:
    """Everything the construction engine needs to know about a class."""

    component_type: type[Any]
    constructor: SelectedConstructor
    fields: tuple[InjectionPoint, ...]
    setters: tuple[InjectionPoint, ...]

    @property
    def injection_points(self) -> tuple[InjectionPoint, ...]:
        return (*self.constructor.parameters, *self.fields, *self.setters)


class ComponentIntrospector:
    """Extract constructor, field, and setter injection points from classes.

    Results are cached per class. Structural defects raise
    ``BeanDefinitionError`` subclasses before any instance exists, so the
    construction engine never builds an object it cannot fully wire.
    """

    def __init__(self, *, strict_setters: bool = False) -> None:
        """Initialize the introspector.

        Args:
            strict_setters: Raise ``InvalidTargetError`` for ``@inject`` methods
                that are not valid setters instead of skipping them.

        """
        self._strict_setters = strict_setters
        self._cache: dict[type[Any], ComponentMetadata] = {}
        self._lock = threading.Lock()

    @property
    def strict_setters(self) -> bool:
        return self._strict_setters

    def inspect(self, component_type: type[Any]) -> ComponentMetadata:
        """Return the injection metadata of ``component_type``.

        Args:
            component_type: Class to inspect.

        Raises:
            AmbiguousConstructorError: If several constructors are marked.
            NoViableConstructorError: If no constructor can be selected.
            InvalidTargetError: If an injection point is malformed.

        """
        cached = self._cache.get(component_type)
        if cached is not None:
            return cached

        members = _class_members(component_type)
        fields = self._extract_fields(component_type)
        setters = self._extract_setters(component_type, members)
        metadata = ComponentMetadata(
            component_type=component_type,
            constructor=self._select_constructor(component_type, members),
            fields=fields,
            setters=setters,
        )
        with self._lock:
            return self._cache.setdefault(component_type, metadata)

    def _select_constructor(
        self,
        component_type: type[Any],
        members: dict[str, Any],
    ) -> SelectedConstructor:
        init = members.get(INIT_METHOD_NAME, object.__init__)
        marked = [INIT_METHOD_NAME] if is_inject_marked(init) else []
        marked.extend(
            name
            for name, member in members.items()
            if isinstance(member, classmethod) and is_inject_marked(member)
        )

        if len(marked) > 1:
            names = ", ".join(marked)
            msg = (
                f"Multiple constructors marked with @inject found in "
                f"{component_type.__qualname__}: {names}. Keep @inject on exactly one."
            )
            raise AmbiguousConstructorError(component_type, msg)

        if marked:
            name = marked[0]
            function = init if name == INIT_METHOD_NAME else members[name].__func__
            return SelectedConstructor(
                name=name,
                parameters=self._constructor_parameters(component_type, name, function),
            )

        if self._accepts_no_arguments(init):
            return SelectedConstructor(name=INIT_METHOD_NAME, parameters=())

        msg = (
            f"No suitable constructor found for {component_type.__qualname__}. "
            "Mark one constructor with @inject or give every __init__ parameter a default."
        )
        raise NoViableConstructorError(component_type, msg)

    def _constructor_parameters(
        self,
        component_type: type[Any],
        member_name: str,
        function: Any,
    ) -> tuple[InjectionPoint, ...]:
        annotations = self._resolved_type_hints(component_type, member_name, function)
        points: list[InjectionPoint] = []
        for parameter in _bound_parameters(function):
            if parameter.kind in _VARIADIC_KINDS:
                continue
            annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION:
                if parameter.default is not Parameter.empty:
                    continue
                msg = (
                    f"Unable to infer dependency for required parameter '{parameter.name}' "
                    f"of {component_type.__qualname__}.{member_name}. Add a type annotation."
                )
                raise InvalidTargetError(component_type, member_name, msg)
            dependency_type, qualifier = split_qualified_annotation(annotation)
            points.append(
                InjectionPoint(
                    kind=InjectionPointKind.CONSTRUCTOR,
                    member=member_name,
                    name=parameter.name,
                    dependency_type=dependency_type,
                    qualifier=qualifier,
                    positional_only=parameter.kind is Parameter.POSITIONAL_ONLY,
                ),
            )
        return tuple(points)

    def _extract_fields(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        points: list[InjectionPoint] = []
        for field_name, (owner, raw_annotation) in _field_annotations(component_type).items():
            try:
                hint = _evaluate_field_annotation(owner, field_name, raw_annotation)
            except (AttributeError, NameError, SyntaxError, TypeError) as error:
                if not _looks_injected(raw_annotation):
                    logger.debug(
                        "Ignoring unresolvable annotation %s.%s: %s",
                        component_type.__qualname__,
                        field_name,
                        error,
                    )
                    continue
                msg = (
                    f"Unable to resolve Injected field annotation "
                    f"{component_type.__qualname__}.{field_name}: {error}"
                )
                raise InvalidTargetError(component_type, field_name, msg) from error

            annotation, qualifiers = _strip_field_qualifiers(hint)
            if not is_injected_annotation(annotation):
                continue
            self._validate_field(component_type, field_name, qualifiers)
            dependency_type, qualifier = split_qualified_annotation(annotation)
            points.append(
                InjectionPoint(
                    kind=InjectionPointKind.FIELD,
                    member=field_name,
                    name=field_name,
                    dependency_type=dependency_type,
                    qualifier=qualifier,
                ),
            )
        return tuple(points)

    def _validate_field(
        self,
        component_type: type[Any],
        field_name: str,
        qualifiers: set[Any],
    ) -> None:
        if ClassVar in qualifiers:
            msg = f"Cannot inject into class-level field: {component_type.__qualname__}.{field_name}"
            raise InvalidTargetError(component_type, field_name, msg)
        if Final in qualifiers or _is_frozen_dataclass(component_type):
            msg = f"Cannot inject into final field: {component_type.__qualname__}.{field_name}"
            raise InvalidTargetError(component_type, field_name, msg)

    def _extract_setters(
        self,
        component_type: type[Any],
        members: dict[str, Any],
    ) -> tuple[InjectionPoint, ...]:
        points: list[InjectionPoint] = []
        for name, member in members.items():
            if name == INIT_METHOD_NAME or isinstance(member, classmethod):
                continue
            if not is_inject_marked(member):
                continue
            problem = self._setter_problem(name, member)
            if problem is not None:
                if self._strict_setters:
                    msg = f"Invalid @inject setter {component_type.__qualname__}.{name}: {problem}."
                    raise InvalidTargetError(component_type, name, msg)
                logger.debug(
                    "Skipping @inject method %s.%s: %s",
                    component_type.__qualname__,
                    name,
                    problem,
                )
                continue

            (parameter,) = _bound_parameters(member)
            annotations = self._resolved_type_hints(component_type, name, member)
            annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION:
                msg = (
                    f"Unable to infer dependency for setter "
                    f"{component_type.__qualname__}.{name}. Add a type annotation."
                )
                raise InvalidTargetError(component_type, name, msg)
            dependency_type, qualifier = split_qualified_annotation(annotation)
            points.append(
                InjectionPoint(
                    kind=InjectionPointKind.SETTER,
                    member=name,
                    name=parameter.name,
                    dependency_type=dependency_type,
                    qualifier=qualifier,
                    positional_only=parameter.kind is Parameter.POSITIONAL_ONLY,
                ),
            )
        return tuple(points)

    def _setter_problem(self, name: str, member: Any) -> str | None:
        if isinstance(member, staticmethod):
            return "static methods cannot be setters"
        if not inspect.isfunction(member):
            return "not a plain instance method"
        if not name.startswith(SETTER_PREFIX):
            return f"name does not start with '{SETTER_PREFIX}'"
        parameters = _bound_parameters(member)
        if len(parameters) != 1 or parameters[0].kind in _VARIADIC_KINDS:
            return f"expected exactly one parameter, got {len(parameters)}"
        return None

    def _accepts_no_arguments(self, init: Any) -> bool:
        if init is object.__init__:
            return True
        try:
            parameters = _bound_parameters(init)
        except (TypeError, ValueError):
            # Builtin initializers without a signature; let instantiation decide.
            return True
        return all(
            parameter.default is not Parameter.empty or parameter.kind in _VARIADIC_KINDS
            for parameter in parameters
        )

    def _resolved_type_hints(
        self,
        component_type: type[Any],
        member_name: str,
        function: Any,
    ) -> dict[str, Any]:
        try:
            return get_type_hints(function, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            msg = (
                f"Unable to resolve annotations of {component_type.__qualname__}.{member_name}: "
                f"{error}"
            )
            raise InvalidTargetError(component_type, member_name, msg) from error


def _class_members(component_type: type[Any]) -> dict[str, Any]:
    """Return raw class attributes visible on ``component_type``, most derived first."""
    members: dict[str, Any] = {}
    for klass in component_type.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            members.setdefault(name, value)
    return members


def _bound_parameters(function: Any) -> tuple[Parameter, ...]:
    """Return the parameters of an unbound method without its ``self``/``cls``."""
    parameters = tuple(inspect.signature(function).parameters.values())
    return parameters[1:]


def _strip_field_qualifiers(hint: Any) -> tuple[Any, set[Any]]:
    """Peel ``Final``/``ClassVar`` wrappers off a field annotation, in any nesting order."""
    qualifiers: set[Any] = set()
    metadata: tuple[Any, ...] = ()
    while True:
        origin = get_origin(hint)
        if origin is ClassVar or origin is Final:
            qualifiers.add(origin)
            hint = get_args(hint)[0]
        elif origin is Annotated:
            inner, *extra = get_args(hint)
            metadata = (*metadata, *extra)
            hint = inner
        elif hint is ClassVar or hint is Final:
            qualifiers.add(hint)
            hint = Any
            break
        else:
            break
    if metadata:
        hint = build_annotated((hint, *metadata))
    return hint, qualifiers


def _field_annotations(component_type: type[Any]) -> dict[str, tuple[type[Any], Any]]:
    """Return unevaluated class annotations with their owning class, most derived winning."""
    annotations: dict[str, tuple[type[Any], Any]] = {}
    for klass in reversed(component_type.__mro__):
        if klass is object:
            continue
        for name, annotation in _own_annotations(klass).items():
            annotations[name] = (klass, annotation)
    return annotations


def _own_annotations(klass: type[Any]) -> dict[str, Any]:
    if sys.version_info >= (3, 14):
        return annotationlib.get_annotations(klass, format=annotationlib.Format.FORWARDREF)
    return inspect.get_annotations(klass)


def _evaluate_field_annotation(owner: type[Any], field_name: str, annotation: Any) -> Any:
    """Evaluate one annotation of ``owner`` in its module, leaving its siblings alone."""
    module = sys.modules.get(owner.__module__)
    globalns = vars(module) if module is not None else {}
    holder = type(owner.__name__, (), {"__annotations__": {field_name: annotation}})
    hints = get_type_hints(holder, globalns=globalns, localns=dict(vars(owner)), include_extras=True)
    return hints[field_name]


def _looks_injected(annotation: Any) -> bool:
    if isinstance(annotation, ForwardRef):
        annotation = annotation.__forward_arg__
    if isinstance(annotation, str):
        return _INJECTED_NAME.search(annotation) is not None
    return is_injected_annotation(_strip_field_qualifiers(annotation)[0])


def _is_frozen_dataclass(component_type: type[Any]) -> bool:
    if not dataclasses.is_dataclass(component_type):
        return False
    params = getattr(component_type, "__dataclass_params__", None)
    return bool(getattr(params, "frozen", False))


__all__ = [
    "ComponentIntrospector",
    "ComponentMetadata",
    "InjectionPoint",
    "InjectionPointKind",
    "SelectedConstructor",
]
