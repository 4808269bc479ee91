"""Pre-resolved metadata of test classes and test methods."""

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from invocation_engine.expected import ExpectedExceptionContract
from invocation_engine.markers import (
    CLEANUP_MARKER,
    EXPECTED_EXCEPTION_MARKER,
    INITIALIZE_MARKER,
    TIMEOUT_MARKER,
)

TIMEOUT_WHEN_NOT_SET = 0
CONTEXT_PROPERTY_NAME = "test_context"

_MISSING = object()


@dataclass(frozen=True, kw_only=True)
class ContextProperty:
    """Slot on a test class that receives the execution context."""

    name: str
    writable: bool = True


def _own_hook(klass: type, marker: str) -> Callable[..., Any] | None:
    hooks = [
        value
        for value in vars(klass).values()
        if inspect.isfunction(value) and getattr(value, marker, False)
    ]
    if len(hooks) > 1:
        names = ", ".join(hook.__name__ for hook in hooks)
        raise TypeError(f"{klass.__qualname__} declares more than one hook: {names}")
    return hooks[0] if hooks else None


def _find_context_property(class_type: type, name: str) -> ContextProperty | None:
    attribute = inspect.getattr_static(class_type, name, _MISSING)
    if isinstance(attribute, property):
        return ContextProperty(name=name, writable=attribute.fset is not None)

    declared = any(
        name in inspect.get_annotations(klass) for klass in class_type.__mro__
    )
    if declared or (attribute is not _MISSING and not callable(attribute)):
        return ContextProperty(name=name)
    return None


@dataclass(frozen=True, kw_only=True)
class ClassDescriptor:
    """Test class with its lifecycle hooks resolved once.

    ``setup_methods`` run base class first, ``teardown_methods`` derived class
    first. Both hold plain functions taking the instance as only argument.
    """

    class_type: type
    constructor: Callable[[], Any] | None = None
    setup_methods: Sequence[Callable[[Any], Any]] = ()
    teardown_methods: Sequence[Callable[[Any], Any]] = ()
    context_property: ContextProperty | None = None

    @classmethod
    def from_type(
        cls,
        class_type: type,
        context_property_name: str = CONTEXT_PROPERTY_NAME,
    ) -> "ClassDescriptor":
        """Build a descriptor from hooks marked with ``initialize``/``cleanup``.

        Each class of the hierarchy contributes at most one hook of each kind,
        declared in its own body.
        """
        setup_methods: list[Callable[[Any], Any]] = []
        teardown_methods: list[Callable[[Any], Any]] = []
        for klass in class_type.__mro__:
            if klass is object:
                continue
            if (setup := _own_hook(klass, INITIALIZE_MARKER)) is not None:
                setup_methods.insert(0, setup)
            if (teardown := _own_hook(klass, CLEANUP_MARKER)) is not None:
                teardown_methods.append(teardown)

        return cls(
            class_type=class_type,
            setup_methods=tuple(setup_methods),
            teardown_methods=tuple(teardown_methods),
            context_property=_find_context_property(class_type, context_property_name),
        )

    @property
    def class_name(self) -> str:
        """Fully qualified name of the test class."""
        return f"{self.class_type.__module__}.{self.class_type.__qualname__}"

    @property
    def instance_factory(self) -> Callable[[], Any]:
        """Callable producing a fresh instance."""
        return self.constructor if self.constructor is not None else self.class_type


@dataclass(frozen=True, kw_only=True)
class MethodDescriptor:
    """Test method with its declared options resolved once."""

    function: Callable[..., Any]
    parent: ClassDescriptor
    timeout: int = TIMEOUT_WHEN_NOT_SET
    expected_exception: ExpectedExceptionContract | None = None
    not_runnable_reason: str | None = None

    @classmethod
    def from_function(
        cls, parent: ClassDescriptor, function: Callable[..., Any]
    ) -> "MethodDescriptor":
        """Build a descriptor from options declared with the marker decorators."""
        timeout = getattr(function, TIMEOUT_MARKER, TIMEOUT_WHEN_NOT_SET)
        return cls(
            function=function,
            parent=parent,
            timeout=timeout,
            expected_exception=getattr(function, EXPECTED_EXCEPTION_MARKER, None),
            not_runnable_reason=_not_runnable_reason(function, timeout),
        )

    def with_timeout(self, timeout: int) -> "MethodDescriptor":
        """Copy of this descriptor with another timeout, in milliseconds."""
        return replace(
            self,
            timeout=timeout,
            not_runnable_reason=_not_runnable_reason(self.function, timeout),
        )

    @property
    def name(self) -> str:
        return getattr(self.function, "__name__", repr(self.function))

    @property
    def class_name(self) -> str:
        return self.parent.class_name

    @property
    def parameters(self) -> Sequence[inspect.Parameter]:
        """Parameters of the test method, without the instance."""
        return tuple(inspect.signature(self.function).parameters.values())[1:]

    @property
    def return_annotation(self) -> Any:
        return inspect.signature(self.function).return_annotation

    @property
    def is_timeout_set(self) -> bool:
        return self.timeout != TIMEOUT_WHEN_NOT_SET

    @property
    def is_runnable(self) -> bool:
        return not self.not_runnable_reason


def _not_runnable_reason(function: Callable[..., Any], timeout: int) -> str | None:
    if not callable(function):
        return f"{function!r} is not callable"
    if not isinstance(timeout, int) or timeout < 0:
        return f"timeout must be a non-negative number of milliseconds, got {timeout!r}"

    positional = [
        parameter
        for parameter in inspect.signature(function).parameters.values()
        if parameter.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        )
    ]
    if not positional:
        return "a test method must accept the instance as its first parameter"
    return None
