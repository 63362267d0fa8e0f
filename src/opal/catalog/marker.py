"""The @callable_method marker.

Marking a method attaches a frozen :class:`CallableMarker` to the underlying
function object. Nothing is registered globally; the scanner finds markers by
inspecting class attributes.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from opal.errors import MarkerError


F = TypeVar("F")

MARKER_ATTR = "__opal_callable__"
SHADOWED_ATTR = "__opal_shadowed__"


@dataclass(frozen=True)
class CallableMarker:
    """Metadata carried by a method marked with @callable_method."""

    description: str
    read_only: bool = False


def _underlying(obj: Any) -> Any:
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def get_marker(obj: Any) -> CallableMarker | None:
    """Return the marker attached to a function, staticmethod or classmethod."""
    marker = getattr(_underlying(obj), MARKER_ATTR, None)
    if isinstance(marker, CallableMarker):
        return marker
    return None


def get_shadowed(obj: Any) -> tuple[Callable[..., Any], ...]:
    """Return marked declarations that this function replaced in its class body."""
    shadowed = getattr(_underlying(obj), SHADOWED_ATTR, ())
    if isinstance(shadowed, tuple):
        return shadowed
    return ()


def _shadowed_declarations(name: str) -> tuple[Callable[..., Any], ...]:
    """Look up ``name`` in the class body currently being executed, if any.

    Must be called directly from the decorator so that two frames up is the
    scope that applied it.
    """
    frame = inspect.currentframe()
    try:
        if frame is None or frame.f_back is None or frame.f_back.f_back is None:
            return ()
        namespace = frame.f_back.f_back.f_locals
        # Class bodies define both keys before any member is evaluated
        if "__qualname__" not in namespace or "__module__" not in namespace:
            return ()
        previous = namespace.get(name)
        if previous is None or get_marker(previous) is None:
            return ()
        return (_underlying(previous), *get_shadowed(previous))
    finally:
        del frame


def callable_method(description: str, *, read_only: bool = False) -> Callable[[F], F]:
    """Mark a method as callable through an external dispatcher.

    Args:
        description: Human readable description shown to callers.
        read_only: Whether the method leaves application state untouched.

    Raises:
        MarkerError: If the description is not a string, the target is not a
            function, or the function is already marked.

    Example:
        class UserOps:
            @callable_method("Get user information", read_only=True)
            def get_user_details(self, user_id: int) -> dict:
                ...

            @staticmethod
            @callable_method("Reimport every user")
            def reimport_all() -> None:
                ...
    """
    if not isinstance(description, str):
        msg = f"callable_method() description must be a string, got {type(description).__name__}"
        raise MarkerError(msg)

    marker = CallableMarker(description=description, read_only=bool(read_only))

    def decorator(fn: F) -> F:
        target = _underlying(fn)
        if not inspect.isfunction(target):
            msg = "callable_method() can only decorate functions, staticmethods or classmethods"
            raise MarkerError(msg)
        if get_marker(target) is not None:
            msg = f"{target.__qualname__} is already marked with callable_method()"
            raise MarkerError(msg)

        shadowed = _shadowed_declarations(target.__name__)
        setattr(target, MARKER_ATTR, marker)
        if shadowed:
            setattr(target, SHADOWED_ATTR, shadowed)
        return fn

    return decorator
