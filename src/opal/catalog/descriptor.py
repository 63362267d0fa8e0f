"""Descriptor models for discovered callable methods."""

import inspect
import logging
import typing
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from opal.catalog.marker import CallableMarker
from opal.errors import InvalidArgumentError


logger = logging.getLogger(__name__)

NoneType = type(None)


def format_type(value: Any) -> str:
    """Render a type reference the way it reads in source code."""
    if value is None or value is NoneType:
        return "None"
    if value is Any:
        return "Any"
    if isinstance(value, str):
        return value
    if isinstance(value, type) and typing.get_origin(value) is None:
        return value.__name__
    return repr(value).replace("typing.", "")


def _normalize_annotation(annotation: Any) -> Any:
    if annotation is inspect.Parameter.empty:
        return Any
    if annotation is None:
        return NoneType
    return annotation


def _resolve_hints(fn: Callable[..., Any]) -> dict[str, Any]:
    """Resolve string annotations, falling back to the raw ones on failure."""
    target = getattr(fn, "__func__", fn)
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError, AttributeError) as exc:
        logger.debug("Using raw annotations for %r: %s", target, exc)
        return {}


def _declaring_type_name(fn: Callable[..., Any]) -> str:
    target = getattr(fn, "__func__", fn)
    parts = (getattr(target, "__qualname__", "") or "").split(".")
    if len(parts) < 2 or parts[-2] == "<locals>":
        return ""
    return parts[-2]


class ParameterInfo(BaseModel):
    """A single parameter of a callable method, in declaration order."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    name: str
    parameter_type: Any = Field(default=Any)
    position: int
    kind: str = inspect.Parameter.POSITIONAL_OR_KEYWORD.name
    has_default: bool = False
    default: Any = None

    @field_serializer("parameter_type", when_used="json")
    def _serialize_type(self, value: Any) -> str:
        return format_type(value)

    @field_serializer("default", when_used="json")
    def _serialize_default(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        return repr(value)


class Descriptor(BaseModel):
    """Everything a dispatcher needs to expose and invoke a marked method.

    Attributes
    ----------
    declaring_type_name
        Simple name of the class that declares the method, or ``""`` when the
        function has no owning class.
    method_name
        Name the method is addressed by.
    description
        Copied from the marker.
    read_only
        Copied from the marker.
    parameters
        Parameters in declaration order, ``self``/``cls`` excluded.
    return_type
        Resolved return annotation; ``Any`` when unannotated.
    invocation_handle
        Callable used to invoke the method later. Never serialized.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    declaring_type_name: str = ""
    method_name: str
    description: str
    read_only: bool = False
    parameters: tuple[ParameterInfo, ...] = ()
    return_type: Any = Field(default=Any)
    invocation_handle: Callable[..., Any] = Field(exclude=True, repr=False)

    @field_serializer("return_type", when_used="json")
    def _serialize_return_type(self, value: Any) -> str:
        return format_type(value)

    @classmethod
    def from_method(
        cls,
        method: Callable[..., Any] | None,
        marker: CallableMarker | None,
        *,
        name: str | None = None,
        skip_self: bool = False,
    ) -> "Descriptor":
        """Build a descriptor from a method and the marker attached to it.

        Args:
            method: Function or bound method; becomes the invocation handle.
            marker: Marker attached to ``method``.
            name: Name the method is exposed under. Defaults to ``__name__``.
            skip_self: Drop the first parameter of an unbound instance method.

        Raises:
            InvalidArgumentError: If ``method`` or ``marker`` is missing.
        """
        if method is None:
            raise InvalidArgumentError("method must not be None")
        if marker is None:
            raise InvalidArgumentError("marker must not be None")
        if not isinstance(marker, CallableMarker):
            msg = f"marker must be a CallableMarker, got {type(marker).__name__}"
            raise InvalidArgumentError(msg)
        if not callable(method):
            msg = f"method must be callable, got {type(method).__name__}"
            raise InvalidArgumentError(msg)

        signature = inspect.signature(method)
        hints = _resolve_hints(method)

        declared = list(signature.parameters.values())
        if skip_self and declared:
            declared = declared[1:]

        parameters = tuple(
            ParameterInfo(
                name=param.name,
                parameter_type=_normalize_annotation(hints.get(param.name, param.annotation)),
                position=position,
                kind=param.kind.name,
                has_default=param.default is not inspect.Parameter.empty,
                default=None if param.default is inspect.Parameter.empty else param.default,
            )
            for position, param in enumerate(declared)
        )

        return cls(
            declaring_type_name=_declaring_type_name(method),
            method_name=name or getattr(method, "__name__", type(method).__name__),
            description=marker.description,
            read_only=marker.read_only,
            parameters=parameters,
            return_type=_normalize_annotation(hints.get("return", signature.return_annotation)),
            invocation_handle=method,
        )

    def signature(self) -> str:
        """Render ``name(param: type, ...) -> type``."""
        params = ", ".join(f"{p.name}: {format_type(p.parameter_type)}" for p in self.parameters)
        return f"{self.method_name}({params}) -> {format_type(self.return_type)}"

    def __str__(self) -> str:
        return f"{self.method_name} [ReadOnly={self.read_only}]: {self.description}"
