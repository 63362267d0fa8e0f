"""Discovery of @callable_method methods on classes and modules.

Every entry point is a pure function of its input: nothing is cached and the
set of names seen during a scan lives only for that call.
"""

import inspect
import logging
from collections.abc import Iterable, Iterator
from types import ModuleType
from typing import Any

from opal.catalog.descriptor import Descriptor
from opal.catalog.marker import get_marker, get_shadowed
from opal.errors import DuplicateMethodNameError, InvalidArgumentError


logger = logging.getLogger(__name__)


def _is_public(name: str) -> bool:
    return not name.startswith("_")


def _iter_public_methods(cls: type) -> Iterator[tuple[str, Any]]:
    """Yield ``(name, raw_attribute)`` for public methods visible on ``cls``.

    Walks the MRO subclass first so overridden members are reported once, from
    the class that wins attribute lookup.
    """
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, raw in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if not _is_public(name):
                continue
            if isinstance(raw, (staticmethod, classmethod)) or inspect.isfunction(raw):
                yield name, raw


def _scan(cls: type, target: Any) -> list[Descriptor]:
    descriptors: list[Descriptor] = []
    method_names: set[str] = set()

    for name, raw in _iter_public_methods(cls):
        marker = get_marker(raw)
        if marker is None:
            logger.debug("Skipping unmarked method %s.%s", cls.__name__, name)
            continue

        if name in method_names or get_shadowed(raw):
            logger.warning("Duplicate callable method %s.%s", cls.__name__, name)
            raise DuplicateMethodNameError(cls.__name__, name)
        method_names.add(name)

        # Unbound instance methods still expect ``self`` when read off the class
        skip_self = inspect.isclass(target) and not isinstance(raw, (staticmethod, classmethod))
        descriptors.append(
            Descriptor.from_method(getattr(target, name), marker, name=name, skip_self=skip_self)
        )

    logger.debug("Discovered %d callable methods on %s", len(descriptors), cls.__name__)
    return descriptors


def scan_type(cls: type) -> list[Descriptor]:
    """Scan a class for public methods marked with @callable_method.

    Instance methods, staticmethods and classmethods are considered, including
    those inherited from base classes. Names starting with an underscore are
    never reported.

    Args:
        cls: The class to scan.

    Returns:
        One Descriptor per marked method. Empty when nothing is marked.

    Raises:
        InvalidArgumentError: If ``cls`` is None or not a class.
        DuplicateMethodNameError: If two marked methods share a name.
    """
    if cls is None:
        raise InvalidArgumentError("type must not be None")
    if not inspect.isclass(cls):
        msg = f"expected a class, got {type(cls).__name__}"
        raise InvalidArgumentError(msg)
    return _scan(cls, cls)


def scan_instance(obj: Any) -> list[Descriptor]:
    """Scan the class of ``obj``, binding invocation handles to ``obj``.

    Raises:
        InvalidArgumentError: If ``obj`` is None or is itself a class.
        DuplicateMethodNameError: If two marked methods share a name.
    """
    if obj is None:
        raise InvalidArgumentError("instance must not be None")
    if inspect.isclass(obj):
        msg = f"expected an instance, got class {obj.__name__}; use scan_type()"
        raise InvalidArgumentError(msg)
    return _scan(type(obj), obj)


def scan_types(types: Iterable[type]) -> list[Descriptor]:
    """Scan several classes and concatenate the results in input order.

    A failure on any class aborts the whole call.
    """
    if types is None:
        raise InvalidArgumentError("types must not be None")

    result: list[Descriptor] = []
    for cls in types:
        result.extend(scan_type(cls))
    return result


def _with_nested(classes: Iterable[type]) -> list[type]:
    """Expand each class with the public classes declared in its body, depth first."""
    result: list[type] = []
    for cls in classes:
        result.append(cls)
        nested = [
            obj
            for name, obj in vars(cls).items()
            if _is_public(name)
            and inspect.isclass(obj)
            and obj.__qualname__ == f"{cls.__qualname__}.{name}"
        ]
        result.extend(_with_nested(nested))
    return result


def exported_types(module: ModuleType) -> list[type]:
    """Return the public classes a module exports.

    Uses ``__all__`` when the module defines it, otherwise every public class
    defined in the module itself (imported classes are left out). Public
    classes nested in an exported class follow their enclosing class.
    """
    if module is None:
        raise InvalidArgumentError("module must not be None")
    if not inspect.ismodule(module):
        msg = f"expected a module, got {type(module).__name__}"
        raise InvalidArgumentError(msg)

    exported = getattr(module, "__all__", None)
    if exported is not None:
        candidates = [getattr(module, name, None) for name in exported]
        return _with_nested(obj for obj in candidates if inspect.isclass(obj))

    return _with_nested(
        obj
        for name, obj in vars(module).items()
        if _is_public(name) and inspect.isclass(obj) and obj.__module__ == module.__name__
    )


def scan_module(module: ModuleType) -> list[Descriptor]:
    """Scan every exported class of a module."""
    return scan_types(exported_types(module))


def scan_modules(modules: Iterable[ModuleType]) -> list[Descriptor]:
    """Scan several modules and concatenate the results in input order.

    A failure in any module aborts the whole call.
    """
    if modules is None:
        raise InvalidArgumentError("modules must not be None")

    result: list[Descriptor] = []
    for module in modules:
        result.extend(scan_module(module))
    return result
