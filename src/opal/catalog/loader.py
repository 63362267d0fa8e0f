"""Module loading for catalog scans."""

import hashlib
import importlib
import importlib.util
import pkgutil
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

from opal.errors import InvalidArgumentError


def _module_name_for(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    return f"opal_file_{path.stem}_{digest}"


def _exec_file(path: Path) -> ModuleType:
    """Execute a source file as a module registered under a name unique to its path.

    A module whose execution raises is removed from ``sys.modules`` again.
    """
    name = _module_name_for(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load module from {path}"
        raise ImportError(msg)

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def load_module(target: str | Path) -> ModuleType:
    """Import a module by dotted name or by ``.py`` file path.

    Example:
        load_module("myapp.ops")
        load_module("./ops/user_ops.py")
    """
    if target is None or not str(target).strip():
        raise InvalidArgumentError("module target must be a non-empty string or path")

    if isinstance(target, Path) or str(target).endswith(".py"):
        path = Path(target).expanduser().resolve()
        if not path.is_file():
            msg = f"No such module file: {path}"
            raise ImportError(msg)
        return _exec_file(path)

    return importlib.import_module(str(target).strip())


def iter_package_modules(package: ModuleType) -> Iterator[ModuleType]:
    """Yield a package followed by all of its submodules.

    A plain module (no ``__path__``) yields only itself.
    """
    if package is None:
        raise InvalidArgumentError("package must not be None")

    yield package
    search_path = getattr(package, "__path__", None)
    if search_path is None:
        return
    for info in pkgutil.walk_packages(search_path, prefix=f"{package.__name__}."):
        yield importlib.import_module(info.name)
