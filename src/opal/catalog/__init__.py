"""Discovery of callable methods.

Mark methods with @callable_method and scan classes or modules to build a
catalog of Descriptors for an external dispatcher.
"""

from .descriptor import Descriptor, ParameterInfo, format_type
from .loader import iter_package_modules, load_module
from .marker import CallableMarker, callable_method, get_marker
from .scanner import exported_types, scan_instance, scan_module, scan_modules, scan_type, scan_types


__all__ = [
    "CallableMarker",
    "Descriptor",
    "ParameterInfo",
    "callable_method",
    "exported_types",
    "format_type",
    "get_marker",
    "iter_package_modules",
    "load_module",
    "scan_instance",
    "scan_module",
    "scan_modules",
    "scan_type",
    "scan_types",
]
