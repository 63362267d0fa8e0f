"""Opal - discovery of callable methods for external dispatchers."""

from .catalog import (
    CallableMarker,
    Descriptor,
    ParameterInfo,
    callable_method,
    get_marker,
    scan_instance,
    scan_module,
    scan_modules,
    scan_type,
    scan_types,
)
from .errors import DuplicateMethodNameError, InvalidArgumentError, MarkerError, OpalError
from .version import __version__


__all__ = [
    # Marker
    "callable_method",
    "CallableMarker",
    "get_marker",
    # Descriptors
    "Descriptor",
    "ParameterInfo",
    # Scanning
    "scan_type",
    "scan_types",
    "scan_instance",
    "scan_module",
    "scan_modules",
    # Errors
    "OpalError",
    "InvalidArgumentError",
    "DuplicateMethodNameError",
    "MarkerError",
]
