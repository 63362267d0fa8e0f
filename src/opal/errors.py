"""Error taxonomy for callable discovery."""


class OpalError(Exception):
    """Base class for opal failures."""


class InvalidArgumentError(OpalError, ValueError):
    """Raised when a required input is missing or of the wrong kind."""


class MarkerError(OpalError, TypeError):
    """Raised when @callable_method is applied incorrectly."""


class DuplicateMethodNameError(OpalError):
    """Raised when a scanned class exposes two marked methods with the same name.

    Callable methods are addressed by name only, so overloads are rejected.
    """

    def __init__(self, type_name: str, method_name: str) -> None:
        self.type_name = type_name
        self.method_name = method_name
        super().__init__(f"Method overloading is not supported: {type_name}.{method_name}")
