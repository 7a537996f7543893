"""Exceptions shared across form_bind packages.

Configuration errors indicate a mis-declared form definition and are
never caught by the library. User input errors are not represented here:
they are reported as validation messages.
"""


class MappingConfigurationError(Exception):
    """Raised when a form mapping is declared or used inconsistently."""

    pass


class ConstructionError(MappingConfigurationError):
    """Raised when no usable construction method of a class is found."""

    def __init__(self, target: str, detail: str | None = None) -> None:
        self.target = target
        message = f"No usable construction method of {target} was found"
        if detail:
            message = f"{message}. {detail}"
        super().__init__(message)


class BindingError(Exception):
    """Raised when request values cannot be bound to an object.

    This is a declaration problem (missing setter, undeclared constructor
    argument), not a problem with the submitted values.
    """

    pass
