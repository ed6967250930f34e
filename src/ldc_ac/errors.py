"""Exceptions raised by the artificial-compressibility solver."""


class ConfigurationError(ValueError):
    """Invalid solver configuration (grid size, domain, mode flags).

    Raised before any field is allocated or mutated.
    """


class ShapeMismatchError(RuntimeError):
    """Copy or swap between field stores of different shapes.

    This is a programming error and is not meant to be caught.
    """
