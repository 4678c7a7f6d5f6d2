"""Fatal generator errors.

Every fault found while reading the input aborts the run; nothing is
emitted for a partially understood module.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all generation-time failures."""


class InputNotFoundError(GeneratorError):
    """The input path does not exist."""


class ParseError(GeneratorError):
    """The input is not valid Python source."""


class ConfigurationError(GeneratorError):
    """A marker comment or validator tag is malformed."""


class ResolutionError(GeneratorError):
    """A parameter type or field type cannot be resolved."""
