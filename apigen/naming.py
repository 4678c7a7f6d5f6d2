"""Derive generated function names from class and method names.

Pattern:
  - dispatch per receiver   -> serve_{receiver}
  - route table per receiver -> _{RECEIVER}_ROUTES
  - handler per endpoint    -> handle_{receiver}_{method}
  - validator per struct    -> validate_{struct}

Examples:
  MyApi                       -> serve_my_api
  MyApi.Profile               -> handle_my_api_profile
  OtherApi.create             -> handle_other_api_create
  CreateParams                -> validate_create_params
  HTTPApi                     -> serve_http_api
"""

from __future__ import annotations

import re


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _sanitize(name: str) -> str:
    """Sanitize a class or method name for use inside a generated identifier."""
    name = _camel_to_snake(name)
    name = re.sub(r"[^a-z0-9_]", "", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def dispatch_name(receiver: str) -> str:
    """Name of the per-receiver dispatch function."""
    return f"serve_{_sanitize(receiver)}"


def routes_name(receiver: str) -> str:
    """Name of the per-receiver route table."""
    return f"_{_sanitize(receiver).upper()}_ROUTES"


def handler_name(receiver: str, method: str) -> str:
    """Name of the request handler for one endpoint."""
    return f"handle_{_sanitize(receiver)}_{_sanitize(method)}"


def validator_name(struct: str) -> str:
    """Name of the validation function for one parameter class."""
    return f"validate_{_sanitize(struct)}"
