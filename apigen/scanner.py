"""Discover annotated methods and the parameter classes they reference.

A method is picked up when the comment block directly above it (or its
docstring) contains the marker followed by a JSON object:

    class MyApi:
        # apigen:api {"url": "/user/create", "auth": true, "method": "POST"}
        def create(self, ctx, params: CreateParams):
            ...
"""

from __future__ import annotations

import ast
import json
import logging
from typing import Any

from .errors import ConfigurationError, ResolutionError
from .loader import SourceDocument, class_declarations, is_dataclass
from .models import EndpointDescriptor, ScanResult
from .rule_parser import compile_struct

logger = logging.getLogger(__name__)

MARKER = "apigen:api"


def _leading_comments(node: ast.FunctionDef, lines: list[str]) -> list[str]:
    """Return the contiguous ``#`` comment block above a def and its decorators."""
    first = min([node.lineno] + [d.lineno for d in node.decorator_list])
    comments = []
    ix = first - 2
    while ix >= 0 and lines[ix].strip().startswith("#"):
        comments.append(lines[ix].strip())
        ix -= 1
    comments.reverse()
    return comments


def find_marker(node: ast.FunctionDef, lines: list[str]) -> str | None:
    """Return the marker line of a method, or None if it is not annotated."""
    for line in _leading_comments(node, lines):
        if MARKER in line:
            return line
    docstring = ast.get_docstring(node) or ""
    for line in docstring.splitlines():
        if MARKER in line:
            return line
    return None


def parse_marker(line: str, where: str) -> dict[str, Any]:
    """Parse and check the JSON configuration embedded in a marker line."""
    start = line.find("{")
    if start < 0:
        raise ConfigurationError(f"Marker on {where} has no JSON configuration")
    try:
        config = json.loads(line[start:])
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Wrong json in comment on {where}: {e}") from e
    if not isinstance(config, dict):
        raise ConfigurationError(f"Marker configuration on {where} must be an object")

    route = config.get("route", config.get("url"))
    if not isinstance(route, str) or not route:
        raise ConfigurationError(f"Marker on {where} needs a non-empty route")
    auth = config.get("auth", False)
    if not isinstance(auth, bool):
        raise ConfigurationError(f"auth on {where} must be true or false")
    method = config.get("method")
    if method is not None and (not isinstance(method, str) or not method):
        raise ConfigurationError(f"method on {where} must be an HTTP verb")

    return {
        "route": route,
        "auth": auth,
        "method": method.upper() if method else None,
    }


def _param_type_name(node: ast.FunctionDef, where: str) -> str:
    """Resolve the annotation of the params argument to a class name."""
    args = node.args.posonlyargs + node.args.args
    if len(args) != 3 or node.args.vararg or node.args.kwonlyargs or node.args.kwarg:
        raise ResolutionError(f"{where} must take exactly (self, ctx, params)")
    annotation = args[2].annotation
    if isinstance(annotation, ast.Name):
        return annotation.id
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value
    raise ResolutionError(f"Parameter type of {where} must be a class name")


def _methods(module: ast.Module):
    """Yield (class, method) pairs for functions defined in module-level classes."""
    for node in module.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for item in node.body:
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                yield node, item


def find_endpoints(document: SourceDocument) -> dict[str, list[EndpointDescriptor]]:
    """Collect annotated methods grouped by receiver, in declaration order."""
    endpoints: dict[str, list[EndpointDescriptor]] = {}
    for cls, method in _methods(document.module):
        marker = find_marker(method, document.lines)
        if marker is None:
            continue
        where = f"{cls.name}.{method.name}"
        if isinstance(method, ast.AsyncFunctionDef):
            raise ResolutionError(f"{where} must not be async")
        config = parse_marker(marker, where)
        endpoint = EndpointDescriptor(
            receiver_type=cls.name,
            method_name=method.name,
            route=config["route"],
            param_type_name=_param_type_name(method, where),
            requires_auth=config["auth"],
            allowed_http_method=config["method"],
        )
        logger.debug("found %s -> %s", where, endpoint.route)
        endpoints.setdefault(cls.name, []).append(endpoint)
    return endpoints


def scan(document: SourceDocument) -> ScanResult:
    """Build endpoint and parameter descriptors for one input module."""
    endpoints = find_endpoints(document)
    classes = class_declarations(document.module)
    result = ScanResult(
        module_name=document.import_path,
        source_name=document.path.name,
        endpoints=endpoints,
    )

    for receiver_endpoints in endpoints.values():
        for endpoint in receiver_endpoints:
            name = endpoint.param_type_name
            if name in result.structs:
                continue
            node = classes.get(name)
            if node is None or not is_dataclass(node):
                raise ResolutionError(
                    f"Parameter type {name} of {endpoint.receiver_type}.{endpoint.method_name}"
                    " is not a dataclass declared in the same module"
                )
            result.structs[name] = compile_struct(node)
    return result
