"""Build Jinja2 template context from scanned descriptors.

Checks that routes and generated names are unique, and turns each field's
rule list into an explicit sequence of validation steps for the template.
"""

from __future__ import annotations

from typing import Any

from .errors import ConfigurationError
from .models import INTEGER, EndpointDescriptor, FieldDescriptor, ScanResult, StructDescriptor
from .naming import dispatch_name, handler_name, routes_name, validator_name

# Kind name passed to the generated _fill_value helper
_FILL_KINDS: dict[str, str] = {
    "text": "str",
    "integer": "int",
}


def _literal(field: FieldDescriptor, value: str) -> str | int:
    """Convert a tag literal to the field's Python type."""
    return int(value) if field.kind == INTEGER else value


def _check_routes(receiver: str, endpoints: list[EndpointDescriptor]) -> None:
    """Routes must be unique within one receiver."""
    seen: dict[str, str] = {}
    for endpoint in endpoints:
        if endpoint.route in seen:
            raise ConfigurationError(
                f"Route {endpoint.route} of {receiver} is declared by both"
                f" {seen[endpoint.route]} and {endpoint.method_name}"
            )
        seen[endpoint.route] = endpoint.method_name


def build_steps(field: FieldDescriptor) -> list[dict[str, Any]]:
    """Translate a field's rules into ordered validation steps.

    A ``required`` followed by a ``default`` later in the field never
    fails: an empty value takes that default right away, so the rules in
    between check the default. Otherwise a failed ``required`` stays
    pending until the next rule that is not ``default`` (or the end of the
    field). An ``enum`` that falls back to the field default also cancels
    it, since it replaces the empty value.
    """
    label = field.field_name.lower()
    length = field.kind != INTEGER
    steps: list[dict[str, Any]] = []
    pending = False

    for ix, rule in enumerate(field.validators):
        if rule.kind == "default":
            steps.append({"op": "default", "value": _literal(field, rule.argument)})
            continue

        # enum with a default fallback replaces the zero value itself
        falls_back = rule.kind == "enum" and field.default_value is not None
        if pending and not falls_back:
            steps.append({"op": "raise_pending"})
            pending = False

        if rule.kind == "required":
            later_default = next(
                (r for r in field.validators[ix + 1:] if r.kind == "default"), None
            )
            if later_default is not None:
                steps.append({"op": "required_default", "value": _literal(field, later_default.argument)})
                continue
            steps.append({"op": "required", "message": f"{label} must not be empty"})
            pending = True
        elif rule.kind == "min":
            bound = int(rule.argument)
            prefix = f"{label} len" if length else label
            steps.append({
                "op": "min",
                "bound": bound,
                "length": length,
                "message": f"{prefix} must be >= {bound}",
            })
        elif rule.kind == "max":
            bound = int(rule.argument)
            prefix = f"{label} len" if length else label
            steps.append({
                "op": "max",
                "bound": bound,
                "length": length,
                "message": f"{prefix} must be <= {bound}",
            })
        elif rule.kind == "enum":
            literals = rule.argument.split("|")
            steps.append({
                "op": "enum",
                "values": [_literal(field, v) for v in literals],
                "fallback": field.default_value,
                "clears": pending,
                "message": f"{label} must be one of [{', '.join(literals)}]",
            })
            pending = False

    if pending:
        steps.append({"op": "raise_pending"})
    return steps


def _field_context(field: FieldDescriptor) -> dict[str, Any]:
    steps = build_steps(field)
    return {
        "name": field.field_name,
        "external_name": field.external_name,
        "fill_kind": _FILL_KINDS[field.kind],
        "zero": field.zero_value,
        "has_required": any(s["op"] == "required" for s in steps),
        "steps": steps,
    }


def _struct_context(struct: StructDescriptor) -> dict[str, Any]:
    return {
        "name": struct.name,
        "validator_name": validator_name(struct.name),
        "fields": [_field_context(f) for f in struct.fields],
    }


def _endpoint_context(endpoint: EndpointDescriptor) -> dict[str, Any]:
    return {
        "method": endpoint.method_name,
        "route": endpoint.route,
        "auth": endpoint.requires_auth,
        "http_method": endpoint.allowed_http_method,
        "param_type": endpoint.param_type_name,
        "validator_name": validator_name(endpoint.param_type_name),
        "handler_name": handler_name(endpoint.receiver_type, endpoint.method_name),
    }


def _check_names(receivers: list[dict[str, Any]], structs: list[dict[str, Any]]) -> None:
    """Generated identifiers must not shadow each other in the output module."""
    owners: dict[str, str] = {}

    def claim(name: str, owner: str) -> None:
        if name in owners and owners[name] != owner:
            raise ConfigurationError(
                f"Generated name {name} is derived from both {owners[name]} and {owner}"
            )
        owners[name] = owner

    for receiver in receivers:
        claim(receiver["dispatch_name"], receiver["name"])
        claim(receiver["routes_name"], receiver["name"])
        for endpoint in receiver["endpoints"]:
            claim(endpoint["handler_name"], f"{receiver['name']}.{endpoint['method']}")
    for struct in structs:
        claim(struct["validator_name"], struct["name"])


def build_context(scan: ScanResult) -> dict[str, Any]:
    """Build the full template context for module.py.j2."""
    receivers = []
    for receiver, endpoints in scan.endpoints.items():
        _check_routes(receiver, endpoints)
        receivers.append({
            "name": receiver,
            "dispatch_name": dispatch_name(receiver),
            "routes_name": routes_name(receiver),
            "endpoints": [_endpoint_context(e) for e in endpoints],
        })

    structs = {name: _struct_context(s) for name, s in scan.structs.items()}
    for receiver in receivers:
        for endpoint in receiver["endpoints"]:
            endpoint["fields"] = structs[endpoint["param_type"]]["fields"]
    _check_names(receivers, list(structs.values()))

    return {
        "source": scan.source_name,
        "module": scan.module_name,
        "imports": sorted(set(scan.endpoints) | set(scan.structs)),
        "receivers": receivers,
        "structs": list(structs.values()),
        "handler_count": sum(len(r["endpoints"]) for r in receivers),
    }
