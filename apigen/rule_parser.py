"""Compile parameter dataclass fields into field descriptors.

Handles:
- Tag lookup in ``field(metadata={"apivalidator": ...})``
- Rule splitting on ``,`` and the first ``=``
- ``paramname`` extraction as the external request key
- Kind resolution from ``str`` / ``int`` annotations
- Numeric checks for min/max bounds and integer literals
"""

from __future__ import annotations

import ast
import logging
import re

from .errors import ConfigurationError, ResolutionError
from .models import INTEGER, TEXT, FieldDescriptor, StructDescriptor, ValidatorRule

logger = logging.getLogger(__name__)

TAG_NAME = "apivalidator"

RULE_KINDS = {"required", "min", "max", "enum", "default", "paramname"}

_ANNOTATION_KINDS: dict[str, str] = {
    "str": TEXT,
    "int": INTEGER,
}


# Same syntax the generated module accepts for integer form values
_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


def _is_int_literal(value: str) -> bool:
    return _INT_LITERAL.fullmatch(value) is not None


def parse_tag(tag: str) -> tuple[list[ValidatorRule], str | None]:
    """Split a tag string into its rules and the ``paramname`` override.

    Returns the rules in textual order (without ``paramname``) and the
    external name, or None when the tag does not override it.
    """
    rules: list[ValidatorRule] = []
    external_name = None
    for token in tag.split(","):
        token = token.strip()
        if not token:
            continue
        kind, _, argument = token.partition("=")
        if kind not in RULE_KINDS:
            raise ConfigurationError(f"Unknown validator {kind!r} in tag {tag!r}")
        if kind in ("min", "max") and not _is_int_literal(argument):
            raise ConfigurationError(f"Validator {kind} needs an integer bound, got {argument!r}")
        if kind == "paramname":
            if not argument:
                raise ConfigurationError(f"Empty paramname in tag {tag!r}")
            external_name = argument
            continue
        rules.append(ValidatorRule(kind=kind, argument=argument))
    return rules, external_name


def format_tag(rules: list[ValidatorRule]) -> str:
    """Serialize rules back into tag syntax."""
    return ",".join(str(rule) for rule in rules)


def _field_tag(node: ast.AnnAssign) -> str:
    """Extract the tag string from a ``field(metadata=...)`` default, if any."""
    value = node.value
    if not isinstance(value, ast.Call):
        return ""
    for keyword in value.keywords:
        if keyword.arg != "metadata" or not isinstance(keyword.value, ast.Dict):
            continue
        for key, item in zip(keyword.value.keys, keyword.value.values):
            if isinstance(key, ast.Constant) and key.value == TAG_NAME:
                if not (isinstance(item, ast.Constant) and isinstance(item.value, str)):
                    raise ConfigurationError(f"{TAG_NAME} tag must be a string literal (line {node.lineno})")
                return item.value
    return ""


def _field_kind(struct: str, name: str, annotation: ast.expr) -> str:
    """Map a field annotation to a supported kind."""
    if isinstance(annotation, ast.Name) and annotation.id in _ANNOTATION_KINDS:
        return _ANNOTATION_KINDS[annotation.id]
    raise ResolutionError(
        f"Field {struct}.{name} has unsupported type {ast.unparse(annotation)!r}"
        " (only str and int are supported)"
    )


def _check_integer_literals(struct: str, descriptor: FieldDescriptor) -> None:
    """Integer fields need integer literals in default and enum rules."""
    for rule in descriptor.validators:
        if rule.kind == "default":
            literals = [rule.argument]
        elif rule.kind == "enum":
            literals = rule.argument.split("|")
        else:
            continue
        for literal in literals:
            if not _is_int_literal(literal):
                raise ConfigurationError(
                    f"Field {struct}.{descriptor.field_name} is int,"
                    f" but {rule.kind} literal {literal!r} is not"
                )


def compile_field(struct: str, node: ast.AnnAssign) -> FieldDescriptor:
    """Build the descriptor for one annotated class attribute."""
    name = node.target.id
    kind = _field_kind(struct, name, node.annotation)
    rules, external_name = parse_tag(_field_tag(node))
    descriptor = FieldDescriptor(
        field_name=name,
        external_name=external_name or name,
        kind=kind,
        validators=rules,
    )
    if kind == INTEGER:
        _check_integer_literals(struct, descriptor)
    return descriptor


def compile_struct(node: ast.ClassDef) -> StructDescriptor:
    """Build the descriptor for a parameter dataclass, fields in declaration order."""
    fields = []
    for stmt in node.body:
        if not isinstance(stmt, ast.AnnAssign):
            continue
        if not isinstance(stmt.target, ast.Name):
            raise ResolutionError(f"Unsupported field declaration in {node.name} (line {stmt.lineno})")
        fields.append(compile_field(node.name, stmt))
    logger.debug("compiled %s: %d fields", node.name, len(fields))
    return StructDescriptor(name=node.name, fields=fields)
