"""Descriptor model shared by the scanner, rule parser and context builder."""

from __future__ import annotations

from dataclasses import dataclass, field

TEXT = "text"
INTEGER = "integer"

ZERO_VALUES: dict[str, str | int] = {
    TEXT: "",
    INTEGER: 0,
}


@dataclass
class ValidatorRule:
    kind: str
    argument: str = ""

    def __str__(self) -> str:
        if self.argument:
            return f"{self.kind}={self.argument}"
        return self.kind


@dataclass
class FieldDescriptor:
    field_name: str
    external_name: str
    kind: str
    validators: list[ValidatorRule] = field(default_factory=list)

    @property
    def zero_value(self) -> str | int:
        return ZERO_VALUES[self.kind]

    @property
    def default_value(self) -> str | int | None:
        """Literal of the first ``default`` rule, converted to the field kind."""
        for rule in self.validators:
            if rule.kind == "default":
                return int(rule.argument) if self.kind == INTEGER else rule.argument
        return None


@dataclass
class StructDescriptor:
    name: str
    fields: list[FieldDescriptor] = field(default_factory=list)


@dataclass
class EndpointDescriptor:
    receiver_type: str
    method_name: str
    route: str
    param_type_name: str
    requires_auth: bool = False
    allowed_http_method: str | None = None


@dataclass
class ScanResult:
    """Everything the scanner extracted from one input module."""

    module_name: str
    source_name: str = ""
    endpoints: dict[str, list[EndpointDescriptor]] = field(default_factory=dict)
    structs: dict[str, StructDescriptor] = field(default_factory=dict)
