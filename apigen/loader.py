"""Load and parse the annotated input module.

Reads a Python source file and returns its AST together with the raw
lines, which the scanner needs for comment lookup.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

from .errors import InputNotFoundError, ParseError


@dataclass
class SourceDocument:
    path: Path
    module: ast.Module
    lines: list[str]

    @property
    def import_path(self) -> str:
        """Module path the generated code imports the input from.

        Inside a package the output sits next to the input, so a relative
        import is used; otherwise the input is expected on ``sys.path``.
        """
        if (self.path.parent / "__init__.py").exists():
            return f".{self.path.stem}"
        return self.path.stem


def load_source(path: Path) -> SourceDocument:
    """Read and parse the input module from disk."""
    if not path.exists():
        raise InputNotFoundError(f"File {path} does not exist")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Can not parse {path}: not valid UTF-8 (byte {e.start})") from e
    try:
        module = ast.parse(text, filename=str(path))
    except SyntaxError as e:
        raise ParseError(f"Can not parse {path}: {e.msg} (line {e.lineno})") from e
    return SourceDocument(path=path, module=module, lines=text.splitlines())


def class_declarations(module: ast.Module) -> dict[str, ast.ClassDef]:
    """Return the module-level classes by name."""
    return {
        node.name: node
        for node in module.body
        if isinstance(node, ast.ClassDef)
    }


def is_dataclass(node: ast.ClassDef) -> bool:
    """Check whether a class is decorated with ``@dataclass`` in any spelling."""
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Call):
            decorator = decorator.func
        if isinstance(decorator, ast.Name) and decorator.id == "dataclass":
            return True
        if isinstance(decorator, ast.Attribute) and decorator.attr == "dataclass":
            return True
    return False
