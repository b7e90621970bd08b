"""
JSON AST Loader
===============

This module builds AST nodes from a JSON document, the format in which a
parsed program is handed to the cwrun command.

Document Format
---------------
A document is either a list of statements or an object with a
"statements" list. Every node is an object whose "kind" names the node
type; the remaining keys are the node's fields:

    {"kind": "Declaration",
     "data_type": {"base": "int"},
     "name": "x",
     "initializer": [2, "+", 3, "*", 4]}

Accepted kinds are the AST class names (BlockStatement, Identifier, ...)
and these short forms:

    Block, If, While, DoWhile, For, Switch, Case, Continue, Break, Return,
    Typedef, Unary, Assignment, Ternary, Call

Shorthands
----------
- Wherever an Expression is expected, a list is read as its elements and
  a number or name as a single-element expression.
- Inside an element list, numbers become Constants, operator spellings
  ("+", "<<", "||", ...) become Operators and other strings Identifiers.
- A declaration initializer given as a JSON list is an element list;
  write {"kind": "InitializerList", "values": [...]} for braces. Inside
  "values", nested lists are nested brace lists.
- Types are {"base": "unsigned char", "pointers": 1, "name": null};
  "name" refers to a typedef (or struct/union tag).
- Locations are {"line": 3, "column": 5}.
"""

import json
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Union

from cwalk.errors import SourceLocation
from cwalk.interp import ast
from cwalk.interp.errors import ASTFormatError
from cwalk.interp.types import BaseType, DataType, parse_base_type


# Short kind names accepted in addition to the class names
_KIND_ALIASES = {
    "Block": ast.BlockStatement,
    "If": ast.IfStatement,
    "While": ast.WhileStatement,
    "DoWhile": ast.DoWhileStatement,
    "For": ast.ForStatement,
    "Switch": ast.SwitchStatement,
    "Case": ast.CaseClause,
    "Continue": ast.ContinueStatement,
    "Break": ast.BreakStatement,
    "Return": ast.ReturnStatement,
    "Typedef": ast.TypedefDeclaration,
    "Unary": ast.UnaryExpression,
    "Assignment": ast.AssignmentExpression,
    "Ternary": ast.TernaryExpression,
    "Call": ast.CallExpression,
}

_NODE_CLASSES = (
    ast.Expression,
    ast.Identifier,
    ast.Constant,
    ast.Operator,
    ast.UnaryExpression,
    ast.AssignmentExpression,
    ast.TernaryExpression,
    ast.CallExpression,
    ast.InitializerList,
    ast.Declaration,
    ast.TypedefDeclaration,
    ast.ExpressionStatement,
    ast.BlockStatement,
    ast.IfStatement,
    ast.WhileStatement,
    ast.DoWhileStatement,
    ast.ForStatement,
    ast.CaseClause,
    ast.SwitchStatement,
    ast.ContinueStatement,
    ast.BreakStatement,
    ast.ReturnStatement,
)

_KINDS = {cls.__name__: cls for cls in _NODE_CLASSES}
_KINDS.update(_KIND_ALIASES)

_BINARY_SPELLINGS = {op.value for op in ast.BinaryOperator}


class ASTLoader:
    """
    Converts decoded JSON into AST nodes.

    Args:
        filename: Name recorded in the SourceLocation of every node

    Example:
        loader = ASTLoader("prog.json")
        statements = loader.load_document(json.loads(text))
    """

    def __init__(self, filename: str = "<ast>"):
        self.filename = filename
        # field name -> converter, per node class
        self._schema = {
            ast.Expression: {"elements": self._elements, "next": self._optional(self._expression)},
            ast.Identifier: {"name": self._string, "indexes": self._list_of(self._expression)},
            ast.Constant: {"value": self._number, "base_type": self._optional(self._base_type)},
            ast.Operator: {"operator": self._enum(ast.BinaryOperator)},
            ast.UnaryExpression: {"operator": self._enum(ast.UnaryOperator), "operand": self._element},
            ast.AssignmentExpression: {
                "operator": self._enum(ast.AssignmentOperator),
                "target": self._element,
                "value": self._expression,
            },
            ast.TernaryExpression: {
                "condition": self._expression,
                "then_expr": self._expression,
                "else_expr": self._expression,
            },
            ast.CallExpression: {"function_name": self._string, "arguments": self._list_of(self._expression)},
            ast.InitializerList: {"values": self._initializer_values},
            ast.Declaration: {
                "data_type": self._data_type,
                "name": self._string,
                "dimensions": self._list_of(self._expression),
                "initializer": self._optional(self._initializer),
            },
            ast.TypedefDeclaration: {"name": self._string, "data_type": self._data_type},
            ast.ExpressionStatement: {"expression": self._optional(self._expression)},
            ast.BlockStatement: {"statements": self._list_of(self._node)},
            ast.IfStatement: {
                "condition": self._expression,
                "then_branch": self._node,
                "else_branch": self._optional(self._node),
            },
            ast.WhileStatement: {"condition": self._expression, "body": self._node},
            ast.DoWhileStatement: {"body": self._node, "condition": self._expression},
            ast.ForStatement: {
                "initializer": self._optional(self._for_initializer),
                "condition": self._optional(self._expression),
                "update": self._optional(self._expression),
                "body": self._node,
            },
            ast.CaseClause: {
                "value": self._optional(self._expression),
                "statements": self._list_of(self._node),
                "is_default": self._bool,
            },
            ast.SwitchStatement: {"expression": self._expression, "cases": self._list_of(self._node)},
            ast.ContinueStatement: {},
            ast.BreakStatement: {},
            ast.ReturnStatement: {"value": self._optional(self._expression)},
        }

    # =========================================================================
    # Documents and Nodes
    # =========================================================================

    def load_document(self, document) -> list:
        """
        Convert a decoded document into a list of statements.

        Raises:
            ASTFormatError: If the document is malformed
        """
        if isinstance(document, dict):
            if "statements" not in document:
                raise ASTFormatError("document object has no 'statements' list")
            document = document["statements"]
        if not isinstance(document, list):
            raise ASTFormatError("document must be a list of statements")
        return [self._node(item) for item in document]

    def _node(self, data) -> ast.ASTNode:
        if not isinstance(data, dict):
            raise ASTFormatError(f"expected an AST node object, got {type(data).__name__}")
        kind = data.get("kind")
        if kind is None:
            raise ASTFormatError("AST node without 'kind'")
        cls = _KINDS.get(kind)
        if cls is None:
            raise ASTFormatError(f"unknown node kind '{kind}'")

        schema = self._schema[cls]
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key == "kind":
                continue
            if key == "location":
                kwargs["location"] = self._location(value)
            elif key in schema and key in known:
                kwargs[key] = schema[key](value)
            else:
                raise ASTFormatError(f"unknown field '{key}' for node kind '{kind}'")
        return cls(**kwargs)

    # =========================================================================
    # Field Converters
    # =========================================================================

    def _optional(self, converter):
        def convert(value):
            return None if value is None else converter(value)
        return convert

    def _list_of(self, converter):
        def convert(value):
            if not isinstance(value, list):
                raise ASTFormatError(f"expected a list, got {type(value).__name__}")
            return [converter(item) for item in value]
        return convert

    def _enum(self, enum_cls: type[Enum]):
        def convert(value):
            if not isinstance(value, str):
                raise ASTFormatError(f"expected a {enum_cls.__name__} name, got {value!r}")
            try:
                return enum_cls(value)
            except ValueError:
                pass
            try:
                return enum_cls[value.upper()]
            except KeyError:
                raise ASTFormatError(f"unknown {enum_cls.__name__} '{value}'") from None
        return convert

    def _string(self, value) -> str:
        if not isinstance(value, str):
            raise ASTFormatError(f"expected a string, got {value!r}")
        return value

    def _bool(self, value) -> bool:
        if not isinstance(value, bool):
            raise ASTFormatError(f"expected true or false, got {value!r}")
        return value

    def _number(self, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ASTFormatError(f"expected a number, got {value!r}")
        return value

    def _base_type(self, value) -> BaseType:
        try:
            return parse_base_type(self._string(value))
        except ValueError as e:
            raise ASTFormatError(str(e)) from None

    def _data_type(self, value) -> DataType:
        if isinstance(value, str):
            value = {"base": value}
        if not isinstance(value, dict):
            raise ASTFormatError(f"expected a type object, got {value!r}")
        unknown = set(value) - {"base", "pointers", "dimensions", "name"}
        if unknown:
            raise ASTFormatError(f"unknown type field(s): {', '.join(sorted(unknown))}")

        base = self._base_type(value.get("base", "typedef"))
        pointers = value.get("pointers", 0)
        dimensions = value.get("dimensions", [])
        name = value.get("name")
        if name is not None:
            name = self._string(name)
        try:
            return DataType(base, pointers, tuple(dimensions), name)
        except (TypeError, ValueError) as e:
            raise ASTFormatError(f"invalid type: {e}") from None

    def _location(self, value) -> SourceLocation:
        if not isinstance(value, dict) or "line" not in value:
            raise ASTFormatError(f"invalid location {value!r}")
        return SourceLocation(self.filename, value["line"], value.get("column", 1))

    # =========================================================================
    # Expressions
    # =========================================================================

    def _expression(self, value) -> ast.Expression:
        """Read an Expression, accepting the list and scalar shorthands."""
        if isinstance(value, dict):
            node = self._node(value)
            if isinstance(node, ast.Expression):
                return node
            return ast.Expression([node], location=getattr(node, "location", None))
        if isinstance(value, list):
            return ast.Expression(self._elements(value))
        return ast.Expression([self._element(value)])

    def _elements(self, value) -> list:
        if not isinstance(value, list):
            raise ASTFormatError(f"expected an element list, got {value!r}")
        return [self._element(item) for item in value]

    def _element(self, value) -> ast.ASTNode:
        if isinstance(value, dict):
            return self._node(value)
        if isinstance(value, list):
            return ast.Expression(self._elements(value))
        if isinstance(value, str):
            if value in _BINARY_SPELLINGS:
                return ast.Operator(ast.BinaryOperator(value))
            return ast.Identifier(value)
        return ast.Constant(self._number(value))

    def _initializer(self, value) -> Union[ast.Expression, ast.InitializerList]:
        if isinstance(value, dict) and value.get("kind") == "InitializerList":
            return self._node(value)
        return self._expression(value)

    def _initializer_values(self, value) -> list:
        if not isinstance(value, list):
            raise ASTFormatError(f"expected initializer values, got {value!r}")
        values = []
        for item in value:
            if isinstance(item, list):
                values.append(ast.InitializerList(self._initializer_values(item)))
            elif isinstance(item, dict) and item.get("kind") == "InitializerList":
                values.append(self._node(item))
            else:
                values.append(self._expression(item))
        return values

    def _for_initializer(self, value):
        if isinstance(value, list) and value and all(
            isinstance(item, dict) and item.get("kind") == "Declaration" for item in value
        ):
            return [self._node(item) for item in value]
        if isinstance(value, dict) and value.get("kind") == "Declaration":
            return self._node(value)
        return self._expression(value)


# =============================================================================
# Convenience Functions
# =============================================================================

def load_program(document, filename: str = "<ast>") -> list:
    """
    Build statements from a decoded JSON document (list or dict).

    Raises:
        ASTFormatError: If the document is malformed
    """
    return ASTLoader(filename).load_document(document)


def load_file(filepath: Union[str, Path]) -> list:
    """
    Read and build a JSON AST document.

    Raises:
        ASTFormatError: If the file is not valid JSON or not a valid AST
        FileNotFoundError: If the file does not exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"AST file not found: {filepath}")

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ASTFormatError(f"invalid JSON: {e}") from None

    return load_program(document, str(filepath))
