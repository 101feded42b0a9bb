"""
Enumerations for syntax-downgrade.

This module defines the closed sets of tags used across the codebase: the node
kinds that rules dispatch on, the lexical token kinds, and the styles of
null-check emitted by the optional-chain lowering.
"""

from enum import Enum


class NodeKind(str, Enum):
  """
  Stable tags identifying what an AST node represents.

  Rules declare the subset of kinds they are interested in and the
  ``Dispatcher`` indexes them by these values.
  """

  PROGRAM = "program"
  CLASS_DECL = "class_decl"
  FUNCTION_DECL = "function_decl"
  METHOD_DECL = "method_decl"
  PARAMETER = "parameter"
  CLOSURE_EXPR = "closure_expr"
  CLOSURE_USE = "closure_use"
  ARGUMENT = "argument"
  EXPRESSION_STATEMENT = "expression_statement"
  RETURN_STATEMENT = "return_statement"
  IDENTIFIER = "identifier"  # $name
  NAME = "name"  # bare names: members, functions, classes
  NULL_LITERAL = "null_literal"
  SCALAR = "scalar"
  ASSIGNMENT = "assignment"
  BINARY_OP = "binary_op"
  CONDITIONAL_EXPR = "conditional_expr"
  METHOD_CALL = "method_call"
  OPTIONAL_METHOD_CALL = "optional_method_call"
  PROPERTY_ACCESS = "property_access"
  OPTIONAL_PROPERTY_ACCESS = "optional_property_access"
  ARRAY_ACCESS = "array_access"
  CALL_EXPR = "call_expr"
  STATIC_CALL_EXPR = "static_call_expr"
  CONSTRUCTOR_CALL_EXPR = "constructor_call_expr"
  CLONE_EXPR = "clone_expr"


class TokenKind(str, Enum):
  """Enumeration of Lexer Token Types."""

  OPEN_TAG = "OPEN_TAG"
  CLOSE_TAG = "CLOSE_TAG"
  WHITESPACE = "WHITESPACE"
  COMMENT = "COMMENT"
  VARIABLE = "VARIABLE"
  IDENTIFIER = "IDENTIFIER"
  NUMBER = "NUMBER"
  STRING = "STRING"
  NULLSAFE_ARROW = "NULLSAFE_ARROW"
  ARROW = "ARROW"
  DOUBLE_COLON = "DOUBLE_COLON"
  DOUBLE_ARROW = "DOUBLE_ARROW"
  SYMBOL = "SYMBOL"
  MISMATCH = "MISMATCH"


class NullCheckStyle(str, Enum):
  """
  How the lowered optional-chain conditional tests its subject.

  ``TRUTHY`` uses the assignment itself as the condition, relying on the
  target language treating every non-null object as truthy. ``EXPLICIT``
  compares the assignment against null with a strict identity operator.
  """

  TRUTHY = "truthy"
  EXPLICIT = "explicit"
