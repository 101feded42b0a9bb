"""
Abstract Syntax Tree Nodes.

This module defines the data structures the downgrade engine rewrites. Nodes are
produced by an external parser, walked by the ``Dispatcher`` and handed to an
external printer afterwards.

Every node records:

1.  **A Kind Tag**: ``kind`` (a ``NodeKind``) used for rule dispatch.
2.  **Child Fields**: ``child_fields`` names the attributes holding child nodes
    (single nodes or lists), in source order. Traversal relies on this instead
    of introspecting arbitrary attributes.
3.  **Token Span**: ``start_token`` / ``end_token`` index the file's token stream
    (inclusive). Synthesized nodes leave both as ``None``.
4.  **Formatting Flags**: a small typed set of printer hints.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, List, Optional, Set, Tuple, Union

from syntax_downgrade.enums import NodeKind


@dataclass
class FormattingFlags:
  """
  Printer side channel.

  Attributes:
      suppress_trailing_separator: The printer must not emit a separator after
          this list element even if the original source had one.
      text_cache_valid: When False the printer must regenerate the node's text
          instead of reusing the original source slice.
  """

  suppress_trailing_separator: bool = False
  text_cache_valid: bool = True


@dataclass
class Node:
  """Base class for all AST nodes."""

  kind: ClassVar[NodeKind]
  child_fields: ClassVar[Tuple[str, ...]] = ()

  start_token: Optional[int] = field(default=None, kw_only=True)
  end_token: Optional[int] = field(default=None, kw_only=True)
  flags: FormattingFlags = field(default_factory=FormattingFlags, kw_only=True)

  def iter_children(self) -> Iterator["Node"]:
    """Yields direct child nodes in source order."""
    for name in self.child_fields:
      value = getattr(self, name)
      if isinstance(value, list):
        for item in value:
          if isinstance(item, Node):
            yield item
      elif isinstance(value, Node):
        yield value


@dataclass
class Statement(Node):
  """Marker base for nodes that may be spliced into statement lists."""


# --- Leaves ---


@dataclass
class Identifier(Node):
  """A variable reference (``$name``). ``name`` excludes the sigil."""

  kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER

  name: str


@dataclass
class Name(Node):
  """A bare name: member, function or class identifier."""

  kind: ClassVar[NodeKind] = NodeKind.NAME

  value: str


@dataclass
class NullLiteral(Node):
  kind: ClassVar[NodeKind] = NodeKind.NULL_LITERAL


@dataclass
class Scalar(Node):
  kind: ClassVar[NodeKind] = NodeKind.SCALAR

  value: Union[int, float, str, bool]


# --- Expressions ---


@dataclass
class Assignment(Node):
  kind: ClassVar[NodeKind] = NodeKind.ASSIGNMENT
  child_fields: ClassVar[Tuple[str, ...]] = ("target", "value")

  target: Node
  value: Node


@dataclass
class BinaryOp(Node):
  kind: ClassVar[NodeKind] = NodeKind.BINARY_OP
  child_fields: ClassVar[Tuple[str, ...]] = ("left", "right")

  left: Node
  operator: str
  right: Node


@dataclass
class ConditionalExpr(Node):
  """Ternary ``condition ? when_true : when_false``."""

  kind: ClassVar[NodeKind] = NodeKind.CONDITIONAL_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("condition", "when_true", "when_false")

  condition: Node
  when_true: Node
  when_false: Node


@dataclass
class Argument(Node):
  kind: ClassVar[NodeKind] = NodeKind.ARGUMENT
  child_fields: ClassVar[Tuple[str, ...]] = ("value",)

  value: Node
  unpack: bool = False


@dataclass
class MethodCall(Node):
  kind: ClassVar[NodeKind] = NodeKind.METHOD_CALL
  child_fields: ClassVar[Tuple[str, ...]] = ("var", "name", "args")

  var: Node
  name: Name
  args: List[Argument] = field(default_factory=list)


@dataclass
class OptionalMethodCall(Node):
  """Nullsafe method call ``var?->name(args)``."""

  kind: ClassVar[NodeKind] = NodeKind.OPTIONAL_METHOD_CALL
  child_fields: ClassVar[Tuple[str, ...]] = ("var", "name", "args")

  var: Node
  name: Name
  args: List[Argument] = field(default_factory=list)


@dataclass
class PropertyAccess(Node):
  kind: ClassVar[NodeKind] = NodeKind.PROPERTY_ACCESS
  child_fields: ClassVar[Tuple[str, ...]] = ("var", "name")

  var: Node
  name: Name


@dataclass
class OptionalPropertyAccess(Node):
  """Nullsafe property fetch ``var?->name``."""

  kind: ClassVar[NodeKind] = NodeKind.OPTIONAL_PROPERTY_ACCESS
  child_fields: ClassVar[Tuple[str, ...]] = ("var", "name")

  var: Node
  name: Name


@dataclass
class ArrayAccess(Node):
  kind: ClassVar[NodeKind] = NodeKind.ARRAY_ACCESS
  child_fields: ClassVar[Tuple[str, ...]] = ("var", "dim")

  var: Node
  dim: Optional[Node] = None


@dataclass
class CallExpr(Node):
  """Plain function call ``name(args)``."""

  kind: ClassVar[NodeKind] = NodeKind.CALL_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("name", "args")

  name: Node
  args: List[Argument] = field(default_factory=list)


@dataclass
class StaticCallExpr(Node):
  """Static or qualified call ``class_name::name(args)``."""

  kind: ClassVar[NodeKind] = NodeKind.STATIC_CALL_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("class_name", "name", "args")

  class_name: Node
  name: Name
  args: List[Argument] = field(default_factory=list)


@dataclass
class ConstructorCallExpr(Node):
  """Object construction ``new class_name(args)``."""

  kind: ClassVar[NodeKind] = NodeKind.CONSTRUCTOR_CALL_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("class_name", "args")

  class_name: Node
  args: List[Argument] = field(default_factory=list)


@dataclass
class CloneExpr(Node):
  kind: ClassVar[NodeKind] = NodeKind.CLONE_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("expr",)

  expr: Node


# --- Callables ---


@dataclass
class Parameter(Node):
  kind: ClassVar[NodeKind] = NodeKind.PARAMETER
  child_fields: ClassVar[Tuple[str, ...]] = ("type_hint", "variable", "default")

  variable: Identifier
  type_hint: Optional[Name] = None
  default: Optional[Node] = None


@dataclass
class ClosureUse(Node):
  """One entry of a closure's ``use (...)`` capture list."""

  kind: ClassVar[NodeKind] = NodeKind.CLOSURE_USE
  child_fields: ClassVar[Tuple[str, ...]] = ("variable",)

  variable: Identifier
  by_ref: bool = False


@dataclass
class ClosureExpr(Node):
  kind: ClassVar[NodeKind] = NodeKind.CLOSURE_EXPR
  child_fields: ClassVar[Tuple[str, ...]] = ("params", "uses", "body")

  params: List[Parameter] = field(default_factory=list)
  uses: List[ClosureUse] = field(default_factory=list)
  body: List[Node] = field(default_factory=list)
  is_static: bool = False


@dataclass
class FunctionDecl(Node):
  kind: ClassVar[NodeKind] = NodeKind.FUNCTION_DECL
  child_fields: ClassVar[Tuple[str, ...]] = ("name", "params", "body")

  name: Name
  params: List[Parameter] = field(default_factory=list)
  body: List[Node] = field(default_factory=list)


@dataclass
class MethodDecl(Node):
  kind: ClassVar[NodeKind] = NodeKind.METHOD_DECL
  child_fields: ClassVar[Tuple[str, ...]] = ("name", "params", "body")

  name: Name
  params: List[Parameter] = field(default_factory=list)
  body: List[Node] = field(default_factory=list)
  modifiers: List[str] = field(default_factory=list)


@dataclass
class ClassDecl(Node):
  kind: ClassVar[NodeKind] = NodeKind.CLASS_DECL
  child_fields: ClassVar[Tuple[str, ...]] = ("name", "methods")

  name: Name
  methods: List[MethodDecl] = field(default_factory=list)


# --- Statements ---


@dataclass
class ExpressionStatement(Statement):
  kind: ClassVar[NodeKind] = NodeKind.EXPRESSION_STATEMENT
  child_fields: ClassVar[Tuple[str, ...]] = ("expr",)

  expr: Node


@dataclass
class ReturnStatement(Statement):
  kind: ClassVar[NodeKind] = NodeKind.RETURN_STATEMENT
  child_fields: ClassVar[Tuple[str, ...]] = ("expr",)

  expr: Optional[Node] = None


@dataclass
class Program(Node):
  """Root node of one source file."""

  kind: ClassVar[NodeKind] = NodeKind.PROGRAM
  child_fields: ClassVar[Tuple[str, ...]] = ("statements",)

  statements: List[Node] = field(default_factory=list)


def walk(node: Node) -> Iterator[Node]:
  """
  Yields ``node`` and all of its descendants in pre-order.

  Args:
      node: The subtree root.

  Returns:
      Iterator[Node]: Nodes in source order, parents before children.
  """
  stack = [node]
  while stack:
    current = stack.pop()
    yield current
    stack.extend(reversed(list(current.iter_children())))


def collect_identifier_names(node: Node) -> Set[str]:
  """Returns every variable name referenced inside ``node``."""
  return {n.name for n in walk(node) if isinstance(n, Identifier)}
