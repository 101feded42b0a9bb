"""
Rule for Hoisting Member Access on Fresh Instances.

Old grammars cannot access a member directly on an instantiation or clone
expression (``(new Foo)->bar()``, ``(clone $this)->getName()``). The instance
is assigned to a temporary in a statement placed before the enclosing
statement, and the access is performed on the temporary.

Transformation:
    Input:
        return (clone $this)->getName();
    Output:
        $object1 = clone $this;
        return $object1->getName();

Skipped when the access is evaluated only on some paths through its statement
(a ternary branch, the right operand of ``&&``, ``||`` or ``??``, or the
arguments of a nullsafe call), since hoisting would evaluate the instance
unconditionally.
"""

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.context import RuleContext
from syntax_downgrade.core.nodes import (
  ArrayAccess,
  Assignment,
  BinaryOp,
  CloneExpr,
  ConditionalExpr,
  ConstructorCallExpr,
  ExpressionStatement,
  MethodCall,
  Node,
  OptionalMethodCall,
  OptionalPropertyAccess,
  PropertyAccess,
  Statement,
)
from syntax_downgrade.core.rules import RewriteResult, RewriteRule, register_rule
from syntax_downgrade.enums import NodeKind

SHORT_CIRCUIT_OPERATORS = frozenset({"&&", "||", "and", "or", "??"})


@register_rule
class DowngradeInstanceMethodCall(RewriteRule):
  name = "downgrade_instance_method_call"
  description = "Move instantiation or clone out of member access into a separate statement"
  node_kinds = frozenset({NodeKind.METHOD_CALL, NodeKind.PROPERTY_ACCESS, NodeKind.ARRAY_ACCESS})

  def __init__(self, prefix: str = "object"):
    self.prefix = prefix

  @classmethod
  def from_config(cls, config: RuntimeConfig) -> "DowngradeInstanceMethodCall":
    return cls(prefix=config.instance_variable_prefix)

  def refactor(self, node: Node, context: RuleContext) -> RewriteResult:
    if not isinstance(node, (MethodCall, PropertyAccess, ArrayAccess)):
      return RewriteResult.no_change()

    if not isinstance(node.var, (ConstructorCallExpr, CloneExpr)):
      return RewriteResult.no_change()

    if context.file_id is None or not context.in_statement or self._is_conditional(node, context):
      return RewriteResult.no_change()

    temp = context.fresh_identifier(self.prefix)
    context.insert_before_statement(ExpressionStatement(Assignment(temp, node.var)))

    replacement = self._rebuild(node, context.factory.identifier(temp.name))
    replacement.flags.text_cache_valid = False
    return RewriteResult.replace(replacement)

  def _rebuild(self, node: Node, base: Node) -> Node:
    if isinstance(node, MethodCall):
      return MethodCall(base, node.name, node.args)
    if isinstance(node, PropertyAccess):
      return PropertyAccess(base, node.name)
    return ArrayAccess(base, node.dim)

  def _is_conditional(self, node: Node, context: RuleContext) -> bool:
    """True if ``node`` is only evaluated on some paths through its statement."""
    child = node
    for enclosing in reversed(context.ancestors):
      if isinstance(enclosing, Statement):
        return False
      if self._evaluates_lazily(enclosing, child):
        return True
      child = enclosing
    return False

  def _evaluates_lazily(self, enclosing: Node, child: Node) -> bool:
    """
    Args:
        enclosing: An ancestor of the rewritten access.
        child: The direct child of ``enclosing`` on the path to the access.

    Returns:
        bool: True if ``enclosing`` may skip evaluating ``child``.
    """
    if isinstance(enclosing, ConditionalExpr):
      return child is not enclosing.condition
    if isinstance(enclosing, BinaryOp):
      return enclosing.operator.lower() in SHORT_CIRCUIT_OPERATORS and child is enclosing.right
    if isinstance(enclosing, (OptionalMethodCall, OptionalPropertyAccess)):
      # Only the base is evaluated before the null check
      return child is not enclosing.var
    return False
