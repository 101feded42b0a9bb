"""
Rule for Lowering Optional Chains to Guarded Conditionals.

Older grammars have no nullsafe operator. Each ``?->`` link is rewritten into a
ternary that evaluates the base expression exactly once, stores it in a fresh
temporary, and only performs the access when the temporary is set.

Transformation:
    Input:
        $dateAsString = $booking->getStartDate()?->asDateTimeString();
    Output:
        $dateAsString = ($nullsafeVariable1 = $booking->getStartDate())
            ? $nullsafeVariable1->asDateTimeString()
            : null;

Chains are lowered one link at a time. The dispatcher visits children first,
so by the time an outer link is rewritten its base is already the conditional
produced for the inner link.
"""

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.context import RuleContext
from syntax_downgrade.core.nodes import (
  Assignment,
  BinaryOp,
  ConditionalExpr,
  MethodCall,
  Node,
  OptionalMethodCall,
  OptionalPropertyAccess,
  PropertyAccess,
)
from syntax_downgrade.core.rules import RewriteResult, RewriteRule, register_rule
from syntax_downgrade.enums import NodeKind, NullCheckStyle


@register_rule
class DowngradeNullsafeToTernary(RewriteRule):
  """
  Rewrites optional method calls and property fetches into conditionals.
  """

  name = "downgrade_nullsafe_to_ternary"
  description = "Change nullsafe operator to ternary operator"
  node_kinds = frozenset({NodeKind.OPTIONAL_METHOD_CALL, NodeKind.OPTIONAL_PROPERTY_ACCESS})

  def __init__(self, prefix: str = "nullsafeVariable", null_check: NullCheckStyle = NullCheckStyle.TRUTHY):
    """
    Args:
        prefix: Name prefix of the introduced temporaries.
        null_check: Whether the condition is the bare assignment or an
            explicit ``!== null`` comparison.
    """
    self.prefix = prefix
    self.null_check = null_check

  @classmethod
  def from_config(cls, config: RuntimeConfig) -> "DowngradeNullsafeToTernary":
    return cls(prefix=config.nullsafe_variable_prefix, null_check=config.null_check)

  def refactor(self, node: Node, context: RuleContext) -> RewriteResult:
    """
    Args:
        node (OptionalMethodCall | OptionalPropertyAccess): The nullsafe link.
        context (RuleContext): Per-file context providing the temporary.

    Returns:
        RewriteResult: A replacement conditional, or no change when the node
        is not associated with a file (no hygienic name can be allocated).
    """
    if context.file_id is None:
      return RewriteResult.no_change()

    if not isinstance(node, (OptionalMethodCall, OptionalPropertyAccess)):
      return RewriteResult.no_change()

    temp = context.fresh_identifier(self.prefix)

    # The access gets its own Identifier instance; nodes are never shared
    access_base = context.factory.identifier(temp.name)
    if isinstance(node, OptionalMethodCall):
      access: Node = MethodCall(access_base, node.name, node.args)
    else:
      access = PropertyAccess(access_base, node.name)
    access.flags.text_cache_valid = False

    condition: Node = Assignment(temp, node.var)
    if self.null_check is NullCheckStyle.EXPLICIT:
      condition = BinaryOp(condition, "!==", context.factory.null())

    result = ConditionalExpr(condition, access, context.factory.null())
    result.flags.text_cache_valid = False
    return RewriteResult.replace(result)
