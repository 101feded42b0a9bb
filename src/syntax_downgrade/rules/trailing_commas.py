"""
Rule for Removing Trailing Commas in Parameter, Argument and Use Lists.

Older grammars reject a dangling comma after the last element of a parameter
list, a closure ``use`` list, or a call's argument list. The AST does not record
such a comma, so the rule consults the token stream through the
``TokenAdjacencyAnalyzer`` and signals the printer via formatting flags:

- the enclosing node gets ``text_cache_valid = False`` so its text is
  regenerated rather than copied from the source;
- the last element gets ``suppress_trailing_separator = True``.

Transformation:
    Input:
        function inFunction(string $value1, string $value2,) {}
        function () use ($value1, $value2,) {};
        $this->run($value1, $value2,);
    Output:
        function inFunction(string $value1, string $value2) {}
        function () use ($value1, $value2) {};
        $this->run($value1, $value2);
"""

from typing import Optional, Sequence

from syntax_downgrade.core.adjacency import TokenAdjacencyAnalyzer
from syntax_downgrade.core.context import RuleContext
from syntax_downgrade.core.nodes import (
  CallExpr,
  ClosureExpr,
  ConstructorCallExpr,
  FunctionDecl,
  MethodCall,
  MethodDecl,
  Node,
  StaticCallExpr,
)
from syntax_downgrade.core.rules import RewriteResult, RewriteRule, register_rule
from syntax_downgrade.enums import NodeKind

CALL_LIKE = (CallExpr, MethodCall, StaticCallExpr, ConstructorCallExpr)
DECLARATIONS = (FunctionDecl, MethodDecl, ClosureExpr)


@register_rule
class DowngradeTrailingCommas(RewriteRule):
  name = "downgrade_trailing_commas"
  description = "Remove trailing commas in param, argument or use list"
  node_kinds = frozenset(
    {
      NodeKind.FUNCTION_DECL,
      NodeKind.METHOD_DECL,
      NodeKind.CLOSURE_EXPR,
      NodeKind.CALL_EXPR,
      NodeKind.METHOD_CALL,
      NodeKind.STATIC_CALL_EXPR,
      NodeKind.CONSTRUCTOR_CALL_EXPR,
    }
  )

  def __init__(self, analyzer: Optional[TokenAdjacencyAnalyzer] = None):
    self.analyzer = analyzer or TokenAdjacencyAnalyzer()

  def refactor(self, node: Node, context: RuleContext) -> RewriteResult:
    if isinstance(node, CALL_LIKE):
      changed = self._clean_trailing_comma(node, node.args, context)
    elif isinstance(node, DECLARATIONS):
      changed = False
      # Captures and params can each carry their own trailing comma
      if isinstance(node, ClosureExpr):
        changed = self._clean_trailing_comma(node, node.uses, context)
      changed = self._clean_trailing_comma(node, node.params, context) or changed
    else:
      changed = False

    return RewriteResult.mutated() if changed else RewriteResult.no_change()

  def _clean_trailing_comma(self, node: Node, elements: Sequence[Node], context: RuleContext) -> bool:
    """
    Flags the last element of ``elements`` if a trailing comma follows it.

    Args:
        node: The node owning the list.
        elements: Parameters, arguments or closure uses.
        context: Per-file context providing the token stream.

    Returns:
        bool: True if flags were changed.
    """
    if not elements:
      return False

    last = elements[-1]
    if last.flags.suppress_trailing_separator:
      return False

    if not self.analyzer.is_followed(context, last):
      return False

    node.flags.text_cache_valid = False
    last.flags.suppress_trailing_separator = True
    return True
