"""
Node Dispatcher and Traversal Driver.

This module provides the ``Dispatcher``, which walks an AST depth-first and
hands each node to the rules registered for its ``NodeKind``.

Traversal protocol:

1.  **Children First**: A node's children are processed before the node itself,
    so an outer construct always sees the already-rewritten form of its inner
    parts (this is what lowers ``$a?->b()?->c()`` link by link, inside out).
2.  **Rule Order**: Every rule registered for the node's kind runs in
    registration order. ``MUTATE_IN_PLACE`` continues with the next rule on the
    same node. ``REPLACE`` stops processing of the old node.
3.  **Revisiting**: A replacement subtree is traversed again, children and
    root, so other rules get a chance at the new shape. The revisit depth is
    inherited by the replacement's subtree, so a replacement produced while
    revisiting another one (at the same position or inside it) counts towards
    ``RuntimeConfig.max_revisits``. When the bound is hit the last replacement
    is kept as-is.
4.  **Statement Splicing**: Statements queued through
    ``RuleContext.insert_before_statement`` are inserted into the enclosing
    statement list right before the statement that was being traversed.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Union

from rich.markup import escape

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.allocator import AllocatorPool
from syntax_downgrade.core.context import RuleContext
from syntax_downgrade.core.nodes import Node, Statement, collect_identifier_names
from syntax_downgrade.core.rules import RewriteAction, RewriteRule
from syntax_downgrade.core.tokens import Token, TokenStream
from syntax_downgrade.core.tracer import TraceLogger, get_tracer
from syntax_downgrade.enums import NodeKind
from syntax_downgrade.utils.console import log_warning

TokenInput = Union[TokenStream, Sequence[Token], None]


class Dispatcher:
  """
  Runs registered rules over one file's AST at a time.

  A dispatcher may be reused across many files. Its allocator pool lives as
  long as the dispatcher does; counters reset lazily when the file id changes.
  """

  def __init__(
    self,
    rules: Optional[List[RewriteRule]] = None,
    config: Optional[RuntimeConfig] = None,
    tracer: Optional[TraceLogger] = None,
  ):
    """
    Initializes the dispatcher.

    Args:
        rules: Rule instances to register, in order.
        config: Runtime configuration. Defaults are used if None.
        tracer: Event recorder. The global tracer is used if None.
    """
    self.config = config or RuntimeConfig()
    self._tracer = tracer
    self._rules: List[RewriteRule] = []
    self._by_kind: Dict[NodeKind, List[RewriteRule]] = defaultdict(list)
    self._allocators = AllocatorPool()
    self._applied: List[str] = []

    for rule in rules or []:
      self.register_rule(rule)

  @property
  def rules(self) -> List[RewriteRule]:
    return list(self._rules)

  @property
  def tracer(self) -> TraceLogger:
    return self._tracer if self._tracer is not None else get_tracer()

  @property
  def applied_rules(self) -> List[str]:
    """Names of the rules that changed something during the last ``run``."""
    return list(self._applied)

  def register_rule(self, rule: RewriteRule) -> None:
    """
    Adds a rule to the dispatch index.

    Args:
        rule: The rule instance. Its ``node_kinds`` determine which nodes it sees.
    """
    self._rules.append(rule)
    for kind in rule.node_kinds:
      self._by_kind[kind].append(rule)

  def run(self, file_id: Optional[str], root: Node, tokens: TokenInput = None) -> Node:
    """
    Rewrites one file's tree.

    Args:
        file_id: Identifier of the file, or None if the tree has no file.
        root: The AST root produced by the parser.
        tokens: The file's token stream, if available.

    Returns:
        Node: The rewritten root (a different object only if a rule replaced it).
    """
    if tokens is not None and not isinstance(tokens, TokenStream):
      tokens = TokenStream(tokens)

    context = RuleContext(
      file_id=file_id,
      tokens=tokens,
      config=self.config,
      allocators=self._allocators,
      reserved_names=collect_identifier_names(root),
    )
    self._applied = []
    return self._visit(root, context, revisits=0)

  def _visit(self, node: Node, context: RuleContext, revisits: int) -> Node:
    context.ancestors.append(node)
    try:
      self._visit_children(node, context, revisits)
    finally:
      context.ancestors.pop()
    return self._apply_rules(node, context, revisits)

  def _visit_children(self, node: Node, context: RuleContext, depth: int) -> None:
    for field_name in node.child_fields:
      value = getattr(node, field_name)
      if isinstance(value, list):
        # Spliced in place; outside references to the list stay valid
        value[:] = self._visit_list(value, context, depth)
      elif isinstance(value, Node):
        setattr(node, field_name, self._visit(value, context, depth))

  def _visit_list(self, items: List[Node], context: RuleContext, depth: int) -> List[Node]:
    result: List[Node] = []
    for item in items:
      if not isinstance(item, Node):
        result.append(item)
        continue

      if not isinstance(item, Statement):
        result.append(self._visit(item, context, depth))
        continue

      context.push_statement_frame()
      try:
        new_item = self._visit(item, context, depth)
      finally:
        hoisted = context.pop_statement_frame()
      result.extend(hoisted)
      result.append(new_item)
    return result

  def _apply_rules(self, node: Node, context: RuleContext, revisits: int) -> Node:
    for rule in list(self._by_kind.get(node.kind, ())):
      result = rule.refactor(node, context)
      if not result.changed:
        continue

      self._applied.append(rule.name)
      self.tracer.log_mutation(rule.name, node.kind.value, result.action.value, context.file_id)

      if result.action is RewriteAction.MUTATE_IN_PLACE:
        continue

      replacement = result.node
      if replacement is None:
        raise ValueError(f"Rule '{rule.name}' returned REPLACE without a node")

      if revisits + 1 >= self.config.max_revisits:
        where = escape(str(context.file_id))
        message = f"Revisit limit ({self.config.max_revisits}) reached at {node.kind.value} in {where}"
        log_warning(message)
        self.tracer.log_warning(message)
        return replacement

      return self._visit(replacement, context, revisits + 1)

    return node
