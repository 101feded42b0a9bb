"""
Rule Context Module.

This module provides the ``RuleContext`` container, which holds the per-file
state a rule may consult while rewriting a node. It replaces state kept on rule
instances (current file name, counters) with an explicit value threaded into
every ``refactor`` call, so nothing leaks between files.

It also provides ``NodeFactory``, the construction helper rules use to
synthesize nodes.
"""

from typing import List, Optional, Set

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.allocator import AllocatorPool
from syntax_downgrade.core.nodes import Identifier, Node, NullLiteral, Statement
from syntax_downgrade.core.tokens import TokenStream


class NodeFactory:
  """Builds unpositioned nodes for replacement subtrees."""

  def null(self) -> NullLiteral:
    return NullLiteral()

  def identifier(self, name: str) -> Identifier:
    return Identifier(name)


class RuleContext:
  """
  Per-file state container passed to every rule invocation.

  Attributes:
      file_id: Identifier of the file being processed, or None when the tree
          is not associated with any tracked file.
      tokens: The file's token stream, or None if unavailable.
      config: The runtime configuration.
      factory: Helper for synthesizing nodes.
      ancestors: Nodes enclosing the node currently being visited, outermost
          first. Maintained by the ``Dispatcher``.
  """

  def __init__(
    self,
    file_id: Optional[str],
    tokens: Optional[TokenStream],
    config: RuntimeConfig,
    allocators: AllocatorPool,
    reserved_names: Optional[Set[str]] = None,
  ):
    """
    Initializes the context.

    Args:
        file_id: The current file identifier.
        tokens: Token stream of the current file.
        config: Runtime configuration.
        allocators: The run-wide allocator pool (owned by the dispatcher).
        reserved_names: Variable names already present in the file.
    """
    self.file_id = file_id
    self.tokens = tokens
    self.config = config
    self.factory = NodeFactory()
    self.ancestors: List[Node] = []

    self._allocators = allocators
    self._reserved: Set[str] = set(reserved_names or ())
    # One frame per statement being traversed; see insert_before_statement
    self._pending_frames: List[List[Statement]] = []

  def fresh_identifier(self, prefix: str) -> Identifier:
    """
    Allocates a hygienic variable for the current file.

    Args:
        prefix: Name prefix; each prefix has its own counter.

    Returns:
        Identifier: A new identifier that collides with no name in the file.

    Raises:
        ValueError: If the context has no file association.
    """
    if self.file_id is None:
      raise ValueError("Cannot allocate an identifier outside of a file")
    ident = self._allocators.get(prefix).allocate(self.file_id, self._reserved)
    self._reserved.add(ident.name)
    return ident

  @property
  def in_statement(self) -> bool:
    """True if the visited node lies inside a statement of a statement list."""
    return bool(self._pending_frames)

  def insert_before_statement(self, statement: Statement) -> None:
    """
    Queues ``statement`` to be spliced in front of the innermost enclosing
    statement once the dispatcher leaves it.

    Raises:
        ValueError: If no statement encloses the current node.
    """
    if not self._pending_frames:
      raise ValueError("No enclosing statement to insert before")
    self._pending_frames[-1].append(statement)

  def push_statement_frame(self) -> None:
    self._pending_frames.append([])

  def pop_statement_frame(self) -> List[Statement]:
    return self._pending_frames.pop()
