"""
Token-Adjacency Analysis.

Answers a single question about formatting that the AST cannot: is a list
element followed by a *dangling* separator, i.e. a separator that is followed
by the list's closing delimiter rather than by another element?

Example:
    For ``f($a, $b,)`` the analyzer reports True for ``$b`` and False for ``$a``
    (``$a`` is followed by an ordinary inter-element comma).

All functions are pure; a missing token stream or an unpositioned node is "no
signal" and yields False, which callers treat as "do not rewrite".
"""

from typing import TYPE_CHECKING, FrozenSet, Optional

from syntax_downgrade.core.nodes import Node
from syntax_downgrade.core.tokens import TokenStream

if TYPE_CHECKING:
  from syntax_downgrade.core.context import RuleContext

DEFAULT_SEPARATOR = ","
STRUCTURAL_CLOSERS: FrozenSet[str] = frozenset({")", "]"})


def is_followed_by_separator(
  tokens: Optional[TokenStream],
  node: Node,
  separator: str = DEFAULT_SEPARATOR,
  closers: FrozenSet[str] = STRUCTURAL_CLOSERS,
) -> bool:
  """
  Detects a trailing separator directly after ``node``.

  Args:
      tokens: The token stream of the node's file, or None if unavailable.
      node: A positioned node (``end_token`` must be set).
      separator: The separator token text.
      closers: Token texts that close the enclosing list.

  Returns:
      bool: True iff the next significant token is ``separator`` and the one
      after that is a closer.
  """
  if tokens is None or node.end_token is None:
    return False

  sep_idx = tokens.next_significant(node.end_token + 1)
  if sep_idx is None or tokens[sep_idx].text != separator:
    return False

  closer_idx = tokens.next_significant(sep_idx + 1)
  if closer_idx is None:
    return False

  return tokens[closer_idx].text in closers


class TokenAdjacencyAnalyzer:
  """
  Context-aware wrapper used by rules.

  Reads the token stream of the file currently being processed from the
  ``RuleContext`` so rules never hold per-file state themselves.
  """

  def __init__(self, separator: str = DEFAULT_SEPARATOR, closers: FrozenSet[str] = STRUCTURAL_CLOSERS):
    self.separator = separator
    self.closers = closers

  def is_followed(self, context: "RuleContext", node: Node) -> bool:
    """
    Args:
        context: The active rule context.
        node: The last element of a list.

    Returns:
        bool: True if a trailing separator follows ``node``.
    """
    return is_followed_by_separator(context.tokens, node, self.separator, self.closers)
