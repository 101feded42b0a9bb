"""
Rewrite Rule Contract, Rule Registry and Dynamic Loader.

This module provides the infrastructure for defining downgrade rules:

1.  **RewriteResult**: What a rule hands back to the ``Dispatcher`` for a node
    (no change, a replacement subtree, or an in-place flag mutation).
2.  **RewriteRule**: The abstract base every rule implements. A rule declares
    the ``NodeKind`` values it wants to see and rewrites one node at a time.
3.  **Catalog**: ``register_rule`` adds a rule class to a global, ordered
    registry; ``get_rules`` lazily imports the built-in ``syntax_downgrade.rules``
    package; ``load_rules`` imports rule modules from external directories.
"""

import importlib.util
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Optional, Type, TypeVar

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.nodes import Node
from syntax_downgrade.enums import NodeKind
from syntax_downgrade.utils.console import log_warning

if TYPE_CHECKING:
  from syntax_downgrade.core.context import RuleContext


class RewriteAction(str, Enum):
  NO_CHANGE = "no_change"
  REPLACE = "replace"
  MUTATE_IN_PLACE = "mutate_in_place"


@dataclass(frozen=True)
class RewriteResult:
  """
  Outcome of a single ``RewriteRule.refactor`` call.

  Attributes:
      action: What happened.
      node: The replacement subtree for ``REPLACE``; None otherwise.
  """

  action: RewriteAction
  node: Optional[Node] = None

  @classmethod
  def no_change(cls) -> "RewriteResult":
    return _NO_CHANGE

  @classmethod
  def replace(cls, node: Node) -> "RewriteResult":
    return cls(RewriteAction.REPLACE, node)

  @classmethod
  def mutated(cls) -> "RewriteResult":
    return _MUTATED

  @property
  def changed(self) -> bool:
    return self.action is not RewriteAction.NO_CHANGE


_NO_CHANGE = RewriteResult(RewriteAction.NO_CHANGE)
_MUTATED = RewriteResult(RewriteAction.MUTATE_IN_PLACE)


class RewriteRule(ABC):
  """
  Abstract contract for a downgrade rule.

  Rules are stateless apart from configuration: everything that depends on the
  file being processed comes from the ``RuleContext``. A rule may replace the
  node it was handed or flip formatting flags on it and its children, but must
  not touch nodes outside that subtree.
  """

  name: str = ""
  description: str = ""
  node_kinds: FrozenSet[NodeKind] = frozenset()

  @classmethod
  def from_config(cls, config: RuntimeConfig) -> "RewriteRule":
    """Builds the rule from runtime configuration."""
    return cls()

  @abstractmethod
  def refactor(self, node: Node, context: "RuleContext") -> RewriteResult:
    """
    Rewrites one node.

    Args:
        node: A node whose kind is in ``node_kinds``.
        context: The per-file rule context.

    Returns:
        RewriteResult: The outcome.
    """

  def __repr__(self) -> str:
    return f"<{type(self).__name__} {self.name}>"


R = TypeVar("R", bound=Type[RewriteRule])

# Global Registry (insertion ordered)
_RULES: Dict[str, Type[RewriteRule]] = {}
_RULES_LOADED = False


def register_rule(cls: R) -> R:
  """
  Class decorator adding a rule to the catalog under ``cls.name``.

  Raises:
      ValueError: If the rule has no name or declares no node kinds.
  """
  if not cls.name:
    raise ValueError(f"Rule {cls.__name__} must define a name")
  if not cls.node_kinds:
    raise ValueError(f"Rule {cls.name} must declare at least one node kind")
  if cls.name in _RULES and _RULES[cls.name] is not cls:
    log_warning(f"Rule '{cls.name}' re-registered by {cls.__module__}")
  _RULES[cls.name] = cls
  return cls


def get_rule(name: str) -> Optional[Type[RewriteRule]]:
  """Retrieves a registered rule class by name."""
  if not _RULES_LOADED:
    load_rules()
  return _RULES.get(name)


def get_rules() -> List[Type[RewriteRule]]:
  """
  Returns all registered rule classes in registration order.
  Lazily loads the built-in rules if the registry has not been populated.
  """
  if not _RULES_LOADED:
    load_rules()
  return list(_RULES.values())


def clear_rules() -> None:
  """Resets the internal rule registry. Primarily for testing."""
  global _RULES_LOADED
  _RULES.clear()
  _RULES_LOADED = False


def load_rules(extra_dirs: Optional[List[Path]] = None) -> int:
  """
  Imports the built-in rules and, optionally, rule modules from directories.

  Args:
      extra_dirs: Additional directories whose ``*.py`` files register rules.

  Returns:
      int: Number of rules in the registry afterwards.
  """
  global _RULES_LOADED

  if not _RULES_LOADED:
    import syntax_downgrade.rules as builtin

    # Re-register in case clear_rules() ran after the package was imported
    for cls in builtin.BUILTIN_RULES:
      register_rule(cls)
    _RULES_LOADED = True

  for directory in extra_dirs or []:
    if directory.exists() and directory.is_dir():
      _import_from_dir(directory)
    else:
      log_warning(f"Rule directory not found: {directory}")

  return len(_RULES)


def _import_from_dir(directory: Path) -> int:
  """Helper to import every python file of a directory by path."""
  count = 0
  for item in sorted(directory.glob("*.py")):
    if item.name == "__init__.py":
      continue
    unique_name = f"syntax_downgrade_rule_{item.stem}_{item.stat().st_ino}"
    spec = importlib.util.spec_from_file_location(unique_name, item)
    if not spec or not spec.loader:
      continue
    mod = importlib.util.module_from_spec(spec)
    sys.modules[unique_name] = mod
    spec.loader.exec_module(mod)
    count += 1
  return count
