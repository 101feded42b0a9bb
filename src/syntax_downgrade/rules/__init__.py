"""
Built-in Downgrade Rules.

Importing this package registers every built-in rule with the catalog in
``syntax_downgrade.core.rules``. ``BUILTIN_RULES`` fixes their default order.
"""

from syntax_downgrade.rules.instance_call import DowngradeInstanceMethodCall
from syntax_downgrade.rules.nullsafe import DowngradeNullsafeToTernary
from syntax_downgrade.rules.trailing_commas import DowngradeTrailingCommas

BUILTIN_RULES = [
  DowngradeNullsafeToTernary,
  DowngradeTrailingCommas,
  DowngradeInstanceMethodCall,
]

__all__ = [
  "BUILTIN_RULES",
  "DowngradeInstanceMethodCall",
  "DowngradeNullsafeToTernary",
  "DowngradeTrailingCommas",
]
