"""
Runtime Configuration Store.

Settings are resolved from three layers, later layers winning:

1.  Model defaults.
2.  The ``[tool.syntax_downgrade]`` table of the nearest ``pyproject.toml``.
3.  Explicit keyword overrides passed to ``RuntimeConfig.load``.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.markup import escape

from syntax_downgrade.enums import NullCheckStyle
from syntax_downgrade.utils.console import log_warning

TOOL_SECTION = "syntax_downgrade"


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the downgrade engine.
  """

  enabled_rules: Optional[List[str]] = Field(
    None, description="Rule names to run, in catalog order. None enables every registered rule."
  )
  disabled_rules: List[str] = Field(default_factory=list, description="Rule names to skip.")
  nullsafe_variable_prefix: str = Field(
    "nullsafeVariable", description="Prefix of temporaries introduced by optional-chain lowering."
  )
  instance_variable_prefix: str = Field(
    "object", description="Prefix of temporaries introduced by instance-call hoisting."
  )
  null_check: NullCheckStyle = Field(
    NullCheckStyle.TRUTHY, description="Condition style of lowered optional chains."
  )
  max_revisits: int = Field(8, ge=1, description="Bound on nested replacements at one tree position.")
  rule_paths: List[Path] = Field(default_factory=list, description="External directories to scan for rules.")

  @field_validator("nullsafe_variable_prefix", "instance_variable_prefix")
  @classmethod
  def validate_prefix(cls, v: str) -> str:
    """
    Ensures a prefix can start a variable name.

    Args:
        v (str): The prefix to validate.

    Returns:
        str: The prefix, without a leading ``$`` sigil.
    """
    clean = v.lstrip("$")
    if not clean or not (clean[0].isalpha() or clean[0] == "_") or not clean.replace("_", "a").isalnum():
      raise ValueError(f"'{v}' is not a valid variable name prefix")
    return clean

  def is_rule_enabled(self, name: str) -> bool:
    """
    Args:
        name: A catalog rule name.

    Returns:
        bool: True if the rule passes both the allow list and the deny list.
    """
    if name in self.disabled_rules:
      return False
    return self.enabled_rules is None or name in self.enabled_rules

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        **overrides: Field values that take precedence over the TOML table.
            ``None`` values are ignored.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ValueError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    merged: Dict[str, Any] = dict(toml_config)
    merged.update({k: v for k, v in overrides.items() if v is not None})

    # Relative rule directories are relative to the TOML that declared them
    raw_paths = merged.get("rule_paths", [])
    base = toml_dir if toml_dir and overrides.get("rule_paths") is None else Path.cwd()
    merged["rule_paths"] = [(base / Path(p)).resolve() for p in raw_paths]

    try:
      return cls.model_validate(merged)
    except ValidationError as e:
      raise ValueError(f"Invalid syntax_downgrade configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        log_warning(f"Ignoring unreadable {escape(str(toml_path))}: {escape(str(e))}")
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get(TOOL_SECTION, {}), parent

  return {}, None
