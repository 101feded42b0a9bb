"""
Orchestration Engine for Downgrade Runs.

This module provides the ``DowngradeEngine``, the driver that applies the rule
catalog to a sequence of files. For each file it:

1.  **Normalizes Tokens**: Accepts a ``TokenStream``, a plain token sequence,
    or raw source text (lexed with ``tokenize``).
2.  **Dispatches**: Runs the shared ``Dispatcher`` over the file's tree. One
    dispatcher serves the whole run, so temporary-name counters persist and
    reset lazily when the file changes.
3.  **Reports**: Wraps the outcome in a ``ConversionResult``. A crash while
    processing one file is recorded on that file's result and the run carries
    on with the next file.

Files are processed strictly one after another.
"""

import copy
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from rich.markup import escape

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.dispatcher import Dispatcher
from syntax_downgrade.core.nodes import Node
from syntax_downgrade.core.rules import RewriteRule, get_rules, load_rules
from syntax_downgrade.core.tokens import Token, TokenStream, tokenize
from syntax_downgrade.core.tracer import TraceLogger
from syntax_downgrade.utils.console import log_error, log_info, log_success


@dataclass
class SourceInput:
  """
  One unit of work handed to the engine.

  Attributes:
      file_id: Stable identifier of the file (usually its path).
      program: The parsed tree.
      tokens: Token stream, token list, raw source text, or None.
  """

  file_id: str
  program: Node
  tokens: Union[TokenStream, Sequence[Token], str, None] = None


class ConversionResult(BaseModel):
  """
  Structured result of a single file downgrade.
  """

  model_config = ConfigDict(arbitrary_types_allowed=True)

  file_id: str = Field(description="Identifier of the processed file.")
  program: Any = Field(default=None, description="The rewritten tree (the input tree if the run failed).")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(default=True, description="True if the file was processed without crashing.")
  applied_rules: List[str] = Field(default_factory=list, description="Names of rules that changed the tree.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Trace events of this file.")

  @property
  def changed(self) -> bool:
    """True if any rule changed the tree."""
    return bool(self.applied_rules)

  @property
  def has_errors(self) -> bool:
    return len(self.errors) > 0


class DowngradeEngine:
  """
  Applies downgrade rules to one or many files.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    rules: Optional[List[RewriteRule]] = None,
    tracer: Optional[TraceLogger] = None,
  ):
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): Runtime configuration. Defaults if None.
        rules (List[RewriteRule], optional): Explicit rule instances. If None,
            every catalog rule enabled by the config is instantiated.
        tracer (TraceLogger, optional): Event recorder. A fresh one if None.

    Raises:
        ValueError: If the config names rules that are not registered.
    """
    self.config = config or RuntimeConfig()
    self.tracer = tracer if tracer is not None else TraceLogger()
    if rules is None:
      rules = self._build_rules()
    self.dispatcher = Dispatcher(rules=rules, config=self.config, tracer=self.tracer)

  def _build_rules(self) -> List[RewriteRule]:
    load_rules(self.config.rule_paths or None)
    catalog = get_rules()

    known = {cls.name for cls in catalog}
    requested = set(self.config.enabled_rules or []) | set(self.config.disabled_rules)
    unknown = sorted(requested - known)
    if unknown:
      raise ValueError(f"Unknown rule(s): {', '.join(unknown)}")

    return [cls.from_config(self.config) for cls in catalog if self.config.is_rule_enabled(cls.name)]

  @property
  def rules(self) -> List[RewriteRule]:
    return self.dispatcher.rules

  def run_file(self, source: SourceInput) -> ConversionResult:
    """
    Downgrades a single file.

    The input tree is rewritten in place. If a rule crashes, the result
    carries the error and the tree as it was before the run.

    Args:
        source (SourceInput): The file to process.

    Returns:
        ConversionResult: Rewritten tree and diagnostics.
    """
    tokens = source.tokens
    if isinstance(tokens, str):
      tokens = tokenize(tokens)

    first_event = len(self.tracer)
    self.tracer.start_phase(f"Downgrade {source.file_id}")
    snapshot = copy.deepcopy(source.program)
    try:
      program = self.dispatcher.run(source.file_id, source.program, tokens)
    except Exception as e:
      log_error(f"Failed to downgrade {escape(source.file_id)}: {escape(str(e))}")
      self.tracer.log_warning(traceback.format_exc())
      self.tracer.end_phase()
      return ConversionResult(
        file_id=source.file_id,
        program=snapshot,
        errors=[f"{type(e).__name__}: {e}"],
        success=False,
        trace_events=self.tracer.events_since(first_event),
      )
    self.tracer.end_phase()

    applied = self.dispatcher.applied_rules
    if applied:
      log_info(f"{escape(source.file_id)}: {len(applied)} rewrite(s)")

    return ConversionResult(
      file_id=source.file_id,
      program=program,
      applied_rules=applied,
      trace_events=self.tracer.events_since(first_event),
    )

  def run(self, sources: Iterable[SourceInput]) -> List[ConversionResult]:
    """
    Downgrades files sequentially.

    Args:
        sources: Files in processing order.

    Returns:
        List[ConversionResult]: One result per input, in order.
    """
    results = [self.run_file(src) for src in sources]
    changed = sum(1 for r in results if r.changed)
    failed = sum(1 for r in results if not r.success)
    log_success(f"Processed {len(results)} file(s): {changed} changed, {failed} failed")
    return results
