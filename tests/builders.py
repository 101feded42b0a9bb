"""
Test helpers: positioned node builders and a tiny expression evaluator.

The engine never parses, so tests lex a snippet with ``tokenize`` and attach
token positions to hand-built nodes by looking tokens up by text.
"""

from typing import Any, Dict, List

from syntax_downgrade.core.nodes import (
  Argument,
  Assignment,
  BinaryOp,
  ClosureUse,
  ConditionalExpr,
  Identifier,
  MethodCall,
  Node,
  NullLiteral,
  OptionalMethodCall,
  OptionalPropertyAccess,
  Parameter,
  PropertyAccess,
  Scalar,
)
from syntax_downgrade.core.tokens import TokenStream


def var(tokens: TokenStream, text: str, occurrence: int = 0) -> Identifier:
  idx = tokens.find(text, occurrence)
  return Identifier(text.lstrip("$"), start_token=idx, end_token=idx)


def arg(tokens: TokenStream, text: str, occurrence: int = 0) -> Argument:
  ident = var(tokens, text, occurrence)
  return Argument(ident, start_token=ident.start_token, end_token=ident.end_token)


def param(tokens: TokenStream, text: str, occurrence: int = 0) -> Parameter:
  ident = var(tokens, text, occurrence)
  return Parameter(ident, start_token=ident.start_token, end_token=ident.end_token)


def use(tokens: TokenStream, text: str, occurrence: int = 0) -> ClosureUse:
  ident = var(tokens, text, occurrence)
  return ClosureUse(ident, start_token=ident.start_token, end_token=ident.end_token)


def args(tokens: TokenStream, *texts: str) -> List[Argument]:
  return [arg(tokens, t) for t in texts]


def trailing_flags(elements: List[Node]) -> List[bool]:
  return [e.flags.suppress_trailing_separator for e in elements]


class Recorder:
  """Object whose methods log every call and return preconfigured values."""

  def __init__(self, **returns: Any):
    self.calls: List[str] = []
    self._returns = returns

  def __getattr__(self, item: str) -> Any:
    if item.startswith("_") or item not in self._returns:
      raise AttributeError(item)

    def method(*_args):
      self.calls.append(item)
      return self._returns[item]

    return method


def evaluate(node: Node, env: Dict[str, Any]) -> Any:
  """
  Evaluates the expression subset produced by the lowering rules.
  Null is ``None``; truthiness follows object semantics (objects are truthy).
  """
  if isinstance(node, Identifier):
    return env[node.name]
  if isinstance(node, NullLiteral):
    return None
  if isinstance(node, Scalar):
    return node.value
  if isinstance(node, Assignment):
    value = evaluate(node.value, env)
    env[node.target.name] = value
    return value
  if isinstance(node, BinaryOp):
    left = evaluate(node.left, env)
    right = evaluate(node.right, env)
    if node.operator == "!==":
      return left is not right
    raise NotImplementedError(node.operator)
  if isinstance(node, ConditionalExpr):
    if evaluate(node.condition, env):
      return evaluate(node.when_true, env)
    return evaluate(node.when_false, env)
  if isinstance(node, MethodCall):
    target = evaluate(node.var, env)
    values = [evaluate(a.value, env) for a in node.args]
    return getattr(target, node.name.value)(*values)
  if isinstance(node, PropertyAccess):
    return getattr(evaluate(node.var, env), node.name.value)
  if isinstance(node, (OptionalMethodCall, OptionalPropertyAccess)):
    raise AssertionError("optional access left in lowered tree")
  raise NotImplementedError(type(node).__name__)