"""
Tests for hoisting member access on instantiation and clone expressions.
"""

import pytest

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.dispatcher import Dispatcher
from syntax_downgrade.core.nodes import (
  Argument,
  ArrayAccess,
  Assignment,
  BinaryOp,
  CloneExpr,
  ClosureExpr,
  ConditionalExpr,
  ConstructorCallExpr,
  ExpressionStatement,
  Identifier,
  MethodCall,
  MethodDecl,
  Name,
  NullLiteral,
  OptionalMethodCall,
  OptionalPropertyAccess,
  Program,
  PropertyAccess,
  ReturnStatement,
  Scalar,
)
from syntax_downgrade.rules.instance_call import DowngradeInstanceMethodCall
from syntax_downgrade.rules.nullsafe import DowngradeNullsafeToTernary


def run(tree, file_id="a.php", rule=None):
  Dispatcher([rule or DowngradeInstanceMethodCall()]).run(file_id, tree)
  return tree


def test_clone_method_call_in_return():
  """return (clone $this)->getName(); becomes two statements."""
  clone = CloneExpr(Identifier("this"))
  method = MethodDecl(Name("getName"), body=[ReturnStatement(MethodCall(clone, Name("getName")))])
  run(Program([method]))

  assert len(method.body) == 2
  hoisted, ret = method.body
  assert isinstance(hoisted, ExpressionStatement)
  assert hoisted.expr == Assignment(Identifier("object1"), clone)
  assert hoisted.expr.value is clone

  assert isinstance(ret, ReturnStatement)
  assert isinstance(ret.expr, MethodCall)
  assert ret.expr.var == Identifier("object1")
  assert ret.expr.name == Name("getName")
  assert ret.expr.flags.text_cache_valid is False


def test_new_instance_property_and_array_access():
  prop = ExpressionStatement(PropertyAccess(ConstructorCallExpr(Name("Foo")), Name("bar")))
  dim = ExpressionStatement(ArrayAccess(ConstructorCallExpr(Name("Bag")), Scalar(0)))
  tree = run(Program([prop, dim]))

  assert [type(s).__name__ for s in tree.statements] == [
    "ExpressionStatement",
    "ExpressionStatement",
    "ExpressionStatement",
    "ExpressionStatement",
  ]
  assert tree.statements[0].expr.target == Identifier("object1")
  assert prop.expr == PropertyAccess(Identifier("object1"), Name("bar"), flags=prop.expr.flags)
  assert tree.statements[2].expr.target == Identifier("object2")
  assert isinstance(dim.expr, ArrayAccess)
  assert dim.expr.dim == Scalar(0)


def test_arguments_are_kept():
  call_args = []
  stmt = ExpressionStatement(MethodCall(ConstructorCallExpr(Name("Foo")), Name("run"), call_args))
  run(Program([stmt]))
  assert stmt.expr.args is call_args


def test_plain_receiver_is_untouched():
  call = MethodCall(Identifier("foo"), Name("bar"))
  stmt = ExpressionStatement(call)
  tree = run(Program([stmt]))
  assert tree.statements == [stmt]
  assert stmt.expr is call


def test_access_inside_conditional_is_not_hoisted():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("bar"))
  stmt = ExpressionStatement(ConditionalExpr(Identifier("flag"), call, NullLiteral()))
  tree = run(Program([stmt]))

  assert tree.statements == [stmt]
  assert stmt.expr.when_true is call


def test_conditional_outside_the_closure_statement_does_not_block():
  """Only conditionals between the access and its own statement matter."""
  call = MethodCall(CloneExpr(Identifier("this")), Name("copy"))
  closure = ClosureExpr(body=[ReturnStatement(call)])
  stmt = ExpressionStatement(ConditionalExpr(Identifier("flag"), closure, NullLiteral()))
  run(Program([stmt]))

  assert len(closure.body) == 2
  assert closure.body[0].expr.target == Identifier("object1")


def test_expression_without_statement_is_untouched():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("bar"))
  result = Dispatcher([DowngradeInstanceMethodCall()]).run("a.php", call)
  assert result is call


def test_no_file_association_is_untouched():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("bar"))
  stmt = ExpressionStatement(call)
  tree = run(Program([stmt]), file_id=None)
  assert tree.statements == [stmt]


def test_prefix_from_config():
  rule = DowngradeInstanceMethodCall.from_config(RuntimeConfig(instance_variable_prefix="$fresh"))
  stmt = ExpressionStatement(MethodCall(ConstructorCallExpr(Name("Foo")), Name("bar")))
  tree = run(Program([stmt]), rule=rule)
  assert tree.statements[0].expr.target == Identifier("fresh1")


def test_access_in_ternary_condition_is_hoisted():
  """The condition is always evaluated, so hoisting keeps semantics."""
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("ready"))
  stmt = ExpressionStatement(ConditionalExpr(call, Identifier("yes"), NullLiteral()))
  tree = run(Program([stmt]))

  assert len(tree.statements) == 2
  assert stmt.expr.condition.var == Identifier("object1")


@pytest.mark.parametrize("operator", ["&&", "||", "??", "and", "OR"])
def test_right_operand_of_short_circuit_operator_is_not_hoisted(operator):
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("c"))
  stmt = ExpressionStatement(BinaryOp(Identifier("flag"), operator, call))
  tree = run(Program([stmt]))

  assert tree.statements == [stmt]
  assert stmt.expr.right is call


def test_left_operand_of_short_circuit_operator_is_hoisted():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("c"))
  stmt = ExpressionStatement(BinaryOp(call, "&&", Identifier("flag")))
  tree = run(Program([stmt]))

  assert len(tree.statements) == 2
  assert stmt.expr.left.var == Identifier("object1")


def test_operands_of_eager_operator_are_hoisted():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("c"))
  stmt = ExpressionStatement(BinaryOp(Identifier("flag"), "!==", call))
  tree = run(Program([stmt]))
  assert len(tree.statements) == 2


def test_arguments_of_nullsafe_call_are_not_hoisted():
  """$a?->b((new Foo)->c()) must not build Foo before the null check."""
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("c"))
  nullsafe = OptionalMethodCall(Identifier("a"), Name("b"), [Argument(call)])
  stmt = ExpressionStatement(nullsafe)
  tree = run(Program([stmt]))

  assert tree.statements == [stmt]
  assert nullsafe.args[0].value is call


def test_arguments_of_nullsafe_call_stay_guarded_after_lowering():
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("c"))
  stmt = ExpressionStatement(OptionalMethodCall(Identifier("a"), Name("b"), [Argument(call)]))
  dispatcher = Dispatcher([DowngradeNullsafeToTernary(), DowngradeInstanceMethodCall()])
  tree = Program([stmt])
  dispatcher.run("a.php", tree)

  assert tree.statements == [stmt]
  assert isinstance(stmt.expr, ConditionalExpr)
  assert stmt.expr.when_true.args[0].value is call


def test_base_of_nullsafe_access_is_hoisted():
  """The base is evaluated before the null check in any case."""
  call = MethodCall(ConstructorCallExpr(Name("Foo")), Name("make"))
  stmt = ExpressionStatement(OptionalPropertyAccess(call, Name("value")))
  tree = run(Program([stmt]))

  assert len(tree.statements) == 2
  assert stmt.expr.var.var == Identifier("object1")
