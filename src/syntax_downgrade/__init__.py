"""
syntax-downgrade Package.

A rule-driven source-to-source syntax downgrade engine. Given the parsed tree of
a program written against a newer grammar, it rewrites constructs such as
nullsafe member access, trailing commas in parameter/argument/use lists and
member access on fresh instances into forms accepted by an older grammar.

Parsing and printing are left to external collaborators: the engine consumes a
tree plus its token stream, and communicates formatting intent to the printer
through each node's ``flags``.

Usage
-----

.. code-block:: python

    from syntax_downgrade import downgrade
    from syntax_downgrade.core.nodes import Identifier, Name, OptionalPropertyAccess, Program, ExpressionStatement

    program = Program([ExpressionStatement(OptionalPropertyAccess(Identifier("user"), Name("name")))])
    downgrade(program, file_id="a.php")
    # program.statements[0].expr is now
    # ConditionalExpr(Assignment($nullsafeVariable1, $user), $nullsafeVariable1->name, null)

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from syntax_downgrade import DowngradeEngine, RuntimeConfig, SourceInput

    engine = DowngradeEngine(RuntimeConfig.load())
    for res in engine.run([SourceInput("a.php", tree_a, source_a), SourceInput("b.php", tree_b, source_b)]):
        if not res.success:
            print(res.errors)
"""

from typing import Optional, Sequence, Union

from syntax_downgrade.config import RuntimeConfig
from syntax_downgrade.core.engine import ConversionResult, DowngradeEngine, SourceInput
from syntax_downgrade.core.nodes import Node
from syntax_downgrade.core.tokens import Token, TokenStream

__version__ = "0.0.1"


def downgrade(
  program: Node,
  tokens: Union[TokenStream, Sequence[Token], str, None] = None,
  file_id: str = "<memory>",
  config: Optional[RuntimeConfig] = None,
) -> Node:
  """
  Downgrades a single tree with every enabled rule.

  Args:
      program (Node): The parsed tree; rewritten in place where possible.
      tokens: The file's token stream or raw source text. Without tokens,
          rules that need formatting details (trailing commas) do nothing.
      file_id (str): Identifier used to scope temporary names.
      config (RuntimeConfig, optional): Runtime configuration.

  Returns:
      Node: The rewritten root.

  Raises:
      ValueError: If a rule crashed while processing the tree.
  """
  engine = DowngradeEngine(config=config)
  result = engine.run_file(SourceInput(file_id, program, tokens))
  if not result.success:
    raise ValueError("Downgrade failed:\n" + "\n".join(result.errors))
  return result.program


__all__ = [
  "ConversionResult",
  "DowngradeEngine",
  "RuntimeConfig",
  "SourceInput",
  "downgrade",
  "__version__",
]
