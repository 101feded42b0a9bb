"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Global rule registry isolation, so tests registering custom rules do not leak.
- Tracer reset and log capture into an in-memory console.
"""

import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'syntax_downgrade' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from syntax_downgrade.core.rules import clear_rules  # noqa: E402
from syntax_downgrade.core.tracer import reset_tracer  # noqa: E402
from syntax_downgrade.utils.console import reset_console, set_console  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_rule_registry():
  """Start every test with an unloaded registry; built-ins reload on demand."""
  clear_rules()
  reset_tracer()
  yield
  clear_rules()


@pytest.fixture
def captured_console():
  """Routes package logging into a recording console for the test."""
  buffer_console = Console(record=True, width=200, force_terminal=False)
  set_console(buffer_console)
  yield buffer_console
  reset_console()
