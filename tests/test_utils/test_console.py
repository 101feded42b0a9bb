"""
Tests for the console proxy and log helpers.
"""

from rich.console import Console

from syntax_downgrade.utils.console import (
  get_console,
  log_error,
  log_info,
  log_success,
  log_warning,
  reset_console,
  set_console,
)


def test_log_levels_reach_swapped_console(captured_console):
  log_info("scanning a.php")
  log_success("all done")
  log_warning("revisit limit")
  log_error("rule crashed")

  output = captured_console.export_text()
  for text in ("scanning a.php", "all done", "revisit limit", "rule crashed"):
    assert text in output
  assert "SUCCESS" in output


def test_get_console_tracks_backend():
  replacement = Console(record=True)
  set_console(replacement)
  try:
    assert get_console() is replacement
  finally:
    reset_console()
  assert get_console() is not replacement


def test_console_proxy_forwards_to_backend(captured_console):
  from syntax_downgrade.utils.console import console

  console.print("direct output")
  assert "direct output" in captured_console.export_text()
  assert console.export_text is not None
