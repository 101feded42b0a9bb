"""
Fresh-Identifier Allocation.

Rules that introduce temporaries (e.g. ``$nullsafeVariable1``) need names that
are unique within a file. Allocators live for a whole multi-file run, so the
counter is partitioned by file: it resets lazily the first time an allocation
is requested for a file id different from the previous one.

Note:
    The reset is only correct when files are processed one after another. A
    driver that processes files in parallel must give each worker its own
    ``AllocatorPool``.
"""

from typing import AbstractSet, Dict, Optional

from syntax_downgrade.core.nodes import Identifier

_UNSEEN = object()


class FreshIdentifierAllocator:
  """
  Per-file monotonic counter producing ``{prefix}{n}`` identifiers.
  """

  def __init__(self, prefix: str):
    """
    Args:
        prefix: Fixed name prefix (e.g. ``"nullsafeVariable"``).
    """
    self.prefix = prefix
    self._last_file_id: object = _UNSEEN
    self._counter = 0

  @property
  def last_file_id(self) -> Optional[str]:
    """The file id seen by the most recent allocation."""
    return None if self._last_file_id is _UNSEEN else self._last_file_id  # type: ignore[return-value]

  @property
  def current_count(self) -> int:
    return self._counter

  def allocate(self, file_id: str, reserved: AbstractSet[str] = frozenset()) -> Identifier:
    """
    Produces the next identifier for ``file_id``.

    Args:
        file_id: The file the identifier will live in.
        reserved: Names already used in the file; candidates in this set are
            skipped so the result never shadows an existing variable.

    Returns:
        Identifier: A fresh, unpositioned identifier node.
    """
    if self._last_file_id is _UNSEEN or file_id != self._last_file_id:
      self._counter = 0
      self._last_file_id = file_id

    self._counter += 1
    while f"{self.prefix}{self._counter}" in reserved:
      self._counter += 1

    return Identifier(f"{self.prefix}{self._counter}")


class AllocatorPool:
  """Keeps one allocator per prefix for the lifetime of a run."""

  def __init__(self) -> None:
    self._allocators: Dict[str, FreshIdentifierAllocator] = {}

  def get(self, prefix: str) -> FreshIdentifierAllocator:
    if prefix not in self._allocators:
      self._allocators[prefix] = FreshIdentifierAllocator(prefix)
    return self._allocators[prefix]
