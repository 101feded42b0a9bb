"""
Token Stream Definitions and Reference Lexer.

The downgrade engine never parses source text itself. It does, however, need the
raw token sequence of each file to recover formatting details the AST does not
record (e.g. a dangling comma before a closing parenthesis). This module
defines:

1.  **Token**: An immutable lexical unit. Whitespace and comments are kept, so
    token indexes line up with the positions an external parser records.
2.  **TokenStream**: A read-only sequence with helpers to step over trivia.
3.  **tokenize**: A regex-based lexer for PHP-style sources producing the same
    token shape, used by the engine when it is handed raw text.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, overload

from syntax_downgrade.enums import TokenKind

TRIVIA_KINDS = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT})


@dataclass(frozen=True)
class Token:
  """A lexical unit."""

  kind: TokenKind
  text: str
  offset: int
  line: int

  @property
  def is_trivia(self) -> bool:
    """True for whitespace and comments."""
    return self.kind in TRIVIA_KINDS


class TokenStream(Sequence[Token]):
  """
  Read-only view over the tokens of one file.

  Indexes are stable for the lifetime of the stream; AST nodes refer to them
  through ``start_token`` / ``end_token``.
  """

  def __init__(self, tokens: Sequence[Token]):
    self._tokens: tuple = tuple(tokens)

  @overload
  def __getitem__(self, index: int) -> Token: ...

  @overload
  def __getitem__(self, index: slice) -> Sequence[Token]: ...

  def __getitem__(self, index):
    return self._tokens[index]

  def __len__(self) -> int:
    return len(self._tokens)

  def __iter__(self) -> Iterator[Token]:
    return iter(self._tokens)

  def __repr__(self) -> str:
    return f"TokenStream({len(self._tokens)} tokens)"

  def next_significant(self, index: int) -> Optional[int]:
    """
    Finds the first non-trivia token at or after ``index``.

    Args:
        index: Position to start scanning from.

    Returns:
        Optional[int]: The token index, or None if the stream ends first.
    """
    if index < 0:
      return None
    while index < len(self._tokens):
      if not self._tokens[index].is_trivia:
        return index
      index += 1
    return None

  def find(self, text: str, occurrence: int = 0) -> int:
    """
    Locates the n-th significant token with the given text.

    Args:
        text: Exact token text (e.g. ``"$b"`` or ``","``).
        occurrence: Zero-based occurrence counter.

    Returns:
        int: Index of the matching token.

    Raises:
        ValueError: If fewer than ``occurrence + 1`` matches exist.
    """
    seen = 0
    for idx, tok in enumerate(self._tokens):
      if tok.is_trivia or tok.text != text:
        continue
      if seen == occurrence:
        return idx
      seen += 1
    raise ValueError(f"Token {text!r} (occurrence {occurrence}) not found")

  def text(self) -> str:
    """Reassembles the original source."""
    return "".join(t.text for t in self._tokens)


class Lexer:
  """
  Regex-based tokenizer for PHP-style source code.
  """

  # Order matters: Specific patterns before general ones
  PATTERNS = [
    (TokenKind.OPEN_TAG, re.compile(r"<\?php\b|<\?=")),
    (TokenKind.CLOSE_TAG, re.compile(r"\?>")),
    (TokenKind.COMMENT, re.compile(r"/\*.*?\*/|//[^\n]*|#(?!\[)[^\n]*", re.DOTALL)),
    (TokenKind.WHITESPACE, re.compile(r"\s+")),
    (TokenKind.VARIABLE, re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*")),
    (TokenKind.NULLSAFE_ARROW, re.compile(r"\?->")),
    (TokenKind.ARROW, re.compile(r"->")),
    (TokenKind.DOUBLE_ARROW, re.compile(r"=>")),
    (TokenKind.DOUBLE_COLON, re.compile(r"::")),
    (TokenKind.NUMBER, re.compile(r"\d+(?:\.\d+)?")),
    (TokenKind.STRING, re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"", re.DOTALL)),
    (TokenKind.IDENTIFIER, re.compile(r"[A-Za-z_\\][A-Za-z0-9_\\]*")),
    (
      TokenKind.SYMBOL,
      re.compile(r"===|!==|==|!=|<=|>=|&&|\|\||\?\?|\.\.\.|#\[|[(){}\[\],;=?:.+\-*/<>!&|%^~@]"),
    ),
  ]

  def __init__(self, text: str):
    self.text = text
    self.pos = 0
    self.line = 1
    self._tokens: List[Token] = []

  def tokenize(self) -> List[Token]:
    """
    Converts the full string into a list of Tokens, trivia included.

    Characters matching no pattern become single-character ``MISMATCH`` tokens
    so that the stream still covers the whole input.
    """
    while self.pos < len(self.text):
      for kind, regex in self.PATTERNS:
        match = regex.match(self.text, self.pos)
        if match:
          self._emit(kind, match.group(0))
          break
      else:
        self._emit(TokenKind.MISMATCH, self.text[self.pos])
    return self._tokens

  def _emit(self, kind: TokenKind, text: str) -> None:
    self._tokens.append(Token(kind, text, self.pos, self.line))
    self.line += text.count("\n")
    self.pos += len(text)


def tokenize(source: str) -> TokenStream:
  """
  Lexes ``source`` into a ``TokenStream``.

  Args:
      source: Raw file contents.

  Returns:
      TokenStream: Every token of the input, trivia included.
  """
  return TokenStream(Lexer(source).tokenize())
