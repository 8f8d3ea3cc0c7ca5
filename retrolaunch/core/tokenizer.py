"""Whitespace/quote-aware token scanner.

Every text format the launcher reads (database files, cue sheets, id lists and
launch rules) goes through this one lexer, so all of them share the same
quoting rules:

- Tokens are separated by space, tab, CR or LF outside quotes.
- A double quote toggles quoting and is never part of the token. A token that
  opens with a quote ends at the next quote, whatever follows it, so
  ``"A B"C`` yields ``A B`` and then ``C``. ``""`` is the empty token.
- There is no escape character; cue sheets carry Windows paths.
- A token longer than the limit is cut at the limit and the rest of it is
  dropped.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from ..exceptions import IoError, ParseError, TokenNotFoundError

MAX_TOKEN_LEN = 255

DELIMITERS = frozenset(b" \t\r\n")
QUOTE = ord('"')

_READ_BLOCK = 4096


class Tokenizer:
    """Pull tokens from a binary stream."""

    def __init__(self, stream: BinaryIO, max_len: int = MAX_TOKEN_LEN,
                 source: Optional[str] = None) -> None:
        if max_len < 1:
            raise ValueError(f"max_len must be positive, got {max_len}")
        self._stream = stream
        self.max_len = max_len
        self.source = source or str(getattr(stream, "name", "") or "<stream>")
        self._buffer = b""
        self._pos = 0
        self._eof = False

    def __iter__(self) -> Iterator[str]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def _fill(self) -> None:
        while True:
            try:
                chunk = self._stream.read(_READ_BLOCK)
            except (InterruptedError, BlockingIOError):
                continue
            except OSError as exc:
                raise IoError(f"Read failed on {self.source}: {exc}",
                              file_path=self.source, os_error=exc) from exc
            if chunk is None:
                # non-blocking stream without data yet
                continue
            break
        self._buffer = chunk
        self._pos = 0
        if not chunk:
            self._eof = True

    def _read_byte(self) -> Optional[int]:
        if self._pos >= len(self._buffer):
            if self._eof:
                return None
            self._fill()
            if self._eof:
                return None
        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def _discard_rest(self, in_quote: bool, quoted: bool) -> None:
        while True:
            byte = self._read_byte()
            if byte is None:
                return
            if byte == QUOTE:
                if quoted:
                    return
                in_quote = not in_quote
            elif byte in DELIMITERS and not in_quote:
                return

    def next_token(self, max_len: Optional[int] = None) -> Optional[str]:
        """Return the next token, or None at end of stream.

        Raises:
            IoError: the underlying read failed for a reason other than a
                transient interruption.
        """
        limit = self.max_len if max_len is None else max_len
        if limit < 1:
            raise ValueError(f"max_len must be positive, got {limit}")

        token = bytearray()
        started = False
        quoted = False
        in_quote = False

        while True:
            byte = self._read_byte()
            if byte is None:
                if not started:
                    return None
                break

            if byte == QUOTE:
                if not started:
                    started = quoted = in_quote = True
                    continue
                if quoted:
                    break
                in_quote = not in_quote
                continue

            if byte in DELIMITERS and not in_quote:
                if not started:
                    continue
                break

            started = True
            token.append(byte)
            if len(token) >= limit:
                self._discard_rest(in_quote, quoted)
                break

        return token.decode("utf-8", errors="replace")

    def expect_token(self, what: str) -> str:
        """Like next_token, but end of stream is a ParseError naming ``what``."""
        token = self.next_token()
        if token is None:
            raise ParseError(f"Unexpected end of stream while reading {what}", self.source)
        return token

    def find_token(self, literal: str) -> None:
        """Skip tokens until one equals ``literal`` exactly (case-sensitive)."""
        while True:
            token = self.next_token()
            if token is None:
                raise TokenNotFoundError(literal, self.source)
            if token == literal:
                return


@contextmanager
def open_tokens(path: Union[str, Path], max_len: int = MAX_TOKEN_LEN) -> Iterator[Tokenizer]:
    """Open ``path`` and yield a Tokenizer over it; the file is closed on every exit path."""
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise IoError(f"Could not open {path}: {exc}", file_path=str(path), os_error=exc) from exc
    with handle:
        yield Tokenizer(handle, max_len=max_len, source=str(path))
