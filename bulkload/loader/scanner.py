"""
Split a SQL script into individually executable statements.

- Reads the script one line at a time; lines are trimmed and re-joined with
  a single space, so a statement spanning lines becomes one logical line.
- `--` comments and `/* ... */` comments outside quoted strings are dropped.
- `;` outside a quoted string ends a statement. A quote is a `'` not
  preceded by a backslash.
- Never raises on odd input: an unterminated quote or block comment at EOF
  is logged and whatever was accumulated is emitted.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .models import Statement

logger = logging.getLogger(__name__)

DELIMITER = ";"

# Statements starting with these (upper-cased) are not sent to the database
IGNORED_PREFIXES = ("SET", "BEGIN", "START TRANSACTION", "COMMIT", "--", "/*")


class ScanState(Enum):
    NORMAL = "normal"
    IN_BLOCK_COMMENT = "block_comment"
    IN_QUOTED_STRING = "quoted_string"


def should_ignore(text: str, ignored_prefixes: Sequence[str] = IGNORED_PREFIXES) -> bool:
    upper = text.upper()
    for prefix in ignored_prefixes:
        if not upper.startswith(prefix):
            continue
        # keyword prefixes must end on a word boundary (SETTINGS is not SET)
        rest = upper[len(prefix):len(prefix) + 1]
        if not prefix[-1].isalpha() or not (rest.isalnum() or rest == "_"):
            return True
    return False


def _is_quote(line: str, i: int) -> bool:
    return line[i] == "'" and (i == 0 or line[i - 1] != "\\")


class _Scanner:
    def __init__(self, ignored_prefixes: Sequence[str]):
        self.ignored_prefixes = ignored_prefixes
        self.state = ScanState.NORMAL
        self.buf: List[str] = []
        self.statements: List[Statement] = []

    def _space(self) -> None:
        if self.buf and self.buf[-1] != " ":
            self.buf.append(" ")

    def flush(self) -> None:
        text = "".join(self.buf).strip()
        self.buf = []
        if not text:
            return
        if should_ignore(text, self.ignored_prefixes):
            logger.debug("Ignoring statement: %.70s", text)
            return
        self.statements.append(Statement(text=text, ordinal=len(self.statements) + 1))

    def feed(self, raw: str) -> None:
        line = raw.strip()
        if self.state is ScanState.NORMAL and (not line or line.startswith("--")):
            return

        i, n = 0, len(line)
        while i < n:
            c = line[i]
            if self.state is ScanState.IN_BLOCK_COMMENT:
                if line.startswith("*/", i):
                    self.state = ScanState.NORMAL
                    self._space()
                    i += 2
                else:
                    i += 1
                continue

            if self.state is ScanState.IN_QUOTED_STRING:
                self.buf.append(c)
                if _is_quote(line, i):
                    self.state = ScanState.NORMAL
                i += 1
                continue

            if _is_quote(line, i):
                self.buf.append(c)
                self.state = ScanState.IN_QUOTED_STRING
            elif line.startswith("--", i):
                break
            elif line.startswith("/*", i):
                self.state = ScanState.IN_BLOCK_COMMENT
                i += 2
                continue
            elif c == DELIMITER:
                self.flush()
            elif c.isspace():
                self._space()
            else:
                self.buf.append(c)
            i += 1

        # line join
        if self.buf and self.state is not ScanState.IN_BLOCK_COMMENT:
            if self.state is ScanState.IN_QUOTED_STRING:
                self.buf.append(" ")
            else:
                self._space()

    def finish(self) -> List[Statement]:
        if self.state is ScanState.IN_QUOTED_STRING:
            logger.warning("Unterminated quoted string at end of script; emitting remainder as-is")
        elif self.state is ScanState.IN_BLOCK_COMMENT:
            logger.warning("Unterminated block comment at end of script")
        self.flush()
        return self.statements


def scan(source: Union[str, Iterable[str]],
         ignored_prefixes: Sequence[str] = IGNORED_PREFIXES) -> List[Statement]:
    """
    Turn script text (a string, an open text file, or any iterable of lines)
    into an ordered list of Statements with 1-based ordinals.
    """
    lines = source.splitlines() if isinstance(source, str) else source
    scanner = _Scanner(ignored_prefixes)
    for line in lines:
        scanner.feed(line)
    return scanner.finish()


def read_script(path: Union[str, Path], encoding: str = "utf-8") -> List[Statement]:
    with open(path, "r", encoding=encoding) as f:
        return scan(f)
