from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional
import re
import sys

from ..config import MALFORMED_MODES
from ..utils.logging import get_logger

logger = get_logger(__name__)

# "R: 0x1f40" / "W:0x0"
_LINE_RE = re.compile(r"^\s*([RrWw])\s*:\s*0[xX]([0-9a-fA-F]+)\s*$")


class AccessKind(Enum):
    READ = "R"
    WRITE = "W"


@dataclass(frozen=True)
class Access:
    kind: AccessKind
    address: int


class MalformedTraceError(ValueError):
    """A trace line that is not of the form `<R|W>: 0x<hex>`."""

    def __init__(self, line_number: int, line: str, source: str = "<trace>"):
        self.line_number = line_number
        self.line = line
        self.source = source
        super().__init__(f"{source}:{line_number}: malformed trace entry: {line!r}")


def parse_line(text: str) -> Optional[Access]:
    """
    Parses one trace line.
    Returns None for a blank line and raises ValueError if the line is malformed.
    """
    if not text.strip():
        return None
    match = _LINE_RE.match(text)
    if match is None:
        raise ValueError(f"malformed trace entry: {text!r}")
    kind, hex_string = match.groups()
    return Access(AccessKind(kind.upper()), int(hex_string, 16))


class TraceParser:
    """
    Parses a trace file and yields Access records in file order.

    on_malformed selects what happens at a bad line:
      truncate - stop reading; everything before the line is kept
      skip     - drop the line and keep going
      error    - raise MalformedTraceError
    """
    def __init__(self, trace_file: str, on_malformed: str = "truncate"):
        if on_malformed not in MALFORMED_MODES:
            raise ValueError(f"Unknown malformed-line mode: {on_malformed}")
        self.trace_file = trace_file
        self.on_malformed = on_malformed
        self.malformed_lines = 0

    def _open(self):
        # undecodable bytes survive as surrogates and fail parse_line like any bad line
        if self.trace_file == "-":
            if hasattr(sys.stdin, "reconfigure"):
                sys.stdin.reconfigure(errors="surrogateescape")
            return sys.stdin
        return open(self.trace_file, "r", encoding="utf-8", errors="surrogateescape")

    def __iter__(self) -> Iterator[Access]:
        f = self._open()
        try:
            yield from self._parse_lines(f)
        finally:
            if f is not sys.stdin:
                f.close()

    def _parse_lines(self, lines) -> Iterator[Access]:
        for line_number, line in enumerate(lines, start=1):
            try:
                access = parse_line(line)
            except ValueError:
                self.malformed_lines += 1
                text = line.rstrip("\n")
                if self.on_malformed == "error":
                    raise MalformedTraceError(line_number, text, self.trace_file) from None
                if self.on_malformed == "skip":
                    logger.warning(f"{self.trace_file}:{line_number}: skipping malformed trace entry {text!r}")
                    continue
                logger.warning(
                    f"{self.trace_file}:{line_number}: malformed trace entry {text!r}, "
                    f"ignoring the rest of the trace"
                )
                return
            if access is not None:
                yield access


def parse_trace(trace_file: str, on_malformed: str = "truncate") -> List[Access]:
    """Reads a whole trace file into a list of accesses."""
    return list(TraceParser(trace_file, on_malformed=on_malformed))
