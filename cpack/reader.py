"""
cpack Reader - Parses a generated artifact back into Python.

Mirrors the C accessors exactly:
  - unlist(i) returns the i-th name; i == len(artifact) is the sentinel (None)
  - unpack(name) scans in order, first match wins, None when not found
  - reported size excludes the trailing zero byte; physical bytes keep it

Only artifacts produced by cpack are understood; anything else raises
ValueError. Byte-table comments are skipped, never parsed.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from cpack.entry import PackedEntry
from cpack.format import DIRECTORY_NAME

_TABLE_RE = re.compile(
    r"^static const unsigned char (\w+)\[\] = \{\n(.*?)^\};$",
    re.MULTILINE | re.DOTALL,
)
_DIRECTORY_RE = re.compile(
    rf"^\}} {DIRECTORY_NAME}\[\] = \{{\n(.*?)^\}};$",
    re.MULTILINE | re.DOTALL,
)
_ROW_RE = re.compile(
    r'^\s*\{("(?:[^"\\]|\\.)*"), (\w+), sizeof\((\w+)\), (-?\d+), ([01])\},?$'
)
_SENTINEL_RE = re.compile(r"^\s*\{NULL, NULL, 0, 0, 0\},?$")

_SIMPLE_ESCAPES = {
    "n": 0x0A, "t": 0x09, "r": 0x0D, "a": 0x07, "b": 0x08,
    "f": 0x0C, "v": 0x0B, "\\": 0x5C, '"': 0x22, "'": 0x27, "?": 0x3F,
}


def decode_c_string(literal: str) -> bytes:
    """Decode a double-quoted C string literal into its raw bytes."""
    if len(literal) < 2 or literal[0] != '"' or literal[-1] != '"':
        raise ValueError(f"Not a C string literal: {literal!r}")
    body = literal[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        c = body[i]
        if c != "\\":
            out += c.encode("latin-1")
            i += 1
            continue
        if i + 1 >= len(body):
            raise ValueError(f"Dangling backslash in {literal!r}")
        nxt = body[i + 1]
        if nxt in "01234567":
            j = i + 1
            while j < len(body) and j < i + 4 and body[j] in "01234567":
                j += 1
            out.append(int(body[i + 1:j], 8) & 0xFF)
            i = j
        elif nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        else:
            raise ValueError(f"Unsupported escape \\{nxt} in {literal!r}")
    return bytes(out)


def parse_table_body(body: str) -> bytes:
    values = []
    for line in body.split("\n"):
        numbers = line.split("//", 1)[0]
        for tok in numbers.split(","):
            tok = tok.strip()
            if tok:
                values.append(int(tok))
    if any(v < 0 or v > 255 for v in values):
        raise ValueError("Byte table value out of range")
    return bytes(values)


@dataclass(frozen=True)
class UnpackedFile:
    """Result of a successful unpack()."""
    data: bytes       # real content, without the trailing zero
    size: int
    mtime: int
    filtered: bool
    physical: bytes   # data + b"\x00", as laid out in the binary


@dataclass
class PackedArtifact:
    """Parsed artifact: directory rows plus their byte tables."""
    entries: list[PackedEntry] = field(default_factory=list)
    tables: dict[str, bytes] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def unlist(self, index: int) -> str | None:
        """Name at index; the sentinel position returns None."""
        if index == len(self.entries):
            return None
        if index < 0 or index > len(self.entries):
            raise IndexError(f"Directory index {index} out of range")
        return self.entries[index].name

    def unpack(self, name: str) -> UnpackedFile | None:
        for entry in self.entries:
            if entry.name != name:
                continue
            physical = self.tables[entry.table]
            return UnpackedFile(
                data=physical[:-1],
                size=entry.size,
                mtime=entry.mtime,
                filtered=entry.filtered,
                physical=physical,
            )
        return None

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.entries]


def is_artifact(text: str) -> bool:
    """Quick check for a cpack directory table."""
    return _DIRECTORY_RE.search(text) is not None


class ArtifactReader:
    """
    Parser for generated artifacts.

    Usage:
        artifact = ArtifactReader.read("fs.c")
        hit = artifact.unpack("/hello.txt")
        if hit is not None:
            hit.data, hit.size, hit.mtime
    """

    @classmethod
    def read(cls, path: str | Path) -> PackedArtifact:
        return cls.parse(Path(path).read_text(encoding="ascii"))

    @classmethod
    def parse(cls, text: str) -> PackedArtifact:
        text = text.replace("\r\n", "\n")
        tables: dict[str, bytes] = {}
        for m in _TABLE_RE.finditer(text):
            ident = m.group(1)
            if ident in tables:
                raise ValueError(f"Duplicate byte table: {ident}")
            tables[ident] = parse_table_body(m.group(2))

        m = _DIRECTORY_RE.search(text)
        if m is None:
            raise ValueError(f"No {DIRECTORY_NAME}[] directory found")

        artifact = PackedArtifact(tables=tables)
        saw_sentinel = False
        for line in m.group(1).split("\n"):
            if not line.strip():
                continue
            if saw_sentinel:
                raise ValueError("Directory rows after the sentinel")
            if _SENTINEL_RE.match(line):
                saw_sentinel = True
                continue
            row = _ROW_RE.match(line)
            if row is None:
                raise ValueError(f"Malformed directory row: {line.strip()!r}")
            literal, ident, sized, mtime, zipped = row.groups()
            if ident != sized:
                raise ValueError(f"Row for {ident} takes sizeof({sized})")
            if ident not in tables:
                raise ValueError(f"Directory references unknown table {ident}")
            physical = tables[ident]
            if not physical or physical[-1] != 0:
                raise ValueError(f"Table {ident} is not zero-terminated")
            artifact.entries.append(PackedEntry(
                name=os.fsdecode(decode_c_string(literal)),
                table=ident,
                size=len(physical) - 1,
                mtime=int(mtime),
                filtered=zipped == "1",
            ))
        if not saw_sentinel:
            raise ValueError("Directory has no sentinel row")
        return artifact
