"""
cpack Artifact Format
=====================

Layout of a generated artifact (plain C, written to stdout):

    #include <stddef.h>               <- Fixed includes (size_t, strcmp, time_t)
    #include <string.h>
    #include <time.h>

    static const unsigned char v1[] = {     <- One byte table per input file
     104, 101, 108, 108, 111,  0 // hello   <- 12 bytes per line + ASCII comment
    };

    static const struct packed_file {       <- Directory type
      const char *name;
      const unsigned char *data;
      size_t size;                          <- sizeof(table), i.e. real size + 1
      time_t mtime;
      int zipped;
    } packed_files[] = {
      {"/hello.txt", v1, sizeof(v1), 1700000000, 0},
      {NULL, NULL, 0, 0, 0}                 <- Sentinel, always last
    };

    const char *mg_unlist(size_t no) ...    <- Fixed accessors
    const char *mg_unpack(const char *name, size_t *size, time_t *mtime) ...

Design Decisions:
    - Every table carries one extra zero byte so text payloads can be used
      as NUL-terminated strings; accessors report size - 1
    - Table identifiers come from the argument position, unique per entry
    - Names are C-escaped byte for byte, so strcmp matches the exact path bytes
    - The ASCII comment is documentation only and is never parsed back
"""

from __future__ import annotations

import os
import re

# Filter directive: "-z <command>" pipes every following file through <command>
FILTER_FLAG = "-z"

# Bytes per output line; purely cosmetic
WRAP_WIDTH = 12

# Stand-in for non-printable bytes in the ASCII comment
PLACEHOLDER = "."

# Accessor symbol prefix used when none is configured
DEFAULT_PREFIX = "mg_"

# Names get a leading separator so lookups are unambiguous
NAME_PREFIX = "/"

TABLE_PREFIX = "v"
DIRECTORY_NAME = "packed_files"

VALID_PREFIX = re.compile(r"^(?:[A-Za-z_][A-Za-z0-9_]*)?$")

HEADER = (
    "#include <stddef.h>\n"
    "#include <string.h>\n"
    "#include <time.h>\n"
    "\n"
)

DIRECTORY_DECL = (
    "\n"
    "static const struct packed_file {\n"
    "  const char *name;\n"
    "  const unsigned char *data;\n"
    "  size_t size;\n"
    "  time_t mtime;\n"
    "  int zipped;\n"
    f"}} {DIRECTORY_NAME}[] = {{\n"
)

SENTINEL_ROW = "  {NULL, NULL, 0, 0, 0}\n};\n\n"

_ACCESSORS = """\
const char *{p}unlist(size_t no) {{
  return packed_files[no].name;
}}
const char *{p}unpack(const char *name, size_t *size, time_t *mtime);
const char *{p}unpack(const char *name, size_t *size, time_t *mtime) {{
  const struct packed_file *p;
  for (p = packed_files; p->name != NULL; p++) {{
    if (strcmp(p->name, name) != 0) continue;
    if (size != NULL) *size = p->size - 1;
    if (mtime != NULL) *mtime = p->mtime;
    return (const char *) p->data;
  }}
  return NULL;
}}
"""


def printable(byte: int) -> str:
    """ASCII rendering of one byte for the table comments."""
    if 0x20 <= byte <= 0x7E and byte != 0x5C:
        return chr(byte)
    return PLACEHOLDER


def table_identifier(position: int) -> str:
    return f"{TABLE_PREFIX}{position}"


class TableRenderer:
    """
    Incremental renderer for one byte table body.

    Feed chunks of any size; output is identical to rendering the whole
    stream at once. finish() appends the terminating zero byte and closes
    the declaration.

    Usage:
        r = TableRenderer("v1")
        out.write(r.start())
        out.write(r.feed(b"hello"))
        out.write(r.finish())
        r.size  # -> 5
    """

    def __init__(self, identifier: str, width: int = WRAP_WIDTH) -> None:
        self.identifier = identifier
        self.width = width
        self.size = 0
        self._ascii: list[str] = []
        self._finished = False

    def start(self) -> str:
        return f"static const unsigned char {self.identifier}[] = {{\n"

    def feed(self, chunk: bytes) -> str:
        if self._finished:
            raise RuntimeError(f"Table {self.identifier} is already finished")
        parts: list[str] = []
        for byte in chunk:
            if len(self._ascii) == self.width:
                parts.append(f" // {''.join(self._ascii)}\n")
                self._ascii = []
            ch = printable(byte)
            # No "??" in comments: "??/" is a line-splicing trigraph
            if ch == "?" and self._ascii and self._ascii[-1] == "?":
                ch = PLACEHOLDER
            self._ascii.append(ch)
            parts.append(f" {byte:3d},")
        self.size += len(chunk)
        return "".join(parts)

    def finish(self) -> str:
        self._finished = True
        # Trailing zero: text payloads read as NUL-terminated strings
        return f" 0 // {''.join(self._ascii)}\n}};\n"


def render_table(identifier: str, data: bytes) -> str:
    """Render a complete byte table declaration for data."""
    r = TableRenderer(identifier)
    return r.start() + r.feed(data) + r.finish()


def c_string_literal(name: str | bytes) -> str:
    """Quote name as a C string literal that compares equal to its raw bytes."""
    raw = os.fsencode(name) if isinstance(name, str) else name
    out = ['"']
    prev = 0
    for byte in raw:
        if byte in (0x22, 0x5C):  # " and backslash
            out.append("\\" + chr(byte))
        elif byte == 0x3F and prev == 0x3F:  # break up ?? trigraphs
            out.append("\\?")
        elif 0x20 <= byte <= 0x7E:
            out.append(chr(byte))
        else:
            out.append(f"\\{byte:03o}")
        prev = byte
    out.append('"')
    return "".join(out)


def directory_row(name: str, identifier: str, mtime: int, filtered: bool) -> str:
    return (
        f"  {{{c_string_literal(name)}, {identifier}, sizeof({identifier}), "
        f"{mtime}, {1 if filtered else 0}}},\n"
    )


def accessor_code(prefix: str = DEFAULT_PREFIX) -> str:
    """The fixed unlist/unpack routines, with the given symbol prefix."""
    if not VALID_PREFIX.match(prefix):
        raise ValueError(f"Invalid C symbol prefix: {prefix!r}")
    return _ACCESSORS.format(p=prefix)
