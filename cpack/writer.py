"""
cpack Writer - Streams a C artifact for a list of inputs.

Two passes over the inputs, output written strictly in order:
  1. Headers, then one byte table per input (bytes streamed, never buffered whole)
  2. Directory table built from what pass 1 recorded, then the accessors

Usage:
    entries = pack(scan_arguments(["a.txt", "-z", "gzip -c", "b.txt"]), sys.stdout)

    # Or step by step:
    w = ArtifactWriter(out)
    w.write_header()
    for spec in specs:
        w.write_table(spec)
    w.write_directory()
    w.write_accessors()
"""

from __future__ import annotations

import logging
from typing import Iterable, TextIO

from cpack.entry import InputSpec, PackedEntry
from cpack.format import (
    DEFAULT_PREFIX,
    DIRECTORY_DECL,
    HEADER,
    SENTINEL_ROW,
    TableRenderer,
    accessor_code,
    directory_row,
)
from cpack.sources import DEFAULT_CHUNK_SIZE, open_source, source_mtime

log = logging.getLogger(__name__)


class ArtifactWriter:
    """Writes one artifact to a text stream. Not reusable across artifacts."""

    def __init__(
        self,
        out: TextIO,
        prefix: str = DEFAULT_PREFIX,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._out = out
        self.prefix = prefix
        self.chunk_size = chunk_size
        self.entries: list[PackedEntry] = []
        # Validate before anything is written
        self._accessors = accessor_code(prefix)

    def write_header(self) -> None:
        self._out.write(HEADER)

    def write_table(self, spec: InputSpec) -> PackedEntry:
        """Acquire one input and emit its byte table. Raises AcquisitionError."""
        mtime = source_mtime(spec.path)
        renderer = TableRenderer(spec.table)
        with open_source(spec, self.chunk_size) as source:
            self._out.write(renderer.start())
            while True:
                chunk = source.read_chunk()
                if not chunk:
                    break
                self._out.write(renderer.feed(chunk))
        self._out.write(renderer.finish())

        entry = PackedEntry.from_spec(spec, size=renderer.size, mtime=mtime)
        self.entries.append(entry)
        log.debug(
            "packed %s as %s (%d bytes, filter=%r)",
            spec.path, entry.table, entry.size, spec.filter,
        )
        return entry

    def write_directory(self) -> None:
        self._out.write(DIRECTORY_DECL)
        for entry in self.entries:
            self._out.write(
                directory_row(entry.name, entry.table, entry.mtime, entry.filtered)
            )
        self._out.write(SENTINEL_ROW)

    def write_accessors(self) -> None:
        self._out.write(self._accessors)


def pack(
    specs: Iterable[InputSpec],
    out: TextIO,
    prefix: str = DEFAULT_PREFIX,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[PackedEntry]:
    """Write a complete artifact for specs to out. Returns the directory rows."""
    w = ArtifactWriter(out, prefix=prefix, chunk_size=chunk_size)
    w.write_header()
    for spec in specs:
        w.write_table(spec)
    w.write_directory()
    w.write_accessors()
    log.info("packed %d file(s)", len(w.entries))
    return list(w.entries)
