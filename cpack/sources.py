"""
cpack byte sources - where an entry's bytes come from.

Two variants behind one interface:
  - FileSource: the file itself, opened for binary reading
  - FilterSource: stdout of "<command> <path>" run through the shell

Both are context managers; the file handle or process is released on exit,
on the error path too. Nothing here interprets filter output.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import BinaryIO, Protocol

from cpack.entry import InputSpec
from cpack.errors import AcquisitionError

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class ByteSource(Protocol):
    target: str

    def read_chunk(self) -> bytes:
        """Next chunk of bytes, or b"" at end of stream."""
        ...

    def __enter__(self) -> ByteSource: ...

    def __exit__(self, *args) -> None: ...


class FileSource:
    """Reads a file directly."""

    def __init__(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.target = path
        self.chunk_size = chunk_size
        self._handle: BinaryIO | None = None

    def open(self) -> FileSource:
        try:
            self._handle = open(self.target, "rb")
        except OSError as e:
            raise AcquisitionError(self.target, e.strerror or str(e)) from e
        return self

    def read_chunk(self) -> bytes:
        if self._handle is None:
            raise RuntimeError("FileSource is not open")
        return self._handle.read(self.chunk_size)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> FileSource:
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()


class FilterSource:
    """Reads the standard output of a filter command run over a file."""

    def __init__(self, command: str, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.command = command
        self.path = path
        self.chunk_size = chunk_size
        self.target = f"{command} {shlex.quote(path)}"
        self.returncode: int | None = None
        self._proc: subprocess.Popen | None = None

    def open(self) -> FilterSource:
        try:
            self._proc = subprocess.Popen(
                self.target,
                shell=True,
                stdout=subprocess.PIPE,
            )
        except OSError as e:
            raise AcquisitionError(self.target, e.strerror or str(e)) from e
        return self

    def read_chunk(self) -> bytes:
        if self._proc is None or self._proc.stdout is None:
            raise RuntimeError("FilterSource is not open")
        return self._proc.stdout.read(self.chunk_size)

    def close(self) -> None:
        if self._proc is None:
            return
        if self._proc.stdout is not None:
            self._proc.stdout.close()
        self.returncode = self._proc.wait()
        self._proc = None
        if self.returncode != 0:
            log.warning("filter exited with status %d: %s", self.returncode, self.target)

    def __enter__(self) -> FilterSource:
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()


def open_source(spec: InputSpec, chunk_size: int = DEFAULT_CHUNK_SIZE) -> FileSource | FilterSource:
    """Pick the source variant for an input. Call as a context manager."""
    if spec.filter is None:
        return FileSource(spec.path, chunk_size)
    return FilterSource(spec.filter, spec.path, chunk_size)


def source_mtime(path: str) -> int:
    """Modification time of the original file, in whole epoch seconds."""
    try:
        return int(os.stat(path).st_mtime)
    except OSError as e:
        raise AcquisitionError(path, e.strerror or str(e)) from e
