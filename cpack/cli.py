"""
cpack CLI - Pack files into a C source file on stdout.

Usage:
  cpack file1.data file2.data > fs.c
  cpack index.html -z "gzip -c" app.js style.css > fs.c

  -z CMD   pipe every following file through "CMD <file>" (until the next -z;
           -z "" goes back to reading files directly)

In application code:
  const char *mg_unpack(const char *name, size_t *size, time_t *mtime);
  const char *mg_unlist(size_t no);

Exit status: 0 ok, 1 a file or filter could not be opened or stdout was
closed early, 2 bad arguments or environment settings.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Sequence

from cpack.config import load_config
from cpack.errors import AcquisitionError, ConfigError, MalformedArgumentsError
from cpack.scanner import scan_arguments
from cpack.writer import pack

LOG_FORMAT = "cpack: %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int) -> None:
    """Diagnostics go to stderr; stdout carries only the artifact."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def main(argv: Sequence[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    configure_logging(config.log_level)

    try:
        specs = scan_arguments(args)
    except MalformedArgumentsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        try:
            pack(specs, sys.stdout, prefix=config.prefix, chunk_size=config.chunk_size)
        except AcquisitionError as e:
            sys.stdout.flush()
            print(f"Cannot open [{e.target}]: {e.reason}", file=sys.stderr)
            sys.exit(1)
        sys.stdout.flush()
    except BrokenPipeError:
        # Reader closed stdout; point it at devnull so the exit-time flush stays quiet
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)


if __name__ == "__main__":
    main()
