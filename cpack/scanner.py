"""
cpack argument scanner.

Folds the argument list into InputSpecs. "-z CMD" sets the filter for every
path after it until the next "-z"; "-z ''" clears it. A "-z" with nothing
after it is rejected.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Sequence

from cpack.entry import InputSpec
from cpack.errors import MalformedArgumentsError
from cpack.format import FILTER_FLAG

log = logging.getLogger(__name__)


class ScanState(NamedTuple):
    """Accumulator threaded through the fold."""
    current_filter: str | None
    entries: tuple[InputSpec, ...]


def step(state: ScanState, position: int, path: str) -> ScanState:
    """Add one file argument under the current filter."""
    spec = InputSpec(path=path, filter=state.current_filter, position=position)
    return ScanState(state.current_filter, state.entries + (spec,))


def set_filter(state: ScanState, command: str) -> ScanState:
    return ScanState(command or None, state.entries)


def scan_arguments(argv: Sequence[str]) -> list[InputSpec]:
    """Turn raw arguments (without the program name) into ordered InputSpecs.

    Positions are 1-based, counted like argv indices after the program name,
    so table identifiers match the classic C tool's output.
    """
    state = ScanState(None, ())
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == FILTER_FLAG:
            if i + 1 >= len(argv):
                raise MalformedArgumentsError(
                    f"Filter flag {FILTER_FLAG} at position {i + 1} has no command"
                )
            state = set_filter(state, argv[i + 1])
            log.debug("filter set to %r", state.current_filter)
            i += 2
            continue
        state = step(state, i + 1, arg)
        i += 1
    return list(state.entries)
