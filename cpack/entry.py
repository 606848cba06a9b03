"""
cpack entries - what goes in, and what each directory row records.
"""

from __future__ import annotations

from dataclasses import dataclass

from cpack.format import NAME_PREFIX, table_identifier


@dataclass(frozen=True)
class InputSpec:
    """One file argument and the filter in effect for it."""
    path: str
    filter: str | None = None
    position: int = 1  # argument index; names the byte table

    @property
    def filtered(self) -> bool:
        return self.filter is not None

    @property
    def name(self) -> str:
        """Lookup key as it appears in the directory."""
        return NAME_PREFIX + self.path

    @property
    def table(self) -> str:
        return table_identifier(self.position)


@dataclass(frozen=True)
class PackedEntry:
    """
    One directory row.

    size is the real content length; the emitted table holds size + 1 bytes
    because of the trailing zero. mtime is always the original file's,
    even when the content came through a filter.
    """
    name: str
    table: str
    size: int
    mtime: int
    filtered: bool = False

    @property
    def physical_size(self) -> int:
        return self.size + 1

    @classmethod
    def from_spec(cls, spec: InputSpec, size: int, mtime: int) -> PackedEntry:
        return cls(
            name=spec.name,
            table=spec.table,
            size=size,
            mtime=mtime,
            filtered=spec.filtered,
        )
