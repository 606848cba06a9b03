"""cpack TUI Widgets - Panels for the artifact viewer."""

from __future__ import annotations

from datetime import datetime, timezone

from textual.app import ComposeResult
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Label, ListItem, ListView, Static

from cpack.entry import PackedEntry
from cpack.format import printable

MAX_DUMP_BYTES = 64 * 1024


def hexdump(data: bytes, width: int = 16, limit: int = MAX_DUMP_BYTES) -> str:
    """Classic offset / hex / ASCII dump, truncated after limit bytes."""
    lines = []
    shown = data[:limit]
    for off in range(0, len(shown), width):
        row = shown[off:off + width]
        hex_part = " ".join(f"{b:02x}" for b in row)
        ascii_part = "".join(printable(b) for b in row)
        lines.append(f"{off:08x}  {hex_part:<{width * 3 - 1}}  {ascii_part}")
    if len(data) > limit:
        lines.append(f"... {len(data) - limit} more bytes")
    return "\n".join(lines)


class EntryPanel(Static):
    """Sidebar panel showing the selected directory row."""

    DEFAULT_CSS = """
    EntryPanel {
        width: 32;
        border: solid $accent;
        padding: 1;
        overflow-y: auto;
    }
    EntryPanel .entry-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }
    EntryPanel .entry-key {
        color: $text-muted;
    }
    EntryPanel .entry-filtered {
        color: $warning;
        text-style: bold;
    }
    """

    def __init__(self, total: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self._total = total
        self._body: Static | None = None

    def compose(self) -> ComposeResult:
        yield Label(f"{self._total} packed file(s)", classes="entry-title")
        self._body = Static("", classes="entry-key")
        yield self._body

    def show_entry(self, entry: PackedEntry) -> None:
        if self._body is None:
            return
        when = datetime.fromtimestamp(entry.mtime, timezone.utc).isoformat()
        lines = [
            f"name:\n  {entry.name}",
            f"table:\n  {entry.table}",
            f"size:\n  {entry.size} (+1 NUL)",
            f"mtime:\n  {entry.mtime}\n  {when}",
            "filtered:\n  yes" if entry.filtered else "filtered:\n  no",
        ]
        self._body.update("\n".join(lines))


class EntryList(ListView):
    """Directory rows in emission order."""

    DEFAULT_CSS = """
    EntryList {
        width: 32;
        border: solid $accent;
    }
    EntryList > ListItem {
        padding: 0 1;
    }
    EntryList > ListItem.--highlight {
        background: $accent;
    }
    """

    class EntrySelected(Message):
        """Fired when a row is highlighted or selected."""

        def __init__(self, entry_index: int) -> None:
            self.entry_index = entry_index
            super().__init__()

    def __init__(self, names: list[str], indices: list[int], **kwargs) -> None:
        self._names = names
        self._indices = indices
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        for name in self._names:
            yield ListItem(Label(name))

    def _post_current(self) -> None:
        idx = self.index or 0
        if 0 <= idx < len(self._indices):
            self.post_message(self.EntrySelected(self._indices[idx]))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        self._post_current()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self._post_current()


class DumpPanel(Static):
    """Hex/ASCII view of one entry's content."""

    DEFAULT_CSS = """
    DumpPanel {
        border: solid $accent;
        padding: 1;
        overflow: auto;
    }
    DumpPanel .dump-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    """

    current_name = reactive("")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._title_widget: Label | None = None
        self._body_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._title_widget = Label("Select a file", classes="dump-title")
        self._body_widget = Static("")
        yield self._title_widget
        yield self._body_widget

    def show_data(self, name: str, data: bytes) -> None:
        self.current_name = name
        if self._title_widget:
            self._title_widget.update(f"--- {name} ({len(data)} bytes) ---")
        if self._body_widget:
            self._body_widget.update(hexdump(data) or "(empty)")
        self.scroll_home()
