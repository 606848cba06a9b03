"""cpack TUI Viewer - Browse the files packed into a generated artifact."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input

from cpack.reader import ArtifactReader, PackedArtifact, is_artifact
from cpack.tui.widgets import DumpPanel, EntryList, EntryPanel


class PackViewerApp(App):
    """TUI viewer for cpack artifacts. Directory list, entry info, hex dump."""

    TITLE = "cpack viewer"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-area {
        height: 1fr;
    }
    #search-bar {
        dock: bottom;
        display: none;
        height: 3;
        padding: 0 1;
    }
    #search-bar.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("slash", "toggle_search", "Search", show=True),
        Binding("escape", "close_search", "Close search", show=False),
        Binding("j", "next_entry", "Next", show=True),
        Binding("k", "prev_entry", "Prev", show=True),
    ]

    def __init__(self, artifact: PackedArtifact, title: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._artifact = artifact
        self._source_name = title
        self._all_indices = list(range(len(artifact)))

    def compose(self) -> ComposeResult:
        if self._source_name:
            self.title = f"cpack viewer - {self._source_name}"
        yield Header()
        with Horizontal(id="main-area"):
            yield EntryPanel(total=len(self._artifact), id="entry")
            yield self._make_list(self._all_indices)
            yield DumpPanel(id="dump")
        yield Input(placeholder="Filter names... (Escape to close)", id="search-bar")
        yield Footer()

    def _make_list(self, indices: list[int]) -> EntryList:
        names = [self._artifact.entries[i].name for i in indices]
        return EntryList(names=names, indices=indices, id="entries")

    def on_mount(self) -> None:
        if self._all_indices:
            self._show(self._all_indices[0])
            self.query_one("#entries", EntryList).focus()

    def _show(self, index: int) -> None:
        entry = self._artifact.entries[index]
        self.query_one("#entry", EntryPanel).show_entry(entry)
        data = self._artifact.tables[entry.table][:-1]
        self.query_one("#dump", DumpPanel).show_data(entry.name, data)

    def on_entry_list_entry_selected(self, event: EntryList.EntrySelected) -> None:
        self._show(event.entry_index)

    def action_next_entry(self) -> None:
        self.query_one("#entries", EntryList).action_cursor_down()

    def action_prev_entry(self) -> None:
        self.query_one("#entries", EntryList).action_cursor_up()

    async def action_toggle_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.toggle_class("visible")
        if search.has_class("visible"):
            search.focus()
        else:
            await self.action_close_search()

    async def action_close_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.remove_class("visible")
        search.value = ""
        await self._replace_list(self._all_indices)
        self.query_one("#entries", EntryList).focus()

    async def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search-bar":
            return
        query = event.value.lower().strip()
        if not query:
            await self._replace_list(self._all_indices)
            return
        matches = [
            i for i in self._all_indices
            if query in self._artifact.entries[i].name.lower()
        ]
        await self._replace_list(matches)

    async def _replace_list(self, indices: list[int]) -> None:
        await self.query_one("#entries", EntryList).remove()
        await self.query_one("#main-area", Horizontal).mount(self._make_list(indices), before="#dump")
        if indices:
            self._show(indices[0])


def run_viewer(path: str | Path) -> None:
    """Launch the viewer on an artifact file."""
    path = Path(path)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    text = path.read_text(encoding="ascii", errors="replace")
    if not is_artifact(text):
        print(f"Error: Not a cpack artifact: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        artifact = ArtifactReader.parse(text)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    PackViewerApp(artifact, title=path.name).run()


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="cpack-view",
        description="Browse the files packed into a cpack-generated C file",
    )
    parser.add_argument("path", help="Generated .c file")
    args = parser.parse_args()
    run_viewer(args.path)


if __name__ == "__main__":
    main()
