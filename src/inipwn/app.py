"""Terminal front-end for the INI editor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Header, Input, Static

from inipwn import __version__
from inipwn._render import colorize
from inipwn.document import IniDocument
from inipwn.views import (
    FileSelection,
    InlineEditor,
    LineEditor,
    Quit,
    TransitionTo,
    View,
    ViewContext,
    dispatch,
    open_file_selection,
    open_line_editor,
)

logger = logging.getLogger(__name__)

# Data directory path
_DATA_DIR = Path(__file__).parent / "data"

# Screen rows around the editor viewport: Header, #frame border, frame
# title and its two rules, and the docked #prompt (see app.tcss).
HEADER_ROWS = 1
FRAME_BORDER_ROWS = 2
FRAME_CHROME_ROWS = 3
PROMPT_ROWS = 3
VIEWPORT_RESERVE = HEADER_ROWS + FRAME_BORDER_ROWS + FRAME_CHROME_ROWS + PROMPT_ROWS
INI_GLOB = "*.ini"
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"


def _load_data(filename: str) -> str:
    """Load content from data directory."""
    return (_DATA_DIR / filename).read_text(encoding="utf-8")


def banner() -> Text:
    text = Text(_load_data("banner.txt").rstrip("\n"), style="dark_red")
    text.append(f"\n          Enhanced INI File Manipulator v{__version__}", style="dark_red")
    return text


def list_ini_files(directory: Path) -> list[str]:
    """Names of the INI files directly inside *directory*, sorted."""
    return sorted(p.name for p in directory.glob(INI_GLOB) if p.is_file())


# -- Frame rendering -------------------------------------------------------


def _file_label(document: IniDocument) -> str:
    return document.current_file_path or "None"


def _window(lines: list, offset: int, height: int) -> list:
    return lines[offset : offset + height]


def render_frame(view: View, width: int = 80) -> Text:
    """Render the whole frame for *view* as one rich Text."""
    rule = Text("-" * width, style="dim")
    out = Text(no_wrap=True, overflow="crop")

    if isinstance(view, FileSelection):
        if view.show_banner:
            logo = banner()
            # logo, blank row, instructions, blank row, the whole list
            needed = len(logo.plain.split("\n")) + 3 + max(1, len(view.files))
            if needed <= view.viewport_height + FRAME_CHROME_ROWS:
                out.append_text(logo)
                out.append("\n\n")
        out.append(
            "File Selection - Use 'w' (up), 's' (down) and press Enter to select "
            "a file. (q to quit)\n\n",
            style="yellow",
        )
        if not view.files:
            out.append("No INI files found in the current directory.", style="red")
            return out
        rows = []
        window = _window(view.files, view.scroll_offset, view.viewport_height)
        for i, name in enumerate(window):
            if view.scroll_offset + i == view.selected_index:
                rows.append(Text(" > " + name, style="bold white on dark_blue"))
            else:
                rows.append(Text("   " + name))
        out.append_text(Text("\n").join(rows))
        return out

    if isinstance(view, LineEditor):
        total = len(view.lines)
        last = min(total, view.scroll_offset + view.viewport_height)
        out.append(
            f"Editor - File: {_file_label(view.document)} "
            f"| Ln: {view.scroll_offset + 1}-{last}/{total}",
            style="cyan",
        )
        visible = [
            colorize(line)
            for line in _window(view.lines, view.scroll_offset, view.viewport_height)
        ]
    else:
        total = len(view.lines)
        out.append(
            f"Inline Editor - File: {_file_label(view.document)} "
            f"| Ln: {view.selection_index + 1}/{total}",
            style="cyan",
        )
        window = _window(view.lines, view.scroll_offset, view.viewport_height)
        visible = [
            colorize(tagged.text, view.scroll_offset + i == view.selection_index)
            for i, tagged in enumerate(window)
        ]

    visible.extend(Text("") for _ in range(view.viewport_height - len(visible)))
    out.append("\n")
    out.append_text(rule)
    out.append("\n")
    out.append_text(Text("\n").join(visible))
    out.append("\n")
    out.append_text(rule)
    return out


def prompt_for(view: View) -> str:
    if isinstance(view, InlineEditor):
        if view.pending_edit is not None:
            return f"new value for [{view.pending_edit.section}] {view.pending_edit.key}"
        return "Inline Editor > w/s move, e edit, goto <n>, back, q"
    if isinstance(view, LineEditor):
        return "> command (help for a list)"
    return "> w/s move, Enter open, q quit"


# -- App -------------------------------------------------------------------


class IniEditorApp(App):
    """TUI app that feeds each submitted line to the active view."""

    CSS_PATH = "app.tcss"
    TITLE = "INI Editor"
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        document: IniDocument | None = None,
        directory: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.ctx = ViewContext(
            directory=directory if directory is not None else Path(),
            list_files=list_ini_files,
        )
        self._initial_document = document
        self.view: View | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="frame")
        with Vertical(id="help-panel"):
            with Horizontal(id="help-header"):
                yield Static("[b]Editor Help[/b]", id="help-title")
                yield Button("✕", id="help-close", variant="error")
            yield Static(_load_data("help.txt"), id="help-text", markup=False)
        yield Input(id="prompt")

    def on_mount(self) -> None:
        self._update_viewport_height()
        if self._initial_document is not None:
            self.view = open_line_editor(self._initial_document, self.ctx)
        else:
            self.view = open_file_selection(self.ctx, show_banner=True)
        self._redraw()
        self.query_one("#prompt", Input).focus()

    def on_resize(self, event: events.Resize) -> None:
        # Only views built from now on pick up the new height.
        self._update_viewport_height()
        self._redraw()

    def _update_viewport_height(self) -> None:
        self.ctx.viewport_height = max(1, self.size.height - VIEWPORT_RESERVE)

    def _redraw(self) -> None:
        view = self.view
        if view is None:
            return
        if isinstance(view, FileSelection):
            self.sub_title = str(self.ctx.directory.resolve())
        else:
            self.sub_title = _file_label(view.document)
        frame = self.query_one("#frame", Static)
        frame.update(render_frame(view, max(10, self.size.width - 2)))
        self.query_one("#prompt", Input).placeholder = prompt_for(view)

    # -- Event handlers ----------------------------------------------------

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.input.value = ""
        self.submit(event.value)

    def submit(self, line: str) -> None:
        """Run one input line to completion and redraw."""
        if self.view is None:
            return
        step = dispatch(self.view, line, self.ctx)
        if step.notice is not None:
            if step.notice.severity == "error":
                logger.warning("%s", step.notice.text)
            self.notify(step.notice.text, severity=step.notice.severity)
        if step.show_help:
            self.query_one("#help-panel").toggle_class("visible")

        outcome = step.outcome
        if isinstance(outcome, Quit):
            self.exit()
            return
        if isinstance(outcome, TransitionTo):
            logger.info(
                "view %s -> %s", type(self.view).__name__, type(outcome.view).__name__
            )
            self.view = outcome.view
            self.query_one("#help-panel").remove_class("visible")
        self._redraw()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close":
            self.query_one("#help-panel").remove_class("visible")
            self.query_one("#prompt", Input).focus()


def print_banner() -> None:
    Console().print(banner())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="inipwn",
        description="Interactive INI file editor",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="",
        help="INI file to open",
    )
    parser.add_argument(
        "-v", "--version",
        action="store_true",
        default=False,
        help="print the version banner and exit",
    )
    parser.add_argument(
        "--log-file",
        default="",
        help="append a log of loads, saves and errors to this file",
    )
    args = parser.parse_args(argv)

    if args.version:
        print_banner()
        return

    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=logging.INFO, format=LOG_FORMAT)

    document: IniDocument | None = None
    if args.file and Path(args.file).is_file():
        document = IniDocument()
        err = document.load(args.file)
        if err is not None:
            print(f"inipwn: Error loading file: {err.message}", file=sys.stderr)
            sys.exit(1)

    app = IniEditorApp(document=document)
    app.run()


if __name__ == "__main__":
    main()
