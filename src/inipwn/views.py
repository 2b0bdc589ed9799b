"""The three editor views and their line-at-a-time input dispatch.

Each view is a plain dataclass holding only its own state. ``dispatch`` feeds
one input line to the active view and returns a :class:`Step` telling the
caller whether to stay, switch to another view, or quit, plus an optional
notice to show the user.

    FileSelection --enter--> LineEditor --edit--> InlineEditor
          ^                    |    ^                  |
          +-------back---------+    +------back--------+
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from inipwn._render import LineKind, TaggedLine, build_tagged_lines
from inipwn._search import SearchState
from inipwn._search import search as find_matches
from inipwn._tokenize import tokenize
from inipwn.document import DocError, ErrorKind, IniDocument

# -- Outcomes --------------------------------------------------------------


@dataclass(frozen=True)
class Notice:
    text: str
    severity: str = "information"  # information | warning | error


@dataclass(frozen=True)
class Stay:
    pass


@dataclass(frozen=True)
class TransitionTo:
    view: View


@dataclass(frozen=True)
class Quit:
    pass


@dataclass
class Step:
    """Result of feeding one line to a view."""

    outcome: Stay | TransitionTo | Quit = field(default_factory=Stay)
    notice: Notice | None = None
    show_help: bool = False


def _error(err: DocError) -> Step:
    return Step(notice=Notice(f"Error: {err.message}", "error"))


def _usage(text: str) -> Step:
    return _error(DocError(ErrorKind.INVALID_USAGE, f"Usage: {text}"))


# -- Context ---------------------------------------------------------------


def _no_files(directory: Path) -> list[str]:
    return []


@dataclass
class ViewContext:
    """What the views need from the outside world.

    ``viewport_height`` is read when a view is built and kept by that
    view; changing it later only affects views built afterwards.
    """

    directory: Path = field(default_factory=Path)
    viewport_height: int = 20
    list_files: Callable[[Path], list[str]] = _no_files


# -- Views -----------------------------------------------------------------


def _follow(selection: int, offset: int, height: int) -> int:
    """Scroll offset that keeps *selection* inside a window of *height* rows."""
    if selection < offset:
        return selection
    if selection >= offset + height:
        return selection - height + 1
    return offset


@dataclass
class FileSelection:
    files: list[str]
    selected_index: int = 0
    show_banner: bool = False
    scroll_offset: int = 0
    viewport_height: int = 20

    def move_selection(self, delta: int) -> None:
        last = max(0, len(self.files) - 1)
        self.selected_index = max(0, min(last, self.selected_index + delta))
        self.scroll_offset = _follow(
            self.selected_index, self.scroll_offset, self.viewport_height
        )


@dataclass
class LineEditor:
    document: IniDocument
    viewport_height: int
    scroll_offset: int = 0
    search: SearchState | None = None
    lines: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.refresh()

    @property
    def max_scroll(self) -> int:
        return max(0, len(self.lines) - self.viewport_height)

    def refresh(self) -> None:
        """Rebuild the display lines from the document."""
        self.lines = self.document.render_lines()
        self.scroll_offset = max(0, min(self.scroll_offset, self.max_scroll))

    def scroll_to(self, row: int) -> None:
        self.scroll_offset = max(0, min(row, self.max_scroll))


@dataclass
class InlineEditor:
    document: IniDocument
    viewport_height: int
    selection_index: int = 0
    scroll_offset: int = 0
    lines: list[TaggedLine] = field(default_factory=list)
    pending_edit: TaggedLine | None = None

    def __post_init__(self) -> None:
        self.rebuild()

    def rebuild(self) -> None:
        """Re-project the document. The selection index is left as it is."""
        self.lines = build_tagged_lines(self.document)

    @property
    def selected(self) -> TaggedLine | None:
        if 0 <= self.selection_index < len(self.lines):
            return self.lines[self.selection_index]
        return None

    def move_selection(self, delta: int) -> None:
        last = max(0, len(self.lines) - 1)
        self.selection_index = max(0, min(last, self.selection_index + delta))
        self.scroll_offset = _follow(
            self.selection_index, self.scroll_offset, self.viewport_height
        )


View = FileSelection | LineEditor | InlineEditor


def open_file_selection(ctx: ViewContext, *, show_banner: bool = False) -> FileSelection:
    return FileSelection(
        files=ctx.list_files(ctx.directory),
        show_banner=show_banner,
        viewport_height=ctx.viewport_height,
    )


def open_line_editor(document: IniDocument, ctx: ViewContext) -> LineEditor:
    return LineEditor(document, viewport_height=ctx.viewport_height)


def open_inline_editor(document: IniDocument, ctx: ViewContext) -> InlineEditor:
    return InlineEditor(document, viewport_height=ctx.viewport_height)


# -- File selection --------------------------------------------------------


def _dispatch_file_selection(view: FileSelection, line: str, ctx: ViewContext) -> Step:
    word = line.strip().lower()
    if word == "w":
        view.move_selection(-1)
    elif word == "s":
        view.move_selection(1)
    elif word == "q":
        return Step(Quit())
    elif word in ("", "enter"):
        if not view.files:
            return Step(notice=Notice("No INI files found in the current directory.", "warning"))
        path = str(ctx.directory / view.files[view.selected_index])
        document = IniDocument()
        err = document.load(path)
        if err is not None:
            return Step(notice=Notice(f"Error loading file: {err.message}", "error"))
        return Step(TransitionTo(open_line_editor(document, ctx)))
    return Step()


# -- Line editor -----------------------------------------------------------


def _run_command(view: LineEditor, args: list[str]) -> Step:
    """Execute a tokenized line editor command."""
    doc = view.document
    verb = args[0].lower()

    if verb == "help":
        return Step(show_help=True)
    if verb == "list":
        return Step()
    if verb == "save":
        if len(args) >= 2:
            doc.current_file_path = args[1]
        path = doc.current_file_path
        if not path:
            return _error(
                DocError(ErrorKind.NO_FILE_PATH_SPECIFIED, "No file specified for saving.")
            )
        err = doc.save(path)
        if err is not None:
            return _error(err)
        return Step(notice=Notice(f"Saved INI file to {path}"))
    if verb == "goto":
        if len(args) < 2:
            return _usage("goto <lineNumber>")
        try:
            num = int(args[1])
        except ValueError:
            return Step()
        if 1 <= num <= len(view.lines):
            view.scroll_to(num - 1)
        return Step()

    if verb == "set":
        if len(args) < 4:
            return _usage("set <section> <key> <value>")
        err = doc.set_value(args[1], args[2], " ".join(args[3:]))
    elif verb == "addsection":
        if len(args) < 2:
            return _usage("addsection <section>")
        err = doc.add_section(args[1])
    elif verb == "addkey":
        if len(args) < 4:
            return _usage("addkey <section> <key> <value>")
        err = doc.add_key(args[1], args[2], " ".join(args[3:]))
    elif verb == "removekey":
        if len(args) < 3:
            return _usage("removekey <section> <key>")
        err = doc.remove_key(args[1], args[2])
    elif verb == "removesection":
        if len(args) < 2:
            return _usage("removesection <section>")
        err = doc.remove_section(args[1])
    else:
        return _error(
            DocError(
                ErrorKind.UNKNOWN_COMMAND,
                f"Unknown command '{args[0]}'. Type 'help' for a list of commands.",
            )
        )
    if err is not None:
        return _error(err)
    return Step()


def _dispatch_line_editor(view: LineEditor, line: str, ctx: ViewContext) -> Step:
    text = line.strip()
    word = text.lower()

    # n / p walk the active search without ending it
    if word in ("n", "p"):
        active = view.search
        if active is None or not active.count:
            return Step()
        if word == "n":
            view.scroll_to(active.next())
            label = "Next"
        else:
            view.scroll_to(active.previous())
            label = "Previous"
        return Step(notice=Notice(f"{label} match ({active.position_label()})."))

    parts = text.split(None, 1)
    verb = parts[0].lower() if parts else ""
    if verb != "search":
        view.search = None

    if word == "w":
        view.scroll_to(view.scroll_offset - 1)
        return Step()
    if word == "s":
        view.scroll_to(view.scroll_offset + 1)
        return Step()
    if word == "back":
        return Step(TransitionTo(open_file_selection(ctx)))
    if word == "edit":
        return Step(TransitionTo(open_inline_editor(view.document, ctx)))
    if word == "q":
        return Step(Quit())
    if verb == "search":
        term = parts[1].strip() if len(parts) > 1 else ""
        if not term:
            return _error(
                DocError(ErrorKind.INVALID_USAGE, "Please provide a term to search for.")
            )
        view.search = find_matches(view.lines, term)
        if not view.search.count:
            return Step(notice=Notice(f"No matches found for '{term}'.", "warning"))
        view.scroll_to(view.search.current)
        return Step(
            notice=Notice(
                f"{view.search.count} match(es) found. "
                "Use 'n' for next and 'p' for previous."
            )
        )

    args = tokenize(text)
    if not args:
        return Step()
    step = _run_command(view, args)
    view.refresh()
    return step


# -- Inline editor ---------------------------------------------------------


def _finish_edit(view: InlineEditor, target: TaggedLine, value: str) -> Step:
    err = view.document.set_value(target.section, target.key, value)
    view.rebuild()
    if err is not None:
        return _error(err)
    return Step(notice=Notice("Value updated."))


def _dispatch_inline_editor(view: InlineEditor, line: str, ctx: ViewContext) -> Step:
    if view.pending_edit is not None:
        target, view.pending_edit = view.pending_edit, None
        return _finish_edit(view, target, line.strip())

    text = line.strip()
    word = text.lower()
    if word == "w":
        view.move_selection(-1)
    elif word == "s":
        view.move_selection(1)
    elif word == "back":
        return Step(TransitionTo(open_line_editor(view.document, ctx)))
    elif word == "q":
        return Step(Quit())
    elif word == "e":
        target = view.selected
        if target is not None and target.kind is LineKind.KEY_VALUE:
            view.pending_edit = target
            return Step(
                notice=Notice(
                    f"Editing [{target.section}] {target.key}. Enter new value:"
                )
            )
    elif word.startswith("goto "):
        try:
            num = int(text[5:].strip())
        except ValueError:
            return Step()
        if 1 <= num <= len(view.lines):
            view.scroll_offset = num - 1
    return Step()


_DISPATCH: dict[type, Callable[..., Step]] = {
    FileSelection: _dispatch_file_selection,
    LineEditor: _dispatch_line_editor,
    InlineEditor: _dispatch_inline_editor,
}


def dispatch(view: View, line: str, ctx: ViewContext) -> Step:
    """Feed one input line to *view*."""
    return _DISPATCH[type(view)](view, line, ctx)
