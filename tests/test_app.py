"""Tests for the terminal front-end helpers and CLI."""

import logging

import pytest

from inipwn import app as app_module
from inipwn.app import (
    FRAME_BORDER_ROWS,
    FRAME_CHROME_ROWS,
    HEADER_ROWS,
    PROMPT_ROWS,
    VIEWPORT_RESERVE,
    list_ini_files,
    main,
    prompt_for,
    render_frame,
)
from inipwn.document import IniDocument
from inipwn.views import FileSelection, InlineEditor, LineEditor

SAMPLE = "key1=a\n[Net]\nhost = localhost\n"


def _doc() -> IniDocument:
    doc = IniDocument()
    doc.loads(SAMPLE)
    return doc


class TestListFiles:
    def test_only_ini_files_sorted(self, tmp_path):
        (tmp_path / "b.ini").write_text("", encoding="utf-8")
        (tmp_path / "a.ini").write_text("", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("", encoding="utf-8")
        (tmp_path / "dir.ini").mkdir()
        assert list_ini_files(tmp_path) == ["a.ini", "b.ini"]

    def test_empty_directory(self, tmp_path):
        assert list_ini_files(tmp_path) == []


class TestRenderFrame:
    def test_file_selection(self):
        frame = render_frame(FileSelection(files=["a.ini", "b.ini"], selected_index=1))
        assert "   a.ini" in frame.plain
        assert " > b.ini" in frame.plain

    def test_file_selection_banner(self):
        frame = render_frame(FileSelection(files=[], show_banner=True))
        assert "Enhanced INI File Manipulator" in frame.plain
        assert "No INI files found" in frame.plain

    def test_long_file_list_keeps_selection_visible(self):
        files = [f"f{i:02}.ini" for i in range(40)]
        view = FileSelection(files=files, show_banner=True, viewport_height=15)
        for _ in range(30):
            view.move_selection(1)
        plain = render_frame(view).plain
        assert " > f30.ini" in plain
        assert "f00.ini" not in plain
        assert "Enhanced INI File Manipulator" not in plain
        assert len(plain.split("\n")) <= view.viewport_height + FRAME_CHROME_ROWS

    def test_banner_kept_when_list_fits(self):
        view = FileSelection(files=["a.ini", "b.ini"], show_banner=True)
        lines = render_frame(view).plain.split("\n")
        assert "Enhanced INI File Manipulator" in "\n".join(lines)
        assert len(lines) <= view.viewport_height + FRAME_CHROME_ROWS

    def test_line_editor(self):
        view = LineEditor(_doc(), viewport_height=3)
        view.scroll_to(1)
        plain = render_frame(view, width=20).plain
        assert "Editor - File: None | Ln: 2-4/6" in plain
        assert "  key1 = a" in plain
        assert "[Net]" in plain
        assert "localhost" not in plain

    def test_line_editor_pads_viewport(self):
        view = LineEditor(_doc(), viewport_height=10)
        lines = render_frame(view, width=20).plain.split("\n")
        # title, rule, 10 content rows, rule
        assert len(lines) == 13

    def test_editor_fits_terminal(self):
        # 24-row terminal: everything around the viewport plus the frame
        assert VIEWPORT_RESERVE == 9
        view = LineEditor(_doc(), viewport_height=24 - VIEWPORT_RESERVE)
        rows = len(render_frame(view).plain.split("\n"))
        assert rows + HEADER_ROWS + FRAME_BORDER_ROWS + PROMPT_ROWS == 24

    def test_inline_editor(self):
        doc = _doc()
        doc.current_file_path = "cfg.ini"
        view = InlineEditor(doc, viewport_height=10)
        view.move_selection(1)
        frame = render_frame(view)
        assert "Inline Editor - File: cfg.ini | Ln: 2/6" in frame.plain


class TestPrompt:
    def test_pending_edit_prompt(self):
        view = InlineEditor(_doc(), viewport_height=10)
        view.pending_edit = view.lines[1]
        assert prompt_for(view) == "new value for [global] key1"

    def test_editor_prompts(self):
        assert prompt_for(LineEditor(_doc(), viewport_height=5)).startswith(">")
        assert prompt_for(FileSelection(files=[])).startswith(">")


class TestMain:
    def test_version(self, capsys, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("app should not start")

        monkeypatch.setattr(app_module.IniEditorApp, "run", fail)
        main(["--version"])
        out = capsys.readouterr().out
        assert "Enhanced INI File Manipulator v3.0.0" in out

    def test_opens_existing_file(self, tmp_path, monkeypatch):
        path = tmp_path / "cfg.ini"
        path.write_text(SAMPLE, encoding="utf-8")
        started = []
        monkeypatch.setattr(
            app_module.IniEditorApp, "run", lambda self: started.append(self)
        )
        main([str(path)])
        assert started[0]._initial_document.get("Net", "host") == "localhost"

    def test_missing_file_falls_back_to_selection(self, tmp_path, monkeypatch):
        started = []
        monkeypatch.setattr(
            app_module.IniEditorApp, "run", lambda self: started.append(self)
        )
        main([str(tmp_path / "missing.ini")])
        assert started[0]._initial_document is None

    def test_unreadable_file_exits(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "cfg.ini"
        path.write_text(SAMPLE, encoding="utf-8")

        def broken_read(self):
            raise PermissionError("denied")

        monkeypatch.setattr(app_module.Path, "read_bytes", broken_read)
        with pytest.raises(SystemExit) as exc:
            main([str(path)])
        assert exc.value.code == 1
        assert "Error loading file" in capsys.readouterr().err

    def test_log_file(self, tmp_path, monkeypatch):
        calls = []
        monkeypatch.setattr(
            logging, "basicConfig", lambda **kwargs: calls.append(kwargs)
        )
        monkeypatch.setattr(app_module.IniEditorApp, "run", lambda self: None)
        log_path = tmp_path / "inipwn.log"
        main(["--log-file", str(log_path)])
        assert calls[0]["filename"] == str(log_path)
