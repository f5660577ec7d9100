"""Tests for yttxt.delivery module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from yttxt.config import DeliveryConfig
from yttxt.delivery import (
    AppleNotesSink,
    DeliverySink,
    FileSink,
    NullSink,
    build_note_title,
    create_sink,
    render_notes_html,
)
from yttxt.exceptions import DeliveryError
from yttxt.extract.download import VideoMetadata


class TestNullSink:
    def test_accepts_everything(self) -> None:
        sink = NullSink()
        assert isinstance(sink, DeliverySink)
        assert sink.deliver("title", "body") is True


class TestFileSink:
    def test_writes_markdown_note(self, tmp_path: Path) -> None:
        sink = FileSink(tmp_path / "notes")

        assert sink.deliver("2024.01.31 My Talk", "line one\nline two\n") is True

        note = tmp_path / "notes" / "2024.01.31 My Talk.md"
        assert note.read_text(encoding="utf-8") == "# 2024.01.31 My Talk\n\nline one\nline two\n"

    def test_unsafe_characters_replaced(self, tmp_path: Path) -> None:
        sink = FileSink(tmp_path)
        assert sink.note_path("a/b: c?").name == "a_b_ c_.md"

    def test_blank_title(self, tmp_path: Path) -> None:
        assert FileSink(tmp_path).note_path("...").name == "untitled.md"


class TestRenderNotesHtml:
    def test_escapes_and_wraps_lines(self) -> None:
        html = render_notes_html("A & B", "x < y\n\nend")
        assert html.splitlines() == [
            "<h1>A &amp; B</h1>",
            "<div>x &lt; y</div>",
            "<div><br></div>",
            "<div>end</div>",
        ]


class TestAppleNotesSink:
    def test_unavailable_off_macos(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("yttxt.delivery.sys.platform", "linux")
        with pytest.raises(DeliveryError):
            AppleNotesSink().deliver("title", "body")

    def test_runs_osascript(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []

        def fake_run(cmd, **kwargs):
            body_path = Path(cmd[-1])
            calls.append((cmd, body_path.read_text(encoding="utf-8")))
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr("yttxt.delivery.sys.platform", "darwin")
        monkeypatch.setattr("yttxt.delivery.shutil.which", lambda name: "/usr/bin/osascript")
        monkeypatch.setattr("yttxt.delivery.subprocess.run", fake_run)

        assert AppleNotesSink(folder="Talks").deliver("My Talk", "hello") is True

        cmd, body = calls[0]
        assert cmd[0] == "/usr/bin/osascript"
        assert cmd[-2] == "Talks"
        assert "My Talk" not in cmd
        assert not any("name:noteTitle" in part for part in cmd)
        assert body.splitlines()[0] == "<h1>My Talk</h1>"
        assert "<div>hello</div>" in body
        assert not Path(cmd[-1]).exists()

    def test_osascript_failure_returns_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="not authorized")

        monkeypatch.setattr("yttxt.delivery.sys.platform", "darwin")
        monkeypatch.setattr("yttxt.delivery.shutil.which", lambda name: "/usr/bin/osascript")
        monkeypatch.setattr("yttxt.delivery.subprocess.run", fake_run)

        assert AppleNotesSink().deliver("title", "body") is False


class TestCreateSink:
    def test_none(self) -> None:
        assert isinstance(create_sink(DeliveryConfig(sink="none")), NullSink)

    def test_file(self, tmp_path: Path) -> None:
        sink = create_sink(DeliveryConfig(sink="file", notes_dir=tmp_path))
        assert isinstance(sink, FileSink)
        assert sink.notes_dir == tmp_path

    def test_apple_notes(self) -> None:
        sink = create_sink(DeliveryConfig(sink="apple-notes", folder="Talks"))
        assert isinstance(sink, AppleNotesSink)
        assert sink.folder == "Talks"

    def test_unknown_sink_raises(self) -> None:
        with pytest.raises(DeliveryError):
            create_sink(SimpleNamespace(sink="carrier-pigeon"))


class TestBuildNoteTitle:
    def test_dated_title(self) -> None:
        metadata = VideoMetadata(title="My Talk", upload_date="20240131")
        assert build_note_title(metadata, "ytABC") == "2024.01.31 My Talk"

    def test_undated_title(self) -> None:
        assert build_note_title(VideoMetadata(title="My Talk"), "ytABC") == "My Talk"

    def test_fallback(self) -> None:
        assert build_note_title(None, "foo") == "foo"
