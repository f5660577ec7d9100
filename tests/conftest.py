"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from yttxt.config import TranscriberConfig

TOOLS = {"ffmpeg", "yt-dlp", "whisper-cli"}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test in an empty directory with no yttxt env overrides."""
    for var in ("MODEL_PATH", "WHISPER_EXECUTABLE", "WHISPER_LANG", "WHISPER_THREAD_COUNT"):
        monkeypatch.delenv(var, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def config(tmp_path: Path) -> TranscriberConfig:
    """Default config writing transcripts to a scratch directory."""
    out = tmp_path / "out"
    out.mkdir()
    return TranscriberConfig(output_dir=out)


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """A local input file; contents are never decoded in unit tests."""
    path = tmp_path / "foo.mp4"
    path.write_bytes(b"fake media content")
    return path


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch):
    """Pretend the external tools are on PATH. Returns the set to edit."""
    available = set(TOOLS)

    def which(name: str, *args: Any, **kwargs: Any) -> str | None:
        return f"/usr/bin/{name}" if name in available else None

    monkeypatch.setattr("yttxt.validation.shutil.which", which)
    return available


class FakePipeline:
    """Stands in for run_pipeline: records stages and writes the transcript."""

    def __init__(self, text: str = "[00:00:00.000 --> 00:00:02.000]   hello world\n") -> None:
        self.text = text
        self.calls: list[list[Any]] = []

    def __call__(self, stages, output_path, echo=None, cancel=None):
        self.calls.append(stages)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(self.text, encoding="utf-8")
        if echo is not None:
            echo(self.text)
        return {
            "output": str(output_path),
            "bytes_written": len(self.text.encode("utf-8")),
            "returncodes": {stage.name: 0 for stage in stages},
        }


@pytest.fixture
def fake_pipeline(monkeypatch: pytest.MonkeyPatch) -> FakePipeline:
    fake = FakePipeline()
    monkeypatch.setattr("yttxt.driver.run_pipeline", fake)
    return fake


@pytest.fixture
def no_subprocess(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail the test if anything tries to spawn a process."""

    def forbidden(*args: Any, **kwargs: Any):
        raise AssertionError(f"unexpected subprocess: {args!r}")

    monkeypatch.setattr("subprocess.Popen", forbidden)
    monkeypatch.setattr("subprocess.run", forbidden)
    monkeypatch.setattr("yttxt.driver.run_pipeline", forbidden)
