"""Tests for yttxt.resolve module."""

from __future__ import annotations

from pathlib import Path

import pytest

from yttxt.exceptions import InputError
from yttxt.resolve import InputReference, extract_video_id, resolve_input, slice_video_id


class TestExtractVideoId:
    def test_query_fragment(self) -> None:
        assert extract_video_id("v=ABC123&t=5") == "ABC123"

    def test_watch_url(self) -> None:
        assert extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == "dQw4w9WgXcQ"

    def test_watch_url_with_extra_params(self) -> None:
        url = "https://www.youtube.com/watch?list=PL123&v=dQw4w9WgXcQ&t=42s"
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    def test_short_link(self) -> None:
        assert extract_video_id("https://youtu.be/dQw4w9WgXcQ?t=10") == "dQw4w9WgXcQ"

    def test_bare_identifier(self) -> None:
        assert extract_video_id("dQw4w9WgXcQ") == "dQw4w9WgXcQ"

    def test_surrounding_whitespace(self) -> None:
        assert extract_video_id("  v=ABC123  ") == "ABC123"

    @pytest.mark.parametrize(
        "source",
        ["https://example.com/video", "v=&t=5", "v=abc/def", "not a video id"],
    )
    def test_malformed_reference_raises(self, source: str) -> None:
        with pytest.raises(InputError):
            extract_video_id(source)


class TestSliceVideoId:
    def test_takes_text_between_marker_and_ampersand(self) -> None:
        assert slice_video_id("watch?v=ABC&x=1") == "ABC"

    def test_without_marker_returns_whole_string(self) -> None:
        assert slice_video_id("ABC") == "ABC"


class TestResolveInput:
    def test_local_file(self, media_file: Path) -> None:
        ref = resolve_input(str(media_file))
        assert ref.kind == "local"
        assert ref.path == media_file
        assert ref.video_id is None
        assert ref.output_name == "foo.txt"
        assert ref.watch_url is None

    def test_local_file_strips_only_last_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "talk.part1.webm"
        path.write_bytes(b"x")
        assert resolve_input(str(path)).output_name == "talk.part1.txt"

    def test_local_file_without_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "recording"
        path.write_bytes(b"x")
        assert resolve_input(str(path)).output_name == "recording.txt"

    def test_remote_reference(self) -> None:
        ref = resolve_input("https://www.youtube.com/watch?v=ABC123&t=5")
        assert ref.is_remote
        assert ref.video_id == "ABC123"
        assert ref.output_name == "ytABC123.txt"
        assert ref.watch_url == "https://www.youtube.com/watch?v=ABC123"

    def test_missing_file_treated_as_remote(self) -> None:
        with pytest.raises(InputError):
            resolve_input("/no/such/file.mp4")

    def test_empty_input_raises(self) -> None:
        with pytest.raises(InputError):
            resolve_input("")


class TestInputReference:
    def test_requires_exactly_one_target(self) -> None:
        with pytest.raises(ValueError):
            InputReference(kind="remote", source="x", output_stem="x")

    def test_rejects_both_targets(self) -> None:
        with pytest.raises(ValueError):
            InputReference(
                kind="remote",
                source="x",
                video_id="x",
                path=Path("x"),
                output_stem="x",
            )
