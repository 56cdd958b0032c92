from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from conftest import parse_filtergraph
from captionkit.exceptions import DependencyMissingError, RenderError
from captionkit.utils import ffmpeg


def test_subtitles_filter_survives_filtergraph_parsing() -> None:
    value = ffmpeg.build_subtitles_filter(
        "C:\\clips\\o'brien [v1]\\captions,final.srt",
        force_style="Fontname=Arial,Fontsize=48",
    )

    [(name, options, positional)] = parse_filtergraph(value)
    assert name == "subtitles"
    assert positional == ["C:/clips/o'brien [v1]/captions,final.srt"]
    assert options == {"force_style": "Fontname=Arial,Fontsize=48"}


def test_ass_filter_path_uses_ass_filter() -> None:
    value = ffmpeg.build_subtitles_filter("captions.ass", force_style="ignored")
    assert value == "ass=captions.ass"


@pytest.mark.parametrize(
    "raw",
    ["don't stop", "Arial:style=Bold", "50%: it's [ok], yes; no", "back\\slash 'quoted'"],
)
def test_filter_value_survives_both_parsing_passes(raw: str) -> None:
    graph = f"drawtext=text={ffmpeg.escape_filter_value(raw)}:x=10,null"

    chain = parse_filtergraph(graph)
    assert [name for name, _, _ in chain] == ["drawtext", "null"]
    assert chain[0][1] == {"text": raw, "x": "10"}


def test_build_burn_cmd_progress_flags() -> None:
    cmd = ffmpeg.build_burn_cmd("in.mp4", "null", "out.mp4", progress=True)
    assert cmd[:5] == ["ffmpeg", "-y", "-hide_banner", "-loglevel", "error"]
    assert "-progress" in cmd
    assert cmd[cmd.index("-progress") + 1] == "pipe:1"
    assert cmd[-1] == "out.mp4"
    assert "-progress" not in ffmpeg.build_burn_cmd("in.mp4", "null", "out.mp4")


def test_iter_progress_groups_blocks() -> None:
    lines = [
        "frame=10\n",
        "out_time=00:00:00.400000\n",
        "progress=continue\n",
        "garbage\n",
        "frame=25\n",
        "progress=end\n",
    ]
    blocks = list(ffmpeg.iter_progress(lines))
    assert blocks == [
        {"frame": "10", "out_time": "00:00:00.400000", "progress": "continue"},
        {"frame": "25", "progress": "end"},
    ]


def test_run_ffmpeg_writes_stderr_and_raises(monkeypatch, tmp_path: Path) -> None:
    def fake_run(cmd, capture_output, text):  # noqa: ANN001
        return SimpleNamespace(returncode=1, stdout="", stderr="No such filter")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)
    stderr_path = tmp_path / "ffmpeg.stderr.txt"

    with pytest.raises(RenderError, match="No such filter"):
        ffmpeg.run_ffmpeg(["ffmpeg"], stderr_path=stderr_path)
    assert stderr_path.read_text(encoding="utf-8") == "No such filter"


def test_run_ffmpeg_kills_child_when_progress_callback_fails(monkeypatch) -> None:
    children = []

    class FakePopen:
        def __init__(self, cmd, stdout, stderr, text):  # noqa: ANN001
            self.stdout = iter(["frame=1\n", "progress=continue\n"])
            self.returncode = None
            self.killed = False
            self.closed = False
            children.append(self)

        def __enter__(self):  # noqa: ANN204
            return self

        def __exit__(self, *_exc) -> None:  # noqa: ANN002
            self.closed = True

        def kill(self) -> None:
            self.killed = True

    def broken_callback(_report) -> None:  # noqa: ANN001
        raise RuntimeError("progress sink failed")

    monkeypatch.setattr(ffmpeg.subprocess, "Popen", FakePopen)

    with pytest.raises(RuntimeError, match="progress sink failed"):
        ffmpeg.run_ffmpeg(["ffmpeg"], on_progress=broken_callback)
    [child] = children
    assert child.killed
    assert child.closed


def test_probe_dimensions_parses_json(monkeypatch) -> None:
    payload = json.dumps({"streams": [{"width": 1080, "height": 1920}]})

    def fake_run(cmd, capture_output, text):  # noqa: ANN001
        return SimpleNamespace(returncode=0, stdout=payload, stderr="")

    monkeypatch.setattr(ffmpeg.shutil, "which", lambda _: "ffprobe")
    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)

    assert ffmpeg.probe_dimensions("input.mp4") == (1080, 1920)


def test_probe_dimensions_without_ffprobe(monkeypatch) -> None:
    monkeypatch.setattr(ffmpeg.shutil, "which", lambda _: None)
    assert ffmpeg.probe_dimensions("input.mp4") is None


def test_ensure_ffmpeg_reports_missing_binary(monkeypatch) -> None:
    from captionkit.utils import checks

    monkeypatch.setattr(checks.shutil, "which", lambda _: None)
    with pytest.raises(DependencyMissingError, match="ffmpeg"):
        ffmpeg.ensure_ffmpeg()
