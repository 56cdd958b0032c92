from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Iterator

from captionkit.exceptions import RenderError
from captionkit.utils.checks import require_binary

ProgressCallback = Callable[[dict[str, str]], None]


def ensure_ffmpeg() -> None:
    require_binary("ffmpeg")


def _backslash_escape(value: str, specials: str) -> str:
    return "".join("\\" + ch if ch in specials else ch for ch in value)


def escape_filter_option(value: str) -> str:
    """Escape a value for a filter's `key=value:key=value` option list."""
    return _backslash_escape(value, "\\':")


def escape_filter_graph(value: str) -> str:
    """Escape a filter's whole argument string for the filtergraph description."""
    return _backslash_escape(value, "\\'[],;")


def escape_filter_value(value: str) -> str:
    """
    Escape a path or option value embedded in a `-vf` filtergraph.

    ffmpeg unescapes twice: the filtergraph parser first, then the filter's
    option parser. The value is escaped for the option level, then the
    result is escaped again for the graph level.
    """
    return escape_filter_graph(escape_filter_option(value))


def escape_filter_path(path: str | Path) -> str:
    # ffmpeg wants forward slashes even on Windows.
    return escape_filter_value(str(path).replace("\\", "/"))


def build_subtitles_filter(subtitles_path: str | Path, *, force_style: str | None = None) -> str:
    path_value = escape_filter_path(subtitles_path)
    if str(subtitles_path).lower().endswith((".ass", ".ssa")):
        return f"ass={path_value}"
    if not force_style:
        return f"subtitles={path_value}"
    return f"subtitles={path_value}:force_style={escape_filter_value(force_style)}"


def build_burn_cmd(
    input_video: str | Path,
    video_filter: str,
    out: str | Path,
    *,
    video_codec: str = "libx264",
    preset: str = "medium",
    crf: int = 20,
    progress: bool = False,
) -> list[str]:
    cmd: list[str] = [
        "ffmpeg",
        "-y",
        "-hide_banner",
        "-loglevel",
        "error",
    ]
    if progress:
        cmd += ["-progress", "pipe:1", "-nostats"]
    cmd += [
        "-i",
        str(input_video),
        "-vf",
        video_filter,
        "-c:v",
        video_codec,
        "-preset",
        preset,
        "-crf",
        str(crf),
        "-pix_fmt",
        "yuv420p",
        "-c:a",
        "copy",
        str(out),
    ]
    return cmd


def iter_progress(lines: Iterable[str]) -> Iterator[dict[str, str]]:
    """Group `-progress` key=value lines into one dict per report."""
    block: dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        block[key.strip()] = value.strip()
        if key.strip() == "progress":
            yield block
            block = {}


def run_ffmpeg(
    cmd: list[str],
    *,
    stderr_path: Path | None = None,
    on_progress: ProgressCallback | None = None,
) -> subprocess.CompletedProcess[str]:
    if on_progress is None:
        proc = subprocess.run(cmd, capture_output=True, text=True)
        stdout, stderr = proc.stdout, proc.stderr
    else:
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8") as err:
            with subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=err, text=True) as popen:
                assert popen.stdout is not None
                try:
                    for report in iter_progress(popen.stdout):
                        on_progress(report)
                except BaseException:
                    popen.kill()
                    raise
            err.seek(0)
            stdout, stderr = "", err.read()
        proc = subprocess.CompletedProcess(cmd, popen.returncode, stdout, stderr)
    if stderr_path is not None:
        stderr_path.write_text(stderr or "", encoding="utf-8")
    if proc.returncode != 0:
        raise RenderError(
            f"ffmpeg failed with exit code {proc.returncode}.\n"
            f"STDERR:\n{stderr}"
        )
    return proc


def probe_dimensions(path: str | Path) -> tuple[int, int] | None:
    ffprobe = shutil.which("ffprobe")
    if not ffprobe:
        return None
    proc = subprocess.run(
        [
            ffprobe,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "json",
            str(path),
        ],
        capture_output=True,
        text=True,
    )
    if proc.returncode != 0:
        return None
    try:
        data = json.loads(proc.stdout)
    except json.JSONDecodeError:
        return None
    for stream in data.get("streams", []):
        width = stream.get("width")
        height = stream.get("height")
        if isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0:
            return width, height
    return None
