from __future__ import annotations

import inspect
import re
from pathlib import Path
from typing import Callable

import pytest
import typer.testing

from captionkit.domain.models import CaptionSegment, Video, VideoStatus, Word
from captionkit.domain.workspace import Workspace
from captionkit.storage.database import Database
from captionkit.storage.store import CaptionStore


def _patch_clirunner() -> None:
    if "mix_stderr" in inspect.signature(typer.testing.CliRunner).parameters:
        return

    class PatchedCliRunner(typer.testing.CliRunner):
        def __init__(self, *args, **kwargs):  # noqa: ANN002, ANN003
            kwargs.pop("mix_stderr", None)
            super().__init__(*args, **kwargs)

    typer.testing.CliRunner = PatchedCliRunner


_patch_clirunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    return Workspace.create(str(tmp_path / ".captionkit"))


@pytest.fixture
def database(workspace: Workspace):
    db = Database(f"sqlite:///{workspace.database_file}").open()
    yield db
    db.close()


@pytest.fixture
def store(database: Database) -> CaptionStore:
    return CaptionStore(database)


@pytest.fixture
def make_video(store: CaptionStore, workspace: Workspace) -> Callable[..., Video]:
    counter = {"n": 0}

    def _make(status: VideoStatus = VideoStatus.UPLOADING, content: bytes = b"video") -> Video:
        counter["n"] += 1
        video_id = f"video-{counter['n']}"
        path = workspace.upload_path(f"{video_id}.mp4")
        path.write_bytes(content)
        return store.create_video(
            Video(
                id=video_id,
                filename="clip.mp4",
                filepath=str(path),
                file_size=len(content),
                status=status,
            )
        )

    return _make


def make_segments(video_id: str, texts: list[str], *, step: float = 1.0) -> list[CaptionSegment]:
    return [
        CaptionSegment(
            id=f"{video_id}-seg-{i}",
            video_id=video_id,
            segment_index=i,
            start_time=i * step,
            end_time=(i + 1) * step,
            text=text,
            confidence=0.9,
        )
        for i, text in enumerate(texts)
    ]


def make_words(*items: tuple[str, float, float, float]) -> list[Word]:
    return [Word(text=t, start=s, end=e, confidence=c) for t, s, e, c in items]


_OPTION_KEY_RE = re.compile(r"[\w-]+=")


def _next_token(buf: str, stop: str) -> tuple[str, str]:
    """Read one token the way libavutil's av_get_token does: `\\x` and '...' are literal."""
    buf = buf.lstrip()
    out: list[str] = []
    i = 0
    while i < len(buf) and buf[i] not in stop:
        ch = buf[i]
        if ch == "\\" and i + 1 < len(buf):
            out.append(buf[i + 1])
            i += 2
        elif ch == "'":
            end = buf.index("'", i + 1)
            out.append(buf[i + 1 : end])
            i = end + 1
        else:
            out.append(ch)
            i += 1
    return "".join(out), buf[i:]


def parse_filtergraph(graph: str) -> list[tuple[str, dict[str, str], list[str]]]:
    """Split a linear filter chain into (name, options, positional values).

    Arguments are unescaped twice, first by the graph parser and then by the
    filter's option parser, as ffmpeg does.
    """
    chain = []
    rest = graph
    while rest:
        name, _, rest = rest.partition("=")
        args, rest = _next_token(rest, "[],;")
        rest = rest[1:]
        options: dict[str, str] = {}
        positional: list[str] = []
        while args:
            if _OPTION_KEY_RE.match(args):
                key, _, args = args.partition("=")
                options[key], args = _next_token(args, ":")
            else:
                value, args = _next_token(args, ":")
                positional.append(value)
            args = args[1:]
        chain.append((name, options, positional))
    return chain
