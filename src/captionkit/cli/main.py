from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import typer

from captionkit.config.settings import Settings
from captionkit.domain.models import SubtitleFormat, TextCase
from captionkit.domain.style import CaptionStyle, load_style_file
from captionkit.exceptions import CaptionKitError, ValidationError
from captionkit.runtime import Runtime
from captionkit.services.segments import validate_words_per_segment
from captionkit.services.status import get_status, wait_for_transcription
from captionkit.services.subtitles import write_subtitle_file
from captionkit.utils.doctor import run_doctor
from captionkit.utils.logging import configure_logging, get_logger

app = typer.Typer(add_completion=False)
log = get_logger(__name__)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except CaptionKitError as err:
        typer.echo(f"{err.label()}: {err.message}", err=True)
        raise typer.Exit(code=err.exit_code)


def _load_settings(workdir: str | None, log_level: str | None) -> Settings:
    settings = Settings()
    if workdir is not None:
        settings.workdir = workdir
    if log_level is not None:
        settings.log_level = log_level
    configure_logging(settings.log_level)
    return settings


def _open_runtime(settings: Settings) -> Runtime:
    return Runtime.open(settings)


def _load_style(path: str | None) -> CaptionStyle:
    if path is None:
        return CaptionStyle()
    return load_style_file(path)


def _parse_enum(enum_cls, value: str, option: str):  # noqa: ANN001
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {option} '{value}'. Use one of: {valid}.") from None


@app.command()
def config() -> None:
    """Print resolved config."""
    s = Settings()
    typer.echo(json.dumps(s.to_public_dict(), indent=2))


@app.command()
def doctor() -> None:
    """Run environment diagnostics."""
    with _handle_errors():
        settings = Settings()
        code = run_doctor(settings)
    raise typer.Exit(code=code)


@app.command()
def upload(
    path: Path = typer.Argument(..., help="Video file to ingest."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Copy a video into the workdir and register it."""
    with _handle_errors():
        settings = _load_settings(workdir, log_level)
        with _open_runtime(settings) as rt:
            video = rt.ingest().ingest(path)
    typer.echo(f"✅ Uploaded. video_id={video.id}")
    typer.echo(f"📦 Stored: {video.filepath} ({video.file_size} bytes)")


@app.command()
def transcribe(
    video_id: str = typer.Argument(..., help="Video id returned by `captionkit upload`."),
    words_per_segment: int = typer.Option(
        None,
        "--words-per-segment",
        help="Words per caption segment, 1-5 (overrides config).",
    ),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Poll until transcription finishes."),
    timeout: float = typer.Option(None, help="Seconds to wait before giving up (overrides config)."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Transcribe a video and store its caption segments."""
    with _handle_errors():
        settings = _load_settings(workdir, log_level)
        size = validate_words_per_segment(
            words_per_segment if words_per_segment is not None else settings.words_per_segment
        )
        with _open_runtime(settings) as rt:
            rt.runner.submit(video_id, size)
            typer.echo(f"⏳ Transcription started. video_id={video_id}")
            if not wait:
                return
            video = wait_for_transcription(
                rt.store,
                video_id,
                timeout=timeout if timeout is not None else settings.wait_timeout_seconds,
                interval=settings.poll_interval_seconds,
                max_interval=settings.poll_max_interval_seconds,
                backoff=settings.poll_backoff,
            )
            count = len(rt.store.get_captions(video_id))
    typer.echo(f"✅ Done. status={video.status.value} segments={count}")


@app.command()
def status(
    video_id: str = typer.Argument(..., help="Video id."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
) -> None:
    """Print the transcription status of a video."""
    with _handle_errors():
        settings = _load_settings(workdir, None)
        with _open_runtime(settings) as rt:
            current = get_status(rt.store, video_id)
    typer.echo(current.value)


@app.command()
def captions(
    video_id: str = typer.Argument(..., help="Video id."),
    json_output: bool = typer.Option(False, "--json", help="Output captions as JSON."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
) -> None:
    """List caption segments in order."""
    with _handle_errors():
        settings = _load_settings(workdir, None)
        with _open_runtime(settings) as rt:
            rt.store.get_video(video_id)
            segments = rt.store.get_captions(video_id)

    if json_output:
        typer.echo(json.dumps([s.to_public_dict() for s in segments], indent=2))
        return
    if not segments:
        typer.echo("No captions.")
        return
    for seg in segments:
        typer.echo(f"{seg.segment_index:>4}  {seg.start_time:8.3f} -> {seg.end_time:8.3f}  {seg.text}  [{seg.id}]")


@app.command()
def edit(
    caption_id: str = typer.Argument(..., help="Caption segment id."),
    text: str = typer.Argument(..., help="Replacement text."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
) -> None:
    """Replace the text of one caption segment."""
    with _handle_errors():
        settings = _load_settings(workdir, None)
        with _open_runtime(settings) as rt:
            seg = rt.store.update_caption_text(caption_id, text)
    typer.echo(f"✅ Updated segment {seg.segment_index}: {seg.text}")


@app.command()
def subtitles(
    video_id: str = typer.Argument(..., help="Video id."),
    fmt: str = typer.Option("srt", "--format", help="Subtitle format: srt, vtt."),
    case: str = typer.Option("none", help="Text case: none, uppercase, lowercase."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
) -> None:
    """Write an SRT or WebVTT file for a video."""
    with _handle_errors():
        settings = _load_settings(workdir, None)
        subtitle_format = _parse_enum(SubtitleFormat, fmt, "--format")
        text_case = _parse_enum(TextCase, case, "--case")
        with _open_runtime(settings) as rt:
            out = write_subtitle_file(rt.store, rt.workspace, video_id, subtitle_format, text_case)
    typer.echo(f"📦 Subtitles: {out}")


@app.command()
def preview(
    video_id: str = typer.Argument(..., help="Video id."),
    style: str = typer.Option(None, help="Style JSON file (defaults to the built-in style)."),
    strategy: str = typer.Option(None, help="Burn strategy: subtitles, ass, drawtext (overrides config)."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
) -> None:
    """Print the compiled ffmpeg filter without rendering."""
    with _handle_errors():
        settings = _load_settings(workdir, None)
        caption_style = _load_style(style)
        with _open_runtime(settings) as rt:
            compiled = rt.exporter().compile(video_id, caption_style, strategy=strategy)
    typer.echo(f"strategy: {compiled.strategy.value}")
    typer.echo(f"filter: {compiled.expression}")
    if compiled.aux_content is not None:
        typer.echo(f"side file ({compiled.aux_path}):")
        typer.echo(compiled.aux_content)


@app.command()
def export(
    video_id: str = typer.Argument(..., help="Video id."),
    style: str = typer.Option(None, help="Style JSON file (defaults to the built-in style)."),
    strategy: str = typer.Option(None, help="Burn strategy: subtitles, ass, drawtext (overrides config)."),
    workdir: str = typer.Option(None, help="Workdir for uploads and database (overrides config)."),
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Burn captions into a new MP4."""
    with _handle_errors():
        settings = _load_settings(workdir, log_level)
        caption_style = _load_style(style)
        with _open_runtime(settings) as rt:
            out = rt.exporter().export(video_id, caption_style, strategy=strategy)
    typer.echo(f"✅ Done. video_id={video_id}")
    typer.echo(f"📦 Output: {out}")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
