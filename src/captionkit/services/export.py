"""
Caption burn-in export for captionkit.

This module renders a new MP4 with a video's caption segments burned into
the picture.

Responsibilities:
- Refuse to export a video without caption segments
- Compile the requested style with the selected strategy
- Write the strategy's side file, invoke ffmpeg once, clean the side file up
- Report render failures as RenderError and flag the video

Does NOT:
- Retry renders (callers decide whether to request again)
- Produce standalone subtitle files (services/subtitles.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from captionkit.domain.contracts import ProgressCallback, Renderer
from captionkit.domain.models import BurnStrategy, VideoStatus
from captionkit.domain.style import CaptionStyle
from captionkit.domain.workspace import Workspace
from captionkit.exceptions import (
    CaptionKitError,
    NoCaptionsError,
    RenderError,
    UpstreamError,
    ValidationError,
)
from captionkit.services.styles import STRATEGIES, CompiledStyle, compile_style, parse_strategy
from captionkit.storage.store import CaptionStore
from captionkit.utils import ffmpeg
from captionkit.utils.logging import get_logger
from captionkit.utils.timing import StepTimer

log = get_logger(__name__)


class ExportState(str, Enum):
    START = "start"
    STYLE_COMPILED = "style_compiled"
    AUX_FILE_WRITTEN = "aux_file_written"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExportRun:
    video_id: str
    strategy: BurnStrategy
    state: ExportState = ExportState.START
    history: list[ExportState] = field(default_factory=lambda: [ExportState.START])
    timer: StepTimer = field(default_factory=StepTimer)
    output_path: Path | None = None

    def advance(self, state: ExportState) -> None:
        log.debug("Export %s: %s -> %s", self.video_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)


@dataclass
class FfmpegRenderer:
    """ffmpeg-based caption burner."""

    video_codec: str = "libx264"
    preset: str = "medium"
    crf: int = 20

    def render(
        self,
        input_path: Path,
        expression: str,
        output_path: Path,
        *,
        on_progress: ProgressCallback | None = None,
        stderr_path: Path | None = None,
    ) -> Path:
        ffmpeg.ensure_ffmpeg()
        if not input_path.exists():
            raise FileNotFoundError(f"Input video not found: {input_path}")
        cmd = ffmpeg.build_burn_cmd(
            input_path,
            expression,
            output_path,
            video_codec=self.video_codec,
            preset=self.preset,
            crf=self.crf,
            progress=on_progress is not None,
        )
        log.info("Rendering video -> %s", output_path)
        log.debug("ffmpeg cmd: %s", " ".join(cmd))
        ffmpeg.run_ffmpeg(cmd, stderr_path=stderr_path, on_progress=on_progress)
        if not output_path.exists() or output_path.stat().st_size == 0:
            raise RenderError(f"ffmpeg produced no output: {output_path}")
        return output_path


def _log_progress(video_id: str) -> ProgressCallback:
    def report(block: dict[str, str]) -> None:
        log.info(
            "Export %s: out_time=%s speed=%s progress=%s",
            video_id,
            block.get("out_time", "?"),
            block.get("speed", "?"),
            block.get("progress", "?"),
        )

    return report


@dataclass
class ExportService:
    store: CaptionStore
    workspace: Workspace
    renderer: Renderer = field(default_factory=FfmpegRenderer)
    strategy: BurnStrategy = BurnStrategy.SUBTITLES
    probe: Callable[[str | Path], tuple[int, int] | None] = ffmpeg.probe_dimensions
    last_run: ExportRun | None = field(default=None, init=False)

    def compile(
        self,
        video_id: str,
        style: CaptionStyle,
        *,
        strategy: BurnStrategy | str | None = None,
    ) -> CompiledStyle:
        """Compile without rendering; used for previews."""
        video = self.store.get_video(video_id)
        chosen = parse_strategy(strategy or self.strategy)
        segments = self.store.get_captions(video_id)
        if not segments:
            raise NoCaptionsError(f"No captions found for video {video_id}.")
        suffix = STRATEGIES[chosen].aux_suffix
        aux_path = self.workspace.burn_aux_path(video_id, suffix) if suffix else None
        frame_size = self.probe(video.filepath) if chosen is BurnStrategy.ASS else None
        return compile_style(
            segments,
            style,
            strategy=chosen,
            aux_path=aux_path,
            frame_size=frame_size,
        )

    def export(
        self,
        video_id: str,
        style: CaptionStyle | None,
        *,
        strategy: BurnStrategy | str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        if style is None:
            raise ValidationError("Export style is required.")
        video = self.store.get_video(video_id)
        run = ExportRun(video_id=video_id, strategy=parse_strategy(strategy or self.strategy))
        self.last_run = run
        aux_path: Path | None = None

        try:
            with run.timer.step("compile_style"):
                compiled = self.compile(video_id, style, strategy=run.strategy)
            run.advance(ExportState.STYLE_COMPILED)

            with run.timer.step("write_aux_file"):
                if compiled.aux_path is not None and compiled.aux_content is not None:
                    aux_path = compiled.aux_path
                    aux_path.write_text(compiled.aux_content, encoding="utf-8")
                    log.info("Wrote %s side file %s", run.strategy.value, aux_path)
            run.advance(ExportState.AUX_FILE_WRITTEN)

            run.advance(ExportState.RENDERING)
            with run.timer.step("render"):
                output = self.renderer.render(
                    Path(video.filepath),
                    compiled.expression,
                    self.workspace.export_path(video_id),
                    on_progress=on_progress or _log_progress(video_id),
                    stderr_path=self.workspace.ffmpeg_stderr_path(video_id),
                )
        except NoCaptionsError:
            run.advance(ExportState.FAILED)
            log.warning("Export %s refused: no captions", video_id)
            raise
        except CaptionKitError as exc:
            run.advance(ExportState.FAILED)
            log.error("Export %s failed (%s): %s", video_id, exc.category.value, exc)
            if isinstance(exc, UpstreamError):
                self._flag_error(video_id)
            raise
        except Exception as exc:
            run.advance(ExportState.FAILED)
            log.exception("Export %s failed", video_id)
            self._flag_error(video_id)
            raise RenderError(f"Export failed for video {video_id}: {exc}") from exc
        finally:
            self._cleanup(aux_path)

        run.output_path = output
        run.advance(ExportState.DONE)
        log.info("Export %s done -> %s [%s]", video_id, output, run.timer.summary())
        return output

    def _flag_error(self, video_id: str) -> None:
        try:
            self.store.update_video_status(video_id, VideoStatus.ERROR)
        except CaptionKitError:
            log.exception("Could not flag video %s as errored", video_id)

    def _cleanup(self, aux_path: Path | None) -> None:
        if aux_path is None:
            return
        try:
            aux_path.unlink(missing_ok=True)
        except OSError:
            log.warning("Could not remove side file %s", aux_path, exc_info=True)
