"""
Subtitle serialization for stored caption segments.

This module renders a video's caption segments as SubRip (SRT) or WebVTT
text and writes subtitle files next to the uploaded video.

Responsibilities:
- Number SRT cues from 1, emit the WEBVTT header for VTT
- Apply the requested text case to every cue
- Refuse to serialize an empty segment list

Does NOT:
- Style captions (services/styles.py)
- Render video (services/export.py)
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from captionkit.domain.models import CaptionSegment, SubtitleFormat, TextCase
from captionkit.domain.workspace import Workspace
from captionkit.exceptions import NoCaptionsError
from captionkit.storage.store import CaptionStore
from captionkit.utils.logging import get_logger
from captionkit.utils.timecodes import format_srt_time, format_vtt_time

log = get_logger(__name__)

VTT_HEADER = "WEBVTT"


def _srt_cue(number: int, seg: CaptionSegment, case: TextCase) -> str:
    start = format_srt_time(seg.start_time)
    end = format_srt_time(seg.end_time)
    return f"{number}\n{start} --> {end}\n{case.apply(seg.text)}\n"


def _vtt_cue(seg: CaptionSegment, case: TextCase) -> str:
    start = format_vtt_time(seg.start_time)
    end = format_vtt_time(seg.end_time)
    return f"{start} --> {end}\n{case.apply(seg.text)}\n"


def to_srt(segments: Sequence[CaptionSegment], case: TextCase = TextCase.NONE) -> str:
    if not segments:
        raise NoCaptionsError("No captions found for this video.")
    return "\n".join(_srt_cue(i, seg, case) for i, seg in enumerate(segments, start=1))


def to_vtt(segments: Sequence[CaptionSegment], case: TextCase = TextCase.NONE) -> str:
    if not segments:
        raise NoCaptionsError("No captions found for this video.")
    cues = "\n".join(_vtt_cue(seg, case) for seg in segments)
    return f"{VTT_HEADER}\n\n{cues}"


def serialize(
    segments: Sequence[CaptionSegment],
    fmt: SubtitleFormat | str = SubtitleFormat.SRT,
    case: TextCase | str = TextCase.NONE,
) -> str:
    fmt = SubtitleFormat(fmt)
    case = TextCase(case)
    if fmt is SubtitleFormat.VTT:
        return to_vtt(segments, case)
    return to_srt(segments, case)


def write_subtitle_file(
    store: CaptionStore,
    workspace: Workspace,
    video_id: str,
    fmt: SubtitleFormat | str = SubtitleFormat.SRT,
    case: TextCase | str = TextCase.NONE,
) -> Path:
    fmt = SubtitleFormat(fmt)
    store.get_video(video_id)
    segments = store.get_captions(video_id)
    content = serialize(segments, fmt, case)
    out = workspace.subtitle_path(video_id, fmt)
    out.write_text(content, encoding="utf-8")
    log.info("Wrote %s subtitles (%d cues) -> %s", fmt.value, len(segments), out)
    return out
