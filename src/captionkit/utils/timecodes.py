"""
Timestamp formatting for subtitle formats.

All formatters floor each field before taking the remainder for the next
finer one; they never round. 3725.125 seconds formats as ``01:02:05,125``
(SRT), ``01:02:05.125`` (WebVTT) and ``1:02:05.12`` (ASS).
"""

from __future__ import annotations

import math


def _split(seconds: float) -> tuple[int, int, int, float]:
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Timestamp must be a finite non-negative number, got {seconds!r}")
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)
    return hours, minutes, secs, seconds % 1


def format_srt_time(seconds: float) -> str:
    # seconds -> "HH:MM:SS,mmm"
    hours, minutes, secs, fraction = _split(seconds)
    millis = math.floor(fraction * 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def format_vtt_time(seconds: float) -> str:
    # seconds -> "HH:MM:SS.mmm"
    hours, minutes, secs, fraction = _split(seconds)
    millis = math.floor(fraction * 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def format_ass_time(seconds: float) -> str:
    # seconds -> "H:MM:SS.cc"
    hours, minutes, secs, fraction = _split(seconds)
    centis = math.floor(fraction * 100)
    return f"{hours}:{minutes:02d}:{secs:02d}.{centis:02d}"
