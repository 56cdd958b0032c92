from __future__ import annotations

import pytest

from captionkit.domain.models import CaptionSegment, SubtitleFormat, TextCase
from captionkit.exceptions import NoCaptionsError
from captionkit.services.subtitles import serialize, to_srt, to_vtt


def _seg(index: int, start: float, end: float, text: str) -> CaptionSegment:
    return CaptionSegment(
        id=f"s{index}",
        video_id="v",
        segment_index=index,
        start_time=start,
        end_time=end,
        text=text,
    )


def test_single_segment_uppercase_srt_is_exact() -> None:
    out = to_srt([_seg(0, 0.0, 1.0, "hello world")], TextCase.UPPERCASE)
    assert out == "1\n00:00:00,000 --> 00:00:01,000\nHELLO WORLD\n"


def test_srt_cues_numbered_from_one_and_blank_line_separated() -> None:
    out = to_srt([_seg(0, 0.0, 1.0, "a b"), _seg(1, 1.0, 2.5, "c")])
    assert out == (
        "1\n00:00:00,000 --> 00:00:01,000\na b\n"
        "\n"
        "2\n00:00:01,000 --> 00:00:02,500\nc\n"
    )


def test_vtt_has_header_and_no_numbers() -> None:
    out = to_vtt([_seg(0, 0.0, 1.0, "a b"), _seg(1, 3725.125, 3726.0, "c")], TextCase.LOWERCASE)
    assert out.startswith("WEBVTT\n\n")
    assert "01:02:05.125 --> 01:02:06.000\nc\n" in out
    assert "\n1\n" not in out


def test_case_is_applied_at_output_only() -> None:
    seg = _seg(0, 0.0, 1.0, "Hello World")
    assert "hello world" in serialize([seg], "srt", "lowercase")
    assert seg.text == "Hello World"


@pytest.mark.parametrize("fmt", [SubtitleFormat.SRT, SubtitleFormat.VTT])
def test_empty_segments_raise(fmt: SubtitleFormat) -> None:
    with pytest.raises(NoCaptionsError):
        serialize([], fmt)


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        serialize([_seg(0, 0.0, 1.0, "a")], "ass")
