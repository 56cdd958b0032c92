from __future__ import annotations

import math

import pytest

from captionkit.utils.timecodes import format_ass_time, format_srt_time, format_vtt_time


def test_srt_and_vtt_share_fields_with_different_separator() -> None:
    assert format_srt_time(3725.125) == "01:02:05,125"
    assert format_vtt_time(3725.125) == "01:02:05.125"


def test_zero_is_padded() -> None:
    assert format_srt_time(0) == "00:00:00,000"
    assert format_vtt_time(0.0) == "00:00:00.000"
    assert format_ass_time(0) == "0:00:00.00"


def test_fractions_are_floored_not_rounded() -> None:
    assert format_srt_time(1.9999) == "00:00:01,999"
    assert format_ass_time(3725.125) == "1:02:05.12"
    assert format_ass_time(59.999) == "0:00:59.99"


def test_hours_over_99_keep_growing() -> None:
    assert format_srt_time(100 * 3600) == "100:00:00,000"


@pytest.mark.parametrize("bad", [-0.5, math.nan, math.inf])
def test_rejects_negative_and_non_finite(bad: float) -> None:
    with pytest.raises(ValueError):
        format_srt_time(bad)
