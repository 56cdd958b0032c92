from __future__ import annotations

import pytest

from captionkit.utils.timing import StepTimer


def test_steps_record_duration_and_outcome() -> None:
    ticks = iter([0.0, 1.5, 2.0, 2.25])
    timer = StepTimer(clock=lambda: next(ticks))

    with timer.step("compile_style"):
        pass
    with pytest.raises(RuntimeError):
        with timer.step("render"):
            raise RuntimeError("ffmpeg")

    assert [(s.name, s.duration_s, s.ok) for s in timer.steps] == [
        ("compile_style", 1.5, True),
        ("render", 0.25, False),
    ]
    assert timer.failed() == ["render"]
    assert timer.summary() == "compile_style=1.50s, render=0.25s (failed); total=1.75s"
