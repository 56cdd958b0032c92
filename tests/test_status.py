from __future__ import annotations

import pytest

from captionkit.domain.models import VideoStatus
from captionkit.exceptions import NotFoundError, TranscriptionError, TranscriptionTimeoutError
from captionkit.services.status import get_status, wait_for_transcription


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_get_status(store, make_video) -> None:
    video = make_video(VideoStatus.PROCESSING)
    assert get_status(store, video.id) is VideoStatus.PROCESSING
    with pytest.raises(NotFoundError):
        get_status(store, "missing")


def test_returns_completed_video_after_polling(store, make_video) -> None:
    video = make_video(VideoStatus.PROCESSING)
    clock = FakeClock()

    def sleep(seconds: float) -> None:
        clock.sleep(seconds)
        if len(clock.sleeps) == 3:
            store.update_video_status(video.id, VideoStatus.COMPLETED)

    result = wait_for_transcription(
        store, video.id, timeout=60, interval=1.0, backoff=2.0, max_interval=3.0, clock=clock, sleep=sleep
    )

    assert result.status is VideoStatus.COMPLETED
    assert clock.sleeps == [1.0, 2.0, 3.0]


def test_failed_transcription_raises_failure_not_timeout(store, make_video) -> None:
    video = make_video(VideoStatus.ERROR)
    clock = FakeClock()
    with pytest.raises(TranscriptionError):
        wait_for_transcription(store, video.id, timeout=5, clock=clock, sleep=clock.sleep)
    assert clock.sleeps == []


def test_deadline_raises_timeout(store, make_video) -> None:
    video = make_video(VideoStatus.PROCESSING)
    clock = FakeClock()

    with pytest.raises(TranscriptionTimeoutError):
        wait_for_transcription(
            store, video.id, timeout=5, interval=2.0, backoff=1.0, clock=clock, sleep=clock.sleep
        )

    assert sum(clock.sleeps) == pytest.approx(5.0)
    assert clock.sleeps[-1] == pytest.approx(1.0)
