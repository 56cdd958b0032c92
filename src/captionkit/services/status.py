"""
Status queries with bounded client-side polling.

Transcriptions run detached from the caller. Completion is observed by
reading the stored video status until it reaches a terminal value, backing
off between queries, and giving up after a fixed deadline.
"""

from __future__ import annotations

import time
from typing import Callable

from captionkit.domain.models import Video, VideoStatus
from captionkit.exceptions import TranscriptionError, TranscriptionTimeoutError
from captionkit.storage.store import CaptionStore
from captionkit.utils.logging import get_logger

log = get_logger(__name__)


def get_status(store: CaptionStore, video_id: str) -> VideoStatus:
    return store.get_video(video_id).status


def wait_for_transcription(
    store: CaptionStore,
    video_id: str,
    *,
    timeout: float = 900.0,
    interval: float = 1.0,
    max_interval: float = 10.0,
    backoff: float = 1.5,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Video:
    """
    Poll until the video reaches `completed` or `error`.

    Returns:
        The completed video.

    Raises:
        TranscriptionError: the transcription finished in the `error` state.
        TranscriptionTimeoutError: no terminal status within `timeout` seconds.
    """
    deadline = clock() + timeout
    delay = interval
    attempts = 0
    while True:
        attempts += 1
        video = store.get_video(video_id)
        if video.status.terminal:
            if video.status is VideoStatus.ERROR:
                raise TranscriptionError(f"Transcription failed for video {video_id}.")
            log.info("Video %s completed after %d status checks", video_id, attempts)
            return video
        remaining = deadline - clock()
        if remaining <= 0:
            raise TranscriptionTimeoutError(
                f"Video {video_id} still '{video.status.value}' after {timeout:.0f}s."
            )
        log.debug("Video %s is %s; next check in %.1fs", video_id, video.status.value, delay)
        sleep(min(delay, remaining))
        delay = min(delay * backoff, max_interval)
