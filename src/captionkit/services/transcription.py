"""
Transcription service for captionkit.

This module turns an uploaded video into stored caption segments:
speech words come from a transcription backend, filler words are dropped,
the survivors are grouped into fixed-size segments and the video's segment
set is replaced in one transaction.

Responsibilities:
- Drive the video status: processing -> completed | error
- Run transcriptions in the background, at most one per video id
- Convert backend failures into TranscriptionError

Does NOT:
- Wait for completion (services/status.py polls the stored status)
- Serialize or render captions
"""

from __future__ import annotations

import base64
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterable, Iterator

from captionkit.config.settings import Settings
from captionkit.domain.contracts import TranscriptionBackend
from captionkit.domain.models import CaptionSegment, VideoStatus, Word
from captionkit.domain.workspace import Workspace
from captionkit.exceptions import (
    CaptionKitError,
    ConfigurationError,
    TranscriptionError,
    TranscriptionInProgressError,
)
from captionkit.services.filler import filter_filler_words
from captionkit.services.segments import segment, validate_words_per_segment
from captionkit.storage.store import CaptionStore
from captionkit.utils.checks import require_module
from captionkit.utils.logging import get_logger

log = get_logger(__name__)


def _offset_seconds(value: Any) -> float:
    """Seconds from a protobuf Duration or the timedelta proto-plus returns."""
    if value is None:
        return 0.0
    if isinstance(value, timedelta):
        return value.total_seconds()
    seconds = float(getattr(value, "seconds", 0) or 0)
    nanos = float(getattr(value, "nanos", 0) or 0)
    return seconds + nanos / 1e9


def words_from_annotation(annotation_results: Iterable[Any]) -> Iterator[Word]:
    """Flatten speech transcriptions into words, first alternative only."""
    for result in annotation_results:
        for transcription in getattr(result, "speech_transcriptions", None) or []:
            alternatives = getattr(transcription, "alternatives", None) or []
            if not alternatives:
                continue
            for info in getattr(alternatives[0], "words", None) or []:
                yield Word(
                    text=(getattr(info, "word", "") or "").lower(),
                    start=_offset_seconds(getattr(info, "start_time", None)),
                    end=_offset_seconds(getattr(info, "end_time", None)),
                    confidence=float(getattr(info, "confidence", 0.0) or 0.0),
                )


@dataclass
class VideoIntelligenceBackend:
    """
    Google Cloud Video Intelligence speech transcription.

    Notes:
    - The client is created by the caller and owned by the runtime.
    - Only the first annotation result is used; the request carries one video.
    """

    client: Any
    timeout_seconds: float = 600.0
    enable_automatic_punctuation: bool = True

    def transcribe(self, video_path: Path, *, language_code: str) -> list[Word]:
        videointelligence = require_module(
            "google.cloud.videointelligence",
            package="google-cloud-videointelligence",
        )
        content = Path(video_path).read_bytes()
        request = {
            "input_content": content,
            "features": [videointelligence.Feature.SPEECH_TRANSCRIPTION],
            "video_context": {
                "speech_transcription_config": {
                    "language_code": language_code,
                    "enable_automatic_punctuation": self.enable_automatic_punctuation,
                    "enable_word_confidence": True,
                },
            },
        }
        log.info("Sending %s to Video Intelligence (%d bytes)", video_path, len(content))
        operation = self.client.annotate_video(request=request)
        log.info("Waiting for transcription to complete...")
        response = operation.result(timeout=self.timeout_seconds)
        results = list(getattr(response, "annotation_results", None) or [])[:1]
        return list(words_from_annotation(results))


def install_google_credentials(settings: Settings, workspace: Workspace) -> Path | None:
    """Decode base64 service-account JSON from settings into a credentials file."""
    if not settings.google_credentials_base64:
        return None
    try:
        payload = base64.b64decode(settings.google_credentials_base64, validate=True)
    except ValueError as exc:
        raise ConfigurationError("CAPTIONKIT_GOOGLE_CREDENTIALS_BASE64 is not valid base64.") from exc
    path = workspace.path("google-credentials.json")
    path.write_bytes(payload)
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = str(path)
    log.info("Google credentials decoded to %s", path)
    return path


def create_transcription_backend(settings: Settings) -> VideoIntelligenceBackend:
    videointelligence = require_module(
        "google.cloud.videointelligence",
        package="google-cloud-videointelligence",
    )
    client = videointelligence.VideoIntelligenceServiceClient()
    return VideoIntelligenceBackend(
        client=client,
        timeout_seconds=settings.transcription_timeout_seconds,
        enable_automatic_punctuation=settings.enable_automatic_punctuation,
    )


@dataclass
class TranscriptionService:
    store: CaptionStore
    backend: TranscriptionBackend
    language_code: str = "en-US"

    def run(self, video_id: str, words_per_segment: int = 2) -> list[CaptionSegment]:
        validate_words_per_segment(words_per_segment)
        video = self.store.get_video(video_id)
        log.info("Starting transcription for video %s", video_id)
        self.store.update_video_status(video_id, VideoStatus.PROCESSING)
        try:
            words = list(
                filter_filler_words(
                    self.backend.transcribe(Path(video.filepath), language_code=self.language_code)
                )
            )
            log.info("Extracted %d words for video %s", len(words), video_id)
            segments = segment(words, words_per_segment, video_id=video_id)
            self.store.replace_captions(video_id, segments)
        except Exception as exc:
            log.exception("Transcription failed for video %s", video_id)
            self.store.update_video_status(video_id, VideoStatus.ERROR)
            if isinstance(exc, CaptionKitError):
                raise
            raise TranscriptionError(f"Transcription failed for video {video_id}: {exc}") from exc
        self.store.update_video_status(video_id, VideoStatus.COMPLETED)
        log.info("Transcription completed for video %s (%d segments)", video_id, len(segments))
        return segments


@dataclass
class TranscriptionRunner:
    """
    Background transcription with a single-flight guarantee per video id.

    `submit` marks the video as processing and returns immediately; callers
    learn the outcome by querying the stored status.
    """

    service: TranscriptionService
    max_workers: int = 2
    _executor: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)
    _in_flight: dict[str, Future] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="transcribe",
            )
        return self._executor

    def is_running(self, video_id: str) -> bool:
        with self._lock:
            return video_id in self._in_flight

    def submit(self, video_id: str, words_per_segment: int = 2) -> Future:
        validate_words_per_segment(words_per_segment)
        self.service.store.get_video(video_id)
        with self._lock:
            if video_id in self._in_flight:
                raise TranscriptionInProgressError(
                    f"Transcription already running for video {video_id}."
                )
            self.service.store.update_video_status(video_id, VideoStatus.PROCESSING)
            future = self._pool().submit(self._run, video_id, words_per_segment)
            self._in_flight[video_id] = future
        future.add_done_callback(lambda f: self._finished(video_id, f))
        return future

    def _run(self, video_id: str, words_per_segment: int) -> list[CaptionSegment]:
        # Cleared in the worker, before the future resolves.
        try:
            return self.service.run(video_id, words_per_segment)
        finally:
            with self._lock:
                self._in_flight.pop(video_id, None)

    def _finished(self, video_id: str, future: Future) -> None:
        with self._lock:
            if self._in_flight.get(video_id) is future:
                del self._in_flight[video_id]
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.error("Background transcription error for video %s: %s", video_id, exc)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
