from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class VideoStatus(str, Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in {VideoStatus.COMPLETED, VideoStatus.ERROR}


class SubtitleFormat(str, Enum):
    SRT = "srt"
    VTT = "vtt"

    @property
    def extension(self) -> str:
        return f".{self.value}"


class TextCase(str, Enum):
    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"

    def apply(self, text: str) -> str:
        if self is TextCase.UPPERCASE:
            return text.upper()
        if self is TextCase.LOWERCASE:
            return text.lower()
        return text


class BurnStrategy(str, Enum):
    SUBTITLES = "subtitles"
    ASS = "ass"
    DRAWTEXT = "drawtext"


@dataclass(frozen=True)
class Video:
    id: str
    filename: str
    filepath: str
    file_size: int
    status: VideoStatus = VideoStatus.UPLOADING
    created_at: datetime | None = None


@dataclass(frozen=True)
class Word:
    """A single transcribed token; lives only between transcription and segmentation."""

    text: str
    start: float
    end: float
    confidence: float = 0.0


@dataclass(frozen=True)
class CaptionSegment:
    id: str
    video_id: str
    segment_index: int
    start_time: float
    end_time: float
    text: str
    confidence: float = 0.0

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "segmentIndex": self.segment_index,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "text": self.text,
            "confidence": self.confidence,
        }
