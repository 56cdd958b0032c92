"""
Caption store: videos and their ordered caption segments.

Responsibilities:
- Insert and look up videos, mutate their lifecycle status
- Bulk-create a video's caption segments, read them ordered by index
- Single-field text edits of one caption

Does NOT:
- Build segments (services/segments.py)
- Decide when a video changes status (services/transcription.py)
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import delete, select

from captionkit.domain.models import CaptionSegment, Video, VideoStatus
from captionkit.exceptions import NotFoundError, ValidationError
from captionkit.storage.database import Database
from captionkit.storage.tables import CaptionRow, VideoRow
from captionkit.utils.logging import get_logger

log = get_logger(__name__)


def _video_from_row(row: VideoRow) -> Video:
    return Video(
        id=row.id,
        filename=row.filename,
        filepath=row.filepath,
        file_size=row.file_size,
        status=VideoStatus(row.status),
        created_at=row.created_at,
    )


def _caption_from_row(row: CaptionRow) -> CaptionSegment:
    return CaptionSegment(
        id=row.id,
        video_id=row.video_id,
        segment_index=row.segment_index,
        start_time=row.start_time,
        end_time=row.end_time,
        text=row.text,
        confidence=row.confidence,
    )


def _caption_row(segment: CaptionSegment) -> CaptionRow:
    return CaptionRow(
        id=segment.id,
        video_id=segment.video_id,
        segment_index=segment.segment_index,
        start_time=segment.start_time,
        end_time=segment.end_time,
        text=segment.text,
        confidence=segment.confidence,
    )


class CaptionStore:
    def __init__(self, database: Database) -> None:
        self.database = database

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------
    def create_video(self, video: Video) -> Video:
        with self.database.session() as session:
            row = VideoRow(
                id=video.id,
                filename=video.filename,
                filepath=video.filepath,
                file_size=video.file_size,
                status=video.status.value,
            )
            if video.created_at is not None:
                row.created_at = video.created_at
            session.add(row)
            session.flush()
            return _video_from_row(row)

    def find_video(self, video_id: str) -> Video | None:
        with self.database.session() as session:
            row = session.get(VideoRow, video_id)
            return _video_from_row(row) if row is not None else None

    def get_video(self, video_id: str) -> Video:
        video = self.find_video(video_id)
        if video is None:
            raise NotFoundError(f"Video not found: {video_id}")
        return video

    def update_video_status(self, video_id: str, status: VideoStatus) -> Video:
        with self.database.session() as session:
            row = session.get(VideoRow, video_id)
            if row is None:
                raise NotFoundError(f"Video not found: {video_id}")
            row.status = VideoStatus(status).value
            log.debug("Video %s status -> %s", video_id, row.status)
            return _video_from_row(row)

    # ------------------------------------------------------------------
    # Captions
    # ------------------------------------------------------------------
    def create_captions(self, segments: Iterable[CaptionSegment]) -> list[CaptionSegment]:
        segments = list(segments)
        with self.database.session() as session:
            session.add_all(_caption_row(seg) for seg in segments)
        return segments

    def replace_captions(self, video_id: str, segments: Iterable[CaptionSegment]) -> list[CaptionSegment]:
        """Swap a video's whole segment set in one transaction."""
        segments = list(segments)
        for seg in segments:
            if seg.video_id != video_id:
                raise ValidationError(
                    f"Segment {seg.id} belongs to video {seg.video_id}, not {video_id}."
                )
        with self.database.session() as session:
            if session.get(VideoRow, video_id) is None:
                raise NotFoundError(f"Video not found: {video_id}")
            session.execute(delete(CaptionRow).where(CaptionRow.video_id == video_id))
            session.add_all(_caption_row(seg) for seg in segments)
        log.info("Stored %d caption segments for video %s", len(segments), video_id)
        return segments

    def get_captions(self, video_id: str) -> list[CaptionSegment]:
        with self.database.session() as session:
            rows = session.scalars(
                select(CaptionRow)
                .where(CaptionRow.video_id == video_id)
                .order_by(CaptionRow.segment_index.asc())
            ).all()
            return [_caption_from_row(row) for row in rows]

    def get_caption(self, caption_id: str) -> CaptionSegment:
        with self.database.session() as session:
            row = session.get(CaptionRow, caption_id)
            if row is None:
                raise NotFoundError(f"Caption not found: {caption_id}")
            return _caption_from_row(row)

    def update_caption_text(self, caption_id: str, text: str) -> CaptionSegment:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Caption text is required.")
        with self.database.session() as session:
            row = session.get(CaptionRow, caption_id)
            if row is None:
                raise NotFoundError(f"Caption not found: {caption_id}")
            row.text = text
            return _caption_from_row(row)

    def delete_captions(self, video_id: str) -> int:
        with self.database.session() as session:
            result = session.execute(delete(CaptionRow).where(CaptionRow.video_id == video_id))
            return result.rowcount or 0
