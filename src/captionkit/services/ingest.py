from __future__ import annotations

import mimetypes
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path

from captionkit.domain.models import Video, VideoStatus
from captionkit.domain.workspace import Workspace
from captionkit.exceptions import NotFoundError, ValidationError
from captionkit.storage.store import CaptionStore
from captionkit.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_ALLOWED_MIME_TYPES = (
    "video/mp4",
    "video/mpeg",
    "video/quicktime",
    "video/x-msvideo",
)


@dataclass
class IngestService:
    store: CaptionStore
    workspace: Workspace
    max_upload_bytes: int = 100 * 1024 * 1024
    allowed_mime_types: tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES

    def validate(self, source: Path, filename: str) -> int:
        if not source.is_file():
            raise NotFoundError(f"Upload not found: {source}")
        mime, _ = mimetypes.guess_type(filename)
        if mime not in self.allowed_mime_types:
            raise ValidationError(
                f"Invalid file type for '{filename}' ({mime or 'unknown'}). Only video files are allowed."
            )
        size = source.stat().st_size
        if size > self.max_upload_bytes:
            raise ValidationError(
                f"Upload is {size} bytes; the limit is {self.max_upload_bytes} bytes."
            )
        return size

    def ingest(self, source: str | Path, *, filename: str | None = None) -> Video:
        """Copy an uploaded file into the workspace and register it as a video."""
        source = Path(source)
        original_name = filename or source.name
        size = self.validate(source, original_name)

        video_id = str(uuid.uuid4())
        stored = self.workspace.upload_path(f"{uuid.uuid4()}{Path(original_name).suffix.lower()}")
        shutil.copyfile(source, stored)

        video = self.store.create_video(
            Video(
                id=video_id,
                filename=original_name,
                filepath=str(stored),
                file_size=size,
                status=VideoStatus.UPLOADING,
            )
        )
        log.info("Uploaded %s as video %s (%d bytes)", original_name, video_id, size)
        return video
