from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from captionkit.domain.models import SubtitleFormat


@dataclass(frozen=True)
class Workspace:
    """File layout under the configured workdir.

    Every artifact path is derived from the owning video id, so the same id
    always maps to the same subtitle and export files.
    """

    root: Path

    @classmethod
    def create(cls, workdir: str) -> "Workspace":
        root = Path(workdir).expanduser().resolve()
        root.mkdir(parents=True, exist_ok=True)
        (root / "uploads").mkdir(exist_ok=True)
        return cls(root=root)

    def path(self, name: str) -> Path:
        p = self.root / name
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    @property
    def uploads(self) -> Path:
        return self.path("uploads")

    @property
    def database_file(self) -> Path:
        return self.path("captionkit.db")

    def upload_path(self, stored_name: str) -> Path:
        return self.uploads / stored_name

    def subtitle_path(self, video_id: str, fmt: SubtitleFormat) -> Path:
        return self.uploads / f"{video_id}{fmt.extension}"

    def burn_aux_path(self, video_id: str, suffix: str) -> Path:
        # Distinct from subtitle_path; burn side files are deleted after export.
        return self.uploads / f"{video_id}.burn{suffix}"

    def export_path(self, video_id: str) -> Path:
        return self.uploads / f"{video_id}_with_captions.mp4"

    def ffmpeg_stderr_path(self, video_id: str) -> Path:
        return self.path(f"logs/{video_id}.ffmpeg.stderr.txt")
