from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime configuration for captionkit.

    All settings are loaded from environment variables with the
    `CAPTIONKIT_` prefix and optional `.env` support.

    Command-line options override individual fields after loading.
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPTIONKIT_",
        env_file=".env",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    workdir: str = Field(
        default=".captionkit",
        description="Root directory for uploaded videos, subtitle files and exports.",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy database URL. Defaults to a SQLite file inside the workdir.",
    )

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Largest accepted upload in bytes.",
    )
    allowed_mime_types: list[str] = Field(
        default=["video/mp4", "video/mpeg", "video/quicktime", "video/x-msvideo"],
        description="Media types accepted on upload.",
    )

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------
    language_code: str = Field(
        default="en-US",
        description="BCP-47 language code sent to the speech transcription API.",
    )
    enable_automatic_punctuation: bool = Field(
        default=True,
        description="Ask the transcription API to punctuate words.",
    )
    words_per_segment: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Default number of words grouped into one caption segment.",
    )
    transcription_timeout_seconds: float = Field(
        default=600.0,
        description="How long to wait on the transcription API operation.",
    )
    max_workers: int = Field(
        default=2,
        ge=1,
        description="Background transcription worker threads.",
    )
    google_credentials_base64: str | None = Field(
        default=None,
        description="Base64-encoded service account JSON, decoded on startup.",
    )

    # ------------------------------------------------------------------
    # Status polling
    # ------------------------------------------------------------------
    poll_interval_seconds: float = Field(
        default=1.0,
        description="First delay between status queries while waiting.",
    )
    poll_max_interval_seconds: float = Field(
        default=10.0,
        description="Upper bound for the delay between status queries.",
    )
    poll_backoff: float = Field(
        default=1.5,
        ge=1.0,
        description="Multiplier applied to the polling delay after each query.",
    )
    wait_timeout_seconds: float = Field(
        default=900.0,
        description="Give up waiting for a transcription after this many seconds.",
    )

    # ------------------------------------------------------------------
    # Video rendering
    # ------------------------------------------------------------------
    burn_strategy: str = Field(
        default="subtitles",
        description="Burn-in strategy: subtitles, ass, or drawtext.",
    )
    video_codec: str = Field(
        default="libx264",
        description="ffmpeg video encoder used for exports.",
    )
    preset: str = Field(
        default="medium",
        description="Encoder preset for exports.",
    )
    crf: int = Field(
        default=20,
        description="Constant rate factor for exports.",
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )

    # ------------------------------------------------------------------
    # Public / safe export
    # ------------------------------------------------------------------
    def to_public_dict(self) -> dict:
        """
        Return a dictionary of non-sensitive settings suitable
        for logging or CLI display.
        """
        return {
            "workdir": self.workdir,
            "database_url": self.database_url,
            "max_upload_bytes": self.max_upload_bytes,
            "allowed_mime_types": list(self.allowed_mime_types),
            "language_code": self.language_code,
            "enable_automatic_punctuation": self.enable_automatic_punctuation,
            "words_per_segment": self.words_per_segment,
            "transcription_timeout_seconds": self.transcription_timeout_seconds,
            "max_workers": self.max_workers,
            "google_credentials_base64": "set" if self.google_credentials_base64 else None,
            "poll_interval_seconds": self.poll_interval_seconds,
            "poll_max_interval_seconds": self.poll_max_interval_seconds,
            "poll_backoff": self.poll_backoff,
            "wait_timeout_seconds": self.wait_timeout_seconds,
            "burn_strategy": self.burn_strategy,
            "video_codec": self.video_codec,
            "preset": self.preset,
            "crf": self.crf,
            "log_level": self.log_level,
        }
