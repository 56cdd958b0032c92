from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VideoRow(Base):
    __tablename__ = "videos"

    id = Column(String(64), primary_key=True)
    filename = Column(String(500), nullable=False)
    filepath = Column(String(1000), nullable=False)
    file_size = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="uploading")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    captions = relationship(
        "CaptionRow",
        back_populates="video",
        cascade="all, delete-orphan",
        order_by="CaptionRow.segment_index",
    )


class CaptionRow(Base):
    __tablename__ = "captions"

    id = Column(String(64), primary_key=True)
    video_id = Column(String(64), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    segment_index = Column(Integer, nullable=False)
    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)
    text = Column(Text, nullable=False)
    confidence = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    video = relationship("VideoRow", back_populates="captions")

    __table_args__ = (Index("idx_captions_segment_index", "video_id", "segment_index"),)
