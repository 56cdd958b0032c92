"""
Segment builder: groups time-ordered words into caption segments.

Chunks are purely positional. Every segment holds exactly
`words_per_segment` words except possibly the last one; there is no
sentence or clause awareness.
"""

from __future__ import annotations

import uuid
from typing import Callable, Sequence

from captionkit.domain.models import CaptionSegment, Word
from captionkit.exceptions import ValidationError

DEFAULT_WORDS_PER_SEGMENT = 2


def _new_id() -> str:
    return str(uuid.uuid4())


def validate_words_per_segment(words_per_segment: int) -> int:
    if isinstance(words_per_segment, bool) or not isinstance(words_per_segment, int):
        raise ValidationError(f"words_per_segment must be an integer, got {words_per_segment!r}.")
    if words_per_segment < 1:
        raise ValidationError(f"words_per_segment must be at least 1, got {words_per_segment}.")
    return words_per_segment


def segment(
    words: Sequence[Word],
    words_per_segment: int = DEFAULT_WORDS_PER_SEGMENT,
    *,
    video_id: str,
    id_factory: Callable[[], str] = _new_id,
) -> list[CaptionSegment]:
    validate_words_per_segment(words_per_segment)
    words = list(words)
    segments: list[CaptionSegment] = []
    for index, offset in enumerate(range(0, len(words), words_per_segment)):
        chunk = words[offset : offset + words_per_segment]
        segments.append(
            CaptionSegment(
                id=id_factory(),
                video_id=video_id,
                segment_index=index,
                start_time=chunk[0].start,
                end_time=chunk[-1].end,
                text=" ".join(w.text for w in chunk),
                confidence=sum(w.confidence for w in chunk) / len(chunk),
            )
        )
    return segments
