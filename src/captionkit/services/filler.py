from __future__ import annotations

from typing import Iterable, Iterator

from captionkit.domain.models import Word

FILLER_WORDS = frozenset(
    {
        "um",
        "uh",
        "hmm",
        "ah",
        "like",
        "you know",
        "so",
        "basically",
        "actually",
    }
)


def is_filler_word(word: str) -> bool:
    return word.lower() in FILLER_WORDS


def filter_filler_words(words: Iterable[Word]) -> Iterator[Word]:
    """Drop disfluencies, keeping survivors in order with their timestamps."""
    for word in words:
        if not is_filler_word(word.text):
            yield word
