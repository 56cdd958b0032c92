from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Protocol

from captionkit.domain.models import Word

ProgressCallback = Callable[[dict[str, str]], None]


class TranscriptionBackend(Protocol):
    def transcribe(self, video_path: Path, *, language_code: str) -> Iterable[Word]: ...


class Renderer(Protocol):
    def render(
        self,
        input_path: Path,
        expression: str,
        output_path: Path,
        *,
        on_progress: ProgressCallback | None = None,
        stderr_path: Path | None = None,
    ) -> Path: ...
