"""Caption style supplied with each export request.

The style is a pure value: it is validated on construction and never
persisted. Colors are accepted as ``RRGGBB`` or ``#RRGGBB`` and normalised
to the ``#RRGGBB`` form.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from captionkit.domain.models import TextCase
from captionkit.exceptions import ValidationError

_HEX_COLOR_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


class CaptionStyle(BaseModel):
    """Visual options for burned-in captions.

    Examples:
        >>> CaptionStyle(font_color="ff0000").font_color
        '#FF0000'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    font_family: str = Field(default="Arial", min_length=1)
    font_size: int = Field(default=48, ge=8, le=200)
    font_weight: Literal["normal", "bold"] = "bold"
    font_color: str = "#FFFFFF"
    outline_color: str = "#000000"
    outline_width: int = Field(default=3, ge=0, le=20)
    show_background: bool = False
    background_color: str = "#000000"
    background_opacity: float = Field(default=0.7, ge=0.0, le=1.0)
    line_spacing: int = Field(default=0, ge=0, le=100)
    position: Literal["top", "center", "bottom"] = "bottom"
    text_transform: TextCase = TextCase.NONE

    @field_validator("font_color", "outline_color", "background_color")
    @classmethod
    def _normalize_color(cls, value: str) -> str:
        match = _HEX_COLOR_RE.match(value.strip())
        if not match:
            raise ValueError(f"expected a 6-digit hex color, got {value!r}")
        return f"#{match.group(1).upper()}"

    @field_validator("font_family")
    @classmethod
    def _check_font_family(cls, value: str) -> str:
        # ASS style lines and force_style are comma-separated field lists.
        if "," in value:
            raise ValueError(f"font family must not contain commas, got {value!r}")
        return value

    @property
    def bold(self) -> bool:
        return self.font_weight == "bold"


def load_style(data: dict | None) -> CaptionStyle:
    if data is None:
        return CaptionStyle()
    try:
        return CaptionStyle.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid caption style: {exc}") from exc


def load_style_file(path: str | Path) -> CaptionStyle:
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"Style file not found: {p}")
    try:
        return CaptionStyle.model_validate_json(p.read_text(encoding="utf-8"))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid caption style in {p}: {exc}") from exc
