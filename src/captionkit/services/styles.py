"""
Style-to-filter compilation for burned-in captions.

A `CaptionStyle` plus the ordered caption segments compile into an ffmpeg
video filter expression. Three strategies share one interface:

- ``subtitles``: an SRT side file styled through ``force_style`` fields
- ``ass``: a full Advanced SubStation Alpha side file with its own style header
- ``drawtext``: one inline ``drawtext`` instruction per segment, no side file

Compilation is pure. The side file content is returned alongside the
expression and written by the export orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from captionkit.domain.models import BurnStrategy, CaptionSegment
from captionkit.domain.style import CaptionStyle
from captionkit.exceptions import NoCaptionsError, ValidationError
from captionkit.services.subtitles import to_srt
from captionkit.utils import colors
from captionkit.utils.ffmpeg import build_subtitles_filter, escape_filter_value
from captionkit.utils.timecodes import format_ass_time

DEFAULT_FRAME_SIZE = (1920, 1080)

# Numpad-style anchor codes shared by ASS and force_style.
ASS_ALIGNMENT = {"bottom": 2, "center": 5, "top": 8}

DRAWTEXT_Y = {
    "top": "h*0.1",
    "center": "(h-text_h)/2",
    "bottom": "h-text_h-h*0.1",
}
DRAWTEXT_X = "(w-text_w)/2"


@dataclass(frozen=True)
class CompiledStyle:
    strategy: BurnStrategy
    expression: str
    aux_path: Path | None = None
    aux_content: str | None = None


class StyleStrategy(Protocol):
    aux_suffix: str | None

    def compile(
        self,
        segments: Sequence[CaptionSegment],
        style: CaptionStyle,
        *,
        aux_path: Path | None,
        frame_size: tuple[int, int],
    ) -> CompiledStyle: ...


def _ass_bold(style: CaptionStyle) -> int:
    # ASS booleans are -1 (true) / 0 (false).
    return -1 if style.bold else 0


def _ass_colours(style: CaptionStyle) -> dict[str, str]:
    """Primary/outline/back colours plus border style for a caption style.

    With BorderStyle=3 libass paints the opaque box with OutlineColour, so a
    shown background takes over that slot. A hidden background is always
    fully transparent, whatever color the style carries.
    """
    primary = colors.to_ass_color(style.font_color)
    if style.show_background:
        box = colors.to_ass_color(style.background_color, opacity=style.background_opacity)
        return {"primary": primary, "outline": box, "back": box, "border_style": "3"}
    return {
        "primary": primary,
        "outline": colors.to_ass_color(style.outline_color),
        "back": colors.ASS_TRANSPARENT,
        "border_style": "1",
    }


def _require_aux(aux_path: Path | None, strategy: BurnStrategy) -> Path:
    if aux_path is None:
        raise ValidationError(f"The {strategy.value} strategy needs a side file path.")
    return aux_path


class SubtitlesFileStrategy:
    aux_suffix = ".srt"

    def force_style(self, style: CaptionStyle) -> str:
        c = _ass_colours(style)
        fields = [
            f"Fontname={style.font_family}",
            f"Fontsize={style.font_size}",
            f"Bold={_ass_bold(style)}",
            f"PrimaryColour={c['primary']}",
            f"OutlineColour={c['outline']}",
            f"BackColour={c['back']}",
            f"BorderStyle={c['border_style']}",
            f"Outline={style.outline_width}",
            "Shadow=0",
            f"Alignment={ASS_ALIGNMENT[style.position]}",
            "MarginV=20",
        ]
        return ",".join(fields)

    def compile(
        self,
        segments: Sequence[CaptionSegment],
        style: CaptionStyle,
        *,
        aux_path: Path | None,
        frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE,
    ) -> CompiledStyle:
        aux_path = _require_aux(aux_path, BurnStrategy.SUBTITLES)
        content = to_srt(segments, style.text_transform)
        expression = build_subtitles_filter(aux_path, force_style=self.force_style(style))
        return CompiledStyle(
            strategy=BurnStrategy.SUBTITLES,
            expression=expression,
            aux_path=aux_path,
            aux_content=content,
        )


def _escape_ass_text(text: str) -> str:
    return (
        text.replace("\\", r"\\")
        .replace("{", r"\{")
        .replace("}", r"\}")
        .replace("\n", r"\N")
    )


class AssFileStrategy:
    aux_suffix = ".ass"

    def document(
        self,
        segments: Sequence[CaptionSegment],
        style: CaptionStyle,
        *,
        frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE,
    ) -> str:
        width, height = frame_size
        c = _ass_colours(style)
        margin_lr = int(width * 0.05)
        margin_v = int(height * 0.05)
        lines = [
            "[Script Info]",
            "ScriptType: v4.00+",
            f"PlayResX: {width}",
            f"PlayResY: {height}",
            "WrapStyle: 0",
            "ScaledBorderAndShadow: yes",
            "",
            "[V4+ Styles]",
            "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, "
            "OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, "
            "ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, "
            "Alignment, MarginL, MarginR, MarginV, Encoding",
            (
                "Style: Default,"
                f"{style.font_family},"
                f"{style.font_size},"
                f"{c['primary']},{c['primary']},{c['outline']},{c['back']},"
                f"{_ass_bold(style)},0,0,0,100,100,0,0,"
                f"{c['border_style']},{style.outline_width},0,"
                f"{ASS_ALIGNMENT[style.position]},"
                f"{margin_lr},{margin_lr},{margin_v},1"
            ),
            "",
            "[Events]",
            "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text",
        ]
        for seg in segments:
            text = _escape_ass_text(style.text_transform.apply(seg.text))
            lines.append(
                f"Dialogue: 0,{format_ass_time(seg.start_time)},{format_ass_time(seg.end_time)},"
                f"Default,,0,0,0,,{text}"
            )
        return "\n".join(lines) + "\n"

    def compile(
        self,
        segments: Sequence[CaptionSegment],
        style: CaptionStyle,
        *,
        aux_path: Path | None,
        frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE,
    ) -> CompiledStyle:
        aux_path = _require_aux(aux_path, BurnStrategy.ASS)
        return CompiledStyle(
            strategy=BurnStrategy.ASS,
            expression=build_subtitles_filter(aux_path),
            aux_path=aux_path,
            aux_content=self.document(segments, style, frame_size=frame_size),
        )


class DrawTextStrategy:
    aux_suffix = None

    def instruction(self, seg: CaptionSegment, style: CaptionStyle) -> str:
        font = style.font_family + (":style=Bold" if style.bold else "")
        text = style.text_transform.apply(seg.text)
        options = [
            f"font={escape_filter_value(font)}",
            f"text={escape_filter_value(text)}",
            "expansion=none",
            f"fontsize={style.font_size}",
            f"fontcolor={colors.to_ffmpeg_color(style.font_color)}",
            f"borderw={style.outline_width}",
            f"bordercolor={colors.to_ffmpeg_color(style.outline_color)}",
            f"line_spacing={style.line_spacing}",
            f"x={DRAWTEXT_X}",
            f"y={DRAWTEXT_Y[style.position]}",
            f"enable='between(t,{seg.start_time:.3f},{seg.end_time:.3f})'",
        ]
        if style.show_background:
            box = colors.to_ffmpeg_color(style.background_color, opacity=style.background_opacity)
            options += ["box=1", f"boxcolor={box}", "boxborderw=10"]
        else:
            options += ["box=0", f"boxcolor={colors.FFMPEG_TRANSPARENT}"]
        return "drawtext=" + ":".join(options)

    def compile(
        self,
        segments: Sequence[CaptionSegment],
        style: CaptionStyle,
        *,
        aux_path: Path | None = None,
        frame_size: tuple[int, int] = DEFAULT_FRAME_SIZE,
    ) -> CompiledStyle:
        expression = ",".join(self.instruction(seg, style) for seg in segments)
        return CompiledStyle(strategy=BurnStrategy.DRAWTEXT, expression=expression)


STRATEGIES: dict[BurnStrategy, StyleStrategy] = {
    BurnStrategy.SUBTITLES: SubtitlesFileStrategy(),
    BurnStrategy.ASS: AssFileStrategy(),
    BurnStrategy.DRAWTEXT: DrawTextStrategy(),
}


def parse_strategy(value: BurnStrategy | str) -> BurnStrategy:
    if isinstance(value, BurnStrategy):
        return value
    try:
        return BurnStrategy(str(value).strip().lower())
    except ValueError as exc:
        valid = ", ".join(s.value for s in BurnStrategy)
        raise ValidationError(f"Unknown burn strategy '{value}'. Use one of: {valid}.") from exc


def compile_style(
    segments: Sequence[CaptionSegment],
    style: CaptionStyle,
    *,
    strategy: BurnStrategy | str = BurnStrategy.SUBTITLES,
    aux_path: Path | None = None,
    frame_size: tuple[int, int] | None = None,
) -> CompiledStyle:
    if not segments:
        raise NoCaptionsError("No captions found for this video.")
    impl = STRATEGIES[parse_strategy(strategy)]
    return impl.compile(
        segments,
        style,
        aux_path=aux_path,
        frame_size=frame_size or DEFAULT_FRAME_SIZE,
    )
