from captionkit.services.segments import segment
from captionkit.services.styles import compile_style
from captionkit.services.subtitles import serialize

__all__ = ["compile_style", "segment", "serialize"]
