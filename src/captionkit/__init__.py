"""Automatic captions for short videos: transcribe, edit, export."""

__version__ = "0.1.0"
