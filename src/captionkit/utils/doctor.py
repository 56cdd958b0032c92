from __future__ import annotations

import importlib
import importlib.metadata
import os
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

from captionkit.config.settings import Settings

BURN_FILTERS = ("subtitles", "ass", "drawtext")


@dataclass(frozen=True)
class Check:
    label: str
    ok: bool
    detail: str = ""
    required: bool = True

    def line(self) -> str:
        if self.ok:
            icon = "✅"
        elif self.required:
            icon = "❌"
        else:
            icon = "⚠️"
        return f"{icon} {self.label}{self.detail}"


def _run_cmd(cmd: list[str]) -> tuple[int, str]:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        return 1, ""
    return proc.returncode, proc.stdout.strip() or proc.stderr.strip()


def _module_available(name: str) -> bool:
    try:
        importlib.import_module(name)
    except ImportError:
        return False
    return True


def _check_writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=path, delete=True):
            return True
    except OSError:
        return False


def _get_version() -> str:
    try:
        return importlib.metadata.version("captionkit")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _binary_check(name: str, *, required: bool, missing_hint: str = "") -> Check:
    code, out = _run_cmd([name, "-version"])
    if code != 0:
        return Check(name, False, f" (not found{missing_hint})", required=required)
    first_line = out.splitlines()[0] if out else "available"
    return Check(name, True, f": {first_line}", required=required)


def _filters_check() -> Check:
    """Burn strategies need these filters compiled into ffmpeg (libass, libfreetype)."""
    code, out = _run_cmd(["ffmpeg", "-hide_banner", "-filters"])
    if code != 0:
        return Check("ffmpeg burn filters", False, ": could not list filters", required=False)
    names = {parts[1] for parts in (line.split() for line in out.splitlines()) if len(parts) > 1}
    missing = [f for f in BURN_FILTERS if f not in names]
    if missing:
        return Check("ffmpeg burn filters", False, f": missing {', '.join(missing)}", required=False)
    return Check("ffmpeg burn filters", True, f": {', '.join(BURN_FILTERS)}")


def _credentials_check(settings: Settings) -> Check:
    if settings.google_credentials_base64:
        return Check("Google credentials", True, ": set (CAPTIONKIT_GOOGLE_CREDENTIALS_BASE64)")
    if os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        return Check("Google credentials", True, ": set (GOOGLE_APPLICATION_CREDENTIALS)")
    return Check("Google credentials", False, ": missing (transcription will fail)", required=False)


def collect_checks(settings: Settings) -> list[Check]:
    workdir = Path(settings.workdir).expanduser().resolve()
    checks = [
        Check("Python", True, f": {sys.version.split()[0]}"),
        Check("captionkit version", True, f": {_get_version()}"),
        Check("Workdir writable", _check_writable(workdir), f": {workdir}"),
        _binary_check("ffmpeg", required=True),
        _binary_check("ffprobe", required=False, missing_hint="; ASS exports assume 1920x1080"),
    ]
    if checks[3].ok:
        checks.append(_filters_check())

    speech_ok = _module_available("google.cloud.videointelligence")
    checks.append(
        Check(
            "google-cloud-videointelligence",
            speech_ok,
            " (available)" if speech_ok else " (not installed)",
        )
    )
    checks.append(_credentials_check(settings))
    checks.append(
        Check(
            "Language/segment size/strategy",
            True,
            f": {settings.language_code} / {settings.words_per_segment} / {settings.burn_strategy}",
        )
    )
    return checks


def run_doctor(settings: Settings) -> int:
    checks = collect_checks(settings)
    print("\n".join(["captionkit doctor", ""] + [c.line() for c in checks]))
    return 0 if all(c.ok for c in checks if c.required) else 1
