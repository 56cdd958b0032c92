from __future__ import annotations

import importlib
import shutil
from types import ModuleType

from captionkit.exceptions import DependencyMissingError


def require_binary(binary: str) -> str:
    path = shutil.which(binary)
    if path is None:
        raise DependencyMissingError(
            f"Missing required dependency '{binary}'. Install it and try again."
        )
    return path


def require_module(module: str, *, package: str | None = None) -> ModuleType:
    try:
        return importlib.import_module(module)
    except ImportError as exc:
        raise DependencyMissingError(
            f"Missing required Python package '{package or module}'. Install it and try again."
        ) from exc
