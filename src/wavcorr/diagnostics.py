"""Runtime diagnostics helpers for optional kernel call logging."""
from __future__ import annotations

import threading
from pathlib import Path

__all__ = ["enable_kernel_logging", "kernel_logging_enabled", "log_kernel_call", "set_log_path"]


_LOG_KERNEL_CALLS = False
_LOG_PATH = Path("logs/kernel_calls.log")
_LOG_LOCK = threading.Lock()


def enable_kernel_logging(enabled: bool) -> None:
    """Enable or disable logging of checked kernel calls."""

    global _LOG_KERNEL_CALLS
    _LOG_KERNEL_CALLS = bool(enabled)


def kernel_logging_enabled() -> bool:
    """Return ``True`` when kernel call logging is enabled."""

    return _LOG_KERNEL_CALLS


def set_log_path(path: str | Path) -> None:
    """Redirect the kernel call log to ``path``."""

    global _LOG_PATH
    _LOG_PATH = Path(path)


def log_kernel_call(message: str) -> None:
    """Append ``message`` to the kernel call log when logging is enabled."""

    if not _LOG_KERNEL_CALLS:
        return
    try:
        _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return
    try:
        with _LOG_LOCK:
            with _LOG_PATH.open("a", encoding="utf-8") as handle:
                handle.write(f"{message}\n")
    except OSError:
        return
