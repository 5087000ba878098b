"""Log files that capture the output of launched Bevy processes."""

from __future__ import annotations

import os
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

_HEADER_TITLE = "=== Bevy BRP MCP Launch Log ==="
_HEADER_RULE = "============================================"


class LogFileError(OSError):
    """A launch log file could not be created, opened or written."""


def create_log_file(
    app_name: str, profile: str, binary_path: str | Path, working_dir: str | Path
) -> Path:
    """Create a uniquely named log file in the temp directory and write its header."""
    timestamp = time.time_ns() // 1_000_000
    log_file_path = Path(tempfile.gettempdir()) / f"bevy_brp_mcp_{app_name}_{timestamp}.log"
    header = (
        f"{_HEADER_TITLE}\n"
        f"Started at: {datetime.now().isoformat()}\n"
        f"App: {app_name}\n"
        f"Profile: {profile}\n"
        f"Binary: {binary_path}\n"
        f"Working directory: {working_dir}\n"
        f"{_HEADER_RULE}\n\n"
    )
    try:
        with open(log_file_path, "w", encoding="utf-8") as log_file:
            log_file.write(header)
            log_file.flush()
            os.fsync(log_file.fileno())
    except OSError as exc:
        raise LogFileError(f"Failed to create {log_file_path}: {exc}") from exc
    return log_file_path


def _open_existing_for_append(log_file_path: str | Path, action: str) -> BinaryIO:
    try:
        fd = os.open(log_file_path, os.O_WRONLY | os.O_APPEND)
    except OSError as exc:
        raise LogFileError(f"Failed to {action} {log_file_path}: {exc}") from exc
    return os.fdopen(fd, "ab")


def open_log_file_for_redirect(log_file_path: str | Path) -> BinaryIO:
    """Open an existing log file for appending, for output redirection."""
    return _open_existing_for_append(log_file_path, "open log file for redirect")


def append_to_log_file(log_file_path: str | Path, content: str) -> None:
    """Append text to an existing log file."""
    with _open_existing_for_append(log_file_path, "open log file for appending") as handle:
        try:
            handle.write(content.encode("utf-8"))
            handle.flush()
            os.fsync(handle.fileno())
        except OSError as exc:
            raise LogFileError(f"Failed to write to log file: {exc}") from exc