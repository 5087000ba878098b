"""Launching processes that keep running in the background."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import BinaryIO, Sequence


class ProcessLaunchError(OSError):
    """A process could not be started."""


def launch_detached_process(
    cmd: Sequence[str | os.PathLike[str]],
    working_dir: str | Path,
    log_file: BinaryIO,
    process_name: str,
) -> int:
    """Start *cmd* in *working_dir* with output sent to *log_file* and return its PID.

    The child's stdin is detached, ``CARGO_MANIFEST_DIR`` is set to the working
    directory, and the log file handle is closed in this process afterwards.
    """
    env = dict(os.environ)
    env["CARGO_MANIFEST_DIR"] = str(working_dir)
    try:
        with log_file:
            child = subprocess.Popen(
                [os.fspath(part) for part in cmd],
                cwd=str(working_dir),
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=log_file,
            )
    except OSError as exc:
        raise ProcessLaunchError(f"Failed to launch {process_name}: {exc}") from exc
    return child.pid