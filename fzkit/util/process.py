"""Starting shell commands and managing their process groups."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from typing import IO, Any


def exec_command(command: str, setpgid: bool = False, **kwargs: Any) -> subprocess.Popen:
    """Start command with $SHELL (or sh); extra arguments go to Popen."""
    shell = os.environ.get("SHELL") or "sh"
    return exec_command_with(shell, command, setpgid, **kwargs)


def exec_command_with(
    shell: str, command: str, setpgid: bool = False, **kwargs: Any
) -> subprocess.Popen:
    """Start command with the given shell; setpgid puts it in its own process group."""
    if setpgid:
        if sys.version_info >= (3, 11):
            kwargs.setdefault("process_group", 0)
        else:
            kwargs.setdefault("preexec_fn", os.setpgrp)
    return subprocess.Popen([shell, "-c", command], **kwargs)


def kill_command(process: subprocess.Popen) -> None:
    """Kill the whole process group led by the process."""
    os.killpg(process.pid, signal.SIGKILL)


def is_windows() -> bool:
    return sys.platform == "win32"


def set_stdin(file: IO) -> None:
    """Make file descriptor 0 refer to the given file."""
    os.dup2(file.fileno(), 0)