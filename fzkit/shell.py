"""Quoting a single entry for the shell that will run a command."""

from __future__ import annotations

import os
import re
from typing import Optional

_CMD_SPECIAL = re.compile(r'[&|<>()@^%!"]')


def quote_entry(entry: str, shell: Optional[str] = None) -> str:
    """Quote entry for the given shell; by default $SHELL, else cmd."""
    if not shell:
        shell = os.environ.get("SHELL") or "cmd"

    if "cmd" in shell:
        escaped = entry.replace("\\", "\\\\")
        escaped = '"' + escaped.replace('"', '\\"') + '"'
        # caret escapes the shell's own metacharacters
        return _CMD_SPECIAL.sub(lambda m: "^" + m.group(0), escaped)
    if "pwsh" in shell or "powershell" in shell:
        escaped = entry.replace('"', '\\"')
        return "'" + escaped.replace("'", "''") + "'"
    return "'" + entry.replace("'", "'\\''") + "'"