"""
Clipboard support for deck export.

Hands text to the first clipboard utility found on the system. Failure
is reported as a reason string, never raised.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass

from loguru import logger

# Tried in order; the first one installed wins.
CLIPBOARD_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


@dataclass
class ClipboardResult:
    """Outcome of a clipboard copy."""

    ok: bool
    reason: str | None = None


def find_clipboard_command() -> list[str] | None:
    """Return the first available clipboard command, if any."""
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str, timeout: float = 5.0) -> ClipboardResult:
    """
    Copy text to the system clipboard.

    Args:
        text: Text to copy
        timeout: Seconds to wait for the clipboard utility

    Returns:
        ClipboardResult with ok=False and a reason on failure
    """
    command = find_clipboard_command()
    if command is None:
        return ClipboardResult(ok=False, reason="No clipboard utility available")

    try:
        result = subprocess.run(
            command,
            input=text,
            text=True,
            encoding="utf-8",
            capture_output=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Clipboard command {command[0]} failed: {e}")
        return ClipboardResult(ok=False, reason=f"{command[0]} failed: {e}")

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        return ClipboardResult(ok=False, reason=f"{command[0]} failed: {detail}")

    logger.debug(f"Copied {len(text)} characters with {command[0]}")
    return ClipboardResult(ok=True)
