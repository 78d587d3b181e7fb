# -----------------------------------------------------------------------------
# PROCESS INFRASTRUCTURE - Child Process Wrapper
# -----------------------------------------------------------------------------
# Responsibility: Launch module scripts and external tools, stream their
# merged stdout/stderr line by line, and report the exit code.
#
# Design notes:
# - The working directory is always passed explicitly (cwd=), never via
#   os.chdir. The Forge has no process-wide directory state.
# - No timeouts: module scripts may legitimately run package installs for
#   minutes. A hung child blocks the run until the operator interrupts it.
# -----------------------------------------------------------------------------

import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterator


class ProcessLaunchError(Exception):
    """Raised when a child process cannot be started at all."""

    pass


def which(command: str) -> str | None:
    """Return the absolute path of an executable on PATH, or None."""
    return shutil.which(command)


def ensure_executable(path: Path) -> None:
    """Add the execute bits to a file (chmod +x)."""
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def build_command(script: Path, *args: str) -> list[str]:
    """
    Build the argv for a module script.

    Python modules run under the current interpreter; everything else is
    executed directly so its shebang decides the interpreter.
    """
    if script.suffix == ".py":
        return [sys.executable, str(script), *args]
    ensure_executable(script)
    return [str(script), *args]


def stream_process(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    on_line: Callable[[str], None] | None = None,
) -> tuple[int, list[str]]:
    """
    Run a command to completion, streaming merged output.

    Args:
        cmd: Command parts.
        cwd: Working directory for the child.
        env: Extra environment variables layered over os.environ.
        on_line: Called with every output line (without trailing newline).

    Returns:
        Tuple of (exit_code, output_lines).

    Raises:
        ProcessLaunchError: If the command cannot be started.
    """
    child_env = os.environ.copy()
    if env:
        child_env.update(env)

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            env=child_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise ProcessLaunchError(f"Cannot start {cmd[0]}: {e}") from e

    lines: list[str] = []
    for line in _iter_lines(proc):
        lines.append(line)
        if on_line:
            on_line(line)

    return proc.wait(), lines


def _iter_lines(proc: subprocess.Popen) -> Iterator[str]:
    assert proc.stdout is not None
    with proc.stdout:
        for raw in proc.stdout:
            yield raw.rstrip("\r\n")
