"""Process-exec collaborator for the shell pane."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


def run(program: str, args: list[str], cwd: str, timeout: float) -> tuple[str, str | None]:
    """Run `program args...` in `cwd`, capturing stdout and stderr combined.

    Returns:
        (combined_output, error). error is None on exit status 0, otherwise a
        one-line description (exit status, spawn failure, timeout).
    """
    try:
        result = subprocess.run(
            [program, *args],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        return output, f"timed out after {timeout:g}s"
    except FileNotFoundError:
        return "", f'exec: "{program}": executable file not found'
    except OSError as e:
        return "", str(e)

    if result.returncode != 0:
        logger.debug("%s exited with %d", program, result.returncode)
        return result.stdout, f"exit status {result.returncode}"
    return result.stdout, None
