"""Subprocess helpers shared by the git and theme CLI adapters."""

import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

# Exit status reported when the executable itself cannot be started
EXIT_NOT_FOUND = 127


def run_command(
    args: List[str],
    cwd: Optional[Union[str, Path]] = None,
) -> Tuple[int, str, str]:
    """Run a command synchronously and capture its output.

    Args:
        args: Command and arguments, passed without a shell
        cwd: Working directory for the command

    Returns:
        Tuple of (exit status, stdout, stderr)
    """
    try:
        result = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
        )
        return result.returncode, result.stdout, result.stderr.strip()
    except OSError as exc:
        return EXIT_NOT_FOUND, "", str(exc)


def redact(args: Iterable[str], secrets: Iterable[str]) -> List[str]:
    """Return a copy of ``args`` with every secret value masked."""
    masked = []
    hidden = [s for s in secrets if s]
    for arg in args:
        for secret in hidden:
            arg = arg.replace(secret, "***")
        masked.append(arg)
    return masked
