"""Git branch lookup."""

from pathlib import Path
from typing import Optional, Union

from .exceptions import VcsError
from .utils.shell import run_command


def current_branch(cwd: Optional[Union[str, Path]] = None) -> str:
    """Return the name of the checked-out git branch.

    All whitespace, including embedded newlines, is removed from git's output.

    Args:
        cwd: Directory inside the repository. Defaults to the current directory.

    Raises:
        VcsError: If git is unavailable, ``cwd`` is not inside a repository,
            or HEAD is detached
    """
    returncode, stdout, stderr = run_command(["git", "branch", "--show-current"], cwd=cwd)
    if returncode != 0:
        raise VcsError(
            f"Could not determine the current git branch: {stderr or 'git exited with status ' + str(returncode)}",
            details={"returncode": returncode},
        )

    branch = "".join(stdout.split())
    if not branch:
        raise VcsError("No branch is checked out (detached HEAD)")
    return branch
