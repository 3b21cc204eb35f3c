"""Run the git executable with explicit repository locations."""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from git.cmd import Git

from .exceptions import ExecutionFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_git = Git()


def git_command(
    args: Sequence[str],
    git_dir: Optional[PathLike] = None,
    work_tree: Optional[PathLike] = None,
    path: Optional[PathLike] = None,
) -> List[str]:
    """
    Build the argument list for a git invocation.

    Args:
        args: git subcommand and its arguments
        git_dir: Repository (object database) location, passed as --git-dir
        work_tree: Working tree location, passed as --work-tree
        path: Shorthand for a non-bare repository: sets git_dir to
              ``<path>/.git`` and work_tree to ``<path>``. Takes precedence
              over git_dir and work_tree.

    Returns:
        The full command, starting with the git executable
    """
    command = [Git.GIT_PYTHON_GIT_EXECUTABLE or "git"]
    if path is not None:
        command += ["--git-dir", str(Path(path) / ".git"), "--work-tree", str(path)]
    else:
        if git_dir is not None:
            command += ["--git-dir", str(git_dir)]
        if work_tree is not None:
            command += ["--work-tree", str(work_tree)]
    command += list(args)
    return command


def run_git(
    args: Sequence[str],
    git_dir: Optional[PathLike] = None,
    work_tree: Optional[PathLike] = None,
    path: Optional[PathLike] = None,
) -> str:
    """
    Run a git command and return its standard output.

    stdout is returned verbatim, trailing newline included.

    Raises:
        ExecutionFailure: If git exits with a non-zero status. The exception
            carries the exit code, stdout verbatim and stderr. GitPython
            drops one trailing newline from stderr, so ``stderr`` lacks the
            final newline git printed.
    """
    command = git_command(args, git_dir=git_dir, work_tree=work_tree, path=path)
    log_event = " ".join(command)
    logger.debug(f"Execute: '{log_event}'")

    status, stdout, stderr = _git.execute(
        command,
        with_extended_output=True,
        with_exceptions=False,
        strip_newline_in_stdout=False,
    )

    if stdout:
        logger.debug(f"[{log_event}] STDOUT: {stdout.rstrip()}")
    if stderr:
        logger.debug(f"[{log_event}] STDERR: {stderr.rstrip()}")

    if status != 0:
        raise ExecutionFailure(command, status, stdout, stderr)
    return stdout
