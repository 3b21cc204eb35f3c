"""
Exception classes for the git module.
"""

from typing import List, Optional


class ExecutionFailure(Exception):
    """Raised when an invoked git command exits with a non-zero status."""

    def __init__(
        self,
        command: List[str],
        exit_code: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"{' '.join(command)!r} returned with non-zero exit value {exit_code}"
        )
