"""Helpers for building git repositories in tests."""

import os
import subprocess
from pathlib import Path
from typing import Dict, Optional

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@test",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@test",
}


def git(*args: str, cwd: Optional[Path] = None) -> str:
    """Run git for test setup, failing loudly."""
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, **GIT_ENV},
    )
    return result.stdout.strip()


class RemoteRepo:
    """Helper class standing in for a remote repository.

    A plain (non-bare) repository on disk, whose path is used as the remote
    URL. Starts on an unborn ``main`` branch.
    """

    def __init__(self, path: Path):
        self.path = path
        self.path.mkdir(parents=True)
        git("init", "-q", cwd=path)
        git("symbolic-ref", "HEAD", "refs/heads/main", cwd=path)

    @property
    def url(self) -> str:
        return str(self.path)

    def commit(self, files: Dict[str, Optional[str]], message: str = "update") -> str:
        """Write (or delete, for None) files and commit them.

        Returns:
            The new commit id
        """
        for name, content in files.items():
            target = self.path / name
            if content is None:
                target.unlink()
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        git("add", "-A", cwd=self.path)
        git("commit", "-q", "-m", message, cwd=self.path)
        return self.head()

    def head(self) -> str:
        return git("rev-parse", "HEAD", cwd=self.path)

    def branch(self, name: str, start: str = "HEAD"):
        git("branch", name, start, cwd=self.path)

    def delete_branch(self, name: str):
        git("branch", "-D", name, cwd=self.path)

    def checkout(self, name: str):
        git("checkout", "-q", name, cwd=self.path)

    def tag(self, name: str):
        git("tag", "-a", name, "-m", name, cwd=self.path)
