"""
Git mirror cache.

The cache root holds one bare mirror clone per remote, stored flat:

    ~/.cache/synchro/git/
    ├── https---example.com-org-apache.git/     # git clone --mirror
    ├── git@example.com-org-nginx.git/
    └── -srv-git-internal-tools/

The mirror directory name is derived from the remote string itself: every
character other than an ASCII word character, ``@``, ``.`` or ``-`` is
replaced with ``-``. Remotes are compared as plain strings, so two
spellings of the same remote (trailing slash, host alias) get two mirrors.

A mirror holds every ref of the remote as of its last refresh. Refreshes
go through ``git clone --mirror`` and ``git fetch --prune``, so a failed
refresh leaves the previous mirror in place. Mirrors are never deleted
here.

Usage:
    store = CacheStore(Path("~/.cache/synchro/git"))
    store.refresh("https://example.com/org/apache.git")
    store.mirror_path("https://example.com/org/apache.git")
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from .command import run_git

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^@\w.-]", re.ASCII)


def sanitize_remote(remote: str) -> str:
    """
    Turn a remote URL or path into a filesystem-safe directory name.

    Examples:
        https://example.com/org/repo.git -> https---example.com-org-repo.git
        git@example.com:org/repo.git -> git@example.com-org-repo.git
    """
    return _UNSAFE_CHARS.sub("-", remote)


class CacheStore:
    """Manage the mirror repositories kept under a cache root."""

    def __init__(self, root: Path):
        self.root = Path(root).expanduser()

    def __repr__(self) -> str:
        return f"CacheStore(root={str(self.root)!r})"

    def mirror_path(self, remote: str) -> Path:
        return self.root / sanitize_remote(remote)

    def exists(self, remote: str) -> bool:
        return self.mirror_path(remote).is_dir()

    def create(self, remote: str) -> Path:
        """Mirror-clone a remote into the cache, creating the cache root if needed."""
        mirror = self.mirror_path(remote)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {remote} to cache at {mirror}")
        run_git(["clone", "--mirror", remote, str(mirror)])
        return mirror

    def update(self, remote: str) -> Path:
        """Fetch into an existing mirror, pruning refs deleted on the remote."""
        mirror = self.mirror_path(remote)
        logger.info(f"Updating cached repository at {mirror}")
        run_git(["fetch", "--prune"], git_dir=mirror)
        return mirror

    def refresh(self, remote: str) -> Path:
        if self.exists(remote):
            return self.update(remote)
        return self.create(remote)

    def describe(self) -> List[dict]:
        """
        Describe the mirrors found under the cache root.

        Mirrors are read with dulwich, no git process is spawned.

        Returns:
            List of dictionaries, one per mirror, sorted by directory name:
            - name: Mirror directory name
            - url: Remote the mirror was cloned from ("unknown" if not recorded)
            - default_branch: Branch HEAD points to, or None
            - head: Commit HEAD resolves to, or None
            - branches: Number of branches in the mirror
        """
        if not self.root.is_dir():
            return []

        results = []
        for mirror in sorted(self.root.iterdir()):
            if not mirror.is_dir():
                continue
            try:
                with Repo(str(mirror)) as repo:
                    results.append(_describe_mirror(mirror, repo))
            except NotGitRepository:
                logger.debug(f"Skipping {mirror}, not a git repository")
        return results


def _describe_mirror(mirror: Path, repo: Repo) -> dict:
    config = repo.get_config()
    try:
        url = config.get((b"remote", b"origin"), b"url").decode("utf-8")
    except KeyError:
        url = "unknown"

    default_branch: Optional[str] = None
    head_ref = repo.refs.read_ref(b"HEAD")
    if head_ref and head_ref.startswith(b"ref: refs/heads/"):
        default_branch = head_ref[len(b"ref: refs/heads/") :].decode("utf-8")

    try:
        head: Optional[str] = repo.head().decode("ascii")
    except KeyError:
        # HEAD points at a branch the remote does not have
        head = None

    branches = [ref for ref in repo.get_refs() if ref.startswith(b"refs/heads/")]

    return {
        "name": mirror.name,
        "url": url,
        "default_branch": default_branch,
        "head": head,
        "branches": len(branches),
    }
