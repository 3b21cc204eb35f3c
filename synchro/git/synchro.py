"""
Synchronize git working directories from a shared mirror cache.

A ``Synchronizer`` is the coordinator for one remote. It decides when the
remote's mirror needs refreshing, clones or fetches working directories and
resets them to a commit resolved from the mirror.

Synchronizers are handed out by a ``SynchroRegistry``, which keeps exactly
one instance per remote string. Every caller asking for the same remote
shares the instance, and with it the knowledge of whether the mirror was
already refreshed during this run, so the mirror is fetched once however
many working directories are synced from it.

Usage:
    registry = SynchroRegistry(cache_root=Path("~/.cache/synchro/git"))
    synchro = registry.get_or_create("https://example.com/org/apache.git")
    commit = synchro.sync("modules/apache", "v1.2.0")

Working directory lifecycle:
    absent -> cloned -> (fetched, reset)*

Every sync ends with ``git reset --hard <commit>``. The reference is
resolved to a commit on every call, never remembered, and the working
directory is always reset to that commit rather than to the reference.
A failed fetch or reset leaves the directory as git left it.

Without a cache root (or before the mirror exists with update_cache=False)
working directories are cloned and fetched straight from the remote, and
references are resolved inside the working directory: the remote-tracking
branch ``origin/<ref>`` first, then ``<ref>`` itself for tags and commits.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from .cache import CacheStore
from .command import run_git
from .exceptions import ExecutionFailure

logger = logging.getLogger(__name__)

CACHE_REMOTE = "cache"


class MirrorState(Enum):
    """Freshness of a remote's mirror, as seen by its Synchronizer."""

    ABSENT = "absent"
    STALE = "stale"
    FRESH = "fresh"


class Synchronizer:
    """Coordinate the mirror and the working directories of one remote."""

    def __init__(self, remote: str, store: Optional[CacheStore] = None):
        self.remote = remote
        self.store = store
        self.cache_path: Optional[Path] = (
            store.mirror_path(remote) if store is not None else None
        )
        self._refreshed = False
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"Synchronizer(remote={self.remote!r}, state={self.state.value})"

    @property
    def state(self) -> MirrorState:
        if not self.cached():
            return MirrorState.ABSENT
        if self._refreshed:
            return MirrorState.FRESH
        return MirrorState.STALE

    def sync(
        self,
        path: Union[str, Path],
        ref: str,
        update_cache: bool = True,
    ) -> str:
        """
        Synchronize a working directory to a reference.

        Args:
            path: Working directory, created by cloning if it has no .git
            ref: Branch, tag or commit-ish to check out
            update_cache: Refresh the mirror first, unless already done by
                          this Synchronizer

        Returns:
            The commit the working directory was reset to

        Raises:
            ValueError: If ref is empty
            ExecutionFailure: If any git command fails
        """
        if not ref:
            raise ValueError(f"No reference given to synchronize {self.remote}")
        path = Path(path).expanduser().resolve()

        if update_cache:
            self.cache()

        if self.cloned(path):
            self._fetch(path)
        else:
            self._clone(path)
        return self._reset(path, ref)

    def cached(self) -> bool:
        return self.cache_path is not None and self.cache_path.is_dir()

    @staticmethod
    def cloned(path: Path) -> bool:
        return (Path(path) / ".git").is_dir()

    def cache(self, force: bool = False) -> bool:
        """
        Refresh the mirror if this Synchronizer has not done so yet.

        Args:
            force: Refresh even if the mirror was already refreshed

        Returns:
            True if a refresh was performed
        """
        if self.store is None:
            return False
        with self._lock:
            if self._refreshed and not force:
                return False
            self.refresh_cache()
            return True

    def refresh_cache(self) -> None:
        """Unconditionally fetch into the mirror, or create it."""
        if self.store is None:
            logger.debug(f"No cache root configured, not caching {self.remote!r}")
            return
        with self._lock:
            if self.cached():
                logger.debug(f"Updating existing cache at {self.cache_path}")
                self.store.update(self.remote)
            else:
                logger.debug(f"No cache for {self.remote!r}, forcing cache build")
                self.store.create(self.remote)
            self._refreshed = True

    def branches(self, update_cache: bool = False) -> List[str]:
        """
        List the branches of the remote, in the order git reports them.

        With a cache root the branches come from the mirror, which is
        refreshed first if requested or if it does not exist yet. Without
        one the remote is queried directly.
        """
        if self.store is None:
            output = run_git(["ls-remote", "--heads", self.remote])
            heads = [line.split("\t", 1)[1] for line in output.splitlines()]
            return [head[len("refs/heads/") :] for head in heads]

        if update_cache or not self.cached():
            self.cache()
        output = run_git(["branch"], git_dir=self.cache_path)
        # Lines look like "* main" or "  develop"
        return [line[2:] for line in output.splitlines()]

    def resolve_commit(self, ref: str, path: Optional[Path] = None) -> str:
        """
        Dereference ref to a full commit id.

        The mirror is used when it exists. Otherwise the working directory
        at ``path`` is used, which must have been fetched already.

        Raises:
            ValueError: If there is no mirror and no path
            ExecutionFailure: If ref does not name a commit
        """
        if self.cached():
            try:
                return _rev_parse(ref, git_dir=self.cache_path)
            except ExecutionFailure:
                logger.error(
                    f"Could not resolve ref {ref!r} for git cache {self.cache_path}"
                )
                raise

        if path is None:
            raise ValueError(
                f"{self.remote} is not cached, a working directory is needed to resolve {ref!r}"
            )
        git_dir = Path(path) / ".git"
        try:
            return _rev_parse(f"refs/remotes/origin/{ref}", git_dir=git_dir)
        except ExecutionFailure:
            logger.debug(f"{ref!r} is not a branch of origin in {path}")
        try:
            return _rev_parse(ref, git_dir=git_dir)
        except ExecutionFailure:
            logger.error(f"Could not resolve ref {ref!r} in git repo {path}")
            raise

    def _clone(self, path: Path) -> None:
        """
        Perform a non-bare clone into path.

        With a mirror available it is used as a reference object store, and
        added as the ``cache`` remote for later fetches.
        """
        if self.cached():
            run_git(
                ["clone", "--reference", str(self.cache_path), self.remote, str(path)]
            )
            run_git(["remote", "add", CACHE_REMOTE, str(self.cache_path)], path=path)
        else:
            path.mkdir(parents=True, exist_ok=True)
            run_git(["clone", self.remote, str(path)])

    def _fetch(self, path: Path) -> None:
        if self.cached():
            # Directories cloned before the mirror existed lack the remote
            # and the mirror's object store
            if CACHE_REMOTE not in run_git(["remote"], path=path).split():
                self._add_alternate(path)
                run_git(
                    ["remote", "add", CACHE_REMOTE, str(self.cache_path)], path=path
                )
            run_git(["fetch", "--prune", CACHE_REMOTE], path=path)
        else:
            run_git(["fetch", "--prune", "origin"], path=path)

    def _add_alternate(self, path: Path) -> None:
        """
        Borrow objects from the mirror, as ``clone --reference`` does.

        Fetching from the cache remote only brings in what its branches and
        their tags reach, while references are resolved against the whole
        mirror.
        """
        alternates = path / ".git" / "objects" / "info" / "alternates"
        objects = str(self.cache_path / "objects")
        entries = alternates.read_text().splitlines() if alternates.is_file() else []
        if objects in entries:
            return
        entries.append(objects)
        alternates.parent.mkdir(parents=True, exist_ok=True)
        alternates.write_text("".join(f"{entry}\n" for entry in entries))
        logger.debug(f"Added {objects} to the alternates of {path}")

    def _reset(self, path: Path, ref: str) -> str:
        commit = self.resolve_commit(ref, path)
        try:
            run_git(["reset", "--hard", commit], path=path)
        except ExecutionFailure:
            logger.error(f"Unable to locate commit object {commit} in git repo {path}")
            raise
        logger.debug(f"Reset {path} to {ref} ({commit[:7]})")
        return commit


def _rev_parse(ref: str, git_dir: Path) -> str:
    output = run_git(["rev-parse", "--verify", f"{ref}^{{commit}}"], git_dir=git_dir)
    return output.strip()


class SynchroRegistry:
    """
    Hand out one Synchronizer per remote.

    Registries are independent of each other: each has its own cache root
    and its own set of Synchronizers.

    Args:
        cache_root: Directory holding the mirrors. None disables caching.
        store: CacheStore to use instead of one built from cache_root
    """

    def __init__(
        self,
        cache_root: Optional[Path] = None,
        store: Optional[CacheStore] = None,
    ):
        if store is None and cache_root is not None:
            store = CacheStore(cache_root)
        self.store = store
        self._synchros: Dict[str, Synchronizer] = {}
        self._lock = threading.Lock()

    @property
    def cache_root(self) -> Optional[Path]:
        return self.store.root if self.store is not None else None

    def get_or_create(self, remote: str) -> Synchronizer:
        with self._lock:
            synchro = self._synchros.get(remote)
            if synchro is None:
                synchro = Synchronizer(remote, self.store)
                self._synchros[remote] = synchro
            return synchro

    def remotes(self) -> List[str]:
        with self._lock:
            return list(self._synchros)

    def __contains__(self, remote: str) -> bool:
        return remote in self._synchros

    def __len__(self) -> int:
        return len(self._synchros)
