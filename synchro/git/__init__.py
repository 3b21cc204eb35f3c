"""
Git operations for synchro.

Two layers:
    - Cache layer: one bare mirror per remote under the cache root
      (``CacheStore``), refreshed at most once per run by default.
    - Work layer: working directories cloned with the mirror as reference
      object store, then fetched and hard-reset to a resolved commit
      (``Synchronizer``).

``SynchroRegistry`` ties the two together and hands out one
``Synchronizer`` per remote.
"""

from .cache import CacheStore, sanitize_remote
from .command import git_command, run_git
from .exceptions import ExecutionFailure
from .synchro import MirrorState, Synchronizer, SynchroRegistry

__all__ = [
    "CacheStore",
    "ExecutionFailure",
    "MirrorState",
    "SynchroRegistry",
    "Synchronizer",
    "git_command",
    "run_git",
    "sanitize_remote",
]
