"""
Deploy modules, one synchronization at a time.

A failed synchronization is reported and the remaining modules are still
deployed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Protocol

import click

from synchro.git import ExecutionFailure

logger = logging.getLogger(__name__)


class Deployable(Protocol):
    name: str
    full_path: Path

    def sync(self, update_cache: bool = True) -> str: ...


@dataclass
class DeployReport:
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def deploy_module(
    module: Deployable, update_cache: bool = True, trace: bool = False
) -> bool:
    """
    Synchronize a single module.

    Args:
        module: Anything with a name, a full_path and a sync method
        update_cache: Passed on to the module's sync
        trace: Log the traceback of a failed synchronization

    Returns:
        True if the module was synchronized, False if git failed
    """
    logger.info(f"Deploying module {module.name}")
    try:
        module.sync(update_cache=update_cache)
    except ExecutionFailure as e:
        logger.error(
            click.style(f"Could not synchronize {module.full_path}: {e}", fg="red"),
            exc_info=trace,
        )
        if e.stderr:
            logger.debug(e.stderr.rstrip())
        return False
    return True


def deploy_modules(
    modules: Iterable[Deployable], update_cache: bool = True, trace: bool = False
) -> DeployReport:
    """Deploy every module in order, whatever happens to the others."""
    report = DeployReport()
    for module in modules:
        if deploy_module(module, update_cache=update_cache, trace=trace):
            report.succeeded.append(module.name)
        else:
            report.failed.append(module.name)
    return report
