"""Configuration lookup and the location of the git mirror cache"""

import configparser
import logging
import os
import platform
from typing import Any, List, Optional

from pathlib import Path

APP_NAME = "synchro"
CONFIG_FILENAME = f"{APP_NAME}.cfg"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")
xdg_cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(_home, ".cache")


default_cfg = {"dirs": {"git_cache": os.path.join(xdg_cache_home, APP_NAME, "git")}}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/synchro").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))

system_config_file = Path("/etc") / CONFIG_FILENAME


def config_search_path(start: Optional[Path] = None) -> List[Path]:
    """
    List the candidate config files, most specific first.

    The start directory (defaults to cwd) and each of its parents, then the
    user config directory, then /etc.
    """
    start = Path.cwd() if start is None else Path(start)
    start = start.resolve()

    candidates = [directory / CONFIG_FILENAME for directory in (start, *start.parents)]
    candidates.append(config_dir / CONFIG_FILENAME)
    candidates.append(system_config_file)
    return candidates


def search_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Returns:
        The first existing config file on the search path, or None
    """
    for candidate in config_search_path(start):
        if candidate.is_file():
            return candidate
    return None


def get_config_file() -> Path:
    """The config file in use: the first one found, else the user config file."""
    return search_config_file() or config_dir / CONFIG_FILENAME


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing files, sections and keys are not errors: lookups fall back to
    the given default.

    Usage:
        config = ConfigAccessor()
        value = config.get('dirs', 'git_cache', default='~/.cache/synchro/git')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Path to the configuration file. If None, the search
                         path is used.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            logger.debug(f"Reading configuration from {self.config_path}")
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)

        self.config[section][key] = value

    def save(self) -> None:
        """
        Save the current configuration to the config file.

        Fails gracefully if the file cannot be written (e.g., read-only filesystem).
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as configfile:
                self.config.write(configfile)
        except OSError as e:
            logger.warning(
                f"Could not save configuration to {self.config_path}: {e}. "
                "Configuration changes will not persist."
            )

    def sections(self) -> list:
        return self.config.sections()

    def options(self, section: str) -> list:
        """
        Returns:
            List of options in the section or empty list if section doesn't exist
        """
        try:
            return self.config.options(section)
        except configparser.NoSectionError:
            return []


# Create a global config accessor instance
config = ConfigAccessor()


def get_git_cache_dir() -> Path:
    """
    Get the configured root directory of the git mirror cache.

    The directory is not created here; it is created with the first mirror.

    Returns:
        Path to the cache root (defaults to $XDG_CACHE_HOME/synchro/git)
    """
    git_cache_dir_str = config.get(
        "dirs", "git_cache", default_cfg["dirs"]["git_cache"]
    )
    return Path(git_cache_dir_str).expanduser()
