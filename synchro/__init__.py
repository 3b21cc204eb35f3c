"""Git working directory synchronization backed by a shared mirror cache."""

__version__ = "0.1.0"
