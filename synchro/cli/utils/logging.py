import logging
import sys


logger = logging.getLogger("synchro")


def configure_logging(debug: bool):
    """
    Send synchro's log records to stdout, at DEBUG level in debug mode.

    GitPython logs each git process it spawns under the "git" logger; those
    records only get through in debug mode.
    """
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logging.getLogger("git").setLevel(logging.DEBUG if debug else logging.WARNING)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
