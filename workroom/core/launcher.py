"""Opening and revealing paths with the operating system's default handlers."""

import logging
from pathlib import Path

import click


logger = logging.getLogger(__name__)


def open_path(path: Path) -> bool:
    """Open ``path`` with its default application. Returns ``True`` on success."""
    try:
        code = click.launch(str(path))
    except OSError as e:
        logger.error(f"Error opening {path}: {e}")
        return False
    if code != 0:
        logger.error(f"Error opening {path}: launcher exited with {code}")
    return code == 0


def reveal_path(path: Path) -> bool:
    """Show ``path`` in the file manager. Returns ``True`` on success."""
    try:
        code = click.launch(str(path), locate=True)
    except OSError as e:
        logger.error(f"Failed to reveal {path}: {e}")
        return False
    if code != 0:
        logger.error(f"Failed to reveal {path}: launcher exited with {code}")
    return code == 0
