"""Utility functions for chunkscribe."""

import os
import re
import logging
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def collapse_whitespace(text: str) -> str:
    """Replaces every whitespace run with a single space and trims both ends."""
    return _WHITESPACE_RUN.sub(" ", text).strip()

def write_text_atomic(path: str, text: str) -> None:
    """
    Writes UTF-8 text to a file in one step.

    The content goes to a temporary sibling file first, which then replaces
    the destination, so readers never observe a half-written file.

    Args:
        path: Destination file path.
        text: The full file content.

    Raises:
        FileSystemError: If the parent directory cannot be created or the
                         file cannot be written.
    """
    parent = os.path.dirname(os.path.abspath(path))
    ensure_dir_exists(parent)
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error(f"Could not write output file {path}: {e}", exc_info=True)
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                logger.warning(f"Could not clean up temporary file: {tmp_path}")
        raise FileSystemError(f"Could not write output file {path}: {e}") from e
