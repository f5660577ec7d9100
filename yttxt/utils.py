"""
yttxt.utils - Shared utility functions.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from yttxt.exceptions import ValidationError


def cleanup_directory(path: Path) -> None:
    """Recursively remove a scratch directory.

    Raises:
        ValidationError: If path is not an existing directory
    """
    if not path.is_dir():
        raise ValidationError(f"'{path}' does not appear to be a directory!")
    shutil.rmtree(path)
