"""Path checks shared by the height map adapters.

Every adapter validates its input the same way before opening it: the file
must exist, carry an allowed extension, not be a symlink, be non-empty and
fit the size budget. Errors are logged by file name only.
"""

from __future__ import annotations

import logging
from pathlib import Path

from domain.visibility.errors import ForestSightError, InsufficientMemoryError

logger = logging.getLogger(__name__)


def log_os_error(action: str, path: Path, error: OSError) -> None:
    """Log an OSError by file name, errno and strerror (never the full path)."""
    logger.error(
        "Failed to %s %s (errno=%s, strerror=%s)",
        action,
        path.name,
        getattr(error, "errno", "unknown"),
        getattr(error, "strerror", "unknown"),
    )


def check_height_map_file(
    path: Path,
    *,
    suffixes: tuple[str, ...],
    invalid: type[ForestSightError],
    max_file_bytes: int | None = None,
) -> int:
    """Validate ``path`` before an adapter opens it.

    Args:
        path: Candidate height map file
        suffixes: Allowed lower-case extensions ("" for none)
        invalid: Adapter-specific error raised for a bad extension, a symlink
            or an empty file
        max_file_bytes: Upper bound on the file size, or None for no bound

    Returns:
        File size in bytes

    Raises:
        FileNotFoundError: If the path does not exist
        InsufficientMemoryError: If the file is larger than max_file_bytes
        OSError: If stat fails (logged first)
    """
    if not path.exists():
        raise FileNotFoundError(str(path))

    if path.suffix.lower() not in suffixes:
        raise invalid(f"Unsupported file extension: {path.suffix}")

    try:
        # Reject symlinks explicitly to avoid traversal
        if path.is_symlink():
            raise invalid("Symlinks are not permitted")
        size = path.stat().st_size
    except OSError as e:
        log_os_error("stat", path, e)
        raise

    if size == 0:
        raise invalid("Empty file")
    if max_file_bytes is not None and size > max_file_bytes:
        raise InsufficientMemoryError(
            f"File size {size}B exceeds budget {max_file_bytes}B"
        )
    return size
