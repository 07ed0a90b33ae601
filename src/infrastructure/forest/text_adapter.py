"""Text adapter for HeightMapRepository.

Reads height maps written as lines of single-digit characters, one grid row
per line (e.g. ``30373``), and returns a row-major list of integer heights.
"""

from __future__ import annotations

import logging
from pathlib import Path

from domain.visibility.errors import InvalidHeightMapError, MalformedGridError
from infrastructure.forest.preflight import check_height_map_file, log_os_error

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

# Puzzle inputs usually ship without an extension
SUPPORTED_SUFFIXES = ("", ".txt")


def parse_height_map(text: str) -> list[list[int]]:
    """Parse digit rows into a height matrix.

    Trailing whitespace on each line and trailing blank lines are ignored.

    Raises:
        InvalidHeightMapError: If there are no rows or a character is not 0-9
        MalformedGridError: If rows have differing lengths
    """
    lines = [line.rstrip() for line in text.splitlines()]
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise InvalidHeightMapError("Empty height map")

    matrix: list[list[int]] = []
    for line_no, line in enumerate(lines, start=1):
        row: list[int] = []
        for col_no, char in enumerate(line, start=1):
            # str.isdigit() also accepts e.g. superscripts; restrict to ASCII
            if char not in "0123456789":
                raise InvalidHeightMapError(
                    f"Invalid height character {char!r}", line=line_no, column=col_no
                )
            row.append(ord(char) - ord("0"))
        matrix.append(row)

    width = len(matrix[0])
    for line_no, row in enumerate(matrix, start=1):
        if len(row) != width:
            raise MalformedGridError(
                f"Line {line_no} has {len(row)} heights, expected {width}"
            )

    return matrix


class TextHeightMapAdapter:
    """Infrastructure adapter for loading digit text height maps.

    Parameters
    ----------
    max_bytes: int | None
        Optional budget for the file size. Files larger than this raise
        InsufficientMemoryError before being read.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    def load_heights(self, file_path: Path | str) -> list[list[int]]:
        """Load a text height map and return its rows of integer heights."""
        path = Path(file_path)

        check_height_map_file(
            path,
            suffixes=SUPPORTED_SUFFIXES,
            invalid=InvalidHeightMapError,
            max_file_bytes=self.max_bytes,
        )

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            log_os_error("read", path, e)
            raise
        except UnicodeDecodeError as e:
            raise InvalidHeightMapError(f"File is not UTF-8 text: {e.reason}") from e

        matrix = parse_height_map(text)
        logger.debug(
            "Height map %s: Loaded %dx%d grid", path.name, len(matrix[0]), len(matrix)
        )
        return matrix
