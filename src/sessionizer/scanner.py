"""Directory scanner for session candidates.

Walks the root of each DirectoryRule down to its depth bounds and yields the
directories whose base name passes the rule's filter.

Traversal rules:
- Depth 0 is the rule's root itself
- Symbolic links below the root are never followed (no cycles)
- Children are visited in lexical order, parents before children
- A missing root yields nothing; an unreadable subtree is skipped
- Any other OS error aborts the scan with FilesystemFaultError
"""

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from sessionizer.errors import SessionizerError
from sessionizer.models import DirectoryRule

logger = logging.getLogger(__name__)


class FilesystemFaultError(SessionizerError):
    """Raised when the filesystem fails while scanning a rule."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Filesystem error while scanning {path}: {message}")


def scan(rule: DirectoryRule) -> Iterator[Path]:
    """Lazily yield the directories selected by a rule.

    Args:
        rule: Rule to evaluate

    Yields:
        Directory paths at depth [min_depth, max_depth] whose base name
        fully matches the rule's name filter

    Raises:
        FilesystemFaultError: On I/O errors other than missing paths or
            permission denials
    """
    root = rule.path
    if not root.is_dir():
        logger.debug(f"Skipping rule '{rule.id}': {root} is not a directory")
        return

    yield from _walk(rule, root, 0)


def scan_all(rules: Iterable[DirectoryRule]) -> Iterator[Path]:
    """Yield the scan results of every rule, rule after rule."""
    for rule in rules:
        logger.debug(
            f"Scanning {rule.path} (depth {rule.min_depth}..{rule.max_depth}, "
            f"filter {rule.name_filter!r})"
        )
        yield from scan(rule)


def _walk(rule: DirectoryRule, directory: Path, depth: int) -> Iterator[Path]:
    if depth >= rule.min_depth and rule.matches_name(directory.name):
        yield directory

    if depth >= rule.max_depth:
        return

    for child in _list_subdirectories(directory):
        yield from _walk(rule, child, depth + 1)


def _list_subdirectories(directory: Path) -> list[Path]:
    """List the real (non-symlink) subdirectories of a directory, sorted by name."""
    try:
        with os.scandir(directory) as entries:
            names = sorted(
                entry.name for entry in entries if entry.is_dir(follow_symlinks=False)
            )
    except PermissionError:
        logger.debug(f"Permission denied, skipping {directory}")
        return []
    except (FileNotFoundError, NotADirectoryError):
        # Removed between listing its parent and descending into it
        logger.debug(f"Directory vanished during scan, skipping {directory}")
        return []
    except OSError as e:
        raise FilesystemFaultError(directory, str(e)) from e

    return [directory / name for name in names]


__all__ = ["FilesystemFaultError", "scan", "scan_all"]
