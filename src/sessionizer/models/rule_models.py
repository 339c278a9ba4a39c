"""
Directory Rule Models

A DirectoryRule describes one root directory to scan for session candidates.

Philosophy:
- Single responsibility: rule data and its invariants only
- Zero dependencies: No imports from other sessionizer modules
- Validation at construction: an invalid rule never reaches the scanner
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_NAME_FILTER = ".*"


@dataclass(frozen=True)
class DirectoryRule:
    """A declarative directory scanning rule.

    Depth 0 is the root path itself, depth 1 its direct children, and so on.
    The name filter must match a directory's base name in full.

    Attributes:
        id: Unique identifier of the rule within its rule set
        path: Absolute root path to scan (may not exist yet)
        min_depth: Minimum depth of reported directories (inclusive)
        max_depth: Maximum depth of reported directories (inclusive)
        name_filter: Regular expression matched against base names

    Raises:
        ValueError: If depths are inconsistent, the path is relative or the
            filter is not a valid regular expression
    """

    id: str
    path: Path
    min_depth: int = 1
    max_depth: int = 1
    name_filter: str = DEFAULT_NAME_FILTER
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Directory rule id cannot be empty")

        path = Path(self.path).expanduser()
        if not path.is_absolute():
            raise ValueError(f"Directory rule path must be absolute: {self.path}")
        object.__setattr__(self, "path", path)

        if self.min_depth < 0:
            raise ValueError(f"mindepth must be >= 0 (rule '{self.id}': {self.min_depth})")
        if self.max_depth < self.min_depth:
            raise ValueError(
                f"maxdepth must be >= mindepth (rule '{self.id}': "
                f"mindepth={self.min_depth}, maxdepth={self.max_depth})"
            )

        try:
            pattern = re.compile(self.name_filter)
        except re.error as e:
            raise ValueError(
                f"Invalid name filter for rule '{self.id}': {self.name_filter!r} ({e})"
            ) from e
        object.__setattr__(self, "pattern", pattern)

    def matches_name(self, name: str) -> bool:
        """Check whether a base name passes the rule's name filter."""
        return self.pattern.fullmatch(name) is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary stored in the config file."""
        return {
            "id": self.id,
            "path": str(self.path),
            "mindepth": self.min_depth,
            "maxdepth": self.max_depth,
            "grep": self.name_filter,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DirectoryRule":
        """Create from a config file table.

        The id defaults to the path as written in the file.
        """
        if "path" not in data:
            raise ValueError("Directory rule is missing required field 'path'")

        path = str(data["path"])
        return cls(
            id=str(data.get("id") or path),
            path=Path(path),
            min_depth=int(data.get("mindepth", 1)),
            max_depth=int(data.get("maxdepth", 1)),
            name_filter=str(data.get("grep") or DEFAULT_NAME_FILTER),
        )


__all__ = ["DEFAULT_NAME_FILTER", "DirectoryRule"]
