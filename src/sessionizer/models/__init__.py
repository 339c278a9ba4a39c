"""
Sessionizer Data Models

Shared dataclasses and data structures to avoid circular dependencies.

Philosophy:
- Zero dependencies on other sessionizer modules
- Self-contained data definitions
- Shared types used across multiple modules
"""

from .rule_models import DEFAULT_NAME_FILTER, DirectoryRule
from .session_models import (
    Cancelled,
    Candidate,
    CandidateOrigin,
    Chosen,
    HistoryEntry,
    Selection,
    SessionSnapshot,
    sanitize_identifier,
)

__all__ = [
    "DEFAULT_NAME_FILTER",
    "Cancelled",
    "Candidate",
    "CandidateOrigin",
    "Chosen",
    "DirectoryRule",
    "HistoryEntry",
    "Selection",
    "SessionSnapshot",
    "sanitize_identifier",
]
