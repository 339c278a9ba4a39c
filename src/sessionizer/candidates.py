"""Candidate builder.

Merges the session history, the explicit session names from the config and
the scanned directories into one ordered list of unique candidates:

1. history entries, most recent first
2. explicit session names, in config order
3. scanned directories, rule then lexical order

The identifier is the deduplication key and doubles as the tmux session name.
Inputs are merged in precedence order (history > explicit > scanned), so the
first occurrence keeps its position and names the candidate; a later
occurrence only fills in a missing path.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from pathlib import Path

from sessionizer.models import Candidate, CandidateOrigin, HistoryEntry, sanitize_identifier

logger = logging.getLogger(__name__)


def _components(path: Path) -> tuple[str, ...]:
    parts = path.parts
    if path.anchor:
        parts = parts[1:]
    return parts or (path.anchor or str(path),)


def derive_identifiers(paths: Iterable[Path]) -> dict[Path, str]:
    """Derive a unique session identifier for every distinct path.

    The identifier is the base name unless several paths share it, in which
    case each of them gets the shortest run of trailing components that tells
    it apart from the others (``work/api`` vs ``personal/api``).

    Components are sanitized before they are compared, so ``x.y`` and ``x·y``
    collide like any other pair of equal names. Paths that stay equal after
    sanitizing in full get a ``~2``, ``~3``... suffix in input order.

    Args:
        paths: Scanned directory paths (duplicates allowed)

    Returns:
        Mapping of each distinct path to its identifier
    """
    unique = list(dict.fromkeys(paths))
    components = {
        path: tuple(sanitize_identifier(part) for part in _components(path)) for path in unique
    }
    lengths = dict.fromkeys(unique, 1)

    while True:
        groups: dict[tuple[str, ...], list[Path]] = defaultdict(list)
        for path in unique:
            groups[components[path][-lengths[path] :]].append(path)

        grown = False
        for members in groups.values():
            if len(members) < 2:
                continue
            for path in members:
                if lengths[path] < len(components[path]):
                    lengths[path] += 1
                    grown = True
        if not grown:
            break

    identifiers: dict[Path, str] = {}
    taken: set[str] = set()
    for path in unique:
        base = "/".join(components[path][-lengths[path] :])
        identifier, counter = base, 1
        while identifier in taken:
            counter += 1
            identifier = f"{base}~{counter}"
        taken.add(identifier)
        identifiers[path] = identifier
    return identifiers


def build_candidates(
    scanned: Iterable[Path],
    history: Sequence[HistoryEntry] = (),
    explicit: Sequence[str] = (),
    known_paths: Mapping[str, Path] | None = None,
) -> list[Candidate]:
    """Build the ordered, deduplicated candidate list.

    Args:
        scanned: Scan results of every rule, concatenated in rule order
        history: History entries (any order; sorted by recency rank)
        explicit: Explicit session names from the config, in config order
        known_paths: Last known directory of history identifiers

    Returns:
        Candidates with unique identifiers, history first, then explicit
        names, then scanned directories
    """
    known_paths = known_paths or {}
    scanned = list(scanned)
    identifiers = derive_identifiers(scanned)

    merged: dict[str, Candidate] = {}

    def add(candidate: Candidate) -> None:
        existing = merged.get(candidate.identifier)
        if existing is None:
            merged[candidate.identifier] = candidate
            return

        if existing.path is None and candidate.path is not None:
            merged[candidate.identifier] = replace(existing, path=candidate.path)

    for entry in sorted(history, key=lambda e: e.recency_rank):
        add(
            Candidate(
                identifier=sanitize_identifier(entry.identifier),
                path=known_paths.get(entry.identifier),
                origin=CandidateOrigin.HISTORY,
            )
        )

    for name in explicit:
        name = sanitize_identifier(name.strip())
        if name:
            add(Candidate(identifier=name, path=None, origin=CandidateOrigin.EXPLICIT))

    for path in scanned:
        add(Candidate(identifier=identifiers[path], path=path, origin=CandidateOrigin.SCANNED))

    logger.debug(
        f"Built {len(merged)} candidates from {len(history)} history entries, "
        f"{len(explicit)} explicit sessions and {len(scanned)} scanned directories"
    )
    return list(merged.values())


__all__ = ["build_candidates", "derive_identifiers", "sanitize_identifier"]
