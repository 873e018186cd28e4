"""
Ordering Validator — Cross-file checks over a set of migration files.

Checks are independent; one file can trigger several issues:

    duplicate-version   two files share a version          (critical)
    out-of-order        supplied order goes backwards      (critical)
    gap                 sequential numbering skips values  (warning)
    missing-dependency  table used before any file makes it (warning)
    invalid-name        file name carries no version        (warning)
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import Iterable, Sequence

from lockguard.core.targets import created_tables, referenced_tables
from lockguard.models.ordering_models import MigrationFile, OrderingIssue, VersionScheme
from lockguard.models.rule_models import Severity
from lockguard.models.statement_models import ParsedStatement

logger = logging.getLogger("lockguard.core.ordering")

_TIMESTAMP_RE = re.compile(r"^(\d{14})(?:[_.-]|$)")
_FLYWAY_RE = re.compile(r"^[Vv]?(\d+(?:\.\d+)*)__")
_NUMERIC_RE = re.compile(r"^(\d+)(?:[_.-]|$)")
_NATURAL_RE = re.compile(r"(\d+)")


def parse_version(filename: str) -> tuple[tuple[int, ...] | None, VersionScheme | None]:
    """
    Extract the version from a migration file name.

    Returns:
        (version, scheme), or (None, None) when the name has no version.
    """
    name = PurePath(filename).name

    match = _TIMESTAMP_RE.match(name)
    if match:
        return (int(match.group(1)),), "timestamp"

    match = _FLYWAY_RE.match(name)
    if match:
        return tuple(int(part) for part in match.group(1).split(".")), "flyway"

    match = _NUMERIC_RE.match(name)
    if match:
        return (int(match.group(1)),), "sequential"

    return None, None


def natural_key(name: str) -> tuple:
    """Sort key that orders embedded numbers numerically: m2 < m10."""
    return tuple(
        (0, int(part)) if part.isdigit() else (1, part.lower())
        for part in _NATURAL_RE.split(name)
        if part
    )


def _normalize_table(name: str) -> str:
    return name.rsplit(".", 1)[-1].strip('"').lower()


def build_migration_file(path: str, statements: Sequence[ParsedStatement]) -> MigrationFile:
    version, scheme = parse_version(path)
    created: set[str] = set()
    referenced: set[str] = set()
    for entry in statements:
        created.update(_normalize_table(t) for t in created_tables(entry.node))
        referenced.update(_normalize_table(t) for t in referenced_tables(entry.node))

    return MigrationFile(
        path=path,
        name=PurePath(path).name,
        version=version,
        scheme=scheme,
        created_tables=tuple(sorted(created)),
        referenced_tables=tuple(sorted(referenced)),
    )


def build_migration_files(
    entries: Iterable[tuple[str, Sequence[ParsedStatement]]],
) -> list[MigrationFile]:
    """Summarise (path, statements) pairs, keeping the supplied order."""
    return [build_migration_file(path, statements) for path, statements in entries]


def sort_files(files: Sequence[MigrationFile]) -> list[MigrationFile]:
    """Execution order: versioned files by version, then the rest by natural name order."""
    versioned = sorted((f for f in files if f.version is not None), key=lambda f: f.version)
    unversioned = sorted((f for f in files if f.version is None), key=lambda f: natural_key(f.name))
    return versioned + unversioned


def validate_ordering(
    files: Sequence[MigrationFile],
    known_tables: Iterable[str] = (),
) -> list[OrderingIssue]:
    """
    Validate a set of migration files.

    Args:
        files: File summaries in the order the caller supplied them.
        known_tables: Tables that exist before the first migration runs.

    Returns:
        Issues grouped by check, deterministic for the same input.
    """
    issues: list[OrderingIssue] = []
    issues.extend(_check_invalid_names(files))
    issues.extend(_check_duplicates(files))
    issues.extend(_check_out_of_order(files))
    issues.extend(_check_gaps(files))
    issues.extend(_check_dependencies(files, known_tables))

    if issues:
        logger.info(f"Ordering check over {len(files)} files found {len(issues)} issues")
    return issues


def _format_version(version: tuple[int, ...]) -> str:
    return ".".join(str(part) for part in version)


def _check_invalid_names(files: Sequence[MigrationFile]) -> list[OrderingIssue]:
    return [
        OrderingIssue(
            kind="invalid-name",
            severity=Severity.WARNING,
            message=(
                f'"{f.name}" has no version prefix (expected V<n>__name, <n>_name or a '
                f"14-digit timestamp); it will sort after all versioned files."
            ),
            files=(f.path,),
        )
        for f in files
        if f.version is None
    ]


def _check_duplicates(files: Sequence[MigrationFile]) -> list[OrderingIssue]:
    by_version: dict[tuple[int, ...], list[str]] = {}
    for f in files:
        if f.version is not None:
            by_version.setdefault(f.version, []).append(f.path)

    return [
        OrderingIssue(
            kind="duplicate-version",
            severity=Severity.CRITICAL,
            message=f"Version {_format_version(version)} is used by {len(paths)} files: {', '.join(paths)}",
            files=tuple(paths),
        )
        for version, paths in sorted(by_version.items())
        if len(paths) > 1
    ]


def _check_out_of_order(files: Sequence[MigrationFile]) -> list[OrderingIssue]:
    versioned = [f for f in files if f.version is not None]
    issues: list[OrderingIssue] = []
    for prev, cur in zip(versioned, versioned[1:]):
        if cur.version < prev.version:
            issues.append(
                OrderingIssue(
                    kind="out-of-order",
                    severity=Severity.CRITICAL,
                    message=(
                        f'"{cur.name}" (version {_format_version(cur.version)}) comes after '
                        f'"{prev.name}" (version {_format_version(prev.version)})'
                    ),
                    files=(prev.path, cur.path),
                )
            )
    return issues


def _check_gaps(files: Sequence[MigrationFile]) -> list[OrderingIssue]:
    versioned = [f for f in files if f.version is not None]
    if not versioned:
        return []
    # Timestamps and dotted versions are not expected to be contiguous
    if any(f.scheme == "timestamp" or len(f.version) != 1 for f in versioned):
        return []

    first_file: dict[int, MigrationFile] = {}
    for f in sort_files(versioned):
        first_file.setdefault(f.version[0], f)

    numbers = sorted(first_file)
    issues: list[OrderingIssue] = []
    for lo, hi in zip(numbers, numbers[1:]):
        if hi - lo <= 1:
            continue
        missing = f"{lo + 1}" if hi - lo == 2 else f"{lo + 1}-{hi - 1}"
        issues.append(
            OrderingIssue(
                kind="gap",
                severity=Severity.WARNING,
                message=(
                    f'Version gap between "{first_file[lo].name}" and "{first_file[hi].name}": '
                    f"missing {missing}"
                ),
                files=(first_file[lo].path, first_file[hi].path),
            )
        )
    return issues


def _check_dependencies(
    files: Sequence[MigrationFile],
    known_tables: Iterable[str],
) -> list[OrderingIssue]:
    available = {_normalize_table(t) for t in known_tables}
    issues: list[OrderingIssue] = []

    for f in sort_files(files):
        in_scope = available | set(f.created_tables)
        for table in f.referenced_tables:
            if table in in_scope:
                continue
            issues.append(
                OrderingIssue(
                    kind="missing-dependency",
                    severity=Severity.WARNING,
                    message=(
                        f'"{f.name}" references table "{table}", which no earlier migration '
                        f"creates and is not a known table"
                    ),
                    files=(f.path,),
                )
            )
        available.update(f.created_tables)

    return issues
