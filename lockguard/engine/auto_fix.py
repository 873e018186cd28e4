"""
Auto-Fix — Rewrites unsafe statements for rules with a mechanical fix.

Fixable rules, one transform each:

    LG001  CREATE [UNIQUE] INDEX  ->  CREATE [UNIQUE] INDEX CONCURRENTLY
    LG004  prepend SET lock_timeout
    LG009  DROP INDEX  ->  DROP INDEX CONCURRENTLY
    LG014  prepend SET statement_timeout
    LG020  ADD ... CHECK (...)  ->  ADD ... CHECK (...) NOT VALID

Transforms emit Edit lists relative to the current statement text. When several
fixable violations hit one statement they run in ascending rule-id order and
each transform re-reads the statement as rewritten by the previous one.
Everything else is returned untouched in ``unfixable``.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from typing import Callable, Sequence

from lockguard.models.fix_models import Edit, FixResult
from lockguard.models.rule_models import RuleViolation

logger = logging.getLogger("lockguard.engine.auto_fix")

DEFAULT_LOCK_TIMEOUT = "5s"
DEFAULT_STATEMENT_TIMEOUT = "30s"

FIXABLE_RULES = frozenset({"LG001", "LG004", "LG009", "LG014", "LG020"})

# Comments and any timeout settings an earlier fix put in front of the statement
_LEADING = r"(?:\s|--[^\n]*|/\*[\s\S]*?\*/)*"
_PREPENDED = r"^" + _LEADING + r"(?:SET\s[^;]*;" + _LEADING + r")*"
_CREATE_INDEX_RE = re.compile(
    _PREPENDED + r"CREATE\s+(?:UNIQUE\s+)?INDEX\b(?!\s+CONCURRENTLY\b)", re.IGNORECASE
)
_DROP_INDEX_RE = re.compile(
    _PREPENDED + r"DROP\s+INDEX\b(?!\s+CONCURRENTLY\b)", re.IGNORECASE
)
_ADD_CHECK_RE = re.compile(
    r"\bADD\s+(?:CONSTRAINT\s+(?:\"[^\"]+\"|\S+)\s+)?CHECK\s*\(", re.IGNORECASE
)
_NOT_VALID_RE = re.compile(r"\s*NOT\s+VALID\b", re.IGNORECASE)
_NON_DDL_RE = re.compile(r"^(SET|RESET|BEGIN|START|COMMIT|ROLLBACK|END)\b", re.IGNORECASE)


def is_fixable(rule_id: str) -> bool:
    return rule_id.upper() in FIXABLE_RULES


# ---------------------------------------------------------------------------
# SQL scanning
# ---------------------------------------------------------------------------

def _skip_quoted(sql: str, pos: int) -> int:
    """Return the index just past the quoted token or comment starting at ``pos``."""
    ch = sql[pos]
    if ch in ("'", '"'):
        i = pos + 1
        while i < len(sql):
            if sql[i] == ch:
                if i + 1 < len(sql) and sql[i + 1] == ch:
                    i += 2
                    continue
                return i + 1
            i += 1
        return len(sql)
    if sql.startswith("--", pos):
        end = sql.find("\n", pos)
        return len(sql) if end == -1 else end
    if sql.startswith("/*", pos):
        end = sql.find("*/", pos + 2)
        return len(sql) if end == -1 else end + 2
    if ch == "$":
        match = re.match(r"\$[A-Za-z_0-9]*\$", sql[pos:])
        if match:
            tag = match.group(0)
            end = sql.find(tag, pos + len(tag))
            return len(sql) if end == -1 else end + len(tag)
    return pos + 1


def _is_quote_start(sql: str, pos: int) -> bool:
    ch = sql[pos]
    return ch in ("'", '"', "$") or sql.startswith("--", pos) or sql.startswith("/*", pos)


def statement_end(sql: str, start: int) -> int:
    """Index just past the ``;`` ending the statement at ``start`` (or end of text)."""
    i = start
    while i < len(sql):
        if sql[i] == ";":
            return i + 1
        if _is_quote_start(sql, i):
            i = _skip_quoted(sql, i)
            continue
        i += 1
    return len(sql)


def _skip_trivia(sql: str, pos: int) -> int:
    """Return the first offset at or after ``pos`` that is not whitespace or a comment."""
    while pos < len(sql):
        if sql[pos].isspace():
            pos += 1
        elif sql.startswith("--", pos) or sql.startswith("/*", pos):
            pos = _skip_quoted(sql, pos)
        else:
            break
    return pos


def statement_spans(sql: str) -> list[tuple[int, int, int]]:
    """
    Walk ``sql`` from the top and return ``(lead, start, end)`` per statement.

    ``lead`` is the first non-blank character (possibly a leading comment),
    ``start`` the first keyword, ``end`` the offset just past the ``;``.
    """
    spans: list[tuple[int, int, int]] = []
    pos = 0
    while pos < len(sql):
        lead = pos
        while lead < len(sql) and sql[lead].isspace():
            lead += 1
        start = _skip_trivia(sql, lead)
        if start >= len(sql):
            break
        end = statement_end(sql, start)
        spans.append((lead, start, end))
        pos = end
    return spans


def statements_on_line(sql: str, line: int) -> list[tuple[int, int]]:
    """
    Spans (start, end) of every statement that starts on ``line``.

    A statement whose leading comments begin on ``line`` but whose first
    keyword sits further down is used only when nothing starts on the line.
    """
    line_starts = [0] + [i + 1 for i, ch in enumerate(sql) if ch == "\n"]
    if line < 1 or line > len(line_starts):
        return []

    def line_of(offset: int) -> int:
        return bisect_right(line_starts, offset)

    spans = statement_spans(sql)
    exact = [(start, end) for _, start, end in spans if line_of(start) == line]
    if exact:
        return exact
    return [
        (start, end)
        for lead, start, end in spans
        if line_of(lead) <= line < line_of(start)
    ]


def _matching_paren(text: str, open_index: int) -> int | None:
    depth = 0
    i = open_index
    while i < len(text):
        ch = text[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        elif _is_quote_start(text, i):
            i = _skip_quoted(text, i)
            continue
        i += 1
    return None


# ---------------------------------------------------------------------------
# Transforms: statement text -> edits relative to that text
# ---------------------------------------------------------------------------

def _concurrently_after(pattern: re.Pattern) -> Callable[[str], list[Edit]]:
    def transform(text: str) -> list[Edit]:
        match = pattern.match(text)
        if match is None:
            return []
        return [Edit(start=match.end(), end=match.end(), replacement=" CONCURRENTLY")]
    return transform


def _not_valid_checks(text: str) -> list[Edit]:
    edits: list[Edit] = []
    for match in _ADD_CHECK_RE.finditer(text):
        close = _matching_paren(text, match.end() - 1)
        if close is None:
            continue
        if _NOT_VALID_RE.match(text, close + 1):
            continue
        edits.append(Edit(start=close + 1, end=close + 1, replacement=" NOT VALID"))
    return edits


_TRANSFORMS: dict[str, Callable[[str], list[Edit]]] = {
    "LG001": _concurrently_after(_CREATE_INDEX_RE),
    "LG009": _concurrently_after(_DROP_INDEX_RE),
    "LG020": _not_valid_checks,
}

_PREPENDS: dict[str, str] = {
    "LG004": "lock_timeout",
    "LG014": "statement_timeout",
}


def _applies(rule_id: str, text: str) -> bool:
    if rule_id in _TRANSFORMS:
        return bool(_TRANSFORMS[rule_id](text))
    return _NON_DDL_RE.match(text) is None


def apply_edits(text: str, edits: Sequence[Edit]) -> str:
    """
    Apply non-overlapping edits to ``text`` in one pass.

    Raises:
        ValueError: if an edit falls outside ``text`` or edits overlap.
    """
    ordered = sorted(edits, key=lambda e: (e.start, e.end))
    previous_end = 0
    for edit in ordered:
        if edit.start > edit.end or edit.end > len(text):
            raise ValueError(f"Edit {edit.start}:{edit.end} outside text of length {len(text)}")
        if edit.start < previous_end:
            raise ValueError(f"Overlapping edit at {edit.start}")
        previous_end = edit.end

    for edit in reversed(ordered):
        text = text[: edit.start] + edit.replacement + text[edit.end :]
    return text


def _setting_precedes(sql: str, offset: int, setting: str) -> bool:
    pattern = re.compile(rf"\bSET\s+(?:LOCAL\s+|SESSION\s+)?{setting}\b", re.IGNORECASE)
    return pattern.search(sql, 0, offset) is not None


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def auto_fix(
    sql: str,
    violations: Sequence[RuleViolation],
    lock_timeout: str = DEFAULT_LOCK_TIMEOUT,
    statement_timeout: str = DEFAULT_STATEMENT_TIMEOUT,
) -> FixResult:
    """
    Rewrite ``sql`` to fix every fixable violation.

    Args:
        sql: Full migration text the violations were produced from.
        violations: Violations for that text; ``line`` locates each statement.
        lock_timeout: Value for a prepended SET lock_timeout.
        statement_timeout: Value for a prepended SET statement_timeout.

    Returns:
        FixResult with the rewritten SQL, the number of violations actually
        fixed, and the violations left for a human.
    """
    unfixable: list[tuple[int, RuleViolation]] = []
    by_span: dict[tuple[int, int], list[tuple[str, int, RuleViolation]]] = {}
    fixed_count = 0

    for position, v in enumerate(violations):
        rule_id = v.rule_id.upper()
        if rule_id not in FIXABLE_RULES:
            unfixable.append((position, v))
            continue

        spans = statements_on_line(sql, v.line)
        span = next((s for s in spans if _applies(rule_id, sql[s[0]:s[1]])), None)
        if span is None:
            logger.warning(f"No statement at line {v.line} accepts the {rule_id} fix; leaving it unfixed")
            unfixable.append((position, v))
            continue
        by_span.setdefault(span, []).append((rule_id, position, v))

    values = {"lock_timeout": lock_timeout, "statement_timeout": statement_timeout}
    file_edits: list[Edit] = []
    inserted_settings: set[str] = set()

    for start, end in sorted(by_span):
        line_start = sql.rfind("\n", 0, start) + 1
        indent = sql[line_start:start] if sql[line_start:start].isspace() else ""
        text = sql[start:end]
        applied: set[str] = set()

        for rule_id, position, v in sorted(by_span[(start, end)], key=lambda item: item[:2]):
            if rule_id in applied:
                fixed_count += 1
                continue

            if rule_id in _PREPENDS:
                setting = _PREPENDS[rule_id]
                if setting not in inserted_settings and not _setting_precedes(sql, start, setting):
                    inserted_settings.add(setting)
                    prefix = f"SET {setting} = '{values[setting]}';\n{indent}"
                    text = apply_edits(text, [Edit(start=0, end=0, replacement=prefix)])
            else:
                edits = _TRANSFORMS[rule_id](text)
                if not edits:
                    logger.warning(f"{rule_id} fix produced no edit at line {v.line}; leaving it unfixed")
                    unfixable.append((position, v))
                    continue
                text = apply_edits(text, edits)

            applied.add(rule_id)
            fixed_count += 1

        if text != sql[start:end]:
            file_edits.append(Edit(start=start, end=end, replacement=text))

    fixed_sql = apply_edits(sql, file_edits)
    remaining = tuple(v for _, v in sorted(unfixable, key=lambda item: item[0]))
    if file_edits:
        logger.info(
            f"Auto-fix applied {len(file_edits)} statement rewrites "
            f"({fixed_count} fixed, {len(remaining)} unfixable)"
        )
    return FixResult(
        fixed_sql=fixed_sql,
        fixed_count=fixed_count,
        unfixable=remaining,
        edits=tuple(file_edits),
    )
