"""
Rule Catalog — The built-in migration safety rules.

``default_rules()`` builds a fresh list on every call; callers own the
catalog they hand to the engine.
"""

from __future__ import annotations

from typing import Iterable

from lockguard.models.rule_models import Rule

# Import all rule modules
from lockguard.core.rules import (
    check_not_null,
    cluster,
    column_type_change,
    concurrent_in_transaction,
    concurrent_index,
    drop_cascade,
    drop_column,
    drop_database,
    drop_index_concurrently,
    drop_table,
    enum_add_value,
    high_traffic_table,
    large_table,
    lock_timeout,
    multi_ddl_transaction,
    not_valid_check,
    not_valid_foreign_key,
    refresh_matview,
    reindex_concurrently,
    rename_column,
    rename_table,
    statement_timeout,
    unbatched_backfill,
    vacuum_full,
    volatile_default,
)

# Catalog order; matches rule id order
_RULE_MODULES = (
    concurrent_index,
    check_not_null,
    volatile_default,
    lock_timeout,
    not_valid_foreign_key,
    vacuum_full,
    column_type_change,
    multi_ddl_transaction,
    drop_index_concurrently,
    rename_column,
    unbatched_backfill,
    high_traffic_table,
    large_table,
    statement_timeout,
    reindex_concurrently,
    drop_cascade,
    concurrent_in_transaction,
    drop_table,
    rename_table,
    not_valid_check,
    cluster,
    refresh_matview,
    drop_database,
    drop_column,
    enum_add_value,
)


def default_rules(disabled: Iterable[str] = ()) -> list[Rule]:
    """Return the built-in rules, minus any ids in ``disabled``."""
    skip = {rule_id.upper() for rule_id in disabled}
    return [module.RULE for module in _RULE_MODULES if module.RULE.id not in skip]


def rule_ids() -> list[str]:
    return [module.RULE.id for module in _RULE_MODULES]
