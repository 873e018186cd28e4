"""
FastAPI Dependencies — Shared, settings-derived values injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from lockguard.config import settings
from lockguard.core.rule_catalog import default_rules
from lockguard.models.risk_models import SizeThresholds
from lockguard.models.rule_models import Rule, Severity


@lru_cache
def get_rule_catalog() -> tuple[Rule, ...]:
    """Default rules minus the ones disabled in settings."""
    return tuple(default_rules(settings.disabled_rules))


@lru_cache
def get_severity_overrides() -> dict[str, Severity]:
    return {rule_id.upper(): severity for rule_id, severity in settings.severity_overrides.items()}


@lru_cache
def get_size_thresholds() -> SizeThresholds:
    return SizeThresholds(large_rows=settings.large_table_rows)
