"""
Rules Route — GET /rules

Lists the active rule catalog.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lockguard.api.dependencies import get_rule_catalog, get_severity_overrides
from lockguard.models.api_models import RuleInfo
from lockguard.models.rule_models import Rule, Severity

router = APIRouter()


@router.get("/rules", response_model=list[RuleInfo])
async def list_rules(
    rules: tuple[Rule, ...] = Depends(get_rule_catalog),
    overrides: dict[str, Severity] = Depends(get_severity_overrides),
):
    return [
        RuleInfo(
            id=rule.id,
            name=rule.name,
            severity=overrides.get(rule.id, rule.severity),
            description=rule.description,
            rationale=rule.rationale,
            docs_url=rule.docs_url,
            fixable=rule.fixable,
            requires_production_context=rule.requires_production_context,
        )
        for rule in rules
    ]
