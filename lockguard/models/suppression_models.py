"""
Suppression Data Models — Inline disable directives found in migration comments.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

ALL_RULES = "all"


class DisableDirective(BaseModel):
    """A ``lockguard-disable`` comment and what it suppresses."""

    model_config = ConfigDict(frozen=True)

    scope: Literal["statement", "file"]
    rules: Union[Literal["all"], tuple[str, ...]] = Field(
        default=ALL_RULES, description="Suppressed rule ids, or 'all'"
    )
    line: int = Field(..., ge=1, description="Line where the comment appears")

    def covers(self, rule_id: str) -> bool:
        if self.rules == ALL_RULES:
            return True
        return rule_id.upper() in self.rules


class StaleDirective(BaseModel):
    """A directive that suppressed nothing."""

    model_config = ConfigDict(frozen=True)

    directive: DisableDirective
    reason: str
