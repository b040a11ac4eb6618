"""Shared schemas for RuleChart (translator, API and CLI contract)."""

from shared.schemas.rules import (
    Condition,
    NodeKind,
    NodeMetadata,
    Outcome,
    OutcomeKind,
    RuleDocument,
)

__all__ = [
    "Condition",
    "NodeKind",
    "NodeMetadata",
    "Outcome",
    "OutcomeKind",
    "RuleDocument",
]
