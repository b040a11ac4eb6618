"""
Rule document schema and Pydantic models.

A rule document is a mapping of named conditions. Each condition carries an
opaque predicate reference (``Check``) and a ``true`` and/or ``false`` outcome.
Used by the translator, the rules API and the CLI.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_serializer, model_validator


class OutcomeKind(str, Enum):
    """Shape of a branch outcome, derived from which fields are set."""

    ACTION_THEN_NEXT = "action_then_next"
    ACTION_THEN_TERMINATE = "action_then_terminate"
    ACTION_ONLY = "action_only"
    DIRECT_NEXT = "direct_next"
    DIRECT_TERMINATE = "direct_terminate"
    DANGLING = "dangling"


class NodeKind(str, Enum):
    """What a generated diagram node stands for."""

    CONDITION = "condition"
    ACTION = "action"


class Outcome(BaseModel):
    """Consequence of one branch: optional action, then continue or terminate."""

    description: Optional[str] = Field(None, description="Label for the action node")
    action: Optional[str] = Field(None, description="Name of the action function to run")
    next: Optional[str] = Field(None, description="Condition to continue to")
    terminate: bool = Field(False, description="End the flow after this branch")

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}

    @property
    def kind(self) -> OutcomeKind:
        # next takes precedence over terminate
        if self.action:
            if self.next:
                return OutcomeKind.ACTION_THEN_NEXT
            if self.terminate:
                return OutcomeKind.ACTION_THEN_TERMINATE
            return OutcomeKind.ACTION_ONLY
        if self.next:
            return OutcomeKind.DIRECT_NEXT
        if self.terminate:
            return OutcomeKind.DIRECT_TERMINATE
        return OutcomeKind.DANGLING


class Condition(BaseModel):
    """A named decision point with a true and a false outcome."""

    description: Optional[str] = Field(None, description="Question shown in the decision node")
    check: Optional[str] = Field(None, alias="Check", description="Name of the predicate function")
    on_true: Optional[Outcome] = Field(None, alias="true", description="Outcome when the check passes")
    on_false: Optional[Outcome] = Field(None, alias="false", description="Outcome when the check fails")

    model_config = {"extra": "allow", "populate_by_name": True, "coerce_numbers_to_str": True}

    @model_validator(mode="before")
    @classmethod
    def _boolean_branch_keys(cls, data: Any) -> Any:
        # YAML loads bare `true:` / `false:` keys as booleans
        if isinstance(data, dict):
            data = {
                ("true" if key is True else "false" if key is False else key): value
                for key, value in data.items()
            }
        return data

    def branches(self) -> list[tuple[str, Optional[Outcome]]]:
        """Outcomes paired with their branch labels, true first."""
        return [("true", self.on_true), ("false", self.on_false)]


class RuleDocument(BaseModel):
    """Full rule document. Condition order is the order of the source mapping."""

    conditions: dict[str, Condition] = Field(..., description="Map of condition name -> Condition")

    model_config = {"extra": "allow"}

    @model_validator(mode="before")
    @classmethod
    def _empty_conditions(cls, data: Any) -> Any:
        # `B:` with nothing under it loads as None; `1:` loads as an int key
        if isinstance(data, dict) and isinstance(data.get("conditions"), dict):
            data = dict(data)
            data["conditions"] = {
                _scalar_key(name): ({} if body is None else body) for name, body in data["conditions"].items()
            }
        return data


def _scalar_key(key: Any) -> Any:
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float)):
        return str(key)
    return key


class NodeMetadata(BaseModel):
    """Links a diagram node back to the function it represents."""

    func: Optional[str] = Field(None, description="Predicate or action function name")
    type: NodeKind = Field(..., description="condition or action")
    value: Optional[bool] = Field(None, description="Branch value for action nodes")

    @model_serializer(mode="wrap")
    def _drop_unset_value(self, handler) -> dict[str, Any]:
        data = handler(self)
        if data.get("value") is None:
            data.pop("value", None)
        return data
