"""
Rule document to Mermaid flowchart translator.

Walks the conditions of a rule document in document order and emits a
``flowchart TD`` description: one decision node per condition, an action node
per branch that runs an action, a terminal node per branch that ends the flow.
Alongside the diagram it builds a metadata map that links node ids back to the
predicate and action functions they stand for.
"""

import logging
import re
import time
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from backend.utils.logging import log_translation
from shared.schemas import Condition, NodeKind, NodeMetadata, Outcome, OutcomeKind, RuleDocument

logger = logging.getLogger(__name__)

HEADER = "flowchart TD"
INDENT = "    "
QUOTE_ESCAPE = "#quot;"

EMPTY_LABEL = "empty_label"
DANGLING_REFERENCE = "dangling_reference"


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class TranslationError(Exception):
    """Base class for errors that abort a translation."""


class MalformedDocumentError(TranslationError):
    """Input cannot be read as a rule document (bad YAML, missing or wrong-typed fields)."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class DanglingReferenceError(TranslationError):
    """Strict mode: an outcome continues to a condition that is not in the document."""

    def __init__(self, condition: str, branch: str, target: str):
        super().__init__(
            f"Condition '{condition}' ({branch} branch) continues to unknown condition '{target}'"
        )
        self.condition = condition
        self.branch = branch
        self.target = target


class TranslationWarning(BaseModel):
    """Non-fatal issue found while translating."""

    code: str = Field(..., description="Warning code (e.g. empty_label, dangling_reference)")
    message: str = Field(..., description="Human-readable message")
    node_id: Optional[str] = Field(None, description="Relevant node ID if applicable")


class TranslationResult(BaseModel):
    """Diagram text plus node metadata for one translation."""

    diagram: str = Field(..., description="Mermaid flowchart source")
    metadata: dict[str, NodeMetadata] = Field(default_factory=dict, description="Node id -> function metadata")
    warnings: list[TranslationWarning] = Field(default_factory=list)

    def metadata_json(self) -> dict[str, dict[str, Any]]:
        return {node_id: meta.model_dump(mode="json") for node_id, meta in self.metadata.items()}


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


class RuleLoader(yaml.SafeLoader):
    """SafeLoader that reads only true/false as booleans, as YAML 1.2 does (`No`, `on`, `yes` stay strings)."""


RuleLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
RuleLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def parse_rule_document(source: Union[str, bytes, dict[str, Any], RuleDocument]) -> RuleDocument:
    """
    Load a rule document from YAML text or an already-deserialized mapping.

    Raises MalformedDocumentError when the input is not a mapping with a
    ``conditions`` mapping, or when any field has the wrong type.
    """
    if isinstance(source, RuleDocument):
        return source
    data: Any = source
    if isinstance(source, (str, bytes)):
        try:
            data = yaml.load(source, Loader=RuleLoader)
        except yaml.YAMLError as e:
            raise MalformedDocumentError(f"Invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise MalformedDocumentError("Rule document must be a mapping")
    if "conditions" not in data:
        raise MalformedDocumentError("Rule document has no 'conditions' mapping")
    if not isinstance(data["conditions"], dict):
        raise MalformedDocumentError("'conditions' must be a mapping of name -> condition")
    try:
        return RuleDocument.model_validate(data)
    except PydanticValidationError as e:
        errors = [{"loc": [str(p) for p in err["loc"]], "msg": err["msg"]} for err in e.errors()]
        raise MalformedDocumentError(f"Invalid rule document ({len(errors)} errors)", errors) from e


def sanitize(text: str) -> str:
    """Escape double quotes, which delimit Mermaid labels."""
    return text.replace('"', QUOTE_ESCAPE)


# -----------------------------------------------------------------------------
# Translator
# -----------------------------------------------------------------------------


class MermaidTranslator:
    """
    Owns the state of a single translation: emitted lines, declared node ids,
    metadata and warnings. Create one per document.
    """

    def __init__(self, document: RuleDocument, strict: bool = False):
        self.document = document
        self.strict = strict
        self.lines: list[str] = [HEADER]
        self.declared: set[str] = set()
        self.metadata: dict[str, NodeMetadata] = {}
        self.warnings: list[TranslationWarning] = []
        self.edge_count = 0

    def run(self) -> TranslationResult:
        for name, condition in self.document.conditions.items():
            self._declare_condition(name, condition.description)
            for label, outcome in condition.branches():
                self._emit_branch(name, outcome, label)
            self._record_metadata(name, condition)
        return TranslationResult(
            diagram="\n".join(self.lines) + "\n",
            metadata=self.metadata,
            warnings=self.warnings,
        )

    # Declarations -----------------------------------------------------------

    def _claim(self, node_id: str) -> bool:
        """Mark node_id declared; False if it already was."""
        if node_id in self.declared:
            return False
        self.declared.add(node_id)
        return True

    def _label(self, node_id: str, description: Optional[str]) -> str:
        if not description:
            self._warn(EMPTY_LABEL, f"Node '{node_id}' has no description; using its id as label", node_id)
            return node_id
        return sanitize(description)

    def _declare_condition(self, node_id: str, description: Optional[str]) -> None:
        if self._claim(node_id):
            self.lines.append(f'{INDENT}{node_id}{{"`{self._label(node_id, description)}`"}}')

    def _declare_action(self, node_id: str, description: Optional[str]) -> None:
        if self._claim(node_id):
            self.lines.append(f'{INDENT}{node_id}["`{self._label(node_id, description)}`"]')

    def _declare_terminal(self, node_id: str) -> None:
        if self._claim(node_id):
            self.lines.append(f"{INDENT}{node_id}((( )))")

    def _connect(self, source: str, target: str, label: Optional[str] = None) -> None:
        self.edge_count += 1
        if label:
            self.lines.append(f"{INDENT}{source} -->|{label}| {target}")
        else:
            self.lines.append(f"{INDENT}{source} --> {target}")

    # Branches ---------------------------------------------------------------

    def _emit_branch(self, name: str, outcome: Optional[Outcome], label: str) -> None:
        if outcome is None or not name:
            return
        kind = outcome.kind
        if kind in (OutcomeKind.ACTION_THEN_NEXT, OutcomeKind.ACTION_THEN_TERMINATE, OutcomeKind.ACTION_ONLY):
            action_id = f"{name}_{label}"
            self._declare_action(action_id, outcome.description or outcome.action)
            self._connect(name, action_id, label)
            if kind == OutcomeKind.ACTION_THEN_NEXT:
                self._check_target(name, label, outcome.next)
                self._connect(action_id, outcome.next, label)
            elif kind == OutcomeKind.ACTION_THEN_TERMINATE:
                end_id = f"{name}_{label}_end"
                self._declare_terminal(end_id)
                self._connect(action_id, end_id)
        elif kind == OutcomeKind.DIRECT_NEXT:
            self._check_target(name, label, outcome.next)
            self._connect(name, outcome.next, label)
        elif kind == OutcomeKind.DIRECT_TERMINATE:
            end_id = f"{name}_{label}_end"
            self._declare_terminal(end_id)
            self._connect(name, end_id, label)
        # DANGLING: branch has nowhere to go; no edge

    def _check_target(self, name: str, label: str, target: str) -> None:
        if target in self.document.conditions:
            return
        if self.strict:
            raise DanglingReferenceError(name, label, target)
        self._warn(
            DANGLING_REFERENCE,
            f"Condition '{name}' ({label} branch) continues to unknown condition '{target}'",
            target,
        )

    def _record_metadata(self, name: str, condition: Condition) -> None:
        self.metadata[name] = NodeMetadata(func=condition.check, type=NodeKind.CONDITION)
        for label, outcome in condition.branches():
            if outcome is not None and outcome.action:
                self.metadata[f"{name}_{label}"] = NodeMetadata(
                    func=outcome.action, type=NodeKind.ACTION, value=(label == "true")
                )

    def _warn(self, code: str, message: str, node_id: Optional[str]) -> None:
        logger.warning(message)
        self.warnings.append(TranslationWarning(code=code, message=message, node_id=node_id))


def translate(
    document: Union[str, bytes, dict[str, Any], RuleDocument],
    strict: bool = False,
    source: str = "inline",
) -> TranslationResult:
    """
    Translate a rule document (YAML text, mapping or RuleDocument) to Mermaid.

    In strict mode a ``next`` that names an unknown condition raises
    DanglingReferenceError; otherwise it is reported as a warning and the edge
    still points at the undeclared id.
    """
    start = time.perf_counter()
    try:
        doc = parse_rule_document(document)
        translator = MermaidTranslator(doc, strict=strict)
        result = translator.run()
    except TranslationError as e:
        log_translation(logger, source, duration_sec=time.perf_counter() - start, success=False, error=str(e))
        raise
    log_translation(
        logger,
        source,
        conditions=len(doc.conditions),
        nodes=len(translator.declared),
        edges=translator.edge_count,
        warnings=len(result.warnings),
        duration_sec=time.perf_counter() - start,
    )
    return result


def convert_yaml_to_mermaid(yaml_text: str) -> str:
    """Translate YAML rule text and return only the diagram."""
    return translate(yaml_text).diagram
