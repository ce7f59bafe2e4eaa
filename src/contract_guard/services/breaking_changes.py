"""
Breaking-Change Detector & Advisor
==================================
Turns schema violations into classified, prioritised breaking changes.

Features:
  - Classification of each violation (missing field, unexpected field, type, enum)
  - Severity: HIGH / MEDIUM / LOW, weighted by how critical the endpoint is
  - Fix suggestions per failure class (plus custom-mappings specific hints)
  - Schema-evolution proposals for LOW-severity and purely additive changes (advisory only)
  - Narrator: plain-English summary of everything recorded in a run
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from contract_guard.core.constants import CRITICAL_ENDPOINT_FRAGMENTS
from contract_guard.core.models import (
    BreakingChange, ChangeType, SchemaUpdateSuggestion, Severity, ValidationIssue,
)
from contract_guard.utils.type_inference import infer_field_type, json_schema_for

logger = logging.getLogger("contract_guard")

# JSON Schema keyword → failure class
_KEYWORD_CLASSES: Dict[str, ChangeType] = {
    "required": ChangeType.MISSING_REQUIRED_FIELD,
    "additionalProperties": ChangeType.UNEXPECTED_FIELD,
    "unevaluatedProperties": ChangeType.UNEXPECTED_FIELD,
    "type": ChangeType.TYPE_MISMATCH,
    "anyOf": ChangeType.TYPE_MISMATCH,
    "oneOf": ChangeType.TYPE_MISMATCH,
    "pattern": ChangeType.TYPE_MISMATCH,
    "format": ChangeType.TYPE_MISMATCH,
    "minimum": ChangeType.TYPE_MISMATCH,
    "maximum": ChangeType.TYPE_MISMATCH,
    "exclusiveMinimum": ChangeType.TYPE_MISMATCH,
    "exclusiveMaximum": ChangeType.TYPE_MISMATCH,
    "minLength": ChangeType.TYPE_MISMATCH,
    "maxLength": ChangeType.TYPE_MISMATCH,
    "minItems": ChangeType.TYPE_MISMATCH,
    "maxItems": ChangeType.TYPE_MISMATCH,
    "enum": ChangeType.INVALID_ENUM_VALUE,
    "const": ChangeType.INVALID_ENUM_VALUE,
}

# Failure class → ordered remediation hints
_FIX_SUGGESTIONS: Dict[ChangeType, Tuple[str, ...]] = {
    ChangeType.UNEXPECTED_FIELD: (
        "Add new field to schema or remove from response",
        "Check if field is properly documented in API spec",
    ),
    ChangeType.MISSING_REQUIRED_FIELD: (
        "Ensure all required fields are included in response",
        "Check if field should be optional in schema",
    ),
    ChangeType.TYPE_MISMATCH: (
        "Fix data type in response or update schema",
        "Add data transformation logic if needed",
    ),
    ChangeType.INVALID_ENUM_VALUE: (
        "Use one of the documented enum values in the response",
        "Extend the schema enum if the new value is intentional",
    ),
}

_CUSTOM_MAPPINGS_SUGGESTIONS = (
    "Verify response transformation is disabled for custom mappings endpoint",
    "Check the API client's transformation skip-list (skip-transform) for custom-mappings",
)

_SEVERITY_LABELS = {
    Severity.HIGH: "🔴 BREAKING",
    Severity.MEDIUM: "🟡 WARNING",
    Severity.LOW: "🟢 INFO",
}

IssueInput = Union[ValidationIssue, Sequence[ValidationIssue]]


def _as_issues(issues: IssueInput) -> List[ValidationIssue]:
    if isinstance(issues, ValidationIssue):
        return [issues]
    return list(issues)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def classify_issue(issue: ValidationIssue) -> ChangeType:
    return _KEYWORD_CLASSES.get(issue.type, ChangeType.UNKNOWN)


def is_critical_endpoint(endpoint: str) -> bool:
    return any(fragment in endpoint for fragment in CRITICAL_ENDPOINT_FRAGMENTS)


class BreakingChangeDetector:
    """
    Stateful only in its append-only list of recorded breaking changes.
    One detector is owned by one ContractValidator.
    """

    def __init__(self):
        self._changes: List[BreakingChange] = []

    @property
    def changes(self) -> Tuple[BreakingChange, ...]:
        return tuple(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    # ── Classification ───────────────────────────────────────────────────────

    def classify(self, issues: IssueInput) -> ChangeType:
        """The failure class of the first classifiable issue."""
        for issue in _as_issues(issues):
            change_type = classify_issue(issue)
            if change_type is not ChangeType.UNKNOWN:
                return change_type
        return ChangeType.UNKNOWN

    def determine_severity(self, issues: IssueInput, endpoint: str) -> Severity:
        classes = {classify_issue(i) for i in _as_issues(issues)}

        if is_critical_endpoint(endpoint):
            if classes & {ChangeType.MISSING_REQUIRED_FIELD, ChangeType.TYPE_MISMATCH}:
                return Severity.HIGH

        if classes & {ChangeType.UNEXPECTED_FIELD, ChangeType.INVALID_ENUM_VALUE}:
            return Severity.MEDIUM

        return Severity.LOW

    def generate_fix_suggestions(self, issues: IssueInput, endpoint: str) -> List[str]:
        classes = [classify_issue(i) for i in _as_issues(issues)]
        suggestions: List[str] = []

        # Stable order regardless of which violation came first
        for change_type in (ChangeType.UNEXPECTED_FIELD, ChangeType.MISSING_REQUIRED_FIELD,
                            ChangeType.TYPE_MISMATCH, ChangeType.INVALID_ENUM_VALUE):
            if change_type in classes:
                suggestions.extend(_FIX_SUGGESTIONS[change_type])

        if "custom-mappings" in endpoint:
            suggestions.extend(_CUSTOM_MAPPINGS_SUGGESTIONS)

        return list(dict.fromkeys(suggestions))

    # ── Schema evolution ─────────────────────────────────────────────────────

    def suggest_schema_updates(
        self,
        endpoint: str,
        issues: IssueInput,
        response: Any = None,
    ) -> SchemaUpdateSuggestion:
        """
        Proposes ADD_OPTIONAL_FIELD for every unexpected field, typed from its
        observed value. Advisory only: nothing is registered.
        """
        issue_list = _as_issues(issues)
        changes: List[Dict[str, Any]] = []
        reasoning: List[str] = []

        for issue in issue_list:
            if classify_issue(issue) is not ChangeType.UNEXPECTED_FIELD:
                continue
            key = issue.context.get("key")
            if key is None:
                continue
            value = issue.context.get("value")
            changes.append({
                "action": "ADD_OPTIONAL_FIELD",
                "field": key,
                "type": infer_field_type(value),
                "path": list(issue.path),
                "schema": json_schema_for(value),
            })
            reasoning.append(f"Field '{key}' appears in response but not in schema")

        return SchemaUpdateSuggestion(
            endpoint=endpoint,
            timestamp=_now_iso(),
            current_error=tuple(issue_list),
            suggested_changes=tuple(changes),
            reasoning=tuple(reasoning),
        )

    # ── Detection ────────────────────────────────────────────────────────────

    def detect(
        self,
        endpoint: str,
        method: str,
        issues: IssueInput,
        response: Any = None,
    ) -> BreakingChange:
        issue_list = _as_issues(issues)
        severity = self.determine_severity(issue_list, endpoint)

        # LOW changes, and purely additive ones (only unknown fields), get a proposal
        additive = bool(issue_list) and all(
            classify_issue(i) is ChangeType.UNEXPECTED_FIELD for i in issue_list
        )
        schema_update: Optional[SchemaUpdateSuggestion] = None
        if severity is Severity.LOW or additive:
            schema_update = self.suggest_schema_updates(endpoint, issue_list, response)

        change = BreakingChange(
            timestamp=_now_iso(),
            endpoint=endpoint,
            method=method,
            type=self.classify(issue_list),
            severity=severity,
            details=tuple(issue_list),
            response=json.dumps(response, indent=2, default=str),
            suggestions=tuple(self.generate_fix_suggestions(issue_list, endpoint)),
            schema_update=schema_update,
        )
        self._changes.append(change)

        if severity is Severity.HIGH:
            logger.warning(f"🚨 BREAKING CHANGE [{method} {endpoint}]: {change.type.value}")
        else:
            logger.info(f"⚠️  Contract change [{method} {endpoint}]: {change.type.value} ({severity.value})")

        return change

    # ── Narrator ─────────────────────────────────────────────────────────────

    def narrate(self, changes: Optional[Sequence[BreakingChange]] = None) -> str:
        """
        Plain-English report of breaking changes, most severe first.
        Defaults to everything recorded by this detector.
        """
        changes = list(self._changes if changes is None else changes)
        if not changes:
            return "✅ No breaking changes detected. All responses match their contracts."

        order = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}
        changes.sort(key=lambda c: order[c.severity])

        high = sum(1 for c in changes if c.severity is Severity.HIGH)
        medium = sum(1 for c in changes if c.severity is Severity.MEDIUM)
        low = len(changes) - high - medium

        lines = [
            "⚠️ Contract Changes Detected",
            f"   {len(changes)} change(s): {high} breaking, {medium} warnings, {low} informational",
            "",
        ]

        for idx, change in enumerate(changes, 1):
            lines.append(
                f"  {idx}. {_SEVERITY_LABELS[change.severity]}: "
                f"{change.method} {change.endpoint} - {change.type.value}"
            )
            for detail in change.details[:3]:
                location = "$" + "".join(
                    f"[{p}]" if isinstance(p, int) else f".{p}" for p in detail.path
                )
                lines.append(f"     📍 {location}: {detail.message}")
            if len(change.details) > 3:
                lines.append(f"     … and {len(change.details) - 3} more")
            for suggestion in change.suggestions:
                lines.append(f"     🔧 {suggestion}")
            lines.append("")

        if high:
            lines.append("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
            lines.append(f"🚨 RECOMMENDED: {high} breaking change(s) need attention before release.")

        return "\n".join(lines)
