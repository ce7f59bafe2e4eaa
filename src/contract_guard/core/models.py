"""
Data Models
===========
Records produced by the contract engine.

  TransformationRule  — documented should/should-not-transform decision per endpoint pattern
  TransformationCheck — compliance of one observed response against its rule
  ValidationIssue     — one schema violation (JSON Schema keyword + location)
  ValidationResult    — outcome of a single validate_response() call
  BreakingChange      — classified failure with severity and fix suggestions
  ScanFinding         — error/warning raised by the changed-files scanner
  SmokeCheck(Result)  — a live endpoint check and its outcome

All records serialize to the camelCase JSON shape used in exported reports.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    VIOLATION = "VIOLATION"
    NO_RULE = "NO_RULE"


class ChangeType(str, Enum):
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    UNEXPECTED_FIELD = "UNEXPECTED_FIELD"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    UNKNOWN = "UNKNOWN"


class EnvelopeKind(str, Enum):
    """Discriminant for the shape of a parsed response body."""
    SUCCESS_ENVELOPE = "SUCCESS_ENVELOPE"   # {success: true, data, meta?}
    ERROR_ENVELOPE = "ERROR_ENVELOPE"       # {success: false, message, errors}
    RAW_ARRAY = "RAW_ARRAY"                 # [...] - envelope already stripped
    RAW_OBJECT = "RAW_OBJECT"               # object with neither success nor data
    SCALAR = "SCALAR"                       # null, string, number - not JSON-object shaped


# ──────────────────────────────────────────────────────
# TRANSFORMATION RULES
# ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class BugHistoryEntry:
    date: str
    issue: str
    fix: str
    prevention: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "date": self.date,
            "issue": self.issue,
            "fix": self.fix,
            "prevention": self.prevention,
        }


@dataclass(frozen=True)
class TransformationRule:
    should_transform: bool
    reason: str
    risk_level: RiskLevel
    bug_history: Tuple[BugHistoryEntry, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "shouldTransform": self.should_transform,
            "reason": self.reason,
            "riskLevel": self.risk_level.value,
        }
        if self.bug_history:
            data["bugHistory"] = [entry.to_dict() for entry in self.bug_history]
        return data

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransformationRule":
        history = tuple(
            BugHistoryEntry(
                date=h.get("date", ""),
                issue=h.get("issue", ""),
                fix=h.get("fix", h.get("solution", "")),
                prevention=h.get("prevention", ""),
            )
            for h in d.get("bugHistory", d.get("bug_history", []))
        )
        should_transform = d.get("shouldTransform", d.get("should_transform"))
        if should_transform is None:
            raise ValueError("Transformation rule needs a shouldTransform value")
        return cls(
            should_transform=bool(should_transform),
            reason=d.get("reason", ""),
            risk_level=RiskLevel(d.get("riskLevel", d.get("risk_level", "LOW"))),
            bug_history=history,
        )


@dataclass(frozen=True)
class TransformationCheck:
    status: ComplianceStatus
    transformation_applied: bool
    should_transform: bool
    message: str
    rule: Optional[TransformationRule] = None
    risk_level: Optional[RiskLevel] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status.value,
            "transformationApplied": self.transformation_applied,
            "shouldTransform": self.should_transform,
            "message": self.message,
        }
        if self.rule is not None:
            data["rule"] = self.rule.to_dict()
        if self.risk_level is not None:
            data["riskLevel"] = self.risk_level.value
        return data


# ──────────────────────────────────────────────────────
# VALIDATION
# ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationIssue:
    """
    A single schema violation.

    `type` is the JSON Schema keyword that failed ("required",
    "additionalProperties", "type", "enum", ...) or "infrastructure" when no
    schema could be applied at all.
    """
    message: str
    path: Tuple[Any, ...] = ()
    type: str = "infrastructure"
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "path": list(self.path),
            "type": self.type,
            "context": copy.deepcopy(self.context),
        }


@dataclass(frozen=True)
class ValidationResult:
    id: str
    timestamp: str
    endpoint: str
    method: str
    status_code: int
    schema_key: Optional[str]
    valid: bool
    errors: Tuple[ValidationIssue, ...]
    transformation_check: TransformationCheck

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "endpoint": self.endpoint,
            "method": self.method,
            "statusCode": self.status_code,
            "schemaKey": self.schema_key,
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "transformationCheck": self.transformation_check.to_dict(),
        }


@dataclass(frozen=True)
class SchemaUpdateSuggestion:
    endpoint: str
    timestamp: str
    current_error: Tuple[ValidationIssue, ...]
    suggested_changes: Tuple[Dict[str, Any], ...]
    reasoning: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "timestamp": self.timestamp,
            "currentError": [e.to_dict() for e in self.current_error],
            "suggestedChanges": [dict(c) for c in self.suggested_changes],
            "reasoning": list(self.reasoning),
        }


@dataclass(frozen=True)
class BreakingChange:
    timestamp: str
    endpoint: str
    method: str
    type: ChangeType
    severity: Severity
    details: Tuple[ValidationIssue, ...]
    response: str
    suggestions: Tuple[str, ...]
    schema_update: Optional[SchemaUpdateSuggestion] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "timestamp": self.timestamp,
            "endpoint": self.endpoint,
            "method": self.method,
            "type": self.type.value,
            "severity": self.severity.value,
            "details": [d.to_dict() for d in self.details],
            "response": self.response,
            "suggestions": list(self.suggestions),
        }
        if self.schema_update is not None:
            data["schemaUpdate"] = self.schema_update.to_dict()
        return data


# ──────────────────────────────────────────────────────
# SCANNER / SMOKE TESTS
# ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScanFinding:
    level: str          # "error" | "warning"
    file_path: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class SmokeCheck:
    name: str
    method: str
    path: str
    expected_status: Tuple[int, ...] = (200,)
    critical: bool = False
    skip_auth: bool = False
    transformation_sensitive: bool = False


@dataclass
class SmokeCheckResult:
    check: SmokeCheck
    passed: bool = False
    status_code: Optional[int] = None
    duration_ms: float = 0.0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.check.name,
            "method": self.check.method,
            "path": self.check.path,
            "critical": self.check.critical,
            "passed": self.passed,
            "statusCode": self.status_code,
            "durationMs": round(self.duration_ms, 2),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }
