"""
Contract Validator
==================
Validates captured API responses against the registered contract schemas and,
independently, against the transformation rule for the endpoint.

The two checks are orthogonal: a response can match its schema and still have
been (wrongly) unwrapped by the client, or keep its envelope and still miss a
required field. Both facts are reported on every ValidationResult.

Usage:
    validator = ContractValidator()
    result = validator.validate_response("/api/products", "GET", body)
    if not result.valid or result.transformation_check.status is ComplianceStatus.VIOLATION:
        ...
    validator.export_validation_report("reports/contracts.json")

validate_response() never raises for a bad response; infrastructure problems
(no schema for the endpoint, unregistered key) are recorded as invalid results.
"""

import json
import logging
import os
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from jsonschema import Draft202012Validator

from contract_guard.core.constants import ENDPOINT_SCHEMA_TABLE
from contract_guard.core.errors import (
    ContractGuardError, ReportExportError, SchemaNotFoundError, SchemaNotRegisteredError,
)
from contract_guard.core.models import (
    BreakingChange, ComplianceStatus, TransformationCheck, TransformationRule,
    ValidationIssue, ValidationResult,
)
from contract_guard.services.breaking_changes import BreakingChangeDetector
from contract_guard.services.schema_registry import SchemaRegistry
from contract_guard.services.transformation_rules import (
    TransformationRuleEngine, default_should_transform,
)
from contract_guard.utils.envelope import is_transformation_applied
from contract_guard.utils.normalization import ID_PLACEHOLDER, normalize_path, strip_api_prefix

logger = logging.getLogger("contract_guard")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _generate_validation_id() -> str:
    return f"val_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def determine_schema_key(endpoint: str, method: str, status_code: int = 200) -> Optional[str]:
    """
    Deterministic (endpoint, method, status) → schema key.

      status >= 400                   → "error:<status>"
      /api/products         GET       → "products:list"
      /api/products/42      GET       → "products:single"
      /api/products         POST      → "products:single"
      /integrations/akeneo/custom-mappings → "akeneo-custom-mappings"

    Returns None when the endpoint matches no known entity.
    """
    if status_code >= 400:
        return f"error:{status_code}"

    clean = strip_api_prefix(normalize_path(endpoint))
    segments = clean.split("/")
    is_collection = method.upper() == "GET" and ID_PLACEHOLDER not in segments
    bounded = f"/{clean}/"

    for fragment, list_key, single_key in ENDPOINT_SCHEMA_TABLE:
        if f"/{fragment}/" in bounded:
            return list_key if is_collection else single_key

    return None


# ──────────────────────────────────────────────────────
# JSON SCHEMA ERROR → ValidationIssue
# ──────────────────────────────────────────────────────

def _unexpected_keys(error) -> List[str]:
    instance = error.instance if isinstance(error.instance, dict) else {}
    known = set(error.schema.get("properties", {}))
    patterns = list(error.schema.get("patternProperties", {}))
    return [
        key for key in instance
        if key not in known and not any(re.search(p, key) for p in patterns)
    ]


def format_schema_errors(validator: Draft202012Validator, response: Any) -> List[ValidationIssue]:
    """Flatten jsonschema errors into one issue per offending field."""
    issues: List[ValidationIssue] = []
    seen_missing: Set[Tuple[Tuple[Any, ...], str]] = set()

    for error in sorted(validator.iter_errors(response), key=lambda e: e.json_path):
        path = tuple(error.absolute_path)

        if error.validator == "additionalProperties" and error.validator_value is False:
            for key in _unexpected_keys(error):
                issues.append(ValidationIssue(
                    message=f'"{key}" is not allowed',
                    path=path + (key,),
                    type="additionalProperties",
                    context={"key": key, "value": error.instance[key]},
                ))

        elif error.validator == "required":
            instance = error.instance if isinstance(error.instance, dict) else {}
            for key in error.validator_value:
                if key in instance or (path, key) in seen_missing:
                    continue
                seen_missing.add((path, key))
                issues.append(ValidationIssue(
                    message=f'"{key}" is required',
                    path=path + (key,),
                    type="required",
                    context={"key": key},
                ))

        else:
            context: Dict[str, Any] = {"expected": error.validator_value}
            if not isinstance(error.instance, (dict, list)):
                context["value"] = error.instance
            issues.append(ValidationIssue(
                message=error.message,
                path=path,
                type=str(error.validator),
                context=context,
            ))

    return issues


class ContractValidator:

    def __init__(
        self,
        schemas: Optional[SchemaRegistry] = None,
        rules: Optional[TransformationRuleEngine] = None,
        detector: Optional[BreakingChangeDetector] = None,
    ):
        self.schemas = schemas if schemas is not None else SchemaRegistry()
        self.rules = rules if rules is not None else TransformationRuleEngine()
        self.detector = detector if detector is not None else BreakingChangeDetector()
        self._history: List[ValidationResult] = []

    @property
    def validation_history(self) -> Tuple[ValidationResult, ...]:
        return tuple(self._history)

    @property
    def breaking_changes(self) -> Tuple[BreakingChange, ...]:
        return self.detector.changes

    # ── Extension ────────────────────────────────────────────────────────────

    def register_schema(self, key: str, schema: Dict[str, Any], description: str = "") -> None:
        self.schemas.register(key, schema, description)

    def register_transformation_rule(
        self, pattern: str, rule: Union[TransformationRule, dict]
    ) -> TransformationRule:
        return self.rules.register(pattern, rule)

    def find_transformation_rule(self, endpoint: str) -> Optional[TransformationRule]:
        return self.rules.find_rule(endpoint)

    def determine_schema_key(self, endpoint: str, method: str, status_code: int = 200) -> Optional[str]:
        return determine_schema_key(endpoint, method, status_code)

    # ── Validation ───────────────────────────────────────────────────────────

    def validate_response(
        self,
        endpoint: str,
        method: str,
        response: Any,
        status_code: int = 200,
    ) -> ValidationResult:
        method = method.upper()
        transformation_check = self.check_transformation_compliance(endpoint, response)
        schema_key: Optional[str] = None

        try:
            schema_key = determine_schema_key(endpoint, method, status_code)
            if not schema_key:
                raise SchemaNotFoundError(endpoint, method, status_code)

            validator = self.schemas.validator_for(schema_key)
            if validator is None:
                raise SchemaNotRegisteredError(schema_key)

            issues = format_schema_errors(validator, response)

        except ContractGuardError as e:
            result = self._record(endpoint, method, status_code, schema_key, [
                ValidationIssue(message=str(e), type="infrastructure"),
            ], transformation_check)
            logger.warning(f"⚠️  Contract validation skipped [{method} {endpoint}]: {e}")
            return result

        result = self._record(endpoint, method, status_code, schema_key, issues, transformation_check)

        if issues:
            logger.warning(
                f"🔴 Contract validation failed [{method} {endpoint}] "
                f"{len(issues)} issue(s) against {schema_key}"
            )
            self.detector.detect(endpoint, method, issues, response)

        if transformation_check.status is ComplianceStatus.VIOLATION:
            logger.warning(f"⚠️  Transformation rule violation [{method} {endpoint}]: {transformation_check.message}")

        return result

    def _record(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        schema_key: Optional[str],
        issues: List[ValidationIssue],
        transformation_check: TransformationCheck,
    ) -> ValidationResult:
        result = ValidationResult(
            id=_generate_validation_id(),
            timestamp=_now_iso(),
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            schema_key=schema_key,
            valid=not issues,
            errors=tuple(issues),
            transformation_check=transformation_check,
        )
        self._history.append(result)
        return result

    def check_transformation_compliance(self, endpoint: str, response: Any) -> TransformationCheck:
        applied = is_transformation_applied(response)
        rule = self.rules.find_rule(endpoint)

        if rule is None:
            return TransformationCheck(
                status=ComplianceStatus.NO_RULE,
                transformation_applied=applied,
                should_transform=default_should_transform(endpoint),
                message="No specific transformation rule found",
            )

        compliant = rule.should_transform == applied
        return TransformationCheck(
            status=ComplianceStatus.COMPLIANT if compliant else ComplianceStatus.VIOLATION,
            transformation_applied=applied,
            should_transform=rule.should_transform,
            message=(
                "Transformation rule followed correctly" if compliant
                else f"Transformation rule violated: {rule.reason}"
            ),
            rule=rule,
            risk_level=rule.risk_level,
        )

    # ── Statistics & Reports ─────────────────────────────────────────────────

    def get_validation_stats(self) -> Dict[str, Any]:
        total = len(self._history)
        passed = sum(1 for v in self._history if v.valid)
        failed = total - passed

        endpoint_stats: Dict[str, Dict[str, int]] = {}
        for v in self._history:
            stats = endpoint_stats.setdefault(v.endpoint, {"total": 0, "passed": 0, "failed": 0})
            stats["total"] += 1
            stats["passed" if v.valid else "failed"] += 1

        return {
            "total": total,
            "passed": passed,
            "failed": failed,
            "successRate": round(passed / total * 100, 2) if total else 0,
            "endpointStats": endpoint_stats,
            "breakingChanges": len(self.detector),
            "transformationViolations": sum(
                1 for v in self._history
                if v.transformation_check.status is ComplianceStatus.VIOLATION
            ),
        }

    def generate_recommendations(self) -> List[Dict[str, Any]]:
        recommendations: List[Dict[str, Any]] = []

        for endpoint, stats in self.get_validation_stats()["endpointStats"].items():
            if stats["failed"] > stats["passed"]:
                recommendations.append({
                    "type": "HIGH_FAILURE_RATE",
                    "endpoint": endpoint,
                    "message": f"Endpoint {endpoint} has high failure rate ({stats['failed']}/{stats['total']})",
                    "priority": "HIGH",
                })

        violations = [
            v for v in self._history
            if v.transformation_check.status is ComplianceStatus.VIOLATION
        ]
        if violations:
            recommendations.append({
                "type": "TRANSFORMATION_VIOLATIONS",
                "message": f"{len(violations)} transformation rule violations detected",
                "priority": "HIGH",
                "details": [
                    {
                        "endpoint": v.endpoint,
                        "rule": v.transformation_check.rule.to_dict() if v.transformation_check.rule else None,
                    }
                    for v in violations
                ],
            })

        return recommendations

    def build_report(self) -> Dict[str, Any]:
        return {
            "generatedAt": _now_iso(),
            "summary": self.get_validation_stats(),
            "validationHistory": [v.to_dict() for v in self._history],
            "breakingChanges": [c.to_dict() for c in self.detector.changes],
            "transformationRules": [
                {"pattern": pattern, "rule": rule.to_dict()}
                for pattern, rule in self.rules.rules()
            ],
            "recommendations": self.generate_recommendations(),
        }

    def export_validation_report(self, file_path: str) -> Dict[str, Any]:
        """Write the JSON report to disk and return it."""
        report = self.build_report()
        try:
            directory = os.path.dirname(os.path.abspath(file_path))
            os.makedirs(directory, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2, default=str)
        except OSError as e:
            raise ReportExportError(file_path, str(e)) from e

        logger.info(f"💾 Validation report exported to {file_path} ({report['summary']['total']} validations)")
        return report
