"""
Fixed Tables
============
Every hard-coded list the engine decides on lives here, so the heuristics stay
finite and inspectable: critical endpoints, list-heuristic exclusions, the
endpoint → schema-key table, preloaded transformation rules and the smoke-test
checklist.
"""

from typing import Dict, List, Tuple

from contract_guard.core.models import (
    BugHistoryEntry, RiskLevel, SmokeCheck, TransformationRule,
)

# ── List-endpoint heuristic ──
# Last-segment suffixes that look plural but are never list endpoints.
LIST_EXCLUSION_SUFFIXES: Tuple[str, ...] = ("stats", "status", "config", "test", "save")

# Fragments that must never be unwrapped, whatever the path looks like.
NON_TRANSFORM_FRAGMENTS: Tuple[str, ...] = ("custom-mappings", "storage/")

# ── Severity ──
# A missing field or type error on these endpoints is a HIGH-severity break.
CRITICAL_ENDPOINT_FRAGMENTS: Tuple[str, ...] = ("custom-mappings", "orders", "payments")

# ── Schema registry ──
ERROR_STATUS_CODES: Tuple[int, ...] = (400, 401, 403, 404, 422, 500)

# Ordered: bespoke akeneo entries must be tried before generic entity names.
# (path fragment, key when listing, key for a single entity)
ENDPOINT_SCHEMA_TABLE: List[Tuple[str, str, str]] = [
    ("integrations/akeneo/custom-mappings", "akeneo-custom-mappings", "akeneo-custom-mappings"),
    ("integrations/akeneo/mappings", "akeneo-mappings:list", "akeneo-mappings:single"),
    ("products", "products:list", "products:single"),
    ("categories", "categories:list", "categories:single"),
    ("orders", "orders:list", "orders:single"),
    ("users", "users:list", "users:single"),
    ("stores", "stores:list", "stores:single"),
]

# ── Transformation rules ──
CUSTOM_MAPPINGS_ENDPOINT = "/integrations/akeneo/custom-mappings"

DEFAULT_TRANSFORMATION_RULES: Dict[str, TransformationRule] = {
    CUSTOM_MAPPINGS_ENDPOINT: TransformationRule(
        should_transform=False,
        reason="Custom mappings endpoint requires raw response structure",
        risk_level=RiskLevel.HIGH,
        bug_history=(
            BugHistoryEntry(
                date="2025-01-10",
                issue="Response transformation broke custom mappings structure",
                fix='Added explicit skip-transform for endpoints containing "/custom-mappings"',
                prevention="Always check endpoint pattern before applying transformations",
            ),
        ),
    ),
    "/storage/": TransformationRule(
        should_transform=False,
        reason="Storage endpoints return file metadata and URLs",
        risk_level=RiskLevel.MEDIUM,
    ),
    "/:id/stats": TransformationRule(
        should_transform=False,
        reason="Statistics endpoints have custom response format",
        risk_level=RiskLevel.LOW,
    ),
    "/:id/config": TransformationRule(
        should_transform=False,
        reason="Configuration endpoints have specific structure requirements",
        risk_level=RiskLevel.MEDIUM,
    ),
}

# ── Changed-files scanner ──
# Endpoints an API client must explicitly exempt when it touches transformation logic.
SCANNER_CRITICAL_ENDPOINTS: Tuple[str, ...] = (
    CUSTOM_MAPPINGS_ENDPOINT,
    "/storage/",
    "/stats",
    "/status",
    "/config",
)

# ── Smoke tests ──
CRITICAL_SMOKE_CHECKS: Tuple[SmokeCheck, ...] = (
    SmokeCheck(
        name="Health Check",
        method="GET",
        path="/health",
        expected_status=(200,),
        critical=True,
        skip_auth=True,
    ),
    SmokeCheck(
        name="API Status",
        method="GET",
        path="/api/status",
        expected_status=(200,),
        skip_auth=True,
    ),
    SmokeCheck(
        name="Auth Session",
        method="GET",
        path="/api/auth/me",
        expected_status=(200, 401),
        critical=True,
    ),
    SmokeCheck(
        name="Products List",
        method="GET",
        path="/api/products",
        expected_status=(200, 401),
        transformation_sensitive=True,
    ),
    SmokeCheck(
        name="Akeneo Custom Mappings",
        method="GET",
        path="/api/integrations/akeneo/custom-mappings",
        expected_status=(200, 401),
        critical=True,
        transformation_sensitive=True,
    ),
    SmokeCheck(
        name="Akeneo Status",
        method="GET",
        path="/api/integrations/akeneo/status",
        expected_status=(200, 401),
        transformation_sensitive=True,
    ),
    SmokeCheck(
        name="Storage Files",
        method="GET",
        path="/api/storage/files",
        expected_status=(200, 401, 404),
        transformation_sensitive=True,
    ),
)
