"""
Response/contract validation: schema keys, strict schemas, transformation
compliance, statistics and report export.
"""
import json

import pytest

from contract_guard.core.errors import ReportExportError
from contract_guard.core.models import ComplianceStatus, RiskLevel, Severity
from contract_guard.services.contract_validator import ContractValidator, determine_schema_key
from contract_guard.services.schema_registry import SchemaRegistry


# ── Schema keys ──────────────────────────────────────────────────────────────

def test_schema_key_resolution():
    cases = [
        (("/api/products", "GET", 200), "products:list"),
        (("/api/products/42", "GET", 200), "products:single"),
        (("/api/products", "POST", 201), "products:single"),
        (("/api/orders/550e8400-e29b-41d4-a716-446655440000", "GET", 200), "orders:single"),
        (("/integrations/akeneo/custom-mappings", "GET", 200), "akeneo-custom-mappings"),
        (("/api/integrations/akeneo/mappings", "GET", 200), "akeneo-mappings:list"),
        (("/api/integrations/akeneo/mappings/7", "PUT", 200), "akeneo-mappings:single"),
        (("/api/products", "GET", 404), "error:404"),
        (("/api/unknown-thing", "GET", 200), None),
    ]
    for args, expected in cases:
        assert determine_schema_key(*args) == expected, f"{args} → {determine_schema_key(*args)}"


def test_schema_key_is_deterministic():
    keys = {determine_schema_key("/api/products", "get", 200) for _ in range(20)}
    assert keys == {"products:list"}


# ── Schema validation ────────────────────────────────────────────────────────

def test_valid_product_list(validator, gen):
    body = gen.generate_list_response([gen.generate_product() for _ in range(3)], {"page": 1, "limit": 10})
    result = validator.validate_response("/api/products", "GET", body)

    assert result.valid, [e.message for e in result.errors]
    assert result.schema_key == "products:list"
    assert result.id.startswith("val_")
    assert result.transformation_check.status is ComplianceStatus.NO_RULE
    assert result.transformation_check.should_transform is True


def test_unexpected_field_is_reported_per_key(validator, gen):
    product = gen.generate_product({"legacy_flag": True})
    result = validator.validate_response("/api/products/1", "GET", gen.generate_success_response(product))

    assert not result.valid
    unexpected = [e for e in result.errors if e.type == "additionalProperties"]
    assert len(unexpected) == 1
    assert unexpected[0].path == ("data", "legacy_flag")
    assert unexpected[0].context == {"key": "legacy_flag", "value": True}


def test_missing_required_field_on_orders_is_high(validator, gen):
    order = gen.generate_order({"customer_email": None})
    result = validator.validate_response("/api/orders/5", "GET", gen.generate_success_response(order))

    assert not result.valid
    missing = [e for e in result.errors if e.type == "required"]
    assert [e.path for e in missing] == [("data", "customer_email")]

    change = validator.breaking_changes[-1]
    assert change.severity is Severity.HIGH
    assert change.endpoint == "/api/orders/5"


def test_missing_required_field_on_products_is_not_high(validator, gen):
    product = gen.generate_product({"name": None})
    validator.validate_response("/api/products/5", "GET", gen.generate_success_response(product))

    assert validator.breaking_changes[-1].severity in (Severity.LOW, Severity.MEDIUM)


def test_wrong_types_and_enums(validator, gen):
    product = gen.generate_product({"price": "not-a-number", "visibility": "invalid-visibility"})
    result = validator.validate_response("/api/products/5", "GET", gen.generate_success_response(product))

    types = {e.type for e in result.errors}
    paths = {e.path for e in result.errors}
    assert "type" in types and "enum" in types
    assert ("data", "price") in paths and ("data", "visibility") in paths


def test_error_envelope(validator, gen):
    body = gen.generate_error_response("Product not found", status_code=404)
    result = validator.validate_response("/api/products/9", "GET", body, 404)

    assert result.valid
    assert result.schema_key == "error:404"


def test_unknown_endpoint_is_recorded_not_raised(validator):
    result = validator.validate_response("/api/unknown-thing", "GET", {"success": True})

    assert not result.valid
    assert result.schema_key is None
    assert result.errors[0].type == "infrastructure"
    assert result.errors[0].message.startswith("No schema found for endpoint")
    assert len(validator.validation_history) == 1


def test_unregistered_status_code(validator):
    result = validator.validate_response("/api/products", "GET", {"success": False, "message": "teapot"}, 418)

    assert not result.valid
    assert result.schema_key == "error:418"
    assert "not registered" in result.errors[0].message


# ── Transformation compliance ────────────────────────────────────────────────

def test_custom_mappings_compliance(validator, gen):
    raw = gen.generate_akeneo_custom_mapping_response()
    ok = validator.validate_response("/integrations/akeneo/custom-mappings", "GET", raw)

    assert ok.valid, [e.message for e in ok.errors]
    assert ok.transformation_check.status is ComplianceStatus.COMPLIANT
    assert ok.transformation_check.risk_level is RiskLevel.HIGH

    transformed = [gen.generate_akeneo_mapping()]
    bad = validator.validate_response("/integrations/akeneo/custom-mappings", "GET", transformed)

    assert not bad.valid
    assert bad.transformation_check.status is ComplianceStatus.VIOLATION
    assert bad.transformation_check.transformation_applied is True
    assert "Custom mappings endpoint requires raw response structure" in bad.transformation_check.message


def test_compliance_is_independent_of_schema(validator):
    check = validator.check_transformation_compliance("/api/storage/files", {"success": True, "files": []})
    assert check.status is ComplianceStatus.COMPLIANT

    check = validator.check_transformation_compliance("/api/storage/files", [{"name": "a.png"}])
    assert check.status is ComplianceStatus.VIOLATION


# ── Stats & reports ──────────────────────────────────────────────────────────

def test_stats_add_up(validator, gen):
    n = 7
    for i in range(n):
        product = gen.generate_product({"name": None} if i % 3 == 0 else None)
        validator.validate_response("/api/products/1", "GET", gen.generate_success_response(product))

    stats = validator.get_validation_stats()
    assert stats["total"] == n == stats["passed"] + stats["failed"]
    assert stats["failed"] == 3
    assert stats["successRate"] == round(4 / 7 * 100, 2)
    assert stats["endpointStats"]["/api/products/1"]["total"] == n


def test_empty_stats():
    stats = ContractValidator().get_validation_stats()
    assert stats["total"] == 0
    assert stats["successRate"] == 0


def test_recommendations(validator, gen):
    validator.validate_response("/api/orders/1", "GET", {"success": True})
    validator.validate_response("/integrations/akeneo/custom-mappings", "GET", [gen.generate_akeneo_mapping()])

    recs = validator.generate_recommendations()
    types = [r["type"] for r in recs]
    assert "HIGH_FAILURE_RATE" in types
    assert types.count("TRANSFORMATION_VIOLATIONS") == 1

    violation = next(r for r in recs if r["type"] == "TRANSFORMATION_VIOLATIONS")
    assert violation["details"][0]["endpoint"] == "/integrations/akeneo/custom-mappings"


def test_export_report(validator, gen, tmp_path):
    validator.validate_response("/integrations/akeneo/custom-mappings", "GET",
                                gen.generate_akeneo_custom_mapping_response())
    target = tmp_path / "nested" / "dir" / "report.json"

    report = validator.export_validation_report(str(target))

    assert target.exists()
    on_disk = json.loads(target.read_text(encoding="utf-8"))
    assert set(on_disk) == {"generatedAt", "summary", "validationHistory", "breakingChanges",
                            "transformationRules", "recommendations"}
    assert on_disk["summary"]["total"] == report["summary"]["total"] == 1
    assert on_disk["transformationRules"][0]["pattern"] == "/integrations/akeneo/custom-mappings"


def test_export_report_failure(validator, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(ReportExportError):
        validator.export_validation_report(str(blocker / "report.json"))


# ── Extension ────────────────────────────────────────────────────────────────

def test_register_schema_replaces_contract(validator):
    validator.register_schema("stores:list", {"type": "object"}, "relaxed for migration")
    result = validator.validate_response("/api/stores", "GET", {"anything": "goes"})
    assert result.valid


def test_registry_keeps_private_copy():
    registry = SchemaRegistry(preload=False)
    schema = {"type": "object", "required": ["id"]}
    registry.register("widgets:single", schema)
    schema["required"].append("name")

    assert registry.get("widgets:single")["required"] == ["id"]


def test_history_is_read_only(validator):
    validator.validate_response("/api/products", "GET", {"success": True, "data": []})
    assert isinstance(validator.validation_history, tuple)
    assert isinstance(validator.breaking_changes, tuple)
