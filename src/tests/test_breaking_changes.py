"""
Breaking-change classification, severity, suggestions and narration.
"""
from contract_guard.core.models import ChangeType, Severity, ValidationIssue
from contract_guard.services.breaking_changes import BreakingChangeDetector

MISSING_ID = ValidationIssue('"id" is required', ("data", "id"), "required", {"key": "id"})
WRONG_TYPE = ValidationIssue("'x' is not of type 'number'", ("data", "price"), "type", {"value": "x"})
UNKNOWN_KEY = ValidationIssue('"profile_v2" is not allowed', ("data", "profile_v2"), "additionalProperties",
                              {"key": "profile_v2", "value": 3})
BAD_ENUM = ValidationIssue("'gone' is not one of [...]", ("data", "status"), "enum", {"value": "gone"})


def test_classify():
    detector = BreakingChangeDetector()
    assert detector.classify(MISSING_ID) is ChangeType.MISSING_REQUIRED_FIELD
    assert detector.classify(UNKNOWN_KEY) is ChangeType.UNEXPECTED_FIELD
    assert detector.classify(WRONG_TYPE) is ChangeType.TYPE_MISMATCH
    assert detector.classify(BAD_ENUM) is ChangeType.INVALID_ENUM_VALUE
    assert detector.classify(ValidationIssue("boom")) is ChangeType.UNKNOWN
    assert detector.classify([ValidationIssue("boom"), BAD_ENUM, MISSING_ID]) is ChangeType.INVALID_ENUM_VALUE


def test_severity():
    detector = BreakingChangeDetector()
    assert detector.determine_severity([MISSING_ID], "/api/orders/1") is Severity.HIGH
    assert detector.determine_severity([WRONG_TYPE], "/integrations/akeneo/custom-mappings") is Severity.HIGH
    assert detector.determine_severity([MISSING_ID], "/api/products/1") is Severity.LOW
    assert detector.determine_severity([UNKNOWN_KEY], "/api/products/1") is Severity.MEDIUM
    assert detector.determine_severity([UNKNOWN_KEY], "/api/orders/1") is Severity.MEDIUM, \
        "Additive changes are never HIGH, even on critical endpoints"
    assert detector.determine_severity([BAD_ENUM], "/api/users") is Severity.MEDIUM


def test_fix_suggestions_are_ordered_and_unique():
    detector = BreakingChangeDetector()
    suggestions = detector.generate_fix_suggestions(
        [MISSING_ID, MISSING_ID, UNKNOWN_KEY], "/integrations/akeneo/custom-mappings"
    )

    assert suggestions[0] == "Add new field to schema or remove from response"
    assert len(suggestions) == len(set(suggestions))
    assert any("transformation is disabled" in s for s in suggestions)
    assert any("skip-transform" in s for s in suggestions)


def test_schema_update_proposal():
    detector = BreakingChangeDetector()
    proposal = detector.suggest_schema_updates("/api/users/1", [UNKNOWN_KEY, MISSING_ID])

    assert len(proposal.suggested_changes) == 1
    change = proposal.suggested_changes[0]
    assert change["action"] == "ADD_OPTIONAL_FIELD"
    assert change["field"] == "profile_v2"
    assert change["type"] == "integer"
    assert change["path"] == ["data", "profile_v2"]
    assert proposal.reasoning == ("Field 'profile_v2' appears in response but not in schema",)


def test_detect_records_changes():
    detector = BreakingChangeDetector()

    high = detector.detect("/api/orders/1", "GET", [MISSING_ID], {"success": True})
    assert high.severity is Severity.HIGH
    assert high.schema_update is None

    low = detector.detect("/api/products/1", "GET", [MISSING_ID], {"success": True})
    assert low.severity is Severity.LOW
    assert low.schema_update is not None

    additive = detector.detect("/api/users/1", "GET", [UNKNOWN_KEY], {"success": True})
    assert additive.schema_update.suggested_changes[0]["field"] == "profile_v2"

    assert len(detector) == 3
    assert detector.changes[0] is high
    assert '"success": true' in high.response


def test_narrate():
    detector = BreakingChangeDetector()
    assert "No breaking changes" in detector.narrate()

    detector.detect("/api/products/1", "GET", [UNKNOWN_KEY])
    detector.detect("/api/orders/1", "GET", [MISSING_ID])
    narrative = detector.narrate()
    print(narrative)

    assert "BREAKING" in narrative
    assert narrative.index("/api/orders/1") < narrative.index("/api/products/1"), "Most severe first"
    assert "$.data.id" in narrative
