import pytest

from contract_guard.core.constants import SCANNER_CRITICAL_ENDPOINTS
from contract_guard.core.models import RiskLevel, TransformationRule
from contract_guard.services.transformation_rules import TransformationRuleEngine


def test_custom_mappings_rule():
    engine = TransformationRuleEngine()
    rule = engine.find_rule("/integrations/akeneo/custom-mappings")

    assert rule is not None
    assert rule.should_transform is False
    assert rule.risk_level is RiskLevel.HIGH
    assert rule.bug_history[0].date == "2025-01-10"


def test_containment_and_normalized_lookup():
    engine = TransformationRuleEngine()

    prefixed = engine.find_rule("/api/integrations/akeneo/custom-mappings")
    assert prefixed is not None and prefixed.risk_level is RiskLevel.HIGH

    storage = engine.find_rule("/api/storage/files")
    assert storage is not None and storage.risk_level is RiskLevel.MEDIUM

    stats = engine.find_rule("/api/products/42/stats")
    assert stats is not None and stats.risk_level is RiskLevel.LOW, \
        "Numeric ids are normalized before matching /:id/stats"

    assert engine.find_rule("/api/products") is None


def test_longest_pattern_wins():
    engine = TransformationRuleEngine()
    engine.register("/integrations/", {"shouldTransform": True, "reason": "generic", "riskLevel": "LOW"})

    rule = engine.find_rule("/api/integrations/akeneo/custom-mappings/export")
    assert rule.should_transform is False, "The more specific custom-mappings rule must win"
    assert engine.find_matching_pattern("/api/integrations/shopify/products") == "/integrations/"


def test_equal_length_ties_keep_registration_order():
    engine = TransformationRuleEngine(preload=False)
    first = TransformationRule(should_transform=False, reason="first", risk_level=RiskLevel.LOW)
    second = TransformationRule(should_transform=True, reason="second", risk_level=RiskLevel.LOW)
    engine.register("/abc", first)
    engine.register("/xyz", second)

    assert engine.find_rule("/abc/xyz") is first


def test_register_from_dict():
    engine = TransformationRuleEngine(preload=False)
    rule = engine.register("/reports/", {
        "should_transform": False,
        "reason": "Reports stream raw CSV metadata",
        "risk_level": "MEDIUM",
        "bugHistory": [{"date": "2025-02-01", "issue": "x", "solution": "y", "prevention": "z"}],
    })

    assert rule.risk_level is RiskLevel.MEDIUM
    assert rule.bug_history[0].fix == "y"
    assert len(engine) == 1
    assert engine.rules()[0][0] == "/reports/"


def test_should_transform_falls_back_to_heuristic():
    engine = TransformationRuleEngine()
    assert engine.should_transform("/api/products") is True
    assert engine.should_transform("/products/stats") is False
    assert engine.should_transform("/api/storage/files") is False


def test_non_transform_endpoints():
    engine = TransformationRuleEngine()
    assert engine.non_transform_endpoints(SCANNER_CRITICAL_ENDPOINTS) == [
        "/integrations/akeneo/custom-mappings",
        "/storage/",
    ]


def test_register_requires_should_transform():
    engine = TransformationRuleEngine(preload=False)

    with pytest.raises(ValueError):
        engine.register("/reports/", {"reason": "no decision given", "riskLevel": "LOW"})

    assert len(engine) == 0
    assert engine.register("/exports/", {"shouldTransform": False}).should_transform is False
