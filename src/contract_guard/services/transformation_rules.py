"""
Transformation Rule Engine
==========================
Decides whether the client's generic transformation layer may unwrap an
endpoint's `{success, data}` envelope.

Lookup order for find_rule(endpoint):
  1. Exact match on the registered pattern.
  2. Substring containment: every pattern (leading/trailing "/" stripped) is
     tested against the raw endpoint and against its normalized form
     (numeric / UUID segments → ":id"). When several patterns match, the
     LONGEST pattern wins; equal lengths fall back to registration order.
  3. No match → None. Callers then use default_should_transform(), the
     documented path-shape heuristic the client applies.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from contract_guard.core.constants import DEFAULT_TRANSFORMATION_RULES
from contract_guard.core.models import TransformationRule
from contract_guard.utils.normalization import (
    contains_non_transform_fragment, looks_like_list_endpoint, normalize_path,
)

logger = logging.getLogger("contract_guard")


def default_should_transform(endpoint: str) -> bool:
    """
    The client's fallback heuristic:
    transform list-looking paths (`/list`, plural last segment) unless the
    path ends with an excluded suffix (stats, status, config, test, save)
    or contains a never-transform fragment (custom-mappings, storage/).
    """
    if contains_non_transform_fragment(endpoint):
        return False
    return looks_like_list_endpoint(endpoint)


class TransformationRuleEngine:

    def __init__(self, preload: bool = True):
        self._rules: Dict[str, TransformationRule] = {}
        if preload:
            for pattern, rule in DEFAULT_TRANSFORMATION_RULES.items():
                self._rules[pattern] = rule

    def register(self, pattern: str, rule: Union[TransformationRule, dict]) -> TransformationRule:
        if isinstance(rule, dict):
            rule = TransformationRule.from_dict(rule)
        self._rules[pattern] = rule
        logger.info(f"📝 Transformation rule registered: {pattern}")
        return rule

    def rules(self) -> List[Tuple[str, TransformationRule]]:
        return list(self._rules.items())

    def __len__(self) -> int:
        return len(self._rules)

    # ── Lookup ───────────────────────────────────────────────────────────────

    def find_rule(self, endpoint: str) -> Optional[TransformationRule]:
        match = self.find_matching_pattern(endpoint)
        return self._rules[match] if match is not None else None

    def find_matching_pattern(self, endpoint: str) -> Optional[str]:
        """The registered pattern that governs an endpoint, or None."""
        if endpoint in self._rules:
            return endpoint

        normalized = normalize_path(endpoint)
        best: Optional[str] = None
        best_len = -1
        for pattern in self._rules:
            needle = pattern.strip("/")
            if not needle:
                continue
            if needle in endpoint or needle in normalized:
                # strict ">" keeps the earliest registration on ties
                if len(needle) > best_len:
                    best, best_len = pattern, len(needle)
        return best

    def should_transform(self, endpoint: str) -> bool:
        rule = self.find_rule(endpoint)
        if rule is None:
            return default_should_transform(endpoint)
        return rule.should_transform

    def non_transform_endpoints(self, candidates: Iterable[str]) -> List[str]:
        """Candidates governed by an explicit never-transform rule."""
        result = []
        for endpoint in candidates:
            rule = self.find_rule(endpoint)
            if rule is not None and rule.should_transform is False:
                result.append(endpoint)
        return result
