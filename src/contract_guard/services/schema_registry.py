"""
Schema Registry
===============
Keyed store of contract schemas.

Keys follow `<entity>:<shape>` (e.g. `products:list`, `orders:single`), with
bespoke keys for special endpoints (`akeneo-custom-mappings`) and
`error:<status>` for error envelopes.

A registry is populated at construction and can be extended with register().
Stored schemas are private deep copies: mutating the dict passed to register()
afterwards does not change the contract.
"""

import copy
import logging
from typing import Any, Dict, Iterator, List, Optional

from jsonschema import Draft202012Validator

from contract_guard.core.constants import ERROR_STATUS_CODES
from contract_guard.utils.schemas import (
    AKENEO_CUSTOM_MAPPING_SCHEMA, ENTITY_SCHEMAS, ERROR_RESPONSE_SCHEMA,
    build_list_schema, build_single_schema,
)

logger = logging.getLogger("contract_guard")


class SchemaRegistry:

    def __init__(self, preload: bool = True):
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._descriptions: Dict[str, str] = {}
        self._validators: Dict[str, Draft202012Validator] = {}
        if preload:
            self._register_defaults()

    def _register_defaults(self) -> None:
        for entity, item_schema in ENTITY_SCHEMAS.items():
            self._store(f"{entity}:list", build_list_schema(item_schema), f"{entity} list envelope")
            self._store(f"{entity}:single", build_single_schema(item_schema), f"single {entity} envelope")

        self._store(
            "akeneo-custom-mappings",
            AKENEO_CUSTOM_MAPPING_SCHEMA,
            "Raw custom mappings response (must never be transformed)",
        )

        for status in ERROR_STATUS_CODES:
            self._store(f"error:{status}", ERROR_RESPONSE_SCHEMA, f"HTTP {status} error envelope")

        logger.debug(f"📚 SchemaRegistry: {len(self._schemas)} default schemas loaded")

    def _store(self, key: str, schema: Dict[str, Any], description: str) -> None:
        Draft202012Validator.check_schema(schema)
        self._schemas[key] = copy.deepcopy(schema)
        self._descriptions[key] = description
        self._validators.pop(key, None)

    # ── Read / Write ─────────────────────────────────────────────────────────

    def register(self, key: str, schema: Dict[str, Any], description: str = "") -> None:
        """Insert or overwrite a schema."""
        replaced = key in self._schemas
        self._store(key, schema, description)
        verb = "replaced" if replaced else "registered"
        logger.info(f"📝 Schema {verb}: {key} - {description}")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the schema for a key, or None if nothing is registered."""
        schema = self._schemas.get(key)
        return copy.deepcopy(schema) if schema is not None else None

    def validator_for(self, key: str) -> Optional[Draft202012Validator]:
        """Compiled validator for a key (cached until the key is re-registered)."""
        if key not in self._schemas:
            return None
        if key not in self._validators:
            self._validators[key] = Draft202012Validator(self._schemas[key])
        return self._validators[key]

    def describe(self, key: str) -> Optional[str]:
        return self._descriptions.get(key)

    def has(self, key: str) -> bool:
        return key in self._schemas

    def keys(self) -> List[str]:
        return list(self._schemas.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._schemas))
