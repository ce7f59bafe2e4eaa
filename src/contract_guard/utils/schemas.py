"""
Contract Schemas
================
JSON Schema (draft 2020-12) documents for every entity the admin console reads,
plus the success/error envelopes that wrap them.

Every object schema is strict (`additionalProperties: false`): a field the
contract does not know about is a violation, never silently ignored.

  build_list_schema(item)   → {success: true, data: [item, ...], meta?}
  build_single_schema(item) → {success: true, data: item, meta?}
  ERROR_RESPONSE_SCHEMA     → {success: false, message, errors?, status?}
"""

import copy
from typing import Any, Dict, Iterable, Optional

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

# ──────────────────────────────────────────────────────
# COMMON FIELD TYPES
# ──────────────────────────────────────────────────────

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"

ID = {"anyOf": [
    {"type": "string", "pattern": UUID_PATTERN},
    {"type": "integer", "minimum": 1},
]}
NULLABLE_ID = {"anyOf": [ID, {"type": "null"}]}
TIMESTAMP = {"type": "string", "pattern": TIMESTAMP_PATTERN}
NULLABLE_TIMESTAMP = {"type": ["string", "null"], "pattern": TIMESTAMP_PATTERN}
EMAIL = {"type": "string", "pattern": r"^[^@\s]+@[^@\s]+\.[^@\s]+$"}
URL = {"type": "string", "pattern": r"^https?://"}
NULLABLE_URL = {"type": ["string", "null"], "pattern": r"^https?://"}
SLUG = {"type": "string", "pattern": r"^[a-z0-9-]+$"}
PRICE = {"type": "number", "minimum": 0}
NULLABLE_PRICE = {"type": ["number", "null"], "minimum": 0}
BOOLEAN = {"type": "boolean"}
OPTIONAL_STRING = {"type": ["string", "null"]}
REQUIRED_STRING = {"type": "string", "minLength": 1}
CURRENCY = {"type": "string", "pattern": r"^[A-Z]{3}$"}
NON_NEGATIVE_INT = {"type": "integer", "minimum": 0}


def enum(*values: str) -> Dict[str, Any]:
    return {"type": "string", "enum": list(values)}


def strict_object(
    properties: Dict[str, Any],
    required: Iterable[str] = (),
    title: Optional[str] = None,
) -> Dict[str, Any]:
    """Object schema that rejects unknown keys."""
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": copy.deepcopy(properties),
        "required": list(required),
        "additionalProperties": False,
    }
    if title:
        schema["title"] = title
    return schema


def array_of(item_schema: Dict[str, Any], min_items: int = 0) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "array", "items": copy.deepcopy(item_schema)}
    if min_items:
        schema["minItems"] = min_items
    return schema


# ──────────────────────────────────────────────────────
# ENVELOPES
# ──────────────────────────────────────────────────────

PAGINATION_META = strict_object(
    {
        "page": {"type": "integer", "minimum": 1},
        "limit": {"type": "integer", "minimum": 1},
        "total": NON_NEGATIVE_INT,
        "pages": NON_NEGATIVE_INT,
    },
    required=["total"],
)

ERROR_RESPONSE_SCHEMA = strict_object(
    {
        "success": {"const": False},
        "message": {"type": "string"},
        "errors": array_of({"type": "string"}),
        "status": {"type": "integer", "minimum": 400, "maximum": 599},
    },
    required=["success", "message"],
    title="ErrorResponse",
)


def build_list_schema(item_schema: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an entity schema in the paginated list envelope."""
    schema = strict_object(
        {
            "success": {"const": True},
            "data": array_of(item_schema),
            "meta": PAGINATION_META,
        },
        required=["success", "data"],
        title=f"{item_schema.get('title', 'Item')}List",
    )
    schema["$schema"] = JSON_SCHEMA_DIALECT
    return schema


def build_single_schema(item_schema: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an entity schema in the single-entity envelope."""
    schema = strict_object(
        {
            "success": {"const": True},
            "data": item_schema,
            "meta": {"type": "object"},
        },
        required=["success", "data"],
        title=f"{item_schema.get('title', 'Item')}Response",
    )
    schema["$schema"] = JSON_SCHEMA_DIALECT
    return schema


# ──────────────────────────────────────────────────────
# ENTITIES
# ──────────────────────────────────────────────────────

PRODUCT_SCHEMA = strict_object(
    {
        "id": ID,
        "name": REQUIRED_STRING,
        "slug": SLUG,
        "sku": OPTIONAL_STRING,
        "price": PRICE,
        "special_price": NULLABLE_PRICE,
        "description": OPTIONAL_STRING,
        "short_description": OPTIONAL_STRING,
        "status": enum("active", "inactive"),
        "visibility": enum("catalog", "search", "both", "none"),
        "weight": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "dimensions": strict_object({
            "length": {"type": ["number", "null"], "exclusiveMinimum": 0},
            "width": {"type": ["number", "null"], "exclusiveMinimum": 0},
            "height": {"type": ["number", "null"], "exclusiveMinimum": 0},
        }),
        "stock_quantity": {"type": ["integer", "null"], "minimum": 0},
        "manage_stock": BOOLEAN,
        "in_stock": BOOLEAN,
        "backorders": enum("no", "notify", "yes"),
        "categories": array_of(ID),
        "images": array_of(strict_object(
            {
                "id": ID,
                "url": URL,
                "alt": OPTIONAL_STRING,
                "position": NON_NEGATIVE_INT,
            },
            required=["id", "url"],
        )),
        "attributes": {
            "type": "object",
            "additionalProperties": {"anyOf": [
                {"type": "string"},
                {"type": "number"},
                {"type": "boolean"},
                array_of({"type": "string"}),
            ]},
        },
        "seo": strict_object({
            "meta_title": OPTIONAL_STRING,
            "meta_description": OPTIONAL_STRING,
            "meta_keywords": OPTIONAL_STRING,
        }),
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "name", "slug", "price", "status", "visibility", "created_at", "updated_at"],
    title="Product",
)

CATEGORY_SCHEMA = strict_object(
    {
        "id": ID,
        "name": REQUIRED_STRING,
        "slug": SLUG,
        "description": OPTIONAL_STRING,
        "parent_id": NULLABLE_ID,
        "level": NON_NEGATIVE_INT,
        "position": NON_NEGATIVE_INT,
        "is_active": BOOLEAN,
        "include_in_menu": BOOLEAN,
        "image": NULLABLE_URL,
        "meta_title": OPTIONAL_STRING,
        "meta_description": OPTIONAL_STRING,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "name", "slug", "level", "is_active", "created_at", "updated_at"],
    title="Category",
)

ADDRESS_SCHEMA = strict_object(
    {
        "first_name": REQUIRED_STRING,
        "last_name": REQUIRED_STRING,
        "email": EMAIL,
        "phone": OPTIONAL_STRING,
        "company": OPTIONAL_STRING,
        "address_1": REQUIRED_STRING,
        "address_2": OPTIONAL_STRING,
        "city": REQUIRED_STRING,
        "state": OPTIONAL_STRING,
        "postal_code": REQUIRED_STRING,
        "country": REQUIRED_STRING,
    },
    required=["first_name", "last_name", "address_1", "city", "postal_code", "country"],
    title="Address",
)

ORDER_ITEM_SCHEMA = strict_object(
    {
        "id": ID,
        "product_id": ID,
        "product_name": REQUIRED_STRING,
        "sku": OPTIONAL_STRING,
        "quantity": {"type": "integer", "minimum": 1},
        "price": PRICE,
        "total": PRICE,
    },
    required=["id", "product_id", "product_name", "quantity", "price", "total"],
    title="OrderItem",
)

ORDER_SCHEMA = strict_object(
    {
        "id": ID,
        "order_number": REQUIRED_STRING,
        "status": enum("pending", "processing", "shipped", "delivered",
                       "cancelled", "refunded", "failed"),
        "payment_status": enum("pending", "paid", "failed", "refunded", "partially_refunded"),
        "customer_email": EMAIL,
        "customer_name": REQUIRED_STRING,
        "subtotal": PRICE,
        "tax_amount": PRICE,
        "shipping_amount": PRICE,
        "discount_amount": PRICE,
        "total": PRICE,
        "currency": CURRENCY,
        "items": array_of(ORDER_ITEM_SCHEMA, min_items=1),
        "billing_address": ADDRESS_SCHEMA,
        "shipping_address": ADDRESS_SCHEMA,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "order_number", "status", "payment_status", "customer_email",
              "customer_name", "subtotal", "total", "currency", "items",
              "billing_address", "created_at", "updated_at"],
    title="Order",
)

USER_SCHEMA = strict_object(
    {
        "id": ID,
        "email": EMAIL,
        "role": enum("admin", "store_owner", "customer", "guest"),
        "account_type": enum("agency", "brand", "individual"),
        "first_name": OPTIONAL_STRING,
        "last_name": OPTIONAL_STRING,
        "is_active": BOOLEAN,
        "email_verified": BOOLEAN,
        "last_login": NULLABLE_TIMESTAMP,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "email", "role", "created_at", "updated_at"],
    title="User",
)

STORE_SCHEMA = strict_object(
    {
        "id": ID,
        "name": REQUIRED_STRING,
        "slug": SLUG,
        "domain": OPTIONAL_STRING,
        "status": enum("active", "inactive", "suspended"),
        "owner_id": ID,
        "settings": strict_object({
            "currency": CURRENCY,
            "timezone": {"type": "string"},
            "language": {"type": "string", "pattern": r"^[a-z]{2}$"},
            "theme": {"type": "string"},
        }),
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "name", "slug", "status", "owner_id", "created_at", "updated_at"],
    title="Store",
)

AKENEO_ATTRIBUTE_TYPES = ("text", "textarea", "number", "price", "date",
                          "boolean", "select", "multiselect", "image", "file")

AKENEO_MAPPING_SCHEMA = strict_object(
    {
        "id": ID,
        "store_id": ID,
        "akeneo_attribute": REQUIRED_STRING,
        "catalog_attribute": REQUIRED_STRING,
        "attribute_type": enum(*AKENEO_ATTRIBUTE_TYPES),
        "mapping_rules": strict_object({
            "transform": {"type": "string"},
            "default_value": {},
            "required": BOOLEAN,
            "validation": {"type": "object"},
        }),
        "is_active": BOOLEAN,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    required=["id", "store_id", "akeneo_attribute", "catalog_attribute",
              "attribute_type", "is_active", "created_at", "updated_at"],
    title="AkeneoMapping",
)

# The endpoint the transformation layer once broke: it has no `data` key and
# must reach the UI exactly as the server sent it.
AKENEO_CUSTOM_MAPPING_SCHEMA = strict_object(
    {
        "success": BOOLEAN,
        "mappings": strict_object(
            {
                "attributes": array_of(strict_object(
                    {
                        "akeneo_code": REQUIRED_STRING,
                        "catalog_code": REQUIRED_STRING,
                        "type": REQUIRED_STRING,
                        "label": OPTIONAL_STRING,
                        "required": BOOLEAN,
                        "options": array_of({"type": "string"}),
                    },
                    required=["akeneo_code", "catalog_code", "type"],
                )),
                "images": array_of(strict_object(
                    {
                        "akeneo_code": REQUIRED_STRING,
                        "catalog_code": REQUIRED_STRING,
                        "type": {"const": "image"},
                        "position": NON_NEGATIVE_INT,
                    },
                    required=["akeneo_code", "catalog_code", "type"],
                )),
                "files": array_of(strict_object(
                    {
                        "akeneo_code": REQUIRED_STRING,
                        "catalog_code": REQUIRED_STRING,
                        "type": {"const": "file"},
                    },
                    required=["akeneo_code", "catalog_code", "type"],
                )),
            },
            required=["attributes", "images", "files"],
        ),
        "meta": strict_object(
            {
                "total_mappings": NON_NEGATIVE_INT,
                "active_mappings": NON_NEGATIVE_INT,
                "last_sync": NULLABLE_TIMESTAMP,
            },
            required=["total_mappings", "active_mappings"],
        ),
    },
    required=["success", "mappings"],
    title="AkeneoCustomMappings",
)
AKENEO_CUSTOM_MAPPING_SCHEMA["$schema"] = JSON_SCHEMA_DIALECT

# Entity name → item schema; each gets a `:list` and a `:single` registry entry.
ENTITY_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "products": PRODUCT_SCHEMA,
    "categories": CATEGORY_SCHEMA,
    "orders": ORDER_SCHEMA,
    "users": USER_SCHEMA,
    "stores": STORE_SCHEMA,
    "akeneo-mappings": AKENEO_MAPPING_SCHEMA,
}
