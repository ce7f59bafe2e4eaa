"""
Contract Fixture Generator
==========================
Deterministic synthetic payloads for contract tests: entities, envelopes,
edge cases, performance tiers and the regression fixtures that pin down the
custom-mappings transformation bug.

Every generator draws from one private random.Random seeded with 12345, so
the same call sequence always yields the same data. reset_seed() rewinds it.
Timestamps are offsets from a fixed reference instant, never the wall clock.

Overrides are merged last. An override whose value is None removes the key:

    gen.generate_product({"name": None})   # → product without "name"
"""

import math
import random
import re
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from contract_guard.core.config import DEFAULT_SEED

# Anchor for every generated timestamp
REFERENCE_TIME = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ──────────────────────────────────────────────────────
# DATA POOLS (for varied but realistic output)
# ──────────────────────────────────────────────────────

_PRODUCT_ADJECTIVES = [
    "Ergonomic", "Rustic", "Sleek", "Handcrafted", "Refined", "Practical",
    "Elegant", "Gorgeous", "Modern", "Vintage", "Compact", "Luxurious",
]

_PRODUCT_MATERIALS = [
    "Steel", "Wooden", "Cotton", "Granite", "Bamboo", "Leather",
    "Ceramic", "Wool", "Marble", "Plastic", "Bronze", "Linen",
]

_PRODUCT_NOUNS = [
    "Chair", "Table", "Lamp", "Shirt", "Backpack", "Mug", "Keyboard",
    "Sofa", "Wallet", "Jacket", "Clock", "Bottle", "Towel", "Shoes",
]

_DEPARTMENTS = [
    "Electronics", "Home & Garden", "Clothing", "Sports", "Toys", "Books",
    "Beauty", "Automotive", "Grocery", "Jewelry", "Outdoors", "Kids",
]

_FIRST_NAMES = [
    "Aarav", "Sophia", "Liam", "Aisha", "Mateo", "Yuki", "Oliver", "Mei",
    "Noah", "Zara", "Ethan", "Priya", "Lucas", "Sara", "Arjun", "Elena",
]

_LAST_NAMES = [
    "Sharma", "Smith", "Tanaka", "Garcia", "Müller", "Kim", "Okafor",
    "Rossi", "Dubois", "Patel", "Nguyen", "Jansen", "Silva", "Novak",
]

_COMPANY_PREFIXES = [
    "Acme", "Globex", "Initech", "Umbrella", "Stark", "Wayne", "Hooli",
    "Vandelay", "Soylent", "Tyrell", "Aperture", "Cyberdyne",
]

_COMPANY_SUFFIXES = ["Inc", "LLC", "Group", "Labs", "Trading", "Co"]

_EMAIL_DOMAINS = ["example.com", "mail.test", "shop.test", "demo.org"]

_STREETS = [
    "Main St", "Oak Avenue", "Maple Drive", "Canal Street", "Park Lane",
    "Station Road", "High Street", "Elm Court", "River Walk",
]

_CITIES = [
    ("Amsterdam", "Noord-Holland", "Netherlands"),
    ("Austin", "Texas", "United States"),
    ("Berlin", "Berlin", "Germany"),
    ("Lyon", "Auvergne-Rhône-Alpes", "France"),
    ("Toronto", "Ontario", "Canada"),
    ("Osaka", "Osaka", "Japan"),
    ("Manchester", "England", "United Kingdom"),
]

_WORDS = [
    "lorem", "ipsum", "dolor", "amet", "consectetur", "adipiscing", "elit",
    "tempor", "magna", "aliqua", "veniam", "nostrud", "ullamco", "laboris",
    "commodo", "aute", "irure", "velit", "cillum", "fugiat", "pariatur",
]

_FILE_EXTENSIONS = ["jpg", "png", "pdf", "csv", "webp"]


def slugify(text: str) -> str:
    """Lowercase, every run of non-alphanumerics collapsed to a single '-'."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def apply_overrides(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge overrides last; a None override drops the key."""
    for key, value in (overrides or {}).items():
        if value is None:
            base.pop(key, None)
        else:
            base[key] = value
    return base


class TestDataGenerators:
    # keep pytest from collecting this as a test class
    __test__ = False

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed_value = seed
        self._rng = random.Random(seed)

    def reset_seed(self) -> None:
        self._rng.seed(self.seed_value)

    # ── Primitive draws ──────────────────────────────────────────────────────

    def _uuid(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def _bool(self) -> bool:
        return self._rng.random() < 0.5

    def _choice(self, pool):
        return self._rng.choice(pool)

    def _price(self, low: float = 1.0, high: float = 1000.0) -> float:
        return round(self._rng.uniform(low, high), 2)

    def _float(self, low: float, high: float) -> float:
        return round(self._rng.uniform(low, high), 2)

    def _words(self, count: int) -> str:
        return " ".join(self._rng.choice(_WORDS) for _ in range(count))

    def _sentence(self) -> str:
        return self._words(self._rng.randint(6, 12)).capitalize() + "."

    def _alphanumeric(self, length: int) -> str:
        return "".join(self._rng.choice(string.ascii_uppercase + string.digits) for _ in range(length))

    def _digits(self, length: int) -> str:
        return "".join(self._rng.choice(string.digits) for _ in range(length))

    def _timestamp(self, max_offset: timedelta) -> str:
        offset = self._rng.uniform(0, max_offset.total_seconds())
        return (REFERENCE_TIME - timedelta(seconds=offset)).strftime("%Y-%m-%dT%H:%M:%S.000Z")

    def _past(self) -> str:
        return self._timestamp(timedelta(days=365))

    def _recent(self) -> str:
        return self._timestamp(timedelta(days=1))

    def _product_name(self) -> str:
        return (f"{self._choice(_PRODUCT_ADJECTIVES)} {self._choice(_PRODUCT_MATERIALS)} "
                f"{self._choice(_PRODUCT_NOUNS)}")

    def _company(self) -> str:
        return f"{self._choice(_COMPANY_PREFIXES)} {self._choice(_COMPANY_SUFFIXES)}"

    def _email(self) -> str:
        user = f"{self._choice(_FIRST_NAMES)}.{self._choice(_LAST_NAMES)}".lower()
        return f"{slugify(user).replace('-', '.')}{self._rng.randint(1, 99)}@{self._choice(_EMAIL_DOMAINS)}"

    def _image_url(self) -> str:
        return f"https://picsum.photos/seed/{self._alphanumeric(8).lower()}/640/480"

    # ── Products ─────────────────────────────────────────────────────────────

    def generate_product(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        categories = [self._uuid(), self._uuid()]
        name = self._product_name()

        product = {
            "id": self._uuid(),
            "name": name,
            "slug": slugify(name),
            "sku": self._alphanumeric(8),
            "price": self._price(),
            "special_price": self._price() if self._bool() else None,
            "description": self._sentence(),
            "short_description": self._sentence(),
            "status": self._choice(["active", "inactive"]),
            "visibility": self._choice(["catalog", "search", "both", "none"]),
            "weight": self._float(0.1, 50),
            "dimensions": {
                "length": self._float(1, 100),
                "width": self._float(1, 100),
                "height": self._float(1, 100),
            },
            "stock_quantity": self._rng.randint(0, 1000),
            "manage_stock": self._bool(),
            "in_stock": self._bool(),
            "backorders": self._choice(["no", "notify", "yes"]),
            "categories": categories,
            "images": self.generate_product_images(),
            "attributes": self.generate_product_attributes(),
            "seo": {
                "meta_title": self._words(5),
                "meta_description": self._sentence(),
                "meta_keywords": ", ".join(self._words(10).split()),
            },
            "created_at": self._past(),
            "updated_at": self._recent(),
        }
        return apply_overrides(product, overrides)

    def generate_product_images(self, count: int = 3) -> List[Dict[str, Any]]:
        return [
            {
                "id": self._uuid(),
                "url": self._image_url(),
                "alt": self._words(3),
                "position": index,
            }
            for index in range(count)
        ]

    def generate_product_attributes(self) -> Dict[str, Any]:
        return {
            "color": self._choice(["red", "blue", "green", "black", "white"]),
            "size": self._choice(["XS", "S", "M", "L", "XL"]),
            "material": self._choice(["cotton", "polyester", "wool", "silk"]),
            "brand": self._company(),
            "warranty": self._bool(),
            "eco_friendly": self._bool(),
            "tags": [self._choice(_WORDS) for _ in range(3)],
        }

    # ── Categories ───────────────────────────────────────────────────────────

    def generate_category(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        name = self._choice(_DEPARTMENTS)
        category = {
            "id": self._uuid(),
            "name": name,
            "slug": slugify(name),
            "description": self._sentence(),
            "parent_id": self._uuid() if self._bool() else None,
            "level": self._rng.randint(0, 3),
            "position": self._rng.randint(0, 100),
            "is_active": self._bool(),
            "include_in_menu": self._bool(),
            "image": self._image_url(),
            "meta_title": self._words(4),
            "meta_description": self._sentence(),
            "created_at": self._past(),
            "updated_at": self._recent(),
        }
        return apply_overrides(category, overrides)

    # ── Orders ───────────────────────────────────────────────────────────────

    def generate_order(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        items = self.generate_order_items()
        subtotal = sum(item["total"] for item in items)
        tax_amount = subtotal * 0.1
        shipping_amount = 15.99
        discount_amount = subtotal * 0.1 if self._bool() else 0
        total = subtotal + tax_amount + shipping_amount - discount_amount

        order = {
            "id": self._uuid(),
            "order_number": f"ORD-{self._digits(8)}",
            "status": self._choice(["pending", "processing", "shipped", "delivered",
                                    "cancelled", "refunded", "failed"]),
            "payment_status": self._choice(["pending", "paid", "failed", "refunded",
                                            "partially_refunded"]),
            "customer_email": self._email(),
            "customer_name": f"{self._choice(_FIRST_NAMES)} {self._choice(_LAST_NAMES)}",
            "subtotal": round(subtotal, 2),
            "tax_amount": round(tax_amount, 2),
            "shipping_amount": shipping_amount,
            "discount_amount": round(discount_amount, 2),
            "total": round(total, 2),
            "currency": "USD",
            "items": items,
            "billing_address": self.generate_address(),
        }
        # shipping_address is optional but never null
        if self._bool():
            order["shipping_address"] = self.generate_address()
        order["created_at"] = self._past()
        order["updated_at"] = self._recent()
        return apply_overrides(order, overrides)

    def generate_order_items(self, count: int = 3) -> List[Dict[str, Any]]:
        items = []
        for _ in range(count):
            quantity = self._rng.randint(1, 5)
            price = self._price()
            items.append({
                "id": self._uuid(),
                "product_id": self._uuid(),
                "product_name": self._product_name(),
                "sku": self._alphanumeric(8),
                "quantity": quantity,
                "price": price,
                "total": round(quantity * price, 2),
            })
        return items

    def generate_address(self) -> Dict[str, Any]:
        city, state, country = self._choice(_CITIES)
        return {
            "first_name": self._choice(_FIRST_NAMES),
            "last_name": self._choice(_LAST_NAMES),
            "email": self._email(),
            "phone": f"+1-555-{self._digits(3)}-{self._digits(4)}",
            "company": self._company() if self._bool() else "",
            "address_1": f"{self._rng.randint(1, 999)} {self._choice(_STREETS)}",
            "address_2": f"Apt. {self._rng.randint(1, 500)}" if self._bool() else "",
            "city": city,
            "state": state,
            "postal_code": self._digits(5),
            "country": country,
        }

    # ── Users & Stores ───────────────────────────────────────────────────────

    def generate_user(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        user = {
            "id": self._uuid(),
            "email": self._email(),
            "role": self._choice(["admin", "store_owner", "customer", "guest"]),
            "account_type": self._choice(["agency", "brand", "individual"]),
            "first_name": self._choice(_FIRST_NAMES),
            "last_name": self._choice(_LAST_NAMES),
            "is_active": self._bool(),
            "email_verified": self._bool(),
            "last_login": self._recent() if self._bool() else None,
            "created_at": self._past(),
            "updated_at": self._recent(),
        }
        return apply_overrides(user, overrides)

    def generate_store(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        name = self._company()
        store = {
            "id": self._uuid(),
            "name": name,
            "slug": slugify(name),
            "domain": f"{slugify(self._company())}.example.com",
            "status": self._choice(["active", "inactive", "suspended"]),
            "owner_id": self._uuid(),
            "settings": {
                "currency": self._choice(["USD", "EUR", "GBP", "CAD"]),
                "timezone": self._choice(["UTC", "America/New_York", "Europe/London", "Asia/Tokyo"]),
                "language": self._choice(["en", "es", "fr", "de"]),
                "theme": self._choice(["default", "modern", "classic"]),
            },
            "created_at": self._past(),
            "updated_at": self._recent(),
        }
        return apply_overrides(store, overrides)

    # ── Akeneo ───────────────────────────────────────────────────────────────

    def generate_akeneo_mapping(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        mapping = {
            "id": self._uuid(),
            "store_id": self._uuid(),
            "akeneo_attribute": self._choice(["name", "description", "price", "color",
                                              "size", "material", "weight"]),
            "catalog_attribute": self._choice(["product_name", "product_description", "base_price",
                                               "color_option", "size_option", "material_type",
                                               "shipping_weight"]),
            "attribute_type": self._choice(["text", "textarea", "number", "price", "date",
                                            "boolean", "select", "multiselect", "image", "file"]),
            "mapping_rules": {
                "transform": self._choice(["lowercase", "uppercase", "trim", "none"]),
                "default_value": self._choice(_WORDS),
                "required": self._bool(),
                "validation": {
                    "min_length": self._rng.randint(1, 10),
                    "max_length": self._rng.randint(50, 255),
                    "pattern": r"^[a-zA-Z0-9\s]+$",
                },
            },
            "is_active": self._bool(),
            "created_at": self._past(),
            "updated_at": self._recent(),
        }
        return apply_overrides(mapping, overrides)

    def generate_akeneo_custom_mapping_response(
        self, overrides: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        The raw shape of /integrations/akeneo/custom-mappings. No `data` key:
        the client must hand it to the UI untouched.
        """
        attributes = []
        for _ in range(5):
            attribute = {
                "akeneo_code": self._choice(["name", "description", "price", "color", "size"]),
                "catalog_code": self._choice(["product_name", "product_desc", "base_price",
                                              "color_attr", "size_attr"]),
                "type": self._choice(["text", "textarea", "price", "select", "multiselect"]),
                "label": self._words(2),
                "required": self._bool(),
            }
            if self._bool():
                attribute["options"] = [self._choice(_WORDS), self._choice(_WORDS)]
            attributes.append(attribute)

        images = [
            {
                "akeneo_code": f"image_{index + 1}",
                "catalog_code": f"product_image_{index + 1}",
                "type": "image",
                "position": index,
            }
            for index in range(2)
        ]

        files = [{"akeneo_code": "product_manual", "catalog_code": "manual_file", "type": "file"}]

        response = {
            "success": True,
            "mappings": {
                "attributes": attributes,
                "images": images,
                "files": files,
            },
            "meta": {
                "total_mappings": len(attributes) + len(images) + len(files),
                "active_mappings": self._rng.randint(5, 8),
                "last_sync": self._recent(),
            },
        }
        return apply_overrides(response, overrides)

    # ── Envelopes ────────────────────────────────────────────────────────────

    @staticmethod
    def generate_success_response(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = {"success": True, "data": data}
        if meta:
            response["meta"] = meta
        return response

    @staticmethod
    def generate_error_response(
        message: str,
        errors: Optional[List[str]] = None,
        status_code: int = 400,
    ) -> Dict[str, Any]:
        return {
            "success": False,
            "message": message,
            "errors": list(errors or []),
            "status": status_code,
        }

    @staticmethod
    def generate_list_response(
        items: List[Any],
        pagination: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        response: Dict[str, Any] = {"success": True, "data": items}
        if pagination:
            limit = pagination.get("limit") or 10
            total = pagination.get("total") or len(items)
            response["meta"] = {
                "page": pagination.get("page") or 1,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            }
        return response

    # ── Scenario bundles ─────────────────────────────────────────────────────

    def generate_edge_case_scenarios(self) -> Dict[str, Any]:
        return {
            "emptyList": self.generate_list_response([]),
            "singleItem": self.generate_list_response([self.generate_product()]),
            "largeList": self.generate_list_response([self.generate_product() for _ in range(100)]),
            "invalidData": {
                "missingRequiredFields": self.generate_product({"name": None, "price": None}),
                "wrongTypes": self.generate_product({"price": "not-a-number", "status": 123}),
                "invalidEnums": self.generate_product({
                    "status": "invalid-status",
                    "visibility": "invalid-visibility",
                }),
            },
            "transformationCases": {
                "customMappingsRawResponse": self.generate_akeneo_custom_mapping_response(),
                # what the client produced when it wrongly unwrapped the response
                "customMappingsTransformedResponse": [self.generate_akeneo_mapping()],
                "storageEndpointResponse": {
                    "success": True,
                    "data": {
                        "file_url": self._image_url(),
                        "file_name": f"{self._choice(_WORDS)}.{self._choice(_FILE_EXTENSIONS)}",
                        "file_size": self._rng.randint(1024, 1048576),
                        "content_type": "image/jpeg",
                    },
                },
            },
        }

    PERFORMANCE_TIERS = {
        "small": {"products": 10, "categories": 5, "orders": 20},
        "medium": {"products": 100, "categories": 20, "orders": 200},
        "large": {"products": 1000, "categories": 50, "orders": 2000},
        "xlarge": {"products": 10000, "categories": 100, "orders": 20000},
    }

    def generate_performance_test_data(self, size: str = "medium") -> Dict[str, List[Dict[str, Any]]]:
        tier = self.PERFORMANCE_TIERS.get(size, self.PERFORMANCE_TIERS["medium"])
        return {
            "products": [self.generate_product() for _ in range(tier["products"])],
            "categories": [self.generate_category() for _ in range(tier["categories"])],
            "orders": [self.generate_order() for _ in range(tier["orders"])],
            "users": [self.generate_user() for _ in range(math.ceil(tier["orders"] / 10))],
            "stores": [self.generate_store() for _ in range(5)],
        }

    def generate_regression_test_data(self) -> Dict[str, Any]:
        """Payloads that reproduced past transformation bugs."""
        return {
            "customMappingsBug": {
                "description": "Response transformation broke custom mappings structure",
                "endpoint": "/integrations/akeneo/custom-mappings",
                "correctResponse": self.generate_akeneo_custom_mapping_response(),
                "incorrectResponse": [self.generate_akeneo_mapping()],
                "testCase": "Ensure custom mappings endpoint returns raw response structure",
            },
            "endpointTransformationBug": {
                "description": 'Endpoints ending in "s" were incorrectly transformed',
                "testCases": [
                    {
                        "endpoint": "/integrations/akeneo/status",
                        "shouldTransform": False,
                        "response": {"success": True, "status": "connected", "last_sync": self._recent()},
                    },
                    {
                        "endpoint": "/products/stats",
                        "shouldTransform": False,
                        "response": {"success": True, "total_products": 150, "active_products": 120},
                    },
                    {
                        "endpoint": "/storage/files",
                        "shouldTransform": False,
                        "response": {"success": True, "files": [], "total_size": 0},
                    },
                ],
            },
        }

    def generate_contract_test_cases(self) -> List[Dict[str, Any]]:
        """
        One well-formed response per critical contract, as
        {endpoint, method, status_code, response}. All of them must validate.
        """
        return [
            {
                "endpoint": "/integrations/akeneo/custom-mappings",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_akeneo_custom_mapping_response(),
            },
            {
                "endpoint": "/api/products",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_list_response(
                    [self.generate_product()], {"page": 1, "limit": 10, "total": 1}
                ),
            },
            {
                "endpoint": "/api/products/42",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_success_response(self.generate_product()),
            },
            {
                "endpoint": "/api/categories",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_list_response([self.generate_category() for _ in range(3)]),
            },
            {
                "endpoint": "/api/orders",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_list_response([self.generate_order() for _ in range(2)]),
            },
            {
                "endpoint": "/api/users",
                "method": "POST",
                "status_code": 200,
                "response": self.generate_success_response(self.generate_user()),
            },
            {
                "endpoint": "/api/stores",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_list_response([self.generate_store()]),
            },
            {
                "endpoint": "/api/integrations/akeneo/mappings",
                "method": "GET",
                "status_code": 200,
                "response": self.generate_list_response([self.generate_akeneo_mapping()]),
            },
            {
                "endpoint": "/api/products/999",
                "method": "GET",
                "status_code": 404,
                "response": self.generate_error_response("Product not found", status_code=404),
            },
        ]
