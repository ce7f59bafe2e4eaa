"""
Changed-Files Static Scanner
============================
Pre-commit guard: reads the files a change touches and flags code that could
break an API contract or the client's transformation rules.

Each file is dispatched by path to every category it belongs to:

  API client       client.js / api-client / client.py
  Routes           /routes/, /controllers/
  Schemas/models   /models/, /schemas/
  UI components    /components/ + .jsx / .tsx

Errors block the commit (exit code 1). Warnings are printed for review only.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from contract_guard.core.constants import LIST_EXCLUSION_SUFFIXES, SCANNER_CRITICAL_ENDPOINTS
from contract_guard.core.errors import ScanFileError
from contract_guard.core.models import ScanFinding
from contract_guard.services.contract_validator import ContractValidator, determine_schema_key
from contract_guard.services.transformation_rules import default_should_transform
from contract_guard.utils.normalization import ID_PLACEHOLDER, is_plural_segment, normalize_path, strip_api_prefix

logger = logging.getLogger("contract_guard")


# ──────────────────────────────────────────────────────
# PATTERN TABLES
# ──────────────────────────────────────────────────────

# Any of these means the file touches transformation control logic
_TRANSFORMATION_CONTROL_PATTERNS = [
    re.compile(r"shouldEndpointTransform"),
    re.compile(r"should_transform"),
    re.compile(r"custom-mappings"),
    re.compile(r"endsWith\(['\"]s['\"]\)"),
    re.compile(r"endswith\(['\"]s['\"]\)"),
    re.compile(r"transformation.*applied", re.IGNORECASE),
    re.compile(r"skip-transform"),
]

_API_LITERAL = re.compile(r"['\"`](/api/[^'\"`]+)['\"`]")

# Express `router.get('/x')` / `app.post("/x")` and FastAPI `@router.get("/x")`
_ROUTE_PATTERN = re.compile(
    r"@?(?:router|app)\.(get|post|put|patch|delete)\(\s*['\"`]([^'\"`]+)['\"`]"
)

_NON_TRANSFORM_ROUTES = [
    re.compile(r"/custom-mappings"),
    re.compile(r"/storage/"),
    re.compile(r"/stats$"),
    re.compile(r"/status$"),
    re.compile(r"/config$"),
    re.compile(r"/health$"),
]

_RESPONSE_CONSTRUCTION = [
    re.compile(r"res\.json\(\s*\{[^}]*success\s*:\s*true"),
    re.compile(r"res\.json\(\s*\{[^}]*data\s*:"),
    re.compile(r"res\.json\(\s*\["),
]

_STRUCTURAL_CONSTRAINTS = [
    re.compile(r"DataTypes\.\w+"),
    re.compile(r"allowNull:\s*false"),
    re.compile(r"validate:\s*\{"),
    re.compile(r"nullable\s*=\s*False"),
]

_NON_NULLABLE = re.compile(r"allowNull:\s*false|nullable\s*=\s*False")
_INLINE_VALIDATION = re.compile(r"validate:|@validates\(")

_DIRECT_API_CALLS = [
    re.compile(r"fetch\(['\"`]/api/"),
    re.compile(r"axios\.(get|post|put|delete)\(['\"`]/api/"),
    re.compile(r"\$\.ajax\("),
    re.compile(r"XMLHttpRequest"),
]

_CRITICAL_USAGE = [
    re.compile(r"custom-mappings"),
    re.compile(r"/storage/"),
    re.compile(r"/stats"),
    re.compile(r"/status"),
]


def _is_excluded_list_suffix(path: str) -> bool:
    return any(path.endswith(suffix) for suffix in LIST_EXCLUSION_SUFFIXES)


def _looks_like_new_list(path: str) -> bool:
    path = path.rstrip("/")
    last = path.rsplit("/", 1)[-1]
    if not is_plural_segment(last) or _is_excluded_list_suffix(path):
        return False
    return default_should_transform(path)


def _handled_on_same_line(endpoint: str) -> re.Pattern:
    """`<endpoint> ... shouldTransform ... false` or `<endpoint> ... skip ... transform`."""
    escaped = re.escape(endpoint)
    return re.compile(
        rf"{escaped}.*should_?transform.*false|{escaped}.*skip.*transform",
        re.IGNORECASE,
    )


def route_schema_key(method: str, route: str) -> Optional[str]:
    """
    Contract key a newly declared route would need: the key the validator
    resolves for it, else the `<entity>:<shape>` convention.

      GET  /api/products                      → products:list
      GET  /api/products/:id                  → products:single
      POST /api/products                      → products:single
      GET  /api/integrations/akeneo/mappings  → akeneo-mappings:list
      GET  /api/gadgets/{gadget_id}           → gadgets:single
      DELETE /api/products                    → None
    """
    method = method.upper()
    clean = strip_api_prefix(normalize_path(route))
    segments = clean.split("/")
    has_id = ID_PLACEHOLDER in segments

    if method == "DELETE" and not has_id:
        return None

    known = determine_schema_key(route, method)
    if known:
        return known

    entity = "/".join(s for s in segments if s and s != ID_PLACEHOLDER)
    if not entity:
        return None

    if method == "GET" and not has_id:
        return f"{entity}:list"
    if method in ("POST", "PUT", "PATCH") or has_id:
        return f"{entity}:single"
    return None


class ChangedFilesScanner:

    def __init__(self, validator: Optional[ContractValidator] = None):
        self.validator = validator if validator is not None else ContractValidator()
        self.errors: List[ScanFinding] = []
        self.warnings: List[ScanFinding] = []

    @property
    def exit_code(self) -> int:
        return 1 if self.errors else 0

    def _error(self, file_path: str, message: str) -> None:
        self.errors.append(ScanFinding("error", file_path, message))

    def _warn(self, file_path: str, message: str) -> None:
        self.warnings.append(ScanFinding("warning", file_path, message))

    # ── Entry points ─────────────────────────────────────────────────────────

    async def scan_files(self, file_paths: Iterable[str]) -> Tuple[List[ScanFinding], List[ScanFinding]]:
        file_paths = list(file_paths)
        print(f"🔍 Validating {len(file_paths)} changed files...")

        for file_path in file_paths:
            await self.validate_file(file_path)

        return self.errors, self.warnings

    async def validate_file(self, file_path: str) -> None:
        try:
            content = await self._read(file_path)
        except ScanFileError as e:
            logger.warning(f"⚠️  {e}")
            self._error(file_path, str(e))
            return

        normalized = file_path.replace("\\", "/")

        if "client.js" in normalized or "api-client" in normalized or "client.py" in normalized:
            self.validate_api_client_changes(file_path, content)

        if "/routes/" in normalized or "/controllers/" in normalized:
            self.validate_endpoint_changes(file_path, content)

        if "/models/" in normalized or "/schemas/" in normalized:
            self.validate_schema_changes(file_path, content)

        if "/components/" in normalized and normalized.endswith((".jsx", ".tsx")):
            self.validate_component_api_usage(file_path, content)

    @staticmethod
    async def _read(file_path: str) -> str:
        try:
            return await asyncio.to_thread(Path(file_path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScanFileError(file_path, str(e)) from e

    # ── API client ───────────────────────────────────────────────────────────

    def validate_api_client_changes(self, file_path: str, content: str) -> None:
        print(f"🔧 Validating API client changes in {file_path}")

        if any(p.search(content) for p in _TRANSFORMATION_CONTROL_PATTERNS):
            print("⚠️  Transformation logic changes detected")

            for endpoint in self.validator.rules.non_transform_endpoints(SCANNER_CRITICAL_ENDPOINTS):
                if not _handled_on_same_line(endpoint).search(content):
                    self._error(
                        file_path,
                        f"Critical endpoint {endpoint} may not be properly handled in transformation logic",
                    )

            if "custom-mappings" in content and "skip-transform" not in content:
                self._warn(file_path, "Custom mappings endpoint detected but no explicit skip-transform rule found")

        lines = content.splitlines()
        seen = set()
        for match in _API_LITERAL.finditer(content):
            endpoint = match.group(1).replace("/api/", "", 1)
            if endpoint in seen or not _looks_like_new_list(endpoint):
                continue
            seen.add(endpoint)
            referenced = any(endpoint in line and "transform" in line.lower() for line in lines)
            if not referenced:
                self._warn(file_path, f"New list endpoint {endpoint} may need transformation rules")

    # ── Routes / controllers ─────────────────────────────────────────────────

    def validate_endpoint_changes(self, file_path: str, content: str) -> None:
        print(f"🛣️  Validating endpoint changes in {file_path}")

        for match in _ROUTE_PATTERN.finditer(content):
            self.validate_new_endpoint(match.group(1).upper(), match.group(2), file_path)

        if any(p.search(content) for p in _RESPONSE_CONSTRUCTION):
            self._warn(file_path, f"Response format change detected in {file_path} - ensure contract compliance")

    def validate_new_endpoint(self, method: str, route: str, file_path: str) -> None:
        print(f"🆕 Validating new endpoint: {method} {route}")

        schema_key = route_schema_key(method, route)
        if schema_key and not self.validator.schemas.has(schema_key):
            self._warn(file_path, f"New endpoint {method} {route} may need a contract schema: {schema_key}")

        if _looks_like_new_list(route):
            self._warn(file_path, f"New list endpoint {route} should be tested for proper transformation behavior")

        if any(p.search(route) for p in _NON_TRANSFORM_ROUTES):
            self._warn(file_path, f"Endpoint {route} should not be transformed - ensure proper rules are in place")

    # ── Schemas / models ─────────────────────────────────────────────────────

    def validate_schema_changes(self, file_path: str, content: str) -> None:
        print(f"📊 Validating schema changes in {file_path}")

        if any(p.search(content) for p in _STRUCTURAL_CONSTRAINTS):
            self._warn(file_path, f"Schema changes in {file_path} may require contract schema updates")

        if _NON_NULLABLE.search(content) and _INLINE_VALIDATION.search(content):
            self._warn(file_path, f"New required fields detected in {file_path} - may cause validation failures")

    # ── UI components ────────────────────────────────────────────────────────

    def validate_component_api_usage(self, file_path: str, content: str) -> None:
        print(f"⚛️  Validating component API usage in {file_path}")

        if any(p.search(content) for p in _DIRECT_API_CALLS):
            self._warn(
                file_path,
                f"Direct API call detected in {file_path} - consider using the API client for consistency",
            )

        if "x-skip-transform" in content:
            self._warn(file_path, f"Custom transformation header usage in {file_path} - ensure proper handling")

        if any(p.search(content) for p in _CRITICAL_USAGE):
            self._warn(file_path, f"Critical endpoint usage in {file_path} - verify transformation behavior")

    # ── Output ───────────────────────────────────────────────────────────────

    def print_results(self) -> None:
        print("\n📋 Validation Results:")

        if not self.errors and not self.warnings:
            print("✅ No issues found in changed files")
            return

        if self.errors:
            print("\n❌ Errors (must be fixed):")
            for error in self.errors:
                print(f"  • {error}")

        if self.warnings:
            print("\n⚠️  Warnings (review recommended):")
            for warning in self.warnings:
                print(f"  • {warning}")

        print(f"\n📊 Summary: {len(self.errors)} errors, {len(self.warnings)} warnings")
