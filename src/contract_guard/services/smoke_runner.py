"""
Smoke-Test Runner
=================
Hits the critical endpoints of a running backend once each and checks status
codes plus, for transformation-sensitive endpoints, the response structure.

Only failures of checks marked `critical` make the run fail (exit code 1).
Network errors and timeouts fail the single check they happen on.
"""

import logging
import time
from typing import Any, Iterable, List, Optional, Tuple

import httpx

from contract_guard.core.config import Settings, load_settings
from contract_guard.core.constants import CRITICAL_SMOKE_CHECKS
from contract_guard.core.models import SmokeCheck, SmokeCheckResult
from contract_guard.utils.normalization import last_segment, looks_like_list_endpoint

logger = logging.getLogger("contract_guard")

_RAW_SHAPE_SUFFIXES = ("status", "stats", "config")


def check_response_structure(path: str, body: Any) -> Tuple[List[str], List[str]]:
    """
    Structural heuristics for a 200 response body. Returns (errors, warnings).

    Endpoints that must never be transformed fail hard on a bare array; list
    endpoints only warn, because the transformation runs client-side and the
    server is still expected to send the envelope.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if "custom-mappings" in path:
        if isinstance(body, list):
            errors.append("Custom mappings returned an array - indicates incorrect transformation")
        elif isinstance(body, dict):
            mappings = body.get("mappings")
            if not isinstance(mappings, dict):
                warnings.append("Custom mappings response is missing the 'mappings' object")
            else:
                for key in ("attributes", "images", "files"):
                    if key not in mappings:
                        warnings.append(f"Custom mappings response is missing 'mappings.{key}'")

    elif last_segment(path) in _RAW_SHAPE_SUFFIXES:
        if isinstance(body, list):
            errors.append(f"{path} returned an array - this endpoint must not be transformed")
        elif isinstance(body, dict) and "success" not in body:
            warnings.append(f"{path} response is missing the 'success' field")

    elif "/storage/" in path:
        if isinstance(body, list):
            errors.append(f"{path} returned an array - storage responses must not be transformed")

    elif looks_like_list_endpoint(path):
        if isinstance(body, list):
            warnings.append(f"{path} returned a bare array - the server should send the success envelope")
        elif isinstance(body, dict) and "data" not in body:
            warnings.append(f"{path} list response is missing the 'data' field")

    return errors, warnings


class SmokeTestRunner:

    def __init__(
        self,
        settings: Optional[Settings] = None,
        checks: Iterable[SmokeCheck] = CRITICAL_SMOKE_CHECKS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings if settings is not None else load_settings()
        self.checks = list(checks)
        self.transport = transport
        self.results: List[SmokeCheckResult] = []

    @property
    def exit_code(self) -> int:
        return 1 if any(r.check.critical and not r.passed for r in self.results) else 0

    async def run(self) -> List[SmokeCheckResult]:
        """Run every check in order against API_BASE_URL."""
        self.results = []
        logger.info(f"🚀 Running {len(self.checks)} smoke checks against {self.settings.api_base_url}")

        async with httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.smoke_timeout_seconds,
            transport=self.transport,
        ) as client:
            for check in self.checks:
                self.results.append(await self.run_check(client, check))

        return self.results

    async def run_check(self, client: httpx.AsyncClient, check: SmokeCheck) -> SmokeCheckResult:
        result = SmokeCheckResult(check=check)

        headers = {"Accept": "application/json"}
        if not check.skip_auth and self.settings.api_auth_token:
            headers["Authorization"] = f"Bearer {self.settings.api_auth_token}"

        start = time.perf_counter()
        try:
            response = await client.request(check.method, check.path, headers=headers)
        except httpx.TimeoutException:
            result.duration_ms = (time.perf_counter() - start) * 1000
            result.errors.append(f"Request timed out after {self.settings.smoke_timeout_seconds}s")
            logger.warning(f"⏱️  {check.name} timed out")
            return result
        except httpx.HTTPError as e:
            result.duration_ms = (time.perf_counter() - start) * 1000
            result.errors.append(f"Request failed: {e}")
            logger.warning(f"❌ {check.name} failed: {e}")
            return result

        result.duration_ms = (time.perf_counter() - start) * 1000
        result.status_code = response.status_code

        if response.status_code not in check.expected_status:
            expected = ", ".join(str(s) for s in check.expected_status)
            result.errors.append(f"Expected status {expected}, got {response.status_code}")

        if check.transformation_sensitive and response.status_code == 200:
            try:
                body = response.json()
            except ValueError:
                result.warnings.append("Response body is not valid JSON")
            else:
                errors, warnings = check_response_structure(check.path, body)
                result.errors.extend(errors)
                result.warnings.extend(warnings)

        result.passed = not result.errors
        return result

    def print_report(self) -> None:
        print("\n🧪 Critical Endpoint Smoke Tests")
        print("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")

        for r in self.results:
            icon = "✅" if r.passed else ("🚨" if r.check.critical else "❌")
            status = r.status_code if r.status_code is not None else "---"
            tag = " [critical]" if r.check.critical else ""
            print(f"{icon} {r.check.name}{tag}: {r.check.method} {r.check.path} → {status} ({r.duration_ms:.0f}ms)")
            for error in r.errors:
                print(f"     ❌ {error}")
            for warning in r.warnings:
                print(f"     ⚠️  {warning}")

        passed = sum(1 for r in self.results if r.passed)
        critical_failures = sum(1 for r in self.results if r.check.critical and not r.passed)
        print(f"\n📊 Summary: {passed}/{len(self.results)} passed, {critical_failures} critical failures")

        if critical_failures:
            print("🚨 Critical endpoints are failing - do not deploy.")
        else:
            print("✅ All critical endpoints healthy")
