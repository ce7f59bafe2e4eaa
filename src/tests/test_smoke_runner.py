"""
Smoke-test runner against an in-process backend (no network).
"""
import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contract_guard.core.config import Settings
from contract_guard.core.models import SmokeCheck
from contract_guard.services.smoke_runner import SmokeTestRunner, check_response_structure
from contract_guard.smoke_test import main as smoke_main

SETTINGS = Settings(api_base_url="http://testserver", api_auth_token="secret-token", smoke_timeout_seconds=1)


def build_backend(health_status=200, custom_mappings=None, seen_auth=None):
    app = FastAPI()

    @app.middleware("http")
    async def record_auth(request: Request, call_next):
        if seen_auth is not None:
            seen_auth[request.url.path] = request.headers.get("authorization")
        return await call_next(request)

    @app.get("/health")
    async def health():
        return JSONResponse({"status": "ok"}, status_code=health_status)

    @app.get("/api/status")
    async def status():
        return {"success": True, "data": {"uptime": 12}}

    @app.get("/api/auth/me")
    async def me():
        return JSONResponse({"success": False, "message": "Unauthorized"}, status_code=401)

    @app.get("/api/products")
    async def products():
        return {"success": True, "data": []}

    @app.get("/api/integrations/akeneo/custom-mappings")
    async def get_custom_mappings():
        if custom_mappings is not None:
            return custom_mappings
        return {"success": True, "mappings": {"attributes": {}, "images": {}, "files": {}}}

    @app.get("/api/integrations/akeneo/status")
    async def akeneo_status():
        return {"success": True, "connected": False}

    @app.get("/api/storage/files")
    async def files():
        return {"success": True, "files": []}

    return app


def _runner(app, checks=None):
    transport = httpx.ASGITransport(app=app)
    if checks is None:
        return SmokeTestRunner(settings=SETTINGS, transport=transport)
    return SmokeTestRunner(settings=SETTINGS, checks=checks, transport=transport)


async def test_healthy_backend_passes():
    runner = _runner(build_backend())
    results = await runner.run()
    runner.print_report()

    assert all(r.passed for r in results), [(r.check.name, r.errors) for r in results if not r.passed]
    assert runner.exit_code == 0
    assert len(results) == 7


async def test_failing_health_check_fails_the_run():
    runner = _runner(build_backend(health_status=500))
    await runner.run()

    health = runner.results[0]
    assert not health.passed
    assert health.errors == ["Expected status 200, got 500"]
    assert runner.exit_code == 1


async def test_non_critical_failure_does_not_fail_the_run():
    checks = [
        SmokeCheck(name="Health Check", method="GET", path="/health", critical=True, skip_auth=True),
        SmokeCheck(name="Missing", method="GET", path="/api/nowhere"),
    ]
    runner = _runner(build_backend(), checks)
    await runner.run()

    assert runner.results[1].passed is False
    assert runner.results[1].status_code == 404
    assert runner.exit_code == 0


async def test_custom_mappings_array_is_an_error():
    runner = _runner(build_backend(custom_mappings=[{"id": 1}]))
    await runner.run()

    result = next(r for r in runner.results if r.check.name == "Akeneo Custom Mappings")
    assert not result.passed
    assert "Custom mappings returned an array" in result.errors[0]
    assert runner.exit_code == 1


async def test_token_sent_unless_skip_auth():
    seen = {}
    runner = _runner(build_backend(seen_auth=seen))
    await runner.run()

    assert seen["/health"] is None
    assert seen["/api/status"] is None
    assert seen["/api/products"] == "Bearer secret-token"


async def test_connection_error_fails_only_that_check():
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    runner = SmokeTestRunner(settings=SETTINGS, transport=httpx.MockTransport(refuse))
    results = await runner.run()

    assert all(not r.passed for r in results)
    assert all(r.status_code is None for r in results)
    assert results[0].errors[0].startswith("Request failed:")
    assert runner.exit_code == 1


async def test_timeout_is_reported():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    checks = [SmokeCheck(name="Health Check", method="GET", path="/health", critical=True)]
    runner = SmokeTestRunner(settings=SETTINGS, checks=checks, transport=httpx.MockTransport(slow))
    await runner.run()

    assert runner.results[0].errors == ["Request timed out after 1s"]


async def test_invalid_json_is_a_warning():
    def text(request):
        return httpx.Response(200, text="<html>oops</html>")

    checks = [SmokeCheck(name="Products List", method="GET", path="/api/products", transformation_sensitive=True)]
    runner = SmokeTestRunner(settings=SETTINGS, checks=checks, transport=httpx.MockTransport(text))
    await runner.run()

    assert runner.results[0].passed
    assert runner.results[0].warnings == ["Response body is not valid JSON"]


def test_structure_heuristics():
    errors, warnings = check_response_structure("/api/integrations/akeneo/custom-mappings", {"success": True})
    assert errors == [] and warnings == ["Custom mappings response is missing the 'mappings' object"]

    errors, warnings = check_response_structure("/api/integrations/akeneo/custom-mappings", [{"id": 1}])
    assert errors == ["Custom mappings returned an array - indicates incorrect transformation"]
    assert warnings == []

    errors, _ = check_response_structure("/api/integrations/akeneo/status", [1, 2])
    assert len(errors) == 1

    _, warnings = check_response_structure("/api/products/stats", {"total": 3})
    assert warnings == ["/api/products/stats response is missing the 'success' field"]

    errors, _ = check_response_structure("/api/storage/files", [])
    assert len(errors) == 1

    errors, warnings = check_response_structure("/api/products", [])
    assert errors == [] and len(warnings) == 1

    _, warnings = check_response_structure("/api/products", {"success": True})
    assert warnings == ["/api/products list response is missing the 'data' field"]


def test_cli_reports_connection_failure(monkeypatch, capsys):
    monkeypatch.setenv("API_BASE_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("SMOKE_TIMEOUT_SECONDS", "0.5")

    assert smoke_main() == 1
    assert "critical failures" in capsys.readouterr().out
