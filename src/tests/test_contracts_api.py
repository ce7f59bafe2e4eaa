"""
Live validation middleware and the /admin/contracts endpoints.
"""
import httpx
import pytest
from fastapi import Response

from contract_guard.app import create_app
from contract_guard.core.config import Settings
from contract_guard.services.contract_validator import ContractValidator
from contract_guard.services.fixtures import TestDataGenerators


def build_app(environment="development", report_dir="reports"):
    gen = TestDataGenerators()
    validator = ContractValidator()
    app = create_app(validator=validator, settings=Settings(environment=environment, report_dir=report_dir))

    @app.get("/api/products")
    async def products():
        return gen.generate_list_response([gen.generate_product() for _ in range(2)])

    @app.get("/api/orders/{order_id}")
    async def order(order_id: int):
        return gen.generate_success_response(gen.generate_order({"customer_email": None}))

    @app.get("/api/users/{user_id}")
    async def user(user_id: int, response: Response):
        response.set_cookie("session", "abc")
        response.set_cookie("theme", "dark")
        return gen.generate_success_response(gen.generate_user())

    @app.get("/integrations/akeneo/custom-mappings")
    async def custom_mappings():
        return [gen.generate_akeneo_mapping()]

    return app, validator


@pytest.fixture
async def api():
    app, validator = build_app()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client, validator


async def test_middleware_validates_without_altering_response(api):
    client, validator = api

    res = await client.get("/api/products")

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True and len(body["data"]) == 2
    assert len(validator.validation_history) == 1
    assert validator.validation_history[0].valid
    assert validator.validation_history[0].endpoint == "/api/products"


async def test_middleware_records_failures_and_violations(api):
    client, validator = api

    order = await client.get("/api/orders/5")
    mappings = await client.get("/integrations/akeneo/custom-mappings")

    assert order.status_code == 200 and mappings.status_code == 200
    assert isinstance(mappings.json(), list), "The response goes out unchanged even when it violates its rule"
    assert [r.valid for r in validator.validation_history] == [False, False]
    assert len(validator.breaking_changes) == 2


async def test_admin_paths_are_not_validated(api):
    client, validator = api

    await client.get("/admin/contracts/stats")
    await client.get("/openapi.json")

    assert validator.validation_history == ()


async def test_production_skips_validation():
    app, validator = build_app(environment="production")
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        res = await client.get("/api/products")

    assert res.status_code == 200
    assert validator.validation_history == ()


async def test_stats_endpoint(api):
    client, _ = api
    await client.get("/api/products")
    await client.get("/api/orders/1")

    stats = (await client.get("/admin/contracts/stats")).json()
    assert stats["total"] == 2
    assert stats["passed"] == 1
    assert stats["failed"] == 1


async def test_rules_endpoint(api):
    client, _ = api
    rules = (await client.get("/admin/contracts/rules")).json()

    patterns = [r["pattern"] for r in rules]
    assert "/integrations/akeneo/custom-mappings" in patterns
    custom = rules[patterns.index("/integrations/akeneo/custom-mappings")]
    assert custom["shouldTransform"] is False
    assert custom["riskLevel"] == "HIGH"


async def test_validate_endpoint(api):
    client, validator = api
    gen = TestDataGenerators()

    res = await client.post("/admin/contracts/validate", json={
        "endpoint": "/api/users/3",
        "method": "GET",
        "response": gen.generate_success_response(gen.generate_user()),
    })
    assert res.status_code == 200
    assert res.json()["valid"] is True
    assert len(validator.validation_history) == 1

    missing = await client.post("/admin/contracts/validate", json={"endpoint": "/api/users"})
    assert missing.status_code == 400

    bad_status = await client.post("/admin/contracts/validate", json={
        "endpoint": "/api/users", "response": {}, "status_code": "abc",
    })
    assert bad_status.status_code == 400


async def test_breaking_changes_endpoint(api):
    client, _ = api
    await client.get("/api/orders/1")

    data = (await client.get("/admin/contracts/breaking-changes")).json()
    assert len(data["changes"]) == 1
    assert data["changes"][0]["severity"] == "HIGH"
    assert "/api/orders/1" in data["narrative"]


async def test_report_endpoint(api, tmp_path):
    client, _ = api
    await client.get("/api/products")
    target = tmp_path / "contract-report.json"

    res = await client.post("/admin/contracts/report", json={"file_path": str(target)})

    assert res.status_code == 200
    assert res.json()["summary"]["total"] == 1
    assert target.exists()


async def test_report_endpoint_default_location(tmp_path):
    app, _ = build_app(report_dir=str(tmp_path / "reports"))
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        res = await client.post("/admin/contracts/report")

    assert res.status_code == 200
    assert res.json()["file_path"].startswith(str(tmp_path / "reports"))
    assert len(list((tmp_path / "reports").iterdir())) == 1


async def test_report_endpoint_failure(api, tmp_path):
    client, _ = api
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not directory")

    res = await client.post("/admin/contracts/report", json={"file_path": str(blocker / "r.json")})
    assert res.status_code == 500


async def test_health_endpoint(api):
    client, _ = api

    healthy = (await client.get("/admin/contracts/health")).json()
    assert healthy["status"] == "healthy"
    assert healthy["components"]["contractValidator"]["schemas"] > 0

    await client.get("/api/orders/1")
    degraded = (await client.get("/admin/contracts/health")).json()
    assert degraded["status"] == "warning"
    assert degraded["components"]["contractValidator"]["highSeverity"] == 1


async def test_repeated_headers_survive_validation(api):
    client, validator = api

    res = await client.get("/api/users/3")

    assert res.headers.get_list("set-cookie") == [
        "session=abc; Path=/; SameSite=lax",
        "theme=dark; Path=/; SameSite=lax",
    ]
    assert res.cookies["session"] == "abc" and res.cookies["theme"] == "dark"
    assert validator.validation_history[0].valid


async def test_default_settings_do_not_validate():
    app = create_app(settings=Settings())

    @app.get("/api/products")
    async def products():
        return {"success": True, "data": []}

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        await client.get("/api/products")

    assert app.state.contract_validator.validation_history == ()
