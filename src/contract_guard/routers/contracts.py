"""
Contracts Router
================
Admin endpoints over the live ContractValidator: statistics, rules, ad-hoc
validation, report export and a component health check.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from contract_guard.core.config import Settings
from contract_guard.core.errors import ReportExportError
from contract_guard.core.models import Severity
from contract_guard.services.contract_validator import ContractValidator

router = APIRouter()


def get_validator(request: Request) -> ContractValidator:
    return request.app.state.contract_validator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.get("/admin/contracts/stats")
async def get_contract_stats(validator: ContractValidator = Depends(get_validator)):
    """
    Validation totals, success rate and per-endpoint breakdown.
    """
    return validator.get_validation_stats()


@router.get("/admin/contracts/rules")
async def list_transformation_rules(validator: ContractValidator = Depends(get_validator)):
    return [
        {"pattern": pattern, **rule.to_dict()}
        for pattern, rule in validator.rules.rules()
    ]


@router.post("/admin/contracts/validate")
async def validate_payload(
    data: Dict[str, Any],
    validator: ContractValidator = Depends(get_validator),
):
    """
    Validates a captured response.
    Body: {"endpoint": "/api/products", "method": "GET", "status_code": 200, "response": {...}}
    """
    endpoint = data.get("endpoint")
    if not endpoint:
        raise HTTPException(status_code=400, detail="'endpoint' is required")
    if "response" not in data:
        raise HTTPException(status_code=400, detail="'response' is required")

    try:
        status_code = int(data.get("status_code", 200))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="'status_code' must be an integer")

    result = validator.validate_response(
        endpoint, data.get("method", "GET"), data["response"], status_code
    )
    return result.to_dict()


@router.get("/admin/contracts/breaking-changes")
async def list_breaking_changes(validator: ContractValidator = Depends(get_validator)):
    return {
        "changes": [c.to_dict() for c in validator.breaking_changes],
        "narrative": validator.detector.narrate(),
    }


@router.post("/admin/contracts/report")
async def export_report(
    data: Optional[Dict[str, Any]] = None,
    validator: ContractValidator = Depends(get_validator),
    settings: Settings = Depends(get_settings),
):
    """
    Writes the full validation report to disk.
    Body (optional): {"file_path": "reports/contracts.json"}
    """
    file_path = (data or {}).get("file_path")
    if not file_path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        file_path = os.path.join(settings.report_dir, f"contract-report-{stamp}.json")

    try:
        report = validator.export_validation_report(file_path)
    except ReportExportError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"file_path": file_path, "summary": report["summary"]}


@router.get("/admin/contracts/health")
async def contracts_health(validator: ContractValidator = Depends(get_validator)):
    high = sum(1 for c in validator.breaking_changes if c.severity is Severity.HIGH)
    component = {
        "status": "warning" if high else "healthy",
        "schemas": len(validator.schemas),
        "transformationRules": len(validator.rules),
        "breakingChanges": len(validator.breaking_changes),
        "highSeverity": high,
    }
    return {
        "status": component["status"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {"contractValidator": component},
    }
