"""
Contract Guard App
==================
Mounts live contract validation and the admin contract endpoints on a FastAPI
application.

    app = create_app()                 # standalone admin app
    install(existing_app)              # add validation to an app you already have
"""

from typing import Optional

from fastapi import FastAPI

from contract_guard.core.config import Settings, load_settings
from contract_guard.middleware import ContractValidationMiddleware
from contract_guard.routers import contracts
from contract_guard.services.contract_validator import ContractValidator


def install(
    app: FastAPI,
    validator: Optional[ContractValidator] = None,
    settings: Optional[Settings] = None,
) -> ContractValidator:
    settings = settings if settings is not None else load_settings()
    validator = validator if validator is not None else ContractValidator()

    app.state.settings = settings
    app.state.contract_validator = validator
    app.add_middleware(ContractValidationMiddleware, validator=validator, settings=settings)
    app.include_router(contracts.router)
    return validator


def create_app(
    validator: Optional[ContractValidator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    app = FastAPI(title="Contract Guard")
    install(app, validator=validator, settings=settings)
    return app
