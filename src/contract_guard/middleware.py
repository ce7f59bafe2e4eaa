"""
Live Contract Validation Middleware
===================================
Validates every JSON response an app sends against its contract, in
development only. Failures and transformation violations are logged; the
response itself always goes out unchanged.

    app.add_middleware(ContractValidationMiddleware, validator=validator, settings=settings)
"""

import json
import logging
from typing import Optional, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from contract_guard.core.config import Settings, load_settings
from contract_guard.services.contract_validator import ContractValidator

logger = logging.getLogger("contract_guard")

# Internal surfaces that have no contract
DEFAULT_EXCLUDED_PREFIXES: Tuple[str, ...] = ("/admin", "/docs", "/redoc", "/openapi.json")


class ContractValidationMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        validator: Optional[ContractValidator] = None,
        settings: Optional[Settings] = None,
        excluded_prefixes: Tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES,
    ):
        super().__init__(app)
        self.validator = validator if validator is not None else ContractValidator()
        self.settings = settings if settings is not None else load_settings()
        self.excluded_prefixes = excluded_prefixes

    def _should_validate(self, request: Request, response: Response) -> bool:
        if not self.settings.is_development:
            return False
        if request.url.path.startswith(self.excluded_prefixes):
            return False
        content_type = response.headers.get("content-type", "")
        return "application/json" in content_type

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not self._should_validate(request, response):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])

        try:
            data = json.loads(body) if body else None
        except ValueError:
            logger.debug(f"Skipping contract validation for non-JSON body: {request.method} {request.url.path}")
        else:
            result = self.validator.validate_response(
                request.url.path, request.method, data, response.status_code
            )
            if result.valid:
                logger.debug(f"✅ Contract OK [{request.method} {request.url.path}] ({result.schema_key})")

        # Raw header list keeps repeated headers (Set-Cookie) intact
        replay = Response(content=body, status_code=response.status_code, background=response.background)
        replay.raw_headers = list(response.raw_headers)
        return replay
