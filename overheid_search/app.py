from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from .settings import settings
from .api.routes import router as api_router
from .errors import ParseError, SearchError, ValidationError

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("overheid_search")

app = FastAPI(title="OverheidSearch", debug=settings.app_env != "production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(SearchError)
async def _search_error(request: Request, exc: SearchError):
    if isinstance(exc, ParseError) or exc.status_code >= 500:
        log.error("Search handler error: %s (%s) %s", exc.code, exc.message, exc.detail or "")
    else:
        log.warning("Search rejected: %s (%s) %s", exc.code, exc.message, exc.detail or "")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError):
    err = ValidationError("Ongeldige zoekparameters. Controleer uw invoer.", code="INVALID_PARAMETERS")
    log.warning("Invalid request: %s", exc.errors())
    return JSONResponse(err.to_dict(), status_code=err.status_code)


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    log.exception("Unhandled search error")
    return JSONResponse(SearchError().to_dict(), status_code=500)


# Include API router (search endpoints and health)
app.include_router(api_router)
