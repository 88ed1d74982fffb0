from __future__ import annotations

import json
import logging
from typing import Any, Dict

import pydantic
from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse, SearchRequest, SearchResponse
from ..errors import ValidationError
from ..services.search_service import search_documents

router = APIRouter()

log = logging.getLogger(__name__)

CACHE_HEADERS = {"Cache-Control": "public, max-age=300, s-maxage=600"}
ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _build_request(params: Dict[str, Any]) -> SearchRequest:
    try:
        return SearchRequest.model_validate(params)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Ongeldige zoekparameters. Controleer uw invoer.",
            code="INVALID_PARAMETERS",
            detail=str(e),
        ) from e


def _decode_facet_filters(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError(
            "Fout bij het verwerken van facet filters. Controleer uw invoer.",
            code="FILTER_ERROR",
            detail=str(e),
        ) from e


def _respond(payload: SearchRequest) -> JSONResponse:
    log.debug("Search request: %s", payload.model_dump(exclude_none=True))
    result = search_documents(payload)
    return JSONResponse(result.model_dump(mode="json", by_alias=True), headers=CACHE_HEADERS)


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
def search(request: Request):
    params: Dict[str, Any] = dict(request.query_params)
    raw_filters = params.get("facetFilters")
    if raw_filters:
        params["facetFilters"] = _decode_facet_filters(raw_filters)
    else:
        params.pop("facetFilters", None)
    return _respond(_build_request(params))


@router.post("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
def search_post(body: Dict[str, Any] = Body(...)):
    params = dict(body)
    if isinstance(params.get("facetFilters"), str):
        params["facetFilters"] = _decode_facet_filters(params["facetFilters"])
    return _respond(_build_request(params))
