from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import List, Optional

from ..api.schemas import ApiInfo, Document, Facet, Performance, SearchInfo, SearchRequest, SearchResponse
from ..datasources.sru_client import SRUClient
from ..errors import ValidationError
from ..settings import settings
from . import xml_parser
from .facet_extractor import extract_facets
from .query_builder import build_compiled_query, query_complexity
from .record_extractor import safe_extract_record


log = logging.getLogger(__name__)


def build_search_info(total_records: int, start_record: int, page_size: int, returned: int) -> SearchInfo:
    return SearchInfo(
        start_record=start_record,
        maximum_records=page_size,
        current_page=math.ceil(start_record / page_size),
        total_pages=math.ceil(total_records / page_size),
        has_more=total_records > start_record + returned - 1,
        records_on_page=returned,
    )


def assemble_response(
    *,
    total_records: int,
    records: List[Document],
    facets: List[Facet],
    query: str,
    start_record: int,
    page_size: int,
    started_at: Optional[float] = None,
) -> SearchResponse:
    elapsed_ms = int((time.monotonic() - started_at) * 1000) if started_at is not None else 0
    base_url = settings.sru_base_url
    return SearchResponse(
        records=records,
        total_records=total_records,
        facets=facets,
        query=query,
        search_info=build_search_info(total_records, start_record, page_size, len(records)),
        performance=Performance(
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            results_found=len(records),
            query_complexity=query_complexity(query),
            processing_time=elapsed_ms,
        ),
        api_info=ApiInfo(
            endpoint=base_url,
            documentation=f"{base_url}?operation=explain",
        ),
    )


def search_documents(request: SearchRequest, client: Optional[SRUClient] = None) -> SearchResponse:
    """Run one search against the SRU service.

    Compiles the request to CQL, fetches one page of gzd records with facets
    and normalizes the XML into a SearchResponse.

    Raises:
        ValidationError: neither free text nor a filter was given.
        UpstreamDiagnosticError: the SRU service rejected the query.
        ParseError: the response body is not XML.
        TransportError: the request failed, timed out or got a non-2xx status.
    """
    started_at = time.monotonic()
    if not request.has_query and not request.has_filters:
        raise ValidationError()

    compiled = build_compiled_query(request)
    log.debug("Compiled CQL: %s", compiled.query)

    if client is None:
        with SRUClient() as own_client:
            body = own_client.execute(compiled)
    else:
        body = client.execute(compiled)

    tree = xml_parser.parse_sru_xml(body)
    resp = xml_parser.search_response(tree)
    xml_parser.check_diagnostics(resp)

    total = xml_parser.number_of_records(resp)
    records = [
        safe_extract_record(record, compiled.start_record + i)
        for i, record in enumerate(xml_parser.records(resp))
    ]
    facets = extract_facets(xml_parser.facets(resp))

    log.info("Search done: total=%s returned=%s facets=%s", total, len(records), len(facets))
    return assemble_response(
        total_records=total,
        records=records,
        facets=facets,
        query=compiled.query,
        start_record=compiled.start_record,
        page_size=compiled.maximum_records,
        started_at=started_at,
    )
