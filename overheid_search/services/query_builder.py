"""CQL query compiler for the overheid.nl SRU 2.0 endpoint.

Turns a `SearchRequest` into one CQL string. Clause order is fixed:

    collection, free text, document type, organisation, date range,
    location, facet filters

Every clause is AND-joined to the ones before it. The collection clause
wraps whatever follows it, i.e. ``c.product-area=="x" AND (<rest>)``.
When nothing at all is selected the catch-all ``cql.allRecords=1`` is used,
so the SRU service never receives an empty query.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..api.schemas import SearchRequest, is_active
from ..settings import settings


TEXT_INDEX = "cql.textAndIndexes"
CATCH_ALL = "cql.allRecords=1"

DATE_FIELDS: Dict[str, str] = {
    "created": "dt.date",
    "issued": "dt.issued",
    "available": "dt.available",
    "modified": "dt.modified",
}

SORT_KEYS: Dict[str, str] = {
    "date": "dt.date/sort.descending",
    "title": "dt.title/sort.ascending",
    "modified": "dt.modified/sort.descending",
    "issued": "dt.issued/sort.descending",
    "available": "dt.available/sort.descending",
    "relevance": "score/sort.descending",
    "creator": "dt.creator/sort.ascending",
}

LOCATION_FIELDS = ("dt.spatial", "dt.creator", "w.gemeentenaam", "w.provincienaam")
POSTCODE_FIELDS = ("dt.spatial", "dt.creator")

_RE_POSTCODE = re.compile(r"^\d{4}\s?[A-Za-z]{2}$")
_RE_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class CompiledQuery:
    query: str
    start_record: int
    maximum_records: int
    facet_limit: str
    sort_key: Optional[str] = None


def escape_literal(value: str) -> str:
    """Escape a value for use inside a double-quoted CQL term."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _quoted(value: str) -> str:
    return f'"{escape_literal(value.strip())}"'


def _or_group(clauses: Iterable[str]) -> str:
    return "(" + " OR ".join(clauses) + ")"


def get_date_field(date_type: Optional[str]) -> str:
    return DATE_FIELDS.get(date_type or "created", DATE_FIELDS["created"])


def get_sort_key(sort_by: Optional[str]) -> Optional[str]:
    """Map a sort option to an SRU sortKeys value.

    Relevance is the service default, so no sort key is sent for it.
    """
    if not sort_by or sort_by == "relevance":
        return None
    return SORT_KEYS.get(sort_by)


def text_clause(text: Optional[str]) -> Optional[str]:
    if not text or not text.strip():
        return None
    text = text.strip()
    if '"' in text:
        # Phrase search, quotes only mark the phrase
        phrase = text.replace('"', "").strip()
        if not phrase:
            return None
        return f"{TEXT_INDEX} adj {_quoted(phrase)}"
    if _RE_WHITESPACE.search(text):
        return f"{TEXT_INDEX} all {_quoted(text)}"
    return f"{TEXT_INDEX}={_quoted(text)}"


def date_clause(date_type: Optional[str], start: Optional[str], end: Optional[str]) -> Optional[str]:
    field = get_date_field(date_type)
    if start and end:
        return f"({field}>={_quoted(start)} AND {field}<={_quoted(end)})"
    if start:
        return f"{field}>={_quoted(start)}"
    if end:
        return f"{field}<={_quoted(end)}"
    return None


def location_clause(location: Optional[str]) -> Optional[str]:
    if not location or not location.strip():
        return None
    location = location.strip()
    if _RE_POSTCODE.match(location):
        postcode = _RE_WHITESPACE.sub("", location).upper()
        return _or_group(f"{f} within /postcode {_quoted(postcode)}" for f in POSTCODE_FIELDS)
    return _or_group(f"{f}={_quoted(location)}" for f in LOCATION_FIELDS)


def facet_clauses(facet_filters: Dict[str, List[str]]) -> List[str]:
    out: List[str] = []
    for index, values in facet_filters.items():
        index = str(index).strip()
        selected = [str(v) for v in values or [] if str(v).strip()]
        if not index or not selected:
            continue
        out.append(_or_group(f"{index}=={_quoted(v)}" for v in selected))
    return out


def compile_query(request: SearchRequest) -> str:
    """Compile a search request into a CQL query string.

    Args:
        request: Validated search request.

    Returns:
        A non-empty CQL query.
    """
    parts: List[str] = []

    free_text = text_clause(request.query)
    if free_text:
        parts.append(free_text)

    if is_active(request.document_type):
        parts.append(f"dt.type=={_quoted(request.document_type)}")

    if is_active(request.organization):
        org = _quoted(request.organization)
        parts.append(f"(dt.creator=={org} OR ot.authority=={org})")

    dates = date_clause(request.date_type, request.start_date, request.end_date)
    if dates:
        parts.append(dates)

    location = location_clause(request.location)
    if location:
        parts.append(location)

    parts.extend(facet_clauses(request.facet_filters))

    rest = " AND ".join(parts)
    if is_active(request.collection):
        collection = f"c.product-area=={_quoted(request.collection)}"
        return f"{collection} AND ({rest})" if rest else collection
    return rest or CATCH_ALL


def build_compiled_query(request: SearchRequest) -> CompiledQuery:
    return CompiledQuery(
        query=compile_query(request),
        start_record=request.start_record,
        maximum_records=request.page_size,
        facet_limit=request.facet_limit or settings.default_facet_limit,
        sort_key=get_sort_key(request.sort_by),
    )


_RE_OPERATOR = re.compile(r"\b(AND|OR|NOT)\b", re.IGNORECASE)
_RE_FIELD_CMP = re.compile(r"\w+\.\w+=")


def query_complexity(query: str) -> int:
    """Rough 1..10 score of how heavy a CQL query is, reported with each response."""
    if not query:
        return 0
    complexity = 1.0
    complexity += len(_RE_OPERATOR.findall(query))
    complexity += query.count('"') / 2
    complexity += len(_RE_FIELD_CMP.findall(query))
    return min(int(complexity), 10)
