from __future__ import annotations

from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..settings import settings


DateType = Literal["created", "issued", "available", "modified"]
SortBy = Literal["relevance", "date", "title", "modified", "issued", "available", "creator"]

# Filter values the UI sends to mean "no filter"
SENTINEL_VALUES = {"", "all"}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def is_active(value: Optional[str]) -> bool:
    return value is not None and value.strip() not in SENTINEL_VALUES


class SearchRequest(_CamelModel):
    """Caller's search intent for one request. Never mutated after construction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    query: Optional[str] = Field(default=None, description="Free text query")
    collection: Optional[str] = Field(default=None, description="Product area, e.g. officielepublicaties")
    document_type: Optional[str] = Field(default=None, description="dt.type value")
    organization: Optional[str] = Field(default=None, description="Creator or authority")
    date_type: DateType = Field(default="created", description="Which date field the range applies to")
    start_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    end_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    location: Optional[str] = Field(default=None, description="Place name or Dutch postcode")
    facet_filters: Dict[str, List[str]] = Field(default_factory=dict, description="Facet index -> selected values")
    sort_by: SortBy = Field(default="relevance")
    start_record: int = Field(default=1, ge=1)
    maximum_records: int = Field(default=settings.default_page_size, ge=1)
    facet_limit: Optional[str] = Field(default=None, description="SRU facetLimit, e.g. 50:dt.type")

    @field_validator(
        "query", "collection", "document_type", "organization", "start_date", "end_date", "location", "facet_limit",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("date_type", mode="before")
    @classmethod
    def _default_date_type(cls, v):
        # Older clients send "any" when no date field was picked
        if v in (None, "", "any"):
            return "created"
        return v

    @field_validator("sort_by", mode="before")
    @classmethod
    def _default_sort(cls, v):
        return v or "relevance"

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            date.fromisoformat(v)
        return v

    @field_validator("facet_filters", mode="before")
    @classmethod
    def _facet_filters(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            out: Dict[str, List[str]] = {}
            for index, values in v.items():
                if not isinstance(values, (list, tuple, set)):
                    values = [] if values is None else [values]
                out[str(index)] = [str(x) for x in (values or []) if x is not None]
            return out
        return v

    @property
    def page_size(self) -> int:
        return min(self.maximum_records, settings.sru_max_records)

    @property
    def has_filters(self) -> bool:
        return any(
            [
                is_active(self.collection),
                is_active(self.document_type),
                is_active(self.organization),
                bool(self.start_date or self.end_date),
                bool(self.location),
                any(any(str(x).strip() for x in vals) for vals in self.facet_filters.values()),
            ]
        )

    @property
    def has_query(self) -> bool:
        return bool(self.query)


class Document(_CamelModel):
    position: int
    identifier: str
    title: str
    creator: str
    type: str
    language: str = "nl"
    subject: Optional[str] = None
    abstract: Optional[str] = None

    date: Optional[str] = None
    issued: Optional[str] = None
    modified: Optional[str] = None
    available: Optional[str] = None
    display_date: str = "Datum onbekend"

    preferred_url: Optional[str] = None
    pdf_url: Optional[str] = None
    alternative_url: Optional[str] = None
    has_url: bool = False

    organisation_type: Optional[str] = None
    publicatie_naam: Optional[str] = None
    publicatie_nummer: Optional[str] = None
    product_area: Optional[str] = None
    vergader_jaar: Optional[str] = None
    dossiernummer: Optional[str] = None
    ondernummer: Optional[str] = None
    spatial: Optional[str] = None
    temporal: Optional[str] = None
    collection_name: str = "Onbekende collectie"

    document_icon: str = "📄"
    type_class: str = "unknown"
    date_class: str = "no-date"
    is_recent: bool = False
    has_geographic: bool = False
    document_size: str = "small"
    relevance_score: int = 0

    error: bool = False
    error_message: Optional[str] = None


class FacetTerm(_CamelModel):
    actual_term: str
    query: Optional[str] = None
    count: int
    percentage: int = 0
    display_name: str


class Facet(_CamelModel):
    index: str
    display_name: str
    icon: str = "🔍"
    expanded: bool = False
    terms: List[FacetTerm] = Field(default_factory=list)
    total_terms: int = 0
    top_terms: List[FacetTerm] = Field(default_factory=list)


class SearchInfo(_CamelModel):
    start_record: int
    maximum_records: int
    current_page: int
    total_pages: int
    has_more: bool
    records_on_page: int


class Performance(_CamelModel):
    timestamp: str
    results_found: int
    query_complexity: int
    processing_time: int = Field(description="Milliseconds spent handling the request")


class ApiInfo(_CamelModel):
    sru_version: str = "2.0"
    endpoint: str
    documentation: str


class SearchResponse(_CamelModel):
    records: List[Document]
    total_records: int
    facets: List[Facet]
    query: str
    search_info: SearchInfo
    performance: Performance
    api_info: ApiInfo


class ErrorResponse(BaseModel):
    error: str
    message: str
    code: str
    timestamp: str
