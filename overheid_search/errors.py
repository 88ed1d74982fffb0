from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class SearchError(Exception):
    """Request-level failure that maps onto a non-200 JSON response."""

    status_code: int = 500
    error: str = "Search failed"
    code: str = "UNKNOWN_ERROR"
    default_message: str = "Er is een onbekende fout opgetreden."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or self.default_message
        if code:
            self.code = code
        # Technical detail for logs, never shown to the caller
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "message": self.message,
            "code": self.code,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }


class ValidationError(SearchError):
    status_code = 400
    error = "Query or filters required"
    code = "MISSING_QUERY_OR_FILTERS"
    default_message = "Voer een zoekterm in OF selecteer minimaal één filter om te zoeken."


class UpstreamDiagnosticError(SearchError):
    """The SRU service answered with a structured diagnostic."""

    status_code = 400
    error = "API Error"
    code = "UNKNOWN"

    def __init__(self, upstream_message: str, *, code: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.upstream_message = upstream_message
        super().__init__(f"API fout: {upstream_message}", code=code, detail=detail)


class ParseError(SearchError):
    error = "Failed to parse API response"
    code = "XML_PARSE_ERROR"
    default_message = "Er ging iets mis bij het verwerken van de zoekresultaten."


class TransportError(SearchError):
    pass


class TransportTimeout(TransportError):
    code = "TIMEOUT"
    default_message = "De zoekopdracht duurde te lang. Probeer het opnieuw."


class TransportUnreachable(TransportError):
    code = "CONNECTION_ERROR"
    default_message = "Kan geen verbinding maken met de overheids-API. Controleer uw internetverbinding."


class UpstreamHTTPError(TransportError):
    code = "API_ERROR"
    default_message = "De overheids-API gaf een foutmelding. Probeer het later opnieuw."

    def __init__(self, status: int, *, detail: Optional[str] = None) -> None:
        self.status = status
        super().__init__(detail=detail or f"SRU API responded with status: {status}")


class RecordExtractionError(Exception):
    """A single record could not be turned into a Document. Never leaves the extractor."""


class FacetExtractionError(Exception):
    """A single facet could not be read. Never leaves the extractor."""
