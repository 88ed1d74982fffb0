"""SRU gzd record -> Document.

Each record is read independently; a record that cannot be read is replaced
by a flagged fallback Document so the rest of the page still renders.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..api.schemas import Document
from ..errors import RecordExtractionError
from .xml_parser import text_value


log = logging.getLogger(__name__)

DUTCH_MONTHS = (
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
)

COLLECTION_NAMES: Dict[str, str] = {
    "officielepublicaties": "Officiële Publicaties",
    "sgd": "Staten-Generaal Digitaal",
    "tuchtrecht": "Tuchtrecht",
    "samenwerkendecatalogi": "Samenwerkende Catalogi",
    "verdragenbank": "Verdragenbank",
    "plooi": "PLOOI",
    "cvdr": "CVDR",
    "bwb": "Basiswettenbestand",
}

# (substrings, icon), first match wins
DOCUMENT_ICONS = (
    (("wet", "regeling"), "⚖️"),
    (("besluit", "verordening"), "📋"),
    (("kamerstuk", "handelingen"), "🏛️"),
    (("bijlage",), "📎"),
    (("brief", "circulaire"), "✉️"),
    (("bekendmaking", "kennisgeving"), "📢"),
    (("verdrag", "tractaat"), "🤝"),
    (("advies",), "💭"),
    (("uitspraak",), "⚖️"),
    (("rapport",), "📊"),
    (("nota",), "📝"),
    (("plan",), "🗺️"),
)
DEFAULT_ICON = "📄"

TYPE_CLASSES = (
    ("wet", "law"),
    ("besluit", "decision"),
    ("kamerstuk", "parliament"),
    ("brief", "letter"),
    ("bekendmaking", "announcement"),
    ("uitspraak", "verdict"),
    ("rapport", "report"),
    ("plan", "plan"),
)

TITLE_PLACEHOLDER = "Titel niet beschikbaar"
CREATOR_PLACEHOLDER = "Onbekende organisatie"
TYPE_PLACEHOLDER = "Onbekend documenttype"
DATE_PLACEHOLDER = "Datum onbekend"
COLLECTION_PLACEHOLDER = "Onbekende collectie"

RECENT_DAYS = 90


def _node(parent: Any, *path: str) -> Any:
    node = parent
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _block(parent: Any, key: str) -> Dict[str, Any]:
    node = _node(parent, key)
    return node if isinstance(node, dict) else {}


def _first(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v:
            return v
    return None


# Date helpers. All of them go through preferred_date so the priority is
# defined in one place.

def preferred_date(
    date_: Optional[str], issued: Optional[str], available: Optional[str], modified: Optional[str]
) -> Optional[str]:
    return _first(issued, available, date_, modified)


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    v = value.strip()
    try:
        return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(v[:10])
    except ValueError:
        return None


def format_display_date(date_, issued, available, modified) -> str:
    raw = preferred_date(date_, issued, available, modified)
    if not raw:
        return DATE_PLACEHOLDER
    d = parse_date(raw)
    if d is None:
        return raw
    return f"{d.day} {DUTCH_MONTHS[d.month - 1]} {d.year}"


def _age_days(raw: str, today: Optional[date]) -> Optional[int]:
    d = parse_date(raw)
    if d is None:
        return None
    return ((today or date.today()) - d).days


def get_date_class(date_, issued, available, modified, today: Optional[date] = None) -> str:
    raw = preferred_date(date_, issued, available, modified)
    if not raw:
        return "no-date"
    days = _age_days(raw, today)
    if days is None:
        return "unknown-date"
    if days <= 30:
        return "recent"
    if days <= 365:
        return "this-year"
    if days <= 1095:
        return "recent-years"
    return "older"


def is_recent_document(date_, issued, available, modified, today: Optional[date] = None) -> bool:
    raw = preferred_date(date_, issued, available, modified)
    if not raw:
        return False
    days = _age_days(raw, today)
    return days is not None and days <= RECENT_DAYS


def get_document_icon(doc_type: Optional[str]) -> str:
    if not doc_type:
        return DEFAULT_ICON
    t = doc_type.lower()
    for needles, icon in DOCUMENT_ICONS:
        if any(n in t for n in needles):
            return icon
    return DEFAULT_ICON


def get_type_class(doc_type: Optional[str]) -> str:
    if not doc_type:
        return "unknown"
    t = doc_type.lower()
    for needle, cls in TYPE_CLASSES:
        if needle in t:
            return cls
    return "document"


def get_collection_name(product_area: Optional[str]) -> str:
    if not product_area:
        return COLLECTION_PLACEHOLDER
    return COLLECTION_NAMES.get(product_area, product_area)


def estimate_document_size(abstract: Optional[str], title: Optional[str]) -> str:
    total = len(abstract or "") + len(title or "")
    if total < 200:
        return "small"
    if total < 500:
        return "medium"
    return "large"


def relevance_score(title: Optional[str], abstract: Optional[str], subject: Optional[str]) -> int:
    score = 0
    if title and len(title) > 10:
        score += 2
    if abstract and len(abstract) > 50:
        score += 2
    if subject:
        score += 1
    return min(score, 5)


def extract_record(record: Any, position: int, today: Optional[date] = None) -> Document:
    """Map one ``sru:record`` node to a Document.

    Missing metadata is not an error: absent fields fall back to Dutch
    placeholders. A node that is not a record at all raises
    RecordExtractionError.
    """
    if not isinstance(record, dict):
        raise RecordExtractionError(f"record {position} is {type(record).__name__}, not an element")

    gzd = _block(_block(record, "sru:recordData"), "gzd:gzd")
    original = _block(gzd, "gzd:originalData")
    enriched = _block(gzd, "gzd:enrichedData")

    meta = _block(original, "overheidwetgeving:meta")
    kern = _block(meta, "overheidwetgeving:owmskern")
    mantel = _block(meta, "overheidwetgeving:owmsmantel")
    tpmeta = _block(meta, "overheidwetgeving:tpmeta")

    title = _first(text_value(kern.get("dcterms:title")), text_value(mantel.get("dcterms:title")))
    creator = _first(text_value(kern.get("dcterms:creator")), text_value(mantel.get("dcterms:publisher")))
    doc_type = text_value(kern.get("dcterms:type"))
    date_ = _first(text_value(mantel.get("dcterms:date")), text_value(kern.get("dcterms:date")))
    issued = text_value(mantel.get("dcterms:issued"))
    modified = text_value(kern.get("dcterms:modified"))
    available = text_value(mantel.get("dcterms:available"))
    identifier = text_value(kern.get("dcterms:identifier"))
    language = text_value(kern.get("dcterms:language")) or "nl"
    subject = text_value(kern.get("dcterms:subject"))
    abstract = text_value(mantel.get("dcterms:abstract"))
    spatial = text_value(kern.get("dcterms:spatial"))
    temporal = text_value(kern.get("dcterms:temporal"))

    preferred_url = text_value(enriched.get("gzd:preferredUrl"))
    pdf_url = text_value(enriched.get("gzd:url"))
    alternative_url = text_value(enriched.get("gzd:alternativeUrl"))

    product_area = text_value(tpmeta.get("c:product-area"))

    return Document(
        position=position,
        identifier=identifier or f"record-{position}",
        title=title or TITLE_PLACEHOLDER,
        creator=creator or CREATOR_PLACEHOLDER,
        type=doc_type or TYPE_PLACEHOLDER,
        language=language,
        subject=subject,
        abstract=abstract,
        date=date_,
        issued=issued,
        modified=modified,
        available=available,
        display_date=format_display_date(date_, issued, available, modified),
        preferred_url=preferred_url,
        pdf_url=pdf_url,
        alternative_url=alternative_url,
        has_url=bool(preferred_url or pdf_url or alternative_url),
        organisation_type=text_value(tpmeta.get("overheidwetgeving:organisatietype")),
        publicatie_naam=text_value(tpmeta.get("overheidwetgeving:publicatienaam")),
        publicatie_nummer=text_value(tpmeta.get("overheidwetgeving:publicatienummer")),
        product_area=product_area,
        vergader_jaar=text_value(tpmeta.get("overheidwetgeving:vergaderjaar")),
        dossiernummer=text_value(tpmeta.get("overheidwetgeving:dossiernummer")),
        ondernummer=text_value(tpmeta.get("overheidwetgeving:ondernummer")),
        spatial=spatial,
        temporal=temporal,
        collection_name=get_collection_name(product_area),
        document_icon=get_document_icon(doc_type),
        type_class=get_type_class(doc_type),
        date_class=get_date_class(date_, issued, available, modified, today=today),
        is_recent=is_recent_document(date_, issued, available, modified, today=today),
        has_geographic=bool(spatial or text_value(tpmeta.get("w.locatiepunt"))),
        document_size=estimate_document_size(abstract, title),
        relevance_score=relevance_score(title, abstract, subject),
    )


def fallback_record(position: int) -> Document:
    return Document(
        position=position,
        identifier=f"error-record-{position}",
        title="Fout bij laden van document",
        creator="Onbekend",
        type="Onbekend",
        display_date="Onbekend",
        has_url=False,
        document_icon="❌",
        type_class="error",
        date_class="unknown-date",
        error=True,
        error_message="Dit document kon niet correct worden verwerkt",
    )


def safe_extract_record(record: Any, position: int, today: Optional[date] = None) -> Document:
    try:
        return extract_record(record, position, today=today)
    except Exception as e:  # noqa: BLE001 - one bad record must not fail the page
        log.warning("Error extracting record %s: %s", position, e)
        return fallback_record(position)
