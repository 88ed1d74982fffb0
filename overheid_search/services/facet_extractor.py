from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..api.schemas import Facet, FacetTerm
from ..errors import FacetExtractionError
from .xml_parser import as_list, text_value


log = logging.getLogger(__name__)

MAX_TERMS = 50
TOP_TERMS = 10
EXPANDED_FACETS = {"dt.type", "c.product-area"}

FACET_DISPLAY_NAMES: Dict[str, str] = {
    "dt.type": "Documenttype",
    "w.organisatietype": "Type Organisatie",
    "c.product-area": "Collectie",
    "dt.creator": "Organisatie",
    "dt.language": "Taal",
    "w.publicatienaam": "Publicatie",
}

FACET_ICONS: Dict[str, str] = {
    "dt.type": "📋",
    "w.organisatietype": "🏢",
    "c.product-area": "📚",
    "dt.creator": "👥",
    "dt.language": "🌐",
    "w.publicatienaam": "📰",
}

ORGANISATION_TYPES: Dict[str, str] = {
    "ministerie": "Ministerie",
    "gemeente": "Gemeente",
    "provincie": "Provincie",
    "waterschap": "Waterschap",
    "zbo": "Zelfstandig Bestuursorgaan",
}


def get_facet_display_name(index: str) -> str:
    return FACET_DISPLAY_NAMES.get(index, index)


def get_facet_icon(index: str) -> str:
    return FACET_ICONS.get(index, "🔍")


def term_display_name(term: str, index: str) -> str:
    if index == "w.organisatietype":
        return ORGANISATION_TYPES.get(term.lower(), term)
    return term


def _count(node: Any) -> int:
    try:
        return int(text_value(node) or 0)
    except ValueError:
        return 0


def _percentages(counts: List[int]) -> List[int]:
    # Relative to the retained terms only; half-up rounding so the sum stays near 100
    total = sum(counts)
    if total <= 0:
        return [0 for _ in counts]
    return [int(c * 100 / total + 0.5) for c in counts]


def extract_facet(facet: Any, max_terms: int = MAX_TERMS) -> Optional[Facet]:
    """Map one ``facet:facet`` node to a Facet.

    Terms without a label or with a zero count are dropped, the rest sorted
    by count (descending) and cut to `max_terms`. Returns None when nothing
    is left.
    """
    if not isinstance(facet, dict):
        raise FacetExtractionError(f"facet node is {type(facet).__name__}, not an element")
    index = text_value(facet.get("facet:index"))
    if not index:
        raise FacetExtractionError("facet without facet:index")

    terms_node = facet.get("facet:terms")
    raw_terms = as_list(terms_node.get("facet:term")) if isinstance(terms_node, dict) else []

    parsed = []
    for term in raw_terms:
        if not isinstance(term, dict):
            continue
        actual = text_value(term.get("facet:actualTerm"))
        count = _count(term.get("facet:count"))
        if not actual or count <= 0:
            continue
        parsed.append((actual, text_value(term.get("facet:query")), count))

    parsed.sort(key=lambda t: t[2], reverse=True)
    parsed = parsed[:max_terms]
    if not parsed:
        return None

    percentages = _percentages([c for _, _, c in parsed])
    terms = [
        FacetTerm(
            actual_term=actual,
            query=query,
            count=count,
            percentage=pct,
            display_name=term_display_name(actual, index),
        )
        for (actual, query, count), pct in zip(parsed, percentages)
    ]
    return Facet(
        index=index,
        display_name=get_facet_display_name(index),
        icon=get_facet_icon(index),
        expanded=index in EXPANDED_FACETS,
        terms=terms,
        total_terms=len(raw_terms),
        top_terms=terms[:TOP_TERMS],
    )


def safe_extract_facet(facet: Any) -> Optional[Facet]:
    try:
        return extract_facet(facet)
    except Exception as e:  # noqa: BLE001 - drop the facet, keep the response
        log.warning("Error extracting facet data: %s", e)
        return None


def extract_facets(facet_nodes: List[Any]) -> List[Facet]:
    out: List[Facet] = []
    for node in facet_nodes:
        facet = safe_extract_facet(node)
        if facet is not None:
            out.append(facet)
    return out
