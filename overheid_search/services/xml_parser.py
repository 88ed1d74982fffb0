from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import xmltodict
from xml.parsers.expat import ExpatError

from ..errors import ParseError, UpstreamDiagnosticError


log = logging.getLogger(__name__)

# The gzd schema does not mark repeatable elements, so a single record/facet/term
# would otherwise come back as a dict instead of a one-element list.
REPEATABLE_ELEMENTS = frozenset({"sru:record", "facet:facet", "facet:term"})


def parse_sru_xml(xml_text: Union[bytes, str]) -> Dict[str, Any]:
    """Parse an SRU response body into a dict tree.

    Bytes are decoded by the parser per the XML declaration. Attributes are
    keyed ``@name`` and mixed text ``#text``; elements in
    REPEATABLE_ELEMENTS are always lists.

    Raises:
        ParseError: the body is empty or not well-formed XML.
    """
    if not xml_text or not xml_text.strip():
        raise ParseError(detail="empty SRU response body")
    try:
        tree = xmltodict.parse(xml_text, force_list=REPEATABLE_ELEMENTS)
    except (ExpatError, ValueError) as e:
        log.error("XML parsing failed: %s; content preview: %s", e, xml_text[:500])
        raise ParseError(detail=str(e)) from e
    if not isinstance(tree, dict):
        raise ParseError(detail="SRU response has no root element")
    return tree


def as_list(node: Any) -> List[Any]:
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def text_value(node: Any) -> Optional[str]:
    """Best-effort text of a tree node.

    The gzd metadata blocks nest values inconsistently: a plain string, an
    element with attributes (``{"@scheme": ..., "#text": value}``) or a
    wrapper element with a single child. All three collapse to a stripped
    string, or None when there is no text. Repeated elements are joined.
    """
    if node is None:
        return None
    if isinstance(node, str):
        return node.strip() or None
    if isinstance(node, (int, float)):
        return str(node)
    if isinstance(node, dict):
        if "#text" in node:
            return text_value(node["#text"])
        for key, value in node.items():
            if key.startswith("@"):
                continue
            text = text_value(value)
            if text:
                return text
        return None
    if isinstance(node, list):
        texts = [t for t in (text_value(n) for n in node) if t]
        return ", ".join(texts) or None
    return str(node).strip() or None


def _child(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def search_response(tree: Dict[str, Any]) -> Dict[str, Any]:
    resp = tree.get("sru:searchRetrieveResponse")
    return resp if isinstance(resp, dict) else {}


def check_diagnostics(resp: Dict[str, Any]) -> None:
    """Raise UpstreamDiagnosticError when the response carries an SRU diagnostic."""
    diagnostics = resp.get("sru:diagnostics")
    if diagnostics is None:
        return
    first = next(iter(as_list(_child(diagnostics, "diag:diagnostic"))), None)
    if not isinstance(first, dict):
        first = {}
    message = text_value(first.get("diag:message")) or "Unknown API error"
    code = text_value(first.get("diag:code")) or text_value(first.get("diag:uri")) or "UNKNOWN"
    details = text_value(first.get("diag:details"))
    log.warning("SRU API diagnostic: code=%s message=%s details=%s", code, message, details)
    raise UpstreamDiagnosticError(message, code=code, detail=details)


def number_of_records(resp: Dict[str, Any]) -> int:
    try:
        return max(0, int(text_value(resp.get("sru:numberOfRecords")) or 0))
    except ValueError:
        return 0


def records(resp: Dict[str, Any]) -> List[Any]:
    return as_list(_child(resp.get("sru:records"), "sru:record"))


def facets(resp: Dict[str, Any]) -> List[Any]:
    faceted = _child(resp.get("sru:extraResponseData"), "sru:facetedResults")
    return as_list(_child(faceted, "facet:facet"))

