from __future__ import annotations

from typing import Iterable, Optional


SRU_NS = (
    'xmlns:sru="http://docs.oasis-open.org/ns/search-ws/sruResponse" '
    'xmlns:gzd="http://standaarden.overheid.nl/sru" '
    'xmlns:overheidwetgeving="http://standaarden.overheid.nl/wetgeving/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:c="http://standaarden.overheid.nl/collectie/" '
    'xmlns:facet="http://docs.oasis-open.org/ns/search-ws/facetedResults" '
    'xmlns:diag="http://docs.oasis-open.org/ns/search-ws/diagnostic"'
)


def record_xml(
    *,
    title: Optional[str] = "Wijziging van de Grondwet",
    identifier: Optional[str] = "kst-36000-1",
    creator: str = '<dcterms:creator scheme="overheid:Ministerie">Ministerie van Binnenlandse Zaken</dcterms:creator>',
    doc_type: str = "Kamerstuk",
    issued: Optional[str] = "2024-03-05",
    product_area: str = "officielepublicaties",
    preferred_url: Optional[str] = "https://zoek.officielebekendmakingen.nl/kst-36000-1.html",
    pdf_url: Optional[str] = "https://zoek.officielebekendmakingen.nl/kst-36000-1.pdf",
) -> str:
    kern = []
    if identifier:
        kern.append(f"<dcterms:identifier>{identifier}</dcterms:identifier>")
    if title:
        kern.append(f"<dcterms:title>{title}</dcterms:title>")
    kern.append(creator)
    kern.append(f'<dcterms:type scheme="OVERHEIDop.Parlementair">{doc_type}</dcterms:type>')
    kern.append("<dcterms:language>nl</dcterms:language>")
    mantel = []
    if issued:
        mantel.append(f"<dcterms:issued>{issued}</dcterms:issued>")
    mantel.append("<dcterms:available>2024-03-06</dcterms:available>")
    enriched = []
    if preferred_url:
        enriched.append(f"<gzd:preferredUrl>{preferred_url}</gzd:preferredUrl>")
    if pdf_url:
        enriched.append(f"<gzd:url>{pdf_url}</gzd:url>")
    return (
        "<sru:record>"
        "<sru:recordSchema>gzd</sru:recordSchema>"
        "<sru:recordData><gzd:gzd>"
        "<gzd:originalData><overheidwetgeving:meta>"
        f"<overheidwetgeving:owmskern>{''.join(kern)}</overheidwetgeving:owmskern>"
        f"<overheidwetgeving:owmsmantel>{''.join(mantel)}</overheidwetgeving:owmsmantel>"
        "<overheidwetgeving:tpmeta>"
        f"<c:product-area>{product_area}</c:product-area>"
        "<overheidwetgeving:vergaderjaar>2023-2024</overheidwetgeving:vergaderjaar>"
        "<overheidwetgeving:dossiernummer>36000</overheidwetgeving:dossiernummer>"
        "</overheidwetgeving:tpmeta>"
        "</overheidwetgeving:meta></gzd:originalData>"
        f"<gzd:enrichedData>{''.join(enriched)}</gzd:enrichedData>"
        "</gzd:gzd></sru:recordData>"
        "</sru:record>"
    )


def facet_xml(index: str, terms: Iterable[tuple]) -> str:
    body = "".join(
        "<facet:term>"
        f"<facet:actualTerm>{label}</facet:actualTerm>"
        f"<facet:query>{index}=\"{label}\"</facet:query>"
        f"<facet:count>{count}</facet:count>"
        "</facet:term>"
        for label, count in terms
    )
    return f"<facet:facet><facet:index>{index}</facet:index><facet:terms>{body}</facet:terms></facet:facet>"


def sru_xml(records: Iterable[str] = (), facets: Iterable[str] = (), total: int = 0, extra: str = "") -> str:
    facets = list(facets)
    extra_data = ""
    if facets:
        extra_data = (
            "<sru:extraResponseData><sru:facetedResults>"
            + "".join(facets)
            + "</sru:facetedResults></sru:extraResponseData>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<sru:searchRetrieveResponse {SRU_NS}>"
        "<sru:version>2.0</sru:version>"
        f"<sru:numberOfRecords>{total}</sru:numberOfRecords>"
        f"<sru:records>{''.join(records)}</sru:records>"
        f"{extra}{extra_data}"
        "</sru:searchRetrieveResponse>"
    )


def diagnostic_xml(message: str = "Query syntax error", uri: str = "info:srw/diagnostic/1/10") -> str:
    return (
        f'<?xml version="1.0" encoding="UTF-8"?><sru:searchRetrieveResponse {SRU_NS}>'
        "<sru:version>2.0</sru:version><sru:numberOfRecords>0</sru:numberOfRecords>"
        "<sru:diagnostics><diag:diagnostic>"
        f"<diag:uri>{uri}</diag:uri><diag:details>cql.textAndIndexes</diag:details>"
        f"<diag:message>{message}</diag:message>"
        "</diag:diagnostic></sru:diagnostics>"
        "</sru:searchRetrieveResponse>"
    )


class FakeSRUClient:
    """Stands in for SRUClient: records the compiled query and returns canned XML."""

    def __init__(self, xml_text: str) -> None:
        self.xml_text = xml_text
        self.calls = []

    def execute(self, compiled):
        self.calls.append(compiled)
        return self.xml_text
