from __future__ import annotations

import pytest

from overheid_search.api.schemas import SearchRequest
from overheid_search.errors import ParseError, UpstreamDiagnosticError, ValidationError
from overheid_search.services.search_service import build_search_info, search_documents

from sru_samples import FakeSRUClient, diagnostic_xml, facet_xml, record_xml, sru_xml


def test_pagination_formulas():
    info = build_search_info(total_records=105, start_record=41, page_size=20, returned=20)
    assert info.total_pages == 6
    assert info.current_page == 3
    assert info.has_more is True
    assert info.records_on_page == 20

    last = build_search_info(total_records=105, start_record=101, page_size=20, returned=5)
    assert last.current_page == 6
    assert last.has_more is False

    empty = build_search_info(total_records=0, start_record=1, page_size=20, returned=0)
    assert empty.total_pages == 0
    assert empty.current_page == 1
    assert empty.has_more is False


def test_search_end_to_end():
    xml = sru_xml(
        records=[record_xml(), record_xml(identifier=None, title=None, preferred_url=None, pdf_url=None)],
        facets=[facet_xml("dt.type", [("Kamerstuk", 12), ("Staatscourant", 4)])],
        total=42,
    )
    client = FakeSRUClient(xml)
    request = SearchRequest(query="grondwet", collection="officielepublicaties", start_date="2020-01-01",
                            start_record=21, maximum_records=20, sort_by="date")

    result = search_documents(request, client=client)

    (compiled,) = client.calls
    assert compiled.sort_key == "dt.date/sort.descending"
    assert result.query == compiled.query
    assert result.query.startswith('c.product-area=="officielepublicaties" AND (cql.textAndIndexes="grondwet"')
    assert result.total_records == 42
    assert [d.position for d in result.records] == [21, 22]
    assert result.records[1].identifier == "record-22"
    assert result.records[1].title == "Titel niet beschikbaar"
    assert result.records[1].has_url is False
    assert result.facets[0].terms[0].percentage == 75
    assert result.search_info.current_page == 2
    assert result.search_info.total_pages == 3
    assert result.search_info.has_more is True
    assert result.performance.results_found == 2
    assert result.api_info.documentation.endswith("?operation=explain")


def test_corrupt_record_does_not_fail_page():
    xml = sru_xml(records=[record_xml(), "<sru:record>los tekstje</sru:record>"], total=2)
    result = search_documents(SearchRequest(query="wet"), client=FakeSRUClient(xml))
    assert [d.error for d in result.records] == [False, True]


def test_filters_only_search_is_allowed():
    client = FakeSRUClient(sru_xml())
    result = search_documents(SearchRequest(document_type="Staatsblad"), client=client)
    assert result.query == 'dt.type=="Staatsblad"'
    assert result.records == []


def test_no_query_and_no_filters_is_rejected_before_transport():
    client = FakeSRUClient(sru_xml())
    with pytest.raises(ValidationError) as exc:
        search_documents(SearchRequest(collection="all"), client=client)
    assert exc.value.status_code == 400
    assert exc.value.code == "MISSING_QUERY_OR_FILTERS"
    assert client.calls == []


def test_diagnostic_is_request_error():
    with pytest.raises(UpstreamDiagnosticError):
        search_documents(SearchRequest(query="x"), client=FakeSRUClient(diagnostic_xml()))


def test_parse_error_is_request_error():
    with pytest.raises(ParseError):
        search_documents(SearchRequest(query="x"), client=FakeSRUClient("<html>502 Bad Gateway"))
