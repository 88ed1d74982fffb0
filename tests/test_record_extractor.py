from __future__ import annotations

from datetime import date

from overheid_search.services import xml_parser
from overheid_search.services.record_extractor import (
    extract_record,
    format_display_date,
    get_date_class,
    get_document_icon,
    get_type_class,
    is_recent_document,
    safe_extract_record,
)

from sru_samples import record_xml, sru_xml


TODAY = date(2024, 3, 20)


def _records(*records):
    tree = xml_parser.parse_sru_xml(sru_xml(records=records, total=len(records)))
    return xml_parser.records(xml_parser.search_response(tree))


def test_extracts_full_record():
    (record,) = _records(record_xml())
    doc = extract_record(record, 1, today=TODAY)

    assert doc.position == 1
    assert doc.identifier == "kst-36000-1"
    assert doc.title == "Wijziging van de Grondwet"
    assert doc.creator == "Ministerie van Binnenlandse Zaken"
    assert doc.type == "Kamerstuk"
    assert doc.language == "nl"
    assert doc.issued == "2024-03-05"
    assert doc.available == "2024-03-06"
    assert doc.display_date == "5 maart 2024"
    assert doc.has_url is True
    assert doc.pdf_url.endswith(".pdf")
    assert doc.product_area == "officielepublicaties"
    assert doc.collection_name == "Officiële Publicaties"
    assert doc.vergader_jaar == "2023-2024"
    assert doc.dossiernummer == "36000"
    assert doc.document_icon == "🏛️"
    assert doc.type_class == "parliament"
    assert doc.date_class == "recent"
    assert doc.is_recent is True
    assert doc.error is False


def test_missing_metadata_gives_placeholders_not_error():
    doc = extract_record({"sru:recordSchema": "gzd"}, 7)
    assert doc.title == "Titel niet beschikbaar"
    assert doc.creator == "Onbekende organisatie"
    assert doc.type == "Onbekend documenttype"
    assert doc.identifier == "record-7"
    assert doc.language == "nl"
    assert doc.display_date == "Datum onbekend"
    assert doc.collection_name == "Onbekende collectie"
    assert doc.has_url is False
    assert doc.date_class == "no-date"
    assert doc.error is False


def test_title_falls_back_to_mantel():
    record = {
        "sru:recordData": {"gzd:gzd": {"gzd:originalData": {"overheidwetgeving:meta": {
            "overheidwetgeving:owmskern": {"dcterms:creator": None},
            "overheidwetgeving:owmsmantel": {
                "dcterms:title": "Alternatieve titel",
                "dcterms:publisher": {"@scheme": "x", "#text": "Gemeente Utrecht"},
                "dcterms:date": "2021-11-02",
            },
        }}}}
    }
    doc = extract_record(record, 3, today=TODAY)
    assert doc.title == "Alternatieve titel"
    assert doc.creator == "Gemeente Utrecht"
    assert doc.date == "2021-11-02"
    assert doc.display_date == "2 november 2021"
    assert doc.date_class == "recent-years"


def test_unparseable_record_falls_back():
    doc = safe_extract_record("this is not a record", 12)
    assert doc.error is True
    assert doc.position == 12
    assert doc.identifier == "error-record-12"
    assert doc.title == "Fout bij laden van document"
    assert doc.has_url is False
    assert doc.type_class == "error"


def test_display_date_priority():
    assert format_display_date("2020-01-01", "2021-02-03", "2022-01-01", "2023-01-01") == "3 februari 2021"
    assert format_display_date("2020-01-01", None, "2022-04-01", "2023-01-01") == "1 april 2022"
    assert format_display_date("2020-01-01", None, None, "2023-01-01") == "1 januari 2020"
    assert format_display_date(None, None, None, "2023-05-09") == "9 mei 2023"
    assert format_display_date(None, None, None, None) == "Datum onbekend"
    assert format_display_date("voorjaar 2020", None, None, None) == "voorjaar 2020"


def test_date_class_and_recency():
    assert get_date_class(None, "2024-03-01", None, None, today=TODAY) == "recent"
    assert get_date_class(None, "2023-06-01", None, None, today=TODAY) == "this-year"
    assert get_date_class(None, "2015-06-01", None, None, today=TODAY) == "older"
    assert get_date_class("onbekend", None, None, None, today=TODAY) == "unknown-date"
    assert is_recent_document(None, None, "2024-01-15", None, today=TODAY) is True
    assert is_recent_document(None, None, "2023-10-01", None, today=TODAY) is False
    assert is_recent_document(None, None, None, None, today=TODAY) is False


def test_type_helpers():
    assert get_document_icon("Wet") == "⚖️"
    assert get_document_icon("Brief regering") == "✉️"
    assert get_document_icon(None) == "📄"
    assert get_type_class("Besluit") == "decision"
    assert get_type_class("Onbekend iets") == "document"
    assert get_type_class(None) == "unknown"
