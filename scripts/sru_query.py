from __future__ import annotations

import argparse
import json
import os
import sys

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from overheid_search.api.schemas import SearchRequest
from overheid_search.errors import SearchError
from overheid_search.services.query_builder import build_compiled_query
from overheid_search.services.search_service import search_documents


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Compile (and optionally run) an overheid.nl SRU search.")
    p.add_argument("query", nargs="?", default=None)
    p.add_argument("--collection")
    p.add_argument("--document-type")
    p.add_argument("--organization")
    p.add_argument("--date-type", default="created", choices=["created", "issued", "available", "modified"])
    p.add_argument("--start-date")
    p.add_argument("--end-date")
    p.add_argument("--location")
    p.add_argument("--facet", action="append", default=[], metavar="INDEX=VALUE")
    p.add_argument("--sort-by", default="relevance")
    p.add_argument("--start-record", type=int, default=1)
    p.add_argument("--maximum-records", type=int, default=10)
    p.add_argument("--run", action="store_true", help="Send the query to the SRU endpoint")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    facet_filters = {}
    for item in args.facet:
        index, _, value = item.partition("=")
        facet_filters.setdefault(index, []).append(value)

    request = SearchRequest(
        query=args.query,
        collection=args.collection,
        document_type=args.document_type,
        organization=args.organization,
        date_type=args.date_type,
        start_date=args.start_date,
        end_date=args.end_date,
        location=args.location,
        facet_filters=facet_filters,
        sort_by=args.sort_by,
        start_record=args.start_record,
        maximum_records=args.maximum_records,
    )
    compiled = build_compiled_query(request)
    print(f"CQL: {compiled.query}")
    if compiled.sort_key:
        print(f"sortKeys: {compiled.sort_key}")
    if not args.run:
        return 0

    try:
        result = search_documents(request)
    except SearchError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 1
    print(json.dumps(result.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
