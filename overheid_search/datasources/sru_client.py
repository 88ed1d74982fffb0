from __future__ import annotations

import logging
import socket
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, List, Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from ..errors import TransportError, TransportTimeout, TransportUnreachable, UpstreamHTTPError
from ..services.query_builder import CompiledQuery
from ..settings import settings


log = logging.getLogger(__name__)

SRU_VERSION = "2.0"
RECORD_SCHEMA = "gzd"


def _abort(resp: requests.Response) -> None:
    """Unblock a reader stuck on the response socket, then release it."""
    conn = getattr(getattr(resp, "raw", None), "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is not None:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
    resp.close()


class SRUClient:
    """Single-shot client for the overheid.nl SRU 2.0 searchRetrieve operation.

    Only fetches the raw XML body. Every call is one attempt bounded by a hard
    deadline; retrying is left to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_records: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url or settings.sru_base_url
        self.timeout = timeout or settings.sru_timeout
        self.max_records = max_records or settings.sru_max_records
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": settings.user_agent,
            "Accept": "application/xml",
        })

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> SRUClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def build_params(self, compiled: CompiledQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "operation": "searchRetrieve",
            "version": SRU_VERSION,
            "query": compiled.query,
            "startRecord": str(max(1, compiled.start_record)),
            "maximumRecords": str(min(max(1, compiled.maximum_records), self.max_records)),
            "recordSchema": RECORD_SCHEMA,
            "facetLimit": compiled.facet_limit,
        }
        if compiled.sort_key:
            params["sortKeys"] = compiled.sort_key
        return params

    def execute(self, compiled: CompiledQuery) -> bytes:
        """Run one searchRetrieve request and return the raw response XML.

        The whole exchange, headers and body, has to finish within
        ``self.timeout`` seconds. Past that the socket is shut down and
        ``TransportTimeout`` is raised, however slowly the server is sending.

        Raises:
            TransportTimeout: the deadline passed before the body was read.
            TransportUnreachable: the endpoint could not be reached.
            UpstreamHTTPError: the endpoint answered with a non-2xx status.
            TransportError: any other requests failure.
        """
        params = self.build_params(compiled)
        deadline = time.monotonic() + self.timeout
        log.debug("SRU request: url=%s query=%s start=%s max=%s", self.base_url, compiled.query,
                  params["startRecord"], params["maximumRecords"])

        responses: List[requests.Response] = []
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sru-fetch")
        try:
            future = pool.submit(self._fetch, params, deadline, responses)
            try:
                status, raw = future.result(timeout=self.timeout)
            except FutureTimeout:
                for resp in responses:
                    _abort(resp)
                log.warning("SRU request cancelled after %ss: query=%s", self.timeout, compiled.query)
                raise TransportTimeout(detail=f"SRU response not complete after {self.timeout}s") from None
        finally:
            pool.shutdown(wait=False)

        log.debug("SRU response ok: status=%s bytes=%s", status, len(raw))
        return raw

    def _fetch(self, params: Dict[str, Any], deadline: float, responses: List[requests.Response]):
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout, stream=True)
            responses.append(resp)
            try:
                if not resp.ok:
                    body = resp.text[:500]
                    raise UpstreamHTTPError(resp.status_code, detail=f"SRU API responded with status: {resp.status_code} - {body}")
                return resp.status_code, resp.content
            finally:
                resp.close()
        except requests.exceptions.Timeout as e:
            raise TransportTimeout(detail=str(e)) from e
        except requests.exceptions.ConnectionError as e:
            # a read timeout while streaming the body arrives wrapped in ConnectionError
            if (e.args and isinstance(e.args[0], ReadTimeoutError)) or time.monotonic() >= deadline:
                raise TransportTimeout(detail=str(e)) from e
            raise TransportUnreachable(detail=str(e)) from e
        except requests.exceptions.RequestException as e:
            if time.monotonic() >= deadline:
                raise TransportTimeout(detail=str(e)) from e
            raise TransportError(detail=str(e)) from e
