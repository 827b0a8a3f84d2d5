# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Low-level Dataverse native API client: headers, request execution and result normalisation."""

from __future__ import annotations

import time
from typing import Any, Collection, Dict, Optional

import requests

from ..common.constants import API_TOKEN_HEADER
from ..core._error_codes import (
    TRANSPORT_CONNECTION,
    TRANSPORT_OTHER,
    TRANSPORT_TIMEOUT,
    _http_subcode,
    _is_transient_status,
)
from ..core._http import _HttpClient
from ..core.config import DataverseConfig
from ..core.errors import HttpError, TransportError
from ..core.results import OperationResult, RequestMetadata
from ..core.telemetry import create_telemetry_manager
from ..models.dataset_reference import DatasetReference

_BODY_EXCERPT_LENGTH = 200


class _ApiClient:
    """Executes native API requests and turns every outcome into an :class:`OperationResult`."""

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str],
        config: Optional[DataverseConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        self.config = config or DataverseConfig()
        self.api = self.config.api_root(self.base_url)
        self._api_token = api_token
        self._http = _HttpClient(
            timeout=self.config.timeout,
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            session=session,
        )
        self._telemetry = create_telemetry_manager(self.config.telemetry)

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        """Build request headers with API token authentication."""
        headers = {"Accept": "application/json"}
        headers.update(self._telemetry.get_additional_headers())
        if content_type:
            headers["Content-Type"] = content_type
        if self._api_token:
            headers[API_TOKEN_HEADER] = self._api_token
        return headers

    def _url(self, path: str) -> str:
        return f"{self.api}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        accepted: Collection[int] = (200,),
        dataset: Optional[DatasetReference] = None,
        content_type: Optional[str] = None,
        expects_json: bool = True,
        **kwargs: Any,
    ) -> OperationResult:
        """
        Send one request and normalise the outcome.

        :param method: HTTP method, e.g. ``"get"``.
        :param path: Path relative to the API root, query string included.
        :param operation: Operation name used for telemetry, e.g. ``"datasets.view"``.
        :param accepted: Status codes that count as success.
        :param dataset: Dataset the request concerns, for telemetry.
        :param content_type: ``Content-Type`` header for the body, if any.
        :param expects_json: Whether the endpoint answers with JSON.
        :param kwargs: Passed on to the transport (``data``, ``files``, ...).
        :return: Success with the response text, or failure with
            :class:`~dataverse_dataset.core.errors.HttpError` /
            :class:`~dataverse_dataset.core.errors.TransportError`.
        """
        url = self._url(path)
        verb = method.upper()
        headers = self._headers(content_type)
        headers.update(kwargs.pop("headers", None) or {})
        dataset_id = dataset.id if dataset is not None else None
        addressing = dataset.mode.value if dataset is not None else None

        start = time.perf_counter()
        try:
            with self._telemetry.trace_request(operation, verb, url, dataset_id, addressing) as ctx:
                r = self._http._request(method, url, headers=headers, **kwargs)
                error = None
                if r.status_code not in accepted:
                    error = _http_error(verb, url, r, accepted)
                self._telemetry.record_response(ctx, r.status_code, response_size=len(r.text or ""), error=error)
        except requests.exceptions.RequestException as exc:
            metadata = RequestMetadata(method=verb, url=url, timing_ms=_elapsed_ms(start))
            return OperationResult.failure(_transport_error(verb, url, exc), metadata, expects_json=expects_json)

        metadata = RequestMetadata(
            method=verb,
            url=url,
            http_status_code=r.status_code,
            timing_ms=_elapsed_ms(start),
        )
        if error is not None:
            return OperationResult.failure(error, metadata, expects_json=expects_json)
        return OperationResult.success(r.text, metadata, expects_json=expects_json)

    def close(self) -> None:
        self._http.close()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _server_message(r: Any) -> Optional[str]:
    """Extract the message of a Dataverse ``{"status": "ERROR", "message": ...}`` body, if any."""
    try:
        body = r.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        msg = body.get("message")
        if isinstance(msg, str) and msg:
            return msg
        if isinstance(msg, dict) and isinstance(msg.get("message"), str):
            return msg["message"]
    return None


def _http_error(method: str, url: str, r: Any, accepted: Collection[int]) -> HttpError:
    status = r.status_code
    body = r.text or ""
    server_msg = _server_message(r)
    reason = server_msg or body[:_BODY_EXCERPT_LENGTH] or getattr(r, "reason", None) or "no response body"
    expected = ", ".join(str(s) for s in sorted(accepted))
    return HttpError(
        f"{method} {url} returned {status} (expected {expected}): {reason}",
        status_code=status,
        is_transient=_is_transient_status(status),
        subcode=_http_subcode(status),
        method=method,
        url=url,
        body=body,
        body_excerpt=body[:_BODY_EXCERPT_LENGTH] if body else None,
        details={"server_message": server_msg} if server_msg else None,
    )


def _transport_error(method: str, url: str, exc: requests.exceptions.RequestException) -> TransportError:
    if isinstance(exc, requests.exceptions.Timeout):
        subcode = TRANSPORT_TIMEOUT
    elif isinstance(exc, requests.exceptions.ConnectionError):
        subcode = TRANSPORT_CONNECTION
    else:
        subcode = TRANSPORT_OTHER
    return TransportError(
        f"{method} {url} failed: {exc}",
        cause=exc,
        subcode=subcode,
        method=method,
        url=url,
    )
