# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types for dataset operations.

- :class:`RequestMetadata`: HTTP request/response metadata for diagnostics
- :class:`OperationResult`: the body of a successful call, or the
  :class:`~dataverse_dataset.core.errors.DatasetError` describing why it failed

Operations never raise for usage, I/O, HTTP-status or transport failures;
they return an :class:`OperationResult` and leave the decision to the caller.

Example::

    result = dataset.view()
    if result.ok:
        print(result.body)
    elif isinstance(result.error, HttpError):
        print(f"Server said {result.status_code}: {result.error.message}")

    # Or raise on failure
    body = dataset.view().unwrap()
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import DatasetError


@dataclass(frozen=True)
class RequestMetadata:
    """
    HTTP request/response metadata for diagnostics.

    :param method: HTTP method of the request, or ``None`` if no request was sent.
    :type method: :class:`str` | None
    :param url: Full request URL, or ``None`` if no request was sent.
    :type url: :class:`str` | None
    :param http_status_code: HTTP response status code, if a response was received.
    :type http_status_code: :class:`int` | None
    :param timing_ms: Request duration in milliseconds.
    :type timing_ms: :class:`float` | None
    """

    method: Optional[str] = None
    url: Optional[str] = None
    http_status_code: Optional[int] = None
    timing_ms: Optional[float] = None


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a single dataset operation.

    Exactly one of ``body`` and ``error`` is set.

    :param body: Response body as text, for a successful call.
    :type body: :class:`str` | None
    :param error: Failure description, for an unsuccessful call.
    :type error: ~dataverse_dataset.core.errors.DatasetError | None
    :param metadata: Request metadata; empty when the operation failed before sending.
    :type metadata: :class:`RequestMetadata`
    :param expects_json: Whether the endpoint answers with JSON.
    :type expects_json: :class:`bool`
    """

    body: Optional[str] = None
    error: Optional[DatasetError] = None
    metadata: RequestMetadata = field(default_factory=RequestMetadata)
    expects_json: bool = True

    def __post_init__(self) -> None:
        if (self.body is None) == (self.error is None):
            raise ValueError("Provide exactly one of 'body' or 'error'.")

    @classmethod
    def success(
        cls, body: str, metadata: Optional[RequestMetadata] = None, *, expects_json: bool = True
    ) -> "OperationResult":
        return cls(body=body, metadata=metadata or RequestMetadata(), expects_json=expects_json)

    @classmethod
    def failure(
        cls, error: DatasetError, metadata: Optional[RequestMetadata] = None, *, expects_json: bool = True
    ) -> "OperationResult":
        return cls(error=error, metadata=metadata or RequestMetadata(), expects_json=expects_json)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> Optional[int]:
        """
        Status of the outcome: the HTTP status when a response was received,
        otherwise the status carried by the error (e.g. 501 for a usage error).
        """
        if self.metadata.http_status_code is not None:
            return self.metadata.http_status_code
        if self.error is not None:
            return self.error.status_code
        return None

    def unwrap(self) -> str:
        """
        Return the body, or raise the carried error.

        :rtype: :class:`str`
        :raises ~dataverse_dataset.core.errors.DatasetError: If the operation failed.
        """
        if self.error is not None:
            raise self.error
        return self.body  # type: ignore[return-value]

    def json(self) -> Any:
        """
        Parse the body as JSON.

        :raises ~dataverse_dataset.core.errors.DatasetError: If the operation failed.
        :raises ValueError: If the endpoint does not answer with JSON or the body is not valid JSON.
        """
        body = self.unwrap()
        if not self.expects_json:
            raise ValueError("This operation does not return JSON; use the body as text.")
        return json.loads(body)

    def data(self) -> Any:
        """
        Return the ``data`` member of a Dataverse ``{"status": "OK", "data": ...}`` envelope.

        :raises ValueError: If the body is not such an envelope.
        """
        doc = self.json()
        if not isinstance(doc, dict) or "data" not in doc:
            raise ValueError("Response body has no 'data' member.")
        return doc["data"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "status_code": self.status_code,
            "body": self.body,
            "error": self.error.to_dict() if self.error is not None else None,
            "method": self.metadata.method,
            "url": self.metadata.url,
            "timing_ms": self.metadata.timing_ms,
        }


__all__ = [
    "RequestMetadata",
    "OperationResult",
]
