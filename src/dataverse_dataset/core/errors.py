# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured failures for dataset operations.

Every failure that an operation can produce is one of the four kinds below.
Operations return them inside an
:class:`~dataverse_dataset.core.results.OperationResult` instead of raising;
:meth:`~dataverse_dataset.core.results.OperationResult.unwrap` raises them.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional


class DatasetError(Exception):
    """Base structured error for the Dataverse dataset client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class UsageError(DatasetError):
    """The operation cannot be performed with the dataset's addressing mode.

    Reported before any request is sent. ``status_code`` is fixed per usage
    rule (501 for metadata export by internal id).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code="usage_error",
            subcode=subcode,
            status_code=status_code,
            details=details,
            source="client",
        )


class FileReadError(DatasetError):
    """A local file needed for the request body could not be read."""

    def __init__(
        self,
        message: str,
        *,
        path: str,
        subcode: Optional[str] = None,
        cause: Optional[OSError] = None,
    ) -> None:
        super().__init__(
            message,
            code="io_error",
            subcode=subcode,
            details={"path": path},
            source="client",
        )
        self.path = path
        self.cause = cause


class HttpError(DatasetError):
    """The server answered with a status outside the operation's accepted set."""

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        body: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if method is not None:
            d["method"] = method
        if url is not None:
            d["url"] = url
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )
        self.body = body


class TransportError(DatasetError):
    """The request never produced an HTTP response (connection, DNS, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        subcode: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        d: Dict[str, Any] = {}
        if method is not None:
            d["method"] = method
        if url is not None:
            d["url"] = url
        if cause is not None:
            d["cause"] = type(cause).__name__
        super().__init__(
            message,
            code="transport_error",
            subcode=subcode,
            details=d,
            source="client",
            is_transient=True,
        )
        self.cause = cause
        self.__cause__ = cause


__all__ = ["DatasetError", "UsageError", "FileReadError", "HttpError", "TransportError"]
