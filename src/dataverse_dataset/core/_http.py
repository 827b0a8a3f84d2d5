# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with timeout handling and optional session support.

This module provides :class:`~dataverse_dataset.core._http._HttpClient`, a wrapper
around the requests library that applies the configured connect/read timeouts to
every request, optionally retries network-level failures, and reuses a session
for connection pooling when one is supplied.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Tuple, Union

import requests


class _HttpClient:
    """
    HTTP client with timeout handling, optional network retry and optional session support.

    :param timeout: Request timeout, either seconds or a ``(connect, read)`` tuple.
    :type timeout: :class:`float` | :class:`tuple`
    :param retries: Maximum number of attempts for network errors. Default is 1 (no retry).
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between attempts. Default is 0.5.
    :type backoff: :class:`float` | None
    :param session: Optional requests.Session for connection pooling. If provided,
        all requests use this session for efficient connection reuse.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        timeout: Union[float, Tuple[float, float]],
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.default_timeout = timeout
        self.max_attempts = retries if retries is not None else 1
        self.base_delay = backoff if backoff is not None else 0.5
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with timeout management.

        HTTP error statuses are returned as responses; only network-level failures
        raise. When more than one attempt is configured, network failures are retried
        with exponential backoff.

        :param method: HTTP method (GET, POST, PUT, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, data, files, etc.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If all attempts fail.
        """
        kwargs.setdefault("timeout", self.default_timeout)

        for attempt in range(self.max_attempts):
            try:
                if self._session is not None:
                    return self._session.request(method, url, **kwargs)
                return requests.request(method, url, **kwargs)
            except requests.exceptions.RequestException:
                if attempt == self.max_attempts - 1:
                    raise
                # A consumed upload stream cannot be replayed
                if kwargs.get("files"):
                    raise
                delay = self.base_delay * (2**attempt)
                time.sleep(delay)
                continue
        raise RuntimeError("Unexpected end of retry loop")

    def close(self) -> None:
        """
        Close the HTTP client and release resources.

        If a session was provided, this method closes it. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
