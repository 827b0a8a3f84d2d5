# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .telemetry import TelemetryConfig


@dataclass(frozen=True)
class DataverseConfig:
    """
    Configuration settings for dataset operations against a Dataverse installation.

    :param api_version: Version of the native API, used in the ``/api/v{version}`` prefix. Default is ``"1"``.
    :type api_version: str
    :param connection_timeout: Connection timeout in milliseconds (default: 5000).
    :type connection_timeout: int
    :param read_timeout: Read timeout in milliseconds (default: 30000).
    :type read_timeout: int
    :param http_retries: Maximum number of attempts for a request that fails at the network level
        (default: 1, no retry).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds between network-level attempts (default: 0.5).
    :type http_backoff: float or None
    :param telemetry: Optional logging, tracing and hook configuration. Telemetry is off when ``None``.
    :type telemetry: ~dataverse_dataset.core.telemetry.TelemetryConfig or None
    """
    api_version: str = "1"
    connection_timeout: int = 5000
    read_timeout: int = 30000

    # Transport-level retry on network errors; operations themselves never retry
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None

    telemetry: Optional[TelemetryConfig] = None

    def __post_init__(self) -> None:
        if not str(self.api_version or "").strip():
            raise ValueError("api_version is required.")
        if self.connection_timeout <= 0:
            raise ValueError("connection_timeout must be a positive number of milliseconds.")
        if self.read_timeout <= 0:
            raise ValueError("read_timeout must be a positive number of milliseconds.")
        if self.http_retries is not None and self.http_retries < 1:
            raise ValueError("http_retries must be at least 1 when provided.")

    @property
    def timeout(self) -> Tuple[float, float]:
        """
        Timeouts in the ``(connect, read)`` seconds form accepted by ``requests``.

        :rtype: tuple[float, float]
        """
        return (self.connection_timeout / 1000.0, self.read_timeout / 1000.0)

    def api_root(self, base_url: str) -> str:
        """Return the native API root for ``base_url``, e.g. ``https://demo.dataverse.org/api/v1``."""
        return f"{base_url.rstrip('/')}/api/v{self.api_version}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DataverseConfig":
        """
        Create a configuration instance from ``DATAVERSE_*`` environment variables.

        Recognised variables are ``DATAVERSE_API_VERSION``, ``DATAVERSE_CONNECTION_TIMEOUT_MS``,
        ``DATAVERSE_READ_TIMEOUT_MS`` and ``DATAVERSE_HTTP_RETRIES``. Unset variables keep their defaults.

        :param environ: Mapping to read instead of ``os.environ``.
        :return: Configuration instance.
        :rtype: ~dataverse_dataset.core.config.DataverseConfig
        :raises ValueError: If a numeric variable does not hold an integer.
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get("DATAVERSE_API_VERSION"):
            kwargs["api_version"] = env["DATAVERSE_API_VERSION"].strip()
        for var, field_name in (
            ("DATAVERSE_CONNECTION_TIMEOUT_MS", "connection_timeout"),
            ("DATAVERSE_READ_TIMEOUT_MS", "read_timeout"),
            ("DATAVERSE_HTTP_RETRIES", "http_retries"),
        ):
            raw = env.get(var)
            if raw is None or not raw.strip():
                continue
            try:
                kwargs[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from None
        return cls(**kwargs)
