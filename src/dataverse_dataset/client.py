# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
import threading
from typing import Mapping, Optional, Union

import requests

from .core.config import DataverseConfig
from .data._api import _ApiClient
from .models.dataset_reference import AddressingMode, DatasetReference
from .operations.datasets import Dataset


class DataverseClient:
    """
    Client for dataset management on a Dataverse installation.

    The client holds the connection settings (base URL, API token, API version,
    timeouts) for its whole lifetime and hands out :class:`~dataverse_dataset.operations.datasets.Dataset`
    objects, one per dataset, which translate each operation into a single call to
    the native API.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager reuses one HTTP connection pool for
        all operations and releases it on exit::

            with DataverseClient("https://demo.dataverse.org", api_token) as client:
                ds = client.dataset("doi:10.5072/FK2/ABC123", persistent_id=True)
                print(ds.view().unwrap())

    **Without Context Manager**:
        Each request opens its own connection. Call ``close()`` when done::

            client = DataverseClient("https://demo.dataverse.org", api_token)
            try:
                client.dataset("42").publish("minor")
            finally:
                client.close()

    :param base_url: Installation URL, for example ``"https://demo.dataverse.org"``.
        Trailing slash is automatically removed.
    :type base_url: :class:`str`
    :param api_token: API token sent in the ``X-Dataverse-key`` header. Anonymous when ``None``.
    :type api_token: :class:`str` or None
    :param config: Optional configuration for API version, timeouts, retries and telemetry.
        Defaults to :class:`~dataverse_dataset.core.config.DataverseConfig` defaults.
    :type config: ~dataverse_dataset.core.config.DataverseConfig or None

    :raises ValueError: If ``base_url`` is missing or empty after trimming.

    .. note::
        The client lazily initializes its internal API client on first use,
        so construction makes no network calls.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        config: Optional[DataverseConfig] = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValueError("base_url is required.")
        self._api_token = api_token
        self._config = config or DataverseConfig()
        self._api: Optional[_ApiClient] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False
        self._api_lock = threading.Lock()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DataverseClient":
        """
        Create a client from ``DATAVERSE_BASE_URL``, ``DATAVERSE_API_TOKEN`` and the
        variables read by :meth:`~dataverse_dataset.core.config.DataverseConfig.from_env`.

        :raises ValueError: If ``DATAVERSE_BASE_URL`` is not set.
        """
        env = os.environ if environ is None else environ
        return cls(
            env.get("DATAVERSE_BASE_URL", ""),
            env.get("DATAVERSE_API_TOKEN") or None,
            DataverseConfig.from_env(env),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def config(self) -> DataverseConfig:
        return self._config

    @property
    def api_url(self) -> str:
        """Root of the native API, e.g. ``https://demo.dataverse.org/api/v1``."""
        return self._config.api_root(self._base_url)

    def __enter__(self) -> "DataverseClient":
        """
        Enter the context manager.

        Creates an HTTP session for connection pooling. All operations within
        the context reuse this session.

        :return: The client instance.
        :rtype: DataverseClient
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            # An API client built before entering must pick up the session
            if self._api is not None:
                self._api.close()
                self._api = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager, releasing the session. Exceptions are not suppressed."""
        self.close()

    def close(self) -> None:
        """
        Explicitly close the client and release resources.

        Safe to call multiple times. Called automatically when using the context manager.
        """
        if self._api is not None:
            self._api.close()
            self._api = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_api(self) -> _ApiClient:
        """
        Get or create the internal API client instance.

        When a session exists (from the context manager), it is passed on for connection pooling.
        Concurrent first calls share one instance.

        :rtype: ~dataverse_dataset.data._api._ApiClient
        """
        with self._api_lock:
            if self._api is None:
                self._api = _ApiClient(
                    self._base_url,
                    self._api_token,
                    self._config,
                    session=self._session,
                )
            return self._api

    def dataset(
        self,
        dataset: Union[str, int, DatasetReference],
        persistent_id: bool = False,
    ) -> Dataset:
        """
        Return the operations for one dataset.

        :param dataset: Internal id, persistent identifier, or a ready-made reference.
        :type dataset: :class:`str`, :class:`int` or ~dataverse_dataset.models.dataset_reference.DatasetReference
        :param persistent_id: Treat a string ``dataset`` as a persistent identifier. Ignored for references.
        :type persistent_id: :class:`bool`
        :rtype: ~dataverse_dataset.operations.datasets.Dataset
        :raises ValueError: If the id is empty.

        Example::

            by_pid = client.dataset("doi:10.5072/FK2/ABC123", persistent_id=True)
            by_id = client.dataset(42)
        """
        if isinstance(dataset, DatasetReference):
            ref = dataset
        else:
            mode = AddressingMode.BY_PERSISTENT_ID if persistent_id else AddressingMode.BY_ID
            ref = DatasetReference(dataset, mode)
        return Dataset(self, ref)


__all__ = ["DataverseClient"]
