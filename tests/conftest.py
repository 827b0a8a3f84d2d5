# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for dataset client tests.

This module provides a recording transport stub and client factories that
can be used across all test modules. No test touches the network.
"""

import json

import pytest

from dataverse_dataset.client import DataverseClient
from dataverse_dataset.core.config import DataverseConfig


class DummyResponse:
    def __init__(self, status, body="", headers=None):
        self.status_code = status
        self.headers = headers or {}
        self.reason = ""
        if isinstance(body, (dict, list)):
            self.text = json.dumps(body)
            self._json = body
        else:
            self.text = body or ""
            self._json = None

    def json(self):
        if self._json is not None:
            return self._json
        return json.loads(self.text)


class RecordingHTTP:
    """Transport stub: records every call and replays queued responses."""

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls = []

    def queue(self, status, body="", headers=None):
        self._responses.append((status, body, headers))
        return self

    def _request(self, method, url, **kwargs):
        call = {"method": method, "url": url}
        call.update(kwargs)
        files = kwargs.get("files")
        if files:
            # Capture upload content while the handle is still open
            call["uploaded"] = {k: (v[0], v[1].read()) for k, v in files.items()}
        self.calls.append(call)
        if not self._responses:
            raise AssertionError("No more responses")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        status, body, headers = item
        return DummyResponse(status, body, headers)

    def close(self):
        pass

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def sample_base_url():
    """Standard test base URL."""
    return "https://dataverse.example.org"


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return DataverseConfig(api_version="1", connection_timeout=1000, read_timeout=2000)


@pytest.fixture
def http():
    """Recording transport stub with an empty response queue."""
    return RecordingHTTP()


@pytest.fixture
def client(sample_base_url, test_config, http):
    """Client whose API client sends through the recording stub."""
    c = DataverseClient(sample_base_url, "test-token-12345", test_config)
    c._get_api()._http = http
    return c


@pytest.fixture
def api_root(sample_base_url):
    return f"{sample_base_url}/api/v1"


@pytest.fixture
def sample_pid():
    return "doi:10.5072/FK2/ABC123"


@pytest.fixture
def metadata_file(tmp_path):
    """A JSON metadata file whose exact bytes tests can compare against."""
    p = tmp_path / "metadata.json"
    p.write_bytes(b'{"fields": [{"typeName": "title", "value": "Caf\xc3\xa9 \\"data\\""}]}\n')
    return p
