# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Error subcodes attached to :class:`~dataverse_dataset.core.errors.DatasetError`."""

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_405 = "http_405"
HTTP_409 = "http_409"
HTTP_415 = "http_415"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

# Statuses a caller may reasonably retry
TRANSIENT_STATUS_CODES = frozenset({429, 502, 503, 504})

# Usage subcodes
USAGE_EXPORT_REQUIRES_PERSISTENT_ID = "usage_export_requires_persistent_id"

# I/O subcodes
IO_FILE_NOT_FOUND = "io_file_not_found"
IO_PERMISSION_DENIED = "io_permission_denied"
IO_READ_FAILED = "io_read_failed"

# Transport subcodes
TRANSPORT_CONNECTION = "transport_connection"
TRANSPORT_TIMEOUT = "transport_timeout"
TRANSPORT_OTHER = "transport_other"


def _http_subcode(status: int) -> str:
    return f"http_{status}"


def _is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUS_CODES
