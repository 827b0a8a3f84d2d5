# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the Dataverse native API.

These constants define header names, path literals and well-known parameter
values used when building dataset requests.
"""

# Authentication header carrying the user's API token
API_TOKEN_HEADER = "X-Dataverse-key"

# Literal path segment and query parameter used for persistent-identifier addressing
PERSISTENT_ID_SEGMENT = ":persistentId"
PERSISTENT_ID_PARAM = "persistentId"

# Version aliases accepted wherever a version number is expected
DRAFT_VERSION = ":draft"
LATEST_VERSION = ":latest"
LATEST_PUBLISHED_VERSION = ":latest-published"

# Publication update types for ``Dataset.publish``
UPDATE_TYPE_MAJOR = "major"
"""Publish a new major version (e.g. 2.0)."""

UPDATE_TYPE_MINOR = "minor"
"""Publish a new minor version (e.g. 1.1)."""

UPDATE_TYPE_UPDATE_CURRENT = "updatecurrent"
"""Overwrite the current published version in place (superuser only)."""

# Lock types reported by ``Dataset.get_locks``
LOCK_TYPES = (
    "Ingest",
    "Workflow",
    "InReview",
    "DcmUpload",
    "finalizePublication",
    "EditInProgress",
    "FileValidationFailed",
)

# OpenTelemetry attribute names
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_DATAVERSE_OPERATION = "dataverse.operation"
OTEL_ATTR_DATAVERSE_DATASET = "dataverse.dataset.id"
OTEL_ATTR_DATAVERSE_ADDRESSING = "dataverse.dataset.addressing"
