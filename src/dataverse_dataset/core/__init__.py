# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the Dataverse dataset client.

This module contains the foundational components including configuration,
HTTP transport, telemetry, result types and error handling.
"""

from .errors import (
    DatasetError,
    UsageError,
    FileReadError,
    HttpError,
    TransportError,
)
from .results import RequestMetadata, OperationResult

__all__ = [
    "DatasetError",
    "UsageError",
    "FileReadError",
    "HttpError",
    "TransportError",
    "RequestMetadata",
    "OperationResult",
]
