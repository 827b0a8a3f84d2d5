# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the Dataverse dataset client.

This module contains the low-level request machinery and path construction
used by the operation namespaces.
"""

__all__ = []
