# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Common utilities and constants for the Dataverse dataset client.

This module contains shared constants used across the package.
"""

__all__ = []
