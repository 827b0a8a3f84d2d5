# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the Dataverse dataset client.

- Dataset: view, edit, publish and manage a single dataset
"""

__all__ = []
