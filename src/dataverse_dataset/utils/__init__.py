# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal helpers for the Dataverse dataset client."""

__all__ = []
