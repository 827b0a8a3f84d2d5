# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the Dataverse dataset client.

- :class:`~dataverse_dataset.models.dataset_reference.DatasetReference`: dataset id plus addressing mode.
- :class:`~dataverse_dataset.models.dataset_reference.AddressingMode`: by internal id or by persistent identifier.

Note:
    This ``__init__.py`` does not import/export models.
    Import directly from the specific module files.
"""

__all__ = []
