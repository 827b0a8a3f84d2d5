# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Client library for dataset management on a Dataverse installation.

Example::

    from dataverse_dataset import DataverseClient

    with DataverseClient("https://demo.dataverse.org", api_token) as client:
        ds = client.dataset("doi:10.5072/FK2/ABC123", persistent_id=True)
        print(ds.list_files().unwrap())
"""

from .__version__ import __version__
from .client import DataverseClient

__all__ = ["DataverseClient", "__version__"]
