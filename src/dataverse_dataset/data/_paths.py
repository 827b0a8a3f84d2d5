# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Request path construction for dataset endpoints."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

from ..common.constants import PERSISTENT_ID_PARAM, PERSISTENT_ID_SEGMENT
from ..models.dataset_reference import DatasetReference

# Query values keep ':' and '/' readable, e.g. persistentId=doi:10.5072/FK2/ABC123
_QUERY_SAFE = ":/"
# Path segments keep ':' for version aliases and action names (":draft", ":publish")
_SEGMENT_SAFE = ":"

QueryParams = Sequence[Tuple[str, str]]


def _segment(value: str) -> str:
    """Escape a single path segment."""
    return quote(str(value), safe=_SEGMENT_SAFE)


def _query(params: QueryParams) -> str:
    return urlencode(list(params), safe=_QUERY_SAFE, quote_via=quote)


def _join(*segments: Optional[str]) -> str:
    return "/".join(s for s in segments if s)


def _version_prefix(version: Optional[str]) -> Optional[str]:
    if version is None:
        return None
    version = str(version).strip()
    if not version:
        raise ValueError("version must not be empty when provided.")
    return _join("versions", _segment(version))


def _dataset_path(
    ref: DatasetReference,
    suffix: str = "",
    params: Optional[QueryParams] = None,
) -> str:
    """
    Build the path of a dataset endpoint relative to the API root.

    By internal id the id is a path segment and ``suffix`` follows it::

        datasets/42/locks?type=Ingest

    By persistent identifier the literal ``:persistentId`` segment takes the
    id's place, ``suffix`` follows it, and the identifier travels as the first
    query parameter ahead of ``params``::

        datasets/:persistentId/locks?persistentId=doi:10.5072/FK2/ABC123&type=Ingest

    :param ref: The dataset.
    :param suffix: Already-escaped sub-path below the dataset, without leading slash.
    :param params: Operation query parameters, in order.
    :return: Path plus query string.
    """
    query: List[Tuple[str, str]] = []
    if ref.is_persistent_id:
        path = f"datasets/{PERSISTENT_ID_SEGMENT}/{suffix}"
        query.append((PERSISTENT_ID_PARAM, ref.id))
    else:
        path = _join("datasets", _segment(ref.id), suffix)
    query.extend(params or ())
    if query:
        return f"{path}?{_query(query)}"
    return path


def _versioned_path(
    ref: DatasetReference,
    version: Optional[str],
    suffix: str = "",
    params: Optional[QueryParams] = None,
) -> str:
    """Like :func:`_dataset_path`, with ``versions/{version}`` inserted ahead of ``suffix`` when a version is given."""
    return _dataset_path(ref, _join(_version_prefix(version), suffix), params)


def _export_path(ref: DatasetReference, exporter: str) -> str:
    """Path of the metadata export endpoint; only defined for persistent identifiers."""
    return f"datasets/export?{_query([(PERSISTENT_ID_PARAM, ref.id), ('exporter', exporter)])}"


__all__ = []
