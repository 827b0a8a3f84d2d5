# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Dataset operations namespace."""

from __future__ import annotations

import json
import os
from typing import Any, Optional, TYPE_CHECKING

from ..common.constants import DRAFT_VERSION, UPDATE_TYPE_MAJOR
from ..core._error_codes import USAGE_EXPORT_REQUIRES_PERSISTENT_ID
from ..core.errors import FileReadError, UsageError
from ..core.results import OperationResult
from ..data._paths import _dataset_path, _export_path, _join, _segment, _versioned_path
from ..models.dataset_reference import DatasetReference
from ..utils._files import PathLike, open_binary, read_bytes, read_text

if TYPE_CHECKING:
    from ..client import DataverseClient

_JSON = "application/json"
_TEXT = "text/plain; charset=utf-8"


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string.")
    return value.strip()


class Dataset:
    """
    Operations on a single dataset.

    Obtained from :meth:`~dataverse_dataset.client.DataverseClient.dataset`. The
    dataset reference, and with it the addressing mode, is fixed for the lifetime of
    the object; every method issues at most one HTTP request.

    Every method returns an :class:`~dataverse_dataset.core.results.OperationResult`.
    Usage errors, unreadable local files, unexpected HTTP statuses and transport
    failures are reported through ``result.error`` rather than raised.

    Example:
        Draft, review and publish::

            ds = client.dataset("doi:10.5072/FK2/ABC123", persistent_id=True)

            ds.edit_metadata("title.json", replace=True).unwrap()
            ds.add_file("data.csv", json_string='{"description": "Raw data"}').unwrap()
            ds.submit_for_review().unwrap()

            result = ds.publish("major")
            if not result.ok:
                print(result.status_code, result.error.message)

        Locks by internal id::

            locks = client.dataset("42").get_locks("Ingest").data()
    """

    def __init__(self, client: "DataverseClient", reference: DatasetReference) -> None:
        """
        Initialize Dataset.

        :param client: Parent DataverseClient instance.
        :type client: DataverseClient
        :param reference: The dataset to operate on.
        :type reference: ~dataverse_dataset.models.dataset_reference.DatasetReference
        """
        self._client = client
        self._ref = reference

    @property
    def reference(self) -> DatasetReference:
        return self._ref

    @property
    def id(self) -> str:
        return self._ref.id

    @property
    def is_persistent_id(self) -> bool:
        return self._ref.is_persistent_id

    def __repr__(self) -> str:
        return f"Dataset(id={self._ref.id!r}, mode={self._ref.mode.name})"

    def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> OperationResult:
        api = self._client._get_api()
        return api._request(method, path, operation=f"datasets.{operation}", dataset=self._ref, **kwargs)

    def _put_json_file(self, path: str, operation: str, json_file: PathLike) -> OperationResult:
        try:
            body = read_bytes(json_file)
        except FileReadError as e:
            return OperationResult.failure(e)
        return self._send("put", path, operation, data=body, content_type=_JSON)

    # ------------------------------------------------------------- reading

    def view(self, version: Optional[str] = None) -> OperationResult:
        """
        Get the dataset, or one of its versions.

        :param version: Version number (``"1.0"``) or alias such as
            :data:`~dataverse_dataset.common.constants.DRAFT_VERSION`,
            :data:`~dataverse_dataset.common.constants.LATEST_VERSION` or
            :data:`~dataverse_dataset.common.constants.LATEST_PUBLISHED_VERSION`. Latest when omitted.
        :type version: :class:`str` or None
        :return: Result with the dataset JSON.
        :rtype: ~dataverse_dataset.core.results.OperationResult
        """
        return self._send("get", _versioned_path(self._ref, version), "view")

    def list_versions(self) -> OperationResult:
        """List all versions of the dataset."""
        return self._send("get", _dataset_path(self._ref, "versions"), "list_versions")

    def export_metadata_to(self, exporter: str) -> OperationResult:
        """
        Export the dataset's metadata in the format of ``exporter``.

        Only available for datasets addressed by persistent identifier. By internal
        id the result is a :class:`~dataverse_dataset.core.errors.UsageError` with
        status 501 and no request is sent.

        :param exporter: Exporter name, e.g. ``"ddi"``, ``"dataverse_json"``, ``"schema.org"``.
        :type exporter: :class:`str`
        :return: Result with the exported document as text (not necessarily JSON).
        :rtype: ~dataverse_dataset.core.results.OperationResult
        """
        exporter = _require_text("exporter", exporter)
        if not self._ref.is_persistent_id:
            return OperationResult.failure(
                UsageError(
                    "Export to metadata is only supported using persistent identifiers. "
                    "Address the dataset by its persistent identifier.",
                    status_code=501,
                    subcode=USAGE_EXPORT_REQUIRES_PERSISTENT_ID,
                    details={"dataset_id": self._ref.id, "exporter": exporter},
                ),
                expects_json=False,
            )
        return self._send("get", _export_path(self._ref, exporter), "export_metadata_to", expects_json=False)

    def list_files(self, version: Optional[str] = None) -> OperationResult:
        """List the files in the latest version, or in ``version``."""
        return self._send("get", _versioned_path(self._ref, version, "files"), "list_files")

    def list_metadata_blocks(self, version: Optional[str] = None, name: Optional[str] = None) -> OperationResult:
        """
        List the metadata blocks of a version, or only block ``name``.

        :param version: Version number or alias. Latest when omitted.
        :type version: :class:`str` or None
        :param name: Metadata block name, e.g. ``"citation"``. All blocks when omitted.
        :type name: :class:`str` or None
        """
        suffix = _join("metadata", _segment(_require_text("name", name)) if name is not None else None)
        return self._send("get", _versioned_path(self._ref, version, suffix), "list_metadata_blocks")

    def list_role_assignments(self) -> OperationResult:
        return self._send("get", _dataset_path(self._ref, "assignments"), "list_role_assignments")

    def get_locks(self, lock_type: Optional[str] = None) -> OperationResult:
        """
        List the locks on the dataset.

        :param lock_type: Only report locks of this type (see
            :data:`~dataverse_dataset.common.constants.LOCK_TYPES`). All locks when omitted.
        :type lock_type: :class:`str` or None
        """
        params = [("type", _require_text("lock_type", lock_type))] if lock_type is not None else None
        return self._send("get", _dataset_path(self._ref, "locks", params), "get_locks")

    # ------------------------------------------------------------ metadata

    def update_metadata(self, json_file: PathLike, version: Optional[str] = None) -> OperationResult:
        """
        Replace the metadata of the dataset with the contents of ``json_file``.

        The file is sent byte for byte. If it cannot be read, the result carries a
        :class:`~dataverse_dataset.core.errors.FileReadError` and no request is sent.

        :param json_file: Path to a dataset version JSON document.
        :param version: Version to update, typically ``":draft"``.
        :type version: :class:`str` or None
        """
        return self._put_json_file(_versioned_path(self._ref, version), "update_metadata", json_file)

    def edit_metadata(self, json_file: PathLike, replace: bool = False) -> OperationResult:
        """
        Add or change metadata fields from the contents of ``json_file``.

        :param json_file: Path to a JSON document with the fields to edit.
        :param replace: Overwrite existing values instead of adding to them.
        :type replace: :class:`bool`
        """
        params = [("replace", "true")] if replace else None
        return self._put_json_file(_dataset_path(self._ref, "editMetadata", params), "edit_metadata", json_file)

    def delete_metadata(self, json_file: PathLike) -> OperationResult:
        """Remove the metadata fields listed in ``json_file``."""
        return self._put_json_file(_dataset_path(self._ref, "deleteMetadata"), "delete_metadata", json_file)

    def set_citation_date_field(self, field_name: str) -> OperationResult:
        """
        Use the date field ``field_name`` as the citation date, e.g. ``"dateOfDeposit"``.

        :param field_name: Name of a date-typed metadata field.
        :type field_name: :class:`str`
        """
        field_name = _require_text("field_name", field_name)
        return self._send(
            "put",
            _dataset_path(self._ref, "citationdate"),
            "set_citation_date_field",
            data=field_name.encode("utf-8"),
            content_type=_TEXT,
        )

    def revert_citation_date_field(self) -> OperationResult:
        """Restore the default citation date (publication date)."""
        return self._send("delete", _dataset_path(self._ref, "citationdate"), "revert_citation_date_field")

    # ----------------------------------------------------------- lifecycle

    def delete(self) -> OperationResult:
        """Delete the dataset. Only unpublished datasets can be deleted."""
        return self._send("delete", _dataset_path(self._ref), "delete")

    def delete_draft(self) -> OperationResult:
        """Delete the draft version of the dataset."""
        return self._send("delete", _dataset_path(self._ref, _join("versions", DRAFT_VERSION)), "delete_draft")

    def publish(self, update_type: str = UPDATE_TYPE_MAJOR) -> OperationResult:
        """
        Publish the draft version.

        Both 200 (published) and 202 (publication in progress, the dataset is locked
        until it completes) are successes.

        :param update_type: :data:`~dataverse_dataset.common.constants.UPDATE_TYPE_MAJOR`,
            :data:`~dataverse_dataset.common.constants.UPDATE_TYPE_MINOR` or
            :data:`~dataverse_dataset.common.constants.UPDATE_TYPE_UPDATE_CURRENT`.
        :type update_type: :class:`str`
        """
        update_type = _require_text("update_type", update_type)
        return self._send(
            "post",
            _dataset_path(self._ref, "actions/:publish", [("type", update_type)]),
            "publish",
            accepted=(200, 202),
        )

    def submit_for_review(self) -> OperationResult:
        return self._send("post", _dataset_path(self._ref, "submitForReview"), "submit_for_review")

    def return_to_author(self, reason: str) -> OperationResult:
        """
        Return a dataset in review to its author.

        :param reason: Explanation shown to the author.
        :type reason: :class:`str`
        """
        reason = _require_text("reason", reason)
        return self._send(
            "post",
            _dataset_path(self._ref, "returnToAuthor"),
            "return_to_author",
            data=json.dumps({"reasonForReturn": reason}).encode("utf-8"),
            content_type=_JSON,
        )

    def link(self, dataverse_alias: str) -> OperationResult:
        """
        Link the dataset into another dataverse collection.

        :param dataverse_alias: Alias of the collection to link into.
        :type dataverse_alias: :class:`str`
        """
        alias = _segment(_require_text("dataverse_alias", dataverse_alias))
        return self._send("put", _dataset_path(self._ref, _join("link", alias)), "link")

    # --------------------------------------------------------- private URL

    def create_private_url(self) -> OperationResult:
        """Create a private URL for the draft version. Success is 201 only."""
        return self._send("post", _dataset_path(self._ref, "privateUrl"), "create_private_url", accepted=(201,))

    def get_private_url(self) -> OperationResult:
        return self._send("get", _dataset_path(self._ref, "privateUrl"), "get_private_url")

    def delete_private_url(self) -> OperationResult:
        return self._send("delete", _dataset_path(self._ref, "privateUrl"), "delete_private_url")

    # --------------------------------------------------------------- files

    def add_file(
        self,
        data_file: PathLike,
        json_metadata: Optional[PathLike] = None,
        json_string: Optional[str] = None,
    ) -> OperationResult:
        """
        Upload ``data_file`` to the dataset's draft version.

        File metadata (description, directory label, categories, ...) is taken from
        ``json_metadata`` when given, otherwise from ``json_string``. Unreadable
        local files produce a :class:`~dataverse_dataset.core.errors.FileReadError`
        result without a request.

        :param data_file: Path of the file to upload.
        :param json_metadata: Path of a JSON file with the file metadata.
        :param json_string: File metadata as a JSON string.
        :type json_string: :class:`str` or None

        Example::

            ds.add_file("table.csv", json_string='{"description": "Measurements", "directoryLabel": "raw"}')
        """
        try:
            json_data = read_text(json_metadata) if json_metadata is not None else json_string
            fh = open_binary(data_file)
        except FileReadError as e:
            return OperationResult.failure(e)

        form = {"jsonData": json_data} if json_data else None
        with fh:
            return self._send(
                "post",
                _dataset_path(self._ref, "add"),
                "add_file",
                files={"file": (os.path.basename(os.fspath(data_file)), fh)},
                data=form,
            )
