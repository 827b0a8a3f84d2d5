# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal file helpers: load request bodies from local files."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import BinaryIO, Union

from ..core._error_codes import IO_FILE_NOT_FOUND, IO_PERMISSION_DENIED, IO_READ_FAILED
from ..core.errors import FileReadError

PathLike = Union[str, "os.PathLike[str]"]


def _read_error(path: PathLike, exc: OSError) -> FileReadError:
    if exc.errno == errno.ENOENT:
        subcode = IO_FILE_NOT_FOUND
    elif exc.errno in (errno.EACCES, errno.EPERM):
        subcode = IO_PERMISSION_DENIED
    else:
        subcode = IO_READ_FAILED
    return FileReadError(
        f"Could not read file '{os.fspath(path)}': {exc.strerror or exc}",
        path=os.fspath(path),
        subcode=subcode,
        cause=exc,
    )


def read_bytes(path: PathLike) -> bytes:
    """Return the full contents of ``path``, unmodified.

    :raises ~dataverse_dataset.core.errors.FileReadError: If the file cannot be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise _read_error(path, exc) from exc


def read_text(path: PathLike, encoding: str = "utf-8") -> str:
    """Return the full contents of ``path`` decoded as text.

    :raises ~dataverse_dataset.core.errors.FileReadError: If the file cannot be read or decoded.
    """
    data = read_bytes(path)
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise FileReadError(
            f"Could not decode file '{os.fspath(path)}' as {encoding}: {exc.reason}",
            path=os.fspath(path),
            subcode=IO_READ_FAILED,
        ) from exc


def open_binary(path: PathLike) -> BinaryIO:
    """Open ``path`` for streaming upload.

    :raises ~dataverse_dataset.core.errors.FileReadError: If the file cannot be opened.
    """
    try:
        return open(path, "rb")
    except OSError as exc:
        raise _read_error(path, exc) from exc
