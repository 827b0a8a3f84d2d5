# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Dataset addressing for the Dataverse dataset client.

Provides :class:`DatasetReference`, which pairs a dataset identifier with the
way it is addressed in request paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AddressingMode(str, Enum):
    """How a dataset identifier is placed into request paths."""

    BY_ID = "id"
    """Internal database id substituted directly into the path, e.g. ``datasets/42``."""

    BY_PERSISTENT_ID = "persistentId"
    """Persistent identifier passed as a query parameter, e.g. ``datasets/:persistentId/?persistentId=doi:...``."""


@dataclass(frozen=True)
class DatasetReference:
    """
    Pointer to a single dataset.

    The addressing mode is fixed at construction and selects the URL template
    family used by every operation on the dataset.

    :param id: Internal id (e.g. ``"42"``) or persistent identifier (e.g. ``"doi:10.5072/FK2/ABC123"``).
    :type id: str
    :param mode: Addressing mode. Default is :attr:`AddressingMode.BY_ID`.
    :type mode: AddressingMode

    :raises ValueError: If ``id`` is empty.

    Example::

        ref = DatasetReference.by_persistent_id("doi:10.5072/FK2/ABC123")
        ref.is_persistent_id  # True
    """

    id: str
    mode: AddressingMode = AddressingMode.BY_ID

    def __post_init__(self) -> None:
        if isinstance(self.id, int) and not isinstance(self.id, bool):
            object.__setattr__(self, "id", str(self.id))
        if not isinstance(self.id, str):
            raise TypeError(f"id must be a string, got {type(self.id).__name__}")
        ident = self.id.strip()
        if not ident:
            raise ValueError("id is required.")
        object.__setattr__(self, "id", ident)
        object.__setattr__(self, "mode", AddressingMode(self.mode))

    @classmethod
    def by_id(cls, dataset_id: str) -> "DatasetReference":
        return cls(dataset_id, AddressingMode.BY_ID)

    @classmethod
    def by_persistent_id(cls, persistent_id: str) -> "DatasetReference":
        return cls(persistent_id, AddressingMode.BY_PERSISTENT_ID)

    @property
    def is_persistent_id(self) -> bool:
        return self.mode is AddressingMode.BY_PERSISTENT_ID

    def __str__(self) -> str:
        return self.id
