"""Storage abstraction layer for uploaded files."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, BinaryIO


class AbstractStorage(ABC):
    """Interface for upload storage backends.

    Backends hand out opaque references; only the reference is ever recorded
    in the database, never the bytes.
    """

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Persist a file and return its reference."""

    @abstractmethod
    def exists(self, reference: str) -> bool:
        """Return whether the given reference exists in storage."""

    @abstractmethod
    def open(self, reference: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file and return the file object."""

    @abstractmethod
    def delete(self, reference: str) -> None:
        """Remove a stored file; missing references are ignored."""
