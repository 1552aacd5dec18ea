"""Storage backends."""

from .abstract_storage import AbstractStorage
from .local_storage import LocalStorage
from .uploads import UploadPolicy

__all__ = ["AbstractStorage", "LocalStorage", "UploadPolicy"]
