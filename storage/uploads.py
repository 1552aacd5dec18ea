"""Validation and naming for uploaded verification documents and images."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Iterable

from werkzeug.datastructures import FileStorage

from services.errors import ValidationError

MAX_UPLOAD_SIZE_DEFAULT = 5 * 1024 * 1024  # 5 MB
IMAGE_TYPES_DEFAULT = {"jpeg", "jpg", "png", "gif"}
DOCUMENT_TYPES_DEFAULT = {"pdf"}


def _normalize_types(configured: object, default: set[str]) -> set[str]:
    if not configured:
        return set(default)
    if isinstance(configured, str):
        values: Iterable[object] = configured.split(",")
    else:
        values = configured  # type: ignore[assignment]

    normalized: set[str] = set()
    for raw in values:
        if not isinstance(raw, str):
            continue

        item = raw.strip().lower()
        if not item:
            continue

        if "/" in item and not item.startswith("."):
            item = item.rsplit("/", 1)[-1]

        item = item.lstrip(".")
        if item:
            normalized.add(item)

    if not normalized:
        return set(default)
    if "jpeg" in normalized:
        normalized.add("jpg")
    if "jpg" in normalized:
        normalized.add("jpeg")
    return normalized


def build_stored_name(prefix: str, original: str | None) -> str:
    """Return a collision-free file name keeping the original suffix."""

    suffix = Path(original or "").suffix.lower()
    return f"{prefix}-{uuid.uuid4().hex}{suffix}"


class UploadPolicy:
    """Allow-list and size limit applied to files before they are stored."""

    def __init__(
        self,
        image_types: object = None,
        document_types: object = None,
        max_size: int | None = None,
    ):
        self.image_types = _normalize_types(image_types, IMAGE_TYPES_DEFAULT)
        self.document_types = _normalize_types(document_types, DOCUMENT_TYPES_DEFAULT)
        self.max_size = int(max_size or MAX_UPLOAD_SIZE_DEFAULT)

    @classmethod
    def from_config(cls, config) -> "UploadPolicy":
        return cls(
            image_types=config.get("ALLOWED_IMAGE_TYPES"),
            document_types=config.get("ALLOWED_DOCUMENT_TYPES"),
            max_size=config.get("MAX_UPLOAD_SIZE"),
        )

    def allowed_types(self, allow_documents: bool) -> set[str]:
        if allow_documents:
            return self.image_types | self.document_types
        return set(self.image_types)

    def validate(self, file: FileStorage, *, allow_documents: bool = True) -> None:
        """Raise :class:`ValidationError` unless ``file`` may be stored."""

        if file.filename is None or file.filename.strip() == "":
            raise ValidationError("A file is required.")

        allowed = self.allowed_types(allow_documents)
        extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        if extension not in allowed:
            listed = ", ".join(sorted(allowed))
            raise ValidationError(f"File type not allowed. Allowed types: {listed}.")

        mimetype = (file.mimetype or "").lower()
        if mimetype and mimetype != "application/octet-stream":
            subtype = mimetype.rsplit("/", 1)[-1]
            if subtype not in allowed:
                raise ValidationError("File content type does not match an allowed type.")

        file.stream.seek(0, os.SEEK_END)
        size = file.stream.tell()
        file.stream.seek(0)
        if size > self.max_size:
            megabytes = self.max_size // (1024 * 1024)
            raise ValidationError(
                f"File size too large. Maximum {megabytes}MB allowed."
            )
