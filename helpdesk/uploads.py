from __future__ import annotations

"""
Upload policy: file-type and size checks for attachment candidates.

Scope
-----
- `UploadPolicy.is_file_type_allowed()` matches the candidate's extension against
  the configured comma-separated list (".pdf, .png") or the ".*" wildcard.
- `UploadPolicy.validate_batch()` annotates each candidate with at most one
  `UploadRejected` value; callers decide whether to drop the affected files.

Known limitation
----------------
- Only the file name is inspected. The declared MIME type is carried along but
  never checked against the content.
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from django.core.files.uploadedfile import TemporaryUploadedFile, UploadedFile
from django.template.defaultfilters import filesizeformat

from helpdesk.config import ConfigSnapshot

WILDCARD = ".*"

# Last dot-separated suffix of 3-4 characters; the whole name when absent.
_EXTENSION_RE = re.compile(r".*\.(.{3,4})$")


class UploadErrorKind(str, Enum):
    BAD_TYPE = "bad_type"
    TOO_LARGE = "too_large"
    BAD_TRANSFER = "bad_transfer"


@dataclass(frozen=True)
class UploadRejected:
    """Why a candidate was rejected; `message` is safe to show to the uploader."""
    kind: UploadErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class UploadCandidate:
    """
    One uploaded file as seen by the policy.

    Attributes:
        name: Client-supplied display name.
        handle: Temporary storage handle (a Django `UploadedFile` for real uploads).
        size: Declared size in bytes.
        content_type: Declared MIME type (informational only).
        error: Rejection attached by the transport or by `validate_batch()`.
    """
    name: str
    handle: Any = None
    size: int = 0
    content_type: str = ""
    error: Optional[UploadRejected] = None

    @classmethod
    def from_upload(cls, upload: UploadedFile) -> "UploadCandidate":
        return cls(
            name=upload.name or "",
            handle=upload,
            size=int(upload.size or 0),
            content_type=upload.content_type or "",
        )


def file_extension(filename: str) -> str:
    """Lower-cased extension as matched by the policy (see module notes)."""
    return _EXTENSION_RE.sub(r"\1", (filename or "").lower())


def is_completed_upload(handle: Any) -> bool:
    """True when `handle` is an upload the request actually received in full."""
    if not isinstance(handle, UploadedFile):
        return False
    if isinstance(handle, TemporaryUploadedFile):
        return os.path.exists(handle.temporary_file_path())
    return True


class UploadPolicy:
    """Allowed-extension and max-size checks bound to one configuration."""

    def __init__(self, config: ConfigSnapshot) -> None:
        self.config = config

    @property
    def max_file_size(self) -> int:
        return self.config.max_file_size

    def allowed_extensions(self) -> List[str]:
        return [entry.strip() for entry in self.config.allowed_filetypes.lower().split(",")]

    def is_file_type_allowed(self, candidate: UploadCandidate) -> bool:
        policy = self.config.allowed_filetypes
        if not candidate or not candidate.name or not policy:
            return False

        if policy.strip() == WILDCARD:
            return True

        ext = file_extension(candidate.name)
        # TODO: sniff the content type instead of trusting the extension alone.
        return bool(ext) and f".{ext}" in self.allowed_extensions()

    def validate_batch(self, candidates: Iterable[UploadCandidate]) -> bool:
        """
        Attach at most one rejection per candidate; True when none was rejected.

        Rules (first match wins):
            1. extension not allowed,
            2. declared size above the configured maximum,
            3. no transport error yet, but the handle is not a completed upload.
        """
        errors = 0
        for candidate in candidates:
            if not self.is_file_type_allowed(candidate):
                candidate.error = UploadRejected(
                    UploadErrorKind.BAD_TYPE,
                    f"Invalid file type for {candidate.name}",
                )
            elif candidate.size > self.max_file_size:
                candidate.error = UploadRejected(
                    UploadErrorKind.TOO_LARGE,
                    "File (%s) is too big. Maximum of %s allowed"
                    % (candidate.name, filesizeformat(self.max_file_size)),
                )
            elif candidate.error is None and not is_completed_upload(candidate.handle):
                candidate.error = UploadRejected(
                    UploadErrorKind.BAD_TRANSFER,
                    "Invalid or bad upload POST",
                )

            if candidate.error is not None:
                errors += 1

        return not errors
