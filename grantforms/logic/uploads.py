"""File upload handling for multipart steps.

The engine only ever validates `{filename, size, type}` metadata. Bytes are
handed to a `FileStorage` after the step validates; a storage failure
becomes an `UploadError`, which the step flow turns into a field message.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from anyio import to_thread
from pydantic import BaseModel, ConfigDict, Field

from grantforms.errors import UploadError

logger = logging.getLogger(__name__)


class UploadedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_name: str
    filename: str
    content_type: str
    content: bytes = Field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    def metadata(self) -> dict:
        return {"filename": self.filename, "size": self.size, "type": self.content_type}


def prepare_files_for_upload(files: Iterable[UploadedFile]) -> dict[str, dict]:
    """Metadata to fold into the answer set, keyed by field name."""
    return {f.field_name: f.metadata() for f in files}


class FileStorage(Protocol):
    async def store(self, path_parts: Sequence[str], file: UploadedFile) -> None:
        ...


_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_part(part: str) -> str:
    cleaned = _UNSAFE.sub("-", part).strip(".-")
    return cleaned or "file"


class InMemoryFileStorage:
    """Keeps uploaded bytes in a dict keyed by joined path (test/dev only)."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    async def store(self, path_parts: Sequence[str], file: UploadedFile) -> None:
        key = "/".join(safe_part(p) for p in path_parts)
        self.files[key] = file.content


class LocalFileStorage:
    """Writes uploads beneath a root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def store(self, path_parts: Sequence[str], file: UploadedFile) -> None:
        target = self.root.joinpath(*(safe_part(p) for p in path_parts))
        await to_thread.run_sync(self._write, target, file.content)

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


async def upload_file(storage: FileStorage, application_id: str, file: UploadedFile) -> None:
    """Store one file, raising UploadError when storage fails."""
    try:
        await storage.store((application_id, file.field_name, file.filename), file)
    except Exception as exc:
        logger.error(
            "upload_failed application_id=%s field=%s filename=%s",
            application_id,
            file.field_name,
            file.filename,
            exc_info=True,
        )
        raise UploadError(file.field_name, str(exc)) from exc
    logger.info("upload_stored application_id=%s field=%s size=%s", application_id, file.field_name, file.size)


__all__ = [
    "UploadedFile",
    "prepare_files_for_upload",
    "FileStorage",
    "InMemoryFileStorage",
    "LocalFileStorage",
    "safe_part",
    "upload_file",
]
