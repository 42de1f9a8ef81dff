"""Local-disk document store for entity attachments.

Files are written under ``settings.upload_dir`` with a random name and
served by the app at ``settings.upload_url_prefix``. The URL returned by
`save` is what gets stored on the entity; `delete` takes the same URL.
"""

import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath

from freightdesk.config import settings

logger = logging.getLogger(__name__)


class DocumentTooLargeError(ValueError):
    pass


READ_CHUNK_BYTES = 64 * 1024


def _too_large() -> DocumentTooLargeError:
    return DocumentTooLargeError(
        f"Document exceeds {settings.max_upload_bytes // (1024 * 1024)} MB"
    )


async def read_upload(upload) -> bytes:
    """Read an upload in chunks, stopping as soon as it passes the size cap.

    ``upload`` is anything with an async ``read(n)``, e.g. FastAPI's UploadFile.
    """
    limit = settings.max_upload_bytes
    if (getattr(upload, "size", None) or 0) > limit:
        raise _too_large()

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise _too_large()
        chunks.append(chunk)
    return b"".join(chunks)


class DocumentStore:
    def __init__(self, root: str | Path | None = None, url_prefix: str | None = None):
        self.root = Path(root or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def _path_for(self, url: str) -> Path | None:
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = PurePosixPath(url[len(self.url_prefix) + 1:]).name
        if not name:
            return None
        return self.root / name

    async def save(self, folder: str, filename: str, content: bytes) -> str:
        if len(content) > settings.max_upload_bytes:
            raise _too_large()
        suffix = PurePosixPath(filename or "").suffix[:10]
        stored = f"{folder}-{uuid.uuid4().hex}{suffix}"
        path = self.root / stored

        def _write():
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)
        logger.info("Stored document %s (%d bytes)", stored, len(content))
        return f"{self.url_prefix}/{stored}"

    async def delete(self, url: str) -> bool:
        """Remove a stored document; False when the URL is not ours or is gone."""
        path = self._path_for(url)
        if path is None:
            return False

        def _unlink() -> bool:
            if path.exists():
                path.unlink()
                return True
            return False

        return await asyncio.to_thread(_unlink)


def get_document_store() -> DocumentStore:
    return DocumentStore()
