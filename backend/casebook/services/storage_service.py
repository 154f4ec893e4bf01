"""
Document Storage Service
========================

Stores uploaded document files under ``{UPLOAD_DIR}/documents`` with a
random name, keeping the client's extension. The database row keeps
the public path ``/uploads/documents/<name>``.
"""

import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from casebook.core.config import settings
from casebook.core.exceptions import FileTooLargeError, StoredFileMissingError
from casebook.core.logging import get_logger

logger = get_logger(__name__)

DOCUMENTS_SUBDIR = "documents"
PUBLIC_PREFIX = "/uploads/documents/"
CHUNK_SIZE = 1024 * 1024


class StorageService:
    """Filesystem storage for document binaries."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root else settings.upload_root

    @property
    def documents_dir(self) -> Path:
        return self.root / DOCUMENTS_SUBDIR

    @staticmethod
    def _extension(filename: Optional[str]) -> str:
        suffix = Path(filename or "").suffix.lower()
        return suffix if suffix[1:].isalnum() else ""

    def save(self, stream: BinaryIO, filename: Optional[str]) -> Tuple[str, int]:
        """
        Copy ``stream`` to a new file.

        Returns:
            (public file path, size in bytes)

        Raises:
            FileTooLargeError: If the stream exceeds MAX_UPLOAD_SIZE_MB.
                The partial file is removed.
        """
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4()}{self._extension(filename)}"
        target = self.documents_dir / stored_name

        size = 0
        with target.open("wb") as out:
            while chunk := stream.read(CHUNK_SIZE):
                size += len(chunk)
                if size > settings.max_upload_bytes:
                    break
                out.write(chunk)

        if size > settings.max_upload_bytes:
            target.unlink(missing_ok=True)
            raise FileTooLargeError(settings.MAX_UPLOAD_SIZE_MB)

        logger.info("Stored document file", extra={"stored_name": stored_name, "size": size})
        return f"{PUBLIC_PREFIX}{stored_name}", size

    def resolve(self, file_path: str) -> Path:
        """
        Map a public path back to its location on disk.

        Raises:
            StoredFileMissingError: If no such file exists
        """
        name = Path(file_path).name
        path = self.documents_dir / name
        if not path.is_file():
            raise StoredFileMissingError(identifier=name)
        return path

    def delete(self, file_path: str) -> bool:
        """
        Remove a stored file.

        Failures are logged, never raised, so the owning row can still
        be deleted.
        """
        path = self.documents_dir / Path(file_path).name
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Stored file already gone", extra={"path": str(path)})
            return False
        except OSError as e:
            logger.error("Failed to delete stored file", extra={"path": str(path), "error": str(e)})
            return False
        return True
