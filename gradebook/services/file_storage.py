import logging
import os
import uuid
from typing import Iterable, List, Optional

from fastapi import Depends, UploadFile

from gradebook.core.config.settings import Settings, get_settings
from gradebook.core.errors import ErrorCode, NotFound, ValidationError
from gradebook.utils.helpers import sanitize_filename

logger = logging.getLogger(__name__)

class FileStorage:
    def __init__(
        self,
        upload_dir: str = "uploads",
        allowed_mime_types: Optional[Iterable[str]] = None,
        max_upload_size: int = 52_428_800,
        chunk_size: int = 1_048_576,
    ):
        self.upload_dir = upload_dir
        self.allowed_mime_types = set(allowed_mime_types or ())
        self.max_upload_size = max_upload_size
        self.chunk_size = chunk_size

        # Create upload directory if it doesn't exist
        os.makedirs(self.upload_dir, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileStorage":
        return cls(
            upload_dir=settings.UPLOAD_DIR,
            allowed_mime_types=settings.ALLOWED_MIME_TYPES,
            max_upload_size=settings.MAX_UPLOAD_SIZE,
            chunk_size=settings.UPLOAD_CHUNK_SIZE,
        )

    def is_allowed_type(self, content_type: Optional[str]) -> bool:
        if not content_type:
            return False
        return content_type.split(";")[0].strip().lower() in self.allowed_mime_types

    def validate(self, file: UploadFile) -> None:
        if not self.is_allowed_type(file.content_type):
            raise ValidationError(
                f"File type not allowed: {file.filename} ({file.content_type})",
                ErrorCode.INVALID_FILE_TYPE,
            )
        # Starlette knows the size for spooled multipart files
        if file.size is not None and file.size > self.max_upload_size:
            raise ValidationError(
                f"File too large: {file.filename}",
                ErrorCode.FILE_TOO_LARGE,
            )

    async def save_file(self, file: UploadFile) -> str:
        """
        Save an uploaded file to the storage system

        Args:
            file: The uploaded file

        Returns:
            The stored filename, unique within the upload directory

        Raises:
            ValidationError: the type is not whitelisted or the file exceeds the size limit
        """
        self.validate(file)

        unique_filename = f"{uuid.uuid4().hex}_{sanitize_filename(file.filename or 'file')}"
        file_path = os.path.join(self.upload_dir, unique_filename)

        written = 0
        try:
            with open(file_path, "wb") as buffer:
                while True:
                    chunk = await file.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_upload_size:
                        raise ValidationError(
                            f"File too large: {file.filename}",
                            ErrorCode.FILE_TOO_LARGE,
                        )
                    buffer.write(chunk)
        except BaseException:
            # Partially written files are never kept
            if os.path.exists(file_path):
                os.remove(file_path)
            raise

        logger.info("Stored upload %s (%d bytes)", unique_filename, written)
        return unique_filename

    async def save_files(self, files: List[UploadFile]) -> List[str]:
        """Store every file or none of them"""
        for file in files:
            self.validate(file)

        stored = []
        try:
            for file in files:
                stored.append(await self.save_file(file))
        except BaseException:
            self.delete_files(stored)
            raise
        return stored

    def delete_file(self, filename: str) -> bool:
        """
        Delete a file from storage

        Args:
            filename: Name of file to delete

        Returns:
            True if deletion was successful, False otherwise
        """
        try:
            file_path = self.resolve_path(filename)
        except NotFound:
            return False
        try:
            os.remove(file_path)
            return True
        except OSError:
            logger.warning("Could not delete stored file %s", filename, exc_info=True)
            return False

    def delete_files(self, filenames: Iterable[str]) -> None:
        for filename in filenames:
            self.delete_file(filename)

    def resolve_path(self, filename: str) -> str:
        """Absolute path of a stored file; NotFound for anything outside the upload directory"""
        root = os.path.realpath(self.upload_dir)
        file_path = os.path.realpath(os.path.join(root, filename))
        if os.path.dirname(file_path) != root or not os.path.isfile(file_path):
            raise NotFound("File not found")
        return file_path


def get_file_storage(settings: Settings = Depends(get_settings)) -> FileStorage:
    return FileStorage.from_settings(settings)
