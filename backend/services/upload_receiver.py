"""
Upload Receiver

Accepts the multipart parts of a product image upload, enforces the
count/type/size limits and streams each accepted part to the upload root.
A batch is accepted or rejected as a whole.
"""

import asyncio
import logging
import re
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence

from fastapi import UploadFile

from constants import UploadLimits
from domain.entities.uploaded_file import UploadedFile, discard_all
from domain.value_objects.file_size import FileSize
from exceptions import ProcessingError, ValidationError

logger = logging.getLogger(__name__)

# Anything outside this set would need escaping in the public url
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")

ALLOWED_TYPES_MESSAGE = "Only image files are allowed ({})".format(
    ", ".join(sorted(UploadLimits.ALLOWED_EXTENSIONS))
)


def build_stored_name(original_filename: str, timestamp_ms: Optional[int] = None,
                      suffix: Optional[str] = None) -> str:
    """
    Build the on-disk name for an accepted upload.

    `{base}-{timestamp_ms}-{suffix}.{ext}` where base is the client filename
    stem with every run of characters outside [A-Za-z0-9._-] (whitespace,
    '#', '?', non-ASCII, ...) replaced by '-', cut to
    UploadLimits.MAX_BASE_NAME_LENGTH characters. The result is safe to use
    unescaped in a url path. The random suffix keeps two uploads of the
    same name in the same millisecond apart.

    Args:
        original_filename: Filename supplied by the client
        timestamp_ms: Acceptance time in epoch milliseconds (now if omitted)
        suffix: Collision-resistant suffix (6 random hex chars if omitted)
    """
    # Drop any client-side directory parts, including Windows separators
    name = PurePosixPath(original_filename.replace("\\", "/")).name
    path = PurePosixPath(name)
    extension = path.suffix.lstrip(".").lower()
    base = _UNSAFE_CHARS_RE.sub("-", path.stem.strip()).strip(".-")
    base = base[:UploadLimits.MAX_BASE_NAME_LENGTH].rstrip(".-") or "image"

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = secrets.token_hex(3)
    return f"{base}-{timestamp_ms}-{suffix}.{extension}"


class UploadReceiver:
    """
    Validates and stores the raw parts of one upload request.

    Count and extension checks run before anything is written. The size
    limit is enforced while streaming, so an oversized part is caught even
    when the client did not declare its size; in that case every file
    already written for the batch is removed before the error is raised.
    """

    def __init__(
        self,
        upload_root: Path,
        max_files: int = UploadLimits.MAX_FILES,
        max_file_size: FileSize = FileSize(UploadLimits.MAX_FILE_SIZE_BYTES),
        chunk_size: int = UploadLimits.CHUNK_SIZE,
    ):
        self.upload_root = Path(upload_root)
        self.upload_root.mkdir(parents=True, exist_ok=True)
        self.max_files = max_files
        self.max_file_size = max_file_size
        self.chunk_size = chunk_size

    def validate(self, uploads: Sequence[UploadFile]) -> None:
        """
        Check count, extensions and declared sizes of a batch.

        Raises:
            ValidationError: On the first violated constraint
        """
        if not uploads:
            raise ValidationError("No files uploaded")
        if len(uploads) > self.max_files:
            raise ValidationError(
                f"Too many files: at most {self.max_files} images per upload",
                invalid_fields={UploadLimits.FIELD_NAME: len(uploads)},
            )
        for upload in uploads:
            if not UploadLimits.is_allowed_extension(Path(upload.filename or "").suffix):
                raise ValidationError(ALLOWED_TYPES_MESSAGE, invalid_fields={"filename": upload.filename})
            if upload.size is not None and FileSize(upload.size).exceeds(self.max_file_size):
                raise self._too_large(upload.filename)

    async def receive(self, uploads: Sequence[UploadFile]) -> List[UploadedFile]:
        """
        Validate the batch and write every part to the upload root.

        Args:
            uploads: File parts from the `images` form field, in submission order

        Returns:
            One UploadedFile per part, in submission order

        Raises:
            ValidationError: If the batch violates a limit (nothing is left on disk)
            ProcessingError: If a part cannot be written
        """
        uploads = [u for u in uploads if u.filename]
        self.validate(uploads)

        loop = asyncio.get_running_loop()
        accepted: List[UploadedFile] = []
        try:
            for upload in uploads:
                accepted.append(await self._store(upload))
        except BaseException:
            await loop.run_in_executor(None, discard_all, accepted)
            raise

        logger.info(f"Accepted {len(accepted)} file(s) into {self.upload_root}")
        return accepted

    async def _store(self, upload: UploadFile) -> UploadedFile:
        """Stream one part to disk; file I/O runs in the default executor."""
        loop = asyncio.get_running_loop()
        temp_path = self.upload_root / build_stored_name(upload.filename)
        try:
            # 'xb' refuses to overwrite an existing file
            out = await loop.run_in_executor(None, open, temp_path, "xb")
        except OSError as e:
            raise self._store_failed(upload.filename, e) from e

        written = 0
        try:
            try:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if FileSize(written).exceeds(self.max_file_size):
                        raise self._too_large(upload.filename)
                    await loop.run_in_executor(None, out.write, chunk)
            finally:
                await loop.run_in_executor(None, out.close)
        except OSError as e:
            await loop.run_in_executor(None, _remove_partial, temp_path)
            raise self._store_failed(upload.filename, e) from e
        except BaseException:
            await loop.run_in_executor(None, _remove_partial, temp_path)
            raise

        return UploadedFile(
            original_filename=upload.filename,
            temp_path=temp_path,
            size=FileSize(written),
            extension=temp_path.suffix.lstrip("."),
        )

    def _too_large(self, filename: Optional[str]) -> ValidationError:
        return ValidationError(
            f"File too large: each image must be at most {self.max_file_size}",
            invalid_fields={"filename": filename},
        )

    @staticmethod
    def _store_failed(filename: Optional[str], error: OSError) -> ProcessingError:
        logger.error(f"Failed to store upload {filename!r}: {error}")
        return ProcessingError("store_upload", "Failed to store uploaded file", filename=filename)


def _remove_partial(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove partial upload {path.name}: {e}")
