"""
UploadedFile Entity

One file accepted by the upload receiver and waiting to be transcoded.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from domain.value_objects.file_size import FileSize

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """
    Transient record of a received upload.

    Owned by the pipeline invocation that created it. Its temporary file is
    removed after successful transcoding or when the pipeline fails.
    """

    original_filename: str
    temp_path: Path
    size: FileSize
    extension: str
    transcoded: bool = False

    @property
    def base_name(self) -> str:
        """Stored name without extension; shared by the transcoded output"""
        return self.temp_path.stem

    def discard(self) -> bool:
        """
        Remove the temporary file if it is still on disk.

        Returns:
            True if a file was removed
        """
        try:
            self.temp_path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not remove {self.temp_path.name}: {e}")
            return False


def discard_all(files: Iterable[UploadedFile]) -> int:
    """Discard each file's temporary copy; returns how many were removed."""
    return sum(1 for uploaded in files if uploaded.discard())
