"""
Upload Pipeline

Runs one product image upload end to end:
receive (validate + store) -> transcode -> descriptors.
"""

import asyncio
import threading
from typing import List, Sequence

from fastapi import UploadFile

from domain.entities.uploaded_file import UploadedFile, discard_all
from domain.value_objects.image_descriptor import ImageDescriptor
from exceptions import ProcessingError
from services.image_transcoder import ImageTranscoder
from services.upload_receiver import UploadReceiver
from utils.logging_utils import StructuredLogger, log_operation

logger = StructuredLogger(__name__)


class UploadPipeline:
    """
    Wraps the receiver and transcoder with a timeout and cleanup.

    On failure, temporary originals still on disk are removed. Outputs that
    were already transcoded are left in place.
    """

    def __init__(self, receiver: UploadReceiver, transcoder: ImageTranscoder, timeout_seconds: float = 60.0):
        self.receiver = receiver
        self.transcoder = transcoder
        self.timeout_seconds = timeout_seconds

    @log_operation("upload_batch")
    async def process(self, uploads: Sequence[UploadFile], batch_id: str = "") -> List[ImageDescriptor]:
        """
        Accept and transcode a batch of uploaded images.

        Args:
            uploads: Parts of the `images` field, in submission order
            batch_id: Correlation id for log records

        Returns:
            Descriptors in submission order

        Raises:
            ValidationError: If the batch is rejected (nothing persisted)
            ProcessingError: If storing or transcoding fails, or the timeout expires
        """
        accepted = await self.receiver.receive(uploads)
        logger.info("Files accepted", extra={"count": len(accepted)})

        cancelled = threading.Event()
        try:
            return await asyncio.wait_for(
                self.transcoder.transcode_all(accepted, cancelled=cancelled),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            # wait_for cannot stop the executor thread already working on a
            # file; the event makes it drop that file before publishing it.
            # An output whose os.replace has already run stays on disk.
            cancelled.set()
            logger.error("Upload timed out", extra={"timeout_seconds": self.timeout_seconds})
            await self._discard_leftovers(accepted)
            raise ProcessingError("transcode", "Image processing timed out") from e
        except BaseException:
            cancelled.set()
            await self._discard_leftovers(accepted)
            raise

    async def _discard_leftovers(self, accepted: List[UploadedFile]) -> None:
        pending = [uploaded for uploaded in accepted if not uploaded.transcoded]
        removed = await asyncio.get_running_loop().run_in_executor(None, discard_all, pending)
        if removed:
            logger.warning("Removed unprocessed originals", extra={"count": removed})
