"""
Image Transcoder Service

Normalizes uploaded product images with Pillow: applies EXIF orientation,
fits them inside 1600x1600 without upscaling and re-encodes them as WebP.
"""

import asyncio
import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

from constants import TranscodeSettings
from domain.entities.uploaded_file import UploadedFile
from domain.value_objects.image_descriptor import ImageDescriptor
from exceptions import ProcessingError

logger = logging.getLogger(__name__)


class ImageTranscoder:
    """
    Converts accepted uploads to web-optimized images.

    Files are handled one at a time in input order. Each original is deleted
    as soon as its own output is written, so a failure partway through a
    batch leaves earlier outputs in place and later originals untouched.
    """

    def __init__(
        self,
        output_dir: str | Path,
        url_prefix: str,
        max_dimension: int = TranscodeSettings.MAX_DIMENSION,
        quality: int = TranscodeSettings.QUALITY,
    ):
        """
        Initialize the transcoder.

        Args:
            output_dir: Upload root where transcoded images are written
            url_prefix: Public path under which output_dir is served
            max_dimension: Longest allowed side in pixels
            quality: WebP quality (0-100)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_dimension = max_dimension
        self.quality = quality

    def output_path_for(self, uploaded: UploadedFile) -> Path:
        return self.output_dir / f"{uploaded.base_name}.{TranscodeSettings.OUTPUT_EXTENSION}"

    def url_for(self, output_path: Path) -> str:
        return f"{self.url_prefix}/{output_path.name}"

    def transcode_file(self, uploaded: UploadedFile, cancelled: Optional[threading.Event] = None) -> ImageDescriptor:
        """
        Transcode one upload and remove its original.

        Args:
            uploaded: File accepted by the upload receiver
            cancelled: Set by the caller once the batch is abandoned (timeout);
                checked before the output is written and before it is published

        Returns:
            Descriptor pointing at the public path of the output

        Raises:
            ProcessingError: If the image cannot be decoded, converted or written,
                or the batch was cancelled
        """
        output_path = self.output_path_for(uploaded)
        partial_path = output_path.with_name(f".{output_path.name}.part")

        try:
            with Image.open(uploaded.temp_path) as source:
                image = ImageOps.exif_transpose(source)
                # thumbnail() keeps aspect ratio and never enlarges
                image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
                image = self._to_web_mode(image)
                self._check_cancelled(uploaded, cancelled)
                image.save(partial_path, TranscodeSettings.OUTPUT_FORMAT, quality=self.quality)
            self._check_cancelled(uploaded, cancelled, partial_path)
            os.replace(partial_path, output_path)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            partial_path.unlink(missing_ok=True)
            logger.warning(f"Unreadable image {uploaded.original_filename!r}: {e}")
            raise ProcessingError("transcode", "Image processing failed", filename=uploaded.original_filename) from e
        except (OSError, ValueError) as e:
            partial_path.unlink(missing_ok=True)
            logger.error(f"Transcoding failed for {uploaded.original_filename!r}: {e}")
            raise ProcessingError("transcode", "Image processing failed", filename=uploaded.original_filename) from e

        # A .webp upload is replaced in place by its own output
        if uploaded.temp_path.resolve() != output_path.resolve():
            uploaded.discard()
        uploaded.transcoded = True

        logger.info(f"Transcoded {uploaded.original_filename!r} -> {output_path.name}")
        return ImageDescriptor(url=self.url_for(output_path))

    async def transcode_all(self, files: Sequence[UploadedFile],
                            cancelled: Optional[threading.Event] = None) -> List[ImageDescriptor]:
        """
        Transcode a batch sequentially, off the event loop.

        Returns:
            One descriptor per file, in input order

        Raises:
            ProcessingError: On the first file that fails; the batch is abandoned
        """
        loop = asyncio.get_running_loop()
        descriptors = []
        for uploaded in files:
            descriptor = await loop.run_in_executor(None, self.transcode_file, uploaded, cancelled)
            descriptors.append(descriptor)
        return descriptors

    @staticmethod
    def _to_web_mode(image: Image.Image) -> Image.Image:
        """Convert palette/CMYK/16-bit images to RGB or RGBA, keeping transparency."""
        if image.mode in ("RGB", "RGBA"):
            return image
        has_alpha = image.mode in ("LA", "PA") or (image.mode == "P" and "transparency" in image.info)
        return image.convert("RGBA" if has_alpha else "RGB")

    @staticmethod
    def _check_cancelled(uploaded: UploadedFile, cancelled: Optional[threading.Event],
                         partial_path: Optional[Path] = None) -> None:
        if cancelled is None or not cancelled.is_set():
            return
        if partial_path is not None:
            partial_path.unlink(missing_ok=True)
        logger.warning(f"Dropped {uploaded.original_filename!r}: batch was cancelled")
        raise ProcessingError("transcode", "Image processing timed out", filename=uploaded.original_filename)
