import asyncio
import threading
from pathlib import Path

import pytest
from PIL import Image

from domain.entities.uploaded_file import UploadedFile
from domain.value_objects.file_size import FileSize
from exceptions import ProcessingError
from services.image_transcoder import ImageTranscoder


def _stored(tmp_path: Path, name: str, data: bytes) -> UploadedFile:
    path = tmp_path / name
    path.write_bytes(data)
    return UploadedFile(
        original_filename=name,
        temp_path=path,
        size=FileSize(len(data)),
        extension=path.suffix.lstrip("."),
    )


def _write_image(path: Path, fmt: str, size, **save_kwargs) -> None:
    Image.new("RGB", size, (10, 120, 200)).save(path, fmt, **save_kwargs)


@pytest.fixture
def transcoder(tmp_path) -> ImageTranscoder:
    return ImageTranscoder(tmp_path, "/uploads/products/")


class TestTranscodeFile:
    def test_large_image_fits_inside_bounds(self, tmp_path, transcoder, image_bytes) -> None:
        uploaded = _stored(tmp_path, "wide-1-aaaaaa.jpg", image_bytes("JPEG", (3200, 1000)))

        descriptor = transcoder.transcode_file(uploaded)

        output = tmp_path / "wide-1-aaaaaa.webp"
        with Image.open(output) as image:
            assert image.format == "WEBP"
            assert image.size == (1600, 500)
        assert descriptor.url == "/uploads/products/wide-1-aaaaaa.webp"
        assert descriptor.alt == ""
        assert descriptor.is_primary is False

    def test_small_image_is_not_upscaled(self, tmp_path, transcoder, image_bytes) -> None:
        uploaded = _stored(tmp_path, "tiny-1-aaaaaa.png", image_bytes("PNG", (10, 10)))

        transcoder.transcode_file(uploaded)

        with Image.open(tmp_path / "tiny-1-aaaaaa.webp") as image:
            assert image.size == (10, 10)

    def test_original_is_removed(self, tmp_path, transcoder, image_bytes) -> None:
        uploaded = _stored(tmp_path, "shoe-1-aaaaaa.png", image_bytes("PNG"))

        transcoder.transcode_file(uploaded)

        assert not uploaded.temp_path.exists()
        assert uploaded.transcoded is True

    def test_exif_orientation_is_applied(self, tmp_path, transcoder) -> None:
        path = tmp_path / "rotated-1-aaaaaa.jpg"
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 degrees clockwise
        _write_image(path, "JPEG", (40, 20), exif=exif)
        uploaded = UploadedFile("rotated.jpg", path, FileSize(path.stat().st_size), "jpg")

        transcoder.transcode_file(uploaded)

        with Image.open(tmp_path / "rotated-1-aaaaaa.webp") as image:
            assert image.size == (20, 40)

    def test_webp_upload_is_replaced_in_place(self, tmp_path, transcoder, image_bytes) -> None:
        uploaded = _stored(tmp_path, "flat-1-aaaaaa.webp", image_bytes("WEBP", (2000, 2000)))

        descriptor = transcoder.transcode_file(uploaded)

        with Image.open(uploaded.temp_path) as image:
            assert image.size == (1600, 1600)
        assert descriptor.url.endswith("/flat-1-aaaaaa.webp")
        assert uploaded.transcoded is True

    def test_transparent_palette_image_keeps_alpha(self, tmp_path, transcoder) -> None:
        path = tmp_path / "logo-1-aaaaaa.png"
        palette_image = Image.new("P", (16, 16), 0)
        palette_image.putpalette([0, 0, 0, 255, 255, 255])
        palette_image.save(path, "PNG", transparency=0)
        uploaded = UploadedFile("logo.png", path, FileSize(path.stat().st_size), "png")

        transcoder.transcode_file(uploaded)

        with Image.open(tmp_path / "logo-1-aaaaaa.webp") as image:
            assert image.mode == "RGBA"

    def test_corrupt_file_raises_processing_error(self, tmp_path, transcoder) -> None:
        uploaded = _stored(tmp_path, "broken-1-aaaaaa.png", b"definitely not an image")

        with pytest.raises(ProcessingError) as exc_info:
            transcoder.transcode_file(uploaded)

        assert exc_info.value.message == "Image processing failed"
        assert exc_info.value.details["filename"] == "broken-1-aaaaaa.png"
        assert not (tmp_path / "broken-1-aaaaaa.webp").exists()
        assert not list(tmp_path.glob(".*.part"))

    def test_cancelled_batch_publishes_nothing(self, tmp_path, transcoder, image_bytes) -> None:
        uploaded = _stored(tmp_path, "late-1-aaaaaa.png", image_bytes("PNG"))
        cancelled = threading.Event()
        cancelled.set()

        with pytest.raises(ProcessingError, match="timed out"):
            transcoder.transcode_file(uploaded, cancelled=cancelled)
        assert not (tmp_path / "late-1-aaaaaa.webp").exists()
        assert not list(tmp_path.glob(".*.part"))
        assert uploaded.transcoded is False


class TestTranscodeAll:
    def test_descriptors_follow_input_order(self, tmp_path, transcoder, image_bytes) -> None:
        files = [_stored(tmp_path, f"img{i}-1-aaaaaa.png", image_bytes("PNG")) for i in range(3)]

        descriptors = asyncio.run(transcoder.transcode_all(files))

        assert [d.url for d in descriptors] == [
            "/uploads/products/img0-1-aaaaaa.webp",
            "/uploads/products/img1-1-aaaaaa.webp",
            "/uploads/products/img2-1-aaaaaa.webp",
        ]

    def test_failure_stops_batch(self, tmp_path, transcoder, image_bytes) -> None:
        good = _stored(tmp_path, "good-1-aaaaaa.png", image_bytes("PNG"))
        bad = _stored(tmp_path, "bad-1-aaaaaa.png", b"garbage")
        later = _stored(tmp_path, "later-1-aaaaaa.png", image_bytes("PNG"))

        with pytest.raises(ProcessingError):
            asyncio.run(transcoder.transcode_all([good, bad, later]))

        assert (tmp_path / "good-1-aaaaaa.webp").exists()
        assert not good.temp_path.exists()
        assert later.temp_path.exists()
        assert not later.transcoded
