"""
Tests for ImagePayload.
"""

import base64

import pytest
from PIL import Image

from image_edit_studio.core.data_types import ImageMetadata, ImagePayload, InvalidImageError


class TestImagePayload:
    """Tests for construction and conversions."""

    def test_empty_bytes_rejected(self):
        with pytest.raises(InvalidImageError, match="No image data"):
            ImagePayload(data=b"")

    def test_frozen(self):
        payload = ImagePayload(data=b"abc")
        with pytest.raises(AttributeError):
            payload.data = b"xyz"

    def test_equality_ignores_metadata(self):
        a = ImagePayload(data=b"abc", metadata=ImageMetadata(prompt="one"))
        b = ImagePayload(data=b"abc", metadata=ImageMetadata(prompt="two"))
        assert a == b

    def test_from_base64_bare_defaults_to_jpeg(self):
        payload = ImagePayload.from_base64(base64.b64encode(b"abc").decode())
        assert payload.data == b"abc"
        assert payload.mime_type == "image/jpeg"

    def test_from_base64_with_explicit_mime(self):
        payload = ImagePayload.from_base64(base64.b64encode(b"abc").decode(), mime_type="image/png")
        assert payload.mime_type == "image/png"

    def test_from_base64_strips_data_url_prefix(self):
        b64 = base64.b64encode(b"abc").decode()
        payload = ImagePayload.from_base64(f"data:image/png;base64,{b64}")
        assert payload.data == b"abc"
        assert payload.mime_type == "image/png"

    def test_from_base64_line_wrapped(self):
        b64 = base64.b64encode(b"a" * 120).decode()
        wrapped = "\n".join(b64[i:i + 76] for i in range(0, len(b64), 76))
        payload = ImagePayload.from_base64(f"data:image/png;base64,{wrapped}\n")
        assert payload.data == b"a" * 120

    def test_from_base64_empty(self):
        with pytest.raises(InvalidImageError, match="No image data"):
            ImagePayload.from_base64("")

    def test_from_base64_invalid(self):
        with pytest.raises(InvalidImageError, match="Invalid image data"):
            ImagePayload.from_base64("not base64!!")

    def test_data_url(self):
        payload = ImagePayload(data=b"abc", mime_type="image/png")
        url = payload.to_data_url()
        assert url == f"data:image/png;base64,{base64.b64encode(b'abc').decode()}"
        assert ImagePayload.from_data_url(url) == payload

    def test_from_data_url_requires_prefix(self):
        with pytest.raises(InvalidImageError):
            ImagePayload.from_data_url("YWJj")

    def test_pil_roundtrip(self):
        img = Image.new("RGB", (12, 7), (0, 128, 255))
        payload = ImagePayload.from_pil(img)
        assert payload.mime_type == "image/png"
        assert payload.size == (12, 7)
        assert payload.to_pil().getpixel((0, 0)) == (0, 128, 255)

    def test_to_pil_undecodable(self):
        with pytest.raises(InvalidImageError, match="could not be decoded"):
            ImagePayload(data=b"not an image").to_pil()

    def test_with_metadata(self):
        payload = ImagePayload(data=b"abc").with_metadata(prompt="a cat", model="m")
        assert payload.metadata.prompt == "a cat"
        assert payload.metadata.model == "m"
        assert payload.data == b"abc"


class TestImagePayloadFiles:
    """Tests for upload and save."""

    def test_from_file_png(self, tmp_path, png_bytes):
        path = tmp_path / "photo.png"
        path.write_bytes(png_bytes)
        payload = ImagePayload.from_file(path)
        assert payload.mime_type == "image/png"
        assert payload.data == png_bytes
        assert payload.metadata.source_path == path

    def test_from_file_jpeg(self, tmp_path):
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (4, 4)).save(path, format="JPEG")
        assert ImagePayload.from_file(path).mime_type == "image/jpeg"

    def test_from_file_rejects_other_types(self, tmp_path):
        path = tmp_path / "photo.gif"
        Image.new("RGB", (4, 4)).save(path, format="GIF")
        with pytest.raises(InvalidImageError, match="PNG or JPG"):
            ImagePayload.from_file(path)

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImagePayload.from_file(tmp_path / "missing.png")

    def test_save(self, tmp_path, png_bytes):
        payload = ImagePayload(data=png_bytes, mime_type="image/png")
        path = payload.save(tmp_path / "out")
        assert path.parent == tmp_path / "out"
        assert path.name.startswith("image-")
        assert path.suffix == ".png"
        assert path.read_bytes() == png_bytes

    def test_suggested_filename_jpeg(self):
        name = ImagePayload(data=b"x", mime_type="image/jpeg").suggested_filename()
        assert name.endswith(".jpg")
