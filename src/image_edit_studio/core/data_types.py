"""
Data Types - Core data structures for image versions.

This module defines the image payload that flows between providers,
the versioning store and the UI:
- ImagePayload: Immutable encoded image (bytes + MIME type)
- ImageMetadata: Where a payload came from (prompt, model, file)
- InvalidImageError: Raised for unusable image input
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
import time
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any


# MIME types accepted for uploads
UPLOAD_MIME_TYPES = ("image/png", "image/jpeg", "image/jpg")

DEFAULT_MIME_TYPE = "image/jpeg"

_DATA_URL_RE = re.compile(r"^data:(image/[a-z0-9.+-]+);base64,", re.IGNORECASE)


class InvalidImageError(ValueError):
    """Image input is missing, malformed or of an unsupported type."""
    pass


@dataclass(frozen=True)
class ImageMetadata:
    """Metadata associated with an image version."""

    # Generation parameters (if AI-generated)
    prompt: str | None = None
    model: str | None = None

    # Source information (if uploaded)
    source_path: Path | None = None


@dataclass(frozen=True)
class ImagePayload:
    """
    One immutable image version.

    Stores the encoded image bytes exactly as received from a provider
    or read from disk; decoding happens only when a PIL image is needed.

    Attributes:
        data: Encoded image bytes (PNG, JPEG, ...)
        mime_type: MIME type of the encoded bytes
        metadata: Optional provenance, ignored by equality
    """
    data: bytes
    mime_type: str = "image/png"
    metadata: ImageMetadata = field(default_factory=ImageMetadata, compare=False)

    def __post_init__(self) -> None:
        if not self.data:
            raise InvalidImageError("No image data provided for processing.")

    def __repr__(self) -> str:
        return f"ImagePayload(mime_type={self.mime_type!r}, {len(self.data)} bytes)"

    @classmethod
    def from_base64(
        cls,
        b64: str,
        mime_type: str | None = None,
        metadata: ImageMetadata | None = None,
    ) -> ImagePayload:
        """
        Create a payload from a base64 string.

        Accepts either bare base64 or a ``data:image/...;base64,`` URL.
        When no MIME type is given it is taken from the data URL prefix,
        falling back to JPEG.
        """
        if not b64:
            raise InvalidImageError("No image data provided for processing.")

        match = _DATA_URL_RE.match(b64)
        if match:
            mime_type = mime_type or match.group(1).lower()
            b64 = b64[match.end():]

        # Line-wrapped base64 (MIME style) is accepted
        b64 = "".join(b64.split())

        try:
            data = base64.b64decode(b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageError("Invalid image data format.") from e

        return cls(
            data=data,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            metadata=metadata or ImageMetadata(),
        )

    @classmethod
    def from_data_url(cls, url: str) -> ImagePayload:
        """Create a payload from a ``data:`` URL."""
        if not _DATA_URL_RE.match(url or ""):
            raise InvalidImageError("Invalid image data format.")
        return cls.from_base64(url)

    @classmethod
    def from_file(cls, path: str | Path) -> ImagePayload:
        """
        Load an uploaded PNG or JPEG file.

        Args:
            path: Path to the image file

        Returns:
            ImagePayload with the file's bytes and guessed MIME type

        Raises:
            FileNotFoundError: The file does not exist
            InvalidImageError: The file is not a PNG or JPEG image
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")

        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type not in UPLOAD_MIME_TYPES:
            raise InvalidImageError("Please upload only PNG or JPG image files.")

        return cls(
            data=path.read_bytes(),
            mime_type=mime_type,
            metadata=ImageMetadata(source_path=path),
        )

    @classmethod
    def from_pil(
        cls,
        image: Any,
        format: str = "PNG",
        metadata: ImageMetadata | None = None,
    ) -> ImagePayload:
        """Encode a PIL Image into a new payload."""
        from PIL import Image

        if not isinstance(image, Image.Image):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        buf = BytesIO()
        image.save(buf, format=format)
        return cls(
            data=buf.getvalue(),
            mime_type=Image.MIME.get(format.upper(), f"image/{format.lower()}"),
            metadata=metadata or ImageMetadata(),
        )

    def to_base64(self) -> str:
        """Bare base64 encoding of the image bytes."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Data URL in the form ``data:<mime>;base64,<data>``."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def to_pil(self):
        """Decode into a PIL Image."""
        from PIL import Image, UnidentifiedImageError

        try:
            image = Image.open(BytesIO(self.data))
            image.load()
        except UnidentifiedImageError as e:
            raise InvalidImageError("Image bytes could not be decoded.") from e
        return image

    @property
    def size(self) -> tuple[int, int]:
        """Image size as (width, height)."""
        return self.to_pil().size

    def suggested_filename(self) -> str:
        """File name of the form ``image-<milliseconds>.<ext>``."""
        ext = self.mime_type.split("/")[-1] or "png"
        if ext == "jpeg":
            ext = "jpg"
        return f"image-{int(time.time() * 1000)}.{ext}"

    def save(self, directory: str | Path) -> Path:
        """Write the encoded bytes into ``directory`` under a fresh name."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.suggested_filename()
        path.write_bytes(self.data)
        return path

    def with_metadata(self, **changes: Any) -> ImagePayload:
        """Return a copy of this payload with updated metadata."""
        meta = ImageMetadata(
            prompt=changes.get("prompt", self.metadata.prompt),
            model=changes.get("model", self.metadata.model),
            source_path=changes.get("source_path", self.metadata.source_path),
        )
        return ImagePayload(data=self.data, mime_type=self.mime_type, metadata=meta)
