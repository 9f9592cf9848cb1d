"""
Turns an in-memory image into the bytes of a JPEG or PNG file.

Encoding is delegated to an `ImageEncoder`. The default, `PillowEncoder`,
accepts `PIL.Image.Image` handles. Other encoders can be passed in to
support other image representations.
"""
from __future__ import annotations

import enum
import io
import logging
from dataclasses import dataclass
from typing import Any
from typing import Protocol

from PIL import Image

from paperclip import exceptions

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 1.0

# Modes that Pillow's JPEG plugin can write without conversion.
_JPEG_MODES = ("1", "L", "RGB", "CMYK")


class ImageType(enum.Enum):
    JPEG = "jpeg"
    PNG = "png"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageType.JPEG else "png"

    @classmethod
    def parse(cls, value: ImageType | str) -> ImageType:
        """
        Look up an image type by member or name, e.g. "jpeg", "JPG" or "png".
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            if v == "jpg":
                v = "jpeg"
            try:
                return cls(v)
            except ValueError:
                pass
        raise exceptions.InvalidArgumentError(f"Unsupported image type: {value!r}")


@dataclass(frozen=True)
class EncodedImage:
    content: bytes
    mime_type: str
    extension: str


class ImageEncoder(Protocol):
    def encode(
        self, image: Any, image_type: ImageType, quality: float | None
    ) -> bytes:  # pragma: no cover
        """
        Return the encoded file contents. quality is in [0.0, 1.0] for JPEG and None for PNG.
        """
        ...


class PillowEncoder:
    def encode(self, image: Any, image_type: ImageType, quality: float | None) -> bytes:
        if not isinstance(image, Image.Image):
            raise exceptions.EncodingError(
                f"Expected a PIL image, but got {type(image).__name__}."
            )
        buf = io.BytesIO()
        if image_type is ImageType.JPEG:
            if image.mode not in _JPEG_MODES:
                logger.debug(f"Converting {image.mode} image to RGB for JPEG encoding.")
                image = image.convert("RGB")
            if quality is None:
                quality = DEFAULT_QUALITY
            image.save(buf, "JPEG", quality=round(quality * 100))
        else:
            image.save(buf, "PNG")
        return buf.getvalue()


def clamp_quality(quality: Any, fallback: float = DEFAULT_QUALITY) -> float:
    """
    Return quality if it is a number within [0.0, 1.0], and fallback otherwise.
    """
    if (
        isinstance(quality, bool)
        or not isinstance(quality, (int, float))
        or not 0.0 <= quality <= 1.0
    ):
        logger.debug(f"JPEG quality {quality!r} is out of range, using {fallback}.")
        return fallback
    return float(quality)


def encode(
    image: Any,
    image_type: ImageType | str,
    quality: float | None = None,
    encoder: ImageEncoder | None = None,
    fallback_quality: float = DEFAULT_QUALITY,
) -> EncodedImage:
    """
    Encode an image as JPEG or PNG.

    For JPEG, quality is clamped with `clamp_quality`. For PNG it is ignored.

    Raises:
        InvalidArgumentError, if the image type is unknown.
        EncodingError, if the image cannot be encoded.
    """
    image_type = ImageType.parse(image_type)
    if encoder is None:
        encoder = PillowEncoder()

    if image_type is ImageType.JPEG:
        effective_quality: float | None = clamp_quality(quality, fallback_quality)
    else:
        effective_quality = None

    try:
        content = encoder.encode(image, image_type, effective_quality)
    except exceptions.PaperclipException:
        raise
    except Exception as e:
        raise exceptions.EncodingError(
            f"Could not encode image as {image_type.name}: {e!r}"
        ) from e

    if not isinstance(content, bytes):
        raise exceptions.EncodingError(
            f"Encoder returned {type(content).__name__}, expected bytes."
        )
    if not content:
        raise exceptions.EncodingError(f"Encoding as {image_type.name} produced no data.")
    return EncodedImage(
        content=content,
        mime_type=image_type.mime_type,
        extension=image_type.extension,
    )
