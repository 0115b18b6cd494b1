"""
Image helpers and the thumbnail generator.

Photos are stored inline as data URIs ("data:image/jpeg;base64,...").
Thumbnails are fixed-size square JPEG crops of the primary photo.
"""

import base64
import binascii
import io
import re
from typing import Optional, Tuple
from PIL import Image, ImageOps, UnidentifiedImageError

from family_directory.core.config import settings
from family_directory.core.exceptions import InvalidImageError
from family_directory.core.logging import get_logger

logger = get_logger(__name__)

DATA_IMAGE_PATTERN = re.compile(r'^data:image/([a-zA-Z0-9.+-]+);base64,(.+)$', re.DOTALL)


def is_data_image(value: Optional[str]) -> bool:
    """True for a data URI that carries a non-empty image payload."""
    if not value or not isinstance(value, str):
        return False
    match = DATA_IMAGE_PATTERN.match(value)
    return bool(match and match.group(2).strip())


def decode_data_image(value: str) -> Tuple[str, bytes]:
    """
    Split a data URI into (image format, raw bytes).

    Raises:
        InvalidImageError: If the value is not a base64 image data URI
    """
    match = DATA_IMAGE_PATTERN.match(value or "")
    if not match:
        raise InvalidImageError("Image must be a base64 data URI")
    try:
        raw = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError):
        raise InvalidImageError("Image payload is not valid base64")
    if not raw:
        raise InvalidImageError("Image payload is empty")
    return match.group(1).lower(), raw


def encode_data_image(raw: bytes, image_format: str = "jpeg") -> str:
    """Wrap raw image bytes into a data URI."""
    return f"data:image/{image_format};base64,{base64.b64encode(raw).decode('ascii')}"


class ThumbnailGenerator:
    """
    Produces square JPEG thumbnails for primary photos.

    generate() never raises: any decode/encode failure yields None and the
    caller stores the photo without a thumbnail.
    """

    def __init__(self, size: int = None, quality: int = None):
        self.size = size or settings.thumbnail_size
        self.quality = quality or settings.thumbnail_quality

    def generate(self, image: str) -> Optional[str]:
        try:
            _, raw = decode_data_image(image)
            with Image.open(io.BytesIO(raw)) as source:
                source = ImageOps.exif_transpose(source)
                if source.mode != "RGB":
                    source = source.convert("RGB")
                thumbnail = ImageOps.fit(
                    source,
                    (self.size, self.size),
                    method=Image.LANCZOS,
                    centering=(0.5, 0.5),
                )
                buffer = io.BytesIO()
                thumbnail.save(buffer, format="JPEG", quality=self.quality)
            return encode_data_image(buffer.getvalue(), "jpeg")
        except InvalidImageError as e:
            logger.warning(f"[Thumbnail] Skipped: {e.message}")
            return None
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning(f"[Thumbnail] Failed to generate thumbnail: {e}")
            return None
