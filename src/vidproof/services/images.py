"""Image compression for evidence screenshots."""

import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

MAX_DIMENSIONS = (1200, 1200)
JPEG_QUALITY = 70

logger = logging.getLogger(__name__)


def compress_image(
    image_bytes: bytes,
    max_dimensions: tuple[int, int] = MAX_DIMENSIONS,
    quality: int = JPEG_QUALITY,
) -> bytes:
    """Fit an image inside ``max_dimensions`` and re-encode it as JPEG.

    Images are never enlarged. Returns the original bytes unchanged when
    Pillow can't decode or encode them.
    """
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            converted = image.convert("RGB") if image.mode != "RGB" else image.copy()
        converted.thumbnail(max_dimensions)
        output = BytesIO()
        converted.save(output, format="JPEG", quality=quality, optimize=True)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ):
        logger.exception("Image compression failed, keeping original bytes")
        return image_bytes
    return output.getvalue()
