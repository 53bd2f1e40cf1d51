"""Avatar upload validation and image normalization."""
import io
import logging
import re

from PIL import Image

from taskapp.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)


class AvatarError(ValueError):
    """Raised when an upload cannot become an avatar."""


def check_upload(filename: str | None, data: bytes, settings: Settings) -> None:
    """
    Reject uploads before any decoding happens.

    Args:
        filename: Client-supplied file name
        data: Raw upload bytes (read up to one byte past the limit)
        settings: Application settings

    Raises:
        AvatarError: If the extension or size is not acceptable
    """
    if not filename or not ALLOWED_EXTENSIONS.search(filename):
        raise AvatarError("Please upload an image file")
    if len(data) > settings.avatar_max_bytes:
        raise AvatarError(f"File exceeds {settings.avatar_max_bytes} bytes")


def normalize_avatar(data: bytes, size: int) -> bytes:
    """
    Resize an image to a square PNG.

    Args:
        data: Encoded source image
        size: Edge length in pixels

    Returns:
        PNG-encoded bytes

    Raises:
        AvatarError: If the data is not a decodable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            resized = image.convert("RGBA").resize((size, size))
        output = io.BytesIO()
        resized.save(output, format="PNG")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise AvatarError(f"Could not process image: {e}") from e

    return output.getvalue()


def process_upload(filename: str | None, data: bytes, settings: Settings) -> bytes:
    """Validate an upload and return the avatar bytes to store."""
    check_upload(filename, data, settings)
    avatar = normalize_avatar(data, settings.avatar_size)
    logger.debug(f"Normalized avatar {filename}: {len(data)} -> {len(avatar)} bytes")
    return avatar
