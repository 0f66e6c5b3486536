# qrmenu/services/image_processor.py
from PIL import Image, UnidentifiedImageError
import io
import logging
import mimetypes
from typing import Optional

logger = logging.getLogger(__name__)


def validate_image_file(file_bytes: bytes) -> bool:
    """Validate if the file is a valid image"""
    try:
        image = Image.open(io.BytesIO(file_bytes))
        image.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Rejected invalid image upload: {e}")
        return False


def file_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    """Extension of the uploaded file, guessed from the content type when the name has none"""
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    guessed = mimetypes.guess_extension(content_type or "") if content_type else None
    if guessed:
        return guessed.lstrip(".")
    return "bin"
