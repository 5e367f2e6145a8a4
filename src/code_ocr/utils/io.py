"""
I/O utilities for the code OCR pipeline.

Handles:
- Image loading/decoding into RGBA pixel buffers
- Image saving
- JSON serialization
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Union

import numpy as np

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.webp', '.bmp', '.tiff', '.tif', '.gif')


# ============================================================================
# Image Loading
# ============================================================================

def is_image_file(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def _to_rgba(img: np.ndarray) -> np.ndarray:
    """Convert an OpenCV image (gray, BGR or BGRA) to RGBA."""
    import cv2

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)

    raise ValueError(f"Unexpected image shape: {img.shape}")


def _to_uint8(img: np.ndarray) -> np.ndarray:
    # 16-bit PNG/TIFF sources
    if img.dtype == np.uint16:
        return (img >> 8).astype(np.uint8)
    return img


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA pixel buffer.

    Args:
        image_path: Path to the image file

    Returns:
        Array of shape (height, width, 4), dtype uint8

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be decoded
    """
    import cv2

    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    img = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)

    if img is None:
        raise ValueError(f"Could not decode image: {image_path}")

    rgba = _to_rgba(_to_uint8(img))
    logger.debug(f"Loaded image: {image_path}, shape: {rgba.shape}")
    return rgba


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (upload or clipboard paste) to RGBA.

    Raises:
        ValueError: If the bytes are not a decodable image
    """
    import cv2

    if not data:
        raise ValueError("No image data")

    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError("Could not decode image data")

    return _to_rgba(_to_uint8(img))


def save_image(
    image: np.ndarray,
    output_path: Union[str, Path],
    quality: int = 95
) -> Path:
    """
    Save an RGBA buffer to file.

    Args:
        image: RGBA pixel buffer
        output_path: Path to save the image
        quality: JPEG quality (1-100)

    Returns:
        Path to the saved image
    """
    import cv2

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix.lower() in ('.jpg', '.jpeg'):
        # JPEG has no alpha channel
        bgr = cv2.cvtColor(image, cv2.COLOR_RGBA2BGR)
        written = cv2.imwrite(str(output_path), bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    else:
        bgra = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
        written = cv2.imwrite(str(output_path), bgra)

    if not written:
        raise ValueError(f"Could not write image: {output_path}")

    logger.debug(f"Saved image: {output_path}")
    return output_path


def load_text(text_path: Union[str, Path]) -> str:
    """Read a UTF-8 text file."""
    text_path = Path(text_path)
    if not text_path.exists():
        raise FileNotFoundError(f"Text file not found: {text_path}")
    return text_path.read_text(encoding='utf-8')


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values, dataclasses and paths."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """
    Load data from a JSON file.

    Args:
        json_path: Path to the JSON file

    Returns:
        Parsed JSON data
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)
