"""
Image enhancement utilities for the code OCR pipeline.

Provides:
- RGBA pixel buffer validation
- Grayscale, brightness/contrast, threshold (binarization), invert
- Unsharp-mask sharpening
- Fixed-order enhancement pipeline

Pixel buffers are uint8 numpy arrays of shape (height, width, 4) in
R, G, B, A channel order. Alpha is never modified by the pixel operations.
"""

import logging
import math
import numbers
import dataclasses
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

# ITU-R BT.601 luma coefficients for R, G, B
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

BRIGHTNESS_RANGE = (-100, 100)
CONTRAST_RANGE = (-100, 100)
SHARPNESS_RANGE = (0, 100)
SCALE_RANGE = (1.0, 4.0)
THRESHOLD_RANGE = (0, 255)


# ============================================================================
# Data Classes
# ============================================================================

def _check_int(name: str, value: Any, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidInputError(
            f"{name} must be an integer, got {value!r}",
            details={"setting": name, "value": repr(value)}
        )
    if not low <= value <= high:
        raise InvalidInputError(
            f"{name} must be between {low} and {high}, got {value}",
            details={"setting": name, "value": value, "range": [low, high]}
        )


@dataclass(frozen=True)
class EnhancementSettings:
    """Enhancement settings applied to an image before OCR."""
    brightness: int = 0      # -100 to 100
    contrast: int = 0        # -100 to 100
    sharpness: int = 0       # 0 to 100
    scale: float = 1.0       # 1 to 4
    grayscale: bool = False
    invert: bool = False
    threshold: int = 0       # 0 (off) to 255

    def __post_init__(self):
        _check_int("brightness", self.brightness, *BRIGHTNESS_RANGE)
        _check_int("contrast", self.contrast, *CONTRAST_RANGE)
        _check_int("sharpness", self.sharpness, *SHARPNESS_RANGE)
        _check_int("threshold", self.threshold, *THRESHOLD_RANGE)

        if isinstance(self.scale, bool) or not isinstance(self.scale, numbers.Real):
            raise InvalidInputError(
                f"scale must be a number, got {self.scale!r}",
                details={"setting": "scale", "value": repr(self.scale)}
            )
        low, high = SCALE_RANGE
        if not low <= self.scale <= high:
            raise InvalidInputError(
                f"scale must be between {low} and {high}, got {self.scale}",
                details={"setting": "scale", "value": self.scale, "range": [low, high]}
            )

        for name in ("grayscale", "invert"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidInputError(
                    f"{name} must be a boolean, got {getattr(self, name)!r}",
                    details={"setting": name}
                )

    def is_default(self) -> bool:
        """True when applying these settings leaves the image unchanged."""
        return self == DEFAULT_SETTINGS

    def replace(self, **changes) -> "EnhancementSettings":
        """Return a validated copy with some fields changed."""
        _reject_unknown(changes)
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnhancementSettings":
        _reject_unknown(data)
        return cls(**data)


def _reject_unknown(data: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(EnhancementSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidInputError(
            f"Unknown enhancement setting(s): {', '.join(unknown)}",
            details={"unknown": unknown, "known": sorted(known)}
        )


DEFAULT_SETTINGS = EnhancementSettings()


# ============================================================================
# Buffer Helpers
# ============================================================================

def validate_image(image: np.ndarray) -> np.ndarray:
    """
    Check that an array is a non-empty uint8 RGBA buffer.

    Raises:
        InvalidInputError: If the buffer geometry or dtype is wrong
    """
    if not isinstance(image, np.ndarray):
        raise InvalidInputError(
            f"Expected a numpy array, got {type(image).__name__}"
        )
    if image.ndim != 3 or image.shape[2] != 4:
        raise InvalidInputError(
            f"Expected an RGBA buffer of shape (height, width, 4), got {image.shape}",
            details={"shape": list(image.shape)}
        )
    if image.dtype != np.uint8:
        raise InvalidInputError(
            f"Expected uint8 channel values, got {image.dtype}",
            details={"dtype": str(image.dtype)}
        )
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidInputError(
            "Image has no pixels",
            details={"shape": list(image.shape)}
        )
    return image


def from_rgba_bytes(
    data: Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray],
    width: int,
    height: int
) -> np.ndarray:
    """
    Build a pixel buffer from flat row-major RGBA data.

    Args:
        data: Flat RGBA values, four per pixel
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Array of shape (height, width, 4), dtype uint8

    Raises:
        InvalidInputError: If the data length does not match the dimensions
    """
    if width <= 0 or height <= 0:
        raise InvalidInputError(
            f"Image dimensions must be positive, got {width}x{height}",
            details={"width": width, "height": height}
        )

    if isinstance(data, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(data, dtype=np.uint8)
    else:
        flat = np.asarray(data)
        if flat.ndim != 1 or not np.issubdtype(flat.dtype, np.integer):
            raise InvalidInputError("RGBA data must be a flat sequence of integers")
        if flat.size and (flat.min() < 0 or flat.max() > 255):
            raise InvalidInputError("RGBA values must be in [0, 255]")
        flat = flat.astype(np.uint8)

    if flat.size % 4 != 0:
        raise InvalidInputError(
            f"Buffer length {flat.size} is not a multiple of 4",
            details={"length": int(flat.size)}
        )
    if flat.size != width * height * 4:
        raise InvalidInputError(
            f"Buffer length {flat.size} does not match {width}x{height} RGBA",
            details={"length": int(flat.size), "width": width, "height": height}
        )

    return flat.reshape(height, width, 4).copy()


def _clamp(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp to the 8-bit range."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def contrast_factor(contrast: int) -> float:
    """Contrast multiplier applied around mid-gray (128)."""
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


# ============================================================================
# Pixel Operations
# ============================================================================

def grayscale(image: np.ndarray) -> np.ndarray:
    """
    Replace R, G and B with the pixel's luma value.

    Args:
        image: RGBA buffer

    Returns:
        New RGBA buffer with equal R, G, B channels
    """
    validate_image(image)

    luma = image[..., :3].astype(np.float64) @ LUMA_WEIGHTS
    result = image.copy()
    result[..., :3] = _clamp(luma)[..., np.newaxis]
    return result


def brightness_contrast(
    image: np.ndarray,
    brightness: int,
    contrast: int
) -> np.ndarray:
    """
    Adjust brightness and contrast of the colour channels.

    Each channel becomes ``factor * (value - 128) + 128 + brightness`` where
    ``factor`` comes from :func:`contrast_factor`.

    Raises:
        InvalidInputError: If brightness or contrast is outside -100..100
    """
    validate_image(image)
    _check_int("brightness", brightness, *BRIGHTNESS_RANGE)
    _check_int("contrast", contrast, *CONTRAST_RANGE)

    factor = contrast_factor(contrast)
    rgb = image[..., :3].astype(np.float64)

    result = image.copy()
    result[..., :3] = _clamp(factor * (rgb - 128) + 128 + brightness)
    return result


def threshold(image: np.ndarray, level: int) -> np.ndarray:
    """
    Binarize the colour channels.

    A pixel becomes white (255) when the average of its R, G, B values is
    strictly above ``level``, black (0) otherwise.
    """
    validate_image(image)
    _check_int("threshold", level, *THRESHOLD_RANGE)

    # avg > level  <=>  sum > 3 * level
    totals = image[..., :3].sum(axis=2, dtype=np.int32)
    binary = np.where(totals > 3 * level, 255, 0).astype(np.uint8)

    result = image.copy()
    result[..., :3] = binary[..., np.newaxis]
    return result


def invert(image: np.ndarray) -> np.ndarray:
    """Invert R, G and B (``255 - value``)."""
    validate_image(image)

    result = image.copy()
    result[..., :3] = 255 - image[..., :3]
    return result


def sharpen(image: np.ndarray, amount: int) -> np.ndarray:
    """
    Sharpen using a 3x3 unsharp-mask kernel.

    With ``s = amount / 100`` the kernel has centre ``1 + 4s``, orthogonal
    neighbours ``-s`` and zero diagonals. Only interior pixels are written;
    the one-pixel border is copied through unchanged.

    Args:
        image: RGBA buffer
        amount: Sharpening strength, 0 to 100

    Returns:
        New sharpened RGBA buffer
    """
    import cv2

    validate_image(image)
    _check_int("sharpness", amount, *SHARPNESS_RANGE)

    result = image.copy()
    height, width = image.shape[:2]
    if amount == 0 or height < 3 or width < 3:
        return result

    strength = amount / 100
    kernel = np.array([
        [0, -strength, 0],
        [-strength, 1 + 4 * strength, -strength],
        [0, -strength, 0],
    ], dtype=np.float64)

    # Reads from a float copy, writes into the separate result buffer
    source = image[..., :3].astype(np.float64)
    filtered = cv2.filter2D(source, -1, kernel, borderType=cv2.BORDER_REPLICATE)

    result[1:-1, 1:-1, :3] = _clamp(filtered[1:-1, 1:-1])

    logger.debug(f"Applied sharpening (amount={amount})")
    return result


def resample(image: np.ndarray, scale: float) -> np.ndarray:
    """
    Resize by ``scale`` with bicubic interpolation.

    Target dimensions are rounded half up. Returns a copy when the size
    does not change.
    """
    import cv2

    validate_image(image)
    low, high = SCALE_RANGE
    if not low <= scale <= high:
        raise InvalidInputError(
            f"scale must be between {low} and {high}, got {scale}",
            details={"setting": "scale", "value": scale}
        )

    height, width = image.shape[:2]
    new_width = int(math.floor(width * scale + 0.5))
    new_height = int(math.floor(height * scale + 0.5))

    if (new_width, new_height) == (width, height):
        return image.copy()

    resized = cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_CUBIC)

    logger.debug(f"Resized image: {(height, width)} -> {resized.shape[:2]} (scale={scale:.2f})")
    return resized


# ============================================================================
# Main Enhancement Pipeline
# ============================================================================

def enhance(
    image: np.ndarray,
    settings: Optional[Union[EnhancementSettings, Mapping[str, Any]]] = None
) -> np.ndarray:
    """
    Apply enhancement settings to an image in a fixed order.

    Order: resample, grayscale, brightness/contrast, threshold, invert,
    sharpen. Each step only runs when its setting is active, so default
    settings return an identical copy of the input.

    Args:
        image: RGBA buffer (never modified)
        settings: EnhancementSettings or a mapping of setting names to values

    Returns:
        New RGBA buffer at the scaled resolution

    Raises:
        InvalidInputError: If the buffer or settings are invalid
    """
    validate_image(image)

    if settings is None:
        settings = DEFAULT_SETTINGS
    elif isinstance(settings, Mapping):
        settings = EnhancementSettings.from_dict(settings)
    elif not isinstance(settings, EnhancementSettings):
        raise InvalidInputError(
            f"Expected EnhancementSettings, got {type(settings).__name__}"
        )

    transformations = []

    # 1. Resample (always returns a fresh buffer)
    processed = resample(image, settings.scale)
    if processed.shape != image.shape:
        transformations.append(f"resize_{settings.scale:g}x")

    # 2. Grayscale
    if settings.grayscale:
        processed = grayscale(processed)
        transformations.append("grayscale")

    # 3. Brightness / contrast
    if settings.brightness != 0 or settings.contrast != 0:
        processed = brightness_contrast(processed, settings.brightness, settings.contrast)
        transformations.append(
            f"brightness_{settings.brightness}_contrast_{settings.contrast}"
        )

    # 4. Threshold; later steps see a bimodal image
    if settings.threshold > 0:
        processed = threshold(processed, settings.threshold)
        transformations.append(f"threshold_{settings.threshold}")

    # 5. Invert
    if settings.invert:
        processed = invert(processed)
        transformations.append("invert")

    # 6. Sharpen
    if settings.sharpness > 0:
        processed = sharpen(processed, settings.sharpness)
        transformations.append(f"sharpen_{settings.sharpness}")

    logger.info(f"Enhancement complete: {' -> '.join(transformations) or 'no changes'}")
    return processed
