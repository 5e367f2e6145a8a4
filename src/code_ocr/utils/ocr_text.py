"""
Text OCR adapter for the code OCR pipeline.

Provides:
- OCRResult container
- Tesseract engine wrapper (pytesseract)
- Post-processing of recognized code text
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from .images import validate_image

logger = logging.getLogger(__name__)

_TRAILING_WHITESPACE = re.compile(r"[ \t]+$", re.MULTILINE)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class OCRResult:
    """OCR result for a whole image."""
    text: str
    confidence: float
    raw_text: Optional[str] = None  # Before post-processing
    engine_used: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "engine": self.engine_used,
            "metadata": self.metadata
        }


# ============================================================================
# Post-processing
# ============================================================================

def clean_ocr_text(text: str) -> str:
    """
    Normalize recognized text for display and classification.

    Converts CRLF to LF, strips trailing spaces and tabs from every line and
    trims the block. Leading indentation inside the block is kept.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n")
    text = _TRAILING_WHITESPACE.sub("", text)
    return text.strip()


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractEngine:
    """OCR using Tesseract."""

    name = "tesseract"

    def __init__(
        self,
        language: str = "eng",
        config: str = "--oem 3 --psm 6 -c preserve_interword_spaces=1",
        tesseract_cmd: Optional[str] = None,
        compute_confidence: bool = True
    ):
        try:
            import pytesseract
            self.pytesseract = pytesseract

            if tesseract_cmd:
                pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

            # Test that tesseract is installed
            pytesseract.get_tesseract_version()

        except Exception as e:
            raise ImportError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        self.language = language
        self.config = config
        self.compute_confidence = compute_confidence

    def _to_rgb(self, image: np.ndarray) -> np.ndarray:
        import cv2
        return cv2.cvtColor(image, cv2.COLOR_RGBA2RGB)

    def _mean_confidence(self, rgb: np.ndarray) -> float:
        data = self.pytesseract.image_to_data(
            rgb,
            lang=self.language,
            config=self.config,
            output_type=self.pytesseract.Output.DICT
        )
        # -1 means no valid confidence
        confidences = [
            float(conf) / 100.0
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) >= 0 and word.strip()
        ]
        return float(np.mean(confidences)) if confidences else 0.0

    def recognize(self, image: np.ndarray) -> OCRResult:
        """
        Recognize text in an RGBA image.

        Engine failures are logged and returned as an empty result.
        """
        validate_image(image)
        rgb = self._to_rgb(image)

        try:
            text = self.pytesseract.image_to_string(
                rgb,
                lang=self.language,
                config=self.config
            )
            confidence = self._mean_confidence(rgb) if self.compute_confidence else 0.0
        except Exception as e:
            logger.error(f"Tesseract error: {e}")
            return OCRResult(text="", confidence=0.0, engine_used=self.name)

        logger.debug(f"Tesseract recognized {len(text)} characters (confidence={confidence:.2f})")

        return OCRResult(
            text=text,
            confidence=confidence,
            raw_text=text,
            engine_used=self.name,
            metadata={"language": self.language, "config": self.config}
        )
