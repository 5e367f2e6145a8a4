"""
Utility modules for the code OCR pipeline.
"""

from .io import load_image, decode_image, save_image, save_json, load_json
from .images import (
    EnhancementSettings, DEFAULT_SETTINGS, enhance,
    grayscale, brightness_contrast, threshold, invert, sharpen,
)
from .presets import PRESETS, get_preset, list_presets
from .languages import LANGUAGE_PATTERNS, SUPPORTED_LANGUAGES, get_language_name
from .classifier import ClassificationResult, classify, detect_language
from .ocr_text import TesseractEngine, OCRResult, clean_ocr_text
from .history import HistoryStore, HistoryItem
from .extractor import CodeExtractor, ExtractionResult

__all__ = [
    # IO
    "load_image", "decode_image", "save_image", "save_json", "load_json",
    # Images
    "EnhancementSettings", "DEFAULT_SETTINGS", "enhance",
    "grayscale", "brightness_contrast", "threshold", "invert", "sharpen",
    # Presets
    "PRESETS", "get_preset", "list_presets",
    # Languages
    "LANGUAGE_PATTERNS", "SUPPORTED_LANGUAGES", "get_language_name",
    "ClassificationResult", "classify", "detect_language",
    # OCR
    "TesseractEngine", "OCRResult", "clean_ocr_text",
    # History
    "HistoryStore", "HistoryItem",
    # Extraction
    "CodeExtractor", "ExtractionResult",
]
