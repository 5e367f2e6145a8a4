"""
Configuration and constants for the code OCR pipeline.

This module provides:
- Global logging configuration
- OCR engine settings
- Enhancement defaults
- History storage settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("code_ocr")


# ============================================================================
# Directory Paths
# ============================================================================

DATA_DIR = Path.home() / ".code_ocr"


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class OCRConfig:
    """OCR configuration."""
    tesseract_lang: str = "eng"
    # psm 6: single uniform block, keeps code lines together
    tesseract_config: str = "--oem 3 --psm 6 -c preserve_interword_spaces=1"
    tesseract_cmd: Optional[str] = None  # None = look up on PATH
    compute_confidence: bool = True


@dataclass
class EnhancementConfig:
    """Image enhancement configuration."""
    default_preset: str = "default"


@dataclass
class HistoryConfig:
    """Extraction history configuration."""
    enabled: bool = True
    path: Path = field(default_factory=lambda: DATA_DIR / "history.json")
    max_items: int = 20
    preview_length: int = 100


@dataclass
class AppConfig:
    """Main application configuration."""
    ocr: OCRConfig = field(default_factory=OCRConfig)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> AppConfig:
    """Get the default configuration with environment overrides."""
    config = AppConfig()

    if os.environ.get("CODE_OCR_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("CODE_OCR_TESSERACT_CMD"):
        config.ocr.tesseract_cmd = os.environ["CODE_OCR_TESSERACT_CMD"]

    if os.environ.get("CODE_OCR_LANG"):
        config.ocr.tesseract_lang = os.environ["CODE_OCR_LANG"]

    if os.environ.get("CODE_OCR_PRESET"):
        config.enhancement.default_preset = os.environ["CODE_OCR_PRESET"]

    if os.environ.get("CODE_OCR_HISTORY_PATH"):
        config.history.path = Path(os.environ["CODE_OCR_HISTORY_PATH"]).expanduser()

    if os.environ.get("CODE_OCR_HISTORY_DISABLED", "").lower() == "true":
        config.history.enabled = False

    return config


# ============================================================================
# JSON Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"


# ============================================================================
# Utility Functions
# ============================================================================

def check_tesseract_available(tesseract_cmd: Optional[str] = None) -> bool:
    """
    Check if pytesseract and the Tesseract binary are usable.

    Args:
        tesseract_cmd: Binary to use instead of the one on PATH
    """
    try:
        import pytesseract
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        pytesseract.get_tesseract_version()
        return True
    except Exception:
        return False
