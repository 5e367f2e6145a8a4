"""
Code extraction orchestrator.

Runs the full flow for one image:
1. Enhancement (skipped for default settings)
2. OCR through an injected engine
3. Text cleanup
4. Language classification
5. Optional history entry
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from .classifier import classify
from .history import HistoryStore
from .images import DEFAULT_SETTINGS, EnhancementSettings, enhance, validate_image
from .languages import get_formatter_parser, get_language_name
from .ocr_text import clean_ocr_text

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Code recognized from one image."""
    code: str
    language: str
    score: int
    confidence: float = 0.0
    settings: EnhancementSettings = field(default_factory=EnhancementSettings)
    enhanced_image: Optional[np.ndarray] = None
    engine_used: str = ""
    processing_time: float = 0.0

    @property
    def has_text(self) -> bool:
        return bool(self.code)

    @property
    def language_name(self) -> str:
        return get_language_name(self.language)

    @property
    def formatter_parser(self) -> Optional[str]:
        return get_formatter_parser(self.language)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "language": self.language,
            "language_name": self.language_name,
            "score": self.score,
            "confidence": self.confidence,
            "formatter_parser": self.formatter_parser,
            "settings": self.settings.to_dict(),
            "engine": self.engine_used,
            "processing_time": self.processing_time,
        }


class CodeExtractor:
    """
    Extracts source code from images.

    The OCR engine is any object with ``recognize(image) -> OCRResult``.
    """

    def __init__(self, engine, history: Optional[HistoryStore] = None):
        self.engine = engine
        self.history = history

    def extract(
        self,
        image: np.ndarray,
        settings: Optional[Union[EnhancementSettings, Mapping[str, Any]]] = None
    ) -> ExtractionResult:
        """
        Extract code from an RGBA image.

        Args:
            image: RGBA pixel buffer
            settings: Enhancement settings or a mapping of them;
                defaults skip enhancement

        Returns:
            ExtractionResult (``has_text`` is False when nothing was recognized)
        """
        start = time.time()
        validate_image(image)
        if settings is None:
            settings = DEFAULT_SETTINGS
        elif isinstance(settings, Mapping):
            settings = EnhancementSettings.from_dict(settings)

        if settings.is_default():
            to_recognize = image
            enhanced = None
        else:
            enhanced = enhance(image, settings)
            to_recognize = enhanced

        ocr_result = self.engine.recognize(to_recognize)
        code = clean_ocr_text(ocr_result.text)

        if not code:
            logger.warning("No text detected in the image")
            return ExtractionResult(
                code="",
                language="plaintext",
                score=0,
                confidence=ocr_result.confidence,
                settings=settings,
                enhanced_image=enhanced,
                engine_used=ocr_result.engine_used,
                processing_time=time.time() - start,
            )

        language, score = classify(code)

        if self.history is not None:
            self.history.add(code, language)

        result = ExtractionResult(
            code=code,
            language=language,
            score=score,
            confidence=ocr_result.confidence,
            settings=settings,
            enhanced_image=enhanced,
            engine_used=ocr_result.engine_used,
            processing_time=time.time() - start,
        )
        logger.info(f"Code extracted! Detected: {result.language_name}")
        return result
