"""
Heuristic language classification for recognized source code.

Every language in the pattern table is scored as
``weight * total pattern matches``. The highest score wins; ties go to the
language declared first in the table. Text with no matches at all is
classified as plaintext with score 0.
"""

import logging
import re
from typing import Dict, NamedTuple, Optional, Sequence

from .languages import FALLBACK_LANGUAGE, LANGUAGE_PATTERNS, LanguageRule

logger = logging.getLogger(__name__)


class ClassificationResult(NamedTuple):
    """Winning language tag and its score."""
    language: str
    score: int

    @property
    def is_fallback(self) -> bool:
        return self.score == 0


FALLBACK_RESULT = ClassificationResult(FALLBACK_LANGUAGE, 0)

# CR, CRLF and Unicode line separators all end a line for the anchors
_LINE_BREAKS = re.compile(r"\r\n?|[\u2028\u2029]")
# Unicode spaces OCR emits (NBSP, thin space, ...); patterns use ASCII \s
_UNICODE_SPACES = re.compile(r"[\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000\ufeff]")


def normalize_text(text: str) -> str:
    """Map line breaks to ``\\n`` and Unicode spaces to a plain space."""
    text = _LINE_BREAKS.sub("\n", text)
    return _UNICODE_SPACES.sub(" ", text)


def score_languages(
    text: str,
    table: Optional[Sequence[LanguageRule]] = None
) -> Dict[str, int]:
    """
    Score text against every language in the table.

    Args:
        text: Recognized text
        table: Compiled rules; defaults to the shipped pattern table

    Returns:
        Mapping of language tag to score, in table order
    """
    if table is None:
        table = LANGUAGE_PATTERNS
    if not isinstance(text, str) or not text:
        return {rule.language: 0 for rule in table}
    text = normalize_text(text)
    return {rule.language: rule.score(text) for rule in table}


def classify(
    text: str,
    table: Optional[Sequence[LanguageRule]] = None
) -> ClassificationResult:
    """
    Pick the best-matching language for a block of text.

    Never raises; returns ``("plaintext", 0)`` when nothing matches.

    Args:
        text: Recognized text
        table: Compiled rules; defaults to the shipped pattern table

    Returns:
        ClassificationResult(language, score)
    """
    scores = score_languages(text, table)

    best = FALLBACK_RESULT
    for language, score in scores.items():
        # Strict comparison keeps the earlier language on ties
        if score > best.score:
            best = ClassificationResult(language, score)

    if best.is_fallback:
        logger.debug("No language patterns matched; using plaintext")
    else:
        runner_up = sorted(scores.values(), reverse=True)[1:2]
        logger.debug(
            f"Detected {best.language} (score={best.score}, "
            f"next={runner_up[0] if runner_up else 0})"
        )
    return best


def detect_language(text: str) -> str:
    """Language tag only; see :func:`classify`."""
    return classify(text).language
