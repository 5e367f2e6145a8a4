"""
Named enhancement presets for common source images.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping

from ..errors import ConfigurationError
from .images import DEFAULT_SETTINGS, EnhancementSettings

logger = logging.getLogger(__name__)


PRESETS: Mapping[str, EnhancementSettings] = MappingProxyType({
    "default": DEFAULT_SETTINGS,
    # Light text on a dark editor theme
    "dark_background": DEFAULT_SETTINGS.replace(invert=True, contrast=20),
    "low_contrast": DEFAULT_SETTINGS.replace(contrast=40, sharpness=30),
    # Small or soft text: upscale before sharpening
    "blurry": DEFAULT_SETTINGS.replace(scale=2.0, sharpness=50, contrast=20),
    "screenshot": DEFAULT_SETTINGS.replace(sharpness=20),
    "text_only": DEFAULT_SETTINGS.replace(grayscale=True, contrast=30, threshold=128),
})


def normalize_preset_name(name: str) -> str:
    """'Dark Background' / 'dark-background' -> 'dark_background'"""
    return "_".join(name.strip().lower().replace("-", " ").split())


def get_preset(name: str) -> EnhancementSettings:
    """
    Look up a preset by name.

    Args:
        name: Preset name; case, spaces and hyphens are ignored

    Returns:
        The preset's EnhancementSettings

    Raises:
        ConfigurationError: If no preset has that name
    """
    key = normalize_preset_name(name) if isinstance(name, str) else name
    try:
        return PRESETS[key]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown preset: {name!r}. Available: {', '.join(PRESETS)}",
            details={"preset": repr(name), "available": list(PRESETS)}
        ) from None


def list_presets() -> List[str]:
    return list(PRESETS)
