"""
Code OCR
========

Extracts source code from images.

Main components:
- Image enhancement (grayscale, brightness/contrast, threshold, invert, sharpen)
- Enhancement presets
- Tesseract OCR adapter
- Heuristic programming language classification
- Extraction history
"""

__version__ = "1.0.0"
__author__ = "Code OCR Team"
