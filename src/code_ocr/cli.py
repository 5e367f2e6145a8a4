#!/usr/bin/env python
"""
Command-line interface for Code OCR.

Usage:
    code-ocr --input <image> [options]
    code-ocr --text <file> [options]

Examples:
    # Extract code from a screenshot
    code-ocr --input snippet.png

    # Dark editor theme screenshot, save the JSON result
    code-ocr --input snippet.png --preset dark_background --output result.json

    # Image piped from the clipboard
    xclip -selection clipboard -t image/png -o | code-ocr --input -

    # Classify an existing text file without OCR
    code-ocr --text snippet.txt
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from code_ocr import __version__
from code_ocr.config import AppConfig, get_config, check_tesseract_available, JSON_SCHEMA_VERSION
from code_ocr.errors import CodeOCRError, InvalidInputError

logger = logging.getLogger("code_ocr")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="code-ocr",
        description="Code OCR - Extract source code from images and detect its language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Extract code from a screenshot:
    code-ocr --input snippet.png

  Light text on a dark background:
    code-ocr --input snippet.png --preset dark_background

  Tune enhancement by hand and keep the enhanced image:
    code-ocr --input snippet.png --scale 2 --sharpness 40 --save-enhanced enhanced.png

  Classify a text file:
    code-ocr --text snippet.txt
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input", "-i",
        help="Input image file, or - to read image bytes from stdin"
    )
    source.add_argument(
        "--text", "-t",
        help="Text file to classify (skips enhancement and OCR)"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the result as JSON to this path"
    )

    # Enhancement
    enhancement = parser.add_argument_group("enhancement")
    enhancement.add_argument(
        "--preset", "-p",
        default=None,
        help="Enhancement preset (see --list-presets)"
    )
    enhancement.add_argument("--brightness", type=int, default=None, help="-100 to 100")
    enhancement.add_argument("--contrast", type=int, default=None, help="-100 to 100")
    enhancement.add_argument("--sharpness", type=int, default=None, help="0 to 100")
    enhancement.add_argument("--scale", type=float, default=None, help="1.0 to 4.0")
    enhancement.add_argument("--threshold", type=int, default=None, help="0 (off) to 255")
    enhancement.add_argument("--grayscale", action="store_true", default=None, help="Convert to grayscale")
    enhancement.add_argument("--invert", action="store_true", default=None, help="Invert colours")
    enhancement.add_argument(
        "--save-enhanced",
        default=None,
        help="Save the enhanced image to this path"
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="Tesseract language (default: eng)"
    )

    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not record this extraction in the history file"
    )

    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List enhancement presets and exit"
    )

    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported languages and exit"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_settings(args, config: AppConfig):
    """Preset first, then any per-setting overrides."""
    from code_ocr.utils.presets import get_preset

    settings = get_preset(args.preset or config.enhancement.default_preset)

    overrides = {
        name: getattr(args, name)
        for name in ("brightness", "contrast", "sharpness", "scale", "threshold", "grayscale", "invert")
        if getattr(args, name) is not None
    }
    if overrides:
        settings = settings.replace(**overrides)
    return settings


def list_presets() -> int:
    from code_ocr.utils.images import DEFAULT_SETTINGS
    from code_ocr.utils.presets import PRESETS

    defaults = DEFAULT_SETTINGS.to_dict()
    for name, settings in PRESETS.items():
        changed = {k: v for k, v in settings.to_dict().items() if v != defaults[k]}
        described = ", ".join(f"{k}={v}" for k, v in changed.items()) or "no changes"
        print(f"{name:<16} {described}")
    return 0


def list_languages() -> int:
    from code_ocr.utils.languages import SUPPORTED_LANGUAGES, get_language_name, get_formatter_parser

    for language in SUPPORTED_LANGUAGES:
        parser = get_formatter_parser(language)
        suffix = f" (formatter: {parser})" if parser else ""
        print(f"{language:<16} {get_language_name(language)}{suffix}")
    return 0


def run_classification(args) -> int:
    """Classify a text file."""
    from code_ocr.utils.io import load_text, save_json
    from code_ocr.utils.ocr_text import clean_ocr_text
    from code_ocr.utils.classifier import classify, score_languages
    from code_ocr.utils.languages import get_language_name

    code = clean_ocr_text(load_text(args.text))
    language, score = classify(code)
    scores = {lang: s for lang, s in score_languages(code).items() if s > 0}

    if args.output:
        save_json({
            "schema_version": JSON_SCHEMA_VERSION,
            "source": str(args.text),
            "language": language,
            "language_name": get_language_name(language),
            "score": score,
            "scores": scores,
        }, args.output)
        logger.info(f"Saved JSON: {args.output}")

    if not args.quiet:
        print(f"{language}\t{get_language_name(language)}\tscore={score}")

    return 0


def read_input_image(source: str):
    """Load ``source`` as RGBA; ``-`` reads encoded image bytes from stdin."""
    from code_ocr.utils.io import IMAGE_EXTENSIONS, decode_image, is_image_file, load_image

    if source == "-":
        return decode_image(sys.stdin.buffer.read())

    if not is_image_file(source):
        raise InvalidInputError(
            f"Unsupported image type: {source}",
            details={"supported": list(IMAGE_EXTENSIONS)}
        )
    return load_image(source)


def run_pipeline(args, config: AppConfig) -> int:
    """Enhance, OCR and classify one image."""
    from code_ocr.utils.io import save_image, save_json
    from code_ocr.utils.ocr_text import TesseractEngine
    from code_ocr.utils.history import HistoryStore
    from code_ocr.utils.extractor import CodeExtractor

    start_time = time.time()

    source = "<stdin>" if args.input == "-" else args.input
    image = read_input_image(args.input)
    logger.info(f"Loaded image {source} ({image.shape[1]}x{image.shape[0]})")

    if not check_tesseract_available(config.ocr.tesseract_cmd):
        logger.error("Tesseract is not available. Install pytesseract and the tesseract-ocr binary.")
        return 1

    settings = build_settings(args, config)

    engine = TesseractEngine(
        language=args.lang or config.ocr.tesseract_lang,
        config=config.ocr.tesseract_config,
        tesseract_cmd=config.ocr.tesseract_cmd,
        compute_confidence=config.ocr.compute_confidence
    )

    history = None
    if config.history.enabled and not args.no_history:
        history = HistoryStore(
            config.history.path,
            max_items=config.history.max_items,
            preview_length=config.history.preview_length
        )

    extractor = CodeExtractor(engine, history=history)
    result = extractor.extract(image, settings)

    if args.save_enhanced:
        enhanced = result.enhanced_image if result.enhanced_image is not None else image
        save_image(enhanced, args.save_enhanced)
        logger.info(f"Saved enhanced image: {args.save_enhanced}")

    if args.output:
        data = result.to_dict()
        data["schema_version"] = JSON_SCHEMA_VERSION
        data["source"] = source
        save_json(data, args.output)
        logger.info(f"Saved JSON: {args.output}")

    if not result.has_text:
        logger.error("No text detected in the image")
        return 1

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "="*60)
        print(result.code)
        print("="*60)
        print(f"Source: {source}")
        print(f"Language: {result.language_name} ({result.language}, score={result.score})")
        print(f"OCR confidence: {result.confidence:.2%}")
        print(f"Processing time: {elapsed:.2f}s")
        print("="*60)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if args.list_presets:
        return list_presets()
    if args.list_languages:
        return list_languages()

    if not args.input and not args.text:
        parser.error("one of --input or --text is required")

    config = get_config()

    try:
        if args.text:
            return run_classification(args)
        return run_pipeline(args, config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except CodeOCRError as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 2
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose or config.debug_mode:
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
