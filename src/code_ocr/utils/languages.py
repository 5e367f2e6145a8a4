"""
Language pattern table for source code classification.

Each supported language maps to an ordered list of regular expressions and
a weight. Higher weights mark more specific syntax (TSX/JSX, Vue, Svelte)
so it outranks broad patterns such as ``const x =``.

Table order matters: when two languages tie on score the one declared
first wins. Patterns are compiled once at import time; an invalid entry
raises ConfigurationError.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "plaintext"

# Line anchors everywhere, ASCII \w and \b, case-sensitive
PATTERN_FLAGS = re.MULTILINE | re.ASCII


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class LanguageRule:
    """Compiled detection rules for one language."""
    language: str
    patterns: Tuple["re.Pattern", ...]
    weight: int

    def count_matches(self, text: str) -> int:
        """Total non-overlapping matches across all patterns."""
        return sum(
            sum(1 for _ in pattern.finditer(text))
            for pattern in self.patterns
        )

    def score(self, text: str) -> int:
        return self.weight * self.count_matches(text)


# ============================================================================
# Rule Definitions
# ============================================================================

# (language, weight, patterns) in tie-break order
LANGUAGE_DEFINITIONS: List[Tuple[str, int, List[str]]] = [
    # TSX/JSX ahead of HTML
    ("typescriptreact", 4, [
        r"""import\s+.*from\s+['"]react['"]""",
        r"import\s+\{.*useState.*\}",
        r"import\s+\{.*useEffect.*\}",
        r"<\w+\s+className=",
        r":\s*React\.(FC|Component)",
        r"useState<\w+>",
        r"useCallback|useMemo|useRef|useContext",
        r"return\s*\(\s*<",
        r"export\s+(default\s+)?function\s+\w+",
    ]),
    ("javascriptreact", 3, [
        r"import\s+React",
        r"""from\s+['"]react['"]""",
        r"<\w+\s+className=",
        r"React\.createElement",
        r"const\s+\[\w+,\s*set\w+\]\s*=\s*useState",
    ]),
    ("typescript", 2, [
        r":\s*(string|number|boolean|any|void|never|unknown)\b",
        r"interface\s+\w+\s*\{",
        r"type\s+\w+\s*=",
        r"<\w+>\s*\(",
        r"as\s+(string|number|boolean|const)",
        r":\s*\w+\[\]",
        r"enum\s+\w+",
    ]),
    ("python", 2, [
        r"^(import|from)\s+\w+",
        r"def\s+\w+\s*\([^)]*\)\s*:",
        r"class\s+\w+.*:",
        r"print\s*\(",
        r"self\.\w+",
        r"__init__|__name__",
        r"""if\s+__name__\s*==\s*['"]__main__['"]""",
    ]),
    ("javascript", 1, [
        r"\bconst\s+\w+\s*=",
        r"\blet\s+\w+\s*=",
        r"\bvar\s+\w+\s*=",
        r"=>\s*[{(]",
        r"function\s+\w+\s*\(",
        r"\bconsole\.(log|error|warn)",
        r"require\s*\(",
        r"module\.exports",
        r"export\s+(default\s+)?",
    ]),
    ("java", 2, [
        r"public\s+(class|static|void)",
        r"private\s+\w+",
        r"System\.out\.print",
        r"new\s+\w+\(",
        r"extends\s+\w+",
        r"implements\s+\w+",
        r"@Override",
    ]),
    ("cpp", 2, [
        r"#include\s*<\w+>",
        r"std::",
        r"cout\s*<<",
        r"cin\s*>>",
        r"int\s+main\s*\(",
        r"nullptr",
        r"using\s+namespace",
    ]),
    ("c", 2, [
        r"#include\s*<\w+\.h>",
        r"printf\s*\(",
        r"scanf\s*\(",
        r"int\s+main\s*\(",
        r"malloc\s*\(",
        r"free\s*\(",
    ]),
    ("csharp", 2, [
        r"using\s+System",
        r"namespace\s+\w+",
        r"public\s+class\s+\w+",
        r"Console\.(WriteLine|ReadLine)",
        r"async\s+Task",
    ]),
    ("rust", 2, [
        r"fn\s+\w+",
        r"let\s+(mut\s+)?\w+",
        r"impl\s+\w+",
        r"pub\s+(fn|struct|enum)",
        r"println!\s*\(",
        r"use\s+\w+::",
    ]),
    ("go", 2, [
        r"package\s+\w+",
        r"func\s+\w+",
        r"import\s+\(",
        r"fmt\.(Print|Println)",
        r":=\s*",
    ]),
    # Low weight so TSX/JSX are preferred
    ("html", 1, [
        r"<!DOCTYPE\s+html",
        r"<html\b",
        r"<head\b",
        r"<body\b",
        r'class="[^"]*"',
    ]),
    ("css", 2, [
        r"\.\w+\s*\{",
        r"#\w+\s*\{",
        r":\s*(flex|grid|block|none)",
        r"(margin|padding|border|background)\s*:",
        r"@media\s+",
    ]),
    ("sql", 2, [
        r"\b(SELECT|INSERT|UPDATE|DELETE)\s+",
        r"\bFROM\s+\w+",
        r"\bWHERE\s+",
        r"CREATE\s+(TABLE|INDEX|DATABASE)",
    ]),
    ("json", 1, [
        r'^\s*\{[\s\S]*"[^"]+"\s*:',
        r"^\s*\[",
    ]),
    ("yaml", 1, [
        r"^\w+:\s*$",
        r"^\s+-\s+\w+",
    ]),
    ("ruby", 2, [
        r"def\s+\w+",
        r"\bend$",
        r"puts\s+",
        r"\.each\s+do",
    ]),
    ("php", 2, [
        r"<\?php",
        r"\$\w+\s*=",
        r"echo\s+",
    ]),
    ("swift", 2, [
        r"func\s+\w+\s*\(",
        r"var\s+\w+:\s*\w+",
        r"let\s+\w+:\s*\w+",
        r"import\s+(Foundation|UIKit|SwiftUI)",
    ]),
    ("kotlin", 2, [
        r"fun\s+\w+",
        r"val\s+\w+",
        r"var\s+\w+\s*:",
    ]),
    ("shell", 2, [
        r"^#!",
        r"\becho\s+",
        r"\$\([^)]+\)",
        r"fi$",
    ]),
    ("markdown", 1, [
        r"^#{1,6}\s+\w+",
        r"\*\*[^*]+\*\*",
        r"\[.*\]\(.*\)",
        r"```\w*",
    ]),
    ("dockerfile", 2, [
        r"^FROM\s+\w+",
        r"^RUN\s+",
        r"^CMD\s+",
        r"^EXPOSE\s+\d+",
        r"^WORKDIR\s+",
    ]),
    ("scala", 2, [
        r"def\s+\w+\s*\[",
        r"val\s+\w+\s*:",
        r"object\s+\w+",
        r"case\s+class",
        r"trait\s+\w+",
    ]),
    ("haskell", 2, [
        r"::\s*\w+(\s*->\s*\w+)+",
        r"\w+\s*=\s*do\s*$",
        r"import\s+qualified",
        r"module\s+\w+",
        r"where$",
    ]),
    ("dart", 2, [
        r"void\s+main\s*\(\)",
        r"@override",
        r"Widget\s+build",
        r"""import\s+['"]package:""",
        r"class\s+\w+\s+extends\s+(State)?less?Widget",
    ]),
    ("vue", 3, [
        r"<template>",
        r"<script\s+setup",
        r"defineComponent",
        r"ref\s*\(",
        r"computed\s*\(",
    ]),
    ("svelte", 3, [
        r'<script\s+(lang="ts")?\s*>',
        r"\$:\s*\{",
        r"<style\s+lang=",
        r"export\s+let\s+\w+",
        r"on:\w+",
    ]),
    ("lua", 2, [
        r"function\s+\w+\s*\(",
        r"local\s+\w+\s*=",
        r"end$",
        r"""require\s*\(['"]""",
        r"nil\b",
    ]),
    ("r", 2, [
        r"<-\s*",
        r"library\s*\(",
        r"function\s*\([^)]*\)\s*\{",
        r"data\.frame",
        r"ggplot\s*\(",
    ]),
    ("perl", 2, [
        r"^use\s+strict",
        r"\$\w+\s*=",
        r"my\s+\$",
        r"sub\s+\w+\s*\{",
        r"=~\s*[sm]?/",
    ]),
    ("elixir", 2, [
        r"defmodule\s+\w+",
        r"def\s+\w+\s*do",
        r"\|>\s*\w+",
        r"@spec\s+\w+",
        r"fn\s+\w+\s*->",
    ]),
    ("clojure", 2, [
        r"\(defn?\s+\w+",
        r"\(ns\s+\w+",
        r"\(let\s+\[",
        r"\(if\s+",
        r"\(fn\s+\[",
    ]),
]


# ============================================================================
# Table Construction
# ============================================================================

def build_pattern_table(
    definitions: Sequence[Tuple[str, int, Sequence[str]]],
    flags: int = PATTERN_FLAGS
) -> Tuple[LanguageRule, ...]:
    """
    Compile rule definitions into an ordered, read-only table.

    Args:
        definitions: (language, weight, patterns) tuples in tie-break order
        flags: Regex flags applied to every pattern

    Returns:
        Tuple of LanguageRule in definition order

    Raises:
        ConfigurationError: On an invalid regex, a non-positive weight,
            an empty pattern list or a duplicate language
    """
    table = []
    seen = set()

    for language, weight, patterns in definitions:
        if language in seen:
            raise ConfigurationError(
                f"Duplicate language in pattern table: {language}",
                details={"language": language}
            )
        seen.add(language)

        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise ConfigurationError(
                f"Weight for {language} must be a positive integer, got {weight!r}",
                details={"language": language, "weight": repr(weight)}
            )
        if not patterns:
            raise ConfigurationError(
                f"No patterns defined for {language}",
                details={"language": language}
            )

        compiled = []
        for source in patterns:
            try:
                compiled.append(re.compile(source, flags))
            except (re.error, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid pattern for {language}: {source!r} ({e})",
                    details={"language": language, "pattern": repr(source)}
                ) from e

        table.append(LanguageRule(language=language, patterns=tuple(compiled), weight=weight))

    logger.debug(f"Compiled pattern table with {len(table)} languages")
    return tuple(table)


LANGUAGE_PATTERNS: Tuple[LanguageRule, ...] = build_pattern_table(LANGUAGE_DEFINITIONS)


# ============================================================================
# Language Metadata
# ============================================================================

# Every language the editor can display, including ones with no detection rules
SUPPORTED_LANGUAGES: Tuple[str, ...] = (
    "plaintext", "python", "javascript", "typescript", "typescriptreact", "javascriptreact",
    "java", "cpp", "c", "csharp", "rust", "go", "swift", "kotlin",
    "html", "css", "scss", "less", "sql", "json", "yaml", "xml", "markdown",
    "ruby", "php", "perl", "lua", "r", "shell", "powershell", "dockerfile",
    "scala", "haskell", "clojure", "elixir", "dart", "groovy",
    "vue", "svelte", "graphql", "toml", "ini", "makefile",
)

LANGUAGE_NAMES: Dict[str, str] = {
    "plaintext": "Plain Text",
    "typescriptreact": "TSX",
    "javascriptreact": "JSX",
    "typescript": "TypeScript",
    "javascript": "JavaScript",
    "python": "Python",
    "cpp": "C++",
    "csharp": "C#",
    "dockerfile": "Dockerfile",
    "powershell": "PowerShell",
    "vue": "Vue",
    "svelte": "Svelte",
    "graphql": "GraphQL",
    "toml": "TOML",
    "makefile": "Makefile",
    "objectivec": "Objective-C",
    "scss": "SCSS",
    "less": "LESS",
    "ini": "INI",
}

# Formatter parser per language; absent means not formattable
FORMATTER_PARSERS: Dict[str, str] = {
    "javascript": "babel",
    "javascriptreact": "babel",
    "typescript": "babel-ts",
    "typescriptreact": "babel-ts",
    "json": "json",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "html": "html",
    "xml": "html",
    "markdown": "markdown",
}


def get_language_name(language: str) -> str:
    """Display name for a language tag."""
    if language in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[language]
    return language[:1].upper() + language[1:]


def get_formatter_parser(language: str) -> Optional[str]:
    return FORMATTER_PARSERS.get(language)
