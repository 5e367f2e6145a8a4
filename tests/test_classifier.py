"""
Tests for the language pattern table and classifier.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


REACT_SNIPPET = (
    'import { useState } from "react";\n'
    '\n'
    'function foo() { return <div className="x">hi</div>; }\n'
)

PYTHON_SNIPPET = '''import os

class Greeter:
    def __init__(self, name):
        self.name = name

    def greet(self):
        print(f"Hello {self.name}")

if __name__ == "__main__":
    Greeter("x").greet()
'''

GO_SNIPPET = '''package main

import "fmt"

func main() {
    x := 42
    fmt.Println(x)
}
'''

DOCKERFILE_SNIPPET = '''FROM python:3.11-slim
WORKDIR /app
RUN pip install -r requirements.txt
EXPOSE 8000
CMD ["python", "app.py"]
'''


class TestPatternTable:
    """Test the static pattern table."""

    def test_table_order(self):
        """Declaration order is the tie-break order."""
        from code_ocr.utils.languages import LANGUAGE_PATTERNS

        languages = [rule.language for rule in LANGUAGE_PATTERNS]

        assert len(languages) == 33
        assert languages[:5] == [
            "typescriptreact", "javascriptreact", "typescript", "python", "javascript"
        ]
        assert languages[-1] == "clojure"
        assert languages.index("typescriptreact") < languages.index("html")

    def test_weights(self):
        from code_ocr.utils.languages import LANGUAGE_PATTERNS

        weights = {rule.language: rule.weight for rule in LANGUAGE_PATTERNS}

        assert weights["typescriptreact"] == 4
        assert weights["javascriptreact"] == 3
        assert weights["javascript"] == 1
        assert weights["html"] == 1
        assert all(w > 0 for w in weights.values())

    def test_rule_languages_are_supported(self):
        from code_ocr.utils.languages import LANGUAGE_PATTERNS, SUPPORTED_LANGUAGES

        for rule in LANGUAGE_PATTERNS:
            assert rule.language in SUPPORTED_LANGUAGES

    def test_invalid_regex(self):
        """A malformed pattern fails at load time."""
        from code_ocr.utils.languages import build_pattern_table
        from code_ocr.errors import ConfigurationError

        with pytest.raises(ConfigurationError) as exc_info:
            build_pattern_table([("broken", 1, [r"valid", r"(unclosed"])])

        assert exc_info.value.details["language"] == "broken"

    @pytest.mark.parametrize("definitions", [
        [("zero", 0, [r"x"])],
        [("negative", -2, [r"x"])],
        [("fractional", 1.5, [r"x"])],
        [("empty", 1, [])],
        [("dup", 1, [r"x"]), ("dup", 2, [r"y"])],
    ])
    def test_bad_definitions(self, definitions):
        from code_ocr.utils.languages import build_pattern_table
        from code_ocr.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            build_pattern_table(definitions)

    def test_count_matches_counts_every_occurrence(self):
        from code_ocr.utils.languages import build_pattern_table

        (rule,) = build_pattern_table([("demo", 3, [r"foo", r"bar"])])

        assert rule.count_matches("foo bar foo foofoo") == 5
        assert rule.score("foo bar foo foofoo") == 15

    def test_language_names(self):
        from code_ocr.utils.languages import get_language_name

        assert get_language_name("typescriptreact") == "TSX"
        assert get_language_name("cpp") == "C++"
        assert get_language_name("plaintext") == "Plain Text"
        assert get_language_name("rust") == "Rust"
        assert get_language_name("") == ""

    def test_formatter_parsers(self):
        from code_ocr.utils.languages import get_formatter_parser

        assert get_formatter_parser("typescriptreact") == "babel-ts"
        assert get_formatter_parser("javascript") == "babel"
        assert get_formatter_parser("xml") == "html"
        assert get_formatter_parser("python") is None


class TestClassifier:
    """Test language classification."""

    def test_fallback_on_empty(self):
        from code_ocr.utils.classifier import classify

        assert classify("") == ("plaintext", 0)

    def test_fallback_on_prose(self):
        from code_ocr.utils.classifier import classify

        result = classify("The quick brown fox jumps over the lazy dog")

        assert result.language == "plaintext"
        assert result.score == 0
        assert result.is_fallback

    def test_never_raises_on_non_string(self):
        from code_ocr.utils.classifier import classify

        assert classify(None) == ("plaintext", 0)
        assert classify(12345) == ("plaintext", 0)

    def test_result_unpacks(self):
        from code_ocr.utils.classifier import classify

        language, score = classify(PYTHON_SNIPPET)

        assert language == "python"
        assert score == 20

    def test_react_snippet_prefers_tsx(self):
        """Specific JSX syntax outranks the generic JavaScript patterns."""
        from code_ocr.utils.classifier import classify, score_languages

        result = classify(REACT_SNIPPET)
        scores = score_languages(REACT_SNIPPET)

        assert result.language == "typescriptreact"
        assert result.score == 12
        assert scores["javascript"] == 1
        assert result.score > scores["javascript"]
        assert scores["javascriptreact"] == 6

    @pytest.mark.parametrize("text,expected", [
        (GO_SNIPPET, "go"),
        (DOCKERFILE_SNIPPET, "dockerfile"),
        ("SELECT id, name FROM users WHERE id = 1;", "sql"),
        ("const [count, setCount] = useState(0);", "javascriptreact"),
        ('#include <stdio.h>\nint main() { printf("hi"); }', "c"),
    ])
    def test_detects_language(self, text, expected):
        from code_ocr.utils.classifier import detect_language

        assert detect_language(text) == expected

    def test_patterns_are_case_sensitive(self):
        """Lowercase SQL keywords do not match the SQL rules."""
        from code_ocr.utils.classifier import score_languages

        assert score_languages("select id from users where id = 1")["sql"] == 0

    @pytest.mark.parametrize("newline", ["\n", "\r\n", "\r", "\u2028"])
    def test_line_endings_do_not_change_result(self, newline):
        """End-anchored rules match whatever the line terminator."""
        from code_ocr.utils.classifier import classify, score_languages

        text = newline.join(["x = 1", "end", "end", ""])
        scores = score_languages(text)

        assert classify(text) == ("ruby", 4)
        assert scores["lua"] == 4

    def test_crlf_shell_script(self):
        from code_ocr.utils.classifier import score_languages

        lf = 'if [ -f x ]; then\n  echo "yes"\nfi\n'

        assert score_languages(lf.replace("\n", "\r\n")) == score_languages(lf)
        assert score_languages(lf)["shell"] == 4

    def test_unicode_spaces_count_as_whitespace(self):
        from code_ocr.utils.classifier import classify, normalize_text

        assert normalize_text("import\u00a0os\u2009x") == "import os x"
        assert classify("import\u00a0os") == ("python", 2)
        assert classify("from\u3000typing import List") == ("python", 2)

    def test_score_languages_covers_table(self):
        from code_ocr.utils.classifier import score_languages
        from code_ocr.utils.languages import LANGUAGE_PATTERNS

        scores = score_languages("")

        assert list(scores) == [rule.language for rule in LANGUAGE_PATTERNS]
        assert set(scores.values()) == {0}

    def test_monotonic_weighting(self):
        """More matches never lower a language's score."""
        from code_ocr.utils.classifier import score_languages

        fewer = score_languages("print(1)\n")
        more = score_languages("print(1)\nprint(2)\nprint(3)\n")

        assert more["python"] > fewer["python"]
        assert more["python"] == 3 * fewer["python"]

    def test_tie_break_uses_table_order(self):
        from code_ocr.utils.classifier import classify
        from code_ocr.utils.languages import build_pattern_table

        forward = build_pattern_table([("alpha", 1, [r"foo"]), ("beta", 1, [r"foo"])])
        backward = build_pattern_table([("beta", 1, [r"foo"]), ("alpha", 1, [r"foo"])])

        results = {classify("foo foo", forward) for _ in range(10)}
        assert results == {("alpha", 2)}
        assert classify("foo foo", backward) == ("beta", 2)

    def test_weight_breaks_equal_counts(self):
        from code_ocr.utils.classifier import classify
        from code_ocr.utils.languages import build_pattern_table

        table = build_pattern_table([("broad", 1, [r"x"]), ("specific", 3, [r"x"])])

        assert classify("x", table) == ("specific", 3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
