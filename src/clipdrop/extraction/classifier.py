# ABOUTME: Ordered regex rules that map clipboard text to a content label
# ABOUTME: First matching rule wins; anything unmatched is plain text

import re

from clipdrop.extraction.models import ContentLabel
from clipdrop.utils.logging import get_logger

# Order matters: earlier rules shadow later ones.
RULES: tuple[tuple[ContentLabel, re.Pattern[str]], ...] = (
    (ContentLabel.CS, re.compile(r"(using\s+[\w\.]+;|namespace\s+\w+)")),
    (ContentLabel.JSON, re.compile(r"^\s*(\{|\[).*(\}|\])\s*$", re.DOTALL)),
    (ContentLabel.JAVA, re.compile(r"(public\s+class|import\s+java\.|System\.out\.println)")),
    (
        ContentLabel.PY,
        re.compile(r"(def\s+\w+\(.*\):|import\s+\w+|if\s+__name__\s*==\s*['\"]__main__['\"])"),
    ),
    (ContentLabel.HTML, re.compile(r"<!DOCTYPE\s+html>|<html>|<body>", re.IGNORECASE)),
    (ContentLabel.CSS, re.compile(r"(\w+\s*\{\s*\w+:|\w+\s*:\s*\w+;)")),
    (ContentLabel.JS, re.compile(r"(function\s+\w+\(.*\)|let\s+\w+\s*=|const\s+\w+\s*=|var\s+\w+\s*=)")),
    (ContentLabel.XML, re.compile(r"<\?xml\s+version=|<\w+>\s*</\w+>")),
    (ContentLabel.SQL, re.compile(r"(SELECT\s+.*\s+FROM|CREATE\s+TABLE|INSERT\s+INTO)", re.IGNORECASE)),
    (ContentLabel.URL, re.compile(r"^https?:/", re.IGNORECASE)),
)

SELF_TEST_CASES: dict[ContentLabel, str] = {
    ContentLabel.CS: "using System; class Program { static void Main() { } }",
    ContentLabel.JSON: '{ "name": "John", "age": 30 }',
    ContentLabel.JAVA: 'public class Main { public static void main(String[] args) { System.out.println("Hi"); } }',
    ContentLabel.PY: "def hello(): print('Hello, World!')\n\nif __name__ == '__main__':\n    hello()",
    ContentLabel.HTML: "<!DOCTYPE html><html><body><h1>Hello, World!</h1></body></html>",
    ContentLabel.CSS: "body { font-family: Arial; color: #333; }",
    ContentLabel.JS: "function greet(name) { console.log(`Hello, ${name}!`); }",
    ContentLabel.XML: '<?xml version="1.0" encoding="UTF-8"?><root><element>Content</element></root>',
    ContentLabel.SQL: "SELECT * FROM users WHERE age > 18;",
    ContentLabel.URL: "https://www.example.com/yooo/?asd=asd",
    ContentLabel.TXT: "This is just some plain text.",
}


def classify(text: str, rules: tuple[tuple[ContentLabel, re.Pattern[str]], ...] = RULES) -> ContentLabel:
    """Return the label of the first rule whose pattern matches anywhere in ``text``."""
    for label, pattern in rules:
        if pattern.search(text):
            return label
    return ContentLabel.TXT


class ContentClassifier:
    """Classifier bound to a rule table that checks itself against known samples on creation."""

    def __init__(self, rules: tuple[tuple[ContentLabel, re.Pattern[str]], ...] = RULES):
        self.rules = rules
        self.logger = get_logger(__name__)
        self.mismatches = self.self_test()

    def classify(self, text: str) -> ContentLabel:
        return classify(text, self.rules)

    def self_test(self) -> dict[ContentLabel, ContentLabel]:
        """Classify the built-in samples, logging every sample that lands on the wrong label.

        Returns:
            Mapping of expected label -> label actually produced, for mismatches only
        """
        mismatches: dict[ContentLabel, ContentLabel] = {}
        for expected, sample in SELF_TEST_CASES.items():
            actual = self.classify(sample)
            if actual != expected:
                mismatches[expected] = actual
                self.logger.warning(
                    "Classifier self-test mismatch", expected=expected.value, actual=actual.value, sample=sample
                )
        return mismatches
