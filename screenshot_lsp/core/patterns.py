"""Line-level detection of screenshot operations.

The matcher is regex based. It is not a parser: each line is tested against
a priority-ordered vocabulary per category and yields at most one Pattern.
Callers should only rely on :func:`analyze`, so a real tokenizer can replace
the vocabulary later without touching them.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from .types import Pattern, PatternCategory, REGION_PARAMETER_NAMES

RegexPattern = re.Pattern

CategoryVocabulary = Tuple[PatternCategory, Sequence[RegexPattern]]

# Region comes before generic capture: "captureRegion" would otherwise be
# reported by the broader capture expressions.
DEFAULT_VOCABULARY: Tuple[CategoryVocabulary, ...] = (
    (PatternCategory.REGION, (
        re.compile(r"captureRegion"),
        re.compile(r"screenshot.*region", re.IGNORECASE),
        re.compile(r"region.*capture", re.IGNORECASE),
        re.compile(r"screenshotRegion", re.IGNORECASE),
        re.compile(r"capture.*area", re.IGNORECASE),
        re.compile(r"screenshot.*area", re.IGNORECASE),
    )),
    (PatternCategory.CAPTURE, (
        re.compile(r"captureFullScreen"),
        re.compile(r"captureWindow"),
        re.compile(r"screenshot.*capture", re.IGNORECASE),
        re.compile(r"capture.*screenshot", re.IGNORECASE),
        re.compile(r"takeScreenshot", re.IGNORECASE),
        re.compile(r"getScreenshot", re.IGNORECASE),
        re.compile(r"screenshotWindow", re.IGNORECASE),
    )),
    (PatternCategory.LIST_DISPLAYS, (
        re.compile(r"listDisplays"),
        re.compile(r"getDisplays"),
        re.compile(r"displays.*list", re.IGNORECASE),
        re.compile(r"enumerate.*displays", re.IGNORECASE),
        re.compile(r"getDisplayList", re.IGNORECASE),
        re.compile(r"availableDisplays", re.IGNORECASE),
        re.compile(r"screenList", re.IGNORECASE),
    )),
    (PatternCategory.LIST_WINDOWS, (
        re.compile(r"listWindows"),
        re.compile(r"getWindows"),
        re.compile(r"windows.*list", re.IGNORECASE),
        re.compile(r"enumerate.*windows", re.IGNORECASE),
        re.compile(r"getWindowList", re.IGNORECASE),
        re.compile(r"availableWindows", re.IGNORECASE),
        re.compile(r"windowList", re.IGNORECASE),
    )),
)

_REGION_PARAMETER_PATTERNS: Dict[str, RegexPattern] = {
    name: re.compile(rf"\b{name}\s*:\s*(-?\d+)") for name in REGION_PARAMETER_NAMES
}


def extract_region_parameters(line: str) -> Optional[Dict[str, int]]:
    """Extract literal x/y/width/height values from a region capture line.

    Each name is searched independently, so any order and any subset work.
    Only integer literals are recognised; expressions and variables are
    skipped rather than guessed.

    Args:
        line: The source line already classified as a region operation

    Returns:
        Mapping of the names found to their values, or None if none were found
    """
    params: Dict[str, int] = {}
    for name, regex in _REGION_PARAMETER_PATTERNS.items():
        match = regex.search(line)
        if match:
            params[name] = int(match.group(1))
    return params or None


class PatternMatcher:
    """Classifies lines of text into screenshot operation categories."""

    def __init__(self, vocabulary: Sequence[CategoryVocabulary] = DEFAULT_VOCABULARY):
        self.vocabulary = tuple(vocabulary)

    def match_line(self, line: str, line_number: int) -> Optional[Pattern]:
        """Return the first matching Pattern for a line, or None."""
        for category, regexes in self.vocabulary:
            for regex in regexes:
                match = regex.search(line)
                if match is None:
                    continue
                parameters = None
                if category is PatternCategory.REGION:
                    parameters = extract_region_parameters(line)
                return Pattern(
                    category=category,
                    line=line_number,
                    column=match.start(),
                    matched_text=match.group(0),
                    parameters=parameters,
                )
        return None

    def analyze(self, text: str) -> List[Pattern]:
        """Detect screenshot patterns in a whole document."""
        patterns = []
        for line_number, line in enumerate(text.split("\n")):
            pattern = self.match_line(line, line_number)
            if pattern is not None:
                patterns.append(pattern)
        return patterns


_default_matcher = PatternMatcher()


def analyze(text: str) -> List[Pattern]:
    """Detect screenshot patterns using the default vocabulary."""
    return _default_matcher.analyze(text)
