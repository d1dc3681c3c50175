"""Title matching against configured patterns."""

from __future__ import annotations

import re
from typing import Iterable


class TitleMatcher:
    """Matches feed item titles against a set of regular expressions."""

    def __init__(self, patterns: Iterable[str | re.Pattern[str]]):
        """Compile the given patterns."""
        self.patterns = [
            p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns
        ]

    def matches(self, title: str) -> bool:
        """Return True if any pattern is found anywhere in ``title``."""
        return any(pattern.search(title) for pattern in self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)
