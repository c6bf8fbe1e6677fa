"""Character-offset index over a paragraph's rendered text.

WHY: Structural edits arrive as a character offset inside a paragraph's
text (the cursor position). To split words correctly we must know which
word boundary, if any, the offset corresponds to, and reject offsets
that fall inside a word rather than guess.

HOW: WordOffsetIndex.build() scans the text once and records the
``(start, end)`` character span of every whitespace-delimited token in
two parallel sorted lists. Lookups use ``bisect`` so they are O(log n)
regardless of paragraph length.

RULES:
- Tokens are maximal runs of non-whitespace characters
- An offset is on a boundary when end_i <= offset <= start_{i+1}
  (anywhere on the separating whitespace, inclusive)
- Offset 0 and offsets at/after the last token end are boundaries too,
  but not interior split points
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

_TOKEN_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class WordOffsetIndex:
    """Sorted token spans for one paragraph text."""

    text: str
    starts: Tuple[int, ...]
    ends: Tuple[int, ...]

    @classmethod
    def build(cls, text: str) -> "WordOffsetIndex":
        starts: List[int] = []
        ends: List[int] = []
        for match in _TOKEN_RE.finditer(text):
            starts.append(match.start())
            ends.append(match.end())
        return cls(text=text, starts=tuple(starts), ends=tuple(ends))

    @property
    def token_count(self) -> int:
        return len(self.starts)

    @property
    def tokens(self) -> List[str]:
        return [self.text[s:e] for s, e in zip(self.starts, self.ends)]

    def token_at(self, offset: int) -> Optional[int]:
        """Index of the token strictly containing ``offset``, else None.

        "Strictly" means the offset sits between two characters of the
        same token; offsets at a token's first or last edge are boundaries.
        """
        i = bisect.bisect_right(self.starts, offset) - 1
        if i < 0:
            return None
        if self.starts[i] < offset < self.ends[i]:
            return i
        return None

    def boundary_index(self, offset: int) -> Optional[int]:
        """Number of tokens entirely before ``offset`` when it is a boundary.

        Returns None when the offset falls inside a token or outside the
        text.
        """
        if offset < 0 or offset > len(self.text):
            return None
        if self.token_at(offset) is not None:
            return None
        return bisect.bisect_right(self.ends, offset)

    def is_split_point(self, offset: int) -> bool:
        """True when splitting here leaves at least one token on each side."""
        count = self.boundary_index(offset)
        return count is not None and 0 < count < self.token_count

    def offset_of_token(self, index: int) -> int:
        """Character offset where token ``index`` starts (text length past the end)."""
        if index >= self.token_count:
            return len(self.text)
        return self.starts[index]
