"""Token-frequency comparison of two linearized documents.

A line is worth showing when it holds a word whose overall frequency changed
between the old and the new text, or when only one side has content at that
index. Lines whose token sequence appears verbatim anywhere in the other
document are treated as boilerplate and cleared before counting.

Known limitation: that clearing cannot tell a moved paragraph from a
duplicated one, so an unmodified paragraph that merely changed position does
not show up at all.
"""
from __future__ import annotations
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

PUNCTUATION_RE = re.compile(r"[,，。\"'“”‘’.]")

OLD = "old"
NEW = "new"

# word colour intensity: BASE + (1 - BASE) * (1 - 1 / (1 + K * |delta|))
INTENSITY_BASE = 0.4
INTENSITY_K = 0.2


@dataclass
class Token:
    display: str
    key: str


@dataclass
class Line:
    tokens: List[Token] = field(default_factory=list)

    @property
    def keys(self) -> List[str]:
        return [t.key for t in self.tokens]


def tokenize_line(line: str) -> Line:
    parts = PUNCTUATION_RE.sub(" ", line.rstrip()).split()
    return Line([Token(display=p, key=p.casefold()) for p in parts])


def parse_text(text: str) -> List[Line]:
    return [tokenize_line(line) for line in text.split("\n")]


def clear_shared_lines(old: List[Line], new: List[Line]) -> None:
    """Blank every line whose token keys match some line of the other document.

    Exhaustive all-pairs scan; a line that recurs several times is cleared
    wherever it recurs.
    """
    for a in old:
        for b in new:
            if not a.tokens or not b.tokens:
                continue
            if a.keys == b.keys:
                a.tokens = []
                b.tokens = []


def word_intensity(delta: int, base: float = INTENSITY_BASE, k: float = INTENSITY_K) -> float:
    return base + (1 - base) * (1 - 1 / (1 + k * abs(delta)))


@dataclass(frozen=True)
class SkipMarker:
    """Stands for one or more consecutive skipped lines."""
    skipped: int


@dataclass
class DiffReport:
    old_lines: List[Line]
    new_lines: List[Line]
    old_freq: Counter
    new_freq: Counter
    selected: List[int]

    @property
    def is_empty(self) -> bool:
        return not self.selected

    def line(self, side: str, index: int) -> Optional[Line]:
        lines = self.old_lines if side == OLD else self.new_lines
        return lines[index] if index < len(lines) else None

    def delta(self, side: str, key: str) -> int:
        """How much more often ``key`` occurs on ``side`` than on the other side."""
        if side == OLD:
            return self.old_freq[key] - self.new_freq[key]
        return self.new_freq[key] - self.old_freq[key]

    def tint_weight(self, side: str, index: int) -> int:
        """Sum of positive deltas on that half of the row; zero means no tint."""
        line = self.line(side, index)
        if line is None:
            return 0
        return sum(max(self.delta(side, t.key), 0) for t in line.tokens)

    def token_intensity(self, side: str, token: Token) -> Optional[float]:
        """Colour intensity for a word that became more frequent on ``side``, else ``None``."""
        d = self.delta(side, token.key)
        if d <= 0:
            return None
        return word_intensity(d)

    def rows(self) -> Iterator[Union[int, SkipMarker]]:
        """Selected line indices with one ``SkipMarker`` per run of skipped lines in front of them."""
        prev = -1
        for index in self.selected:
            if index > prev + 1:
                yield SkipMarker(skipped=index - prev - 1)
            yield index
            prev = index


def _side_changed(tokens: List[Token], own: Counter, other: Counter) -> bool:
    return any(own[t.key] > other[t.key] for t in tokens)


def analyze(old_text: str, new_text: str) -> DiffReport:
    old_lines = parse_text(old_text)
    new_lines = parse_text(new_text)
    clear_shared_lines(old_lines, new_lines)

    old_freq: Counter = Counter(t.key for line in old_lines for t in line.tokens)
    new_freq: Counter = Counter(t.key for line in new_lines for t in line.tokens)

    selected: List[int] = []
    for i in range(max(len(old_lines), len(new_lines))):
        old_tokens = old_lines[i].tokens if i < len(old_lines) else []
        new_tokens = new_lines[i].tokens if i < len(new_lines) else []
        changed = (
            _side_changed(old_tokens, old_freq, new_freq)
            or _side_changed(new_tokens, new_freq, old_freq)
        )
        if changed or (not old_tokens) != (not new_tokens):
            selected.append(i)

    return DiffReport(old_lines, new_lines, old_freq, new_freq, selected)
