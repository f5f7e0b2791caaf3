"""
Approximate Matcher

Scores one query string against one field value and reports which
characters of the field value matched.

Algorithm:
1. Bitap (shift-or) scan with Levenshtein error levels. For each error level
   e = 0, 1, ... a right-to-left bit-parallel pass finds every start position
   where the pattern occurs with at most e edits. Each hit is scored as
   ``e / len(pattern) + |start - location| / distance`` and the lowest score
   within the acceptance threshold wins. Levels stop as soon as ``e / len``
   alone can no longer beat the best hit.
2. Alignment. An edit-distance table between the pattern and the text window
   at the winning start yields the exact edits and, via traceback, which text
   characters matched pattern characters. Equal-cost alignments are resolved
   towards the longest contiguous run. A hit whose runs are all shorter than
   ``min_match_char_length`` is dropped and the next-best hit is tried.
3. Run bonus. The error term is discounted by the longest contiguous run of
   matched characters, so "pottr" against "potter" beats a scattered match
   with the same edit count.

Distance polarity: 0.0 is an exact match at the expected location, 1.0 is the
worst. Comparison is case-insensitive; accents are NOT folded.

Patterns Applied:
- Frozen config dataclass validated at construction
- Pure, stateless matching (safe to share across threads)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.core.exceptions import ConfigurationError
from src.search.models import IndexRange, MatchResult

# =============================================================================
# Constants
# =============================================================================

DEFAULT_LOCATION: int = 0
DEFAULT_DISTANCE: int = 100
DEFAULT_THRESHOLD: float = 0.6
DEFAULT_MIN_MATCH_CHAR_LENGTH: int = 2
DEFAULT_MAX_PATTERN_LENGTH: int = 64
DEFAULT_RUN_BONUS: float = 0.25


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class MatcherConfig:
    """Tuning knobs for the approximate matcher.

    Attributes:
        location: Expected start offset of a match within a field value
        distance: How far from ``location`` a match may drift before the
            proximity penalty alone reaches 1.0 (0 means exact location only)
        threshold: Default acceptance threshold when the caller gives none
        min_match_char_length: Shortest contiguous run reported as a span;
            a match must contain at least one such run
        max_pattern_length: Longest query (in characters) the matcher accepts
        run_bonus: Fraction of the error term forgiven for a fully
            contiguous match, in [0, 1]
    """

    location: int = DEFAULT_LOCATION
    distance: int = DEFAULT_DISTANCE
    threshold: float = DEFAULT_THRESHOLD
    min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH
    max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH
    run_bonus: float = DEFAULT_RUN_BONUS

    def __post_init__(self) -> None:
        if self.location < 0:
            raise ConfigurationError(f"location must be >= 0, got {self.location}")
        if self.distance < 0:
            raise ConfigurationError(f"distance must be >= 0, got {self.distance}")
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.min_match_char_length < 1:
            raise ConfigurationError(
                f"min_match_char_length must be >= 1, got {self.min_match_char_length}"
            )
        if self.max_pattern_length < 1:
            raise ConfigurationError(
                f"max_pattern_length must be >= 1, got {self.max_pattern_length}"
            )
        if not 0.0 <= self.run_bonus <= 1.0:
            raise ConfigurationError(f"run_bonus must be within [0, 1], got {self.run_bonus}")


# =============================================================================
# Helpers
# =============================================================================


def fold_case(text: str) -> str:
    """Lowercase ``text`` without changing its length.

    Characters whose lowercase form is longer than one codepoint (e.g. U+0130)
    are kept as-is so offsets into the folded text stay valid for the original.
    """
    folded = text.lower()
    if len(folded) == len(text):
        return folded
    return "".join(_fold_char(ch) for ch in text)


def _fold_char(ch: str) -> str:
    lowered = ch.lower()
    return lowered if len(lowered) == 1 else ch


def _contiguous_ranges(positions: Iterable[int]) -> list[IndexRange]:
    """Collapse sorted positions into half-open [start, end) ranges."""
    ranges: list[IndexRange] = []
    start = end = -1
    for pos in positions:
        if pos == end:
            end += 1
            continue
        if start >= 0:
            ranges.append((start, end))
        start, end = pos, pos + 1
    if start >= 0:
        ranges.append((start, end))
    return ranges


@dataclass(frozen=True, slots=True)
class PreparedPattern:
    """A case-folded query with its Bitap alphabet, reusable across fields."""

    text: str
    alphabet: dict[str, int]

    @classmethod
    def from_query(cls, query: str) -> PreparedPattern:
        pattern = fold_case(query)
        size = len(pattern)
        alphabet: dict[str, int] = {}
        for i, ch in enumerate(pattern):
            alphabet[ch] = alphabet.get(ch, 0) | (1 << (size - i - 1))
        return cls(text=pattern, alphabet=alphabet)

    def __len__(self) -> int:
        return len(self.text)


# =============================================================================
# Matcher
# =============================================================================


class Matcher:
    """Bitap-based approximate substring matcher.

    Stateless after construction; one instance can serve concurrent callers.

    Example:
        >>> matcher = Matcher()
        >>> result = matcher.match("Pottr", "Harry Potter", threshold=0.3)
        >>> result.spans
        ((6, 10),)
    """

    __slots__ = ("config",)

    def __init__(self, config: MatcherConfig | None = None) -> None:
        self.config = config or MatcherConfig()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def prepare(self, query: str) -> PreparedPattern:
        """Fold and pre-compute the Bitap alphabet for ``query``."""
        return PreparedPattern.from_query(query)

    def match(
        self,
        query: str,
        candidate: str,
        threshold: float | None = None,
    ) -> MatchResult | None:
        """Match ``query`` against ``candidate``.

        Args:
            query: The user's query text
            candidate: One field value
            threshold: Maximum acceptable distance (defaults to config.threshold)

        Returns:
            MatchResult, or None when the candidate holds no plausible occurrence
        """
        if not query or not candidate:
            return None
        return self.match_prepared(self.prepare(query), fold_case(candidate), threshold)

    def match_prepared(
        self,
        pattern: PreparedPattern,
        text: str,
        threshold: float | None = None,
    ) -> MatchResult | None:
        """Match a prepared pattern against already case-folded text.

        Returns:
            MatchResult with spans as offsets into ``text``, or None
        """
        limit = self.config.threshold if threshold is None else threshold
        if not self.within_budget(len(pattern), len(text), limit):
            return None

        best = self._bitap(pattern, text, limit)
        if best is None:
            return None
        result = self._evaluate(pattern, text, *best)
        if result is not None:
            return result

        # Best hit has no run of min_match_char_length; try the others in score order.
        for hit in self._ranked_hits(pattern, text, limit):
            if hit == best:
                continue
            result = self._evaluate(pattern, text, *hit)
            if result is not None:
                return result
        return None

    def within_budget(self, pattern_len: int, text_len: int, threshold: float) -> bool:
        """Cheap rejection for queries that cannot match a text of this length.

        A pattern longer than the text needs at least one edit per missing
        character, which alone may exceed the threshold.
        """
        if pattern_len == 0 or text_len == 0:
            return False
        if pattern_len > self.config.max_pattern_length:
            return False
        shortfall = pattern_len - text_len
        return shortfall <= 0 or shortfall / pattern_len <= threshold

    def could_match(
        self,
        pattern: PreparedPattern,
        text_chars: frozenset[str],
        text_len: int,
        threshold: float,
    ) -> bool:
        """Character-set pre-filter; False only when a match is impossible.

        Every pattern character absent from the text costs at least one edit,
        so too many absentees push the error term alone past ``threshold``.
        """
        if not self.within_budget(len(pattern), text_len, threshold):
            return False
        missing = sum(1 for ch in pattern.text if ch not in text_chars)
        if missing == len(pattern):
            return False
        return missing / len(pattern) <= threshold

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def _expected_location(self, text_len: int) -> int:
        return max(0, min(self.config.location, text_len))

    def _proximity(self, start: int, text_len: int) -> float:
        offset = abs(self._expected_location(text_len) - start)
        if self.config.distance == 0:
            return 0.0 if offset == 0 else 1.0
        return offset / self.config.distance

    def _base_score(self, errors: int, pattern_len: int, start: int, text_len: int) -> float:
        return errors / pattern_len + self._proximity(start, text_len)

    def _evaluate(
        self,
        pattern: PreparedPattern,
        text: str,
        start: int,
        bitap_errors: int,
    ) -> MatchResult | None:
        """Align one Bitap hit and score it; None if it has no long enough run."""
        errors, positions = self._align(pattern.text, text, start, bitap_errors)
        if not positions:
            return None
        ranges = [(start + s, start + e) for s, e in _contiguous_ranges(positions)]
        longest_run = max(e - s for s, e in ranges)
        min_run = min(self.config.min_match_char_length, len(pattern))
        if longest_run < min_run:
            return None

        distance = self._final_score(errors, len(pattern), start, len(text), longest_run)
        spans = tuple(r for r in ranges if r[1] - r[0] >= min_run)
        return MatchResult(distance=distance, spans=spans)

    def _final_score(
        self,
        errors: int,
        pattern_len: int,
        start: int,
        text_len: int,
        longest_run: int,
    ) -> float:
        accuracy = errors / pattern_len
        discount = 1.0 - self.config.run_bonus * longest_run / pattern_len
        score = accuracy * discount + self._proximity(start, text_len)
        return min(1.0, max(0.0, score))

    # -------------------------------------------------------------------------
    # Bitap scan
    # -------------------------------------------------------------------------

    @staticmethod
    def _bitap_level(
        pattern: PreparedPattern,
        text: str,
        errors: int,
        previous: list[int],
    ) -> list[int]:
        """One right-to-left shift-or pass allowing ``errors`` edits.

        ``previous`` is the row for ``errors - 1``. In the returned row the
        pattern's high bit is set at ``j`` when the pattern occurs starting at
        ``text[j - 1]``.
        """
        size = len(pattern)
        text_len = len(text)
        full_mask = (1 << size) - 1
        alphabet = pattern.alphabet

        current = [0] * (text_len + 2)
        current[text_len + 1] = (1 << errors) - 1
        for j in range(text_len, 0, -1):
            state = ((current[j + 1] << 1) | 1) & alphabet.get(text[j - 1], 0)
            if errors:
                state |= ((previous[j + 1] | previous[j]) << 1) | 1 | previous[j + 1]
            current[j] = state & full_mask
        return current

    def _bitap(
        self,
        pattern: PreparedPattern,
        text: str,
        threshold: float,
    ) -> tuple[int, int] | None:
        """Find the best-scoring start position.

        Returns:
            (start, errors) of the best hit, or None
        """
        size = len(pattern)
        text_len = len(text)
        match_bit = 1 << (size - 1)

        best: tuple[int, int] | None = None
        best_score = threshold
        previous = [0] * (text_len + 2)

        for errors in range(size):
            floor = errors / size
            if floor > threshold or (best is not None and floor >= best_score):
                break

            current = self._bitap_level(pattern, text, errors, previous)
            for j in range(text_len, 0, -1):
                if not current[j] & match_bit:
                    continue
                start = j - 1
                score = self._base_score(errors, size, start, text_len)
                if best is None:
                    accept = score <= threshold
                else:
                    # Scanning right to left: on a tie within a level, keep the leftmost.
                    accept = score < best_score or (score == best_score and errors == best[1])
                if accept:
                    best = (start, errors)
                    best_score = score

            previous = current

        return best

    def _ranked_hits(
        self,
        pattern: PreparedPattern,
        text: str,
        threshold: float,
    ) -> list[tuple[int, int]]:
        """Every start within ``threshold``, at its lowest error level.

        Ordered like _bitap() picks its winner: score, then error level, then
        leftmost start.
        """
        size = len(pattern)
        text_len = len(text)
        match_bit = 1 << (size - 1)

        hits: dict[int, tuple[float, int]] = {}
        previous = [0] * (text_len + 2)

        for errors in range(size):
            if errors / size > threshold:
                break
            current = self._bitap_level(pattern, text, errors, previous)
            for j in range(1, text_len + 1):
                start = j - 1
                if start in hits or not current[j] & match_bit:
                    continue
                score = self._base_score(errors, size, start, text_len)
                if score <= threshold:
                    hits[start] = (score, errors)
            previous = current

        ranked = sorted(hits.items(), key=lambda item: (item[1][0], item[1][1], item[0]))
        return [(start, errors) for start, (_, errors) in ranked]

    # -------------------------------------------------------------------------
    # Alignment
    # -------------------------------------------------------------------------

    def _align(
        self,
        pattern: str,
        text: str,
        start: int,
        max_errors: int,
    ) -> tuple[int, list[int]]:
        """Align ``pattern`` to the text beginning at ``start``.

        The match must begin at ``start`` but may end anywhere inside the
        window. Among equally cheap endings the longest is kept.

        Returns:
            (edit count, window-relative positions of matched characters)
        """
        size = len(pattern)
        window = text[start:start + size + max_errors]
        width = len(window)

        table = [[0] * (width + 1) for _ in range(size + 1)]
        for i in range(1, size + 1):
            table[i][0] = i
        for j in range(1, width + 1):
            table[0][j] = j

        for i in range(1, size + 1):
            row, above = table[i], table[i - 1]
            p_ch = pattern[i - 1]
            for j in range(1, width + 1):
                cost = 0 if p_ch == window[j - 1] else 1
                row[j] = min(above[j - 1] + cost, above[j] + 1, row[j - 1] + 1)

        end = min(range(width + 1), key=lambda j: (table[size][j], -j))
        return table[size][end], _traceback(pattern, window, table, end)


# =============================================================================
# Traceback
# =============================================================================

_MATCH, _SUBSTITUTE, _SKIP_TEXT, _SKIP_PATTERN = range(4)


def _traceback(pattern: str, window: str, table: list[list[int]], end: int) -> list[int]:
    """Recover matched window positions from a filled edit-distance table.

    Several alignments can share the minimum cost ("dnue" against "dune" is
    two substitutions, or a skip on each side around the run "du"). The one
    with the longest contiguous run of matched text characters wins; further
    ties prefer a match, then a substitution, then a skipped text character,
    then a skipped pattern character.
    """
    # (i, j, pending run) -> (longest run reachable, step taken)
    memo: dict[tuple[int, int, int], tuple[int, int]] = {}

    def longest(i: int, j: int, run: int) -> int:
        if i == 0 or j == 0:
            return run
        key = (i, j, run)
        if key in memo:
            return memo[key][0]

        here = table[i][j]
        diagonal = table[i - 1][j - 1]
        options: list[tuple[int, int]] = []
        if pattern[i - 1] == window[j - 1] and here == diagonal:
            options.append((longest(i - 1, j - 1, run + 1), _MATCH))
        if here == diagonal + 1:
            options.append((max(run, longest(i - 1, j - 1, 0)), _SUBSTITUTE))
        if here == table[i][j - 1] + 1:
            options.append((max(run, longest(i, j - 1, 0)), _SKIP_TEXT))
        if here == table[i - 1][j] + 1:
            # No text consumed, so a run on either side stays contiguous.
            options.append((longest(i - 1, j, run), _SKIP_PATTERN))

        memo[key] = max(options, key=lambda option: option[0])
        return memo[key][0]

    i, j, run = len(pattern), end, 0
    longest(i, j, run)

    positions: list[int] = []
    while i > 0 and j > 0:
        step = memo[(i, j, run)][1]
        if step == _MATCH:
            positions.append(j - 1)
            i, j, run = i - 1, j - 1, run + 1
        elif step == _SUBSTITUTE:
            i, j, run = i - 1, j - 1, 0
        elif step == _SKIP_TEXT:
            j, run = j - 1, 0
        else:
            i -= 1
    positions.reverse()
    return positions
