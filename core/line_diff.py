"""
Line Diff Module
Aligns two line sequences with a longest-common-subsequence table and merges
adjacent removals and additions into changed lines.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass
import logging

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

SAME = 'same'
ADDED = 'added'
REMOVED = 'removed'
CHANGED = 'changed'

ENTRY_TYPES = (SAME, ADDED, REMOVED, CHANGED)


@dataclass(frozen=True)
class DiffEntry:
    """One row of a line comparison.

    ``left`` is None for additions and ``right`` is None for removals.
    """
    type: str
    left: Optional[str] = None
    right: Optional[str] = None

    @classmethod
    def same(cls, text: str) -> 'DiffEntry':
        return cls(SAME, text, text)

    @classmethod
    def added(cls, text: str) -> 'DiffEntry':
        return cls(ADDED, None, text)

    @classmethod
    def removed(cls, text: str) -> 'DiffEntry':
        return cls(REMOVED, text, None)

    @classmethod
    def changed(cls, left: str, right: str) -> 'DiffEntry':
        return cls(CHANGED, left, right)

    @property
    def has_left(self) -> bool:
        return self.type in (SAME, REMOVED, CHANGED)

    @property
    def has_right(self) -> bool:
        return self.type in (SAME, ADDED, CHANGED)

    def to_dict(self) -> Dict:
        return {'type': self.type, 'left': self.left, 'right': self.right}


@dataclass(frozen=True)
class DiffResult:
    entries: Tuple[DiffEntry, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'entries', tuple(self.entries))

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def left_lines(self) -> List[str]:
        """Lines of the left document, in order."""
        return [entry.left for entry in self.entries if entry.has_left]

    def right_lines(self) -> List[str]:
        """Lines of the right document, in order."""
        return [entry.right for entry in self.entries if entry.has_right]

    def counts(self) -> Dict[str, int]:
        counts = {entry_type: 0 for entry_type in ENTRY_TYPES}
        for entry in self.entries:
            counts[entry.type] += 1
        return counts

    @property
    def similarity_score(self) -> float:
        total = len(self.left_lines()) + len(self.right_lines())
        if total == 0:
            return 1.0
        return 2.0 * self.counts()[SAME] / total

    @property
    def is_identical(self) -> bool:
        return all(entry.type == SAME for entry in self.entries)

    def to_dict(self) -> Dict:
        """Convert the result to the dictionary format returned to the frontend."""
        counts = self.counts()
        return {
            'similarity_score': self.similarity_score,
            'summary': {
                'same_lines': counts[SAME],
                'added_lines': counts[ADDED],
                'removed_lines': counts[REMOVED],
                'changed_lines': counts[CHANGED],
                'total_entries': len(self.entries),
            },
            'entries': [entry.to_dict() for entry in self.entries],
        }


EMPTY_RESULT = DiffResult()


class DiffInvariantError(RuntimeError):
    """A DiffResult that the merge step could never have produced."""


def check_invariants(result: DiffResult) -> None:
    """Raise DiffInvariantError if the result breaks the merged-diff shape."""
    previous = None
    for index, entry in enumerate(result.entries):
        if entry.type not in ENTRY_TYPES:
            raise DiffInvariantError(f"Unknown entry type {entry.type!r} at row {index}")
        if (entry.has_left and entry.left is None) or (entry.has_right and entry.right is None):
            raise DiffInvariantError(f"Entry at row {index} is missing text: {entry!r}")
        if previous is not None and previous.type == REMOVED and entry.type == ADDED:
            raise DiffInvariantError(f"Unmerged removal/addition pair at rows {index - 1}-{index}")
        previous = entry


def split_lines(text: str) -> List[str]:
    """Split canonical text into lines."""
    return text.split('\n')


def build_lcs_table(left: List[str], right: List[str]) -> List[List[int]]:
    """Build the (m+1) x (n+1) longest-common-subsequence length table.

    Runs in O(m*n) time and space. Inputs are never truncated, so very large
    documents slow down quadratically.
    """
    m, n = len(left), len(right)
    logger.debug(f"Building LCS table of {m + 1}x{n + 1} cells")
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = dp[i], dp[i - 1]
        left_line = left[i - 1]
        for j in range(1, n + 1):
            if left_line == right[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])
    return dp


def lcs_length(left: List[str], right: List[str]) -> int:
    return build_lcs_table(left, right)[len(left)][len(right)]


def align_lines(left: List[str], right: List[str]) -> List[DiffEntry]:
    """Classify every line as same, added or removed, in document order.

    Backtracks from the bottom-right corner of the LCS table. When the table
    does not force a direction, the line is attributed to an addition
    (``dp[i][j-1] >= dp[i-1][j]``); after reversal this puts removals ahead of
    additions in a run of mismatches.
    """
    dp = build_lcs_table(left, right)
    entries = []
    i, j = len(left), len(right)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and left[i - 1] == right[j - 1]:
            entries.append(DiffEntry.same(left[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            entries.append(DiffEntry.added(right[j - 1]))
            j -= 1
        else:
            entries.append(DiffEntry.removed(left[i - 1]))
            i -= 1

    entries.reverse()
    return entries


def merge_changes(alignment: List[DiffEntry]) -> List[DiffEntry]:
    """Collapse each removal immediately followed by an addition into a change.

    Only one pair is merged at a time: ``removed, removed, added, added``
    becomes ``removed, changed, added``.
    """
    merged = []
    k = 0
    while k < len(alignment):
        current = alignment[k]
        following = alignment[k + 1] if k + 1 < len(alignment) else None
        if current.type == REMOVED and following is not None and following.type == ADDED:
            merged.append(DiffEntry.changed(current.left, following.right))
            k += 2
        else:
            merged.append(current)
            k += 1
    return merged


def diff_lines(left: List[str], right: List[str]) -> DiffResult:
    """Align two line sequences and merge adjacent removal/addition pairs."""
    try:
        result = DiffResult(merge_changes(align_lines(left, right)))
        logger.info(f"Line diff complete: {result.counts()}")
        return result
    except Exception as e:
        logger.error(f"Error computing line diff: {str(e)}", exc_info=True)
        raise
