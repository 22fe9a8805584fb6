"""
Compare Session Module
Runs the normalize -> split -> align -> merge -> render pipeline and keeps the
last result for one caller.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol
import logging

from .json_normalizer import ParseError, normalize
from .line_diff import DiffResult, EMPTY_RESULT, diff_lines, split_lines
from comparator.report_builder import RenderedDiff, render

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    """Anything that can take a plain string and report whether it stored it."""

    def write_text(self, text: str) -> bool:
        ...


def compare(left_text: str, right_text: str) -> DiffResult:
    """Compare two JSON documents line by line after canonicalizing both.

    Raises:
        ParseError: With ``side`` set to 'left' or 'right'. No diff is
            computed when either side fails.
    """
    logger.info("Starting JSON comparison")
    left_canonical = normalize(left_text, side='left')
    right_canonical = normalize(right_text, side='right')
    return diff_lines(split_lines(left_canonical), split_lines(right_canonical))


@dataclass
class CompareSession:
    """The state behind one compare view.

    A successful compare replaces every field at once; a failed one resets
    the session to the empty sentinel so an older diff is never shown next to
    newer input.
    """
    left_text: str = ''
    right_text: str = ''
    result: DiffResult = EMPTY_RESULT
    rendered: RenderedDiff = field(default_factory=lambda: render(EMPTY_RESULT))
    last_error: Optional[ParseError] = None

    @property
    def has_diff(self) -> bool:
        return not self.result.is_empty

    def compare(self, left_text: str, right_text: str) -> RenderedDiff:
        try:
            result = compare(left_text, right_text)
            rendered = render(result)
        except Exception as e:
            logger.warning(f"Comparison aborted: {e}")
            self.clear()
            if isinstance(e, ParseError):
                self.last_error = e
            raise

        self.left_text = '\n'.join(result.left_lines())
        self.right_text = '\n'.join(result.right_lines())
        self.result = result
        self.rendered = rendered
        self.last_error = None
        return rendered

    def beautify(self, text: str, side: Optional[str] = None) -> str:
        """Canonicalize one input without touching the stored diff."""
        return normalize(text, side=side)

    def clear(self) -> None:
        self.left_text = ''
        self.right_text = ''
        self.result = EMPTY_RESULT
        self.rendered = render(EMPTY_RESULT)
        self.last_error = None

    def copy_diff(self, clipboard: Clipboard) -> bool:
        """Write the last unified diff to the clipboard."""
        if not self.has_diff:
            logger.info("No diff to copy")
            return False
        try:
            copied = bool(clipboard.write_text(self.rendered.unified_text))
        except Exception as e:
            logger.error(f"Failed to copy diff: {str(e)}", exc_info=True)
            return False
        if copied:
            logger.info("Diff copied to clipboard")
        return copied
