"""
JSON Normalizer Module
Parses JSON text and re-serializes it into a canonical form so that key order
and whitespace never show up as differences.
"""

import json
import logging
import math
from typing import Any, Optional

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

INDENT = 2
# Largest magnitude at which every integer is exactly representable as a float
MAX_EXACT_FLOAT_INT = 2 ** 53

SIDE_LABELS = {'left': 'Left', 'right': 'Right'}


class ParseError(ValueError):
    """Raised when input text is not valid JSON.

    Carries the side that failed (for compare), the parser message and, when
    the parser reported one, the position of the offending character.
    """

    def __init__(self, detail: str, side: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None,
                 position: Optional[int] = None):
        self.detail = detail
        self.side = side
        self.line = line
        self.column = column
        self.position = position
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.side:
            return f"{SIDE_LABELS.get(self.side, self.side)} JSON: {self.detail}"
        return f"Invalid JSON: {self.detail}"

    def with_side(self, side: str) -> 'ParseError':
        """Return a copy of this error attributed to one side of a comparison."""
        return ParseError(self.detail, side=side, line=self.line,
                          column=self.column, position=self.position)

    def to_dict(self) -> dict:
        return {
            'error': str(self),
            'side': self.side,
            'detail': self.detail,
            'line': self.line,
            'column': self.column,
            'position': self.position,
        }


def _reject_constant(name: str):
    # json.loads accepts NaN/Infinity by default; they are not JSON
    raise ParseError(f"Unsupported literal '{name}'")


def canonical_number(value: Any) -> Any:
    """Return the canonical numeric value for a parsed JSON number.

    Integers are kept as parsed. Integral floats up to 2**53 become ints so
    that 30, 30.0 and 3e1 all serialize as ``30``; other floats keep Python's
    shortest round-trip representation.
    """
    if isinstance(value, bool) or not isinstance(value, float):
        return value
    if math.isinf(value) or math.isnan(value):
        raise ParseError(f"Number out of range: {value!r}")
    if value.is_integer() and abs(value) <= MAX_EXACT_FLOAT_INT:
        return int(value)
    return value


def sort_keys(value: Any) -> Any:
    """Recursively rebuild a JSON value with object keys in ascending order."""
    if isinstance(value, dict):
        return {key: sort_keys(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [sort_keys(item) for item in value]
    return canonical_number(value)


def parse_json(text: str) -> Any:
    """Parse JSON text into a value tree, raising ParseError on bad input."""
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")
    if not text.strip():
        raise ParseError("Input is empty")

    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse failed at line {e.lineno} column {e.colno}: {e.msg}")
        raise ParseError(str(e), line=e.lineno, column=e.colno, position=e.pos) from e
    except ParseError:
        raise
    except ValueError as e:
        # e.g. integers past the interpreter's digit limit
        logger.warning(f"JSON value rejected: {e}")
        raise ParseError(str(e)) from e

    logger.debug(f"Parsed JSON document of {len(text)} characters")
    return value


def _canonicalize(text: str) -> str:
    try:
        value = sort_keys(parse_json(text))
        return json.dumps(value, indent=INDENT, ensure_ascii=False)
    except RecursionError as e:
        raise ParseError("Document is nested too deeply") from e


def normalize(text: str, side: Optional[str] = None) -> str:
    """Return the canonical text of a JSON document.

    Args:
        text: Raw JSON text.
        side: Optional side label ('left' or 'right') attached to errors.

    Returns:
        Pretty-printed JSON with sorted keys and a 2-space indent, without a
        trailing newline.

    Raises:
        ParseError: If the text is blank or not valid JSON.
    """
    try:
        canonical = _canonicalize(text)
    except ParseError as e:
        if side:
            raise e.with_side(side) from e
        raise

    logger.debug(f"Normalized document to {len(canonical.splitlines())} lines")
    return canonical
