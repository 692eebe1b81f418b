"""Comparison expressions against stream property values.

A comparison string is one of:

- a relational expression: ``<=5mbps``, ``>2``, ``==6``, ``!=2``
- a regular expression, recognized by containing ``?``, ``|``, ``^`` or ``$``
- empty, in which case a numeric property value is returned as-is
- a plain value, compared case-insensitively

The result is a distance: 0 for a match, 1 for no match, or the raw value
for the empty-comparison numeric case. Sorting ascending by distance puts
matching streams first.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from streamsift.utils.logger import get_logger
from streamsift.utils.units import format_number, normalize_unit, parse_number

logger = get_logger(__name__)

PropertyValue = Union[str, int, float, None]

# Two-character operators first so "<=" is not read as "<"
RELATIONAL_OPERATORS = ("<=", ">=", "==", "!=", "<", ">", "=")
REGEX_MARKERS = ("?", "|", "^", "$")
EQUALITY_EPSILON = 0.05


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a comparison."""

    distance: float

    @property
    def matched(self) -> bool:
        return self.distance == 0


MATCH = MatchResult(0)
NO_MATCH = MatchResult(1)


class PredicateEvaluator:
    """Evaluate comparison strings, substituting runtime variables first."""

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        """Initialize evaluator.

        Args:
            variables: Runtime variables available for substitution
        """
        self.variables = dict(variables or {})

    def substitute(self, comparison: Optional[str]) -> str:
        """Replace a variable reference with the variable's value.

        ``{name}`` always refers to a variable and becomes "" when the
        variable is unset. A bare string is replaced only when it is exactly
        the name of a known variable.

        Args:
            comparison: Raw comparison string

        Returns:
            Comparison with the variable substituted
        """
        comparison = comparison or ""
        if len(comparison) >= 2 and comparison.startswith("{") and comparison.endswith("}"):
            value = self.variables.get(comparison[1:-1])
            return "" if value is None else str(value)
        if comparison in self.variables:
            value = self.variables[comparison]
            return "" if value is None else str(value)
        return comparison

    def evaluate(self, value: PropertyValue, comparison: Optional[str]) -> MatchResult:
        """Substitute variables, then compare.

        Args:
            value: Stream property value
            comparison: Comparison string

        Returns:
            MatchResult
        """
        return self.compare(value, self.substitute(comparison))

    def compare(self, value: PropertyValue, comparison: str) -> MatchResult:
        """Compare a property value against an already substituted comparison.

        Args:
            value: Stream property value
            comparison: Comparison string

        Returns:
            MatchResult
        """
        if is_relational(comparison):
            return MATCH if apply_relational(value, comparison) else NO_MATCH

        if is_regex(comparison):
            try:
                pattern = re.compile(comparison, re.IGNORECASE)
            except re.error as e:
                logger.warning("Invalid regex pattern", pattern=comparison, error=str(e))
                return NO_MATCH
            return MATCH if pattern.search(_stringify(value)) else NO_MATCH

        if not comparison and _is_number(value):
            return MatchResult(float(value))

        return MATCH if _stringify(value).lower() == comparison.lower() else NO_MATCH


def is_relational(comparison: str) -> bool:
    """Check whether a comparison starts with a relational operator."""
    return comparison.startswith(RELATIONAL_OPERATORS)


def is_regex(comparison: str) -> bool:
    """Check whether a comparison looks like a regular expression."""
    return any(marker in comparison for marker in REGEX_MARKERS)


def apply_relational(value: PropertyValue, expression: str) -> bool:
    """Apply a relational expression such as "<=5mbps" to a value.

    Non-numeric values and operands never match.

    Args:
        value: Property value, coerced to a number
        expression: Operator followed by an operand, optionally unit suffixed

    Returns:
        True if the relation holds
    """
    operator = next((op for op in RELATIONAL_OPERATORS if expression.startswith(op)), None)
    if operator is None:
        return False

    left = _to_number(value)
    right = parse_number(normalize_unit(expression[len(operator):].strip()))
    if left is None or right is None:
        logger.debug("Non-numeric comparison", value=value, expression=expression)
        return False

    if operator == "<=":
        return left <= right
    elif operator == ">=":
        return left >= right
    elif operator == "<":
        return left < right
    elif operator == ">":
        return left > right
    elif operator == "!=":
        return abs(left - right) > EQUALITY_EPSILON
    return abs(left - right) < EQUALITY_EPSILON


def _is_number(value: PropertyValue) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: PropertyValue) -> Optional[float]:
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        number = parse_number(value.strip())
    else:
        return None
    if number is None or math.isnan(number):
        return None
    return number


def _stringify(value: PropertyValue) -> str:
    if value is None:
        return ""
    if _is_number(value):
        return format_number(value)
    return str(value)
