"""
Binary expression evaluation for the calculator.
"""
import math
import re
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

NAN_SENTINEL = "NaN"
EMPTY_RESULT = ""

# Leading numeric prefix, the way a lenient float parse reads "12.5abc" as 12.5
_NUMBER_PREFIX_RE = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


class Operation(str, Enum):
    """Pending operator symbols."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "x"
    DIVIDE = "/"
    MODULO = "%"


def parse_operand(text: str) -> Optional[float]:
    """
    Parse the leading number of an operand string.

    Returns:
        The parsed float, or None if the text does not start with a number
    """
    match = _NUMBER_PREFIX_RE.match(text)
    if match is None:
        return None
    return float(match.group(1).replace("Infinity", "inf"))


def to_display_string(value: float) -> str:
    """
    Convert a float result to its canonical decimal text.

    Integral values print without a fraction, non-finite values print as
    NaN / Infinity / -Infinity, very large or very small magnitudes use
    exponent form.
    """
    if math.isnan(value):
        return NAN_SENTINEL
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    if value == 0:
        return "0"

    magnitude = abs(value)
    text = repr(value)
    if 1e-6 <= magnitude < 1e21:
        # Shortest round-trip digits, never the float's full binary expansion
        positional = format(Decimal(text), "f")
        if "." in positional:
            positional = positional.rstrip("0").rstrip(".")
        return positional

    mantissa, _, exponent = text.partition("e")
    sign = "-" if exponent.startswith("-") else "+"
    return f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _remainder(left: float, right: float) -> float:
    if right == 0 or math.isinf(left) or math.isnan(left) or math.isnan(right):
        return math.nan
    if math.isinf(right):
        return left
    return math.fmod(left, right)


def evaluate(
    previous_operand: str,
    operation: Union[Operation, str],
    current_operand: str
) -> str:
    """
    Evaluate `previous_operand <operation> current_operand`.

    Never raises for bad input: an unparseable operand or an unknown
    operation gives EMPTY_RESULT, undefined arithmetic gives NaN or Infinity.

    Args:
        previous_operand: Left operand text
        operation: Operator symbol
        current_operand: Right operand text

    Returns:
        Result text, ungrouped
    """
    prev = parse_operand(previous_operand)
    curr = parse_operand(current_operand)

    if prev is None or curr is None:
        return EMPTY_RESULT

    try:
        operation = Operation(operation)
    except ValueError:
        return EMPTY_RESULT

    if operation is Operation.ADD:
        result = prev + curr
    elif operation is Operation.SUBTRACT:
        result = prev - curr
    elif operation is Operation.MULTIPLY:
        result = prev * curr
    elif operation is Operation.DIVIDE:
        result = _divide(prev, curr)
    else:
        # Remainder is only defined for integer entries
        if "." in previous_operand or "." in current_operand:
            return NAN_SENTINEL
        result = _remainder(prev, curr)

    return to_display_string(result)
