"""
Operand display formatting.
Turns raw entry text into grouped display text without touching the stored value.
"""
import re
from dataclasses import dataclass
from typing import Optional

from .config import THOUSANDS_SEPARATOR, DECIMAL_POINT, GROUP_SIZE

_INTEGER_RE = re.compile(r"^([+-]?)(\d+)(.*)$")


@dataclass(frozen=True)
class GroupingPolicy:
    """How the integer part of an operand is grouped for display."""
    thousands_separator: str = ","
    group_size: int = 3
    decimal_point: str = "."

    def __post_init__(self):
        if self.group_size < 1:
            raise ValueError(f"group_size must be positive, got {self.group_size}")

    def group(self, digits: str) -> str:
        """Insert the separator every `group_size` digits, counting from the right."""
        head = len(digits) % self.group_size or self.group_size
        groups = [digits[:head]]
        for start in range(head, len(digits), self.group_size):
            groups.append(digits[start:start + self.group_size])
        return self.thousands_separator.join(groups)


DEFAULT_POLICY = GroupingPolicy()


def policy_from_config() -> GroupingPolicy:
    """Build the grouping policy from the configured environment."""
    return GroupingPolicy(
        thousands_separator=THOUSANDS_SEPARATOR,
        group_size=GROUP_SIZE,
        decimal_point=DECIMAL_POINT,
    )


def _format_integer(integer: str, policy: GroupingPolicy) -> str:
    if not integer:
        return "0"

    match = _INTEGER_RE.match(integer)
    if match is None:
        # NaN, Infinity and friends
        return integer

    sign, digits, rest = match.groups()
    digits = digits.lstrip("0") or "0"
    if sign == "+":
        sign = ""
    return f"{sign}{policy.group(digits)}{rest}"


def format_operand(
    operand: Optional[str],
    policy: GroupingPolicy = DEFAULT_POLICY
) -> Optional[str]:
    """
    Format an operand for display.

    Args:
        operand: Raw operand text as stored in state, or None
        policy: Grouping policy to apply to the integer part

    Returns:
        Display text, or None when there is nothing to render
    """
    if operand is None:
        return None
    if operand == "":
        return ""

    integer, dot, decimal = operand.partition(".")
    formatted = _format_integer(integer, policy)

    if not dot:
        return formatted

    return f"{formatted}{policy.decimal_point}{decimal}"
