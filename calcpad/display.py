"""
Two-line rendering of a calculator state.
"""
from dataclasses import dataclass

from .formatter import DEFAULT_POLICY, GroupingPolicy, format_operand
from .state import CalculatorState


@dataclass(frozen=True)
class Display:
    """The two lines shown to the user."""
    previous_line: str
    current_line: str


def render(state: CalculatorState, policy: GroupingPolicy = DEFAULT_POLICY) -> Display:
    """
    Render a state as its previous-operand line and current-operand line.

    Absent parts are dropped rather than shown as placeholders.
    """
    previous = format_operand(state.previous_operand, policy)
    operation = state.operation.value if state.operation is not None else None
    previous_line = " ".join(part for part in (previous, operation) if part)

    return Display(
        previous_line=previous_line,
        current_line=format_operand(state.current_operand, policy) or "",
    )
