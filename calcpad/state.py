"""
Calculator state and the input-event transition function.

The state is an immutable value. Every input event is reduced into a new
state by `transition`; nothing is mutated in place, so earlier states stay
valid snapshots.
"""
import logging
from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable, Optional, Union

from .evaluator import Operation, evaluate

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789.")


@dataclass(frozen=True)
class CalculatorState:
    """Snapshot of the calculator between two input events."""
    current_operand: Optional[str] = None
    previous_operand: Optional[str] = None
    operation: Optional[Operation] = None
    overwrite: bool = False


EMPTY_STATE = CalculatorState()


@dataclass(frozen=True)
class AddDigit:
    """Append a digit or the decimal point to the current entry."""
    digit: str

    def __post_init__(self):
        if self.digit not in DIGITS:
            raise ValueError(f"Not a digit or decimal point: {self.digit!r}")


@dataclass(frozen=True)
class ChooseOperation:
    """Select (or chain) the pending operation."""
    operation: Operation

    def __post_init__(self):
        # Accept raw symbols such as "x"
        object.__setattr__(self, "operation", Operation(self.operation))


@dataclass(frozen=True)
class Clear:
    """Reset to the empty state."""


@dataclass(frozen=True)
class DeleteDigit:
    """Remove the last character of the current entry."""


@dataclass(frozen=True)
class Evaluate:
    """Compute the pending expression and commit the result."""


InputEvent = Union[AddDigit, ChooseOperation, Clear, DeleteDigit, Evaluate]


def _add_digit(state: CalculatorState, digit: str) -> CalculatorState:
    current = state.current_operand

    if state.overwrite:
        return replace(state, current_operand=digit, overwrite=False)
    if current is None and digit == ".":
        return replace(state, current_operand="0.")
    if digit == "0" and current == "0":
        return state
    if digit == "." and current is not None and "." in current:
        return state
    # Keeps "01"-style entries unreachable; a plain append would give "05"
    if current == "0" and digit != ".":
        return replace(state, current_operand=digit)

    return replace(state, current_operand=f"{current or ''}{digit}")


def _delete_digit(state: CalculatorState) -> CalculatorState:
    current = state.current_operand

    if state.overwrite:
        return replace(state, current_operand=None, overwrite=False)
    if current is None:
        return state
    if len(current) == 1:
        return replace(state, current_operand=None)

    return replace(state, current_operand=current[:-1])


def _choose_operation(state: CalculatorState, operation: Operation) -> CalculatorState:
    if state.current_operand is None and state.previous_operand is None:
        return state
    if state.current_operand is None:
        return replace(state, operation=operation)
    if state.previous_operand is None:
        return replace(
            state,
            operation=operation,
            previous_operand=state.current_operand,
            current_operand=None,
        )

    # Chaining: fold the pending expression before recording the new operator
    return replace(
        state,
        previous_operand=_evaluate_pending(state),
        operation=operation,
        current_operand=None,
    )


def _evaluate(state: CalculatorState) -> CalculatorState:
    if (
        state.operation is None
        or state.current_operand is None
        or state.previous_operand is None
    ):
        return state

    return replace(
        state,
        previous_operand=None,
        overwrite=True,
        operation=None,
        current_operand=_evaluate_pending(state),
    )


def _evaluate_pending(state: CalculatorState) -> str:
    result = evaluate(state.previous_operand, state.operation, state.current_operand)
    logger.debug(
        f"Evaluated {state.previous_operand} {state.operation.value} "
        f"{state.current_operand} = {result!r}"
    )
    return result


def transition(state: CalculatorState, event: InputEvent) -> CalculatorState:
    """
    Reduce one input event into the next calculator state.

    Invalid or premature events are no-ops and return `state` itself.

    Args:
        state: Current state
        event: One of AddDigit, ChooseOperation, Clear, DeleteDigit, Evaluate

    Returns:
        The next state

    Raises:
        TypeError: If `event` is not an input event
    """
    if isinstance(event, AddDigit):
        return _add_digit(state, event.digit)
    if isinstance(event, DeleteDigit):
        return _delete_digit(state)
    if isinstance(event, Clear):
        return EMPTY_STATE
    if isinstance(event, ChooseOperation):
        return _choose_operation(state, event.operation)
    if isinstance(event, Evaluate):
        return _evaluate(state)

    raise TypeError(f"Unknown input event: {event!r}")


def replay(
    events: Iterable[InputEvent],
    state: CalculatorState = EMPTY_STATE
) -> CalculatorState:
    """Apply `events` in order, starting from `state`."""
    return reduce(transition, events, state)
