"""
Tests for the expression evaluator.
"""
import pytest
from calcpad.evaluator import (
    EMPTY_RESULT, NAN_SENTINEL, Operation, evaluate, parse_operand, to_display_string,
)


class TestEvaluate:
    """Tests for evaluate."""

    @pytest.mark.parametrize("operation, expected", [
        ("+", "8"),
        ("-", "4"),
        ("x", "12"),
        ("/", "3"),
        ("%", "0"),
    ])
    def test_basic_operations(self, operation, expected):
        """Test each operator on integer operands."""
        assert evaluate("6", operation, "2") == expected

    def test_accepts_operation_enum(self):
        """Test passing an Operation member instead of a symbol."""
        assert evaluate("6", Operation.DIVIDE, "3") == "2"

    def test_fractional_result(self):
        """Test a result that is not an integer."""
        assert evaluate("7", "/", "2") == "3.5"
        assert evaluate("0.1", "+", "0.2") == "0.30000000000000004"

    def test_negative_result(self):
        """Test subtraction going below zero."""
        assert evaluate("3", "-", "10") == "-7"

    def test_modulo(self):
        """Test remainder on integer entries."""
        assert evaluate("5", "%", "2") == "1"

    def test_modulo_follows_dividend_sign(self):
        """Test that the remainder takes the sign of the dividend."""
        assert evaluate("-7", "%", "2") == "-1"

    def test_modulo_rejects_fractional_text(self):
        """Test that any decimal point in an operand gives NaN."""
        assert evaluate("5.0", "%", "2") == NAN_SENTINEL
        assert evaluate("5", "%", "2.") == NAN_SENTINEL

    def test_modulo_by_zero(self):
        """Test remainder by zero."""
        assert evaluate("5", "%", "0") == NAN_SENTINEL

    def test_division_by_zero(self):
        """Test IEEE results of dividing by zero."""
        assert evaluate("1", "/", "0") == "Infinity"
        assert evaluate("0", "/", "0") == NAN_SENTINEL

    def test_infinity_operand(self):
        """Test chaining on from an infinite result."""
        assert evaluate("Infinity", "x", "2") == "Infinity"
        assert evaluate("Infinity", "-", "Infinity") == NAN_SENTINEL

    def test_unparseable_operand(self):
        """Test that operands that are not numbers give the empty result."""
        assert evaluate("", "+", "1") == EMPTY_RESULT
        assert evaluate("1", "+", "NaN") == EMPTY_RESULT
        assert evaluate("abc", "x", "2") == EMPTY_RESULT

    def test_unknown_operation(self):
        """Test an operator outside the supported set."""
        assert evaluate("2", "^", "3") == EMPTY_RESULT

    def test_large_integer_result_shortest_digits(self):
        """Test that a result past 2**53 shows only the digits the float holds."""
        assert evaluate("1073741824", "x", "1073741824") == "1152921504606847000"

    def test_large_result_uses_exponent(self):
        """Test results past the positional range."""
        assert evaluate("1000000000000", "x", "1000000000") == "1e+21"


class TestParseOperand:
    """Tests for parse_operand."""

    def test_trailing_decimal_point(self):
        """Test an entry that ends in a decimal point."""
        assert parse_operand("0.") == 0.0

    def test_leading_number_prefix(self):
        """Test that only the leading number is read."""
        assert parse_operand("12.5abc") == 12.5

    def test_exponent(self):
        """Test exponent-form text produced by earlier results."""
        assert parse_operand("1.5e-7") == 1.5e-7

    def test_not_a_number(self):
        """Test text without a leading number."""
        assert parse_operand("") is None
        assert parse_operand("NaN") is None


class TestToDisplayString:
    """Tests for to_display_string."""

    def test_integral_float(self):
        """Test that integral floats print without a fraction."""
        assert to_display_string(2.0) == "2"
        assert to_display_string(-0.0) == "0"
        assert to_display_string(100.0) == "100"
        assert to_display_string(1e20) == "100000000000000000000"

    def test_small_positional(self):
        """Test a small value still printed positionally."""
        assert to_display_string(0.00001) == "0.00001"

    def test_tiny_exponent(self):
        """Test a value below the positional range."""
        assert to_display_string(1.5e-7) == "1.5e-7"

    def test_non_finite(self):
        """Test NaN and infinities."""
        assert to_display_string(float("nan")) == "NaN"
        assert to_display_string(float("inf")) == "Infinity"
        assert to_display_string(float("-inf")) == "-Infinity"
