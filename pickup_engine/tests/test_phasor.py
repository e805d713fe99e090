"""
Tests for complex phasor arithmetic.

Validates:
1. Operators return new values and never mutate operands
2. Division by zero yields the open-circuit sentinel
3. Parallel combination, including open and cancelling branches
"""

import dataclasses
import math

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from pickup_engine.phasor import (
    OPEN_CIRCUIT,
    Complex,
    add,
    divide,
    magnitude,
    multiply,
    parallel,
    phase,
    phase_deg,
    reciprocal,
)


class TestArithmetic:
    """Test basic operations."""

    def test_add(self):
        z = add(Complex(1, 2), Complex(3, -5))
        assert z == Complex(4, -3)

    def test_multiply(self):
        # (1 + 2j)(3 + 4j) = -5 + 10j
        z = multiply(Complex(1, 2), Complex(3, 4))
        assert z.real == pytest.approx(-5)
        assert z.imag == pytest.approx(10)

    def test_divide(self):
        z = divide(Complex(-5, 10), Complex(3, 4))
        assert z.real == pytest.approx(1)
        assert z.imag == pytest.approx(2)

    def test_operators_match_functions(self):
        a = Complex(2, -1)
        b = Complex(0.5, 3)
        assert a + b == add(a, b)
        assert a * b == multiply(a, b)
        assert a / b == divide(a, b)
        assert abs(a) == magnitude(a)
        assert complex(a) == complex(2, -1)

    def test_matches_builtin_complex(self):
        a = Complex(3.3, -1.2)
        b = Complex(-0.7, 4.1)
        expected = complex(3.3, -1.2) / complex(-0.7, 4.1)
        z = a / b
        assert z.real == pytest.approx(expected.real)
        assert z.imag == pytest.approx(expected.imag)

    def test_immutable(self):
        z = Complex(1, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            z.real = 5

    def test_operands_unchanged(self):
        a = Complex(1, 2)
        b = Complex(3, 4)
        add(a, b)
        multiply(a, b)
        assert a == Complex(1, 2)
        assert b == Complex(3, 4)

    def test_scale(self):
        assert Complex(2, -4).scale(0.5) == Complex(1, -2)


class TestDivisionByZero:
    """Zero denominators produce the open-circuit sentinel, never an exception."""

    def test_divide_by_zero(self):
        z = divide(Complex(1, 1), Complex(0, 0))
        assert z == OPEN_CIRCUIT
        assert z.real == math.inf
        assert z.imag == 0

    def test_reciprocal_of_zero(self):
        assert reciprocal(Complex(0, 0)).is_open

    def test_reciprocal(self):
        z = reciprocal(Complex(0, 2))
        assert z.real == pytest.approx(0)
        assert z.imag == pytest.approx(-0.5)

    def test_open_flag(self):
        assert OPEN_CIRCUIT.is_open
        assert not Complex(1e12, -1e12).is_open


class TestMagnitudePhase:
    """Test magnitude and phase."""

    def test_magnitude(self):
        assert magnitude(Complex(3, 4)) == pytest.approx(5)

    def test_phase_quadrants(self):
        assert phase_deg(Complex(1, 1)) == pytest.approx(45)
        assert phase_deg(Complex(-1, 1)) == pytest.approx(135)
        assert phase_deg(Complex(0, -1)) == pytest.approx(-90)

    def test_phase_radians(self):
        assert phase(Complex(0, 1)) == pytest.approx(math.pi / 2)


class TestParallel:
    """Test parallel impedance combination."""

    def test_equal_resistors(self):
        z = parallel(Complex(100, 0), Complex(100, 0))
        assert z.real == pytest.approx(50)
        assert z.imag == pytest.approx(0)

    def test_resistors(self):
        z = parallel(Complex(100, 0), Complex(300, 0))
        assert z.real == pytest.approx(75)

    def test_open_branch_drops_out(self):
        z = Complex(470, 30)
        assert parallel(z, OPEN_CIRCUIT) == z
        assert parallel(OPEN_CIRCUIT, z) == z

    def test_both_open(self):
        assert parallel(OPEN_CIRCUIT, OPEN_CIRCUIT).is_open

    def test_cancelling_reactances_open(self):
        """Ideal LC tank at resonance: the sum is zero, the combination is open."""
        z = parallel(Complex(0, 50), Complex(0, -50))
        assert z == OPEN_CIRCUIT

    def test_short_dominates(self):
        z = parallel(Complex(0, 0), Complex(1000, 0))
        assert magnitude(z) == pytest.approx(0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
