"""
Complex phasor arithmetic for impedance calculations.

A small immutable value type rather than Python's built-in ``complex``,
because division by a zero impedance must not raise: it yields the
open-circuit sentinel ``Complex(inf, 0)``, which resonance and bandwidth
sweeps treat as an ordinary point.

    Z_parallel = Z1·Z2 / (Z1 + Z2)
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    """Immutable complex value (real, imag). Every operation returns a new instance."""
    real: float
    imag: float = 0.0

    def __add__(self, other: 'Complex') -> 'Complex':
        return add(self, other)

    def __mul__(self, other: 'Complex') -> 'Complex':
        return multiply(self, other)

    def __truediv__(self, other: 'Complex') -> 'Complex':
        return divide(self, other)

    def __abs__(self) -> float:
        return magnitude(self)

    def __complex__(self) -> complex:
        return complex(self.real, self.imag)

    def scale(self, factor: float) -> 'Complex':
        """Multiply both components by a real factor."""
        return Complex(self.real * factor, self.imag * factor)

    @property
    def is_open(self) -> bool:
        return math.isinf(self.real) or math.isinf(self.imag)


# Open-circuit (infinite impedance) sentinel
OPEN_CIRCUIT = Complex(math.inf, 0.0)


def add(a: Complex, b: Complex) -> Complex:
    return Complex(a.real + b.real, a.imag + b.imag)


def multiply(a: Complex, b: Complex) -> Complex:
    return Complex(
        a.real * b.real - a.imag * b.imag,
        a.real * b.imag + a.imag * b.real,
    )


def divide(a: Complex, b: Complex) -> Complex:
    """a / b, or the open-circuit sentinel when |b| == 0."""
    denom = b.real * b.real + b.imag * b.imag
    if denom == 0:
        return OPEN_CIRCUIT
    return Complex(
        (a.real * b.real + a.imag * b.imag) / denom,
        (a.imag * b.real - a.real * b.imag) / denom,
    )


def reciprocal(z: Complex) -> Complex:
    """1 / z (admittance of an impedance)."""
    return divide(Complex(1.0, 0.0), z)


def magnitude(z: Complex) -> float:
    return math.sqrt(z.real * z.real + z.imag * z.imag)


def phase(z: Complex) -> float:
    """Phase angle in radians."""
    return math.atan2(z.imag, z.real)


def phase_deg(z: Complex) -> float:
    """Phase angle in degrees."""
    return math.degrees(phase(z))


def parallel(z1: Complex, z2: Complex) -> Complex:
    """
    Parallel combination of two impedances.

    An open branch drops out (Z || open = Z). Two open branches stay open,
    and a zero sum (e.g. an ideal LC tank at resonance) is open as well.
    """
    if z1.is_open:
        return z2
    if z2.is_open:
        return z1
    return divide(multiply(z1, z2), add(z1, z2))
