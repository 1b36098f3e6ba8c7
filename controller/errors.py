"""
controller/errors.py

Failures raised by the LQR synthesis pipeline. All derive from
`SynthesisError` so a controller can recover from any of them in one place.
"""

from __future__ import annotations

__all__ = [
    "SynthesisError",
    "SingularR",
    "WrongEigenspaceDimension",
    "SingularEigenbasis",
]


class SynthesisError(Exception):
    """Base class for synthesis failures."""


class SingularR(SynthesisError):
    """Control cost matrix R is not invertible."""


class WrongEigenspaceDimension(SynthesisError):
    """The Hamiltonian does not have exactly n stable eigenvalues.

    Raised when (A, B) is not stabilizable or (A, Q) is not detectable for
    the chosen weights, or eigenvalue signs are numerically ambiguous.
    """

    def __init__(self, found: int, expected: int):
        super().__init__(f"Found {found} stable eigenvalues, expected {expected}")
        self.found = found
        self.expected = expected


class SingularEigenbasis(SynthesisError):
    """Top block U1 of the stable eigenbasis is not invertible."""
