"""3x3 matrices stored as flat, row-major sequences of nine floats."""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "SingularMatrixError",
    "zero",
    "identity",
    "add",
    "sub",
    "mul",
    "mulv",
    "tmulv",
    "transpose",
    "det",
    "inv",
    "invert_sub2",
]

Matrix = list[float]


class SingularMatrixError(ValueError):
    """Raised when a matrix has no inverse."""


def _check(m: Sequence[float], size: int = 9) -> None:
    if len(m) != size:
        raise ValueError(f"expected {size} elements, got {len(m)}")


def zero() -> Matrix:
    """Return the zero matrix."""
    return [0.0] * 9


def identity() -> Matrix:
    """Return the identity matrix."""
    return [1.0 if row == col else 0.0 for row in range(3) for col in range(3)]


def add(a: Sequence[float], b: Sequence[float]) -> Matrix:
    """Element-wise sum."""
    _check(a)
    _check(b)
    return [x + y for x, y in zip(a, b)]


def sub(a: Sequence[float], b: Sequence[float]) -> Matrix:
    """Element-wise difference."""
    _check(a)
    _check(b)
    return [x - y for x, y in zip(a, b)]


def mul(a: Sequence[float], b: Sequence[float]) -> Matrix:
    """Matrix product a * b."""
    _check(a)
    _check(b)
    return [
        sum(a[3 * row + k] * b[3 * k + col] for k in range(3))
        for row in range(3)
        for col in range(3)
    ]


def mulv(a: Sequence[float], v: Sequence[float]) -> list[float]:
    """Matrix times column vector."""
    _check(a)
    _check(v, 3)
    return [sum(a[3 * row + i] * v[i] for i in range(3)) for row in range(3)]


def tmulv(a: Sequence[float], v: Sequence[float]) -> list[float]:
    """Transpose of the matrix times column vector."""
    _check(a)
    _check(v, 3)
    return [sum(a[3 * i + col] * v[i] for i in range(3)) for col in range(3)]


def transpose(m: Sequence[float]) -> Matrix:
    """Return the transposed matrix."""
    _check(m)
    return [m[3 * col + row] for row in range(3) for col in range(3)]


def _cofactor_terms(a: Sequence[float]):
    def A(y: int, x: int) -> float:
        return a[(y - 1) * 3 + (x - 1)]

    return A


def det(a: Sequence[float]) -> float:
    """Determinant."""
    _check(a)
    A = _cofactor_terms(a)
    return (
        A(1, 1) * (A(3, 3) * A(2, 2) - A(3, 2) * A(2, 3))
        - A(2, 1) * (A(3, 3) * A(1, 2) - A(3, 2) * A(1, 3))
        + A(3, 1) * (A(2, 3) * A(1, 2) - A(2, 2) * A(1, 3))
    )


def inv(a: Sequence[float]) -> Matrix:
    """Inverse; raises SingularMatrixError when the determinant is zero."""
    d = det(a)
    if d == 0.0:
        raise SingularMatrixError("matrix is singular")
    s = 1.0 / d
    A = _cofactor_terms(a)
    return [
        s * (A(3, 3) * A(2, 2) - A(3, 2) * A(2, 3)),
        -s * (A(3, 3) * A(1, 2) - A(3, 2) * A(1, 3)),
        s * (A(2, 3) * A(1, 2) - A(2, 2) * A(1, 3)),
        -s * (A(3, 3) * A(2, 1) - A(3, 1) * A(2, 3)),
        s * (A(3, 3) * A(1, 1) - A(3, 1) * A(1, 3)),
        -s * (A(2, 3) * A(1, 1) - A(2, 1) * A(1, 3)),
        s * (A(3, 2) * A(2, 1) - A(3, 1) * A(2, 2)),
        -s * (A(3, 2) * A(1, 1) - A(3, 1) * A(1, 2)),
        s * (A(2, 2) * A(1, 1) - A(2, 1) * A(1, 2)),
    ]


def invert_sub2(a: Sequence[float]) -> Matrix:
    """Invert the upper-left 2x2 block, padding the rest with identity."""
    _check(a)
    d = a[0] * a[4] - a[1] * a[3]
    if d == 0.0:
        raise SingularMatrixError("upper-left 2x2 block is singular")
    return [
        a[4] / d, -a[1] / d, 0.0,
        -a[3] / d, a[0] / d, 0.0,
        0.0, 0.0, 1.0,
    ]