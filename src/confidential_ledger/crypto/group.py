"""
Scalar and point algebra over secp256k1.

Provides:
- Scalar: integers modulo the group order with canonical 32-byte encoding
- Point: group elements with canonical 33-byte compressed SEC1 encoding
- hash_to_curve: NUMS (Nothing-Up-My-Sleeve) generator derivation
- G, H: the two independent generators used by every commitment

Mathematical foundation:
    secp256k1 has prime order n and cofactor 1, so every point that
    satisfies y² = x³ + 7 (mod p) lies in the prime-order group. Decoding
    therefore only needs the on-curve check to guarantee subgroup
    membership.

    H = hash_to_curve(label || G) has no known discrete log w.r.t. G,
    which is what makes Pedersen commitments v·G + r·H binding.

References:
    [SEC1]  Standards for Efficient Cryptography, SEC 1 v2, §2.3.3-2.3.4.
    [H2C]   IETF draft-irtf-cfrg-hash-to-curve, §5 (try-and-increment method).
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from typing import Protocol

import ecdsa
import ecdsa.ellipticcurve as ec

from confidential_ledger.crypto.errors import MalformedEncoding

# ==============================================================================
# secp256k1 curve constants
# ==============================================================================

# Field prime
SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

# Group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

SCALAR_SIZE = 32
"""Width in bytes of a canonical scalar encoding."""

POINT_SIZE = 33
"""Width in bytes of a canonical (compressed) point encoding."""

# The secp256k1 curve object from the ecdsa library
_CURVE = ecdsa.SECP256k1.curve
_GENERATOR = ecdsa.SECP256k1.generator


class RandomSource(Protocol):
    """Anything exposing random.Random's randrange (SystemRandom, seeded Random)."""

    def randrange(self, start: int, stop: int) -> int: ...


_SYSTEM_RANDOM = secrets.SystemRandom()


def default_rng() -> RandomSource:
    """Return the process-wide OS-entropy source (thread-safe)."""
    return _SYSTEM_RANDOM


# ==============================================================================
# Scalar
# ==============================================================================


@dataclass(frozen=True)
class Scalar:
    """
    An integer modulo the secp256k1 group order.

    The stored value is always reduced into [0, n). Arithmetic with another
    Scalar or a plain int stays in the field; multiplying by a Point yields
    a Point.
    """
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Scalar value must be an int, got {type(self.value).__name__}")
        object.__setattr__(self, "value", self.value % SECP256K1_N)

    @classmethod
    def random(cls, rng: RandomSource | None = None) -> Scalar:
        """
        Draw a uniformly random non-zero scalar.

        Args:
            rng: Randomness source; defaults to the OS-entropy source.
        """
        source = rng if rng is not None else _SYSTEM_RANDOM
        return cls(source.randrange(1, SECP256K1_N))

    # -- arithmetic ------------------------------------------------------------

    def __add__(self, other: Scalar | int) -> Scalar:
        if isinstance(other, Scalar):
            return Scalar(self.value + other.value)
        if isinstance(other, int):
            return Scalar(self.value + other)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: Scalar | int) -> Scalar:
        if isinstance(other, Scalar):
            return Scalar(self.value - other.value)
        if isinstance(other, int):
            return Scalar(self.value - other)
        return NotImplemented

    def __rsub__(self, other: int) -> Scalar:
        if isinstance(other, int):
            return Scalar(other - self.value)
        return NotImplemented

    def __mul__(self, other: Scalar | int) -> Scalar:
        if isinstance(other, Scalar):
            return Scalar(self.value * other.value)
        if isinstance(other, int):
            return Scalar(self.value * other)
        return NotImplemented

    def __rmul__(self, other: int) -> Scalar:
        if isinstance(other, int):
            return Scalar(other * self.value)
        return NotImplemented

    def __neg__(self) -> Scalar:
        return Scalar(-self.value)

    def __int__(self) -> int:
        return self.value

    def inverse(self) -> Scalar:
        """Multiplicative inverse modulo n (Fermat)."""
        if self.value == 0:
            raise ZeroDivisionError("zero scalar has no inverse")
        return Scalar(pow(self.value, SECP256K1_N - 2, SECP256K1_N))

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    # -- encoding --------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(SCALAR_SIZE, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> Scalar:
        """
        Decode a canonical 32-byte big-endian scalar.

        Raises:
            MalformedEncoding: If the length is wrong or the value is >= n.
        """
        if len(data) != SCALAR_SIZE:
            raise MalformedEncoding(f"Expected {SCALAR_SIZE} scalar bytes, got {len(data)}")
        value = int.from_bytes(data, "big")
        if value >= SECP256K1_N:
            raise MalformedEncoding("Scalar is not reduced modulo the group order")
        return cls(value)

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> Scalar:
        try:
            raw = bytes.fromhex(hex_str)
        except (TypeError, ValueError) as e:
            raise MalformedEncoding(f"Scalar is not valid hex: {e}") from e
        if hex_str != raw.hex():
            raise MalformedEncoding("Scalar hex must be lowercase with no surrounding whitespace")
        return cls.from_bytes(raw)

    def __repr__(self) -> str:
        return f"Scalar(0x{self.value:064x})"


# ==============================================================================
# Point
# ==============================================================================


class Point:
    """
    An element of the secp256k1 group.

    Wraps an ecdsa point. The identity (point at infinity) can arise from
    arithmetic but has no canonical encoding and is never decoded.
    """

    __slots__ = ("_pt",)

    def __init__(self, pt: ec.AbstractPoint) -> None:
        self._pt = pt

    @classmethod
    def identity(cls) -> Point:
        return cls(ec.INFINITY)

    @property
    def is_identity(self) -> bool:
        return self._pt == ec.INFINITY

    def x(self) -> int:
        return self._pt.x()

    def y(self) -> int:
        return self._pt.y()

    # -- arithmetic ------------------------------------------------------------

    def __add__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        if self.is_identity:
            return other
        if other.is_identity:
            return self
        return Point(self._pt + other._pt)

    def __neg__(self) -> Point:
        if self.is_identity:
            return self
        return Point(-self._pt)

    def __sub__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return self + (-other)

    def __mul__(self, k: Scalar | int) -> Point:
        if isinstance(k, Scalar):
            k = k.value
        elif not isinstance(k, int):
            return NotImplemented
        k %= SECP256K1_N
        if k == 0 or self.is_identity:
            return Point.identity()
        return Point(self._pt * k)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        if self.is_identity or other.is_identity:
            return self.is_identity and other.is_identity
        return self.x() == other.x() and self.y() == other.y()

    def __hash__(self) -> int:
        if self.is_identity:
            return hash(b"")
        return hash(self.to_bytes())

    # -- encoding --------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """
        Encode as 33-byte SEC1 compressed form.

        Raises:
            ValueError: If the point is the identity (point at infinity).
        """
        if self.is_identity:
            raise ValueError("Cannot encode the point at infinity")
        prefix = b"\x02" if self.y() % 2 == 0 else b"\x03"
        return prefix + self.x().to_bytes(32, "big")

    @classmethod
    def from_bytes(cls, raw: bytes) -> Point:
        """
        Decode a 33-byte compressed secp256k1 point.

        Args:
            raw: 02/03 prefix + 32-byte X coordinate.

        Returns:
            The decoded Point (never the identity).

        Raises:
            MalformedEncoding: If the bytes are malformed or not on the curve.
        """
        if len(raw) != POINT_SIZE:
            raise MalformedEncoding(f"Expected {POINT_SIZE} point bytes, got {len(raw)}")
        prefix = raw[0]
        if prefix not in (0x02, 0x03):
            raise MalformedEncoding(f"Invalid prefix byte: 0x{prefix:02x}")

        x = int.from_bytes(raw[1:], "big")
        if x >= SECP256K1_P:
            raise MalformedEncoding("X coordinate is not reduced modulo the field prime")
        y_sq = (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P
        y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)

        # Verify it's actually a quadratic residue (point is on curve)
        if (y * y) % SECP256K1_P != y_sq:
            raise MalformedEncoding(f"X coordinate 0x{x:064x} does not correspond to a curve point")

        is_even = (prefix == 0x02)
        if (y % 2 == 0) != is_even:
            y = SECP256K1_P - y

        return cls(ec.PointJacobi(_CURVE, x, y, 1, SECP256K1_N))

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> Point:
        try:
            raw = bytes.fromhex(hex_str)
        except (TypeError, ValueError) as e:
            raise MalformedEncoding(f"Point is not valid hex: {e}") from e
        if hex_str != raw.hex():
            raise MalformedEncoding("Point hex must be lowercase with no surrounding whitespace")
        return cls.from_bytes(raw)

    def __repr__(self) -> str:
        if self.is_identity:
            return "Point(identity)"
        return f"Point({self.hex()})"


# ==============================================================================
# hash_to_curve — NUMS generator derivation
# ==============================================================================


def hash_to_curve(seed: bytes) -> Point:
    """
    Derive a Nothing-Up-My-Sleeve (NUMS) group element from a seed.

    Algorithm (try-and-increment, per IETF hash-to-curve §5):
        1. x = int(Blake2b256(seed)) mod p
        2. While x³+7 mod p is not a quadratic residue: x += 1
        3. Compute y = sqrt(x³+7) mod p, choose even y (0x02 prefix)

    Args:
        seed: Arbitrary domain-separated seed bytes.

    Returns:
        The derived point, precomputed for fast scalar multiplication.
    """
    digest = hashlib.blake2b(seed, digest_size=32).digest()
    x = int.from_bytes(digest, "big") % SECP256K1_P

    for _ in range(1000):
        y_sq = (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P
        # Euler criterion: y_sq is a QR iff y_sq^((p-1)/2) == 1 mod p
        if pow(y_sq, (SECP256K1_P - 1) // 2, SECP256K1_P) == 1:
            y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)
            if y % 2 != 0:
                y = SECP256K1_P - y
            return Point(ec.PointJacobi(_CURVE, x, y, 1, SECP256K1_N, generator=True))
        x = (x + 1) % SECP256K1_P

    raise RuntimeError("hash_to_curve: failed to find a valid point in 1000 iterations")


# ==============================================================================
# Generators
# ==============================================================================

GENERATOR_LABEL = b"confidential_ledger.v1.generator.H"

G = Point(_GENERATOR)
"""The standard secp256k1 base point; carries the committed value."""

H = hash_to_curve(GENERATOR_LABEL + G.to_bytes())
"""NUMS secondary generator; carries the blinding factor."""
