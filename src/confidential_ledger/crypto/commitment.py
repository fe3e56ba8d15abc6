"""
Pedersen commitments to credit values.

Provides:
- OwnerSecret: the private opening (credit_value, secret_blinding)
- ConfidentialCredit: the public commitment point
- make_credit: issue a fresh commitment with a random blinding
- open_and_check: check an opening against a commitment

Mathematical foundation:
    C = v·G + r·H
    where H is the NUMS generator from confidential_ledger.crypto.group.

    A commitment is:
    - **Hiding**: reveals nothing about `v` without `r`
    - **Binding**: cannot open to a different `(v', r')` pair
    - **Homomorphic**: C1 + C2 = (v1+v2)·G + (r1+r2)·H

References:
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91, §3.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from confidential_ledger.crypto.errors import MalformedEncoding, ValueOutOfDomain
from confidential_ledger.crypto.group import G, H, Point, RandomSource, Scalar
from confidential_ledger.crypto.params import MAX_CREDIT_BITS

logger = logging.getLogger("confidential_ledger.commitment")

MAX_CREDIT_VALUE = (1 << MAX_CREDIT_BITS) - 1
"""Largest credit value (unsigned 64-bit)."""


def check_credit_value(value: int) -> int:
    """
    Validate that `value` is an unsigned 64-bit integer.

    Raises:
        ValueOutOfDomain: If value is not an int in [0, 2^64).
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueOutOfDomain(f"credit_value must be an integer, got {type(value).__name__}")
    if value < 0 or value > MAX_CREDIT_VALUE:
        raise ValueOutOfDomain(f"credit_value {value} out of range [0, 2^{MAX_CREDIT_BITS})")
    return value


# ==============================================================================
# Data types
# ==============================================================================


@dataclass(frozen=True)
class OwnerSecret:
    """
    Private opening of a ConfidentialCredit. Never sent to a verifier.

    Attributes:
        credit_value: The committed amount (unsigned 64-bit).
        secret_blinding: The blinding scalar r.
    """
    credit_value: int
    secret_blinding: Scalar = field(repr=False)

    def __post_init__(self) -> None:
        check_credit_value(self.credit_value)
        if not isinstance(self.secret_blinding, Scalar):
            raise TypeError("secret_blinding must be a Scalar")

    @classmethod
    def from_hex(cls, credit_value: int, blinding_hex: str) -> OwnerSecret:
        """Rebuild an opening from stored data (blinding as 64-char hex)."""
        return cls(credit_value=credit_value, secret_blinding=Scalar.from_hex(blinding_hex))


@dataclass(frozen=True)
class ConfidentialCredit:
    """
    Public commitment C = credit_value·G + secret_blinding·H.

    Attributes:
        point: The commitment point (never the identity).
    """
    point: Point

    def __post_init__(self) -> None:
        if not isinstance(self.point, Point):
            raise TypeError("point must be a Point")
        if self.point.is_identity:
            raise MalformedEncoding("A commitment cannot be the identity point")

    def __add__(self, other: ConfidentialCredit) -> ConfidentialCredit:
        """Homomorphic addition: commits to the summed values and blindings."""
        if not isinstance(other, ConfidentialCredit):
            return NotImplemented
        return ConfidentialCredit(self.point + other.point)

    def __sub__(self, other: ConfidentialCredit) -> ConfidentialCredit:
        if not isinstance(other, ConfidentialCredit):
            return NotImplemented
        return ConfidentialCredit(self.point - other.point)

    def to_bytes(self) -> bytes:
        return self.point.to_bytes()

    @classmethod
    def from_bytes(cls, raw: bytes) -> ConfidentialCredit:
        return cls(Point.from_bytes(raw))

    def hex(self) -> str:
        return self.point.hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> ConfidentialCredit:
        return cls(Point.from_hex(hex_str))


# ==============================================================================
# Commitment engine
# ==============================================================================


def commit(value: int, blinding: Scalar) -> ConfidentialCredit:
    """
    Compute the commitment C = value·G + blinding·H.

    Args:
        value: The credit value (unsigned 64-bit).
        blinding: The blinding scalar.

    Returns:
        The ConfidentialCredit wrapping C.

    Raises:
        ValueOutOfDomain: If value is not an unsigned 64-bit integer.
    """
    check_credit_value(value)
    return ConfidentialCredit(value * G + blinding * H)


def make_credit(
    value: int,
    rng: RandomSource | None = None,
) -> tuple[ConfidentialCredit, OwnerSecret]:
    """
    Issue a new confidential credit.

    Draws a fresh non-zero blinding from `rng` on every call, so two credits
    never share a blinding (which would link them and break hiding).

    Args:
        value: The credit value to hide (unsigned 64-bit).
        rng: Randomness source; defaults to the OS-entropy source.

    Returns:
        (credit, secret): the public commitment and its private opening.

    Raises:
        ValueOutOfDomain: If value is not an unsigned 64-bit integer.
    """
    check_credit_value(value)
    blinding = Scalar.random(rng)
    secret = OwnerSecret(credit_value=value, secret_blinding=blinding)
    credit = commit(value, blinding)
    logger.debug(f"Issued credit {credit.hex()[:16]}...")
    return credit, secret


def open_and_check(secret: OwnerSecret, credit: ConfidentialCredit) -> bool:
    """
    Check that `secret` opens `credit`: C == v·G + r·H.

    Returns:
        True if the opening matches, False otherwise.
    """
    expected = secret.credit_value * G + secret.secret_blinding * H
    return expected == credit.point
