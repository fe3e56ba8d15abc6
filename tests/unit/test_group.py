"""
Unit tests for confidential_ledger.crypto.group — Scalar / Point algebra.
"""

import random

import pytest

from confidential_ledger.crypto.errors import MalformedEncoding
from confidential_ledger.crypto.group import (
    GENERATOR_LABEL,
    SECP256K1_N,
    SECP256K1_P,
    G,
    H,
    Point,
    Scalar,
    hash_to_curve,
)


def _on_curve(pt: Point) -> bool:
    x, y = pt.x(), pt.y()
    return (y * y) % SECP256K1_P == (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P


# ==============================================================================
# Scalar
# ==============================================================================


class TestScalar:

    def test_reduced_on_construction(self):
        assert Scalar(SECP256K1_N + 5).value == 5
        assert Scalar(-1).value == SECP256K1_N - 1

    def test_arithmetic(self):
        a, b = Scalar(7), Scalar(11)
        assert a + b == Scalar(18)
        assert a - b == Scalar(-4)
        assert a * b == Scalar(77)
        assert -a + a == Scalar(0)
        assert 3 * a == Scalar(21)
        assert a + 1 == Scalar(8)

    def test_inverse(self):
        a = Scalar.random()
        assert a * a.inverse() == Scalar(1)

    def test_zero_has_no_inverse(self):
        with pytest.raises(ZeroDivisionError):
            Scalar(0).inverse()

    def test_random_is_non_zero_and_distinct(self):
        draws = {Scalar.random().value for _ in range(20)}
        assert len(draws) == 20
        assert 0 not in draws

    def test_seeded_rng_is_deterministic(self):
        assert Scalar.random(random.Random(7)) == Scalar.random(random.Random(7))

    def test_roundtrip(self):
        for s in (Scalar(0), Scalar(1), Scalar(SECP256K1_N - 1), Scalar.random()):
            raw = s.to_bytes()
            assert len(raw) == 32
            assert Scalar.from_bytes(raw) == s
            assert Scalar.from_hex(s.hex()).hex() == s.hex()

    def test_rejects_unreduced(self):
        with pytest.raises(MalformedEncoding, match="not reduced"):
            Scalar.from_bytes(SECP256K1_N.to_bytes(32, "big"))

    def test_rejects_wrong_length(self):
        with pytest.raises(MalformedEncoding, match="32 scalar bytes"):
            Scalar.from_bytes(b"\x01" * 31)

    def test_rejects_bad_hex(self):
        with pytest.raises(MalformedEncoding, match="not valid hex"):
            Scalar.from_hex("zz" * 32)

    @pytest.mark.parametrize("mangle", [str.upper, lambda h: h[:2] + " " + h[2:], lambda h: "\t" + h])
    def test_rejects_non_canonical_hex(self, mangle):
        with pytest.raises(MalformedEncoding, match="lowercase"):
            Scalar.from_hex(mangle(Scalar(0xABCDEF).hex()))

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            Scalar(1.5)


# ==============================================================================
# Point
# ==============================================================================


class TestPoint:

    def test_generators_valid_and_independent(self):
        assert _on_curve(G)
        assert _on_curve(H)
        assert G != H
        assert H.to_bytes()[0] == 0x02

    def test_h_is_deterministic(self):
        assert hash_to_curve(GENERATOR_LABEL + G.to_bytes()) == H

    def test_group_law(self):
        a, b = Scalar.random(), Scalar.random()
        assert a * G + b * G == (a + b) * G
        assert (a * G) - (a * G) == Point.identity()
        assert -(a * G) + a * G == Point.identity()
        assert SECP256K1_N * G == Point.identity()

    def test_identity_behaviour(self):
        ident = Point.identity()
        assert ident.is_identity
        assert ident + H == H
        assert H + ident == H
        assert 0 * H == ident
        assert Scalar(5) * ident == ident

    def test_roundtrip(self):
        for pt in (G, H, Scalar.random() * G, Scalar.random() * H):
            raw = pt.to_bytes()
            assert len(raw) == 33
            assert Point.from_bytes(raw) == pt
            assert Point.from_hex(pt.hex()).hex() == pt.hex()

    def test_cannot_encode_identity(self):
        with pytest.raises(ValueError, match="infinity"):
            Point.identity().to_bytes()

    def test_decode_invalid_prefix(self):
        with pytest.raises(MalformedEncoding, match="Invalid prefix"):
            Point.from_hex("04" + "aa" * 32)

    def test_decode_wrong_length(self):
        with pytest.raises(MalformedEncoding, match="33 point bytes"):
            Point.from_hex("02aabb")

    @pytest.mark.parametrize("text", [G.hex().upper(), G.hex()[:2] + G.hex()[2:].upper(), G.hex() + " "])
    def test_decode_non_canonical_hex(self, text):
        with pytest.raises(MalformedEncoding, match="lowercase"):
            Point.from_hex(text)

    def test_decode_unreduced_x(self):
        with pytest.raises(MalformedEncoding, match="not reduced"):
            Point.from_bytes(b"\x02" + SECP256K1_P.to_bytes(32, "big"))

    def test_decode_off_curve(self):
        x = 1
        while pow((pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P, (SECP256K1_P - 1) // 2, SECP256K1_P) == 1:
            x += 1
        with pytest.raises(MalformedEncoding, match="does not correspond"):
            Point.from_bytes(b"\x02" + x.to_bytes(32, "big"))

    def test_hashable(self):
        assert len({G, Point.from_bytes(G.to_bytes()), H}) == 2
