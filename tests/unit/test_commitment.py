"""
Unit tests for confidential_ledger.crypto.commitment — credits and openings.
"""

import random

import pytest

from confidential_ledger.crypto.commitment import (
    MAX_CREDIT_VALUE,
    ConfidentialCredit,
    OwnerSecret,
    commit,
    make_credit,
    open_and_check,
)
from confidential_ledger.crypto.errors import MalformedEncoding, ValueOutOfDomain
from confidential_ledger.crypto.group import G, H, Point, Scalar


class TestMakeCredit:

    def test_commitment_matches_opening(self):
        credit, secret = make_credit(100)
        assert secret.credit_value == 100
        assert credit.point == 100 * G + secret.secret_blinding * H
        assert open_and_check(secret, credit)

    def test_binding_different_values(self):
        """Different values never yield the same point."""
        for _ in range(10):
            c1, _ = make_credit(100)
            c2, _ = make_credit(101)
            assert c1.point != c2.point

    def test_hiding_same_value(self):
        """Repeated commitments to one value are all distinct."""
        points = {make_credit(7)[0].hex() for _ in range(25)}
        assert len(points) == 25

    def test_fresh_blinding_every_call(self):
        blindings = {make_credit(1)[1].secret_blinding for _ in range(25)}
        assert len(blindings) == 25

    def test_zero_and_max_values(self):
        for v in (0, MAX_CREDIT_VALUE):
            credit, secret = make_credit(v)
            assert open_and_check(secret, credit)

    def test_seeded_rng(self):
        c1, s1 = make_credit(5, rng=random.Random(1))
        c2, s2 = make_credit(5, rng=random.Random(1))
        assert c1 == c2 and s1 == s2

    @pytest.mark.parametrize("value", [-1, MAX_CREDIT_VALUE + 1, 1.0, "1", True])
    def test_rejects_out_of_domain(self, value):
        with pytest.raises(ValueOutOfDomain):
            make_credit(value)


class TestOpenAndCheck:

    def test_wrong_value(self):
        credit, secret = make_credit(100)
        other = OwnerSecret(credit_value=99, secret_blinding=secret.secret_blinding)
        assert open_and_check(other, credit) is False

    def test_wrong_blinding(self):
        credit, secret = make_credit(100)
        other = OwnerSecret(credit_value=100, secret_blinding=secret.secret_blinding + 1)
        assert open_and_check(other, credit) is False

    def test_commit_helper(self):
        r = Scalar.random()
        assert commit(42, r).point == 42 * G + r * H


class TestTypes:

    def test_secret_repr_hides_blinding(self):
        _, secret = make_credit(10)
        text = repr(secret)
        assert secret.secret_blinding.hex() not in text
        assert "secret_blinding" not in text

    def test_secret_from_hex(self):
        _, secret = make_credit(10)
        rebuilt = OwnerSecret.from_hex(10, secret.secret_blinding.hex())
        assert rebuilt == secret

    def test_secret_rejects_bad_blinding_hex(self):
        with pytest.raises(MalformedEncoding):
            OwnerSecret.from_hex(10, "00")

    def test_credit_roundtrip(self):
        credit, _ = make_credit(10)
        assert ConfidentialCredit.from_hex(credit.hex()) == credit
        assert ConfidentialCredit.from_bytes(credit.to_bytes()).to_bytes() == credit.to_bytes()

    def test_credit_rejects_identity(self):
        with pytest.raises(MalformedEncoding, match="identity"):
            ConfidentialCredit(Point.identity())

    def test_homomorphic_addition(self):
        c1, s1 = make_credit(50)
        c2, s2 = make_credit(75)
        total = OwnerSecret(125, s1.secret_blinding + s2.secret_blinding)
        assert open_and_check(total, c1 + c2)
        assert open_and_check(s1, (c1 + c2) - c2)
