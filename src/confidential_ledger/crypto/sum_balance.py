"""
Zero-knowledge sum-balance proofs.

Proves, for three commitments C1, C2, C3 hiding v1, v2, v3, that
v1 = v2 + v3 and that the prover knows all three openings, without
revealing any value or blinding.

Mathematical foundation:
    C1 - C2 - C3 = (v1 - v2 - v3)·G + (b1 - b2 - b3)·H
    so a balanced triple leaves a pure H-multiple. Instead of proving the
    residual alone, one batched Sigma protocol proves knowledge of
    (v2, v3, b1, b2, b3) such that

        C1 = (v2 + v3)·G + b1·H
        C2 =  v2·G       + b2·H
        C3 =  v3·G       + b3·H

    The constraint v1 = v2 + v3 eliminates v1, leaving five witness
    components and therefore five nonces k1..k5 and five responses m1..m5:

        T1 = (k1 + k2)·G + k3·H
        T2 =  k1·G       + k4·H
        T3 =  k2·G       + k5·H
        c  = FS(params, G, H, C1, C2, C3, T1, T2, T3)
        m1 = k1 + c·v2,  m2 = k2 + c·v3,
        m3 = k3 + c·b1,  m4 = k4 + c·b2,  m5 = k5 + c·b3

    Only (c, m1..m5) is transmitted. The verifier recomputes

        T1 = (m1 + m2)·G + m3·H - c·C1
        T2 =  m1·G       + m4·H - c·C2
        T3 =  m2·G       + m5·H - c·C3

    and accepts iff rehashing yields c.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from confidential_ledger.crypto.commitment import (
    ConfidentialCredit,
    OwnerSecret,
    commit,
    open_and_check,
)
from confidential_ledger.crypto.errors import (
    InconsistentSecret,
    MalformedEncoding,
    MalformedProof,
    UnbalancedInput,
)
from confidential_ledger.crypto.group import G, H, SCALAR_SIZE, Point, RandomSource, Scalar
from confidential_ledger.crypto.params import (
    DEFAULT_PARAMS,
    ProtocolParams,
    params_for_version,
)
from confidential_ledger.crypto.transcript import Transcript

logger = logging.getLogger("confidential_ledger.sum_balance")

SUM_BALANCE_PROOF_TAG = 0x53  # "S"

_RESPONSE_FIELDS = ("m1", "m2", "m3", "m4", "m5")
_ENCODED_SIZE = 2 + 6 * SCALAR_SIZE


@dataclass(frozen=True)
class SumBalanceProof:
    """
    Proof that value(C1) = value(C2) + value(C3).

    Attributes:
        version: Protocol version the proof was built under.
        c: Fiat-Shamir challenge.
        m1..m5: Responses for v2, v3, b1, b2, b3.
    """
    version: int
    c: Scalar
    m1: Scalar
    m2: Scalar
    m3: Scalar
    m4: Scalar
    m5: Scalar

    def check_format(self) -> None:
        """
        Raises:
            MalformedProof: On an out-of-range version or non-Scalar fields.
        """
        if not isinstance(self.version, int) or not 0 < self.version < 256:
            raise MalformedProof(f"Invalid proof version: {self.version!r}")
        for name in ("c",) + _RESPONSE_FIELDS:
            if not isinstance(getattr(self, name), Scalar):
                raise MalformedProof(f"Field {name} must be a Scalar")

    @property
    def responses(self) -> tuple[Scalar, ...]:
        return tuple(getattr(self, name) for name in _RESPONSE_FIELDS)

    # -- canonical encoding ----------------------------------------------------

    def to_bytes(self) -> bytes:
        """tag(1) | version(1) | c(32) | m1..m5 (5 x 32)"""
        out = bytearray([SUM_BALANCE_PROOF_TAG, self.version])
        out += self.c.to_bytes()
        for m in self.responses:
            out += m.to_bytes()
        return bytes(out)

    @classmethod
    def from_bytes(cls, data: bytes) -> SumBalanceProof:
        """
        Raises:
            MalformedProof: On a wrong tag or length, unknown version, or
                unreduced scalars.
        """
        if len(data) != _ENCODED_SIZE:
            raise MalformedProof(
                f"Sum-balance proof must be {_ENCODED_SIZE} bytes, got {len(data)}"
            )
        if data[0] != SUM_BALANCE_PROOF_TAG:
            raise MalformedProof(f"Not a sum-balance proof (tag 0x{data[0]:02x})")
        version = data[1]
        params_for_version(version)
        try:
            scalars = [
                Scalar.from_bytes(data[2 + i * SCALAR_SIZE:2 + (i + 1) * SCALAR_SIZE])
                for i in range(6)
            ]
        except MalformedEncoding as e:
            raise MalformedProof(f"Sum-balance proof field does not decode: {e}") from e
        c, m1, m2, m3, m4, m5 = scalars
        return cls(version=version, c=c, m1=m1, m2=m2, m3=m3, m4=m4, m5=m5)

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> SumBalanceProof:
        try:
            raw = bytes.fromhex(hex_str)
        except (TypeError, ValueError) as e:
            raise MalformedProof(f"Sum-balance proof is not valid hex: {e}") from e
        if hex_str != raw.hex():
            raise MalformedProof("Sum-balance proof hex must be lowercase with no surrounding whitespace")
        return cls.from_bytes(raw)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"version": self.version, "c": self.c.hex()}
        for name in _RESPONSE_FIELDS:
            out[name] = getattr(self, name).hex()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SumBalanceProof:
        try:
            fields = {name: Scalar.from_hex(data[name]) for name in ("c",) + _RESPONSE_FIELDS}
            proof = cls(version=data["version"], **fields)
        except (KeyError, TypeError, MalformedEncoding) as e:
            raise MalformedProof(f"Sum-balance proof dict is malformed: {e}") from e
        proof.check_format()
        params_for_version(proof.version)
        return proof


def _challenge(
    params: ProtocolParams,
    credits: tuple[ConfidentialCredit, ConfidentialCredit, ConfidentialCredit],
    messages: tuple[Point, Point, Point],
) -> Scalar:
    transcript = Transcript(b"confidential_ledger.sum_balance", params, include_bit_length=False)
    for label, credit in zip((b"C1", b"C2", b"C3"), credits):
        transcript.append_point(label, credit.point)
    for label, message in zip((b"T1", b"T2", b"T3"), messages):
        transcript.append_point(label, message)
    return transcript.challenge_scalar()


def prove_sum_balance(
    s1: OwnerSecret,
    s2: OwnerSecret,
    s3: OwnerSecret,
    *,
    credits: tuple[ConfidentialCredit, ConfidentialCredit, ConfidentialCredit] | None = None,
    params: ProtocolParams = DEFAULT_PARAMS,
    rng: RandomSource | None = None,
) -> SumBalanceProof:
    """
    Prove that s1.credit_value == s2.credit_value + s3.credit_value.

    Args:
        s1: Opening of C1 (the total).
        s2: Opening of C2.
        s3: Opening of C3.
        credits: (C1, C2, C3), if the caller holds them; each is checked
                 against its opening before any proof material is produced.
        params: Protocol parameters (version).
        rng: Randomness source for the nonces.

    Returns:
        A SumBalanceProof bound to (C1, C2, C3).

    Raises:
        UnbalancedInput: If v1 != v2 + v3.
        InconsistentSecret: If `credits` is given and an opening does not match.
        MalformedProof: If params.version is not a released protocol version.
    """
    params_for_version(params.version)
    v1, v2, v3 = s1.credit_value, s2.credit_value, s3.credit_value
    if v1 != v2 + v3:
        raise UnbalancedInput("Credit values don't balance: v1 != v2 + v3")

    openings = (s1, s2, s3)
    if credits is None:
        credits = tuple(commit(s.credit_value, s.secret_blinding) for s in openings)
    else:
        if len(credits) != 3:
            raise ValueError(f"Expected three credits, got {len(credits)}")
        for i, (secret, credit) in enumerate(zip(openings, credits), start=1):
            if not open_and_check(secret, credit):
                raise InconsistentSecret(f"OwnerSecret {i} does not open credit C{i}")

    witness = (
        Scalar(v2),
        Scalar(v3),
        s1.secret_blinding,
        s2.secret_blinding,
        s3.secret_blinding,
    )
    k1, k2, k3, k4, k5 = (Scalar.random(rng) for _ in range(5))
    messages = (
        (k1 + k2) * G + k3 * H,
        k1 * G + k4 * H,
        k2 * G + k5 * H,
    )

    c = _challenge(params, credits, messages)

    m1, m2, m3, m4, m5 = (
        k + c * w for k, w in zip((k1, k2, k3, k4, k5), witness)
    )
    logger.debug("Built sum-balance proof")
    return SumBalanceProof(version=params.version, c=c, m1=m1, m2=m2, m3=m3, m4=m4, m5=m5)


def verify_sum_balance(
    credits: tuple[ConfidentialCredit, ConfidentialCredit, ConfidentialCredit],
    proof: SumBalanceProof,
    params: ProtocolParams | None = None,
) -> bool:
    """
    Verify that value(C1) = value(C2) + value(C3) using public data only.

    Args:
        credits: (C1, C2, C3) in the order the proof was built for.
        proof: The SumBalanceProof.
        params: Pin the verifier to these params; defaults to the params
                of the proof's own version.

    Returns:
        True iff the recomputed challenge matches proof.c.

    Raises:
        MalformedProof: If the proof is structurally invalid or carries an
            unknown version.
        ValueError: If `credits` does not hold exactly three commitments.
        TypeError: If an element of `credits` is not a ConfidentialCredit.
    """
    proof.check_format()
    credits = tuple(credits)
    if len(credits) != 3:
        raise ValueError(f"Expected three credits, got {len(credits)}")
    for i, credit in enumerate(credits, start=1):
        if not isinstance(credit, ConfidentialCredit):
            raise TypeError(f"C{i} must be a ConfidentialCredit, got {type(credit).__name__}")
    if params is None:
        params = params_for_version(proof.version)
    elif proof.version != params.version:
        logger.debug(f"Sum-balance proof version {proof.version} != expected {params.version}")
        return False

    c1, c2, c3 = (credit.point for credit in credits)
    c, m1, m2, m3, m4, m5 = proof.c, proof.m1, proof.m2, proof.m3, proof.m4, proof.m5
    messages = (
        (m1 + m2) * G + m3 * H - c * c1,
        m1 * G + m4 * H - c * c2,
        m2 * G + m5 * H - c * c3,
    )

    if _challenge(params, credits, messages) != c:
        logger.debug("Sum-balance proof rejected: challenge mismatch")
        return False
    return True
