"""
Zero-knowledge range proofs over Pedersen commitments.

Proves that a ConfidentialCredit C = v·G + r·H hides a value with
0 <= v < 2^N, revealing nothing else.

Construction:
    1. Decompose v into bits b_0..b_{N-1} and commit to each bit:
           B_i = b_i·G + r_i·H   (fresh random r_i)
    2. For each B_i, an OR-proof that B_i hides 0 or 1
       (see confidential_ledger.crypto.bit_proof).
    3. Tie the bits to C. With D = C - Σ 2^i·B_i:
           D = (v - Σ 2^i·b_i)·G + (r - Σ 2^i·r_i)·H = δ·H
       A Schnorr proof (base H) of knowledge of δ shows D has no G
       component, hence v = Σ 2^i·b_i.
    4. Fiat-Shamir: every commit message of every sub-proof is fixed,
       then one challenge e is hashed over (params, G, H, C, all B_i,
       all commit messages). All bit proofs split e between their two
       branches and the Schnorr proof responds to e directly.

Only the bit commitments, the challenge and the responses are transmitted;
the verifier recomputes every commit message and accepts iff the rehashed
challenge equals e.

References:
    [CDS94] Cramer, Damgård, Schoenmakers, CRYPTO '94 (OR-composition).
    [Sch91] C.P. Schnorr, "Efficient Signature Generation by Smart Cards",
            J. Cryptology 1991.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from confidential_ledger.crypto.bit_proof import (
    BitProof,
    BitProver,
    recompute_commit_messages,
)
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
    ValueOutOfDomain,
)
from confidential_ledger.crypto.group import (
    G,
    H,
    POINT_SIZE,
    SCALAR_SIZE,
    Point,
    RandomSource,
    Scalar,
)
from confidential_ledger.crypto.params import (
    DEFAULT_PARAMS,
    ProtocolParams,
    params_for_version,
)
from confidential_ledger.crypto.transcript import Transcript

logger = logging.getLogger("confidential_ledger.range_proof")

RANGE_PROOF_TAG = 0x52  # "R"

_HEADER_SIZE = 3 + 2 * SCALAR_SIZE
_BIT_PROOF_SIZE = POINT_SIZE + 3 * SCALAR_SIZE


# ==============================================================================
# Range Proof
# ==============================================================================


@dataclass(frozen=True)
class RangeProof:
    """
    A range proof attesting that a ConfidentialCredit hides a value in [0, 2^N).

    Attributes:
        version: Protocol version the proof was built under.
        bit_length: N, the number of bits proven.
        challenge: Shared Fiat-Shamir challenge e.
        blinding_response: Schnorr response for D = C - Σ 2^i·B_i.
        bits: One BitProof per bit, least significant first.
    """
    version: int
    bit_length: int
    challenge: Scalar
    blinding_response: Scalar
    bits: tuple[BitProof, ...]

    def check_format(self) -> None:
        """
        Validate the proof's shape (not its cryptographic validity).

        Raises:
            MalformedProof: On wrong types, a sub-proof count that does not
                match bit_length, or identity bit commitments.
        """
        if not isinstance(self.version, int) or not 0 < self.version < 256:
            raise MalformedProof(f"Invalid proof version: {self.version!r}")
        if not isinstance(self.bit_length, int) or not 0 < self.bit_length < 256:
            raise MalformedProof(f"Invalid bit length: {self.bit_length!r}")
        if not isinstance(self.challenge, Scalar) or not isinstance(self.blinding_response, Scalar):
            raise MalformedProof("Challenge and blinding response must be Scalars")
        if not isinstance(self.bits, (tuple, list)):
            raise MalformedProof(f"Bit proofs must be a sequence, got {type(self.bits).__name__}")
        if len(self.bits) != self.bit_length:
            raise MalformedProof(
                f"Expected {self.bit_length} bit proofs, got {len(self.bits)}"
            )
        for i, bit in enumerate(self.bits):
            if not isinstance(bit, BitProof):
                raise MalformedProof(f"Bit proof {i} has the wrong type")
            if not isinstance(bit.commitment, Point) or bit.commitment.is_identity:
                raise MalformedProof(f"Bit commitment {i} is not a valid group element")
            if not all(
                isinstance(s, Scalar)
                for s in (bit.zero_challenge, bit.zero_response, bit.one_response)
            ):
                raise MalformedProof(f"Bit proof {i} has non-Scalar fields")

    # -- canonical encoding ----------------------------------------------------

    def to_bytes(self) -> bytes:
        """
        Canonical encoding:
            tag(1) | version(1) | bit_length(1) | e(32) | s_agg(32)
            | N x [ B_i(33) | c0_i(32) | s0_i(32) | s1_i(32) ]
        """
        out = bytearray([RANGE_PROOF_TAG, self.version, self.bit_length])
        out += self.challenge.to_bytes()
        out += self.blinding_response.to_bytes()
        for bit in self.bits:
            out += bit.commitment.to_bytes()
            out += bit.zero_challenge.to_bytes()
            out += bit.zero_response.to_bytes()
            out += bit.one_response.to_bytes()
        return bytes(out)

    @classmethod
    def from_bytes(cls, data: bytes) -> RangeProof:
        """
        Decode the canonical encoding.

        Raises:
            MalformedProof: On a wrong tag, unknown version, truncated or
                oversized input, or an undecodable scalar/point.
        """
        if len(data) < _HEADER_SIZE:
            raise MalformedProof(f"Range proof too short: {len(data)} bytes")
        if data[0] != RANGE_PROOF_TAG:
            raise MalformedProof(f"Not a range proof (tag 0x{data[0]:02x})")
        version, bit_length = data[1], data[2]
        params_for_version(version)
        expected = _HEADER_SIZE + bit_length * _BIT_PROOF_SIZE
        if len(data) != expected:
            raise MalformedProof(f"Range proof must be {expected} bytes, got {len(data)}")

        try:
            challenge = Scalar.from_bytes(data[3:3 + SCALAR_SIZE])
            blinding_response = Scalar.from_bytes(data[3 + SCALAR_SIZE:_HEADER_SIZE])
            bits = []
            offset = _HEADER_SIZE
            for _ in range(bit_length):
                chunk = data[offset:offset + _BIT_PROOF_SIZE]
                s = POINT_SIZE
                bits.append(BitProof(
                    commitment=Point.from_bytes(chunk[:s]),
                    zero_challenge=Scalar.from_bytes(chunk[s:s + SCALAR_SIZE]),
                    zero_response=Scalar.from_bytes(chunk[s + SCALAR_SIZE:s + 2 * SCALAR_SIZE]),
                    one_response=Scalar.from_bytes(chunk[s + 2 * SCALAR_SIZE:]),
                ))
                offset += _BIT_PROOF_SIZE
        except MalformedEncoding as e:
            raise MalformedProof(f"Range proof field does not decode: {e}") from e

        proof = cls(
            version=version,
            bit_length=bit_length,
            challenge=challenge,
            blinding_response=blinding_response,
            bits=tuple(bits),
        )
        proof.check_format()
        return proof

    def hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> RangeProof:
        try:
            raw = bytes.fromhex(hex_str)
        except (TypeError, ValueError) as e:
            raise MalformedProof(f"Range proof is not valid hex: {e}") from e
        if hex_str != raw.hex():
            raise MalformedProof("Range proof hex must be lowercase with no surrounding whitespace")
        return cls.from_bytes(raw)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "bit_length": self.bit_length,
            "challenge": self.challenge.hex(),
            "blinding_response": self.blinding_response.hex(),
            "bits": [
                {
                    "commitment": bit.commitment.hex(),
                    "zero_challenge": bit.zero_challenge.hex(),
                    "zero_response": bit.zero_response.hex(),
                    "one_response": bit.one_response.hex(),
                }
                for bit in self.bits
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RangeProof:
        try:
            proof = cls(
                version=data["version"],
                bit_length=data["bit_length"],
                challenge=Scalar.from_hex(data["challenge"]),
                blinding_response=Scalar.from_hex(data["blinding_response"]),
                bits=tuple(
                    BitProof(
                        commitment=Point.from_hex(bit["commitment"]),
                        zero_challenge=Scalar.from_hex(bit["zero_challenge"]),
                        zero_response=Scalar.from_hex(bit["zero_response"]),
                        one_response=Scalar.from_hex(bit["one_response"]),
                    )
                    for bit in data["bits"]
                ),
            )
        except (KeyError, TypeError, MalformedEncoding) as e:
            raise MalformedProof(f"Range proof dict is malformed: {e}") from e
        proof.check_format()
        params_for_version(proof.version)
        return proof


def _challenge(
    params: ProtocolParams,
    credit: ConfidentialCredit,
    bit_commitments: list[Point],
    bit_messages: list[tuple[Point, Point]],
    aggregate_message: Point,
) -> Scalar:
    transcript = Transcript(b"confidential_ledger.range_proof", params)
    transcript.append_point(b"C", credit.point)
    for commitment in bit_commitments:
        transcript.append_point(b"B", commitment)
    for a0, a1 in bit_messages:
        transcript.append_point(b"A0", a0)
        transcript.append_point(b"A1", a1)
    transcript.append_point(b"R", aggregate_message)
    return transcript.challenge_scalar()


def _weighted_sum(bit_commitments: list[Point]) -> Point:
    """Σ 2^i · B_i."""
    total = Point.identity()
    for i, commitment in enumerate(bit_commitments):
        total = total + (1 << i) * commitment
    return total


def prove_range(
    secret: OwnerSecret,
    *,
    credit: ConfidentialCredit | None = None,
    params: ProtocolParams = DEFAULT_PARAMS,
    rng: RandomSource | None = None,
) -> RangeProof:
    """
    Generate a range proof that secret.credit_value ∈ [0, 2^bit_length).

    Args:
        secret: Opening of the commitment being proven.
        credit: The commitment, if the caller holds it; checked against
                `secret` before any proof material is produced.
        params: Protocol parameters (version and bit length).
        rng: Randomness source for blindings and nonces.

    Returns:
        A RangeProof bound to commit(secret).

    Raises:
        InconsistentSecret: If `credit` is given and `secret` does not open it.
        ValueOutOfDomain: If the value does not fit in bit_length bits.
        MalformedProof: If params.version is not a released protocol version.
    """
    params_for_version(params.version)
    if credit is not None and not open_and_check(secret, credit):
        raise InconsistentSecret("OwnerSecret does not open the given credit")
    value = secret.credit_value
    n = params.bit_length
    if value >> n:
        raise ValueOutOfDomain(f"Value does not fit in {n} bits")
    if credit is None:
        credit = commit(value, secret.secret_blinding)

    # Commit to each bit
    bits = [(value >> i) & 1 for i in range(n)]
    blindings = [Scalar.random(rng) for _ in range(n)]
    commitments = [bit * G + r * H for bit, r in zip(bits, blindings)]

    # D = C - Σ 2^i·B_i = δ·H
    delta = secret.secret_blinding
    for i, r in enumerate(blindings):
        delta = delta - r * (1 << i)

    # Commit phase: every message fixed before the challenge
    provers = [
        BitProver(bit, r, commitment, rng)
        for bit, r, commitment in zip(bits, blindings, commitments)
    ]
    messages = [p.commit_both_branches() for p in provers]
    nonce = Scalar.random(rng)
    aggregate_message = nonce * H

    challenge = _challenge(params, credit, commitments, messages, aggregate_message)

    # Response phase
    bit_proofs = []
    for p in provers:
        p.derive_shared_challenge(challenge)
        p.respond_real_branch()
        bit_proofs.append(p.respond_simulated_branch())

    logger.debug(f"Built {n}-bit range proof for credit {credit.hex()[:16]}...")
    return RangeProof(
        version=params.version,
        bit_length=n,
        challenge=challenge,
        blinding_response=nonce + challenge * delta,
        bits=tuple(bit_proofs),
    )


def verify_range(
    credit: ConfidentialCredit,
    proof: RangeProof,
    params: ProtocolParams | None = None,
) -> bool:
    """
    Verify a range proof against a commitment using public data only.

    Args:
        credit: The commitment the proof claims to cover.
        proof: The RangeProof.
        params: Pin the verifier to these params; defaults to the params
                of the proof's own version.

    Returns:
        True iff every bit sub-proof and the aggregation proof verify.

    Raises:
        MalformedProof: If the proof is structurally invalid or carries an
            unknown version.
        TypeError: If `credit` is not a ConfidentialCredit.
    """
    proof.check_format()
    if not isinstance(credit, ConfidentialCredit):
        raise TypeError(f"credit must be a ConfidentialCredit, got {type(credit).__name__}")
    if params is None:
        params = params_for_version(proof.version)
    elif proof.version != params.version:
        logger.debug(f"Range proof version {proof.version} != expected {params.version}")
        return False
    if proof.bit_length != params.bit_length:
        logger.debug(f"Range proof covers {proof.bit_length} bits, expected {params.bit_length}")
        return False

    commitments = [bit.commitment for bit in proof.bits]
    messages = [recompute_commit_messages(bit, proof.challenge) for bit in proof.bits]

    # R = s_agg·H - e·D
    residual = credit.point - _weighted_sum(commitments)
    aggregate_message = proof.blinding_response * H - proof.challenge * residual

    expected = _challenge(params, credit, commitments, messages, aggregate_message)
    if expected != proof.challenge:
        logger.debug("Range proof rejected: challenge mismatch")
        return False
    return True
