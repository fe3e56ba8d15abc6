"""
Fiat-Shamir transform.

A Transcript absorbs the public statement and every prover commit message,
then yields the verifier challenge as Blake2b-512(transcript) mod n. Each
item is framed as (label length, label, data length, data) so that no two
different transcripts hash the same bytes.
"""

from __future__ import annotations

import hashlib

from confidential_ledger.crypto.group import (
    G,
    H,
    POINT_SIZE,
    SECP256K1_N,
    Point,
    Scalar,
)
from confidential_ledger.crypto.params import ProtocolParams

_IDENTITY_BYTES = b"\x00" * POINT_SIZE


class Transcript:
    """
    Running Fiat-Shamir transcript for one proof.

    Usage:
        t = Transcript(b"range_proof", params)
        t.append_point(b"C", commitment)
        e = t.challenge_scalar()
    """

    def __init__(
        self,
        protocol_label: bytes,
        params: ProtocolParams,
        include_bit_length: bool = True,
    ) -> None:
        self._hasher = hashlib.blake2b(digest_size=64)
        self.append_bytes(b"protocol", protocol_label)
        self.append_bytes(b"params", params.to_bytes(include_bit_length))
        self.append_point(b"G", G)
        self.append_point(b"H", H)

    def append_bytes(self, label: bytes, data: bytes) -> None:
        self._hasher.update(len(label).to_bytes(1, "big"))
        self._hasher.update(label)
        self._hasher.update(len(data).to_bytes(4, "big"))
        self._hasher.update(data)

    def append_scalar(self, label: bytes, scalar: Scalar) -> None:
        self.append_bytes(label, scalar.to_bytes())

    def append_point(self, label: bytes, point: Point) -> None:
        # Identity only shows up in commit messages with negligible probability.
        data = _IDENTITY_BYTES if point.is_identity else point.to_bytes()
        self.append_bytes(label, data)

    def challenge_scalar(self) -> Scalar:
        """Derive the challenge from everything absorbed so far."""
        digest = self._hasher.copy().digest()
        return Scalar(int.from_bytes(digest, "big") % SECP256K1_N)
