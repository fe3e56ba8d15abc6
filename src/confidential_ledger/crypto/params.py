"""
Versioned protocol configuration.

The range width, the Fiat-Shamir hash and the curve/generator pair are
fixed per protocol version. Every serialized proof carries its version, so
archived proofs keep verifying under the parameters they were built with
even after the default moves on.

Version 1:
    curve           secp256k1, G = standard base point, H = hash_to_curve(label || G)
    hash            Blake2b-512, reduced modulo the group order
    bit_length      64 (the native width of a credit value)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from confidential_ledger.crypto.errors import MalformedProof
from confidential_ledger.crypto.group import GENERATOR_LABEL

MAX_CREDIT_BITS = 64
"""Native width of a credit value (unsigned 64-bit)."""


@dataclass(frozen=True)
class ProtocolParams:
    """
    Parameters shared by prover and verifier.

    Args:
        version:          Protocol version byte written into every proof
        bit_length:       Range proof width N; proves 0 <= v < 2^N
        curve:            Curve name (informational, bound into transcripts)
        hash_name:        Fiat-Shamir hash name (informational, bound into transcripts)
        generator_label:  Label H was derived from (informational, bound into
                          transcripts; H itself is fixed by group.GENERATOR_LABEL)
    """
    version: int = 1
    bit_length: int = MAX_CREDIT_BITS
    curve: str = "secp256k1"
    hash_name: str = "blake2b-512"
    generator_label: bytes = GENERATOR_LABEL

    def __post_init__(self) -> None:
        if not 0 < self.version < 256:
            raise ValueError(f"version must fit in one byte, got {self.version}")
        if not 0 < self.bit_length <= MAX_CREDIT_BITS:
            raise ValueError(
                f"bit_length must be in [1, {MAX_CREDIT_BITS}], got {self.bit_length}"
            )

    @property
    def max_value(self) -> int:
        """Largest value provable in range under these params."""
        return (1 << self.bit_length) - 1

    def to_bytes(self, include_bit_length: bool = True) -> bytes:
        """
        Canonical encoding bound into every Fiat-Shamir transcript.

        Protocols without a range width (sum-balance) leave bit_length out so
        their proofs do not depend on it.
        """
        header = bytes([self.version, self.bit_length]) if include_bit_length else bytes([self.version])
        return b"|".join([
            header,
            self.curve.encode("ascii"),
            self.hash_name.encode("ascii"),
            self.generator_label,
        ])

    @classmethod
    def from_env(cls) -> ProtocolParams:
        """Resolve params from VCL_PROTOCOL_VERSION (defaults to the current version)."""
        raw = os.getenv("VCL_PROTOCOL_VERSION")
        if raw is None:
            return DEFAULT_PARAMS
        try:
            version = int(raw)
        except ValueError as e:
            raise ValueError(f"VCL_PROTOCOL_VERSION must be an integer, got {raw!r}") from e
        return params_for_version(version)


DEFAULT_PARAMS = ProtocolParams()

PROTOCOL_VERSIONS: dict[int, ProtocolParams] = {
    DEFAULT_PARAMS.version: DEFAULT_PARAMS,
}


def params_for_version(version: int) -> ProtocolParams:
    """
    Look up the parameters of a released protocol version.

    Raises:
        MalformedProof: If the version is unknown.
    """
    try:
        return PROTOCOL_VERSIONS[version]
    except KeyError:
        raise MalformedProof(f"Unknown protocol version: {version}") from None
