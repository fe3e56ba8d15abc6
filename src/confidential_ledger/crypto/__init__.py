"""
confidential_ledger.crypto — Commitment / proof / verify engine.

Provides:
- Scalar / Point algebra over secp256k1 with canonical encodings
- Pedersen commitments to credit values (make_credit, open_and_check)
- Zero-knowledge range proofs (prove_range, verify_range)
- Zero-knowledge sum-balance proofs (prove_sum_balance, verify_sum_balance)
- Versioned protocol parameters and the Fiat-Shamir transcript
"""

from confidential_ledger.crypto.bit_proof import BitProof, BitProofStage, BitProver
from confidential_ledger.crypto.commitment import (
    MAX_CREDIT_VALUE,
    ConfidentialCredit,
    OwnerSecret,
    commit,
    make_credit,
    open_and_check,
)
from confidential_ledger.crypto.errors import (
    ConfidentialLedgerError,
    InconsistentSecret,
    MalformedEncoding,
    MalformedProof,
    ProtocolStateError,
    UnbalancedInput,
    ValueOutOfDomain,
)
from confidential_ledger.crypto.group import (
    SECP256K1_N,
    SECP256K1_P,
    G,
    H,
    Point,
    Scalar,
    hash_to_curve,
)
from confidential_ledger.crypto.params import (
    DEFAULT_PARAMS,
    PROTOCOL_VERSIONS,
    ProtocolParams,
    params_for_version,
)
from confidential_ledger.crypto.range_proof import RangeProof, prove_range, verify_range
from confidential_ledger.crypto.sum_balance import (
    SumBalanceProof,
    prove_sum_balance,
    verify_sum_balance,
)
from confidential_ledger.crypto.transcript import Transcript

__all__ = [
    # Algebra
    "SECP256K1_N",
    "SECP256K1_P",
    "G",
    "H",
    "Point",
    "Scalar",
    "hash_to_curve",
    # Params / Fiat-Shamir
    "DEFAULT_PARAMS",
    "PROTOCOL_VERSIONS",
    "ProtocolParams",
    "params_for_version",
    "Transcript",
    # Commitments
    "MAX_CREDIT_VALUE",
    "ConfidentialCredit",
    "OwnerSecret",
    "commit",
    "make_credit",
    "open_and_check",
    # Range proofs
    "BitProof",
    "BitProofStage",
    "BitProver",
    "RangeProof",
    "prove_range",
    "verify_range",
    # Sum-balance proofs
    "SumBalanceProof",
    "prove_sum_balance",
    "verify_sum_balance",
    # Errors
    "ConfidentialLedgerError",
    "InconsistentSecret",
    "MalformedEncoding",
    "MalformedProof",
    "ProtocolStateError",
    "UnbalancedInput",
    "ValueOutOfDomain",
]
