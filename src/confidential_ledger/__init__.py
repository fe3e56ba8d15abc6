"""
confidential-ledger: commitment, range proof and sum-balance proof engine
for verifiable confidential ledgers.

Usage:
    from confidential_ledger import make_credit, prove_range, verify_range
    credit, secret = make_credit(100)
    assert verify_range(credit, prove_range(secret))
"""

from confidential_ledger.crypto import (
    ConfidentialCredit,
    OwnerSecret,
    RangeProof,
    SumBalanceProof,
    make_credit,
    open_and_check,
    prove_range,
    prove_sum_balance,
    verify_range,
    verify_sum_balance,
)

__version__ = "0.1.0"
__all__ = [
    "ConfidentialCredit",
    "OwnerSecret",
    "RangeProof",
    "SumBalanceProof",
    "make_credit",
    "open_and_check",
    "prove_range",
    "prove_sum_balance",
    "verify_range",
    "verify_sum_balance",
]
