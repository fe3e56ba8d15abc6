"""
API module for the confidential ledger.

Provides FastAPI routes and models exposing the commitment / proof / verify
engine over HTTP. Scalars, points and proofs travel as canonical hex.
"""

from confidential_ledger.api.models import (
    MakeCreditRequest,
    MakeCreditResponse,
    OwnerSecretModel,
    ProveRangeRequest,
    ProveRangeResponse,
    ProveSumBalanceRequest,
    ProveSumBalanceResponse,
    VerifyRangeRequest,
    VerifyResponse,
    VerifySumBalanceRequest,
)

__all__ = [
    "MakeCreditRequest",
    "MakeCreditResponse",
    "OwnerSecretModel",
    "ProveRangeRequest",
    "ProveRangeResponse",
    "ProveSumBalanceRequest",
    "ProveSumBalanceResponse",
    "VerifyRangeRequest",
    "VerifyResponse",
    "VerifySumBalanceRequest",
]
