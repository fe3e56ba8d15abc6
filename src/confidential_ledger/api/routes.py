import logging

from fastapi import APIRouter, HTTPException, Request

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
from confidential_ledger.crypto.commitment import (
    ConfidentialCredit,
    OwnerSecret,
    commit,
    make_credit,
)
from confidential_ledger.crypto.params import ProtocolParams
from confidential_ledger.crypto.range_proof import RangeProof, prove_range, verify_range
from confidential_ledger.crypto.sum_balance import (
    SumBalanceProof,
    prove_sum_balance,
    verify_sum_balance,
)

logger = logging.getLogger("confidential_ledger.api")

router = APIRouter(prefix="/vcl", tags=["Confidential Ledger"])


def get_params(request: Request) -> ProtocolParams:
    """Retrieve the protocol params loaded at startup from app state."""
    params = getattr(request.app.state, "params", None)
    if params is None:
        raise HTTPException(status_code=500, detail="protocol params not initialized")
    return params


def _to_secret(model: OwnerSecretModel) -> OwnerSecret:
    return OwnerSecret.from_hex(model.credit_value, model.secret_blinding)


@router.post("/make_credit", response_model=MakeCreditResponse)
def issue_credit(req: MakeCreditRequest):
    """
    Issue a new confidential credit.

    Returns the public commitment and its opening. The opening is not kept
    anywhere server-side; the caller must store it to prove later.
    """
    credit, secret = make_credit(req.credit_value)
    logger.info(f"Issued credit {credit.hex()[:16]}...")
    return MakeCreditResponse(
        credit=credit.hex(),
        secret=OwnerSecretModel(
            credit_value=secret.credit_value,
            secret_blinding=secret.secret_blinding.hex(),
        ),
    )


@router.post("/prove_range", response_model=ProveRangeResponse)
def build_range_proof(request: Request, req: ProveRangeRequest):
    """Build a range proof for the credit opened by the request."""
    params = get_params(request)
    secret = _to_secret(req)
    credit = ConfidentialCredit.from_hex(req.credit) if req.credit else None

    proof = prove_range(secret, credit=credit, params=params)
    if credit is None:
        credit = commit(secret.credit_value, secret.secret_blinding)
    return ProveRangeResponse(credit=credit.hex(), proof=proof.hex())


@router.post("/verify_range", response_model=VerifyResponse)
def check_range_proof(request: Request, req: VerifyRangeRequest):
    """Verify a range proof against a commitment."""
    params = get_params(request)
    credit = ConfidentialCredit.from_hex(req.credit)
    proof = RangeProof.from_hex(req.proof)
    valid = verify_range(credit, proof, params=params)
    logger.info(f"Range proof for {req.credit[:16]}... valid={valid}")
    return VerifyResponse(valid=valid)


@router.post("/prove_sum_balance", response_model=ProveSumBalanceResponse)
def build_sum_balance_proof(request: Request, req: ProveSumBalanceRequest):
    """Prove value(C1) = value(C2) + value(C3) for the three given openings."""
    params = get_params(request)
    openings = [_to_secret(m) for m in (req.total, req.first, req.second)]
    credits = tuple(ConfidentialCredit.from_hex(c) for c in req.credits) if req.credits else None

    proof = prove_sum_balance(*openings, credits=credits, params=params)
    if credits is None:
        credits = tuple(commit(s.credit_value, s.secret_blinding) for s in openings)
    return ProveSumBalanceResponse(
        credits=[c.hex() for c in credits],
        proof=proof.hex(),
    )


@router.post("/verify_sum_balance", response_model=VerifyResponse)
def check_sum_balance_proof(request: Request, req: VerifySumBalanceRequest):
    """Verify a sum-balance proof against (C1, C2, C3)."""
    params = get_params(request)
    credits = tuple(ConfidentialCredit.from_hex(c) for c in req.credits)
    proof = SumBalanceProof.from_hex(req.proof)
    valid = verify_sum_balance(credits, proof, params=params)
    logger.info(f"Sum-balance proof valid={valid}")
    return VerifyResponse(valid=valid)
