from pydantic import BaseModel, Field

from confidential_ledger.crypto.commitment import MAX_CREDIT_VALUE


class OwnerSecretModel(BaseModel):
    """Private opening of a credit. Never logged or stored by the API."""

    credit_value: int = Field(..., ge=0, le=MAX_CREDIT_VALUE, description="Committed credit value (u64)")
    secret_blinding: str = Field(..., description="Blinding scalar (64-char hex)")


class MakeCreditRequest(BaseModel):
    """Request model for issuing a new confidential credit."""

    credit_value: int = Field(..., ge=0, le=MAX_CREDIT_VALUE, description="Credit value to hide (u64)")


class MakeCreditResponse(BaseModel):
    """Response model for a newly issued credit."""

    credit: str = Field(..., description="Commitment point (66-char compressed hex)")
    secret: OwnerSecretModel = Field(
        ..., description="Opening of the commitment. KEEP THIS SAFE. It is not stored server-side."
    )


class ProveRangeRequest(OwnerSecretModel):
    """Request model for building a range proof from an opening."""

    credit: str | None = Field(
        None,
        description="Commitment to check the opening against before proving (hex).",
    )


class ProveRangeResponse(BaseModel):
    """Response model for a range proof."""

    credit: str = Field(..., description="Commitment the proof is bound to (hex)")
    proof: str = Field(..., description="Canonical range proof encoding (hex)")


class VerifyRangeRequest(BaseModel):
    """Request model for verifying a range proof."""

    credit: str = Field(..., description="Commitment point (hex)")
    proof: str = Field(..., description="Canonical range proof encoding (hex)")


class ProveSumBalanceRequest(BaseModel):
    """Request model for proving value(C1) = value(C2) + value(C3)."""

    total: OwnerSecretModel = Field(..., description="Opening of C1")
    first: OwnerSecretModel = Field(..., description="Opening of C2")
    second: OwnerSecretModel = Field(..., description="Opening of C3")
    credits: list[str] | None = Field(
        None,
        min_length=3,
        max_length=3,
        description="(C1, C2, C3) to check the openings against before proving (hex).",
    )


class ProveSumBalanceResponse(BaseModel):
    """Response model for a sum-balance proof."""

    credits: list[str] = Field(..., description="(C1, C2, C3) as hex points")
    proof: str = Field(..., description="Canonical sum-balance proof encoding (hex)")


class VerifySumBalanceRequest(BaseModel):
    """Request model for verifying a sum-balance proof."""

    credits: list[str] = Field(
        ..., min_length=3, max_length=3, description="(C1, C2, C3) as hex points"
    )
    proof: str = Field(..., description="Canonical sum-balance proof encoding (hex)")


class VerifyResponse(BaseModel):
    """Result of a verification."""

    valid: bool = Field(..., description="True iff the proof verifies")
