"""
OR-composed Sigma proof that a commitment hides a single bit.

Statement, for a bit commitment B:
    branch 0:  B       = r·H   (B commits to 0)
    branch 1:  B - G   = r·H   (B commits to 1)

The prover knows r for exactly one branch. It runs the real Schnorr
protocol (base H) on that branch and simulates the other one by picking
the simulated challenge and response first. The two branch challenges must
sum to the challenge e handed down by the verifier (here: the range
proof's shared Fiat-Shamir challenge), so the prover can only fix one of
them freely, and the transcript reveals nothing about which branch is real.

The prover is a small state machine so the order commit -> challenge ->
response cannot be violated:

    COMMIT_BOTH_BRANCHES -> DERIVE_SHARED_CHALLENGE
        -> RESPOND_REAL_BRANCH -> RESPOND_SIMULATED_BRANCH -> COMPLETE

References:
    [CDS94] R. Cramer, I. Damgård, B. Schoenmakers, "Proofs of Partial
            Knowledge and Simplified Design of Witness Hiding Protocols",
            CRYPTO '94.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from confidential_ledger.crypto.errors import ProtocolStateError
from confidential_ledger.crypto.group import G, H, Point, RandomSource, Scalar


class BitProofStage(enum.Enum):
    COMMIT_BOTH_BRANCHES = "commit_both_branches"
    DERIVE_SHARED_CHALLENGE = "derive_shared_challenge"
    RESPOND_REAL_BRANCH = "respond_real_branch"
    RESPOND_SIMULATED_BRANCH = "respond_simulated_branch"
    COMPLETE = "complete"


@dataclass(frozen=True)
class BitProof:
    """
    Transmitted part of one bit sub-proof.

    The one-branch challenge is implied (c1 = e - c0) and both branch
    commit messages are recomputed by the verifier.

    Attributes:
        commitment: Bit commitment B = b·G + r·H.
        zero_challenge: Challenge c0 of the "bit is 0" branch.
        zero_response: Response s0 of the "bit is 0" branch.
        one_response: Response s1 of the "bit is 1" branch.
    """
    commitment: Point
    zero_challenge: Scalar
    zero_response: Scalar
    one_response: Scalar


def branch_statement(commitment: Point, branch: int) -> Point:
    """The point that must equal r·H if `commitment` hides `branch`."""
    return commitment - G if branch else commitment


def recompute_commit_messages(proof: BitProof, challenge: Scalar) -> tuple[Point, Point]:
    """
    Recompute (A0, A1) from a transmitted bit proof and the shared challenge.

        A_j = s_j·H - c_j·(B - j·G),   c1 = e - c0
    """
    c0 = proof.zero_challenge
    c1 = challenge - c0
    a0 = proof.zero_response * H - c0 * branch_statement(proof.commitment, 0)
    a1 = proof.one_response * H - c1 * branch_statement(proof.commitment, 1)
    return a0, a1


class BitProver:
    """
    Prover side of the bit OR-proof.

    Args:
        bit: The committed bit (0 or 1).
        blinding: Blinding r of the bit commitment.
        commitment: The bit commitment B = bit·G + r·H.
        rng: Randomness source for the nonce and the simulated branch.
    """

    def __init__(
        self,
        bit: int,
        blinding: Scalar,
        commitment: Point,
        rng: RandomSource | None = None,
    ) -> None:
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit}")
        self.stage = BitProofStage.COMMIT_BOTH_BRANCHES
        self._bit = bit
        self._blinding = blinding
        self._commitment = commitment
        self._rng = rng
        self._nonce: Scalar | None = None
        self._challenges: dict[int, Scalar] = {}
        self._responses: dict[int, Scalar] = {}

    def _expect(self, stage: BitProofStage) -> None:
        if self.stage is not stage:
            raise ProtocolStateError(
                f"Bit proof step {stage.value} called in stage {self.stage.value}"
            )

    def commit_both_branches(self) -> tuple[Point, Point]:
        """
        Emit (A0, A1).

        The real branch commits to a fresh nonce k: A_real = k·H. The
        simulated branch draws its challenge and response up front and
        solves for A_sim = s_sim·H - c_sim·(B - sim·G).
        """
        self._expect(BitProofStage.COMMIT_BOTH_BRANCHES)
        real, simulated = self._bit, 1 - self._bit

        self._nonce = Scalar.random(self._rng)
        c_sim = Scalar.random(self._rng)
        s_sim = Scalar.random(self._rng)
        self._challenges[simulated] = c_sim
        self._responses[simulated] = s_sim

        messages = {
            real: self._nonce * H,
            simulated: s_sim * H - c_sim * branch_statement(self._commitment, simulated),
        }
        self.stage = BitProofStage.DERIVE_SHARED_CHALLENGE
        return messages[0], messages[1]

    def derive_shared_challenge(self, challenge: Scalar) -> None:
        """Split the shared challenge: c_real = e - c_sim."""
        self._expect(BitProofStage.DERIVE_SHARED_CHALLENGE)
        simulated = 1 - self._bit
        self._challenges[self._bit] = challenge - self._challenges[simulated]
        self.stage = BitProofStage.RESPOND_REAL_BRANCH

    def respond_real_branch(self) -> None:
        """s_real = k + c_real·r."""
        self._expect(BitProofStage.RESPOND_REAL_BRANCH)
        self._responses[self._bit] = self._nonce + self._challenges[self._bit] * self._blinding
        self._nonce = None
        self.stage = BitProofStage.RESPOND_SIMULATED_BRANCH

    def respond_simulated_branch(self) -> BitProof:
        """Release the simulated branch's pre-drawn response and finish."""
        self._expect(BitProofStage.RESPOND_SIMULATED_BRANCH)
        self.stage = BitProofStage.COMPLETE
        return BitProof(
            commitment=self._commitment,
            zero_challenge=self._challenges[0],
            zero_response=self._responses[0],
            one_response=self._responses[1],
        )
