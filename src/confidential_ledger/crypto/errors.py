"""
Error kinds raised by the confidential ledger core.

Every input-related error derives from ValueError so boundary code that
already maps ValueError to a client error (see confidential_ledger.api)
reports them without special handling.
"""

from __future__ import annotations


class ConfidentialLedgerError(Exception):
    """Base class for all errors raised by confidential_ledger."""
    pass


class MalformedEncoding(ConfidentialLedgerError, ValueError):
    """An external scalar/point encoding does not decode to a valid value."""
    pass


class MalformedProof(ConfidentialLedgerError, ValueError):
    """A proof object or proof encoding is structurally invalid."""
    pass


class InconsistentSecret(ConfidentialLedgerError, ValueError):
    """An OwnerSecret does not open the ConfidentialCredit it is paired with."""
    pass


class UnbalancedInput(ConfidentialLedgerError, ValueError):
    """The values given to prove_sum_balance do not satisfy v1 = v2 + v3."""
    pass


class ValueOutOfDomain(ConfidentialLedgerError, ValueError):
    """A credit value does not fit the representable bit width."""
    pass


class ProtocolStateError(ConfidentialLedgerError, RuntimeError):
    """A Sigma protocol step was invoked out of order."""
    pass
