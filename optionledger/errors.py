"""Exceptions raised by the OptionLedger strategy engine."""


class OptionLedgerError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(OptionLedgerError):
    """Raised when a leg, leg set or action context is invalid.

    Always raised before any classification or cost computation runs;
    the engine never coerces bad input into a result.
    """


class UnknownTransactionCodeError(ValidationError):
    """Raised when a transaction code string is not BTO, STO, BTC or STC."""
