# utils/errors.py
"""
Error taxonomy shared by the classification, tax and document services.

- RemoteUnavailable: the remote AI gateway failed (network, auth, timeout,
  malformed or schema-invalid JSON). Always recovered by the rules fallback.
- InvalidInput: the caller sent something we refuse to process (negative
  value, empty required field). Surfaced to the user as a validation message.
- ParseError: a CSV row could not be read as-is. The row is defaulted, not dropped.
- ItemNotFound: an inventory id that is not (or no longer) in the store.
"""


class TradeError(Exception):
    """Base class for all trade service errors."""


class RemoteUnavailable(TradeError):
    pass


class InvalidInput(TradeError):
    pass


class ParseError(TradeError):
    def __init__(self, message: str, row_number: int = -1):
        super().__init__(message)
        self.row_number = row_number


class ItemNotFound(TradeError):
    """No inventory item with the requested id."""
