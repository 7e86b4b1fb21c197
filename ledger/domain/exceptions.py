"""
Domain exceptions for the ledger.

Every business-rule rejection is an exception raised inside the atomic
block of a use case, so raising it also rolls back anything the use case
had already written. The transport layer turns them into the
``{"success": false, "message": ...}`` result the clients expect.

Two families:

- ValidationFailure: the caller sent something malformed or out of bounds.
  Correctable without re-reading any state.
- StateConflict: the request is well formed but the current ledger state
  does not allow it (balances, listing status, conversion flag).
"""


class LedgerError(Exception):
    """Base class for every expected ledger rejection."""

    default_message = "The operation could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(LedgerError):
    default_message = "Invalid request."


class StateConflict(LedgerError):
    default_message = "The current ledger state does not allow this operation."


class InvalidInput(ValidationFailure):
    """Raised when a value is missing, non-numeric, or negative."""

    def __init__(self, field, value=None, message=None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be a non-negative number.")


class InvalidAmount(ValidationFailure):
    """Raised when a quantity is zero, negative, or larger than what is held."""

    def __init__(self, field, value, message=None):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be greater than zero.")


class InvalidPrice(ValidationFailure):
    """Raised when a listing price falls outside the configured bounds."""

    def __init__(self, price, minimum, maximum):
        self.price = price
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Price per credit must be between {minimum} and {maximum}, got {price}."
        )


class InvalidRole(ValidationFailure):
    def __init__(self, role):
        self.role = role
        super().__init__(f"Unknown role: {role!r}.")


class AccountNotFound(StateConflict):
    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"No account for user {user_id}.")


class RoleAlreadySelected(StateConflict):
    def __init__(self, role):
        self.role = role
        super().__init__(f"Role already selected: {role}.")


class InsufficientBalance(StateConflict):
    """Raised when a debit would take a balance below zero."""

    balance_name = "balance"

    def __init__(self, account_id, requested, available):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {self.balance_name}: requested {requested}, available {available}."
        )


class InsufficientCash(InsufficientBalance):
    balance_name = "cash"


class InsufficientCredits(InsufficientBalance):
    balance_name = "credits"


class AlreadyConverted(StateConflict):
    def __init__(self, log_date):
        self.log_date = log_date
        super().__init__(f"Energy for {log_date} has already been converted to credits.")


class NothingToConvert(StateConflict):
    def __init__(self, log_date):
        self.log_date = log_date
        super().__init__(f"No surplus energy sent to the grid on {log_date}.")


class ListingNotFound(StateConflict):
    """Raised when a listing does not exist or is no longer active."""

    def __init__(self, listing_id):
        self.listing_id = listing_id
        super().__init__("Listing not found or already sold.")


class SelfPurchase(StateConflict):
    def __init__(self, listing_id):
        self.listing_id = listing_id
        super().__init__("You cannot purchase your own listing.")


class ReceiptNotFound(StateConflict):
    def __init__(self, receipt_id):
        self.receipt_id = receipt_id
        super().__init__("Receipt not found.")
