"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"


# Validation errors: bad input, correctable by the caller


class ValidationError(DomainException):
    """Input rejected before any computation or I/O"""

    code = "validation_error"


class InvalidAmount(ValidationError):
    """Amount must be greater than zero"""

    code = "invalid_amount"


class InvalidRate(ValidationError):
    """Annual interest rate cannot be negative"""

    code = "invalid_rate"


class InvalidTerm(ValidationError):
    """Loan term must be at least one month"""

    code = "invalid_term"


class LoanOutOfRange(ValidationError):
    """Inputs too large for the simulation to represent"""

    code = "loan_out_of_range"


# Transfer errors: not retryable without changing the input


class TransferError(DomainException):
    """Transfer rejected by a precondition"""

    code = "transfer_error"


class SenderAccountNotFound(TransferError):
    code = "sender_account_not_found"


class RecipientAccountNotFound(TransferError):
    code = "recipient_account_not_found"


class InsufficientFunds(TransferError):
    code = "insufficient_funds"


class SelfTransferNotAllowed(TransferError):
    code = "self_transfer_not_allowed"


# Infrastructure errors: safe to retry, nothing was partially written


class InfrastructureError(DomainException):
    """Storage or network failure"""

    code = "infrastructure_error"


class StorageError(InfrastructureError):
    """Persistence layer unavailable or rejected the write"""

    code = "storage_error"


class ConcurrentUpdateError(InfrastructureError):
    """An account changed between validation and commit"""

    code = "concurrent_update"


# Lookups and lifecycle


class NotFoundError(DomainException):
    """Requested record does not exist or is not visible to the caller"""

    code = "not_found"


class LoanNotFoundError(NotFoundError):
    code = "loan_not_found"


class AccountNotFoundError(NotFoundError):
    code = "account_not_found"


class AccountAlreadyExistsError(DomainException):
    code = "account_already_exists"


class InvalidStatusTransition(DomainException):
    """Loan status change not allowed from the current status"""

    code = "invalid_status_transition"
