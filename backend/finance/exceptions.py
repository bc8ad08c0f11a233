# finance/exceptions.py
"""
Error taxonomy for treasury commands.

Commands raise these inside their atomic block so that any failure
rolls back the whole unit, then convert them to CommandResult.fail()
at the command boundary. Views map ``code`` to an HTTP status.
"""


class FinanceError(Exception):
    """Base class for treasury errors."""

    code = "finance_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinanceError):
    """Malformed or out-of-enum input, non-positive amount, missing field."""

    code = "validation_error"


class NotFoundError(FinanceError):
    """Referenced account, category, debt, assignment or user does not exist."""

    code = "not_found"


class ConflictError(FinanceError):
    """State conflict: already settled/paid, duplicate key, or a lost race."""

    code = "conflict"


class ConfigurationError(FinanceError):
    """
    Deployment misconfiguration (e.g. no default account for a method).

    Not a user input problem: surfaced to operators and never retried.
    """

    code = "configuration_error"
