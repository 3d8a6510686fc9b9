from collections import namedtuple

REQUIRED = "required"
OUT_OF_RANGE = "out_of_range"
NOT_A_NUMBER = "not_a_number"
INVALID_OPTION = "invalid_option"

# Returned (never raised) by the answer validator.
ValidationError = namedtuple("ValidationError", ["code", "message"])


class CatalogIntegrityError(ValueError):
    """Raised at load time when a question catalog references unknown questions."""


class PersistenceError(RuntimeError):
    """Raised when the assessment store rejects a read or write."""


class AssessmentStateError(RuntimeError):
    """Raised when an operation does not fit the session's current state."""


class NotFoundError(LookupError):
    """Raised when a patient, doctor or submission does not exist."""
