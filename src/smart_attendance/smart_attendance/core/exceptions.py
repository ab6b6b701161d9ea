class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MissingLocationError(ValidationError):
    """Raised when an attendance request carries no usable coordinates."""


class InvalidDescriptorError(ValidationError):
    """Raised when a submitted face descriptor is absent or not 128 numbers."""


class AuthenticationError(DomainError):
    """Raised when credentials or a bearer token are invalid."""

    status_code = 401


class BusinessRuleError(DomainError):
    """Raised when a well-formed request is refused by an attendance rule."""


class OutOfRangeError(BusinessRuleError):
    pass


class OutsideWindowError(BusinessRuleError):
    pass


class ProfileIncompleteError(BusinessRuleError):
    pass


class FaceMismatchError(BusinessRuleError):
    status_code = 401


class AlreadyMarkedError(BusinessRuleError):
    pass


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised when a unique registration key is already taken."""

    status_code = 409


class InternalError(DomainError):
    """Raised when the store does not behave as expected, e.g. a created row cannot be read back."""

    status_code = 500
