from enum import StrEnum


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


# =============================================================================
# Checkout error taxonomy
# =============================================================================


class ErrorKind(StrEnum):
    VALIDATION = 'validation'
    INSUFFICIENT_SEATS = 'insufficient_seats'
    INSUFFICIENT_POINTS = 'insufficient_points'
    INVALID_COUPON = 'invalid_coupon'
    EXPIRED_COUPON = 'expired_coupon'
    INVALID_PROMOTION = 'invalid_promotion'
    TRANSACTION_NOT_FOUND = 'transaction_not_found'
    INVALID_STATE_TRANSITION = 'invalid_state_transition'
    CONCURRENCY_CONFLICT = 'concurrency_conflict'
    INTERNAL = 'internal'


class CheckoutError(CustomBaseError):
    """Error carrying a closed ErrorKind; the HTTP status is fixed per kind."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message, self.default_status_code)


class ValidationError(CheckoutError):
    kind = ErrorKind.VALIDATION
    default_status_code = 400


class InsufficientSeatsError(CheckoutError):
    kind = ErrorKind.INSUFFICIENT_SEATS
    default_status_code = 409


class InsufficientPointsError(CheckoutError):
    kind = ErrorKind.INSUFFICIENT_POINTS
    default_status_code = 400


class InvalidCouponError(CheckoutError):
    kind = ErrorKind.INVALID_COUPON
    default_status_code = 400


class ExpiredCouponError(CheckoutError):
    kind = ErrorKind.EXPIRED_COUPON
    default_status_code = 400


class InvalidPromotionError(CheckoutError):
    kind = ErrorKind.INVALID_PROMOTION
    default_status_code = 400


class TransactionNotFoundError(CheckoutError):
    kind = ErrorKind.TRANSACTION_NOT_FOUND
    default_status_code = 404


class InvalidStateTransitionError(CheckoutError):
    kind = ErrorKind.INVALID_STATE_TRANSITION
    default_status_code = 409


class ConcurrencyConflictError(CheckoutError):
    kind = ErrorKind.CONCURRENCY_CONFLICT
    default_status_code = 503


class InternalError(CheckoutError):
    kind = ErrorKind.INTERNAL
    default_status_code = 500
