class ApiError(Exception):
    """Base for every domain failure that maps onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, errors: list | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []


class NotFoundError(ApiError):
    status_code = 404


class ValidationError(ApiError):
    status_code = 400


class InvalidRangeError(ValidationError):
    pass


class ForbiddenError(ApiError):
    status_code = 403


class ConflictError(ApiError):
    status_code = 409


class CancellationWindowViolation(ConflictError):
    pass


class InvalidTransitionError(ConflictError):
    pass


class AmountMismatchError(ApiError):
    status_code = 400


class PaymentNotSucceededError(ApiError):
    status_code = 400


class PaymentGatewayError(ApiError):
    status_code = 502
