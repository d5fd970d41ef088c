# app/core/exceptions.py
from app.core.messages import ErrorMessage

class GlobalException(Exception):
    status_code: int
    error_code: str
    message: str

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class AccessDenied(GlobalException):
    status_code = 403
    error_code = "access_denied"
    message = ErrorMessage.ACCESS_DENIED


class ValidationException(GlobalException):
    status_code = 400
    error_code = "validation_error"
    message = "Validation failed"


class ResourceNotFound(GlobalException):
    status_code = 404
    error_code = "not_found"
    message = "Requested resource not found"

class ReservationNotFound(ResourceNotFound):
    error_code = "reservation_not_found"
    message = ErrorMessage.RESERVATION_NOT_FOUND

class InstallmentNotFound(ResourceNotFound):
    error_code = "installment_not_found"
    message = ErrorMessage.INSTALLMENT_NOT_FOUND


class InvalidStateError(GlobalException):
    status_code = 409
    error_code = "invalid_state"
    message = "Operation not allowed in the current state"

class InstallmentAlreadyPaid(InvalidStateError):
    error_code = "installment_already_paid"
    message = ErrorMessage.INSTALLMENT_ALREADY_PAID


class VersionConflict(GlobalException):
    status_code = 409
    error_code = "version_conflict"
    message = ErrorMessage.INSTALLMENT_VERSION_CONFLICT


class PersistenceError(GlobalException):
    status_code = 500
    error_code = "database_error"
    message = ErrorMessage.DATABASE_FAILURE
