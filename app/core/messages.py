class ErrorMessage:
    # ---------- Auth / Access ----------
    SERVER_ERROR = "Internal server error"
    DATABASE_FAILURE = "Database operation failed"
    AUTH_CONTEXT_MISSING = "Authentication context missing"
    USER_NOT_AUTHENTICATED = "User is not authenticated"
    USER_ID_MISSING = "Authenticated user id missing"

    ADMIN_ACCESS_REQUIRED = "Admin access required"
    ACCESS_DENIED = "Access denied"

    # ---------- Reservations ----------
    RESERVATION_NOT_FOUND = "Reservation not found"
    RESERVATION_CANCELLED = "Reservation is cancelled"

    # ---------- Installments ----------
    INSTALLMENT_NOT_FOUND = "Installment not found"
    INSTALLMENT_ALREADY_PAID = "Installment already paid"
    INSTALLMENT_VERSION_CONFLICT = "Installment was modified by another request"
    ACTIVE_PLAN_EXISTS = "Reservation already has unpaid installments"

    EMPTY_SCHEDULE = "Schedule must contain at least one installment"
    INVALID_TOTAL_AMOUNT = "Total amount must be greater than zero"
    INVALID_INSTALLMENT_AMOUNT = "Installment amounts must be greater than zero"
    NOTHING_LEFT_TO_SCHEDULE = "Reservation has no outstanding amount to schedule"
    INVALID_NUMBER_OF_INSTALLMENTS = "Number of installments must be >= 1"
    INVALID_DEPOSIT_PERCENTAGE = "Deposit percentage must be between 0 and 100"
    INSTALLMENT_SHARE_TOO_SMALL = "Amount after deposit is too small to split into that many installments"
    MISSING_DUE_DATE = "Every installment needs a due date"
    INVALID_DATE_RANGE = "endDate must not be before startDate"
    REQUEST_VALIDATION_FAILED = "Request validation failed"


class SuccessMessage:
    RECONCILIATION_FETCHED = "Reconciliation rows fetched"
    CALENDAR_FETCHED = "Payment calendar fetched"
