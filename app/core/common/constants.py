from enum import Enum


class Roles:
    ADMIN = "admin"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReservationPaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    # never stored, see derive_effective_status
    OVERDUE = "overdue"


class TimelineEventType(str, Enum):
    INSTALLMENT_PLAN_CREATED = "installment_plan_created"
    INSTALLMENT_PAID = "installment_paid"


class BulkPayOutcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    ALREADY_PAID = "already_paid"
    CONFLICT = "conflict"
    ERROR = "error"
