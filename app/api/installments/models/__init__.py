from app.api.installments.models.installment_plan import InstallmentPlan
from app.api.installments.models.payment_installment import PaymentInstallment
from app.api.installments.models.timeline_event import ReservationTimelineEvent


__all__ = [
    "InstallmentPlan",
    "PaymentInstallment",
    "ReservationTimelineEvent",
]
