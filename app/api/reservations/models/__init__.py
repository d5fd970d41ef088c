from app.api.reservations.models.buyer import Buyer
from app.api.reservations.models.tour import Tour
from app.api.reservations.models.departure import Departure
from app.api.reservations.models.reservation import Reservation


__all__ = [
    "Buyer",
    "Departure",
    "Reservation",
    "Tour",
]
