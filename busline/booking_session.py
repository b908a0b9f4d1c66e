from decimal import Decimal
from typing import Any, Iterable

from pydantic import Field, ValidationError

from .errors import IncompleteBookingData, PrematureConfirmation
from .models import ContactInfo, Passenger, TicketSaleRequest, Trip, WireModel


# only ever extended: each step returns a larger copy, trip/seats/total fixed at seat confirmation
class BookingSession(WireModel):
    trip: Trip
    selected_seats: tuple[int, ...] = Field(alias="selectedSeats")
    total_amount: Decimal = Field(alias="totalAmount")
    passengers: tuple[Passenger, ...] | None = None
    contact: ContactInfo | None = None
    confirmation_code: str | None = Field(default=None, alias="confirmationCode")

    @property
    def has_passengers(self) -> bool:
        return self.passengers is not None and self.contact is not None

    @property
    def is_confirmed(self) -> bool:
        return self.confirmation_code is not None

    def sale_request(self) -> TicketSaleRequest:
        if not self.has_passengers:
            raise IncompleteBookingData()
        return TicketSaleRequest(
            trip_id=self.trip.id,
            seats=list(self.selected_seats),
            contact=self.contact,
            passengers=list(self.passengers),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_payload(cls, payload: Any) -> "BookingSession":
        if not payload:
            raise IncompleteBookingData()
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise IncompleteBookingData() from exc


def from_seat_selection(trip: Trip, selection: Iterable[int], total: Decimal) -> BookingSession:
    seats = tuple(selection)
    if not seats:
        raise IncompleteBookingData("Select at least one seat to continue.")
    return BookingSession(trip=trip, selected_seats=seats, total_amount=total)


def with_passenger_data(
    session: BookingSession,
    passengers: Iterable[Passenger],
    contact: ContactInfo,
) -> BookingSession:
    passengers = list(passengers)
    seats = session.selected_seats
    if len(passengers) != len(seats):
        raise IncompleteBookingData(
            f"Expected {len(seats)} passengers, got {len(passengers)}."
        )
    by_seat = {p.seat: p for p in passengers}
    if set(by_seat) != set(seats):
        raise IncompleteBookingData("Every selected seat needs exactly one passenger.")

    ordered = tuple(by_seat[no] for no in seats)
    return session.model_copy(update={"passengers": ordered, "contact": contact})


def with_confirmation(session: BookingSession, code: str) -> BookingSession:
    if not session.has_passengers:
        raise PrematureConfirmation()
    if not code:
        raise PrematureConfirmation("The sale did not return a confirmation code.")
    return session.model_copy(update={"confirmation_code": code})
