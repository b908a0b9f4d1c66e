"""
Tests for the append-only booking session.
"""

from decimal import Decimal

import pytest

from busline.booking_session import BookingSession, from_seat_selection, with_confirmation, with_passenger_data
from busline.errors import IncompleteBookingData, PrematureConfirmation
from busline.models import ContactInfo, Passenger, Trip


@pytest.fixture
def trip():
    return Trip.model_validate(
        {
            "id": "TRIP-1001",
            "company": "Anadolu Ekspres",
            "from": "IST",
            "to": "ANK",
            "departure": "2025-11-29T08:30:00+03:00",
            "arrival": "2025-11-29T14:00:00+03:00",
            "price": 250,
            "availableSeats": 30,
        }
    )


@pytest.fixture
def contact():
    return ContactInfo(email="ayse@mail.com", phone="5551234567")


def passenger(seat, first="Ayse"):
    return Passenger(seat=seat, first_name=first, last_name="Yilmaz", id_no="12345678901", gender="female")


@pytest.fixture
def seated(trip):
    return from_seat_selection(trip, [4, 12], Decimal("500"))


def test_from_seat_selection_fixes_seats_and_total(seated, trip):
    assert seated.trip == trip
    assert seated.selected_seats == (4, 12)
    assert seated.total_amount == Decimal("500")
    assert seated.passengers is None
    assert seated.contact is None
    assert seated.confirmation_code is None


def test_from_seat_selection_requires_a_seat(trip):
    with pytest.raises(IncompleteBookingData):
        from_seat_selection(trip, [], Decimal("0"))


def test_full_round_trip_keeps_trip_seats_and_total(seated, contact):
    with_pax = with_passenger_data(seated, [passenger(4), passenger(12, "Mehmet")], contact)
    confirmed = with_confirmation(with_pax, "AT-20251129-X7K")

    for session in (with_pax, confirmed):
        assert session.trip == seated.trip
        assert session.selected_seats == seated.selected_seats
        assert session.total_amount == seated.total_amount

    assert confirmed.passengers == with_pax.passengers
    assert confirmed.contact == contact
    assert confirmed.confirmation_code == "AT-20251129-X7K"
    # earlier steps are untouched
    assert seated.passengers is None
    assert with_pax.confirmation_code is None


def test_passengers_are_stored_in_seat_order(seated, contact):
    session = with_passenger_data(seated, [passenger(12, "Mehmet"), passenger(4)], contact)
    assert [p.seat for p in session.passengers] == [4, 12]


@pytest.mark.parametrize("seats", [[4], [4, 12, 13], []])
def test_passenger_count_mismatch_is_rejected(seated, contact, seats):
    with pytest.raises(IncompleteBookingData):
        with_passenger_data(seated, [passenger(no) for no in seats], contact)


def test_passenger_on_unselected_seat_is_rejected(seated, contact):
    with pytest.raises(IncompleteBookingData):
        with_passenger_data(seated, [passenger(4), passenger(99)], contact)


def test_duplicate_passenger_seat_is_rejected(seated, contact):
    with pytest.raises(IncompleteBookingData):
        with_passenger_data(seated, [passenger(4), passenger(4, "Mehmet")], contact)


def test_confirmation_before_passengers_is_premature(seated):
    with pytest.raises(PrematureConfirmation):
        with_confirmation(seated, "AT-20251129-X7K")


def test_confirmation_requires_a_code(seated, contact):
    with_pax = with_passenger_data(seated, [passenger(4), passenger(12)], contact)
    with pytest.raises(PrematureConfirmation):
        with_confirmation(with_pax, "")


def test_payload_round_trip(seated, contact):
    session = with_passenger_data(seated, [passenger(4), passenger(12)], contact)
    payload = session.to_payload()

    assert payload["selectedSeats"] == [4, 12]
    assert payload["trip"]["from"] == "IST"
    assert BookingSession.from_payload(payload) == session


@pytest.mark.parametrize("payload", [None, {}, {"trip": {"id": "x"}}, {"selectedSeats": "nope"}])
def test_unreadable_payload_counts_as_missing_state(payload):
    with pytest.raises(IncompleteBookingData):
        BookingSession.from_payload(payload)


def test_sale_request_needs_passengers(seated, contact):
    with pytest.raises(IncompleteBookingData):
        seated.sale_request()

    session = with_passenger_data(seated, [passenger(4), passenger(12)], contact)
    body = session.sale_request().model_dump(mode="json", by_alias=True)
    assert body["tripId"] == "TRIP-1001"
    assert body["seats"] == [4, 12]
    assert body["contact"] == {"email": "ayse@mail.com", "phone": "5551234567"}
    assert body["passengers"][0]["firstName"] == "Ayse"
