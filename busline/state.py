from decimal import Decimal

from flask import session

from .booking_session import BookingSession
from .errors import IncompleteBookingData
from .models import CellType, SeatSchema, SeatStatus
from .seat_map import SelectionSet
from .steps import WizardStep, require

BOOKING_SESSION_KEY = "booking_session"
SELECTION_KEY = "seat_selection"
SEAT_MAP_KEY = "seat_map"
SALE_ATTEMPTS_KEY = "sale_attempts"


def load_booking_session() -> BookingSession | None:
    """Stored session, or None when there is none or it no longer parses."""
    payload = session.get(BOOKING_SESSION_KEY)
    if not payload:
        return None
    try:
        return BookingSession.from_payload(payload)
    except IncompleteBookingData:
        session.pop(BOOKING_SESSION_KEY, None)
        return None


def require_booking_session(step: WizardStep) -> BookingSession:
    """
    Guard for every step after seat selection: raises IncompleteBookingData
    (which sends the user back to the search page) instead of rendering a
    step with half the data missing.
    """
    return require(step, load_booking_session())


def save_booking_session(booking: BookingSession) -> BookingSession:
    session[BOOKING_SESSION_KEY] = booking.to_payload()
    session.modified = True
    return booking


def load_selection(trip_id: str) -> SelectionSet:
    stored = session.get(SELECTION_KEY) or {}
    if stored.get("tripId") != trip_id:
        return SelectionSet()
    return SelectionSet(tuple(int(n) for n in stored.get("seats") or []))


def load_selection_trip() -> str | None:
    return (session.get(SELECTION_KEY) or {}).get("tripId")


def save_selection(trip_id: str, selection: SelectionSet) -> SelectionSet:
    session[SELECTION_KEY] = {"tripId": trip_id, "seats": list(selection)}
    session.modified = True
    return selection


def _on_seat_cell(schema: SeatSchema, row: int, col: int) -> bool:
    layout = schema.layout
    if not (1 <= row <= layout.rows and 1 <= col <= layout.cols):
        return False
    return layout.cell_type(row, col) == CellType.SEAT


# seat statuses and price as last fetched, so toggling needs no backend call
def remember_seat_map(schema: SeatSchema) -> None:
    session[SEAT_MAP_KEY] = {
        "tripId": schema.trip_id,
        "unitPrice": str(schema.unit_price),
        # records off a seat cell are never drawn as buttons, so never selectable
        "statuses": {
            str(s.no): s.status.value
            for s in schema.seats
            if _on_seat_cell(schema, s.row, s.col)
        },
    }
    session.modified = True


def seat_status(trip_id: str, seat_no: int) -> SeatStatus | None:
    snapshot = session.get(SEAT_MAP_KEY) or {}
    if snapshot.get("tripId") != trip_id:
        return None
    status = (snapshot.get("statuses") or {}).get(str(seat_no))
    return SeatStatus(status) if status else None


def seat_map_price(trip_id: str) -> Decimal | None:
    snapshot = session.get(SEAT_MAP_KEY) or {}
    if snapshot.get("tripId") != trip_id:
        return None
    return Decimal(snapshot["unitPrice"])


def next_sale_attempt() -> int:
    attempt = int(session.get(SALE_ATTEMPTS_KEY) or 0) + 1
    session[SALE_ATTEMPTS_KEY] = attempt
    return attempt


def clear_booking_context():
    for key in (BOOKING_SESSION_KEY, SELECTION_KEY, SEAT_MAP_KEY, SALE_ATTEMPTS_KEY):
        session.pop(key, None)


def start_booking_session(booking: BookingSession) -> BookingSession:
    session.pop(SALE_ATTEMPTS_KEY, None)
    return save_booking_session(booking)
