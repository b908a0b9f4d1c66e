from flask import Blueprint, flash, jsonify, redirect, request, url_for

from .api import agency_names, backend_client
from .booking_session import from_seat_selection
from .errors import IncompleteBookingData, NetworkFailure, SeatUnavailable, SelectionLimitExceeded
from .logger_config import get_logger
from .seat_map import MAX_SELECTED_SEATS, SelectionSet, compute_total, grid_rows, render
from .state import (
    clear_booking_context,
    load_booking_session,
    load_selection,
    remember_seat_map,
    start_booking_session,
    save_selection,
    seat_map_price,
    seat_status,
)
from .stepper import render_step
from .steps import WizardStep

bp = Blueprint("seats", __name__)
logger = get_logger(__name__)

ALREADY_CONFIRMED = "This booking is already paid. Start a new search to book again."


# a paid booking is final; the seat step must never replace it
def _booking_confirmed() -> bool:
    booking = load_booking_session()
    return booking is not None and booking.is_confirmed


def _names():
    try:
        return agency_names(backend_client().get_agencies())
    except NetworkFailure:
        return {}


# step 2: seat map for one trip
@bp.get("/seat-selection/<trip_id>")
def seat_page(trip_id):
    if _booking_confirmed():
        flash(ALREADY_CONFIRMED, "info")
        return redirect(url_for("payments.summary", success="true"))

    client = backend_client()
    trip = client.get_trip(trip_id)
    schema = client.get_seat_schema(trip_id)

    booking = load_booking_session()
    if booking is not None and booking.trip.id != trip_id:
        # picking another trip starts the booking over
        clear_booking_context()

    selection = load_selection(trip_id)
    stale = [no for no in selection if schema.seat(no) is None or schema.seat(no).is_taken]
    if stale:
        selection = SelectionSet(tuple(n for n in selection if n not in stale))
        flash(f"Seats no longer available were removed: {', '.join(map(str, stale))}", "warning")
    save_selection(trip_id, selection)
    remember_seat_map(schema)

    cells = render(schema.layout, schema.seats, selection)
    return render_step(
        "seat_select.html",
        WizardStep.SEAT_SELECTION,
        trip=trip,
        names=_names(),
        schema=schema,
        rows=grid_rows(cells, schema.layout.cols),
        selected=list(selection),
        total=compute_total(selection, schema.unit_price),
        max_seats=MAX_SELECTED_SEATS,
    )


@bp.post("/seat-selection/<trip_id>/toggle")
def toggle_seat(trip_id):
    if _booking_confirmed():
        if request.is_json:
            return jsonify({"error": ALREADY_CONFIRMED}), 409
        flash(ALREADY_CONFIRMED, "info")
        return redirect(url_for("payments.summary", success="true"))

    payload =request.get_json(silent=True) if request.is_json else request.form
    try:
        seat_no = int((payload or {}).get("seat"))
    except (TypeError, ValueError):
        return jsonify({"error": "missing_seat"}), 400

    status = seat_status(trip_id, seat_no)
    price = seat_map_price(trip_id)
    if status is None or price is None:
        # no seat map seen for this trip in this session
        if request.is_json:
            return jsonify({"error": "seat_not_found"}), 404
        return redirect(url_for("seats.seat_page", trip_id=trip_id))

    selection = load_selection(trip_id)
    try:
        selection = selection.toggle(seat_no, status)
    except (SelectionLimitExceeded, SeatUnavailable) as exc:
        logger.info("seat_toggle_rejected", trip_id=trip_id, seat=seat_no, reason=type(exc).__name__)
        if request.is_json:
            return jsonify({
                "error": exc.message,
                "selectedSeats": list(selection),
                "totalAmount": str(compute_total(selection, price)),
            }), 409
        flash(exc.message, "warning")
        return redirect(url_for("seats.seat_page", trip_id=trip_id))

    save_selection(trip_id, selection)
    logger.info("seat_toggled", trip_id=trip_id, seat=seat_no, selected=list(selection))
    if request.is_json:
        return jsonify({"selectedSeats": list(selection), "totalAmount": str(compute_total(selection, price))})
    return redirect(url_for("seats.seat_page", trip_id=trip_id))


@bp.post("/seat-selection/<trip_id>/confirm")
def confirm_seats(trip_id):
    if _booking_confirmed():
        logger.warning("confirmed_booking_reconfirm_blocked", trip_id=trip_id)
        flash(ALREADY_CONFIRMED, "info")
        return redirect(url_for("payments.summary", success="true"))

    price = seat_map_price(trip_id)
    if price is None:
        return redirect(url_for("seats.seat_page", trip_id=trip_id))

    selection = load_selection(trip_id)
    trip = backend_client().get_trip(trip_id)
    try:
        booking = from_seat_selection(trip, selection, compute_total(selection, price))
    except IncompleteBookingData as exc:
        flash(exc.message, "warning")
        return redirect(url_for("seats.seat_page", trip_id=trip_id))

    start_booking_session(booking)
    logger.info("seats_confirmed", trip_id=trip_id, seats=list(booking.selected_seats), total=str(booking.total_amount))
    return redirect(url_for("booking.passenger_form"))
