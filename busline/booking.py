from flask import Blueprint, redirect, request, url_for

from .api import agency_names, backend_client
from .booking_session import BookingSession, with_passenger_data
from .errors import NetworkFailure, ValidationFailure
from .forms import PassengerForm, parse_form, passenger_form_data
from .logger_config import get_logger
from .state import require_booking_session, save_booking_session
from .stepper import render_step
from .steps import WizardStep

booking_bp = Blueprint("booking", __name__)
logger = get_logger(__name__)


# previously entered passenger/contact data, keyed like the form inputs
def _initial_values(booking: BookingSession) -> dict:
    values = {}
    for idx, p in enumerate(booking.passengers or ()):
        prefix = f"passengers-{idx}-"
        values[prefix + "firstName"] = p.first_name
        values[prefix + "lastName"] = p.last_name
        values[prefix + "idNo"] = p.id_no
        values[prefix + "gender"] = p.gender
    if booking.contact:
        values["email"] = booking.contact.email
        values["phone"] = booking.contact.phone
    return values


def _render_form(booking: BookingSession, values, errors=None):
    try:
        names = agency_names(backend_client().get_agencies())
    except NetworkFailure:
        names = {}
    return render_step(
        "booking.html",
        WizardStep.PASSENGER_INFO,
        booking=booking,
        trip=booking.trip,
        names=names,
        values=values,
        errors=errors or {},
    )


# step 3: one block per selected seat plus contact details
@booking_bp.route("/passenger-form", methods=["GET", "POST"])
def passenger_form():
    booking = require_booking_session(WizardStep.PASSENGER_INFO)
    if booking.is_confirmed:
        return redirect(url_for("payments.summary", success="true"))

    if request.method == "GET":
        return _render_form(booking, _initial_values(booking))

    data = passenger_form_data(request.form, booking.selected_seats)
    try:
        form = parse_form(PassengerForm, data)
    except ValidationFailure as exc:
        logger.info("passenger_form_invalid", fields=sorted(exc.errors))
        return _render_form(booking, request.form, exc.errors), 400

    booking = with_passenger_data(booking, form.to_passengers(), form.to_contact())
    save_booking_session(booking)
    logger.info("passengers_saved", trip_id=booking.trip.id, count=len(booking.passengers))
    return redirect(url_for("payments.summary"))
