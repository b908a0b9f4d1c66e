import csv
from io import StringIO

from flask import Blueprint, Response, flash, redirect, request, url_for

from .api import agency_names, backend_client
from .booking_session import with_confirmation
from .errors import NetworkFailure, PaymentDeclined
from .logger_config import get_logger
from .state import load_booking_session, next_sale_attempt, require_booking_session, save_booking_session
from .stepper import render_step
from .steps import WizardStep, current, require

payments = Blueprint("payments", __name__, url_prefix="/summary")
logger = get_logger(__name__)


def _names():
    try:
        return agency_names(backend_client().get_agencies())
    except NetworkFailure:
        return {}


# step 4 (review and pay) and, with ?success=true, the confirmation screen
@payments.route("", methods=["GET"])
def summary():
    success = request.args.get("success") == "true"
    booking = load_booking_session()
    step = current(WizardStep.PAYMENT, success, booking)
    booking = require(step, booking)

    if step == WizardStep.CONFIRMED:
        return render_step("confirmation.html", step, booking=booking, trip=booking.trip, names=_names())
    if booking.is_confirmed:
        return redirect(url_for("payments.summary", success="true"))
    return render_step("payments.html", step, booking=booking, trip=booking.trip, names=_names())


@payments.route("/pay", methods=["POST"])
def pay():
    booking = require_booking_session(WizardStep.PAYMENT)
    if booking.is_confirmed:
        return redirect(url_for("payments.summary", success="true"))

    attempt = next_sale_attempt()
    if attempt > 1:
        # the sale endpoint takes no idempotency key, a retry is a brand new sale
        logger.warning("ticket_sale_resubmitted", trip_id=booking.trip.id, attempt=attempt)

    try:
        result = backend_client().sell_tickets(booking.sale_request())
        if not result.ok or not result.pnr:
            raise PaymentDeclined(f"Payment error: {result.message or 'declined'}")
    except NetworkFailure as exc:
        logger.error("ticket_sale_failed", trip_id=booking.trip.id, attempt=attempt, error=exc.message)
        flash("Payment could not be completed. Please try again.", "danger")
        return redirect(url_for("payments.summary", success="false"))
    except PaymentDeclined as exc:
        logger.warning("ticket_sale_declined", trip_id=booking.trip.id, attempt=attempt, error=exc.message)
        flash(exc.message, "danger")
        return redirect(url_for("payments.summary", success="false"))

    booking = save_booking_session(with_confirmation(booking, result.pnr))
    logger.info("ticket_sold", trip_id=booking.trip.id, pnr=booking.confirmation_code, attempt=attempt)
    flash("Payment completed.", "success")
    return redirect(url_for("payments.summary", success="true"))


# ticket for a confirmed booking as a CSV attachment
@payments.route("/ticket.csv", methods=["GET"])
def download_ticket():
    booking = require_booking_session(WizardStep.CONFIRMED)
    trip = booking.trip
    names = _names()

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["PNR", booking.confirmation_code])
    writer.writerow(["Company", trip.company])
    writer.writerow(["From", names.get(trip.from_, trip.from_)])
    writer.writerow(["To", names.get(trip.to, trip.to)])
    writer.writerow(["Departure", trip.departure.strftime("%d.%m.%Y %H:%M")])
    writer.writerow(["Total", str(booking.total_amount)])
    writer.writerow([])
    writer.writerow(["Seat", "Passenger", "ID No", "Gender"])
    for p in booking.passengers:
        writer.writerow([p.seat, p.full_name, p.id_no, p.gender])

    csv_data = output.getvalue()
    output.close()

    resp = Response(csv_data, mimetype="text/csv")
    resp.headers["Content-Disposition"] = f"attachment; filename=ticket_{booking.confirmation_code}.csv"
    return resp


payments_bp = payments
