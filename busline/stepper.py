from flask import Blueprint, redirect, render_template, session, url_for

from .logger_config import get_logger
from .state import load_booking_session, load_selection_trip
from .steps import WizardStep, on_step_change, progress

stepper_bp = Blueprint("stepper", __name__)
logger = get_logger(__name__)

CURRENT_STEP_KEY = "wizard_step"


# every step view renders through here so the stepper and the stored
# current step always agree with what is on screen
def render_step(template: str, step: WizardStep, **context):
    session[CURRENT_STEP_KEY] = int(step)
    return render_template(template, step=step, stepper=progress(step), **context)


def current_step() -> WizardStep:
    try:
        return WizardStep(int(session.get(CURRENT_STEP_KEY) or WizardStep.SEARCH))
    except ValueError:
        return WizardStep.SEARCH


def step_url(step: WizardStep) -> str | None:
    booking = load_booking_session()
    if step == WizardStep.SEARCH:
        return url_for("search.search")
    if step == WizardStep.SEAT_SELECTION:
        trip_id = booking.trip.id if booking else load_selection_trip()
        return url_for("seats.seat_page", trip_id=trip_id) if trip_id else None
    if step == WizardStep.PASSENGER_INFO:
        return url_for("booking.passenger_form")
    if step == WizardStep.PAYMENT:
        return url_for("payments.summary")
    return url_for("payments.summary", success="true")


@stepper_bp.route("/step/<int:index>")
def change_step(index: int):
    here = current_step()
    target = on_step_change(index, here, load_booking_session())
    url = step_url(target) if target is not None else None
    if url is None:
        logger.info("step_change_ignored", target=index, current=int(here))
        return redirect(step_url(here) or url_for("search.search"))
    logger.info("step_changed", target=int(target), current=int(here))
    return redirect(url)
