from dataclasses import dataclass
from enum import IntEnum

from .booking_session import BookingSession
from .errors import IncompleteBookingData, PrematureConfirmation


class WizardStep(IntEnum):
    SEARCH = 1
    SEAT_SELECTION = 2
    PASSENGER_INFO = 3
    PAYMENT = 4
    CONFIRMED = 5


# navigable steps in stepper order; CONFIRMED is only ever displayed
STEPS = (
    WizardStep.SEARCH,
    WizardStep.SEAT_SELECTION,
    WizardStep.PASSENGER_INFO,
    WizardStep.PAYMENT,
)

STEP_TITLES = {
    WizardStep.SEARCH: "Search",
    WizardStep.SEAT_SELECTION: "Seat selection",
    WizardStep.PASSENGER_INFO: "Passenger info",
    WizardStep.PAYMENT: "Payment",
}


@dataclass(frozen=True)
class StepIndicator:
    index: int
    title: str
    state: str  # completed | active | inactive


def index_of(step: WizardStep) -> int:
    return int(step)


def step_at(index: int) -> WizardStep | None:
    if 1 <= index <= len(STEPS):
        return STEPS[index - 1]
    return None


def frontier(session: BookingSession | None) -> WizardStep:
    """Furthest step whose prerequisites are present in ``session``."""
    if session is None:
        return WizardStep.SEARCH
    if session.is_confirmed:
        return WizardStep.CONFIRMED
    if session.has_passengers:
        return WizardStep.PAYMENT
    return WizardStep.PASSENGER_INFO


def require(step: WizardStep, session: BookingSession | None) -> BookingSession | None:
    """Return ``session`` if it carries everything ``step`` renders."""
    if step in (WizardStep.SEARCH, WizardStep.SEAT_SELECTION):
        return session
    if session is None:
        raise IncompleteBookingData()
    if step == WizardStep.PAYMENT and not session.has_passengers:
        raise IncompleteBookingData()
    if step == WizardStep.CONFIRMED and not session.is_confirmed:
        raise PrematureConfirmation()
    return session


def current(step: WizardStep, success: bool, session: BookingSession | None) -> WizardStep:
    if step == WizardStep.PAYMENT and success and session is not None and session.is_confirmed:
        return WizardStep.CONFIRMED
    return step


def on_step_change(
    target_index: int,
    current_step: WizardStep,
    session: BookingSession | None,
) -> WizardStep | None:
    """Resolve a stepper click. ``None`` means the click is ignored."""
    target = step_at(target_index)
    if target is None or target == current_step:
        return None
    if current_step == WizardStep.CONFIRMED:
        # a confirmed booking is final; only a new search leaves it
        return target if target == WizardStep.SEARCH else None
    limit = max(current_step, frontier(session))
    if target > limit:
        return None
    return target


def progress(current_step: WizardStep) -> list[StepIndicator]:
    indicators = []
    for step in STEPS:
        if step < current_step:
            state = "completed"
        elif step == current_step:
            state = "active"
        else:
            state = "inactive"
        indicators.append(StepIndicator(index_of(step), STEP_TITLES[step], state))
    return indicators
