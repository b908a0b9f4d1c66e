from flask import Blueprint, redirect, request, url_for

from .api import agency_names, backend_client
from .errors import NetworkFailure, ValidationFailure
from .forms import SearchForm, parse_form
from .logger_config import get_logger
from .models import Trip
from .state import clear_booking_context
from .stepper import render_step
from .steps import WizardStep

search_bp = Blueprint("search", __name__)
logger = get_logger(__name__)

SORT_OPTIONS = {
    "time-asc": (lambda t: t.departure, False),
    "time-desc": (lambda t: t.departure, True),
    "price-asc": (lambda t: t.price, False),
    "price-desc": (lambda t: t.price, True),
}
DEFAULT_SORT = "time-asc"


def sort_trips(trips: list[Trip], sort_by: str) -> list[Trip]:
    key, reverse = SORT_OPTIONS.get(sort_by, SORT_OPTIONS[DEFAULT_SORT])
    return sorted(trips, key=key, reverse=reverse)


def filter_companies(trips: list[Trip], companies: list[str]) -> list[Trip]:
    if not companies:
        return trips
    return [t for t in trips if t.company in companies]


# step 1: search form plus results for the submitted route and day
@search_bp.route("/", methods=["GET"], endpoint="search")
def search_page():
    client = backend_client()
    error = None
    agencies = []
    try:
        agencies = client.get_agencies()
    except NetworkFailure as exc:
        logger.error("agencies_unavailable", error=exc.message)
        error = exc.message

    sort_by = request.args.get("sort") or DEFAULT_SORT
    selected_companies = request.args.getlist("company")
    trips = None
    companies = []
    errors = {}

    if any(request.args.get(k) for k in ("from", "to", "date")):
        try:
            form = parse_form(SearchForm, request.args.to_dict())
            found = client.get_schedules(form.origin, form.destination, form.day)
            companies = sorted({t.company for t in found})
            trips = sort_trips(filter_companies(found, selected_companies), sort_by)
            logger.info("schedules_found", origin=form.origin, destination=form.destination, day=form.day.isoformat(), count=len(found))
        except ValidationFailure as exc:
            errors = exc.errors
        except NetworkFailure as exc:
            logger.error("search_failed", error=exc.message)
            error = exc.message

    return render_step(
        "search.html",
        WizardStep.SEARCH,
        agencies=agencies,
        names=agency_names(agencies),
        trips=trips,
        companies=companies,
        selected_companies=selected_companies,
        sort_by=sort_by,
        sort_options=list(SORT_OPTIONS),
        errors=errors,
        error=error,
        values=request.args,
    )


@search_bp.route("/restart", methods=["POST"])
def restart():
    clear_booking_context()
    logger.info("booking_restarted")
    return redirect(url_for("search.search"))
