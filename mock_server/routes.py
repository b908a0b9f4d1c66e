import secrets
import string
import time
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from busline.logger_config import get_logger

from . import db
from .models import Agency, Schedule, SeatSchema, TicketSale

api_bp = Blueprint("api", __name__, url_prefix="/api")
# the same handlers, also answered without the /api prefix
alias_bp = Blueprint("aliases", __name__)
logger = get_logger(__name__)

PNR_ALPHABET = string.ascii_uppercase + string.digits


def make_pnr(now: datetime | None = None) -> str:
    now = now or datetime.now()
    suffix = "".join(secrets.choice(PNR_ALPHABET) for _ in range(3))
    return f"AT-{now.strftime('%Y%m%d')}-{suffix}"


@api_bp.get("/reference/agencies")
def list_agencies():
    agencies = Agency.query.order_by(Agency.name.asc()).all()
    return jsonify([a.to_dict() for a in agencies])


@api_bp.get("/schedules")
def list_schedules():
    origin = (request.args.get("from") or "").strip()
    destination = (request.args.get("to") or "").strip()
    day = (request.args.get("date") or request.args.get("departure_like") or "").strip()

    q = Schedule.query
    if origin:
        q = q.filter(Schedule.origin == origin)
    if destination:
        q = q.filter(Schedule.destination == destination)
    if day:
        q = q.filter(Schedule.departure.like(f"{day}%"))

    return jsonify([s.to_dict() for s in q.order_by(Schedule.departure.asc()).all()])


@api_bp.get("/schedules/<trip_id>")
def get_schedule(trip_id):
    schedule = db.session.get(Schedule, trip_id)
    if not schedule:
        return jsonify({"error": "trip_not_found"}), 404
    return jsonify(schedule.to_dict())


# always a list, empty when the trip has no seat map
@api_bp.get("/seatSchemas")
def list_seat_schemas():
    q = SeatSchema.query
    trip_id = request.args.get("tripId")
    if trip_id:
        q = q.filter(SeatSchema.trip_id == trip_id)
    return jsonify([s.to_dict() for s in q.all()])


@api_bp.post("/tickets/sell")
def sell_tickets():
    payload = request.get_json(silent=True) or {}
    trip_id = payload.get("tripId")
    seats = payload.get("seats")
    contact = payload.get("contact")
    passengers = payload.get("passengers")

    if not trip_id or not isinstance(seats, list) or not seats:
        return jsonify({"ok": False, "pnr": "", "message": "tripId and seats are required"}), 400
    if not isinstance(contact, dict) or not isinstance(passengers, list):
        return jsonify({"ok": False, "pnr": "", "message": "contact and passengers are required"}), 400

    # simulated payment processing
    delay = current_app.config["SALE_DELAY_SECONDS"]
    if delay:
        time.sleep(delay)

    if current_app.config["SALE_DECLINE"]:
        logger.info("sale_declined", trip_id=trip_id, seats=seats)
        return jsonify({"ok": False, "pnr": "", "message": "Card declined"})

    pnr = make_pnr()
    db.session.add(TicketSale(pnr=pnr, trip_id=trip_id, seats=seats, contact=contact, passengers=passengers))
    db.session.commit()
    logger.info("sale_recorded", trip_id=trip_id, seats=seats, pnr=pnr)
    return jsonify({"ok": True, "pnr": pnr, "message": "Payment step mocked"})


alias_bp.add_url_rule("/sales", view_func=sell_tickets, methods=["POST"])
alias_bp.add_url_rule("/schedules", view_func=list_schedules, methods=["GET"])
