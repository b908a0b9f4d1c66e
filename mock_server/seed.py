import hashlib
from datetime import date, timedelta

from busline.logger_config import get_logger

from . import db
from .models import Agency, Schedule, SeatRecord, SeatSchema

logger = get_logger(__name__)

AGENCIES = [
    ("IST", "Istanbul Esenler Otogari"),
    ("ANK", "Ankara ASTI"),
    ("IZM", "Izmir Otogar"),
    ("ANT", "Antalya Otogar"),
    ("BRS", "Bursa Terminal"),
]

# template trips; daily copies keep their route, company, price and times
TEMPLATE_TRIPS = [
    dict(id="TRIP-1001", company="Anadolu Ekspres", origin="IST", destination="ANK",
         day=date(2025, 11, 29), dep="08:30:00", arr="14:00:00", price=450),
    dict(id="TRIP-1002", company="Kuzey Yildizi Turizm", origin="IST", destination="ANK",
         day=date(2025, 11, 29), dep="13:00:00", arr="18:45:00", price=500),
    dict(id="TRIP-1003", company="Ege Seyahat", origin="IZM", destination="ANT",
         day=date(2025, 11, 29), dep="22:15:00", arr="23:59:00", price=380),
]

# 2+2 coach: aisle in the middle column, five seats on the back row
BUS_ROWS = 11
BUS_COLS = 5
DOOR_ROW = 6  # right-hand seat positions left empty for the middle door


def bus_layout():
    cells = []
    for r in range(1, BUS_ROWS + 1):
        if r == BUS_ROWS:
            cells.extend([1, 1, 1, 1, 1])
        else:
            cells.extend([1, 1, 2, 1, 1])
    return cells


def bus_seat_positions():
    positions = []
    for r in range(1, BUS_ROWS + 1):
        for c in range(1, BUS_COLS + 1):
            if c == 3 and r != BUS_ROWS:
                continue
            if r == DOOR_ROW and c in (4, 5):
                continue
            positions.append((r, c))
    return positions


# deterministic "already sold" seats so every run serves the same map;
# seat 1 is sold on every trip
def is_taken(trip_id: str, seat_no: int) -> bool:
    if seat_no == 1:
        return True
    h = hashlib.sha256(f"{trip_id}-{seat_no}".encode()).hexdigest()
    return int(h[:8], 16) % 5 == 0


def iso_at(day: date, time_str: str) -> str:
    return f"{day.isoformat()}T{time_str}+03:00"


def add_trip(trip_id, template, day):
    schedule = Schedule(
        id=trip_id,
        company=template["company"],
        origin=template["origin"],
        destination=template["destination"],
        departure=iso_at(day, template["dep"]),
        arrival=iso_at(day, template["arr"]),
        price=template["price"],
    )
    schema = SeatSchema(
        trip_id=trip_id,
        rows=BUS_ROWS,
        cols=BUS_COLS,
        cells=bus_layout(),
        unit_price=template["price"],
    )
    free = 0
    for no, (r, c) in enumerate(bus_seat_positions(), start=1):
        taken = is_taken(trip_id, no)
        free += 0 if taken else 1
        schema.seats.append(SeatRecord(no=no, row=r, col=c, status="taken" if taken else "empty"))
    schedule.available_seats = free
    schedule.seat_schema = schema
    db.session.add(schedule)


def seed_database(days: int = 14, start: date | None = None) -> int:
    """Load agencies and trips; existing rows are left alone. Returns trips added."""
    start = start or date.today()

    existing_agencies = {a.id for a in Agency.query.all()}
    for agency_id, name in AGENCIES:
        if agency_id not in existing_agencies:
            db.session.add(Agency(id=agency_id, name=name))

    existing = {row[0] for row in db.session.query(Schedule.id).all()}
    added = 0
    for template in TEMPLATE_TRIPS:
        if template["id"] not in existing:
            add_trip(template["id"], template, template["day"])
            added += 1

    # daily copies of every template trip, TRIP-YYYYMMDD-<n>
    for offset in range(days):
        day = start + timedelta(days=offset)
        for n, template in enumerate(TEMPLATE_TRIPS, start=1):
            trip_id = f"TRIP-{day.strftime('%Y%m%d')}-{n}"
            if trip_id in existing:
                continue
            add_trip(trip_id, template, day)
            added += 1

    db.session.commit()
    logger.info("mock_store_seeded", trips=added, days=days, start=start.isoformat())
    return added
