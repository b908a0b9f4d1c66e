from datetime import datetime, UTC

from . import db


class Agency(db.Model):
    __tablename__ = "agency"

    id = db.Column(db.String(16), primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name}


# departure/arrival are kept as the ISO strings served to clients so the
# +03:00 offset survives and date filtering is a prefix match
class Schedule(db.Model):
    __tablename__ = "schedule"

    id = db.Column(db.String(32), primary_key=True)
    company = db.Column(db.String(120), nullable=False)
    origin = db.Column(db.String(16), nullable=False, index=True)
    destination = db.Column(db.String(16), nullable=False, index=True)
    departure = db.Column(db.String(32), nullable=False, index=True)
    arrival = db.Column(db.String(32), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    available_seats = db.Column(db.Integer, nullable=False, default=0)

    seat_schema = db.relationship("SeatSchema", back_populates="schedule", uselist=False, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "company": self.company,
            "from": self.origin,
            "to": self.destination,
            "departure": self.departure,
            "arrival": self.arrival,
            "price": float(self.price),
            "availableSeats": self.available_seats,
        }

    def __repr__(self):
        return f"<Schedule {self.id} {self.origin}->{self.destination} {self.departure}>"


class SeatSchema(db.Model):
    __tablename__ = "seat_schema"

    id = db.Column(db.Integer, primary_key=True)
    trip_id = db.Column(db.String(32), db.ForeignKey("schedule.id"), nullable=False, unique=True, index=True)
    rows = db.Column(db.Integer, nullable=False)
    cols = db.Column(db.Integer, nullable=False)
    cells = db.Column(db.JSON, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    schedule = db.relationship("Schedule", back_populates="seat_schema")
    seats = db.relationship(
        "SeatRecord",
        back_populates="schema",
        order_by="SeatRecord.no",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "tripId": self.trip_id,
            "layout": {"rows": self.rows, "cols": self.cols, "cells": list(self.cells)},
            "seats": [s.to_dict() for s in self.seats],
            "unitPrice": float(self.unit_price),
        }


class SeatRecord(db.Model):
    __tablename__ = "seats"

    id = db.Column(db.Integer, primary_key=True)
    schema_id = db.Column(db.Integer, db.ForeignKey("seat_schema.id"), nullable=False, index=True)
    no = db.Column(db.Integer, nullable=False)
    row = db.Column(db.Integer, nullable=False)
    col = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="empty")

    __table_args__ = (
        db.UniqueConstraint("schema_id", "no", name="uniq_schema_seat_no"),
    )

    schema = db.relationship("SeatSchema", back_populates="seats")

    def to_dict(self):
        return {"no": self.no, "row": self.row, "col": self.col, "status": self.status}


# every sale attempt that reached the endpoint, duplicates included
class TicketSale(db.Model):
    __tablename__ = "ticket_sale"

    id = db.Column(db.Integer, primary_key=True)
    pnr = db.Column(db.String(32), unique=True, nullable=False, index=True)
    trip_id = db.Column(db.String(32), nullable=False, index=True)
    seats = db.Column(db.JSON, nullable=False)
    contact = db.Column(db.JSON, nullable=False)
    passengers = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(UTC), index=True)

    def __repr__(self):
        return f"<TicketSale {self.pnr} trip={self.trip_id} seats={self.seats}>"
