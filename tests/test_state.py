from busline.models import SeatSchema, SeatStatus, Trip
from busline.state import remember_seat_map, seat_map_price, seat_status


def odd_schema():
    # seat 2 sits on the aisle, seat 3 on an empty cell, seat 4 outside the grid
    return SeatSchema.model_validate(
        {
            "tripId": "TRIP-1001",
            "layout": {"rows": 1, "cols": 3, "cells": [1, 2, 0]},
            "seats": [
                {"no": 1, "row": 1, "col": 1, "status": "empty"},
                {"no": 2, "row": 1, "col": 2, "status": "empty"},
                {"no": 3, "row": 1, "col": 3, "status": "reserved"},
                {"no": 4, "row": 2, "col": 1, "status": "empty"},
            ],
            "unitPrice": 450,
        }
    )


def test_snapshot_keeps_only_seats_on_seat_cells(app):
    with app.test_request_context("/"):
        remember_seat_map(odd_schema())

        assert seat_status("TRIP-1001", 1) == SeatStatus.EMPTY
        assert seat_status("TRIP-1001", 2) is None
        assert seat_status("TRIP-1001", 3) is None
        assert seat_status("TRIP-1001", 4) is None


def test_snapshot_is_scoped_to_trip(app):
    with app.test_request_context("/"):
        remember_seat_map(odd_schema())

        assert seat_status("TRIP-1002", 1) is None
        assert seat_map_price("TRIP-1002") is None
        assert seat_map_price("TRIP-1001") == 450


def test_toggle_rejects_seat_off_the_map(client, app, monkeypatch):
    schema = odd_schema()
    trip = {
        "id": "TRIP-1001",
        "company": "Anadolu Ekspres",
        "from": "IST",
        "to": "ANK",
        "departure": "2025-11-29T08:30:00+03:00",
        "arrival": "2025-11-29T14:00:00+03:00",
        "price": 450,
        "availableSeats": 2,
    }
    api = app.extensions["backend_client"]
    monkeypatch.setattr(api, "get_trip", lambda trip_id: Trip.model_validate(trip))
    monkeypatch.setattr(api, "get_seat_schema", lambda trip_id: schema)

    client.get("/seat-selection/TRIP-1001")
    url = "/seat-selection/TRIP-1001/toggle"

    assert client.post(url, json={"seat": 2}).status_code == 404
    assert client.post(url, json={"seat": 3}).status_code == 404
    assert client.post(url, json={"seat": 1}).get_json()["selectedSeats"] == [1]
