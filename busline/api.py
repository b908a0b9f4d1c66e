from datetime import date
from typing import Any, Dict, List, Optional

import requests
from flask import current_app
from pydantic import ValidationError

from .errors import DataNotFound, NetworkFailure
from .logger_config import get_logger
from .models import Agency, SeatSchema, TicketSaleRequest, TicketSaleResponse, Trip

logger = get_logger(__name__)


class BackendClient:
    """Thin client for the mock booking backend.

    Every call is a single blocking round trip; failures are translated into
    NetworkFailure / DataNotFound and never retried here.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("backend_unreachable", method=method, path=path, error=str(exc))
            raise NetworkFailure() from exc

        if resp.status_code == 404:
            raise DataNotFound()
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            logger.error("backend_error", method=method, path=path, status_code=resp.status_code)
            raise NetworkFailure(status_code=resp.status_code) from exc

        try:
            return resp.json()
        except ValueError as exc:
            logger.error("backend_bad_payload", method=method, path=path)
            raise NetworkFailure("The booking service sent an unreadable answer.") from exc

    def _parse(self, model, data: Any, path: str):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("backend_schema_mismatch", path=path, errors=exc.error_count())
            raise NetworkFailure("The booking service sent an unexpected answer.") from exc

    def get_agencies(self) -> List[Agency]:
        data = self._request("GET", "/reference/agencies")
        return [self._parse(Agency, item, "/reference/agencies") for item in data or []]

    def get_schedules(self, origin: str, destination: str, day: date) -> List[Trip]:
        params = {"from": origin, "to": destination, "date": day.isoformat()}
        data = self._request("GET", "/schedules", params=params)
        return [self._parse(Trip, item, "/schedules") for item in data or []]

    def get_trip(self, trip_id: str) -> Trip:
        data = self._request("GET", f"/schedules/{trip_id}")
        if not data:
            raise DataNotFound()
        return self._parse(Trip, data, "/schedules/{id}")

    def get_seat_schema(self, trip_id: str) -> SeatSchema:
        data = self._request("GET", "/seatSchemas", params={"tripId": trip_id})
        if not data:
            raise DataNotFound("Seat map not found for this trip.")
        return self._parse(SeatSchema, data[0], "/seatSchemas")

    def sell_tickets(self, sale: TicketSaleRequest) -> TicketSaleResponse:
        data = self._request("POST", "/tickets/sell", json=sale.model_dump(mode="json", by_alias=True))
        return self._parse(TicketSaleResponse, data, "/tickets/sell")


def agency_names(agencies: List[Agency]) -> Dict[str, str]:
    return {a.id: a.name for a in agencies}


def backend_client() -> BackendClient:
    return current_app.extensions["backend_client"]
