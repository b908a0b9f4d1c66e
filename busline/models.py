# wire models for the mock backend; attribute names are snake_case, JSON is camelCase (dump with by_alias=True)

from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CellType(IntEnum):
    EMPTY = 0
    SEAT = 1
    AISLE = 2


class SeatStatus(str, Enum):
    EMPTY = "empty"
    TAKEN = "taken"
    RESERVED = "reserved"


class Agency(WireModel):
    id: str
    name: str


class Trip(WireModel):
    id: str
    company: str
    from_: str = Field(alias="from")
    to: str
    departure: datetime
    arrival: datetime
    price: Decimal
    available_seats: int = Field(alias="availableSeats")


class SeatLayout(WireModel):
    rows: PositiveInt
    cols: PositiveInt
    cells: list[CellType]

    @model_validator(mode="after")
    def _cells_fill_grid(self):
        if len(self.cells) != self.rows * self.cols:
            raise ValueError(
                f"layout has {len(self.cells)} cells, expected {self.rows * self.cols}"
            )
        return self

    def cell_type(self, row: int, col: int) -> CellType:
        return self.cells[(row - 1) * self.cols + (col - 1)]


class Seat(WireModel):
    no: int
    row: int
    col: int
    status: SeatStatus = SeatStatus.EMPTY

    @property
    def is_taken(self) -> bool:
        return self.status == SeatStatus.TAKEN


class SeatSchema(WireModel):
    trip_id: str = Field(alias="tripId")
    layout: SeatLayout
    seats: list[Seat]
    unit_price: Decimal = Field(alias="unitPrice", ge=0)

    @model_validator(mode="after")
    def _unique_seat_numbers(self):
        numbers = [s.no for s in self.seats]
        if len(numbers) != len(set(numbers)):
            raise ValueError("seat numbers must be unique within a seat map")
        return self

    def seat(self, no: int) -> Seat | None:
        for s in self.seats:
            if s.no == no:
                return s
        return None


class Passenger(WireModel):
    seat: int
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    id_no: str = Field(alias="idNo")
    gender: Literal["male", "female"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ContactInfo(WireModel):
    email: str
    phone: str


class TicketSaleRequest(WireModel):
    trip_id: str = Field(alias="tripId")
    seats: list[int]
    contact: ContactInfo
    passengers: list[Passenger]


class TicketSaleResponse(WireModel):
    ok: bool
    pnr: str = ""
    message: str = ""
