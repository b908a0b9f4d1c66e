from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Iterator

from .errors import SeatUnavailable, SelectionLimitExceeded
from .logger_config import get_logger
from .models import CellType, Seat, SeatLayout, SeatStatus

logger = get_logger(__name__)

MAX_SELECTED_SEATS = 4

SEAT = "seat"
AISLE = "aisle"
EMPTY = "empty"


@dataclass(frozen=True)
class Cell:
    kind: str
    row: int
    col: int
    seat: Seat | None = None
    selected: bool = False

    @property
    def interactive(self) -> bool:
        return self.kind == SEAT

    @property
    def disabled(self) -> bool:
        return self.seat is None or self.seat.is_taken


def render(layout: SeatLayout, seats: Iterable[Seat], selected: Iterable[int] = ()) -> list[Cell]:
    """Interpret ``layout`` into exactly ``rows * cols`` cells, row-major.

    Aisle positions become spacers. A seat position without a matching seat
    record is a silent gap (the driver's spot, a door). Records placed on
    anything but a seat position are ignored.
    """
    by_position: dict[tuple[int, int], Seat] = {}
    for seat in seats:
        by_position.setdefault((seat.row, seat.col), seat)
    chosen = set(selected)

    cells: list[Cell] = []
    for r in range(1, layout.rows + 1):
        for c in range(1, layout.cols + 1):
            cell_type = layout.cell_type(r, c)
            seat = by_position.get((r, c))
            if cell_type == CellType.AISLE:
                cells.append(Cell(AISLE, r, c))
            elif seat is None:
                cells.append(Cell(EMPTY, r, c))
            elif cell_type != CellType.SEAT:
                logger.warning("seat_on_non_seat_cell", seat_no=seat.no, row=r, col=c)
                cells.append(Cell(EMPTY, r, c))
            else:
                cells.append(Cell(SEAT, r, c, seat=seat, selected=seat.no in chosen))
    return cells


def grid_rows(cells: list[Cell], cols: int) -> list[list[Cell]]:
    return [cells[i:i + cols] for i in range(0, len(cells), cols)]


@dataclass(frozen=True)
class SelectionSet:
    seats: tuple[int, ...] = field(default_factory=tuple)

    def __contains__(self, seat_no: int) -> bool:
        return seat_no in self.seats

    def __iter__(self) -> Iterator[int]:
        return iter(self.seats)

    def __len__(self) -> int:
        return len(self.seats)

    @property
    def is_full(self) -> bool:
        return len(self.seats) >= MAX_SELECTED_SEATS

    def toggle(self, seat_no: int, status: SeatStatus) -> "SelectionSet":
        """Select or deselect one seat, keeping click order.

        Raises SeatUnavailable for taken seats and SelectionLimitExceeded
        when adding past MAX_SELECTED_SEATS; ``self`` is left untouched.
        """
        if status == SeatStatus.TAKEN:
            raise SeatUnavailable(seat_no)
        if seat_no in self.seats:
            return SelectionSet(tuple(n for n in self.seats if n != seat_no))
        if self.is_full:
            raise SelectionLimitExceeded()
        return SelectionSet(self.seats + (seat_no,))


def compute_total(selection: Iterable[int], unit_price: Decimal | int | str) -> Decimal:
    return Decimal(str(unit_price)) * len(list(selection))
