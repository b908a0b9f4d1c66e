"""
Tests for seat map rendering, seat selection and price aggregation.
"""

from decimal import Decimal

import pytest

from busline.errors import SeatUnavailable, SelectionLimitExceeded
from busline.models import CellType, Seat, SeatLayout, SeatStatus
from busline.seat_map import AISLE, EMPTY, SEAT, MAX_SELECTED_SEATS, SelectionSet, compute_total, grid_rows, render


def make_layout(rows, cols, cells):
    return SeatLayout(rows=rows, cols=cols, cells=cells)


@pytest.fixture
def small_bus():
    layout = make_layout(2, 3, [1, 2, 1, 1, 1, 1])
    seats = [
        Seat(no=1, row=1, col=1, status="empty"),
        Seat(no=2, row=1, col=3, status="taken"),
        Seat(no=3, row=2, col=1, status="empty"),
        Seat(no=4, row=2, col=2, status="empty"),
        Seat(no=5, row=2, col=3, status="empty"),
    ]
    return layout, seats


def test_small_bus_scenario(small_bus):
    layout, seats = small_bus
    cells = render(layout, seats)

    assert len(cells) == 6
    assert [(c.row, c.col) for c in cells] == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]
    assert cells[1].kind == AISLE
    assert not cells[1].interactive
    assert cells[2].seat.no == 2
    assert cells[2].disabled

    selection = SelectionSet()
    for no in (1, 3, 4, 5):
        selection = selection.toggle(no, SeatStatus.EMPTY)
    assert list(selection) == [1, 3, 4, 5]
    assert selection.is_full

    with pytest.raises(SeatUnavailable):
        selection.toggle(2, SeatStatus.TAKEN)
    assert list(selection) == [1, 3, 4, 5]


@pytest.mark.parametrize(
    "rows, cols, cells",
    [
        (1, 1, [1]),
        (2, 3, [1, 2, 1, 1, 1, 1]),
        (3, 5, [1, 1, 2, 1, 1] * 3),
        (2, 2, [0, 0, 2, 2]),
        (4, 4, [1, 0, 2, 1] * 4),
    ],
)
def test_render_covers_every_position(rows, cols, cells):
    layout = make_layout(rows, cols, cells)
    # a record on every position, including aisles and empty cells
    seats = [Seat(no=i + 1, row=i // cols + 1, col=i % cols + 1) for i in range(rows * cols)]

    rendered = render(layout, seats)

    assert len(rendered) == rows * cols
    interactive = sum(1 for c in rendered if c.interactive)
    assert interactive <= sum(1 for t in cells if t == CellType.SEAT)


def test_seat_cell_without_record_is_a_gap():
    layout = make_layout(1, 3, [1, 1, 1])
    seats = [Seat(no=1, row=1, col=1), Seat(no=2, row=1, col=3)]

    cells = render(layout, seats)

    assert [c.kind for c in cells] == [SEAT, EMPTY, SEAT]
    assert cells[1].seat is None


def test_record_on_empty_cell_is_not_rendered_as_seat():
    layout = make_layout(1, 2, [0, 1])
    seats = [Seat(no=1, row=1, col=1), Seat(no=2, row=1, col=2)]

    cells = render(layout, seats)

    assert [c.kind for c in cells] == [EMPTY, SEAT]


def test_render_marks_selected_seats(small_bus):
    layout, seats = small_bus
    cells = render(layout, seats, selected=[4])

    selected = [c.seat.no for c in cells if c.selected]
    assert selected == [4]


def test_render_is_pure(small_bus):
    layout, seats = small_bus
    assert render(layout, seats) == render(layout, seats)


def test_grid_rows_chunks_by_column_count(small_bus):
    layout, seats = small_bus
    rows = grid_rows(render(layout, seats), layout.cols)

    assert len(rows) == 2
    assert all(len(r) == 3 for r in rows)


def test_layout_rejects_wrong_cell_count():
    with pytest.raises(ValueError):
        make_layout(2, 2, [1, 1, 1])


def test_toggle_adds_in_click_order():
    selection = SelectionSet().toggle(12, SeatStatus.EMPTY).toggle(4, SeatStatus.EMPTY)
    assert list(selection) == [12, 4]


def test_toggle_selected_seat_removes_only_that_seat():
    selection = SelectionSet((3, 7, 9))
    after = selection.toggle(7, SeatStatus.EMPTY)

    assert list(after) == [3, 9]
    assert len(after) == len(selection) - 1
    assert list(selection) == [3, 7, 9]


def test_reserved_seat_can_be_selected():
    selection = SelectionSet().toggle(5, SeatStatus.RESERVED)
    assert 5 in selection


def test_taken_seat_is_rejected_even_when_empty_selection():
    with pytest.raises(SeatUnavailable) as exc:
        SelectionSet().toggle(8, SeatStatus.TAKEN)
    assert exc.value.seat_no == 8


def test_fifth_seat_is_rejected_and_selection_unchanged():
    selection = SelectionSet((1, 2, 3, 4))
    assert len(selection) == MAX_SELECTED_SEATS

    with pytest.raises(SelectionLimitExceeded):
        selection.toggle(5, SeatStatus.EMPTY)
    assert list(selection) == [1, 2, 3, 4]

    # deselecting at the cap still works
    assert list(selection.toggle(2, SeatStatus.EMPTY)) == [1, 3, 4]


@pytest.mark.parametrize("seats", [(), (1,), (1, 2), (4, 12, 30), (1, 2, 3, 4)])
@pytest.mark.parametrize("price", [Decimal("0"), Decimal("250"), Decimal("199.90")])
def test_compute_total_is_linear(seats, price):
    assert compute_total(SelectionSet(seats), price) == len(seats) * price


def test_total_follows_selection():
    price = Decimal("250")
    selection = SelectionSet().toggle(4, SeatStatus.EMPTY).toggle(12, SeatStatus.EMPTY)
    assert compute_total(selection, price) == Decimal("500")

    selection = selection.toggle(12, SeatStatus.EMPTY)
    assert compute_total(selection, price) == Decimal("250")
